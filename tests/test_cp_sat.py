import itertools

import pytest

pytest.importorskip("ortools")

from bag import Bag
from models import Position, Template
from solver.backtracking import Target, count_solutions
from solver.cp_sat import (
    INFEASIBLE_REASON,
    build_options,
    count_exact_covers,
    try_pack_exact_cover,
)

CUBE = Target([Position(x, y, z) for x, y, z in itertools.product(range(2), repeat=3)])
TRIPOD = Template([Position(0, 0, 0), Position(1, 0, 0), Position(0, 1, 0), Position(0, 0, 1)], "T")
DOMINO = Template([Position(0, 0), Position(1, 0)], "D")
L_TROMINO = Template([Position(0, 0), Position(1, 0), Position(0, 1)], "L")


def test_build_options_lists_every_fitting_placement():
    options, meta = build_options(CUBE, Bag([(2, TRIPOD)]))
    # one tripod per corner of the cube
    assert meta["option_count"] == 8
    assert meta["entry_option_counts"] == {0: 8}
    assert meta["uncoverable"] == []
    assert all(CUBE.fits(opt.piece) for opt in options)


def test_pack_returns_a_valid_solution():
    ok, solution, reason = try_pack_exact_cover(CUBE, Bag([(2, TRIPOD)]), max_seconds=10)
    assert ok is True
    assert reason is None
    assert len(solution) == 2
    assert solution.cells() == CUBE.cells
    assert solution.pieces[0].minimum_position() == Position(0, 0, 0)


def test_pack_reports_infeasible():
    ok, solution, reason = try_pack_exact_cover(CUBE, Bag([(1, TRIPOD)]), max_seconds=10)
    assert ok is False
    assert solution is None
    assert reason == INFEASIBLE_REASON


def test_empty_target():
    ok, solution, _ = try_pack_exact_cover(Target([]), Bag())
    assert ok is True
    assert len(solution) == 0
    assert count_exact_covers(Target([]), Bag()) == (1, True, None)


def test_uncoverable_cell_short_circuits():
    target = Target([Position(0, 0), Position(1, 0), Position(5, 5), Position(6, 5)])
    assert count_exact_covers(target, Bag([(1, L_TROMINO)])) == (0, True, INFEASIBLE_REASON)


@pytest.mark.parametrize(
    "target, bag",
    [
        (CUBE, Bag([(2, TRIPOD)])),
        (CUBE, Bag.unlimited(TRIPOD)),
        (Target([Position(x, y) for x in range(4) for y in range(2)]), Bag.unlimited(DOMINO)),
        (Target([Position(x, y) for x in range(3) for y in range(2)]), Bag([(2, L_TROMINO)])),
        (Target([Position(x, y) for x in range(3) for y in range(3)]), Bag([(1, L_TROMINO), (3, DOMINO)])),
    ],
)
def test_counts_agree_with_backtracking(target, bag):
    count, complete, _ = count_exact_covers(target, bag, max_seconds=30)
    assert complete is True
    assert count == count_solutions(target, bag)
