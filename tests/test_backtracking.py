import itertools

from bag import Bag
from models import Piece, Position, Template
from solver.backtracking import (
    SearchStats,
    Solution,
    Target,
    count_solutions,
    first_solution,
    iter_solutions,
    solve,
    solve_from,
)

CUBE = [Position(x, y, z) for x, y, z in itertools.product(range(2), repeat=3)]
TRIPOD = Template([Position(0, 0, 0), Position(1, 0, 0), Position(0, 1, 0), Position(0, 0, 1)])
DOMINO = Template([Position(0, 0), Position(1, 0)], "D")


def _collect(target, bag):
    found = []
    solve(target, bag, found.append)
    return found


def test_two_tripods_pack_the_cube_four_ways():
    solutions = _collect(Target(CUBE), Bag([(2, TRIPOD)]))
    assert len(solutions) == 4
    assert len(set(s.pieces for s in solutions)) == 4


def test_solutions_are_exact_covers():
    target = Target(CUBE)
    for solution in iter_solutions(target, Bag([(2, TRIPOD)])):
        assert len(solution) == 2
        a, b = solution.pieces
        assert not (a.cells & b.cells)
        assert solution.cells() == target.cells


def test_first_solution_display():
    solution = first_solution(Target(CUBE), Bag([(2, TRIPOD)]))
    assert str(solution) == (
        "<[(0, 0, 0)(0, 0, 1)(0, 1, 0)(1, 0, 0)]"
        "[(0, 1, 1)(1, 0, 1)(1, 1, 0)(1, 1, 1)]>"
    )


def test_extra_copies_do_not_add_solutions():
    assert count_solutions(Target(CUBE), Bag([(3, TRIPOD)])) == 4
    assert count_solutions(Target(CUBE), Bag.unlimited(TRIPOD)) == 4


def test_too_few_pieces_gives_no_solution():
    assert _collect(Target(CUBE), Bag([(1, TRIPOD)])) == []
    assert first_solution(Target(CUBE), Bag([(1, TRIPOD)])) is None


def test_empty_target_has_one_empty_solution():
    solutions = _collect(Target([]), Bag([(1, TRIPOD)]))
    assert solutions == [Solution.empty()]
    assert str(solutions[0]) == "<>"


def test_solve_from_extends_partial_solution():
    placed = Piece([Position(0, 0, 0), Position(1, 0, 0), Position(0, 1, 0), Position(0, 0, 1)])
    target = Target(CUBE).place(placed)
    assert len(target) == 4

    found = []
    solve_from(target, Bag([(1, TRIPOD)]), Solution.empty().record(placed), found.append)
    assert len(found) == 1
    assert found[0].pieces[0] == placed
    assert found[0].cells() == frozenset(CUBE)


def test_domino_tilings_of_a_two_by_three_strip():
    target = Target([Position(x, y) for x in range(3) for y in range(2)])
    assert count_solutions(target, Bag.unlimited(DOMINO)) == 3
    assert count_solutions(target, Bag([(3, DOMINO)])) == 3
    assert count_solutions(target, Bag([(2, DOMINO)])) == 0


def test_pieces_keep_template_name():
    target = Target([Position(0, 0), Position(1, 0)])
    solution = first_solution(target, Bag.unlimited(DOMINO))
    assert str(solution) == "<[D(0, 0)(1, 0)]>"


def test_should_stop_cancels_search():
    stats = SearchStats()
    found = list(iter_solutions(Target(CUBE), Bag([(2, TRIPOD)]), should_stop=lambda: True, stats=stats))
    assert found == []
    assert stats.cancelled
    assert stats.nodes == 1


def test_stats_count_nodes_and_solutions():
    stats = SearchStats()
    found = list(iter_solutions(Target(CUBE), Bag([(2, TRIPOD)]), stats=stats))
    assert len(found) == 4
    assert stats.solutions == 4
    assert stats.nodes > 4
    assert stats.tried >= stats.nodes - 1
    assert not stats.cancelled


def test_search_stops_part_way():
    stats = SearchStats()
    limit = 3
    found = list(
        iter_solutions(
            Target(CUBE), Bag([(2, TRIPOD)]),
            should_stop=lambda: stats.nodes > limit, stats=stats,
        )
    )
    assert stats.cancelled
    assert len(found) < 4


def test_target_is_not_modified_by_place():
    target = Target(CUBE)
    smaller = target.place(Piece([Position(0, 0, 0)]))
    assert len(target) == 8
    assert len(smaller) == 7
    assert Position(0, 0, 0) not in smaller
    assert smaller.minimum_position() == Position(0, 0, 1)


def test_target_fits():
    target = Target(CUBE)
    assert target.fits(TRIPOD.to_piece())
    assert not target.fits(Piece([Position(2, 0, 0)]))
    assert Target([]).is_packed()


def test_cell_count_not_a_multiple_of_piece_size_has_no_packing():
    seven = Target(CUBE[:-1])
    assert len(seven) == 7
    assert count_solutions(seven, Bag.unlimited(TRIPOD)) == 0
    found = []
    solve(seven, Bag.unlimited(TRIPOD), found.append)
    assert found == []


def test_chained_placements_shrink_target_by_piece_sizes():
    strip = Target([Position(x, y) for x in range(4) for y in range(2)])
    domino = DOMINO.to_piece()
    upright = Piece([Position(0, 0), Position(0, 1)])
    moves = [
        domino,
        upright.translate(Position(0, 0).to(Position(2, 0))),
        domino.translate(Position(0, 0).to(Position(0, 1))),
        upright.translate(Position(0, 0).to(Position(3, 0))),
    ]

    target = strip
    covered = set()
    placed_cells = 0
    for piece in moves:
        assert target.fits(piece)
        assert not (covered & piece.cells)
        target = target.place(piece)
        covered |= piece.cells
        placed_cells += len(piece)
        assert len(target) == len(strip) - placed_cells
        assert not (target.cells & covered)

    assert target.is_packed()
    assert covered == strip.cells
    # a cell already covered no longer fits
    assert not target.fits(domino)
