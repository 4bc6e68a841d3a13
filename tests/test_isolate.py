import itertools

from bag import Bag
from models import Position, Template
from puzzles import Puzzle
from solver.backtracking import Target
from solver.isolate import run_isolated

CUBE = Target([Position(x, y, z) for x, y, z in itertools.product(range(2), repeat=3)])
TRIPOD = Template([Position(0, 0, 0), Position(1, 0, 0), Position(0, 1, 0), Position(0, 0, 1)], "T")


def test_isolated_run_returns_child_solutions_and_meta():
    ok, solutions, reason, meta, crash_note = run_isolated(Puzzle("cube", CUBE, Bag([(2, TRIPOD)])), 30)
    assert crash_note is None
    assert ok is True
    assert reason is None
    assert len(solutions) == 4
    assert all(s.cells() == CUBE.cells for s in solutions)
    assert meta["complete"] is True
    assert meta["count"] == 4
    assert meta["nodes"] > 0
    assert meta["preflight"] == "passed"


def test_isolated_run_passes_solution_cap():
    ok, solutions, _, meta, crash_note = run_isolated(Puzzle("cube", CUBE, Bag([(2, TRIPOD)])), 30, 1)
    assert crash_note is None
    assert ok is True
    assert len(solutions) == 1
    assert meta["limit_hit"] is True
    assert meta["complete"] is False


def test_isolated_run_reports_infeasible():
    ok, solutions, reason, meta, crash_note = run_isolated(Puzzle("cube", CUBE, Bag([(1, TRIPOD)])), 30)
    assert crash_note is None
    assert ok is False
    assert solutions == []
    assert reason.startswith("Proven infeasible")
    assert meta["error"] == "preflight_infeasible"
