from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from ortools.sat.python import cp_model as _cp

from bag import Bag, UNLIMITED
from config import CFG
from models import Position
from solver.backtracking import Solution, Target
from solver.placements import Placement, generate_placements

INFEASIBLE_REASON = "Proven infeasible under current constraints"
TIMEBOX_REASON = "Stopped before solution (timebox)"

# ---------------- helpers ----------------

def build_options(target: Target, bag: Bag) -> Tuple[List[Placement], Dict[str, object]]:
    """Placements usable by the model plus a little bookkeeping for callers."""
    options = generate_placements(target, bag)
    per_entry: Dict[int, int] = defaultdict(int)
    covered: Dict[Position, int] = {cell: 0 for cell in target}
    for opt in options:
        per_entry[opt.entry] += 1
        for cell in opt.piece:
            covered[cell] += 1
    meta: Dict[str, object] = {
        "option_count": len(options),
        "entry_option_counts": dict(per_entry),
        "uncoverable": sorted(cell for cell, n in covered.items() if n == 0),
    }
    return options, meta


def _build_model(target: Target, bag: Bag, options: List[Placement]):
    m = _cp.CpModel()
    x = [m.new_bool_var(f"p_{k}") for k in range(len(options))]

    # every target cell exactly once
    cell_to_vars: Dict[Position, List[_cp.IntVar]] = defaultdict(list)
    for k, opt in enumerate(options):
        for cell in opt.piece:
            cell_to_vars[cell].append(x[k])
    for cell in target:
        m.add_exactly_one(cell_to_vars[cell])

    # per-entry supply
    by_entry: Dict[int, List[_cp.IntVar]] = defaultdict(list)
    for k, opt in enumerate(options):
        by_entry[opt.entry].append(x[k])
    for entry, vars_here in by_entry.items():
        count = bag.entries[entry][0]
        if count is not UNLIMITED and len(vars_here) > count:
            m.add(sum(vars_here) <= count)
    return m, x


def _configure(solver: _cp.CpSolver, max_seconds: Optional[float]) -> None:
    seconds = CFG.CP_SAT_SECONDS if max_seconds is None else max_seconds
    if seconds and float(seconds) > 0:
        solver.parameters.max_time_in_seconds = float(seconds)
    solver.parameters.max_memory_in_mb = int(getattr(CFG, "MAX_MEMORY_MB", 2048))
    solver.parameters.log_search_progress = False


class _CountingCallback(_cp.CpSolverSolutionCallback):
    def __init__(self, limit: Optional[int] = None):
        super().__init__()
        self.count = 0
        self.limit = limit

    def on_solution_callback(self) -> None:
        self.count += 1
        if self.limit is not None and self.count >= self.limit:
            self.stop_search()


# ---------------- main solve ----------------

def try_pack_exact_cover(
    target: Target,
    bag: Bag,
    max_seconds: Optional[float] = None,
) -> Tuple[bool, Optional[Solution], Optional[str]]:
    """Find one packing with CP-SAT; returns ``(ok, solution, reason)``."""
    if target.is_packed():
        return True, Solution.empty(), None

    options, meta = build_options(target, bag)
    if meta["uncoverable"]:
        return False, None, INFEASIBLE_REASON

    m, x = _build_model(target, bag, options)
    solver = _cp.CpSolver()
    _configure(solver, max_seconds)
    solver.parameters.num_search_workers = max(1, int(getattr(CFG, "WORKERS", 1)))

    res = solver.solve(m)
    if res in (_cp.OPTIMAL, _cp.FEASIBLE):
        chosen = [opt.piece for k, opt in enumerate(options) if solver.boolean_value(x[k])]
        chosen.sort(key=lambda piece: piece.minimum_position())
        solution = Solution.empty()
        for piece in chosen:
            solution = solution.record(piece)
        return True, solution, None
    if res == _cp.INFEASIBLE:
        return False, None, INFEASIBLE_REASON
    if res == _cp.MODEL_INVALID:
        return False, None, "Model invalid (configuration error)"
    return False, None, TIMEBOX_REASON


def count_exact_covers(
    target: Target,
    bag: Bag,
    max_seconds: Optional[float] = None,
    *,
    limit: Optional[int] = None,
) -> Tuple[int, bool, Optional[str]]:
    """Count every packing; returns ``(count, complete, reason)``.

    ``complete`` is ``False`` when the time limit or ``limit`` cut the
    enumeration short.
    """
    if target.is_packed():
        return 1, True, None

    options, meta = build_options(target, bag)
    if meta["uncoverable"]:
        return 0, True, INFEASIBLE_REASON

    m, _ = _build_model(target, bag, options)
    solver = _cp.CpSolver()
    _configure(solver, max_seconds)
    # enumeration requires a single worker
    solver.parameters.num_search_workers = 1
    solver.parameters.enumerate_all_solutions = True

    callback = _CountingCallback(limit)
    res = solver.solve(m, callback)

    if res == _cp.OPTIMAL:
        return callback.count, True, None
    if res == _cp.INFEASIBLE:
        return 0, True, INFEASIBLE_REASON
    if res == _cp.MODEL_INVALID:
        return callback.count, False, "Model invalid (configuration error)"
    return callback.count, False, TIMEBOX_REASON


__all__ = ["build_options", "try_pack_exact_cover", "count_exact_covers"]
