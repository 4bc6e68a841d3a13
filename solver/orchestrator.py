# Orchestrator: pre-flight checks, then a capped backtracking search
from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Tuple

from bag import Bag, UNLIMITED
from config import CFG
from progress import (
    set_phase, set_puzzle, set_search_counters, set_status, set_done,
    start_timer, log_attempt_detail,
)
from puzzles import Puzzle
from solver.backtracking import SearchStats, Solution, Target, iter_solutions
from solver.placements import coverage, generate_placements

INFEASIBLE_REASON = "Proven infeasible under current constraints"
TIMEBOX_REASON = "Stopped before solution (timebox)"
NODE_LIMIT_REASON = "Stopped before solution (node limit)"


# ---------- helpers ----------

def _positive_or_none(value: Any) -> Optional[float]:
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if f > 0 else None


def _reachable_sizes(total: int, bag: Bag) -> int:
    """Bitmask of piece-cell totals in ``0..total`` the bag can add up to."""
    mask = (1 << (total + 1)) - 1
    reach = 1
    for size, count in bag.piece_sizes():
        if size <= 0:
            continue
        copies = total // size
        if count is not UNLIMITED:
            copies = min(copies, count)
        for _ in range(copies):
            grown = (reach | (reach << size)) & mask
            if grown == reach:
                break
            reach = grown
    return reach


def preflight(target: Target, bag: Bag) -> Optional[str]:
    """Return why ``target`` can never be packed from ``bag``, or ``None``.

    Two necessary conditions are checked: the target size must be a sum of
    available piece sizes, and every target cell must be covered by at least
    one fitting placement.
    """
    total = len(target)
    if total == 0:
        return None

    if not (_reachable_sizes(total, bag) >> total) & 1:
        return f"{INFEASIBLE_REASON} ({total} cells is not a sum of available piece sizes)"

    counts = coverage(target, generate_placements(target, bag))
    uncovered = sorted(cell for cell, n in counts.items() if n == 0)
    if uncovered:
        return f"{INFEASIBLE_REASON} (no piece can cover cell {uncovered[0]})"
    return None


def _run(
    puzzle: Puzzle,
    *,
    keep: bool,
    max_solutions: Optional[int],
    max_seconds: Optional[float],
    node_limit: Optional[int],
) -> Tuple[bool, List[Solution], Optional[str], Dict[str, Any]]:
    t0 = time.time()
    target, bag = puzzle.target, puzzle.bag

    if max_solutions is None:
        max_solutions = CFG.MAX_SOLUTIONS
    if max_seconds is None:
        max_seconds = CFG.MAX_SECONDS
    if node_limit is None:
        node_limit = CFG.NODE_LIMIT
    max_solutions = int(max_solutions) if _positive_or_none(max_solutions) else None
    node_limit = int(node_limit) if _positive_or_none(node_limit) else None
    seconds = _positive_or_none(max_seconds)
    deadline = t0 + seconds if seconds is not None else None

    meta: Dict[str, Any] = {
        "puzzle": puzzle.name,
        "cells": len(target),
        "count": 0,
        "nodes": 0,
        "tried": 0,
        "elapsed": 0.0,
        "cancelled": False,
        "limit_hit": False,
        "complete": False,
        "preflight": None,
        "error": None,
    }

    set_puzzle(puzzle.name, len(target))
    start_timer()
    set_status("Solving")

    if CFG.PREFLIGHT:
        set_phase("preflight")
        reason = preflight(target, bag)
        meta["preflight"] = reason or "passed"
        if reason:
            meta["error"] = "preflight_infeasible"
            meta["complete"] = True
            meta["elapsed"] = time.time() - t0
            log_attempt_detail("Preflight rejected", reason=reason)
            set_done(False, reason=reason)
            return False, [], reason, meta

    set_phase("search")
    stats = SearchStats()
    every = max(1, int(CFG.PROGRESS_EVERY or 1))
    stop_reason: List[str] = []

    def _should_stop() -> bool:
        if stats.nodes % every == 0:
            set_search_counters(solutions=stats.solutions, nodes=stats.nodes)
        if deadline is not None and time.time() >= deadline:
            stop_reason.append("timebox")
            return True
        if node_limit is not None and stats.nodes > node_limit:
            stop_reason.append("node limit")
            return True
        return False

    solutions: List[Solution] = []
    count = 0
    for solution in iter_solutions(target, bag, should_stop=_should_stop, stats=stats):
        count += 1
        if keep:
            solutions.append(solution)
        if max_solutions is not None and count >= max_solutions:
            meta["limit_hit"] = True
            break

    meta.update({
        "count": count,
        "nodes": stats.nodes,
        "tried": stats.tried,
        "cancelled": stats.cancelled,
        "complete": not stats.cancelled and not meta["limit_hit"],
        "elapsed": time.time() - t0,
    })
    set_search_counters(solutions=count, nodes=stats.nodes)

    ok = count > 0
    reason: Optional[str] = None
    if stats.cancelled:
        kind = stop_reason[-1] if stop_reason else "timebox"
        if ok:
            reason = f"Stopped after {count} packing(s) ({kind})"
        else:
            reason = NODE_LIMIT_REASON if kind == "node limit" else TIMEBOX_REASON
        meta["error"] = None if ok else "search_cancelled"
    elif not ok:
        reason = INFEASIBLE_REASON
        meta["error"] = "search_exhausted"

    log_attempt_detail(
        "Search finished",
        solutions=count,
        nodes=stats.nodes,
        tried=stats.tried,
        complete=meta["complete"],
        reason=reason,
    )
    set_done(ok, reason=reason)
    return ok, solutions, reason, meta


def solve_puzzle(
    puzzle: Puzzle,
    *,
    max_solutions: Optional[int] = None,
    max_seconds: Optional[float] = None,
    node_limit: Optional[int] = None,
) -> Tuple[bool, List[Solution], Optional[str], Dict[str, Any]]:
    """Return ``(ok, solutions, reason, meta)``.

    ``None`` limits fall back to ``CFG``; zero or negative values disable a
    limit.  ``reason`` is ``None`` only when the search ran to completion and
    found at least one packing, or stopped at ``max_solutions``.
    """
    return _run(
        puzzle,
        keep=True,
        max_solutions=max_solutions,
        max_seconds=max_seconds,
        node_limit=node_limit,
    )


def count_puzzle(
    puzzle: Puzzle,
    *,
    max_seconds: Optional[float] = None,
    node_limit: Optional[int] = None,
) -> Tuple[int, bool, Optional[str], Dict[str, Any]]:
    """Return ``(count, complete, reason, meta)`` without keeping solutions."""
    ok, _, reason, meta = _run(
        puzzle,
        keep=False,
        max_solutions=0,
        max_seconds=max_seconds,
        node_limit=node_limit,
    )
    return int(meta["count"]), bool(meta["complete"]), reason, meta


__all__ = [
    "INFEASIBLE_REASON",
    "TIMEBOX_REASON",
    "NODE_LIMIT_REASON",
    "preflight",
    "solve_puzzle",
    "count_puzzle",
]
