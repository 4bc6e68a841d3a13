# solver/isolate.py
import multiprocessing as mp
import queue
import time
import traceback
from typing import Any, Dict, List, Optional, Tuple

from puzzles import Puzzle
from solver.backtracking import Solution

# Worker must be top-level (picklable on Windows spawn)
def _solve_worker(q, puzzle: Puzzle, max_seconds: float, max_solutions: Optional[int]):
    try:
        from solver.orchestrator import solve_puzzle  # import inside child
        ok, solutions, reason, meta = solve_puzzle(
            puzzle, max_solutions=max_solutions, max_seconds=max_seconds
        )
        q.put(("ok", ok, solutions, reason, meta))
    except MemoryError:
        q.put(("err", False, [], "Child ran out of memory", {}))
    except Exception as e:
        q.put(("exc", False, [], f"{e}\n{traceback.format_exc()}", {}))

def run_isolated(
    puzzle: Puzzle,
    max_seconds: float,
    max_solutions: Optional[int] = None,
) -> Tuple[bool, List[Solution], Optional[str], Dict[str, Any], Optional[str]]:
    """
    Returns (ok, solutions, reason, meta, crash_note).
    meta is the child's solve meta ({} when the child produced none).
    crash_note is non-empty only if the child crashed/was killed/timed out.
    """
    ctx = mp.get_context("spawn")  # safest on Windows
    q = ctx.Queue()
    p = ctx.Process(target=_solve_worker, args=(q, puzzle, float(max_seconds), max_solutions))
    p.daemon = True
    p.start()

    # The child stops itself at max_seconds; the buffer covers spawn and teardown.
    deadline = time.time() + float(max_seconds) + 5.0
    # Drain before join: a child blocked on a full pipe never exits.
    while True:
        try:
            tag, ok, solutions, reason, meta = q.get(timeout=0.2)
            break
        except queue.Empty:
            pass
        if not p.is_alive():
            try:
                tag, ok, solutions, reason, meta = q.get(timeout=0.5)
                break
            except queue.Empty:
                if p.exitcode not in (0, None):
                    return False, [], f"Stopped before solution (child exit {p.exitcode})", {}, "child crashed"
                return False, [], "No result from child process", {}, "no-result"
        if time.time() >= deadline:
            p.terminate()
            p.join(2.0)
            return False, [], "Stopped before solution (timebox)", {}, "killed: timeout"

    p.join(2.0)
    if p.is_alive():
        p.terminate()

    if tag == "ok":
        return ok, solutions, reason, meta, None
    return False, [], reason, meta, None
