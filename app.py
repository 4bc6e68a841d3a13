# app.py: JSON API around the packing solver; progress no-cache
from __future__ import annotations
import os
import time
from typing import Any, Dict, List, Optional

from flask import Flask, request, send_from_directory, jsonify

from solver.orchestrator import solve_puzzle, count_puzzle
from solver.isolate import run_isolated
from puzzles import parse_puzzle, puzzle_summary
from config import CFG
from io_files import resolve_output_path, write_solutions
from render import render_layers, solution_to_dict
from solver.backtracking import Solution

from progress import (
    reset as progress_reset,
    as_json as progress_json,
    set_status, set_done,
)

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

LAST_RESULT: Dict[str, Any] = {
    "ok": False,
    "reason": "No solve requested yet",
    "puzzle": None,
    "count": 0,
    "complete": False,
    "elapsed_str": "0s",
    "solutions": [],
    "solutions_filename": None,
}

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


def _fmt_elapsed(seconds: float) -> str:
    if seconds < 1:
        return "0s"
    m, s = divmod(int(seconds), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    if h == 0:
        return f"{m}m {s}s"
    return f"{h}h {m}m {s}s"


def _opt_number(payload: Dict[str, Any], key: str, cast) -> Optional[Any]:
    raw = payload.get(key)
    if raw is None or raw == "":
        return None
    try:
        return cast(raw)
    except (TypeError, ValueError):
        return None


def _solutions_payload(solutions: List[Solution]) -> List[Dict[str, Any]]:
    limit = max(0, int(CFG.MAX_RETURNED))
    return [
        {
            "pieces": solution_to_dict(s),
            "text": str(s),
            "layers": render_layers(s),
        }
        for s in solutions[:limit]
    ]


def _run_solver(puzzle, payload: Dict[str, Any]) -> Dict[str, Any]:
    max_solutions = _opt_number(payload, "max_solutions", int)
    max_seconds = _opt_number(payload, "max_seconds", float)

    if payload.get("count_only"):
        count, complete, reason, meta = count_puzzle(puzzle, max_seconds=max_seconds)
        return {"ok": count > 0, "reason": reason, "count": count, "complete": complete,
                "solutions": [], "meta": meta}

    if CFG.ISOLATE:
        seconds = max_seconds if max_seconds and max_seconds > 0 else CFG.MAX_SECONDS
        ok, solutions, reason, meta, crash_note = run_isolated(puzzle, seconds, max_solutions)
        if crash_note:
            set_status("Error")
            set_done(False, reason=reason)
        meta = dict(meta, crash_note=crash_note)
    else:
        ok, solutions, reason, meta = solve_puzzle(
            puzzle, max_solutions=max_solutions, max_seconds=max_seconds
        )
    complete = bool(meta.get("complete"))

    return {"ok": ok, "reason": reason, "count": len(solutions), "complete": complete,
            "solutions": solutions, "meta": meta}


@app.route("/solve", methods=["POST"])
def solve():
    progress_reset()
    t0 = time.time()

    payload = request.get_json(silent=True)
    puzzle, err = parse_puzzle(payload)
    if err or puzzle is None:
        reason = err or "Bad puzzle: nothing parsed from request"
        set_status("Error"); set_done(False, reason=reason)
        LAST_RESULT.update({
            "ok": False, "reason": reason, "puzzle": None, "count": 0,
            "complete": False, "elapsed_str": _fmt_elapsed(time.time() - t0),
            "solutions": [], "solutions_filename": None,
        })
        return jsonify(LAST_RESULT), 400

    try:
        result = _run_solver(puzzle, payload)
    except Exception as e:
        reason = f"solver exception: {type(e).__name__}: {e}"
        set_status("Error"); set_done(False, reason=reason)
        LAST_RESULT.update({
            "ok": False, "reason": reason, "puzzle": puzzle_summary(puzzle), "count": 0,
            "complete": False, "elapsed_str": _fmt_elapsed(time.time() - t0),
            "solutions": [], "solutions_filename": None,
        })
        return jsonify(LAST_RESULT), 500

    solutions: List[Solution] = list(result["solutions"])
    solutions_name = None
    if solutions:
        path = write_solutions(solutions, BASE_DIR)
        solutions_name = os.path.basename(path)

    LAST_RESULT.update({
        "ok": bool(result["ok"]),
        "reason": result["reason"],
        "puzzle": puzzle_summary(puzzle),
        "count": result["count"],
        "complete": result["complete"],
        "elapsed_str": _fmt_elapsed(time.time() - t0),
        "solutions": _solutions_payload(solutions),
        "solutions_filename": solutions_name,
    })
    return jsonify(LAST_RESULT)


@app.route("/result/latest")
def result_latest():
    return jsonify(LAST_RESULT)


@app.route("/download/solutions")
def download_solutions():
    path = resolve_output_path(BASE_DIR, CFG.SOLUTIONS_OUT, "solutions.txt")
    directory, filename = os.path.split(os.path.abspath(path))
    return send_from_directory(directory, filename, as_attachment=True)


@app.route("/progress")
def progress():
    return jsonify(progress_json())


if __name__ == "__main__":
    app.run(debug=False)
