# progress.py: live solver progress for /progress plus the attempt log
from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

_HERE = Path(__file__).resolve().parent
LOG_DIR = _HERE / "logs"

PROGRESS_LOCK = threading.Lock()

# What /progress reports.  Every writer holds PROGRESS_LOCK.
PROGRESS: Dict[str, Any] = {
    "status": "Idle",      # Idle | Solving | Solved | Error
    "phase": "",           # preflight | search
    "puzzle": "",
    "cells": 0,            # target size
    "solutions": 0,
    "nodes": 0,
    "elapsed_start": None,
    "elapsed": 0.0,
    "message": "",
    "done": False,
    "ok": None,
    "run_id": 0,
}

# Bookkeeping for log lines only; never persisted.
_RUN: Dict[str, Any] = {"puzzle": "", "started": None, "phase": "", "phase_started": None}


# ---------- attempt log ----------

def _attempt_logger() -> logging.Logger:
    logger = logging.getLogger("polycube.attempt_log")
    if logger.handlers:
        return logger
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(LOG_DIR / "solver_attempts.log", encoding="utf-8")
    except OSError:
        # read-only checkout: run without the attempt log
        return logger
    handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


ATTEMPT_LOGGER = _attempt_logger()


def _log(event: str, **fields: Any) -> None:
    if not ATTEMPT_LOGGER.handlers:
        return
    parts = " ".join(f"{k}={v}" for k, v in fields.items() if v not in (None, ""))
    if parts:
        ATTEMPT_LOGGER.info("%s | %s", event, parts)
    else:
        ATTEMPT_LOGGER.info("%s", event)


def _seconds(value: Optional[float]) -> Optional[str]:
    return None if value is None else f"{value:.2f}s"


def log_attempt_detail(event: str, **fields: Any) -> None:
    """Append one ``event | key=value ...`` line to the attempt log."""
    with PROGRESS_LOCK:
        fields.setdefault("puzzle", _RUN["puzzle"])
        _log(event, **fields)


# ---------- cross-process state file ----------

class _StateFile:
    """JSON mirror of PROGRESS so a spawned solver child shows up in /progress."""

    def __init__(self, path: Path):
        self.path = path
        self.seen_mtime = 0.0

    def write(self, state: Dict[str, Any]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(state, fh, separators=(",", ":"))
            tmp.replace(self.path)
            self.seen_mtime = self.path.stat().st_mtime
        except OSError:
            pass

    def merge_into(self, state: Dict[str, Any], force: bool = False) -> None:
        try:
            mtime = self.path.stat().st_mtime
            if not force and mtime <= self.seen_mtime:
                return
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            return
        if isinstance(data, dict):
            state.update({k: data[k] for k in state if k in data})
        self.seen_mtime = mtime


_STATE = _StateFile(Path(os.environ.get("PROGRESS_STATE_FILE") or LOG_DIR / "progress_state.json"))


# ---------- helpers (lock held) ----------

def _count(v: Any) -> int:
    try:
        return max(0, int(v))
    except (TypeError, ValueError):
        return 0


def _tick_locked() -> None:
    if PROGRESS["elapsed_start"] is not None:
        PROGRESS["elapsed"] = time.time() - float(PROGRESS["elapsed_start"])


def _enter_phase_locked(phase: str) -> None:
    if phase == _RUN["phase"]:
        return
    now = time.time()
    if _RUN["phase"] and _RUN["phase_started"] is not None:
        _log("Phase finished", puzzle=_RUN["puzzle"], phase=_RUN["phase"],
             duration=_seconds(now - _RUN["phase_started"]))
    _RUN["phase"], _RUN["phase_started"] = phase, now
    if phase:
        _log("Phase started", puzzle=_RUN["puzzle"], phase=phase)


def _fmt_elapsed(seconds: float) -> str:
    m, s = divmod(int(max(0.0, float(seconds))), 60)
    if m == 0:
        return f"{s}s"
    h, m = divmod(m, 60)
    return f"{m}m {s}s" if h == 0 else f"{h}h {m}m"


# ---------- writers ----------

def reset() -> None:
    with PROGRESS_LOCK:
        PROGRESS.update(
            status="Idle", phase="", puzzle="", cells=0, solutions=0, nodes=0,
            elapsed_start=None, elapsed=0.0, message="", done=False, ok=None,
            run_id=_count(PROGRESS["run_id"]) + 1,
        )
        _RUN.update(puzzle="", started=None, phase="", phase_started=None)
        _log("Progress reset", run_id=PROGRESS["run_id"])
        _STATE.write(PROGRESS)


def start_timer() -> None:
    with PROGRESS_LOCK:
        now = time.time()
        PROGRESS["elapsed_start"], PROGRESS["elapsed"] = now, 0.0
        _RUN["started"] = now
        _STATE.write(PROGRESS)


def set_status(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = str(v)
        _STATE.write(PROGRESS)


def set_phase(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["phase"] = "" if v is None else str(v)
        _enter_phase_locked(PROGRESS["phase"])
        _STATE.write(PROGRESS)


def set_puzzle(name: Any, cells: Any = 0) -> None:
    with PROGRESS_LOCK:
        PROGRESS["puzzle"] = _RUN["puzzle"] = "" if name is None else str(name)
        PROGRESS["cells"] = _count(cells)
        _log("Puzzle loaded", puzzle=PROGRESS["puzzle"], cells=PROGRESS["cells"])
        _STATE.write(PROGRESS)


def set_search_counters(solutions: Any = None, nodes: Any = None) -> None:
    with PROGRESS_LOCK:
        if solutions is not None:
            PROGRESS["solutions"] = _count(solutions)
        if nodes is not None:
            PROGRESS["nodes"] = _count(nodes)
        _tick_locked()
        _STATE.write(PROGRESS)


def set_done(ok: Any = None, *, reason: Any = None) -> None:
    """Close the run.

    With ``ok`` given the status becomes Solved or Error; without it a run
    that never left Idle counts as solved.  ``reason`` lands in ``message``.
    """
    with PROGRESS_LOCK:
        _tick_locked()
        if ok is not None:
            PROGRESS["ok"] = bool(ok)
            PROGRESS["status"] = "Solved" if ok else "Error"
        elif PROGRESS["status"] in ("", "Idle", None):
            PROGRESS["status"], PROGRESS["ok"] = "Solved", True
        PROGRESS["done"] = True
        if reason is not None:
            PROGRESS["message"] = str(reason)
        _enter_phase_locked("")
        started = _RUN["started"]
        _RUN["started"] = None
        _log(
            "Run finished",
            puzzle=_RUN["puzzle"],
            status=PROGRESS["status"],
            ok=PROGRESS["ok"],
            duration=_seconds(None if started is None else time.time() - started),
            solutions=PROGRESS["solutions"],
            nodes=PROGRESS["nodes"],
            message=PROGRESS["message"],
        )
        _STATE.write(PROGRESS)


# ---------- readers ----------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _STATE.merge_into(PROGRESS)
        _tick_locked()
        out = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
    out["elapsed_str"] = _fmt_elapsed(out["elapsed"])
    return out


def as_json() -> Dict[str, Any]:
    return snapshot()


with PROGRESS_LOCK:
    _STATE.merge_into(PROGRESS, force=True)
