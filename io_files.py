"""Helpers for reading puzzle files and writing solver outputs to disk."""

from __future__ import annotations

import json
import os
from typing import Optional, Sequence, Tuple

from config import CFG
from puzzles import Puzzle, parse_puzzle
from render import render_layers
from solver.backtracking import Solution


def resolve_output_path(base_dir: str, configured_name: str, fallback: str) -> str:
    """Return the absolute path where an output artifact should be written."""

    name = (configured_name or "").strip() or fallback
    if os.path.isabs(name):
        return name
    return os.path.join(base_dir, name)


def load_puzzle_file(path: str) -> Tuple[Optional[Puzzle], Optional[str]]:
    """Read a JSON puzzle description; the file name stands in for a missing name."""

    try:
        with open(path, "r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except OSError as e:
        return None, f"Bad puzzle: cannot read {path}: {e.strerror or e}"
    except ValueError as e:
        return None, f"Bad puzzle: {path} is not valid JSON: {e}"

    if isinstance(payload, dict) and not payload.get("name"):
        payload = dict(payload)
        payload["name"] = os.path.splitext(os.path.basename(path))[0]
    return parse_puzzle(payload)


def write_solutions(
    solutions: Sequence[Solution],
    base_dir: str,
    *,
    layers: bool = True,
    out: Optional[str] = None,
) -> str:
    """Write the solutions to ``out`` (or the configured text file) and return its path."""

    path = resolve_output_path(base_dir, out or CFG.SOLUTIONS_OUT, "solutions.txt")
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        if not solutions:
            f.write("No solution\n")
        else:
            for idx, solution in enumerate(solutions, start=1):
                f.write(f"# solution {idx}\n")
                f.write(f"{solution}\n")
                if layers:
                    f.write(render_layers(solution) + "\n")
                f.write("\n")
    return path


__all__ = ["load_puzzle_file", "resolve_output_path", "write_solutions"]
