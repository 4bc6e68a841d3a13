# puzzles.py: tolerant puzzle parser (JSON payload -> Target + Bag)
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from bag import Bag, UNLIMITED
from models import Position, Template
from solver.backtracking import Target

_EMPTY_CHARS = frozenset("._ ")
_UNLIMITED_WORDS = {"unlimited", "inf", "infinite", "*", "any"}


@dataclass(frozen=True)
class Puzzle:
    name: str
    target: Target
    bag: Bag

    @property
    def dimension(self) -> int:
        for p in self.target:
            return p.dimension
        for t in self.bag.templates():
            return t.dimension
        return 0


def _as_int(x: Any) -> Optional[int]:
    """Whole numbers only: 2, "2" and 2.0 pass; 1.7, "1.7", NaN and inf do not."""
    if isinstance(x, int) and not isinstance(x, bool):
        return x
    try:
        f = float(x)
    except (TypeError, ValueError):
        return None
    return int(f) if f.is_integer() else None


def _cells_from_rows(rows: Any, z: Optional[int]) -> List[Position]:
    out: List[Position] = []
    for y, row in enumerate(rows):
        for x, ch in enumerate(str(row)):
            if ch in _EMPTY_CHARS:
                continue
            out.append(Position(x, y) if z is None else Position(x, y, z))
    return out


def parse_cells(shape: Any) -> Tuple[List[Position], Optional[str]]:
    """Read cells from ``{"cells": [...]}``, ``{"layers": [...]}`` or ``{"rows": [...]}``.

    Layers are z slices of row strings (row index = y, column = x).  Any
    character other than ``.``, ``_`` or a space marks a cell.  A bare list is
    treated as ``cells``.
    """
    if isinstance(shape, list):
        shape = {"cells": shape}
    if not isinstance(shape, dict):
        return [], "expected an object with cells, layers or rows"

    if "cells" in shape:
        out: List[Position] = []
        for raw in shape.get("cells") or []:
            if not isinstance(raw, (list, tuple)) or not raw:
                return [], f"bad cell {raw!r}"
            coords = [_as_int(c) for c in raw]
            if any(c is None for c in coords):
                return [], f"bad cell {raw!r}"
            out.append(Position(*coords))
        return out, None

    if "layers" in shape:
        layers = shape.get("layers")
        if not isinstance(layers, list):
            return [], "layers must be a list of row lists"
        out = []
        for z, layer in enumerate(layers):
            if isinstance(layer, str):
                layer = layer.splitlines()
            if not isinstance(layer, list):
                return [], f"layer {z} must be a list of rows"
            out.extend(_cells_from_rows(layer, z))
        return out, None

    if "rows" in shape:
        rows = shape.get("rows")
        if isinstance(rows, str):
            rows = rows.splitlines()
        if not isinstance(rows, list):
            return [], "rows must be a list of strings"
        return _cells_from_rows(rows, None), None

    return [], "expected cells, layers or rows"


def _parse_count(raw: Any) -> Tuple[Optional[int], Optional[str]]:
    if raw is None:
        return 1, None
    if isinstance(raw, str) and raw.strip().lower() in _UNLIMITED_WORDS:
        return UNLIMITED, None
    n = _as_int(raw)
    if n is None:
        return None, f"bad count {raw!r}"
    if n < 0:
        return UNLIMITED, None
    return n, None


def parse_puzzle(payload: Any) -> Tuple[Optional[Puzzle], Optional[str]]:
    """
    Return (puzzle, error_message_or_None).

    Payload shape::

        {"name": "cube",
         "target": {"layers": [["##", "##"], ["##", "##"]]},
         "pieces": [{"name": "T", "cells": [[0,0,0],[1,0,0],[0,1,0],[0,0,1]], "count": 2}]}
    """
    if not isinstance(payload, dict):
        return None, "Bad puzzle: expected a JSON object"

    name = str(payload.get("name") or "puzzle")

    if "target" not in payload:
        return None, "Bad puzzle: missing target"
    target_cells, err = parse_cells(payload.get("target"))
    if err:
        return None, f"Bad puzzle: target: {err}"

    raw_pieces = payload.get("pieces")
    if not isinstance(raw_pieces, list):
        return None, "Bad puzzle: pieces must be a list"

    entries = []
    for idx, raw in enumerate(raw_pieces):
        if not isinstance(raw, dict):
            return None, f"Bad puzzle: piece {idx} must be an object"
        piece_name = raw.get("name")
        label = piece_name or f"#{idx}"
        cells, err = parse_cells(raw)
        if err:
            return None, f"Bad puzzle: piece {label}: {err}"
        if not cells:
            return None, f"Bad puzzle: piece {label} has no cells"
        count, err = _parse_count(raw.get("count"))
        if err:
            return None, f"Bad puzzle: piece {label}: {err}"
        entries.append((count, Template(cells, None if piece_name is None else str(piece_name))))

    dims = {p.dimension for p in target_cells}
    for _, template in entries:
        dims.update(p.dimension for p in template.positions)
    if len(dims) > 1:
        return None, f"Bad puzzle: mixed dimensions {sorted(dims)}"
    if dims and not dims <= {2, 3}:
        return None, f"Bad puzzle: only 2-D and 3-D cells are supported (got {dims.pop()}-D)"

    return Puzzle(name, Target(target_cells), Bag(entries)), None


def puzzle_summary(puzzle: Puzzle) -> Dict[str, Any]:
    return {
        "name": puzzle.name,
        "dimension": puzzle.dimension,
        "cells": len(puzzle.target),
        "pieces": [
            {"name": t.name, "size": len(t), "count": "unlimited" if c is UNLIMITED else c}
            for c, t in puzzle.bag.entries
        ],
    }


__all__ = ["Puzzle", "parse_cells", "parse_puzzle", "puzzle_summary"]
