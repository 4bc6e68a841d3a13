import string
from typing import Any, Dict, List, Sequence

from models import Piece, Position
from solver.backtracking import Solution

_FALLBACK_LABELS = string.ascii_uppercase + string.ascii_lowercase + string.digits


def format_position(position: Position) -> str:
    return str(position)


def format_piece(piece: Piece) -> str:
    return str(piece)


def format_solution(solution: Solution) -> str:
    return str(solution)


def piece_labels(solution: Solution) -> List[str]:
    """One character per placed piece.

    Named pieces use the first character of their name; unnamed ones get
    ``A``, ``B``, ... by placement order.
    """
    labels: List[str] = []
    for idx, piece in enumerate(solution.pieces):
        if piece.name:
            labels.append(piece.name[0])
        else:
            labels.append(_FALLBACK_LABELS[idx % len(_FALLBACK_LABELS)])
    return labels


def _bounds(cells: Sequence[Position], axis: int):
    values = [p.coords[axis] for p in cells]
    return min(values), max(values)


def render_layers(solution: Solution, empty: str = ".") -> str:
    """ASCII view: one block per z layer, rows by y, columns by x."""
    owner: Dict[Position, str] = {}
    for label, piece in zip(piece_labels(solution), solution.pieces):
        for cell in piece:
            owner[cell] = label
    if not owner:
        return ""

    cells = list(owner)
    dim = cells[0].dimension
    x0, x1 = _bounds(cells, 0)
    y0, y1 = _bounds(cells, 1) if dim > 1 else (0, 0)
    z0, z1 = _bounds(cells, 2) if dim > 2 else (0, 0)

    blocks = []
    for z in range(z0, z1 + 1):
        rows = []
        for y in range(y0, y1 + 1):
            row = []
            for x in range(x0, x1 + 1):
                coords = (x, y, z)[:dim]
                row.append(owner.get(Position(*coords), empty))
            rows.append("".join(row))
        if dim > 2:
            rows.insert(0, f"z={z}")
        blocks.append("\n".join(rows))
    return "\n\n".join(blocks)


def piece_to_dict(piece: Piece) -> Dict[str, Any]:
    return {"name": piece.name, "cells": [list(p.coords) for p in piece]}


def solution_to_dict(solution: Solution) -> List[Dict[str, Any]]:
    return [piece_to_dict(p) for p in solution.pieces]
