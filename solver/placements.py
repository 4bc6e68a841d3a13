# solver/placements.py
# Enumerate every placement of every bag entry that fits inside a target

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from bag import Bag, UNLIMITED
from models import Piece, Position
from solver.backtracking import Target


@dataclass(frozen=True)
class Placement:
    entry: int     # index into Bag.entries
    piece: Piece   # translated into target coordinates


def generate_placements(target: Target, bag: Bag) -> List[Placement]:
    """All fitting placements, each anchored by its minimum cell on a target cell.

    A placement has exactly one minimum cell, so anchoring on every target
    cell lists each placement once per entry.
    """
    placements: List[Placement] = []
    for index, (count, template) in enumerate(bag.entries):
        if count is not UNLIMITED and count <= 0:
            continue
        for oriented in template.canonical_orientations:
            anchor = oriented.minimum_position()
            if anchor is None:
                continue
            for cell in target:
                piece = oriented.translate(anchor.to(cell))
                if target.fits(piece):
                    placements.append(Placement(index, piece))
    return placements


def coverage(target: Target, placements: List[Placement]) -> Dict[Position, int]:
    counts: Dict[Position, int] = {cell: 0 for cell in target}
    for placement in placements:
        for cell in placement.piece:
            counts[cell] += 1
    return counts


__all__ = ["Placement", "generate_placements", "coverage"]
