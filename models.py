from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import FrozenSet, Iterable, Iterator, List, Optional, Tuple

from symmetry import CubeSymmetry, symmetries_for
from vector import add, negate, subtract


@dataclass(frozen=True, order=True, init=False)
class Translation:
    offset: Tuple[int, ...]

    def __init__(self, *offset: int) -> None:
        object.__setattr__(self, "offset", tuple(int(c) for c in offset))

    @classmethod
    def between(cls, start: "Position", end: "Position") -> "Translation":
        return start.to(end)

    def inverse(self) -> "Translation":
        return Translation(*negate(self.offset))

    def __neg__(self) -> "Translation":
        return self.inverse()


@dataclass(frozen=True, order=True, init=False)
class Position:
    """A single grid cell.

    Ordering is lexicographic over the coordinate tuple, so the minimum of any
    set of positions is well defined.
    """

    coords: Tuple[int, ...]

    def __init__(self, *coords: int) -> None:
        object.__setattr__(self, "coords", tuple(int(c) for c in coords))

    @classmethod
    def of(cls, coords: Iterable[int]) -> "Position":
        return cls(*coords)

    @property
    def dimension(self) -> int:
        return len(self.coords)

    def translate(self, translation: Translation) -> "Position":
        return Position(*add(self.coords, translation.offset))

    def transform(self, symmetry: CubeSymmetry) -> "Position":
        return Position(*symmetry.apply(self.coords))

    def to(self, other: "Position") -> Translation:
        """Translation carrying this position onto ``other``."""
        return Translation(*subtract(other.coords, self.coords))

    def to_reference(self) -> Translation:
        return Translation(*negate(self.coords))

    def __str__(self) -> str:
        return "(" + ", ".join(str(c) for c in self.coords) + ")"


def minimum_position(positions: Iterable[Position]) -> Optional[Position]:
    return min(positions, default=None)


@dataclass(frozen=True, init=False)
class Piece:
    """A placed or oriented shape: a sorted, de-duplicated set of positions.

    Equality and hashing only look at the positions.  The name rides along
    for display; two orientations of differently named templates that cover
    the same cells compare equal.
    """

    positions: Tuple[Position, ...]
    name: Optional[str] = field(default=None, compare=False)

    def __init__(self, positions: Iterable[Position], name: Optional[str] = None) -> None:
        ordered = tuple(sorted(set(positions)))
        object.__setattr__(self, "positions", ordered)
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "_cells", frozenset(ordered))

    @classmethod
    def _from_sorted(cls, positions: Tuple[Position, ...], name: Optional[str]) -> "Piece":
        piece = cls.__new__(cls)
        object.__setattr__(piece, "positions", positions)
        object.__setattr__(piece, "name", name)
        object.__setattr__(piece, "_cells", frozenset(positions))
        return piece

    @property
    def cells(self) -> FrozenSet[Position]:
        return self._cells  # type: ignore[attr-defined]

    def with_name(self, name: Optional[str]) -> "Piece":
        return Piece._from_sorted(self.positions, name)

    def contains(self, position: Position) -> bool:
        return position in self._cells  # type: ignore[attr-defined]

    def __contains__(self, position: object) -> bool:
        return position in self._cells  # type: ignore[attr-defined]

    def iter(self) -> Iterator[Position]:
        return iter(self.positions)

    def __iter__(self) -> Iterator[Position]:
        return iter(self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    def translate(self, translation: Translation) -> "Piece":
        # A uniform shift keeps the lexicographic order, no re-sort needed.
        moved = tuple(p.translate(translation) for p in self.positions)
        return Piece._from_sorted(moved, self.name)

    def transform(self, symmetry: CubeSymmetry) -> "Piece":
        return Piece((p.transform(symmetry) for p in self.positions), self.name)

    def minimum_position(self) -> Optional[Position]:
        return self.positions[0] if self.positions else None

    def __str__(self) -> str:
        return "[" + (self.name or "") + "".join(str(p) for p in self.positions) + "]"


@dataclass(frozen=True, init=False)
class Template:
    """Shape definition from which every rotated orientation is derived."""

    positions: Tuple[Position, ...]
    name: Optional[str] = field(default=None, compare=False)

    def __init__(self, positions: Iterable[Position], name: Optional[str] = None) -> None:
        object.__setattr__(self, "positions", tuple(positions))
        object.__setattr__(self, "name", name)

    def with_name(self, name: str) -> "Template":
        return Template(self.positions, name)

    @property
    def dimension(self) -> int:
        return self.positions[0].dimension if self.positions else 0

    def __len__(self) -> int:
        return len(set(self.positions))

    def to_piece(self) -> Piece:
        return Piece(self.positions, self.name)

    def orientations(self) -> Iterator[Piece]:
        """Yield each distinct rotation, anchored so its minimum cell is the origin.

        Rotations are tried in the fixed group order; a result equal to one
        already yielded is skipped.  A shape invariant under ``k`` rotations
        yields ``24 / k`` pieces in 3-D.
        """
        seen: List[Piece] = []
        for symmetry in symmetries_for(self.dimension):
            piece = self.to_piece().transform(symmetry)
            anchor = piece.minimum_position()
            if anchor is None:
                return
            piece = piece.translate(anchor.to_reference())
            if piece in seen:
                continue
            seen.append(piece)
            yield piece

    def __iter__(self) -> Iterator[Piece]:
        return self.orientations()

    @cached_property
    def canonical_orientations(self) -> Tuple[Piece, ...]:
        return tuple(self.orientations())

    def __str__(self) -> str:
        return str(self.to_piece())


__all__ = [
    "Translation",
    "Position",
    "Piece",
    "Template",
    "minimum_position",
]
