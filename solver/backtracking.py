# solver/backtracking.py: exact-cover search anchored on the least open cell
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, Iterator, Optional, Tuple

from bag import Bag
from models import Piece, Position


@dataclass(frozen=True, init=False)
class Target:
    """Region still to be packed.

    Placing a piece returns a new, smaller target; the receiver is left
    untouched, so abandoning a search branch needs no undo step.
    """

    positions: Tuple[Position, ...]

    def __init__(self, positions: Iterable[Position]) -> None:
        ordered = tuple(sorted(set(positions)))
        object.__setattr__(self, "positions", ordered)
        object.__setattr__(self, "_cells", frozenset(ordered))

    @classmethod
    def _from_sorted(cls, positions: Tuple[Position, ...]) -> "Target":
        target = cls.__new__(cls)
        object.__setattr__(target, "positions", positions)
        object.__setattr__(target, "_cells", frozenset(positions))
        return target

    @property
    def cells(self) -> FrozenSet[Position]:
        return self._cells  # type: ignore[attr-defined]

    def is_packed(self) -> bool:
        return not self.positions

    def fits(self, piece: Piece) -> bool:
        return piece.cells <= self._cells  # type: ignore[attr-defined]

    def minimum_position(self) -> Optional[Position]:
        return self.positions[0] if self.positions else None

    def place(self, piece: Piece) -> "Target":
        """Remove the cells of ``piece``.

        The caller must have checked :meth:`fits`; cells of a non-fitting piece
        that are not part of the target are simply ignored.
        """
        remaining = tuple(p for p in self.positions if not piece.contains(p))
        return Target._from_sorted(remaining)

    def __contains__(self, position: object) -> bool:
        return position in self._cells  # type: ignore[attr-defined]

    def __iter__(self) -> Iterator[Position]:
        return iter(self.positions)

    def __len__(self) -> int:
        return len(self.positions)


@dataclass(frozen=True)
class Solution:
    """Pieces in the order they were placed (earliest filled cell first)."""

    pieces: Tuple[Piece, ...] = ()

    @classmethod
    def empty(cls) -> "Solution":
        return cls(())

    def record(self, piece: Piece) -> "Solution":
        return Solution(self.pieces + (piece,))

    def cells(self) -> FrozenSet[Position]:
        out = set()
        for piece in self.pieces:
            out.update(piece.cells)
        return frozenset(out)

    def __iter__(self) -> Iterator[Piece]:
        return iter(self.pieces)

    def __len__(self) -> int:
        return len(self.pieces)

    def __str__(self) -> str:
        return "<" + "".join(str(p) for p in self.pieces) + ">"


@dataclass
class SearchStats:
    nodes: int = 0       # recursive calls
    tried: int = 0       # anchored candidates tested against the target
    solutions: int = 0
    cancelled: bool = False


class SearchCancelled(Exception):
    """Raised inside the recursion when ``should_stop`` reports true."""


def _search(
    target: Target,
    bag: Bag,
    partial: Solution,
    should_stop: Optional[Callable[[], bool]],
    stats: Optional[SearchStats],
) -> Iterator[Solution]:
    if stats is not None:
        stats.nodes += 1
    if should_stop is not None and should_stop():
        raise SearchCancelled()

    if target.is_packed():
        if stats is not None:
            stats.solutions += 1
        yield partial
        return

    open_position = target.minimum_position()
    for template, rest_of_bag in bag:
        for piece in template.canonical_orientations:
            anchor = piece.minimum_position()
            candidate = piece.translate(anchor.to(open_position))
            if stats is not None:
                stats.tried += 1
            if target.fits(candidate):
                yield from _search(
                    target.place(candidate),
                    rest_of_bag,
                    partial.record(candidate),
                    should_stop,
                    stats,
                )


def iter_solutions(
    target: Target,
    bag: Bag,
    partial_solution: Optional[Solution] = None,
    *,
    should_stop: Optional[Callable[[], bool]] = None,
    stats: Optional[SearchStats] = None,
) -> Iterator[Solution]:
    """Lazily enumerate every complete packing of ``target`` from ``bag``.

    Only the lexicographically smallest open cell is ever used as the anchor
    for the next piece, and every candidate orientation is shifted so its own
    minimum cell lands there.  Each packing is therefore produced exactly once.
    When ``should_stop`` returns true the generator ends early and
    ``stats.cancelled`` is set.
    """
    partial = partial_solution if partial_solution is not None else Solution.empty()
    try:
        yield from _search(target, bag, partial, should_stop, stats)
    except SearchCancelled:
        if stats is not None:
            stats.cancelled = True


def solve_from(
    target: Target,
    bag: Bag,
    partial_solution: Solution,
    when_solved: Callable[[Solution], None],
    *,
    should_stop: Optional[Callable[[], bool]] = None,
    stats: Optional[SearchStats] = None,
) -> None:
    for solution in iter_solutions(
        target, bag, partial_solution, should_stop=should_stop, stats=stats
    ):
        when_solved(solution)


def solve(
    target: Target,
    bag: Bag,
    when_solved: Callable[[Solution], None],
    *,
    should_stop: Optional[Callable[[], bool]] = None,
    stats: Optional[SearchStats] = None,
) -> None:
    """Call ``when_solved`` once per complete packing of ``target``."""
    solve_from(target, bag, Solution.empty(), when_solved, should_stop=should_stop, stats=stats)


def count_solutions(target: Target, bag: Bag) -> int:
    return sum(1 for _ in iter_solutions(target, bag))


def first_solution(target: Target, bag: Bag) -> Optional[Solution]:
    return next(iter_solutions(target, bag), None)


__all__ = [
    "Target",
    "Solution",
    "SearchStats",
    "SearchCancelled",
    "iter_solutions",
    "solve",
    "solve_from",
    "count_solutions",
    "first_solution",
]
