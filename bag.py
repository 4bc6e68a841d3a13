# bag.py: multiset of templates available to the solver
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from models import Template

UNLIMITED: Optional[int] = None

BagEntry = Tuple[Optional[int], Template]  # (count or UNLIMITED, template)


def _normalize_count(count: Optional[int]) -> Optional[int]:
    if count is None:
        return UNLIMITED
    count = int(count)
    # Negative counts follow the "-1 means no limit" convention used in config.
    return UNLIMITED if count < 0 else count


@dataclass(frozen=True, init=False)
class Bag:
    """Immutable supply of templates.

    Iterating yields ``(template, rest)`` for every entry that still has a copy
    available.  ``rest`` holds one copy fewer of that entry, or is the same bag
    when the entry is unlimited.  Being immutable, a bag is shared freely
    between recursive branches instead of being copied.
    """

    entries: Tuple[BagEntry, ...]

    def __init__(self, entries: Iterable[BagEntry] = ()) -> None:
        normalized = tuple((_normalize_count(count), template) for count, template in entries)
        object.__setattr__(self, "entries", normalized)

    @classmethod
    def of(cls, *templates: Template) -> "Bag":
        return cls((1, t) for t in templates)

    @classmethod
    def unlimited(cls, *templates: Template) -> "Bag":
        return cls((UNLIMITED, t) for t in templates)

    def _with_count(self, index: int, count: int) -> "Bag":
        entries = list(self.entries)
        entries[index] = (count, entries[index][1])
        bag = Bag.__new__(Bag)
        object.__setattr__(bag, "entries", tuple(entries))
        return bag

    def __iter__(self) -> Iterator[Tuple[Template, "Bag"]]:
        for index, (count, template) in enumerate(self.entries):
            if count is UNLIMITED:
                yield template, self
            elif count > 0:
                yield template, self._with_count(index, count - 1)

    def clone(self) -> "Bag":
        return self

    @property
    def has_unlimited(self) -> bool:
        return any(count is UNLIMITED for count, _ in self.entries)

    def is_empty(self) -> bool:
        return not any(count is UNLIMITED or count > 0 for count, _ in self.entries)

    def remaining(self, template: Template) -> Optional[int]:
        """Copies left of ``template`` (summed over equal entries); ``None`` when unlimited."""
        total = 0
        for count, candidate in self.entries:
            if candidate != template:
                continue
            if count is UNLIMITED:
                return UNLIMITED
            total += count
        return total

    def templates(self) -> List[Template]:
        return [t for count, t in self.entries if count is UNLIMITED or count > 0]

    def piece_sizes(self) -> List[Tuple[int, Optional[int]]]:
        """``(cells per piece, copies)`` for each available entry."""
        return [
            (len(t), count)
            for count, t in self.entries
            if count is UNLIMITED or count > 0
        ]

    def __len__(self) -> int:
        return sum(count for count, _ in self.entries if count is not UNLIMITED)


__all__ = ["Bag", "BagEntry", "UNLIMITED"]
