# symmetry.py: rotation groups of the square / cube lattice
from __future__ import annotations

import itertools
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, Sequence, Tuple

_AXES = "xyzw"


def _perm_parity(perm: Sequence[int]) -> int:
    inv = 0
    for i in range(len(perm)):
        for j in range(i + 1, len(perm)):
            if perm[i] > perm[j]:
                inv += 1
    return 1 if inv % 2 == 0 else -1


@dataclass(frozen=True)
class CubeSymmetry:
    """One rotation of the lattice as a signed axis permutation.

    ``apply`` maps ``v`` to ``(signs[0] * v[perm[0]], signs[1] * v[perm[1]], ...)``.
    Only determinant +1 maps (proper rotations, no mirrors) are ever built by
    :func:`rotation_group`, so cell adjacency and handedness are preserved.
    """

    perm: Tuple[int, ...]
    signs: Tuple[int, ...]

    @property
    def dimension(self) -> int:
        return len(self.perm)

    @property
    def determinant(self) -> int:
        det = _perm_parity(self.perm)
        for s in self.signs:
            det *= s
        return det

    @property
    def is_identity(self) -> bool:
        return self.perm == tuple(range(len(self.perm))) and all(s == 1 for s in self.signs)

    def apply(self, coords: Sequence[int]) -> Tuple[int, ...]:
        return tuple(s * coords[p] for p, s in zip(self.perm, self.signs))

    def inverse(self) -> "CubeSymmetry":
        inv_perm = [0] * len(self.perm)
        for i, p in enumerate(self.perm):
            inv_perm[p] = i
        inv_signs = tuple(self.signs[q] for q in inv_perm)
        return CubeSymmetry(tuple(inv_perm), inv_signs)

    def __str__(self) -> str:
        parts = []
        for p, s in zip(self.perm, self.signs):
            axis = _AXES[p] if p < len(_AXES) else f"a{p}"
            parts.append(("+" if s > 0 else "-") + axis)
        return "(" + ", ".join(parts) + ")"


def rotation_group(dimension: int) -> Tuple[CubeSymmetry, ...]:
    """All proper rotations of the ``dimension``-cube, identity first.

    Order is fixed: axis permutations in lexicographic order, and within each
    permutation the sign patterns with positive signs first.  Dimension 2
    gives the 4 square rotations, dimension 3 the 24 cube rotations.
    """
    n = int(dimension)
    if n <= 0:
        return ()
    out = []
    for perm in itertools.permutations(range(n), n):
        parity = _perm_parity(perm)
        for signs in itertools.product((1, -1), repeat=n):
            det = parity
            for s in signs:
                det *= s
            if det == 1:
                out.append(CubeSymmetry(tuple(perm), tuple(signs)))
    return tuple(out)


@lru_cache(maxsize=None)
def symmetries_for(dimension: int) -> Tuple[CubeSymmetry, ...]:
    return rotation_group(dimension)


CUBE_SYMMETRIES: Tuple[CubeSymmetry, ...] = symmetries_for(3)
SQUARE_SYMMETRIES: Tuple[CubeSymmetry, ...] = symmetries_for(2)


def cube_symmetries() -> Iterator[CubeSymmetry]:
    """Fresh iterator over the 24 cube rotations; each call restarts."""
    return iter(CUBE_SYMMETRIES)


__all__ = [
    "CubeSymmetry",
    "CUBE_SYMMETRIES",
    "SQUARE_SYMMETRIES",
    "cube_symmetries",
    "rotation_group",
    "symmetries_for",
]
