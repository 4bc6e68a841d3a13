# vector.py: component-wise arithmetic over integer coordinate tuples
from __future__ import annotations

from typing import Tuple

Vector = Tuple[int, ...]


def add(a: Vector, b: Vector) -> Vector:
    return tuple(x + y for x, y in zip(a, b))


def subtract(a: Vector, b: Vector) -> Vector:
    """Return ``a - b``; ``subtract(b, a)`` is the offset carrying ``a`` onto ``b``."""
    return tuple(x - y for x, y in zip(a, b))


def negate(a: Vector) -> Vector:
    return tuple(-x for x in a)


def origin(dimension: int) -> Vector:
    return (0,) * int(dimension)


__all__ = ["Vector", "add", "subtract", "negate", "origin"]
