"""
Core geometric primitives shared by the triangulation engine and mesh builder.

This module provides:
- The global EPSILON tolerance used for geometric comparisons.
- The `Point` and `Edge` value types.
- Distance, orientation, collinearity and bounding-box helpers.
- Conversion between `Point` sequences and PyTorch coordinate tensors.

`Point` and `Edge` compare exactly with `==` so that they can be used as
dictionary keys. Geometric identity ("is this the same vertex?") goes through
the tolerance-aware `coincides` / `matches` methods, which is what every
algorithm in the package uses.
"""
import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import torch

EPSILON = 1e-7 # Global relative tolerance for geometric comparisons.


@dataclass(frozen=True)
class Point:
    """An immutable 2D point."""
    x: float
    y: float

    def __post_init__(self):
        # Normalise ints / numpy / 0-d tensor scalars to Python floats
        object.__setattr__(self, 'x', float(self.x))
        object.__setattr__(self, 'y', float(self.y))

    def __iter__(self):
        yield self.x
        yield self.y

    def __str__(self):
        return f"({self.x:g}, {self.y:g})"

    def coincides(self, other: 'Point', tol: float = 0.0) -> bool:
        """
        Tests whether two points are the same vertex.

        With ``tol == 0`` this is exact equality. Otherwise `tol` is relative:
        both coordinate differences must be within ``tol`` times the largest
        coordinate magnitude of the two points, so the test does not depend
        on the units of the input.
        """
        if tol <= 0.0:
            return self.x == other.x and self.y == other.y
        limit = tol * max(abs(self.x), abs(self.y), abs(other.x), abs(other.y))
        return abs(self.x - other.x) <= limit and abs(self.y - other.y) <= limit


@dataclass(frozen=True, eq=False)
class Edge:
    """
    An undirected edge between two points.

    Equality and hashing ignore direction: ``Edge(p, q) == Edge(q, p)``.
    """
    p1: Point
    p2: Point

    def __eq__(self, other):
        if not isinstance(other, Edge):
            return NotImplemented
        return (self.p1 == other.p1 and self.p2 == other.p2) or \
               (self.p1 == other.p2 and self.p2 == other.p1)

    def __hash__(self):
        return hash(frozenset((self.p1, self.p2)))

    def __iter__(self):
        yield self.p1
        yield self.p2

    def __str__(self):
        return f"{self.p1}-{self.p2}"

    def matches(self, other: 'Edge', tol: float = 0.0) -> bool:
        """Order-independent edge comparison using `Point.coincides`."""
        return (self.p1.coincides(other.p1, tol) and self.p2.coincides(other.p2, tol)) or \
               (self.p1.coincides(other.p2, tol) and self.p2.coincides(other.p1, tol))


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a.x - b.x, a.y - b.y)


def orientation(a: Point, b: Point, c: Point) -> float:
    """Twice the signed area of (a, b, c): positive when counter-clockwise."""
    return (b.x - a.x) * (c.y - a.y) - (b.y - a.y) * (c.x - a.x)


def is_collinear(a: Point, b: Point, c: Point, tol: float = EPSILON) -> bool:
    """
    Tests whether three points lie on one line, up to `tol`.

    The test is scale-free. It compares the sine of the largest angle of the
    triangle (a, b, c), the one enclosed by its two shortest sides, against
    `tol`. Coincident points always count as collinear.
    """
    shortest, second, _ = sorted((distance(a, b), distance(b, c), distance(c, a)))
    return abs(orientation(a, b, c)) <= tol * shortest * second


def points_from_tensor(points: torch.Tensor) -> list[Point]:
    """
    Converts an (N, 2) or (N, 3) coordinate tensor to a list of 2D points.

    For (N, 3) input the third column (elevation) is ignored.

    Raises:
        ValueError: If `points` is not a 2-dimensional tensor with 2 or 3 columns.
    """
    if not isinstance(points, torch.Tensor):
        raise ValueError("Input points must be a PyTorch tensor.")
    if points.ndim != 2 or points.shape[1] not in (2, 3):
        raise ValueError(f"Input points tensor must have shape (N, 2) or (N, 3), got {tuple(points.shape)}.")
    return [Point(x, y) for x, y in points[:, :2].to(torch.float64).tolist()]


def points_to_tensor(points: Iterable[Point], dtype: torch.dtype = torch.float64) -> torch.Tensor:
    """Stacks points into an (N, 2) tensor. Returns an empty (0, 2) tensor for no points."""
    coords = [[p.x, p.y] for p in points]
    if not coords:
        return torch.empty((0, 2), dtype=dtype)
    return torch.tensor(coords, dtype=dtype)


def bounding_box(points: Sequence[Point]) -> tuple[Point, Point]:
    """
    Returns the (min corner, max corner) of a non-empty point sequence.

    Raises:
        ValueError: If `points` is empty.
    """
    if not points:
        raise ValueError("Cannot compute the bounding box of an empty point set.")
    coords = points_to_tensor(points)
    min_coords, _ = torch.min(coords, dim=0)
    max_coords, _ = torch.max(coords, dim=0)
    return Point(min_coords[0], min_coords[1]), Point(max_coords[0], max_coords[1])
