"""
Error types raised by the triangulation engine and the terrain mesh builder.

All errors derive from `TriangulationError`. Most also derive from the builtin
exception a caller would naturally catch (`ValueError` for bad input,
`LookupError` for failed vertex lookups), so existing handlers keep working.
"""


class TriangulationError(Exception):
    """Base class for every error raised by terrain_delaunay."""


class DegenerateTriangleError(TriangulationError, ValueError):
    """Three points are collinear or coincident, so no circumcircle exists."""

    def __init__(self, a, b, c, denominator: float | None = None):
        self.vertices = (a, b, c)
        self.denominator = denominator
        message = f"Degenerate triangle ({a}, {b}, {c})"
        if denominator is not None:
            message += f": circumcenter denominator {denominator!r}"
        super().__init__(message)


class AmbiguousPredicateError(TriangulationError):
    """A query point lies on a circumcircle boundary, within tolerance."""

    def __init__(self, point, triangle, signed_gap: float):
        self.point = point
        self.triangle = triangle
        self.signed_gap = signed_gap
        super().__init__(
            f"Point {point} lies on the circumcircle of {triangle} "
            f"(distance minus radius = {signed_gap!r})"
        )


class DuplicatePointError(TriangulationError, ValueError):
    """An inserted point coincides with a vertex already in the triangulation."""

    def __init__(self, point, existing):
        self.point = point
        self.existing = existing
        super().__init__(f"Point {point} coincides with existing vertex {existing}")


class PointOutsideSuperTriangleError(TriangulationError, ValueError):
    """An inserted point invalidates no triangle, so it lies outside the super-triangle."""

    def __init__(self, point, super_triangle):
        self.point = point
        self.super_triangle = super_triangle
        super().__init__(f"Point {point} is not enclosed by super-triangle {super_triangle}")


class TriangulationFinalizedError(TriangulationError, RuntimeError):
    """The triangulation was finalized and no longer accepts insertions."""


class LookupFailure(TriangulationError, LookupError):
    """A triangle vertex could not be mapped back to exactly one input point."""

    def __init__(self, point, matches: int):
        self.point = point
        self.matches = matches
        if matches == 0:
            reason = "no input vertex matches"
        else:
            reason = f"{matches} input vertices match"
        super().__init__(f"Cannot resolve index of {point}: {reason}")
