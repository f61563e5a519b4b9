"""
Bootstrap geometry for the Bowyer-Watson algorithm.

Triangulation starts from a single "super-triangle" that encloses every input
point and ends by discarding every triangle that still touches one of its
vertices. This module builds super-triangles, checks containment and applies
the final cleanup filter.
"""
from typing import Iterable, Sequence

import torch

from .geometry_core import EPSILON, Point, bounding_box, orientation, points_from_tensor
from .triangle import Triangle


def super_triangle_from_bounds(points: Sequence[Point] | torch.Tensor, margin: float = 10.0,
                               tol: float = EPSILON) -> Triangle:
    """
    Builds a super-triangle around the bounding box of `points`.

    The triangle is centered on the bounding box, with its base below and its
    apex above the points, and is `margin` times the larger box extent in
    size. Larger margins keep the super-triangle vertices away from the
    circumcircles of hull triangles, at the cost of precision in the
    circumcenters of the bootstrap triangles.

    Args:
        points (Sequence[Point] | torch.Tensor): Input points, or an (N, 2) / (N, 3) tensor.
        margin (float, optional): Scale of the triangle relative to the point
                                  extent. Must be greater than 1. Defaults to 10.
        tol (float, optional): Tolerance forwarded to `Triangle`. Defaults to `EPSILON`.

    Returns:
        Triangle: A triangle strictly enclosing every point.

    Raises:
        ValueError: If `points` is empty or `margin` is not greater than 1.
    """
    if margin <= 1.0:
        raise ValueError(f"Super-triangle margin must be greater than 1, got {margin}.")
    if isinstance(points, torch.Tensor):
        points = points_from_tensor(points)
    min_corner, max_corner = bounding_box(points)

    center_x = (min_corner.x + max_corner.x) / 2.0
    center_y = (min_corner.y + max_corner.y) / 2.0
    max_range = max(max_corner.x - min_corner.x, max_corner.y - min_corner.y)
    if max_range < EPSILON: # All points (nearly) coincide
        max_range = 1.0

    offset = max_range * margin
    return Triangle(
        Point(center_x - offset, center_y - offset * 0.5),
        Point(center_x + offset, center_y - offset * 0.5),
        Point(center_x, center_y + offset * 1.5),
        tol=tol,
    )


def super_triangle_for_scale(scale: int, tol: float = EPSILON) -> Triangle:
    """
    The fixed super-triangle of the terrain viewer: apex (0, 200s), base corners
    (200s, -200s) and (-200s, -200s) for a scale s.

    It only encloses points within roughly 100 * scale of the origin; prefer
    `super_triangle_from_bounds` for arbitrary point sets.

    Raises:
        ValueError: If `scale` is smaller than 1.
    """
    if scale < 1:
        raise ValueError(f"Scale must be at least 1, got {scale}.")
    extent = 200.0 * scale
    return Triangle(
        Point(0.0, extent),
        Point(extent, -extent),
        Point(-extent, -extent),
        tol=tol,
    )


def contains_point(triangle: Triangle, point: Point) -> bool:
    """True if `point` lies strictly inside `triangle` (either vertex orientation)."""
    d1 = orientation(triangle.a, triangle.b, point)
    d2 = orientation(triangle.b, triangle.c, point)
    d3 = orientation(triangle.c, triangle.a, point)
    return (d1 > 0 and d2 > 0 and d3 > 0) or (d1 < 0 and d2 < 0 and d3 < 0)


def strip_super_triangle(triangles: Iterable[Triangle], super_triangle: Triangle,
                         tol: float = 0.0) -> list[Triangle]:
    """Drops every triangle that shares a vertex with `super_triangle`, preserving order."""
    return [tri for tri in triangles if not tri.shares_vertex(super_triangle, tol)]
