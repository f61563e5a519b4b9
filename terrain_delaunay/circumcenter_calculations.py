"""
Computes circumcenters of 2D triangles.

The circumcenter is the center of the unique circle that passes through all
three vertices of a triangle. The triangulation engine evaluates its
circumcircle predicate against it, so it is computed once per triangle.

Coordinates are promoted to float64 before evaluation. Collinear or
coincident vertices make the closed-form denominator vanish; instead of
returning infinite or NaN coordinates, `DegenerateTriangleError` is raised.
"""
import torch

from .exceptions import DegenerateTriangleError
from .geometry_core import EPSILON, Point, is_collinear, orientation


def compute_circumcircles_2d(triangles: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
    """
    Computes the circumcircles of a batch of triangles.

    Args:
        triangles (torch.Tensor): Tensor of shape (M, 3, 2) holding the vertex
                                  coordinates of M triangles.

    Returns:
        Tuple[torch.Tensor, torch.Tensor]:
            - centers (torch.Tensor): Shape (M, 2), float64.
            - radii (torch.Tensor): Shape (M,), float64.
        Degenerate triangles are not rejected here; their rows are non-finite.
    """
    tri = triangles.to(torch.float64)
    a, b, c = tri[:, 0], tri[:, 1], tri[:, 2]
    ax, ay = a[:, 0], a[:, 1]
    bx, by = b[:, 0], b[:, 1]
    cx, cy = c[:, 0], c[:, 1]
    a_sq, b_sq, c_sq = torch.sum(tri ** 2, dim=2).unbind(dim=1)

    D_val = 2 * (ax * (by - cy) + bx * (cy - ay) + cx * (ay - by))
    Ux = (a_sq * (by - cy) + b_sq * (cy - ay) + c_sq * (ay - by)) / D_val
    Uy = (a_sq * (cx - bx) + b_sq * (ax - cx) + c_sq * (bx - ax)) / D_val

    centers = torch.stack([Ux, Uy], dim=1)
    radii = torch.linalg.norm(a - centers, dim=1)
    return centers, radii


def compute_triangle_circumcenter_2d(a: Point, b: Point, c: Point, tol: float = EPSILON) -> Point:
    """
    Computes the circumcenter of the triangle (a, b, c).

    Args:
        a (Point): First vertex.
        b (Point): Second vertex.
        c (Point): Third vertex.
        tol (float, optional): Collinearity tolerance, see `is_collinear`. The
                               triangle is degenerate when the sine of its
                               largest angle is at most `tol`, whatever the
                               units of the coordinates. Defaults to `EPSILON`.

    Returns:
        Point: The circumcenter, equidistant from a, b and c up to rounding.

    Raises:
        DegenerateTriangleError: If the vertices are collinear or coincident.
    """
    if is_collinear(a, b, c, tol):
        raise DegenerateTriangleError(a, b, c, 2.0 * orientation(a, b, c))

    pts = torch.tensor([[[a.x, a.y], [b.x, b.y], [c.x, c.y]]], dtype=torch.float64)
    centers, _ = compute_circumcircles_2d(pts)
    if not torch.all(torch.isfinite(centers)):
        raise DegenerateTriangleError(a, b, c, 2.0 * orientation(a, b, c))
    return Point(centers[0, 0].item(), centers[0, 1].item())
