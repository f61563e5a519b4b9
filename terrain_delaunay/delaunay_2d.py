"""
Computes 2D Delaunay triangulations using the Bowyer-Watson algorithm.

The algorithm starts from a single super-triangle enclosing every input point
and inserts the points one at a time. For each point, the triangles whose
circumcircles contain it ("bad" triangles) are removed, leaving a polygonal
hole. The hole's boundary edges are the edges used by exactly one bad
triangle; each is connected to the new point to re-triangulate the hole.
The hole always includes the triangle enclosing the new point, and it grows
until every boundary edge faces the point, so a point lying on an edge
never produces a flat triangle.
After the last insertion every triangle touching a super-triangle vertex is
discarded.

`BowyerWatsonTriangulator` owns one run of the algorithm. Triangles live in an
arena keyed by integer ids and edges are tracked as pairs of vertex ids, so
bad-triangle bookkeeping never relies on coordinate equality. All geometric
comparisons use the tolerance from `TriangulationConfig`.
"""
from collections import Counter
from enum import Enum
from typing import Iterable

import torch

from .circumcenter_calculations import compute_circumcircles_2d
from .config import TriangulationConfig
from .exceptions import (
    DuplicatePointError,
    PointOutsideSuperTriangleError,
    TriangulationError,
    TriangulationFinalizedError,
)
from .geometry_core import EPSILON, Point, is_collinear, orientation, points_from_tensor
from .logging_utils import get_logger
from .super_triangle import strip_super_triangle, super_triangle_from_bounds
from .triangle import Triangle

logger = get_logger(__name__)

# Vertex ids 0, 1, 2 are the super-triangle corners
_SUPER_VERTEX_IDS = (0, 1, 2)


class TriangulationState(Enum):
    SEEDED = 'seeded'
    INSERTING = 'inserting'
    FINALIZED = 'finalized'


class BowyerWatsonTriangulator:
    """
    Incremental Delaunay triangulation of points enclosed by a super-triangle.

    Lifecycle: a new triangulator is SEEDED with the super-triangle as its
    only triangle. Each `insert` moves it to INSERTING. `finalize` strips the
    bootstrap triangles and moves it to FINALIZED, after which no further
    points are accepted.

    Args:
        super_triangle (Triangle): A triangle enclosing every point that will be
                                   inserted. Containment is the caller's
                                   responsibility; an uncovered point raises
                                   `PointOutsideSuperTriangleError` on insertion.
        config (TriangulationConfig | None, optional): Tolerance and policies.
                                                       Defaults to `TriangulationConfig()`.
    """

    def __init__(self, super_triangle: Triangle, config: TriangulationConfig | None = None):
        self.config = config if config is not None else TriangulationConfig()
        self.super_triangle = super_triangle
        # +1 if the super-triangle is counter-clockwise; every triangle keeps its winding
        self._winding = 1.0 if orientation(*super_triangle.vertices) > 0 else -1.0
        self.state = TriangulationState.SEEDED

        self._vertices: list[Point] = list(super_triangle.vertices)
        # Vertex id of every inserted input point, duplicates included
        self._input_vertex_ids: list[int] = []
        # First input index that introduced each vertex id
        self._vertex_input_index: dict[int, int] = {}

        self._triangles: dict[int, Triangle] = {0: super_triangle}
        self._triangle_vertex_ids: dict[int, tuple[int, int, int]] = {0: _SUPER_VERTEX_IDS}
        self._next_triangle_id = 1

    def __len__(self):
        return len(self._triangles)

    @property
    def triangles(self) -> list[Triangle]:
        """Current triangles in creation order. Includes bootstrap triangles until finalized."""
        return list(self._triangles.values())

    @property
    def vertices(self) -> list[Point]:
        """Distinct inserted points, in insertion order."""
        return self._vertices[len(_SUPER_VERTEX_IDS):]

    @property
    def is_finalized(self) -> bool:
        return self.state is TriangulationState.FINALIZED

    def insert(self, point: Point | tuple[float, float]) -> int:
        """
        Inserts one point and restores the Delaunay property.

        Returns:
            int: Index of the point in the overall input sequence.

        Raises:
            TriangulationFinalizedError: If the triangulation is finalized.
            DuplicatePointError: If the point coincides with an existing vertex and
                                 the duplicate policy is 'raise'.
            PointOutsideSuperTriangleError: If no triangle's circumcircle contains the point,
                                            or the point lies on the super-triangle boundary.
            AmbiguousPredicateError: If the point lies on a circumcircle and the
                                     boundary policy is 'raise'.
            DegenerateTriangleError: If a replacement triangle has no finite circumcenter.
                                     The triangulation is left unchanged.
        """
        if self.is_finalized:
            raise TriangulationFinalizedError("Cannot insert points into a finalized triangulation.")
        if not isinstance(point, Point):
            point = Point(*point)
        tol = self.config.tolerance
        input_index = len(self._input_vertex_ids)

        existing = self._find_vertex(point)
        if existing is not None:
            if existing in _SUPER_VERTEX_IDS:
                raise PointOutsideSuperTriangleError(point, self.super_triangle)
            if self.config.duplicate_points == 'raise':
                raise DuplicatePointError(point, self._vertices[existing])
            logger.warning("Skipping point %d at %s: coincides with vertex %s",
                           input_index, point, self._vertices[existing])
            self._input_vertex_ids.append(existing)
            self.state = TriangulationState.INSERTING
            return input_index

        bad_ids = self._find_bad_triangles(point)
        if not bad_ids:
            raise PointOutsideSuperTriangleError(point, self.super_triangle)
        boundary = self._carve_cavity(point, bad_ids)

        vertex_id = len(self._vertices)
        # Build every replacement before mutating so a failure leaves the arena intact
        new_triangles = [
            (Triangle(self._vertices[u], self._vertices[v], point, tol=tol), (u, v, vertex_id))
            for u, v in boundary
        ]

        self._vertices.append(point)
        self._input_vertex_ids.append(vertex_id)
        self._vertex_input_index[vertex_id] = input_index
        for tri_id in bad_ids:
            del self._triangles[tri_id]
            del self._triangle_vertex_ids[tri_id]
        for triangle, vertex_ids in new_triangles:
            self._triangles[self._next_triangle_id] = triangle
            self._triangle_vertex_ids[self._next_triangle_id] = vertex_ids
            self._next_triangle_id += 1

        self.state = TriangulationState.INSERTING
        logger.debug("Inserted point %d at %s: %d bad triangles, %d boundary edges, %d triangles total",
                     input_index, point, len(bad_ids), len(boundary), len(self._triangles))
        return input_index

    def insert_all(self, points: Iterable[Point | tuple[float, float]]) -> None:
        for point in points:
            self.insert(point)

    def finalize(self) -> list[Triangle]:
        """
        Removes every triangle sharing a vertex with the super-triangle.

        Idempotent: later calls return the same triangles.
        """
        if not self.is_finalized:
            # Arena triangles are distinct, so the kept ones can be matched by value
            kept = set(strip_super_triangle(self._triangles.values(), self.super_triangle, self.config.tolerance))
            bootstrap_ids = [tri_id for tri_id, triangle in self._triangles.items() if triangle not in kept]
            for tri_id in bootstrap_ids:
                del self._triangles[tri_id]
                del self._triangle_vertex_ids[tri_id]
            self.state = TriangulationState.FINALIZED
            logger.info("Finalized triangulation: %d points (%d distinct), %d triangles, %d bootstrap triangles removed",
                        len(self._input_vertex_ids), len(self.vertices), len(self._triangles), len(bootstrap_ids))
        return self.triangles

    def simplices(self) -> torch.Tensor:
        """
        Returns the final triangles as an (M, 3) long tensor of input point indices.

        A vertex inserted several times (skipped duplicates) is reported under
        the index of its first occurrence.

        Raises:
            TriangulationError: If the triangulation is not finalized yet.
        """
        if not self.is_finalized:
            raise TriangulationError("Simplices are only available after finalize().")
        rows = [
            [self._vertex_input_index[v] for v in vertex_ids]
            for vertex_ids in self._triangle_vertex_ids.values()
        ]
        if not rows:
            return torch.empty((0, 3), dtype=torch.long)
        return torch.tensor(rows, dtype=torch.long)

    def _find_vertex(self, point: Point) -> int | None:
        tol = self.config.tolerance
        for vertex_id, vertex in enumerate(self._vertices):
            if vertex.coincides(point, tol):
                return vertex_id
        return None

    def _encloses(self, triangle: Triangle, point: Point) -> bool:
        """True if `point` lies inside `triangle` or on one of its edges."""
        a, b, c = triangle.vertices
        return all(orientation(p, q, point) * self._winding >= 0 for p, q in ((a, b), (b, c), (c, a)))

    def _find_bad_triangles(self, point: Point) -> list[int]:
        """
        Triangles whose circumcircle contains `point`, plus the triangle(s)
        containing it, which are bad even when the boundary policy counts a tie
        as outside.
        """
        tol = self.config.tolerance
        policy = self.config.on_circumcircle_boundary
        return [
            tri_id for tri_id, triangle in self._triangles.items()
            if triangle.contains_point_in_circumcircle(point, tol=tol, on_boundary=policy)
            or self._encloses(triangle, point)
        ]

    def _hole_boundary(self, bad_ids: list[int]) -> list[tuple[int, int]]:
        """Edges used by exactly one bad triangle, keeping their original direction."""
        edge_counts = Counter()
        directed = {}
        for tri_id in bad_ids:
            i, j, k = self._triangle_vertex_ids[tri_id]
            for u, v in ((i, j), (j, k), (k, i)):
                key = (u, v) if u < v else (v, u)
                edge_counts[key] += 1
                directed.setdefault(key, (u, v))
        return [directed[key] for key, count in edge_counts.items() if count == 1]

    def _faces_point(self, u: int, v: int, point: Point) -> bool:
        """True if (u, v, point) is a proper triangle with the arena's winding."""
        a, b = self._vertices[u], self._vertices[v]
        if is_collinear(a, b, point, self.config.tolerance):
            return False
        return orientation(a, b, point) * self._winding > 0

    def _triangle_across(self, u: int, v: int, bad_ids: list[int]) -> int | None:
        excluded = set(bad_ids)
        for tri_id, vertex_ids in self._triangle_vertex_ids.items():
            if tri_id not in excluded and u in vertex_ids and v in vertex_ids:
                return tri_id
        return None

    def _carve_cavity(self, point: Point, bad_ids: list[int]) -> list[tuple[int, int]]:
        """
        Returns the hole boundary, growing `bad_ids` in place until the hole is
        star-shaped around `point`.

        A point on, or within tolerance of, an edge between a bad triangle and
        a triangle classified as outside its circumcircle (a tie) would be
        joined to that edge as a flat triangle. The triangle across every such
        edge is added to the hole instead.

        Raises:
            PointOutsideSuperTriangleError: If the offending edge is a
                                            super-triangle edge.
        """
        while True:
            boundary = self._hole_boundary(bad_ids)
            blocking = next(((u, v) for u, v in boundary if not self._faces_point(u, v, point)), None)
            if blocking is None:
                return boundary
            neighbour = self._triangle_across(*blocking, bad_ids)
            if neighbour is None:
                raise PointOutsideSuperTriangleError(point, self.super_triangle)
            logger.debug("Point %s lies on boundary edge %s; adding triangle %d to the hole",
                         point, blocking, neighbour)
            bad_ids.append(neighbour)


def bowyer_watson(points: Iterable[Point | tuple[float, float]], super_triangle: Triangle,
                  config: TriangulationConfig | None = None) -> list[Triangle]:
    """
    Triangulates `points` inside `super_triangle` and returns the final triangles.

    Each returned triangle names three input points by value. The super-triangle
    and every triangle touching it are removed.
    """
    triangulator = BowyerWatsonTriangulator(super_triangle, config)
    triangulator.insert_all(points)
    return triangulator.finalize()


def delaunay_triangulation_2d(points: torch.Tensor, super_triangle: Triangle | None = None,
                              config: TriangulationConfig | None = None) -> torch.Tensor:
    """
    Computes the 2D Delaunay triangulation of a point tensor.

    Args:
        points (torch.Tensor): Tensor of shape (N, 2) with the input coordinates.
        super_triangle (Triangle | None, optional): Enclosing bootstrap triangle.
            If None, one is derived from the bounding box of `points` using
            `config.super_triangle_margin`.
        config (TriangulationConfig | None, optional): Tolerance and policies.

    Returns:
        torch.Tensor: Tensor of shape (M, 3). Each row holds the indices (into
                      `points`) of one Delaunay triangle. Empty `(0, 3)` if N < 3
                      or if all points are collinear.

    Raises:
        ValueError: If `points` is not a tensor of shape (N, 2).
    """
    if not isinstance(points, torch.Tensor):
        raise ValueError("Input points must be a PyTorch tensor.")
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"Input points tensor must have shape (N, 2), got {tuple(points.shape)}.")
    config = config if config is not None else TriangulationConfig()
    if points.shape[0] < 3:
        return torch.empty((0, 3), dtype=torch.long, device=points.device)

    point_list = points_from_tensor(points)
    if super_triangle is None:
        super_triangle = super_triangle_from_bounds(point_list, margin=config.super_triangle_margin,
                                                    tol=config.tolerance)
    triangulator = BowyerWatsonTriangulator(super_triangle, config)
    triangulator.insert_all(point_list)
    triangulator.finalize()
    return triangulator.simplices().to(points.device)


def is_point_in_circumcircle(point: Point, a: Point, b: Point, c: Point,
                             tol: float = EPSILON, on_boundary: str = 'outside') -> bool:
    """
    Checks if `point` is strictly inside the circumcircle of triangle (a, b, c).

    Raises `DegenerateTriangleError` if a, b and c are collinear.
    """
    return Triangle(a, b, c, tol=tol).contains_point_in_circumcircle(point, tol=tol, on_boundary=on_boundary)


def find_delaunay_violations(points: torch.Tensor, simplices: torch.Tensor,
                             tol: float = EPSILON) -> list[tuple[int, int]]:
    """
    Finds input points lying strictly inside the circumcircle of a triangle.

    All circumcircles are evaluated at once in float64. A point counts as
    inside when its distance to the circumcenter is below the circumradius by
    more than `tol` times the circumradius; a triangle's own vertices are never
    reported.

    Args:
        points (torch.Tensor): Tensor of shape (N, 2) (or (N, 3); elevation is ignored).
        simplices (torch.Tensor): Tensor of shape (M, 3) of indices into `points`.
        tol (float, optional): Relative tolerance on the radius comparison. Defaults to `EPSILON`.

    Returns:
        list[tuple[int, int]]: (triangle row, point index) pairs violating the
                               empty-circumcircle property. Empty for a Delaunay triangulation.
    """
    if simplices.numel() == 0 or points.shape[0] == 0:
        return []
    pts = points[:, :2].to(torch.float64)
    simplices = simplices.to(device=pts.device, dtype=torch.long)
    centers, radii = compute_circumcircles_2d(pts[simplices])

    dists = torch.cdist(centers, pts, compute_mode='donot_use_mm_for_euclid_dist')
    inside = dists < (radii * (1.0 - tol)).unsqueeze(1)
    is_vertex = torch.zeros_like(inside)
    is_vertex[torch.arange(simplices.shape[0], device=pts.device).unsqueeze(1), simplices] = True
    inside &= ~is_vertex
    return [(row, col) for row, col in torch.nonzero(inside).tolist()]
