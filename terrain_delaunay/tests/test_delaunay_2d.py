"""
Unit tests for the Bowyer-Watson triangulation engine.

This module tests the functionality provided in `delaunay_2d.py`, including:
- The `BowyerWatsonTriangulator` state machine and its policies for duplicate
  points and circumcircle ties.
- The functional entry points `bowyer_watson` and `delaunay_triangulation_2d`.
- The empty-circumcircle checker `find_delaunay_violations`.
Tests cover regular shapes, degenerate and duplicate input, and seeded random
point sets.
"""
import unittest

import torch

from ..config import TriangulationConfig
from ..delaunay_2d import (
    BowyerWatsonTriangulator,
    TriangulationState,
    bowyer_watson,
    delaunay_triangulation_2d,
    find_delaunay_violations,
    is_point_in_circumcircle,
)
from ..exceptions import (
    AmbiguousPredicateError,
    DegenerateTriangleError,
    DuplicatePointError,
    PointOutsideSuperTriangleError,
    TriangulationError,
    TriangulationFinalizedError,
)
from ..geometry_core import EPSILON, Point
from ..triangle import Triangle

SQUARE_WITH_CENTER = [Point(50, 50), Point(100, 100), Point(0, 0), Point(100, 0), Point(0, 100)]


def square_super_triangle():
    return Triangle(Point(50, 600), Point(-200, -200), Point(400, -200))


class TestPointInCircumcircle(unittest.TestCase):
    """Tests for the functional circumcircle predicate."""

    def test_inside_and_outside(self):
        a, b, c = Point(0, 0), Point(2, 0), Point(1, 1)
        self.assertTrue(is_point_in_circumcircle(Point(1.0, 0.1), a, b, c))
        self.assertFalse(is_point_in_circumcircle(Point(1.0, 2.0), a, b, c))

    def test_on_circle_is_not_inside(self):
        """A point on the circle is not strictly inside under the default policy."""
        self.assertFalse(is_point_in_circumcircle(Point(2, 2), Point(0, 0), Point(2, 0), Point(0, 2)))

    def test_collinear_triangle_raises(self):
        """Collinear triangle vertices raise rather than silently answering False."""
        with self.assertRaises(DegenerateTriangleError):
            is_point_in_circumcircle(Point(0.5, 0.5), Point(0, 0), Point(1, 1), Point(2, 2))


class TestBowyerWatsonTriangulator(unittest.TestCase):
    """Tests for the incremental engine and its lifecycle."""

    def test_square_with_center_point(self):
        """Four square corners plus the center triangulate into exactly 4 triangles."""
        super_triangle = square_super_triangle()
        triangles = bowyer_watson(SQUARE_WITH_CENTER, super_triangle)
        self.assertEqual(len(triangles), 4)
        for tri in triangles:
            self.assertTrue(tri.has_vertex(Point(50, 50)), f"{tri} should use the center point.")
            self.assertFalse(tri.shares_vertex(super_triangle), f"{tri} touches the super-triangle.")

    def test_output_vertices_are_input_points(self):
        """Every output vertex is one of the input points, by value."""
        inputs = set(SQUARE_WITH_CENTER)
        for tri in bowyer_watson(SQUARE_WITH_CENTER, square_super_triangle()):
            for vertex in tri.vertices:
                self.assertIn(vertex, inputs)

    def test_state_transitions(self):
        """SEEDED -> INSERTING -> FINALIZED, with no insertion after finalization."""
        triangulator = BowyerWatsonTriangulator(square_super_triangle())
        self.assertIs(triangulator.state, TriangulationState.SEEDED)
        self.assertEqual(triangulator.triangles, [square_super_triangle()])

        self.assertEqual(triangulator.insert(Point(50, 50)), 0)
        self.assertIs(triangulator.state, TriangulationState.INSERTING)
        self.assertEqual(len(triangulator), 3, "One interior point splits the super-triangle in three.")

        triangulator.insert_all(SQUARE_WITH_CENTER[1:])
        first = triangulator.finalize()
        self.assertIs(triangulator.state, TriangulationState.FINALIZED)
        self.assertEqual(triangulator.finalize(), first, "finalize() should be idempotent.")

        with self.assertRaises(TriangulationFinalizedError):
            triangulator.insert(Point(10, 10))
        self.assertEqual(len(triangulator.finalize()), 4)

    def test_simplices_require_finalization(self):
        triangulator = BowyerWatsonTriangulator(square_super_triangle())
        triangulator.insert((50, 50))
        with self.assertRaises(TriangulationError):
            triangulator.simplices()

    def test_simplices_reference_input_indices(self):
        triangulator = BowyerWatsonTriangulator(square_super_triangle())
        triangulator.insert_all(SQUARE_WITH_CENTER)
        triangulator.finalize()
        simplices = triangulator.simplices()
        self.assertEqual(tuple(simplices.shape), (4, 3))
        self.assertEqual(simplices.dtype, torch.long)
        self.assertTrue(torch.all(torch.any(simplices == 0, dim=1)), "Every triangle uses the center (index 0).")

    def test_accepts_plain_tuples(self):
        triangles = bowyer_watson([(50, 50), (100, 100), (0, 0), (100, 0), (0, 100)], square_super_triangle())
        self.assertEqual(len(triangles), 4)

    def test_point_outside_super_triangle(self):
        """A point outside every circumcircle is reported instead of being dropped."""
        triangulator = BowyerWatsonTriangulator(Triangle(Point(0, 0), Point(10, 0), Point(0, 10)))
        triangulator.insert(Point(2, 2))
        with self.assertRaises(PointOutsideSuperTriangleError):
            triangulator.insert(Point(100, 100))
        with self.assertRaises(PointOutsideSuperTriangleError):
            triangulator.insert(Point(0, 0))
        with self.assertRaises(PointOutsideSuperTriangleError):
            triangulator.insert(Point(5, 0)) # On a super-triangle edge
        self.assertEqual(triangulator.vertices, [Point(2, 2)])
        self.assertEqual(len(triangulator), 3)

    def test_duplicate_points_skipped(self):
        """Duplicates are skipped (and logged); they map to the first occurrence."""
        points = [Point(0, 0), Point(1, 0), Point(0, 1), Point(0, 0), Point(1, 0)]
        triangulator = BowyerWatsonTriangulator(Triangle(Point(-10, -10), Point(10, -10), Point(0, 10)))
        with self.assertLogs('terrain_delaunay', level='WARNING') as logs:
            triangulator.insert_all(points)
        self.assertEqual(len(logs.records), 2)
        self.assertEqual(len(triangulator.vertices), 3)
        triangulator.finalize()
        simplices = triangulator.simplices()
        self.assertEqual(simplices.shape[0], 1)
        self.assertEqual(sorted(simplices[0].tolist()), [0, 1, 2])

    def test_near_duplicate_within_tolerance_is_skipped(self):
        triangulator = BowyerWatsonTriangulator(square_super_triangle())
        triangulator.insert(Point(50, 50))
        with self.assertLogs('terrain_delaunay', level='WARNING'):
            triangulator.insert(Point(50 + EPSILON / 2, 50))
        self.assertEqual(len(triangulator.vertices), 1)

    def test_duplicate_points_raise(self):
        config = TriangulationConfig(duplicate_points='raise')
        triangulator = BowyerWatsonTriangulator(square_super_triangle(), config)
        triangulator.insert(Point(50, 50))
        with self.assertRaises(DuplicatePointError):
            triangulator.insert(Point(50, 50))

    def test_ambiguous_tie_raises_and_leaves_state_intact(self):
        """With the 'raise' policy, a fourth cocircular square corner is rejected atomically."""
        config = TriangulationConfig(on_circumcircle_boundary='raise')
        triangulator = BowyerWatsonTriangulator(Triangle(Point(-10, -10), Point(10, -10), Point(0.5, 20)), config)
        triangulator.insert_all([Point(0, 0), Point(1, 0), Point(1, 1)])
        before = triangulator.triangles
        with self.assertRaises(AmbiguousPredicateError):
            triangulator.insert(Point(0, 1))
        self.assertEqual(triangulator.triangles, before)
        self.assertEqual(len(triangulator.vertices), 3)

    def test_ties_resolved_inside_or_outside(self):
        """Both tie policies still produce a valid 2-triangle square."""
        square = [Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)]
        super_triangle = Triangle(Point(-10, -10), Point(10, -10), Point(0.5, 20))
        for policy in ('outside', 'inside'):
            config = TriangulationConfig(on_circumcircle_boundary=policy)
            triangles = bowyer_watson(square, super_triangle, config)
            self.assertEqual(len(triangles), 2, f"Square should form 2 triangles with policy {policy!r}.")


class TestDelaunayTriangulation2D(unittest.TestCase):
    """
    Tests for the tensor entry point `delaunay_triangulation_2d`.
    Covers edge cases, simple geometric shapes, and random distributions.
    """
    def _check_triangles_validity(self, points, triangles):
        """Helper to check basic validity of returned triangles."""
        n_points = points.shape[0]
        self.assertEqual(triangles.ndim, 2)
        self.assertEqual(triangles.shape[1], 3)
        if triangles.numel() == 0:
            return
        self.assertTrue(torch.all(triangles >= 0) and torch.all(triangles < n_points),
                        f"Triangle indices out of bounds. Points: {n_points}")
        for i, tri in enumerate(triangles):
            self.assertEqual(len(set(tri.tolist())), 3, f"Triangle {i} ({tri.tolist()}) has duplicate vertices.")

    def test_invalid_input(self):
        with self.assertRaises(ValueError):
            delaunay_triangulation_2d([[0.0, 0.0]])
        with self.assertRaises(ValueError):
            delaunay_triangulation_2d(torch.zeros((4, 3)))

    def test_empty_and_fewer_than_3_points(self):
        self.assertEqual(delaunay_triangulation_2d(torch.empty((0, 2))).shape, (0, 3))
        self.assertEqual(delaunay_triangulation_2d(torch.tensor([[0., 0.]])).shape, (0, 3))
        self.assertEqual(delaunay_triangulation_2d(torch.tensor([[0., 0.], [1., 1.]])).shape, (0, 3))

    def test_3_points_collinear(self):
        """Collinear points form no triangle; the result never contains NaN geometry."""
        points = torch.tensor([[0., 0.], [1., 1.], [2., 2.]])
        triangles = delaunay_triangulation_2d(points)
        self.assertEqual(triangles.shape, (0, 3), "Collinear points should not form triangles.")

    def test_3_points_triangle(self):
        points = torch.tensor([[0., 0.], [1., 0.], [0., 1.]])
        triangles = delaunay_triangulation_2d(points)
        self.assertEqual(triangles.shape[0], 1, "Three non-collinear points should form one triangle.")
        self._check_triangles_validity(points, triangles)
        self.assertEqual(sorted(triangles[0].tolist()), [0, 1, 2])

    def test_square_with_center_and_explicit_super_triangle(self):
        points = torch.tensor([[p.x, p.y] for p in SQUARE_WITH_CENTER])
        triangles = delaunay_triangulation_2d(points, super_triangle=square_super_triangle())
        self.assertEqual(triangles.shape[0], 4)
        self._check_triangles_validity(points, triangles)

    def test_4_points_square(self):
        points = torch.tensor([[0., 0.], [1., 0.], [1., 1.], [0., 1.]])
        triangles = delaunay_triangulation_2d(points)
        self.assertEqual(triangles.shape[0], 2, "Square should form 2 Delaunay triangles.")
        self._check_triangles_validity(points, triangles)
        self.assertEqual(len(torch.unique(triangles.flatten())), 4)

    def test_regular_grid(self):
        """A 3x3 grid has many cocircular quadruples and triangulates into 8 triangles."""
        points = torch.tensor([[float(i), float(j)] for i in range(3) for j in range(3)])
        triangles = delaunay_triangulation_2d(points)
        self.assertEqual(triangles.shape[0], 8, "3x3 grid should form 8 Delaunay triangles.")
        self._check_triangles_validity(points, triangles)
        self.assertEqual(find_delaunay_violations(points, triangles), [])

    def test_larger_grid_with_interior_edges(self):
        """Grid and border layout from the terrain viewer's own checks."""
        points = torch.tensor([
            [50., 50.], [150., 50.], [50., 150.], [150., 150.],
            [100., 50.], [100., 150.], [50., 100.], [150., 100.],
            [0., 0.], [0., 200.], [200., 0.], [200., 200.],
        ])
        super_triangle = Triangle(Point(100, 600), Point(-200, -200), Point(400, -200))
        triangles = delaunay_triangulation_2d(points, super_triangle=super_triangle)
        self._check_triangles_validity(points, triangles)
        self.assertEqual(find_delaunay_violations(points, triangles), [])

    def test_random_points(self):
        """Seeded random point sets satisfy the empty-circumcircle property."""
        generator = torch.Generator().manual_seed(1234)
        for num_pts in [10, 30, 60]:
            points = torch.rand((num_pts, 2), generator=generator, dtype=torch.float64) * 100
            triangles = delaunay_triangulation_2d(points)
            self._check_triangles_validity(points, triangles)
            self.assertGreaterEqual(triangles.shape[0], num_pts - 2)
            self.assertLessEqual(triangles.shape[0], 2 * num_pts - 5)
            self.assertEqual(find_delaunay_violations(points, triangles), [],
                             f"Delaunay property violated for {num_pts} random points.")

    def test_small_scale_random_points(self):
        """Coordinates around 1e-3 (e.g. degrees over a small area) triangulate like any other scale."""
        generator = torch.Generator().manual_seed(7)
        unit = torch.rand((50, 2), generator=generator, dtype=torch.float64)
        reference = delaunay_triangulation_2d(unit)
        for scale in (1e-3, 1e-6):
            points = unit * scale
            triangles = delaunay_triangulation_2d(points)
            self._check_triangles_validity(points, triangles)
            self.assertEqual(find_delaunay_violations(points, triangles), [],
                             f"Delaunay property violated at scale {scale}.")
            self.assertEqual(triangles.shape[0], reference.shape[0])

    def test_point_next_to_vertex_on_hull_edge(self):
        """A point on a hull edge, very close to one of its ends, splits the outer triangle in two."""
        for offset in (1.5e-7, 3e-7, 1e-6, 1e-5):
            points = torch.tensor([[0., 0.], [10., 0.], [5., 8.], [offset, 0.]], dtype=torch.float64)
            triangles = delaunay_triangulation_2d(points)
            self.assertEqual(triangles.shape[0], 2, f"offset {offset}")
            self._check_triangles_validity(points, triangles)
            self.assertTrue(torch.all(torch.any(triangles == 3, dim=1)), f"offset {offset}")
            self.assertEqual(find_delaunay_violations(points, triangles), [])

    def test_point_on_interior_edge(self):
        """A point exactly on the shared edge of two triangles replaces that edge."""
        points = torch.tensor([[0., 0.], [4., 0.], [4., 4.], [0., 4.], [2., 2.]], dtype=torch.float64)
        triangles = delaunay_triangulation_2d(points)
        self.assertEqual(triangles.shape[0], 4)
        self.assertEqual(find_delaunay_violations(points, triangles), [])

    def test_no_output_triangle_touches_super_triangle(self):
        generator = torch.Generator().manual_seed(99)
        points = torch.rand((25, 2), generator=generator, dtype=torch.float64) * 10
        super_triangle = Triangle(Point(-100, -100), Point(100, -100), Point(5, 100))
        for tri in bowyer_watson(points.tolist(), super_triangle):
            self.assertFalse(tri.shares_vertex(super_triangle))

    def test_float32_input_and_device(self):
        points = torch.tensor([[0., 0.], [1., 0.], [0., 1.], [1., 1.], [0.5, 0.4]], dtype=torch.float32)
        triangles = delaunay_triangulation_2d(points)
        self.assertEqual(triangles.device, points.device)
        self.assertEqual(triangles.shape[0], 4)

    def test_duplicate_points(self):
        """Duplicate coordinates collapse onto their first occurrence."""
        points = torch.tensor([[0., 0.], [1., 0.], [0., 1.], [0., 0.], [1., 0.]])
        triangles = delaunay_triangulation_2d(points)
        self.assertEqual(triangles.shape[0], 1)
        self.assertEqual(sorted(triangles[0].tolist()), [0, 1, 2])

        collinear = torch.tensor([[0., 0.], [1., 1.], [0., 0.], [2., 2.], [1., 1.]])
        self.assertEqual(delaunay_triangulation_2d(collinear).shape[0], 0)


class TestFindDelaunayViolations(unittest.TestCase):
    """Tests for the vectorized empty-circumcircle checker."""

    def test_detects_non_delaunay_diagonal(self):
        """The short diagonal of a rhombus is Delaunay, the long one is not."""
        points = torch.tensor([[0., 0.], [2., -0.5], [4., 0.], [2., 0.5]])
        good = torch.tensor([[0, 1, 3], [1, 2, 3]])
        bad = torch.tensor([[0, 1, 2], [0, 2, 3]])
        self.assertEqual(find_delaunay_violations(points, good), [])
        violations = find_delaunay_violations(points, bad)
        self.assertIn((0, 3), violations)
        self.assertIn((1, 1), violations)

    def test_empty_inputs(self):
        self.assertEqual(find_delaunay_violations(torch.empty((0, 2)), torch.empty((0, 3), dtype=torch.long)), [])
        self.assertEqual(find_delaunay_violations(torch.rand((5, 2)), torch.empty((0, 3), dtype=torch.long)), [])


if __name__ == '__main__':
    unittest.main(argv=['first-arg-is-ignored'], exit=False)
