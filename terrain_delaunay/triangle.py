"""
The `Triangle` value type used by the Bowyer-Watson engine.

A triangle stores its three vertices, its three edges (a-b, b-c, c-a) and its
circumcenter, computed once at construction by
`compute_triangle_circumcenter_2d`. The circumradius is recovered as the
distance from vertex `a` to the circumcenter whenever it is needed.

Constructing a triangle from collinear or coincident vertices raises
`DegenerateTriangleError`, so every `Triangle` instance has a finite
circumcircle.
"""
from .circumcenter_calculations import compute_triangle_circumcenter_2d
from .exceptions import AmbiguousPredicateError
from .geometry_core import EPSILON, Edge, Point, distance


class Triangle:
    """A non-degenerate triangle with a precomputed circumcenter."""

    __slots__ = ('a', 'b', 'c', 'edges', 'circumcenter')

    def __init__(self, a: Point, b: Point, c: Point, tol: float = EPSILON):
        self.a = a
        self.b = b
        self.c = c
        self.edges = (Edge(a, b), Edge(b, c), Edge(c, a))
        self.circumcenter = compute_triangle_circumcenter_2d(a, b, c, tol=tol)

    @property
    def vertices(self) -> tuple[Point, Point, Point]:
        return (self.a, self.b, self.c)

    @property
    def circumradius(self) -> float:
        return distance(self.a, self.circumcenter)

    def __eq__(self, other):
        if not isinstance(other, Triangle):
            return NotImplemented
        return self.vertices == other.vertices

    def __hash__(self):
        return hash(self.vertices)

    def __repr__(self):
        return f"Triangle({self.a!r}, {self.b!r}, {self.c!r})"

    def __str__(self):
        return f"[a: {self.a}, b: {self.b}, c: {self.c}]"

    def contains_point_in_circumcircle(self, point: Point, tol: float = 0.0,
                                       on_boundary: str = 'outside') -> bool:
        """
        Checks whether `point` lies strictly inside this triangle's circumcircle.

        A point whose distance to the circumcenter differs from the circumradius
        by at most `tol` times the circumradius is on the boundary;
        `on_boundary` decides the answer: 'outside' returns False, 'inside'
        returns True and 'raise' raises `AmbiguousPredicateError`. With the
        default ``tol=0.0`` only an exact tie is on the boundary.
        """
        radius = self.circumradius
        gap = distance(point, self.circumcenter) - radius
        if abs(gap) <= tol * radius:
            if on_boundary == 'raise':
                raise AmbiguousPredicateError(point, self, gap)
            return on_boundary == 'inside'
        return gap < 0

    def has_vertex(self, point: Point, tol: float = 0.0) -> bool:
        return self.a.coincides(point, tol) or self.b.coincides(point, tol) or self.c.coincides(point, tol)

    def shares_vertex(self, other: 'Triangle', tol: float = 0.0) -> bool:
        """True if any vertex of `other` is also a vertex of this triangle."""
        return self.has_vertex(other.a, tol) or self.has_vertex(other.b, tol) or self.has_vertex(other.c, tol)

    def has_edge(self, edge: Edge, tol: float = 0.0) -> bool:
        return any(own.matches(edge, tol) for own in self.edges)
