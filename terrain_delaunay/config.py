"""Configuration objects for triangulation and terrain mesh building."""
from __future__ import annotations

from dataclasses import dataclass, field

from .geometry_core import EPSILON

BOUNDARY_POLICIES = ('outside', 'inside', 'raise')
DUPLICATE_POLICIES = ('skip', 'raise')


@dataclass
class TriangulationConfig:
    """Tolerances and policies of the Bowyer-Watson engine.

    Attributes
    ----------
    tolerance : float
        Relative tolerance for every geometric comparison, so results do not
        depend on the units of the input. A triangle is degenerate when the
        sine of its largest angle is at most `tolerance`; a point ties with a
        circumcircle when its distance differs from the radius by at most
        `tolerance` times the radius; two points are the same vertex when their
        coordinates differ by at most `tolerance` times their magnitude.
    on_circumcircle_boundary : str
        How a point within ``tolerance`` of a circumcircle is classified:
        'outside' (not a bad triangle), 'inside' (bad triangle) or 'raise'
        (AmbiguousPredicateError).
    duplicate_points : str
        'skip' ignores a point that coincides with an existing vertex,
        'raise' raises DuplicatePointError.
    super_triangle_margin : float
        Size of a derived super-triangle, in multiples of the largest
        extent of the input bounding box.
    """
    tolerance: float = EPSILON
    on_circumcircle_boundary: str = 'outside'
    duplicate_points: str = 'skip'
    super_triangle_margin: float = 10.0

    def __post_init__(self):
        if self.tolerance < 0:
            raise ValueError(f"tolerance must be non-negative, got {self.tolerance}")
        if self.on_circumcircle_boundary not in BOUNDARY_POLICIES:
            raise ValueError(
                f"on_circumcircle_boundary must be one of {BOUNDARY_POLICIES}, "
                f"got {self.on_circumcircle_boundary!r}"
            )
        if self.duplicate_points not in DUPLICATE_POLICIES:
            raise ValueError(
                f"duplicate_points must be one of {DUPLICATE_POLICIES}, got {self.duplicate_points!r}"
            )
        if self.super_triangle_margin <= 1.0:
            raise ValueError(f"super_triangle_margin must be greater than 1, got {self.super_triangle_margin}")


@dataclass
class TerrainMeshConfig:
    """Terrain mesh building parameters.

    ``scale_factor`` divides the mean extent of the bordered sample set to
    give the mesh's integer navigation scale. ``default_elevation_max`` is
    used when no sample lies above zero.
    """
    scale_factor: float = 6.0
    default_elevation_max: float = 10.0
    flat_axis_range: float = 10.0
    triangulation: TriangulationConfig = field(default_factory=TriangulationConfig)

    def __post_init__(self):
        if self.scale_factor <= 0:
            raise ValueError(f"scale_factor must be positive, got {self.scale_factor}")
        if self.default_elevation_max <= 0:
            raise ValueError(f"default_elevation_max must be positive, got {self.default_elevation_max}")
        if self.flat_axis_range <= 0:
            raise ValueError(f"flat_axis_range must be positive, got {self.flat_axis_range}")


__all__ = ['TriangulationConfig', 'TerrainMeshConfig', 'BOUNDARY_POLICIES', 'DUPLICATE_POLICIES']
