"""
terrain_delaunay: Bowyer-Watson Delaunay triangulation of scattered elevation samples.

The plotting helpers live in `terrain_delaunay.mesh_plotting` and are not
imported here, so the core package does not load matplotlib.
"""
import logging

from .config import TerrainMeshConfig, TriangulationConfig
from .delaunay_2d import (
    BowyerWatsonTriangulator,
    TriangulationState,
    bowyer_watson,
    delaunay_triangulation_2d,
    find_delaunay_violations,
    is_point_in_circumcircle,
)
from .exceptions import (
    AmbiguousPredicateError,
    DegenerateTriangleError,
    DuplicatePointError,
    LookupFailure,
    PointOutsideSuperTriangleError,
    TriangulationError,
    TriangulationFinalizedError,
)
from .geometry_core import EPSILON, Edge, Point, distance, is_collinear, orientation
from .logging_utils import configure_logging, get_logger
from .super_triangle import super_triangle_for_scale, super_triangle_from_bounds, strip_super_triangle
from .terrain_mesh import Rectangle, TerrainMesh
from .triangle import Triangle

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    'AmbiguousPredicateError',
    'BowyerWatsonTriangulator',
    'DegenerateTriangleError',
    'DuplicatePointError',
    'EPSILON',
    'Edge',
    'LookupFailure',
    'Point',
    'PointOutsideSuperTriangleError',
    'Rectangle',
    'TerrainMesh',
    'TerrainMeshConfig',
    'Triangle',
    'TriangulationConfig',
    'TriangulationError',
    'TriangulationFinalizedError',
    'TriangulationState',
    'bowyer_watson',
    'configure_logging',
    'delaunay_triangulation_2d',
    'distance',
    'find_delaunay_violations',
    'get_logger',
    'is_collinear',
    'is_point_in_circumcircle',
    'orientation',
    'strip_super_triangle',
    'super_triangle_for_scale',
    'super_triangle_from_bounds',
]
