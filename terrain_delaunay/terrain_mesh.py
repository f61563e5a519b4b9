"""
Builds terrain meshes from scattered elevation samples.

A terrain is a set of (x, y, z) samples. The mesh builder surrounds the
samples with four zero-elevation border corners so the terrain sits on a flat
rectangular base, triangulates the (x, y) projection with the Bowyer-Watson
engine, and maps every triangle vertex back to its sample index to form an
index buffer.

The index mapping matches coordinates, so two samples sharing the same (x, y)
position cannot be told apart; that case raises `LookupFailure`.
"""
from dataclasses import dataclass

import torch

from .config import TerrainMeshConfig
from .delaunay_2d import bowyer_watson
from .exceptions import LookupFailure
from .geometry_core import EPSILON, Point, points_from_tensor
from .logging_utils import get_logger
from .super_triangle import super_triangle_from_bounds
from .triangle import Triangle

logger = get_logger(__name__)


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned rectangle given by its minimum corner and its sizes."""
    origin: Point
    x_size: float
    y_size: float


def _half_range(low: float, high: float, flat_axis_range: float) -> float:
    return flat_axis_range if high - low == 0.0 else (high - low) / 2.0


def add_border(samples: torch.Tensor, flat_axis_range: float = 10.0,
               scale_factor: float = 6.0) -> tuple[torch.Tensor, Point, int, Rectangle]:
    """
    Appends four zero-elevation corners around the samples.

    The corners lie half of the sample extent beyond each side of the
    bounding box (`flat_axis_range` on an axis where all samples share one
    coordinate).

    Args:
        samples (torch.Tensor): Tensor of shape (N, 3) of (x, y, z) samples, N >= 1.
        flat_axis_range (float, optional): Border distance for a zero-extent axis.
        scale_factor (float, optional): Divisor turning the mean extent into the
                                        integer navigation scale.

    Returns:
        Tuple[torch.Tensor, Point, int, Rectangle]:
            - vertices (torch.Tensor): Shape (N + 4, 3); the samples followed by the corners.
            - center (Point): Center of the bordered bounding box.
            - scale (int): ``int((x_size + y_size) / (2 * scale_factor))``.
            - base (Rectangle): Bounding box of the bordered vertex set.
    """
    min_x, min_y = samples[:, 0].min().item(), samples[:, 1].min().item()
    max_x, max_y = samples[:, 0].max().item(), samples[:, 1].max().item()
    x_range = _half_range(min_x, max_x, flat_axis_range)
    y_range = _half_range(min_y, max_y, flat_axis_range)

    corners = torch.tensor([
        [min_x - x_range, min_y - y_range, 0.0],
        [min_x - x_range, max_y + y_range, 0.0],
        [max_x + x_range, min_y - y_range, 0.0],
        [max_x + x_range, max_y + y_range, 0.0],
    ], dtype=samples.dtype, device=samples.device)
    vertices = torch.cat([samples, corners], dim=0)

    min_coords, _ = torch.min(vertices[:, :2], dim=0)
    max_coords, _ = torch.max(vertices[:, :2], dim=0)
    x_size = (max_coords[0] - min_coords[0]).item()
    y_size = (max_coords[1] - min_coords[1]).item()
    center = Point((max_coords[0] + min_coords[0]) / 2.0, (max_coords[1] + min_coords[1]) / 2.0)
    scale = int((x_size + y_size) / (2.0 * scale_factor))
    base = Rectangle(origin=Point(min_coords[0], min_coords[1]), x_size=x_size, y_size=y_size)
    return vertices, center, scale, base


def calculate_indices(triangles: list[Triangle], vertices: torch.Tensor, tol: float = EPSILON) -> torch.Tensor:
    """
    Flattens triangles into an index buffer over `vertices`.

    Each triangle vertex is matched to the single row of `vertices` whose
    (x, y) coincides with it, i.e. differs on both axes by at most `tol` times
    the larger coordinate magnitude, as in `Point.coincides`.

    Args:
        triangles (list[Triangle]): Triangles whose vertices come from `vertices`.
        vertices (torch.Tensor): Tensor of shape (N, 2) or (N, 3).
        tol (float, optional): Relative coordinate tolerance. Defaults to `EPSILON`.

    Returns:
        torch.Tensor: Long tensor of shape (3 * M,), three indices per triangle
                      in (a, b, c) order.

    Raises:
        LookupFailure: If a triangle vertex matches no row, or more than one.
    """
    coords = vertices[:, :2].to(torch.float64)
    magnitudes = coords.abs().amax(dim=1)
    indices = []
    for triangle in triangles:
        for vertex in triangle.vertices:
            target = torch.tensor([vertex.x, vertex.y], dtype=torch.float64, device=coords.device)
            limit = tol * torch.clamp(magnitudes, min=target.abs().max().item())
            matches = torch.nonzero(torch.all(torch.abs(coords - target) <= limit.unsqueeze(1), dim=1)).flatten()
            if matches.numel() != 1:
                raise LookupFailure(vertex, matches.numel())
            indices.append(matches.item())
    return torch.tensor(indices, dtype=torch.long)


class TerrainMesh:
    """
    A triangulated terrain: bordered vertices plus a flat triangle index buffer.

    Attributes:
        vertices (torch.Tensor): Shape (N, 3), samples followed by the four border corners.
        indices (torch.Tensor): Shape (3 * M,), long indices into `vertices`.
        center (Point): Center of the base rectangle.
        scale (int): Navigation granularity derived from the terrain extent.
        elevation_max (float): Highest elevation, or the configured default when
                               no sample lies above zero.
        base (Rectangle): The flat base the terrain sits on.
    """

    def __init__(self, vertices: torch.Tensor, indices: torch.Tensor, center: Point, scale: int,
                 elevation_max: float, base: Rectangle):
        self.vertices = vertices
        self.indices = indices
        self.center = center
        self.scale = scale
        self.elevation_max = elevation_max
        self.base = base

    @classmethod
    def from_samples(cls, samples: torch.Tensor, config: TerrainMeshConfig | None = None) -> 'TerrainMesh':
        """
        Builds a mesh from an (N, 3) tensor of elevation samples.

        Raises:
            ValueError: If `samples` is not a non-empty tensor of shape (N, 3).
            LookupFailure: If two samples share the same (x, y) position.
        """
        if not isinstance(samples, torch.Tensor):
            raise ValueError("Input samples must be a PyTorch tensor.")
        if samples.ndim != 2 or samples.shape[1] != 3 or samples.shape[0] == 0:
            raise ValueError(f"Input samples must have shape (N, 3) with N >= 1, got {tuple(samples.shape)}.")
        config = config if config is not None else TerrainMeshConfig()
        tri_config = config.triangulation

        vertices, center, scale, base = add_border(samples, config.flat_axis_range, config.scale_factor)
        elevation_max = vertices[:, 2].max().item()
        if elevation_max <= 0.0:
            elevation_max = config.default_elevation_max

        points = points_from_tensor(vertices)
        super_triangle = super_triangle_from_bounds(points, margin=tri_config.super_triangle_margin,
                                                    tol=tri_config.tolerance)
        triangles = bowyer_watson(points, super_triangle, tri_config)
        indices = calculate_indices(triangles, vertices, tri_config.tolerance)

        logger.info("Built terrain mesh: %d vertices, %d triangles, scale %d, max elevation %g",
                    vertices.shape[0], len(triangles), scale, elevation_max)
        return cls(vertices, indices, center, scale, elevation_max, base)

    @property
    def num_triangles(self) -> int:
        return self.indices.shape[0] // 3

    def triangle_indices(self) -> torch.Tensor:
        """The index buffer reshaped to (M, 3)."""
        return self.indices.view(-1, 3)

    def __str__(self):
        lines = [f"({x:g},{y:g},{z:g})" for x, y, z in self.vertices.tolist()]
        lines.append(f"center: {self.center}")
        lines.append(f"scale: {self.scale}")
        return "\n".join(lines) + "\n"
