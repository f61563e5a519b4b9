import torch
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.patches import Polygon as MplPolygon
from mpl_toolkits.mplot3d import Axes3D # noqa: F401  (registers the '3d' projection)

# Project-specific imports
from .circumcenter_calculations import compute_circumcircles_2d
from .delaunay_2d import delaunay_triangulation_2d
from .logging_utils import get_logger
from .terrain_mesh import TerrainMesh
from .triangle import Triangle

logger = get_logger(__name__)


def plot_triangulation_2d(
    points: torch.Tensor,
    simplices: torch.Tensor | None = None,
    super_triangle: Triangle | None = None,
    show_circumcircles: bool = False,
    ax=None,
    title: str = "2D Delaunay Triangulation"
):
    """
    Plots a 2D triangulation.

    Args:
        points (torch.Tensor): Tensor of shape (N, 2) representing the input points.
        simplices (torch.Tensor | None, optional): Tensor of shape (M, 3) of indices
            into `points`. If None, it is computed with `delaunay_triangulation_2d`.
        super_triangle (Triangle | None, optional): Bootstrap triangle to outline,
            useful when inspecting the seeding geometry. Defaults to None.
        show_circumcircles (bool): Whether to draw each triangle's circumcircle. Defaults to False.
        ax (matplotlib.axes.Axes | None, optional): Existing axes to plot on.
                                                   If None, a new figure and axes are created.
        title (str, optional): Title for the plot.

    Returns:
        matplotlib.axes.Axes | None: The axes drawn on, or None when there are no points.
    """
    if points.shape[0] == 0:
        logger.warning("No points provided for triangulation plot.")
        return None

    if simplices is None:
        simplices = delaunay_triangulation_2d(points)
        if simplices.shape[0] == 0:
            logger.info("Triangulation of %d points has no triangles; plotting points only.", points.shape[0])

    if ax is None:
        fig, ax = plt.subplots()

    points_np = points[:, :2].detach().cpu().to(torch.float64).numpy()
    ax.plot(points_np[:, 0], points_np[:, 1], 'o', label='Input Points', color='blue')

    if simplices.shape[0] > 0:
        simplices_np = simplices.detach().cpu().numpy()
        ax.triplot(points_np[:, 0], points_np[:, 1], simplices_np, color='black', linewidth=0.8)
        if show_circumcircles:
            centers, radii = compute_circumcircles_2d(torch.from_numpy(points_np[simplices_np]))
            centers, radii = centers.numpy(), radii.numpy()
            finite = np.isfinite(radii)
            if not np.all(finite):
                logger.debug("Skipping %d degenerate circumcircles.", np.count_nonzero(~finite))
            for (ux, uy), radius in zip(centers[finite], radii[finite]):
                ax.add_patch(plt.Circle((ux, uy), radius, color='gray', fill=False, linestyle=':', alpha=0.5))

    if super_triangle is not None:
        outline = MplPolygon(
            [[v.x, v.y] for v in super_triangle.vertices],
            edgecolor='red', linestyle='--', fill=False, label='Super-triangle'
        )
        ax.add_patch(outline)

    ax.autoscale_view()
    ax.set_xlabel("X-axis")
    ax.set_ylabel("Y-axis")
    ax.set_title(title)
    ax.legend()
    ax.set_aspect('equal', adjustable='datalim')
    return ax


def plot_terrain_surface_3d(
    mesh: TerrainMesh,
    ax=None,
    cmap: str = 'terrain',
    title: str = "Terrain Mesh"
):
    """
    Plots a terrain mesh as a shaded triangulated surface.

    Args:
        mesh (TerrainMesh): The mesh to draw.
        ax (matplotlib.axes.Axes | None, optional): Existing 3D axes to plot on.
                                                   If None, a new figure and 3D axes are created.
        cmap (str, optional): Matplotlib colormap for elevation. Defaults to 'terrain'.
        title (str, optional): Title for the plot.

    Returns:
        matplotlib.axes.Axes: The axes drawn on.

    Raises:
        ValueError: If `ax` is not a 3D projection.
    """
    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(111, projection='3d')
    elif not hasattr(ax, 'plot_trisurf'):
        raise ValueError("Provided axes `ax` is not a 3D projection.")

    vertices_np = mesh.vertices.detach().cpu().to(torch.float64).numpy()
    z_floor = min(0.0, float(vertices_np[:, 2].min()))
    if mesh.num_triangles > 0:
        ax.plot_trisurf(
            vertices_np[:, 0], vertices_np[:, 1], vertices_np[:, 2],
            triangles=mesh.triangle_indices().cpu().numpy(),
            cmap=cmap, vmin=z_floor, vmax=mesh.elevation_max,
            edgecolor='k', linewidth=0.2,
        )
    else:
        logger.info("Terrain mesh has no triangles; plotting vertices only.")
        ax.scatter(vertices_np[:, 0], vertices_np[:, 1], vertices_np[:, 2], color='blue')

    ax.set_xlabel("X-axis")
    ax.set_ylabel("Y-axis")
    ax.set_zlabel("Elevation")
    ax.set_title(title)

    base = mesh.base
    ax.set_xlim(base.origin.x, base.origin.x + base.x_size)
    ax.set_ylim(base.origin.y, base.origin.y + base.y_size)
    ax.set_zlim(z_floor, mesh.elevation_max)
    return ax


if __name__ == '__main__': # Example Usage
    example_points_2d = torch.rand((15, 2)) * 10
    plot_triangulation_2d(example_points_2d, show_circumcircles=True, title="Sample 2D Delaunay Triangulation")
    plt.show()

    samples = torch.rand((40, 3)) * torch.tensor([100.0, 100.0, 20.0])
    plot_terrain_surface_3d(TerrainMesh.from_samples(samples), title="Sample Terrain")
    plt.show()
