import numpy as np
from numpy.typing import NDArray
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d.art3d import Line3DCollection

from data_types import Mesh3d
from heightfield import HeightField


def plot_height_field(height_field: HeightField, step: float = 1.0, title="Height Field", figsize=(10, 8), ax=None,
                      cmap='viridis'):
    """
    Plots the thickness map as an image seen from the front of the print.

    Parameters
    ----------
    height_field : HeightField
        Thickness values indexed [column, row].

    step : float, optional
        Sample spacing, used to label the axes in millimeters. Default is 1.0.

    Returns
    -------
    fig : matplotlib.figure.Figure
    ax : matplotlib.axes.Axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    extent = (0, (height_field.width - 1) * step, 0, (height_field.height - 1) * step)
    # imshow wants rows first
    image = ax.imshow(height_field.heights.T, origin='lower', extent=extent, cmap=cmap,
                      vmin=height_field.min_thickness, vmax=height_field.max_thickness)
    cbar = fig.colorbar(image, ax=ax, shrink=0.8)
    cbar.set_label('Thickness (mm)')
    ax.set_title(title)
    ax.set_xlabel("X (mm)")
    ax.set_ylabel("Y (mm)")
    ax.set_aspect("equal")
    return fig, ax


def _set_equal_limits(ax, vertices: NDArray[np.float64]):
    ax.set_box_aspect([1, 1, 1])

    x_min, x_max = vertices[:, 0].min(), vertices[:, 0].max()
    y_min, y_max = vertices[:, 1].min(), vertices[:, 1].max()
    z_min, z_max = vertices[:, 2].min(), vertices[:, 2].max()

    # Cubic box so the relief is not stretched
    half = max(x_max - x_min, y_max - y_min, z_max - z_min) * 0.55
    center = (x_min + x_max) / 2, (y_min + y_max) / 2, (z_min + z_max) / 2
    ax.set_xlim(center[0] - half, center[0] + half)
    ax.set_ylim(center[1] - half, center[1] + half)
    ax.set_zlim(center[2] - half, center[2] + half)


def plot_mesh(mesh: Mesh3d, title="3D Mesh", figsize=(12, 10), ax=None, alpha=0.7):
    # Create figure and 3D axis if not provided
    if ax is None:
        fig = plt.figure(figsize=figsize)
        ax = fig.add_subplot(111, projection='3d')
    else:
        fig = ax.figure

    ax.plot_trisurf(mesh.vertices[:, 0], mesh.vertices[:, 1], mesh.vertices[:, 2],
                    triangles=mesh.faces, cmap='viridis', edgecolor='black', linewidth=0.1, alpha=alpha)
    ax.set_title(title)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")
    _set_equal_limits(ax, mesh.vertices)
    return fig, ax


def plot_mesh_with_highlighted_edges(mesh: Mesh3d, highlighted_edges: NDArray[np.int64],
                                     title="Mesh with Highlighted Edges", figsize=(10, 8), highlight_color='red',
                                     highlight_width=2, mesh_alpha=0.3, ax=None):
    """
    Plots a 3D mesh with specific edges drawn on top, e.g. the open edges of a mesh
    that failed the watertightness check.

    Parameters
    ----------
    mesh : Mesh3d
        Mesh to draw.

    highlighted_edges : NDArray[np.int64]
        K x 2 array of vertex index pairs.

    Returns
    -------
    fig : matplotlib.figure.Figure
    ax : matplotlib.axes.Axes
    """
    fig, ax = plot_mesh(mesh, title=title, figsize=figsize, ax=ax, alpha=mesh_alpha)

    highlighted_edges = np.asarray(highlighted_edges, dtype=np.int64).reshape(-1, 2)
    if len(highlighted_edges):
        lc = Line3DCollection(mesh.vertices[highlighted_edges], colors=highlight_color,
                              linewidths=highlight_width, zorder=10)
        ax.add_collection(lc)

    ax.view_init(elev=30, azim=45)
    return fig, ax
