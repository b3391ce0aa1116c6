"""
Topology checks for generated meshes: edge usage, boundary loops and the outer
rim of the footprint.
"""

import networkx as nx
import numpy as np
import trimesh
from numpy.typing import NDArray

from data_types import Mesh3d


def directed_edges(mesh: Mesh3d) -> NDArray[np.int64]:
    """F*3 x 2 array of (start, end) vertex indices following each face's winding."""
    return mesh.faces[:, [0, 1, 1, 2, 2, 0]].reshape(-1, 2)


def edge_use_counts(mesh: Mesh3d) -> NDArray[np.int64]:
    """Number of faces using each distinct undirected edge."""
    _, inverse = trimesh.grouping.unique_rows(np.sort(directed_edges(mesh), axis=1))
    return np.bincount(inverse)


def find_boundary_edges(mesh: Mesh3d) -> NDArray[np.int64]:
    """Edges used by exactly one face."""
    edges = np.sort(directed_edges(mesh), axis=1)
    single = np.asarray(trimesh.grouping.group_rows(edges, require_count=1), dtype=np.int64).reshape(-1)
    return edges[single]


def get_connected_components(edges):
    """
    Number of connected components of a graph given as an edge list, and the edges
    in each component.
    """
    graph = nx.Graph()
    graph.add_edges_from(edges)

    connected_components = list(nx.connected_components(graph))
    component_edges = [list(graph.subgraph(component).edges()) for component in connected_components]
    return len(connected_components), component_edges


def count_boundary_loops(mesh: Mesh3d) -> int:
    num_comp, _ = get_connected_components(find_boundary_edges(mesh).tolist())
    return num_comp


def is_closed_manifold(mesh: Mesh3d) -> bool:
    """
    True when every edge is shared by exactly two faces that traverse it in
    opposite directions, i.e. the mesh is watertight with consistent winding.
    """
    if len(mesh.faces) == 0:
        return False
    directed = directed_edges(mesh)
    paired = trimesh.grouping.group_rows(np.sort(directed, axis=1), require_count=2)
    if 2 * len(paired) != len(directed):
        return False
    # Each directed edge once, so the two faces on an edge run it in opposite directions
    unique_directed, _ = trimesh.grouping.unique_rows(directed)
    return len(unique_directed) == len(directed)


def outer_rim_loop(mesh: Mesh3d, tolerance: float = 1e-9) -> list[int]:
    """
    Vertex indices of the z=0 footprint outline, in loop order.

    The outline is made of the bottom vertices lying on the footprint's bounding
    rectangle. Raises ValueError unless the mesh edges between them form exactly
    one closed loop.
    """
    vertices = mesh.vertices
    on_bottom = np.abs(vertices[:, 2]) <= tolerance
    if not on_bottom.any():
        raise ValueError("Mesh has no vertices at z=0")

    bottom_xy = vertices[on_bottom, :2]
    min_xy = bottom_xy.min(axis=0)
    max_xy = bottom_xy.max(axis=0)
    # V x 4 flags: on the x-min, x-max, y-min and y-max side of the rectangle
    on_side = np.stack([
        np.abs(vertices[:, 0] - min_xy[0]) <= tolerance,
        np.abs(vertices[:, 0] - max_xy[0]) <= tolerance,
        np.abs(vertices[:, 1] - min_xy[1]) <= tolerance,
        np.abs(vertices[:, 1] - max_xy[1]) <= tolerance,
    ], axis=1) & on_bottom[:, None]
    rim_vertices = np.flatnonzero(on_side.any(axis=1))

    graph = nx.Graph()
    graph.add_nodes_from(rim_vertices.tolist())
    # Only edges running along one side of the rectangle, not diagonals cutting a corner
    graph.add_edges_from(
        (a, b) for a, b in mesh.edges.tolist() if (on_side[a] & on_side[b]).any()
    )

    if not nx.is_connected(graph) or any(degree != 2 for _, degree in graph.degree()):
        raise ValueError("Outer rim vertices do not form a single closed loop")
    return [a for a, _ in nx.find_cycle(graph)]


def to_trimesh(mesh: Mesh3d) -> trimesh.Trimesh:
    return trimesh.Trimesh(vertices=mesh.vertices, faces=mesh.faces, process=False)


def summarize_mesh(mesh: Mesh3d) -> dict:
    """Watertightness, winding and volume as reported by trimesh."""
    tm = to_trimesh(mesh)
    return {
        "faces": len(mesh.faces),
        "vertices": len(mesh.vertices),
        "boundary_loops": count_boundary_loops(mesh),
        "watertight": bool(tm.is_watertight),
        "winding_consistent": bool(tm.is_winding_consistent),
        "volume": float(tm.volume),
    }
