from .mesh_checks import (
    count_boundary_loops,
    edge_use_counts,
    find_boundary_edges,
    is_closed_manifold,
    outer_rim_loop,
    summarize_mesh,
    to_trimesh,
)
