from dataclasses import dataclass
from typing import Iterable

import numpy as np
import trimesh
from numpy.typing import NDArray


@dataclass
class Mesh3d:
    vertices: NDArray[np.float64]  # V x 3 array of vertex coordinates
    edges: NDArray[np.int64]  # E x 2 array of vertex *indices* which are edge endpoints
    faces: NDArray[np.int64]  # F x 3 array of vertex *indices* which are face corners

    @classmethod
    def from_triangles(cls, triangles: Iterable) -> "Mesh3d":
        """
        Build an indexed mesh from a triangle soup.

        Corners are merged when trimesh hashes them to the same row, which holds for
        every shared corner the mesh builder emits since those are computed identically.
        """
        corners = np.array([[v.as_tuple() for v in triangle.vertices] for triangle in triangles],
                           dtype=np.float64).reshape(-1, 3)
        if len(corners) == 0:
            return cls(
                vertices=np.zeros((0, 3), dtype=np.float64),
                edges=np.zeros((0, 2), dtype=np.int64),
                faces=np.zeros((0, 3), dtype=np.int64),
            )

        unique, inverse = trimesh.grouping.unique_rows(corners, keep_order=True)
        faces = np.asarray(inverse, dtype=np.int64).reshape(-1, 3)

        all_edges = np.sort(faces[:, [0, 1, 1, 2, 2, 0]].reshape(-1, 2), axis=1)
        unique_edges, _ = trimesh.grouping.unique_rows(all_edges, keep_order=True)

        return cls(
            vertices=corners[unique],
            edges=all_edges[unique_edges],
            faces=faces,
        )
