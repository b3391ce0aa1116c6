"""
Quad and strip helpers. A quad (p1, p2, p3, p4) is always split into the triangles
(p1, p2, p4) and (p2, p3, p4), so its corners must be given counter-clockwise as
seen from outside the solid.
"""

from typing import Iterator, Sequence

from data_types import Point3, Triangle


def quad_triangles(p1: Point3, p2: Point3, p3: Point3, p4: Point3) -> Iterator[Triangle]:
    yield Triangle(p1, p2, p4)
    yield Triangle(p2, p3, p4)


def quad_strip(first: Sequence[Point3], second: Sequence[Point3]) -> Iterator[Triangle]:
    """
    Join two polylines of equal length with quads (first[k], first[k+1], second[k+1], second[k]).

    For a polyline running counter-clockwise around the footprint (seen from +z)
    this faces outward when `second` lies above `first`, and up when `second`
    lies inside `first` on a horizontal plane.
    """
    assert len(first) == len(second), "Strip polylines must have the same number of points"
    for k in range(len(first) - 1):
        yield from quad_triangles(first[k], first[k + 1], second[k + 1], second[k])


def at_height(points: Sequence[Point3], z: float) -> list[Point3]:
    return [p.with_z(z) for p in points]
