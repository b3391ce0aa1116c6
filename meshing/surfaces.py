"""
Front, back and side surfaces of the relief.
"""

from dataclasses import dataclass
from typing import Iterator

from tqdm import trange

from data_types import Point3, Triangle
from heightfield import HeightField
from .primitives import at_height, quad_strip, quad_triangles


@dataclass(frozen=True)
class BoundarySide:
    """
    One edge of the footprint: the front-surface points along it, ordered
    counter-clockwise seen from +z and including both corners, plus the unit
    vector pointing away from the relief.
    """
    points: list[Point3]
    outward: Point3


def grid_point(height_field: HeightField, step: float, i: int, j: int) -> Point3:
    return Point3(i * step, j * step, float(height_field.heights[i, j]))


def boundary_sides(height_field: HeightField, step: float) -> list[BoundarySide]:
    """Return the bottom, right, top and left sides, in that (counter-clockwise) order."""
    last_i = height_field.width - 1
    last_j = height_field.height - 1

    def point(i, j):
        return grid_point(height_field, step, i, j)

    return [
        BoundarySide([point(i, 0) for i in range(0, last_i + 1)], Point3(0.0, -1.0, 0.0)),
        BoundarySide([point(last_i, j) for j in range(0, last_j + 1)], Point3(1.0, 0.0, 0.0)),
        BoundarySide([point(i, last_j) for i in range(last_i, -1, -1)], Point3(0.0, 1.0, 0.0)),
        BoundarySide([point(0, j) for j in range(last_j, -1, -1)], Point3(-1.0, 0.0, 0.0)),
    ]


def boundary_loop(sides: list[BoundarySide]) -> list[Point3]:
    """Closed boundary as a list without repeated corners."""
    loop = []
    for side in sides:
        loop.extend(side.points[:-1])
    return loop


def front_triangles(height_field: HeightField, step: float, progress: bool = False) -> Iterator[Triangle]:
    """The relief surface, two triangles per grid cell."""
    heights = height_field.heights
    for i in trange(height_field.width - 1, desc="Front surface", disable=None if progress else True):
        x0 = i * step
        x1 = (i + 1) * step
        for j in range(height_field.height - 1):
            y0 = j * step
            y1 = (j + 1) * step
            yield from quad_triangles(
                Point3(x0, y0, float(heights[i, j])),
                Point3(x1, y0, float(heights[i + 1, j])),
                Point3(x1, y1, float(heights[i + 1, j + 1])),
                Point3(x0, y1, float(heights[i, j + 1])),
            )


def plain_back_triangles(height_field: HeightField, step: float) -> Iterator[Triangle]:
    """A flat z=0 grid with one quad under every front quad, facing down."""
    for i in range(height_field.width - 1):
        x0 = i * step
        x1 = (i + 1) * step
        for j in range(height_field.height - 1):
            y0 = j * step
            y1 = (j + 1) * step
            yield from quad_triangles(
                Point3(x0, y0, 0.0),
                Point3(x0, y1, 0.0),
                Point3(x1, y1, 0.0),
                Point3(x1, y0, 0.0),
            )


def fan_back_triangles(height_field: HeightField, step: float) -> Iterator[Triangle]:
    """
    A flat z=0 back made of one triangle per boundary segment, all sharing an apex
    at the center of the footprint.
    """
    loop = at_height(boundary_loop(boundary_sides(height_field, step)), 0.0)
    apex = Point3((height_field.width - 1) * step / 2, (height_field.height - 1) * step / 2, 0.0)
    for k, start in enumerate(loop):
        end = loop[(k + 1) % len(loop)]
        yield Triangle(apex, end, start)


def side_wall_triangles(height_field: HeightField, step: float) -> Iterator[Triangle]:
    """Vertical walls from the front boundary down to z=0 along all four sides."""
    for side in boundary_sides(height_field, step):
        yield from quad_strip(at_height(side.points, 0.0), side.points)
