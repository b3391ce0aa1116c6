"""
Raised frame around the relief.

Seen in cross-section every side of the frame is a rectangle of width
`border_width` and height `border_thickness` standing against the relief edge.
Each side emits, from the relief outward, an inner wall (relief edge to the frame
top), the top shelf, the outer wall and the bottom strip back in to the relief
footprint. The sides meet in mitred corners: the outer rim passes through the
exact corner of the surrounding rectangle and the corner square is split along
its 45 degree diagonal on both the shelf and the bottom.
"""

from dataclasses import dataclass
from typing import Iterator

from data_types import Point3, Triangle
from .primitives import at_height, quad_strip
from .surfaces import BoundarySide


@dataclass(frozen=True)
class BorderDimensions:
    thickness: float
    width: float


def corner_points(sides: list[BoundarySide], border: BorderDimensions) -> list[Point3]:
    """
    Outer rim corners; entry k is where side k-1 meets side k, at z=0.
    """
    corners = []
    for k, side in enumerate(sides):
        previous = sides[k - 1]
        corner = side.points[0].with_z(0.0)
        corners.append(corner + (previous.outward + side.outward) * border.width)
    return corners


def outer_rim(side: BoundarySide, border: BorderDimensions) -> list[Point3]:
    """The side's boundary pushed outward by the border width, at z=0."""
    offset = side.outward * border.width
    return [p.with_z(0.0) + offset for p in side.points]


def border_side_triangles(side: BoundarySide, start_corner: Point3, end_corner: Point3,
                          border: BorderDimensions) -> Iterator[Triangle]:
    top = border.thickness
    inner_top = at_height(side.points, top)
    inner_bottom = at_height(side.points, 0.0)
    outer_bottom = outer_rim(side, border)
    outer_top = at_height(outer_bottom, top)

    # Inner wall folds inward wherever the relief stands taller than the frame
    yield from quad_strip(inner_top, side.points)
    yield from quad_strip(outer_top, inner_top)

    rim = [start_corner] + outer_bottom + [end_corner]
    yield from quad_strip(rim, at_height(rim, top))

    yield from quad_strip(inner_bottom, outer_bottom)


def mitred_corner_triangles(inner_corner: Point3, incoming: Point3, rim_corner: Point3,
                            outgoing: Point3, border: BorderDimensions) -> Iterator[Triangle]:
    """
    Fill the square between two sides' shelves and bottoms.

    `incoming` is the last outer rim point of the side ending at this corner,
    `outgoing` the first outer rim point of the side starting here.
    """
    top = border.thickness
    inner_top, incoming_top, rim_top, outgoing_top = at_height(
        [inner_corner, incoming, rim_corner, outgoing], top)
    yield Triangle(inner_top, incoming_top, rim_top)
    yield Triangle(inner_top, rim_top, outgoing_top)

    inner_bottom, incoming_bottom, rim_bottom, outgoing_bottom = at_height(
        [inner_corner, incoming, rim_corner, outgoing], 0.0)
    yield Triangle(inner_bottom, rim_bottom, incoming_bottom)
    yield Triangle(inner_bottom, outgoing_bottom, rim_bottom)


def border_triangles(sides: list[BoundarySide], border: BorderDimensions) -> Iterator[Triangle]:
    corners = corner_points(sides, border)
    for k, side in enumerate(sides):
        yield from border_side_triangles(side, corners[k], corners[(k + 1) % len(sides)], border)

    for k, side in enumerate(sides):
        previous = sides[k - 1]
        yield from mitred_corner_triangles(
            side.points[0],
            outer_rim(previous, border)[-1],
            corners[k],
            outer_rim(side, border)[0],
            border,
        )
