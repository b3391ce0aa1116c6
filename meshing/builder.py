import logging
from typing import Iterator, Optional

from data_types import LithophaneConfig, Mesh3d, Triangle
from heightfield import HeightField
from .border import BorderDimensions, border_triangles
from .surfaces import (
    boundary_sides,
    fan_back_triangles,
    front_triangles,
    plain_back_triangles,
    side_wall_triangles,
)

logger = logging.getLogger(__name__)


class MeshBuilder:
    """
    Turns a height field into a closed triangle mesh.

    Sample (i, j) sits at (i * step, j * step) with z equal to its thickness. The
    back lies on z=0, and the sides are closed either by vertical walls or by a
    border frame.

    Parameters
    ----------
    height_field : HeightField
        Thickness for every sample.
    step : float
        Distance between neighbouring samples in millimeters.
    border : BorderDimensions, optional
        Frame dimensions; plain side walls are emitted when None.
    fan_back : bool
        Close the back with a central fan instead of a full grid.
    progress : bool
        Show a progress bar while emitting the front surface.
    """

    def __init__(self, height_field: HeightField, step: float, border: Optional[BorderDimensions] = None,
                 fan_back: bool = False, progress: bool = False):
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        self.height_field = height_field
        self.step = step
        self.border = border
        self.fan_back = fan_back
        self.progress = progress

    @classmethod
    def from_config(cls, height_field: HeightField, config: LithophaneConfig, progress: bool = False) -> "MeshBuilder":
        border = None
        if config.add_border:
            border = BorderDimensions(thickness=config.border_thickness_mm, width=config.border_width_mm)
        return cls(height_field, config.step_size_mm, border=border, fan_back=config.fan_back, progress=progress)

    def boundary_segment_count(self) -> int:
        return 2 * (self.height_field.width - 1) + 2 * (self.height_field.height - 1)

    def expected_triangle_count(self) -> int:
        cells = (self.height_field.width - 1) * (self.height_field.height - 1)
        segments = self.boundary_segment_count()

        count = 2 * cells
        count += segments if self.fan_back else 2 * cells
        if self.border is None:
            count += 2 * segments
        else:
            # inner wall, shelf, outer wall (with corner pieces), bottom, corner joins
            count += 8 * segments + 32
        return count

    def front(self) -> Iterator[Triangle]:
        return front_triangles(self.height_field, self.step, progress=self.progress)

    def back(self) -> Iterator[Triangle]:
        if self.fan_back:
            return fan_back_triangles(self.height_field, self.step)
        return plain_back_triangles(self.height_field, self.step)

    def sides(self) -> Iterator[Triangle]:
        if self.border is None:
            return side_wall_triangles(self.height_field, self.step)
        return border_triangles(boundary_sides(self.height_field, self.step), self.border)

    def triangles(self) -> Iterator[Triangle]:
        """Stream every triangle of the closed mesh: front, back, then sides or frame."""
        logger.info("Meshing %dx%d samples (%s back, %s), %d triangles",
                    self.height_field.width, self.height_field.height,
                    "fan" if self.fan_back else "plain",
                    "border frame" if self.border else "plain walls",
                    self.expected_triangle_count())
        yield from self.front()
        yield from self.back()
        yield from self.sides()

    def build_mesh(self) -> Mesh3d:
        """Collect the triangle stream into an indexed mesh."""
        return Mesh3d.from_triangles(self.triangles())
