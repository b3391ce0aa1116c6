import math
from dataclasses import dataclass
from typing import Tuple

from .errors import ConfigurationError, DegenerateInputError


@dataclass(frozen=True)
class LithophaneConfig:
    """
    Options for one image-to-STL conversion. All lengths are in millimeters.

    Parameters
    ----------
    binary : bool
        Write binary STL when True, ASCII STL otherwise.
    negative : bool
        Invert the brightness-to-thickness mapping.
    mirror_x, mirror_y : bool
        Flip the image horizontally / vertically before meshing.
    add_border : bool
        Surround the relief with a mitred frame instead of plain side walls.
    fan_back : bool
        Close the back with a single central fan instead of a full quad grid.
    desired_width_mm : float
        Physical width of the relief.
    min_thickness_mm, max_thickness_mm : float
        Thickness of the brightest and darkest pixels.
    border_thickness_mm, border_width_mm : float
        Height of the frame and how far it reaches out from the relief.
    step_size_mm : float
        Distance between adjacent height samples.
    blur_radius : float
        Gaussian smoothing radius in resampled pixels, 0 disables smoothing.
    """
    binary: bool = True
    negative: bool = False
    mirror_x: bool = False
    mirror_y: bool = False
    add_border: bool = True
    fan_back: bool = False
    desired_width_mm: float = 100.0
    min_thickness_mm: float = 0.5
    max_thickness_mm: float = 3.5
    border_thickness_mm: float = 5.0
    border_width_mm: float = 4.0
    step_size_mm: float = 0.2
    blur_radius: float = 0.0

    def __post_init__(self):
        for name in ("desired_width_mm", "step_size_mm", "min_thickness_mm",
                     "border_thickness_mm", "border_width_mm"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive number, got {value}")
        if not math.isfinite(self.max_thickness_mm) or self.max_thickness_mm < self.min_thickness_mm:
            raise ConfigurationError(
                f"max_thickness_mm ({self.max_thickness_mm}) must not be smaller than "
                f"min_thickness_mm ({self.min_thickness_mm})"
            )
        if not math.isfinite(self.blur_radius) or self.blur_radius < 0:
            raise ConfigurationError(f"blur_radius must be zero or positive, got {self.blur_radius}")

    def pixel_grid_size(self, image_width: int, image_height: int) -> Tuple[int, int]:
        """
        Sample grid dimensions for an image of the given size.

        The height is derived with integer truncation, so the aspect ratio is only
        approximately preserved.
        """
        if image_width <= 0 or image_height <= 0:
            raise DegenerateInputError(f"Image has no pixels ({image_width}x{image_height})")
        pixel_width = int(self.desired_width_mm / self.step_size_mm)
        pixel_height = image_height * pixel_width // image_width
        if pixel_width < 2 or pixel_height < 2:
            raise DegenerateInputError(
                f"Sample grid {pixel_width}x{pixel_height} is too small to mesh; "
                f"increase the width or reduce the step size"
            )
        return pixel_width, pixel_height
