"""
Mapping from a luminance grid to per-sample print thickness.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from data_types import DegenerateInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HeightField:
    """
    Thickness in millimeters for every sample of a W x H grid, indexed [column, row].

    Every value lies in [min_thickness, max_thickness].
    """
    heights: NDArray[np.float64]
    min_thickness: float
    max_thickness: float

    def __post_init__(self):
        shape = np.shape(self.heights)
        if len(shape) != 2 or shape[0] < 2 or shape[1] < 2:
            raise DegenerateInputError(f"A height field needs at least 2x2 samples, got {shape}")
        heights = np.array(self.heights, dtype=np.float64)
        heights.setflags(write=False)
        object.__setattr__(self, "heights", heights)

    @property
    def width(self) -> int:
        return self.heights.shape[0]

    @property
    def height(self) -> int:
        return self.heights.shape[1]

    def __getitem__(self, index) -> float:
        return self.heights[index]


def build_height_field(grayscale: NDArray, min_thickness: float, max_thickness: float,
                       negate: bool = False) -> HeightField:
    """
    Map a luminance grid to thicknesses, darker samples becoming thicker.

    The grid is normalized to its own brightness range and written back with the
    column order reversed (height[W-1-i, j] comes from grayscale[i, j]). Together
    with a horizontal mirror applied while building the grayscale grid this
    cancels out, and output orientation depends on both.

    Parameters
    ----------
    grayscale : NDArray
        W x H luminance values in [0, 1].
    min_thickness, max_thickness : float
        Thickness of the brightest and the darkest sample.
    negate : bool
        Use inverted brightness, so bright samples become thick.

    Returns
    -------
    HeightField
        A flat image (no brightness variation) yields the constant mid thickness
        (min_thickness + max_thickness) / 2.
    """
    grayscale = np.asarray(grayscale, dtype=np.float64)
    if grayscale.ndim != 2:
        raise DegenerateInputError(f"Expected a 2D grayscale grid, got shape {grayscale.shape}")

    min_gray = grayscale.min()
    max_gray = grayscale.max()
    gray_range = max_gray - min_gray

    if gray_range > 0:
        normalized = (grayscale - min_gray) / gray_range
        if negate:
            normalized = 1.0 - normalized
    else:
        logger.warning("Image has no brightness variation, using constant thickness %.3f mm",
                       (min_thickness + max_thickness) / 2)
        normalized = np.full(grayscale.shape, 0.5)

    thickness = max_thickness - normalized * (max_thickness - min_thickness)
    # Rounding can push values a hair outside the range
    thickness = np.clip(thickness, min_thickness, max_thickness)

    heights = thickness[::-1, :].copy()
    logger.debug("Height field %dx%d, gray range [%.4f, %.4f]", heights.shape[0], heights.shape[1],
                 min_gray, max_gray)
    return HeightField(heights=heights, min_thickness=min_thickness, max_thickness=max_thickness)
