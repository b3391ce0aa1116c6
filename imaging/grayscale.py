import numpy as np
from numpy.typing import NDArray

# Channel weights and divisor of the reference converter. Dividing by 256 keeps
# pure white just below 1.0.
LUMA_WEIGHTS = np.array([0.3, 0.59, 0.11])
LUMA_DIVISOR = 256.0


def grayscale_grid(rgb: NDArray, mirror_x: bool = False, mirror_y: bool = False) -> NDArray[np.float64]:
    """
    Convert H x W x 3 RGB samples into a W x H luminance grid indexed [column, row].

    Parameters
    ----------
    rgb : NDArray
        Image samples in row-major image order, 0-255 per channel.
    mirror_x : bool
        Store column i at index W-1-i.
    mirror_y : bool
        Store row j at index H-1-j.

    Returns
    -------
    NDArray[np.float64]
        Luminance values in [0, 1).
    """
    rgb = np.asarray(rgb, dtype=np.float64)
    if rgb.ndim != 3 or rgb.shape[2] < 3:
        raise ValueError(f"Expected an H x W x 3 sample array, got shape {rgb.shape}")

    luminance = rgb[:, :, :3] @ LUMA_WEIGHTS / LUMA_DIVISOR
    grid = luminance.T.copy()

    if mirror_x:
        grid = grid[::-1, :]
    if mirror_y:
        grid = grid[:, ::-1]
    return np.ascontiguousarray(grid)
