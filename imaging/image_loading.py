"""
Image decoding and resampling. Everything downstream works on plain numpy arrays.
"""

import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageFilter, UnidentifiedImageError

from data_types import InputImageError

logger = logging.getLogger(__name__)


def load_image(image_path) -> Image.Image:
    """Open an image file and return it as an RGB image, dropping any alpha channel."""
    image_path = Path(image_path)
    if not image_path.is_file():
        raise InputImageError(f"The file {image_path} does not exist.")
    try:
        with Image.open(image_path) as img:
            img.load()
            logger.info("Loaded %s (%dx%d, mode %s)", image_path, img.width, img.height, img.mode)
            return img.convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise InputImageError(f"Could not decode {image_path}: {e}") from e


def resample_image(image: Image.Image, pixel_width: int, pixel_height: int) -> Image.Image:
    """Scale the image to exactly one pixel per height sample."""
    if image.size == (pixel_width, pixel_height):
        return image
    return image.resize((pixel_width, pixel_height), Image.Resampling.BILINEAR)


def smooth_image(image: Image.Image, radius: float) -> Image.Image:
    """Gaussian blur with the given radius in pixels; a radius of 0 returns the image unchanged."""
    if radius <= 0:
        return image
    return image.filter(ImageFilter.GaussianBlur(radius))


def image_to_rgb_samples(image: Image.Image) -> NDArray[np.uint8]:
    """Return the image as an H x W x 3 array of 8-bit RGB samples."""
    return np.asarray(image.convert("RGB"), dtype=np.uint8)
