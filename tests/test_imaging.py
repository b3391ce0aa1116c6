"""
Tests for image decoding, sampling and the configuration derived grid size.
"""

import os
import sys
import numpy as np
import pytest
from PIL import Image

# Add the parent directory to the Python path so we can import the project packages
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from data_types import ConfigurationError, DegenerateInputError, InputImageError, LithophaneConfig
from imaging import grayscale_grid, image_to_rgb_samples, load_image, resample_image, smooth_image


def test_grayscale_uses_luma_weights_and_256_divisor():
    rgb = np.array([[[255, 255, 255], [255, 0, 0]],
                    [[0, 255, 0], [0, 0, 255]]], dtype=np.uint8)
    grid = grayscale_grid(rgb)

    assert grid.shape == (2, 2)
    assert np.isclose(grid[0, 0], 255 / 256)
    assert np.isclose(grid[1, 0], 255 * 0.3 / 256)
    assert np.isclose(grid[0, 1], 255 * 0.59 / 256)
    assert np.isclose(grid[1, 1], 255 * 0.11 / 256)


def test_grayscale_grid_is_indexed_column_then_row():
    rgb = np.zeros((2, 3, 3), dtype=np.uint8)  # 2 rows, 3 columns
    rgb[1, 2] = 255
    grid = grayscale_grid(rgb)

    assert grid.shape == (3, 2)
    assert grid[2, 1] > 0
    assert np.count_nonzero(grid) == 1


def test_grayscale_mirror_flags():
    rgb = np.zeros((2, 3, 3), dtype=np.uint8)
    rgb[0, 0] = 255
    assert grayscale_grid(rgb, mirror_x=True)[2, 0] > 0
    assert grayscale_grid(rgb, mirror_y=True)[0, 1] > 0
    assert grayscale_grid(rgb, mirror_x=True, mirror_y=True)[2, 1] > 0


def test_grayscale_ignores_alpha_channel():
    rgba = np.full((2, 2, 4), 128, dtype=np.uint8)
    rgba[..., 3] = 0
    np.testing.assert_allclose(grayscale_grid(rgba), grayscale_grid(rgba[..., :3]))


def test_grayscale_rejects_single_channel():
    with pytest.raises(ValueError):
        grayscale_grid(np.zeros((2, 2)))


class TestConfig:
    def test_defaults(self):
        config = LithophaneConfig()
        assert config.binary
        assert not config.negative
        assert not config.mirror_x and not config.mirror_y
        assert config.add_border
        assert not config.fan_back
        assert config.desired_width_mm == 100.0
        assert config.min_thickness_mm == 0.5
        assert config.max_thickness_mm == 3.5
        assert config.border_thickness_mm == 5.0
        assert config.border_width_mm == 4.0
        assert config.step_size_mm == 0.2
        assert config.blur_radius == 0.0

    def test_pixel_grid_size_truncates(self):
        config = LithophaneConfig()
        assert config.pixel_grid_size(1000, 750) == (500, 375)
        # 100 * 500 / 333 = 150.15...
        assert config.pixel_grid_size(333, 100) == (500, 150)

    def test_pixel_width_truncates_float_division(self):
        config = LithophaneConfig(desired_width_mm=10.0, step_size_mm=3.0)
        assert config.pixel_grid_size(30, 30) == (3, 3)

    def test_pixel_grid_too_small(self):
        config = LithophaneConfig(desired_width_mm=0.3, step_size_mm=0.2)
        with pytest.raises(DegenerateInputError):
            config.pixel_grid_size(100, 100)

    def test_very_wide_image_collapses_height(self):
        with pytest.raises(DegenerateInputError):
            LithophaneConfig().pixel_grid_size(10000, 10)

    @pytest.mark.parametrize("kwargs", [
        {"desired_width_mm": 0.0},
        {"step_size_mm": -0.2},
        {"min_thickness_mm": 0.0},
        {"min_thickness_mm": 2.0, "max_thickness_mm": 1.0},
        {"border_thickness_mm": float("nan")},
        {"border_width_mm": float("inf")},
        {"blur_radius": -1.0},
    ])
    def test_invalid_values_are_rejected(self, kwargs):
        with pytest.raises(ConfigurationError):
            LithophaneConfig(**kwargs)

    def test_config_is_immutable(self):
        config = LithophaneConfig()
        with pytest.raises(Exception):
            config.binary = False


def test_load_image_converts_to_rgb(tmp_path):
    path = tmp_path / "gray.png"
    Image.new("LA", (4, 3), (200, 255)).save(path)

    image = load_image(path)
    assert image.mode == "RGB"
    assert image.size == (4, 3)
    samples = image_to_rgb_samples(image)
    assert samples.shape == (3, 4, 3)
    assert np.all(samples == 200)


def test_load_image_missing_file(tmp_path):
    with pytest.raises(InputImageError):
        load_image(tmp_path / "missing.png")


def test_load_image_not_an_image(tmp_path):
    path = tmp_path / "notes.png"
    path.write_text("not an image")
    with pytest.raises(InputImageError):
        load_image(path)


def test_resample_and_smooth_keep_requested_size():
    image = Image.new("RGB", (40, 20), (10, 20, 30))
    resampled = resample_image(image, 10, 5)
    assert resampled.size == (10, 5)
    assert smooth_image(resampled, 2.0).size == (10, 5)
    assert smooth_image(resampled, 0) is resampled
    assert resample_image(resampled, 10, 5) is resampled


def test_smoothing_softens_an_edge():
    image = Image.new("RGB", (20, 4), (0, 0, 0))
    image.paste((255, 255, 255), (10, 0, 20, 4))
    before = image_to_rgb_samples(image)[:, :, 0].astype(float)
    after = image_to_rgb_samples(smooth_image(image, 2.0))[:, :, 0].astype(float)

    assert before[2, 9] == 0
    assert after[2, 9] > 0
    assert after[2, 10] < 255
