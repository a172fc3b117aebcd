"""Tests for the conversion pipeline stages and the convert() entry point."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from conftest import gray_image
from stitch_pattern.core import (
    adjust_tone,
    assemble,
    convert,
    crop_box,
    pattern_stats,
    sample_region,
    to_luminance,
)
from stitch_pattern.errors import InvalidDimensions, InvalidGeometry, UnsupportedAlgorithm
from stitch_pattern.params import (
    AdaptiveThreshold,
    CropRect,
    GridDimensions,
    OrderedDither,
    SimpleThreshold,
    SobelEdges,
    ToneParams,
)


def half_and_half(width: int = 10, height: int = 10) -> Image.Image:
    """Left half black, right half white."""
    arr = np.zeros((height, width), dtype=np.uint8)
    arr[:, width // 2:] = 255
    return gray_image(arr)


class TestSampling:
    def test_crop_box_scales_fractions(self):
        assert crop_box((200, 100), CropRect(0.25, 0.5, 0.75, 1.0)) == (50.0, 50.0, 150.0, 100.0)

    def test_crop_box_clamps(self):
        assert crop_box((10, 10), CropRect(-0.5, -1.0, 2.0, 1.5)) == (0.0, 0.0, 10.0, 10.0)

    def test_full_crop_same_size_is_identity(self):
        rng = np.random.default_rng(3)
        arr = rng.integers(0, 256, size=(6, 8, 3), dtype=np.uint8)
        img = Image.fromarray(arr)
        sampled = sample_region(img, CropRect.full(), GridDimensions(8, 6))
        assert np.array_equal(sampled, arr)

    def test_crop_selects_region(self):
        img = half_and_half()
        sampled = sample_region(img, CropRect(0.5, 0.0, 1.0, 1.0), GridDimensions(5, 5))
        assert sampled.shape == (5, 5, 3)
        assert (sampled == 255).all()

    def test_output_shape_follows_grid_not_crop(self):
        img = half_and_half(40, 20)
        sampled = sample_region(img, CropRect(0.1, 0.1, 0.9, 0.6), GridDimensions(13, 31))
        assert sampled.shape == (31, 13, 3)

    def test_alpha_is_dropped(self):
        img = Image.new("RGBA", (4, 4), (10, 20, 30, 0))
        sampled = sample_region(img, CropRect.full(), GridDimensions(2, 2))
        assert sampled.shape == (2, 2, 3)
        assert sampled[0, 0].tolist() == [10, 20, 30]


class TestTone:
    def test_identity(self):
        rng = np.random.default_rng(11)
        rgb = rng.integers(0, 256, size=(5, 7, 3)).astype(np.uint8)
        assert np.array_equal(adjust_tone(rgb, ToneParams(100, 100)), rgb.astype(np.float64))

    def test_contrast_stretches_around_mid_gray(self):
        rgb = np.array([[[100, 128, 156]]], dtype=np.uint8)
        out = adjust_tone(rgb, ToneParams(contrast=200, brightness=100))
        assert out.tolist() == [[[72.0, 128.0, 184.0]]]

    def test_brightness_offset(self):
        rgb = np.array([[[100, 100, 100]]], dtype=np.uint8)
        out = adjust_tone(rgb, ToneParams(contrast=100, brightness=120))
        assert out[0, 0, 0] == pytest.approx(151.0)

    def test_clamped_to_byte_range(self):
        rgb = np.array([[[0, 255, 128]]], dtype=np.uint8)
        out = adjust_tone(rgb, ToneParams(contrast=200, brightness=150))
        assert out.min() >= 0
        assert out.max() <= 255
        assert out[0, 0, 1] == 255.0

    def test_channels_are_independent(self):
        rgb = np.array([[[0, 128, 255]]], dtype=np.uint8)
        out = adjust_tone(rgb, ToneParams(contrast=50, brightness=100))
        assert out.tolist() == [[[64.0, 128.0, 191.5]]]


class TestLuminance:
    def test_neutral_gray_is_exact(self):
        assert to_luminance(np.array([[[128, 128, 128]]]))[0, 0] == 128.0

    def test_bt601_weights(self):
        rgb = np.array([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], dtype=np.float64)
        assert to_luminance(rgb)[0].tolist() == pytest.approx([76.245, 149.685, 29.07])

    def test_not_rounded(self):
        assert to_luminance(np.array([[[1, 0, 0]]]))[0, 0] == pytest.approx(0.299)


class TestAssembly:
    def test_row_major(self):
        cells = np.array([1, 0, 0, 1, 1, 1], dtype=np.uint8).reshape(2, 3)
        assert assemble(cells) == [[1, 0, 0], [1, 1, 1]]

    def test_plain_ints(self):
        grid = assemble(np.ones((2, 2), dtype=np.uint8))
        assert all(type(v) is int for row in grid for v in row)

    def test_stats(self):
        stats = pattern_stats([[1, 0, 0], [1, 1, 0]])
        assert (stats.width, stats.height, stats.filled, stats.empty) == (3, 2, 3, 3)
        assert stats.total == 6


class TestConvert:
    def test_uniform_mid_gray_is_empty(self, mid_gray_4x4):
        grid = convert(mid_gray_4x4, CropRect.full(), GridDimensions(4, 4), ToneParams(), SimpleThreshold(128))
        assert grid == [[0] * 4 for _ in range(4)]

    def test_uniform_mid_gray_inverted_is_filled(self, mid_gray_4x4):
        grid = convert(
            mid_gray_4x4, CropRect.full(), GridDimensions(4, 4), ToneParams(), SimpleThreshold(128), invert=True
        )
        assert grid == [[1] * 4 for _ in range(4)]

    def test_checkerboard(self, checkerboard_2x2):
        grid = convert(checkerboard_2x2, CropRect.full(), GridDimensions(2, 2), ToneParams(), SimpleThreshold(128))
        assert grid == [[1, 0], [0, 1]]

    def test_double_inversion_restores_grid(self, checkerboard_2x2):
        grid = convert(checkerboard_2x2, grid=GridDimensions(2, 2), invert=True)
        flipped = [[1 - v for v in row] for row in grid]
        assert flipped == convert(checkerboard_2x2, grid=GridDimensions(2, 2))

    def test_defaults(self, checkerboard_2x2):
        assert convert(checkerboard_2x2) == [[1, 0], [0, 1]]

    def test_algorithm_by_id(self, mid_gray_4x4):
        grid = convert(mid_gray_4x4, grid=GridDimensions(4, 4), algorithm="otsu")
        assert grid == [[0] * 4 for _ in range(4)]

    def test_unknown_algorithm_id(self, mid_gray_4x4):
        with pytest.raises(UnsupportedAlgorithm):
            convert(mid_gray_4x4, algorithm="halftone")

    def test_tone_applies_before_threshold(self, mid_gray_4x4):
        darker = ToneParams(contrast=100, brightness=90)
        grid = convert(mid_gray_4x4, grid=GridDimensions(4, 4), tone=darker)
        assert grid == [[1] * 4 for _ in range(4)]

    def test_crop(self):
        img = half_and_half(20, 20)
        grid = convert(img, CropRect(0.0, 0.0, 0.5, 1.0), GridDimensions(10, 10))
        assert all(v == 1 for row in grid for v in row)

    def test_shape(self):
        img = half_and_half(64, 48)
        for params in (OrderedDither(), AdaptiveThreshold(), SobelEdges()):
            grid = convert(img, grid=GridDimensions(17, 9), algorithm=params)
            assert len(grid) == 9
            assert all(len(row) == 17 for row in grid)

    def test_adaptive_on_uniform_image(self, mid_gray_4x4):
        grid = convert(mid_gray_4x4, grid=GridDimensions(4, 4), algorithm=AdaptiveThreshold())
        assert grid == [[0] * 4 for _ in range(4)]

    def test_idempotent(self):
        img = half_and_half(30, 30)
        args = (img, CropRect(0.1, 0.2, 0.8, 0.9), GridDimensions(12, 12), ToneParams(120, 95), "floydSteinberg")
        assert convert(*args) == convert(*args)

    def test_source_not_modified(self):
        img = Image.new("RGBA", (8, 8), (200, 50, 50, 128))
        before = img.tobytes()
        convert(img, grid=GridDimensions(4, 4))
        assert img.mode == "RGBA"
        assert img.tobytes() == before

    def test_verbose_output(self, mid_gray_4x4, capsys):
        convert(mid_gray_4x4, grid=GridDimensions(4, 4), algorithm="otsu", verbose=True)
        out = capsys.readouterr().out
        assert "Otsu level: 0" in out
        assert "Stitches: 16" in out

    def test_quiet_by_default(self, mid_gray_4x4, capsys):
        convert(mid_gray_4x4)
        assert capsys.readouterr().out == ""


class TestConvertErrors:
    @pytest.mark.parametrize(
        "crop",
        [
            CropRect(0.5, 0.0, 0.5, 1.0),
            CropRect(0.0, 0.8, 1.0, 0.2),
            CropRect(1.2, 0.0, 1.5, 1.0),
            CropRect(float("nan"), 0.0, 1.0, 1.0),
        ],
    )
    def test_degenerate_crop(self, mid_gray_4x4, crop):
        with pytest.raises(InvalidGeometry):
            convert(mid_gray_4x4, crop=crop)

    def test_out_of_range_crop_is_clamped(self, mid_gray_4x4):
        grid = convert(mid_gray_4x4, crop=CropRect(-0.5, -0.5, 1.5, 1.5), grid=GridDimensions(4, 4))
        assert len(grid) == 4

    @pytest.mark.parametrize("dims", [(0, 10), (10, -1), (10, 20000), (10.5, 10), (True, 10)])
    def test_bad_dimensions(self, mid_gray_4x4, dims):
        with pytest.raises(InvalidDimensions):
            convert(mid_gray_4x4, grid=GridDimensions(*dims))

    def test_errors_are_value_errors(self, mid_gray_4x4):
        with pytest.raises(ValueError):
            convert(mid_gray_4x4, grid=GridDimensions(0, 0))

    def test_numpy_integer_dimensions(self, mid_gray_4x4):
        # e.g. sides read out of an array of sizes
        grid = convert(mid_gray_4x4, grid=GridDimensions(*np.array([3, 2])))
        assert grid == [[0, 0, 0], [0, 0, 0]]

        dims = GridDimensions(np.int64(4), np.int32(5)).validated()
        assert dims == GridDimensions(4, 5)
        assert type(dims.width) is int
        assert type(dims.height) is int
