"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest
from PIL import Image


def gray_image(values) -> Image.Image:
    """RGB image whose pixels are neutral grays taken from a 2-D array."""
    arr = np.asarray(values, dtype=np.uint8)
    return Image.fromarray(np.stack([arr, arr, arr], axis=-1))


@pytest.fixture
def mid_gray_4x4() -> Image.Image:
    return gray_image(np.full((4, 4), 128))


@pytest.fixture
def checkerboard_2x2() -> Image.Image:
    return gray_image([[0, 255], [255, 0]])


@pytest.fixture
def horizontal_ramp() -> np.ndarray:
    """20x20 luminance field ramping 0 -> 255 left to right."""
    return np.tile(np.linspace(0, 255, 20), (20, 1))


@pytest.fixture
def square_on_white() -> np.ndarray:
    """12x12 white field with a black 4x4 square in the middle."""
    field = np.full((12, 12), 255.0)
    field[4:8, 4:8] = 0.0
    return field
