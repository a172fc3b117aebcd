"""
Convert a raster image into a two-tone stitch pattern.

The conversion is a straight chain of pure stages: crop and resample the
source to one sample per stitch, apply contrast/brightness, reduce to
luminance, run one pattern algorithm, optionally invert, and reshape into
rows. Nothing is cached between runs.
"""

from typing import NamedTuple

import numpy as np
from PIL import Image

from .algorithms import apply_algorithm, invert_cells, otsu_level
from .params import (
    AlgorithmParams,
    CropRect,
    GridDimensions,
    OtsuThreshold,
    SimpleThreshold,
    ToneParams,
    make_algorithm_params,
)

BinaryGrid = list[list[int]]


class PatternStats(NamedTuple):
    width: int
    height: int
    filled: int
    empty: int

    @property
    def total(self) -> int:
        return self.filled + self.empty


def crop_box(image_size: tuple[int, int], crop: CropRect) -> tuple[float, float, float, float]:
    """Pixel box (left, upper, right, lower) of a clamped crop rectangle."""
    src_w, src_h = image_size
    rect = crop.clamped()
    return (rect.x1 * src_w, rect.y1 * src_h, rect.x2 * src_w, rect.y2 * src_h)


def sample_region(image: Image.Image, crop: CropRect, grid: GridDimensions) -> np.ndarray:
    """
    Sample the cropped region at one point per output cell.

    Returns a uint8 array of shape (height, width, 3). The caller's image is
    not modified; alpha is dropped.
    """
    rgb = image.convert("RGB")
    box = crop_box(rgb.size, crop)
    sampled = rgb.resize((grid.width, grid.height), Image.Resampling.NEAREST, box=box)
    return np.array(sampled, dtype=np.uint8)


def adjust_tone(rgb: np.ndarray, tone: ToneParams) -> np.ndarray:
    """Apply contrast around mid-gray then a brightness offset, per channel."""
    factor = tone.contrast / 100
    offset = (tone.brightness - 100) * 2.55
    adjusted = (np.asarray(rgb, dtype=np.float64) - 128) * factor + 128 + offset
    return np.clip(adjusted, 0, 255)


def to_luminance(rgb: np.ndarray) -> np.ndarray:
    """BT.601 luma, unrounded."""
    rgb = np.asarray(rgb, dtype=np.float64)
    # Integer weights over 1000 keep neutral grays exact (128, 128, 128 -> 128.0)
    return (299 * rgb[..., 0] + 587 * rgb[..., 1] + 114 * rgb[..., 2]) / 1000


def assemble(cells: np.ndarray) -> BinaryGrid:
    """Row-major list of rows; cell (x, y) sits at flat index y * width + x."""
    return [[int(v) for v in row] for row in np.asarray(cells)]


def pattern_stats(grid: BinaryGrid) -> PatternStats:
    height = len(grid)
    width = len(grid[0]) if height else 0
    filled = sum(sum(row) for row in grid)
    return PatternStats(width, height, filled, width * height - filled)


def convert(
    source: Image.Image,
    crop: CropRect | None = None,
    grid: GridDimensions | None = None,
    tone: ToneParams | None = None,
    algorithm: AlgorithmParams | str | None = None,
    invert: bool = False,
    verbose: bool = False,
) -> BinaryGrid:
    """
    Convert an image into a binary stitch grid.

    Args:
        source: Decoded image (any Pillow mode)
        crop: Region to use, as fractions of the image (default: whole image)
        grid: Output size in stitches (default: source size)
        tone: Contrast/brightness correction (default: none)
        algorithm: Parameter variant or algorithm id (default: simple threshold)
        invert: Swap filled and empty cells after the algorithm runs
        verbose: Print progress for each stage

    Returns:
        `grid.height` rows of `grid.width` cells, 1 = filled stitch

    Raises:
        InvalidGeometry, InvalidDimensions, UnsupportedAlgorithm
    """
    crop = (crop or CropRect.full()).validated()
    grid = (grid or GridDimensions(*source.size)).validated()
    tone = tone or ToneParams()
    if algorithm is None:
        algorithm = SimpleThreshold()
    elif isinstance(algorithm, str):
        algorithm = make_algorithm_params(algorithm)

    if verbose:
        print(f"Source image: {source.size[0]}x{source.size[1]}")
        if crop.is_cropped:
            print(f"Crop: ({crop.x1:.2f}, {crop.y1:.2f}) - ({crop.x2:.2f}, {crop.y2:.2f})")

    rgb = sample_region(source, crop, grid)
    if verbose:
        print(f"Sampled {grid.width}x{grid.height} cells")

    rgb = adjust_tone(rgb, tone)
    if verbose and tone != ToneParams():
        print(f"Tone: contrast {tone.contrast}%, brightness {tone.brightness}%")

    gray = to_luminance(rgb)

    if verbose:
        print(f"Algorithm: {algorithm}")
        if isinstance(algorithm, OtsuThreshold):
            print(f"  Otsu level: {otsu_level(gray)}")

    cells = apply_algorithm(gray, algorithm)
    if invert:
        cells = invert_cells(cells)

    pattern = assemble(cells)

    if verbose:
        stats = pattern_stats(pattern)
        print(f"Stitches: {stats.total} ({stats.filled} filled, {stats.empty} empty)")

    return pattern
