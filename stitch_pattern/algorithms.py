"""
Pattern algorithms: turn a luminance field into a 0/1 stitch field.

Every function takes a 2-D float array of luminance values (0-255, row-major,
shape (height, width)) and returns a uint8 array of the same shape where 1
means the cell came out darker than its decision boundary.
"""

import numpy as np
from scipy.ndimage import sobel

from .errors import UnsupportedAlgorithm
from .params import (
    AdaptiveThreshold,
    AlgorithmParams,
    Atkinson,
    FloydSteinberg,
    OrderedDither,
    OtsuThreshold,
    SimpleThreshold,
    SobelEdges,
)

# (dx, dy, weight) taps, all pointing at cells not yet visited in a row-major scan
FLOYD_STEINBERG_KERNEL = (
    (1, 0, 7 / 16),
    (-1, 1, 3 / 16),
    (0, 1, 5 / 16),
    (1, 1, 1 / 16),
)

# Six taps of 1/8: a quarter of the error is dropped on purpose
ATKINSON_KERNEL = (
    (1, 0, 1 / 8),
    (2, 0, 1 / 8),
    (-1, 1, 1 / 8),
    (0, 1, 1 / 8),
    (1, 1, 1 / 8),
    (0, 2, 1 / 8),
)

BAYER_4X4 = np.array([
    [0, 8, 2, 10],
    [12, 4, 14, 6],
    [3, 11, 1, 9],
    [15, 7, 13, 5],
], dtype=np.float64)


def simple_threshold(gray: np.ndarray, threshold: float) -> np.ndarray:
    """Cell is dark iff its luminance is strictly below the threshold."""
    return (gray < threshold).astype(np.uint8)


def otsu_level(gray: np.ndarray) -> int:
    """
    Pick the histogram split that maximizes between-class variance.

    Luminance is rounded half-up into 256 bins. Candidate levels are scanned
    in ascending order and the first maximum wins; a field with no usable
    split (a single populated bin) gives level 0.
    """
    bins = np.clip(np.floor(gray + 0.5), 0, 255).astype(np.int64).ravel()
    hist = np.bincount(bins, minlength=256).astype(np.float64)
    levels = np.arange(256, dtype=np.float64)

    total = hist.sum()
    w_back = np.cumsum(hist)
    w_fore = total - w_back
    sum_back = np.cumsum(levels * hist)
    sum_all = sum_back[-1]

    valid = (w_back > 0) & (w_fore > 0)
    between = np.zeros(256, dtype=np.float64)
    if not valid.any():
        return 0

    m_back = sum_back[valid] / w_back[valid]
    m_fore = (sum_all - sum_back[valid]) / w_fore[valid]
    between[valid] = w_back[valid] * w_fore[valid] * (m_back - m_fore) ** 2

    if between.max() <= 0:
        return 0
    # argmax returns the first index of the maximum
    return int(np.argmax(between))


def otsu_threshold(gray: np.ndarray) -> np.ndarray:
    return simple_threshold(gray, otsu_level(gray))


def error_diffusion(
    gray: np.ndarray,
    threshold: float,
    dither_strength: float,
    kernel: tuple[tuple[int, int, float], ...],
) -> np.ndarray:
    """
    Row-major error diffusion against a fixed threshold.

    Each cell is quantized to 0 or 255 using the luminance plus whatever error
    earlier cells pushed into it, then the scaled quantization error is spread
    to the kernel taps that fall inside the grid.
    """
    height, width = gray.shape
    strength = dither_strength / 100
    # Private buffer: later cells read corrections written by earlier ones
    err = np.array(gray, dtype=np.float64, copy=True)
    result = np.zeros((height, width), dtype=np.uint8)

    for y in range(height):
        row = err[y]
        for x in range(width):
            old = row[x]
            new_val = 0.0 if old < threshold else 255.0
            if new_val == 0.0:
                result[y, x] = 1
            spread_error(err, x, y, (old - new_val) * strength, kernel)

    return result


def spread_error(
    err: np.ndarray,
    x: int,
    y: int,
    quant: float,
    kernel: tuple[tuple[int, int, float], ...],
) -> None:
    """Add quant * weight to each kernel tap of (x, y) that lies inside err."""
    height, width = err.shape
    for dx, dy, weight in kernel:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and ny < height:
            err[ny, nx] += quant * weight


def floyd_steinberg(gray: np.ndarray, threshold: float, dither_strength: float) -> np.ndarray:
    return error_diffusion(gray, threshold, dither_strength, FLOYD_STEINBERG_KERNEL)


def atkinson(gray: np.ndarray, threshold: float, dither_strength: float) -> np.ndarray:
    return error_diffusion(gray, threshold, dither_strength, ATKINSON_KERNEL)


def ordered_dither(gray: np.ndarray, threshold: float, dither_strength: float) -> np.ndarray:
    """Compare each cell against the threshold shifted by a tiled 4x4 Bayer matrix."""
    height, width = gray.shape
    ys, xs = np.indices((height, width))
    offsets = (BAYER_4X4[ys % 4, xs % 4] / 16 - 0.5) * 128 * (dither_strength / 100)
    return (gray < threshold + offsets).astype(np.uint8)


def local_mean(gray: np.ndarray, block_size: int) -> np.ndarray:
    """
    Mean over a block_size x block_size window centered on each cell.

    Windows are clipped at the grid edge, so border cells average fewer
    samples. Uses a summed-area table.
    """
    height, width = gray.shape
    half = block_size // 2

    table = np.zeros((height + 1, width + 1), dtype=np.float64)
    table[1:, 1:] = np.cumsum(np.cumsum(gray, axis=0), axis=1)

    rows = np.arange(height)
    cols = np.arange(width)
    y0 = np.clip(rows - half, 0, height)
    y1 = np.clip(rows + half + 1, 0, height)
    x0 = np.clip(cols - half, 0, width)
    x1 = np.clip(cols + half + 1, 0, width)

    sums = (
        table[np.ix_(y1, x1)]
        - table[np.ix_(y0, x1)]
        - table[np.ix_(y1, x0)]
        + table[np.ix_(y0, x0)]
    )
    counts = np.outer(y1 - y0, x1 - x0)
    return sums / counts


def adaptive_threshold(gray: np.ndarray, threshold: float, block_size: int) -> np.ndarray:
    """
    Dark iff the cell is below its neighborhood mean, offset by (threshold - 128) / 4.

    block_size is used as given; AdaptiveThreshold.effective_block_size makes it odd.
    """
    mean = local_mean(gray, block_size)
    return (gray < mean - (threshold - 128) / 4).astype(np.uint8)


def sobel_edges(gray: np.ndarray, edge_sensitivity: float) -> np.ndarray:
    """Mark interior cells whose Sobel gradient magnitude exceeds edge_sensitivity * 2."""
    height, width = gray.shape
    result = np.zeros((height, width), dtype=np.uint8)
    if height < 3 or width < 3:
        return result

    gray = np.asarray(gray, dtype=np.float64)
    gx = sobel(gray, axis=1)
    gy = sobel(gray, axis=0)
    magnitude = np.sqrt(gx * gx + gy * gy)

    # Border cells have an incomplete 3x3 neighborhood and stay 0
    inner = magnitude[1:-1, 1:-1] > edge_sensitivity * 2
    result[1:-1, 1:-1] = inner
    return result


def apply_algorithm(gray: np.ndarray, params: AlgorithmParams) -> np.ndarray:
    """Run the algorithm selected by the parameter variant."""
    if isinstance(params, SimpleThreshold):
        return simple_threshold(gray, params.threshold)
    if isinstance(params, OtsuThreshold):
        return otsu_threshold(gray)
    if isinstance(params, FloydSteinberg):
        return floyd_steinberg(gray, params.threshold, params.dither_strength)
    if isinstance(params, Atkinson):
        return atkinson(gray, params.threshold, params.dither_strength)
    if isinstance(params, OrderedDither):
        return ordered_dither(gray, params.threshold, params.dither_strength)
    if isinstance(params, AdaptiveThreshold):
        return adaptive_threshold(gray, params.threshold, params.effective_block_size)
    if isinstance(params, SobelEdges):
        return sobel_edges(gray, params.edge_sensitivity)
    raise UnsupportedAlgorithm(f"Unsupported algorithm parameters: {params!r}")


def invert_cells(cells: np.ndarray) -> np.ndarray:
    """Swap filled and empty cells."""
    return (1 - np.asarray(cells, dtype=np.uint8)).astype(np.uint8)
