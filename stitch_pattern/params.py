"""Parameter types for image-to-pattern conversion.

Each pattern algorithm has its own frozen dataclass carrying only the
parameters it reads, so an edge sensitivity can never reach Otsu and a dither
strength can never reach the Sobel detector.
"""

import math
import numbers
from dataclasses import dataclass, fields
from typing import ClassVar, Union

from .errors import InvalidDimensions, InvalidGeometry, UnsupportedAlgorithm

# Smallest crop extent the crop editor allows (fraction of the image side)
MIN_CROP_EXTENT = 0.05

# Grid size limits offered to the user
MIN_GRID_SIZE = 10
MAX_GRID_SIZE = 200

# Anything past this is treated as a caller bug, not a big pattern
MAX_GRID_DIMENSION = 10000


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class CropRect:
    """Crop region as fractions of the source image size."""

    x1: float = 0.0
    y1: float = 0.0
    x2: float = 1.0
    y2: float = 1.0

    @classmethod
    def full(cls) -> "CropRect":
        return cls()

    def clamped(self) -> "CropRect":
        return CropRect(_clamp01(self.x1), _clamp01(self.y1), _clamp01(self.x2), _clamp01(self.y2))

    @property
    def is_cropped(self) -> bool:
        """True when any edge sits noticeably inside the image border."""
        return self.x1 > 0.01 or self.y1 > 0.01 or self.x2 < 0.99 or self.y2 < 0.99

    def validated(self) -> "CropRect":
        """Return the clamped rectangle, or raise InvalidGeometry if it is degenerate."""
        if any(math.isnan(v) for v in (self.x1, self.y1, self.x2, self.y2)):
            raise InvalidGeometry(f"Crop rectangle contains NaN: {self}")
        rect = self.clamped()
        if rect.x2 <= rect.x1 or rect.y2 <= rect.y1:
            raise InvalidGeometry(
                f"Crop rectangle has no area after clamping: "
                f"({rect.x1:.3f}, {rect.y1:.3f}) - ({rect.x2:.3f}, {rect.y2:.3f})"
            )
        return rect


def clamp_grid_size(value: int) -> int:
    """Clamp a requested grid side into the range offered to the user."""
    return max(MIN_GRID_SIZE, min(MAX_GRID_SIZE, int(value)))


@dataclass(frozen=True)
class GridDimensions:
    """Output grid size in stitches."""

    width: int
    height: int

    @classmethod
    def from_width(cls, width: int, aspect: float) -> "GridDimensions":
        """Keep `aspect` (width / height) while setting the width."""
        width = clamp_grid_size(width)
        return cls(width, clamp_grid_size(round(width / aspect)))

    @classmethod
    def from_height(cls, height: int, aspect: float) -> "GridDimensions":
        """Keep `aspect` (width / height) while setting the height."""
        height = clamp_grid_size(height)
        return cls(clamp_grid_size(round(height * aspect)), height)

    @property
    def cell_count(self) -> int:
        return self.width * self.height

    def validated(self) -> "GridDimensions":
        """Return the size with plain int sides, or raise InvalidDimensions."""
        for name in ("width", "height"):
            value = getattr(self, name)
            # numpy integers count; bools do not
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidDimensions(f"Grid {name} must be an integer, got {value!r}")
            if value < 1 or value > MAX_GRID_DIMENSION:
                raise InvalidDimensions(f"Grid {name} out of range: {value}")
        return GridDimensions(int(self.width), int(self.height))


@dataclass(frozen=True)
class ToneParams:
    """Contrast and brightness in percent; 100/100 leaves pixels untouched."""

    contrast: float = 100
    brightness: float = 100


# ---------------------------------------------------------------------------
# Algorithm parameter variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SimpleThreshold:
    algorithm: ClassVar[str] = "threshold"

    threshold: float = 128


@dataclass(frozen=True)
class OtsuThreshold:
    """Threshold picked from the luminance histogram; nothing to tune."""

    algorithm: ClassVar[str] = "otsu"


@dataclass(frozen=True)
class FloydSteinberg:
    algorithm: ClassVar[str] = "floydSteinberg"

    threshold: float = 128
    dither_strength: float = 100


@dataclass(frozen=True)
class Atkinson:
    algorithm: ClassVar[str] = "atkinson"

    threshold: float = 128
    dither_strength: float = 100


@dataclass(frozen=True)
class OrderedDither:
    algorithm: ClassVar[str] = "ordered"

    threshold: float = 128
    dither_strength: float = 100


@dataclass(frozen=True)
class AdaptiveThreshold:
    algorithm: ClassVar[str] = "adaptive"

    threshold: float = 128
    block_size: int = 11

    @property
    def effective_block_size(self) -> int:
        """Window side actually used: odd and at least 3."""
        return max(3, int(self.block_size) | 1)


@dataclass(frozen=True)
class SobelEdges:
    algorithm: ClassVar[str] = "sobel"

    edge_sensitivity: float = 40


AlgorithmParams = Union[
    SimpleThreshold,
    OtsuThreshold,
    FloydSteinberg,
    Atkinson,
    OrderedDither,
    AdaptiveThreshold,
    SobelEdges,
]

ALGORITHMS: dict[str, type] = {
    cls.algorithm: cls
    for cls in (
        SimpleThreshold,
        OtsuThreshold,
        FloydSteinberg,
        Atkinson,
        OrderedDither,
        AdaptiveThreshold,
        SobelEdges,
    )
}


def make_algorithm_params(algorithm: str, **values) -> AlgorithmParams:
    """
    Build the parameter variant for an algorithm identifier.

    Values the variant does not declare are dropped, and None means "use the
    default", so a caller can pass every control it has without knowing which
    ones the algorithm reads.
    """
    try:
        cls = ALGORITHMS[algorithm]
    except KeyError:
        known = ", ".join(ALGORITHMS)
        raise UnsupportedAlgorithm(f"Unknown algorithm {algorithm!r} (expected one of: {known})") from None

    names = {f.name for f in fields(cls)}
    kwargs = {k: v for k, v in values.items() if k in names and v is not None}
    return cls(**kwargs)
