"""Default settings shown when the user picks an algorithm.

Only callers read this table; the conversion pipeline takes whatever
parameters it is given.
"""

from dataclasses import dataclass

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
    ToneParams,
)

GROUPS: dict[str, tuple[str, str]] = {
    "basic": ("Basic", "Simple approaches for clean, bold patterns"),
    "dithering": ("Dithering", "Creates texture using dot patterns for more detail"),
    "advanced": ("Advanced", "Specialized techniques for specific needs"),
}


@dataclass(frozen=True)
class Preset:
    name: str
    description: str
    group: str
    tone: ToneParams
    params: AlgorithmParams


PRESETS: dict[str, Preset] = {
    "threshold": Preset(
        "Simple",
        "Basic light/dark cutoff. Best for high-contrast images.",
        "basic",
        ToneParams(contrast=100, brightness=100),
        SimpleThreshold(threshold=128),
    ),
    "otsu": Preset(
        "Auto",
        "Automatically finds the best cutoff point.",
        "basic",
        ToneParams(contrast=110, brightness=100),
        OtsuThreshold(),
    ),
    "floydSteinberg": Preset(
        "Floyd-Steinberg",
        "Classic dithering with smooth gradients. Great for photos.",
        "dithering",
        ToneParams(contrast=100, brightness=100),
        FloydSteinberg(threshold=128, dither_strength=100),
    ),
    "atkinson": Preset(
        "Atkinson",
        "Lighter dithering, preserves highlights. Retro Mac look.",
        "dithering",
        ToneParams(contrast=110, brightness=105),
        Atkinson(threshold=128, dither_strength=100),
    ),
    "ordered": Preset(
        "Ordered",
        "Regular dot pattern. Clean, geometric look.",
        "dithering",
        ToneParams(contrast=100, brightness=100),
        OrderedDither(threshold=128, dither_strength=80),
    ),
    "adaptive": Preset(
        "Adaptive",
        "Adjusts locally for uneven lighting. Good for photos with shadows.",
        "advanced",
        ToneParams(contrast=100, brightness=100),
        AdaptiveThreshold(threshold=128, block_size=11),
    ),
    "sobel": Preset(
        "Edges Only",
        "Shows only outlines. Great for line art or coloring patterns.",
        "advanced",
        ToneParams(contrast=120, brightness=100),
        SobelEdges(edge_sensitivity=40),
    ),
}


def preset_for(algorithm: str) -> Preset:
    try:
        return PRESETS[algorithm]
    except KeyError:
        raise UnsupportedAlgorithm(f"No preset for algorithm {algorithm!r}") from None


def algorithms_in_group(group: str) -> list[str]:
    """Algorithm ids in a group, in display order."""
    return [key for key, preset in PRESETS.items() if preset.group == group]
