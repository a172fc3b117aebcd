"""Errors raised when a conversion is asked to run on malformed input."""


class InvalidInput(ValueError):
    """Base class for caller contract violations."""


class InvalidGeometry(InvalidInput):
    """Crop rectangle is degenerate or outside [0, 1] after clamping."""


class InvalidDimensions(InvalidInput):
    """Grid width/height is non-positive or absurdly large."""


class UnsupportedAlgorithm(InvalidInput):
    """Unknown pattern algorithm identifier."""
