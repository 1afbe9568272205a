from __future__ import annotations

from collections.abc import Iterable


class LabelkitError(Exception):
    """Base class for all labelkit failures."""


class OutOfBoundsError(LabelkitError, IndexError):
    """Raised when a requested region extends beyond the raster extent."""


class ShapeMismatchError(LabelkitError, ValueError):
    """Raised when rasters passed to the same operation disagree in size."""


class IndexOutOfRangeError(LabelkitError, IndexError):
    """Raised when a label id exceeds the bounds of a statistics table."""


class UndefinedAverageError(LabelkitError, ValueError):
    """Raised when the average color of a label with zero pixels is requested."""

    def __init__(self, labels: Iterable[int]) -> None:
        self.labels = tuple(int(label) for label in labels)
        shown = ", ".join(map(str, self.labels[:10]))
        if len(self.labels) > 10:
            shown += f", ... ({len(self.labels)} total)"
        super().__init__(f"Average color is undefined for label(s) with no pixels: {shown}")


class UnsupportedPixelTypeError(LabelkitError, TypeError):
    """Raised when a scalar-only operation receives multi-channel data."""


class EmptyRasterError(LabelkitError, ValueError):
    """Raised when a reduction is requested over a raster without pixels."""


class CorruptedImageError(LabelkitError, RuntimeError):
    """Raised when an image file cannot be read."""

    def __init__(self, path, cause: Exception) -> None:
        super().__init__(f"File {path} could not be read. Please check the file.")
        self.path = path
        self.__cause__ = cause
