"""Raster primitives.

Rasters are plain NumPy arrays: scalar rasters are ``(H, W)`` and
multi-channel rasters are ``(H, W, C)``. Rows index ``y`` and columns
index ``x``. Every function here treats its input as read-only and returns
freshly allocated storage.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt

from labelkit.errors import EmptyRasterError, OutOfBoundsError, ShapeMismatchError


@dataclass(frozen=True, slots=True)
class Region:
    """Axis-aligned rectangular window given by origin ``(x, y)`` and size ``(width, height)``."""

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError(f"Region origin must be non-negative, got ({self.x}, {self.y})")
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Region size must be non-negative, got ({self.width}, {self.height})")

    @classmethod
    def full(cls, raster: npt.ArrayLike) -> Region:
        """Largest possible region of ``raster``."""
        height, width = np.shape(raster)[:2]
        return cls(0, 0, width, height)

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width

    @property
    def slices(self) -> tuple[slice, slice]:
        return slice(self.y, self.y + self.height), slice(self.x, self.x + self.width)

    @property
    def n_pixels(self) -> int:
        return self.width * self.height

    def contains(self, other: Region) -> bool:
        return (
            other.x >= self.x
            and other.y >= self.y
            and other.x + other.width <= self.x + self.width
            and other.y + other.height <= self.y + self.height
        )

    def within(self, shape: Sequence[int]) -> bool:
        """Whether this region lies inside a raster of the given ``(H, W, ...)`` shape."""
        height, width = shape[:2]
        return Region(0, 0, width, height).contains(self)


def _as_raster(raster: npt.ArrayLike) -> np.ndarray:
    arr = np.asarray(raster)
    if arr.ndim not in (2, 3):
        raise ValueError(f"Expected raster shaped (H, W) or (H, W, C), got {arr.shape}")
    return arr


def as_label_raster(labels: npt.ArrayLike) -> np.ndarray:
    """Validate a 2D raster of non-negative integer label ids."""
    arr = np.asarray(labels)
    if arr.ndim != 2:
        raise ValueError(f"Expected a 2D label raster, got shape {arr.shape}")
    if not np.issubdtype(arr.dtype, np.integer):
        raise TypeError(f"Label raster must have an integer dtype, got {arr.dtype}")
    if arr.size and arr.min() < 0:
        raise ValueError("Label raster contains negative label ids")
    return arr


def is_multichannel(raster: npt.ArrayLike) -> bool:
    return np.ndim(raster) == 3


def n_components(raster: npt.ArrayLike) -> int:
    """Number of scalar components per pixel."""
    shape = np.shape(raster)
    return shape[2] if len(shape) == 3 else 1


def check_same_shape(labels: npt.ArrayLike, other: npt.ArrayLike, *, what: str = "color raster") -> None:
    """Raise ``ShapeMismatchError`` unless both rasters share their ``(H, W)`` extent."""
    label_shape = np.shape(labels)[:2]
    other_shape = np.shape(other)[:2]
    if label_shape != other_shape:
        raise ShapeMismatchError(f"Shape mismatch: labels={label_shape}, {what}={other_shape}")


def deep_copy(source: npt.ArrayLike) -> np.ndarray:
    arr = _as_raster(source)
    return np.array(arr, dtype=arr.dtype, order="C", copy=True)


def deep_copy_in_region(source: npt.ArrayLike, region: Region) -> np.ndarray:
    """Copy the pixels of ``region`` into a new raster in region-local coordinates."""
    arr = _as_raster(source)
    if not region.within(arr.shape):
        raise OutOfBoundsError(f"{region} is not contained in raster of shape {arr.shape[:2]}")
    return np.array(arr[region.slices], dtype=arr.dtype, order="C", copy=True)


def extract_region(raster: npt.ArrayLike, region: Region) -> np.ndarray:
    # Never a view: callers are free to mutate the crop.
    return deep_copy_in_region(raster, region)


def count_pixels_with_value(raster: npt.ArrayLike, value: Any) -> int:
    """Count pixels equal to ``value``.

    For multi-channel rasters ``value`` is a per-channel sequence and a pixel
    matches only when all of its channels match.
    """
    arr = _as_raster(raster)
    if arr.ndim == 2:
        return int(np.count_nonzero(arr == value))

    target = np.asarray(value)
    if target.shape != (arr.shape[2],):
        raise ShapeMismatchError(
            f"Value {value!r} does not match pixel with {arr.shape[2]} components"
        )
    return int(np.count_nonzero(np.all(arr == target, axis=-1)))


def max_value(raster: npt.ArrayLike) -> Any:
    arr = _as_raster(raster)
    if arr.size == 0:
        raise EmptyRasterError(f"Cannot take the maximum of an empty raster (shape {arr.shape})")
    return arr.max().item()
