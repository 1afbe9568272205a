"""Thin file and display helpers around tifffile and scikit-image."""

from __future__ import annotations

from contextlib import suppress
from pathlib import Path
from typing import Any, Callable

import numpy as np
import numpy.typing as npt
from loguru import logger
from skimage.exposure import rescale_intensity
from tifffile import imread
from tifffile import imwrite as tifffile_imwrite

from labelkit.colorize import cast_colors
from labelkit.errors import CorruptedImageError, UnsupportedPixelTypeError
from labelkit.raster import Region, extract_region, is_multichannel


def read_image(path: Path | str) -> np.ndarray:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image does not exist: {path}")
    try:
        return imread(path)
    except Exception as e:
        raise CorruptedImageError(path, e) from e


def write_image(
    raster: npt.ArrayLike,
    path: Path | str,
    *,
    imwrite_func: Callable[..., Any] = tifffile_imwrite,
    partial_suffix: str = ".partial",
    **kwargs: Any,
) -> Path:
    """Write ``raster`` atomically through a temporary ``.partial`` file.

    Readers never observe a half-written file; on failure the temporary
    file is removed and the exception propagates.
    """
    final_path = Path(path)
    final_path.parent.mkdir(parents=True, exist_ok=True)
    partial_path = final_path.with_name(f"{final_path.name}{partial_suffix}")

    if partial_path.exists():
        partial_path.unlink()

    try:
        imwrite_func(partial_path, np.asarray(raster), **kwargs)
    except Exception:
        with suppress(FileNotFoundError):
            partial_path.unlink()
        raise

    partial_path.replace(final_path)
    logger.debug(f"Wrote {np.shape(raster)} raster to {final_path}")
    return final_path


def rescale_to_display_range(scalar: npt.ArrayLike) -> np.ndarray:
    """Linearly stretch a scalar raster to the full uint8 range.

    A constant raster has no range to stretch and maps to all zeros.

    Raises:
        UnsupportedPixelTypeError: ``scalar`` has more than one channel.
    """
    arr = np.asarray(scalar)
    if is_multichannel(arr) or arr.ndim != 2:
        raise UnsupportedPixelTypeError(
            f"Display rescaling needs a scalar (H, W) raster, got shape {arr.shape}"
        )
    if arr.size == 0 or arr.min() == arr.max():
        return np.zeros(arr.shape, dtype=np.uint8)
    stretched = rescale_intensity(arr.astype(np.float64), in_range="image", out_range=(0, 255))
    return cast_colors(stretched, np.uint8)


def write_scaled_scalar_image(raster: npt.ArrayLike, path: Path | str) -> Path:
    return write_image(rescale_to_display_range(raster), path)


def write_rgb_image(raster: npt.ArrayLike, path: Path | str) -> Path:
    """Write the first three channels as an 8-bit RGB image."""
    arr = np.asarray(raster)
    if arr.ndim != 3 or arr.shape[2] < 3:
        raise UnsupportedPixelTypeError(f"RGB output needs at least 3 channels, got shape {arr.shape}")
    rgb = cast_colors(arr[..., :3].astype(np.float64), np.uint8)
    return write_image(rgb, path, photometric="rgb")


def write_region(raster: npt.ArrayLike, region: Region, path: Path | str) -> Path:
    return write_image(extract_region(raster, region), path)
