"""Per-channel filtering of multi-channel rasters.

The smoothing operation is an opaque callable ``smooth(channel,
domain_sigma, range_sigma) -> channel``; this module only guarantees that
each call receives an independent copy of one channel and that the
results are recomposed in channel order.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import numpy.typing as npt
from loguru import logger
from skimage.restoration import denoise_bilateral

from labelkit.colorize import cast_colors
from labelkit.errors import ShapeMismatchError
from labelkit.raster import deep_copy, n_components

SmoothFn = Callable[[np.ndarray, float, float], np.ndarray]


def bilateral(channel: np.ndarray, domain_sigma: float, range_sigma: float) -> np.ndarray:
    """Edge-preserving bilateral smoothing of a single channel.

    ``domain_sigma`` is the spatial standard deviation in pixels and
    ``range_sigma`` the intensity standard deviation in the channel's own
    units. Border windows repeat the edge pixels, so the output stays within
    the input's value range. The channel's dtype is preserved.
    """
    arr = np.asarray(channel)
    if arr.ndim != 2:
        raise ValueError(f"Expected a single 2D channel, got shape {arr.shape}")
    if domain_sigma <= 0 or range_sigma <= 0:
        raise ValueError("Bilateral sigmas must be positive")

    smoothed = denoise_bilateral(
        arr.astype(np.float64),
        sigma_color=range_sigma,
        sigma_spatial=domain_sigma,
        channel_axis=None,
        mode="edge",
    )
    return cast_colors(smoothed, arr.dtype)


def _run_one(smooth: SmoothFn, channel: np.ndarray, idx: int, domain_sigma: float, range_sigma: float):
    result = np.asarray(smooth(channel, domain_sigma, range_sigma))
    if result.shape != channel.shape:
        raise ShapeMismatchError(
            f"Channel {idx}: smoothing returned shape {result.shape}, expected {channel.shape}"
        )
    return result


def apply_per_channel(
    image: npt.ArrayLike,
    smooth: SmoothFn,
    domain_sigma: float,
    range_sigma: float,
    *,
    max_workers: int = 1,
) -> np.ndarray:
    """Run ``smooth`` on every channel independently and stack the results.

    Args:
        image: Raster shaped ``(H, W, C)``, or ``(H, W)`` for a single channel.
        smooth: Callable taking ``(channel, domain_sigma, range_sigma)``.
        domain_sigma, range_sigma: Passed through to ``smooth`` unchanged.
        max_workers: Channels processed concurrently. 1 runs sequentially.

    Returns:
        Raster with the shape of ``image``; ``(H, W, C)`` inputs come back in channel order.
    """
    arr = np.asarray(image)
    if arr.ndim not in (2, 3):
        raise ValueError(f"Expected raster shaped (H, W) or (H, W, C), got {arr.shape}")
    if domain_sigma < 0 or range_sigma < 0:
        raise ValueError("domain_sigma and range_sigma must be non-negative")
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    if arr.ndim == 2:
        return _run_one(smooth, deep_copy(arr), 0, domain_sigma, range_sigma)

    n = n_components(arr)
    # Each worker owns a contiguous copy, never a strided view of ``image``.
    channels = [deep_copy(arr[..., i]) for i in range(n)]
    logger.debug(f"Filtering {n} channel(s) of shape {arr.shape[:2]} with {max_workers} worker(s)")

    if max_workers == 1 or n == 1:
        results = [_run_one(smooth, ch, i, domain_sigma, range_sigma) for i, ch in enumerate(channels)]
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, n), thread_name_prefix="channel") as pool:
            futures = [
                pool.submit(_run_one, smooth, ch, i, domain_sigma, range_sigma) for i, ch in enumerate(channels)
            ]
            results = [fut.result() for fut in futures]

    return np.stack(results, axis=-1)


def bilateral_all_channels(
    image: npt.ArrayLike,
    domain_sigma: float,
    range_sigma: float,
    *,
    max_workers: int = 1,
) -> np.ndarray:
    return apply_per_channel(image, bilateral, domain_sigma, range_sigma, max_workers=max_workers)
