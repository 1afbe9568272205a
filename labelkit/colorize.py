from __future__ import annotations

import numpy as np
import numpy.typing as npt
from loguru import logger

from labelkit.errors import IndexOutOfRangeError, UndefinedAverageError
from labelkit.raster import as_label_raster, max_value
from labelkit.stats import LabelStatistics, aggregate_by_label


def cast_colors(colors: np.ndarray, dtype: npt.DTypeLike) -> np.ndarray:
    """Convert float colors to ``dtype``; integer targets are rounded and clipped to range."""
    target = np.dtype(dtype)
    if np.issubdtype(target, np.integer):
        info = np.iinfo(target)
        return np.clip(np.rint(colors), info.min, info.max).astype(target)
    return colors.astype(target, copy=False)


def colorize_by_label(
    labels: npt.ArrayLike,
    stats: LabelStatistics,
    *,
    dtype: npt.DTypeLike | None = None,
) -> np.ndarray:
    """Paint every pixel with the average color of its label.

    All checks run before the output is allocated, so a failure never
    leaves a partially colored raster behind.

    Args:
        labels: 2D label raster.
        stats: Table from :func:`aggregate_by_label`, covering every id in ``labels``.
        dtype: Output pixel type. Defaults to float64.

    Returns:
        Raster shaped ``labels.shape + (stats.n_channels,)``.

    Raises:
        IndexOutOfRangeError: a label exceeds ``stats.max_label``.
        UndefinedAverageError: a label present in ``labels`` has no pixels in ``stats``.
    """
    label_arr = as_label_raster(labels)
    out_dtype = np.dtype(dtype) if dtype is not None else np.dtype(np.float64)
    if label_arr.size == 0:
        return np.zeros((*label_arr.shape, stats.n_channels), dtype=out_dtype)

    top = int(max_value(label_arr))
    if top > stats.max_label:
        raise IndexOutOfRangeError(
            f"Label {top} exceeds the statistics table (0..{stats.max_label})"
        )

    present = np.bincount(label_arr.ravel().astype(np.intp, copy=False), minlength=stats.n_labels) > 0
    missing = np.flatnonzero(present & ~stats.defined)
    if len(missing):
        raise UndefinedAverageError(missing)

    colored = stats.average_color[label_arr]
    logger.debug(f"Colorized {label_arr.size} pixel(s) from {int(present.sum())} label(s)")
    return cast_colors(colored, out_dtype)


def color_labels_by_average_color(
    image: npt.ArrayLike,
    labels: npt.ArrayLike,
    *,
    dtype: npt.DTypeLike | None = None,
) -> np.ndarray:
    """Aggregate ``image`` by ``labels`` and recolor each region with its mean color.

    The result has the shape of ``image`` and, unless ``dtype`` is given,
    its pixel type.
    """
    img = np.asarray(image)
    stats = aggregate_by_label(labels, img)
    colored = colorize_by_label(labels, stats, dtype=img.dtype if dtype is None else dtype)
    if img.ndim == 2:
        return colored[..., 0]
    return colored
