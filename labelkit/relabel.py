from __future__ import annotations

import numpy as np
import numpy.typing as npt
from loguru import logger

from labelkit.raster import as_label_raster


def sequential_label_map(labels: npt.ArrayLike) -> np.ndarray:
    """Sorted unique label values.

    Position ``i`` holds the original id that :func:`relabel_sequential`
    maps to ``i``, so ``sequential_label_map(labels)[relabeled]`` restores
    the input.
    """
    return np.unique(as_label_raster(labels))


def relabel_sequential(labels: npt.ArrayLike, *, dtype: npt.DTypeLike | None = None) -> np.ndarray:
    """Map an arbitrary label set onto ``0..U-1`` preserving the order of the original ids.

    The smallest original label becomes 0, the next distinct value 1, and so
    on. The lookup reads only from ``labels`` and writes to a new array, so
    a new id that collides with a not-yet-mapped original value can never be
    remapped twice.

    Args:
        labels: 2D non-negative integer raster.
        dtype: Output dtype. Defaults to the smallest unsigned type holding ``U-1``.

    Returns:
        Relabeled raster with the shape of ``labels``.
    """
    arr = as_label_raster(labels)
    if dtype is not None and not np.issubdtype(np.dtype(dtype), np.integer):
        raise TypeError(f"Output dtype must be an integer type, got {np.dtype(dtype)}")
    if arr.size == 0:
        return np.zeros(arr.shape, dtype=dtype if dtype is not None else np.uint8)

    unique = np.unique(arr)
    out_dtype = np.dtype(dtype) if dtype is not None else np.min_scalar_type(len(unique) - 1)
    if np.iinfo(out_dtype).max < len(unique) - 1:
        raise ValueError(f"dtype {out_dtype} cannot hold {len(unique)} sequential labels")

    # Binary search into the sorted table: one pass over the raster.
    relabeled = np.searchsorted(unique, arr).astype(out_dtype, copy=False)
    logger.debug(
        f"Relabeled {len(unique)} unique label(s) in range [{unique[0]}, {unique[-1]}] "
        f"to [0, {len(unique) - 1}]"
    )
    return relabeled
