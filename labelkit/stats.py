"""Per-label statistics over a label raster and a parallel color raster."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import polars as pl
from loguru import logger

from labelkit.errors import IndexOutOfRangeError, UndefinedAverageError
from labelkit.raster import as_label_raster, check_same_shape, max_value


@dataclass(slots=True)
class LabelStatistics:
    """Dense table indexed by label id ``0..max_label``.

    ``average_color`` holds NaN for ids that never occur; those rows are
    excluded by ``defined`` and reading them through :meth:`average`
    raises :class:`UndefinedAverageError`.
    """

    pixel_count: np.ndarray  # (n,) int64
    color_sum: np.ndarray  # (n, C) float64
    average_color: np.ndarray  # (n, C) float64

    def __len__(self) -> int:
        return len(self.pixel_count)

    @property
    def n_labels(self) -> int:
        return len(self.pixel_count)

    @property
    def max_label(self) -> int:
        return len(self.pixel_count) - 1

    @property
    def n_channels(self) -> int:
        return self.color_sum.shape[1]

    @property
    def defined(self) -> np.ndarray:
        return self.pixel_count > 0

    @property
    def total_pixels(self) -> int:
        return int(self.pixel_count.sum())

    def undefined_labels(self) -> np.ndarray:
        return np.flatnonzero(self.pixel_count == 0)

    def _check_index(self, label: int) -> None:
        if not 0 <= label < len(self.pixel_count):
            raise IndexOutOfRangeError(
                f"Label {label} is outside the statistics table (0..{self.max_label})"
            )

    def average(self, label: int) -> np.ndarray:
        self._check_index(label)
        if self.pixel_count[label] == 0:
            raise UndefinedAverageError([label])
        return self.average_color[label].copy()

    def require_defined(self, labels: Iterable[int] | None = None) -> None:
        """Raise :class:`UndefinedAverageError` if any of ``labels`` (default: all) has no pixels."""
        if labels is None:
            missing = self.undefined_labels()
        else:
            ids = np.asarray(list(labels), dtype=np.int64)
            if ids.size and (ids.min() < 0 or ids.max() > self.max_label):
                bad = ids[(ids < 0) | (ids > self.max_label)]
                raise IndexOutOfRangeError(
                    f"Label(s) {bad.tolist()} outside the statistics table (0..{self.max_label})"
                )
            missing = ids[self.pixel_count[ids] == 0]
        if len(missing):
            raise UndefinedAverageError(missing)

    def to_frame(self, channel_names: Sequence[str] | None = None) -> pl.DataFrame:
        """One row per label id with count, per-channel sum and mean."""
        if channel_names is None:
            channel_names = [f"channel_{i}" for i in range(self.n_channels)]
        if len(channel_names) != self.n_channels:
            raise ValueError(f"Expected {self.n_channels} channel names, got {len(channel_names)}")

        columns: dict[str, np.ndarray] = {
            "label": np.arange(self.n_labels, dtype=np.uint32),
            "pixel_count": self.pixel_count,
        }
        for i, name in enumerate(channel_names):
            columns[f"sum_{name}"] = self.color_sum[:, i]
        for i, name in enumerate(channel_names):
            columns[f"mean_{name}"] = self.average_color[:, i]
        columns["defined"] = self.defined
        return pl.DataFrame(columns)


def _as_color_raster(colors: npt.ArrayLike) -> np.ndarray:
    arr = np.asarray(colors)
    if arr.ndim == 2:
        return arr[..., np.newaxis]
    if arr.ndim != 3:
        raise ValueError(f"Expected color raster shaped (H, W, C) or (H, W), got {arr.shape}")
    return arr


def aggregate_by_label(labels: npt.ArrayLike, colors: npt.ArrayLike) -> LabelStatistics:
    """Count pixels and average the colors of every label id.

    The table has ``max_value(labels) + 1`` rows whether or not every id in
    between occurs. Colors are accumulated in float64 so integer inputs
    cannot overflow.

    Raises:
        ShapeMismatchError: ``colors`` does not cover the same ``(H, W)`` extent.
        EmptyRasterError: ``labels`` has no pixels.
        ValueError: a label id is too large to index the table.
    """
    label_arr = as_label_raster(labels)
    color_arr = _as_color_raster(colors)
    check_same_shape(label_arr, color_arr)

    top = int(max_value(label_arr))
    if top > np.iinfo(np.intp).max:
        raise ValueError(f"Label id {top} exceeds the addressable table size; relabel the raster first")
    n = top + 1
    flat = label_arr.ravel().astype(np.intp, copy=False)

    pixel_count = np.bincount(flat, minlength=n).astype(np.int64, copy=False)
    color_sum = np.stack(
        [
            np.bincount(flat, weights=color_arr[..., c].ravel().astype(np.float64), minlength=n)
            for c in range(color_arr.shape[2])
        ],
        axis=1,
    )

    defined = pixel_count > 0
    average_color = np.full_like(color_sum, np.nan)
    average_color[defined] = color_sum[defined] / pixel_count[defined][:, np.newaxis]

    stats = LabelStatistics(pixel_count=pixel_count, color_sum=color_sum, average_color=average_color)
    n_undefined = n - int(defined.sum())
    logger.debug(f"Aggregated {flat.size} pixel(s) into {n} label row(s), {color_arr.shape[2]} channel(s)")
    if n_undefined:
        logger.warning(
            f"{n_undefined} label id(s) in 0..{n - 1} have no pixels; their average color is undefined"
        )
    return stats
