from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt
from loguru import logger

from labelkit.colorize import colorize_by_label
from labelkit.config import ColorizeConfig
from labelkit.filters import bilateral_all_channels
from labelkit.io import read_image, write_image
from labelkit.raster import as_label_raster, check_same_shape
from labelkit.relabel import relabel_sequential
from labelkit.stats import LabelStatistics, aggregate_by_label
from labelkit.utils.utils import add_file_context


@dataclass(slots=True)
class ColorizeResult:
    labels: np.ndarray
    stats: LabelStatistics
    colored: np.ndarray


def colorize_segmentation(
    labels: npt.ArrayLike,
    image: npt.ArrayLike,
    config: ColorizeConfig | None = None,
) -> ColorizeResult:
    """Relabel, optionally smooth, aggregate and recolor a segmentation.

    ``labels`` in the result are the ids the statistics are indexed by:
    sequential when ``config.relabel`` is set, the input ids otherwise.
    """
    config = config or ColorizeConfig()
    label_arr = as_label_raster(labels)
    img = np.asarray(image)
    check_same_shape(label_arr, img, what="image")

    if config.relabel:
        label_arr = relabel_sequential(label_arr)

    colors = img
    if config.smooth:
        logger.info(
            f"Smoothing {img.shape[-1] if img.ndim == 3 else 1} channel(s) "
            f"(domain_sigma={config.domain_sigma}, range_sigma={config.range_sigma})"
        )
        colors = bilateral_all_channels(
            img, config.domain_sigma, config.range_sigma, max_workers=config.max_workers
        )

    stats = aggregate_by_label(label_arr, colors)
    colored = colorize_by_label(label_arr, stats, dtype=config.output_dtype or img.dtype)
    if img.ndim == 2:
        colored = colored[..., 0]

    logger.info(f"Colorized {int(stats.defined.sum())} region(s) over {label_arr.size} pixel(s)")
    return ColorizeResult(labels=label_arr, stats=stats, colored=colored)


def process_files(
    label_path: Path,
    image_path: Path,
    output_path: Path,
    config: ColorizeConfig | None = None,
) -> Path:
    """Read a label image and a color image, colorize, and write the result as TIFF."""
    try:
        labels = read_image(label_path)
        image = read_image(image_path)
        result = colorize_segmentation(labels, image, config)
        return write_image(result.colored, output_path)
    except Exception as e:
        add_file_context(e, label_path, image_path)
        raise
