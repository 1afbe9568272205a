from typing import TYPE_CHECKING, Dict, Tuple

from .utils.utils import make_lazy_getattr

# Lazy namespace exports (PEP 562)
# name -> (module, attribute)

_LAZY_ATTRS: Dict[str, Tuple[str, str]] = {
    # Raster primitives
    "Region": ("labelkit.raster", "Region"),
    "deep_copy": ("labelkit.raster", "deep_copy"),
    "deep_copy_in_region": ("labelkit.raster", "deep_copy_in_region"),
    "extract_region": ("labelkit.raster", "extract_region"),
    "count_pixels_with_value": ("labelkit.raster", "count_pixels_with_value"),
    "max_value": ("labelkit.raster", "max_value"),
    # Labels
    "relabel_sequential": ("labelkit.relabel", "relabel_sequential"),
    "sequential_label_map": ("labelkit.relabel", "sequential_label_map"),
    "LabelStatistics": ("labelkit.stats", "LabelStatistics"),
    "aggregate_by_label": ("labelkit.stats", "aggregate_by_label"),
    "colorize_by_label": ("labelkit.colorize", "colorize_by_label"),
    "color_labels_by_average_color": ("labelkit.colorize", "color_labels_by_average_color"),
    # Filtering
    "apply_per_channel": ("labelkit.filters", "apply_per_channel"),
    "bilateral_all_channels": ("labelkit.filters", "bilateral_all_channels"),
    # Pipeline
    "ColorizeConfig": ("labelkit.config", "ColorizeConfig"),
    "colorize_segmentation": ("labelkit.pipeline", "colorize_segmentation"),
}

if TYPE_CHECKING:
    from labelkit.colorize import color_labels_by_average_color as color_labels_by_average_color
    from labelkit.colorize import colorize_by_label as colorize_by_label
    from labelkit.config import ColorizeConfig as ColorizeConfig
    from labelkit.filters import apply_per_channel as apply_per_channel
    from labelkit.filters import bilateral_all_channels as bilateral_all_channels
    from labelkit.pipeline import colorize_segmentation as colorize_segmentation
    from labelkit.raster import Region as Region
    from labelkit.raster import count_pixels_with_value as count_pixels_with_value
    from labelkit.raster import deep_copy as deep_copy
    from labelkit.raster import deep_copy_in_region as deep_copy_in_region
    from labelkit.raster import extract_region as extract_region
    from labelkit.raster import max_value as max_value
    from labelkit.relabel import relabel_sequential as relabel_sequential
    from labelkit.relabel import sequential_label_map as sequential_label_map
    from labelkit.stats import LabelStatistics as LabelStatistics
    from labelkit.stats import aggregate_by_label as aggregate_by_label


__getattr__, __dir__, __all__ = make_lazy_getattr(globals(), _LAZY_ATTRS)
