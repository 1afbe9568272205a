"""
Configuration for the segmentation colorizing pipeline.

Parameters live in a Pydantic model so they can be validated once and
loaded from TOML files with per-call overrides.
"""

from pathlib import Path
from typing import Any

import numpy as np
import toml
from pydantic import BaseModel, Field, field_validator


class ColorizeConfig(BaseModel):
    """Parameters for :func:`labelkit.pipeline.colorize_segmentation`."""

    relabel: bool = Field(default=True, description="Relabel to dense sequential ids before aggregating")

    smooth: bool = Field(default=False, description="Bilateral-smooth each color channel before aggregating")

    domain_sigma: float = Field(default=1.0, gt=0, description="Spatial sigma of the smoothing filter, in pixels")

    range_sigma: float = Field(
        default=0.1, gt=0, description="Intensity sigma of the smoothing filter, in raster units"
    )

    max_workers: int = Field(default=1, ge=1, le=32, description="Channels smoothed concurrently")

    output_dtype: str | None = Field(
        default=None, description="Pixel type of the colored raster; defaults to the input image's"
    )

    @field_validator("output_dtype")
    @classmethod
    def validate_output_dtype(cls, v: str | None) -> str | None:
        """Validate that the dtype name is understood by NumPy."""
        if v is None:
            return v
        try:
            return np.dtype(v).name
        except TypeError as e:
            raise ValueError(f"Unknown dtype: {v}") from e


def load_colorize_config(config_path: Path, **overrides: Any) -> ColorizeConfig:
    """
    Load a colorize configuration from a TOML file.

    Args:
        config_path: Path to TOML configuration file
        **overrides: Values replacing those read from the file; ``None`` is ignored

    Returns:
        Validated ColorizeConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If TOML syntax or a value is invalid
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file does not exist: {config_path}")

    try:
        config_data = toml.load(config_path)
    except toml.TomlDecodeError as e:
        raise ValueError(f"Invalid TOML syntax in configuration file: {e}")

    # Accept either a flat file or a [colorize] table
    if isinstance(config_data.get("colorize"), dict):
        config_data = config_data["colorize"]

    config_data.update({k: v for k, v in overrides.items() if v is not None})
    return ColorizeConfig(**config_data)
