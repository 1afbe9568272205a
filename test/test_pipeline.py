from pathlib import Path

import numpy as np
import pytest
from tifffile import imread, imwrite

import labelkit
from labelkit.config import ColorizeConfig
from labelkit.errors import ShapeMismatchError, UndefinedAverageError
from labelkit.pipeline import colorize_segmentation, process_files


def test_colorize_segmentation_scenario(scenario_labels, scenario_colors):
    result = colorize_segmentation(scenario_labels, scenario_colors)

    np.testing.assert_array_equal(result.labels, [[0, 0], [1, 1]])
    np.testing.assert_array_equal(result.stats.pixel_count, [2, 2])
    assert result.colored.dtype == np.uint8
    np.testing.assert_array_equal(result.colored[..., 1], [[15, 15], [35, 35]])


def test_colorize_segmentation_without_relabel_keeps_sparse_ids(scenario_labels, scenario_colors):
    result = colorize_segmentation(scenario_labels, scenario_colors, ColorizeConfig(relabel=False))
    assert len(result.stats) == 11
    np.testing.assert_array_equal(result.stats.undefined_labels(), [0, 1, 2, 3, 4, 6, 7, 8, 9])
    np.testing.assert_array_equal(result.colored[..., 0], [[15, 15], [35, 35]])
    with pytest.raises(UndefinedAverageError):
        result.stats.average(0)


def test_colorize_segmentation_with_smoothing(random_segmentation, monkeypatch):
    import labelkit.pipeline as pipeline

    labels, colors = random_segmentation
    calls = []

    def fake_bilateral_all_channels(image, domain_sigma, range_sigma, *, max_workers=1):
        calls.append((domain_sigma, range_sigma, max_workers))
        return np.zeros_like(image)

    monkeypatch.setattr(pipeline, "bilateral_all_channels", fake_bilateral_all_channels)
    config = ColorizeConfig(smooth=True, domain_sigma=2.0, range_sigma=15.0, max_workers=3, output_dtype="float32")
    result = colorize_segmentation(labels, colors, config)

    assert calls == [(2.0, 15.0, 3)]
    assert result.colored.dtype == np.float32
    assert not result.colored.any()


def test_colorize_segmentation_shape_mismatch():
    with pytest.raises(ShapeMismatchError):
        colorize_segmentation(np.zeros((2, 2), dtype=np.uint8), np.zeros((3, 2, 3)))


def test_process_files(tmp_path: Path, scenario_labels, scenario_colors):
    imwrite(tmp_path / "labels.tif", scenario_labels)
    imwrite(tmp_path / "image.tif", scenario_colors, photometric="rgb")

    out = process_files(tmp_path / "labels.tif", tmp_path / "image.tif", tmp_path / "out" / "colored.tif")

    colored = imread(out)
    assert colored.shape == (2, 2, 3)
    np.testing.assert_array_equal(colored[..., 2], [[15, 15], [35, 35]])


def test_process_files_adds_file_context(tmp_path: Path):
    imwrite(tmp_path / "labels.tif", np.zeros((2, 2), dtype=np.uint8))
    imwrite(tmp_path / "image.tif", np.zeros((3, 3, 3), dtype=np.uint8), photometric="rgb")

    with pytest.raises(ShapeMismatchError) as excinfo:
        process_files(tmp_path / "labels.tif", tmp_path / "image.tif", tmp_path / "colored.tif")

    assert str(tmp_path / "labels.tif") in str(excinfo.value)
    assert any("While processing" in note for note in excinfo.value.__notes__)
    assert not (tmp_path / "colored.tif").exists()


def test_lazy_package_exports():
    assert labelkit.relabel_sequential is labelkit.relabel.relabel_sequential
    assert "aggregate_by_label" in labelkit.__all__
    assert "colorize_by_label" in dir(labelkit)
    with pytest.raises(AttributeError):
        labelkit.does_not_exist
