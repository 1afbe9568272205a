import numpy as np
import pytest

from labelkit.errors import EmptyRasterError, OutOfBoundsError, ShapeMismatchError
from labelkit.raster import (
    Region,
    check_same_shape,
    count_pixels_with_value,
    deep_copy,
    deep_copy_in_region,
    extract_region,
    max_value,
    n_components,
)


def test_region_rejects_negative_origin_and_size():
    with pytest.raises(ValueError):
        Region(-1, 0, 2, 2)
    with pytest.raises(ValueError):
        Region(0, 0, -2, 2)


def test_region_full_and_slices():
    raster = np.zeros((4, 6))
    region = Region.full(raster)
    assert region == Region(0, 0, 6, 4)
    assert region.shape == (4, 6)
    assert raster[Region(1, 2, 3, 1).slices].shape == (1, 3)
    assert region.contains(Region(5, 3, 1, 1))
    assert not region.contains(Region(5, 3, 2, 1))


def test_deep_copy_is_independent():
    source = np.arange(12, dtype=np.int32).reshape(3, 4)
    copy = deep_copy(source)
    np.testing.assert_array_equal(copy, source)
    assert copy.dtype == source.dtype

    copy[0, 0] = 99
    assert source[0, 0] == 0
    source[2, 3] = -5
    assert copy[2, 3] == 11


def test_deep_copy_of_strided_view_is_contiguous():
    rgb = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
    channel = deep_copy(rgb[..., 1])
    assert channel.flags["C_CONTIGUOUS"]
    assert not np.shares_memory(channel, rgb)


def test_deep_copy_in_region_uses_local_coordinates():
    source = np.arange(20).reshape(4, 5)
    crop = deep_copy_in_region(source, Region(x=1, y=2, width=3, height=2))
    np.testing.assert_array_equal(crop, [[11, 12, 13], [16, 17, 18]])
    assert crop[0, 0] == source[2, 1]

    crop[0, 0] = -1
    assert source[2, 1] == 11


def test_extract_region_out_of_bounds():
    raster = np.zeros((4, 5))
    with pytest.raises(OutOfBoundsError):
        extract_region(raster, Region(3, 0, 3, 1))
    with pytest.raises(OutOfBoundsError):
        extract_region(raster, Region(0, 4, 1, 1))
    # OutOfBoundsError is also an IndexError
    with pytest.raises(IndexError):
        extract_region(raster, Region(0, 0, 6, 4))


def test_extract_full_region_round_trips():
    rng = np.random.default_rng(3)
    raster = rng.integers(0, 255, size=(7, 9, 3), dtype=np.uint8)
    full = extract_region(raster, Region.full(raster))
    np.testing.assert_array_equal(full, raster)
    assert not np.shares_memory(full, raster)


def test_count_pixels_with_value_scalar_and_vector():
    labels = np.array([[1, 2, 2], [2, 0, 1]])
    assert count_pixels_with_value(labels, 2) == 3
    assert count_pixels_with_value(labels, 7) == 0

    colors = np.zeros((2, 2, 3), dtype=np.uint8)
    colors[0, 1] = (1, 2, 3)
    colors[1, 1] = (1, 2, 4)
    assert count_pixels_with_value(colors, (1, 2, 3)) == 1
    assert count_pixels_with_value(colors, (0, 0, 0)) == 2
    with pytest.raises(ShapeMismatchError):
        count_pixels_with_value(colors, (1, 2))


def test_count_pixels_does_not_mutate():
    labels = np.array([[1, 2], [3, 4]])
    before = labels.copy()
    count_pixels_with_value(labels, 3)
    np.testing.assert_array_equal(labels, before)


def test_max_value():
    assert max_value(np.array([[3, 9], [0, 4]], dtype=np.uint16)) == 9
    with pytest.raises(EmptyRasterError):
        max_value(np.zeros((0, 3), dtype=np.uint8))


def test_n_components_and_shape_check():
    assert n_components(np.zeros((2, 2))) == 1
    assert n_components(np.zeros((2, 2, 4))) == 4
    check_same_shape(np.zeros((2, 3)), np.zeros((2, 3, 3)))
    with pytest.raises(ShapeMismatchError):
        check_same_shape(np.zeros((2, 3)), np.zeros((3, 2, 3)))
