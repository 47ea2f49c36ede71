# FILE: tests/test_dimensions.py
"""Aspect ratio to pixel size"""
import pytest

from image_broker.services.dimensions import Dimensions, dims_from_aspect, round8


def test_square_default():
    assert dims_from_aspect("1:1", 768) == Dimensions(width=768, height=768)


def test_landscape_wide():
    assert dims_from_aspect("16:9", 1024) == Dimensions(width=1024, height=576)


def test_portrait_long_side_is_height():
    assert dims_from_aspect("3:4", 800) == Dimensions(width=600, height=800)


def test_short_side_rounds_to_nearest_multiple_of_8():
    """1000 * 3/4 = 750 -> 752, not truncated to 744"""
    assert dims_from_aspect("4:3", 1000) == Dimensions(width=1000, height=752)


def test_minimum_side_is_64():
    assert dims_from_aspect("1:1", 32) == Dimensions(width=64, height=64)


def test_round8():
    assert round8(60) == 64
    assert round8(100) == 104
    assert round8(99) == 96
    assert round8(12) == 64


@pytest.mark.parametrize("aspect", ["1:1", "3:4", "4:3", "16:9"])
@pytest.mark.parametrize("resolution", [512, 513, 700, 777, 1024, 1333, 1536])
def test_sides_are_multiples_of_8(aspect, resolution):
    dims = dims_from_aspect(aspect, resolution)
    assert dims.width % 8 == 0 and dims.height % 8 == 0
    assert dims.width >= 64 and dims.height >= 64
    if aspect == "1:1":
        assert dims.width == dims.height == round8(resolution)
