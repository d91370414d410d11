"""
Tests for the image model and color conversions.
"""

from __future__ import annotations

import numpy as np
import pytest

from devas import FieldOfView, Image, InvalidParameterError, SizeMismatchError, XYYImage
from devas.core.image import check_same_size
from devas.utils.color import ColorTransform


def test_field_of_view() -> None:
    view = FieldOfView(40.0, 30.0)
    assert view.is_valid
    assert view.max_angle == 40.0
    assert not FieldOfView.missing().is_valid
    assert not FieldOfView(10.0, 0.0).is_valid
    assert view.scaled((30, 40), (60, 20)) == FieldOfView(20.0, 60.0)


def test_image_shape_checks() -> None:
    with pytest.raises(InvalidParameterError):
        Image(np.ones(5))
    with pytest.raises(InvalidParameterError):
        XYYImage(np.ones((4, 4)))
    with pytest.raises(InvalidParameterError):
        XYYImage(np.ones((4, 4, 2)))


def test_check_same_size() -> None:
    check_same_size(np.ones((3, 4)), np.ones((3, 4, 3)))
    with pytest.raises(SizeMismatchError):
        check_same_size(np.ones((3, 4)), np.ones((4, 3)))
    with pytest.raises(SizeMismatchError):
        XYYImage.from_channels(np.ones((3, 4)), np.ones((3, 4)), np.ones((3, 5)), FieldOfView(1.0, 1.0))


def test_xyy_channels() -> None:
    image = XYYImage.from_channels(
        np.full((2, 3), 0.3), np.full((2, 3), 0.4), np.arange(6.0).reshape(2, 3), FieldOfView(3.0, 2.0)
    )
    assert image.shape == (2, 3)
    np.testing.assert_array_equal(image.chroma_x, 0.3)
    np.testing.assert_array_equal(image.chroma_y, 0.4)
    np.testing.assert_array_equal(image.luminance, np.arange(6.0).reshape(2, 3))
    assert image.exposure == 1.0 and not image.exposure_set


def test_with_data_keeps_metadata() -> None:
    image = XYYImage.from_luminance(np.ones((4, 4)), FieldOfView(2.0, 2.0), description="flat")
    copy = image.with_data(np.zeros((4, 4, 3)))
    assert isinstance(copy, XYYImage)
    assert copy.description == "flat"
    assert copy.view == image.view


def test_rgb_round_trip() -> None:
    rng = np.random.default_rng(31)
    rgb = rng.uniform(0.1, 100.0, size=(8, 8, 3))
    image = XYYImage.from_rgb(rgb, FieldOfView(4.0, 4.0))
    np.testing.assert_allclose(image.luminance, rgb @ ColorTransform().srgb_to_xyz_matrix[1], rtol=1e-9)
    np.testing.assert_allclose(image.to_rgb(), rgb, rtol=1e-9, atol=1e-9)


def test_black_pixels_get_white_point() -> None:
    xyy = ColorTransform().xyz_to_xyy(np.zeros((2, 2, 3)))
    np.testing.assert_array_equal(xyy[..., 0], 0.3333)
    np.testing.assert_array_equal(xyy[..., 1], 0.3333)
    np.testing.assert_array_equal(xyy[..., 2], 0.0)
