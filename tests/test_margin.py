"""
Tests for margin padding and stripping.
"""

from __future__ import annotations

import logging

import numpy as np
import pytest

from devas import (
    FieldOfView,
    Image,
    InvalidParameterError,
    MarginBackground,
    MarginFill,
    XYYImage,
    add_margin,
    strip_margin,
)
from devas.preprocessing.margin import margin_size, margin_weight


def random_xyy(shape=(24, 32), view=FieldOfView(16.0, 12.0), seed: int = 0) -> XYYImage:
    rng = np.random.default_rng(seed)
    x = rng.uniform(0.25, 0.4, size=shape)
    y = rng.uniform(0.25, 0.4, size=shape)
    lum = rng.uniform(1.0, 200.0, size=shape)
    return XYYImage.from_channels(x, y, lum, view, description="test image")


def test_round_trip_exact() -> None:
    lum = np.random.default_rng(1).random((256, 256)) * 100.0
    image = Image(lum, view=FieldOfView(30.0, 30.0))
    padded = add_margin(32, 32, image)
    assert padded.shape == (320, 320)
    assert padded.view == FieldOfView(37.5, 37.5)

    restored = strip_margin(32, 32, padded)
    np.testing.assert_array_equal(restored.data, lum)
    assert restored.view == FieldOfView(30.0, 30.0)


def test_round_trip_xyy() -> None:
    image = random_xyy()
    padded = add_margin(5, 7, image)
    assert isinstance(padded, XYYImage)
    assert padded.shape == (34, 46)
    assert padded.description == "test image"

    restored = strip_margin(5, 7, padded)
    np.testing.assert_array_equal(restored.data, image.data)
    assert restored.view.horiz == pytest.approx(image.view.horiz)
    assert restored.view.vert == pytest.approx(image.view.vert)


def test_round_trip_restores_given_view_exactly() -> None:
    image = random_xyy(shape=(5, 5), view=FieldOfView(45.1, 45.1))
    padded = add_margin(1, 1, image)

    restored = strip_margin(1, 1, padded, view=image.view)
    np.testing.assert_array_equal(restored.data, image.data)
    assert restored.view == image.view
    assert strip_margin(1, 1, padded).view.horiz == pytest.approx(45.1)


def test_field_of_view_keeps_degrees_per_pixel() -> None:
    image = random_xyy(shape=(24, 32), view=FieldOfView(16.0, 12.0))
    padded = add_margin(6, 4, image)
    assert padded.view.horiz / padded.n_cols == pytest.approx(16.0 / 32)
    assert padded.view.vert / padded.n_rows == pytest.approx(12.0 / 24)


def test_reflected_chromaticity_is_copied() -> None:
    image = random_xyy()
    padded = add_margin(3, 3, image)
    # Margin row adjacent to the image mirrors the first image row
    np.testing.assert_array_equal(padded.chroma_x[2, 3:-3], image.chroma_x[0])
    np.testing.assert_array_equal(padded.chroma_y[0, 3:-3], image.chroma_y[2])
    np.testing.assert_array_equal(padded.chroma_x[3:-3, -1], image.chroma_x[:, -3])


def test_edge_fill_repeats_border() -> None:
    image = random_xyy()
    padded = add_margin(4, 2, image, fill=MarginFill.EDGE)
    for row in range(4):
        np.testing.assert_array_equal(padded.chroma_x[row, 2:-2], image.chroma_x[0])
        np.testing.assert_array_equal(padded.chroma_y[-1 - row, 2:-2], image.chroma_y[-1])


def test_luminance_fades_to_background() -> None:
    image = random_xyy(seed=2)
    lum = image.luminance
    border = np.concatenate([lum[0, :], lum[-1, :], lum[1:-1, 0], lum[1:-1, -1]])
    padded = add_margin(4, 4, image)

    np.testing.assert_array_equal(padded.luminance[4:-4, 4:-4], lum)
    # Outermost pixels are at full depth and take the background value
    for corner in [(0, 0), (0, -1), (-1, 0), (-1, -1)]:
        assert padded.luminance[corner] == pytest.approx(np.mean(border))
    np.testing.assert_allclose(padded.luminance[0, 4:-4], np.mean(border))

    # Next to the image the original value dominates
    weight = margin_weight(np.array(0.25))
    expected = weight * lum[0, :] + (1.0 - weight) * np.mean(border)
    np.testing.assert_allclose(padded.luminance[3, 4:-4], expected)


def test_image_background() -> None:
    image = random_xyy(seed=3)
    padded = add_margin(2, 2, image, background=MarginBackground.IMAGE)
    assert padded.luminance[0, 0] == pytest.approx(np.mean(image.luminance))


def test_margin_weight_range() -> None:
    assert margin_weight(np.array(1.0)) == pytest.approx(0.0)
    assert margin_weight(np.array(0.0)) == pytest.approx(2.0 / (1.0 + np.exp(-6.0)) - 1.0)
    weights = margin_weight(np.linspace(0.0, 1.0, 11))
    assert np.all(np.diff(weights) < 0.0)


def test_margin_size() -> None:
    assert margin_size(0.25, (256, 128)) == (32, 16)
    assert margin_size(0.001, (64, 64)) == (1, 1)


def test_oversize_margin_warns(caplog) -> None:
    image = random_xyy(shape=(8, 8), view=FieldOfView(4.0, 4.0))
    with caplog.at_level(logging.WARNING, logger="devas.preprocessing.margin"):
        padded = add_margin(5, 2, image)
    assert padded.shape == (18, 12)
    assert "larger than half" in caplog.text


@pytest.mark.parametrize("v_margin, h_margin", [(0, 4), (4, 0), (-1, 2)])
def test_invalid_margins(v_margin: int, h_margin: int) -> None:
    with pytest.raises(InvalidParameterError):
        add_margin(v_margin, h_margin, random_xyy())


def test_invalid_images() -> None:
    with pytest.raises(InvalidParameterError):
        add_margin(1, 1, Image(np.ones((1, 5)), view=FieldOfView(5.0, 1.0)))
    with pytest.raises(InvalidParameterError):
        add_margin(1, 1, Image(np.ones((4, 4)), view=FieldOfView.missing()))
    with pytest.raises(InvalidParameterError):
        strip_margin(1, 1, Image(np.ones((4, 4)), view=FieldOfView.missing()))


def test_strip_too_large() -> None:
    image = Image(np.ones((6, 10)), view=FieldOfView(10.0, 6.0))
    with pytest.raises(InvalidParameterError):
        strip_margin(3, 1, image)
    assert strip_margin(2, 4, image).shape == (2, 2)
