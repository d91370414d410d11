"""
Tests for the squared Euclidean distance transform and dilation.
"""

from __future__ import annotations

import numpy as np
import pytest
from scipy.ndimage import distance_transform_edt

from devas import InvalidParameterError, SizeMismatchError, dilate, distance_transform


def brute_force_distsq(mask: np.ndarray) -> np.ndarray:
    rows, cols = np.indices(mask.shape)
    seed_rows, seed_cols = np.nonzero(mask)
    d_row = rows[..., None] - seed_rows[None, None, :]
    d_col = cols[..., None] - seed_cols[None, None, :]
    return np.min(d_row**2 + d_col**2, axis=-1).astype(np.float64)


@pytest.mark.parametrize("shape", [(7, 11), (16, 16), (1, 9), (9, 1), (23, 5)])
@pytest.mark.parametrize("density", [0.02, 0.2, 0.7])
def test_matches_brute_force(shape, density: float) -> None:
    rng = np.random.default_rng(1234)
    mask = rng.random(shape) < density
    mask.flat[0] = True
    np.testing.assert_array_equal(distance_transform(mask), brute_force_distsq(mask))


def test_matches_scipy_edt() -> None:
    rng = np.random.default_rng(7)
    mask = rng.random((64, 48)) < 0.01
    mask[10, 10] = True
    expected = distance_transform_edt(~mask) ** 2
    np.testing.assert_allclose(distance_transform(mask), expected, atol=1e-9)


def test_single_seed_is_exact() -> None:
    mask = np.zeros((5, 6), dtype=bool)
    mask[2, 3] = True
    dist = distance_transform(mask)
    assert dist[2, 3] == 0.0
    assert dist[0, 0] == 4.0 + 9.0
    assert dist[4, 5] == 4.0 + 4.0


def test_empty_mask_uses_sentinel() -> None:
    mask = np.zeros((4, 6), dtype=bool)
    dist = distance_transform(mask)
    np.testing.assert_array_equal(dist, np.full((4, 6), float((4 + 6 + 1) ** 2)))


def test_full_mask_is_zero() -> None:
    dist = distance_transform(np.ones((3, 8), dtype=bool))
    np.testing.assert_array_equal(dist, 0.0)


def test_out_argument() -> None:
    mask = np.zeros((6, 6), dtype=bool)
    mask[0, 0] = True
    out = np.empty((6, 6))
    result = distance_transform(mask, out=out)
    assert result is out
    assert out[5, 5] == 50.0

    with pytest.raises(SizeMismatchError):
        distance_transform(mask, out=np.empty((5, 6)))


@pytest.mark.parametrize("radius", [1.0, 1.5, 3.0, 7.2])
def test_dilate_matches_brute_force(radius: float) -> None:
    rng = np.random.default_rng(99)
    mask = rng.random((20, 30)) < 0.03
    mask[5, 5] = True
    expected = brute_force_distsq(mask) <= radius * radius
    np.testing.assert_array_equal(dilate(mask, radius), expected)


def test_dilate_empty_mask() -> None:
    result = dilate(np.zeros((4, 4), dtype=bool), 100.0)
    assert not result.any()


def test_dilate_out_argument() -> None:
    mask = np.zeros((5, 5), dtype=bool)
    mask[2, 2] = True
    out = np.zeros((5, 5), dtype=bool)
    dilate(mask, 1.0, out=out)
    assert out.sum() == 5

    with pytest.raises(SizeMismatchError):
        dilate(mask, 1.0, out=np.zeros((4, 5), dtype=bool))


def test_dilate_rejects_small_radius() -> None:
    mask = np.ones((3, 3), dtype=bool)
    with pytest.raises(InvalidParameterError):
        dilate(mask, 0.5)
