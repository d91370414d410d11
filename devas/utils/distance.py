"""
Squared Euclidean distance transform of binary masks.

Felzenszwalb & Huttenlocher, "Distance Transforms of Sampled Functions",
Theory of Computing 8 (2012). The 2D transform is two 1D lower-envelope
passes, first down the columns and then along the rows. Each pass runs the
1D algorithm on every line of the image at once, so the Python-level loop is
over positions along a line and the per-line stacks live in numpy arrays.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from devas.core.errors import InvalidParameterError, SizeMismatchError


def distance_transform(mask: np.ndarray, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Squared distance from every pixel to the nearest ``True`` pixel of ``mask``.

    Pixels with no marked pixel anywhere in the image get the sentinel value
    ``(n_rows + n_cols + 1) ** 2``.

    Parameters
    ----------
    mask : np.ndarray
        Boolean array, shape (H, W).
    out : np.ndarray, optional
        Float array of shape (H, W) that receives the result.
    """

    mask = np.asarray(mask, dtype=bool)
    if mask.ndim != 2:
        raise InvalidParameterError("mask", mask.shape, "expected a 2D array")
    if out is not None and out.shape != mask.shape:
        raise SizeMismatchError(mask.shape, out.shape)

    n_rows, n_cols = mask.shape
    infinity = float((n_rows + n_cols + 1) ** 2)

    dist = np.where(mask, 0.0, infinity)
    dist = _lower_envelope(dist.T).T
    dist = _lower_envelope(dist)
    np.minimum(dist, infinity, out=dist)

    if out is None:
        return dist
    out[...] = dist
    return out


def dilate(mask: np.ndarray, radius: float, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Mark every pixel within Euclidean ``radius`` of a ``True`` pixel of ``mask``.
    """

    if radius < 1.0:
        raise InvalidParameterError("radius", radius, "dilation radius must be >= 1")

    mask = np.asarray(mask, dtype=bool)
    if out is not None and out.shape != mask.shape:
        raise SizeMismatchError(mask.shape, out.shape)

    if mask.any():
        result = distance_transform(mask) <= radius * radius
    else:
        result = np.zeros(mask.shape, dtype=bool)

    if out is None:
        return result
    out[...] = result
    return out


def _lower_envelope(f: np.ndarray) -> np.ndarray:
    """
    1D squared distance transform of every row of ``f``.

    ``f`` holds sampled function values, shape (n_lines, n). Returns
    ``D[l, q] = min_p (q - p)^2 + f[l, p]``.
    """

    n_lines, n = f.shape
    lines = np.arange(n_lines)
    positions = np.arange(n, dtype=np.float64)
    lifted = f + positions**2

    # Parabola vertices in the envelope and the boundaries between them
    vertices = np.zeros((n_lines, n), dtype=np.intp)
    bounds = np.empty((n_lines, n + 1), dtype=np.float64)
    bounds[:, 0] = -np.inf
    bounds[:, 1] = np.inf
    top = np.zeros(n_lines, dtype=np.intp)

    for q in range(1, n):
        while True:
            v_top = vertices[lines, top]
            s = (lifted[:, q] - lifted[lines, v_top]) / (2.0 * (q - v_top))
            hidden = s <= bounds[lines, top]
            if not hidden.any():
                break
            top -= hidden
        top += 1
        vertices[lines, top] = q
        bounds[lines, top] = s
        bounds[lines, top + 1] = np.inf

    result = np.empty_like(f, dtype=np.float64)
    top[:] = 0
    for q in range(n):
        while True:
            behind = bounds[lines, top + 1] < q
            if not behind.any():
                break
            top += behind
        v_top = vertices[lines, top]
        result[:, q] = (q - v_top) ** 2 + f[lines, v_top]

    return result
