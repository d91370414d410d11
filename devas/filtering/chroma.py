"""
Chromaticity low-pass filtering, desaturation and gamut clipping.

Color contrast sensitivity is not modeled separately: the x and y channels
are low-passed with the luminance CSF used as a transfer function,
normalized to 1 at and below the peak frequency.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from devas.core.errors import DegenerateGeometryError
from devas.core.image import FieldOfView, check_same_size
from devas.neural.csf import ChungLeggeCSF
from devas.spectral.fft import SpectralTransform, radial_frequency, rxc

logger = logging.getLogger(__name__)

LINE_INTERSECTION_EPSILON = 1e-4

# Edges of the chromaticity triangle (0, 0), (1, 0), (0, 1)
_GAMUT_EDGES = (
    ((0.0, 0.0), (1.0, 0.0)),
    ((0.0, 0.0), (0.0, 1.0)),
    ((1.0, 0.0), (0.0, 1.0)),
)


def csf_transfer(
    shape: Tuple[int, int],
    view: FieldOfView,
    csf: ChungLeggeCSF,
    acuity_adjust: float,
    contrast_adjust: float,
) -> np.ndarray:
    """Half-spectrum weights: 1 up to the CSF peak, S(f) / S_peak above it."""

    freq = radial_frequency(shape) / view.max_angle
    weights = np.ones_like(freq)
    above_peak = freq > csf.peak_frequency(acuity_adjust, contrast_adjust)
    if above_peak.any():
        weights[above_peak] = csf.sensitivity(
            freq[above_peak], acuity_adjust, contrast_adjust
        ) / csf.peak_sensitivity(acuity_adjust, contrast_adjust)
    return weights


def desaturate(
    x: np.ndarray,
    y: np.ndarray,
    saturation: float,
    white_point: Tuple[float, float],
) -> Tuple[np.ndarray, np.ndarray]:
    """Move chromaticity toward ``white_point``. Only 0 < saturation < 1 changes values."""

    if not (0.0 < saturation < 1.0):
        return x, y
    white_x, white_y = white_point
    return (
        saturation * x + (1.0 - saturation) * white_x,
        saturation * y + (1.0 - saturation) * white_y,
    )


def line_intersection(
    p1: Tuple,
    p2: Tuple,
    p3: Tuple,
    p4: Tuple,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Intersection of the line through ``p1``, ``p2`` with the line through ``p3``, ``p4``.

    Coordinates may be scalars or arrays. Raises :class:`DegenerateGeometryError`
    when the lines are parallel or coincident.
    """

    x1, y1 = p1
    x2, y2 = p2
    x3, y3 = p3
    x4, y4 = p4

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if np.any(np.abs(denom) < LINE_INTERSECTION_EPSILON):
        raise DegenerateGeometryError("Line intersection of parallel or coincident lines")

    a = x1 * y2 - y1 * x2
    b = x3 * y4 - y3 * x4
    ix = (a * (x3 - x4) - (x1 - x2) * b) / denom
    iy = (a * (y3 - y4) - (y1 - y2) * b) / denom
    return ix, iy


def clip_to_gamut(
    x: np.ndarray,
    y: np.ndarray,
    white_point: Tuple[float, float],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Pull out-of-triangle chromaticities onto the triangle boundary.

    Each offending value moves along the line from the white point toward
    it, stopping at the first edge that line crosses.
    """

    x = np.array(x, dtype=np.float64)
    y = np.array(y, dtype=np.float64)
    outside = (x < 0.0) | (y < 0.0) | (x + y > 1.0)
    if not outside.any():
        return x, y

    px = x[outside]
    py = y[outside]
    white_x, white_y = white_point
    best_x = px.copy()
    best_y = py.copy()
    best_dist = np.full(px.shape, np.inf)

    violations = (py < 0.0, px < 0.0, px + py > 1.0)
    for (start, end), violated in zip(_GAMUT_EDGES, violations):
        if not violated.any():
            continue
        ix, iy = line_intersection(
            (white_x, white_y),
            (px[violated], py[violated]),
            start,
            end,
        )
        dist = (ix - white_x) ** 2 + (iy - white_y) ** 2
        closer = dist < best_dist[violated]
        idx = np.flatnonzero(violated)[closer]
        best_x[idx] = ix[closer]
        best_y[idx] = iy[closer]
        best_dist[idx] = dist[closer]

    # Round-off can leave intersections a few ulps outside
    best_x = np.clip(best_x, 0.0, 1.0)
    best_y = np.clip(best_y, 0.0, 1.0 - best_x)

    x[outside] = best_x
    y[outside] = best_y
    return x, y


class ChromaFilter:
    """Low-pass, desaturate and gamut-clip the chromaticity channels."""

    def __init__(
        self,
        csf: Optional[ChungLeggeCSF] = None,
        transform: Optional[SpectralTransform] = None,
        white_point: Tuple[float, float] = (0.3333, 0.3333),
    ) -> None:
        self.csf = csf or ChungLeggeCSF()
        self.transform = transform or SpectralTransform()
        self.white_point = white_point

    def filter(
        self,
        x: np.ndarray,
        y: np.ndarray,
        view: FieldOfView,
        acuity_adjust: float,
        contrast_adjust: float,
        saturation: float = 1.0,
    ) -> Tuple[np.ndarray, np.ndarray]:
        check_same_size(x, y)

        if saturation <= 0.0:
            logger.debug("Saturation %.3f: chromaticity set to white point", saturation)
            return (
                np.full(x.shape, self.white_point[0]),
                np.full(y.shape, self.white_point[1]),
            )

        weights = csf_transfer(x.shape, view, self.csf, acuity_adjust, contrast_adjust)
        x_filtered = self._apply(x, weights)
        y_filtered = self._apply(y, weights)

        x_filtered, y_filtered = desaturate(x_filtered, y_filtered, saturation, self.white_point)
        return clip_to_gamut(x_filtered, y_filtered, self.white_point)

    def _apply(self, channel: np.ndarray, weights: np.ndarray) -> np.ndarray:
        n_pixels = channel.shape[0] * channel.shape[1]
        spectrum = self.transform.forward(channel)
        return self.transform.inverse(rxc(spectrum, weights), channel.shape) / n_pixels
