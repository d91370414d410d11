"""
Margins that suppress FFT wraparound.

Spectral filtering treats the image as periodic, so content near one edge
bleeds into the opposite edge. Padding the image with a margin whose
luminance fades toward a background value moves that interaction out of the
region of interest. The margin is removed again after filtering.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import numpy as np

from devas.core.config import MarginBackground, MarginFill
from devas.core.errors import InvalidParameterError
from devas.core.image import FieldOfView, Image

logger = logging.getLogger(__name__)

# Steepness of the sigmoid fade inside the margin
MARGIN_SIGMOID_GAIN = 6.0


def sigmoid(x):
    return 1.0 / (1.0 + np.exp(-x))


def margin_weight(distance: np.ndarray) -> np.ndarray:
    """Blend weight of the original value at normalized margin depth ``distance``."""

    return 2.0 * (sigmoid(MARGIN_SIGMOID_GAIN * (1.0 - distance)) - 0.5)


def add_margin(
    v_margin: int,
    h_margin: int,
    image: Image,
    fill: MarginFill = MarginFill.REFLECT,
    background: MarginBackground = MarginBackground.BORDER,
) -> Image:
    """
    Pad ``image`` with ``v_margin`` rows above and below and ``h_margin`` columns each side.

    Margin pixels take their value from the interior (mirrored or repeated
    edge) and their luminance is faded toward the background luminance with
    increasing distance from the original image. Chromaticity is copied
    without fading. The field of view grows so that degrees per pixel stay
    the same.
    """

    if v_margin < 1 or h_margin < 1:
        raise InvalidParameterError("margin", (v_margin, h_margin), "margins must be >= 1 pixel")

    n_rows, n_cols = image.shape
    if n_rows < 2 or n_cols < 2:
        raise InvalidParameterError("image", image.shape, "image must be at least 2x2")
    if not image.view.is_valid:
        raise InvalidParameterError("field_of_view", image.view, "invalid or missing field of view")

    if 2 * v_margin > n_rows or 2 * h_margin > n_cols:
        logger.warning(
            "Margin (%d, %d) larger than half the image size (%d, %d)",
            v_margin,
            h_margin,
            n_rows,
            n_cols,
        )

    luminance = _luminance(image.data)
    if background == MarginBackground.IMAGE:
        background_luminance = float(np.mean(luminance))
    else:
        border = np.concatenate(
            [luminance[0, :], luminance[-1, :], luminance[1:-1, 0], luminance[1:-1, -1]]
        )
        background_luminance = float(np.mean(border))

    pad_width = [(v_margin, v_margin), (h_margin, h_margin)]
    if image.data.ndim == 3:
        pad_width.append((0, 0))
    mode = "symmetric" if fill == MarginFill.REFLECT else "edge"
    padded = np.pad(image.data, pad_width, mode=mode).astype(np.float64)

    depth = _margin_depth(n_rows, n_cols, v_margin, h_margin)
    in_margin = depth > 0.0
    weight = margin_weight(depth)
    padded_luminance = _luminance(padded)
    padded_luminance[in_margin] = (
        weight[in_margin] * padded_luminance[in_margin]
        + (1.0 - weight[in_margin]) * background_luminance
    )

    new_shape = padded.shape[:2]
    logger.debug(
        "Added margin (%d, %d): %s -> %s, background %.4g",
        v_margin,
        h_margin,
        image.shape,
        new_shape,
        background_luminance,
    )
    return image.with_data(padded, view=image.view.scaled(image.shape, new_shape))


def strip_margin(
    v_margin: int,
    h_margin: int,
    image: Image,
    view: Optional[FieldOfView] = None,
) -> Image:
    """
    Remove margins added by :func:`add_margin`, restoring the field of view.

    Without ``view`` the field of view is rescaled from degrees per pixel,
    which can differ from the pre-margin value in the last bits. Passing the
    pre-margin ``view`` restores it exactly.
    """

    if v_margin < 0 or h_margin < 0:
        raise InvalidParameterError("margin", (v_margin, h_margin), "margins must be >= 0")

    n_rows, n_cols = image.shape
    new_rows = n_rows - 2 * v_margin
    new_cols = n_cols - 2 * h_margin
    if new_rows < 1 or new_cols < 1:
        raise InvalidParameterError(
            "margin", (v_margin, h_margin), f"margins too big for image {image.shape}"
        )
    if not image.view.is_valid:
        raise InvalidParameterError("field_of_view", image.view, "invalid or missing field of view")

    stripped = image.data[v_margin : n_rows - v_margin, h_margin : n_cols - h_margin].copy()
    if view is None:
        view = image.view.scaled(image.shape, (new_rows, new_cols))
    return image.with_data(stripped, view=view)


def margin_size(fraction: float, shape: Tuple[int, int]) -> Tuple[int, int]:
    """
    Per-side margins for a margin expressed as a fraction of image size.

    Half of ``fraction`` goes on each side. Any positive fraction yields at
    least one pixel.
    """

    n_rows, n_cols = shape
    return (
        max(1, int(round(0.5 * fraction * n_rows))),
        max(1, int(round(0.5 * fraction * n_cols))),
    )


def _luminance(data: np.ndarray) -> np.ndarray:
    return data if data.ndim == 2 else data[:, :, 2]


def _margin_depth(n_rows: int, n_cols: int, v_margin: int, h_margin: int) -> np.ndarray:
    """
    Normalized depth into the margin for every pixel of the padded image.

    0 inside the original image, ``1 / margin`` next to it and 1 at the outer
    edge. Corners combine both axes as a Euclidean norm clamped to 1.
    """

    row_depth = np.concatenate(
        [
            np.arange(v_margin, 0, -1, dtype=np.float64),
            np.zeros(n_rows),
            np.arange(1, v_margin + 1, dtype=np.float64),
        ]
    ) / v_margin
    col_depth = np.concatenate(
        [
            np.arange(h_margin, 0, -1, dtype=np.float64),
            np.zeros(n_cols),
            np.arange(1, h_margin + 1, dtype=np.float64),
        ]
    ) / h_margin
    depth = np.sqrt(row_depth[:, None] ** 2 + col_depth[None, :] ** 2)
    return np.minimum(depth, 1.0)
