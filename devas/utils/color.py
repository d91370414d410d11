"""
Color space transformations between linear sRGB, XYZ and xyY.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np


class ColorTransform:
    """Color space transformation utilities."""

    def __init__(self, white_point: Tuple[float, float] = (0.3333, 0.3333)) -> None:
        """Initialize color transform matrices."""

        # sRGB to XYZ (D65)
        self.srgb_to_xyz_matrix = np.array(
            [
                [0.4124564, 0.3575761, 0.1804375],
                [0.2126729, 0.7151522, 0.0721750],
                [0.0193339, 0.1191920, 0.9503041],
            ]
        )
        self.xyz_to_srgb_matrix = np.linalg.inv(self.srgb_to_xyz_matrix)

        # Chromaticity assigned to black pixels
        self.white_point = white_point

    def srgb_to_xyz(self, rgb: np.ndarray) -> np.ndarray:
        """
        Convert linear sRGB to XYZ.

        Parameters
        ----------
        rgb : np.ndarray
            Linear sRGB (cd/m^2), shape (H, W, 3)
        """

        return np.dot(rgb, self.srgb_to_xyz_matrix.T)

    def xyz_to_srgb(self, xyz: np.ndarray) -> np.ndarray:
        """Convert XYZ to linear sRGB."""

        return np.dot(xyz, self.xyz_to_srgb_matrix.T)

    def xyz_to_xyy(self, xyz: np.ndarray) -> np.ndarray:
        """
        Convert XYZ to chromaticity plus luminance, channel order (x, y, Y).

        Pixels with a non-positive tristimulus sum get the white point.
        """

        total = np.sum(xyz, axis=-1)
        valid = total > 0.0
        safe_total = np.where(valid, total, 1.0)

        xyy = np.empty_like(xyz, dtype=np.float64)
        xyy[..., 0] = np.where(valid, xyz[..., 0] / safe_total, self.white_point[0])
        xyy[..., 1] = np.where(valid, xyz[..., 1] / safe_total, self.white_point[1])
        xyy[..., 2] = xyz[..., 1]
        return xyy

    def xyy_to_xyz(self, xyy: np.ndarray) -> np.ndarray:
        """Convert (x, y, Y) back to XYZ. Pixels with y <= 0 map to black."""

        x = xyy[..., 0]
        y = xyy[..., 1]
        lum = xyy[..., 2]
        valid = y > 0.0
        scale = np.where(valid, lum / np.where(valid, y, 1.0), 0.0)

        xyz = np.empty_like(xyy, dtype=np.float64)
        xyz[..., 0] = x * scale
        xyz[..., 1] = np.where(valid, lum, 0.0)
        xyz[..., 2] = (1.0 - x - y) * scale
        return xyz
