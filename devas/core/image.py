"""
In-memory image model.

An :class:`Image` is a row-major numpy array plus the viewing geometry needed
to convert cycles/image into cycles/degree. :class:`XYYImage` fixes the
channel layout to ``(x, y, Y)``: CIE chromaticity followed by luminance.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np

from devas.core.errors import InvalidParameterError, SizeMismatchError
from devas.utils.color import ColorTransform


@dataclass(frozen=True)
class FieldOfView:
    """Angular extent of an image in degrees."""

    horiz: float
    vert: float

    @classmethod
    def missing(cls) -> "FieldOfView":
        return cls(0.0, 0.0)

    @property
    def is_valid(self) -> bool:
        return self.horiz > 0.0 and self.vert > 0.0

    @property
    def max_angle(self) -> float:
        return max(self.horiz, self.vert)

    def scaled(self, old_shape: Tuple[int, int], new_shape: Tuple[int, int]) -> "FieldOfView":
        """Field of view after resizing with degrees-per-pixel held fixed."""

        old_rows, old_cols = old_shape
        new_rows, new_cols = new_shape
        return FieldOfView(
            horiz=new_cols * (self.horiz / old_cols),
            vert=new_rows * (self.vert / old_rows),
        )


@dataclass
class Image:
    """
    Image data with field of view, description and exposure.

    ``data`` has shape ``(rows, cols)`` for scalar images or
    ``(rows, cols, channels)`` otherwise.
    """

    data: np.ndarray
    view: FieldOfView = FieldOfView(0.0, 0.0)
    description: Optional[str] = None
    exposure: float = 1.0
    exposure_set: bool = False

    def __post_init__(self) -> None:
        self.data = np.asarray(self.data)
        if self.data.ndim not in (2, 3):
            raise InvalidParameterError("data", self.data.shape, "expected a 2D or 3D array")

    @property
    def shape(self) -> Tuple[int, int]:
        return int(self.data.shape[0]), int(self.data.shape[1])

    @property
    def n_rows(self) -> int:
        return int(self.data.shape[0])

    @property
    def n_cols(self) -> int:
        return int(self.data.shape[1])

    def with_data(self, data: np.ndarray, view: Optional[FieldOfView] = None) -> "Image":
        """Copy of this image with new pixel data and optionally a new view."""

        return replace(self, data=data, view=self.view if view is None else view)


class XYYImage(Image):
    """Image whose channels are chromaticity x, chromaticity y and luminance Y."""

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.data.ndim != 3 or self.data.shape[2] != 3:
            raise InvalidParameterError("data", self.data.shape, "expected an H x W x 3 xyY array")
        self.data = self.data.astype(np.float64, copy=False)

    @classmethod
    def from_channels(
        cls,
        x: np.ndarray,
        y: np.ndarray,
        luminance: np.ndarray,
        view: FieldOfView,
        description: Optional[str] = None,
    ) -> "XYYImage":
        check_same_size(x, luminance)
        check_same_size(y, luminance)
        return cls(np.stack([x, y, luminance], axis=-1), view=view, description=description)

    @classmethod
    def from_luminance(
        cls,
        luminance: np.ndarray,
        view: FieldOfView,
        white_point: Tuple[float, float] = (0.3333, 0.3333),
        description: Optional[str] = None,
    ) -> "XYYImage":
        """Achromatic image with every pixel at ``white_point``."""

        luminance = np.asarray(luminance, dtype=np.float64)
        x = np.full_like(luminance, white_point[0])
        y = np.full_like(luminance, white_point[1])
        return cls.from_channels(x, y, luminance, view, description)

    @classmethod
    def from_rgb(
        cls,
        rgb: np.ndarray,
        view: FieldOfView,
        description: Optional[str] = None,
    ) -> "XYYImage":
        """Build from linear sRGB in cd/m^2."""

        transform = ColorTransform()
        return cls(transform.xyz_to_xyy(transform.srgb_to_xyz(rgb)), view=view, description=description)

    def to_rgb(self) -> np.ndarray:
        """Convert back to linear sRGB."""

        transform = ColorTransform()
        return transform.xyz_to_srgb(transform.xyy_to_xyz(self.data))

    @property
    def chroma_x(self) -> np.ndarray:
        return self.data[:, :, 0]

    @property
    def chroma_y(self) -> np.ndarray:
        return self.data[:, :, 1]

    @property
    def luminance(self) -> np.ndarray:
        return self.data[:, :, 2]


def check_same_size(a: np.ndarray, b: np.ndarray) -> None:
    """Raise :class:`SizeMismatchError` unless both arrays share rows and columns."""

    if a.shape[:2] != b.shape[:2]:
        raise SizeMismatchError(b.shape[:2], a.shape[:2])
