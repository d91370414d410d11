"""
Configuration primitives for the devas low-vision filter.

Defines enums for the filtering variants, margin handling, and FFT backends,
and a dataclass collecting the parameters of one filtering run.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from devas.core.errors import InvalidParameterError
from devas.neural.csf import CSFModel

# Acuity adjustments beyond this ratio are not physiologically meaningful.
MAX_PLAUSIBLE_ACUITY = 4.0

# Radiance equal-energy white point.
RADIANCE_WHITE: Tuple[float, float] = (0.3333, 0.3333)


class SmoothingMethod(Enum):
    """How below-threshold pixels next to visible contrast are restored."""

    FEATHER = "feather"  # Distance-weighted linear fall-off
    DILATE = "dilate"    # Binary dilation of the above-threshold mask


class FilterType(Enum):
    """Luminance filter selection."""

    PELI_THRESHOLD = "peli_threshold"  # Band decomposition with CSF thresholding
    CSF_MTF = "csf_mtf"                # CSF ratio applied as a transfer function


class AcuityReference(Enum):
    """Which CSF frequency the acuity adjustment is relative to."""

    PEAK = "peak"
    CUTOFF = "cutoff"


class FFTBackend(Enum):
    """Real-to-complex FFT implementation."""

    NUMPY = "numpy"
    SCIPY = "scipy"
    TORCH = "torch"


class MarginFill(Enum):
    """Source of pixel values inside an added margin."""

    REFLECT = "reflect"  # Mirror of the interior
    EDGE = "edge"        # Nearest edge pixel repeated outward


class MarginBackground(Enum):
    """Pixels averaged to obtain the margin background luminance."""

    BORDER = "border"  # Outermost rows and columns only
    IMAGE = "image"    # Every pixel


@dataclass
class FilterConfig:
    """
    Complete configuration for one low-vision filtering run.

    Defaults correspond to normal vision with edge-preserving smoothing, no
    desaturation, and no margin.
    """

    # Observer
    acuity: float = 1.0  # ratio of impaired to normal peak (or cutoff) frequency
    contrast: float = 1.0  # ratio of impaired to normal peak sensitivity
    acuity_reference: AcuityReference = AcuityReference.PEAK
    csf_model: CSFModel = field(default_factory=CSFModel.normal_vision)

    # Luminance filter
    filter_type: FilterType = FilterType.PELI_THRESHOLD
    smoothing: bool = True
    smoothing_method: SmoothingMethod = SmoothingMethod.FEATHER

    # Chromaticity
    saturation: float = 1.0
    white_point: Tuple[float, float] = RADIANCE_WHITE

    # Margin, as a fraction of image size split evenly between both sides
    margin: float = 0.0
    margin_fill: MarginFill = MarginFill.REFLECT
    margin_background: MarginBackground = MarginBackground.BORDER

    fft_backend: FFTBackend = FFTBackend.NUMPY

    def validate(self) -> None:
        """Validate configuration parameters."""

        if not (0.0 < self.acuity <= MAX_PLAUSIBLE_ACUITY):
            raise InvalidParameterError(
                "acuity", self.acuity, f"out of range (0, {MAX_PLAUSIBLE_ACUITY}]"
            )

        if not (0.0 < self.contrast <= 1.0):
            raise InvalidParameterError("contrast", self.contrast, "out of range (0, 1]")

        if not math.isfinite(self.saturation):
            raise InvalidParameterError("saturation", self.saturation, "must be finite")

        if not (math.isfinite(self.margin) and self.margin >= 0.0):
            raise InvalidParameterError("margin", self.margin, "must be finite and >= 0")

        wx, wy = self.white_point
        if not (wx > 0.0 and wy > 0.0 and wx + wy < 1.0):
            raise InvalidParameterError(
                "white_point", self.white_point, "must lie inside the chromaticity triangle"
            )

        if (
            self.acuity_reference == AcuityReference.CUTOFF
            and self.contrast * self.csf_model.peak_sensitivity < 1.0
        ):
            raise InvalidParameterError(
                "contrast", self.contrast, "leaves no visible frequency to take a cutoff from"
            )
