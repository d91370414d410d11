"""Deficient Visual Acuity Simulation (devas).

Filters calibrated xyY images to approximate how they appear to an observer
with reduced acuity and contrast sensitivity.
"""

from devas.core.config import (
    AcuityReference,
    FFTBackend,
    FilterConfig,
    FilterType,
    MarginBackground,
    MarginFill,
    SmoothingMethod,
)
from devas.core.errors import (
    DegenerateGeometryError,
    DevasError,
    InvalidParameterError,
    SizeMismatchError,
)
from devas.core.image import FieldOfView, Image, XYYImage
from devas.core.pipeline import LowVisionFilter, devas_filter
from devas.neural.csf import ChungLeggeCSF, CSFModel
from devas.preprocessing.margin import add_margin, strip_margin
from devas.utils.distance import dilate, distance_transform

__all__ = [
    "LowVisionFilter",
    "FilterConfig",
    "FilterType",
    "SmoothingMethod",
    "AcuityReference",
    "FFTBackend",
    "MarginFill",
    "MarginBackground",
    "FieldOfView",
    "Image",
    "XYYImage",
    "ChungLeggeCSF",
    "CSFModel",
    "DevasError",
    "InvalidParameterError",
    "SizeMismatchError",
    "DegenerateGeometryError",
    "add_margin",
    "strip_margin",
    "distance_transform",
    "dilate",
    "devas_filter",
]

try:  # Optional PyTorch FFT backend
    from devas.torch.fft import TorchSpectralTransform  # type: ignore

    __all__.append("TorchSpectralTransform")
except Exception:  # pragma: no cover - torch not installed
    TorchSpectralTransform = None  # type: ignore

__version__ = "1.0.0"
