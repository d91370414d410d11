"""
Real-to-complex 2D FFT wrappers and frequency maps on the half spectrum.

Transforms are unnormalized in both directions: ``inverse(forward(img))``
returns ``img * rows * cols``. Callers divide by the pixel count once, after
combining spectra.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from devas.core.config import FFTBackend
from devas.core.errors import InvalidParameterError, SizeMismatchError


# log2 radius assigned to the DC term, far below any band's passband
LOG2_RADIUS_DC = -10.0


class SpectralTransform:
    """Unnormalized 2D real FFT backed by ``numpy.fft``."""

    name = "numpy"

    def forward(self, image: np.ndarray) -> np.ndarray:
        """Half spectrum of a real image, shape (rows, cols // 2 + 1)."""

        return np.fft.rfft2(image)

    def inverse(self, spectrum: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
        """Real image of size ``shape`` from its half spectrum, without 1/N scaling."""

        return np.fft.irfft2(spectrum, s=shape, norm="forward")


class ScipySpectralTransform(SpectralTransform):
    """Unnormalized 2D real FFT backed by ``scipy.fft``."""

    name = "scipy"

    def __init__(self, workers: Optional[int] = None) -> None:
        self.workers = workers

    def forward(self, image: np.ndarray) -> np.ndarray:
        from scipy import fft as sp_fft

        return sp_fft.rfft2(image, workers=self.workers)

    def inverse(self, spectrum: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
        from scipy import fft as sp_fft

        return sp_fft.irfft2(spectrum, s=shape, norm="forward", workers=self.workers)


def get_transform(backend: FFTBackend = FFTBackend.NUMPY) -> SpectralTransform:
    """Instantiate the transform for ``backend``."""

    if backend == FFTBackend.NUMPY:
        return SpectralTransform()
    if backend == FFTBackend.SCIPY:
        return ScipySpectralTransform()
    if backend == FFTBackend.TORCH:
        try:
            from devas.torch.fft import TorchSpectralTransform
        except ImportError as exc:
            raise InvalidParameterError("fft_backend", backend.value, "torch is not installed") from exc
        return TorchSpectralTransform()
    raise InvalidParameterError("fft_backend", backend, "unknown backend")


def rxc(spectrum: np.ndarray, weights, out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Multiply a complex spectrum by real weights, elementwise or by a scalar.
    """

    weights = np.asarray(weights)
    if weights.ndim and weights.shape != spectrum.shape:
        raise SizeMismatchError(spectrum.shape, weights.shape)
    if out is not None and out.shape != spectrum.shape:
        raise SizeMismatchError(spectrum.shape, out.shape)
    return np.multiply(spectrum, weights, out=out)


def radial_frequency(shape: Tuple[int, int]) -> np.ndarray:
    """
    Radial frequency in cycles/image for every cell of the half spectrum.

    Row ``k`` is ``min(k, rows - k)`` cycles vertically; column ``j`` is ``j``
    cycles horizontally.
    """

    rows, cols = shape
    k = np.arange(rows, dtype=np.float64)
    freq_y = np.minimum(k, rows - k)
    freq_x = np.arange(cols // 2 + 1, dtype=np.float64)
    fx, fy = np.meshgrid(freq_x, freq_y)
    return np.sqrt(fx**2 + fy**2)


def log2_radius(shape: Tuple[int, int]) -> np.ndarray:
    """``log2`` of :func:`radial_frequency`, with the DC cell set to a sentinel."""

    radius = radial_frequency(shape)
    radius[0, 0] = 1.0
    log2r = np.log2(radius)
    log2r[0, 0] = LOG2_RADIUS_DC
    return log2r
