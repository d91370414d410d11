"""
Comparison filter treating the CSF ratio as a modulation transfer function.

Every channel is attenuated by ``min(1, S_impaired(f) / S_normal(f))``. This
blurs but does not threshold, so it serves as a baseline against the band
decomposition filter.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from devas.core.image import FieldOfView
from devas.neural.csf import ChungLeggeCSF, CSFModel
from devas.spectral.fft import SpectralTransform, radial_frequency, rxc


def csf_ratio_transfer(
    shape: Tuple[int, int],
    view: FieldOfView,
    csf: ChungLeggeCSF,
    acuity_adjust: float,
    contrast_adjust: float,
) -> np.ndarray:
    """Half-spectrum weights ``min(1, S_impaired / S_normal)``, DC fixed at 1."""

    freq = radial_frequency(shape) / view.max_angle
    freq[0, 0] = 1.0
    impaired = csf.sensitivity(freq, acuity_adjust, contrast_adjust)
    normal = csf.sensitivity(freq, 1.0, 1.0)
    weights = np.minimum(1.0, impaired / normal)
    weights[0, 0] = 1.0
    return weights


class CSFTransferFilter:
    """Linear CSF-ratio filter applied to any number of channels."""

    def __init__(
        self,
        csf: Optional[ChungLeggeCSF] = None,
        transform: Optional[SpectralTransform] = None,
    ) -> None:
        self.csf = csf or ChungLeggeCSF(CSFModel.legacy_comparison())
        self.transform = transform or SpectralTransform()

    def transfer(
        self,
        shape: Tuple[int, int],
        view: FieldOfView,
        acuity_adjust: float,
        contrast_adjust: float,
    ) -> np.ndarray:
        return csf_ratio_transfer(shape, view, self.csf, acuity_adjust, contrast_adjust)

    def filter_channel(self, channel: np.ndarray, weights: np.ndarray) -> np.ndarray:
        n_pixels = channel.shape[0] * channel.shape[1]
        spectrum = self.transform.forward(channel)
        return self.transform.inverse(rxc(spectrum, weights), channel.shape) / n_pixels
