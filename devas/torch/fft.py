"""
Unnormalized 2D real FFT backed by ``torch.fft``.

Runs on the CPU in double precision so results agree with the numpy backend.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
import torch

from devas.spectral.fft import SpectralTransform
from devas.torch.common import ensure_tensor, to_numpy


class TorchSpectralTransform(SpectralTransform):
    """Drop-in replacement for the numpy transform."""

    name = "torch"

    def __init__(self, device: torch.device = torch.device("cpu")) -> None:
        self.device = device

    def forward(self, image: np.ndarray) -> np.ndarray:
        tensor = ensure_tensor(image, device=self.device)
        return to_numpy(torch.fft.rfft2(tensor))

    def inverse(self, spectrum: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
        tensor = ensure_tensor(spectrum, device=self.device, dtype=torch.complex128)
        return to_numpy(torch.fft.irfft2(tensor, s=tuple(shape), norm="forward"))
