"""
Optional PyTorch FFT backend.
"""

from devas.torch.fft import TorchSpectralTransform

__all__ = ["TorchSpectralTransform"]
