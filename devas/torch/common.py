"""
Shared helpers for the torch FFT backend.
"""

from __future__ import annotations

from typing import Optional

import numpy as np
import torch


def ensure_tensor(
    data,
    device: Optional[torch.device] = None,
    dtype: torch.dtype = torch.float64,
) -> torch.Tensor:
    """
    Convert input data to a torch tensor on the requested device.
    """

    if isinstance(data, torch.Tensor):
        tensor = data.to(dtype=dtype)
        if device is not None:
            tensor = tensor.to(device)
        return tensor

    return torch.as_tensor(np.ascontiguousarray(data), dtype=dtype, device=device)


def to_numpy(tensor: torch.Tensor) -> np.ndarray:
    """Detach a tensor and return it as a numpy array."""

    return tensor.detach().cpu().numpy()
