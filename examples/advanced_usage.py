"""
Advanced devas usage scenarios.
"""

from __future__ import annotations

import logging

import numpy as np

from devas import (
    AcuityReference,
    FFTBackend,
    FieldOfView,
    FilterConfig,
    FilterType,
    LowVisionFilter,
    SmoothingMethod,
    XYYImage,
)


def make_text_like_image(size: int = 256) -> XYYImage:
    """Dark bars of decreasing width on a bright background."""

    lum = np.full((size, size), 150.0)
    col = 8
    width = 16
    while width >= 1 and col + width < size:
        lum[size // 4 : 3 * size // 4, col : col + width] = 15.0
        col += 2 * width + 4
        width //= 2
    return XYYImage.from_luminance(lum, FieldOfView(20.0, 20.0), description="bars")


def example_with_intermediate_results() -> dict:
    """Inspect how each frequency band was handled."""

    image = make_text_like_image()
    config = FilterConfig(acuity=0.2, contrast=0.5)
    results = LowVisionFilter(config).process(image, return_intermediate=True)
    for band in results["bands"]:
        print(
            f"band {band.index}: {band.peak_frequency_angle:6.2f} c/deg, "
            f"S={band.sensitivity:7.2f}, {band.status}, {100 * band.visible_fraction:5.1f}% visible"
        )
    return results


def example_cutoff_acuity_with_margin() -> XYYImage:
    """Acuity relative to the cutoff frequency, with a margin against wraparound."""

    image = make_text_like_image()
    config = FilterConfig(
        acuity=0.1,
        contrast=0.2,
        acuity_reference=AcuityReference.CUTOFF,
        margin=0.25,
    )
    result = LowVisionFilter(config).process(image)
    print(f"Cutoff-referenced output luminance mean: {result.luminance.mean():0.2f}")
    return result


def example_comparison() -> dict:
    """Compare smoothing variants and the CSF transfer filter."""

    image = make_text_like_image(128)
    configs = {
        "feather": FilterConfig(acuity=0.2, contrast=0.5),
        "dilate": FilterConfig(acuity=0.2, contrast=0.5, smoothing_method=SmoothingMethod.DILATE),
        "threshold only": FilterConfig(acuity=0.2, contrast=0.5, smoothing=False),
        "csf transfer": FilterConfig(acuity=0.2, contrast=0.5, filter_type=FilterType.CSF_MTF),
    }
    outputs = {}
    for name, config in configs.items():
        outputs[name] = LowVisionFilter(config).process(image)
        print(f"{name}: luminance std {outputs[name].luminance.std():0.2f}")
    return outputs


def example_torch_backend():
    """Use the PyTorch FFT backend (requires torch)."""
    try:
        import torch  # noqa: F401
    except ImportError:
        print("PyTorch not installed; skipping torch example.")
        return None

    image = make_text_like_image(128)
    config = FilterConfig(acuity=0.3, contrast=0.5, fft_backend=FFTBackend.TORCH)
    result = LowVisionFilter(config).process(image)
    print(f"Torch backend luminance range: [{result.luminance.min():0.2f}, {result.luminance.max():0.2f}]")
    return result


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Running devas advanced examples...")
    example_with_intermediate_results()
    example_cutoff_acuity_with_margin()
    example_comparison()
    example_torch_backend()
