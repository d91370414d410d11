"""
Basic usage examples for devas.
"""

from __future__ import annotations

import numpy as np

from devas import FieldOfView, FilterConfig, LowVisionFilter, XYYImage, devas_filter


def make_test_image(size: int = 256) -> XYYImage:
    """Bright square on a dim background, 30 degrees wide."""

    rgb = np.full((size, size, 3), 20.0)
    rgb[size // 4 : 3 * size // 4, size // 4 : 3 * size // 4] = [120.0, 60.0, 30.0]
    return XYYImage.from_rgb(rgb, FieldOfView(30.0, 30.0), description="square")


def example_simple() -> XYYImage:
    """Run the pipeline with default (normal vision) configuration."""

    image = make_test_image()
    result = LowVisionFilter().process(image)
    print(f"Simple example luminance range: [{result.luminance.min():0.2f}, {result.luminance.max():0.2f}]")
    return result


def example_reduced_acuity() -> XYYImage:
    """Simulate roughly 20/200 acuity with moderate contrast loss."""

    image = make_test_image()
    config = FilterConfig(acuity=0.1, contrast=0.3, saturation=0.5)
    result = LowVisionFilter(config).process(image)
    print(f"Low vision luminance range: [{result.luminance.min():0.2f}, {result.luminance.max():0.2f}]")
    return result


def example_convenience_function() -> XYYImage:
    """Filter using the high-level convenience wrapper."""

    image = make_test_image(128)
    result = devas_filter(image, acuity=0.25, contrast=0.5, smoothing=True, saturation=1.0)
    print(f"Convenience example luminance range: [{result.luminance.min():0.2f}, {result.luminance.max():0.2f}]")
    return result


if __name__ == "__main__":
    print("Running devas basic examples...")
    example_simple()
    example_reduced_acuity()
    example_convenience_function()
