"""Luminance and chromaticity filters."""
