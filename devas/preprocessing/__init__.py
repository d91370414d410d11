"""Margin handling around spectral filtering."""

from devas.preprocessing.margin import add_margin, strip_margin

__all__ = ["add_margin", "strip_margin"]
