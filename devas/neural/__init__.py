"""Contrast sensitivity models."""

from devas.neural.csf import ChungLeggeCSF, CSFModel

__all__ = ["ChungLeggeCSF", "CSFModel"]
