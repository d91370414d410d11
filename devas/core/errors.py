"""
Exception types raised by the devas filtering core.

Invalid caller input maps onto ``ValueError`` subclasses so that code written
against plain ``ValueError`` keeps working.
"""

from __future__ import annotations

from typing import Any, Tuple


class DevasError(Exception):
    """Base class for all devas errors."""


class InvalidParameterError(DevasError, ValueError):
    """A numeric parameter or image property is outside its valid domain."""

    def __init__(self, name: str, value: Any, reason: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"{name}={value!r}: {reason}")


class SizeMismatchError(DevasError, ValueError):
    """Two images combined in one operation have different dimensions."""

    def __init__(self, expected: Tuple[int, ...], actual: Tuple[int, ...]) -> None:
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(f"Image size mismatch: expected {self.expected}, got {self.actual}")


class DegenerateGeometryError(DevasError, ArithmeticError):
    """Line intersection requested for parallel or coincident lines."""
