"""
Exception types for CarView.
"""


class CarViewError(Exception):
    """Base class for CarView errors."""


class LabelTableError(CarViewError):
    """Raised when the label file is missing, unreadable or empty."""


class GeometryError(CarViewError, ValueError):
    """Raised when no valid coordinate transform exists for a frame geometry."""
