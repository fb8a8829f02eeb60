"""Core components for CarView."""

from .config import Config, setup_logging
from .errors import CarViewError, GeometryError, LabelTableError
from .labels import LabelTable
from .recognition import DetectionBatch, FrameMeta, Recognition, Rect

__all__ = [
    "Config",
    "setup_logging",
    "CarViewError",
    "GeometryError",
    "LabelTableError",
    "LabelTable",
    "DetectionBatch",
    "FrameMeta",
    "Recognition",
    "Rect",
]
