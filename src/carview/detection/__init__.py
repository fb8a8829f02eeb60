"""Detection post-processing components for CarView."""

from .rotation import DisplayRotation, resolve_rotation
from .preprocessor import ImagePreprocessor
from .decoder import DetectionDecoder, MAX_RESULT_DISPLAY
from .coordinate_mapper import CoordinateMapper, CoordinateTransform, add_width_compensation
from .recognition_set import RecognitionSet, MIN_CONFIDENCE

__all__ = [
    "DisplayRotation",
    "resolve_rotation",
    "ImagePreprocessor",
    "DetectionDecoder",
    "MAX_RESULT_DISPLAY",
    "CoordinateMapper",
    "CoordinateTransform",
    "add_width_compensation",
    "RecognitionSet",
    "MIN_CONFIDENCE",
]
