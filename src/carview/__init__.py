"""
CarView - Live Car Recognition Overlay

Post-processing for on-device car detection: turns raw model output into
ranked, labeled boxes aligned with the live camera preview.
"""

__version__ = "0.1.0"
__author__ = "CarView Team"

from .core.context import InferenceContext
from .core.pipeline import RecognitionPipeline
from .core.recognition import Recognition, Rect
from .detection.recognition_set import RecognitionSet

__all__ = [
    "InferenceContext",
    "RecognitionPipeline",
    "Recognition",
    "RecognitionSet",
    "Rect",
    "__version__",
]
