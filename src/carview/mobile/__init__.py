"""
CarView Mobile - background processing for the live preview.

Frames from the camera analysis stream are processed on a single worker
thread; the UI thread reads immutable result snapshots.
"""

from .detection_worker import AnalysisFrame, DetectionWorker, ResultChannel

__all__ = ["AnalysisFrame", "DetectionWorker", "ResultChannel"]
