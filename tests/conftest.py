"""
Pytest fixtures for CarView tests.

Provides common test fixtures including:
- Test configuration
- Label tables
- Synthetic detection batches and frames
- A fake detection model
"""

import numpy as np
import pytest

from carview.core.context import InferenceContext
from carview.core.labels import LabelTable
from carview.core.recognition import DetectionBatch

CAR_LABELS = [
    "AM General Hummer SUV 2000",
    "Acura RL Sedan 2012",
    "Audi A5 Coupe 2012",
    "BMW M3 Coupe 2012",
    "Tesla Model S Sedan 2012",
]


@pytest.fixture
def test_config():
    """Test configuration dictionary."""
    return {
        "model": {
            "labels": "labelmap.txt",
            "input_width": 640,
            "input_height": 640,
        },
        "postprocessing": {
            "max_results": 3,
            "min_confidence": 0.4,
        },
        "rotation": {
            "calibration": {0: 3, 90: 0, 180: 4, 270: 2},
        },
        "overlay": {
            "width_compensation": {
                "enabled": True,
                "analysis_width": 640,
                "scale": 1.0,
            },
            "box_color": None,
            "stroke_width": 8,
            "text_scale": 1.0,
        },
        "palette": {"enabled": True},
        "worker": {"join_timeout": 2.0},
        "logging": {"level": "INFO"},
    }


@pytest.fixture
def label_file(tmp_path):
    """Label file with a handful of car classes."""
    path = tmp_path / "labelmap.txt"
    path.write_text("\n".join(CAR_LABELS) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def labels():
    """In-memory label table."""
    return LabelTable(CAR_LABELS)


@pytest.fixture
def sample_batch():
    """Three detections with unsorted scores."""
    return make_batch(
        classes=[1, 2, 3],
        scores=[0.2, 0.9, 0.5],
        boxes=[
            [0.1, 0.1, 0.2, 0.2],
            [0.1, 0.2, 0.5, 0.6],
            [0.5, 0.5, 0.9, 0.9],
        ],
    )


@pytest.fixture
def sample_frame():
    """640x640 BGR frame with a gray background."""
    return np.full((640, 640, 3), 90, dtype=np.uint8)


@pytest.fixture
def fake_model(sample_batch):
    """Model stub returning sample_batch and recording its inputs."""
    return FakeModel(sample_batch)


@pytest.fixture
def context(fake_model, labels):
    """InferenceContext around the fake model."""
    return InferenceContext(model=fake_model, labels=labels)


class FakeModel:
    """Detection model stub."""

    def __init__(self, batch: DetectionBatch):
        self.batch = batch
        self.inputs: list[np.ndarray] = []

    def __call__(self, tensor: np.ndarray) -> DetectionBatch:
        self.inputs.append(tensor)
        return self.batch


def make_batch(classes, scores, boxes, num_boxes=None) -> DetectionBatch:
    """
    Build a DetectionBatch from plain lists.

    Args:
        classes: Class index per detection
        scores: Score per detection
        boxes: Normalized [y1, x1, y2, x2] per detection
        num_boxes: Reported count (defaults to len(scores))

    Returns:
        DetectionBatch
    """
    return DetectionBatch(
        num_boxes=len(scores) if num_boxes is None else num_boxes,
        class_indices=np.asarray(classes, dtype=np.int64),
        scores=np.asarray(scores, dtype=np.float32),
        boxes=np.asarray(boxes, dtype=np.float32).reshape(-1, 4),
    )


@pytest.fixture
def batch_factory():
    """Factory for DetectionBatch instances."""
    return make_batch


@pytest.fixture
def model_factory():
    """Factory for FakeModel instances."""
    return FakeModel
