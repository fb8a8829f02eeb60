"""
Recognition data structures.

Rectangles and recognitions are immutable: every coordinate stage returns
a new value instead of updating a shared one.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

import numpy as np


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned rectangle in some pixel coordinate space.

    Attributes:
        left: Minimum x
        top: Minimum y
        right: Maximum x
        bottom: Maximum y
    """

    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_points(cls, points: Iterable[tuple[float, float]]) -> "Rect":
        """Bounding rectangle of a set of (x, y) points."""
        xs, ys = zip(*points)
        return cls(
            left=float(min(xs)),
            top=float(min(ys)),
            right=float(max(xs)),
            bottom=float(max(ys)),
        )

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def is_finite(self) -> bool:
        return all(math.isfinite(v) for v in self.as_tuple())

    @property
    def is_ordered(self) -> bool:
        return self.left <= self.right and self.top <= self.bottom

    def corners(self) -> list[tuple[float, float]]:
        """Corners in clockwise order starting at the top-left."""
        return [
            (self.left, self.top),
            (self.right, self.top),
            (self.right, self.bottom),
            (self.left, self.bottom),
        ]

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.left, self.top, self.right, self.bottom)

    def to_int(self) -> tuple[int, int, int, int]:
        """Rounded integer coordinates for drawing."""
        return tuple(int(round(v)) for v in self.as_tuple())  # type: ignore[return-value]


@dataclass(frozen=True)
class Recognition:
    """
    A single labeled detection.

    Attributes:
        label: Class label from the label table
        confidence: Model score from 0.0 to 1.0
        location: Bounding box in the coordinate space of the current stage
    """

    label: str
    confidence: float
    location: Rect

    @property
    def probability_string(self) -> str:
        """Confidence as a percentage with one decimal, e.g. '87.5%'."""
        return f"{self.confidence * 100.0:.1f}%"

    def with_location(self, location: Rect) -> "Recognition":
        """Return a copy placed at a new location."""
        return replace(self, location=location)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "label": self.label,
            "confidence": round(self.confidence, 3),
            "location": [round(v, 1) for v in self.location.as_tuple()],
        }

    def __str__(self) -> str:
        return f"{self.label} / {self.probability_string}"


@dataclass
class DetectionBatch:
    """
    Raw per-frame output of the detection model.

    Attributes:
        num_boxes: Number of detections reported by the model
        class_indices: Class index per detection
        scores: Score per detection
        boxes: Normalized [y1, x1, y2, x2] rows per detection
    """

    num_boxes: int
    class_indices: np.ndarray
    scores: np.ndarray
    boxes: np.ndarray

    @classmethod
    def from_outputs(
        cls,
        number_of_detections: Any,
        categories: Any,
        scores: Any,
        locations: Any,
    ) -> "DetectionBatch":
        """
        Build a batch from model output buffers.

        Args:
            number_of_detections: Scalar or one-element array
            categories: Class indices (any numeric dtype)
            scores: float32 scores
            locations: Boxes, either (n, 4) or flat 4*n floats

        Returns:
            DetectionBatch with flattened, typed arrays
        """
        count = int(np.asarray(number_of_detections).reshape(-1)[0])
        class_indices = np.asarray(categories).reshape(-1).astype(np.int64)
        score_array = np.asarray(scores, dtype=np.float32).reshape(-1)
        flat_boxes = np.asarray(locations, dtype=np.float32).reshape(-1)
        usable = (flat_boxes.size // 4) * 4
        boxes = flat_boxes[:usable].reshape(-1, 4)
        return cls(
            num_boxes=count,
            class_indices=class_indices,
            scores=score_array,
            boxes=boxes,
        )

    def available(self) -> int:
        """Number of detections that can be indexed in every array."""
        return max(
            0,
            min(
                self.num_boxes,
                len(self.class_indices),
                len(self.scores),
                len(self.boxes),
            ),
        )


@dataclass(frozen=True)
class FrameMeta:
    """
    Geometry of the analysis buffer a result was computed from.

    Attributes:
        height: Buffer height in pixels
        width: Buffer width in pixels
        rotation_degrees: Clockwise rotation needed to display the buffer upright
        crop_rect: Valid image region of the buffer (defaults to the full buffer)
    """

    height: int
    width: int
    rotation_degrees: int = 0
    crop_rect: Rect | None = field(default=None)

    @property
    def effective_crop(self) -> Rect:
        if self.crop_rect is not None:
            return self.crop_rect
        return Rect(0.0, 0.0, float(self.width), float(self.height))

    def to_dict(self) -> dict[str, Any]:
        return {
            "height": self.height,
            "width": self.width,
            "rotation": self.rotation_degrees,
            "crop": list(self.effective_crop.as_tuple()),
        }
