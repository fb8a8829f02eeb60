"""
Detection decoding.

Turns the raw model output for one frame into ranked Recognition records
in the pixel space of the captured frame.
"""

import logging
import math

from ..core.labels import LabelTable
from ..core.recognition import DetectionBatch, Recognition, Rect
from .preprocessor import ImagePreprocessor

logger = logging.getLogger(__name__)

MAX_RESULT_DISPLAY = 3


class DetectionDecoder:
    """
    Decodes a DetectionBatch into the top-ranked recognitions.

    Pipeline per box:
    1. Look up label and score
    2. Scale the normalized [y1, x1, y2, x2] box to model input pixels
    3. Undo the crop/pad and rotation applied before inference
    Then all boxes are sorted by confidence and the top results kept.

    Usage:
        decoder = DetectionDecoder(labels)
        recognitions = decoder.decode(batch, preprocessor, frame_h, frame_w)
    """

    def __init__(
        self,
        labels: LabelTable,
        max_results: int = MAX_RESULT_DISPLAY,
        input_height: int = 640,
        input_width: int = 640,
    ):
        """
        Initialize decoder.

        Args:
            labels: Label table indexed by class index
            max_results: Number of recognitions to keep per frame
            input_height: Model input height (H in the pixel conversion)
            input_width: Model input width (W in the pixel conversion)
        """
        self.labels = labels
        self.max_results = max_results
        self.input_height = input_height
        self.input_width = input_width

    def to_pixels(self, box) -> Rect:
        """
        Convert a normalized [y1, x1, y2, x2] box to model input pixels.

        Args:
            box: Sequence of four normalized coordinates

        Returns:
            Rect in preprocessed image space
        """
        y1, x1, y2, x2 = (float(v) for v in box)
        return Rect.from_points(
            [
                (x1 * self.input_width, y1 * self.input_height),
                (x2 * self.input_width, y2 * self.input_height),
            ]
        )

    def decode(
        self,
        batch: DetectionBatch,
        preprocessor: ImagePreprocessor,
        frame_height: int,
        frame_width: int,
    ) -> list[Recognition]:
        """
        Decode a batch into ranked recognitions in frame coordinates.

        Args:
            batch: Raw model output
            preprocessor: Preprocessor that produced the model input
            frame_height: Captured frame height
            frame_width: Captured frame width

        Returns:
            Up to max_results recognitions, highest confidence first
        """
        count = batch.available()
        if count < batch.num_boxes:
            logger.debug(
                f"Detection batch reports {batch.num_boxes} boxes but only {count} are complete"
            )

        items: list[Recognition] = []
        for i in range(count):
            confidence = float(batch.scores[i])
            box = batch.boxes[i]
            if not math.isfinite(confidence) or not all(math.isfinite(float(v)) for v in box):
                logger.debug(f"Skipping non-finite detection {i}")
                continue

            location = preprocessor.inverse_transform_rect(
                self.to_pixels(box), frame_height, frame_width
            )
            items.append(
                Recognition(
                    label=self.labels.get(int(batch.class_indices[i])),
                    confidence=confidence,
                    location=location,
                )
            )

        # sorted() is stable, ties keep model order
        items = sorted(items, key=lambda r: r.confidence, reverse=True)
        return items[: self.max_results]
