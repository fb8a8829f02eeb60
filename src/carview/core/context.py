"""
Inference context shared by every frame.

Bundles the model, the label table and the post-processing settings
into one immutable object that is passed explicitly through the
pipeline.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Mapping, Protocol

import numpy as np

from ..detection.decoder import MAX_RESULT_DISPLAY
from ..detection.recognition_set import MIN_CONFIDENCE
from ..detection.rotation import ROTATION_CALIBRATION, DisplayRotation, calibration_from_config
from .labels import LabelTable
from .recognition import DetectionBatch

if TYPE_CHECKING:
    from .config import Config


class DetectionModel(Protocol):
    """Opaque detector: uint8 image tensor in, raw detections out."""

    def __call__(self, tensor: np.ndarray) -> DetectionBatch: ...


@dataclass(frozen=True)
class InferenceContext:
    """
    Model, labels and settings for the recognition pipeline.

    Attributes:
        model: Callable returning a DetectionBatch for a model input tensor
        labels: Label table indexed by class index
        input_height: Model input height in pixels
        input_width: Model input width in pixels
        max_results: Recognitions kept per frame
        min_confidence: Lowest confidence handed to the renderer
        rotation_calibration: Display rotation to quarter-turn table
    """

    model: DetectionModel
    labels: LabelTable
    input_height: int = 640
    input_width: int = 640
    max_results: int = MAX_RESULT_DISPLAY
    min_confidence: float = MIN_CONFIDENCE
    rotation_calibration: Mapping[DisplayRotation, int] = field(
        default_factory=lambda: dict(ROTATION_CALIBRATION)
    )

    @classmethod
    def from_config(
        cls,
        config: "Config | dict[str, Any]",
        model: DetectionModel,
        labels: LabelTable | None = None,
    ) -> "InferenceContext":
        """
        Build a context from the full configuration dictionary.

        Args:
            config: Config or dict with model, postprocessing and rotation sections
            model: Detection model callable
            labels: Preloaded labels; loaded from model.labels when omitted

        Returns:
            InferenceContext

        Raises:
            LabelTableError: If the label file cannot be loaded
        """
        model_config = config.get("model", {})
        post_config = config.get("postprocessing", {})
        rotation_config = config.get("rotation", {})

        if labels is None:
            labels = LabelTable.load(Path(model_config.get("labels", "labelmap.txt")))

        return cls(
            model=model,
            labels=labels,
            input_height=model_config.get("input_height", 640),
            input_width=model_config.get("input_width", 640),
            max_results=post_config.get("max_results", MAX_RESULT_DISPLAY),
            min_confidence=post_config.get("min_confidence", MIN_CONFIDENCE),
            rotation_calibration=calibration_from_config(rotation_config.get("calibration")),
        )
