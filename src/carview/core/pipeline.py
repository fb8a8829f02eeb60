"""
Recognition pipeline orchestrator.

Coordinates the per-frame processing:
1. Rotation lookup for the current display orientation
2. Crop/pad and rotation to the model input
3. Inference (external model)
4. Decoding into ranked recognitions in frame space
5. Mapping into preview space with width compensation
6. Confidence filtering into an immutable RecognitionSet
"""

import logging
import time
from typing import Any

import numpy as np

from ..detection.coordinate_mapper import CoordinateMapper
from ..detection.decoder import DetectionDecoder
from ..detection.preprocessor import ImagePreprocessor
from ..detection.recognition_set import RecognitionSet
from ..detection.rotation import DisplayRotation, resolve_rotation
from ..utils.palette import body_text_color, dominant_color
from .config import Config
from .context import DetectionModel, InferenceContext
from .errors import GeometryError
from .labels import LabelTable
from .recognition import FrameMeta

logger = logging.getLogger(__name__)


class RecognitionPipeline:
    """
    Runs one analysis frame through the full post-processing chain.

    Not thread-safe: the coordinate mapper cache belongs to a single
    worker thread.

    Usage:
        pipeline = RecognitionPipeline(context, config)
        result = pipeline.process(frame, meta, DisplayRotation.ROTATION_0, (1080, 1920))
    """

    def __init__(self, context: InferenceContext, config: Config | dict[str, Any] | None = None):
        """
        Initialize pipeline.

        Args:
            context: Model, labels and post-processing settings
            config: Full configuration dictionary containing:
                - overlay: CoordinateMapper settings
                - palette.enabled: bool - Compute dominant color per frame
        """
        config = config or {}
        self.context = context
        self.decoder = DetectionDecoder(
            context.labels,
            max_results=context.max_results,
            input_height=context.input_height,
            input_width=context.input_width,
        )
        self.mapper = CoordinateMapper(config.get("overlay", {}))
        self.palette_enabled = config.get("palette", {}).get("enabled", True)

    @classmethod
    def from_config(
        cls,
        config: Config | dict[str, Any],
        model: DetectionModel,
        labels: LabelTable | None = None,
    ) -> "RecognitionPipeline":
        """
        Build the context and pipeline from one configuration.

        Raises:
            LabelTableError: If labels are omitted and model.labels cannot be loaded
        """
        context = InferenceContext.from_config(config, model, labels)
        logger.info(
            f"RecognitionPipeline configured: input={context.input_width}x{context.input_height}, "
            f"max_results={context.max_results}, min_confidence={context.min_confidence}"
        )
        return cls(context, config)

    def preprocessor_for(self, display_rotation: DisplayRotation | int | None) -> ImagePreprocessor:
        """Preprocessor for the current display rotation."""
        turns = resolve_rotation(display_rotation, self.context.rotation_calibration)
        return ImagePreprocessor(
            self.context.input_height, self.context.input_width, quarter_turns=turns
        )

    def process(
        self,
        frame: np.ndarray,
        meta: FrameMeta,
        display_rotation: DisplayRotation | int | None,
        preview_size: tuple[int, int],
    ) -> RecognitionSet | None:
        """
        Process a single analysis frame.

        Args:
            frame: BGR image from the analysis stream
            meta: Buffer geometry (height, width, rotation, crop)
            display_rotation: Current physical display rotation
            preview_size: (width, height) of the preview surface

        Returns:
            RecognitionSet in preview coordinates, or None if the frame
            geometry has no valid transform
        """
        start_time = time.perf_counter()

        preprocessor = self.preprocessor_for(display_rotation)
        tensor = preprocessor.process(frame)

        batch = self.context.model(tensor)

        recognitions = self.decoder.decode(batch, preprocessor, meta.height, meta.width)

        preview_width, preview_height = preview_size
        try:
            mapped = self.mapper.map_recognitions(recognitions, meta, preview_width, preview_height)
        except GeometryError as e:
            logger.warning(f"Dropping frame, no preview transform: {e}")
            return None

        color = dominant_color(frame) if self.palette_enabled else None
        text_color = body_text_color(color) if color is not None else None

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        return RecognitionSet.build(
            mapped,
            meta,
            min_confidence=self.context.min_confidence,
            dominant_color=color,
            text_color=text_color,
            processing_time_ms=elapsed_ms,
        )
