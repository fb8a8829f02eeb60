"""
Analysis buffer to preview coordinate mapping.

The analysis buffer and the preview surface differ in size, aspect ratio
and orientation. The transform between them is solved from the four
corners of the buffer's crop rectangle and the four corners of the
preview, with the preview corners rotated to match the display rotation.
"""

import logging
from dataclasses import dataclass
from typing import Any

import cv2
import numpy as np

from ..core.errors import GeometryError
from ..core.recognition import FrameMeta, Recognition, Rect

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoordinateTransform:
    """
    3x3 projective matrix from buffer pixels to preview pixels.

    Attributes:
        matrix: float64 array of shape (3, 3)
    """

    matrix: np.ndarray

    def map_points(self, points: list[tuple[float, float]]) -> list[tuple[float, float]]:
        src = np.asarray(points, dtype=np.float64).reshape(-1, 1, 2)
        dst = cv2.perspectiveTransform(src, self.matrix)
        return [(float(x), float(y)) for x, y in dst.reshape(-1, 2)]

    def map_point(self, x: float, y: float) -> tuple[float, float]:
        return self.map_points([(x, y)])[0]

    def map_rect(self, rect: Rect) -> Rect:
        """Bounding box of the four mapped corners."""
        mapped = Rect.from_points(self.map_points(rect.corners()))
        if not mapped.is_finite:
            raise GeometryError(f"Transform produced non-finite rectangle {mapped}")
        return mapped


@dataclass(frozen=True)
class GeometryKey:
    """Inputs that fully determine a CoordinateTransform."""

    crop_rect: Rect
    rotation_degrees: int
    preview_width: int
    preview_height: int


def compute_transform(
    crop_rect: Rect, rotation_degrees: int, preview_width: int, preview_height: int
) -> CoordinateTransform:
    """
    Solve the buffer-to-preview transform.

    Source vertices are the crop rectangle corners clockwise from the
    top-left. Source vertex k is paired with preview corner
    (k + rotation_degrees / 90) mod 4.

    Args:
        crop_rect: Valid region of the analysis buffer
        rotation_degrees: Clockwise rotation needed to show the buffer upright
        preview_width: Preview surface width in pixels
        preview_height: Preview surface height in pixels

    Returns:
        CoordinateTransform

    Raises:
        GeometryError: For degenerate crop or preview sizes, rotations that
            are not a multiple of 90, or an unsolvable correspondence
    """
    if rotation_degrees % 90 != 0:
        raise GeometryError(f"Rotation must be a multiple of 90 degrees, got {rotation_degrees}")
    if not crop_rect.is_finite or crop_rect.width <= 0 or crop_rect.height <= 0:
        raise GeometryError(f"Degenerate crop rectangle {crop_rect}")
    if preview_width <= 0 or preview_height <= 0:
        raise GeometryError(f"Degenerate preview size {preview_width}x{preview_height}")

    source = crop_rect.corners()
    destination = Rect(0.0, 0.0, float(preview_width), float(preview_height)).corners()

    shift = (rotation_degrees // 90) % 4
    shifted = [destination[(k + shift) % 4] for k in range(4)]

    matrix = cv2.getPerspectiveTransform(
        np.asarray(source, dtype=np.float32),
        np.asarray(shifted, dtype=np.float32),
    ).astype(np.float64)

    if not np.all(np.isfinite(matrix)) or abs(np.linalg.det(matrix)) < 1e-12:
        raise GeometryError("Point correspondence has no invertible solution")

    return CoordinateTransform(matrix)


def add_width_compensation(rect: Rect, compensation: float, rotation_degrees: int) -> Rect:
    """
    Widen (or narrow) a box to offset the aspect-ratio mismatch between
    analysis buffer and preview.

    This is an empirical correction tuned on one device, not a geometric
    law. With rotation 90 the horizontal edges move, otherwise the
    vertical ones. A negative compensation that would invert the box
    collapses that axis to its center.

    Args:
        rect: Box in preview coordinates
        compensation: Pixels added on each side
        rotation_degrees: Rotation of the analysis buffer

    Returns:
        Compensated Rect
    """
    if rotation_degrees == 90:
        left, right = rect.left - compensation, rect.right + compensation
        if left > right:
            left = right = (rect.left + rect.right) / 2
        return Rect(left, rect.top, right, rect.bottom)

    top, bottom = rect.top - compensation, rect.bottom + compensation
    if top > bottom:
        top = bottom = (rect.top + rect.bottom) / 2
    return Rect(rect.left, top, rect.right, bottom)


class CoordinateMapper:
    """
    Maps recognitions from analysis-buffer space into preview space.

    Caches the last solved transform and recomputes it only when the crop
    rectangle, rotation or preview size change.

    Usage:
        mapper = CoordinateMapper(config['overlay'])
        mapped = mapper.map_recognitions(recognitions, frame_meta, 1080, 1920)
    """

    def __init__(self, config: dict[str, Any] | None = None):
        """
        Initialize mapper.

        Args:
            config: Overlay configuration with keys:
                - width_compensation.enabled: bool - Apply width compensation
                - width_compensation.analysis_width: int - Subtracted from buffer height
                - width_compensation.scale: float - Multiplier on the compensation
        """
        config = config or {}
        comp_config = config.get("width_compensation", {})
        self.compensation_enabled = comp_config.get("enabled", True)
        self.analysis_width = comp_config.get("analysis_width", 640)
        self.compensation_scale = comp_config.get("scale", 1.0)

        self._key: GeometryKey | None = None
        self._transform: CoordinateTransform | None = None
        self.recomputations = 0

    def transform_for(
        self, crop_rect: Rect, rotation_degrees: int, preview_width: int, preview_height: int
    ) -> CoordinateTransform:
        """Return the cached transform for this geometry, solving it if needed."""
        key = GeometryKey(crop_rect, rotation_degrees, preview_width, preview_height)
        if key != self._key or self._transform is None:
            self._transform = compute_transform(
                crop_rect, rotation_degrees, preview_width, preview_height
            )
            self._key = key
            self.recomputations += 1
            logger.debug(
                f"Recomputed preview transform: crop={crop_rect.as_tuple()}, "
                f"rotation={rotation_degrees}, preview={preview_width}x{preview_height}"
            )
        return self._transform

    def width_compensation(self, buffer_height: int) -> float:
        """Compensation in pixels for a buffer of the given height."""
        if not self.compensation_enabled:
            return 0.0
        return (buffer_height - self.analysis_width) * self.compensation_scale

    def map_recognitions(
        self,
        recognitions: list[Recognition],
        meta: FrameMeta,
        preview_width: int,
        preview_height: int,
    ) -> list[Recognition]:
        """
        Map recognitions into preview space.

        Args:
            recognitions: Recognitions in analysis-buffer coordinates
            meta: Geometry of the buffer they came from
            preview_width: Preview surface width
            preview_height: Preview surface height

        Returns:
            New recognitions in preview coordinates, same order

        Raises:
            GeometryError: If no valid transform exists
        """
        transform = self.transform_for(
            meta.effective_crop, meta.rotation_degrees, preview_width, preview_height
        )
        compensation = self.width_compensation(meta.height)

        mapped = []
        for recognition in recognitions:
            location = transform.map_rect(recognition.location)
            location = add_width_compensation(location, compensation, meta.rotation_degrees)
            if not (location.is_finite and location.is_ordered):
                raise GeometryError(f"Invalid mapped location {location}")
            mapped.append(recognition.with_location(location))
        return mapped
