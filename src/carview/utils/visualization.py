"""
Visualization utilities for CarView.

Helper functions for drawing recognition boxes and labels onto a
preview-sized canvas.
"""

from typing import Any

import cv2
import numpy as np

from ..core.recognition import Recognition
from ..detection.recognition_set import RecognitionSet

DEFAULT_COLOR = (243, 150, 33)  # Blue (BGR)


def format_label(recognition: Recognition) -> str:
    """Label text drawn above a box, e.g. 'Audi A5 Coupe 2012(87.50%)'."""
    return f"{recognition.label}({recognition.confidence * 100:.2f}%)"


def draw_recognitions(
    canvas: np.ndarray,
    recognition_set: RecognitionSet,
    color: tuple[int, int, int] | None = None,
    stroke_width: int = 8,
    font_scale: float = 1.0,
    show_time: bool = False,
) -> np.ndarray:
    """
    Draw boxes and labels for every recognition in the set.

    Args:
        canvas: BGR or BGRA image in preview coordinates (drawn in place)
        recognition_set: Results already mapped to preview space
        color: Box and text color; defaults to the set's text color, then blue
        stroke_width: Box outline thickness in pixels
        font_scale: OpenCV font scale for labels
        show_time: Whether to print processing time in the bottom-left corner

    Returns:
        The canvas
    """
    color = color or recognition_set.text_color or DEFAULT_COLOR
    draw_color = _color_for(canvas, color)
    thickness = max(1, int(round(font_scale * 2)))

    for recognition in recognition_set:
        left, top, right, bottom = recognition.location.to_int()
        cv2.rectangle(canvas, (left, top), (right, bottom), draw_color, stroke_width)

        cv2.putText(
            canvas,
            format_label(recognition),
            (left, top - 8),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            draw_color,
            thickness,
        )

    if show_time:
        height = canvas.shape[0]
        cv2.putText(
            canvas,
            f"{recognition_set.processing_time_ms:.1f}ms",
            (10, height - 20),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.6,
            draw_color,
            1,
        )

    return canvas


def create_overlay(
    preview_size: tuple[int, int],
    recognition_set: RecognitionSet,
    config: dict[str, Any] | None = None,
) -> np.ndarray:
    """
    Create a transparent BGRA overlay with the recognitions drawn on it.

    Args:
        preview_size: (width, height) of the preview surface
        recognition_set: Results in preview coordinates
        config: Overlay configuration (box_color, stroke_width, text_scale)

    Returns:
        HxWx4 uint8 image, fully transparent where nothing was drawn
    """
    config = config or {}
    preview_width, preview_height = preview_size
    overlay = np.zeros((preview_height, preview_width, 4), dtype=np.uint8)
    box_color = config.get("box_color")
    return draw_recognitions(
        overlay,
        recognition_set,
        color=tuple(box_color) if box_color else None,
        stroke_width=config.get("stroke_width", 8),
        font_scale=config.get("text_scale", 1.0),
    )


def blend_overlay(frame: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """
    Alpha-blend a BGRA overlay onto a BGR frame of the same size.

    Args:
        frame: BGR preview frame
        overlay: BGRA overlay from create_overlay

    Returns:
        New BGR frame
    """
    if frame.shape[:2] != overlay.shape[:2]:
        overlay = cv2.resize(overlay, (frame.shape[1], frame.shape[0]))
    alpha = overlay[:, :, 3:4].astype(np.float32) / 255.0
    blended = frame.astype(np.float32) * (1.0 - alpha) + overlay[:, :, :3].astype(np.float32) * alpha
    return blended.astype(np.uint8)


def _color_for(canvas: np.ndarray, color: tuple[int, int, int]) -> tuple[int, ...]:
    """Add an opaque alpha channel when drawing on BGRA canvases."""
    if canvas.ndim == 3 and canvas.shape[2] == 4:
        return (int(color[0]), int(color[1]), int(color[2]), 255)
    return (int(color[0]), int(color[1]), int(color[2]))
