"""
Unit tests for overlay drawing and label colors.
"""

import numpy as np
import pytest

from carview.core.recognition import FrameMeta, Recognition, Rect
from carview.detection.recognition_set import RecognitionSet
from carview.utils.palette import BLACK, WHITE, body_text_color, contrast_ratio, dominant_color
from carview.utils.visualization import (
    blend_overlay,
    create_overlay,
    draw_recognitions,
    format_label,
)


@pytest.fixture
def recognition_set():
    return RecognitionSet.build(
        [Recognition("Audi A5 Coupe 2012", 0.875, Rect(100, 150, 300, 400))],
        FrameMeta(height=480, width=640),
        text_color=(0, 0, 255),
    )


class TestDrawRecognitions:
    """Tests for drawing boxes and labels."""

    def test_format_label(self):
        recognition = Recognition("Audi A5 Coupe 2012", 0.875, Rect(0, 0, 1, 1))

        assert format_label(recognition) == "Audi A5 Coupe 2012(87.50%)"

    def test_box_drawn_with_text_color(self, recognition_set):
        canvas = np.zeros((480, 640, 3), dtype=np.uint8)
        draw_recognitions(canvas, recognition_set)

        # Left edge of the box, midway down
        assert tuple(canvas[275, 100]) == (0, 0, 255)
        # Inside the box stays untouched
        assert not canvas[275, 200].any()

    def test_explicit_color_wins(self, recognition_set):
        canvas = np.zeros((480, 640, 3), dtype=np.uint8)
        draw_recognitions(canvas, recognition_set, color=(0, 255, 0))

        assert tuple(canvas[275, 100]) == (0, 255, 0)

    def test_empty_set_draws_nothing(self):
        canvas = np.zeros((100, 100, 3), dtype=np.uint8)
        draw_recognitions(canvas, RecognitionSet.build([], FrameMeta(100, 100)))

        assert not canvas.any()


class TestOverlay:
    """Tests for transparent overlays."""

    def test_create_overlay_alpha(self, recognition_set):
        overlay = create_overlay((640, 480), recognition_set)

        assert overlay.shape == (480, 640, 4)
        assert overlay[275, 100, 3] == 255
        assert overlay[5, 5, 3] == 0

    def test_blend_overlay(self, recognition_set):
        frame = np.full((480, 640, 3), 50, dtype=np.uint8)
        overlay = create_overlay((640, 480), recognition_set, {"box_color": [255, 0, 0]})
        blended = blend_overlay(frame, overlay)

        assert tuple(blended[275, 100]) == (255, 0, 0)
        assert tuple(blended[5, 5]) == (50, 50, 50)


class TestPalette:
    """Tests for dominant color and text color selection."""

    def test_dominant_color_uniform(self):
        frame = np.zeros((200, 300, 3), dtype=np.uint8)
        frame[:] = (10, 200, 30)

        assert dominant_color(frame) == (12, 204, 28)

    def test_dominant_color_majority(self):
        frame = np.zeros((100, 100, 3), dtype=np.uint8)
        frame[:70] = (250, 250, 250)

        assert dominant_color(frame) == (252, 252, 252)

    def test_dominant_color_empty(self):
        assert dominant_color(np.zeros((0, 0, 3), dtype=np.uint8)) is None

    def test_text_color_contrast(self):
        assert body_text_color((4, 4, 4)) == WHITE
        assert body_text_color((252, 252, 252)) == BLACK

    def test_contrast_ratio_bounds(self):
        assert contrast_ratio(WHITE, BLACK) == pytest.approx(21.0)
        assert contrast_ratio(WHITE, WHITE) == pytest.approx(1.0)

    @pytest.mark.parametrize("shape", [(40, 60, 1), (40, 60, 2), (40, 60)])
    def test_dominant_color_needs_color_channels(self, shape):
        assert dominant_color(np.full(shape, 200, dtype=np.uint8)) is None
