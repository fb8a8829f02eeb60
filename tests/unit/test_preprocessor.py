"""
Unit tests for ImagePreprocessor.
"""

import numpy as np
import pytest

from carview.core.recognition import Rect
from carview.detection.preprocessor import ImagePreprocessor


class TestProcess:
    """Tests for the model input tensor."""

    def test_pad_smaller_frame(self):
        """A 480-row frame is centered with 80 rows of padding on each side."""
        frame = np.random.randint(1, 255, (480, 640, 3), dtype=np.uint8)
        tensor = ImagePreprocessor(640, 640).process(frame)

        assert tensor.shape == (640, 640, 3)
        assert tensor.dtype == np.uint8
        assert not tensor[:80].any()
        assert not tensor[560:].any()
        np.testing.assert_array_equal(tensor[80:560], frame)

    def test_crop_larger_frame(self):
        """A 720x1280 frame is center cropped."""
        frame = np.random.randint(0, 255, (720, 1280, 3), dtype=np.uint8)
        tensor = ImagePreprocessor(640, 640).process(frame)

        np.testing.assert_array_equal(tensor, frame[40:680, 320:960])

    @pytest.mark.parametrize("turns", [1, 2, 3])
    def test_rotation_matches_rot90(self, turns):
        frame = np.random.randint(0, 255, (640, 640, 3), dtype=np.uint8)
        tensor = ImagePreprocessor(640, 640, quarter_turns=turns).process(frame)

        np.testing.assert_array_equal(tensor, np.rot90(frame, turns))

    def test_four_turns_is_identity(self):
        frame = np.random.randint(0, 255, (640, 640, 3), dtype=np.uint8)
        preprocessor = ImagePreprocessor(640, 640, quarter_turns=4)

        assert preprocessor.quarter_turns == 0
        np.testing.assert_array_equal(preprocessor.process(frame), frame)

    def test_grayscale_frame(self):
        frame = np.full((600, 800), 7, dtype=np.uint8)
        tensor = ImagePreprocessor(640, 640).process(frame)

        assert tensor.shape == (640, 640)

    def test_invalid_input_size(self):
        with pytest.raises(ValueError):
            ImagePreprocessor(0, 640)


class TestGeometry:
    """Tests for forward and inverse point mapping."""

    @pytest.mark.parametrize("turns", [0, 1, 2, 3])
    def test_point_follows_pixels(self, turns):
        """A marked pixel lands where transform_point says it does."""
        frame = np.zeros((640, 640), dtype=np.uint8)
        frame[100, 200] = 255
        preprocessor = ImagePreprocessor(640, 640, quarter_turns=turns)

        rows, cols = np.nonzero(preprocessor.process(frame))
        x, y = preprocessor.transform_point(200.5, 100.5, 640, 640)

        assert (x, y) == pytest.approx((cols[0] + 0.5, rows[0] + 0.5))

    def test_inverse_crop_offset(self):
        """Without rotation the inverse only adds the crop offset."""
        preprocessor = ImagePreprocessor(640, 640)
        rect = preprocessor.inverse_transform_rect(Rect(0, 0, 640, 640), 720, 1280)

        assert rect.as_tuple() == pytest.approx((320, 40, 960, 680))

    def test_inverse_pad_offset(self):
        preprocessor = ImagePreprocessor(640, 640)
        rect = preprocessor.inverse_transform_rect(Rect(0, 80, 640, 560), 480, 640)

        assert rect.as_tuple() == pytest.approx((0, 0, 640, 480))

    @pytest.mark.parametrize("turns", [0, 1, 2, 3, 4])
    @pytest.mark.parametrize("frame_size", [(480, 640), (720, 1280), (640, 640), (481, 639)])
    def test_round_trip(self, turns, frame_size):
        """Inverse then forward reproduces a model box."""
        height, width = frame_size
        preprocessor = ImagePreprocessor(640, 640, quarter_turns=turns)
        box = Rect(128, 64, 384, 320)

        in_frame = preprocessor.inverse_transform_rect(box, height, width)
        back = preprocessor.transform_rect(in_frame, height, width)

        assert in_frame.is_ordered
        assert back.as_tuple() == pytest.approx(box.as_tuple())

    def test_quarter_turn_swaps_axes(self):
        """One quarter turn maps a wide box to a tall one."""
        preprocessor = ImagePreprocessor(640, 640, quarter_turns=1)
        rect = preprocessor.inverse_transform_rect(Rect(0, 0, 400, 100), 640, 640)

        assert rect.width == pytest.approx(100)
        assert rect.height == pytest.approx(400)
