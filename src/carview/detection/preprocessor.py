"""
Image preprocessing for the detection model.

Prepares analysis frames for inference:
- Center crop or zero pad to the fixed model input size
- Rotate by a number of quarter turns to put the scene upright

Also provides the exact forward and inverse geometry of those two steps
so that model boxes can be mapped back into the captured frame.
"""

import numpy as np

from ..core.recognition import Rect


def _center_offset(size: int, target: int) -> int:
    """
    Offset of the target window inside the source along one axis.

    Positive when cropping, negative when padding. Truncates toward zero
    so crop and pad offsets agree with the pixels actually copied.
    """
    if size >= target:
        return (size - target) // 2
    return -((target - size) // 2)


def _rotate_point(
    x: float, y: float, height: int, width: int, turns: int
) -> tuple[float, float]:
    """Map a point through `turns` counter-clockwise quarter turns of a height x width image."""
    turns %= 4
    if turns == 0:
        return x, y
    if turns == 1:
        return y, width - x
    if turns == 2:
        return width - x, height - y
    return height - y, x


class ImagePreprocessor:
    """
    Crop-or-pad then rotate, with the matching inverse transform.

    Quarter turns follow numpy.rot90 (counter-clockwise in array
    coordinates) and are reduced modulo 4.

    Usage:
        preprocessor = ImagePreprocessor(640, 640, quarter_turns=3)
        tensor = preprocessor.process(frame)
        box = preprocessor.inverse_transform_rect(model_box, frame_h, frame_w)
    """

    def __init__(self, target_height: int = 640, target_width: int = 640, quarter_turns: int = 0):
        """
        Initialize preprocessor.

        Args:
            target_height: Model input height in pixels
            target_width: Model input width in pixels
            quarter_turns: Rotation applied after cropping (any integer)
        """
        if target_height <= 0 or target_width <= 0:
            raise ValueError(f"Invalid model input size {target_width}x{target_height}")
        self.target_height = target_height
        self.target_width = target_width
        self.quarter_turns = quarter_turns % 4

    def output_size(self) -> tuple[int, int]:
        """(height, width) of the processed tensor."""
        if self.quarter_turns % 2:
            return self.target_width, self.target_height
        return self.target_height, self.target_width

    def process(self, frame: np.ndarray) -> np.ndarray:
        """
        Apply crop/pad and rotation to a frame.

        Args:
            frame: HxW or HxWxC uint8 image

        Returns:
            Contiguous uint8 array of the model input size
        """
        cropped = self._crop_or_pad(frame)
        if self.quarter_turns:
            cropped = np.rot90(cropped, self.quarter_turns)
        return np.ascontiguousarray(cropped, dtype=np.uint8)

    def _crop_or_pad(self, frame: np.ndarray) -> np.ndarray:
        height, width = frame.shape[:2]
        off_y = _center_offset(height, self.target_height)
        off_x = _center_offset(width, self.target_width)

        out = np.zeros((self.target_height, self.target_width) + frame.shape[2:], dtype=frame.dtype)

        # Overlap of source and target windows, in source coordinates
        src_y0 = max(off_y, 0)
        src_x0 = max(off_x, 0)
        src_y1 = min(height, off_y + self.target_height)
        src_x1 = min(width, off_x + self.target_width)

        out[src_y0 - off_y : src_y1 - off_y, src_x0 - off_x : src_x1 - off_x] = frame[
            src_y0:src_y1, src_x0:src_x1
        ]
        return out

    def transform_point(
        self, x: float, y: float, frame_height: int, frame_width: int
    ) -> tuple[float, float]:
        """Map a frame point into processed-tensor coordinates."""
        x -= _center_offset(frame_width, self.target_width)
        y -= _center_offset(frame_height, self.target_height)
        return _rotate_point(x, y, self.target_height, self.target_width, self.quarter_turns)

    def inverse_transform_point(
        self, x: float, y: float, frame_height: int, frame_width: int
    ) -> tuple[float, float]:
        """Map a processed-tensor point back into frame coordinates."""
        out_height, out_width = self.output_size()
        x, y = _rotate_point(x, y, out_height, out_width, 4 - self.quarter_turns)
        x += _center_offset(frame_width, self.target_width)
        y += _center_offset(frame_height, self.target_height)
        return x, y

    def transform_rect(self, rect: Rect, frame_height: int, frame_width: int) -> Rect:
        """Map a frame rectangle into processed-tensor coordinates."""
        return Rect.from_points(
            [
                self.transform_point(rect.left, rect.top, frame_height, frame_width),
                self.transform_point(rect.right, rect.bottom, frame_height, frame_width),
            ]
        )

    def inverse_transform_rect(self, rect: Rect, frame_height: int, frame_width: int) -> Rect:
        """
        Map a processed-tensor rectangle back into frame coordinates.

        Rotation can swap which corner is top-left, so the two mapped
        corners are re-ordered into a valid rectangle.
        """
        return Rect.from_points(
            [
                self.inverse_transform_point(rect.left, rect.top, frame_height, frame_width),
                self.inverse_transform_point(rect.right, rect.bottom, frame_height, frame_width),
            ]
        )
