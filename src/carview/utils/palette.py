"""
Dominant color extraction for label coloring.

Labels are drawn in a color that stays readable over the current scene:
the frame's most common color is found on a coarse 5-bit-per-channel
grid, then white or black text is picked by luminance contrast.
"""

import numpy as np

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)

# WCAG contrast ratio required for body text
MIN_BODY_TEXT_CONTRAST = 4.5


def dominant_color(frame: np.ndarray, max_samples: int = 112 * 112) -> tuple[int, int, int] | None:
    """
    Find the most populous color in a BGR frame.

    Args:
        frame: HxWx3 uint8 BGR image
        max_samples: Approximate number of pixels to sample

    Returns:
        BGR color at the center of the most populous 5-bit bin, or None
        for an empty frame or one without color channels
    """
    if frame is None or frame.size == 0 or frame.ndim != 3 or frame.shape[2] < 3:
        return None

    height, width = frame.shape[:2]
    step = max(1, int(np.sqrt(height * width / max_samples)))
    pixels = frame[::step, ::step, :3].reshape(-1, 3).astype(np.uint32)

    quantized = pixels >> 3
    codes = (quantized[:, 0] << 10) | (quantized[:, 1] << 5) | quantized[:, 2]
    counts = np.bincount(codes, minlength=1 << 15)
    code = int(np.argmax(counts))

    b = (code >> 10) & 0x1F
    g = (code >> 5) & 0x1F
    r = code & 0x1F
    return ((b << 3) | 4, (g << 3) | 4, (r << 3) | 4)


def relative_luminance(color: tuple[int, int, int]) -> float:
    """Relative luminance of a BGR color (sRGB, 0.0 to 1.0)."""

    def channel(value: int) -> float:
        c = value / 255.0
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    b, g, r = color
    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def contrast_ratio(first: tuple[int, int, int], second: tuple[int, int, int]) -> float:
    lighter, darker = sorted(
        (relative_luminance(first), relative_luminance(second)), reverse=True
    )
    return (lighter + 0.05) / (darker + 0.05)


def body_text_color(background: tuple[int, int, int]) -> tuple[int, int, int]:
    """
    Readable text color over a background.

    White is preferred when it reaches body-text contrast; otherwise the
    higher-contrast choice of white and black is returned.
    """
    white = contrast_ratio(WHITE, background)
    if white >= MIN_BODY_TEXT_CONTRAST:
        return WHITE
    black = contrast_ratio(BLACK, background)
    return BLACK if black > white else WHITE
