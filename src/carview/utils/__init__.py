"""Utility functions for CarView."""

from .palette import body_text_color, dominant_color
from .visualization import blend_overlay, create_overlay, draw_recognitions

__all__ = [
    "body_text_color",
    "dominant_color",
    "blend_overlay",
    "create_overlay",
    "draw_recognitions",
]
