"""
Final per-frame result snapshot handed to the renderer.
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator

from ..core.recognition import FrameMeta, Recognition

MIN_CONFIDENCE = 0.4


@dataclass(frozen=True)
class RecognitionSet:
    """
    Immutable, ranked recognitions for one frame.

    Attributes:
        recognitions: Recognitions in preview coordinates, highest confidence first
        frame_meta: Geometry of the analysis buffer the results came from
        dominant_color: Dominant BGR color of the frame, if computed
        text_color: BGR color chosen for label text, if computed
        processing_time_ms: Time taken to produce the set
    """

    recognitions: tuple[Recognition, ...]
    frame_meta: FrameMeta
    dominant_color: tuple[int, int, int] | None = None
    text_color: tuple[int, int, int] | None = None
    processing_time_ms: float = field(default=0.0, compare=False)

    @classmethod
    def build(
        cls,
        recognitions: Iterable[Recognition],
        frame_meta: FrameMeta,
        min_confidence: float = MIN_CONFIDENCE,
        **kwargs: Any,
    ) -> "RecognitionSet":
        """Keep recognitions at or above min_confidence, preserving order."""
        return cls(
            recognitions=filter_by_confidence(recognitions, min_confidence),
            frame_meta=frame_meta,
            **kwargs,
        )

    @property
    def is_empty(self) -> bool:
        return not self.recognitions

    def __len__(self) -> int:
        return len(self.recognitions)

    def __iter__(self) -> Iterator[Recognition]:
        return iter(self.recognitions)

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "recognitions": [r.to_dict() for r in self.recognitions],
            "frame": self.frame_meta.to_dict(),
            "dominant_color": list(self.dominant_color) if self.dominant_color else None,
            "processing_time_ms": round(self.processing_time_ms, 2),
        }


def filter_by_confidence(
    recognitions: Iterable[Recognition], min_confidence: float = MIN_CONFIDENCE
) -> tuple[Recognition, ...]:
    """Recognitions with confidence >= min_confidence, in their given order."""
    return tuple(r for r in recognitions if r.confidence >= min_confidence)
