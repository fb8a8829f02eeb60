"""
Label table loading.

The label file is plain text with one label per line; the 0-based line
number is the class index reported by the model.
"""

import logging
from pathlib import Path
from typing import Iterator

from .errors import LabelTableError

logger = logging.getLogger(__name__)


class LabelTable:
    """
    Immutable, index-addressable sequence of class labels.

    Usage:
        labels = LabelTable.load("assets/labelmap.txt")
        name = labels[class_index]
    """

    UNKNOWN_LABEL = "???"

    def __init__(self, labels: list[str] | tuple[str, ...]):
        self._labels: tuple[str, ...] = tuple(labels)

    @classmethod
    def load(cls, path: str | Path) -> "LabelTable":
        """
        Load labels from a text file.

        Args:
            path: Path to the label file

        Returns:
            LabelTable with one entry per line

        Raises:
            LabelTableError: If the file is missing, unreadable or has no labels
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LabelTableError(f"Cannot read label file {path}: {e}") from e

        lines = [line.strip() for line in text.splitlines()]
        # Trailing blank lines carry no class
        while lines and not lines[-1]:
            lines.pop()

        if not lines:
            raise LabelTableError(f"Label file {path} contains no labels")

        logger.info(f"Loaded {len(lines)} labels from {path}")
        return cls(lines)

    def get(self, index: int) -> str:
        """Label for a class index, or UNKNOWN_LABEL if out of range."""
        if 0 <= index < len(self._labels):
            return self._labels[index]
        logger.debug(f"Class index {index} outside label table of {len(self._labels)}")
        return self.UNKNOWN_LABEL

    def __getitem__(self, index: int) -> str:
        return self._labels[index]

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __repr__(self) -> str:
        return f"LabelTable({len(self._labels)} labels)"
