"""
Unit tests for LabelTable.
"""

import pytest

from carview.core.errors import LabelTableError
from carview.core.labels import LabelTable


class TestLabelTable:
    """Tests for label file loading and lookup."""

    def test_load(self, label_file):
        labels = LabelTable.load(label_file)

        assert len(labels) == 5
        assert labels[0] == "AM General Hummer SUV 2000"
        assert labels[4] == "Tesla Model S Sedan 2012"

    def test_missing_file(self, tmp_path):
        with pytest.raises(LabelTableError):
            LabelTable.load(tmp_path / "missing.txt")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("\n\n", encoding="utf-8")

        with pytest.raises(LabelTableError):
            LabelTable.load(path)

    def test_whitespace_stripped(self, tmp_path):
        path = tmp_path / "labels.txt"
        path.write_text("car  \r\n\ntruck\n\n\n", encoding="utf-8")
        labels = LabelTable.load(path)

        # Interior blank line keeps its index
        assert list(labels) == ["car", "", "truck"]

    def test_get_out_of_range(self, labels):
        assert labels.get(1) == "Acura RL Sedan 2012"
        assert labels.get(999) == LabelTable.UNKNOWN_LABEL
        assert labels.get(-1) == LabelTable.UNKNOWN_LABEL

    def test_index_error_on_subscript(self, labels):
        with pytest.raises(IndexError):
            labels[999]
