"""
Unit tests for row preview (flatrows.preview).

Rows are built by hand so the preview logic is tested independently of
any parser.
"""

from __future__ import annotations

import pytest

from flatrows.parsers.base import ParsedRow
from flatrows.preview import PreviewResult, preview_rows


def _data(n: int, /, **columns) -> ParsedRow:
    return ParsedRow(line_number=n, columns=columns)


class TestPreviewRows:
    """Tests for preview_rows()."""

    def test_collects_rows_and_columns(self):
        result = preview_rows([_data(1, a="1", b="2"), _data(2, a="3", c="4")])
        assert result.rows == [{"a": "1", "b": "2"}, {"a": "3", "c": "4"}]
        assert result.columns == ["a", "b", "c"]
        assert result.total_rows_parsed == 2
        assert result.rows_returned == 2
        assert result.warnings == []

    def test_error_rows_become_warnings(self):
        rows = [_data(1, a="1"), ParsedRow.error(2, "Line 2: bad"), _data(3, a="2")]
        result = preview_rows(rows)
        assert result.rows == [{"a": "1"}, {"a": "2"}]
        assert result.warnings == ["Row 2: Line 2: bad"]
        assert result.total_rows_parsed == 3

    def test_columns_deduplicated_case_insensitively(self):
        result = preview_rows([_data(1, Name="x"), _data(2, name="y", AGE="1")])
        assert result.columns == ["Name", "AGE"]

    def test_skipped_rows_counted_not_returned(self):
        skipped = ParsedRow(line_number=1, columns={"hidden": "x"}, is_skipped=True)
        result = preview_rows([skipped, _data(2, a="1")])
        assert result.rows == [{"a": "1"}]
        assert result.columns == ["a"]
        assert result.total_rows_parsed == 2

    def test_stops_after_max_rows(self):
        pulled = []

        def rows():
            for n in range(1, 1000):
                pulled.append(n)
                yield _data(n, n=n)

        result = preview_rows(rows(), max_rows=3)
        assert result.rows_returned == 3
        assert result.total_rows_parsed == 4
        assert len(pulled) == 4

    def test_fewer_rows_than_max(self):
        result = preview_rows([_data(1, a="1")], max_rows=10)
        assert result.rows_returned == 1

    def test_empty_iterator(self):
        result = preview_rows([])
        assert result == PreviewResult()

    @pytest.mark.parametrize("max_rows", [0, -1])
    def test_non_positive_max_rows(self, max_rows):
        with pytest.raises(ValueError, match="max_rows"):
            preview_rows([], max_rows=max_rows)


class TestPreviewResultFrame:
    """Tests for PreviewResult.to_frame()."""

    def test_frame_columns_and_values(self):
        result = preview_rows([_data(1, a="1", b=2), _data(2, a="3")])
        df = result.to_frame()
        assert list(df.columns) == ["a", "b"]
        assert len(df) == 2
        assert df.iloc[0]["a"] == "1"
        assert df.iloc[0]["b"] == 2

    def test_empty_frame(self):
        df = PreviewResult().to_frame()
        assert df.empty
