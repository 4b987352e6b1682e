"""Tests for grid cell text preparation."""

from __future__ import annotations

from dbnav.domains.results.domain.cells import (
    is_truncated,
    looks_like_json,
    measure_cell,
    prepare_cell,
    truncate_json,
    truncate_to_width,
)


class TestTruncateToWidth:
    def test_short_text_unchanged(self):
        assert truncate_to_width("abc", 5) == "abc"

    def test_cut_with_ellipsis(self):
        """Cut text ends in the ellipsis and fits the width."""
        assert truncate_to_width("abcdefgh", 5) == "abcd…"

    def test_wide_characters(self):
        """Double-width characters count as two cells."""
        assert truncate_to_width("日本語テキスト", 5) == "日本…"

    def test_zero_width(self):
        assert truncate_to_width("abc", 0) == ""


class TestJson:
    def test_detection(self):
        """Objects, arrays and literals are JSON; plain words are not."""
        assert looks_like_json('{"a": 1}')
        assert looks_like_json("[1, 2]")
        assert looks_like_json("null")
        assert looks_like_json("42")
        assert not looks_like_json("hello")
        assert not looks_like_json("{broken")
        assert not looks_like_json("NaN")

    def test_truncate_prefers_structural_break(self):
        """Long JSON is cut at a separator and marked with dots."""
        value = '{"name": "a fairly long value", "other": "another long value here"}'
        assert truncate_json(value, 40) == '{"name": "a fairly long value",...'

    def test_short_json_unchanged(self):
        assert truncate_json("[1, 2]") == "[1, 2]"


class TestPrepareCell:
    def test_none_is_null(self):
        assert prepare_cell(None, 10) == "NULL"

    def test_newlines_flattened(self):
        """Multi-line values render on one line."""
        assert prepare_cell("a\nb\r\nc", 10) == "a b c"

    def test_huge_value_is_bounded(self):
        """A multi-megabyte cell is cut down to the column width."""
        result = prepare_cell("x" * 5_000_000, 12)
        assert len(result) == 12
        assert result.endswith("…")


class TestMeasure:
    def test_measure_bounded(self):
        """Measurement never looks past the processing bound."""
        assert measure_cell("y" * 10_000, 10) == 40

    def test_is_truncated(self):
        assert is_truncated("abcdefghijk", 10)
        assert not is_truncated("abc", 10)
        assert is_truncated("a\nb", 10)
        assert not is_truncated(None, 10)
