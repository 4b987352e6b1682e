"""Tests for column widths and horizontal fitting."""

from __future__ import annotations

from dbnav.domains.results.domain.column_sizing import (
    MAX_COLUMN_WIDTH,
    MIN_COLUMN_WIDTH,
    compute_column_widths,
    fit_columns,
    line_number_width,
)


class TestComputeColumnWidths:
    def test_minimum_width(self):
        """Narrow columns get the minimum width."""
        assert compute_column_widths(["id"], [["1"], ["2"]]) == [MIN_COLUMN_WIDTH]

    def test_widest_value_wins(self):
        """A column grows to its widest sampled value."""
        assert compute_column_widths(["name"], [["a" * 20], ["b"]]) == [20]

    def test_capped_at_maximum(self):
        """Huge values are capped at the maximum width."""
        assert compute_column_widths(["body"], [["z" * 1_000_000]]) == [MAX_COLUMN_WIDTH]

    def test_header_includes_sort_indicator_room(self):
        """Headers reserve space for the sort arrow."""
        assert compute_column_widths(["a_long_header_name"], []) == [len("a_long_header_name") + 4]

    def test_only_sample_rows_measured(self):
        """Rows past the sample are ignored."""
        rows = [["a"]] * 3 + [["b" * 40]]
        assert compute_column_widths(["c"], rows, sample_rows=3) == [MIN_COLUMN_WIDTH]


class TestFitColumns:
    def test_fits_with_separators(self):
        """Columns are separated by three cells."""
        assert fit_columns([10, 10, 10], 0, 23) == 2
        assert fit_columns([10, 10, 10], 0, 36) == 3

    def test_at_least_one(self):
        """A column wider than the view still counts as visible."""
        assert fit_columns([50], 0, 5) == 1

    def test_empty(self):
        assert fit_columns([], 0, 100) == 0

    def test_offset(self):
        assert fit_columns([30, 10, 10], 1, 23) == 2


class TestLineNumbers:
    def test_width(self):
        """Digits of the largest row number plus the separator."""
        assert line_number_width(5, 5) == 2 + 3
        assert line_number_width(12345, 100) == 5 + 3
        assert line_number_width(100, 100, show_line_numbers=False) == 0
