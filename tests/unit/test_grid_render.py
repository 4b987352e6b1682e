"""Tests for grid rendering details."""

from __future__ import annotations

from dbnav.domains.results.domain.grid import GridViewport
from dbnav.domains.results.ui.grid_render import (
    STYLE_LINE_NUMBER,
    STYLE_LINE_NUMBER_SELECTED,
    STYLE_PINNED_MARKER,
    _line_number,
    render_grid,
)


def make_grid() -> GridViewport:
    grid = GridViewport()
    grid.set_data(["id", "name"], [[str(i), f"name{i}"] for i in range(5)], 5)
    return grid


class TestLineNumbers:
    def test_pinned_row_number_highlighted(self):
        """Pinned rows keep a marked line number in the scrolling body."""
        grid = make_grid()
        grid.set_selected_row(2)
        grid.toggle_pin()
        grid.set_selected_row(0)
        assert _line_number(grid, 2, selected=False).style == STYLE_PINNED_MARKER
        assert _line_number(grid, 1, selected=False).style == STYLE_LINE_NUMBER

    def test_selected_row_number_wins(self):
        grid = make_grid()
        grid.toggle_pin()
        assert _line_number(grid, 0, selected=True).style == STYLE_LINE_NUMBER_SELECTED


class TestRenderGrid:
    def test_loading_placeholder(self):
        grid = GridViewport()
        grid.is_loading = True
        assert render_grid(grid, 40, 10).plain == "Loading table data..."

    def test_header_and_rows(self):
        """Every visible row is rendered below the header."""
        text = render_grid(make_grid(), 60, 12).plain
        assert "name" in text.splitlines()[0]
        assert "name4" in text
