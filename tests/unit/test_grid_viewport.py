"""Tests for GridViewport navigation, paging, search and pins."""

from __future__ import annotations

import pytest

from dbnav.domains.results.domain.grid import GridViewport, MatchPos
from dbnav.shared.core.errors import GridCapacityError, InvalidRowError, PinLimitError


def make_grid(rows: int = 3, visible: int = 2, **kwargs) -> GridViewport:
    grid = GridViewport(**kwargs)
    grid.set_data(["id", "name"], [[str(i), f"name{i}"] for i in range(rows)], rows)
    grid.visible_rows = visible
    return grid


class TestVerticalMovement:
    def test_scrolls_to_keep_cursor_visible(self):
        """Moving past the window shifts the top row."""
        grid = make_grid()
        grid.move_selection(1)
        grid.move_selection(1)
        assert grid.selected_row == 2
        assert grid.top_row == 1

    def test_clamps_at_edges(self):
        grid = make_grid()
        grid.move_selection(-3)
        assert grid.selected_row == 0
        grid.move_selection(10)
        assert grid.selected_row == 2

    def test_page_down_and_up(self):
        """Pages move by the visible height and keep the window full."""
        grid = make_grid(rows=10, visible=4)
        grid.page_down()
        assert grid.selected_row == 4
        assert grid.top_row == 4
        grid.page_down()
        grid.page_down()
        assert grid.selected_row == 9
        assert grid.top_row == 6
        grid.page_up()
        assert grid.selected_row == 5
        assert grid.top_row == 5

    def test_scroll_viewport_drags_cursor(self):
        """Scrolling the window keeps the cursor inside it."""
        grid = make_grid(rows=30, visible=5)
        near_end = grid.scroll_viewport(3)
        assert grid.top_row == 3
        assert grid.selected_row == 3
        assert near_end is False
        assert grid.scroll_viewport(100) is True
        assert grid.top_row == 25

    @pytest.mark.parametrize("rows, visible", [(50, 7), (3, 5), (8, 8)])
    @pytest.mark.parametrize(
        "steps",
        [
            [("move", 3), ("scroll", 10), ("page_down", None), ("move", -20), ("scroll", -4)],
            [("page_down", None), ("page_down", None), ("scroll", 100), ("move", -1), ("page_up", None)],
            [("scroll", 6), ("move", 9), ("page_up", None), ("scroll", -100), ("move", 100), ("scroll", -2)],
            [("row", 30), ("scroll", -3), ("move", 4), ("page_down", None), ("row", 0), ("scroll", 2)],
        ],
    )
    def test_cursor_stays_in_window(self, rows, visible, steps):
        """After any mix of moves, scrolls and pages the cursor is inside the window."""
        grid = make_grid(rows=rows, visible=visible)
        actions = {
            "move": grid.move_selection,
            "scroll": grid.scroll_viewport,
            "row": grid.set_selected_row,
            "page_down": lambda _: grid.page_down(),
            "page_up": lambda _: grid.page_up(),
        }
        for name, arg in steps:
            actions[name](arg)
            assert 0 <= grid.selected_row < rows
            assert grid.top_row <= grid.selected_row < grid.top_row + grid.visible_rows

    def test_motion_jump(self):
        """A count and gg land on that row."""
        grid = make_grid(rows=100, visible=10)
        assert grid.handle_vim_motion("4", now=0.0)
        assert grid.handle_vim_motion("2", now=0.0)
        assert grid.vim_motion_status() == "42_"
        assert grid.handle_vim_motion("g", now=0.0)
        assert grid.handle_vim_motion("g", now=0.0)
        assert grid.selected_row == 41
        assert grid.top_row == 32

    def test_empty_grid_is_safe(self):
        grid = GridViewport()
        grid.move_selection(1)
        grid.page_down()
        assert grid.scroll_viewport(1) is False
        assert grid.selected_cell_value() == ""


class TestHorizontalMovement:
    def test_columns_follow_cursor(self):
        """The left offset follows the selected column."""
        grid = GridViewport()
        grid.set_data([f"c{i}" for i in range(8)], [["v"] * 8], 1)
        grid.calculate_visible_cols(4 + 5 + 10 * 3 + 3 * 2)
        assert grid.visible_cols == 3
        grid.move_selection_horizontal(4)
        assert grid.selected_col == 4
        assert grid.left_col_offset == 2
        grid.jump_to_last_column()
        assert grid.selected_col == 7
        assert grid.left_col_offset == 5
        grid.jump_to_first_column()
        assert (grid.selected_col, grid.left_col_offset) == (0, 0)

    def test_wide_column_scrolled_into_view(self):
        """A wide column past narrow ones is fully scrolled to, layout after layout."""
        grid = GridViewport()
        grid.set_data([f"c{i}" for i in range(5)], [["v", "v", "v", "v", "x" * 60]], 1)
        assert grid.column_widths == [10, 10, 10, 10, 50]
        width = 4 + 5 + 60
        grid.calculate_visible_cols(width)
        assert grid.visible_cols == 4
        for _ in range(4):
            grid.move_selection_horizontal(1)
            grid.calculate_visible_cols(width)
            assert grid.selected_col in grid.visible_col_range()
        assert (grid.selected_col, grid.left_col_offset, grid.visible_cols) == (4, 4, 1)

        grid.move_selection_horizontal(-1)
        grid.calculate_visible_cols(width)
        assert grid.selected_col == 3
        assert grid.selected_col in grid.visible_col_range()

    def test_half_screen_jump(self):
        grid = GridViewport()
        grid.set_data([f"c{i}" for i in range(8)], [["v"] * 8], 1)
        grid.visible_cols = 4
        grid.jump_scroll_horizontal(1)
        assert grid.selected_col == 2


class TestData:
    def test_set_data_resets_state(self):
        """New data resets cursor, search and pins."""
        grid = make_grid()
        grid.move_selection(2)
        grid.toggle_pin()
        grid.search_local("name")
        grid.set_data(["x"], [["1"]], 1)
        assert grid.selected_row == 0
        assert grid.pinned_rows == []
        assert grid.matches == []
        assert grid.is_loading is False

    def test_append_rows_and_total(self):
        """Appending extends rows and keeps total at least the loaded count."""
        grid = make_grid(rows=2)
        grid.total_rows = 10
        grid.append_rows([["2", "name2"]], total_rows=10)
        assert grid.row_count == 3
        assert grid.next_page_offset() == 3
        assert grid.has_more_rows()
        grid.append_rows([["3", "x"]], total_rows=1)
        assert grid.total_rows == 4


class TestPins:
    def test_pin_cap(self):
        """Pinning past the cap raises and leaves the pins unchanged."""
        grid = make_grid(rows=5, max_pinned_rows=2)
        grid.toggle_pin()
        grid.move_selection(1)
        grid.toggle_pin()
        grid.move_selection(1)
        with pytest.raises(PinLimitError) as raised:
            grid.toggle_pin()
        assert isinstance(raised.value, GridCapacityError)
        assert grid.pinned_rows == [0, 1]
        grid.set_selected_row(0)
        assert grid.toggle_pin() is False
        assert grid.pinned_rows == [1]

    def test_unpin(self):
        grid = make_grid()
        assert grid.toggle_pin() is True
        assert grid.toggle_pin() is False
        assert grid.pinned_rows == []
        assert grid.pinned_data == []

    def test_pin_snapshots_row(self):
        """Pinned data is a copy of the row at pin time."""
        grid = make_grid()
        grid.toggle_pin()
        grid.rows[0][1] = "changed"
        assert grid.pinned_data[0] == ["0", "name0"]

    def test_invalid_row(self):
        grid = GridViewport()
        with pytest.raises(InvalidRowError):
            grid.toggle_pin()

    def test_cycle_pinned_rows(self):
        """The jump cycles through pins in pin order."""
        grid = make_grid(rows=5)
        grid.set_selected_row(3)
        grid.toggle_pin()
        grid.set_selected_row(1)
        grid.toggle_pin()
        grid.set_selected_row(0)
        grid.jump_to_next_pinned_row()
        assert grid.selected_row == 3
        grid.jump_to_next_pinned_row()
        assert grid.selected_row == 1
        grid.jump_to_next_pinned_row()
        assert grid.selected_row == 3


class TestPrefetch:
    def test_threshold(self):
        """Prefetch is wanted near the end of loaded rows while more exist."""
        grid = make_grid(rows=100, prefetch_threshold=50)
        grid.total_rows = 1000
        grid.set_selected_row(40)
        assert not grid.needs_prefetch()
        grid.set_selected_row(60)
        assert grid.needs_prefetch()

    def test_not_while_in_flight_or_complete(self):
        grid = make_grid(rows=100, prefetch_threshold=50)
        grid.total_rows = 1000
        grid.set_selected_row(90)
        grid.is_prefetching = True
        assert not grid.needs_prefetch()
        grid.is_prefetching = False
        grid.total_rows = 100
        assert not grid.needs_prefetch()

    def test_disabled_with_zero_threshold(self):
        grid = make_grid(rows=10, prefetch_threshold=0)
        grid.total_rows = 100
        grid.set_selected_row(9)
        assert not grid.needs_prefetch()


class TestSearch:
    def test_local_search_and_cycle(self):
        """Matches are row-major and cycling wraps."""
        grid = make_grid()
        grid.search_local("NAME")
        assert grid.matches == [MatchPos(0, 1), MatchPos(1, 1), MatchPos(2, 1)]
        assert grid.match_info() == (1, 3)
        grid.prev_match()
        assert (grid.selected_row, grid.selected_col) == (2, 1)
        grid.next_match()
        assert grid.current_match == 0
        assert grid.is_current_match(0, 1)
        assert grid.is_match(1, 1)

    def test_empty_query_clears(self):
        grid = make_grid()
        grid.search_local("name")
        grid.search_local("")
        assert not grid.search_active
        assert grid.match_info() == (0, 0)

    def test_table_search_replaces_rows(self):
        """Table search swaps in the result rows and marks hits."""
        grid = make_grid()
        grid.apply_table_search("bob", ["id", "name"], [["7", "Bob"]], 1)
        assert grid.rows == [["7", "Bob"]]
        assert grid.search_mode == "table"
        assert grid.matches == [MatchPos(0, 1)]


class TestSort:
    def test_toggle_cycles_direction(self):
        """Sorting the same column flips its direction."""
        grid = make_grid()
        grid.toggle_sort()
        assert (grid.sort_column, grid.sort_direction) == (0, "ASC")
        assert grid.sort_column_name() == "id"
        grid.toggle_sort()
        assert grid.sort_direction == "DESC"
        grid.move_selection_horizontal(1)
        grid.toggle_sort()
        assert (grid.sort_column, grid.sort_direction) == (1, "ASC")

    def test_indicator_and_clear(self):
        grid = make_grid()
        assert grid.reverse_sort_direction() is False
        grid.toggle_sort()
        grid.toggle_nulls_first()
        assert grid.sort_indicator(0) == " ↑ⁿ"
        assert grid.sort_indicator(1) == ""
        grid.clear_sort()
        assert grid.sort_column == -1
        assert grid.nulls_first is False


class TestRendering:
    def test_rendered_row_cached(self):
        """Rendered rows come from the row cache on the second read."""
        grid = make_grid()
        first = grid.rendered_row(0)
        assert 0 in grid.row_cache
        assert grid.rendered_row(0) is first

    def test_status_text(self):
        grid = make_grid(rows=3, visible=2)
        grid.visible_cols = 2
        assert grid.status_text() == "1-2 of 3 rows"
        grid.is_paginating = True
        assert grid.status_text() == "Loading..."
