"""Virtualized result grid state.

``GridViewport`` holds the loaded window of a result set (which may be a
prefix of a much larger table) and every piece of navigation state drawn on
top of it: the cursor, the vertical and horizontal scroll origins, column
widths, local search matches, pinned rows and the pagination flags used to
decide when more rows should be fetched.

It knows nothing about Textual; the results mixin owns one grid per tab and
the grid widget renders it.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from dbnav.shared.core.errors import InvalidRowError, PinLimitError

from .cells import NULL_TEXT, is_truncated, prepare_cell
from .column_sizing import (
    EDGE_INDICATORS_WIDTH,
    MAX_COLUMN_WIDTH,
    MIN_COLUMN_WIDTH,
    compute_column_widths,
    fit_columns,
    line_number_width,
)
from .motions import DEFAULT_TIMEOUT_S, MotionBuffer
from .row_cache import DEFAULT_CAPACITY, RowCache

DEFAULT_MAX_PINNED_ROWS = 5
DEFAULT_PREFETCH_THRESHOLD = 50
# Rows between the bottom of the window and the end of the loaded rows
# at which scrolling asks for the next page.
NEAR_END_MARGIN = 10
# Header, header separator and status line.
CHROME_ROWS = 3

SORT_ASC = "ASC"
SORT_DESC = "DESC"


@dataclass(frozen=True)
class MatchPos:
    row: int
    col: int


class GridViewport:
    """Navigation state over a loaded window of result rows."""

    def __init__(
        self,
        *,
        max_pinned_rows: int = DEFAULT_MAX_PINNED_ROWS,
        prefetch_threshold: int = DEFAULT_PREFETCH_THRESHOLD,
        min_column_width: int = MIN_COLUMN_WIDTH,
        max_column_width: int = MAX_COLUMN_WIDTH,
        cache_capacity: int = DEFAULT_CAPACITY,
        motion_timeout: float = DEFAULT_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
        show_line_numbers: bool = True,
        relative_numbers: bool = False,
    ) -> None:
        self.columns: list[str] = []
        self.rows: list[list[str]] = []
        self.total_rows = 0
        self.column_widths: list[int] = []
        self.min_column_width = min_column_width
        self.max_column_width = max_column_width

        self.selected_row = 0
        self.selected_col = 0
        self.top_row = 0
        self.visible_rows = 1
        self.left_col_offset = 0
        self.visible_cols = 0
        self._available_width: int | None = None

        self.sort_column = -1
        self.sort_direction = SORT_ASC
        self.nulls_first = False

        self.search_active = False
        self.search_mode = ""
        self.search_query = ""
        self.matches: list[MatchPos] = []
        self.current_match = 0
        self._match_set: set[tuple[int, int]] = set()

        self.pinned_rows: list[int] = []
        self.pinned_data: list[list[str]] = []
        self.max_pinned_rows = max_pinned_rows

        self.is_loading = False
        self.is_paginating = False
        self.is_prefetching = False
        self.prefetch_threshold = prefetch_threshold

        self.show_line_numbers = show_line_numbers
        self.relative_numbers = relative_numbers

        self.motions = MotionBuffer(timeout=motion_timeout, clock=clock)
        self.row_cache = RowCache(cache_capacity)

    # Data

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def set_data(self, columns: Sequence[str], rows: Sequence[Sequence[str]], total_rows: int) -> None:
        """Replace the loaded window and reset cursor, scroll, search and pins."""
        self.columns = list(columns)
        self.rows = [list(row) for row in rows]
        self.total_rows = max(total_rows, len(self.rows))
        self.column_widths = compute_column_widths(
            self.columns, self.rows, self.min_column_width, self.max_column_width
        )
        self.selected_row = 0
        self.selected_col = 0
        self.top_row = 0
        self.left_col_offset = 0
        self.row_cache.clear()
        self.clear_search()
        self.clear_pins()
        self.motions.clear()
        self.is_loading = False
        self.is_paginating = False
        self.is_prefetching = False
        self._clamp_horizontal()

    def append_rows(self, rows: Sequence[Sequence[str]], total_rows: int | None = None) -> None:
        """Extend the loaded window with the next page of rows."""
        self.rows.extend(list(row) for row in rows)
        if total_rows is not None:
            self.total_rows = total_rows
        self.total_rows = max(self.total_rows, len(self.rows))

    def next_page_offset(self) -> int:
        return len(self.rows)

    def has_more_rows(self) -> bool:
        return len(self.rows) < self.total_rows

    # Layout

    def gutter_width(self) -> int:
        return line_number_width(self.total_rows, len(self.rows), self.show_line_numbers)

    def calculate_visible_cols(self, width: int) -> int:
        self._available_width = width - EDGE_INDICATORS_WIDTH - self.gutter_width()
        self._fit_columns()
        return self.visible_cols

    def set_viewport(self, width: int, height: int) -> None:
        """Fit the grid to a content area of width x height cells."""
        pinned_height = len(self.pinned_rows) + 1 if self.pinned_rows else 0
        self.visible_rows = max(1, height - CHROME_ROWS - pinned_height)
        self.calculate_visible_cols(width)
        self.ensure_row_visible()

    def visible_row_range(self) -> range:
        end = min(self.top_row + self.visible_rows, len(self.rows))
        return range(self.top_row, end)

    def visible_col_range(self) -> range:
        end = min(self.left_col_offset + self.visible_cols, len(self.columns))
        return range(self.left_col_offset, end)

    # Vertical movement

    def ensure_row_visible(self) -> None:
        if self.selected_row < self.top_row:
            self.top_row = self.selected_row
        elif self.selected_row >= self.top_row + self.visible_rows:
            self.top_row = self.selected_row - self.visible_rows + 1
        self.top_row = max(0, self.top_row)

    def _clamp_row(self, row: int) -> int:
        return max(0, min(row, len(self.rows) - 1))

    def move_selection(self, delta: int) -> None:
        self.selected_row = self._clamp_row(self.selected_row + delta)
        self.ensure_row_visible()

    def set_selected_row(self, row: int) -> None:
        if not self.rows:
            return
        self.selected_row = self._clamp_row(row)
        self.ensure_row_visible()

    def page_up(self) -> None:
        self.selected_row = max(0, self.selected_row - self.visible_rows)
        self.top_row = self.selected_row

    def page_down(self) -> None:
        self.selected_row = self._clamp_row(self.selected_row + self.visible_rows)
        self.top_row = self.selected_row
        if self.top_row + self.visible_rows > len(self.rows):
            self.top_row = max(0, len(self.rows) - self.visible_rows)

    def scroll_viewport(self, delta: int) -> bool:
        """Move the window without moving the cursor.

        Returns:
            True when the window bottom is near the end of the loaded rows.
        """
        if not self.rows:
            return False
        max_top = max(0, len(self.rows) - self.visible_rows)
        self.top_row = max(0, min(self.top_row + delta, max_top))
        if self.selected_row < self.top_row:
            self.selected_row = self.top_row
        if self.selected_row >= self.top_row + self.visible_rows:
            self.selected_row = self.top_row + self.visible_rows - 1
        self.selected_row = self._clamp_row(self.selected_row)
        return self.top_row + self.visible_rows >= len(self.rows) - NEAR_END_MARGIN

    # Horizontal movement

    def _clamp_horizontal(self) -> None:
        if not self.columns:
            self.selected_col = 0
            self.left_col_offset = 0
            self.visible_cols = 0
            return
        self.visible_cols = max(1, min(self.visible_cols, len(self.columns))) if self.visible_cols else 0
        self.selected_col = max(0, min(self.selected_col, len(self.columns) - 1))
        max_offset = max(0, len(self.columns) - self.visible_cols)
        self.left_col_offset = max(0, min(self.left_col_offset, max_offset))

    def _fit_columns(self) -> None:
        """Recount visible columns, scrolling right until the selected one fits."""
        available = self._available_width
        if available is None or not self.columns:
            self._clamp_horizontal()
            return
        self.selected_col = max(0, min(self.selected_col, len(self.columns) - 1))
        self.left_col_offset = max(0, min(self.left_col_offset, self.selected_col))
        self.visible_cols = fit_columns(self.column_widths, self.left_col_offset, available)
        while self.selected_col >= self.left_col_offset + self.visible_cols:
            self.left_col_offset += 1
            self.visible_cols = fit_columns(self.column_widths, self.left_col_offset, available)
        self._clamp_horizontal()

    def move_selection_horizontal(self, delta: int) -> None:
        if not self.columns:
            return
        self.selected_col = max(0, min(self.selected_col + delta, len(self.columns) - 1))
        if self.selected_col < self.left_col_offset:
            self.left_col_offset = self.selected_col
        if self.visible_cols and self.selected_col >= self.left_col_offset + self.visible_cols:
            self.left_col_offset = self.selected_col - self.visible_cols + 1
        self._fit_columns()

    def jump_scroll_horizontal(self, delta: int) -> None:
        """Move by half a screen of columns in the direction of delta."""
        step = max(1, self.visible_cols // 2)
        self.move_selection_horizontal(delta * step)

    def jump_to_first_column(self) -> None:
        self.selected_col = 0
        self.left_col_offset = 0
        self._fit_columns()

    def jump_to_last_column(self) -> None:
        if not self.columns:
            return
        self.selected_col = len(self.columns) - 1
        self.left_col_offset = max(0, len(self.columns) - self.visible_cols)
        self._fit_columns()

    # Modal motions

    def handle_vim_motion(self, key: str, now: float | None = None) -> bool:
        """Feed a key to the motion buffer; returns True if it was consumed."""
        handled, jump = self.motions.feed(key, now)
        if jump is not None and self.rows:
            self.selected_row = jump.target_row(self.selected_row, len(self.rows))
            self.ensure_row_visible()
        return handled

    def vim_motion_status(self) -> str:
        return self.motions.status()

    # Sorting

    def toggle_sort(self) -> None:
        if self.sort_column == self.selected_col:
            self.sort_direction = SORT_DESC if self.sort_direction == SORT_ASC else SORT_ASC
        else:
            self.sort_column = self.selected_col
            self.sort_direction = SORT_ASC

    def toggle_nulls_first(self) -> None:
        self.nulls_first = not self.nulls_first

    def reverse_sort_direction(self) -> bool:
        if self.sort_column < 0:
            return False
        self.sort_direction = SORT_DESC if self.sort_direction == SORT_ASC else SORT_ASC
        return True

    def clear_sort(self) -> None:
        self.sort_column = -1
        self.sort_direction = SORT_ASC
        self.nulls_first = False

    def sort_column_name(self) -> str:
        if 0 <= self.sort_column < len(self.columns):
            return self.columns[self.sort_column]
        return ""

    def sort_indicator(self, col: int) -> str:
        if col != self.sort_column:
            return ""
        arrow = "↑" if self.sort_direction == SORT_ASC else "↓"
        return f" {arrow}ⁿ" if self.nulls_first else f" {arrow}"

    # Search

    def _find_matches(self, query: str) -> list[MatchPos]:
        needle = query.lower()
        return [
            MatchPos(row_index, col_index)
            for row_index, row in enumerate(self.rows)
            for col_index, value in enumerate(row)
            if value is not None and needle in value.lower()
        ]

    def _set_matches(self, matches: list[MatchPos]) -> None:
        self.matches = matches
        self._match_set = {(m.row, m.col) for m in matches}
        self.current_match = 0
        if matches:
            self._jump_to_match(0)

    def search_local(self, query: str) -> None:
        """Case-insensitive substring search over the loaded rows."""
        self.search_query = query
        self.search_mode = "local"
        if not query:
            self.search_active = False
            self._set_matches([])
            return
        self.search_active = True
        self._set_matches(self._find_matches(query))

    def set_search_results(self, query: str, matches: list[MatchPos]) -> None:
        self.search_query = query
        self.search_mode = "table"
        self.search_active = bool(matches)
        self._set_matches(list(matches))

    def apply_table_search(
        self, query: str, columns: Sequence[str], rows: Sequence[Sequence[str]], total_rows: int
    ) -> None:
        """Replace the loaded rows with a table-wide search result and mark hits."""
        self.set_data(columns, rows, total_rows)
        self.set_search_results(query, self._find_matches(query) if query else [])

    def _jump_to_match(self, index: int) -> None:
        if not 0 <= index < len(self.matches):
            return
        self.current_match = index
        match = self.matches[index]
        self.set_selected_row(match.row)
        self.selected_col = match.col
        self.move_selection_horizontal(0)

    def next_match(self) -> None:
        if self.matches:
            self._jump_to_match((self.current_match + 1) % len(self.matches))

    def prev_match(self) -> None:
        if self.matches:
            self._jump_to_match((self.current_match - 1) % len(self.matches))

    def clear_search(self) -> None:
        self.search_active = False
        self.search_query = ""
        self.search_mode = ""
        self.matches = []
        self._match_set = set()
        self.current_match = 0

    def is_match(self, row: int, col: int) -> bool:
        return (row, col) in self._match_set

    def is_current_match(self, row: int, col: int) -> bool:
        if not 0 <= self.current_match < len(self.matches):
            return False
        match = self.matches[self.current_match]
        return match.row == row and match.col == col

    def match_info(self) -> tuple[int, int]:
        """(current, total) with a 1-based current, or (0, 0) without matches."""
        if not self.search_active or not self.matches:
            return 0, 0
        return self.current_match + 1, len(self.matches)

    # Pinning

    def toggle_pin(self) -> bool:
        """Pin or unpin the row under the cursor.

        Returns:
            True if the row is now pinned, False if it was unpinned.

        Raises:
            PinLimitError: The pin cap is reached; nothing changed.
            InvalidRowError: The cursor is not on a loaded row.
        """
        row_index = self.selected_row
        if row_index in self.pinned_rows:
            position = self.pinned_rows.index(row_index)
            del self.pinned_rows[position]
            del self.pinned_data[position]
            return False
        if self.max_pinned_rows > 0 and len(self.pinned_rows) >= self.max_pinned_rows:
            raise PinLimitError(self.max_pinned_rows)
        if not 0 <= row_index < len(self.rows):
            raise InvalidRowError(row_index)
        self.pinned_rows.append(row_index)
        self.pinned_data.append(list(self.rows[row_index]))
        return True

    def is_pinned(self, row: int) -> bool:
        return row in self.pinned_rows

    def clear_pins(self) -> None:
        self.pinned_rows = []
        self.pinned_data = []

    def jump_to_next_pinned_row(self) -> None:
        """Cycle the cursor through pinned rows, starting at the first."""
        if not self.pinned_rows:
            return
        if self.selected_row in self.pinned_rows:
            next_index = (self.pinned_rows.index(self.selected_row) + 1) % len(self.pinned_rows)
        else:
            next_index = 0
        self.set_selected_row(self.pinned_rows[next_index])

    # Prefetch

    def needs_prefetch(self) -> bool:
        if self.is_paginating or self.is_prefetching:
            return False
        if self.prefetch_threshold <= 0:
            return False
        remaining = len(self.rows) - self.selected_row
        return remaining < self.prefetch_threshold and len(self.rows) < self.total_rows

    # Cell inspection

    def selected_cell_value(self) -> str:
        if not 0 <= self.selected_row < len(self.rows):
            return ""
        row = self.rows[self.selected_row]
        if not 0 <= self.selected_col < len(row):
            return ""
        value = row[self.selected_col]
        return NULL_TEXT if value is None else value

    def selected_row_values(self) -> list[str]:
        if not 0 <= self.selected_row < len(self.rows):
            return []
        return [NULL_TEXT if value is None else value for value in self.rows[self.selected_row]]

    def selected_column_name(self) -> str:
        if 0 <= self.selected_col < len(self.columns):
            return self.columns[self.selected_col]
        return ""

    def is_cell_truncated(self) -> bool:
        if not 0 <= self.selected_row < len(self.rows):
            return False
        if not 0 <= self.selected_col < len(self.column_widths):
            return False
        row = self.rows[self.selected_row]
        if self.selected_col >= len(row):
            return False
        return is_truncated(row[self.selected_col], self.column_widths[self.selected_col])

    # Rendering support

    def rendered_row(self, index: int) -> list[str]:
        """Display text of every cell in a loaded row, cached by row offset."""
        cached = self.row_cache.get(index)
        if cached is not None:
            return cached
        row = self.rows[index]
        rendered = [
            prepare_cell(row[col] if col < len(row) else "", width)
            for col, width in enumerate(self.column_widths)
        ]
        self.row_cache.set(index, rendered)
        return rendered

    def rendered_pinned_row(self, position: int) -> list[str]:
        row = self.pinned_data[position]
        return [
            prepare_cell(row[col] if col < len(row) else "", width)
            for col, width in enumerate(self.column_widths)
        ]

    def status_text(self) -> str:
        if self.is_paginating:
            return "Loading..."
        parts = []
        current, total = self.match_info()
        if total:
            parts.append(f"Match {current} of {total}")
        if len(self.columns) > self.visible_cols:
            cols = self.visible_col_range()
            parts.append(f"Cols {cols.start + 1}-{cols.stop} of {len(self.columns)}")
        if self.pinned_rows:
            parts.append(f"{len(self.pinned_rows)} pinned")
        end_row = min(self.top_row + self.visible_rows, len(self.rows))
        parts.append(f"{self.top_row + 1 if self.rows else 0}-{end_row} of {self.total_rows} rows")
        pending = self.vim_motion_status()
        if pending:
            parts.append(pending)
        return " │ ".join(parts)
