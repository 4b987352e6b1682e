"""Results handling mixin for DbnavApp."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pyperclip
from rich.markup import escape as escape_markup

from dbnav.domains.results.domain.grid import GridViewport
from dbnav.domains.results.domain.preview import CellPreview, cell_preview
from dbnav.domains.results.domain.tabs import ResultTab, TabKind
from dbnav.domains.shell.app.messages import (
    LoadTableData,
    PageRequest,
    PrefetchComplete,
    PrefetchData,
    SearchTable,
    SearchTableResult,
    TableDataLoaded,
)
from dbnav.shared.core.errors import GridCapacityError
from dbnav.shared.ui.protocols import AppProtocol

logger = logging.getLogger(__name__)


def _sort_matches(grid: GridViewport, request: PageRequest) -> bool:
    return (
        request.sort_column == grid.sort_column_name()
        and (not request.sort_column or request.sort_dir == grid.sort_direction)
        and request.nulls_first == grid.nulls_first
    )


class ResultsMixin:
    """Mixin providing result tabs, paging and grid actions.

    Page completions are matched to their tab by object id. A page is
    appended only when its offset equals the number of rows already loaded,
    so out-of-order or duplicated pages never land twice.
    """

    _internal_clipboard: str = ""
    _preview_hidden: bool = False

    def _new_grid(self: AppProtocol) -> GridViewport:
        viewer = self.services.viewer
        return GridViewport(
            max_pinned_rows=viewer.max_pinned_rows,
            prefetch_threshold=viewer.prefetch_threshold,
            min_column_width=viewer.column_min_width,
            max_column_width=viewer.column_max_width,
            cache_capacity=viewer.row_cache_capacity,
            motion_timeout=viewer.vim_motion_timeout_s,
            show_line_numbers=viewer.show_line_numbers,
            relative_numbers=viewer.relative_numbers,
        )

    # Clipboard

    def _copy_text(self: AppProtocol, text: str) -> bool:
        """Copy text to clipboard if possible, otherwise store internally."""
        self._internal_clipboard = text

        # Prefer Textual's clipboard support (OSC52 where available).
        try:
            self.copy_to_clipboard(text)
            return True
        except Exception as error:
            logger.debug("terminal clipboard unavailable: %s", error)

        try:
            pyperclip.copy(text)
            return True
        except pyperclip.PyperclipException:
            return False

    def _format_tsv(self, columns: list[str], rows: list[list[Any]]) -> str:
        """Format columns and rows as TSV."""

        def fmt(value: object) -> str:
            if value is None:
                return "NULL"
            return str(value).replace("\t", " ").replace("\r", "").replace("\n", "\\n")

        lines: list[str] = []
        if columns:
            lines.append("\t".join(columns))
        for row in rows:
            lines.append("\t".join(fmt(v) for v in row))
        return "\n".join(lines)

    def action_copy_cell(self: AppProtocol) -> None:
        """Copy the selected cell to clipboard (or internal clipboard)."""
        grid = self._result_tabs.active_grid
        if grid is None or grid.row_count <= 0:
            self.notify("No results", severity="warning")
            return
        self._copy_text(grid.selected_cell_value())
        self.notify(f"Copied {escape_markup(grid.selected_column_name())}")

    def action_copy_row(self: AppProtocol) -> None:
        """Copy the selected row to clipboard (TSV)."""
        grid = self._result_tabs.active_grid
        if grid is None or grid.row_count <= 0:
            self.notify("No results", severity="warning")
            return
        self._copy_text(self._format_tsv([], [grid.selected_row_values()]))
        self.notify("Copied row")

    def action_copy_results(self: AppProtocol) -> None:
        """Copy every loaded row of the active tab, with a header line."""
        grid = self._result_tabs.active_grid
        if grid is None or not grid.columns:
            self.notify("No results", severity="warning")
            return
        self._copy_text(self._format_tsv(grid.columns, grid.rows))
        self.notify(f"Copied {grid.row_count} rows")

    # Cell preview

    def _cell_preview(self: AppProtocol) -> CellPreview | None:
        """Preview for the active grid's cell unless the user hid the pane."""
        if self._preview_hidden:
            return None
        grid = self._result_tabs.active_grid
        if grid is None:
            return None
        return cell_preview(grid)

    def action_toggle_preview(self: AppProtocol) -> None:
        self._preview_hidden = not self._preview_hidden
        self.notify("Cell preview hidden" if self._preview_hidden else "Cell preview on")
        self._refresh_results()

    # Page loading

    def _page_request(self: AppProtocol, tab: ResultTab, offset: int) -> PageRequest:
        grid = tab.grid
        return PageRequest(
            object_id=tab.object_id,
            schema=tab.schema,
            table=tab.table,
            offset=offset,
            limit=self.services.viewer.page_size,
            sort_column=grid.sort_column_name(),
            sort_dir=grid.sort_direction,
            nulls_first=grid.nulls_first,
        )

    def _request_page(self: AppProtocol, tab: ResultTab, offset: int, *, paginating: bool = False) -> None:
        if tab.kind is not TabKind.TABLE_DATA:
            return
        if paginating:
            tab.grid.is_paginating = True
        self.post_message(LoadTableData(self._page_request(tab, offset), paginating=paginating))

    def _run_page_worker(
        self: AppProtocol, request: PageRequest, reply: type[TableDataLoaded | PrefetchComplete]
    ) -> None:
        loader = self.services.loader

        async def work_async() -> None:
            try:
                result = await asyncio.to_thread(
                    loader.load_page,
                    request.schema,
                    request.table,
                    request.offset,
                    request.limit,
                    request.sort_column,
                    request.sort_dir,
                    request.nulls_first,
                )
            except Exception as error:
                self.post_message(reply(request, error=error))
                return
            self.post_message(reply(request, result))

        self.run_worker(
            work_async(),
            name=f"page-{request.object_id}-{request.offset}",
            group="table-data",
            exclusive=False,
        )

    def on_load_table_data(self: AppProtocol, message: LoadTableData) -> None:
        request = message.request
        tab = self._result_tabs.find_table_tab(request.object_id)
        if tab is None:
            return
        if request.offset == 0 and not tab.grid.rows:
            tab.grid.is_loading = True
        if message.paginating:
            tab.grid.is_paginating = True
        self._run_page_worker(request, TableDataLoaded)
        self._refresh_results()

    def on_table_data_loaded(self: AppProtocol, message: TableDataLoaded) -> None:
        request = message.request
        tab = self._result_tabs.find_table_tab(request.object_id)
        if tab is None:
            logger.debug("Dropping page for closed tab %s", request.object_id)
            return
        grid = tab.grid

        if message.error is not None or message.result is None:
            grid.is_loading = False
            grid.is_paginating = False
            self.notify(f"Failed to load table data: {escape_markup(str(message.error))}", severity="error")
            self._refresh_results()
            return

        if not _sort_matches(grid, request):
            logger.debug("Dropping %s page with outdated sort", request.object_id)
            return

        result = message.result
        if request.offset == 0 or not grid.rows or list(result.columns) != grid.columns:
            grid.set_data(result.columns, result.rows, result.total_rows)
        elif request.offset == grid.row_count:
            grid.append_rows(result.rows, result.total_rows)
            grid.is_paginating = False
        else:
            logger.debug(
                "Dropping %s page at offset %d, have %d rows", request.object_id, request.offset, grid.row_count
            )
            grid.is_paginating = False
        self._refresh_results()

    # Prefetch

    def _after_grid_cursor_move(self: AppProtocol, tab: ResultTab) -> None:
        grid = tab.grid
        if tab.kind is TabKind.TABLE_DATA and grid.needs_prefetch():
            grid.is_prefetching = True
            self.post_message(PrefetchData(self._page_request(tab, grid.next_page_offset())))

    def on_prefetch_data(self: AppProtocol, message: PrefetchData) -> None:
        tab = self._result_tabs.find_table_tab(message.request.object_id)
        if tab is None:
            return
        tab.grid.is_prefetching = True
        self._run_page_worker(message.request, PrefetchComplete)

    def on_prefetch_complete(self: AppProtocol, message: PrefetchComplete) -> None:
        request = message.request
        tab = self._result_tabs.find_table_tab(request.object_id)
        if tab is None:
            return
        grid = tab.grid
        if not _sort_matches(grid, request):
            # A newer sort owns the flags now.
            logger.debug("Dropping prefetch with outdated sort at offset %d", request.offset)
            return
        grid.is_prefetching = False
        grid.is_paginating = False

        if message.error is not None or message.result is None:
            logger.warning("prefetch failed at offset %d: %s", request.offset, message.error)
            return
        if request.offset != grid.row_count:
            logger.debug("Dropping prefetched rows at offset %d", request.offset)
            return
        grid.append_rows(message.result.rows, message.result.total_rows)
        self._refresh_results()

    # Cursor movement

    def _move_grid(self: AppProtocol, move: str, *args: Any) -> None:
        tab = self._result_tabs.active_tab
        if tab is None or not tab.grid.columns:
            return
        getattr(tab.grid, move)(*args)
        self._after_grid_cursor_move(tab)
        self._refresh_results()

    def action_grid_cursor_down(self: AppProtocol) -> None:
        self._move_grid("move_selection", 1)

    def action_grid_cursor_up(self: AppProtocol) -> None:
        self._move_grid("move_selection", -1)

    def action_grid_cursor_left(self: AppProtocol) -> None:
        self._move_grid("move_selection_horizontal", -1)

    def action_grid_cursor_right(self: AppProtocol) -> None:
        self._move_grid("move_selection_horizontal", 1)

    def action_grid_page_down(self: AppProtocol) -> None:
        self._move_grid("page_down")

    def action_grid_page_up(self: AppProtocol) -> None:
        self._move_grid("page_up")

    def action_grid_half_left(self: AppProtocol) -> None:
        self._move_grid("jump_scroll_horizontal", -1)

    def action_grid_half_right(self: AppProtocol) -> None:
        self._move_grid("jump_scroll_horizontal", 1)

    def action_grid_first_column(self: AppProtocol) -> None:
        self._move_grid("jump_to_first_column")

    def action_grid_last_column(self: AppProtocol) -> None:
        self._move_grid("jump_to_last_column")

    def _scroll_grid(self: AppProtocol, delta: int) -> None:
        tab = self._result_tabs.active_tab
        if tab is None or not tab.grid.columns:
            return
        grid = tab.grid
        near_end = grid.scroll_viewport(delta)
        if (
            near_end
            and tab.kind is TabKind.TABLE_DATA
            and grid.has_more_rows()
            and not grid.is_paginating
            and not grid.is_prefetching
        ):
            self._request_page(tab, grid.next_page_offset(), paginating=True)
        self._refresh_results()

    def action_grid_scroll_down(self: AppProtocol) -> None:
        self._scroll_grid(1)

    def action_grid_scroll_up(self: AppProtocol) -> None:
        self._scroll_grid(-1)

    def handle_grid_key(self: AppProtocol, key: str) -> bool:
        """Route a count/jump motion key to the active grid."""
        tab = self._result_tabs.active_tab
        if tab is None or not tab.grid.columns:
            return False
        handled = tab.grid.handle_vim_motion(key)
        if handled:
            self._after_grid_cursor_move(tab)
            self._refresh_results()
        return handled

    # Pinning

    def action_toggle_pin(self: AppProtocol) -> None:
        grid = self._result_tabs.active_grid
        if grid is None or grid.row_count <= 0:
            return
        try:
            grid.toggle_pin()
        except GridCapacityError as error:
            self.notify(str(error), severity="warning")
            return
        self._refresh_results()

    def action_next_pinned_row(self: AppProtocol) -> None:
        self._move_grid("jump_to_next_pinned_row")

    def action_clear_pins(self: AppProtocol) -> None:
        grid = self._result_tabs.active_grid
        if grid is not None:
            grid.clear_pins()
            self._refresh_results()

    # Sorting

    def _reload_sorted(self: AppProtocol) -> None:
        tab = self._result_tabs.active_tab
        if tab is None:
            return
        if tab.kind is TabKind.TABLE_DATA:
            self._request_page(tab, 0)
        else:
            self.notify("Sorting applies to table data only", severity="warning")
        self._refresh_results()

    def action_sort_column(self: AppProtocol) -> None:
        grid = self._result_tabs.active_grid
        if grid is None or not grid.columns:
            return
        grid.toggle_sort()
        self._reload_sorted()

    def action_reverse_sort(self: AppProtocol) -> None:
        grid = self._result_tabs.active_grid
        if grid is not None and grid.reverse_sort_direction():
            self._reload_sorted()

    def action_toggle_nulls_first(self: AppProtocol) -> None:
        grid = self._result_tabs.active_grid
        if grid is None or grid.sort_column < 0:
            return
        grid.toggle_nulls_first()
        self._reload_sorted()

    def action_clear_sort(self: AppProtocol) -> None:
        grid = self._result_tabs.active_grid
        if grid is None or grid.sort_column < 0:
            return
        grid.clear_sort()
        self._reload_sorted()

    # Search

    def search_grid(self: AppProtocol, query: str) -> int:
        """Search the loaded rows of the active tab; returns the match count."""
        tab = self._result_tabs.active_tab
        if tab is None:
            return 0
        tab.grid.search_local(query)
        self._after_grid_cursor_move(tab)
        self._refresh_results()
        return len(tab.grid.matches)

    def action_next_match(self: AppProtocol) -> None:
        self._move_grid("next_match")

    def action_prev_match(self: AppProtocol) -> None:
        self._move_grid("prev_match")

    def action_clear_search(self: AppProtocol) -> None:
        tab = self._result_tabs.active_tab
        if tab is None:
            return
        was_table_search = tab.grid.search_mode == "table"
        tab.grid.clear_search()
        if was_table_search:
            self._request_page(tab, 0)
        self._refresh_results()

    def on_search_table(self: AppProtocol, message: SearchTable) -> None:
        tab = self._result_tabs.active_tab
        if tab is None or tab.kind is not TabKind.TABLE_DATA:
            self.notify("Table search needs an open table", severity="warning")
            return
        loader = self.services.loader
        object_id, schema, table, query = tab.object_id, tab.schema, tab.table, message.query

        async def work_async() -> None:
            try:
                result = await asyncio.to_thread(loader.search_table, schema, table, query)
            except Exception as error:
                self.post_message(SearchTableResult(object_id, query, error=error))
                return
            self.post_message(SearchTableResult(object_id, query, result))

        self.run_worker(work_async(), name=f"search-{object_id}", group="table-search", exclusive=True)

    def on_search_table_result(self: AppProtocol, message: SearchTableResult) -> None:
        tab = self._result_tabs.find_table_tab(message.object_id)
        if tab is None:
            return
        if message.error is not None or message.result is None:
            self.notify(f"Search failed: {escape_markup(str(message.error))}", severity="error")
            return
        result = message.result
        # Search results are not paged; total is what came back.
        tab.grid.apply_table_search(message.query, result.columns, result.rows, len(result.rows))
        count = len(tab.grid.matches)
        if count:
            self.notify(f"{count} matches in {len(result.rows)} rows")
        else:
            self.notify(f"No matches for {escape_markup(message.query)}", severity="warning")
        self._refresh_results()

    # Tabs

    def action_next_tab(self: AppProtocol) -> None:
        self._result_tabs.next_tab()
        self._refresh_results()

    def action_prev_tab(self: AppProtocol) -> None:
        self._result_tabs.prev_tab()
        self._refresh_results()

    def action_close_tab(self: AppProtocol) -> None:
        tab = self._result_tabs.active_tab
        if tab is None:
            return
        if tab.is_pending:
            self.action_cancel_query()
        self._result_tabs.close(tab)
        self._refresh_results()
