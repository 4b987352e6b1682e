"""Results pane widgets: the tab strip and the grid."""

from __future__ import annotations

from typing import Any

from rich.syntax import Syntax
from rich.text import Text
from textual import events
from textual.binding import Binding
from textual.widget import Widget
from textual.widgets import Static

from dbnav.domains.results.domain.preview import CellPreview
from dbnav.domains.results.domain.tabs import ResultTabs, TabKind

from .grid_render import STYLE_STATUS, render_grid


def render_tab_bar(tabs: ResultTabs) -> Text:
    """One line of tab titles, the active tab reversed."""
    text = Text(no_wrap=True, overflow="ellipsis")
    if not len(tabs):
        text.append("No results", style=STYLE_STATUS)
        return text
    for index, tab in enumerate(tabs):
        if index:
            text.append(" ")
        marker = "▦" if tab.kind is TabKind.TABLE_DATA else "»"
        label = f" {index + 1}:{marker} {tab.title} "
        if index == tabs.active_index:
            style = "reverse bold"
        elif tab.is_cancelled:
            style = "dim strike"
        elif tab.is_pending:
            style = "italic"
        else:
            style = ""
        text.append(label, style=style)
    return text


class TabBar(Static):
    DEFAULT_CSS = """
    TabBar {
        height: 1;
    }
    """

    def show_tabs(self, tabs: ResultTabs) -> None:
        self.update(render_tab_bar(tabs))


class GridView(Widget, can_focus=True):
    """Draws the active tab's grid.

    Count and jump motions (``j``, ``k``, ``gg``, ``G`` and numeric
    prefixes) are fed through the grid's motion buffer in ``on_key``;
    everything else goes through bindings.
    """

    DEFAULT_CSS = """
    GridView {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("down", "app.grid_cursor_down", "Down", show=False),
        Binding("up", "app.grid_cursor_up", "Up", show=False),
        Binding("h,left", "app.grid_cursor_left", "Left", show=False),
        Binding("l,right", "app.grid_cursor_right", "Right", show=False),
        Binding("ctrl+d,pagedown", "app.grid_page_down", "Page down", show=False),
        Binding("ctrl+u,pageup", "app.grid_page_up", "Page up", show=False),
        Binding("ctrl+e", "app.grid_scroll_down", "Scroll down", show=False),
        Binding("ctrl+y", "app.grid_scroll_up", "Scroll up", show=False),
        Binding("H", "app.grid_half_left", "Half left", show=False),
        Binding("L", "app.grid_half_right", "Half right", show=False),
        Binding("0,home", "app.grid_first_column", "First column", show=False),
        Binding("dollar_sign,end", "app.grid_last_column", "Last column", show=False),
        Binding("p", "app.toggle_pin", "Pin", show=False),
        Binding("P", "app.next_pinned_row", "Next pinned", show=False),
        Binding("s", "app.sort_column", "Sort", show=False),
        Binding("S", "app.reverse_sort", "Reverse sort", show=False),
        Binding("ctrl+n", "app.toggle_nulls_first", "Nulls first", show=False),
        Binding("c", "app.clear_sort", "Clear sort", show=False),
        Binding("y", "app.copy_cell", "Copy", show=False),
        Binding("Y", "app.copy_row", "Copy row", show=False),
        Binding("a", "app.copy_results", "Copy results", show=False),
        Binding("v", "app.toggle_preview", "Preview", show=False),
        Binding("slash", "app.start_search('grid')", "Search", show=False),
        Binding("question_mark", "app.start_search('table')", "Search table", show=False),
        Binding("n", "app.next_match", "Next match", show=False),
        Binding("N", "app.prev_match", "Prev match", show=False),
        Binding("escape", "app.clear_search", "Clear search", show=False),
        Binding("right_square_bracket", "app.next_tab", "Next tab", show=False),
        Binding("left_square_bracket", "app.prev_tab", "Prev tab", show=False),
        Binding("x", "app.close_tab", "Close tab", show=False),
    ]

    def render(self) -> Text:
        app: Any = self.app
        grid = app._result_tabs.active_grid
        if grid is None:
            return Text("No results", style=STYLE_STATUS)
        return render_grid(grid, self.size.width, self.size.height)

    def on_key(self, event: events.Key) -> None:
        char = event.character
        if not event.is_printable or char is None:
            return
        app: Any = self.app
        if app.handle_grid_key(char):
            event.stop()
            event.prevent_default()


class PreviewPane(Static):
    """Full value of a truncated cell, shown below the grid."""

    DEFAULT_CSS = """
    PreviewPane {
        display: none;
        height: auto;
        max-height: 33%;
        border-top: solid $border;
        overflow-y: auto;
    }
    """

    def show_preview(self, preview: CellPreview | None) -> None:
        if preview is None:
            self.display = False
            return
        self.border_title = preview.title
        if preview.is_json:
            self.update(Syntax(preview.body, "json", theme="ansi_dark", word_wrap=True))
        else:
            self.update(Text(preview.body))
        self.display = True
