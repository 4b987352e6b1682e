"""Explorer pane widget."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.binding import Binding
from textual.widget import Widget

from dbnav.domains.explorer.domain.tree_nodes import DATA_KINDS

from .tree_render import render_tree


class ExplorerView(Widget, can_focus=True):
    """Draws the app's explorer tree; all state lives on the app."""

    DEFAULT_CSS = """
    ExplorerView {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("j,down", "app.tree_cursor_down", "Down", show=False),
        Binding("k,up", "app.tree_cursor_up", "Up", show=False),
        Binding("g,home", "app.tree_cursor_top", "Top", show=False),
        Binding("G,end", "app.tree_cursor_bottom", "Bottom", show=False),
        Binding("h,left", "app.tree_cursor_parent", "Parent", show=False),
        Binding("l,right,space", "app.tree_toggle", "Expand", show=False),
        Binding("enter", "activate", "Open", show=False),
        Binding("slash", "app.start_search('tree')", "Filter", show=False),
        Binding("n", "app.tree_filter_next", "Next match", show=False),
        Binding("N", "app.tree_filter_prev", "Prev match", show=False),
        Binding("escape", "app.clear_tree_filter", "Clear filter", show=False),
        Binding("R", "app.refresh_tree", "Refresh", show=False),
    ]

    def render(self) -> Text:
        app: Any = self.app
        tree = app._tree
        return render_tree(
            app._tree_cursor,
            self.size.height,
            loading_node_id=tree.loading_node_id if tree is not None else None,
            filter_result=app._tree_filter,
            focused=self.has_focus,
        )

    def action_activate(self) -> None:
        """Open data objects; expand or collapse everything else."""
        app: Any = self.app
        node = app._tree_cursor.current_node()
        if node is None:
            return
        if node.kind in DATA_KINDS:
            app.action_tree_select()
        else:
            app.action_tree_toggle()

    def on_focus(self) -> None:
        self.refresh()

    def on_blur(self) -> None:
        self.refresh()
