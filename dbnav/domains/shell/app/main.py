"""Main Textual application for dbnav."""

from __future__ import annotations

import logging
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.css.query import NoMatches
from textual.widgets import Input, Static
from textual.worker import Worker

from dbnav.domains.explorer.state.tree_cursor import TreeCursor
from dbnav.domains.explorer.ui.mixins.tree import TreeMixin
from dbnav.domains.explorer.ui.tree_view import ExplorerView
from dbnav.domains.query.ui.mixins.query import QueryMixin
from dbnav.domains.results.domain.tabs import ResultTabs
from dbnav.domains.results.ui.grid_view import GridView, PreviewPane, TabBar
from dbnav.domains.results.ui.mixins.results import ResultsMixin
from dbnav.domains.shell.app.messages import ExecuteQuery, LoadTree, SearchTable
from dbnav.shared.app.log_setup import configure_logging
from dbnav.shared.app.services import AppServices, build_app_services
from dbnav.shared.core.cancellation import CancelToken
from dbnav.shared.core.protocols import DataLoaderProtocol
from dbnav.shared.ui.widgets import PromptInput, SearchPrompt

logger = logging.getLogger(__name__)


class DbnavApp(
    TreeMixin,
    ResultsMixin,
    QueryMixin,
    App,
):
    """Database browser: explorer tree, query prompt and result tabs."""

    TITLE = "dbnav"

    CSS = """
    Screen {
        background: $surface;
    }

    #content {
        height: 1fr;
    }

    #sidebar {
        width: 35;
        border: round $border;
        padding: 0 1;
    }

    #main-panel {
        width: 1fr;
    }

    #query-area {
        height: 3;
        border: round $border;
    }

    #results-area {
        height: 1fr;
        border: round $border;
        padding: 0 1;
    }

    #sidebar:focus-within,
    #query-area:focus-within,
    #results-area:focus-within {
        border: round $primary;
    }

    #status-bar {
        height: 1;
        background: $surface-darken-1;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", show=False),
        Binding("e", "focus_explorer", "Explorer", show=False),
        Binding("q", "focus_query", "Query", show=False),
        Binding("r", "focus_results", "Results", show=False),
        Binding("ctrl+z", "cancel_query", "Cancel", show=False, priority=True),
    ]

    def __init__(
        self,
        loader: DataLoaderProtocol | None = None,
        *,
        services: AppServices | None = None,
    ) -> None:
        super().__init__()
        self.services = services or build_app_services(loader)
        self._tree = None
        self._tree_cursor = TreeCursor()
        self._tree_filter = None
        self._pending_expansions: list[str] = []
        self._result_tabs = ResultTabs(grid_factory=self._new_grid)
        self._internal_clipboard: str = ""
        self._query_token: CancelToken | None = None
        self._query_worker: Worker[Any] | None = None

    @property
    def explorer_view(self) -> ExplorerView:
        return self.query_one("#explorer", ExplorerView)

    @property
    def grid_view(self) -> GridView:
        return self.query_one("#grid-view", GridView)

    @property
    def preview_pane(self) -> PreviewPane:
        return self.query_one("#cell-preview", PreviewPane)

    @property
    def tab_bar(self) -> TabBar:
        return self.query_one("#tab-bar", TabBar)

    @property
    def query_input(self) -> PromptInput:
        return self.query_one("#query-input", PromptInput)

    @property
    def search_prompt(self) -> SearchPrompt:
        return self.query_one("#search-prompt", SearchPrompt)

    @property
    def status_bar(self) -> Static:
        return self.query_one("#status-bar", Static)

    def compose(self) -> ComposeResult:
        with Horizontal(id="content"):
            with Vertical(id="sidebar"):
                yield ExplorerView(id="explorer")
            with Vertical(id="main-panel"):
                with Container(id="query-area"):
                    yield PromptInput(placeholder="SQL, Enter to run", id="query-input")
                with Vertical(id="results-area"):
                    yield TabBar(id="tab-bar")
                    yield GridView(id="grid-view")
                    yield PreviewPane(id="cell-preview")
        yield SearchPrompt(id="search-prompt")
        yield Static("Not connected", id="status-bar")

    def on_mount(self) -> None:
        """Initialize the app."""
        configure_logging(self.services.runtime)
        logger.debug("dbnav started (debug=%s)", self.services.runtime.debug)
        self.explorer_view.focus()
        self._refresh_results()
        if self.services.loader is not None:
            self.post_message(LoadTree())

    # Host hooks

    def _refresh_explorer(self) -> None:
        try:
            self.explorer_view.refresh()
        except NoMatches:
            return
        self._update_status_bar()

    def _refresh_results(self) -> None:
        try:
            self.tab_bar.show_tabs(self._result_tabs)
            self.grid_view.refresh()
            self.preview_pane.show_preview(self._cell_preview())
        except NoMatches:
            return
        self._update_status_bar()

    def _update_status_bar(self) -> None:
        if self.services.loader is None:
            text = "Not connected"
        elif self._result_tabs.has_pending_query():
            text = "Executing query... (ctrl+z to cancel)"
        elif self._tree is not None and self._tree.loading_node_id is not None:
            node = self._tree.find_by_id(self._tree.loading_node_id)
            text = f"Loading {node.label}..." if node is not None else "Loading..."
        elif self._tree is None:
            text = "Loading database structure..."
        else:
            text = "Ready"
        self.status_bar.update(text)

    # Focus

    def action_focus_explorer(self) -> None:
        self.explorer_view.focus()

    def action_focus_query(self) -> None:
        self.query_input.focus()

    def action_focus_results(self) -> None:
        self.grid_view.focus()

    # Prompts

    def action_start_search(self, target: str) -> None:
        self.search_prompt.open(target)

    def _close_search(self) -> str:
        prompt = self.search_prompt
        target = prompt.target
        prompt.close()
        if target == "tree":
            self.explorer_view.focus()
        else:
            self.grid_view.focus()
        return target

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id == "search-prompt" and self.search_prompt.target == "tree":
            self.apply_tree_filter(event.value)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "query-input":
            self.post_message(ExecuteQuery(event.value))
            return
        if event.input.id != "search-prompt":
            return
        query = event.value
        target = self._close_search()
        if target == "tree":
            count = self.apply_tree_filter(query)
            if query and not count:
                self.notify(f"No nodes match {query!r}", severity="warning", markup=False)
        elif target == "grid":
            if query and not self.search_grid(query):
                self.notify(f"No matches for {query!r}", severity="warning", markup=False)
        elif target == "table" and query:
            self.post_message(SearchTable(query))

    def on_prompt_input_cancelled(self, event: PromptInput.Cancelled) -> None:
        if event.prompt.id == "search-prompt":
            if self._close_search() == "tree":
                self.clear_tree_filter()
        else:
            self.grid_view.focus()
