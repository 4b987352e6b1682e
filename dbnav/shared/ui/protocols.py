"""Protocol definitions for mixin type safety.

Mixins annotate ``self: AppProtocol`` and never inherit from ``Protocol`` at
runtime (that conflicts with Textual's App metaclass).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from textual.message import Message
    from textual.worker import Worker

    from dbnav.domains.explorer.domain.tree import NavigationTree
    from dbnav.domains.explorer.domain.tree_filter import FilterResult
    from dbnav.domains.explorer.state.tree_cursor import TreeCursor
    from dbnav.domains.results.domain.grid import GridViewport
    from dbnav.domains.results.domain.preview import CellPreview
    from dbnav.domains.results.domain.tabs import ResultTab, ResultTabs
    from dbnav.domains.shell.app.messages import PageRequest
    from dbnav.shared.app.services import AppServices
    from dbnav.shared.core.cancellation import CancelToken


class AppProtocol(Protocol):
    """What the explorer, results and query mixins expect from the App."""

    services: AppServices

    # Explorer state
    _tree: NavigationTree | None
    _tree_cursor: TreeCursor
    _tree_filter: FilterResult | None
    _pending_expansions: list[str]

    # Results state
    _result_tabs: ResultTabs
    _internal_clipboard: str
    _preview_hidden: bool

    # Query state
    _query_token: CancelToken | None
    _query_worker: Worker[Any] | None

    # === Textual App methods ===

    def notify(
        self,
        message: str,
        *,
        title: str = "",
        severity: str = "information",
        timeout: float | None = None,
        markup: bool = True,
    ) -> None: ...

    def post_message(self, message: Message) -> bool: ...

    def run_worker(
        self,
        work: Any,
        name: str | None = "",
        group: str = "default",
        description: str = "",
        exit_on_error: bool = True,
        start: bool = True,
        exclusive: bool = False,
        thread: bool = False,
    ) -> Worker[Any]: ...

    def copy_to_clipboard(self, text: str) -> None: ...

    # === Host hooks ===

    def _refresh_explorer(self) -> None: ...

    def _refresh_results(self) -> None: ...

    # === Cross-mixin helpers ===

    def _new_grid(self) -> GridViewport: ...

    def _copy_text(self, text: str) -> bool: ...

    def _save_expanded_state(self) -> None: ...

    def _continue_pending_expansions(self) -> None: ...

    def _fail_node_load(self, tree: NavigationTree, node_id: str, error: Exception) -> None: ...

    def _cell_preview(self) -> CellPreview | None: ...

    def _format_tsv(self, columns: list[str], rows: list[list[Any]]) -> str: ...

    def _page_request(self, tab: ResultTab, offset: int) -> PageRequest: ...

    def _request_page(self, tab: ResultTab, offset: int, *, paginating: bool = False) -> None: ...

    def _run_page_worker(self, request: PageRequest, reply: type[Message]) -> None: ...

    def _after_grid_cursor_move(self, tab: ResultTab) -> None: ...

    def _move_grid(self, move: str, *args: Any) -> None: ...

    def _scroll_grid(self, delta: int) -> None: ...

    def _reload_sorted(self) -> None: ...

    def _display_query_error(self, error_message: str) -> None: ...

    def _step_tree_filter(self, delta: int) -> None: ...

    def clear_tree_filter(self) -> None: ...

    def action_cancel_query(self) -> None: ...
