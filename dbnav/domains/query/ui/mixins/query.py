"""Query execution mixin for DbnavApp."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from rich.markup import escape as escape_markup
from textual.worker import Worker

from dbnav.domains.shell.app.messages import CancelQuery, ExecuteQuery, QueryExecuted
from dbnav.shared.core.cancellation import CancelToken
from dbnav.shared.core.errors import QueryCancelledError
from dbnav.shared.core.utils import format_duration_ms
from dbnav.shared.ui.protocols import AppProtocol

logger = logging.getLogger(__name__)


class QueryMixin:
    """Mixin providing query execution functionality.

    One query runs at a time. Starting another cancels the previous token;
    a ``QueryExecuted`` whose token is no longer current is discarded.
    """

    _query_token: CancelToken | None = None
    _query_worker: Worker[Any] | None = None

    def action_execute_query(self: AppProtocol, sql: str) -> None:
        self.post_message(ExecuteQuery(sql))

    def on_execute_query(self: AppProtocol, message: ExecuteQuery) -> None:
        sql = message.sql.strip()
        if not sql:
            self.notify("No query to execute", severity="warning")
            return
        if self.services.loader is None:
            self.notify("Please connect to a database first", severity="warning")
            return

        if self._query_token is not None:
            self._query_token.cancel()
            self._result_tabs.cancel_pending(self._query_token.token_id)
        if self._query_worker is not None:
            self._query_worker.cancel()

        token = CancelToken()
        self._query_token = token
        self._result_tabs.start_pending_query(sql, token.token_id)
        loader = self.services.loader
        logger.debug("Executing query %d", token.token_id)

        async def work_async() -> None:
            try:
                outcome = await asyncio.to_thread(loader.execute_query, sql, token)
            except Exception as error:
                self.post_message(QueryExecuted(sql, token.token_id, error=error))
                return
            self.post_message(QueryExecuted(sql, token.token_id, outcome))

        self._query_worker = self.run_worker(work_async(), name="query_execution", exclusive=True)
        self._refresh_results()

    def on_query_executed(self: AppProtocol, message: QueryExecuted) -> None:
        token = self._query_token
        if token is None or token.token_id != message.token_id:
            logger.debug("Dropping result of superseded query %d", message.token_id)
            return
        self._query_token = None
        self._query_worker = None

        if token.is_cancelled or isinstance(message.error, QueryCancelledError):
            self._result_tabs.cancel_pending(message.token_id)
            self._refresh_results()
            return

        if message.error is not None or message.outcome is None:
            tab = self._result_tabs.pending_tab(message.token_id)
            if tab is not None:
                self._result_tabs.close(tab)
            self._display_query_error(str(message.error))
            self._refresh_results()
            return

        outcome = message.outcome
        time_str = format_duration_ms(outcome.duration_ms)
        if outcome.returns_rows:
            tab = self._result_tabs.complete_query(message.token_id, outcome.columns, outcome.rows)
            if tab is not None:
                self.notify(f"Query returned {len(outcome.rows)} rows in {time_str}")
        else:
            affected = outcome.rows_affected or 0
            tab = self._result_tabs.complete_query(
                message.token_id, ["Result"], [[f"{affected} row(s) affected"]]
            )
            if tab is not None:
                self.notify(f"Query executed: {affected} row(s) affected in {time_str}")
        self._refresh_results()

    def _display_query_error(self: AppProtocol, error_message: str) -> None:
        self.notify(f"Query error: {escape_markup(error_message)}", severity="error")

    def on_cancel_query(self: AppProtocol, message: CancelQuery) -> None:
        self.action_cancel_query()

    def action_cancel_query(self: AppProtocol) -> None:
        """Cancel the running query, keeping a "Cancelled" tab in its place."""
        token = self._query_token
        if token is None:
            return
        token.cancel()
        self._result_tabs.cancel_pending(token.token_id)
        self._query_token = None
        if self._query_worker is not None:
            self._query_worker.cancel()
            self._query_worker = None
        self.notify("Query cancelled", severity="warning")
        self._refresh_results()
