"""Result tabs: one grid per opened table or executed query."""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from itertools import count

from .grid import GridViewport

MAX_RESULT_TABS = 10

_DASH_COMMENT_RE = re.compile(r"^\s*--\s*(.+)$")
_BLOCK_COMMENT_RE = re.compile(r"^\s*/\*\s*(.+?)\s*\*/", re.DOTALL)
_FROM_RE = re.compile(r"\bFROM\s+([a-zA-Z_][a-zA-Z0-9_.]*)", re.IGNORECASE)
_UPDATE_RE = re.compile(r"\bUPDATE\s+([a-zA-Z_][a-zA-Z0-9_.]*)", re.IGNORECASE)
_DELETE_RE = re.compile(r"\bDELETE\s+FROM\s+([a-zA-Z_][a-zA-Z0-9_.]*)", re.IGNORECASE)
_INSERT_RE = re.compile(r"\bINSERT\s+INTO\s+([a-zA-Z_][a-zA-Z0-9_.]*)", re.IGNORECASE)


class TabKind(str, Enum):
    TABLE_DATA = "table_data"
    QUERY_RESULT = "query_result"


def object_id_for(schema: str, table: str) -> str:
    return f"{schema}.{table}" if schema else table


def query_title(sql: str) -> str:
    """Short tab title: a leading comment, the main table, or the SQL itself."""
    lines = sql.splitlines()
    if lines:
        match = _DASH_COMMENT_RE.match(lines[0])
        if match:
            return match.group(1).strip()
    match = _BLOCK_COMMENT_RE.match(sql)
    if match:
        return match.group(1).strip()

    # DELETE FROM must be checked before the generic FROM.
    for pattern, prefix in ((_DELETE_RE, "DELETE "), (_UPDATE_RE, "UPDATE "), (_INSERT_RE, "INSERT ")):
        match = pattern.search(sql)
        if match:
            return prefix + match.group(1)
    match = _FROM_RE.search(sql)
    if match:
        name = match.group(1)
        return f"{name}(+)" if "JOIN" in sql.upper() else name

    cleaned = " ".join(sql.split())
    if len(cleaned) > 20:
        cleaned = cleaned[:17] + "..."
    return cleaned


@dataclass(eq=False)
class ResultTab:
    tab_id: int
    kind: TabKind
    title: str
    grid: GridViewport
    object_id: str = ""
    schema: str = ""
    table: str = ""
    sql: str = ""
    is_pending: bool = False
    is_cancelled: bool = False
    query_token: int | None = None
    created_at: float = field(default_factory=time.time)


class ResultTabs:
    """Ordered tabs, newest on the left, capped at ``max_tabs``."""

    def __init__(
        self,
        grid_factory: Callable[[], GridViewport] = GridViewport,
        max_tabs: int = MAX_RESULT_TABS,
    ) -> None:
        self._grid_factory = grid_factory
        self.max_tabs = max_tabs
        self.tabs: list[ResultTab] = []
        self.active_index = 0
        self._ids = count(1)

    def __len__(self) -> int:
        return len(self.tabs)

    def __iter__(self) -> Iterator[ResultTab]:
        return iter(self.tabs)

    @property
    def active_tab(self) -> ResultTab | None:
        if 0 <= self.active_index < len(self.tabs):
            return self.tabs[self.active_index]
        return None

    @property
    def active_grid(self) -> GridViewport | None:
        tab = self.active_tab
        return tab.grid if tab is not None else None

    def _insert(self, tab: ResultTab) -> ResultTab:
        self.tabs.insert(0, tab)
        del self.tabs[self.max_tabs :]
        self.active_index = 0
        return tab

    def find(self, tab_id: int) -> ResultTab | None:
        for tab in self.tabs:
            if tab.tab_id == tab_id:
                return tab
        return None

    def find_table_tab(self, object_id: str) -> ResultTab | None:
        for tab in self.tabs:
            if tab.kind is TabKind.TABLE_DATA and tab.object_id == object_id:
                return tab
        return None

    def activate(self, tab: ResultTab) -> None:
        self.active_index = self.tabs.index(tab)

    def open_table_tab(self, schema: str, table: str) -> tuple[ResultTab, bool]:
        """Activate the tab for schema.table, creating it if needed.

        Returns:
            (tab, created)
        """
        object_id = object_id_for(schema, table)
        existing = self.find_table_tab(object_id)
        if existing is not None:
            self.activate(existing)
            return existing, False
        tab = ResultTab(
            tab_id=next(self._ids),
            kind=TabKind.TABLE_DATA,
            title=table,
            grid=self._grid_factory(),
            object_id=object_id,
            schema=schema,
            table=table,
        )
        tab.grid.is_loading = True
        return self._insert(tab), True

    def start_pending_query(self, sql: str, token_id: int) -> ResultTab:
        tab = ResultTab(
            tab_id=next(self._ids),
            kind=TabKind.QUERY_RESULT,
            title="Executing...",
            grid=self._grid_factory(),
            sql=sql,
            is_pending=True,
            query_token=token_id,
        )
        tab.grid.is_loading = True
        return self._insert(tab)

    def pending_tab(self, token_id: int) -> ResultTab | None:
        for tab in self.tabs:
            if tab.is_pending and tab.query_token == token_id:
                return tab
        return None

    def complete_query(
        self, token_id: int, columns: list[str], rows: list[list[str]]
    ) -> ResultTab | None:
        """Fill the pending tab for token_id; None if it was closed meanwhile."""
        tab = self.pending_tab(token_id)
        if tab is None:
            return None
        tab.grid.set_data(columns, rows, len(rows))
        tab.title = query_title(tab.sql)
        tab.is_pending = False
        self.activate(tab)
        return tab

    def cancel_pending(self, token_id: int | None = None) -> ResultTab | None:
        for tab in self.tabs:
            if tab.is_pending and (token_id is None or tab.query_token == token_id):
                tab.is_pending = False
                tab.is_cancelled = True
                tab.title = "Cancelled"
                tab.grid.is_loading = False
                return tab
        return None

    def has_pending_query(self) -> bool:
        return any(tab.is_pending for tab in self.tabs)

    def close(self, tab: ResultTab) -> None:
        if tab not in self.tabs:
            return
        index = self.tabs.index(tab)
        self.tabs.remove(tab)
        if self.active_index > index or self.active_index >= len(self.tabs):
            self.active_index = max(0, self.active_index - 1)

    def next_tab(self) -> None:
        if self.tabs:
            self.active_index = (self.active_index + 1) % len(self.tabs)

    def prev_tab(self) -> None:
        if self.tabs:
            self.active_index = (self.active_index - 1) % len(self.tabs)
