"""Messages exchanged between the UI loop and background workers.

Requests (``Load*``, ``ExecuteQuery``, ``SearchTable``) are posted by user
actions; completions (``*Loaded``, ``PrefetchComplete``, ``QueryExecuted``,
``SearchTableResult``) are posted by workers. Every completion carries
enough identity (node id and tree generation, tab object id and offset,
query token) for its handler to tell whether it is still wanted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from textual.message import Message

if TYPE_CHECKING:
    from dbnav.domains.explorer.domain.tree import NavigationTree
    from dbnav.domains.explorer.domain.tree_nodes import NodeDescriptor
    from dbnav.shared.core.protocols import PageResult, QueryOutcome


@dataclass(frozen=True)
class PageRequest:
    """Parameters of one page fetch for a table tab."""

    object_id: str
    schema: str
    table: str
    offset: int
    limit: int
    sort_column: str = ""
    sort_dir: str = "ASC"
    nulls_first: bool = False


class LoadTree(Message):
    """Rebuild the explorer tree from the data source."""


class TreeLoaded(Message):
    def __init__(self, tree: NavigationTree | None, error: Exception | None = None) -> None:
        super().__init__()
        self.tree = tree
        self.error = error


class LoadNodeChildren(Message):
    def __init__(self, node_id: str) -> None:
        super().__init__()
        self.node_id = node_id


class NodeChildrenLoaded(Message):
    def __init__(
        self,
        node_id: str,
        generation: int,
        children: list[NodeDescriptor] | None = None,
        error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.node_id = node_id
        self.generation = generation
        self.children = children or []
        self.error = error


class TreeNodeExpanded(Message):
    def __init__(self, node_id: str, expanded: bool) -> None:
        super().__init__()
        self.node_id = node_id
        self.expanded = expanded


class TreeNodeSelected(Message):
    def __init__(self, node_id: str) -> None:
        super().__init__()
        self.node_id = node_id


class LoadTableData(Message):
    def __init__(self, request: PageRequest, paginating: bool = False) -> None:
        super().__init__()
        self.request = request
        self.paginating = paginating


class TableDataLoaded(Message):
    def __init__(
        self, request: PageRequest, result: PageResult | None = None, error: Exception | None = None
    ) -> None:
        super().__init__()
        self.request = request
        self.result = result
        self.error = error


class PrefetchData(Message):
    def __init__(self, request: PageRequest) -> None:
        super().__init__()
        self.request = request


class PrefetchComplete(Message):
    def __init__(
        self, request: PageRequest, result: PageResult | None = None, error: Exception | None = None
    ) -> None:
        super().__init__()
        self.request = request
        self.result = result
        self.error = error


class ExecuteQuery(Message):
    def __init__(self, sql: str) -> None:
        super().__init__()
        self.sql = sql


class CancelQuery(Message):
    """Cancel the in-flight query, if any."""


class QueryExecuted(Message):
    def __init__(
        self,
        sql: str,
        token_id: int,
        outcome: QueryOutcome | None = None,
        error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.sql = sql
        self.token_id = token_id
        self.outcome = outcome
        self.error = error


class SearchTable(Message):
    def __init__(self, query: str) -> None:
        super().__init__()
        self.query = query


class SearchTableResult(Message):
    def __init__(
        self,
        object_id: str,
        query: str,
        result: PageResult | None = None,
        error: Exception | None = None,
    ) -> None:
        super().__init__()
        self.object_id = object_id
        self.query = query
        self.result = result
        self.error = error
