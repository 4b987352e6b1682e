"""Protocols for the data-loading collaborator.

The browser core never talks to a database directly. Everything it shows is
fetched through an object implementing ``DataLoaderProtocol``; every method
is blocking and is called from a worker thread, never from the UI loop.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from dbnav.domains.explorer.domain.tree_nodes import NodeDescriptor, NodeKind
    from dbnav.shared.core.cancellation import CancelToken


@dataclass
class PageResult:
    """A page of table rows.

    Cell values are already text; SQL NULL is the literal ``"NULL"``.
    """

    columns: list[str]
    rows: list[list[str]]
    total_rows: int


@dataclass
class QueryOutcome:
    """Result of an ad-hoc statement.

    Row-returning statements fill ``columns`` and ``rows``; other statements
    report ``rows_affected``.
    """

    columns: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    rows_affected: int | None = None
    duration_ms: float = 0.0

    @property
    def returns_rows(self) -> bool:
        return bool(self.columns)


@runtime_checkable
class DataLoaderProtocol(Protocol):
    """Blocking access to the connected database."""

    def load_databases(self) -> tuple[list[str], str | None]:
        """List databases on the server.

        Returns:
            Tuple of (database names, name of the active database or None).

        Raises:
            ConnectivityError: No active connection.
        """
        ...

    def load_schemas(self, database: str) -> list[str]:
        """List schema names of a database."""
        ...

    def load_children(self, parent_kind: NodeKind, parent_path: list[str]) -> list[NodeDescriptor]:
        """List the children of a tree node.

        Args:
            parent_kind: Kind of the node being expanded.
            parent_path: Names identifying it, e.g. ``["postgres", "public"]``.

        Returns:
            Child descriptors in display order.
        """
        ...

    def load_page(
        self,
        schema: str,
        table: str,
        offset: int,
        limit: int,
        sort_column: str = "",
        sort_dir: str = "ASC",
        nulls_first: bool = False,
    ) -> PageResult:
        """Fetch ``limit`` rows of schema.table starting at ``offset``."""
        ...

    def execute_query(self, sql: str, cancel_token: CancelToken) -> QueryOutcome:
        """Run an ad-hoc statement.

        Implementations check ``cancel_token`` between blocking steps and
        raise ``QueryCancelledError`` once it is set.

        Raises:
            RemoteQueryError: The statement failed on the server.
            QueryCancelledError: The token was cancelled.
        """
        ...

    def search_table(self, schema: str, table: str, query: str) -> PageResult:
        """Rows of schema.table where any column contains query."""
        ...
