"""In-memory data loader for demos and testing.

Usage:
    from dbnav.mocks import create_demo_loader
    from dbnav import DbnavApp

    DbnavApp(create_demo_loader(rows=5000)).run()

``MockDataLoader`` implements ``DataLoaderProtocol`` over plain Python data.
It can sleep before answering (``delay``) and fail on chosen calls
(``failures``), which is how the UI tests exercise loading states, stale
completions and error reporting.
"""

from __future__ import annotations

import re
import threading
import time
from dataclasses import dataclass, field

from .domains.explorer.domain.tree_nodes import NodeDescriptor, NodeKind
from .shared.core.cancellation import CancelToken
from .shared.core.errors import ConnectivityError, QueryCancelledError, RemoteQueryError
from .shared.core.protocols import PageResult, QueryOutcome

NULL = "NULL"

_SELECT_RE = re.compile(r"^\s*select\b.*?\bfrom\s+([a-zA-Z_][\w.]*)", re.IGNORECASE | re.DOTALL)
_LIMIT_RE = re.compile(r"\blimit\s+(\d+)", re.IGNORECASE)
_WRITE_RE = re.compile(r"^\s*(insert|update|delete)\b", re.IGNORECASE)


@dataclass
class MockColumn:
    name: str
    data_type: str = "text"
    primary_key: bool = False
    nullable: bool = True


@dataclass
class MockTable:
    name: str
    columns: list[MockColumn]
    rows: list[list[str]] = field(default_factory=list)
    kind: NodeKind = NodeKind.TABLE


@dataclass
class MockSchema:
    name: str
    tables: list[MockTable] = field(default_factory=list)
    functions: list[str] = field(default_factory=list)
    sequences: list[str] = field(default_factory=list)

    def find(self, name: str) -> MockTable | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None


class MockDataLoader:
    """Blocking, thread-safe loader over an in-memory catalog.

    Args:
        databases: Database name -> schemas.
        active: Name of the connected database.
        delay: Seconds to sleep before every answer.
        failures: Method names that raise ``RemoteQueryError``.
    """

    def __init__(
        self,
        databases: dict[str, list[MockSchema]] | None = None,
        active: str | None = None,
        *,
        delay: float = 0.0,
        failures: set[str] | None = None,
    ) -> None:
        self.databases = databases if databases is not None else {}
        self.active = active
        self.delay = delay
        self.failures = set(failures or ())
        self.calls: list[tuple[str, tuple]] = []
        self._lock = threading.Lock()

    def _enter(self, method: str, *args: object) -> None:
        with self._lock:
            self.calls.append((method, args))
        if self.delay:
            time.sleep(self.delay)
        if method in self.failures:
            raise RemoteQueryError(f"{method} failed")

    def _schemas(self, database: str) -> list[MockSchema]:
        if database not in self.databases:
            raise RemoteQueryError(f'database "{database}" does not exist')
        return self.databases[database]

    def _schema(self, database: str, schema: str) -> MockSchema:
        for candidate in self._schemas(database):
            if candidate.name == schema:
                return candidate
        raise RemoteQueryError(f'schema "{schema}" does not exist')

    def _table(self, schema: str, table: str) -> MockTable:
        if self.active is None:
            raise ConnectivityError("not connected")
        found = self._schema(self.active, schema).find(table)
        if found is None:
            raise RemoteQueryError(f'relation "{schema}.{table}" does not exist')
        return found

    # DataLoaderProtocol

    def load_databases(self) -> tuple[list[str], str | None]:
        self._enter("load_databases")
        if self.active is None:
            raise ConnectivityError("not connected")
        return list(self.databases), self.active

    def load_schemas(self, database: str) -> list[str]:
        self._enter("load_schemas", database)
        return [schema.name for schema in self._schemas(database)]

    def load_children(self, parent_kind: NodeKind, parent_path: list[str]) -> list[NodeDescriptor]:
        self._enter("load_children", parent_kind, tuple(parent_path))
        if parent_kind is NodeKind.DATABASE:
            return [NodeDescriptor(NodeKind.SCHEMA, schema.name) for schema in self._schemas(parent_path[0])]
        if parent_kind is NodeKind.SCHEMA:
            schema = self._schema(parent_path[0], parent_path[1])
            children = [
                NodeDescriptor(table.kind, table.name, detail=f"{len(table.rows)} rows")
                for table in schema.tables
            ]
            children.extend(NodeDescriptor(NodeKind.FUNCTION, name) for name in schema.functions)
            children.extend(NodeDescriptor(NodeKind.SEQUENCE, name) for name in schema.sequences)
            return children
        database, schema_name, table_name = parent_path[:3]
        table = self._schema(database, schema_name).find(table_name)
        if table is None:
            raise RemoteQueryError(f'relation "{schema_name}.{table_name}" does not exist')
        return [
            NodeDescriptor(
                NodeKind.COLUMN,
                column.name,
                data_type=column.data_type,
                primary_key=column.primary_key,
                nullable=column.nullable,
            )
            for column in table.columns
        ]

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
        self._enter("load_page", schema, table, offset, limit, sort_column, sort_dir, nulls_first)
        found = self._table(schema, table)
        columns = [column.name for column in found.columns]
        rows = found.rows
        if sort_column:
            if sort_column not in columns:
                raise RemoteQueryError(f'column "{sort_column}" does not exist')
            rows = _sorted_rows(rows, columns.index(sort_column), sort_dir, nulls_first)
        page = [list(row) for row in rows[offset : offset + limit]]
        return PageResult(columns=columns, rows=page, total_rows=len(found.rows))

    def execute_query(self, sql: str, cancel_token: CancelToken) -> QueryOutcome:
        started = time.perf_counter()
        with self._lock:
            self.calls.append(("execute_query", (sql,)))
        if self.delay and cancel_token.wait(self.delay):
            raise QueryCancelledError("query cancelled")
        cancel_token.raise_if_cancelled()
        if "execute_query" in self.failures:
            raise RemoteQueryError("execute_query failed")

        select = _SELECT_RE.match(sql)
        if select:
            schema, _, table = select.group(1).rpartition(".")
            found = self._table(schema or "public", table)
            limit = _LIMIT_RE.search(sql)
            rows = found.rows[: int(limit.group(1))] if limit else found.rows
            return QueryOutcome(
                columns=[column.name for column in found.columns],
                rows=[list(row) for row in rows],
                duration_ms=(time.perf_counter() - started) * 1000,
            )
        if _WRITE_RE.match(sql):
            return QueryOutcome(rows_affected=1, duration_ms=(time.perf_counter() - started) * 1000)
        first_word = sql.split()[0] if sql.split() else sql
        raise RemoteQueryError(f'syntax error at or near "{first_word}"')

    def search_table(self, schema: str, table: str, query: str) -> PageResult:
        self._enter("search_table", schema, table, query)
        found = self._table(schema, table)
        needle = query.lower()
        rows = [list(row) for row in found.rows if any(needle in value.lower() for value in row)]
        return PageResult(columns=[column.name for column in found.columns], rows=rows, total_rows=len(rows))


def _sorted_rows(rows: list[list[str]], index: int, direction: str, nulls_first: bool) -> list[list[str]]:
    def value_key(row: list[str]) -> tuple[int, float, str]:
        value = row[index]
        # Numbers before text, numbers compared numerically.
        return (0, float(value), "") if _is_number(value) else (1, 0.0, value)

    present = [row for row in rows if row[index] != NULL]
    missing = [row for row in rows if row[index] == NULL]
    present.sort(key=value_key, reverse=direction.upper() == "DESC")
    return missing + present if nulls_first else present + missing


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return value.strip().lower() not in ("nan", "inf", "-inf", "infinity", "-infinity")


def _user_rows(count: int) -> list[list[str]]:
    first = ["Ada", "Grace", "Alan", "Edsger", "Barbara", "Donald", "Frances", "Ken"]
    last = ["Lovelace", "Hopper", "Turing", "Dijkstra", "Liskov", "Knuth", "Allen", "Thompson"]
    rows = []
    for i in range(count):
        name = f"{first[i % len(first)]} {last[(i // len(first)) % len(last)]}"
        email = NULL if i % 7 == 3 else f"user{i + 1}@example.com"
        profile = '{"plan": "%s", "seats": %d}' % ("pro" if i % 3 else "free", i % 10)
        rows.append([str(i + 1), name, email, profile, f"2024-01-{i % 28 + 1:02d}"])
    return rows


def create_demo_loader(rows: int = 250, *, delay: float = 0.0) -> MockDataLoader:
    """Loader with a small two-database catalog and ``rows`` users."""
    users = MockTable(
        "users",
        [
            MockColumn("id", "integer", primary_key=True, nullable=False),
            MockColumn("name", "text", nullable=False),
            MockColumn("email", "text"),
            MockColumn("profile", "jsonb"),
            MockColumn("created_at", "date", nullable=False),
        ],
        _user_rows(rows),
    )
    orders = MockTable(
        "orders",
        [
            MockColumn("id", "integer", primary_key=True, nullable=False),
            MockColumn("user_id", "integer", nullable=False),
            MockColumn("total", "numeric"),
        ],
        [[str(i + 1), str(i % max(rows, 1) + 1), f"{(i * 37) % 500}.{i % 100:02d}"] for i in range(rows * 2)],
    )
    active_users = MockTable(
        "active_users",
        users.columns,
        [row for row in users.rows if row[2] != NULL],
        kind=NodeKind.VIEW,
    )
    public = MockSchema(
        "public",
        tables=[users, orders, active_users],
        functions=["refresh_stats"],
        sequences=["users_id_seq", "orders_id_seq"],
    )
    audit = MockSchema(
        "audit",
        tables=[
            MockTable(
                "events",
                [MockColumn("id", "integer", primary_key=True, nullable=False), MockColumn("payload", "jsonb")],
                [[str(i + 1), '{"kind": "login"}'] for i in range(20)],
            )
        ],
    )
    return MockDataLoader(
        {"postgres": [public, audit], "analytics": [MockSchema("public")]},
        active="postgres",
        delay=delay,
    )
