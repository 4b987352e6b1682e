"""Tests for the in-memory demo loader."""

from __future__ import annotations

import pytest

from dbnav.domains.explorer.domain.tree_nodes import NodeKind
from dbnav.mocks import MockDataLoader, create_demo_loader
from dbnav.shared.core.cancellation import CancelToken
from dbnav.shared.core.errors import ConnectivityError, QueryCancelledError, RemoteQueryError
from dbnav.shared.core.protocols import DataLoaderProtocol


@pytest.fixture
def loader():
    return create_demo_loader(rows=20)


class TestCatalog:
    def test_implements_protocol(self, loader):
        assert isinstance(loader, DataLoaderProtocol)

    def test_databases(self, loader):
        assert loader.load_databases() == (["postgres", "analytics"], "postgres")

    def test_not_connected(self):
        with pytest.raises(ConnectivityError):
            MockDataLoader().load_databases()

    def test_children_by_kind(self, loader):
        """Schemas, objects and columns are listed per parent kind."""
        schemas = loader.load_children(NodeKind.DATABASE, ["postgres"])
        assert [d.name for d in schemas] == ["public", "audit"]
        objects = loader.load_children(NodeKind.SCHEMA, ["postgres", "public"])
        assert [(d.kind, d.name) for d in objects][:3] == [
            (NodeKind.TABLE, "users"),
            (NodeKind.TABLE, "orders"),
            (NodeKind.VIEW, "active_users"),
        ]
        assert objects[0].detail == "20 rows"
        columns = loader.load_children(NodeKind.TABLE, ["postgres", "public", "users"])
        assert columns[0].name == "id" and columns[0].primary_key

    def test_configured_failure(self):
        loader = create_demo_loader()
        loader.failures.add("load_children")
        with pytest.raises(RemoteQueryError):
            loader.load_children(NodeKind.DATABASE, ["postgres"])
        assert loader.calls[-1] == ("load_children", (NodeKind.DATABASE, ("postgres",)))


class TestPages:
    def test_page_window(self, loader):
        page = loader.load_page("public", "users", 5, 10)
        assert page.total_rows == 20
        assert [row[0] for row in page.rows] == [str(i) for i in range(6, 16)]

    def test_sort_desc_nulls_last(self, loader):
        """Numeric columns sort numerically; NULLs go last unless asked first."""
        page = loader.load_page("public", "users", 0, 3, sort_column="id", sort_dir="DESC")
        assert [row[0] for row in page.rows] == ["20", "19", "18"]
        emails = loader.load_page("public", "users", 0, 20, sort_column="email")
        assert emails.rows[-1][2] == "NULL"
        first = loader.load_page("public", "users", 0, 1, sort_column="email", nulls_first=True)
        assert first.rows[0][2] == "NULL"

    def test_unknown_table(self, loader):
        with pytest.raises(RemoteQueryError):
            loader.load_page("public", "nope", 0, 10)

    def test_search(self, loader):
        result = loader.search_table("public", "users", "USER1@")
        assert [row[0] for row in result.rows] == ["1"]


class TestQueries:
    def test_select_with_limit(self, loader):
        outcome = loader.execute_query("SELECT * FROM public.orders LIMIT 3", CancelToken())
        assert outcome.returns_rows
        assert len(outcome.rows) == 3

    def test_write_statement(self, loader):
        outcome = loader.execute_query("DELETE FROM users WHERE id = 1", CancelToken())
        assert not outcome.returns_rows
        assert outcome.rows_affected == 1

    def test_syntax_error(self, loader):
        with pytest.raises(RemoteQueryError, match='near "SELEC"'):
            loader.execute_query("SELEC 1", CancelToken())

    def test_cancelled_token(self, loader):
        token = CancelToken()
        token.cancel()
        with pytest.raises(QueryCancelledError):
            loader.execute_query("SELECT * FROM users", token)
