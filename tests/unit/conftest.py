"""Shared fixtures for unit tests."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from dbnav.domains.explorer.domain.tree import NavigationTree
from dbnav.domains.explorer.domain.tree_builders import (
    build_column_nodes,
    build_database_tree,
    build_object_nodes,
    build_schema_nodes,
)
from dbnav.domains.explorer.domain.tree_nodes import NodeDescriptor, NodeKind
from dbnav.domains.explorer.state.tree_cursor import TreeCursor
from dbnav.domains.explorer.ui.mixins.tree import TreeMixin
from dbnav.domains.query.ui.mixins.query import QueryMixin
from dbnav.domains.results.domain.tabs import ResultTabs
from dbnav.domains.results.ui.mixins.results import ResultsMixin
from dbnav.domains.shell.store.settings import SettingsStore, ViewerSettings
from dbnav.mocks import create_demo_loader


def _sample_tree() -> NavigationTree:
    tree = build_database_tree(["postgres", "analytics"], active="postgres")
    db = tree.find_by_id("db:postgres")
    tree.add_children(db, build_schema_nodes("postgres", ["public"]))
    schema = tree.find_by_id("schema:postgres.public")
    tree.add_children(schema, build_object_nodes(NodeKind.TABLE, "postgres", "public", ["users", "orders"]))
    users = tree.find_by_id("table:postgres.public.users")
    tree.add_children(
        users,
        build_column_nodes(
            "postgres",
            "public",
            "users",
            [NodeDescriptor(NodeKind.COLUMN, "id", data_type="integer"), NodeDescriptor(NodeKind.COLUMN, "email")],
        ),
    )
    return tree


@pytest.fixture
def tree() -> NavigationTree:
    """postgres > public > users(id, email), orders; plus an unloaded analytics db."""
    return _sample_tree()


@pytest.fixture
def expanded_tree(tree: NavigationTree) -> NavigationTree:
    """The sample tree with postgres, public and users expanded."""
    for node_id in ("db:postgres", "schema:postgres.public", "table:postgres.public.users"):
        tree.find_by_id(node_id).expanded = True
    return tree


class MessageHost(TreeMixin, ResultsMixin, QueryMixin):
    """The app mixins without Textual: messages, workers and notices are recorded."""

    def post_message(self, message):
        self.posted.append(message)
        return True

    def run_worker(self, work, **kwargs):
        self.workers.append((work, kwargs))
        return MagicMock()

    def notify(self, message, severity="information", **kwargs):
        self.notifications.append((message, severity))

    def copy_to_clipboard(self, text):
        self.clipboard = text

    def _refresh_explorer(self):
        pass

    def _refresh_results(self):
        pass

    def posted_of(self, kind):
        return [message for message in self.posted if isinstance(message, kind)]


@pytest.fixture
def host(tmp_path) -> MessageHost:
    """A MessageHost over the demo loader with settings in tmp_path."""
    mixin = object.__new__(MessageHost)
    mixin.services = SimpleNamespace(
        loader=create_demo_loader(rows=250),
        settings_store=SettingsStore(tmp_path / "settings.json"),
        viewer=ViewerSettings(page_size=100, prefetch_threshold=50),
    )
    mixin._tree = None
    mixin._tree_cursor = TreeCursor()
    mixin._tree_filter = None
    mixin._pending_expansions = []
    mixin._result_tabs = ResultTabs(grid_factory=mixin._new_grid)
    mixin._internal_clipboard = ""
    mixin._query_token = None
    mixin._query_worker = None
    mixin.posted = []
    mixin.workers = []
    mixin.notifications = []
    mixin.clipboard = None
    return mixin
