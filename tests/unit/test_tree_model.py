"""Tests for the explorer tree model."""

from __future__ import annotations

import pytest

from dbnav.domains.explorer.domain.tree import TreeNode
from dbnav.domains.explorer.domain.tree_builders import build_database_tree, build_object_nodes, build_schema_nodes
from dbnav.domains.explorer.domain.tree_nodes import NodeKind


class TestTreeNode:
    """Tests for TreeNode expansion rules."""

    def test_toggle_unloaded_expands(self):
        """Toggling an unloaded container always expands it."""
        node = TreeNode(id="db:x", kind=NodeKind.DATABASE, label="x")
        assert node.toggle() is True
        assert node.expanded is True
        assert node.needs_load() is True

    def test_toggle_unloaded_expanded_is_noop(self):
        """An unloaded node that is already expanded stays expanded."""
        node = TreeNode(id="db:x", kind=NodeKind.DATABASE, label="x", expanded=True)
        assert node.toggle() is False
        assert node.expanded is True

    def test_toggle_loaded_without_children_is_noop(self):
        """A loaded, empty node does not change."""
        node = TreeNode(id="db:x", kind=NodeKind.DATABASE, label="x", loaded=True)
        assert node.toggle() is False
        assert node.expanded is False

    def test_toggle_loaded_with_children_flips(self):
        """A loaded node with children flips each time."""
        child = TreeNode(id="schema:x.a", kind=NodeKind.SCHEMA, label="a")
        node = TreeNode(id="db:x", kind=NodeKind.DATABASE, label="x", loaded=True, children=[child])
        assert node.toggle() is True
        assert node.expanded is True
        assert node.toggle() is True
        assert node.expanded is False

    def test_columns_are_leaves(self):
        """Column nodes are loaded and never selectable."""
        node = TreeNode(id="column:a", kind=NodeKind.COLUMN, label="a", selectable=True)
        assert node.is_leaf
        assert node.loaded is True
        assert node.selectable is False
        assert node.toggle() is False


class TestNavigationTree:
    """Tests for the tree index and traversal."""

    def test_find_by_id(self, tree):
        """Every node is reachable through the index."""
        assert tree.find_by_id("db:postgres").label == "postgres"
        assert tree.find_by_id("column:postgres.public.users.id").label == "id (integer)"
        assert tree.find_by_id("missing") is None

    def test_add_children_sets_parent_and_loaded(self):
        """add_children links children back to the parent and marks it loaded."""
        tree = build_database_tree(["postgres"])
        db = tree.find_by_id("db:postgres")
        assert db.loaded is False
        tree.add_children(db, build_schema_nodes("postgres", ["public"]))
        schema = tree.find_by_id("schema:postgres.public")
        assert tree.parent_of(schema) is db
        assert db.loaded is True

    def test_add_duplicate_child_rejected(self, tree):
        """A second node with an existing id is refused."""
        schema = tree.find_by_id("schema:postgres.public")
        with pytest.raises(ValueError):
            tree.add_children(schema, build_object_nodes(NodeKind.TABLE, "postgres", "public", ["users"]))

    def test_duplicate_within_batch_leaves_tree_unchanged(self):
        """A batch repeating an id is refused before any child is attached."""
        tree = build_database_tree(["postgres"])
        db = tree.find_by_id("db:postgres")
        before = len(tree)
        with pytest.raises(ValueError):
            tree.add_children(db, build_schema_nodes("postgres", ["public", "audit", "public"]))
        assert len(tree) == before
        assert db.children == []
        assert db.loaded is False
        assert "schema:postgres.audit" not in tree

    def test_flatten_collapsed(self, tree):
        """Collapsed nodes hide their children; the root is never listed."""
        assert [n.id for n in tree.flatten()] == ["db:postgres", "db:analytics"]

    def test_flatten_expanded_preorder(self, tree):
        """Expanded nodes contribute their children in pre-order."""
        for node_id in ("db:postgres", "schema:postgres.public", "table:postgres.public.users"):
            tree.find_by_id(node_id).expanded = True
        assert [n.id for n in tree.flatten()] == [
            "db:postgres",
            "schema:postgres.public",
            "table:postgres.public.users",
            "column:postgres.public.users.id",
            "column:postgres.public.users.email",
            "table:postgres.public.orders",
            "db:analytics",
        ]

    def test_expanded_node_under_collapsed_parent_hidden(self, tree):
        """An expanded node is hidden while its parent is collapsed."""
        tree.find_by_id("schema:postgres.public").expanded = True
        assert "schema:postgres.public" not in [n.id for n in tree.flatten()]

    def test_ancestor_and_path(self, tree):
        """Ancestry and label paths run from below the root to the node."""
        column = tree.find_by_id("column:postgres.public.users.email")
        db = tree.find_by_id("db:postgres")
        assert tree.is_ancestor_of(db, column)
        assert not tree.is_ancestor_of(column, db)
        assert not tree.is_ancestor_of(db, db)
        assert tree.path(column) == ["postgres", "public", "users", "email"]
        assert tree.depth(column) == 4

    def test_database_and_schema_of(self, tree):
        """Containing database and schema are resolved from any descendant."""
        column = tree.find_by_id("column:postgres.public.users.id")
        assert tree.database_of(column) == "postgres"
        assert tree.schema_of(column) == "public"
        assert tree.schema_of(tree.find_by_id("db:postgres")) == ""

    def test_generation_unique_per_tree(self):
        """Each tree instance has its own generation."""
        assert build_database_tree(["a"]).generation != build_database_tree(["a"]).generation
