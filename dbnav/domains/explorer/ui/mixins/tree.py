"""Tree/Explorer mixin for DbnavApp."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from rich.markup import escape as escape_markup

from dbnav.domains.explorer.domain.tree_builders import build_child_nodes, build_database_tree, loader_path
from dbnav.domains.explorer.domain.tree_filter import filter_tree, parse_search_query
from dbnav.domains.explorer.domain.tree_nodes import (
    DATA_KINDS,
    DatabaseInfo,
    NodeDescriptor,
    NodeKind,
    ObjectInfo,
)
from dbnav.domains.explorer.ui import expansion_state
from dbnav.domains.shell.app.messages import (
    LoadNodeChildren,
    LoadTree,
    NodeChildrenLoaded,
    TreeLoaded,
    TreeNodeExpanded,
    TreeNodeSelected,
)
from dbnav.shared.ui.protocols import AppProtocol

if TYPE_CHECKING:
    from dbnav.domains.explorer.domain.tree import NavigationTree
    from dbnav.domains.explorer.domain.tree_filter import FilterResult
    from dbnav.domains.explorer.state.tree_cursor import TreeCursor

logger = logging.getLogger(__name__)


class TreeMixin:
    """Mixin providing explorer tree functionality.

    Tree state lives on the host: ``_tree`` (the current ``NavigationTree``),
    ``_tree_cursor`` and an optional ``_tree_filter``. Children are fetched
    by workers that post ``NodeChildrenLoaded``; at most one fetch per tree
    is in flight (``NavigationTree.loading_node_id``).
    """

    _tree: NavigationTree | None = None
    _tree_cursor: TreeCursor
    _tree_filter: FilterResult | None = None
    _pending_expansions: list[str]

    # Loading the tree

    def action_refresh_tree(self: AppProtocol) -> None:
        self.post_message(LoadTree())

    def on_load_tree(self: AppProtocol, message: LoadTree) -> None:
        loader = self.services.loader

        async def work_async() -> None:
            try:
                databases, active = await asyncio.to_thread(loader.load_databases)
                tree = build_database_tree(databases, active)
                if active:
                    db_node = next(
                        (n for n in tree.root.children if isinstance(n.info, DatabaseInfo) and n.info.active),
                        None,
                    )
                    if db_node is not None:
                        schemas = await asyncio.to_thread(loader.load_schemas, active)
                        descriptors = [NodeDescriptor(kind=NodeKind.SCHEMA, name=name) for name in schemas]
                        tree.add_children(db_node, build_child_nodes(tree, db_node, descriptors))
                        db_node.expanded = True
            except Exception as error:
                self.post_message(TreeLoaded(None, error=error))
                return
            self.post_message(TreeLoaded(tree))

        self.run_worker(work_async(), name="load-tree", group="tree", exclusive=True)

    def on_tree_loaded(self: AppProtocol, message: TreeLoaded) -> None:
        if message.error is not None or message.tree is None:
            self.notify(
                f"Failed to load database structure: {escape_markup(str(message.error))}",
                severity="error",
            )
            return
        self._tree = message.tree
        self._tree_filter = None
        self._tree_cursor.set_tree(message.tree)
        self._pending_expansions = expansion_state.load_expanded_state(self)
        self._continue_pending_expansions()
        self._refresh_explorer()

    # Cursor actions

    def action_tree_cursor_down(self: AppProtocol) -> None:
        self._tree_cursor.move(1)
        self._refresh_explorer()

    def action_tree_cursor_up(self: AppProtocol) -> None:
        self._tree_cursor.move(-1)
        self._refresh_explorer()

    def action_tree_cursor_top(self: AppProtocol) -> None:
        self._tree_cursor.jump_top()
        self._refresh_explorer()

    def action_tree_cursor_bottom(self: AppProtocol) -> None:
        self._tree_cursor.jump_bottom()
        self._refresh_explorer()

    def action_tree_cursor_parent(self: AppProtocol) -> None:
        if self._tree_cursor.go_to_parent():
            self._refresh_explorer()

    def action_tree_toggle(self: AppProtocol) -> None:
        node = self._tree_cursor.toggle_current()
        if node is None:
            return
        self.post_message(TreeNodeExpanded(node.id, node.expanded))
        self._save_expanded_state()
        self._refresh_explorer()

    def action_tree_select(self: AppProtocol) -> None:
        node = self._tree_cursor.select_current()
        if node is not None:
            self.post_message(TreeNodeSelected(node.id))

    # Expansion and lazy loading

    def on_tree_node_expanded(self: AppProtocol, message: TreeNodeExpanded) -> None:
        tree = self._tree
        if tree is None or not message.expanded:
            return
        node = tree.find_by_id(message.node_id)
        if node is not None and node.needs_load():
            self.post_message(LoadNodeChildren(node.id))

    def on_load_node_children(self: AppProtocol, message: LoadNodeChildren) -> None:
        tree = self._tree
        if tree is None:
            return
        if tree.loading_node_id is not None:
            logger.debug("Load of %s suppressed, %s in flight", message.node_id, tree.loading_node_id)
            return
        node = tree.find_by_id(message.node_id)
        if node is None or node.loaded:
            return

        tree.loading_node_id = node.id
        loader = self.services.loader
        generation = tree.generation
        node_id = node.id
        kind = node.kind
        path = loader_path(tree, node)

        async def work_async() -> None:
            try:
                children = await asyncio.to_thread(loader.load_children, kind, path)
            except Exception as error:
                self.post_message(NodeChildrenLoaded(node_id, generation, error=error))
                return
            self.post_message(NodeChildrenLoaded(node_id, generation, children))

        self.run_worker(work_async(), name=f"load-children-{node_id}", group="tree-load", exclusive=False)
        self._refresh_explorer()

    def on_node_children_loaded(self: AppProtocol, message: NodeChildrenLoaded) -> None:
        tree = self._tree
        if tree is None or tree.generation != message.generation:
            logger.debug("Dropping children of %s for a replaced tree", message.node_id)
            return
        if tree.loading_node_id == message.node_id:
            tree.loading_node_id = None

        if message.error is not None:
            self._fail_node_load(tree, message.node_id, message.error)
            return

        node = tree.find_by_id(message.node_id)
        if node is None or node.loaded:
            logger.debug("Dropping stale children for %s", message.node_id)
            return

        try:
            tree.add_children(node, build_child_nodes(tree, node, message.children))
        except ValueError as error:
            logger.warning("Rejected children of %s: %s", message.node_id, error)
            self._fail_node_load(tree, message.node_id, error)
            return
        self._continue_pending_expansions()
        self._tree_cursor.refresh()
        self._refresh_explorer()

    def _fail_node_load(self: AppProtocol, tree: NavigationTree, node_id: str, error: Exception) -> None:
        failed = tree.find_by_id(node_id)
        if failed is not None and not failed.loaded:
            failed.expanded = False
            self._tree_cursor.refresh()
        self.notify(f"Failed to load children: {escape_markup(str(error))}", severity="error")
        self._continue_pending_expansions()
        self._refresh_explorer()

    def _continue_pending_expansions(self: AppProtocol) -> None:
        tree = self._tree
        if tree is None or not self._pending_expansions or tree.loading_node_id is not None:
            return
        node_id = expansion_state.next_pending_expansion(tree, self._pending_expansions)
        self._tree_cursor.refresh()
        if node_id is not None:
            self.post_message(LoadNodeChildren(node_id))

    def _save_expanded_state(self: AppProtocol) -> None:
        expansion_state.save_expanded_state(self)

    # Selection

    def on_tree_node_selected(self: AppProtocol, message: TreeNodeSelected) -> None:
        tree = self._tree
        if tree is None:
            return
        node = tree.find_by_id(message.node_id)
        if node is None:
            return

        if node.kind in DATA_KINDS:
            schema = tree.schema_of(node)
            table = node.info.name if isinstance(node.info, ObjectInfo) else node.label
            tab, created = self._result_tabs.open_table_tab(schema, table)
            if created:
                self._request_page(tab, 0)
            self._refresh_results()
            return

        if isinstance(node.info, ObjectInfo):
            detail = f" {node.info.detail}" if node.info.detail else ""
            kind_name = node.kind.value.replace("_", " ")
            self.notify(escape_markup(f"{kind_name}: {node.info.qualified_name}{detail}"))

    # Filtering

    def apply_tree_filter(self: AppProtocol, query: str) -> int:
        """Filter the loaded tree; returns the number of matches."""
        tree = self._tree
        if tree is None:
            return 0
        if not query:
            self.clear_tree_filter()
            return 0
        result = filter_tree(tree, parse_search_query(query))
        for node_id in result.visible:
            node = tree.find_by_id(node_id)
            if node is not None and node_id not in result.matches and node.kind is not NodeKind.ROOT:
                node.expanded = True
        self._tree_filter = result
        self._tree_cursor.set_filter(result.visible)
        if result.matches:
            self._tree_cursor.move_to(result.matches[0])
        self._refresh_explorer()
        return len(result.matches)

    def action_tree_filter_next(self: AppProtocol) -> None:
        self._step_tree_filter(1)

    def action_tree_filter_prev(self: AppProtocol) -> None:
        self._step_tree_filter(-1)

    def _step_tree_filter(self: AppProtocol, delta: int) -> None:
        result = self._tree_filter
        if result is None or not result.matches:
            return
        current = self._tree_cursor.current_node()
        if current is not None and current.id in result.matches:
            position = result.matches.index(current.id)
        else:
            position = -1 if delta > 0 else 0
        self._tree_cursor.move_to(result.matches[(position + delta) % len(result.matches)])
        self._refresh_explorer()

    def clear_tree_filter(self: AppProtocol) -> None:
        self._tree_filter = None
        self._tree_cursor.set_filter(None)
        self._refresh_explorer()
