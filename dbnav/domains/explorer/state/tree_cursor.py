"""Cursor and scroll state for the explorer panel."""

from __future__ import annotations

from dbnav.domains.explorer.domain.tree import NavigationTree, TreeNode


class TreeCursor:
    """Tracks the highlighted row of a flattened ``NavigationTree``.

    The flattened list is the only mapping between screen rows and nodes,
    so it is recomputed by ``refresh()`` after every expansion or children
    change and the cursor is re-clamped to it.
    """

    def __init__(self, tree: NavigationTree | None = None) -> None:
        self.tree = tree
        self.cursor_index = 0
        self.scroll_offset = 0
        self.visible_nodes: list[TreeNode] = []
        self.only_ids: set[str] | None = None
        self.refresh()

    def set_tree(self, tree: NavigationTree | None) -> None:
        self.tree = tree
        self.only_ids = None
        self.cursor_index = 0
        self.scroll_offset = 0
        self.refresh()

    def set_filter(self, node_ids: set[str] | None) -> None:
        """Restrict the rows to node_ids, or show everything again with None."""
        self.only_ids = node_ids
        self.refresh()

    def refresh(self, keep_node_id: str | None = None) -> None:
        """Recompute the flattened list and clamp the cursor.

        Args:
            keep_node_id: Node to keep the cursor on if it is still visible.
        """
        if keep_node_id is None:
            current = self.current_node()
            keep_node_id = current.id if current is not None else None
        nodes = self.tree.flatten() if self.tree is not None else []
        if self.only_ids is not None:
            nodes = [node for node in nodes if node.id in self.only_ids]
        self.visible_nodes = nodes
        if keep_node_id is not None:
            self._keep_on(keep_node_id)
        self._clamp()

    def _keep_on(self, node_id: str) -> None:
        for index, node in enumerate(self.visible_nodes):
            if node.id == node_id:
                self.cursor_index = index
                return
        # Hidden under a collapsed parent: land on the nearest visible ancestor.
        target = self.tree.find_by_id(node_id) if self.tree is not None else None
        if target is None:
            return
        for index in range(len(self.visible_nodes) - 1, -1, -1):
            if self.tree.is_ancestor_of(self.visible_nodes[index], target):
                self.cursor_index = index
                return

    def _clamp(self) -> None:
        if not self.visible_nodes:
            self.cursor_index = 0
            return
        self.cursor_index = max(0, min(self.cursor_index, len(self.visible_nodes) - 1))

    def current_node(self) -> TreeNode | None:
        if 0 <= self.cursor_index < len(self.visible_nodes):
            return self.visible_nodes[self.cursor_index]
        return None

    def move(self, delta: int) -> None:
        self.cursor_index += delta
        self._clamp()

    def jump_top(self) -> None:
        self.cursor_index = 0

    def jump_bottom(self) -> None:
        self.cursor_index = max(0, len(self.visible_nodes) - 1)

    def go_to_parent(self) -> bool:
        node = self.current_node()
        if node is None or self.tree is None:
            return False
        parent = self.tree.parent_of(node)
        if parent is None or parent is self.tree.root:
            return False
        for index, candidate in enumerate(self.visible_nodes):
            if candidate is parent:
                self.cursor_index = index
                return True
        return False

    def toggle_current(self) -> TreeNode | None:
        """Toggle the node under the cursor.

        Returns the node when its expansion changed or when it is expanded
        but still waiting for children (a previously suppressed load), i.e.
        whenever the caller should announce the expansion.
        """
        node = self.current_node()
        if node is None:
            return None
        changed = node.toggle()
        if not changed and not node.needs_load():
            return None
        self.refresh(keep_node_id=node.id)
        return node

    def select_current(self) -> TreeNode | None:
        node = self.current_node()
        if node is None or not node.selectable:
            return None
        return node

    def move_to(self, node_id: str) -> bool:
        for index, node in enumerate(self.visible_nodes):
            if node.id == node_id:
                self.cursor_index = index
                return True
        return False

    def ensure_visible(self, height: int) -> None:
        """Adjust ``scroll_offset`` so the cursor row fits in height rows."""
        height = max(1, height)
        if self.cursor_index < self.scroll_offset:
            self.scroll_offset = self.cursor_index
        elif self.cursor_index >= self.scroll_offset + height:
            self.scroll_offset = self.cursor_index - height + 1
        max_offset = max(0, len(self.visible_nodes) - height)
        self.scroll_offset = max(0, min(self.scroll_offset, max_offset))
