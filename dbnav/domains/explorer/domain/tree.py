"""Explorer tree model.

Nodes own their children; the back-reference to a parent is stored as the
parent's id and resolved through the owning ``NavigationTree`` index, so a
node never holds a strong reference upward.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from itertools import count

from .tree_nodes import LEAF_KINDS, DatabaseInfo, NodeInfo, NodeKind, ObjectInfo, SchemaInfo

_generations = count(1)


@dataclass(eq=False)
class TreeNode:
    """A single explorer entry.

    Attributes:
        id: Deterministic id derived from kind and ancestor names.
        kind: What the node represents.
        label: Text shown in the explorer.
        info: Kind-specific payload.
        expanded: Whether children are shown.
        loaded: Whether children have been fetched.
        selectable: Whether Enter on this node produces a selection.
        children: Ordered child nodes.
        parent_id: Id of the node whose ``children`` holds this one.
    """

    id: str
    kind: NodeKind
    label: str
    info: NodeInfo | None = None
    expanded: bool = False
    loaded: bool = False
    selectable: bool = True
    children: list[TreeNode] = field(default_factory=list)
    parent_id: str | None = None

    def __post_init__(self) -> None:
        if self.kind in LEAF_KINDS:
            self.selectable = False
            self.loaded = True

    @property
    def is_leaf(self) -> bool:
        return self.kind in LEAF_KINDS

    def toggle(self) -> bool:
        """Flip the expansion state; returns True when it changed.

        An unloaded node always becomes expanded so the caller can trigger a
        lazy load. A loaded node with no children stays as it is.
        """
        if self.kind in LEAF_KINDS:
            return False
        if not self.loaded:
            if self.expanded:
                return False
            self.expanded = True
            return True
        if not self.children:
            return False
        self.expanded = not self.expanded
        return True

    def needs_load(self) -> bool:
        """True when an expanded node still has to fetch its children."""
        return self.expanded and not self.loaded and not self.children


class NavigationTree:
    """Owns every node of one explorer tree and indexes them by id.

    ``generation`` is unique per tree instance; background completions carry
    the generation they were issued against so results for a replaced tree
    can be recognised and dropped.
    """

    def __init__(self, root: TreeNode) -> None:
        self.root = root
        self.generation = next(_generations)
        self.loading_node_id: str | None = None
        self._index: dict[str, TreeNode] = {}
        self._index_subtree(root, None)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def _index_subtree(self, node: TreeNode, parent_id: str | None) -> None:
        stack: list[tuple[TreeNode, str | None]] = [(node, parent_id)]
        while stack:
            current, owner = stack.pop()
            if current.id in self._index and self._index[current.id] is not current:
                raise ValueError(f"duplicate node id: {current.id}")
            current.parent_id = owner
            self._index[current.id] = current
            for child in current.children:
                stack.append((child, current.id))

    def find_by_id(self, node_id: str) -> TreeNode | None:
        return self._index.get(node_id)

    def parent_of(self, node: TreeNode) -> TreeNode | None:
        if node.parent_id is None:
            return None
        return self._index.get(node.parent_id)

    def ancestors(self, node: TreeNode) -> Iterator[TreeNode]:
        """Yield parents from the nearest up to the root."""
        current = self.parent_of(node)
        while current is not None:
            yield current
            current = self.parent_of(current)

    def add_children(self, node: TreeNode, children: Iterable[TreeNode]) -> None:
        """Append children below node and mark it loaded.

        Every id is checked before anything is attached, so a rejected batch
        leaves the tree unchanged.
        """
        new_children = list(children)
        seen: set[str] = set()
        for child in new_children:
            if child is node or child.id in self._index or child.id in seen:
                raise ValueError(f"node {child.id} is already part of the tree")
            seen.add(child.id)
        for child in new_children:
            node.children.append(child)
            self._index_subtree(child, node.id)
        node.loaded = True

    def flatten(self) -> list[TreeNode]:
        """Pre-order list of visible nodes below the root.

        The root itself is not included and is treated as expanded; any other
        node contributes its children only while expanded.
        """
        result: list[TreeNode] = []
        stack = list(reversed(self.root.children))
        while stack:
            node = stack.pop()
            result.append(node)
            if node.expanded and node.children:
                stack.extend(reversed(node.children))
        return result

    def is_ancestor_of(self, ancestor: TreeNode, node: TreeNode) -> bool:
        """True when ancestor is a strict ancestor of node."""
        return any(parent is ancestor for parent in self.ancestors(node))

    def path(self, node: TreeNode) -> list[str]:
        """Labels from the first level below the root down to node."""
        if node is self.root:
            return []
        parts = [node.label]
        for parent in self.ancestors(node):
            if parent is self.root:
                break
            parts.append(parent.label)
        parts.reverse()
        return parts

    def depth(self, node: TreeNode) -> int:
        return sum(1 for _ in self.ancestors(node))

    def database_of(self, node: TreeNode) -> str:
        """Name of the database containing node, or "" when there is none."""
        for current in (node, *self.ancestors(node)):
            if current.kind is NodeKind.DATABASE:
                if isinstance(current.info, DatabaseInfo):
                    return current.info.name
                return current.label
        return ""

    def schema_of(self, node: TreeNode) -> str:
        """Name of the schema containing node, or "" when there is none."""
        for current in (node, *self.ancestors(node)):
            if current.kind is NodeKind.SCHEMA:
                if isinstance(current.info, SchemaInfo):
                    return current.info.name
                return current.label.split(" ")[0]
            if isinstance(current.info, ObjectInfo):
                return current.info.schema
        return ""

    def iter_nodes(self) -> Iterator[TreeNode]:
        return iter(self._index.values())
