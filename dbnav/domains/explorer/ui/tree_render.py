"""Rich rendering of the explorer tree."""

from __future__ import annotations

from rich.text import Text

from dbnav.domains.explorer.domain.tree import TreeNode
from dbnav.domains.explorer.domain.tree_filter import FilterResult
from dbnav.domains.explorer.domain.tree_nodes import DatabaseInfo, NodeKind
from dbnav.domains.explorer.state.tree_cursor import TreeCursor

ICON_COLLAPSED = "▸"
ICON_EXPANDED = "▾"
ICON_LEAF = "•"
EMPTY_MESSAGE = "No databases connected"

KIND_STYLES: dict[NodeKind, str] = {
    NodeKind.DATABASE: "bold",
    NodeKind.SCHEMA: "cyan",
    NodeKind.TABLE: "",
    NodeKind.VIEW: "italic",
    NodeKind.MATERIALIZED_VIEW: "italic",
    NodeKind.COLUMN: "dim",
    NodeKind.FUNCTION: "magenta",
    NodeKind.PROCEDURE: "magenta",
    NodeKind.TRIGGER_FUNCTION: "magenta",
}


def node_icon(node: TreeNode) -> str:
    if node.is_leaf or (node.loaded and not node.children):
        return ICON_LEAF
    if node.expanded:
        return ICON_EXPANDED
    return ICON_COLLAPSED


def node_label(node: TreeNode) -> str:
    if isinstance(node.info, DatabaseInfo) and node.info.active:
        return f"{node.label} (active)"
    return node.label


def render_tree(
    cursor: TreeCursor,
    height: int,
    *,
    loading_node_id: str | None = None,
    filter_result: FilterResult | None = None,
    focused: bool = True,
) -> Text:
    """Render the visible slice of the flattened tree.

    Args:
        cursor: Cursor over the tree; its ``visible_nodes`` drive the rows.
        height: Rows available.
        loading_node_id: Node whose children are being fetched.
        filter_result: When set, only nodes it marks visible are drawn and
            matched characters are highlighted.
        focused: Whether the explorer has focus (cursor highlight).
    """
    text = Text(no_wrap=True, overflow="ellipsis")
    tree = cursor.tree
    if tree is None or not tree.root.children:
        text.append(EMPTY_MESSAGE, style="dim italic")
        return text

    cursor.ensure_visible(height)
    rows = cursor.visible_nodes[cursor.scroll_offset : cursor.scroll_offset + max(1, height)]
    first = True
    for offset, node in enumerate(rows):
        index = cursor.scroll_offset + offset
        if filter_result is not None and node.id not in filter_result.visible:
            continue
        if not first:
            text.append("\n")
        first = False
        depth = tree.depth(node)
        line = Text("  " * max(0, depth - 1))
        line.append(f"{node_icon(node)} ", style="dim")
        label = node_label(node)
        label_text = Text(label, style=KIND_STYLES.get(node.kind, ""))
        if filter_result is not None:
            for position in filter_result.indices.get(node.id, []):
                if position < len(node.label):
                    label_text.stylize("bold yellow", position, position + 1)
        line.append_text(label_text)
        if node.id == loading_node_id:
            line.append(" loading...", style="dim italic")
        if index == cursor.cursor_index:
            line.stylize("reverse" if focused else "underline")
        text.append_text(line)
    return text
