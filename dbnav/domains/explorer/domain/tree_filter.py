"""Search syntax and fuzzy filtering for the explorer tree.

Query syntax:
    plan        nodes fuzzy-matching "plan"
    !plan       nodes NOT matching "plan"
    t:plan      tables matching "plan" (see ``TYPE_PREFIXES`` for the rest)
    !f:get      everything except functions matching "get"
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dbnav.shared.core.utils import fuzzy_score

from .tree import NavigationTree, TreeNode
from .tree_nodes import NodeKind

TYPE_PREFIXES: dict[str, NodeKind] = {
    "t:": NodeKind.TABLE,
    "v:": NodeKind.VIEW,
    "f:": NodeKind.FUNCTION,
    "s:": NodeKind.SCHEMA,
    "seq:": NodeKind.SEQUENCE,
    "ext:": NodeKind.EXTENSION,
    "col:": NodeKind.COLUMN,
    "idx:": NodeKind.INDEX,
    "table:": NodeKind.TABLE,
    "view:": NodeKind.VIEW,
    "func:": NodeKind.FUNCTION,
    "function:": NodeKind.FUNCTION,
    "schema:": NodeKind.SCHEMA,
    "sequence:": NodeKind.SEQUENCE,
    "extension:": NodeKind.EXTENSION,
    "column:": NodeKind.COLUMN,
    "index:": NodeKind.INDEX,
}


@dataclass(frozen=True)
class SearchQuery:
    pattern: str = ""
    negate: bool = False
    type_filter: NodeKind | None = None


def parse_search_query(query: str) -> SearchQuery:
    negate = query.startswith("!")
    if negate:
        query = query[1:]

    type_filter = None
    lowered = query.lower()
    for prefix, kind in TYPE_PREFIXES.items():
        if lowered.startswith(prefix):
            type_filter = kind
            query = query[len(prefix) :]
            break

    return SearchQuery(pattern=query, negate=negate, type_filter=type_filter)


@dataclass
class FilterResult:
    """Outcome of filtering a tree.

    ``matches`` holds the ids of nodes that matched, best score first;
    ``visible`` additionally contains their ancestors so matches can be
    shown in context.
    """

    matches: list[str] = field(default_factory=list)
    visible: set[str] = field(default_factory=set)
    indices: dict[str, list[int]] = field(default_factory=dict)


def node_matches(node: TreeNode, query: SearchQuery) -> tuple[bool, int, list[int]]:
    """Return (matched, score, highlight indices) for a single node."""
    if node.kind is NodeKind.ROOT:
        return False, 0, []

    kind_ok = query.type_filter is None or node.kind is query.type_filter
    result = fuzzy_score(query.pattern, node.label)
    hit = kind_ok and result.matched
    if query.negate:
        # Negation keeps everything the positive query would not return.
        return (not hit), 0, []
    return hit, result.score, result.indices


def filter_tree(tree: NavigationTree, query: SearchQuery | str) -> FilterResult:
    """Match every node in tree against query.

    Only nodes already loaded into the tree are considered; filtering never
    triggers a fetch.
    """
    if isinstance(query, str):
        query = parse_search_query(query)

    scored: list[tuple[int, int, TreeNode]] = []
    indices: dict[str, list[int]] = {}
    order = {node.id: position for position, node in enumerate(_preorder(tree))}
    for node in tree.iter_nodes():
        matched, score, hit_indices = node_matches(node, query)
        if matched:
            scored.append((-score, order.get(node.id, 0), node))
            indices[node.id] = hit_indices

    scored.sort(key=lambda item: (item[0], item[1]))
    result = FilterResult(indices=indices)
    for _, _, node in scored:
        result.matches.append(node.id)
        result.visible.add(node.id)
        for parent in tree.ancestors(node):
            result.visible.add(parent.id)
    return result


def _preorder(tree: NavigationTree) -> list[TreeNode]:
    ordered: list[TreeNode] = []
    stack = list(reversed(tree.root.children))
    while stack:
        node = stack.pop()
        ordered.append(node)
        stack.extend(reversed(node.children))
    return ordered
