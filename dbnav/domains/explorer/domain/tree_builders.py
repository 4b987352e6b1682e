"""Construct explorer nodes from loader output."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .tree import NavigationTree, TreeNode
from .tree_nodes import (
    CONTAINER_KINDS,
    ID_PREFIXES,
    ColumnInfo,
    DatabaseInfo,
    NodeDescriptor,
    NodeKind,
    ObjectInfo,
    RootInfo,
    SchemaInfo,
)

ROOT_ID = "root"


def make_node_id(kind: NodeKind, *parts: str) -> str:
    """Build a node id such as ``table:postgres.public.users``."""
    if kind is NodeKind.ROOT:
        return ROOT_ID
    return f"{ID_PREFIXES[kind]}:{'.'.join(parts)}"


def _new_node(node_id: str, kind: NodeKind, label: str, info: object) -> TreeNode:
    # Objects without lazily loaded children start out loaded.
    return TreeNode(
        id=node_id,
        kind=kind,
        label=label,
        info=info,  # type: ignore[arg-type]
        loaded=kind not in CONTAINER_KINDS,
    )


def build_database_tree(databases: Sequence[str], active: str | None = None) -> NavigationTree:
    """Root node plus one collapsed, unloaded node per database."""
    root = TreeNode(
        id=ROOT_ID,
        kind=NodeKind.ROOT,
        label="Databases",
        info=RootInfo(),
        expanded=True,
        loaded=True,
        selectable=False,
    )
    for name in databases:
        root.children.append(
            _new_node(
                make_node_id(NodeKind.DATABASE, name),
                NodeKind.DATABASE,
                name,
                DatabaseInfo(name=name, active=name == active),
            )
        )
    return NavigationTree(root)


def build_schema_nodes(database: str, schemas: Iterable[str]) -> list[TreeNode]:
    return [
        _new_node(
            make_node_id(NodeKind.SCHEMA, database, schema),
            NodeKind.SCHEMA,
            schema,
            SchemaInfo(database=database, name=schema),
        )
        for schema in schemas
    ]


def build_object_nodes(
    kind: NodeKind, database: str, schema: str, names: Iterable[str], detail: str = ""
) -> list[TreeNode]:
    return [
        _new_node(
            make_node_id(kind, database, schema, name),
            kind,
            name,
            ObjectInfo(database=database, schema=schema, name=name, detail=detail),
        )
        for name in names
    ]


def column_label(name: str, data_type: str) -> str:
    return f"{name} ({data_type})" if data_type else name


def build_column_nodes(
    database: str, schema: str, table: str, columns: Iterable[NodeDescriptor]
) -> list[TreeNode]:
    nodes = []
    for column in columns:
        info = ColumnInfo(
            database=database,
            schema=schema,
            table=table,
            name=column.name,
            data_type=column.data_type,
            primary_key=column.primary_key,
            nullable=column.nullable,
        )
        nodes.append(
            _new_node(
                make_node_id(NodeKind.COLUMN, database, schema, table, column.name),
                NodeKind.COLUMN,
                column_label(column.name, column.data_type),
                info,
            )
        )
    return nodes


def build_child_nodes(
    tree: NavigationTree, parent: TreeNode, descriptors: Sequence[NodeDescriptor]
) -> list[TreeNode]:
    """Turn loader descriptors into nodes scoped under parent."""
    database = tree.database_of(parent)
    if parent.kind is NodeKind.DATABASE:
        return build_schema_nodes(database, (d.name for d in descriptors))

    schema = tree.schema_of(parent)
    if parent.kind is NodeKind.SCHEMA:
        nodes: list[TreeNode] = []
        seen: dict[str, int] = {}
        for descriptor in descriptors:
            (node,) = build_object_nodes(
                descriptor.kind, database, schema, [descriptor.name], detail=descriptor.detail
            )
            # Overloaded functions and procedures share kind and name.
            occurrence = seen.get(node.id, 0) + 1
            seen[node.id] = occurrence
            if occurrence > 1:
                node.id = f"{node.id}#{occurrence}"
            nodes.append(node)
        return nodes

    table = parent.info.name if isinstance(parent.info, ObjectInfo) else parent.label
    return build_column_nodes(database, schema, table, descriptors)


def loader_path(tree: NavigationTree, node: TreeNode) -> list[str]:
    """Names identifying node to the data loader: database, schema, object."""
    if isinstance(node.info, DatabaseInfo):
        return [node.info.name]
    if isinstance(node.info, SchemaInfo):
        return [node.info.database, node.info.name]
    if isinstance(node.info, ObjectInfo):
        return [node.info.database, node.info.schema, node.info.name]
    return tree.path(node)
