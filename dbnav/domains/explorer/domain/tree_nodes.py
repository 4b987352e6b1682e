"""Node kinds and per-kind payloads for the explorer tree."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NodeKind(str, Enum):
    ROOT = "root"
    DATABASE = "database"
    SCHEMA = "schema"
    TABLE = "table"
    VIEW = "view"
    MATERIALIZED_VIEW = "materialized_view"
    COLUMN = "column"
    FUNCTION = "function"
    PROCEDURE = "procedure"
    TRIGGER = "trigger"
    TRIGGER_FUNCTION = "trigger_function"
    SEQUENCE = "sequence"
    INDEX = "index"
    EXTENSION = "extension"
    COMPOSITE_TYPE = "composite_type"
    ENUM_TYPE = "enum_type"
    DOMAIN_TYPE = "domain_type"
    RANGE_TYPE = "range_type"


# Prefix used in node ids ("db:postgres", "table:postgres.public.users").
ID_PREFIXES: dict[NodeKind, str] = {
    NodeKind.ROOT: "root",
    NodeKind.DATABASE: "db",
    NodeKind.SCHEMA: "schema",
    NodeKind.TABLE: "table",
    NodeKind.VIEW: "view",
    NodeKind.MATERIALIZED_VIEW: "matview",
    NodeKind.COLUMN: "column",
    NodeKind.FUNCTION: "function",
    NodeKind.PROCEDURE: "procedure",
    NodeKind.TRIGGER: "trigger",
    NodeKind.TRIGGER_FUNCTION: "trigfunc",
    NodeKind.SEQUENCE: "sequence",
    NodeKind.INDEX: "index",
    NodeKind.EXTENSION: "extension",
    NodeKind.COMPOSITE_TYPE: "ctype",
    NodeKind.ENUM_TYPE: "enum",
    NodeKind.DOMAIN_TYPE: "domain",
    NodeKind.RANGE_TYPE: "range",
}

# Kinds whose children are fetched lazily on first expand.
CONTAINER_KINDS = frozenset(
    {
        NodeKind.ROOT,
        NodeKind.DATABASE,
        NodeKind.SCHEMA,
        NodeKind.TABLE,
        NodeKind.VIEW,
        NodeKind.MATERIALIZED_VIEW,
    }
)

# Kinds that open a data tab when selected.
DATA_KINDS = frozenset({NodeKind.TABLE, NodeKind.VIEW, NodeKind.MATERIALIZED_VIEW})

LEAF_KINDS = frozenset({NodeKind.COLUMN})


@dataclass(frozen=True)
class RootInfo:
    title: str = "Databases"


@dataclass(frozen=True)
class DatabaseInfo:
    name: str
    active: bool = False


@dataclass(frozen=True)
class SchemaInfo:
    database: str
    name: str


@dataclass(frozen=True)
class ObjectInfo:
    """Schema-scoped object: table, view, function, index, type, ..."""

    database: str
    schema: str
    name: str
    detail: str = ""

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}"


@dataclass(frozen=True)
class ColumnInfo:
    database: str
    schema: str
    table: str
    name: str
    data_type: str = ""
    primary_key: bool = False
    nullable: bool = True


NodeInfo = RootInfo | DatabaseInfo | SchemaInfo | ObjectInfo | ColumnInfo


@dataclass(frozen=True)
class NodeDescriptor:
    """A child entry as reported by the data loader, before it becomes a node."""

    kind: NodeKind
    name: str
    data_type: str = ""
    primary_key: bool = False
    nullable: bool = True
    detail: str = ""
