"""Database-object browser: vocabulary, node builders, decorator, and loader.

Node ids follow ``<kind>:<db>[.<schema>[.<object>[.<column>]]]``; for
example ``table:app.public.users`` or ``column:app.public.users.id``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import json
import logging
from pathlib import Path
from typing import Any

from ..navigator.key_dispatch import Keymap
from ..search.query import DATABASE_TYPE_PREFIXES
from ..tree_model.build import add_child, nearest_ancestor_of_type, node_from_descriptor
from ..tree_model.loading import LoaderError
from ..tree_model.rendering import LabelPart, RowLabel, expand_marker
from ..tree_model.types import ERROR_TYPE, ChildDescriptor, NodeVocabulary, TreeNode, new_root

logger = logging.getLogger(__name__)

DATABASE = "database"
SCHEMA = "schema"
TABLE = "table"
VIEW = "view"
MATERIALIZED_VIEW = "materialized_view"
FUNCTION = "function"
PROCEDURE = "procedure"
TRIGGER_FUNCTION = "trigger_function"
SEQUENCE = "sequence"
EXTENSION = "extension"
INDEX = "index"
TRIGGER = "trigger"
COMPOSITE_TYPE = "composite_type"
ENUM_TYPE = "enum_type"
DOMAIN_TYPE = "domain_type"
RANGE_TYPE = "range_type"
COLUMN = "column"

TYPE_GROUP = "type_group"

PK_MARKER = "⚿"
EMPTY_MARKER = "∅"


@dataclass(frozen=True)
class GroupSpec:
    """One object group under a schema, table, or database."""

    group_type: str
    id_kind: str
    title: str
    object_type: str
    object_id_kind: str
    catalog_key: str


SCHEMA_GROUPS: tuple[GroupSpec, ...] = (
    GroupSpec("table_group", "tables", "Tables", TABLE, "table", "tables"),
    GroupSpec("view_group", "views", "Views", VIEW, "view", "views"),
    GroupSpec("materialized_view_group", "matviews", "Materialized Views", MATERIALIZED_VIEW, "matview", "materialized_views"),
    GroupSpec("function_group", "functions", "Functions", FUNCTION, "function", "functions"),
    GroupSpec("procedure_group", "procedures", "Procedures", PROCEDURE, "procedure", "procedures"),
    GroupSpec("trigger_function_group", "triggerfuncs", "Trigger Functions", TRIGGER_FUNCTION, "triggerfunc", "trigger_functions"),
    GroupSpec("sequence_group", "sequences", "Sequences", SEQUENCE, "sequence", "sequences"),
)

TYPE_GROUPS: tuple[GroupSpec, ...] = (
    GroupSpec("composite_type_group", "compositetypes", "Composite", COMPOSITE_TYPE, "compositetype", "composite_types"),
    GroupSpec("enum_type_group", "enumtypes", "Enum", ENUM_TYPE, "enumtype", "enum_types"),
    GroupSpec("domain_type_group", "domaintypes", "Domain", DOMAIN_TYPE, "domaintype", "domain_types"),
    GroupSpec("range_type_group", "rangetypes", "Range", RANGE_TYPE, "rangetype", "range_types"),
)

TABLE_GROUPS: tuple[GroupSpec, ...] = (
    GroupSpec("index_group", "indexes", "Indexes", INDEX, "index", "indexes"),
    GroupSpec("trigger_group", "triggers", "Triggers", TRIGGER, "trigger", "triggers"),
)

EXTENSION_GROUP = GroupSpec("extension_group", "extensions", "Extensions", EXTENSION, "extension", "extensions")

_ALL_GROUPS: tuple[GroupSpec, ...] = (*SCHEMA_GROUPS, *TYPE_GROUPS, *TABLE_GROUPS, EXTENSION_GROUP)
GROUP_BY_TYPE: dict[str, GroupSpec] = {spec.group_type: spec for spec in _ALL_GROUPS}
GROUP_TYPES = frozenset({*GROUP_BY_TYPE, TYPE_GROUP})

# Objects that own columns.
RELATION_TYPES = frozenset({TABLE, VIEW, MATERIALIZED_VIEW})
OBJECT_TYPES = frozenset(spec.object_type for spec in _ALL_GROUPS)

DATABASE_VOCABULARY = NodeVocabulary(
    name="database",
    searchable_types=frozenset({SCHEMA, COLUMN, *OBJECT_TYPES}),
    type_filters={
        "table": frozenset({TABLE}),
        "view": frozenset({VIEW, MATERIALIZED_VIEW}),
        "function": frozenset({FUNCTION, TRIGGER_FUNCTION}),
        "schema": frozenset({SCHEMA}),
        "sequence": frozenset({SEQUENCE}),
        "extension": frozenset({EXTENSION}),
        "column": frozenset({COLUMN}),
        "index": frozenset({INDEX}),
    },
    type_prefixes=DATABASE_TYPE_PREFIXES,
    leaf_types=frozenset({COLUMN, ERROR_TYPE, *(OBJECT_TYPES - RELATION_TYPES)}),
)

DATABASE_KEYMAP = Keymap(name="database")


@dataclass(frozen=True)
class ColumnInfo:
    """Column metadata carried by column nodes."""

    name: str
    data_type: str
    nullable: bool = True
    primary_key: bool = False
    default: str | None = None
    is_array: bool = False
    is_jsonb: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ColumnInfo:
        data_type = str(data.get("data_type") or data.get("type") or "")
        default = data.get("default")
        return cls(
            name=str(data.get("name", "")),
            data_type=data_type,
            nullable=bool(data.get("nullable", True)),
            primary_key=bool(data.get("primary_key", False)),
            default=None if default is None else str(default),
            is_array=bool(data.get("is_array", data_type.endswith("[]"))),
            is_jsonb=bool(data.get("is_jsonb", data_type.lower() == "jsonb")),
        )


# Node ids


def parse_node_id(node_id: str) -> tuple[str, list[str]]:
    """Split ``"table:app.public.users"`` into ``("table", ["app", "public", "users"])``."""
    kind, sep, rest = node_id.partition(":")
    if not sep:
        return "", []
    return kind, rest.split(".")


def database_for_node(node: TreeNode | None) -> str:
    """Return the name of the database containing ``node`` (or ``""``)."""
    if node is None:
        return ""
    found = nearest_ancestor_of_type(node, DATABASE)
    return found.label if found is not None else ""


def schema_for_node(node: TreeNode | None) -> str:
    if node is None:
        return ""
    found = nearest_ancestor_of_type(node, SCHEMA)
    return found.label if found is not None else ""


# Descriptors and builders


def _object_name(obj: str | Mapping[str, Any]) -> str:
    if isinstance(obj, Mapping):
        return str(obj.get("name", ""))
    return str(obj)


def _row_count(obj: str | Mapping[str, Any]) -> int | None:
    if not isinstance(obj, Mapping) or obj.get("row_count") is None:
        return None
    value = obj["row_count"]
    if isinstance(value, bool) or not isinstance(value, int):
        raise LoaderError(f"invalid row_count for {_object_name(obj)!r}: {value!r}")
    return value


def database_descriptors(databases: Iterable[str], active: str = "") -> list[ChildDescriptor]:
    return [
        ChildDescriptor(id=f"db:{name}", type=DATABASE, label=name, metadata={"active": name == active})
        for name in databases
    ]


def schema_descriptors(database: str, schemas: Iterable[str]) -> list[ChildDescriptor]:
    return [ChildDescriptor(id=f"schema:{database}.{name}", type=SCHEMA, label=name) for name in schemas]


def group_descriptor(spec: GroupSpec, scope: str, count: int) -> ChildDescriptor:
    return ChildDescriptor(
        id=f"{spec.id_kind}:{scope}",
        type=spec.group_type,
        label=f"{spec.title} ({count})",
        selectable=False,
    )


def object_descriptors(spec: GroupSpec, scope: str, objects: Iterable[str | Mapping[str, Any]]) -> list[ChildDescriptor]:
    """Describe the members of one object group; relations stay expandable."""
    descriptors: list[ChildDescriptor] = []
    for obj in objects:
        name = _object_name(obj)
        row_count = _row_count(obj)
        metadata = {"row_count": row_count} if row_count is not None else None
        descriptors.append(
            ChildDescriptor(
                id=f"{spec.object_id_kind}:{scope}.{name}",
                type=spec.object_type,
                label=name,
                metadata=metadata,
                leaf=spec.object_type not in RELATION_TYPES,
            )
        )
    return descriptors


def column_descriptors(scope: str, columns: Iterable[ColumnInfo]) -> list[ChildDescriptor]:
    return [
        ChildDescriptor(
            id=f"column:{scope}.{col.name}",
            type=COLUMN,
            label=f"{col.name} ({col.data_type})",
            metadata=col,
            leaf=True,
            selectable=False,
        )
        for col in columns
    ]


def build_database_tree(databases: Iterable[str], active: str = "") -> TreeNode:
    """Return a root labelled ``Databases`` with one unloaded node per database."""
    root = new_root("Databases")
    for descriptor in database_descriptors(databases, active):
        add_child(root, node_from_descriptor(descriptor))
    return root


def format_number(value: int) -> str:
    """Format a row count compactly: ``999``, ``1.5k``, ``42k``, ``1.2M``."""
    if value < 1000:
        return str(value)
    if value < 10_000:
        thousands = value / 1000
        if thousands == int(thousands):
            return f"{thousands:.0f}k"
        return f"{thousands:.1f}k"
    if value < 1_000_000:
        return f"{value / 1000:.0f}k"
    return f"{value / 1_000_000:.1f}M"


# Decorator

_OBJECT_ICONS: dict[str, tuple[str, str]] = {
    TABLE: ("▦", "table_icon"),
    VIEW: ("◎", "view_icon"),
    MATERIALIZED_VIEW: ("◉", "materialized_view_icon"),
    FUNCTION: ("ƒ", "function_icon"),
    PROCEDURE: ("⚙", "procedure_icon"),
    TRIGGER_FUNCTION: ("⚡", "trigger_function_icon"),
    SEQUENCE: ("#", "sequence_icon"),
    INDEX: ("⊕", "index_icon"),
    TRIGGER: ("↯", "trigger_icon"),
    EXTENSION: ("◈", "extension_icon"),
    COMPOSITE_TYPE: ("◫", "type_icon"),
    ENUM_TYPE: ("◧", "type_icon"),
    DOMAIN_TYPE: ("◨", "type_icon"),
    RANGE_TYPE: ("◩", "type_icon"),
    COLUMN: ("•", "column_icon"),
}

_GROUP_ROLES: dict[str, str] = {
    "table_group": "table_icon",
    "view_group": "view_icon",
    "materialized_view_group": "materialized_view_icon",
    "function_group": "function_icon",
    "procedure_group": "procedure_icon",
    "trigger_function_group": "trigger_function_icon",
    "sequence_group": "sequence_icon",
    "extension_group": "extension_icon",
    "index_group": "index_icon",
    "trigger_group": "trigger_icon",
}


def _node_icon(node: TreeNode) -> LabelPart:
    if node.type == DATABASE:
        active = isinstance(node.metadata, Mapping) and bool(node.metadata.get("active"))
        return LabelPart("●", "database_active") if active else LabelPart("○", "database_inactive")
    if node.type == SCHEMA:
        return LabelPart(expand_marker(node), "schema")
    if node.type in GROUP_TYPES:
        return LabelPart(expand_marker(node), _GROUP_ROLES.get(node.type, "type_icon"))
    if node.type == ERROR_TYPE:
        return LabelPart("!", "error")
    if node.type in _OBJECT_ICONS:
        icon, role = _OBJECT_ICONS[node.type]
        return LabelPart(icon, role)
    return LabelPart(expand_marker(node), "tree_marker")


def _metadata_suffix(node: TreeNode) -> tuple[LabelPart, ...]:
    if node.type == SCHEMA and node.loaded and not node.children:
        return (LabelPart(" "), LabelPart(EMPTY_MARKER, "metadata"))
    if node.type == TABLE and isinstance(node.metadata, Mapping):
        row_count = node.metadata.get("row_count")
        if isinstance(row_count, int):
            return (LabelPart(" "), LabelPart(format_number(row_count), "metadata"))
    if node.type == COLUMN and isinstance(node.metadata, ColumnInfo) and node.metadata.primary_key:
        return (LabelPart(" "), LabelPart(PK_MARKER, "primary_key"))
    return ()


def database_label_decorator(node: TreeNode, filter_active: bool) -> RowLabel:
    """Decorate a database-tree row.

    Filtered result lists are flat, so they name the owning schema instead
    of showing row counts and key markers.
    """
    text_role = "label"
    if node.type == SCHEMA:
        text_role = "schema"
    elif node.type in GROUP_TYPES:
        text_role = "group"
    elif node.type == ERROR_TYPE:
        text_role = "error"
    if filter_active:
        schema = schema_for_node(node)
        suffix = (LabelPart(" "), LabelPart(f"({schema})", "metadata")) if schema and node.type != SCHEMA else ()
    else:
        suffix = _metadata_suffix(node)
    return RowLabel(_node_icon(node), node.label, text_role, suffix)


# Snapshot loader


class SnapshotCatalogLoader:
    """Children loader backed by a JSON catalog snapshot.

    The catalog looks like::

        {"active": "app",
         "databases": [{"name": "app",
                        "extensions": ["pgcrypto"],
                        "schemas": [{"name": "public",
                                     "tables": [{"name": "users", "row_count": 12,
                                                 "columns": [{"name": "id", "data_type": "integer",
                                                              "primary_key": true}],
                                                 "indexes": ["users_pkey"]}],
                                     "views": ["active_users"],
                                     "functions": ["touch"]}]}]}

    Objects may be plain names or objects with a ``name`` key.
    """

    def __init__(self, catalog: Mapping[str, Any]) -> None:
        databases = catalog.get("databases")
        if not isinstance(databases, list):
            raise LoaderError("catalog has no 'databases' list")
        self._databases: dict[str, Mapping[str, Any]] = {}
        for entry in databases:
            if isinstance(entry, Mapping) and entry.get("name"):
                self._databases[str(entry["name"])] = entry
            elif isinstance(entry, str):
                self._databases[entry] = {"name": entry}
        active = catalog.get("active")
        self.active = str(active) if active else next(iter(self._databases), "")

    @classmethod
    def from_path(cls, path: Path | str) -> SnapshotCatalogLoader:
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except OSError as exc:
            raise LoaderError(f"cannot read catalog {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise LoaderError(f"invalid catalog {path}: {exc}") from exc
        if not isinstance(data, Mapping):
            raise LoaderError(f"invalid catalog {path}: top level must be an object")
        return cls(data)

    @property
    def database_names(self) -> list[str]:
        return list(self._databases)

    def build_tree(self) -> TreeNode:
        return build_database_tree(self.database_names, self.active)

    def _database(self, name: str) -> Mapping[str, Any]:
        try:
            return self._databases[name]
        except KeyError:
            raise LoaderError(f"unknown database {name!r}") from None

    @staticmethod
    def _entries(entry: Mapping[str, Any], key: str, where: str) -> list[Any]:
        """Return the list stored under ``key``; missing keys read as empty."""
        value = entry.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            raise LoaderError(f"invalid catalog: {where} {key!r} must be a list, got {type(value).__name__}")
        return value

    def _schema(self, database: str, schema: str) -> Mapping[str, Any]:
        for entry in self._entries(self._database(database), "schemas", database):
            if isinstance(entry, Mapping) and entry.get("name") == schema:
                return entry
            if entry == schema:
                return {"name": schema}
        raise LoaderError(f"unknown schema {database}.{schema}")

    def _relation(self, database: str, schema: str, catalog_key: str, name: str) -> Mapping[str, Any]:
        for obj in self._entries(self._schema(database, schema), catalog_key, f"{database}.{schema}"):
            if isinstance(obj, Mapping) and obj.get("name") == name:
                return obj
            if obj == name:
                return {"name": name}
        raise LoaderError(f"unknown object {database}.{schema}.{name}")

    def load_children(self, node: TreeNode) -> list[ChildDescriptor]:
        """Describe the children of ``node`` from the snapshot.

        Malformed catalog values surface as :class:`LoaderError`.
        """
        logger.debug("loading children of %s", node.id)
        try:
            return self._load_children(node)
        except (TypeError, ValueError, AttributeError) as exc:
            raise LoaderError(f"invalid catalog entry for {node.id}: {exc}") from exc

    def _load_children(self, node: TreeNode) -> list[ChildDescriptor]:
        database = database_for_node(node)
        schema = schema_for_node(node)
        if node.type == DATABASE:
            return self._database_children(database)
        if node.type == SCHEMA:
            return self._schema_children(database, schema)
        if node.type == TYPE_GROUP:
            return self._type_group_children(database, schema)
        if node.type in RELATION_TYPES:
            return self._relation_children(node, database, schema)
        spec = GROUP_BY_TYPE.get(node.type)
        if spec is not None:
            return self._group_children(node, spec, database, schema)
        return []

    def _database_children(self, database: str) -> list[ChildDescriptor]:
        entry = self._database(database)
        descriptors: list[ChildDescriptor] = []
        extensions = self._entries(entry, "extensions", database)
        if extensions:
            descriptors.append(group_descriptor(EXTENSION_GROUP, database, len(extensions)))
        schemas = [_object_name(schema) for schema in self._entries(entry, "schemas", database)]
        descriptors.extend(schema_descriptors(database, schemas))
        return descriptors

    def _schema_children(self, database: str, schema: str) -> list[ChildDescriptor]:
        entry = self._schema(database, schema)
        scope = f"{database}.{schema}"
        descriptors: list[ChildDescriptor] = []
        for spec in SCHEMA_GROUPS:
            objects = self._entries(entry, spec.catalog_key, scope)
            if objects:
                descriptors.append(group_descriptor(spec, scope, len(objects)))
        type_count = sum(len(self._entries(entry, spec.catalog_key, scope)) for spec in TYPE_GROUPS)
        if type_count:
            descriptors.append(
                ChildDescriptor(id=f"types:{scope}", type=TYPE_GROUP, label=f"Types ({type_count})", selectable=False)
            )
        return descriptors

    def _type_group_children(self, database: str, schema: str) -> list[ChildDescriptor]:
        entry = self._schema(database, schema)
        scope = f"{database}.{schema}"
        descriptors: list[ChildDescriptor] = []
        for spec in TYPE_GROUPS:
            objects = self._entries(entry, spec.catalog_key, scope)
            if objects:
                descriptors.append(group_descriptor(spec, scope, len(objects)))
        return descriptors

    def _group_children(self, node: TreeNode, spec: GroupSpec, database: str, schema: str) -> list[ChildDescriptor]:
        if spec is EXTENSION_GROUP:
            return object_descriptors(spec, database, self._entries(self._database(database), "extensions", database))
        if spec in TABLE_GROUPS:
            table = nearest_ancestor_of_type(node, TABLE)
            if table is None:
                return []
            scope = f"{database}.{schema}.{table.label}"
            relation = self._relation(database, schema, "tables", table.label)
            return object_descriptors(spec, scope, self._entries(relation, spec.catalog_key, scope))
        scope = f"{database}.{schema}"
        return object_descriptors(spec, scope, self._entries(self._schema(database, schema), spec.catalog_key, scope))

    def _relation_children(self, node: TreeNode, database: str, schema: str) -> list[ChildDescriptor]:
        catalog_key = next(spec.catalog_key for spec in SCHEMA_GROUPS if spec.object_type == node.type)
        relation = self._relation(database, schema, catalog_key, node.label)
        scope = f"{database}.{schema}.{node.label}"
        columns = [
            ColumnInfo.from_dict(col)
            for col in self._entries(relation, "columns", scope)
            if isinstance(col, Mapping)
        ]
        descriptors = column_descriptors(scope, columns)
        if node.type == TABLE:
            for spec in TABLE_GROUPS:
                objects = self._entries(relation, spec.catalog_key, scope)
                if objects:
                    descriptors.append(group_descriptor(spec, scope, len(objects)))
        return descriptors
