"""Call-site vocabularies, builders, descriptors and decorators for the two tree views."""

from .database import (
    DATABASE_KEYMAP,
    DATABASE_VOCABULARY,
    ColumnInfo,
    SnapshotCatalogLoader,
    build_database_tree,
    column_descriptors,
    database_for_node,
    database_label_decorator,
    format_number,
    object_descriptors,
    parse_node_id,
    schema_descriptors,
    schema_for_node,
)
from .json_inspector import (
    JSON_KEYMAP,
    JSON_TYPE_PREFIXES,
    JSON_VOCABULARY,
    build_json_tree,
    json_label_decorator,
    json_path,
    make_json_decorator,
    postgres_path,
    value_preview,
)

__all__ = [
    "DATABASE_KEYMAP",
    "DATABASE_VOCABULARY",
    "JSON_KEYMAP",
    "JSON_TYPE_PREFIXES",
    "JSON_VOCABULARY",
    "ColumnInfo",
    "SnapshotCatalogLoader",
    "build_database_tree",
    "build_json_tree",
    "column_descriptors",
    "database_for_node",
    "database_label_decorator",
    "format_number",
    "json_label_decorator",
    "json_path",
    "make_json_decorator",
    "object_descriptors",
    "parse_node_id",
    "postgres_path",
    "schema_descriptors",
    "schema_for_node",
    "value_preview",
]
