"""JSON/JSONB inspector: value tree, paths, previews, and label decorator.

Scalar values are colored with Pygments' JSON lexer; the style is
configurable and independent of the UI theme.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import json
import re
from typing import Any

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import JsonLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from ..navigator.key_dispatch import Keymap
from ..tree_model.build import add_child, ancestors
from ..tree_model.rendering import DetailView, LabelDecorator, LabelPart, RowLabel, expand_marker
from ..tree_model.types import NodeVocabulary, TreeNode, new_root

OBJECT = "object"
ARRAY = "array"
STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
NULL = "null"

JSON_TYPES = frozenset({OBJECT, ARRAY, STRING, NUMBER, BOOLEAN, NULL})
SCALAR_TYPES = frozenset({STRING, NUMBER, BOOLEAN, NULL})

ROOT_KEY = "root"
ROOT_PATH = "$"
HIDDEN_ROOT_ID = "json"
DEFAULT_JSON_STYLE = "monokai"
PREVIEW_LIMIT = 50

JSON_TYPE_PREFIXES: dict[str, str] = {
    "o:": OBJECT,
    "object:": OBJECT,
    "a:": ARRAY,
    "array:": ARRAY,
    "str:": STRING,
    "string:": STRING,
    "n:": NUMBER,
    "num:": NUMBER,
    "number:": NUMBER,
    "b:": BOOLEAN,
    "bool:": BOOLEAN,
    "boolean:": BOOLEAN,
    "null:": NULL,
}

JSON_VOCABULARY = NodeVocabulary(
    name="json",
    searchable_types=JSON_TYPES,
    type_filters={name: frozenset({name}) for name in JSON_TYPES},
    type_prefixes=JSON_TYPE_PREFIXES,
    leaf_types=SCALAR_TYPES,
)

JSON_KEYMAP = Keymap(
    name="json",
    type_jumps={
        "]": (frozenset({ARRAY}), 1),
        "[": (frozenset({ARRAY}), -1),
        "}": (frozenset({OBJECT}), 1),
        "{": (frozenset({OBJECT}), -1),
        '"': (frozenset({STRING}), 1),
        "#": (frozenset({NUMBER}), 1),
    },
    array_type=ARRAY,
    quick_jump=True,
    marks=True,
    expand_collapse_all=True,
    detail_pane=True,
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class JsonEntry:
    """Metadata of one JSON node: its key within the parent and its value."""

    key: str | int | None
    value: Any


def json_type(value: Any) -> str:
    """Return the JSON type name of a decoded Python value."""
    if value is None:
        return NULL
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, Mapping):
        return OBJECT
    if isinstance(value, (list, tuple)):
        return ARRAY
    raise TypeError(f"not a JSON value: {type(value).__name__}")


def path_segment(key: str | int) -> str:
    """Render one path step: ``[0]`` for indexes, ``.name`` or ``["odd key"]`` for keys."""
    if isinstance(key, int):
        return f"[{key}]"
    if _IDENTIFIER_RE.match(key):
        return f".{key}"
    return f"[{json.dumps(key)}]"


def _build_node(key: str | int | None, label: str, value: Any, node_id: str) -> TreeNode:
    node_type = json_type(value)
    node = TreeNode(
        id=node_id,
        type=node_type,
        label=label,
        loaded=True,
        leaf=node_type in SCALAR_TYPES,
        metadata=JsonEntry(key, value),
    )
    # Iterative so deeply nested documents do not hit the recursion limit.
    stack = [node]
    while stack:
        parent = stack.pop()
        container = parent.metadata.value
        if isinstance(container, Mapping):
            items = [(str(k), str(k), v) for k, v in container.items()]
        elif isinstance(container, (list, tuple)):
            items = [(idx, f"[{idx}]", v) for idx, v in enumerate(container)]
        else:
            continue
        for child_key, child_label, child_value in items:
            child_type = json_type(child_value)
            child = TreeNode(
                id=parent.id + path_segment(child_key),
                type=child_type,
                label=child_label,
                loaded=True,
                leaf=child_type in SCALAR_TYPES,
                metadata=JsonEntry(child_key, child_value),
            )
            add_child(parent, child)
            stack.append(child)
    return node


def build_json_tree(value: Any) -> TreeNode:
    """Wrap ``value`` in a hidden root whose single child is the expanded ``root`` node."""
    root = new_root(node_id=HIDDEN_ROOT_ID)
    value_root = _build_node(None, ROOT_KEY, value, ROOT_PATH)
    value_root.expanded = not value_root.leaf
    add_child(root, value_root)
    return root


def path_keys(node: TreeNode) -> list[str | int]:
    """Return keys from the value root down to ``node``."""
    keys: list[str | int] = []
    for current in [node, *ancestors(node)]:
        entry = current.metadata
        if isinstance(entry, JsonEntry) and entry.key is not None:
            keys.append(entry.key)
    keys.reverse()
    return keys


def json_path(node: TreeNode) -> str:
    """Return the JSONPath of ``node`` (``$``, ``$.a``, ``$.a[0]``)."""
    return ROOT_PATH + "".join(path_segment(key) for key in path_keys(node))


def _postgres_element(key: str | int) -> str:
    text = str(key)
    if text == "" or any(ch in text for ch in ',{}"\\ ') or text.upper() == "NULL":
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def postgres_path(node: TreeNode) -> str:
    """Return the text-array path for PostgreSQL's ``#>`` operator (``{a,0,b}``)."""
    return "{" + ",".join(_postgres_element(key) for key in path_keys(node)) + "}"


def json_value(node: TreeNode) -> Any:
    entry = node.metadata
    return entry.value if isinstance(entry, JsonEntry) else None


def scalar_text(value: Any) -> str:
    """Return JSON text for a scalar (strings unquoted)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def value_preview(node: TreeNode, limit: int = PREVIEW_LIMIT) -> str:
    """Return the short value text shown after a key.

    Containers show their size; strings longer than ``limit`` are cut to
    ``limit - 3`` characters plus ``...``.
    """
    if node.type == OBJECT:
        return f"{{ {len(node.children)} properties }}"
    if node.type == ARRAY:
        return f"[ {len(node.children)} items ]"
    text = scalar_text(json_value(node))
    if node.type == STRING:
        if len(text) > limit:
            text = text[: limit - 3] + "..."
        return f'"{text}"'
    return text


def _printable(line: str) -> str:
    return "".join(ch if ch.isprintable() or ch == "\t" else f"\\u{ord(ch):04x}" for ch in line)


def detail_value_lines(node: TreeNode) -> list[str]:
    """Return the full value of ``node`` as plain lines.

    Strings are shown whole, containers as JSON indented by two spaces.
    """
    value = json_value(node)
    if node.type in (OBJECT, ARRAY):
        try:
            text = json.dumps(value, indent=2, ensure_ascii=False)
        except RecursionError:
            return [value_preview(node), "(nested too deeply to show in full)"]
    elif node.type == STRING:
        text = str(value)
    else:
        text = scalar_text(value)
    return [_printable(line) for line in text.splitlines()] or [""]


def json_detail(node: TreeNode) -> DetailView:
    """Detail pane content: JSONPath title, PostgreSQL path, then the full value."""
    return DetailView(
        title=json_path(node),
        lines=(f"postgres: {postgres_path(node)}", *detail_value_lines(node)),
    )


_FORMATTERS: dict[str, Terminal256Formatter] = {}


def normalize_json_style(style: str | None) -> str:
    """Return ``style`` if Pygments knows it, else the default style."""
    if not style:
        return DEFAULT_JSON_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_JSON_STYLE
    return style


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = Terminal256Formatter(style=style)
        _FORMATTERS[style] = formatter
    return formatter


def colorize_scalar(text: str, style: str = DEFAULT_JSON_STYLE) -> str:
    """Color one JSON scalar token with Pygments."""
    rendered = highlight(text, JsonLexer(), _formatter_for_style(normalize_json_style(style)))
    return rendered.rstrip("\n")


def make_json_decorator(style: str | None = DEFAULT_JSON_STYLE, *, color: bool = True) -> LabelDecorator:
    """Return a label decorator for JSON rows.

    With ``color`` off (or ``style`` set to ``None``) scalar values are left
    plain so ``--no-color`` output carries no escape sequences.
    """
    resolved_style = normalize_json_style(style) if style else None

    def decorate(node: TreeNode, filter_active: bool) -> RowLabel:
        if node.leaf:
            icon = LabelPart(" ")
        else:
            icon = LabelPart(expand_marker(node), "tree_marker")
        preview = value_preview(node)
        if node.type in (OBJECT, ARRAY):
            suffix = (LabelPart(f" {preview}", "json_meta"),)
        elif color and resolved_style:
            suffix = (LabelPart(": "), LabelPart(colorize_scalar(preview, resolved_style), ansi=True))
        else:
            suffix = (LabelPart(": "), LabelPart(preview))
        if filter_active:
            suffix = (*suffix, LabelPart(f"  {json_path(node)}", "metadata"))
        return RowLabel(icon, node.label, "json_key", suffix)

    return decorate


def json_label_decorator(node: TreeNode, filter_active: bool) -> RowLabel:
    """Decorator using the default Pygments style."""
    return _default_decorator(node, filter_active)


_default_decorator = make_json_decorator(DEFAULT_JSON_STYLE)
