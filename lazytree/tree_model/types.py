"""Tree node datatypes shared by both navigator call sites."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

ROOT_TYPE = "root"
ERROR_TYPE = "error"


@dataclass(eq=False)
class TreeNode:
    """One node in an owned tree.

    ``children`` is exclusively owned by this node. ``parent`` is a
    non-owning back-reference used only for upward walks; the root has no
    parent. Nodes compare by identity.
    """

    id: str
    type: str
    label: str
    children: list[TreeNode] = field(default_factory=list)
    parent: TreeNode | None = field(default=None, repr=False)
    expanded: bool = False
    loaded: bool = False
    selectable: bool = True
    leaf: bool = False
    metadata: Any = None

    @property
    def depth(self) -> int:
        """Return distance from the root (root is ``0``)."""
        depth = 0
        current = self.parent
        while current is not None:
            depth += 1
            current = current.parent
        return depth

    @property
    def is_root(self) -> bool:
        return self.type == ROOT_TYPE


@dataclass(frozen=True)
class ChildDescriptor:
    """One child record supplied by an external children loader."""

    id: str
    type: str
    label: str
    metadata: Any = None
    leaf: bool = False
    selectable: bool = True


@dataclass(frozen=True)
class NodeVocabulary:
    """Call-site node vocabulary consumed by the generic engine.

    ``type_filters`` maps a type-filter name (as produced by the query
    parser) to the node types that satisfy it. ``type_prefixes`` maps
    lowercase query prefixes such as ``"t:"`` to type-filter names.
    """

    name: str
    searchable_types: frozenset[str]
    type_filters: Mapping[str, frozenset[str]]
    type_prefixes: Mapping[str, str]
    leaf_types: frozenset[str] = frozenset()

    def is_searchable(self, node: TreeNode) -> bool:
        return node.type in self.searchable_types

    def types_for_filter(self, type_filter: str) -> frozenset[str]:
        """Return node types accepted by ``type_filter`` (empty if unknown)."""
        return self.type_filters.get(type_filter, frozenset())


def new_root(label: str = "", node_id: str = "root") -> TreeNode:
    """Create an expanded, loaded, non-selectable root container."""
    return TreeNode(
        id=node_id,
        type=ROOT_TYPE,
        label=label,
        expanded=True,
        loaded=True,
        selectable=False,
    )
