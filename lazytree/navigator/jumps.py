"""Index navigation helpers over a flattened node list.

Each helper takes the currently visible ``nodes`` and the selected index
and returns the target index, or ``None`` when there is nowhere to go.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass, field

from ..search.fuzzy import prefix_matches
from ..tree_model.build import find_by_id
from ..tree_model.flatten import index_of
from ..tree_model.types import TreeNode


def _valid(nodes: list[TreeNode], selected_idx: int) -> bool:
    return bool(nodes) and 0 <= selected_idx < len(nodes)


def parent_index(nodes: list[TreeNode], selected_idx: int) -> int | None:
    """Return the index of the selected node's parent.

    The root is never rendered, so a top-level node has no parent row.
    """
    if not _valid(nodes, selected_idx):
        return None
    parent = nodes[selected_idx].parent
    if parent is None or parent.is_root:
        return None
    return index_of(nodes, parent)


def _sibling_index(nodes: list[TreeNode], selected_idx: int, step: int) -> int | None:
    if not _valid(nodes, selected_idx):
        return None
    current = nodes[selected_idx]
    depth = current.depth
    idx = selected_idx + step
    while 0 <= idx < len(nodes):
        node = nodes[idx]
        node_depth = node.depth
        if node_depth < depth:
            return None
        if node_depth == depth and node.parent is current.parent:
            return idx
        idx += step
    return None


def next_sibling_index(nodes: list[TreeNode], selected_idx: int) -> int | None:
    """Return next row at the same depth under the same parent."""
    return _sibling_index(nodes, selected_idx, 1)


def prev_sibling_index(nodes: list[TreeNode], selected_idx: int) -> int | None:
    return _sibling_index(nodes, selected_idx, -1)


def next_index_of_type(
    nodes: list[TreeNode],
    selected_idx: int,
    node_types: Collection[str],
    direction: int = 1,
) -> int | None:
    """Return next row whose type is in ``node_types``; stops at the list edge."""
    if not nodes or direction == 0:
        return None
    step = 1 if direction > 0 else -1
    idx = selected_idx + step
    while 0 <= idx < len(nodes):
        if nodes[idx].type in node_types:
            return idx
        idx += step
    return None


def prev_index_of_type(nodes: list[TreeNode], selected_idx: int, node_types: Collection[str]) -> int | None:
    return next_index_of_type(nodes, selected_idx, node_types, direction=-1)


def next_index_with_key_prefix(
    nodes: list[TreeNode],
    selected_idx: int,
    prefix: str,
    key_for: Callable[[TreeNode], str] = lambda node: node.label,
) -> int | None:
    """Return next row whose key starts with ``prefix``, wrapping around.

    Unlike structural type jumps this quick jump wraps past the last row back
    to the top, and may land on the selected row itself when it is the only
    candidate.
    """
    if not nodes or not prefix:
        return None
    total = len(nodes)
    start = selected_idx if 0 <= selected_idx < total else -1
    for offset in range(1, total + 1):
        idx = (start + offset) % total
        if prefix_matches(prefix, key_for(nodes[idx])):
            return idx
    return None


def _array_item_index(
    nodes: list[TreeNode],
    selected_idx: int,
    array_type: str,
    step: int,
) -> int | None:
    if not _valid(nodes, selected_idx):
        return None
    parent = nodes[selected_idx].parent
    if parent is None or parent.type != array_type:
        return None
    return _sibling_index(nodes, selected_idx, step)


def next_array_item_index(nodes: list[TreeNode], selected_idx: int, array_type: str) -> int | None:
    """Return next item of the array containing the selected row."""
    return _array_item_index(nodes, selected_idx, array_type, 1)


def prev_array_item_index(nodes: list[TreeNode], selected_idx: int, array_type: str) -> int | None:
    return _array_item_index(nodes, selected_idx, array_type, -1)


def is_mark_key(key: str) -> bool:
    """Return whether key is a valid single-character mark identifier."""
    return len(key) == 1 and key.isprintable() and not key.isspace()


@dataclass
class MarkRegistry:
    """Single-key bookmarks pointing at node ids."""

    marks: dict[str, str] = field(default_factory=dict)

    def set(self, key: str, node: TreeNode | None) -> bool:
        """Bind ``key`` to ``node`` (overwriting); invalid keys are ignored."""
        if node is None or not is_mark_key(key):
            return False
        self.marks[key] = node.id
        return True

    def get(self, key: str) -> str | None:
        return self.marks.get(key)

    def clear(self) -> None:
        self.marks.clear()

    def resolve(self, root: TreeNode, key: str) -> TreeNode | None:
        """Return the marked node, or ``None`` when unset or no longer in the tree."""
        node_id = self.marks.get(key)
        if node_id is None:
            return None
        return find_by_id(root, node_id)
