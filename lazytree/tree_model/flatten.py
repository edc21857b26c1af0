"""Visible-row projection of an owned tree."""

from __future__ import annotations

from .types import TreeNode


def flatten(root: TreeNode) -> list[TreeNode]:
    """Return nodes visible under ``root`` in depth-first pre-order.

    The root itself is never emitted and its children are always visited.
    Any other node contributes its children only while expanded. Stored
    child order is preserved exactly.
    """
    visible: list[TreeNode] = []
    stack = list(reversed(root.children))
    while stack:
        node = stack.pop()
        visible.append(node)
        if node.expanded and node.children:
            stack.extend(reversed(node.children))
    return visible


def index_of(nodes: list[TreeNode], target: TreeNode | None) -> int | None:
    """Return the position of ``target`` in ``nodes`` by identity."""
    if target is None:
        return None
    for idx, node in enumerate(nodes):
        if node is target:
            return idx
    return None
