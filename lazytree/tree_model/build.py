"""Structural tree operations: ownership, toggling, lookup, and refresh."""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Iterator

from .types import ERROR_TYPE, ChildDescriptor, TreeNode


def add_child(parent: TreeNode, child: TreeNode) -> TreeNode:
    """Append ``child`` to ``parent`` and point its back-reference there.

    A child still owned by another node is detached from it first so a node
    is never owned twice. Adding a node under itself or its own descendant
    raises :class:`ValueError`.
    """
    if child is parent or is_ancestor_of(child, parent):
        raise ValueError(f"cannot add {child.id!r} under its own descendant {parent.id!r}")
    previous = child.parent
    if previous is not None and previous is not parent:
        previous.children = [node for node in previous.children if node is not child]
    child.parent = parent
    parent.children.append(child)
    return child


def can_toggle(node: TreeNode) -> bool:
    """Return whether ``node`` may flip its expanded state.

    Leaf nodes never expand. A loaded node with zero children has nothing to
    show, while an unloaded node may still receive children on expand.
    """
    if node.leaf:
        return False
    return bool(node.children) or not node.loaded


def toggle(node: TreeNode) -> bool:
    """Flip ``node.expanded`` when allowed and return whether it changed."""
    if not can_toggle(node):
        return False
    node.expanded = not node.expanded
    return True


def walk(root: TreeNode) -> Iterator[TreeNode]:
    """Yield ``root`` and every descendant in pre-order, ignoring expansion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_by_id(root: TreeNode, node_id: str) -> TreeNode | None:
    """Depth-first search for ``node_id`` below and including ``root``."""
    for node in walk(root):
        if node.id == node_id:
            return node
    return None


def refresh_children(node: TreeNode, new_children: Iterable[TreeNode]) -> None:
    """Replace the child sequence of ``node`` wholesale and mark it loaded.

    A node left without children is collapsed.
    """
    for old in node.children:
        old.parent = None
    node.children = []
    for child in new_children:
        add_child(node, child)
    node.loaded = True
    if not node.children and not node.is_root:
        node.expanded = False


def node_from_descriptor(descriptor: ChildDescriptor, leaf_types: Collection[str] = ()) -> TreeNode:
    """Build an unattached node; types listed in ``leaf_types`` are always leaves."""
    leaf = descriptor.leaf or descriptor.type in leaf_types
    return TreeNode(
        id=descriptor.id,
        type=descriptor.type,
        label=descriptor.label,
        metadata=descriptor.metadata,
        leaf=leaf,
        selectable=descriptor.selectable,
        loaded=leaf,
    )


def install_children(
    node: TreeNode,
    descriptors: Iterable[ChildDescriptor],
    make_node: Callable[[ChildDescriptor], TreeNode] = node_from_descriptor,
) -> list[TreeNode]:
    """Build nodes from loader descriptors and install them under ``node``."""
    children = [make_node(descriptor) for descriptor in descriptors]
    refresh_children(node, children)
    return children


def install_error(node: TreeNode, error: BaseException | str) -> TreeNode:
    """Install one synthetic error leaf describing a failed children load."""
    message = str(error) or error.__class__.__name__
    error_node = TreeNode(
        id=f"{node.id}#error",
        type=ERROR_TYPE,
        label=f"error: {message}",
        selectable=False,
        leaf=True,
        loaded=True,
    )
    refresh_children(node, [error_node])
    return error_node


def ancestors(node: TreeNode) -> list[TreeNode]:
    """Return ancestors from nearest parent up to and including the root."""
    chain: list[TreeNode] = []
    current = node.parent
    while current is not None:
        chain.append(current)
        current = current.parent
    return chain


def is_ancestor_of(node: TreeNode, other: TreeNode) -> bool:
    return any(candidate is node for candidate in ancestors(other))


def node_path(node: TreeNode) -> list[str]:
    """Return labels from the first rendered ancestor down to ``node``."""
    labels = [node.label] if not node.is_root else []
    labels.extend(ancestor.label for ancestor in ancestors(node) if not ancestor.is_root)
    labels.reverse()
    return labels


def nearest_ancestor_of_type(node: TreeNode, node_type: str) -> TreeNode | None:
    """Return ``node`` or its closest ancestor whose type is ``node_type``."""
    current: TreeNode | None = node
    while current is not None:
        if current.type == node_type:
            return current
        current = current.parent
    return None


def expand_path_to(node: TreeNode) -> list[TreeNode]:
    """Expand every collapsed ancestor of ``node`` and return those changed."""
    changed: list[TreeNode] = []
    for ancestor in ancestors(node):
        if ancestor.is_root or ancestor.expanded:
            continue
        ancestor.expanded = True
        changed.append(ancestor)
    changed.reverse()
    return changed


def expand_all(root: TreeNode) -> None:
    """Expand every loaded non-leaf node that has children."""
    for node in walk(root):
        if not node.leaf and node.children:
            node.expanded = True


def collapse_all(root: TreeNode) -> None:
    """Collapse every node below ``root``; the root itself stays expanded."""
    for node in walk(root):
        if node is root and node.is_root:
            continue
        node.expanded = False
