"""Children-loader interface used to populate nodes on expand."""

from __future__ import annotations

from typing import Protocol

from .types import ChildDescriptor, TreeNode


class LoaderError(Exception):
    """Raised by a children loader when a node's children cannot be fetched."""


class ChildrenLoader(Protocol):
    """Anything that can list the children of a node."""

    def load_children(self, node: TreeNode) -> list[ChildDescriptor]:
        """Return descriptors for the children of ``node`` or raise :class:`LoaderError`."""
        ...
