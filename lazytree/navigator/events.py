"""Events emitted by a tree navigator and the callbacks that receive them."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..tree_model.types import TreeNode


@dataclass(frozen=True)
class NodeSelected:
    """The user activated a selectable node."""

    node: TreeNode


@dataclass(frozen=True)
class NodeToggled:
    """A node changed expand state; unloaded nodes expect children next."""

    node: TreeNode
    expanded: bool


@dataclass(frozen=True)
class NavigatorCallbacks:
    """Optional hooks invoked synchronously when events are emitted."""

    on_select: Callable[[NodeSelected], None] | None = None
    on_toggle: Callable[[NodeToggled], None] | None = None
