"""Tree-model datatypes, structural operations, flattening, and row formatting.

Defines the owned ``TreeNode`` used by both navigator call sites and the
pure ``flatten`` projection of currently visible rows.
"""

from __future__ import annotations

from .build import (
    add_child,
    ancestors,
    can_toggle,
    collapse_all,
    expand_all,
    expand_path_to,
    find_by_id,
    install_children,
    install_error,
    is_ancestor_of,
    nearest_ancestor_of_type,
    node_from_descriptor,
    node_path,
    refresh_children,
    toggle,
    walk,
)
from .flatten import flatten, index_of
from .loading import ChildrenLoader, LoaderError
from .rendering import (
    DetailProvider,
    DetailView,
    LabelDecorator,
    LabelPart,
    RowLabel,
    default_decorator,
    format_tree_row,
    highlight_positions,
)
from .types import ERROR_TYPE, ROOT_TYPE, ChildDescriptor, NodeVocabulary, TreeNode, new_root

__all__ = [
    "ERROR_TYPE",
    "ROOT_TYPE",
    "ChildDescriptor",
    "ChildrenLoader",
    "DetailProvider",
    "DetailView",
    "LabelDecorator",
    "LabelPart",
    "LoaderError",
    "NodeVocabulary",
    "RowLabel",
    "TreeNode",
    "add_child",
    "ancestors",
    "can_toggle",
    "collapse_all",
    "default_decorator",
    "expand_all",
    "expand_path_to",
    "find_by_id",
    "flatten",
    "format_tree_row",
    "highlight_positions",
    "index_of",
    "install_children",
    "install_error",
    "is_ancestor_of",
    "nearest_ancestor_of_type",
    "new_root",
    "node_from_descriptor",
    "node_path",
    "refresh_children",
    "toggle",
    "walk",
]
