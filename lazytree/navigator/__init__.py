"""Tree navigator: viewport, search mode, jumps, and key routing."""

from .events import NavigatorCallbacks, NodeSelected, NodeToggled
from .jumps import (
    MarkRegistry,
    is_mark_key,
    next_array_item_index,
    next_index_of_type,
    next_index_with_key_prefix,
    next_sibling_index,
    parent_index,
    prev_array_item_index,
    prev_index_of_type,
    prev_sibling_index,
)
from .key_dispatch import KeyBindings, Keymap, handle_key
from .navigator import RenderedRow, TreeNavigator
from .search_mode import SearchController, SearchMode
from .viewport import Viewport

__all__ = [
    "KeyBindings",
    "Keymap",
    "MarkRegistry",
    "NavigatorCallbacks",
    "NodeSelected",
    "NodeToggled",
    "RenderedRow",
    "SearchController",
    "SearchMode",
    "TreeNavigator",
    "Viewport",
    "handle_key",
    "is_mark_key",
    "next_array_item_index",
    "next_index_of_type",
    "next_index_with_key_prefix",
    "next_sibling_index",
    "parent_index",
    "prev_array_item_index",
    "prev_index_of_type",
    "prev_sibling_index",
]
