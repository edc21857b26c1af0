"""Key routing for a tree navigator, per search mode.

``COMPOSING`` sends printable keys to the query. ``OFF`` and ``APPLIED`` use
the navigation bindings of the call site's :class:`Keymap`; pending
two-key prefixes (``m<key>``, ``'<key>``, ``]a``/``[a``) are tracked in
:class:`KeyBindings`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from ..input.key_registry import KeyComboBinding, KeyComboRegistry
from ..input.keys import parse_mouse_col_row
from ..tree_model.types import TreeNode
from .jumps import is_mark_key
from .navigator import TreeNavigator
from .search_mode import SearchMode

MARK_SET_KEY = "m"
MARK_JUMP_KEY = "'"
ARRAY_ITEM_KEY = "a"
NEXT_BRACKET = "]"
PREV_BRACKET = "["


def _label_key(node: TreeNode) -> str:
    return node.label


@dataclass(frozen=True)
class Keymap:
    """Call-site specific bindings layered over the shared navigation keys.

    ``type_jumps`` maps a key to ``(node types, direction)``. ``array_type``
    enables ``]a``/``[a`` item jumps inside arrays of that type. With
    ``quick_jump`` every unbound lowercase letter jumps to the next row whose
    key starts with it.
    ``detail_pane`` binds ``P`` to toggle the preview pane.
    """

    name: str = "tree"
    type_jumps: Mapping[str, tuple[frozenset[str], int]] = field(default_factory=dict)
    array_type: str = ""
    quick_jump: bool = False
    marks: bool = False
    expand_collapse_all: bool = False
    detail_pane: bool = False
    key_for: Callable[[TreeNode], str] = _label_key
    wheel_step: int = 3


@dataclass
class KeyBindings:
    """Keymap plus the pending-prefix state carried between keys.

    ``tree_top_row`` is the 1-based screen row of the first tree row, used
    to translate mouse clicks.
    """

    keymap: Keymap = field(default_factory=Keymap)
    tree_top_row: int = 1
    pending: str = ""
    pending_origin: int | None = None

    def clear_pending(self) -> None:
        self.pending = ""
        self.pending_origin = None


def _handle_mouse(navigator: TreeNavigator, key: str, bindings: KeyBindings) -> bool:
    if key.startswith("MOUSE_WHEEL_UP:"):
        navigator.scroll(-bindings.keymap.wheel_step)
        return True
    if key.startswith("MOUSE_WHEEL_DOWN:"):
        navigator.scroll(bindings.keymap.wheel_step)
        return True
    if key.startswith("MOUSE_LEFT_DOWN:"):
        _col, row = parse_mouse_col_row(key)
        if row is not None:
            navigator.click_row(row - bindings.tree_top_row)
        return True
    return key.startswith("MOUSE")


def _handle_composing_key(navigator: TreeNavigator, key: str) -> bool:
    search = navigator.search
    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("ESC",), search.cancel),
        KeyComboBinding(("ENTER",), search.confirm),
        KeyComboBinding(("BACKSPACE",), search.backspace),
        KeyComboBinding(("CTRL_U",), search.clear_query),
        KeyComboBinding(("UP", "CTRL_P"), lambda: navigator.move_cursor(-1)),
        KeyComboBinding(("DOWN", "CTRL_N"), lambda: navigator.move_cursor(1)),
    )
    if registry.dispatch(key) is not None:
        return True
    if len(key) == 1 and key.isprintable():
        search.append(key)
        return True
    return False


def _handle_pending(navigator: TreeNavigator, key: str, bindings: KeyBindings) -> bool:
    """Resolve a pending prefix; return ``True`` when ``key`` was consumed."""
    pending = bindings.pending
    origin = bindings.pending_origin
    bindings.clear_pending()
    if pending == MARK_SET_KEY:
        if is_mark_key(key):
            navigator.set_mark(key)
        return True
    if pending == MARK_JUMP_KEY:
        if is_mark_key(key):
            navigator.jump_to_mark(key)
        return True
    if pending in {NEXT_BRACKET, PREV_BRACKET} and key == ARRAY_ITEM_KEY:
        # ``]a`` replaces the type jump ``]`` already taken with an item jump.
        if origin is not None:
            navigator.viewport.set_cursor(origin, len(navigator.active_nodes()))
        direction = 1 if pending == NEXT_BRACKET else -1
        navigator.jump_to_array_item(bindings.keymap.array_type, direction)
        return True
    return False


def _navigation_registry(navigator: TreeNavigator, bindings: KeyBindings) -> KeyComboRegistry:
    keymap = bindings.keymap

    def begin_pending(prefix: str) -> Callable[[], bool]:
        def action() -> bool:
            bindings.pending = prefix
            bindings.pending_origin = None
            return True

        return action

    def type_jump(node_types: frozenset[str], direction: int, key: str) -> Callable[[], bool]:
        def action() -> bool:
            origin = navigator.viewport.cursor_index
            navigator.jump_to_type(node_types, direction)
            if keymap.array_type and key in {NEXT_BRACKET, PREV_BRACKET}:
                bindings.pending = key
                bindings.pending_origin = origin
            return True

        return action

    registry = KeyComboRegistry().register_bindings(
        KeyComboBinding(("j", "DOWN"), lambda: navigator.move_cursor(1)),
        KeyComboBinding(("k", "UP"), lambda: navigator.move_cursor(-1)),
        KeyComboBinding(("g", "HOME"), navigator.jump_top),
        KeyComboBinding(("G", "END"), navigator.jump_bottom),
        KeyComboBinding(("CTRL_F", "PAGE_DOWN"), navigator.page_down),
        KeyComboBinding(("CTRL_B", "PAGE_UP"), navigator.page_up),
        KeyComboBinding(("CTRL_D",), navigator.half_page_down),
        KeyComboBinding(("CTRL_U",), navigator.half_page_up),
        KeyComboBinding(("l", " ", "RIGHT"), navigator.toggle_current),
        KeyComboBinding(("h", "LEFT"), navigator.collapse_or_parent),
        KeyComboBinding(("ENTER",), navigator.select_current),
        KeyComboBinding(("J",), lambda: navigator.jump_to_sibling(1)),
        KeyComboBinding(("K",), lambda: navigator.jump_to_sibling(-1)),
        KeyComboBinding(("p",), navigator.jump_to_parent),
        KeyComboBinding(("/",), navigator.search.activate),
    )
    if keymap.expand_collapse_all:
        registry.register_bindings(
            KeyComboBinding(("E",), navigator.expand_all),
            KeyComboBinding(("C",), navigator.collapse_all),
        )
    if keymap.detail_pane:
        registry.register_binding(KeyComboBinding(("P",), navigator.toggle_detail))
    if keymap.marks:
        registry.register_bindings(
            KeyComboBinding((MARK_SET_KEY,), begin_pending(MARK_SET_KEY)),
            KeyComboBinding((MARK_JUMP_KEY,), begin_pending(MARK_JUMP_KEY)),
        )
    for key, (node_types, direction) in keymap.type_jumps.items():
        registry.register_binding(KeyComboBinding((key,), type_jump(node_types, direction, key)))
    if navigator.search_mode is SearchMode.APPLIED:
        registry.register_bindings(
            KeyComboBinding(("ESC",), navigator.search.cancel),
            KeyComboBinding(("n",), lambda: navigator.move_cursor(1)),
            KeyComboBinding(("N",), lambda: navigator.move_cursor(-1)),
        )
    return registry


def handle_key(navigator: TreeNavigator, key: str, bindings: KeyBindings) -> bool:
    """Route one key token to ``navigator``; return whether it was consumed."""
    if not key:
        return False
    if key.startswith("MOUSE"):
        bindings.clear_pending()
        return _handle_mouse(navigator, key, bindings)

    if navigator.search_mode is SearchMode.COMPOSING:
        bindings.clear_pending()
        return _handle_composing_key(navigator, key)

    if bindings.pending and _handle_pending(navigator, key, bindings):
        return True

    if _navigation_registry(navigator, bindings).dispatch(key) is not None:
        return True

    keymap = bindings.keymap
    if keymap.quick_jump and len(key) == 1 and "a" <= key <= "z":
        navigator.jump_to_key_prefix(key, keymap.key_for)
        return True
    return False
