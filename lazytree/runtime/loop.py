"""Main interactive event loop for the terminal UI.

Reads key tokens, routes them through the navigator key dispatch, and
repaints when anything changed. Feature logic lives in the navigator.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
import logging
import os
import shutil

from ..input.keys import read_key
from ..navigator.events import NodeSelected
from ..navigator.key_dispatch import KeyBindings, handle_key
from ..navigator.navigator import TreeNavigator
from ..navigator.search_mode import SearchMode
from .screen import ScreenContext, compose_screen
from .terminal import TerminalController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeLoopOptions:
    """Loop tuning and the keys that end the session."""

    poll_ms: int = 120
    quit_keys: frozenset[str] = frozenset({"q", "CTRL_C"})
    exit_on_select: bool = True


def _frame_signature(navigator: TreeNavigator) -> tuple[object, ...]:
    viewport = navigator.viewport
    return (
        viewport.cursor_index,
        viewport.scroll_offset,
        navigator.search.mode,
        navigator.search.query_text,
        len(navigator.active_nodes()),
        navigator.detail_visible,
    )


def run_main_loop(
    navigator: TreeNavigator,
    bindings: KeyBindings,
    context: ScreenContext,
    terminal: TerminalController,
    stdin_fd: int,
    options: RuntimeLoopOptions | None = None,
    *,
    read: Callable[[int, int | None], str] = read_key,
    terminal_size: Callable[[], os.terminal_size] = lambda: shutil.get_terminal_size((80, 24)),
) -> NodeSelected | None:
    """Run until a quit key (or a selection, with ``exit_on_select``).

    Returns the selection event that ended the loop, if any.
    """
    opts = options or RuntimeLoopOptions()
    selected: list[NodeSelected] = []
    previous_select = navigator.callbacks.on_select

    def remember_selection(event: NodeSelected) -> None:
        selected.append(event)
        if previous_select is not None:
            previous_select(event)

    navigator.callbacks = replace(navigator.callbacks, on_select=remember_selection)
    last_size: tuple[int, int] | None = None
    dirty = True

    with terminal.raw_mode():
        while True:
            size = terminal_size()
            if (size.columns, size.lines) != last_size:
                last_size = (size.columns, size.lines)
                dirty = True
            if dirty:
                terminal.draw(compose_screen(navigator, context, size.columns, size.lines))
                dirty = False

            key = read(stdin_fd, opts.poll_ms)
            if key == "":
                continue
            composing = navigator.search_mode is SearchMode.COMPOSING
            if key == "CTRL_C" or (key in opts.quit_keys and not composing and not bindings.pending):
                logger.debug("quit on %s", key)
                break

            before = _frame_signature(navigator)
            handled = handle_key(navigator, key, bindings)
            if selected and opts.exit_on_select:
                break
            dirty = handled or _frame_signature(navigator) != before

    return selected[-1] if selected else None
