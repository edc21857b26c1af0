"""Main-loop tests with a scripted key reader and a recording terminal."""

from __future__ import annotations

import contextlib
import os
import unittest

from lazytree.browsers.json_inspector import JSON_KEYMAP, JSON_VOCABULARY, build_json_tree, make_json_decorator
from lazytree.navigator import KeyBindings, NavigatorCallbacks, NodeSelected, SearchMode, TreeNavigator
from lazytree.runtime.loop import RuntimeLoopOptions, run_main_loop
from lazytree.runtime.screen import TREE_TOP_ROW, ScreenContext
from lazytree.ui_theme import PLAIN_THEME

DOCUMENT = {"name": "x", "items": [1, 2], "meta": {"count": 2}}


class _RecordingTerminal:
    def __init__(self) -> None:
        self.frames: list[list[str]] = []
        self.raw_entered = 0
        self.raw_exited = 0

    def draw(self, lines: list[str]) -> None:
        self.frames.append(list(lines))

    @contextlib.contextmanager
    def raw_mode(self):
        self.raw_entered += 1
        try:
            yield
        finally:
            self.raw_exited += 1


def _scripted(keys: list[str]):
    pending = list(keys)

    def read(_fd: int, _timeout_ms: int | None) -> str:
        return pending.pop(0) if pending else "CTRL_C"

    return read


def _run(navigator: TreeNavigator, keys: list[str], options: RuntimeLoopOptions | None = None):
    terminal = _RecordingTerminal()
    context = ScreenContext(title="doc.json", decorator=make_json_decorator(color=False), theme=PLAIN_THEME)
    result = run_main_loop(
        navigator,
        KeyBindings(JSON_KEYMAP, tree_top_row=TREE_TOP_ROW),
        context,
        terminal,
        0,
        options,
        read=_scripted(keys),
        terminal_size=lambda: os.terminal_size((40, 10)),
    )
    return result, terminal


def _navigator(callbacks: NavigatorCallbacks | None = None) -> TreeNavigator:
    return TreeNavigator(build_json_tree(DOCUMENT), JSON_VOCABULARY, callbacks=callbacks)


class RuntimeLoopTests(unittest.TestCase):
    def test_enter_on_selectable_row_ends_loop_with_selection(self) -> None:
        navigator = _navigator()
        result, terminal = _run(navigator, ["j", "ENTER"])

        self.assertIsInstance(result, NodeSelected)
        self.assertEqual(result.node.id, "$.name")
        self.assertEqual((terminal.raw_entered, terminal.raw_exited), (1, 1))
        self.assertEqual(len(terminal.frames), 2)
        self.assertEqual(len(terminal.frames[0]), 10)

    def test_existing_select_callback_still_runs(self) -> None:
        seen: list[NodeSelected] = []
        navigator = _navigator(NavigatorCallbacks(on_select=seen.append))
        result, _terminal = _run(navigator, ["ENTER"])
        self.assertEqual(seen, [result])

    def test_selection_keeps_running_without_exit_on_select(self) -> None:
        navigator = _navigator()
        result, _terminal = _run(navigator, ["ENTER", "j", "q"], RuntimeLoopOptions(exit_on_select=False))
        self.assertEqual(result.node.id, "$")
        self.assertEqual(navigator.current_node().id, "$.name")

    def test_q_is_typed_while_composing_and_quits_afterwards(self) -> None:
        navigator = _navigator()
        result, _terminal = _run(navigator, ["/", "q", "ENTER", "q"])
        self.assertIsNone(result)
        self.assertIs(navigator.search_mode, SearchMode.APPLIED)
        self.assertEqual(navigator.search.query_text, "q")

    def test_ctrl_c_quits_while_composing(self) -> None:
        navigator = _navigator()
        result, _terminal = _run(navigator, ["/", "n", "CTRL_C", "j"])
        self.assertIsNone(result)
        self.assertEqual(navigator.search.query_text, "n")

    def test_q_after_mark_prefix_names_the_mark(self) -> None:
        navigator = _navigator()
        _run(navigator, ["m", "q", "q"])
        self.assertEqual(navigator.marks.get("q"), "$")

    def test_timeouts_do_not_redraw(self) -> None:
        navigator = _navigator()
        _result, terminal = _run(navigator, ["", "", "q"])
        self.assertEqual(len(terminal.frames), 1)

    def test_unhandled_key_does_not_redraw(self) -> None:
        navigator = _navigator()
        _result, terminal = _run(navigator, ["F5", "q"])
        self.assertEqual(len(terminal.frames), 1)
