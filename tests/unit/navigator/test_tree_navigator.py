"""TreeNavigator behavior: toggling, selection, clicks, installs, and reveal."""

from __future__ import annotations

import unittest

from lazytree.browsers.database import DATABASE, DATABASE_VOCABULARY, SCHEMA, TABLE, ColumnInfo, column_descriptors
from lazytree.browsers.json_inspector import JSON_VOCABULARY, build_json_tree
from lazytree.navigator import NavigatorCallbacks, NodeSelected, NodeToggled, SearchMode, TreeNavigator
from lazytree.tree_model import ERROR_TYPE, ChildDescriptor, LoaderError, TreeNode, add_child, find_by_id, new_root

DOCUMENT = {"name": "x", "items": [{"id": 1}, {"id": 2}], "meta": {"count": 2}}


def _json_navigator(events: list | None = None, height: int = 3) -> TreeNavigator:
    callbacks = NavigatorCallbacks()
    if events is not None:
        callbacks = NavigatorCallbacks(on_select=events.append, on_toggle=events.append)
    return TreeNavigator(build_json_tree(DOCUMENT), JSON_VOCABULARY, visible_height=height, callbacks=callbacks)


def _database_navigator(events: list | None = None) -> TreeNavigator:
    root = new_root("Databases")
    db = add_child(root, TreeNode(id="db:app", type=DATABASE, label="app", loaded=True, expanded=True))
    schema = add_child(db, TreeNode(id="schema:app.public", type=SCHEMA, label="public", loaded=True, expanded=True))
    add_child(schema, TreeNode(id="table:app.public.users", type=TABLE, label="users"))
    callbacks = NavigatorCallbacks(on_toggle=events.append) if events is not None else None
    return TreeNavigator(root, DATABASE_VOCABULARY, callbacks=callbacks)


class _FailingLoader:
    def load_children(self, node: TreeNode):
        raise LoaderError("connection refused")


class _ColumnLoader:
    def load_children(self, node: TreeNode):
        return column_descriptors("app.public.users", [ColumnInfo("id", "integer", primary_key=True)])


def _ids(navigator: TreeNavigator) -> list[str]:
    return [node.id for node in navigator.active_nodes()]


class ToggleAndSelectTests(unittest.TestCase):
    def test_toggle_expands_and_emits_event(self) -> None:
        events: list = []
        navigator = _json_navigator(events)
        navigator.move_cursor(2)

        event = navigator.toggle_current()

        self.assertEqual(event, NodeToggled(navigator.current_node(), True))
        self.assertEqual(events, [event])
        self.assertEqual(_ids(navigator)[:5], ["$", "$.name", "$.items", "$.items[0]", "$.items[1]"])

    def test_toggle_on_leaf_is_ignored(self) -> None:
        events: list = []
        navigator = _json_navigator(events)
        navigator.move_cursor(1)
        self.assertIsNone(navigator.toggle_current())
        self.assertEqual(events, [])

    def test_collapse_or_parent(self) -> None:
        navigator = _json_navigator()
        navigator.move_cursor(2)
        navigator.toggle_current()
        navigator.move_cursor(1)
        self.assertIsNone(navigator.collapse_or_parent())
        self.assertEqual(navigator.current_node().id, "$.items")
        event = navigator.collapse_or_parent()
        self.assertFalse(event.expanded)
        self.assertEqual(navigator.current_node().id, "$.items")

    def test_collapse_all_relocates_to_visible_ancestor(self) -> None:
        navigator = _json_navigator()
        navigator.expand_and_navigate_to("$.items[1].id")
        navigator.collapse_all()
        self.assertEqual(_ids(navigator), ["$"])
        self.assertEqual(navigator.current_node().id, "$")

    def test_select_emits_only_for_selectable_nodes(self) -> None:
        events: list = []
        navigator = _json_navigator(events)
        event = navigator.select_current()
        self.assertEqual(event, NodeSelected(navigator.current_node()))
        self.assertEqual(events, [event])

        navigator.current_node().selectable = False
        self.assertIsNone(navigator.select_current())


class ClickAndRenderTests(unittest.TestCase):
    def test_first_click_moves_second_click_activates(self) -> None:
        navigator = _json_navigator()
        self.assertIsNone(navigator.click_row(1))
        self.assertEqual(navigator.current_node().id, "$.name")
        self.assertIsInstance(navigator.click_row(1), NodeSelected)

        navigator.click_row(2)
        event = navigator.click_row(2)
        self.assertIsInstance(event, NodeToggled)
        self.assertTrue(event.expanded)

    def test_click_outside_rows_is_ignored(self) -> None:
        navigator = _json_navigator()
        self.assertIsNone(navigator.click_row(10))
        self.assertEqual(navigator.viewport.cursor_index, 0)

    def test_render_returns_visible_window(self) -> None:
        navigator = _json_navigator(height=3)
        rows = navigator.render()
        self.assertEqual([row.node.id for row in rows], ["$", "$.name", "$.items"])
        self.assertEqual([row.is_selected for row in rows], [True, False, False])
        self.assertEqual(navigator.hidden_row_counts(), (0, 1))

        navigator.jump_bottom()
        self.assertEqual([row.node.id for row in navigator.render()], ["$.name", "$.items", "$.meta"])
        self.assertEqual(navigator.hidden_row_counts(), (1, 0))

    def test_render_in_filter_mode_carries_positions(self) -> None:
        navigator = _json_navigator()
        navigator.search.activate()
        navigator.search.append("cnt")
        rows = navigator.render()
        self.assertEqual([row.node.id for row in rows], ["$.meta.count"])
        self.assertEqual(rows[0].match_positions, (0, 3, 4))


class RevealTests(unittest.TestCase):
    def test_expand_and_navigate_to_reveals_hidden_node(self) -> None:
        events: list = []
        navigator = _json_navigator(events)
        self.assertTrue(navigator.expand_and_navigate_to("$.meta.count"))
        self.assertEqual(navigator.current_node().id, "$.meta.count")
        self.assertEqual([event.node.id for event in events], ["$.meta"])

    def test_expand_and_navigate_to_unknown_id(self) -> None:
        navigator = _json_navigator()
        self.assertFalse(navigator.expand_and_navigate_to("$.missing"))

    def test_reveal_outside_results_cancels_search(self) -> None:
        navigator = _json_navigator()
        navigator.search.activate()
        navigator.search.append("id")
        navigator.search.confirm()
        self.assertTrue(navigator.expand_and_navigate_to("$.meta.count"))
        self.assertIs(navigator.search_mode, SearchMode.OFF)

    def test_reveal_inside_results_keeps_search(self) -> None:
        navigator = _json_navigator()
        navigator.search.activate()
        navigator.search.append("id")
        navigator.search.confirm()
        self.assertTrue(navigator.expand_and_navigate_to("$.items[1].id"))
        self.assertIs(navigator.search_mode, SearchMode.APPLIED)
        self.assertEqual(navigator.viewport.cursor_index, 1)

    def test_mark_jump_while_searching_reveals_target(self) -> None:
        navigator = _json_navigator()
        navigator.expand_and_navigate_to("$.meta.count")
        navigator.set_mark("c")
        navigator.collapse_all()
        navigator.search.activate()
        navigator.search.append("name")
        navigator.search.confirm()

        self.assertTrue(navigator.jump_to_mark("c"))
        self.assertEqual(navigator.current_node().id, "$.meta.count")
        self.assertIs(navigator.search_mode, SearchMode.OFF)

    def test_mark_jump_expands_collapsed_ancestors_and_emits_toggles(self) -> None:
        events: list = []
        navigator = _json_navigator(events)
        navigator.expand_and_navigate_to("$.items[1].id")
        navigator.set_mark("x")
        navigator.collapse_all()
        events.clear()

        self.assertTrue(navigator.jump_to_mark("x"))

        self.assertEqual(navigator.current_node().id, "$.items[1].id")
        self.assertEqual([(event.node.id, event.expanded) for event in events], [("$", True), ("$.items", True), ("$.items[1]", True)])
        self.assertFalse(find_by_id(navigator.root, "$.items[0]").expanded)
        self.assertFalse(find_by_id(navigator.root, "$.meta").expanded)

    def test_stale_mark_is_a_no_op(self) -> None:
        navigator = _json_navigator()
        navigator.marks.marks["x"] = "$.gone"
        self.assertFalse(navigator.jump_to_mark("x"))
        self.assertFalse(navigator.jump_to_mark("y"))
        self.assertEqual(navigator.viewport.cursor_index, 0)

    def test_jump_to_type_and_prefix(self) -> None:
        navigator = _json_navigator()
        self.assertTrue(navigator.jump_to_type({"array"}))
        self.assertEqual(navigator.current_node().id, "$.items")
        self.assertFalse(navigator.jump_to_type({"array"}))
        self.assertTrue(navigator.jump_to_key_prefix("n"))
        self.assertEqual(navigator.current_node().id, "$.name")


class InstallTests(unittest.TestCase):
    def test_installing_children_keeps_cursor_on_node(self) -> None:
        navigator = _database_navigator()
        navigator.move_cursor(2)
        users = navigator.current_node()
        navigator.install_children(users.id, _ColumnLoader().load_children(users))
        self.assertIs(navigator.current_node(), users)
        self.assertTrue(users.loaded)

    def test_install_refilters_active_search(self) -> None:
        navigator = _database_navigator()
        navigator.search.activate()
        navigator.search.append("col:id")
        self.assertEqual(navigator.active_nodes(), [])

        users = find_by_id(navigator.root, "table:app.public.users")
        navigator.load_and_install(users, _ColumnLoader())

        self.assertEqual(_ids(navigator), ["column:app.public.users.id"])

    def test_install_for_unknown_node_is_ignored(self) -> None:
        navigator = _database_navigator()
        self.assertEqual(navigator.install_children("table:app.public.missing", []), [])

    def test_loader_failure_installs_error_node(self) -> None:
        navigator = _database_navigator()
        users = find_by_id(navigator.root, "table:app.public.users")
        with self.assertLogs("lazytree.navigator.navigator", level="WARNING") as logs:
            installed = navigator.load_and_install(users, _FailingLoader())

        self.assertEqual(len(installed), 1)
        self.assertEqual(installed[0].type, ERROR_TYPE)
        self.assertEqual(installed[0].label, "error: connection refused")
        self.assertIn("connection refused", logs.output[0])

    def test_toggle_on_unloaded_node_emits_for_lazy_loading(self) -> None:
        events: list = []
        navigator = _database_navigator(events)
        navigator.move_cursor(2)
        navigator.toggle_current()
        self.assertEqual(events, [NodeToggled(navigator.current_node(), True)])

        navigator.load_and_install(events[0].node, _ColumnLoader())
        self.assertEqual(_ids(navigator)[-1], "column:app.public.users.id")
        self.assertEqual(navigator.current_node().id, "table:app.public.users")

        navigator.move_cursor(1)
        self.assertIsNone(navigator.select_current())

    def test_empty_install_collapses_expanded_node(self) -> None:
        navigator = _database_navigator()
        navigator.move_cursor(2)
        users = navigator.current_node()
        navigator.toggle_current()
        self.assertTrue(users.expanded)

        navigator.install_children(users, [])

        self.assertFalse(users.expanded)
        self.assertIs(navigator.current_node(), users)
        self.assertIsNone(navigator.collapse_or_parent())
        self.assertEqual(navigator.current_node().id, "schema:app.public")

    def test_install_applies_vocabulary_leaf_types(self) -> None:
        navigator = _database_navigator()
        users = find_by_id(navigator.root, "table:app.public.users")
        installed = navigator.install_children(users, [ChildDescriptor(id="column:app.public.users.id", type="column", label="id")])
        self.assertTrue(installed[0].leaf)


class CursorInvariantTests(unittest.TestCase):
    def test_cursor_stays_in_range_across_mixed_operations(self) -> None:
        navigator = _json_navigator(height=2)
        search = navigator.search
        steps = [
            navigator.expand_all,
            navigator.jump_bottom,
            lambda: navigator.move_cursor(5),
            navigator.collapse_all,
            navigator.page_down,
            search.activate,
            lambda: search.append("i"),
            navigator.jump_bottom,
            lambda: search.append("d"),
            lambda: search.append("zz"),
            lambda: navigator.move_cursor(-3),
            search.backspace,
            search.backspace,
            search.confirm,
            navigator.jump_bottom,
            lambda: navigator.expand_and_navigate_to("$.meta.count"),
            navigator.half_page_up,
            lambda: navigator.scroll(10),
            navigator.collapse_or_parent,
            navigator.toggle_current,
            navigator.collapse_all,
            lambda: navigator.move_cursor(-10),
            search.activate,
            lambda: search.append("nothing"),
            search.cancel,
            navigator.jump_bottom,
        ]
        for step in steps:
            step()
            total = len(navigator.active_nodes())
            cursor = navigator.viewport.cursor_index
            self.assertGreaterEqual(cursor, 0)
            self.assertLess(cursor, max(1, total))
            scroll = navigator.viewport.scroll_offset
            self.assertLessEqual(scroll, max(0, total - navigator.viewport.visible_height))
