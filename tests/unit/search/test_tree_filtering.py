"""Whole-tree filter tests, including negated queries and collapsed subtrees."""

from __future__ import annotations

import unittest

from lazytree.browsers.database import (
    DATABASE,
    DATABASE_VOCABULARY,
    FUNCTION,
    SCHEMA,
    TABLE,
)
from lazytree.search import SearchQuery, filter_tree, parse_search_query, should_include
from lazytree.tree_model import TreeNode, add_child, new_root


def _catalog_tree() -> TreeNode:
    root = new_root("Databases")
    db = add_child(root, TreeNode(id="db:app", type=DATABASE, label="app", loaded=True))
    schema = add_child(db, TreeNode(id="schema:app.public", type=SCHEMA, label="public", loaded=True))
    tables = add_child(
        schema,
        TreeNode(id="tables:app.public", type="table_group", label="Tables (3)", loaded=True, selectable=False),
    )
    for name in ("plan", "plan_check_run", "users"):
        add_child(tables, TreeNode(id=f"table:app.public.{name}", type=TABLE, label=name))
    functions = add_child(
        schema,
        TreeNode(id="functions:app.public", type="function_group", label="Functions (1)", loaded=True),
    )
    add_child(functions, TreeNode(id="function:app.public.get_plan", type=FUNCTION, label="get_plan", leaf=True))
    return root


def _labels(root: TreeNode, text: str, node_type: str | None = None) -> list[str]:
    matches = filter_tree(root, parse_search_query(text), DATABASE_VOCABULARY)
    return [m.node.label for m in matches if node_type is None or m.node.type == node_type]


class FilterTreeTests(unittest.TestCase):
    def test_plain_pattern_finds_nodes_under_collapsed_ancestors(self) -> None:
        root = _catalog_tree()
        self.assertEqual(_labels(root, "plan"), ["plan", "plan_check_run", "get_plan"])

    def test_type_prefix_limits_results(self) -> None:
        root = _catalog_tree()
        self.assertEqual(_labels(root, "t:plan"), ["plan", "plan_check_run"])

    def test_negated_pattern_keeps_non_matching_tables(self) -> None:
        root = _catalog_tree()
        self.assertEqual(_labels(root, "!plan", TABLE), ["users"])
        self.assertIn("public", _labels(root, "!plan"))

    def test_negated_type_filter_keeps_other_types(self) -> None:
        root = _catalog_tree()
        labels = _labels(root, "!t:plan")
        self.assertIn("users", labels)
        self.assertIn("get_plan", labels)
        self.assertIn("public", labels)
        self.assertNotIn("plan", labels)

    def test_groups_and_databases_are_never_results(self) -> None:
        root = _catalog_tree()
        labels = _labels(root, "")
        self.assertNotIn("app", labels)
        self.assertNotIn("Tables (3)", labels)

    def test_results_carry_positions_only_for_plain_queries(self) -> None:
        root = _catalog_tree()
        plain = filter_tree(root, parse_search_query("pcr"), DATABASE_VOCABULARY)
        self.assertEqual([m.positions for m in plain], [(0, 5, 11)])
        negated = filter_tree(root, parse_search_query("!pcr"), DATABASE_VOCABULARY)
        self.assertTrue(all(m.positions == () for m in negated))


class ShouldIncludeTests(unittest.TestCase):
    def test_plain_query_needs_type_and_pattern(self) -> None:
        query = SearchQuery("x", False, "table")
        self.assertTrue(should_include(True, True, query))
        self.assertFalse(should_include(True, False, query))
        self.assertFalse(should_include(False, True, query))

    def test_negated_query_with_type_filter(self) -> None:
        query = SearchQuery("x", True, "table")
        self.assertTrue(should_include(False, True, query))
        self.assertTrue(should_include(True, False, query))
        self.assertFalse(should_include(True, True, query))

    def test_negated_query_without_type_filter(self) -> None:
        query = SearchQuery("x", True, "")
        self.assertTrue(should_include(True, False, query))
        self.assertFalse(should_include(True, True, query))
