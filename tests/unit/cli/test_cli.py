"""CLI tests for printed output, start options, and interactive hand-off.

Verifies how ``lazytree.cli.main`` builds each view and what it prints.
"""

from __future__ import annotations

import io
import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import colorlog

from lazytree import cli
from lazytree.browsers.database import DATABASE_VOCABULARY, SnapshotCatalogLoader
from lazytree.navigator import TreeNavigator
from lazytree.runtime import config
from lazytree.tree_model import find_by_id

CATALOG = {
    "active": "app",
    "databases": [
        {
            "name": "app",
            "extensions": ["pgcrypto"],
            "schemas": [
                {
                    "name": "public",
                    "tables": [
                        {
                            "name": "users",
                            "row_count": 12,
                            "columns": [{"name": "id", "data_type": "integer", "primary_key": True}],
                        }
                    ],
                    "functions": ["touch"],
                },
                {"name": "empty"},
            ],
        },
        {"name": "other"},
    ],
}


class _CliTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        patches = [
            mock.patch("lazytree.runtime.config.CONFIG_PATH", self.tmp / "config.json"),
            mock.patch("lazytree.cli.setup_logging"),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def write(self, name: str, data: object) -> str:
        path = self.tmp / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    def run_main(self, argv: list[str]) -> str:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout):
            cli.main(argv)
        return stdout.getvalue()


class JsonRenderTests(_CliTestCase):
    def test_render_prints_tree_title_and_status(self) -> None:
        path = self.write("doc.json", {"name": "Ada", "tags": [1, 2]})
        output = self.run_main(["json", path, "--render", "--no-color", "--max-cols", "60"])
        self.assertEqual(
            output,
            'doc.json\n▾ root { 2 properties }\n    name: "Ada"\n  ▸ tags [ 2 items ]\n\n$\n',
        )

    def test_expand_all_and_query(self) -> None:
        path = self.write("doc.json", {"name": "Ada", "tags": [1, 2]})
        output = self.run_main(["json", path, "--render", "--no-color", "--expand-all", "--query", "a:"])
        lines = output.splitlines()
        self.assertEqual(lines[1].rstrip(), "▾ tags [ 2 items ]  $.tags")
        self.assertEqual(lines[2], "/a: (1/1)")
        self.assertEqual(lines[3], "$.tags")

    def test_goto_reveals_node(self) -> None:
        path = self.write("doc.json", {"a": {"b": {"c": 1}}})
        output = self.run_main(["json", path, "--nopager", "--no-color", "--goto", "$.a.b.c"])
        self.assertIn("      c: 1", output)
        self.assertEqual(output.splitlines()[-1], "$.a.b.c")

    def test_height_limits_rows_and_adds_scroll_indicator(self) -> None:
        path = self.write("doc.json", list(range(10)))
        output = self.run_main(["json", path, "--render", "--no-color", "--height", "2", "--max-cols", "30"])
        lines = output.splitlines()
        self.assertEqual(len(lines), 5)
        self.assertTrue(lines[3].endswith("↓9"))

    def test_preview_prints_full_value_of_current_node(self) -> None:
        path = self.write("doc.json", {"text": "z" * 90, "n": 1})
        output = self.run_main(
            ["json", path, "--render", "--no-color", "--preview", "--goto", "$.text", "--max-cols", "40"]
        )
        lines = output.splitlines()
        start = lines.index("Preview: $.text")
        self.assertEqual(lines[start + 1 : start + 5], ["postgres: {text}", "z" * 40, "z" * 40, "z" * 10])
        self.assertEqual(lines[-1], "$.text")

    def test_stdin_source(self) -> None:
        with mock.patch("sys.stdin", io.StringIO('{"k": true}')):
            output = self.run_main(["json", "-", "--no-color"])
        self.assertTrue(output.startswith("stdin\n"))
        self.assertIn("k: true", output)

    def test_invalid_json_exits_with_message(self) -> None:
        path = self.tmp / "bad.json"
        path.write_text("{oops", encoding="utf-8")
        with self.assertRaises(SystemExit) as ctx:
            self.run_main(["json", str(path), "--render"])
        self.assertIn("Invalid JSON", str(ctx.exception))

    def test_missing_file_exits_with_message(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self.run_main(["json", str(self.tmp / "nope.json"), "--render"])
        self.assertIn("Cannot read", str(ctx.exception))

    def test_save_settings_persists_theme_and_style(self) -> None:
        path = self.write("doc.json", {})
        self.run_main(["json", path, "--render", "--theme", "ocean", "--style", "native", "--save-settings"])
        self.assertEqual(config.load_theme_name(), "ocean")
        self.assertEqual(config.load_json_style(), "native")


class DatabaseRenderTests(_CliTestCase):
    def test_render_preloads_active_database(self) -> None:
        path = self.write("catalog.json", CATALOG)
        output = self.run_main(["db", path, "--render", "--no-color", "--max-cols", "40"])
        self.assertEqual(
            [line.rstrip() for line in output.splitlines()],
            ["Databases", "● app", "  ▸ Extensions (1)", "  ▸ public", "  ▸ empty ∅", "○ other", "", "db:app"],
        )

    def test_query_lists_flat_results_with_schema(self) -> None:
        path = self.write("catalog.json", CATALOG)
        output = self.run_main(["db", path, "--render", "--no-color", "--query", "t:users"])
        lines = output.splitlines()
        self.assertEqual(lines[1].rstrip(), "▦ users (public)")
        self.assertEqual(lines[2], "/t:users (1/1)")
        self.assertEqual(lines[3], "table:app.public.users")

    def test_columns_are_searchable_only_when_preloaded(self) -> None:
        path = self.write("catalog.json", CATALOG)
        without = self.run_main(["db", path, "--render", "--no-color", "--query", "col:id"])
        self.assertEqual(without.splitlines()[1], "No matches")

        with_columns = self.run_main(["db", path, "--render", "--no-color", "--preload-columns", "--query", "col:id"])
        self.assertEqual(with_columns.splitlines()[1].rstrip(), "• id (integer) (public)")

    def test_bad_catalog_exits(self) -> None:
        path = self.write("catalog.json", {"databases": "nope"})
        with self.assertRaises(SystemExit) as ctx:
            self.run_main(["db", path, "--render"])
        self.assertIn("databases", str(ctx.exception))

    def test_preload_database_leaves_relations_unloaded(self) -> None:
        loader = SnapshotCatalogLoader(CATALOG)
        navigator = TreeNavigator(loader.build_tree(), DATABASE_VOCABULARY)
        cli.preload_database(navigator, loader)
        users = find_by_id(navigator.root, "table:app.public.users")
        self.assertEqual(users.id, "table:app.public.users")
        self.assertFalse(users.loaded)
        self.assertFalse(navigator.root.children[1].loaded)


class InteractiveHandOffTests(_CliTestCase):
    def test_interactive_session_prints_selected_path(self) -> None:
        path = self.write("doc.json", {"name": "Ada"})
        with (
            mock.patch("lazytree.cli._isatty", return_value=True),
            mock.patch("lazytree.cli.run_session") as run_session,
        ):
            run_session.side_effect = lambda navigator, keymap, context: navigator.root.children[0].children[0]
            output = self.run_main(["json", path])
        run_session.assert_called_once()
        self.assertEqual(output, "$.name\n")

    def test_interactive_session_without_selection_prints_nothing(self) -> None:
        path = self.write("catalog.json", CATALOG)
        with (
            mock.patch("lazytree.cli._isatty", return_value=True),
            mock.patch("lazytree.cli.run_session", return_value=None),
        ):
            output = self.run_main(["db", path])
        self.assertEqual(output, "")


class ArgumentTests(unittest.TestCase):
    def test_positive_int_rejects_zero(self) -> None:
        parser = cli.build_parser()
        with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit):
            parser.parse_args(["json", "x.json", "--height", "0"])

    def test_subcommand_is_required(self) -> None:
        with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit):
            cli.build_parser().parse_args([])


class SetupLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        root = logging.getLogger()
        saved_handlers = list(root.handlers)
        saved_level = root.level

        def restore() -> None:
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)

        self.addCleanup(restore)

    def test_interactive_logs_only_to_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "lazytree.log"
            cli.setup_logging(verbose=True, log_file=str(log_path), interactive=True)
            root = logging.getLogger()
            self.assertEqual(root.level, logging.DEBUG)
            self.assertEqual([type(h) for h in root.handlers], [logging.FileHandler])
            logging.getLogger("lazytree.test").debug("hello")
            root.handlers[0].flush()
            self.assertIn("hello", log_path.read_text(encoding="utf-8"))
            root.handlers[0].close()

    def test_interactive_without_file_installs_null_handler(self) -> None:
        cli.setup_logging(interactive=True)
        root = logging.getLogger()
        self.assertEqual([type(h) for h in root.handlers], [logging.NullHandler])
        self.assertEqual(root.level, logging.WARNING)

    def test_printed_mode_logs_to_colored_stream(self) -> None:
        cli.setup_logging(interactive=False)
        handler = logging.getLogger().handlers[0]
        self.assertIsInstance(handler.formatter, colorlog.ColoredFormatter)
