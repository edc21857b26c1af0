"""Command-line front door for lazytree.

``lazytree json FILE`` inspects a JSON document; ``lazytree db CATALOG``
browses a database catalog snapshot. Both run the interactive navigator on
a TTY, or print the rendered tree with ``--render``/``--nopager``.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import shutil
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

import colorlog

from .browsers.database import (
    DATABASE,
    DATABASE_KEYMAP,
    DATABASE_VOCABULARY,
    RELATION_TYPES,
    SnapshotCatalogLoader,
    database_label_decorator,
)
from .browsers.json_inspector import (
    JSON_KEYMAP,
    JSON_VOCABULARY,
    build_json_tree,
    json_detail,
    json_path,
    make_json_decorator,
    normalize_json_style,
)
from .navigator.events import NavigatorCallbacks, NodeToggled
from .navigator.key_dispatch import KeyBindings, Keymap
from .navigator.navigator import TreeNavigator
from .runtime.config import load_json_style, load_theme_name, save_json_style, save_theme_name
from .runtime.screen import CHROME_ROWS, TREE_TOP_ROW, ScreenContext, compose_screen, full_detail_rows
from .tree_model.loading import LoaderError
from .tree_model.types import TreeNode
from .ui_theme import available_theme_names, normalize_theme_name, resolve_theme

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s:%(levelname)s:%(name)s: %(message)s"
LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "bold_red",
}


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _isatty(stream: Any) -> bool:
    try:
        return os.isatty(stream.fileno())
    except (AttributeError, OSError, ValueError):
        return False


def setup_logging(*, verbose: bool = False, log_file: str | None = None, interactive: bool = False) -> None:
    """Configure root logging.

    Interactive sessions own the terminal, so they only log to ``log_file``.
    One-shot output logs to stderr through a colored handler.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    level = logging.DEBUG if verbose else logging.WARNING
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)
    if not interactive:
        stream_handler = colorlog.StreamHandler()
        stream_handler.setFormatter(colorlog.ColoredFormatter(f"%(log_color)s{LOG_FORMAT}", log_colors=LOG_COLORS))
        root.addHandler(stream_handler)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    root.setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--query", default="", help="Apply a search query on start (e.g. 't:users', '!plan').")
    common.add_argument("--goto", metavar="ID", default=None, help="Reveal and select the node with this id.")
    common.add_argument("--theme", default=None, help=f"UI theme name ({', '.join(available_theme_names())}).")
    common.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    common.add_argument("--nopager", action="store_true", help="Print the tree directly without interactive paging.")
    common.add_argument("--render", action="store_true", help="Same as --nopager.")
    common.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for printed output (default: terminal width).",
    )
    common.add_argument(
        "--height",
        type=_positive_int,
        default=None,
        help="Tree rows for printed output (default: all rows).",
    )
    common.add_argument("--save-settings", action="store_true", help="Persist --theme/--style to the config file.")
    common.add_argument("--log-file", default=None, help="Write log records to this file.")
    common.add_argument("-v", "--verbose", action="store_true", help="Log debug messages.")

    parser = argparse.ArgumentParser(
        prog="lazytree",
        description="Navigate and fuzzy-filter JSON documents and database catalogs as trees.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    json_parser = sub.add_parser("json", parents=[common], help="Inspect a JSON document.")
    json_parser.add_argument("source", help="JSON file, or '-' for stdin.")
    json_parser.add_argument("--style", default=None, help="Pygments style for JSON values (default: monokai).")
    json_parser.add_argument("--expand-all", action="store_true", help="Start with every container expanded.")
    json_parser.add_argument(
        "--preview",
        action="store_true",
        help="Start with the preview pane (full value of the current node) open.",
    )

    db_parser = sub.add_parser("db", parents=[common], help="Browse a database catalog snapshot.")
    db_parser.add_argument("catalog", help="Catalog snapshot JSON file.")
    db_parser.add_argument(
        "--preload-columns",
        action="store_true",
        help="Load columns of every table and view up front so they are searchable.",
    )
    return parser


def read_json_source(source: str) -> Any:
    """Decode JSON from ``source`` (a path or ``-``), exiting with a message on failure."""
    try:
        if source == "-":
            text = sys.stdin.read()
        else:
            text = Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"Cannot read {source}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid JSON in {source}: {exc}") from exc


def preload_database(navigator: TreeNavigator, loader: SnapshotCatalogLoader, *, columns: bool = False) -> None:
    """Load schemas, groups, and objects of the active database.

    Relations keep their columns unloaded unless ``columns`` is set.
    """
    targets = [node for node in navigator.root.children if node.type == DATABASE and node.label == loader.active]
    pending = list(targets)
    while pending:
        node = pending.pop()
        if not node.loaded:
            navigator.load_and_install(node, loader)
        for child in node.children:
            if child.leaf or child.loaded:
                continue
            if child.type in RELATION_TYPES and not columns:
                continue
            pending.append(child)
    for node in targets:
        node.expanded = True


def _loading_toggle_handler(
    loader: SnapshotCatalogLoader,
    navigator_ref: list[TreeNavigator],
):
    def on_toggle(event: NodeToggled) -> None:
        if event.expanded and not event.node.loaded and navigator_ref:
            navigator_ref[0].load_and_install(event.node, loader)

    return on_toggle


def _apply_start_options(navigator: TreeNavigator, args: argparse.Namespace) -> None:
    if args.goto:
        if not navigator.expand_and_navigate_to(args.goto):
            logger.warning("node %s not found", args.goto)
    if args.query:
        navigator.search.activate()
        navigator.search.append(args.query)
        navigator.search.confirm()


def render_tree_text(navigator: TreeNavigator, context: ScreenContext, width: int, height: int | None) -> str:
    """Render the navigator once, as printed by ``--render``."""
    rows = height if height is not None else max(1, len(navigator.active_nodes()))
    detail_rows = full_detail_rows(navigator, context, width)
    lines = compose_screen(navigator, context, width, rows + CHROME_ROWS + detail_rows, detail_rows=detail_rows)
    out: list[str] = []
    for line in lines:
        out.append(line.rstrip())
        if "\033" in line:
            out.append("\033[0m")
        out.append("\n")
    return "".join(out)


def _session_for_json(args: argparse.Namespace, *, color: bool, theme_name: str):
    value = read_json_source(args.source)
    root = build_json_tree(value)
    navigator = TreeNavigator(root, JSON_VOCABULARY)
    if args.expand_all:
        navigator.expand_all()
    if args.preview:
        navigator.detail_visible = True
    style = args.style or load_json_style()
    style = normalize_json_style(style)
    if args.save_settings and args.style:
        save_json_style(style)
    title = "stdin" if args.source == "-" else Path(args.source).name
    context = ScreenContext(
        title=title,
        decorator=make_json_decorator(style, color=color),
        theme=resolve_theme(theme_name, no_color=not color),
        describe_node=json_path,
        help_text="│ / search  P preview  q quit",
        detail=json_detail,
    )
    return navigator, JSON_KEYMAP, context, json_path


def _session_for_db(args: argparse.Namespace, *, color: bool, theme_name: str):
    try:
        loader = SnapshotCatalogLoader.from_path(args.catalog)
    except LoaderError as exc:
        raise SystemExit(str(exc)) from exc
    navigator_ref: list[TreeNavigator] = []
    navigator = TreeNavigator(
        loader.build_tree(),
        DATABASE_VOCABULARY,
        callbacks=NavigatorCallbacks(on_toggle=_loading_toggle_handler(loader, navigator_ref)),
    )
    navigator_ref.append(navigator)
    preload_database(navigator, loader, columns=args.preload_columns)
    context = ScreenContext(
        title="Databases",
        decorator=database_label_decorator,
        theme=resolve_theme(theme_name, no_color=not color),
    )
    return navigator, DATABASE_KEYMAP, context, (lambda node: node.id)


def run_session(
    navigator: TreeNavigator,
    keymap: Keymap,
    context: ScreenContext,
) -> TreeNode | None:
    """Run the interactive loop on the controlling terminal."""
    from .runtime.loop import run_main_loop
    from .runtime.terminal import TerminalController

    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    event = run_main_loop(navigator, KeyBindings(keymap, tree_top_row=TREE_TOP_ROW), context, terminal, stdin_fd)
    return event.node if event is not None else None


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch the requested view."""
    args = build_parser().parse_args(argv)
    printed = args.nopager or args.render or not _isatty(sys.stdin) or not _isatty(sys.stdout)
    if args.command == "json" and args.source == "-":
        printed = True
    setup_logging(verbose=args.verbose, log_file=args.log_file, interactive=not printed)

    theme_name = normalize_theme_name(args.theme or load_theme_name())
    if args.save_settings and args.theme:
        save_theme_name(theme_name)
    color = not args.no_color and (not printed or _isatty(sys.stdout))

    if args.command == "json":
        navigator, keymap, context, describe = _session_for_json(args, color=color, theme_name=theme_name)
    else:
        navigator, keymap, context, describe = _session_for_db(args, color=color, theme_name=theme_name)
    _apply_start_options(navigator, args)

    if printed:
        width = args.max_cols if args.max_cols is not None else max(1, shutil.get_terminal_size((80, 24)).columns)
        context = replace(context, help_text="")
        sys.stdout.write(render_tree_text(navigator, context, width, args.height))
        return

    selected = run_session(navigator, keymap, context)
    if selected is not None:
        sys.stdout.write(describe(selected) + "\n")


if __name__ == "__main__":
    main()
