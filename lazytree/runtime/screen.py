"""Screen composition for one navigator: title, tree rows, search bar, status.

Everything here returns plain lists of ANSI lines so the same code drives
the interactive loop and ``--render`` one-shot output.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..ansi import build_status_line, display_width, pad_ansi_line, truncate_ansi_line, wrap_plain_line
from ..navigator.navigator import TreeNavigator
from ..navigator.search_mode import SearchMode
from ..search.query import parse_search_query, type_filter_label
from ..tree_model.rendering import DetailProvider, DetailView, LabelDecorator, format_tree_row
from ..tree_model.types import TreeNode
from ..ui_theme import UITheme

# Title row, search/scroll row, and status row.
CHROME_ROWS = 3
TREE_TOP_ROW = 2
DETAIL_MIN_ROWS = 4


@dataclass(frozen=True)
class ScreenContext:
    """Static inputs for composing a screen."""

    title: str
    decorator: LabelDecorator
    theme: UITheme
    describe_node: Callable[[TreeNode], str] = lambda node: node.id
    help_text: str = "│ / search  q quit"
    detail: DetailProvider | None = None


def tree_rows_for_height(term_lines: int) -> int:
    return max(1, term_lines - CHROME_ROWS)


def detail_rows_for_height(term_lines: int) -> int:
    """Rows given to the detail pane: a quarter of the screen, at least four."""
    return max(DETAIL_MIN_ROWS, term_lines // 4)


def _paint(theme: UITheme, role_value: str, text: str) -> str:
    if not role_value or not text:
        return text
    return f"{role_value}{text}{theme.reset}"


def format_search_bar(navigator: TreeNavigator, theme: UITheme) -> str:
    """Return the search line for the current mode, or ``""`` when search is off."""
    search = navigator.search
    if search.mode is SearchMode.OFF:
        return ""
    if search.mode is SearchMode.APPLIED:
        return _paint(theme, theme.search_prompt, "/") + _paint(theme, theme.search_query, search.status()[1:])

    parts = [_paint(theme, theme.search_prompt, "Search: ")]
    query = parse_search_query(search.query_text, navigator.vocabulary.type_prefixes)
    if query.negate:
        parts.append(_paint(theme, theme.search_negate, "NOT "))
    if query.type_filter:
        parts.append(_paint(theme, theme.search_tag, f"[{type_filter_label(query.type_filter)}] "))
    parts.append(_paint(theme, theme.search_query, search.query_text))
    if not search.query_text:
        examples = " ".join(list(navigator.vocabulary.type_prefixes)[:4])
        parts.append(_paint(theme, theme.search_hint, f"type to filter ({examples} ! to negate)"))
    else:
        parts.append(_paint(theme, theme.search_hint, f"  ({len(search.results)})"))
    return "".join(parts)


def format_scroll_indicator(navigator: TreeNavigator, theme: UITheme) -> str:
    """Return ``↑n ↓m`` for rows scrolled out of view (either side omitted when zero)."""
    above, below = navigator.hidden_row_counts()
    parts: list[str] = []
    if above:
        parts.append(f"↑{above}")
    if below:
        parts.append(f"↓{below}")
    return _paint(theme, theme.scroll_indicator, " ".join(parts))


def _detail_view(navigator: TreeNavigator, context: ScreenContext) -> DetailView | None:
    if not navigator.detail_visible or context.detail is None:
        return None
    current = navigator.current_node()
    if current is None:
        return None
    return context.detail(current)


def _wrap_detail_body(view: DetailView, width: int) -> list[str]:
    body: list[str] = []
    for line in view.lines:
        body.extend(wrap_plain_line(line, width))
    return body


def format_detail_pane(view: DetailView, theme: UITheme, width: int, rows: int) -> list[str]:
    """Return exactly ``rows`` lines: a ``Preview:`` header and the wrapped body.

    A body that does not fit ends with a ``… N more lines`` row.
    """
    if rows <= 0:
        return []
    width = max(1, width)
    lines = [truncate_ansi_line(_paint(theme, theme.group, f"Preview: {view.title}"), width)]
    body = _wrap_detail_body(view, width)
    room = rows - 1
    if len(body) > room and room > 0:
        shown = body[: room - 1]
        hidden = len(body) - len(shown)
        lines.extend(shown)
        lines.append(truncate_ansi_line(_paint(theme, theme.search_hint, f"… {hidden} more lines"), width))
    else:
        lines.extend(body[:room])
    while len(lines) < rows:
        lines.append("")
    return lines


def full_detail_rows(navigator: TreeNavigator, context: ScreenContext, width: int) -> int:
    """Rows needed to show the current node's detail without truncation (0 when hidden)."""
    view = _detail_view(navigator, context)
    if view is None:
        return 0
    return 1 + len(_wrap_detail_body(view, max(1, width)))


def _detail_lines(
    navigator: TreeNavigator,
    context: ScreenContext,
    width: int,
    height: int,
    detail_rows: int | None,
) -> list[str]:
    view = _detail_view(navigator, context)
    if view is None:
        return []
    rows = detail_rows_for_height(height) if detail_rows is None else detail_rows
    rows = min(rows, height - CHROME_ROWS - 1)
    if rows < 2:
        return []
    return format_detail_pane(view, context.theme, width, rows)

def compose_screen(
    navigator: TreeNavigator,
    context: ScreenContext,
    width: int,
    height: int,
    detail_rows: int | None = None,
) -> list[str]:
    """Return exactly ``height`` display lines for ``navigator``.

    When the navigator's detail pane is visible and ``context`` has a detail
    provider, the pane sits between the tree and the search bar and takes
    ``detail_rows`` rows (a quarter of the screen by default).
    """
    theme = context.theme
    width = max(1, width)
    detail_lines = _detail_lines(navigator, context, width, height, detail_rows)
    tree_height = max(1, height - CHROME_ROWS - len(detail_lines))
    rows = navigator.render(tree_height)

    lines = [truncate_ansi_line(_paint(theme, theme.group, context.title), width)]
    if rows:
        for row in rows:
            lines.append(
                format_tree_row(
                    row.node,
                    selected=row.is_selected,
                    positions=row.match_positions,
                    decorator=context.decorator,
                    filter_active=navigator.filter_active,
                    width=width,
                    theme=theme,
                )
            )
    else:
        empty = "No matches" if navigator.filter_active else "(empty)"
        lines.append(_paint(theme, theme.empty_state, empty))
    while len(lines) < 1 + tree_height:
        lines.append("")
    lines.extend(detail_lines)

    search_bar = format_search_bar(navigator, theme)
    indicator = format_scroll_indicator(navigator, theme)
    if indicator:
        bar_width = max(1, width - display_width(indicator) - 1)
        search_bar = pad_ansi_line(truncate_ansi_line(search_bar, bar_width), bar_width) + " " + indicator
    lines.append(truncate_ansi_line(search_bar, width))

    current = navigator.current_node()
    left = context.describe_node(current) if current is not None else ""
    lines.append(build_status_line(left, width, context.help_text))
    return lines[:height] if height > 0 else lines
