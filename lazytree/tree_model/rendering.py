"""Formatting helpers for tree rows.

Call sites describe a row with a :class:`RowLabel` built by their label
decorator; this module turns it into one ANSI-styled line.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ..ansi import pad_ansi_line, selected_with_ansi, truncate_ansi_line
from ..ui_theme import DEFAULT_THEME, UITheme, theme_color
from .types import TreeNode

EXPANDED_MARKER = "▾"
COLLAPSED_MARKER = "▸"
LEAF_MARKER = "•"


@dataclass(frozen=True)
class LabelPart:
    """A run of row text tagged with a theme role.

    ``ansi`` marks text that already carries its own escape sequences (for
    example Pygments output) and must not be wrapped in a role color.
    """

    text: str
    role: str = ""
    ansi: bool = False


@dataclass(frozen=True)
class RowLabel:
    """Decorated pieces of one row: icon, label text, and trailing parts."""

    icon: LabelPart
    text: str
    text_role: str = "label"
    suffix: tuple[LabelPart, ...] = ()


LabelDecorator = Callable[[TreeNode, bool], RowLabel]


@dataclass(frozen=True)
class DetailView:
    """Full description of one node for the detail pane: a title and plain lines."""

    title: str
    lines: tuple[str, ...] = ()


DetailProvider = Callable[[TreeNode], DetailView | None]


def expand_marker(node: TreeNode) -> str:
    return EXPANDED_MARKER if node.expanded else COLLAPSED_MARKER


def default_decorator(node: TreeNode, filter_active: bool) -> RowLabel:
    """Plain decorator: expand marker for branches, bullet for leaves."""
    if node.leaf:
        return RowLabel(LabelPart(LEAF_MARKER, "tree_marker"), node.label)
    return RowLabel(LabelPart(expand_marker(node), "tree_marker"), node.label)


def highlight_positions(text: str, positions: Iterable[int], on: str, off: str) -> str:
    """Wrap characters of ``text`` at ``positions`` in ``on``/``off`` codes."""
    marked = set(positions)
    if not marked or not on:
        return text
    out: list[str] = []
    for idx, ch in enumerate(text):
        if idx in marked:
            out.append(f"{on}{ch}{off}")
        else:
            out.append(ch)
    return "".join(out)


def _render_part(part: LabelPart, theme: UITheme) -> str:
    if part.ansi:
        return part.text
    color = theme_color(theme, part.role)
    if not color or not part.text:
        return part.text
    return f"{color}{part.text}{theme.reset}"


def row_indent(node: TreeNode, filter_active: bool) -> str:
    """Return leading indentation; filtered result lists are shown flat."""
    if filter_active:
        return ""
    return "  " * max(0, node.depth - 1)


def format_tree_row(
    node: TreeNode,
    *,
    selected: bool = False,
    positions: Iterable[int] | None = None,
    decorator: LabelDecorator = default_decorator,
    filter_active: bool = False,
    width: int | None = None,
    theme: UITheme | None = None,
) -> str:
    """Render one tree row as ANSI-styled display text.

    Match highlights are dropped on the selected row, whose reverse-video
    styling already draws attention.
    """
    active_theme = theme or DEFAULT_THEME
    label = decorator(node, filter_active)
    text_color = theme_color(active_theme, label.text_role)
    reset = active_theme.reset
    highlight_reset = f"{reset}{text_color}" if text_color else reset
    label_text = label.text
    if positions and not selected:
        label_text = highlight_positions(label_text, positions, active_theme.match_highlight, highlight_reset)
    if text_color:
        label_text = f"{text_color}{label_text}{reset}"

    parts = [row_indent(node, filter_active), _render_part(label.icon, active_theme), " ", label_text]
    parts.extend(_render_part(part, active_theme) for part in label.suffix)
    line = "".join(parts)
    if width is not None:
        line = pad_ansi_line(truncate_ansi_line(line, max(1, width)), max(1, width))
    if selected and active_theme.reverse:
        return selected_with_ansi(line)
    return line
