"""ANSI-aware text measurement and line shaping utilities.

Provides clipping and width measurement that preserve escape sequences, so
tree rows stay aligned when labels carry color codes or wide characters.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
ELLIPSIS = "…"


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    """Return rendered column width of ``text`` ignoring escape sequences."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if ch == "\t":
            if col + w > max_cols:
                break
            out.append(" " * w)
            col += w
            i += 1
            continue
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    return "".join(out)


def truncate_ansi_line(text: str, max_cols: int) -> str:
    """Clip ``text`` to ``max_cols`` columns, ending in an ellipsis when cut."""
    if display_width(text) <= max_cols:
        return text
    if max_cols <= 1:
        return clip_ansi_line(text, max_cols)
    clipped = clip_ansi_line(text, max_cols - 1)
    if "\x1b" in clipped:
        return clipped + "\033[0m" + ELLIPSIS
    return clipped + ELLIPSIS


def pad_ansi_line(text: str, width: int) -> str:
    return text + " " * max(0, width - display_width(text))


def wrap_plain_line(text: str, width: int) -> list[str]:
    """Split plain ``text`` into chunks of at most ``width`` display columns.

    Tabs are expanded; an empty line yields one empty chunk.
    """
    width = max(1, width)
    chunks: list[str] = []
    current: list[str] = []
    col = 0
    for ch in text.expandtabs(TAB_STOP):
        w = char_display_width(ch, col)
        if col + w > width and current:
            chunks.append("".join(current))
            current = []
            col = 0
        current.append(ch)
        col += w
    chunks.append("".join(current))
    return chunks


def selected_with_ansi(text: str) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text

    # Keep reverse video active even when the text contains internal resets.
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def build_status_line(left_text: str, width: int, right_text: str = "│ ? Help") -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"
