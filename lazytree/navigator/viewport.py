"""Cursor and scroll bookkeeping over the active flat node list.

Every operation takes the current list length and clamps; nothing here
raises on out-of-range input. With an empty list the cursor stays at ``0``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Viewport:
    """Cursor position and scroll offset for one navigator."""

    visible_height: int = 20
    cursor_index: int = 0
    scroll_offset: int = 0

    def __post_init__(self) -> None:
        self.visible_height = max(1, self.visible_height)

    def set_height(self, height: int, total: int | None = None) -> None:
        """Update the visible row count, re-adjusting scroll when ``total`` is known."""
        self.visible_height = max(1, height)
        if total is not None:
            self.adjust_scroll(total)

    def reset(self) -> None:
        self.cursor_index = 0
        self.scroll_offset = 0

    def max_scroll(self, total: int) -> int:
        return max(0, total - self.visible_height)

    def clamp(self, total: int) -> None:
        """Pull cursor and scroll back inside a list of ``total`` rows."""
        if total <= 0:
            self.reset()
            return
        self.cursor_index = max(0, min(self.cursor_index, total - 1))
        self.adjust_scroll(total)

    def adjust_scroll(self, total: int) -> None:
        """Scroll the minimum amount needed to keep the cursor on screen."""
        if total <= 0:
            self.reset()
            return
        if self.cursor_index < self.scroll_offset:
            self.scroll_offset = self.cursor_index
        if self.cursor_index >= self.scroll_offset + self.visible_height:
            self.scroll_offset = self.cursor_index - self.visible_height + 1
        self.scroll_offset = max(0, min(self.scroll_offset, self.max_scroll(total)))

    def set_cursor(self, index: int, total: int) -> bool:
        """Place the cursor at ``index`` (clamped); return whether it moved."""
        previous = self.cursor_index
        self.cursor_index = index
        self.clamp(total)
        return self.cursor_index != previous

    def move_cursor(self, delta: int, total: int) -> bool:
        return self.set_cursor(self.cursor_index + delta, total)

    def page_down(self, total: int) -> bool:
        return self.move_cursor(self.visible_height, total)

    def page_up(self, total: int) -> bool:
        return self.move_cursor(-self.visible_height, total)

    def half_page_down(self, total: int) -> bool:
        return self.move_cursor(max(1, self.visible_height // 2), total)

    def half_page_up(self, total: int) -> bool:
        return self.move_cursor(-max(1, self.visible_height // 2), total)

    def jump_top(self, total: int) -> bool:
        return self.set_cursor(0, total)

    def jump_bottom(self, total: int) -> bool:
        return self.set_cursor(total - 1, total)

    def scroll_lines(self, delta: int, total: int) -> bool:
        """Move the scroll offset by ``delta`` rows, dragging the cursor along.

        Used for mouse-wheel scrolling, where the view moves first and the
        cursor only follows as far as needed to stay visible.
        """
        if total <= 0:
            self.reset()
            return False
        previous = (self.cursor_index, self.scroll_offset)
        self.scroll_offset = max(0, min(self.scroll_offset + delta, self.max_scroll(total)))
        last_visible = self.scroll_offset + self.visible_height - 1
        self.cursor_index = max(self.scroll_offset, min(self.cursor_index, last_visible, total - 1))
        return (self.cursor_index, self.scroll_offset) != previous

    def visible_range(self, total: int) -> tuple[int, int]:
        """Return ``(start, end)`` list indices currently on screen."""
        if total <= 0:
            return 0, 0
        start = max(0, min(self.scroll_offset, self.max_scroll(total)))
        return start, min(total, start + self.visible_height)

    def row_to_index(self, row: int, total: int) -> int | None:
        """Map a screen row (0-based, relative to the first tree row) to a list index."""
        if row < 0 or row >= self.visible_height:
            return None
        index = self.scroll_offset + row
        if index >= total:
            return None
        return index
