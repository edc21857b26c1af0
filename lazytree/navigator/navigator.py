"""Tree navigator composing flattening, viewport, search, and jumps.

One :class:`TreeNavigator` instance drives one view. It owns the cursor,
scroll offset, search state and marks; the tree itself belongs to the
caller, who may install children at any time.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass, field
import logging

from ..tree_model.build import (
    ancestors,
    can_toggle,
    collapse_all,
    expand_all,
    expand_path_to,
    find_by_id,
    install_children,
    install_error,
    node_from_descriptor,
    toggle,
)
from ..tree_model.flatten import index_of
from ..tree_model.loading import ChildrenLoader, LoaderError
from ..tree_model.types import ChildDescriptor, NodeVocabulary, TreeNode
from .events import NavigatorCallbacks, NodeSelected, NodeToggled
from .jumps import (
    MarkRegistry,
    next_array_item_index,
    next_index_of_type,
    next_index_with_key_prefix,
    next_sibling_index,
    parent_index,
    prev_array_item_index,
    prev_sibling_index,
)
from .search_mode import SearchController, SearchMode
from .viewport import Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedRow:
    """One visible row handed to a renderer."""

    node: TreeNode
    is_selected: bool
    match_positions: tuple[int, ...] = field(default_factory=tuple)


class TreeNavigator:
    """Keyboard/mouse navigation over an owned tree for one call site."""

    def __init__(
        self,
        root: TreeNode,
        vocabulary: NodeVocabulary,
        visible_height: int = 20,
        callbacks: NavigatorCallbacks | None = None,
    ) -> None:
        self.root = root
        self.vocabulary = vocabulary
        self.viewport = Viewport(visible_height=visible_height)
        self.search = SearchController(root, vocabulary, self.viewport)
        self.marks = MarkRegistry()
        self.callbacks = callbacks or NavigatorCallbacks()
        self.detail_visible = False

    # Active list and cursor

    @property
    def search_mode(self) -> SearchMode:
        return self.search.mode

    @property
    def filter_active(self) -> bool:
        return self.search.filter_active

    def active_nodes(self) -> list[TreeNode]:
        """Return the list the cursor walks: filtered results or the flattened tree."""
        return self.search.active_nodes()

    def current_node(self) -> TreeNode | None:
        nodes = self.active_nodes()
        if not nodes:
            return None
        self.viewport.clamp(len(nodes))
        return nodes[self.viewport.cursor_index]

    def search_status(self) -> str:
        return self.search.status()

    def _total(self) -> int:
        return len(self.active_nodes())

    def _goto(self, index: int | None) -> bool:
        if index is None:
            return False
        return self.viewport.set_cursor(index, self._total())

    def _relocate(self, node: TreeNode | None) -> None:
        """Keep the cursor on ``node`` or its nearest visible ancestor, else clamp."""
        nodes = self.active_nodes()
        if node is not None:
            for candidate in [node, *ancestors(node)]:
                idx = index_of(nodes, candidate)
                if idx is not None:
                    self.viewport.set_cursor(idx, len(nodes))
                    return
        self.viewport.clamp(len(nodes))

    def render(self, visible_height: int | None = None) -> list[RenderedRow]:
        """Return the rows currently inside the viewport."""
        nodes = self.active_nodes()
        if visible_height is not None:
            self.viewport.set_height(visible_height)
        self.viewport.clamp(len(nodes))
        start, end = self.viewport.visible_range(len(nodes))
        cursor = self.viewport.cursor_index
        return [
            RenderedRow(node, idx == cursor, self.search.match_positions(node))
            for idx, node in enumerate(nodes[start:end], start=start)
        ]

    def hidden_row_counts(self) -> tuple[int, int]:
        """Return ``(above, below)`` counts of rows scrolled out of view."""
        total = self._total()
        start, end = self.viewport.visible_range(total)
        return start, max(0, total - end)

    # Cursor movement

    def move_cursor(self, delta: int) -> bool:
        return self.viewport.move_cursor(delta, self._total())

    def page_down(self) -> bool:
        return self.viewport.page_down(self._total())

    def page_up(self) -> bool:
        return self.viewport.page_up(self._total())

    def half_page_down(self) -> bool:
        return self.viewport.half_page_down(self._total())

    def half_page_up(self) -> bool:
        return self.viewport.half_page_up(self._total())

    def jump_top(self) -> bool:
        return self.viewport.jump_top(self._total())

    def jump_bottom(self) -> bool:
        return self.viewport.jump_bottom(self._total())

    def scroll(self, delta: int) -> bool:
        """Scroll the view by ``delta`` rows (mouse wheel)."""
        return self.viewport.scroll_lines(delta, self._total())

    # Structure

    def _emit_toggled(self, node: TreeNode) -> NodeToggled:
        event = NodeToggled(node, node.expanded)
        logger.debug("toggled %s expanded=%s", node.id, node.expanded)
        if self.callbacks.on_toggle is not None:
            self.callbacks.on_toggle(event)
        return event

    def toggle_current(self) -> NodeToggled | None:
        """Flip the selected node's expand state and emit :class:`NodeToggled`."""
        node = self.current_node()
        if node is None or not toggle(node):
            return None
        self._relocate(node)
        return self._emit_toggled(node)

    def collapse_or_parent(self) -> NodeToggled | None:
        """Collapse the selected node when expanded, otherwise move to its parent."""
        node = self.current_node()
        if node is None:
            return None
        if node.expanded and can_toggle(node):
            toggle(node)
            self._relocate(node)
            return self._emit_toggled(node)
        self._goto(parent_index(self.active_nodes(), self.viewport.cursor_index))
        return None

    def select_current(self) -> NodeSelected | None:
        """Emit :class:`NodeSelected` for the selected node when it is selectable."""
        node = self.current_node()
        if node is None or not node.selectable:
            return None
        event = NodeSelected(node)
        logger.debug("selected %s", node.id)
        if self.callbacks.on_select is not None:
            self.callbacks.on_select(event)
        return event

    def click_row(self, row: int) -> NodeSelected | NodeToggled | None:
        """Handle a click on screen ``row`` (0-based within the tree area).

        The first click moves the cursor. Clicking the already selected row
        toggles it when it can expand, otherwise selects it.
        """
        total = self._total()
        index = self.viewport.row_to_index(row, total)
        if index is None:
            return None
        if index != self.viewport.cursor_index:
            self.viewport.set_cursor(index, total)
            return None
        node = self.active_nodes()[index]
        if can_toggle(node):
            return self.toggle_current()
        return self.select_current()

    def expand_all(self) -> None:
        node = self.current_node()
        expand_all(self.root)
        self._relocate(node)

    def collapse_all(self) -> None:
        node = self.current_node()
        collapse_all(self.root)
        self._relocate(node)

    # Children installation

    def _resolve(self, node_or_id: TreeNode | str) -> TreeNode | None:
        if isinstance(node_or_id, TreeNode):
            return node_or_id
        return find_by_id(self.root, node_or_id)

    def _after_install(self, current: TreeNode | None) -> None:
        if self.search.mode is not SearchMode.OFF:
            self.search.refilter()
        self._relocate(current)

    def install_children(
        self,
        node_or_id: TreeNode | str,
        descriptors: Iterable[ChildDescriptor],
    ) -> list[TreeNode]:
        """Replace a node's children from loader descriptors.

        Unknown ids are ignored. An active filter is re-run so new nodes can
        appear in the results.
        """
        node = self._resolve(node_or_id)
        if node is None:
            logger.debug("install_children: unknown node %r", node_or_id)
            return []
        current = self.current_node()
        children = install_children(
            node,
            descriptors,
            lambda descriptor: node_from_descriptor(descriptor, self.vocabulary.leaf_types),
        )
        logger.debug("installed %d child(ren) under %s", len(children), node.id)
        self._after_install(current)
        return children

    def install_error(self, node_or_id: TreeNode | str, error: BaseException | str) -> TreeNode | None:
        node = self._resolve(node_or_id)
        if node is None:
            return None
        current = self.current_node()
        error_node = install_error(node, error)
        self._after_install(current)
        return error_node

    def load_and_install(self, node: TreeNode, loader: ChildrenLoader) -> list[TreeNode]:
        """Fetch children through ``loader``; failures become an error node."""
        try:
            descriptors = loader.load_children(node)
        except LoaderError as exc:
            logger.warning("loading children of %s failed: %s", node.id, exc)
            error_node = self.install_error(node, exc)
            return [error_node] if error_node is not None else []
        return self.install_children(node, descriptors)

    # Jumps

    def set_cursor_to_node(self, node_id: str) -> bool:
        """Move the cursor to ``node_id`` if it is in the active list."""
        nodes = self.active_nodes()
        for idx, node in enumerate(nodes):
            if node.id == node_id:
                self.viewport.set_cursor(idx, len(nodes))
                return True
        return False

    def expand_and_navigate_to(self, node_id: str) -> bool:
        """Reveal ``node_id`` by expanding its ancestors, then select it.

        A running search is dropped when the target is not among its results.
        """
        return self._reveal(find_by_id(self.root, node_id))

    def _reveal(self, target: TreeNode | None) -> bool:
        if target is None or target.is_root:
            return False
        if index_of(self.active_nodes(), target) is None:
            self.search.cancel()
            for ancestor in expand_path_to(target):
                self._emit_toggled(ancestor)
        return self._goto(index_of(self.active_nodes(), target)) or self.current_node() is target

    def jump_to_parent(self) -> bool:
        return self._goto(parent_index(self.active_nodes(), self.viewport.cursor_index))

    def jump_to_sibling(self, direction: int) -> bool:
        nodes = self.active_nodes()
        finder = next_sibling_index if direction > 0 else prev_sibling_index
        return self._goto(finder(nodes, self.viewport.cursor_index))

    def jump_to_type(self, node_types: Collection[str], direction: int = 1) -> bool:
        """Move to the next row of one of ``node_types``; does not wrap."""
        return self._goto(next_index_of_type(self.active_nodes(), self.viewport.cursor_index, node_types, direction))

    def jump_to_array_item(self, array_type: str, direction: int = 1) -> bool:
        nodes = self.active_nodes()
        finder = next_array_item_index if direction > 0 else prev_array_item_index
        return self._goto(finder(nodes, self.viewport.cursor_index, array_type))

    def jump_to_key_prefix(
        self,
        prefix: str,
        key_for: Callable[[TreeNode], str] = lambda node: node.label,
    ) -> bool:
        """Move to the next row whose key starts with ``prefix``, wrapping around."""
        return self._goto(next_index_with_key_prefix(self.active_nodes(), self.viewport.cursor_index, prefix, key_for))

    def set_mark(self, key: str) -> bool:
        return self.marks.set(key, self.current_node())

    def jump_to_mark(self, key: str) -> bool:
        """Jump to the node stored under ``key``; stale or unset marks are a no-op.

        Collapsed ancestors of the target are expanded (emitting
        :class:`NodeToggled`) and a search that hides it is dropped.
        """
        return self._reveal(self.marks.resolve(self.root, key))

    # Detail pane

    def toggle_detail(self) -> bool:
        """Show or hide the detail pane for the selected node."""
        self.detail_visible = not self.detail_visible
        return True
