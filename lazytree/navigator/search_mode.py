"""Search-mode state machine gating which node list the viewport walks.

``OFF`` navigates the flattened tree. ``COMPOSING`` re-filters on every
edit and shows results live. ``APPLIED`` freezes the last result list until
the search is cancelled or a new one is started.
"""

from __future__ import annotations

import enum
import logging

from ..search.filtering import TreeMatch, filter_tree
from ..search.query import SearchQuery, parse_search_query
from ..tree_model.flatten import flatten
from ..tree_model.types import NodeVocabulary, TreeNode
from .viewport import Viewport

logger = logging.getLogger(__name__)


class SearchMode(enum.Enum):
    OFF = "off"
    COMPOSING = "composing"
    APPLIED = "applied"


class SearchController:
    """Own query text, filter results, and mode transitions for one tree."""

    def __init__(self, root: TreeNode, vocabulary: NodeVocabulary, viewport: Viewport) -> None:
        self.root = root
        self.vocabulary = vocabulary
        self.viewport = viewport
        self.mode = SearchMode.OFF
        self.query_text = ""
        self.query = SearchQuery()
        self.results: list[TreeMatch] = []
        self._positions: dict[int, tuple[int, ...]] = {}

    @property
    def filter_active(self) -> bool:
        """True when the viewport walks a filtered list instead of the tree."""
        if self.mode is SearchMode.APPLIED:
            return True
        return self.mode is SearchMode.COMPOSING and bool(self.query_text)

    def active_nodes(self) -> list[TreeNode]:
        if self.filter_active:
            return [match.node for match in self.results]
        return flatten(self.root)

    def match_positions(self, node: TreeNode) -> tuple[int, ...]:
        if not self.filter_active:
            return ()
        return self._positions.get(id(node), ())

    def _set_results(self, results: list[TreeMatch]) -> None:
        self.results = results
        self._positions = {id(match.node): match.positions for match in results if match.positions}

    def _clear(self) -> None:
        self.query_text = ""
        self.query = SearchQuery()
        self._set_results([])

    def refilter(self) -> None:
        """Re-run the current query against the tree and clamp the cursor."""
        if self.query_text:
            self.query = parse_search_query(self.query_text, self.vocabulary.type_prefixes)
            self._set_results(filter_tree(self.root, self.query, self.vocabulary))
        else:
            self.query = SearchQuery()
            self._set_results([])
        self.viewport.clamp(len(self.active_nodes()))

    def activate(self) -> None:
        """Start composing a fresh query (from ``OFF`` or ``APPLIED``)."""
        self._clear()
        self.mode = SearchMode.COMPOSING
        self.viewport.reset()
        logger.debug("search composing (%s)", self.vocabulary.name)

    def append(self, text: str) -> None:
        if self.mode is not SearchMode.COMPOSING or not text:
            return
        self.query_text += text
        self.refilter()

    def backspace(self) -> None:
        if self.mode is not SearchMode.COMPOSING or not self.query_text:
            return
        self.query_text = self.query_text[:-1]
        self.refilter()

    def clear_query(self) -> None:
        if self.mode is not SearchMode.COMPOSING:
            return
        self.query_text = ""
        self.refilter()

    def confirm(self) -> None:
        """Freeze results when a query was typed, otherwise leave search."""
        if self.mode is not SearchMode.COMPOSING:
            return
        if not self.query_text:
            self.mode = SearchMode.OFF
            self._clear()
        else:
            self.mode = SearchMode.APPLIED
            logger.debug("search applied %r: %d result(s)", self.query_text, len(self.results))
        self.viewport.reset()

    def cancel(self) -> None:
        """Leave search entirely, restoring the full tree."""
        if self.mode is SearchMode.OFF:
            return
        self.mode = SearchMode.OFF
        self._clear()
        self.viewport.reset()
        logger.debug("search cancelled (%s)", self.vocabulary.name)

    def status(self) -> str:
        """Return the search-bar text for the current mode."""
        if self.mode is SearchMode.COMPOSING:
            return f"Search: {self.query_text}"
        if self.mode is SearchMode.APPLIED:
            total = len(self.results)
            if total == 0:
                return f"/{self.query_text} (0)"
            return f"/{self.query_text} ({self.viewport.cursor_index + 1}/{total})"
        return ""
