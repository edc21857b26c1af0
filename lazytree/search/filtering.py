"""Whole-tree filtering for search results.

Filtering ignores expand/collapse state: a match buried under collapsed
ancestors is still found. Only searchable node types can become results,
but traversal always descends through every node.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..tree_model.build import walk
from ..tree_model.types import NodeVocabulary, TreeNode
from .fuzzy import fuzzy_match
from .query import SearchQuery


@dataclass(frozen=True)
class TreeMatch:
    """One filter result with label offsets consumed by the matcher."""

    node: TreeNode
    positions: tuple[int, ...] = field(default_factory=tuple)


def node_matches_type(node: TreeNode, type_filter: str, vocabulary: NodeVocabulary) -> bool:
    """Return whether ``node`` satisfies ``type_filter``.

    An empty filter accepts every node; an unknown filter name accepts none.
    """
    if not type_filter:
        return True
    return node.type in vocabulary.types_for_filter(type_filter)


def should_include(type_matches: bool, pattern_matches: bool, query: SearchQuery) -> bool:
    """Apply the inclusion rule for one searchable node.

    Plain queries need both the type and the pattern to match. Negated
    queries are deliberately not ``not (T and P)``: a node is kept when a
    type filter is given and its type misses, or when its type hits but the
    pattern misses, or, with no type filter at all, when the pattern misses.
    """
    if not query.negate:
        return type_matches and pattern_matches
    if query.type_filter and not type_matches:
        return True
    if type_matches and not pattern_matches:
        return True
    if not query.type_filter and not pattern_matches:
        return True
    return False


def filter_tree(root: TreeNode, query: SearchQuery, vocabulary: NodeVocabulary) -> list[TreeMatch]:
    """Return matching nodes in pre-order with their highlight positions.

    Positions are only recorded for plain (non-negated) queries with a
    pattern, since a negated hit has nothing to highlight.
    """
    matches: list[TreeMatch] = []
    record_positions = bool(query.pattern) and not query.negate
    for node in walk(root):
        if not vocabulary.is_searchable(node):
            continue
        type_matches = node_matches_type(node, query.type_filter, vocabulary)
        pattern_matches = True
        positions: list[int] = []
        if query.pattern:
            pattern_matches, positions = fuzzy_match(query.pattern, node.label)
        if not should_include(type_matches, pattern_matches, query):
            continue
        matches.append(TreeMatch(node, tuple(positions) if record_positions else ()))
    return matches
