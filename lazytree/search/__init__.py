"""Search query parsing, fuzzy matching, and whole-tree filtering."""

from .filtering import TreeMatch, filter_tree, node_matches_type, should_include
from .fuzzy import fuzzy_match, prefix_matches
from .query import DATABASE_TYPE_PREFIXES, SearchQuery, parse_search_query, type_filter_label

__all__ = [
    "DATABASE_TYPE_PREFIXES",
    "SearchQuery",
    "TreeMatch",
    "filter_tree",
    "fuzzy_match",
    "node_matches_type",
    "parse_search_query",
    "prefix_matches",
    "should_include",
    "type_filter_label",
]
