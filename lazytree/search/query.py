"""Search query grammar: ``[!][type-prefix:]pattern``.

Every input string parses. An unrecognized prefix is ordinary pattern text.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

NEGATE_PREFIX = "!"

DATABASE_TYPE_PREFIXES: dict[str, str] = {
    "t:": "table",
    "v:": "view",
    "f:": "function",
    "s:": "schema",
    "seq:": "sequence",
    "ext:": "extension",
    "col:": "column",
    "idx:": "index",
    "table:": "table",
    "view:": "view",
    "func:": "function",
    "function:": "function",
    "schema:": "schema",
    "sequence:": "sequence",
    "extension:": "extension",
    "column:": "column",
    "index:": "index",
}


@dataclass(frozen=True)
class SearchQuery:
    """Structured form of raw query text."""

    pattern: str = ""
    negate: bool = False
    type_filter: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.pattern and not self.negate and not self.type_filter


def _ordered_prefixes(prefixes: Mapping[str, str]) -> list[tuple[str, str]]:
    # Longest first keeps matching independent of mapping order.
    return sorted(prefixes.items(), key=lambda item: (-len(item[0]), item[0]))


def parse_search_query(
    text: str,
    prefixes: Mapping[str, str] = DATABASE_TYPE_PREFIXES,
) -> SearchQuery:
    """Parse raw query ``text`` into a :class:`SearchQuery`.

    A leading ``!`` sets ``negate`` and is consumed first. Then the first
    case-insensitive prefix from ``prefixes`` sets ``type_filter``; whatever
    remains is the pattern, with its original casing.

    >>> parse_search_query("!f:get")
    SearchQuery(pattern='get', negate=True, type_filter='function')
    """
    negate = False
    rest = text
    if rest.startswith(NEGATE_PREFIX):
        negate = True
        rest = rest[len(NEGATE_PREFIX):]

    type_filter = ""
    rest_lower = rest.lower()
    for prefix, filter_name in _ordered_prefixes(prefixes):
        if rest_lower.startswith(prefix.lower()):
            type_filter = filter_name
            rest = rest[len(prefix):]
            break

    return SearchQuery(pattern=rest, negate=negate, type_filter=type_filter)


def type_filter_label(type_filter: str) -> str:
    """Return a short display label for a type filter (``"function"`` -> ``"Func"``)."""
    short = {
        "function": "Func",
        "sequence": "Seq",
        "extension": "Ext",
        "column": "Col",
        "index": "Idx",
    }
    if type_filter in short:
        return short[type_filter]
    return type_filter.capitalize()
