"""Greedy fuzzy subsequence matching with highlight positions."""

from __future__ import annotations


def fuzzy_match(pattern: str, target: str) -> tuple[bool, list[int]]:
    """Return whether ``pattern`` is a case-insensitive subsequence of ``target``.

    One left-to-right scan over ``target`` consumes the next pattern character
    whenever it is equal after case folding; the consumed target indices are
    returned for highlighting. This is the greedy leftmost alignment, not a
    best-scoring one, so highlights are deterministic.

    An empty pattern matches with no positions; a failed match returns
    ``(False, [])``.
    """
    if not pattern:
        return True, []

    needles = [ch.casefold() for ch in pattern]
    positions: list[int] = []
    needle_idx = 0
    for idx, ch in enumerate(target):
        if ch.casefold() == needles[needle_idx]:
            positions.append(idx)
            needle_idx += 1
            if needle_idx == len(needles):
                return True, positions
    return False, []


def prefix_matches(prefix: str, label: str) -> bool:
    """Case-insensitive ``startswith`` used by quick key jumps."""
    if not prefix or not label:
        return False
    return label.casefold().startswith(prefix.casefold())
