"""Public package surface for lazytree.

Exports ``main`` for programmatic CLI invocation. The reusable engine lives
in ``lazytree.tree_model``, ``lazytree.search`` and ``lazytree.navigator``.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main"]
