"""Terminal key decoding and key-combo registries."""

from .key_registry import KeyComboBinding, KeyComboRegistry
from .keys import parse_mouse_col_row, read_key

__all__ = [
    "KeyComboBinding",
    "KeyComboRegistry",
    "parse_mouse_col_row",
    "read_key",
]
