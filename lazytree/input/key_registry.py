"""Key-combo registry used by the navigator key dispatch."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

KeyHandler = Callable[[], "bool | None"]


@dataclass(frozen=True)
class KeyComboBinding:
    """One or more key tokens bound to a single action."""

    combos: tuple[str, ...]
    handler: KeyHandler


class KeyComboRegistry:
    """Key-dispatch table; later registrations override earlier ones."""

    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        self._normalize = normalize if normalize is not None else self._identity
        self._handlers: dict[str, KeyHandler] = {}

    @staticmethod
    def _identity(key: str) -> str:
        return key

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        for combo in binding.combos:
            self._handlers[self._normalize(combo)] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def dispatch(self, key: str) -> bool | None:
        """Invoke the handler bound to ``key``.

        Returns ``None`` when nothing is bound, otherwise the handler's
        result, where ``None`` from a handler counts as handled.
        """
        handler = self._handlers.get(self._normalize(key))
        if handler is None:
            return None
        result = handler()
        return True if result is None else result
