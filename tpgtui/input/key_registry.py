"""Per-view key tables.

A table maps key tokens to pure transitions. Tables layer: ``derive`` copies
a base table and adds or overrides bindings, which is how the list and detail
pages share the item action keys.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..runtime.state import AppState
from .common import Transition, stay

KeyAction = Callable[[AppState], Transition]


@dataclass(frozen=True)
class KeyComboBinding:
    """One or more key tokens bound to a single state transition."""

    combos: tuple[str, ...]
    handler: KeyAction


class KeyComboRegistry:
    def __init__(self, *bindings: KeyComboBinding) -> None:
        self._handlers: dict[str, KeyAction] = {}
        for binding in bindings:
            self.bind(binding)

    def bind(self, binding: KeyComboBinding) -> None:
        """Bind every combo of ``binding``; later bindings replace earlier ones."""
        for combo in binding.combos:
            self._handlers[combo] = binding.handler

    def derive(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        """New table holding this table's bindings plus ``bindings``."""
        table = KeyComboRegistry()
        table._handlers.update(self._handlers)
        for binding in bindings:
            table.bind(binding)
        return table

    def __contains__(self, key: object) -> bool:
        return key in self._handlers

    def bound_keys(self) -> frozenset[str]:
        return frozenset(self._handlers)

    def dispatch(self, key: str, state: AppState) -> Transition | None:
        """Run the bound transition for ``key``; ``None`` when unbound."""
        handler = self._handlers.get(key)
        if handler is None:
            return None
        return handler(state)

    def handle(self, state: AppState, key: str) -> Transition:
        """Like ``dispatch``, but unbound keys leave ``state`` as it is."""
        return self.dispatch(key, state) or stay(state)


__all__ = ["KeyAction", "KeyComboBinding", "KeyComboRegistry"]
