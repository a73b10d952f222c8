"""Key tables shared by several views."""

from __future__ import annotations

from dataclasses import replace

from ..runtime.state import AppState, InputMode
from .common import (
    Transition,
    delete_focus_item,
    done_items,
    open_status_menu,
    open_target_prompt,
    quit_app,
    start_items,
)
from .key_registry import KeyComboBinding, KeyComboRegistry


def toggle_help(state: AppState) -> Transition:
    return replace(state, show_help=not state.show_help), ()


GLOBAL_KEYS = KeyComboRegistry(
    KeyComboBinding(("?",), toggle_help),
    KeyComboBinding(("q", "CTRL_C"), quit_app),
)

# Act on the selection in the list, or on the focus item.
ITEM_ACTION_KEYS = GLOBAL_KEYS.derive(
    KeyComboBinding(("s",), start_items),
    KeyComboBinding(("d",), done_items),
    KeyComboBinding(("b",), lambda state: open_target_prompt(state, InputMode.BLOCK_REASON)),
    KeyComboBinding(("c",), lambda state: open_target_prompt(state, InputMode.CANCEL_REASON)),
    KeyComboBinding(("L",), lambda state: open_target_prompt(state, InputMode.LOG_MESSAGE)),
    KeyComboBinding(("a",), lambda state: open_target_prompt(state, InputMode.ADD_DEPENDENCY)),
    KeyComboBinding(("S",), open_status_menu),
    KeyComboBinding(("D",), delete_focus_item),
)


__all__ = ["GLOBAL_KEYS", "ITEM_ACTION_KEYS", "toggle_help"]
