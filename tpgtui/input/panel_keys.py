"""Keys for the template browser and the config table."""

from __future__ import annotations

from dataclasses import replace

from ..project_config import format_config_value
from ..runtime.commands import LoadConfig, LoadTemplate, LoadTemplates
from ..runtime.state import AppState, InputMode, ViewMode, clamp_cursor
from .common import Transition, open_prompt, quit_app, stay
from .key_registry import KeyComboBinding, KeyComboRegistry


def _template_move(state: AppState, delta: int) -> Transition:
    size = len(state.templates)
    cursor = max(0, min(size - 1, state.template_cursor + delta)) if size else 0
    return replace(state, template_cursor=cursor), ()


def _template_open(state: AppState) -> Transition:
    if not state.templates:
        return stay(state)
    template = state.templates[min(state.template_cursor, len(state.templates) - 1)]
    state = replace(state, view=ViewMode.TEMPLATE_DETAIL, template_id=template.id, template_scroll=0)
    return state, (LoadTemplate(template.id),)


def _to_list(state: AppState) -> Transition:
    return clamp_cursor(replace(state, view=ViewMode.LIST)), ()


TEMPLATE_LIST_KEYS = KeyComboRegistry(
    KeyComboBinding(("j", "DOWN"), lambda state: _template_move(state, 1)),
    KeyComboBinding(("k", "UP"), lambda state: _template_move(state, -1)),
    KeyComboBinding(("ENTER", "l", "RIGHT"), _template_open),
    KeyComboBinding(("r",), lambda state: (replace(state, templates_loaded=False), (LoadTemplates(),))),
    KeyComboBinding(("ESC", "h", "LEFT", "BACKSPACE"), _to_list),
    KeyComboBinding(("q", "CTRL_C"), quit_app),
)


def handle_template_list_key(state: AppState, key: str) -> Transition:
    return TEMPLATE_LIST_KEYS.handle(state, key)


def _template_scroll(state: AppState, delta: int) -> Transition:
    return replace(state, template_scroll=max(0, state.template_scroll + delta)), ()


TEMPLATE_DETAIL_KEYS = KeyComboRegistry(
    KeyComboBinding(("j", "DOWN"), lambda state: _template_scroll(state, 1)),
    KeyComboBinding(("k", "UP"), lambda state: _template_scroll(state, -1)),
    KeyComboBinding(("PAGE_DOWN", "CTRL_D"), lambda state: _template_scroll(state, max(1, state.height - 6))),
    KeyComboBinding(("PAGE_UP",), lambda state: _template_scroll(state, -max(1, state.height - 6))),
    KeyComboBinding(("ESC", "h", "LEFT", "BACKSPACE"), lambda state: (replace(state, view=ViewMode.TEMPLATE_LIST), ())),
    KeyComboBinding(("q", "CTRL_C"), quit_app),
)


def handle_template_detail_key(state: AppState, key: str) -> Transition:
    return TEMPLATE_DETAIL_KEYS.handle(state, key)


def _config_move(state: AppState, delta: int) -> Transition:
    size = len(state.config_fields)
    cursor = max(0, min(size - 1, state.config_cursor + delta)) if size else 0
    return replace(state, config_cursor=cursor), ()


def _config_edit(state: AppState) -> Transition:
    if not state.config_fields:
        return stay(state)
    field = state.config_fields[min(state.config_cursor, len(state.config_fields) - 1)]
    if field.type == "map":
        return replace(state, message=f"{field.path} is a map; edit config.json directly"), ()
    current = "" if field.value is None else format_config_value(field.value)
    if current == '""':
        current = ""
    state, commands = open_prompt(state, InputMode.CONFIG_VALUE, (field.path,), current)
    return replace(state, input_label=f"{field.path} = "), commands


CONFIG_KEYS = KeyComboRegistry(
    KeyComboBinding(("j", "DOWN"), lambda state: _config_move(state, 1)),
    KeyComboBinding(("k", "UP"), lambda state: _config_move(state, -1)),
    KeyComboBinding(("ENTER", "e"), _config_edit),
    KeyComboBinding(("r",), lambda state: (state, (LoadConfig(),))),
    KeyComboBinding(("ESC", "h", "LEFT", "BACKSPACE"), _to_list),
    KeyComboBinding(("q", "CTRL_C"), quit_app),
)


def handle_config_key(state: AppState, key: str) -> Transition:
    return CONFIG_KEYS.handle(state, key)


__all__ = [
    "CONFIG_KEYS",
    "TEMPLATE_DETAIL_KEYS",
    "TEMPLATE_LIST_KEYS",
    "handle_config_key",
    "handle_template_detail_key",
    "handle_template_list_key",
]
