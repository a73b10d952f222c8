"""Normal-mode keys for the hierarchical item list."""

from __future__ import annotations

from dataclasses import replace

from ..model import ALL_STATUSES
from ..runtime.commands import LoadConfig, LoadItems, LoadTemplates
from ..runtime.state import AppState, InputMode, ViewMode, clamp_cursor, cursor_item, list_rows, tree_nodes
from ..views.filtering import clear_text_filters, has_active_filters, show_all_statuses, toggle_status
from ..views.tree import parent_index, toggle_expanded
from ..wizard import WizardState
from .common import (
    Transition,
    open_cursor_detail,
    open_prompt,
    open_target_prompt,
    quit_app,
    refilter,
    stay,
)
from .key_registry import KeyComboBinding
from .shared_keys import ITEM_ACTION_KEYS


def _move(state: AppState, delta: int) -> Transition:
    return clamp_cursor(replace(state, cursor=max(0, state.cursor + delta))), ()


def _top(state: AppState) -> Transition:
    return clamp_cursor(replace(state, cursor=0)), ()


def _bottom(state: AppState) -> Transition:
    return clamp_cursor(replace(state, cursor=max(0, len(tree_nodes(state)) - 1))), ()


def _page(state: AppState, direction: int) -> Transition:
    return _move(state, direction * list_rows(state))


def _expand(state: AppState) -> Transition:
    nodes = tree_nodes(state)
    if not nodes:
        return stay(state)
    node = nodes[min(state.cursor, len(nodes) - 1)]
    if not node.has_children:
        return stay(state)
    if node.item.id in state.expanded:
        # Already open: step onto the first child.
        return _move(state, 1)
    return clamp_cursor(replace(state, expanded=state.expanded | {node.item.id})), ()


def _collapse(state: AppState) -> Transition:
    nodes = tree_nodes(state)
    if not nodes:
        return stay(state)
    node = nodes[min(state.cursor, len(nodes) - 1)]
    if node.has_children and node.item.id in state.expanded:
        return clamp_cursor(replace(state, expanded=state.expanded - {node.item.id})), ()
    parent = parent_index(nodes, state.cursor)
    if parent is None:
        return stay(state)
    return clamp_cursor(replace(state, cursor=parent)), ()


def _toggle_expand(state: AppState) -> Transition:
    item = cursor_item(state)
    if item is None:
        return stay(state)
    return clamp_cursor(replace(state, expanded=toggle_expanded(state.expanded, item.id))), ()


def _toggle_selection(state: AppState) -> Transition:
    item = cursor_item(state)
    if item is None:
        return stay(state)
    if item.id in state.selected:
        selected = state.selected - {item.id}
    else:
        selected = state.selected | {item.id}
    return replace(state, selected=selected), ()


def _toggle_status(index: int):
    status = ALL_STATUSES[index]

    def handler(state: AppState) -> Transition:
        return refilter(state, toggle_status(state.filter, status)), ()

    return handler


def _show_all(state: AppState) -> Transition:
    return refilter(state, show_all_statuses(state.filter)), ()


def _search(state: AppState) -> Transition:
    return open_prompt(state, InputMode.SEARCH, text=state.filter.search)


def _project_filter(state: AppState) -> Transition:
    return open_prompt(state, InputMode.PROJECT_FILTER, text=state.filter.project)


def _label_filter(state: AppState) -> Transition:
    return open_prompt(state, InputMode.LABEL_FILTER, text=state.filter.label)


def _quick_create(state: AppState) -> Transition:
    return open_prompt(replace(state, pending_title=""), InputMode.CREATE_TITLE)


def _wizard(state: AppState) -> Transition:
    return replace(state, view=ViewMode.CREATE_WIZARD, wizard=WizardState()), ()


def _templates(state: AppState) -> Transition:
    return replace(state, view=ViewMode.TEMPLATE_LIST, template_cursor=0), (LoadTemplates(),)


def _config(state: AppState) -> Transition:
    return replace(state, view=ViewMode.CONFIG, config_cursor=0), (LoadConfig(),)


def _reload(state: AppState) -> Transition:
    return state, (LoadItems(),)


def _escape(state: AppState) -> Transition:
    if has_active_filters(state.filter):
        return refilter(state, clear_text_filters(state.filter)), ()
    return quit_app(state)


LIST_KEYS = ITEM_ACTION_KEYS.derive(
    KeyComboBinding(("j", "DOWN"), lambda state: _move(state, 1)),
    KeyComboBinding(("k", "UP"), lambda state: _move(state, -1)),
    KeyComboBinding(("g", "HOME"), _top),
    KeyComboBinding(("G", "END"), _bottom),
    KeyComboBinding(("PAGE_DOWN", "CTRL_D"), lambda state: _page(state, 1)),
    KeyComboBinding(("PAGE_UP",), lambda state: _page(state, -1)),
    KeyComboBinding(("ENTER",), open_cursor_detail),
    KeyComboBinding(("l", "RIGHT"), _expand),
    KeyComboBinding(("h", "LEFT"), _collapse),
    KeyComboBinding(("TAB",), _toggle_expand),
    KeyComboBinding((" ",), _toggle_selection),
    KeyComboBinding(("/",), _search),
    KeyComboBinding(("p",), _project_filter),
    KeyComboBinding(("#",), _label_filter),
    *(KeyComboBinding((str(index + 1),), _toggle_status(index)) for index in range(len(ALL_STATUSES))),
    KeyComboBinding(("0",), _show_all),
    KeyComboBinding(("B",), lambda state: open_target_prompt(state, InputMode.BATCH_STATUS)),
    KeyComboBinding(("P",), lambda state: open_target_prompt(state, InputMode.BATCH_PRIORITY)),
    KeyComboBinding(("n",), _quick_create),
    KeyComboBinding(("N",), _wizard),
    KeyComboBinding(("T",), _templates),
    KeyComboBinding(("C",), _config),
    KeyComboBinding(("r",), _reload),
    KeyComboBinding(("ESC",), _escape),
)


def handle_list_key(state: AppState, key: str) -> Transition:
    return LIST_KEYS.handle(state, key)


__all__ = ["LIST_KEYS", "handle_list_key"]
