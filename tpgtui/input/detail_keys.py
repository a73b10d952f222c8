"""Normal-mode keys for the item detail page and its dependency graph."""

from __future__ import annotations

from dataclasses import replace

from ..model import MAX_PRIORITY, MIN_PRIORITY
from ..runtime.commands import EditText, LoadDetail, LoadItems, RunAction, StoreCall
from ..runtime.editor import DESCRIPTION_TARGET, variable_target
from ..runtime.state import (
    AppState,
    DetailFocus,
    ViewMode,
    clamp_cursor,
    detail_data,
    detail_item,
    with_message,
)
from ..views.graph import (
    FOCAL_COLUMN,
    GraphCursor,
    build_dependency_graph,
    move_column,
    move_row,
    node_at,
    resolve_jump,
)
from ..views.text import description_visible_height, scroll_text
from .common import Transition, open_detail, stay
from .key_registry import KeyComboBinding
from .shared_keys import GLOBAL_KEYS, ITEM_ACTION_KEYS


def variable_names(state: AppState) -> list[str]:
    item = detail_item(state)
    if item is None:
        return []
    return sorted(item.template_vars)


def _max_desc_scroll(state: AppState) -> int:
    item = detail_item(state)
    if item is None:
        return 0
    _visible, total = scroll_text(item.description, 0, 0)
    return max(0, total - description_visible_height(state.height))


def _back(state: AppState) -> Transition:
    if state.detail_focus != DetailFocus.NONE:
        return replace(state, detail_focus=DetailFocus.NONE), ()
    return clamp_cursor(replace(state, view=ViewMode.LIST)), ()


def _toggle_deps(state: AppState) -> Transition:
    if state.detail_focus == DetailFocus.DEPS:
        return replace(state, detail_focus=DetailFocus.NONE), ()
    data = detail_data(state)
    if data is None or not data.dependencies:
        return with_message(state, "No dependencies"), ()
    return replace(state, detail_focus=DetailFocus.DEPS, dep_cursor=0), ()


def _toggle_vars(state: AppState) -> Transition:
    if state.detail_focus == DetailFocus.VARS:
        return replace(state, detail_focus=DetailFocus.NONE), ()
    if not variable_names(state):
        return with_message(state, "No template variables"), ()
    return replace(state, detail_focus=DetailFocus.VARS, var_cursor=0), ()


def _move(state: AppState, delta: int) -> Transition:
    if state.detail_focus == DetailFocus.DEPS:
        data = detail_data(state)
        size = len(data.dependencies) if data is not None else 0
        return replace(state, dep_cursor=max(0, min(size - 1, state.dep_cursor + delta))), ()
    if state.detail_focus == DetailFocus.VARS:
        size = len(variable_names(state))
        return replace(state, var_cursor=max(0, min(size - 1, state.var_cursor + delta))), ()
    scroll = max(0, min(_max_desc_scroll(state), state.desc_scroll + delta))
    return replace(state, desc_scroll=scroll), ()


def jump_to(state: AppState, item_id: str) -> Transition:
    """Open ``item_id`` if it is in the filtered view; otherwise only report it."""
    target = resolve_jump(item_id, state.items, state.filter, state.expanded)
    if not target.found:
        return with_message(state, target.message), ()
    state = clamp_cursor(replace(state, expanded=target.expanded, cursor=target.row))
    return open_detail(state, item_id)


def _activate(state: AppState) -> Transition:
    if state.detail_focus == DetailFocus.DEPS:
        data = detail_data(state)
        if data is None or not data.dependencies:
            return stay(state)
        dep = data.dependencies[min(state.dep_cursor, len(data.dependencies) - 1)]
        return jump_to(state, dep.id)
    if state.detail_focus == DetailFocus.VARS:
        names = variable_names(state)
        if not names:
            return stay(state)
        name = names[min(state.var_cursor, len(names) - 1)]
        if name in state.expanded_vars:
            return replace(state, expanded_vars=state.expanded_vars - {name}), ()
        return replace(state, expanded_vars=state.expanded_vars | {name}), ()
    return stay(state)


def _edit(state: AppState) -> Transition:
    item = detail_item(state)
    if item is None:
        return stay(state)
    if state.detail_focus == DetailFocus.VARS:
        names = variable_names(state)
        if not names:
            return stay(state)
        name = names[min(state.var_cursor, len(names) - 1)]
        return state, (EditText(item.id, variable_target(name), item.template_vars.get(name, "")),)
    return state, (EditText(item.id, DESCRIPTION_TARGET, item.description),)


def _graph(state: AppState) -> Transition:
    if detail_item(state) is None:
        return stay(state)
    return replace(state, view=ViewMode.GRAPH, graph_cursor=GraphCursor()), ()


def _priority(state: AppState, delta: int) -> Transition:
    item = detail_item(state)
    if item is None:
        return stay(state)
    priority = item.priority + delta
    if not MIN_PRIORITY <= priority <= MAX_PRIORITY:
        return with_message(state, f"Priority already P{item.priority}"), ()
    command = RunAction(
        (StoreCall("update_priority", (item.id, priority)),),
        f"Priority of {item.id} set to P{priority}",
    )
    return state, (command,)


def _reload(state: AppState) -> Transition:
    if state.detail_id is None:
        return stay(state)
    return state, (LoadItems(), LoadDetail(state.detail_id))


DETAIL_KEYS = ITEM_ACTION_KEYS.derive(
    KeyComboBinding(("ESC", "h", "BACKSPACE", "LEFT"), _back),
    KeyComboBinding(("TAB",), _toggle_deps),
    KeyComboBinding(("v",), _toggle_vars),
    KeyComboBinding(("j", "DOWN"), lambda state: _move(state, 1)),
    KeyComboBinding(("k", "UP"), lambda state: _move(state, -1)),
    KeyComboBinding(("PAGE_DOWN", "CTRL_D"), lambda state: _move(state, description_visible_height(state.height))),
    KeyComboBinding(("PAGE_UP",), lambda state: _move(state, -description_visible_height(state.height))),
    KeyComboBinding(("ENTER",), _activate),
    KeyComboBinding(("e",), _edit),
    KeyComboBinding(("g",), _graph),
    KeyComboBinding(("+", "="), lambda state: _priority(state, -1)),
    KeyComboBinding(("-",), lambda state: _priority(state, 1)),
    KeyComboBinding(("r",), _reload),
)


def handle_detail_key(state: AppState, key: str) -> Transition:
    return DETAIL_KEYS.handle(state, key)


def graph_nodes(state: AppState):
    item = detail_item(state)
    if item is None:
        return []
    data = detail_data(state)
    if data is None:
        return build_dependency_graph(item, (), ())
    return build_dependency_graph(item, data.depends_on, data.blocked_by)


def _graph_column(state: AppState, delta: int) -> Transition:
    cursor = move_column(graph_nodes(state), state.graph_cursor, delta)
    return replace(state, graph_cursor=cursor), ()


def _graph_row(state: AppState, delta: int) -> Transition:
    cursor = move_row(graph_nodes(state), state.graph_cursor, delta)
    return replace(state, graph_cursor=cursor), ()


def _graph_jump(state: AppState) -> Transition:
    node = node_at(graph_nodes(state), state.graph_cursor)
    if node is None:
        return stay(state)
    if node.column == FOCAL_COLUMN:
        return replace(state, view=ViewMode.DETAIL), ()
    next_state, commands = jump_to(state, node.id)
    if next_state.detail_id != node.id:
        return next_state, commands
    # Re-centre the graph on the jumped-to item.
    return replace(next_state, view=ViewMode.GRAPH, graph_cursor=GraphCursor()), commands


def _graph_back(state: AppState) -> Transition:
    return replace(state, view=ViewMode.DETAIL), ()


GRAPH_KEYS = GLOBAL_KEYS.derive(
    KeyComboBinding(("h", "LEFT"), lambda state: _graph_column(state, -1)),
    KeyComboBinding(("l", "RIGHT"), lambda state: _graph_column(state, 1)),
    KeyComboBinding(("j", "DOWN"), lambda state: _graph_row(state, 1)),
    KeyComboBinding(("k", "UP"), lambda state: _graph_row(state, -1)),
    KeyComboBinding(("ENTER",), _graph_jump),
    KeyComboBinding(("ESC", "BACKSPACE"), _graph_back),
)


def handle_graph_key(state: AppState, key: str) -> Transition:
    return GRAPH_KEYS.handle(state, key)


__all__ = [
    "DETAIL_KEYS",
    "GRAPH_KEYS",
    "graph_nodes",
    "handle_detail_key",
    "handle_graph_key",
    "jump_to",
    "variable_names",
]
