"""The single state transition function and its key routing table.

``update`` is pure: it reads one snapshot and one event and returns the next
snapshot plus follow-up commands. Side effects happen only when the loop
hands those commands to the dispatcher or the editor bridge.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from ..input.common import Transition
from ..input.detail_keys import handle_detail_key, handle_graph_key
from ..input.list_keys import handle_list_key
from ..input.panel_keys import handle_config_key, handle_template_detail_key, handle_template_list_key
from ..input.prompts import SUBMITTERS, handle_create_type, handle_status_menu, handle_text_prompt
from ..input.wizard_keys import handle_textarea_key, handle_wizard_view_key
from .commands import Command, LoadDetail, LoadItems, LoadStale, RunAction, StoreCall
from .editor import DESCRIPTION_TARGET, target_variable
from .messages import (
    ActionDone,
    ConfigLoaded,
    DetailLoaded,
    EditorFinished,
    Event,
    ItemsLoaded,
    KeyPressed,
    Resized,
    StaleLoaded,
    TemplateLoaded,
    TemplatesLoaded,
)
from .state import (
    AppState,
    DetailData,
    DetailFocus,
    InputMode,
    ViewMode,
    clamp_cursor,
    with_error,
    with_message,
)

logger = logging.getLogger(__name__)

KeyHandler = Callable[[AppState, str], Transition]

VIEW_HANDLERS: dict[ViewMode, KeyHandler] = {
    ViewMode.LIST: handle_list_key,
    ViewMode.DETAIL: handle_detail_key,
    ViewMode.GRAPH: handle_graph_key,
    ViewMode.TEMPLATE_LIST: handle_template_list_key,
    ViewMode.TEMPLATE_DETAIL: handle_template_detail_key,
    ViewMode.CONFIG: handle_config_key,
    ViewMode.CREATE_WIZARD: handle_wizard_view_key,
}

INPUT_HANDLERS: dict[InputMode, KeyHandler] = {
    **{mode: handle_text_prompt for mode in SUBMITTERS},
    InputMode.CREATE_TYPE: handle_create_type,
    InputMode.TEXTAREA_EDIT: handle_textarea_key,
    InputMode.STATUS_MENU: handle_status_menu,
}

# Every (view, input mode) pair has exactly one handler; capture modes win.
ROUTES: dict[tuple[ViewMode, InputMode], KeyHandler] = {
    (view, mode): VIEW_HANDLERS[view] if mode == InputMode.NONE else INPUT_HANDLERS[mode]
    for view in ViewMode
    for mode in InputMode
}

_DETAIL_VIEWS = (ViewMode.DETAIL, ViewMode.GRAPH)


def route_key(state: AppState, key: str) -> Transition:
    return ROUTES[(state.view, state.input_mode)](state, key)


def _on_key(state: AppState, key: str) -> Transition:
    if state.message or state.error:
        state = replace(state, message="", error="")
    if state.show_help and state.input_mode == InputMode.NONE:
        # The help page is modal: only closing it or ctrl+c gets through.
        if key in ("ESC", "?"):
            return replace(state, show_help=False), ()
        if key != "CTRL_C":
            return state, ()
    return route_key(state, key)


def _on_items(state: AppState, event: ItemsLoaded) -> Transition:
    if event.error is not None:
        return with_error(replace(state, loaded=True), event.error), ()
    present = {item.id for item in event.items}
    state = replace(
        state,
        items=event.items,
        loaded=True,
        selected=frozenset(item_id for item_id in state.selected if item_id in present),
    )
    if state.view in _DETAIL_VIEWS and state.detail_id not in present:
        state = replace(state, view=ViewMode.LIST, detail_id=None, detail_focus=DetailFocus.NONE)
    return clamp_cursor(state), (LoadStale(None),)


def _on_detail(state: AppState, event: DetailLoaded) -> Transition:
    if event.error is not None:
        return with_error(state, event.error), ()
    data = DetailData(event.item_id, event.logs, event.depends_on, event.blocked_by)
    # Results for items no longer on screen are cached all the same.
    state = replace(state, details={**state.details, event.item_id: data})
    if event.item_id == state.detail_id:
        state = replace(state, dep_cursor=min(state.dep_cursor, max(0, len(data.dependencies) - 1)))
        if state.detail_focus == DetailFocus.DEPS and not data.dependencies:
            state = replace(state, detail_focus=DetailFocus.NONE)
    return state, ()


def _on_stale(state: AppState, event: StaleLoaded) -> Transition:
    if event.error is not None:
        return with_error(state, event.error), ()
    return replace(state, stale_ids=event.ids), ()


def _on_templates(state: AppState, event: TemplatesLoaded) -> Transition:
    if event.error is not None:
        return with_error(replace(state, templates=(), templates_loaded=False), event.error), ()
    cache = {**state.template_cache, **{template.id: template for template in event.templates}}
    size = len(event.templates)
    state = replace(
        state,
        templates=event.templates,
        templates_loaded=True,
        template_cache=cache,
        template_cursor=min(state.template_cursor, max(0, size - 1)),
    )
    if state.wizard is not None and state.wizard.template_index >= size:
        state = replace(state, wizard=replace(state.wizard, template_index=max(0, size - 1)))
    return state, ()


def _on_template(state: AppState, event: TemplateLoaded) -> Transition:
    if event.error is not None or event.template is None:
        return with_error(state, event.error or f"Template not found: {event.template_id}"), ()
    return replace(state, template_cache={**state.template_cache, event.template_id: event.template}), ()


def _on_config(state: AppState, event: ConfigLoaded) -> Transition:
    if event.error is not None:
        return with_error(state, event.error), ()
    state = replace(
        state,
        config_fields=event.fields,
        config_cursor=min(state.config_cursor, max(0, len(event.fields) - 1)),
        min_description_words=event.min_description_words,
    )
    if event.message:
        state = with_message(state, event.message)
    return state, ()


def _reload_commands(state: AppState) -> tuple[Command, ...]:
    if state.view in _DETAIL_VIEWS and state.detail_id is not None:
        return (LoadItems(), LoadDetail(state.detail_id))
    return (LoadItems(),)


def _on_action(state: AppState, event: ActionDone) -> Transition:
    if event.error is not None:
        state = with_error(state, event.error)
    elif event.message:
        state = with_message(state, event.message)
    return state, _reload_commands(state)


def _on_editor(state: AppState, event: EditorFinished) -> Transition:
    if not event.changed:
        if event.error is not None:
            return with_error(state, event.error), ()
        return with_message(state, "No changes made"), ()
    suffix = ""
    if event.error is not None:
        logger.warning("saving editor content despite: %s", event.error)
        state = with_error(state, event.error)
        # The save result replaces the banner, so it carries the warning too.
        suffix = f" ({event.error})"
    if event.target == DESCRIPTION_TARGET:
        command = RunAction(
            (StoreCall("set_description", (event.item_id, event.content)),),
            f"Updated description for {event.item_id}{suffix}",
        )
        return state, (command,)
    name = target_variable(event.target)
    if name is None:
        return with_error(state, f"Unknown edit target: {event.target}"), ()
    command = RunAction(
        (StoreCall("set_template_variable", (event.item_id, name, event.content)),),
        f"Updated {name} for {event.item_id}{suffix}",
    )
    return state, (command,)


def _on_resize(state: AppState, event: Resized) -> Transition:
    state = replace(state, width=max(1, event.width), height=max(1, event.height))
    return clamp_cursor(state), ()


def update(state: AppState, event: Event) -> Transition:
    """Apply one event to ``state``."""
    if isinstance(event, KeyPressed):
        return _on_key(state, event.key)
    if isinstance(event, Resized):
        return _on_resize(state, event)
    if isinstance(event, ItemsLoaded):
        return _on_items(state, event)
    if isinstance(event, DetailLoaded):
        return _on_detail(state, event)
    if isinstance(event, StaleLoaded):
        return _on_stale(state, event)
    if isinstance(event, TemplatesLoaded):
        return _on_templates(state, event)
    if isinstance(event, TemplateLoaded):
        return _on_template(state, event)
    if isinstance(event, ConfigLoaded):
        return _on_config(state, event)
    if isinstance(event, ActionDone):
        return _on_action(state, event)
    if isinstance(event, EditorFinished):
        return _on_editor(state, event)
    logger.debug("ignoring unknown event %r", event)
    return state, ()


def initial_commands(state: AppState) -> tuple[Command, ...]:
    """Commands the loop issues before the first key."""
    if state.detail_id is not None:
        return (LoadItems(), LoadDetail(state.detail_id))
    return (LoadItems(),)


__all__ = ["INPUT_HANDLERS", "ROUTES", "VIEW_HANDLERS", "initial_commands", "route_key", "update"]
