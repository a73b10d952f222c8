"""Shared transition helpers and the item actions used by several views."""

from __future__ import annotations

from dataclasses import replace

from ..model import Status
from ..runtime.commands import Command, LoadDetail, LoadTemplate, RunAction, StoreCall
from ..runtime.state import (
    AppState,
    DetailFocus,
    InputMode,
    ViewMode,
    clamp_cursor,
    cursor_item,
    focus_item,
    item_by_id,
    with_message,
)

Transition = tuple[AppState, tuple[Command, ...]]

STARTABLE = frozenset({Status.OPEN, Status.BLOCKED})
COMPLETABLE = frozenset({Status.IN_PROGRESS})

PROMPT_LABELS: dict[InputMode, str] = {
    InputMode.BLOCK_REASON: "Block reason: ",
    InputMode.LOG_MESSAGE: "Log message: ",
    InputMode.CANCEL_REASON: "Cancel reason (optional): ",
    InputMode.SEARCH: "Search: ",
    InputMode.PROJECT_FILTER: "Project: ",
    InputMode.LABEL_FILTER: "Label: ",
    InputMode.ADD_DEPENDENCY: "Add blocker ID: ",
    InputMode.CREATE_TITLE: "Title: ",
    InputMode.CREATE_TYPE: "Type [t]ask / [e]pic: ",
    InputMode.BATCH_STATUS: "Status (o/i/b/d/c): ",
    InputMode.BATCH_PRIORITY: "Priority (1-5): ",
    InputMode.TEXTAREA_EDIT: "Description",
    InputMode.STATUS_MENU: "Set status",
    InputMode.CONFIG_VALUE: "Value: ",
}


def stay(state: AppState) -> Transition:
    return state, ()


def quit_app(state: AppState) -> Transition:
    return replace(state, should_quit=True), ()


def is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def action_targets(state: AppState) -> tuple[str, ...]:
    """Ids an action applies to: the multi-selection in the list, else the focus item."""
    if state.view == ViewMode.LIST and state.selected:
        present = {item.id for item in state.items}
        chosen = tuple(sorted(item_id for item_id in state.selected if item_id in present))
        if chosen:
            return chosen
    item = focus_item(state)
    return (item.id,) if item is not None else ()


def describe_ids(ids: tuple[str, ...]) -> str:
    if len(ids) <= 3:
        return ", ".join(ids)
    return f"{len(ids)} items"


def open_prompt(
    state: AppState,
    mode: InputMode,
    targets: tuple[str, ...] = (),
    text: str = "",
) -> Transition:
    return (
        replace(
            state,
            input_mode=mode,
            input_label=PROMPT_LABELS[mode],
            input_text=text,
            input_initial=text,
            input_error="",
            input_targets=targets,
            menu_cursor=0,
        ),
        (),
    )


def open_target_prompt(state: AppState, mode: InputMode) -> Transition:
    targets = action_targets(state)
    if not targets:
        return stay(state)
    return open_prompt(state, mode, targets)


def status_step(state: AppState, item_id: str, status: Status) -> StoreCall:
    return StoreCall("update_status", (item_id, status, state.agent))


def _guarded_status_change(
    state: AppState,
    targets: tuple[str, ...],
    allowed: frozenset[Status],
    status: Status,
    verb: str,
    refusal: str,
) -> Transition:
    eligible = tuple(
        item_id
        for item_id in targets
        if (item := item_by_id(state, item_id)) is not None and item.status in allowed
    )
    if not eligible:
        return with_message(state, refusal), ()
    command = RunAction(
        tuple(status_step(state, item_id, status) for item_id in eligible),
        f"{verb} {describe_ids(eligible)}",
    )
    return replace(state, selected=frozenset()), (command,)


def start_items(state: AppState, targets: tuple[str, ...] | None = None) -> Transition:
    targets = action_targets(state) if targets is None else targets
    if not targets:
        return stay(state)
    return _guarded_status_change(
        state, targets, STARTABLE, Status.IN_PROGRESS, "Started", "Can only start open or blocked tasks"
    )


def done_items(state: AppState, targets: tuple[str, ...] | None = None) -> Transition:
    targets = action_targets(state) if targets is None else targets
    if not targets:
        return stay(state)
    return _guarded_status_change(
        state, targets, COMPLETABLE, Status.DONE, "Completed", "Can only complete in_progress tasks"
    )


def delete_focus_item(state: AppState) -> Transition:
    item = focus_item(state)
    if item is None:
        return stay(state)
    command = RunAction((StoreCall("delete_item", (item.id,)),), f"Deleted {item.id}")
    return replace(state, selected=state.selected - {item.id}), (command,)


def open_status_menu(state: AppState) -> Transition:
    return open_target_prompt(state, InputMode.STATUS_MENU)


def open_detail(state: AppState, item_id: str) -> Transition:
    """Switch the detail view to ``item_id`` and request its data."""
    item = item_by_id(state, item_id)
    if item is None:
        return stay(state)
    state = replace(
        state,
        view=ViewMode.DETAIL,
        detail_id=item_id,
        detail_focus=DetailFocus.NONE,
        dep_cursor=0,
        var_cursor=0,
        desc_scroll=0,
        expanded_vars=frozenset(),
    )
    commands: list[Command] = [LoadDetail(item_id)]
    if item.template_id and item.template_id not in state.template_cache:
        commands.append(LoadTemplate(item.template_id))
    return state, tuple(commands)


def open_cursor_detail(state: AppState) -> Transition:
    item = cursor_item(state)
    if item is None:
        return stay(state)
    return open_detail(state, item.id)


def refilter(state: AppState, filter_state) -> AppState:
    return clamp_cursor(replace(state, filter=filter_state))


__all__ = [
    "COMPLETABLE",
    "PROMPT_LABELS",
    "STARTABLE",
    "Transition",
    "action_targets",
    "delete_focus_item",
    "describe_ids",
    "done_items",
    "is_printable",
    "open_cursor_detail",
    "open_detail",
    "open_prompt",
    "open_status_menu",
    "open_target_prompt",
    "quit_app",
    "refilter",
    "start_items",
    "status_step",
    "stay",
]
