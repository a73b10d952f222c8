"""Input-capture sub-modes: one-line prompts, the type picker and the status menu.

While a prompt is open every key lands here. Local validation failures set
``input_error`` and keep the prompt open without issuing a command.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace

from ..model import DEFAULT_PRIORITY, STATUS_CODES, ItemType, Status, valid_priority
from ..runtime.commands import CreateFromWizard, RunAction, SetConfigValue, StoreCall
from ..runtime.state import AppState, InputMode, close_input, item_by_id
from ..wizard import WizardDraft
from .common import (
    Transition,
    describe_ids,
    done_items,
    is_printable,
    open_prompt,
    quit_app,
    refilter,
    start_items,
    status_step,
    stay,
)

Submitter = Callable[[AppState, str], Transition]

STATUS_MENU_OPTIONS: tuple[tuple[str, str, Status], ...] = (
    ("s", "Start", Status.IN_PROGRESS),
    ("d", "Done", Status.DONE),
    ("b", "Block", Status.BLOCKED),
    ("c", "Cancel", Status.CANCELED),
)


def _reject(state: AppState, message: str) -> Transition:
    return replace(state, input_error=message), ()


def edit_input_text(state: AppState, key: str) -> AppState | None:
    """Apply an editing key to ``input_text``; ``None`` when the key is not an edit."""
    if key == "BACKSPACE":
        return replace(state, input_text=state.input_text[:-1], input_error="")
    if key == "CTRL_U":
        return replace(state, input_text="", input_error="")
    if key == "CTRL_W":
        trimmed = state.input_text.rstrip()
        cut = trimmed.rfind(" ")
        return replace(state, input_text=trimmed[: cut + 1] if cut >= 0 else "", input_error="")
    if is_printable(key):
        return replace(state, input_text=state.input_text + key, input_error="")
    return None


def _submit_block(state: AppState, text: str) -> Transition:
    reason = text.strip()
    if not reason:
        return _reject(state, "Block reason is required")
    steps: list[StoreCall] = []
    for item_id in state.input_targets:
        steps.append(status_step(state, item_id, Status.BLOCKED))
        steps.append(StoreCall("add_log", (item_id, f"Blocked: {reason}")))
    command = RunAction(tuple(steps), f"Blocked {describe_ids(state.input_targets)}")
    return replace(close_input(state), selected=frozenset()), (command,)


def _submit_log(state: AppState, text: str) -> Transition:
    message = text.strip()
    if not message:
        return _reject(state, "Log message is required")
    steps = tuple(StoreCall("add_log", (item_id, message)) for item_id in state.input_targets)
    command = RunAction(steps, f"Logged to {describe_ids(state.input_targets)}")
    return replace(close_input(state), selected=frozenset()), (command,)


def _submit_cancel(state: AppState, text: str) -> Transition:
    reason = text.strip()
    steps: list[StoreCall] = []
    for item_id in state.input_targets:
        steps.append(status_step(state, item_id, Status.CANCELED))
        if reason:
            steps.append(StoreCall("add_log", (item_id, f"Canceled: {reason}")))
    command = RunAction(tuple(steps), f"Canceled {describe_ids(state.input_targets)}")
    return replace(close_input(state), selected=frozenset()), (command,)


def _submit_search(state: AppState, text: str) -> Transition:
    return refilter(close_input(state), replace(state.filter, search=text)), ()


def _submit_project(state: AppState, text: str) -> Transition:
    return refilter(close_input(state), replace(state.filter, project=text.strip())), ()


def _submit_label(state: AppState, text: str) -> Transition:
    return refilter(close_input(state), replace(state.filter, label=text.strip())), ()


def _submit_add_dependency(state: AppState, text: str) -> Transition:
    blocker = text.strip()
    if not blocker:
        return _reject(state, "Blocker ID is required")
    if item_by_id(state, blocker) is None:
        return _reject(state, f"Unknown item: {blocker}")
    targets = tuple(item_id for item_id in state.input_targets if item_id != blocker)
    if not targets:
        return _reject(state, "An item cannot block itself")
    steps = tuple(StoreCall("add_dependency", (blocker, item_id)) for item_id in targets)
    command = RunAction(steps, f"{blocker} now blocks {describe_ids(targets)}")
    return replace(close_input(state), selected=frozenset()), (command,)


def _submit_create_title(state: AppState, text: str) -> Transition:
    title = text.strip()
    if not title:
        return _reject(state, "Title is required")
    return open_prompt(replace(close_input(state), pending_title=title), InputMode.CREATE_TYPE)


def _submit_batch_status(state: AppState, text: str) -> Transition:
    code = text.strip().lower()
    status = STATUS_CODES.get(code)
    if status is None:
        return _reject(state, f"Unknown status code: {code or '(empty)'}")
    steps = tuple(status_step(state, item_id, status) for item_id in state.input_targets)
    command = RunAction(steps, f"Set {describe_ids(state.input_targets)} to {status.value}")
    return replace(close_input(state), selected=frozenset()), (command,)


def _submit_batch_priority(state: AppState, text: str) -> Transition:
    try:
        priority = int(text.strip())
    except ValueError:
        return _reject(state, "Priority must be a number from 1 to 5")
    if not valid_priority(priority):
        return _reject(state, "Priority must be a number from 1 to 5")
    steps = tuple(StoreCall("update_priority", (item_id, priority)) for item_id in state.input_targets)
    command = RunAction(steps, f"Set priority of {describe_ids(state.input_targets)} to P{priority}")
    return replace(close_input(state), selected=frozenset()), (command,)


def _submit_config_value(state: AppState, text: str) -> Transition:
    if not state.input_targets:
        return stay(close_input(state))
    return close_input(state), (SetConfigValue(state.input_targets[0], text.strip()),)


SUBMITTERS: dict[InputMode, Submitter] = {
    InputMode.BLOCK_REASON: _submit_block,
    InputMode.LOG_MESSAGE: _submit_log,
    InputMode.CANCEL_REASON: _submit_cancel,
    InputMode.SEARCH: _submit_search,
    InputMode.PROJECT_FILTER: _submit_project,
    InputMode.LABEL_FILTER: _submit_label,
    InputMode.ADD_DEPENDENCY: _submit_add_dependency,
    InputMode.CREATE_TITLE: _submit_create_title,
    InputMode.BATCH_STATUS: _submit_batch_status,
    InputMode.BATCH_PRIORITY: _submit_batch_priority,
    InputMode.CONFIG_VALUE: _submit_config_value,
}


def _cancel(state: AppState) -> Transition:
    if state.input_mode == InputMode.SEARCH:
        return refilter(close_input(state), replace(state.filter, search=state.input_initial)), ()
    return close_input(state), ()


def handle_text_prompt(state: AppState, key: str) -> Transition:
    """Shared key handling for every one-line prompt."""
    if key == "ESC":
        return _cancel(state)
    if key == "CTRL_C":
        return quit_app(state)
    if key == "ENTER":
        return SUBMITTERS[state.input_mode](state, state.input_text)
    edited = edit_input_text(state, key)
    if edited is None:
        return stay(state)
    if state.input_mode == InputMode.SEARCH:
        # Search filters while typing.
        return refilter(edited, replace(state.filter, search=edited.input_text)), ()
    return edited, ()


def handle_create_type(state: AppState, key: str) -> Transition:
    if key == "ESC":
        return replace(close_input(state), pending_title=""), ()
    if key == "CTRL_C":
        return quit_app(state)
    item_type = {"t": ItemType.TASK, "e": ItemType.EPIC}.get(key.lower() if len(key) == 1 else "")
    if item_type is None:
        return _reject(state, "Press t for task or e for epic")
    draft = WizardDraft(
        item_type=item_type,
        priority=DEFAULT_PRIORITY,
        project=state.project,
        title=state.pending_title,
        description="",
    )
    return replace(close_input(state), pending_title=""), (CreateFromWizard(draft),)


def choose_status(state: AppState, status: Status) -> Transition:
    """Apply a status-menu choice to the prompt's targets."""
    targets = state.input_targets
    closed = close_input(state)
    if status == Status.IN_PROGRESS:
        return start_items(closed, targets)
    if status == Status.DONE:
        return done_items(closed, targets)
    mode = InputMode.BLOCK_REASON if status == Status.BLOCKED else InputMode.CANCEL_REASON
    return open_prompt(closed, mode, targets)


def handle_status_menu(state: AppState, key: str) -> Transition:
    if key in {"ESC", "q"}:
        return close_input(state), ()
    if key == "CTRL_C":
        return quit_app(state)
    if key in {"j", "DOWN"}:
        return replace(state, menu_cursor=min(len(STATUS_MENU_OPTIONS) - 1, state.menu_cursor + 1)), ()
    if key in {"k", "UP"}:
        return replace(state, menu_cursor=max(0, state.menu_cursor - 1)), ()
    if key == "ENTER":
        _shortcut, _label, status = STATUS_MENU_OPTIONS[state.menu_cursor]
        return choose_status(state, status)
    for shortcut, _label, status in STATUS_MENU_OPTIONS:
        if key == shortcut:
            return choose_status(state, status)
    return stay(state)


__all__ = [
    "STATUS_MENU_OPTIONS",
    "SUBMITTERS",
    "choose_status",
    "edit_input_text",
    "handle_create_type",
    "handle_status_menu",
    "handle_text_prompt",
]
