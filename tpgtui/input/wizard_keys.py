"""Glue between the pure creation wizard and the application state."""

from __future__ import annotations

from dataclasses import replace

from ..runtime.commands import CreateFromWizard, LoadTemplates
from ..runtime.state import AppState, InputMode, ViewMode, clamp_cursor, close_input
from ..wizard import (
    WizardContext,
    WizardOutcome,
    WizardState,
    build_draft,
    handle_wizard_key,
    submit_description,
)
from .common import Transition, open_prompt, quit_app, stay


def wizard_context(state: AppState) -> WizardContext:
    return WizardContext(
        items=state.items,
        templates=state.templates,
        templates_loaded=state.templates_loaded,
        project=state.project,
    )


def _apply_outcome(state: AppState, wizard: WizardState, outcome: WizardOutcome) -> Transition:
    if outcome == WizardOutcome.EXIT:
        return clamp_cursor(replace(state, view=ViewMode.LIST, wizard=None)), ()
    if outcome == WizardOutcome.SUBMIT:
        draft = build_draft(wizard, wizard_context(state))
        state = clamp_cursor(replace(state, view=ViewMode.LIST, wizard=None))
        return state, (CreateFromWizard(draft),)
    state = replace(state, wizard=wizard)
    if outcome == WizardOutcome.LOAD_TEMPLATES:
        return state, (LoadTemplates(),)
    if outcome == WizardOutcome.EDIT_DESCRIPTION:
        return open_prompt(state, InputMode.TEXTAREA_EDIT, text=wizard.description)
    return state, ()


def handle_wizard_view_key(state: AppState, key: str) -> Transition:
    if state.wizard is None:
        return clamp_cursor(replace(state, view=ViewMode.LIST)), ()
    if key == "CTRL_C":
        return quit_app(state)
    wizard, outcome = handle_wizard_key(state.wizard, key, wizard_context(state))
    return _apply_outcome(state, wizard, outcome)


def handle_textarea_key(state: AppState, key: str) -> Transition:
    """Multi-line description editing; ENTER inserts a newline."""
    if state.wizard is None:
        return close_input(state), ()
    if key == "ESC":
        # Leave the textarea but keep what was typed.
        wizard = replace(state.wizard, description=state.input_text)
        return replace(close_input(state), wizard=wizard), ()
    if key == "CTRL_C":
        return quit_app(state)
    if key in {"CTRL_S", "TAB"}:
        wizard, outcome = submit_description(state.wizard, state.input_text, wizard_context(state))
        if wizard.error:
            return replace(state, wizard=wizard, input_error=wizard.error), ()
        return _apply_outcome(close_input(state), wizard, outcome)
    if key == "ENTER":
        return replace(state, input_text=state.input_text + "\n", input_error=""), ()
    if key == "BACKSPACE":
        return replace(state, input_text=state.input_text[:-1], input_error=""), ()
    if key == "CTRL_U":
        # Clear the current line only.
        head, sep, _tail = state.input_text.rpartition("\n")
        return replace(state, input_text=head + sep, input_error=""), ()
    if len(key) == 1 and key.isprintable():
        return replace(state, input_text=state.input_text + key, input_error=""), ()
    return stay(state)


__all__ = ["handle_textarea_key", "handle_wizard_view_key", "wizard_context"]
