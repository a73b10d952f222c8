"""Pages of the creation wizard, including the description textarea."""

from __future__ import annotations

from ..ansi import wrap_ansi_line
from ..input.wizard_keys import wizard_context
from ..model import ItemType
from ..runtime.state import AppState, InputMode
from ..wizard import (
    STEP_TITLES,
    WizardState,
    WizardStep,
    build_draft,
    field_value,
    focused_field,
    selected_template,
    step_fields,
)
from .chrome import RenderContext, paint

FIELD_LABELS: dict[str, str] = {
    "priority": "Priority (1-5)",
    "project": "Project",
    "parent": "Parent epic",
    "depends": "Depends on",
    "blocks": "Blocks",
    "branch": "Branch",
    "base": "Base",
    "title": "Title",
    "labels": "Labels",
}

FIELD_HINTS: dict[str, str] = {
    "project": "empty uses the current project",
    "depends": "ids separated by spaces or commas",
    "blocks": "ids separated by spaces or commas",
    "labels": "comma separated",
    "branch": "empty derives one from the title",
}


def _choice(selected: bool, text: str, ctx: RenderContext) -> str:
    marker = "(•)" if selected else "( )"
    row = f"  {marker} {text}"
    return paint(ctx.theme.bold, row, ctx.theme) if selected else row


def _field_rows(state: AppState, wizard: WizardState, ctx: RenderContext) -> list[str]:
    theme = ctx.theme
    wctx = wizard_context(state)
    focus = focused_field(wizard, wctx)
    template = selected_template(wizard, wctx)
    rows: list[str] = []
    for name in step_fields(wizard, wctx):
        if name.startswith("var:"):
            var_name = name[4:]
            variable = template.variables.get(var_name) if template is not None else None
            label = var_name + ("" if variable is None or variable.optional else " *")
            hint = ""
            if variable is not None:
                hint = variable.description
                if variable.default:
                    hint = f"{hint} (default: {variable.default})".strip()
        else:
            label = FIELD_LABELS.get(name, name)
            hint = FIELD_HINTS.get(name, "")
            if name == "project" and not wizard.project:
                hint = f"empty uses {state.project or '(none)'}"
        value = field_value(wizard, name)
        if name == focus:
            rows.append(paint(theme.prompt, f"> {label}: ", theme) + value + "█")
        else:
            rows.append(f"  {label}: {value}")
        if hint:
            rows.append(paint(theme.dim, f"      {hint}", theme))
    return rows


def _method_rows(state: AppState, wizard: WizardState, ctx: RenderContext, rows: int) -> list[str]:
    theme = ctx.theme
    out = [
        _choice(not wizard.use_template, "Ad hoc  [a]", ctx),
        _choice(wizard.use_template, "From template  [t]", ctx),
        "",
    ]
    if not wizard.use_template:
        return out
    if not state.templates_loaded:
        return out + [paint(theme.dim, "  Loading templates…", theme)]
    if not state.templates:
        return out + [paint(theme.dim, "  No templates available", theme)]
    visible = max(1, rows - len(out) - 2)
    start = max(0, wizard.template_index - visible + 1)
    for index in range(start, min(len(state.templates), start + visible)):
        template = state.templates[index]
        text = f"{template.id}  {template.title}"
        if index == wizard.template_index:
            out.append(paint(theme.reverse, f"  > {text}", theme) if theme.reverse else f"  > {text}")
        else:
            out.append(f"    {text}")
    return out


def _description_rows(state: AppState, wizard: WizardState, ctx: RenderContext, rows: int) -> list[str]:
    theme = ctx.theme
    editing = state.input_mode == InputMode.TEXTAREA_EDIT
    text = state.input_text if editing else wizard.description
    out: list[str] = []
    body = (text + "█") if editing else text
    for line in body.split("\n"):
        out.extend("  " + chunk for chunk in wrap_ansi_line(line, max(1, state.width - 4)))
    if not text and not editing:
        out = [paint(theme.dim, "  (empty)", theme)]
    # Keep the cursor end of a long textarea on screen.
    out = out[-max(1, rows - 3):]
    hint = "ctrl+s or tab to accept · enter newline · esc leave" if editing else "e to edit · enter to continue"
    out.append("")
    out.append(paint(theme.dim, hint, theme))
    if editing and state.input_error:
        out.append(paint(theme.input_error, state.input_error, theme))
    return out


def _confirm_rows(state: AppState, wizard: WizardState, ctx: RenderContext) -> list[str]:
    draft = build_draft(wizard, wizard_context(state))
    rows = [
        f"  Type:      {draft.item_type.value}",
        f"  Title:     {draft.title}",
        f"  Priority:  P{draft.priority}",
        f"  Project:   {draft.project}",
    ]
    if draft.parent_id:
        rows.append(f"  Parent:    {draft.parent_id}")
    if draft.depends_on:
        rows.append(f"  Depends:   {', '.join(draft.depends_on)}")
    if draft.blocks:
        rows.append(f"  Blocks:    {', '.join(draft.blocks)}")
    if draft.labels:
        rows.append(f"  Labels:    {', '.join(draft.labels)}")
    if draft.worktree_branch:
        rows.append(f"  Worktree:  {draft.worktree_branch}" + (f" from {draft.worktree_base}" if draft.worktree_base else ""))
    if draft.template_id:
        rows.append(f"  Template:  {draft.template_id}")
        rows.extend(f"    {name} = {value}" for name, value in sorted(draft.template_vars.items()))
    first_line = draft.description.split("\n", 1)[0]
    rows.append(f"  Description: {first_line}")
    rows.append("")
    rows.append(paint(ctx.theme.dim, "enter to create · esc to go back", ctx.theme))
    return rows


def render_wizard(state: AppState, ctx: RenderContext, rows: int) -> list[str]:
    theme = ctx.theme
    wizard = state.wizard
    if wizard is None:
        return []
    step = wizard.step
    out = [paint(theme.heading, f"Step {int(step)}/{len(WizardStep)} · {STEP_TITLES[step]}", theme), ""]
    if step == WizardStep.TYPE:
        out.append(_choice(wizard.item_type == ItemType.TASK, "Task  [t]", ctx))
        out.append(_choice(wizard.item_type == ItemType.EPIC, "Epic  [e]", ctx))
    elif step == WizardStep.METHOD:
        out.extend(_method_rows(state, wizard, ctx, rows - 2))
    elif step == WizardStep.DESCRIPTION:
        out.extend(_description_rows(state, wizard, ctx, rows - 4))
    elif step == WizardStep.CONFIRM:
        out.extend(_confirm_rows(state, wizard, ctx))
    else:
        out.extend(_field_rows(state, wizard, ctx))
    if wizard.error:
        out.append("")
        out.append(paint(theme.input_error, wizard.error, theme))
    return out[:rows]


__all__ = ["FIELD_HINTS", "FIELD_LABELS", "render_wizard"]
