"""Eight-step creation wizard.

The wizard is a pure sub-machine: ``handle_wizard_key`` takes the current
``WizardState`` and one key and returns the next state plus an outcome tag
the router turns into commands (load templates, open the textarea, submit).
Nothing reaches the store until the final step produces a ``WizardDraft``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Mapping

from .model import DEFAULT_PRIORITY, ItemType, Template, valid_priority
from .views.templates import render_text, slugify
from .views.text import word_count

MIN_DESCRIPTION_WORDS = 3
MIN_DESCRIPTION_CHARS = 20
_ID_SPLIT_RE = re.compile(r"[,\s]+")


class WizardStep(IntEnum):
    TYPE = 1
    PRIORITY_PROJECT = 2
    RELATIONSHIPS = 3
    WORKTREE = 4
    METHOD = 5
    DETAILS = 6
    DESCRIPTION = 7
    CONFIRM = 8


FIRST_STEP = WizardStep.TYPE
LAST_STEP = WizardStep.CONFIRM

STEP_TITLES: Mapping[WizardStep, str] = {
    WizardStep.TYPE: "Type",
    WizardStep.PRIORITY_PROJECT: "Priority & project",
    WizardStep.RELATIONSHIPS: "Relationships",
    WizardStep.WORKTREE: "Worktree",
    WizardStep.METHOD: "Method",
    WizardStep.DETAILS: "Details",
    WizardStep.DESCRIPTION: "Description",
    WizardStep.CONFIRM: "Confirm",
}


class WizardOutcome(str, Enum):
    NONE = "none"
    EXIT = "exit"
    LOAD_TEMPLATES = "load_templates"
    EDIT_DESCRIPTION = "edit_description"
    SUBMIT = "submit"


@dataclass(frozen=True)
class WizardState:
    step: WizardStep = WizardStep.TYPE
    focus: int = 0
    error: str = ""
    item_type: ItemType = ItemType.TASK
    priority: str = str(DEFAULT_PRIORITY)
    project: str = ""
    parent: str = ""
    depends: str = ""
    blocks: str = ""
    branch: str = ""
    base: str = ""
    use_template: bool = False
    template_index: int = 0
    title: str = ""
    labels: str = ""
    template_vars: Mapping[str, str] = field(default_factory=dict)
    description: str = ""
    description_seeded: bool = False


@dataclass(frozen=True)
class WizardContext:
    """Read-only data the wizard validates against."""

    items: Sequence = ()
    templates: Sequence[Template] = ()
    templates_loaded: bool = False
    project: str = ""


@dataclass(frozen=True)
class WizardDraft:
    """Fully validated item fields plus the relationships to create after it."""

    item_type: ItemType
    priority: int
    project: str
    title: str
    description: str
    parent_id: str | None = None
    depends_on: tuple[str, ...] = ()
    blocks: tuple[str, ...] = ()
    labels: tuple[str, ...] = ()
    worktree_branch: str | None = None
    worktree_base: str | None = None
    template_id: str | None = None
    template_vars: Mapping[str, str] = field(default_factory=dict)
    template_hash: str | None = None


def split_ids(text: str) -> tuple[str, ...]:
    seen: list[str] = []
    for part in _ID_SPLIT_RE.split(text.strip()):
        if part and part not in seen:
            seen.append(part)
    return tuple(seen)


def split_labels(text: str) -> tuple[str, ...]:
    seen: list[str] = []
    for part in text.split(","):
        label = part.strip()
        if label and label not in seen:
            seen.append(label)
    return tuple(seen)


def description_accepted(text: str) -> bool:
    """A description needs at least three words or twenty characters."""
    return word_count(text) >= MIN_DESCRIPTION_WORDS or len(text.strip()) >= MIN_DESCRIPTION_CHARS


def next_step(wizard: WizardState) -> WizardStep:
    step = min(LAST_STEP, wizard.step + 1)
    if step == WizardStep.WORKTREE and wizard.item_type != ItemType.EPIC:
        step = WizardStep.METHOD
    return WizardStep(step)


def previous_step(wizard: WizardState) -> WizardStep:
    step = max(FIRST_STEP, wizard.step - 1)
    if step == WizardStep.WORKTREE and wizard.item_type != ItemType.EPIC:
        step = WizardStep.RELATIONSHIPS
    return WizardStep(step)


def selected_template(wizard: WizardState, ctx: WizardContext) -> Template | None:
    if not wizard.use_template or not ctx.templates:
        return None
    index = max(0, min(wizard.template_index, len(ctx.templates) - 1))
    return ctx.templates[index]


def step_fields(wizard: WizardState, ctx: WizardContext) -> tuple[str, ...]:
    """Names of the editable fields on the current step, in focus order."""
    step = wizard.step
    if step == WizardStep.PRIORITY_PROJECT:
        return ("priority", "project")
    if step == WizardStep.RELATIONSHIPS:
        return ("parent", "depends", "blocks")
    if step == WizardStep.WORKTREE:
        return ("branch", "base")
    if step == WizardStep.DETAILS:
        template = selected_template(wizard, ctx)
        if template is not None:
            return tuple(f"var:{name}" for name in template.variables)
        return ("title", "labels")
    return ()


def focused_field(wizard: WizardState, ctx: WizardContext) -> str | None:
    names = step_fields(wizard, ctx)
    if not names:
        return None
    return names[wizard.focus % len(names)]


def field_value(wizard: WizardState, name: str) -> str:
    if name.startswith("var:"):
        return wizard.template_vars.get(name[4:], "")
    return str(getattr(wizard, name))


def _set_field(wizard: WizardState, name: str, value: str) -> WizardState:
    if name.startswith("var:"):
        updated = dict(wizard.template_vars)
        updated[name[4:]] = value
        return replace(wizard, template_vars=updated)
    return replace(wizard, **{name: value})


def _items_by_id(ctx: WizardContext) -> dict[str, object]:
    return {item.id: item for item in ctx.items}


def resolved_project(wizard: WizardState, ctx: WizardContext) -> str:
    return wizard.project.strip() or ctx.project


def template_variables(wizard: WizardState, template: Template) -> dict[str, str]:
    values: dict[str, str] = {}
    for name, variable in template.variables.items():
        value = wizard.template_vars.get(name, "").strip()
        values[name] = value or variable.default
    return values


def validate_step(wizard: WizardState, ctx: WizardContext) -> str:
    """Return an inline error for the current step, or an empty string."""
    step = wizard.step
    if step == WizardStep.PRIORITY_PROJECT:
        try:
            priority = int(wizard.priority.strip())
        except ValueError:
            return "Priority must be a number from 1 to 5"
        if not valid_priority(priority):
            return "Priority must be a number from 1 to 5"
        if not resolved_project(wizard, ctx):
            return "Project is required"
    elif step == WizardStep.RELATIONSHIPS:
        known = _items_by_id(ctx)
        parent = wizard.parent.strip()
        if parent:
            target = known.get(parent)
            if target is None:
                return f"Unknown parent: {parent}"
            if not target.is_epic:
                return f"Parent {parent} is not an epic"
        for label, text in (("dependency", wizard.depends), ("blocked item", wizard.blocks)):
            for item_id in split_ids(text):
                if item_id not in known:
                    return f"Unknown {label}: {item_id}"
    elif step == WizardStep.METHOD:
        if wizard.use_template and not ctx.templates:
            return "No templates available" if ctx.templates_loaded else "Templates are still loading"
    elif step == WizardStep.DETAILS:
        template = selected_template(wizard, ctx)
        if template is None:
            if not wizard.title.strip():
                return "Title is required"
        else:
            values = template_variables(wizard, template)
            for name, variable in template.variables.items():
                if not variable.optional and not values[name]:
                    return f"Variable {name} is required"
    elif step == WizardStep.DESCRIPTION:
        if not description_accepted(wizard.description):
            return "Description needs at least 3 words or 20 characters"
    return ""


def _enter_step(wizard: WizardState, step: WizardStep, ctx: WizardContext) -> tuple[WizardState, WizardOutcome]:
    wizard = replace(wizard, step=step, focus=0, error="")
    if step == WizardStep.METHOD and not ctx.templates_loaded:
        return wizard, WizardOutcome.LOAD_TEMPLATES
    if step == WizardStep.DESCRIPTION:
        if not wizard.description_seeded:
            template = selected_template(wizard, ctx)
            seed = wizard.description
            if template is not None and not seed:
                seed = render_text(template.description, template_variables(wizard, template))
            wizard = replace(wizard, description=seed, description_seeded=True)
        return wizard, WizardOutcome.EDIT_DESCRIPTION
    return wizard, WizardOutcome.NONE


def advance(wizard: WizardState, ctx: WizardContext) -> tuple[WizardState, WizardOutcome]:
    if wizard.step == LAST_STEP:
        return wizard, WizardOutcome.SUBMIT
    error = validate_step(wizard, ctx)
    if error:
        return replace(wizard, error=error), WizardOutcome.NONE
    return _enter_step(wizard, next_step(wizard), ctx)


def retreat(wizard: WizardState) -> tuple[WizardState, WizardOutcome]:
    if wizard.step == FIRST_STEP:
        return wizard, WizardOutcome.EXIT
    return replace(wizard, step=previous_step(wizard), focus=0, error=""), WizardOutcome.NONE


def submit_description(wizard: WizardState, text: str, ctx: WizardContext) -> tuple[WizardState, WizardOutcome]:
    """Store textarea content and advance when the description is accepted."""
    wizard = replace(wizard, description=text, description_seeded=True)
    return advance(wizard, ctx)


def _handle_choice_step(wizard: WizardState, key: str, ctx: WizardContext) -> WizardState:
    if wizard.step == WizardStep.TYPE:
        if key == "t":
            return replace(wizard, item_type=ItemType.TASK)
        if key == "e":
            return replace(wizard, item_type=ItemType.EPIC)
        if key in {"UP", "DOWN", "j", "k", " "}:
            flipped = ItemType.EPIC if wizard.item_type == ItemType.TASK else ItemType.TASK
            return replace(wizard, item_type=flipped)
        return wizard
    if wizard.step == WizardStep.METHOD:
        if key == "a":
            return replace(wizard, use_template=False)
        if key == "t":
            return replace(wizard, use_template=True)
        if key == " ":
            return replace(wizard, use_template=not wizard.use_template)
        if wizard.use_template and key in {"UP", "DOWN", "j", "k"} and ctx.templates:
            delta = 1 if key in {"DOWN", "j"} else -1
            index = max(0, min(len(ctx.templates) - 1, wizard.template_index + delta))
            return replace(wizard, template_index=index, template_vars={})
        return wizard
    return wizard


def _handle_field_key(wizard: WizardState, key: str, ctx: WizardContext) -> WizardState:
    name = focused_field(wizard, ctx)
    if name is None:
        return wizard
    value = field_value(wizard, name)
    if name == "priority":
        if key in {"1", "2", "3", "4", "5"}:
            return replace(wizard, priority=key)
        if key in {"UP", "DOWN", "+", "-"}:
            try:
                current = int(value)
            except ValueError:
                current = DEFAULT_PRIORITY
            step = -1 if key in {"UP", "-"} else 1
            candidate = current + step
            return replace(wizard, priority=str(candidate if valid_priority(candidate) else current))
        if key == "BACKSPACE":
            return replace(wizard, priority="")
        return wizard
    if key == "BACKSPACE":
        return _set_field(wizard, name, value[:-1])
    if key == "CTRL_U":
        return _set_field(wizard, name, "")
    if len(key) == 1 and key.isprintable():
        return _set_field(wizard, name, value + key)
    return wizard


def handle_wizard_key(wizard: WizardState, key: str, ctx: WizardContext) -> tuple[WizardState, WizardOutcome]:
    """Apply one key to the wizard outside of the description textarea."""
    if key == "ESC":
        return retreat(wizard)
    if key == "ENTER":
        return advance(replace(wizard, error=""), ctx)
    if key == "TAB":
        names = step_fields(wizard, ctx)
        if names:
            return replace(wizard, focus=(wizard.focus + 1) % len(names)), WizardOutcome.NONE
        return wizard, WizardOutcome.NONE
    if wizard.step == WizardStep.DESCRIPTION and key == "e":
        return wizard, WizardOutcome.EDIT_DESCRIPTION
    if step_fields(wizard, ctx):
        return _handle_field_key(wizard, key, ctx), WizardOutcome.NONE
    return _handle_choice_step(wizard, key, ctx), WizardOutcome.NONE


def build_draft(wizard: WizardState, ctx: WizardContext) -> WizardDraft:
    """Turn a confirmed wizard into the fields of the item to create."""
    template = selected_template(wizard, ctx)
    project = resolved_project(wizard, ctx)
    labels = split_labels(wizard.labels)
    is_epic = wizard.item_type == ItemType.EPIC
    branch = wizard.branch.strip() if is_epic else ""
    base = wizard.base.strip() if is_epic else ""
    if template is None:
        return WizardDraft(
            item_type=wizard.item_type,
            priority=int(wizard.priority),
            project=project,
            title=wizard.title.strip(),
            description=wizard.description,
            parent_id=wizard.parent.strip() or None,
            depends_on=split_ids(wizard.depends),
            blocks=split_ids(wizard.blocks),
            labels=labels,
            worktree_branch=branch or None,
            worktree_base=base or None,
        )
    values = template_variables(wizard, template)
    title = render_text(template.title, values).strip() or template.id
    if is_epic and template.worktree and not branch:
        branch = f"feature/{slugify(title)}"
    return WizardDraft(
        item_type=wizard.item_type,
        priority=int(wizard.priority),
        project=project,
        title=title,
        description=wizard.description,
        parent_id=wizard.parent.strip() or None,
        depends_on=split_ids(wizard.depends),
        blocks=split_ids(wizard.blocks),
        labels=labels,
        worktree_branch=branch or None,
        worktree_base=base or None,
        template_id=template.id,
        template_vars=values,
        template_hash=template.hash,
    )


__all__ = [
    "FIRST_STEP",
    "LAST_STEP",
    "STEP_TITLES",
    "WizardContext",
    "WizardDraft",
    "WizardOutcome",
    "WizardState",
    "WizardStep",
    "advance",
    "build_draft",
    "description_accepted",
    "field_value",
    "focused_field",
    "handle_wizard_key",
    "next_step",
    "previous_step",
    "retreat",
    "selected_template",
    "split_ids",
    "split_labels",
    "step_fields",
    "submit_description",
    "validate_step",
]
