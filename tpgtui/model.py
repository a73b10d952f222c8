"""Core record types for items, dependencies, logs and templates.

Everything here is an immutable snapshot type; the store owns the data and
the UI only ever holds read copies. Lookup tables are static configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Mapping

STALE_THRESHOLD = timedelta(minutes=5)
MIN_PRIORITY = 1
MAX_PRIORITY = 5
DEFAULT_PRIORITY = 2


class ItemType(str, Enum):
    TASK = "task"
    EPIC = "epic"


class Status(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"
    CANCELED = "canceled"


ALL_STATUSES: tuple[Status, ...] = tuple(Status)
DEFAULT_VISIBLE_STATUSES: frozenset[Status] = frozenset(
    {Status.OPEN, Status.IN_PROGRESS, Status.BLOCKED}
)

STATUS_ICONS: Mapping[Status, str] = MappingProxyType(
    {
        Status.OPEN: "○",
        Status.IN_PROGRESS: "◐",
        Status.BLOCKED: "⊘",
        Status.DONE: "●",
        Status.CANCELED: "✗",
    }
)

# Single-letter codes accepted by batch status prompts.
STATUS_CODES: Mapping[str, Status] = MappingProxyType(
    {
        "o": Status.OPEN,
        "i": Status.IN_PROGRESS,
        "b": Status.BLOCKED,
        "d": Status.DONE,
        "c": Status.CANCELED,
    }
)


def status_icon(status: Status | str) -> str:
    try:
        return STATUS_ICONS[Status(status)]
    except ValueError:
        return "?"


def parse_status(value: str) -> Status | None:
    """Parse a full status name or a single-letter code."""
    text = value.strip().lower()
    if text in STATUS_CODES:
        return STATUS_CODES[text]
    try:
        return Status(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class Item:
    """A task or epic as last read from the store."""

    id: str
    project: str
    type: ItemType
    title: str
    description: str = ""
    status: Status = Status.OPEN
    priority: int = DEFAULT_PRIORITY
    parent_id: str | None = None
    labels: tuple[str, ...] = ()
    template_id: str | None = None
    template_step: int | None = None
    template_vars: Mapping[str, str] = field(default_factory=dict)
    template_hash: str | None = None
    worktree_branch: str | None = None
    worktree_base: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_epic(self) -> bool:
        return self.type == ItemType.EPIC

    @property
    def has_template(self) -> bool:
        return bool(self.template_id)


@dataclass(frozen=True)
class LogEntry:
    id: int
    item_id: str
    message: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class DepStatus:
    """One end of a dependency edge as shown in detail and graph views."""

    id: str
    title: str
    status: str


@dataclass(frozen=True)
class TemplateVariable:
    description: str = ""
    optional: bool = False
    default: str = ""

    @property
    def required(self) -> bool:
        return not self.optional and not self.default


@dataclass(frozen=True)
class TemplateStep:
    id: str = ""
    title: str = ""
    description: str = ""
    depends: tuple[str, ...] = ()


@dataclass(frozen=True)
class Template:
    """A reusable item blueprint loaded from a YAML or TOML file."""

    id: str
    title: str = ""
    description: str = ""
    worktree: bool = False
    variables: Mapping[str, TemplateVariable] = field(default_factory=dict)
    steps: tuple[TemplateStep, ...] = ()
    source_path: str = ""
    hash: str = ""
    source: str = ""

    def bodies(self) -> list[str]:
        """Return every text body that may reference template variables."""
        out = [self.title, self.description]
        for step in self.steps:
            out.append(step.title)
            out.append(step.description)
        return [body for body in out if body]


@dataclass(frozen=True)
class AgentContext:
    """Identity of the acting process, passed through on mutations."""

    id: str = ""
    type: str = ""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AgentContext:
        env = os.environ if environ is None else environ
        return cls(id=env.get("AGENT_ID", ""), type=env.get("AGENT_TYPE", ""))

    @property
    def is_active(self) -> bool:
        return bool(self.id)


def is_stale(item: Item, now: datetime) -> bool:
    """Return whether an in-progress item has gone quiet past the threshold."""
    if item.status != Status.IN_PROGRESS or item.updated_at is None:
        return False
    return now - item.updated_at > STALE_THRESHOLD


def valid_priority(value: int) -> bool:
    return MIN_PRIORITY <= value <= MAX_PRIORITY


__all__ = [
    "ALL_STATUSES",
    "AgentContext",
    "DEFAULT_PRIORITY",
    "DEFAULT_VISIBLE_STATUSES",
    "DepStatus",
    "Item",
    "ItemType",
    "LogEntry",
    "MAX_PRIORITY",
    "MIN_PRIORITY",
    "STALE_THRESHOLD",
    "STATUS_CODES",
    "STATUS_ICONS",
    "Status",
    "Template",
    "TemplateStep",
    "TemplateVariable",
    "is_stale",
    "parse_status",
    "status_icon",
    "valid_priority",
]
