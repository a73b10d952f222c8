"""Events consumed by ``update``: keys, resizes and completion messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from ..model import DepStatus, Item, LogEntry, Template
from ..project_config import ConfigField


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class ItemsLoaded:
    items: tuple[Item, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class DetailLoaded:
    item_id: str
    logs: tuple[LogEntry, ...] = ()
    depends_on: tuple[DepStatus, ...] = ()
    blocked_by: tuple[DepStatus, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class StaleLoaded:
    ids: frozenset[str] = frozenset()
    error: str | None = None


@dataclass(frozen=True)
class TemplatesLoaded:
    templates: tuple[Template, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class TemplateLoaded:
    template_id: str
    template: Template | None = None
    error: str | None = None


@dataclass(frozen=True)
class ConfigLoaded:
    fields: tuple[ConfigField, ...] = ()
    message: str = ""
    error: str | None = None
    min_description_words: int = 0


@dataclass(frozen=True)
class ActionDone:
    message: str = ""
    error: str | None = None
    created_id: str | None = None


@dataclass(frozen=True)
class EditorFinished:
    item_id: str
    target: str
    changed: bool = False
    content: str = ""
    error: str | None = None


Event = Union[
    KeyPressed,
    Resized,
    ItemsLoaded,
    DetailLoaded,
    StaleLoaded,
    TemplatesLoaded,
    TemplateLoaded,
    ConfigLoaded,
    ActionDone,
    EditorFinished,
]

__all__ = [
    "ActionDone",
    "ConfigLoaded",
    "DetailLoaded",
    "EditorFinished",
    "Event",
    "ItemsLoaded",
    "KeyPressed",
    "Resized",
    "StaleLoaded",
    "TemplateLoaded",
    "TemplatesLoaded",
]
