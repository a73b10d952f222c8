"""Command descriptors and the background dispatcher that runs them.

Handlers never touch collaborators. They return command descriptors; the
loop hands them to ``ActionDispatcher``, which runs each one on a daemon
worker thread and queues the resulting completion message for the loop to
drain.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from queue import Empty, Queue
from typing import Any, Union

from ..errors import TpgError
from ..model import STALE_THRESHOLD, Item
from ..project_config import ConfigFile, format_config_value, get_config_field, get_config_fields
from ..store import Store
from ..templates_source import TemplateLibrary
from ..wizard import WizardDraft
from .messages import (
    ActionDone,
    ConfigLoaded,
    DetailLoaded,
    EditorFinished,
    Event,
    ItemsLoaded,
    StaleLoaded,
    TemplateLoaded,
    TemplatesLoaded,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadItems:
    pass


@dataclass(frozen=True)
class LoadDetail:
    item_id: str


@dataclass(frozen=True)
class LoadStale:
    project: str | None = None


@dataclass(frozen=True)
class LoadTemplates:
    pass


@dataclass(frozen=True)
class LoadTemplate:
    template_id: str


@dataclass(frozen=True)
class LoadConfig:
    pass


@dataclass(frozen=True)
class SetConfigValue:
    path: str
    value: str


@dataclass(frozen=True)
class StoreCall:
    """One store method invocation, named so commands stay plain data."""

    method: str
    args: tuple[Any, ...] = ()


@dataclass(frozen=True)
class RunAction:
    """Ordered store calls; the first failure stops the chain without rollback."""

    steps: tuple[StoreCall, ...]
    success: str


@dataclass(frozen=True)
class CreateFromWizard:
    draft: WizardDraft


@dataclass(frozen=True)
class EditText:
    """Hand the terminal to the external editor; run by the loop, not a worker."""

    item_id: str
    target: str
    content: str


Command = Union[
    LoadItems,
    LoadDetail,
    LoadStale,
    LoadTemplates,
    LoadTemplate,
    LoadConfig,
    SetConfigValue,
    RunAction,
    CreateFromWizard,
    EditText,
]


def failure_message(command: Command, error: str) -> Event:
    """Build the error-bearing completion message matching ``command``."""
    if isinstance(command, LoadItems):
        return ItemsLoaded(error=error)
    if isinstance(command, LoadDetail):
        return DetailLoaded(command.item_id, error=error)
    if isinstance(command, LoadStale):
        return StaleLoaded(error=error)
    if isinstance(command, LoadTemplates):
        return TemplatesLoaded(error=error)
    if isinstance(command, LoadTemplate):
        return TemplateLoaded(command.template_id, error=error)
    if isinstance(command, LoadConfig):
        return ConfigLoaded(error=error)
    if isinstance(command, EditText):
        return EditorFinished(command.item_id, command.target, error=error)
    return ActionDone(error=error)


class ActionDispatcher:
    """Runs commands against collaborators and queues completion messages."""

    def __init__(
        self,
        store: Store,
        templates: TemplateLibrary,
        config: ConfigFile,
        *,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store
        self.templates = templates
        self.config = config
        self._now = now if now is not None else (lambda: datetime.now(timezone.utc))
        self._results: Queue[Event] = Queue()
        self._lock = threading.Lock()
        self._pending = 0
        self._idle = threading.Condition(self._lock)
        self._handlers: dict[type, Callable[[Any], Event]] = {
            LoadItems: self._load_items,
            LoadDetail: self._load_detail,
            LoadStale: self._load_stale,
            LoadTemplates: self._load_templates,
            LoadTemplate: self._load_template,
            LoadConfig: self._load_config,
            SetConfigValue: self._set_config_value,
            RunAction: self._run_action,
            CreateFromWizard: self._create_from_wizard,
        }

    # ------------------------------------------------------------ threading

    def submit(self, command: Command) -> None:
        """Run ``command`` on a daemon worker; the result lands in the queue."""
        with self._lock:
            self._pending += 1
        worker = threading.Thread(
            target=self._worker,
            args=(command,),
            name=f"tpgtui-{type(command).__name__}",
            daemon=True,
        )
        worker.start()

    def _worker(self, command: Command) -> None:
        try:
            result = self.execute(command)
        except Exception as exc:
            logger.exception("%s crashed", type(command).__name__)
            result = failure_message(command, str(exc) or type(exc).__name__)
        self._results.put(result)
        with self._idle:
            self._pending -= 1
            self._idle.notify_all()

    def drain(self) -> list[Event]:
        """Drain all completed messages in delivery order."""
        out: list[Event] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out

    def wait_idle(self, timeout: float | None = None) -> bool:
        with self._idle:
            return self._idle.wait_for(lambda: self._pending == 0, timeout=timeout)

    # ------------------------------------------------------------ execution

    def execute(self, command: Command) -> Event:
        """Run one command synchronously and return its completion message."""
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"dispatcher cannot run {type(command).__name__}")
        try:
            return handler(command)
        except TpgError as exc:
            logger.warning("%s failed: %s", type(command).__name__, exc)
            return failure_message(command, str(exc))

    def _load_items(self, _command: LoadItems) -> Event:
        return ItemsLoaded(tuple(self.store.list_items()))

    def _load_detail(self, command: LoadDetail) -> Event:
        return DetailLoaded(
            command.item_id,
            logs=tuple(self.store.get_logs(command.item_id)),
            depends_on=tuple(self.store.get_depends_on(command.item_id)),
            blocked_by=tuple(self.store.get_blocked_by(command.item_id)),
        )

    def _load_stale(self, command: LoadStale) -> Event:
        cutoff = self._now() - STALE_THRESHOLD
        stale = self.store.stale_items(command.project, cutoff)
        return StaleLoaded(frozenset(item.id for item in stale))

    def _load_templates(self, _command: LoadTemplates) -> Event:
        return TemplatesLoaded(tuple(self.templates.list_templates()))

    def _load_template(self, command: LoadTemplate) -> Event:
        return TemplateLoaded(command.template_id, self.templates.load_template(command.template_id))

    def _load_config(self, _command: LoadConfig) -> Event:
        config = self.config.load()
        return ConfigLoaded(
            tuple(get_config_fields(config)),
            min_description_words=config.description_warning_threshold(),
        )

    def _set_config_value(self, command: SetConfigValue) -> Event:
        updated = self.config.set_field(command.path, command.value)
        shown = format_config_value(get_config_field(updated, command.path))
        return ConfigLoaded(
            tuple(get_config_fields(updated)),
            message=f"Set {command.path} = {shown}",
            min_description_words=updated.description_warning_threshold(),
        )

    def _run_steps(self, steps: tuple[StoreCall, ...]) -> None:
        for step in steps:
            getattr(self.store, step.method)(*step.args)

    def _run_action(self, command: RunAction) -> Event:
        self._run_steps(command.steps)
        return ActionDone(command.success)

    def _create_from_wizard(self, command: CreateFromWizard) -> Event:
        draft = command.draft
        item_id = self.store.generate_item_id(draft.item_type)
        now = self._now()
        self.store.create_item(
            Item(
                id=item_id,
                project=draft.project,
                type=draft.item_type,
                title=draft.title,
                description=draft.description,
                priority=draft.priority,
                template_id=draft.template_id,
                template_hash=draft.template_hash,
                worktree_branch=draft.worktree_branch,
                worktree_base=draft.worktree_base,
                created_at=now,
                updated_at=now,
            )
        )
        steps: list[StoreCall] = []
        if draft.parent_id:
            steps.append(StoreCall("set_parent", (item_id, draft.parent_id)))
        steps.extend(StoreCall("add_dependency", (blocker, item_id)) for blocker in draft.depends_on)
        steps.extend(StoreCall("add_dependency", (item_id, blocked)) for blocked in draft.blocks)
        steps.extend(StoreCall("add_label", (item_id, draft.project, label)) for label in draft.labels)
        steps.extend(
            StoreCall("set_template_variable", (item_id, name, value))
            for name, value in draft.template_vars.items()
        )
        try:
            self._run_steps(tuple(steps))
        except TpgError as exc:
            logger.warning("follow-up for %s failed: %s", item_id, exc)
            return ActionDone(error=f"Created {item_id}, but {exc}", created_id=item_id)
        return ActionDone(f"Created {item_id}", created_id=item_id)


__all__ = [
    "ActionDispatcher",
    "Command",
    "CreateFromWizard",
    "EditText",
    "LoadConfig",
    "LoadDetail",
    "LoadItems",
    "LoadStale",
    "LoadTemplate",
    "LoadTemplates",
    "RunAction",
    "SetConfigValue",
    "StoreCall",
    "failure_message",
]
