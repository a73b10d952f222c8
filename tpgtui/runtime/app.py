"""Runtime composition layer for tpgtui.

Resolves the data directory and collaborators, builds the initial state and
starts the loop. This is the only module where store, templates, config,
terminal and rendering meet.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path

from ..model import AgentContext, ItemType
from ..project_config import DB_FILENAME, ConfigFile, ProjectConfig, default_data_dir, default_project_name
from ..render import FrameRenderer, RenderContext, render_frame
from ..store import Store, open_store
from ..templates_source import TemplateLibrary
from ..ui_theme import resolve_theme
from .commands import ActionDispatcher, LoadItems
from .config import load_editor, load_style, load_theme_name
from .editor import EditorBridge, resolve_editor
from .loop import run_main_loop
from .state import AppState
from .terminal import TerminalController
from .update import update

logger = logging.getLogger(__name__)

SHUTDOWN_WAIT_SECONDS = 2.0


@dataclass(frozen=True)
class AppOptions:
    """Command-line choices; ``None`` means use the stored preference."""

    db: str | None = None
    project: str | None = None
    theme: str | None = None
    no_color: bool = False
    editor: str | None = None
    style: str | None = None


@dataclass
class AppServices:
    store: Store
    templates: TemplateLibrary
    config: ConfigFile
    project_config: ProjectConfig
    data_dir: Path

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()


def open_services(options: AppOptions, cwd: Path | None = None) -> AppServices:
    """Open the store and collaborators for the nearest ``.tpg`` directory."""
    cwd = cwd or Path.cwd()
    data_dir = default_data_dir(cwd)
    config = ConfigFile(data_dir)
    project_config = config.load()
    db_path = options.db or str(data_dir / DB_FILENAME)
    logger.debug("data dir %s, database %s", data_dir, db_path)
    store = open_store(
        db_path,
        prefixes={item_type: project_config.prefix_for(item_type) for item_type in ItemType},
        id_length=project_config.id_length or 6,
    )
    return AppServices(store, TemplateLibrary(start=cwd), config, project_config, data_dir)


def initial_state(options: AppOptions, services: AppServices) -> AppState:
    project = (
        options.project
        or services.project_config.default_project
        or default_project_name(services.data_dir)
    )
    return AppState(
        project=project,
        agent=AgentContext.from_env(),
        min_description_words=services.project_config.description_warning_threshold(),
    )


def render_context(options: AppOptions) -> RenderContext:
    theme_name = options.theme or load_theme_name()
    return RenderContext(
        theme=resolve_theme(theme_name, no_color=options.no_color),
        style=options.style or load_style(),
        no_color=options.no_color,
    )


def render_snapshot(options: AppOptions, width: int, height: int) -> str:
    """Load items synchronously and return one list frame as text."""
    services = open_services(options)
    try:
        dispatcher = ActionDispatcher(services.store, services.templates, services.config)
        state = initial_state(options, services)
        state = replace(state, width=width, height=height)
        state, _commands = update(state, dispatcher.execute(LoadItems()))
        return "\n".join(render_frame(state, render_context(options))) + "\n"
    finally:
        services.close()


def run_app(options: AppOptions) -> AppState:
    """Run the interactive TUI and return the final snapshot."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not os.isatty(stdin_fd) or not os.isatty(stdout_fd):
        raise SystemExit("tpg-tui needs an interactive terminal (try --render)")

    services = open_services(options)
    dispatcher = ActionDispatcher(services.store, services.templates, services.config)
    try:
        terminal = TerminalController(stdin_fd, stdout_fd)
        editor = EditorBridge(terminal, resolve_editor(options.editor or load_editor()))
        state = initial_state(options, services)
        logger.info("starting TUI for project %s", state.project)
        return run_main_loop(
            state,
            terminal,
            stdin_fd,
            dispatcher,
            editor,
            FrameRenderer(render_context(options)),
        )
    finally:
        # Let in-flight store calls finish before the connection closes.
        dispatcher.wait_idle(timeout=SHUTDOWN_WAIT_SECONDS)
        services.close()


__all__ = [
    "AppOptions",
    "AppServices",
    "initial_state",
    "open_services",
    "render_context",
    "render_snapshot",
    "run_app",
]
