"""Main interactive event loop for the terminal UI.

Feeds keys, resizes and completion messages through ``update`` one at a time.
The loop only wires things together; behavior lives in ``update`` and the
input handlers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Protocol

from .commands import Command, EditText
from .editor import EditorBridge
from .messages import Event, KeyPressed, Resized
from .reader import read_key
from .state import AppState
from .update import initial_commands, update

logger = logging.getLogger(__name__)

KEY_TIMEOUT_MS = 120


class CommandSink(Protocol):
    def submit(self, command: Command) -> None: ...

    def drain(self) -> list[Event]: ...


def run_main_loop(
    state: AppState,
    terminal,
    stdin_fd: int,
    dispatcher: CommandSink,
    editor: EditorBridge,
    render: Callable[[AppState], list[str]],
    *,
    read: Callable[[int, int], str] = read_key,
    timeout_ms: int = KEY_TIMEOUT_MS,
) -> AppState:
    """Run until a handler sets ``should_quit``; return the final snapshot.

    Each iteration picks up a terminal resize, applies completed commands in
    delivery order, redraws when the snapshot changed and reads one key.
    """
    rendered: AppState | None = None
    skip_next_lf = False

    def apply(event: Event) -> None:
        nonlocal state
        state, commands = update(state, event)
        issue(commands)

    def issue(commands: Iterable[Command]) -> None:
        nonlocal rendered
        for command in commands:
            if isinstance(command, EditText):
                # The editor owns the terminal until it exits.
                logger.debug("handing terminal to editor for %s %s", command.item_id, command.target)
                finished = editor.edit(command)
                rendered = None
                apply(finished)
            else:
                logger.debug("submitting %s", type(command).__name__)
                dispatcher.submit(command)

    logger.debug("main loop starting")
    with terminal.raw_mode():
        width, height = terminal.size()
        apply(Resized(width, height))
        issue(initial_commands(state))

        while not state.should_quit:
            width, height = terminal.size()
            if (width, height) != (state.width, state.height):
                apply(Resized(width, height))

            for event in dispatcher.drain():
                apply(event)

            if state is not rendered:
                terminal.write_frame(render(state))
                rendered = state
            if state.should_quit:
                break

            try:
                key = read(stdin_fd, timeout_ms)
            except KeyboardInterrupt:
                # Ctrl+C arrives as a key in raw mode; a stray SIGINT is ignored.
                continue
            if key == "":
                continue
            if skip_next_lf and key == "ENTER_LF":
                skip_next_lf = False
                continue
            if key == "ENTER_CR":
                key = "ENTER"
                skip_next_lf = True
            elif key == "ENTER_LF":
                key = "ENTER"
                skip_next_lf = False
            else:
                skip_next_lf = False

            apply(KeyPressed(key))

    logger.debug("main loop finished")
    return state


__all__ = ["KEY_TIMEOUT_MS", "CommandSink", "run_main_loop"]
