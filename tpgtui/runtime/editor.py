"""External editor bridge for descriptions and template variables.

Content goes to a fresh temporary file, the terminal is handed to the
editor, and on return the file's modification time decides whether anything
changed. Errors come back inside ``EditorFinished`` instead of raising, and
the temporary file is always removed.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
import tempfile
from collections.abc import Callable, Mapping
from typing import Any

from .commands import EditText
from .messages import EditorFinished

logger = logging.getLogger(__name__)

EDITOR_CANDIDATES = ("nvim", "nano", "vi")
TEMP_PREFIX = "tpg-edit-"
TEMP_SUFFIX = ".md"
DESCRIPTION_TARGET = "description"
VARIABLE_TARGET_PREFIX = "variable:"


def variable_target(name: str) -> str:
    return f"{VARIABLE_TARGET_PREFIX}{name}"


def target_variable(target: str) -> str | None:
    if target.startswith(VARIABLE_TARGET_PREFIX):
        return target[len(VARIABLE_TARGET_PREFIX):]
    return None


def resolve_editor(
    configured: str | None = None,
    environ: Mapping[str, str] | None = None,
    which: Callable[[str], str | None] = shutil.which,
) -> list[str] | None:
    """Return the editor argv: configured, ``$TPG_EDITOR``, ``$EDITOR``, then a PATH probe."""
    env = os.environ if environ is None else environ
    for raw in (configured, env.get("TPG_EDITOR"), env.get("EDITOR")):
        if raw and raw.strip():
            argv = shlex.split(raw)
            if argv:
                return argv
    for candidate in EDITOR_CANDIDATES:
        if which(candidate):
            return [candidate]
    return None


class EditorBridge:
    def __init__(
        self,
        terminal: Any,
        command: list[str] | None,
        run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.terminal = terminal
        self.command = command
        self._run = run

    def edit(self, request: EditText) -> EditorFinished:
        if not self.command:
            return EditorFinished(
                request.item_id,
                request.target,
                error="No editor found; set $TPG_EDITOR or $EDITOR",
            )

        fd, path = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=TEMP_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(request.content)
            before = os.stat(path).st_mtime_ns

            error: str | None = None
            try:
                with self.terminal.suspended():
                    result = self._run([*self.command, path], check=False)
            except OSError as exc:
                logger.warning("editor launch failed: %s", exc)
                return EditorFinished(
                    request.item_id, request.target, error=f"Failed to launch editor: {exc}"
                )
            if result.returncode != 0:
                error = f"Editor exited with status {result.returncode}"

            try:
                after = os.stat(path).st_mtime_ns
                if after == before:
                    return EditorFinished(request.item_id, request.target, changed=False, error=error)
                with open(path, encoding="utf-8") as handle:
                    content = handle.read()
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("could not read edited file: %s", exc)
                return EditorFinished(
                    request.item_id, request.target, error=f"Failed to read edited file: {exc}"
                )
            return EditorFinished(
                request.item_id, request.target, changed=True, content=content, error=error
            )
        finally:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass


__all__ = [
    "DESCRIPTION_TARGET",
    "EditorBridge",
    "resolve_editor",
    "target_variable",
    "variable_target",
]
