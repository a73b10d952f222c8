"""Logging setup for the TUI process.

The alternate screen owns stdout and stderr, so log records only go to a
file, and only when one is requested.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

LOG_ENV_VAR = "TPG_TUI_LOG"
LOG_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"


def resolve_log_path(log_file: str | None, environ: Mapping[str, str] | None = None) -> Path | None:
    env = os.environ if environ is None else environ
    target = log_file or env.get(LOG_ENV_VAR, "")
    return Path(target).expanduser() if target else None


def setup_logging(log_file: str | None = None, *, level: int = logging.DEBUG) -> Path | None:
    """Attach a file handler to the ``tpgtui`` logger; return the log path."""
    package_logger = logging.getLogger("tpgtui")
    path = resolve_log_path(log_file)
    if path is None:
        # Keep records away from the terminal and the last-resort handler.
        package_logger.addHandler(logging.NullHandler())
        package_logger.propagate = False
        return None
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
    return path


__all__ = ["LOG_ENV_VAR", "resolve_log_path", "setup_logging"]
