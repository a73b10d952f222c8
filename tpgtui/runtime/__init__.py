"""Runtime orchestration: state, update, dispatcher and the event loop.

The loop entry points are imported lazily because the input handlers import
``runtime.state`` and ``runtime.commands`` while ``runtime.update`` imports
the input handlers.
"""

from __future__ import annotations


def run_app(*args, **kwargs):
    """Lazily import the application bootstrap."""
    from .app import run_app as _run_app

    return _run_app(*args, **kwargs)


def run_main_loop(*args, **kwargs):
    """Lazily import loop runner to avoid package-import cycles."""
    from .loop import run_main_loop as _run_main_loop

    return _run_main_loop(*args, **kwargs)


__all__ = ["run_app", "run_main_loop"]
