"""Markdown colouring for descriptions and template bodies.

Uses pygments' Markdown lexer with the terminal formatter. Terminal control
bytes in stored text are escaped first so a description can never move the
cursor or ring the bell.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import MarkdownLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "monokai"
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def sanitize_terminal_text(text: str) -> str:
    """Escape control bytes other than newline, carriage return and tab."""
    if _CONTROL_RE.search(text) is None:
        return text
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", text)


@lru_cache(maxsize=None)
def normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        logger.info("unknown pygments style %r, using %s", style, DEFAULT_STYLE)
        return DEFAULT_STYLE
    return style


@lru_cache(maxsize=None)
def _formatter(style: str) -> TerminalFormatter:
    return TerminalFormatter(style=style)


def colorize_markdown(text: str, style: str = DEFAULT_STYLE, *, no_color: bool = False) -> list[str]:
    """Return display rows for ``text``, coloured unless ``no_color``."""
    text = sanitize_terminal_text(text)
    if no_color or not text.strip():
        return text.split("\n")
    rendered = highlight(text, MarkdownLexer(), _formatter(normalize_style(style)))
    rows = rendered.split("\n")
    # pygments always terminates output with a newline.
    if rows and rows[-1] == "" and not text.endswith("\n"):
        rows.pop()
    return rows


__all__ = ["DEFAULT_STYLE", "colorize_markdown", "normalize_style", "sanitize_terminal_text"]
