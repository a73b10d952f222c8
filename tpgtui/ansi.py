"""ANSI-aware width measurement, clipping and wrapping for frame rows.

Escape sequences never count toward a row's width, and wide characters
count as two cells, so styled rows line up with the terminal grid.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
ELLIPSIS = "…"


def char_display_width(ch: str, col: int) -> int:
    """Terminal cells taken by ``ch`` when it starts at column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    return ANSI_ESCAPE_RE.sub("", text)


def display_width(text: str) -> int:
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int, *, ellipsis: bool = False) -> str:
    """Trim a styled row to ``max_cols`` cells, keeping every escape sequence.

    With ``ellipsis`` a clipped row ends in ``…`` so truncation is visible.
    Tabs become spaces so the clip point matches what the terminal shows.
    """
    if max_cols <= 0 or not text:
        return ""
    if ellipsis and display_width(text) > max_cols:
        return clip_ansi_line(text, max_cols - 1) + ELLIPSIS

    out: list[str] = []
    col = 0
    i = 0
    while i < len(text) and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        width = char_display_width(ch, col)
        if col + width > max_cols:
            break
        out.append(" " * width if ch == "\t" else ch)
        col += width
        i += 1
    # Keep trailing resets that follow the last visible cell.
    while i < len(text) and text[i] == "\x1b":
        match = ANSI_ESCAPE_RE.match(text, i)
        if not match:
            break
        out.append(match.group(0))
        i = match.end()
    return "".join(out)


def pad_ansi_line(text: str, width: int) -> str:
    """Clip or right-pad a styled row to exactly ``width`` cells."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))


def wrap_ansi_line(text: str, width: int) -> list[str]:
    """Hard-wrap a styled row into chunks of at most ``width`` cells."""
    if width <= 0 or not text:
        return [""]

    wrapped: list[str] = []
    chunk: list[str] = []
    col = 0
    i = 0
    while i < len(text):
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                chunk.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        cell = char_display_width(ch, col)
        if col + cell > width and col > 0:
            wrapped.append("".join(chunk))
            chunk = []
            col = 0
            cell = char_display_width(ch, col)
        chunk.append(" " * cell if ch == "\t" else ch)
        col += cell
        i += 1
    wrapped.append("".join(chunk))
    return wrapped


__all__ = [
    "ANSI_ESCAPE_RE",
    "char_display_width",
    "clip_ansi_line",
    "display_width",
    "pad_ansi_line",
    "strip_ansi",
    "wrap_ansi_line",
]
