"""Plain-text windowing helpers for scrollable detail panes."""

from __future__ import annotations

import textwrap

MIN_DESCRIPTION_ROWS = 10
DETAIL_CHROME_ROWS = 25


def scroll_text(text: str, offset: int, max_visible: int) -> tuple[str, int]:
    """Return the visible window of ``text`` and its total line count.

    Negative offsets clamp to zero; offsets past the end yield an empty window.
    """
    lines = text.split("\n")
    total = len(lines)
    start = max(0, offset)
    if start >= total:
        return "", total
    end = min(total, start + max(0, max_visible))
    return "\n".join(lines[start:end]), total


def description_visible_height(height: int) -> int:
    """Rows available to the description block in the detail view."""
    return max(MIN_DESCRIPTION_ROWS, height - DETAIL_CHROME_ROWS)


def wrap_plain(text: str, width: int) -> list[str]:
    """Wrap each paragraph line to ``width`` columns, keeping blank lines."""
    width = max(1, width)
    out: list[str] = []
    for line in text.split("\n"):
        if not line.strip():
            out.append("")
            continue
        out.extend(
            textwrap.wrap(
                line,
                width=width,
                replace_whitespace=False,
                drop_whitespace=True,
                break_long_words=True,
            )
            or [""]
        )
    return out


def word_count(text: str) -> int:
    return len(text.split())


__all__ = [
    "DETAIL_CHROME_ROWS",
    "MIN_DESCRIPTION_ROWS",
    "description_visible_height",
    "scroll_text",
    "word_count",
    "wrap_plain",
]
