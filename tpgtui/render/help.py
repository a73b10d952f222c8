"""Keybinding help content: one-line footer hints and the full help page.

Presentation-only; the bindings themselves live in ``tpgtui.input``.
"""

from __future__ import annotations

from ..runtime.state import AppState, InputMode, ViewMode
from ..ui_theme import UITheme

HelpSection = tuple[str, tuple[tuple[str, str], ...]]

LIST_HELP: tuple[HelpSection, ...] = (
    (
        "MOVE",
        (
            ("j/k", "down/up"),
            ("g/G", "top/bottom"),
            ("l/h", "expand/collapse or parent"),
            ("tab", "toggle expand"),
            ("enter", "open detail"),
        ),
    ),
    (
        "ACT",
        (
            ("s/d", "start/done"),
            ("b/c", "block/cancel with reason"),
            ("L", "log message"),
            ("a", "add blocker"),
            ("S", "status menu"),
            ("D", "delete"),
            ("space", "select"),
            ("B/P", "batch status/priority"),
        ),
    ),
    (
        "FILTER",
        (
            ("/", "search"),
            ("p", "project"),
            ("#", "label"),
            ("1-5", "toggle status"),
            ("0", "all statuses"),
            ("esc", "clear filters"),
        ),
    ),
    (
        "OTHER",
        (
            ("n/N", "quick create/wizard"),
            ("T", "templates"),
            ("C", "config"),
            ("r", "reload"),
            ("?", "help"),
            ("q", "quit"),
        ),
    ),
)

DETAIL_HELP: tuple[HelpSection, ...] = (
    (
        "DETAIL",
        (
            ("j/k", "scroll or move in focus"),
            ("tab", "dependencies"),
            ("v", "template variables"),
            ("enter", "jump/expand"),
            ("e", "edit in $EDITOR"),
            ("g", "graph"),
            ("+/-", "priority"),
            ("esc", "back"),
        ),
    ),
    (
        "ACT",
        (
            ("s/d", "start/done"),
            ("b/c", "block/cancel"),
            ("L", "log"),
            ("a", "add blocker"),
            ("S", "status menu"),
            ("D", "delete"),
            ("r", "reload"),
        ),
    ),
)

GRAPH_HELP: tuple[HelpSection, ...] = (
    (
        "GRAPH",
        (
            ("h/l", "column"),
            ("j/k", "row"),
            ("enter", "jump to item"),
            ("esc", "back to detail"),
        ),
    ),
)

FOOTER_HINTS: dict[ViewMode, str] = {
    ViewMode.LIST: "j/k move · enter open · s/d/b/c status · / search · n new · ? help · q quit",
    ViewMode.DETAIL: "esc back · tab deps · v vars · e edit · g graph · +/- priority · ? help",
    ViewMode.GRAPH: "h/l column · j/k row · enter jump · esc back",
    ViewMode.TEMPLATE_LIST: "j/k move · enter open · r reload · esc back",
    ViewMode.TEMPLATE_DETAIL: "j/k scroll · esc back",
    ViewMode.CONFIG: "j/k move · enter edit · r reload · esc back",
    ViewMode.CREATE_WIZARD: "enter next · esc back · tab next field",
}

INPUT_HINTS: dict[InputMode, str] = {
    InputMode.TEXTAREA_EDIT: "type to edit · enter newline · ctrl+s/tab accept · esc leave",
    InputMode.STATUS_MENU: "j/k move · enter choose · s/d/b/c shortcut · esc close",
    InputMode.CREATE_TYPE: "t task · e epic · esc cancel",
    InputMode.SEARCH: "type to filter · enter keep · esc restore",
}


def footer_hint(state: AppState) -> str:
    if state.input_mode == InputMode.NONE:
        return FOOTER_HINTS[state.view]
    return INPUT_HINTS.get(state.input_mode, "enter submit · esc cancel · ctrl+u clear")


def help_sections(view: ViewMode) -> tuple[HelpSection, ...]:
    if view == ViewMode.DETAIL:
        return DETAIL_HELP
    if view == ViewMode.GRAPH:
        return GRAPH_HELP
    return LIST_HELP


def render_help(view: ViewMode, theme: UITheme) -> list[str]:
    """Full help page for ``view``."""
    rows: list[str] = []
    for title, bindings in help_sections(view):
        rows.append(f"{theme.heading}{title}{theme.reset}" if theme.heading else title)
        for key, description in bindings:
            key_text = f"{theme.help_key}{key:<8}{theme.reset}" if theme.help_key else f"{key:<8}"
            rows.append(f"  {key_text} {description}")
        rows.append("")
    rows.append(f"{theme.help_dim}esc or ? closes help{theme.reset}" if theme.help_dim else "esc or ? closes help")
    return rows


__all__ = ["FOOTER_HINTS", "INPUT_HINTS", "footer_hint", "help_sections", "render_help"]
