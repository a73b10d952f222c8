"""Frame chrome: header, banner, prompt line, footer hints and overlays."""

from __future__ import annotations

from dataclasses import dataclass

from ..highlight import DEFAULT_STYLE
from ..model import ALL_STATUSES, Status, status_icon
from ..runtime.state import AppState, InputMode, ViewMode
from ..ui_theme import DEFAULT_THEME, UITheme
from ..views.filtering import describe_filters
from .help import footer_hint


@dataclass(frozen=True)
class RenderContext:
    """Presentation settings that do not live in the state snapshot."""

    theme: UITheme = DEFAULT_THEME
    style: str = DEFAULT_STYLE
    no_color: bool = False


def paint(code: str, text: str, theme: UITheme) -> str:
    if not code or not text:
        return text
    return f"{code}{text}{theme.reset}"


VIEW_TITLES: dict[ViewMode, str] = {
    ViewMode.LIST: "Items",
    ViewMode.DETAIL: "Detail",
    ViewMode.GRAPH: "Dependency graph",
    ViewMode.TEMPLATE_LIST: "Templates",
    ViewMode.TEMPLATE_DETAIL: "Template",
    ViewMode.CONFIG: "Config",
    ViewMode.CREATE_WIZARD: "New item",
}


def status_counts(state: AppState) -> str:
    counts = {status: 0 for status in ALL_STATUSES}
    for item in state.items:
        counts[item.status] = counts.get(item.status, 0) + 1
    return " ".join(f"{status_icon(status)}{counts[status]}" for status in ALL_STATUSES)


def render_header(state: AppState, ctx: RenderContext) -> list[str]:
    """Title row with counts, then the active-filter row."""
    theme = ctx.theme
    title = paint(theme.header, f"tpg · {VIEW_TITLES[state.view]}", theme)
    parts = [title]
    if state.project:
        parts.append(paint(theme.project, f"@{state.project}", theme))
    if state.loaded:
        parts.append(paint(theme.dim, f"{len(state.items)} items  {status_counts(state)}", theme))
    else:
        parts.append(paint(theme.dim, "loading…", theme))
    if state.selected:
        parts.append(paint(theme.selected_mark, f"{len(state.selected)} selected", theme))
    filters = describe_filters(state.filter) if state.view == ViewMode.LIST else ""
    return ["  ".join(parts), paint(theme.dim, filters, theme)]


def render_prompt(state: AppState, ctx: RenderContext) -> str:
    theme = ctx.theme
    if state.input_mode == InputMode.CREATE_TYPE:
        line = paint(theme.prompt, state.input_label, theme) + paint(theme.dim, f"({state.pending_title})", theme)
    else:
        line = paint(theme.prompt, state.input_label, theme) + state.input_text + "█"
    if state.input_error:
        line += "  " + paint(theme.input_error, state.input_error, theme)
    return line


def render_banner(state: AppState, ctx: RenderContext) -> str:
    theme = ctx.theme
    if state.error:
        return paint(theme.banner_error, f"Error: {state.error}", theme)
    if state.message:
        return paint(theme.banner_message, state.message, theme)
    return ""


def render_status_line(state: AppState, ctx: RenderContext) -> str:
    """Prompt while a one-line prompt is open, otherwise the banner."""
    if state.input_mode not in (InputMode.NONE, InputMode.STATUS_MENU, InputMode.TEXTAREA_EDIT):
        return render_prompt(state, ctx)
    return render_banner(state, ctx)


def render_footer(state: AppState, ctx: RenderContext) -> str:
    return paint(ctx.theme.help_dim, footer_hint(state), ctx.theme)


def render_status_menu(state: AppState, ctx: RenderContext, options) -> list[str]:
    """Boxed status picker drawn over the bottom of the body."""
    theme = ctx.theme
    targets = ", ".join(state.input_targets[:3])
    if len(state.input_targets) > 3:
        targets = f"{len(state.input_targets)} items"
    rows = [paint(theme.heading, f"┌ Set status: {targets}", theme)]
    for index, (shortcut, label, status) in enumerate(options):
        text = f"│ [{shortcut}] {status_icon(status)} {label}"
        if index == state.menu_cursor:
            rows.append(paint(theme.reverse, text, theme) if theme.reverse else f"> {text}")
        else:
            rows.append(paint(theme.status_color(status), text, theme))
    rows.append(paint(theme.dim, "└ j/k move · enter choose · esc close", theme))
    return rows


def status_label(status: Status | str, theme: UITheme) -> str:
    value = status.value if isinstance(status, Status) else str(status)
    return paint(theme.status_color(status), f"{status_icon(status)} {value}", theme)


__all__ = [
    "RenderContext",
    "VIEW_TITLES",
    "paint",
    "render_banner",
    "render_footer",
    "render_header",
    "render_prompt",
    "render_status_line",
    "render_status_menu",
    "status_counts",
    "status_label",
]
