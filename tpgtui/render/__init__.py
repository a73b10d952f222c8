"""Full-frame rendering of an ``AppState`` snapshot.

Every state change redraws the whole frame; nothing here keeps state
between calls.
"""

from __future__ import annotations

from ..ansi import clip_ansi_line
from ..input.detail_keys import graph_nodes
from ..input.prompts import STATUS_MENU_OPTIONS
from ..runtime.state import AppState, InputMode, ViewMode, list_rows
from .chrome import RenderContext, paint, render_footer, render_header, render_status_line, render_status_menu
from .detail_view import render_detail, render_graph
from .help import render_help
from .list_view import render_list
from .panels import render_config, render_template_detail, render_template_list
from .wizard_view import render_wizard


def render_body(state: AppState, ctx: RenderContext, rows: int) -> list[str]:
    if state.show_help and state.input_mode == InputMode.NONE:
        return render_help(state.view, ctx.theme)
    if state.view == ViewMode.LIST:
        return render_list(state, ctx, rows)
    if state.view == ViewMode.DETAIL:
        return render_detail(state, ctx, rows)
    if state.view == ViewMode.GRAPH:
        return render_graph(state, ctx, rows, graph_nodes(state))
    if state.view == ViewMode.TEMPLATE_LIST:
        return render_template_list(state, ctx, rows)
    if state.view == ViewMode.TEMPLATE_DETAIL:
        return render_template_detail(state, ctx, rows)
    if state.view == ViewMode.CONFIG:
        return render_config(state, ctx, rows)
    return render_wizard(state, ctx, rows)


def render_frame(state: AppState, ctx: RenderContext | None = None) -> list[str]:
    """Return exactly ``state.height`` rows, each clipped to ``state.width``."""
    ctx = ctx or RenderContext()
    width = max(1, state.width)
    rows = list_rows(state)

    body = render_body(state, ctx, rows)[:rows]
    body += [""] * (rows - len(body))
    if state.input_mode == InputMode.STATUS_MENU:
        menu = render_status_menu(state, ctx, STATUS_MENU_OPTIONS)
        body[max(0, rows - len(menu)) :] = menu[-rows:]

    frame = render_header(state, ctx) + body
    frame.append(paint(ctx.theme.divider, "─" * width, ctx.theme))
    frame.append(render_status_line(state, ctx))
    frame.append(render_footer(state, ctx))
    frame = frame[: max(1, state.height)]
    reset = ctx.theme.reset
    return [clip_ansi_line(line, width) + reset for line in frame]


class FrameRenderer:
    """Callable bound to one render context, handed to the event loop."""

    def __init__(self, ctx: RenderContext) -> None:
        self.ctx = ctx

    def __call__(self, state: AppState) -> list[str]:
        return render_frame(state, self.ctx)


__all__ = ["FrameRenderer", "RenderContext", "render_body", "render_frame"]
