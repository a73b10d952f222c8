"""Item detail page and the three-column dependency graph."""

from __future__ import annotations

from ..ansi import clip_ansi_line, pad_ansi_line, wrap_ansi_line
from ..highlight import colorize_markdown
from ..model import status_icon
from ..runtime.state import AppState, DetailFocus, detail_data, detail_item, item_by_id
from ..views.graph import COLUMN_TITLES, column_nodes, node_at
from ..views.templates import find_unused_variables, format_variable_value
from ..views.text import description_visible_height, scroll_text, word_count, wrap_plain
from .chrome import RenderContext, paint, status_label

MAX_LOG_ROWS = 8


def _field(label: str, value: str, ctx: RenderContext) -> str:
    return paint(ctx.theme.dim, f"{label}: ", ctx.theme) + value


def _template_rows(state: AppState, ctx: RenderContext) -> list[str]:
    theme = ctx.theme
    item = detail_item(state)
    if item is None or not item.template_id:
        return []
    template = state.template_cache.get(item.template_id)
    heading = f"Template: {item.template_id}"
    if item.template_step is not None:
        heading += f" (step {item.template_step})"
    if template is not None and item.template_hash and template.hash and template.hash != item.template_hash:
        heading += "  " + paint(theme.warning, "template changed since creation", theme)
    rows = [paint(theme.heading, heading, theme)]
    names = sorted(item.template_vars)
    value_cols = max(10, state.width - 30)
    for index, name in enumerate(names):
        text, truncated = format_variable_value(item.template_vars[name], name in state.expanded_vars, value_cols)
        lines = text.split("\n")
        hint = paint(theme.dim, " (enter to expand)", theme) if truncated else ""
        row = f"  {name} = {lines[0]}{hint}"
        if state.detail_focus == DetailFocus.VARS and index == state.var_cursor:
            row = paint(theme.reverse, f"> {name} = {lines[0]}", theme) if theme.reverse else f"> {name} = {lines[0]}"
        rows.append(row)
        rows.extend(f"      {line}" for line in lines[1:])
    if template is not None:
        unused = find_unused_variables(template.bodies(), template.variables.keys(), item.template_vars)
        if unused:
            rows.append(paint(theme.warning, f"  ⚠ unused variables: {', '.join(sorted(unused))}", theme))
    elif not names:
        rows.append(paint(theme.dim, "  (no variables)", theme))
    return rows


def _dependency_rows(state: AppState, ctx: RenderContext) -> list[str]:
    theme = ctx.theme
    data = detail_data(state)
    if data is None:
        return [paint(theme.dim, "Loading dependencies…", theme)]
    rows: list[str] = []
    index = 0
    for title, deps in ((COLUMN_TITLES[0], data.depends_on), (COLUMN_TITLES[2], data.blocked_by)):
        rows.append(paint(theme.heading, f"{title} ({len(deps)})", theme))
        for dep in deps:
            text = f"{status_icon(dep.status)} {dep.id}  {dep.title}"
            if state.detail_focus == DetailFocus.DEPS and index == state.dep_cursor:
                rows.append(paint(theme.reverse, f"> {text}", theme) if theme.reverse else f"> {text}")
            else:
                rows.append("  " + paint(theme.status_color(dep.status), text, theme))
            index += 1
    return rows


def _description_rows(state: AppState, ctx: RenderContext) -> list[str]:
    theme = ctx.theme
    item = detail_item(state)
    if item is None:
        return []
    height = description_visible_height(state.height)
    window, total = scroll_text(item.description, state.desc_scroll, height)
    if not item.description.strip():
        return [paint(theme.heading, "Description", theme), paint(theme.dim, "  (empty, press e to edit)", theme)]
    first = min(total, state.desc_scroll + 1)
    last = min(total, state.desc_scroll + height)
    heading = paint(theme.heading, f"Description (lines {first}-{last} of {total})", theme)
    words = word_count(item.description)
    if words < state.min_description_words:
        notice = f"⚠ short description ({words} of {state.min_description_words} words)"
        heading += "  " + paint(theme.warning, notice, theme)
    rows = [heading]
    width = max(1, state.width - 2)
    if ctx.no_color:
        rows.extend(wrap_plain(window, width))
    else:
        for line in colorize_markdown(window, ctx.style, no_color=False):
            rows.extend(wrap_ansi_line(line, width))
    return rows[: height + 1]


def _log_rows(state: AppState, ctx: RenderContext) -> list[str]:
    theme = ctx.theme
    data = detail_data(state)
    if data is None or not data.logs:
        return []
    rows = [paint(theme.heading, f"Logs ({len(data.logs)})", theme)]
    for entry in data.logs[-MAX_LOG_ROWS:]:
        stamp = entry.created_at.strftime("%Y-%m-%d %H:%M") if entry.created_at else ""
        rows.append(f"  {paint(theme.dim, stamp, theme)} {entry.message}")
    return rows


def render_detail(state: AppState, ctx: RenderContext, rows: int) -> list[str]:
    theme = ctx.theme
    item = detail_item(state)
    if item is None:
        return [paint(theme.dim, "Item not loaded", theme)]
    out = [
        paint(theme.bold, f"{status_icon(item.status)} {item.id}  {item.title}", theme),
        "  ".join(
            [
                _field("Type", item.type.value, ctx),
                _field("Status", status_label(item.status, theme), ctx),
                _field("Priority", paint(theme.priority_color(item.priority), f"P{item.priority}", theme), ctx),
                _field("Project", paint(theme.project, item.project, theme), ctx),
            ]
        ),
    ]
    if item.parent_id:
        parent = item_by_id(state, item.parent_id)
        out.append(_field("Parent", f"{item.parent_id}  {parent.title}" if parent else item.parent_id, ctx))
    if item.labels:
        out.append(_field("Labels", paint(theme.label, ", ".join(item.labels), theme), ctx))
    if item.worktree_branch:
        base = f" (from {item.worktree_base})" if item.worktree_base else ""
        out.append(_field("Worktree", f"{item.worktree_branch}{base}", ctx))
    out.append("")
    for section in (_template_rows, _dependency_rows, _description_rows, _log_rows):
        block = section(state, ctx)
        if block:
            out.extend(block)
            out.append("")
    return out[:rows]


def render_graph(state: AppState, ctx: RenderContext, rows: int, nodes) -> list[str]:
    """Three columns: blockers, the focal item and the items it blocks."""
    theme = ctx.theme
    if not nodes:
        return [paint(theme.dim, "Item not loaded", theme)]
    col_width = max(8, (state.width - 4) // 3)
    columns = [column_nodes(nodes, column) for column in range(3)]
    selected = node_at(nodes, state.graph_cursor)
    out = ["  ".join(pad_ansi_line(paint(theme.heading, title, theme), col_width) for title in COLUMN_TITLES)]
    depth = max(len(column) for column in columns)
    for row in range(depth):
        cells: list[str] = []
        for column in columns:
            if row >= len(column):
                cells.append(" " * col_width)
                continue
            node = column[row]
            text = clip_ansi_line(f"{status_icon(node.status)} {node.id} {node.title}", col_width, ellipsis=True)
            if node == selected:
                cell = paint(theme.reverse, text, theme) if theme.reverse else f">{text[1:]}"
                cells.append(pad_ansi_line(cell, col_width))
            else:
                cells.append(pad_ansi_line(paint(theme.status_color(node.status), text, theme), col_width))
        out.append("  ".join(cells))
    if depth == 1 and len(columns[0]) == 0 and len(columns[2]) == 0:
        out.append("")
        out.append(paint(theme.dim, "No dependencies", theme))
    return out[:rows]


__all__ = ["MAX_LOG_ROWS", "render_detail", "render_graph"]
