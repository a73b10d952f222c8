"""Rows of the hierarchical item list."""

from __future__ import annotations

from collections.abc import Sequence

from ..model import status_icon
from ..runtime.state import AppState, tree_nodes
from ..views.tree import TreeNode
from .chrome import RenderContext, paint


def tree_guides(nodes: Sequence[TreeNode]) -> list[str]:
    """Indent guides for each node, drawn from the sibling-is-last flags."""
    guides: list[str] = []
    open_levels: list[bool] = []
    for node in nodes:
        del open_levels[node.level:]
        prefix = "".join("│  " if still_open else "   " for still_open in open_levels[1:])
        if node.level > 0:
            prefix += "└─ " if node.is_last_child else "├─ "
        guides.append(prefix)
        open_levels.append(not node.is_last_child)
    return guides


def item_row(state: AppState, ctx: RenderContext, node: TreeNode, guide: str, is_cursor: bool) -> str:
    theme = ctx.theme
    item = node.item
    selected = item.id in state.selected
    if node.has_children:
        expander = "▾" if item.id in state.expanded else "▸"
    else:
        expander = " "
    mark = "*" if selected else " "
    labels = " ".join(f"#{label}" for label in item.labels)
    stale = "stale" if item.id in state.stale_ids else ""
    epic = "[epic] " if item.is_epic else ""

    if is_cursor:
        # Plain text so reverse video covers the whole row.
        parts = [f"{mark}{guide}{expander} {status_icon(item.status)} {item.id}  {epic}{item.title}", f"P{item.priority}"]
        if labels:
            parts.append(labels)
        parts.append(f"@{item.project}")
        if stale:
            parts.append(f"⚠ {stale}")
        text = "  ".join(parts)
        text += " " * max(0, state.width - len(text))
        return paint(theme.reverse, text, theme) if theme.reverse else ">" + text[1:]

    parts = [
        paint(theme.selected_mark, mark, theme)
        + paint(theme.tree_guide, guide, theme)
        + expander
        + " "
        + paint(theme.status_color(item.status), status_icon(item.status), theme)
        + " "
        + paint(theme.item_id, item.id, theme)
        + "  "
        + paint(theme.bold, epic, theme)
        + item.title,
        paint(theme.priority_color(item.priority), f"P{item.priority}", theme),
    ]
    if labels:
        parts.append(paint(theme.label, labels, theme))
    parts.append(paint(theme.project, f"@{item.project}", theme))
    if stale:
        parts.append(paint(theme.stale, f"⚠ {stale}", theme))
    return "  ".join(parts)


def render_list(state: AppState, ctx: RenderContext, rows: int) -> list[str]:
    nodes = tree_nodes(state)
    if not nodes:
        if not state.loaded:
            return [paint(ctx.theme.dim, "Loading items…", ctx.theme)]
        return [paint(ctx.theme.dim, "No items match the current filters (0 shows every status)", ctx.theme)]
    guides = tree_guides(nodes)
    start = max(0, min(state.list_offset, len(nodes) - 1))
    out: list[str] = []
    for index in range(start, min(len(nodes), start + rows)):
        out.append(item_row(state, ctx, nodes[index], guides[index], index == state.cursor))
    return out


__all__ = ["item_row", "render_list", "tree_guides"]
