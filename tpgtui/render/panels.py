"""Template browser and config table pages."""

from __future__ import annotations

from ..highlight import colorize_markdown
from ..project_config import format_config_value
from ..runtime.state import AppState
from .chrome import RenderContext, paint


def render_template_list(state: AppState, ctx: RenderContext, rows: int) -> list[str]:
    theme = ctx.theme
    if not state.templates_loaded:
        return [paint(theme.dim, "Loading templates…", theme)]
    if not state.templates:
        return [paint(theme.dim, "No templates found in .tpg/templates or the user template directory", theme)]
    start = max(0, state.template_cursor - rows + 1)
    out: list[str] = []
    for index in range(start, min(len(state.templates), start + rows)):
        template = state.templates[index]
        steps = f"{len(template.steps)} step{'s' if len(template.steps) != 1 else ''}"
        text = f"{template.id}  {template.title or '(untitled)'}  {steps}"
        if index == state.template_cursor:
            out.append(paint(theme.reverse, f"> {text}", theme) if theme.reverse else f"> {text}")
        else:
            out.append(
                "  "
                + paint(theme.item_id, template.id, theme)
                + f"  {template.title or '(untitled)'}  "
                + paint(theme.dim, steps, theme)
            )
    return out


def _template_body(state: AppState) -> list[str]:
    template = state.template_cache.get(state.template_id or "")
    if template is None:
        return []
    lines = [f"# {template.title or template.id}", ""]
    if template.description:
        lines.extend(template.description.rstrip("\n").split("\n"))
        lines.append("")
    if template.variables:
        lines.append("## Variables")
        for name, variable in template.variables.items():
            flags = []
            if variable.optional:
                flags.append("optional")
            if variable.default:
                flags.append(f"default: {variable.default}")
            suffix = f" ({', '.join(flags)})" if flags else ""
            lines.append(f"- **{name}**{suffix}: {variable.description}")
        lines.append("")
    lines.append("## Steps")
    for number, step in enumerate(template.steps, start=1):
        depends = f" (after {', '.join(step.depends)})" if step.depends else ""
        lines.append(f"{number}. **{step.id or step.title}** {step.title}{depends}")
        lines.extend(f"   {line}" for line in step.description.rstrip("\n").split("\n") if line)
    return lines


def render_template_detail(state: AppState, ctx: RenderContext, rows: int) -> list[str]:
    theme = ctx.theme
    template = state.template_cache.get(state.template_id or "")
    if template is None:
        return [paint(theme.dim, f"Loading template {state.template_id}…", theme)]
    header = [paint(theme.dim, f"{template.source_path}  sha256:{template.hash[:12]}", theme)]
    body = colorize_markdown("\n".join(_template_body(state)), ctx.style, no_color=ctx.no_color)
    start = max(0, min(state.template_scroll, max(0, len(body) - 1)))
    return header + body[start : start + rows - 1]


def render_config(state: AppState, ctx: RenderContext, rows: int) -> list[str]:
    theme = ctx.theme
    if not state.config_fields:
        return [paint(theme.dim, "Loading config…", theme)]
    path_width = max(len(field.path) for field in state.config_fields) + 2
    start = max(0, state.config_cursor - rows + 2)
    out: list[str] = []
    for index in range(start, min(len(state.config_fields), start + rows - 1)):
        field = state.config_fields[index]
        value = format_config_value(field.value)
        if index == state.config_cursor:
            text = f"> {field.path:<{path_width}}{value}"
            out.append(paint(theme.reverse, text, theme) if theme.reverse else text)
        else:
            out.append(f"  {paint(theme.item_id, f'{field.path:<{path_width}}', theme)}{value}")
    current = state.config_fields[min(state.config_cursor, len(state.config_fields) - 1)]
    if current.description:
        out.append(paint(theme.dim, f"  {current.type}: {current.description}", theme))
    return out


__all__ = ["render_config", "render_template_detail", "render_template_list"]
