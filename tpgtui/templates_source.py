"""Template discovery and loading from YAML or TOML files.

Locations are searched in priority order: the nearest ``.tpg/templates``
above the working directory, the user template directory, then the shared
global directory. A template id is its file name without extension; the
first location that provides an id wins.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml
from platformdirs import user_config_dir

from .errors import TemplateError
from .model import Template, TemplateStep, TemplateVariable
from .views.templates import render_text

logger = logging.getLogger(__name__)

TEMPLATES_DIR_NAME = "templates"
TEMPLATE_EXTENSIONS = (".yaml", ".yml", ".toml")


@dataclass(frozen=True)
class TemplateLocation:
    path: Path
    source: str


def template_locations(start: Path | None = None) -> list[TemplateLocation]:
    out: list[TemplateLocation] = []
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        project_dir = candidate / ".tpg" / TEMPLATES_DIR_NAME
        if project_dir.is_dir():
            out.append(TemplateLocation(project_dir, "project"))
            break
    user_dir = Path(user_config_dir("tpg", appauthor=False)) / TEMPLATES_DIR_NAME
    if user_dir.is_dir():
        out.append(TemplateLocation(user_dir, "user"))
    global_dir = Path.home() / ".config" / "opencode" / "tpg-templates"
    if global_dir.is_dir():
        out.append(TemplateLocation(global_dir, "global"))
    return out


def _template_files(directory: Path) -> list[Path]:
    found: list[Path] = []
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for name in sorted(files):
            if Path(name).suffix.lower() in TEMPLATE_EXTENSIONS:
                found.append(Path(root) / name)
    return found


def _parse_document(path: Path, data: bytes) -> Mapping[str, Any]:
    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            document = tomllib.loads(data.decode("utf-8"))
        else:
            document = yaml.safe_load(data)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        kind = "toml" if suffix == ".toml" else "yaml"
        raise TemplateError(f"failed to parse {kind} template {path.name}: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, dict):
        raise TemplateError(f"template {path.name} must be a mapping")
    return document


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_template(path: Path, template_id: str, source: str, data: bytes) -> Template:
    """Build a ``Template`` from raw file bytes, validating steps."""
    document = _parse_document(path, data)

    raw_vars = document.get("variables") or {}
    if not isinstance(raw_vars, dict):
        raise TemplateError(f"template {template_id}: variables must be a mapping")
    variables: dict[str, TemplateVariable] = {}
    for name, declared in raw_vars.items():
        declared = declared or {}
        if not isinstance(declared, dict):
            raise TemplateError(f"template {template_id}: variable {name} must be a mapping")
        variables[str(name)] = TemplateVariable(
            description=_text(declared.get("description")),
            optional=bool(declared.get("optional", False)),
            default=_text(declared.get("default")),
        )

    raw_steps = document.get("steps") or []
    if not isinstance(raw_steps, list) or not raw_steps:
        raise TemplateError(f"template {template_id} has no steps")
    steps: list[TemplateStep] = []
    seen: set[str] = set()
    for raw in raw_steps:
        if not isinstance(raw, dict):
            raise TemplateError(f"template {template_id}: steps must be mappings")
        step_id = _text(raw.get("id"))
        if step_id:
            if step_id in seen:
                raise TemplateError(f"duplicate step id: {step_id}")
            seen.add(step_id)
        steps.append(
            TemplateStep(
                id=step_id,
                title=_text(raw.get("title")),
                description=_text(raw.get("description")),
                depends=tuple(_text(dep) for dep in raw.get("depends") or ()),
            )
        )

    return Template(
        id=template_id,
        title=_text(document.get("title")),
        description=_text(document.get("description")),
        worktree=bool(document.get("worktree", False)),
        variables=variables,
        steps=tuple(steps),
        source_path=str(path),
        hash=hashlib.sha256(data).hexdigest(),
        source=source,
    )


def load_template_file(path: Path, source: str = "") -> Template:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise TemplateError(f"failed to read template: {exc}") from exc
    return parse_template(path, path.stem, source, data)


class TemplateLibrary:
    """Template collaborator used by the dispatcher."""

    def __init__(self, locations: list[TemplateLocation] | None = None, start: Path | None = None) -> None:
        self._locations = locations
        self._start = start

    def locations(self) -> list[TemplateLocation]:
        if self._locations is not None:
            return list(self._locations)
        return template_locations(self._start)

    def list_templates(self) -> list[Template]:
        """Return every valid template sorted by id; invalid files are skipped."""
        seen: dict[str, Template] = {}
        for location in self.locations():
            for path in _template_files(location.path):
                if path.stem in seen:
                    continue
                try:
                    seen[path.stem] = load_template_file(path, location.source)
                except TemplateError as exc:
                    logger.info("skipping template %s: %s", path, exc)
        return [seen[key] for key in sorted(seen)]

    def load_template(self, template_id: str) -> Template:
        if not template_id.strip():
            raise TemplateError("template id is required")
        locations = self.locations()
        if not locations:
            raise TemplateError("no templates directory found")
        for location in locations:
            for suffix in TEMPLATE_EXTENSIONS:
                candidate = location.path / f"{template_id}{suffix}"
                if candidate.is_file():
                    return load_template_file(candidate, location.source)
            for path in _template_files(location.path):
                if path.stem == template_id:
                    return load_template_file(path, location.source)
        raise TemplateError(f"template not found: {template_id}")

    def render_text(self, body: str, variables: Mapping[str, str]) -> str:
        return render_text(body, variables)


__all__ = [
    "TemplateLibrary",
    "TemplateLocation",
    "load_template_file",
    "parse_template",
    "template_locations",
]
