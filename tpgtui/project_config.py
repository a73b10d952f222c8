"""Project configuration stored as ``config.json`` in the data directory.

The config is a tree of frozen dataclasses. Field introspection through
``dataclasses.fields`` drives the config view: every leaf is addressable by
a dotted path such as ``worktree.branch_prefix``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, is_dataclass, replace
from pathlib import Path
from typing import Any

from platformdirs import user_data_dir

from .errors import ConfigError
from .model import ItemType

logger = logging.getLogger(__name__)

DATA_DIR_NAME = ".tpg"
CONFIG_FILENAME = "config.json"
DB_FILENAME = "tpg.db"
DEFAULT_TASK_PREFIX = "ts"
DEFAULT_EPIC_PREFIX = "ep"
DEFAULT_ID_LENGTH = 6
DEFAULT_MIN_DESCRIPTION_WORDS = 15
NOT_SET = "<not set>"


@dataclass(frozen=True)
class PrefixConfig:
    task: str = field(default="", metadata={"help": "ID prefix for tasks"})
    epic: str = field(default="", metadata={"help": "ID prefix for epics"})


@dataclass(frozen=True)
class WarningsConfig:
    short_description: bool | None = field(
        default=None, metadata={"help": "Warn when descriptions are short (default true)"}
    )
    min_description_words: int = field(
        default=0, metadata={"help": "Word count below which a description is short"}
    )


@dataclass(frozen=True)
class WorktreeConfig:
    branch_prefix: str = field(default="", metadata={"help": "Branch prefix for epic worktrees"})
    require_epic_id: bool | None = field(
        default=None, metadata={"help": "Require the epic id in worktree branch names"}
    )
    root: str = field(default="", metadata={"help": "Directory holding worktrees"})


@dataclass(frozen=True)
class ProjectConfig:
    prefixes: PrefixConfig = field(default_factory=PrefixConfig)
    custom_prefixes: dict[str, str] = field(
        default_factory=dict, metadata={"help": "Extra type prefixes (edit config.json)"}
    )
    default_project: str = field(default="", metadata={"help": "Project used for new items"})
    id_length: int = field(default=0, metadata={"help": "Hex characters in generated ids"})
    warnings: WarningsConfig = field(default_factory=WarningsConfig)
    worktree: WorktreeConfig = field(default_factory=WorktreeConfig)

    @property
    def short_description_warning(self) -> bool:
        if self.warnings.short_description is None:
            return True
        return self.warnings.short_description

    @property
    def min_description_words(self) -> int:
        if self.warnings.min_description_words <= 0:
            return DEFAULT_MIN_DESCRIPTION_WORDS
        return self.warnings.min_description_words

    def description_warning_threshold(self) -> int:
        """Word count below which descriptions are flagged; 0 when disabled."""
        return self.min_description_words if self.short_description_warning else 0

    def prefix_for(self, item_type: ItemType) -> str:
        if ItemType(item_type) == ItemType.EPIC:
            return self.prefixes.epic or DEFAULT_EPIC_PREFIX
        return self.prefixes.task or DEFAULT_TASK_PREFIX


@dataclass(frozen=True)
class ConfigField:
    """One addressable config leaf as listed by the config view."""

    path: str
    key: str
    value: Any
    type: str
    description: str = ""


def find_data_dir(start: Path | None = None) -> Path | None:
    """Return the nearest ``.tpg`` directory at or above ``start``."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        data_dir = candidate / DATA_DIR_NAME
        if data_dir.is_dir():
            return data_dir
    return None


def default_data_dir(start: Path | None = None) -> Path:
    return find_data_dir(start) or Path(user_data_dir("tpg", appauthor=False))


def default_project_name(data_dir: Path) -> str:
    name = Path(data_dir).resolve().parent.name
    return name or "default"


def normalize_prefix(prefix: str) -> str:
    return prefix.strip().removesuffix("-")


def apply_defaults(config: ProjectConfig, data_dir: Path) -> ProjectConfig:
    prefixes = replace(
        config.prefixes,
        task=normalize_prefix(config.prefixes.task) or DEFAULT_TASK_PREFIX,
        epic=normalize_prefix(config.prefixes.epic) or DEFAULT_EPIC_PREFIX,
    )
    worktree = replace(
        config.worktree,
        branch_prefix=config.worktree.branch_prefix or "feature",
        root=config.worktree.root or ".worktrees",
        require_epic_id=True if config.worktree.require_epic_id is None else config.worktree.require_epic_id,
    )
    return replace(
        config,
        prefixes=prefixes,
        worktree=worktree,
        default_project=config.default_project or default_project_name(data_dir),
        id_length=config.id_length or DEFAULT_ID_LENGTH,
    )


def _from_dict(cls: type, data: dict[str, Any]) -> Any:
    kwargs: dict[str, Any] = {}
    for fdef in fields(cls):
        if fdef.name not in data:
            continue
        raw = data[fdef.name]
        default = fdef.default_factory() if callable(fdef.default_factory) else fdef.default
        if is_dataclass(default):
            if not isinstance(raw, dict):
                raise ConfigError(f"{fdef.name} must be an object")
            kwargs[fdef.name] = _from_dict(type(default), raw)
        elif isinstance(default, dict):
            if not isinstance(raw, dict):
                raise ConfigError(f"{fdef.name} must be an object")
            kwargs[fdef.name] = {str(k): str(v) for k, v in raw.items()}
        else:
            kwargs[fdef.name] = raw
    return cls(**kwargs)


def _to_dict(value: Any) -> Any:
    if is_dataclass(value):
        out: dict[str, Any] = {}
        for fdef in fields(value):
            item = getattr(value, fdef.name)
            if item is None:
                continue
            out[fdef.name] = _to_dict(item)
        return out
    if isinstance(value, dict):
        return dict(value)
    return value


def load_config(data_dir: Path) -> ProjectConfig:
    """Read ``config.json`` from ``data_dir``; a missing file yields defaults."""
    config_path = Path(data_dir) / CONFIG_FILENAME
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return apply_defaults(ProjectConfig(), data_dir)
    except OSError as exc:
        raise ConfigError(f"failed to read config: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"failed to parse config: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError("failed to parse config: expected a JSON object")
    try:
        config = _from_dict(ProjectConfig, data)
    except TypeError as exc:
        raise ConfigError(f"failed to parse config: {exc}") from exc
    return apply_defaults(config, data_dir)


def save_config(config: ProjectConfig, data_dir: Path) -> None:
    config = apply_defaults(config, data_dir)
    config_path = Path(data_dir) / CONFIG_FILENAME
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(_to_dict(config), indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to write config: {exc}") from exc


def _type_name(annotation_type: Any, value: Any) -> str:
    annotation = str(annotation_type)
    if "dict" in annotation:
        return "map"
    if "bool" in annotation:
        return "bool"
    if "int" in annotation:
        return "int"
    if isinstance(value, str) or "str" in annotation:
        return "string"
    return type(value).__name__


def get_config_fields(config: ProjectConfig) -> list[ConfigField]:
    """Flatten the config tree into dotted-path leaves, in declaration order."""
    out: list[ConfigField] = []

    def walk(node: Any, prefix: str) -> None:
        for fdef in fields(node):
            value = getattr(node, fdef.name)
            path = f"{prefix}.{fdef.name}" if prefix else fdef.name
            if is_dataclass(value):
                walk(value, path)
                continue
            out.append(
                ConfigField(
                    path=path,
                    key=fdef.name,
                    value=value,
                    type=_type_name(fdef.type, value),
                    description=fdef.metadata.get("help", ""),
                )
            )

    walk(config, "")
    return out


def get_config_field(config: ProjectConfig, path: str) -> Any:
    node: Any = config
    for part in path.split("."):
        if not is_dataclass(node) or part not in {fdef.name for fdef in fields(node)}:
            raise ConfigError(f"field not found: {part}")
        node = getattr(node, part)
    return node


def _parse_bool(value: str) -> bool:
    text = value.strip().lower()
    if text in {"1", "t", "true", "yes", "y", "on"}:
        return True
    if text in {"0", "f", "false", "no", "n", "off"}:
        return False
    raise ConfigError(f"invalid boolean value: {value} (use true/false)")


def _coerce(field_type: str, value: str) -> Any:
    if field_type == "map":
        raise ConfigError("cannot set map values directly; edit config.json")
    if field_type == "bool":
        return _parse_bool(value)
    if field_type == "int":
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ConfigError(f"invalid integer value: {value}") from exc
    return value


def set_config_field(config: ProjectConfig, path: str, value: str) -> ProjectConfig:
    """Return a copy of ``config`` with the leaf at ``path`` parsed from ``value``."""
    parts = [part for part in path.split(".") if part]
    if not parts:
        raise ConfigError(f"invalid path: {path}")

    def assign(node: Any, remaining: list[str]) -> Any:
        declared = {fdef.name: fdef for fdef in fields(node)}
        head = remaining[0]
        fdef = declared.get(head)
        if fdef is None:
            raise ConfigError(f"field not found: {head}")
        current = getattr(node, head)
        if len(remaining) == 1:
            if is_dataclass(current):
                raise ConfigError(f"{path} is a section, not a value")
            return replace(node, **{head: _coerce(_type_name(fdef.type, current), value)})
        if not is_dataclass(current):
            raise ConfigError(f"cannot navigate into non-section field: {head}")
        return replace(node, **{head: assign(current, remaining[1:])})

    return assign(config, parts)


def format_config_value(value: Any) -> str:
    if value is None:
        return NOT_SET
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        if not value:
            return "{}"
        return "{" + ", ".join(f"{key}={val}" for key, val in sorted(value.items())) + "}"
    if isinstance(value, str):
        return value if value else '""'
    return str(value)


class ConfigFile:
    """Config collaborator bound to one data directory."""

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def load(self) -> ProjectConfig:
        return load_config(self.data_dir)

    def save(self, config: ProjectConfig) -> None:
        save_config(config, self.data_dir)

    def fields(self) -> list[ConfigField]:
        return get_config_fields(self.load())

    def set_field(self, path: str, value: str) -> ProjectConfig:
        updated = set_config_field(self.load(), path, value)
        self.save(updated)
        logger.info("config %s set to %s", path, format_config_value(get_config_field(updated, path)))
        return updated


__all__ = [
    "CONFIG_FILENAME",
    "ConfigField",
    "ConfigFile",
    "DB_FILENAME",
    "PrefixConfig",
    "ProjectConfig",
    "WarningsConfig",
    "WorktreeConfig",
    "apply_defaults",
    "default_data_dir",
    "find_data_dir",
    "format_config_value",
    "get_config_field",
    "get_config_fields",
    "load_config",
    "save_config",
    "set_config_field",
]
