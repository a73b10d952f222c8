"""UI theme definitions and selection helpers.

Themes are ANSI palettes for the TUI chrome and item rows. Markdown colouring
of descriptions uses a separate pygments style setting.
"""

from __future__ import annotations

from dataclasses import dataclass

from .model import Status


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by renderers."""

    name: str
    divider: str
    reverse: str
    reset: str
    bold: str
    header: str
    heading: str
    dim: str
    item_id: str
    tree_guide: str
    label: str
    project: str
    priority_high: str
    priority_low: str
    stale: str
    selected_mark: str
    status_open: str
    status_in_progress: str
    status_blocked: str
    status_done: str
    status_canceled: str
    banner_message: str
    banner_error: str
    prompt: str
    input_error: str
    warning: str
    help_key: str
    help_dim: str

    def status_color(self, status: Status | str) -> str:
        try:
            status = Status(status)
        except ValueError:
            return ""
        return {
            Status.OPEN: self.status_open,
            Status.IN_PROGRESS: self.status_in_progress,
            Status.BLOCKED: self.status_blocked,
            Status.DONE: self.status_done,
            Status.CANCELED: self.status_canceled,
        }[status]

    def priority_color(self, priority: int) -> str:
        return self.priority_high if priority <= 2 else self.priority_low


DEFAULT_THEME = UITheme(
    name="default",
    divider="\033[2m",
    reverse="\033[7m",
    reset="\033[0m",
    bold="\033[1m",
    header="\033[1;38;5;81m",
    heading="\033[1;38;5;229m",
    dim="\033[2;38;5;250m",
    item_id="\033[38;5;110m",
    tree_guide="\033[38;5;240m",
    label="\033[38;5;176m",
    project="\033[38;5;109m",
    priority_high="\033[1;38;5;209m",
    priority_low="\033[38;5;250m",
    stale="\033[38;5;214m",
    selected_mark="\033[1;38;5;81m",
    status_open="\033[38;5;252m",
    status_in_progress="\033[38;5;220m",
    status_blocked="\033[38;5;203m",
    status_done="\033[38;5;42m",
    status_canceled="\033[2;38;5;245m",
    banner_message="\033[38;5;42m",
    banner_error="\033[1;38;5;203m",
    prompt="\033[1;38;5;81m",
    input_error="\033[38;5;203m",
    warning="\033[38;5;214m",
    help_key="\033[38;5;229m",
    help_dim="\033[2;38;5;250m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    divider="\033[2;38;5;31m",
    reverse="\033[7m",
    reset="\033[0m",
    bold="\033[1m",
    header="\033[1;38;5;45m",
    heading="\033[1;38;5;153m",
    dim="\033[2;38;5;110m",
    item_id="\033[38;5;117m",
    tree_guide="\033[38;5;24m",
    label="\033[38;5;141m",
    project="\033[38;5;73m",
    priority_high="\033[1;38;5;215m",
    priority_low="\033[38;5;110m",
    stale="\033[38;5;215m",
    selected_mark="\033[1;38;5;45m",
    status_open="\033[38;5;252m",
    status_in_progress="\033[38;5;81m",
    status_blocked="\033[38;5;204m",
    status_done="\033[38;5;84m",
    status_canceled="\033[2;38;5;244m",
    banner_message="\033[38;5;84m",
    banner_error="\033[1;38;5;204m",
    prompt="\033[1;38;5;45m",
    input_error="\033[38;5;204m",
    warning="\033[38;5;215m",
    help_key="\033[38;5;153m",
    help_dim="\033[2;38;5;110m",
)

PLAIN_THEME = UITheme(
    name="plain",
    divider="",
    reverse="",
    reset="",
    bold="",
    header="",
    heading="",
    dim="",
    item_id="",
    tree_guide="",
    label="",
    project="",
    priority_high="",
    priority_low="",
    stale="",
    selected_mark="",
    status_open="",
    status_in_progress="",
    status_blocked="",
    status_done="",
    status_canceled="",
    banner_message="",
    banner_error="",
    prompt="",
    input_error="",
    warning="",
    help_key="",
    help_dim="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    if no_color or (name or "").strip().lower() == PLAIN_THEME.name:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "UITheme",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
