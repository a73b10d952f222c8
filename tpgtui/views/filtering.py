"""Filter predicates and ordering for the item list."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from ..model import ALL_STATUSES, DEFAULT_VISIBLE_STATUSES, Item, Status


@dataclass(frozen=True)
class FilterState:
    """Conjunctive list filters; empty strings disable a predicate."""

    project: str = ""
    statuses: frozenset[Status] = field(default_factory=lambda: DEFAULT_VISIBLE_STATUSES)
    search: str = ""
    label: str = ""


def matches_status(item: Item, filter_state: FilterState) -> bool:
    return item.status in filter_state.statuses


def matches_project(item: Item, filter_state: FilterState) -> bool:
    if not filter_state.project:
        return True
    return filter_state.project.lower() in item.project.lower()


def matches_search(item: Item, filter_state: FilterState) -> bool:
    if not filter_state.search:
        return True
    needle = filter_state.search.lower()
    return (
        needle in item.title.lower()
        or needle in item.id.lower()
        or needle in item.description.lower()
    )


def matches_label(item: Item, filter_state: FilterState) -> bool:
    if not filter_state.label:
        return True
    needle = filter_state.label.lower()
    return any(needle in label.lower() for label in item.labels)


PREDICATES = (matches_status, matches_project, matches_search, matches_label)


def item_matches(item: Item, filter_state: FilterState) -> bool:
    return all(predicate(item, filter_state) for predicate in PREDICATES)


def sort_key(item: Item) -> tuple[int, str]:
    return (item.priority, item.id)


def filter_items(items: Iterable[Item], filter_state: FilterState) -> list[Item]:
    """Return matching items ordered by priority, then id.

    The sort is stable, so items with equal keys keep snapshot order.
    """
    matched = [item for item in items if item_matches(item, filter_state)]
    matched.sort(key=sort_key)
    return matched


def has_active_filters(filter_state: FilterState) -> bool:
    """Return whether any text filter is set (status toggles do not count)."""
    return bool(filter_state.project or filter_state.search or filter_state.label)


def clear_text_filters(filter_state: FilterState) -> FilterState:
    return replace(filter_state, project="", search="", label="")


def toggle_status(filter_state: FilterState, status: Status) -> FilterState:
    statuses = set(filter_state.statuses)
    if status in statuses:
        statuses.discard(status)
    else:
        statuses.add(status)
    return replace(filter_state, statuses=frozenset(statuses))


def show_all_statuses(filter_state: FilterState) -> FilterState:
    return replace(filter_state, statuses=frozenset(ALL_STATUSES))


def describe_filters(filter_state: FilterState) -> str:
    """Render the active filters as a compact header string."""
    parts: list[str] = []
    if len(filter_state.statuses) < len(ALL_STATUSES):
        letters = "".join(
            status.value[0] for status in ALL_STATUSES if status in filter_state.statuses
        )
        parts.append(f"status:{letters or '-'}")
    if filter_state.project:
        parts.append(f"project:{filter_state.project}")
    if filter_state.search:
        parts.append(f'search:"{filter_state.search}"')
    if filter_state.label:
        parts.append(f"label:{filter_state.label}")
    return " ".join(parts)


__all__ = [
    "FilterState",
    "PREDICATES",
    "clear_text_filters",
    "describe_filters",
    "filter_items",
    "has_active_filters",
    "item_matches",
    "matches_label",
    "matches_project",
    "matches_search",
    "matches_status",
    "show_all_statuses",
    "sort_key",
    "toggle_status",
]
