"""Immutable UI snapshot owned by the event loop.

``AppState`` is never mutated: handlers build the next snapshot with
``dataclasses.replace`` and the loop swaps it in wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping

from ..model import AgentContext, DepStatus, Item, LogEntry, Template
from ..project_config import ConfigField
from ..views.filtering import FilterState
from ..views.graph import GraphCursor
from ..views.tree import TreeNode, visible_nodes
from ..wizard import WizardState


class ViewMode(str, Enum):
    LIST = "list"
    DETAIL = "detail"
    GRAPH = "graph"
    TEMPLATE_LIST = "template_list"
    TEMPLATE_DETAIL = "template_detail"
    CONFIG = "config"
    CREATE_WIZARD = "create_wizard"


class InputMode(str, Enum):
    NONE = "none"
    BLOCK_REASON = "block_reason"
    LOG_MESSAGE = "log_message"
    CANCEL_REASON = "cancel_reason"
    SEARCH = "search"
    PROJECT_FILTER = "project_filter"
    LABEL_FILTER = "label_filter"
    ADD_DEPENDENCY = "add_dependency"
    CREATE_TITLE = "create_title"
    CREATE_TYPE = "create_type"
    BATCH_STATUS = "batch_status"
    BATCH_PRIORITY = "batch_priority"
    TEXTAREA_EDIT = "textarea_edit"
    STATUS_MENU = "status_menu"
    CONFIG_VALUE = "config_value"


class DetailFocus(str, Enum):
    NONE = "none"
    DEPS = "deps"
    VARS = "vars"


@dataclass(frozen=True)
class DetailData:
    """Logs and dependency edges fetched for one item."""

    item_id: str
    logs: tuple[LogEntry, ...] = ()
    depends_on: tuple[DepStatus, ...] = ()
    blocked_by: tuple[DepStatus, ...] = ()

    @property
    def dependencies(self) -> tuple[DepStatus, ...]:
        """Both edge directions in the order detail navigation walks them."""
        return self.depends_on + self.blocked_by


@dataclass(frozen=True)
class AppState:
    items: tuple[Item, ...] = ()
    loaded: bool = False
    project: str = ""
    agent: AgentContext = field(default_factory=AgentContext)

    view: ViewMode = ViewMode.LIST
    input_mode: InputMode = InputMode.NONE
    input_label: str = ""
    input_text: str = ""
    input_initial: str = ""
    input_error: str = ""
    input_targets: tuple[str, ...] = ()
    pending_title: str = ""

    filter: FilterState = field(default_factory=FilterState)
    expanded: frozenset[str] = frozenset()
    selected: frozenset[str] = frozenset()
    cursor: int = 0
    list_offset: int = 0
    stale_ids: frozenset[str] = frozenset()

    detail_id: str | None = None
    details: Mapping[str, DetailData] = field(default_factory=dict)
    detail_focus: DetailFocus = DetailFocus.NONE
    dep_cursor: int = 0
    var_cursor: int = 0
    desc_scroll: int = 0
    expanded_vars: frozenset[str] = frozenset()

    graph_cursor: GraphCursor = field(default_factory=GraphCursor)

    templates: tuple[Template, ...] = ()
    templates_loaded: bool = False
    template_cursor: int = 0
    template_id: str | None = None
    template_cache: Mapping[str, Template] = field(default_factory=dict)
    template_scroll: int = 0

    config_fields: tuple[ConfigField, ...] = ()
    config_cursor: int = 0
    # 0 turns the short-description warning off.
    min_description_words: int = 0

    wizard: WizardState | None = None
    menu_cursor: int = 0

    width: int = 80
    height: int = 24
    message: str = ""
    error: str = ""
    show_help: bool = False
    should_quit: bool = False


def tree_nodes(state: AppState) -> list[TreeNode]:
    """Rows of the list view, rebuilt from the snapshot on every call."""
    return visible_nodes(state.items, state.filter, state.expanded)


def item_by_id(state: AppState, item_id: str | None) -> Item | None:
    if item_id is None:
        return None
    for item in state.items:
        if item.id == item_id:
            return item
    return None


def cursor_item(state: AppState) -> Item | None:
    nodes = tree_nodes(state)
    if not nodes:
        return None
    return nodes[max(0, min(state.cursor, len(nodes) - 1))].item


def detail_item(state: AppState) -> Item | None:
    return item_by_id(state, state.detail_id)


def detail_data(state: AppState) -> DetailData | None:
    if state.detail_id is None:
        return None
    return state.details.get(state.detail_id)


def focus_item(state: AppState) -> Item | None:
    """Item the action keys apply to: the detail item or the list cursor."""
    if state.view in (ViewMode.DETAIL, ViewMode.GRAPH):
        return detail_item(state)
    return cursor_item(state)


def list_rows(state: AppState) -> int:
    """Rows available to tree nodes below the header and above the footer."""
    return max(1, state.height - 5)


def clamp_cursor(state: AppState) -> AppState:
    nodes = tree_nodes(state)
    cursor = max(0, min(state.cursor, len(nodes) - 1)) if nodes else 0
    rows = list_rows(state)
    offset = state.list_offset
    if cursor < offset:
        offset = cursor
    elif cursor >= offset + rows:
        offset = cursor - rows + 1
    offset = max(0, min(offset, max(0, len(nodes) - rows)))
    if cursor == state.cursor and offset == state.list_offset:
        return state
    return replace(state, cursor=cursor, list_offset=offset)


def with_message(state: AppState, message: str) -> AppState:
    return replace(state, message=message, error="")


def with_error(state: AppState, error: str) -> AppState:
    return replace(state, error=error, message="")


def close_input(state: AppState) -> AppState:
    return replace(
        state,
        input_mode=InputMode.NONE,
        input_label="",
        input_text="",
        input_initial="",
        input_error="",
        input_targets=(),
    )


__all__ = [
    "AppState",
    "DetailData",
    "DetailFocus",
    "InputMode",
    "ViewMode",
    "clamp_cursor",
    "close_input",
    "cursor_item",
    "detail_data",
    "detail_item",
    "focus_item",
    "item_by_id",
    "list_rows",
    "tree_nodes",
    "with_error",
    "with_message",
]
