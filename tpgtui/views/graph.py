"""Three-column dependency graph around one focal item."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..model import DepStatus, Item
from .filtering import FilterState, filter_items
from .tree import ancestor_ids, build_tree_iterative, index_of

BLOCKERS_COLUMN = 0
FOCAL_COLUMN = 1
BLOCKED_COLUMN = 2
COLUMN_TITLES: tuple[str, ...] = ("Blocked by", "Item", "Blocks")


@dataclass(frozen=True)
class GraphNode:
    id: str
    title: str
    status: str
    column: int
    position: int


@dataclass(frozen=True)
class GraphCursor:
    column: int = FOCAL_COLUMN
    row: int = 0


@dataclass(frozen=True)
class JumpTarget:
    """Outcome of resolving a graph or dependency node against the list."""

    found: bool
    item_id: str
    row: int = 0
    expanded: frozenset[str] = frozenset()
    message: str = ""


def build_dependency_graph(
    focal: Item,
    depends_on: Sequence[DepStatus],
    blocked_by: Sequence[DepStatus],
) -> list[GraphNode]:
    """Lay out blockers left, the focal item centre and blocked items right.

    ``depends_on`` holds the items the focal item waits for; ``blocked_by``
    holds the items waiting on the focal item.
    """
    nodes = [
        GraphNode(dep.id, dep.title, dep.status, BLOCKERS_COLUMN, position)
        for position, dep in enumerate(depends_on)
    ]
    nodes.append(GraphNode(focal.id, focal.title, focal.status.value, FOCAL_COLUMN, 0))
    nodes.extend(
        GraphNode(dep.id, dep.title, dep.status, BLOCKED_COLUMN, position)
        for position, dep in enumerate(blocked_by)
    )
    return nodes


def column_nodes(nodes: Sequence[GraphNode], column: int) -> list[GraphNode]:
    return [node for node in nodes if node.column == column]


def node_at(nodes: Sequence[GraphNode], cursor: GraphCursor) -> GraphNode | None:
    for node in nodes:
        if node.column == cursor.column and node.position == cursor.row:
            return node
    return None


def clamp_cursor(nodes: Sequence[GraphNode], cursor: GraphCursor) -> GraphCursor:
    size = len(column_nodes(nodes, cursor.column))
    if size == 0:
        return GraphCursor(FOCAL_COLUMN, 0)
    return GraphCursor(cursor.column, max(0, min(cursor.row, size - 1)))


def move_column(nodes: Sequence[GraphNode], cursor: GraphCursor, delta: int) -> GraphCursor:
    """Step to the next non-empty column in ``delta`` direction."""
    column = cursor.column + delta
    while 0 <= column <= BLOCKED_COLUMN:
        if column_nodes(nodes, column):
            return clamp_cursor(nodes, GraphCursor(column, cursor.row))
        column += delta
    return cursor


def move_row(nodes: Sequence[GraphNode], cursor: GraphCursor, delta: int) -> GraphCursor:
    return clamp_cursor(nodes, GraphCursor(cursor.column, cursor.row + delta))


def resolve_jump(
    item_id: str,
    items: Sequence[Item],
    filter_state: FilterState,
    expanded: frozenset[str],
) -> JumpTarget:
    """Locate ``item_id`` in the filtered tree, expanding ancestors if needed.

    Ids outside the filtered set resolve to a not-found target carrying a
    user-facing message; nothing raises.
    """
    filtered = filter_items(items, filter_state)
    if not any(item.id == item_id for item in filtered):
        return JumpTarget(False, item_id, message=f"{item_id} is not in the current view")
    revealed = expanded | frozenset(ancestor_ids(item_id, filtered))
    row = index_of(build_tree_iterative(filtered, revealed), item_id)
    if row is None:
        return JumpTarget(False, item_id, message=f"{item_id} is not in the current view")
    return JumpTarget(True, item_id, row=row, expanded=revealed)


__all__ = [
    "BLOCKED_COLUMN",
    "BLOCKERS_COLUMN",
    "COLUMN_TITLES",
    "FOCAL_COLUMN",
    "GraphCursor",
    "GraphNode",
    "JumpTarget",
    "build_dependency_graph",
    "clamp_cursor",
    "column_nodes",
    "move_column",
    "move_row",
    "node_at",
    "resolve_jump",
]
