"""Parent/child tree projection of the filtered item list."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..model import Item
from .filtering import FilterState, filter_items


@dataclass(frozen=True)
class TreeNode:
    """One rendered row in the list view."""

    item: Item
    level: int
    has_children: bool
    is_last_child: bool


def group_children(items: Sequence[Item]) -> dict[str, list[Item]]:
    """Group items under their parent id, keeping input order per parent."""
    present = {item.id for item in items}
    children_by_parent: dict[str, list[Item]] = {}
    for item in items:
        if item.parent_id and item.parent_id in present and item.parent_id != item.id:
            children_by_parent.setdefault(item.parent_id, []).append(item)
    return children_by_parent


def find_roots(items: Sequence[Item], children_by_parent: dict[str, list[Item]]) -> list[Item]:
    """Return root items in input order.

    An item is a root when its parent is absent from ``items``. Items that
    are only reachable through a parent cycle are promoted to roots so the
    tree never silently drops them.
    """
    present = {item.id for item in items}
    roots = [
        item
        for item in items
        if not item.parent_id or item.parent_id not in present or item.parent_id == item.id
    ]
    reachable: set[str] = set()
    stack = [root.id for root in roots]
    while stack:
        current = stack.pop()
        if current in reachable:
            continue
        reachable.add(current)
        stack.extend(child.id for child in children_by_parent.get(current, []))
    for item in items:
        if item.id in reachable:
            continue
        roots.append(item)
        stack = [item.id]
        while stack:
            current = stack.pop()
            if current in reachable:
                continue
            reachable.add(current)
            stack.extend(child.id for child in children_by_parent.get(current, []))
    return roots


def build_tree(items: Sequence[Item], expanded: Iterable[str]) -> list[TreeNode]:
    """Build visible tree rows by depth-first traversal.

    Roots come out in ``items`` order; children of expanded nodes follow their
    parent directly, one level deeper.
    """
    expanded_ids = set(expanded)
    children_by_parent = group_children(items)
    roots = find_roots(items, children_by_parent)
    nodes: list[TreeNode] = []

    def walk(item: Item, level: int, is_last: bool, path: frozenset[str]) -> None:
        children = [child for child in children_by_parent.get(item.id, []) if child.id not in path]
        nodes.append(TreeNode(item, level, bool(children), is_last))
        if item.id not in expanded_ids:
            return
        child_path = path | {item.id}
        for index, child in enumerate(children):
            walk(child, level + 1, index == len(children) - 1, child_path)

    for index, root in enumerate(roots):
        walk(root, 0, index == len(roots) - 1, frozenset())
    return nodes


def build_tree_iterative(items: Sequence[Item], expanded: Iterable[str]) -> list[TreeNode]:
    """Same output as ``build_tree`` using an explicit stack (no recursion limit)."""
    expanded_ids = set(expanded)
    children_by_parent = group_children(items)
    roots = find_roots(items, children_by_parent)
    nodes: list[TreeNode] = []

    stack: list[tuple[Item, int, bool, frozenset[str]]] = [
        (root, 0, index == len(roots) - 1, frozenset()) for index, root in enumerate(roots)
    ]
    stack.reverse()
    while stack:
        item, level, is_last, path = stack.pop()
        children = [child for child in children_by_parent.get(item.id, []) if child.id not in path]
        nodes.append(TreeNode(item, level, bool(children), is_last))
        if item.id not in expanded_ids:
            continue
        child_path = path | {item.id}
        for index in range(len(children) - 1, -1, -1):
            stack.append((children[index], level + 1, index == len(children) - 1, child_path))
    return nodes


def toggle_expanded(expanded: frozenset[str], item_id: str) -> frozenset[str]:
    if item_id in expanded:
        return expanded - {item_id}
    return expanded | {item_id}


def ancestor_ids(item_id: str, items: Sequence[Item]) -> list[str]:
    """Return parent ids from nearest to farthest, stopping at a cycle."""
    by_id = {item.id: item for item in items}
    out: list[str] = []
    seen = {item_id}
    current = by_id.get(item_id)
    while current is not None and current.parent_id and current.parent_id in by_id:
        parent_id = current.parent_id
        if parent_id in seen:
            break
        seen.add(parent_id)
        out.append(parent_id)
        current = by_id[parent_id]
    return out


def visible_nodes(
    items: Sequence[Item],
    filter_state: FilterState,
    expanded: Iterable[str],
) -> list[TreeNode]:
    """Filter then build the tree; recomputed on every call, never cached."""
    return build_tree_iterative(filter_items(items, filter_state), expanded)


def index_of(nodes: Sequence[TreeNode], item_id: str) -> int | None:
    for idx, node in enumerate(nodes):
        if node.item.id == item_id:
            return idx
    return None


def parent_index(nodes: Sequence[TreeNode], from_idx: int) -> int | None:
    """Return nearest row above ``from_idx`` with a smaller level."""
    if not 0 <= from_idx < len(nodes):
        return None
    level = nodes[from_idx].level
    idx = from_idx - 1
    while idx >= 0:
        if nodes[idx].level < level:
            return idx
        idx -= 1
    return None


__all__ = [
    "TreeNode",
    "ancestor_ids",
    "build_tree",
    "build_tree_iterative",
    "find_roots",
    "group_children",
    "index_of",
    "parent_index",
    "toggle_expanded",
    "visible_nodes",
]
