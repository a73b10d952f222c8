"""Derived-view builders: pure projections of the item snapshot."""

from __future__ import annotations

from .filtering import FilterState, filter_items, has_active_filters
from .graph import GraphCursor, GraphNode, JumpTarget, build_dependency_graph, resolve_jump
from .templates import find_unused_variables, format_variable_value, render_text
from .text import description_visible_height, scroll_text
from .tree import TreeNode, build_tree, build_tree_iterative, toggle_expanded, visible_nodes

__all__ = [
    "FilterState",
    "GraphCursor",
    "GraphNode",
    "JumpTarget",
    "TreeNode",
    "build_dependency_graph",
    "build_tree",
    "build_tree_iterative",
    "description_visible_height",
    "filter_items",
    "find_unused_variables",
    "format_variable_value",
    "has_active_filters",
    "render_text",
    "resolve_jump",
    "scroll_text",
    "toggle_expanded",
    "visible_nodes",
]
