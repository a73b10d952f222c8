"""Tests for detail page and dependency graph keys."""

from __future__ import annotations

import unittest
from dataclasses import replace

from tpgtui.input.detail_keys import graph_nodes, handle_detail_key, handle_graph_key
from tpgtui.model import DepStatus, Item, ItemType, Status
from tpgtui.runtime.commands import EditText, LoadDetail, LoadItems, RunAction, StoreCall
from tpgtui.runtime.state import AppState, DetailData, DetailFocus, ViewMode
from tpgtui.views.graph import BLOCKED_COLUMN, BLOCKERS_COLUMN, FOCAL_COLUMN, GraphCursor

ITEMS = (
    Item(id="ep-1", project="core", type=ItemType.EPIC, title="Epic"),
    Item(id="ts-1", project="core", type=ItemType.TASK, title="Child", parent_id="ep-1",
         description="Do the thing"),
    Item(id="ts-2", project="core", type=ItemType.TASK, title="Root task",
         template_vars={"notes": "line one\nline two", "area": "auth"}),
    Item(id="ts-9", project="core", type=ItemType.TASK, title="Gone", status=Status.DONE),
)

DETAILS = {
    "ts-1": DetailData(
        "ts-1",
        depends_on=(DepStatus("ts-2", "Root task", "open"),),
        blocked_by=(DepStatus("ts-9", "Gone", "done"),),
    ),
    "ts-2": DetailData("ts-2", depends_on=(DepStatus("ts-1", "Child", "open"),)),
}


def _detail_state(item_id: str = "ts-1", **kwargs) -> AppState:
    fields = {
        "items": ITEMS,
        "loaded": True,
        "view": ViewMode.DETAIL,
        "detail_id": item_id,
        "details": DETAILS,
    }
    fields.update(kwargs)
    return AppState(**fields)


class DetailFocusTests(unittest.TestCase):
    def test_escape_leaves_focus_before_leaving_detail(self) -> None:
        state, _ = handle_detail_key(_detail_state(detail_focus=DetailFocus.DEPS), "ESC")
        self.assertEqual((state.view, state.detail_focus), (ViewMode.DETAIL, DetailFocus.NONE))
        state, _ = handle_detail_key(state, "h")
        self.assertEqual(state.view, ViewMode.LIST)

    def test_tab_without_dependencies_reports(self) -> None:
        state, _ = handle_detail_key(_detail_state(details={}), "TAB")
        self.assertEqual(state.detail_focus, DetailFocus.NONE)
        self.assertEqual(state.message, "No dependencies")

    def test_dependency_cursor_is_bounded(self) -> None:
        state, _ = handle_detail_key(_detail_state(), "TAB")
        self.assertEqual(state.detail_focus, DetailFocus.DEPS)
        for key, expected in (("j", 1), ("j", 1), ("k", 0), ("k", 0)):
            state, _ = handle_detail_key(state, key)
            self.assertEqual(state.dep_cursor, expected)

    def test_variables_focus_and_expand(self) -> None:
        state, _ = handle_detail_key(_detail_state(), "v")
        self.assertEqual(state.message, "No template variables")
        state, _ = handle_detail_key(_detail_state("ts-2"), "v")
        self.assertEqual(state.detail_focus, DetailFocus.VARS)
        state, _ = handle_detail_key(state, "j")
        self.assertEqual(state.var_cursor, 1)
        state, _ = handle_detail_key(state, "ENTER")
        self.assertEqual(state.expanded_vars, frozenset({"notes"}))
        state, _ = handle_detail_key(state, "ENTER")
        self.assertEqual(state.expanded_vars, frozenset())


class DetailJumpTests(unittest.TestCase):
    def test_jump_to_visible_dependency(self) -> None:
        state = _detail_state(detail_focus=DetailFocus.DEPS, dep_cursor=0)
        state, commands = handle_detail_key(state, "ENTER")
        self.assertEqual(state.detail_id, "ts-2")
        self.assertEqual(state.detail_focus, DetailFocus.NONE)
        self.assertEqual(commands, (LoadDetail("ts-2"),))

    def test_jump_expands_collapsed_ancestors(self) -> None:
        state = _detail_state("ts-2", detail_focus=DetailFocus.DEPS)
        state, _ = handle_detail_key(state, "ENTER")
        self.assertEqual(state.detail_id, "ts-1")
        self.assertIn("ep-1", state.expanded)
        self.assertEqual(state.cursor, 1)

    def test_jump_to_filtered_out_item_only_reports(self) -> None:
        before = _detail_state(detail_focus=DetailFocus.DEPS, dep_cursor=1)
        state, commands = handle_detail_key(before, "ENTER")
        self.assertEqual(commands, ())
        self.assertEqual(state.detail_id, "ts-1")
        self.assertEqual(state.expanded, before.expanded)
        self.assertEqual(state.message, "ts-9 is not in the current view")


class DetailActionTests(unittest.TestCase):
    def test_edit_description_or_variable(self) -> None:
        _state, commands = handle_detail_key(_detail_state(), "e")
        self.assertEqual(commands, (EditText("ts-1", "description", "Do the thing"),))
        state = _detail_state("ts-2", detail_focus=DetailFocus.VARS, var_cursor=0)
        _state, commands = handle_detail_key(state, "e")
        self.assertEqual(commands, (EditText("ts-2", "variable:area", "auth"),))

    def test_priority_keys_respect_bounds(self) -> None:
        _state, commands = handle_detail_key(_detail_state(), "+")
        self.assertEqual(
            commands,
            (RunAction((StoreCall("update_priority", ("ts-1", 1)),), "Priority of ts-1 set to P1"),),
        )
        items = tuple(replace(item, priority=5) if item.id == "ts-1" else item for item in ITEMS)
        state, commands = handle_detail_key(_detail_state(items=items), "-")
        self.assertEqual(commands, ())
        self.assertEqual(state.message, "Priority already P5")

    def test_reload_and_status_actions(self) -> None:
        _state, commands = handle_detail_key(_detail_state(), "r")
        self.assertEqual(commands, (LoadItems(), LoadDetail("ts-1")))
        _state, commands = handle_detail_key(_detail_state(), "s")
        self.assertEqual(commands[0].success, "Started ts-1")
        _state, commands = handle_detail_key(_detail_state(), "D")
        self.assertEqual(commands, (RunAction((StoreCall("delete_item", ("ts-1",)),), "Deleted ts-1"),))

    def test_description_scroll_stops_at_end(self) -> None:
        state, _ = handle_detail_key(_detail_state(), "j")
        self.assertEqual(state.desc_scroll, 0)

    def test_g_opens_centered_graph(self) -> None:
        state, _ = handle_detail_key(_detail_state(graph_cursor=GraphCursor(0, 0)), "g")
        self.assertEqual(state.view, ViewMode.GRAPH)
        self.assertEqual(state.graph_cursor, GraphCursor())


class GraphKeyTests(unittest.TestCase):
    def _graph_state(self, **kwargs) -> AppState:
        return _detail_state(view=ViewMode.GRAPH, **kwargs)

    def test_graph_nodes_follow_detail_data(self) -> None:
        nodes = graph_nodes(self._graph_state())
        self.assertEqual([(node.id, node.column) for node in nodes],
                         [("ts-2", BLOCKERS_COLUMN), ("ts-1", FOCAL_COLUMN), ("ts-9", BLOCKED_COLUMN)])

    def test_column_moves_stop_at_edges(self) -> None:
        state, _ = handle_graph_key(self._graph_state(), "l")
        self.assertEqual(state.graph_cursor, GraphCursor(BLOCKED_COLUMN, 0))
        state, _ = handle_graph_key(state, "l")
        self.assertEqual(state.graph_cursor, GraphCursor(BLOCKED_COLUMN, 0))
        state, _ = handle_graph_key(self._graph_state(), "h")
        self.assertEqual(state.graph_cursor, GraphCursor(BLOCKERS_COLUMN, 0))

    def test_enter_on_focal_returns_to_detail(self) -> None:
        state, commands = handle_graph_key(self._graph_state(), "ENTER")
        self.assertEqual((state.view, commands), (ViewMode.DETAIL, ()))

    def test_enter_on_neighbour_recentres(self) -> None:
        state = self._graph_state(graph_cursor=GraphCursor(BLOCKERS_COLUMN, 0))
        state, commands = handle_graph_key(state, "ENTER")
        self.assertEqual(state.view, ViewMode.GRAPH)
        self.assertEqual(state.detail_id, "ts-2")
        self.assertEqual(state.graph_cursor, GraphCursor())
        self.assertEqual(commands, (LoadDetail("ts-2"),))

    def test_enter_on_hidden_neighbour_stays(self) -> None:
        state = self._graph_state(graph_cursor=GraphCursor(BLOCKED_COLUMN, 0))
        state, commands = handle_graph_key(state, "ENTER")
        self.assertEqual(commands, ())
        self.assertEqual(state.view, ViewMode.GRAPH)
        self.assertEqual(state.message, "ts-9 is not in the current view")

    def test_escape_returns_to_detail(self) -> None:
        state, _ = handle_graph_key(self._graph_state(), "ESC")
        self.assertEqual(state.view, ViewMode.DETAIL)


if __name__ == "__main__":
    unittest.main()
