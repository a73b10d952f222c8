"""Key-driven sessions against a real in-memory SQLite store.

Each scenario feeds keys through ``update`` and executes every follow-up
command synchronously, so completion messages arrive in issue order and the
store ends up in the state a user would leave it in.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from tpgtui.model import Item, ItemType, Status
from tpgtui.project_config import ConfigFile
from tpgtui.runtime.commands import ActionDispatcher, EditText
from tpgtui.runtime.messages import KeyPressed, Resized
from tpgtui.runtime.state import AppState, DetailFocus, InputMode, ViewMode, cursor_item
from tpgtui.runtime.update import initial_commands, update
from tpgtui.store.sqlite import SqliteStore
from tpgtui.templates_source import TemplateLibrary


class ScriptedSessionTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.store = SqliteStore(":memory:")
        self.addCleanup(self.store.close)
        self.store.create_item(Item(id="ts-1", project="core", type=ItemType.TASK, title="Login form"))
        self.store.create_item(Item(id="ts-2", project="core", type=ItemType.TASK, title="Session cookie"))
        self.dispatcher = ActionDispatcher(self.store, TemplateLibrary([]), ConfigFile(Path(tmp.name)))
        self.edits: list[EditText] = []

        state = AppState(project="core")
        state = self._settle(state, Resized(100, 30))
        for command in initial_commands(state):
            state = self._settle(state, self.dispatcher.execute(command))
        self.state = state

    def _settle(self, state: AppState, event) -> AppState:
        pending = [event]
        while pending:
            state, commands = update(state, pending.pop(0))
            for command in commands:
                if isinstance(command, EditText):
                    self.edits.append(command)
                    continue
                pending.append(self.dispatcher.execute(command))
        return state

    def _press(self, *keys: str) -> AppState:
        for key in keys:
            self.state = self._settle(self.state, KeyPressed(key))
        return self.state

    def test_startup_loads_items(self) -> None:
        self.assertTrue(self.state.loaded)
        self.assertEqual([item.id for item in self.state.items], ["ts-1", "ts-2"])
        self.assertEqual(cursor_item(self.state).id, "ts-1")

    def test_block_with_reason_updates_status_and_log(self) -> None:
        state = self._press("b", *"waiting on api", "ENTER")
        self.assertEqual(state.input_mode, InputMode.NONE)
        self.assertEqual(state.message, "Blocked ts-1")
        self.assertEqual(self.store.get_item("ts-1").status, Status.BLOCKED)
        self.assertEqual([entry.message for entry in self.store.get_logs("ts-1")], ["Blocked: waiting on api"])
        self.assertEqual(cursor_item(state).status, Status.BLOCKED)

    def test_start_then_done_round(self) -> None:
        self._press("s")
        self.assertEqual(self.store.get_item("ts-1").status, Status.IN_PROGRESS)
        state = self._press("d")
        self.assertEqual(state.message, "Completed ts-1")
        self.assertEqual(self.store.get_item("ts-1").status, Status.DONE)
        # Done items drop out of the default filter.
        self.assertEqual(cursor_item(state).id, "ts-2")

    def test_batch_priority_over_selection(self) -> None:
        state = self._press(" ", "j", " ", "P", "4", "ENTER")
        self.assertEqual(state.message, "Set priority of ts-1, ts-2 to P4")
        self.assertEqual(state.selected, frozenset())
        self.assertEqual({self.store.get_item(item_id).priority for item_id in ("ts-1", "ts-2")}, {4})

    def test_add_blocker_from_detail_refreshes_detail(self) -> None:
        state = self._press("j", "ENTER")
        self.assertEqual((state.view, state.detail_id), (ViewMode.DETAIL, "ts-2"))
        state = self._press("a", *"ts-1", "ENTER")
        self.assertEqual(state.message, "ts-1 now blocks ts-2")
        self.assertEqual([dep.id for dep in state.details["ts-2"].depends_on], ["ts-1"])
        state = self._press("TAB")
        self.assertEqual(state.detail_focus, DetailFocus.DEPS)
        state = self._press("ENTER")
        self.assertEqual(state.detail_id, "ts-1")
        self.assertEqual([dep.id for dep in state.details["ts-1"].blocked_by], ["ts-2"])

    def test_delete_from_detail_returns_to_list(self) -> None:
        state = self._press("ENTER", "D")
        self.assertEqual(state.view, ViewMode.LIST)
        self.assertIsNone(state.detail_id)
        self.assertEqual([item.id for item in state.items], ["ts-2"])

    def test_edit_key_hands_off_description(self) -> None:
        self._press("ENTER", "e")
        self.assertEqual(len(self.edits), 1)
        self.assertEqual((self.edits[0].item_id, self.edits[0].target), ("ts-1", "description"))

    def test_wizard_creates_epic(self) -> None:
        state = self._press("N", "e", "ENTER", "ENTER", "ENTER", "ENTER", "ENTER")
        self.assertTrue(state.templates_loaded)
        self.assertEqual(state.wizard.step.name, "DETAILS")
        state = self._press(*"Platform", "ENTER")
        self.assertEqual(state.input_mode, InputMode.TEXTAREA_EDIT)
        state = self._press(*"a new platform epic", "CTRL_S", "ENTER")
        self.assertEqual(state.view, ViewMode.LIST)
        self.assertTrue(state.message.startswith("Created "))
        created = [item for item in self.store.list_items() if item.type == ItemType.EPIC]
        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].title, "Platform")
        self.assertEqual(created[0].description, "a new platform epic")
        self.assertEqual(created[0].project, "core")

    def test_quick_create_task(self) -> None:
        state = self._press("n", *"Quick one", "ENTER", "t")
        self.assertEqual(state.input_mode, InputMode.NONE)
        titles = [item.title for item in self.store.list_items()]
        self.assertIn("Quick one", titles)
        self.assertIn("Quick one", [item.title for item in state.items])

    def test_store_failure_shows_banner_and_keeps_list(self) -> None:
        self.store.delete_item("ts-1")
        state = self._press("s")
        self.assertIn("item not found: ts-1", state.error)
        self.assertEqual([item.id for item in state.items], ["ts-2"])


if __name__ == "__main__":
    unittest.main()
