"""Tests for command execution and completion messages.

Uses a real in-memory SQLite store so action chains hit actual storage.
"""

from __future__ import annotations

import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from tpgtui.model import AgentContext, Item, ItemType, Status
from tpgtui.project_config import ConfigFile
from tpgtui.runtime.commands import (
    ActionDispatcher,
    CreateFromWizard,
    EditText,
    LoadConfig,
    LoadDetail,
    LoadItems,
    LoadStale,
    LoadTemplate,
    LoadTemplates,
    RunAction,
    SetConfigValue,
    StoreCall,
)
from tpgtui.runtime.messages import (
    ActionDone,
    ConfigLoaded,
    DetailLoaded,
    ItemsLoaded,
    StaleLoaded,
    TemplateLoaded,
    TemplatesLoaded,
)
from tpgtui.store.sqlite import SqliteStore
from tpgtui.templates_source import TemplateLibrary
from tpgtui.wizard import WizardDraft

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class _ExplodingStore:
    def list_items(self, project=None):
        raise RuntimeError("disk on fire")


class DispatcherTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.store = SqliteStore(":memory:")
        self.addCleanup(self.store.close)
        self.store.create_item(Item(id="ep-1", project="core", type=ItemType.EPIC, title="Epic"))
        self.store.create_item(Item(id="ts-1", project="core", type=ItemType.TASK, title="Task"))
        self.dispatcher = ActionDispatcher(
            self.store,
            TemplateLibrary([]),
            ConfigFile(Path(tmp.name)),
            now=lambda: NOW,
        )

    def test_load_items_and_detail(self) -> None:
        result = self.dispatcher.execute(LoadItems())
        self.assertIsInstance(result, ItemsLoaded)
        self.assertEqual([item.id for item in result.items], ["ep-1", "ts-1"])
        self.store.add_dependency("ep-1", "ts-1")
        self.store.add_log("ts-1", "note")
        detail = self.dispatcher.execute(LoadDetail("ts-1"))
        self.assertIsInstance(detail, DetailLoaded)
        self.assertEqual(detail.item_id, "ts-1")
        self.assertEqual([dep.id for dep in detail.depends_on], ["ep-1"])
        self.assertEqual([entry.message for entry in detail.logs], ["note"])

    def test_run_action_stops_at_first_failure_without_rollback(self) -> None:
        command = RunAction(
            (
                StoreCall("update_status", ("ts-1", Status.BLOCKED, AgentContext())),
                StoreCall("add_log", ("ts-404", "Blocked: waiting")),
                StoreCall("update_priority", ("ts-1", 5)),
            ),
            "Blocked ts-1",
        )
        result = self.dispatcher.execute(command)
        self.assertIsInstance(result, ActionDone)
        self.assertIn("item not found: ts-404", result.error)
        item = self.store.get_item("ts-1")
        self.assertEqual(item.status, Status.BLOCKED)
        self.assertEqual(item.priority, 2)

    def test_run_action_success_message(self) -> None:
        result = self.dispatcher.execute(RunAction((StoreCall("update_priority", ("ts-1", 1)),), "Done"))
        self.assertEqual(result, ActionDone("Done"))

    def test_create_from_wizard_runs_follow_up_steps(self) -> None:
        draft = WizardDraft(
            item_type=ItemType.TASK,
            priority=3,
            project="core",
            title="New",
            description="Body text",
            parent_id="ep-1",
            depends_on=("ts-1",),
            labels=("ui",),
            template_id="bugfix",
            template_vars={"area": "auth"},
        )
        result = self.dispatcher.execute(CreateFromWizard(draft))
        self.assertIsNone(result.error)
        self.assertEqual(result.message, f"Created {result.created_id}")
        created = self.store.get_item(result.created_id)
        self.assertTrue(created.id.startswith("ts-"))
        self.assertEqual(created.parent_id, "ep-1")
        self.assertEqual(created.labels, ("ui",))
        self.assertEqual(dict(created.template_vars), {"area": "auth"})
        self.assertEqual(created.created_at, NOW)
        self.assertEqual([dep.id for dep in self.store.get_depends_on(created.id)], ["ts-1"])

    def test_create_keeps_item_when_follow_up_fails(self) -> None:
        draft = WizardDraft(
            item_type=ItemType.TASK,
            priority=2,
            project="core",
            title="Orphan",
            description="",
            blocks=("ts-404",),
        )
        result = self.dispatcher.execute(CreateFromWizard(draft))
        self.assertIsNotNone(result.created_id)
        self.assertTrue(result.error.startswith(f"Created {result.created_id}, but "))
        self.assertEqual(self.store.get_item(result.created_id).title, "Orphan")

    def test_stale_items_use_injected_clock(self) -> None:
        old = NOW - timedelta(minutes=10)
        self.store.create_item(
            Item(
                id="ts-2",
                project="core",
                type=ItemType.TASK,
                title="Quiet",
                status=Status.IN_PROGRESS,
                created_at=old,
                updated_at=old,
            )
        )
        result = self.dispatcher.execute(LoadStale(None))
        self.assertEqual(result, StaleLoaded(frozenset({"ts-2"})))

    def test_template_failures_become_error_messages(self) -> None:
        self.assertEqual(self.dispatcher.execute(LoadTemplates()), TemplatesLoaded(()))
        result = self.dispatcher.execute(LoadTemplate("bugfix"))
        self.assertIsInstance(result, TemplateLoaded)
        self.assertEqual(result.template_id, "bugfix")
        self.assertEqual(result.error, "no templates directory found")

    def test_config_commands(self) -> None:
        loaded = self.dispatcher.execute(LoadConfig())
        self.assertIsInstance(loaded, ConfigLoaded)
        self.assertIn("id_length", [field.path for field in loaded.fields])
        updated = self.dispatcher.execute(SetConfigValue("id_length", "8"))
        self.assertEqual(updated.message, "Set id_length = 8")
        failed = self.dispatcher.execute(SetConfigValue("id_length", "eight"))
        self.assertEqual(failed.error, "invalid integer value: eight")

    def test_config_events_carry_the_description_threshold(self) -> None:
        self.assertEqual(self.dispatcher.execute(LoadConfig()).min_description_words, 15)
        raised = self.dispatcher.execute(SetConfigValue("warnings.min_description_words", "5"))
        self.assertEqual(raised.min_description_words, 5)
        disabled = self.dispatcher.execute(SetConfigValue("warnings.short_description", "false"))
        self.assertEqual(disabled.min_description_words, 0)

    def test_edit_text_is_not_a_worker_command(self) -> None:
        with self.assertRaises(TypeError):
            self.dispatcher.execute(EditText("ts-1", "description", ""))


class DispatcherThreadingTests(unittest.TestCase):
    def test_submit_delivers_results_through_drain(self) -> None:
        store = SqliteStore(":memory:")
        self.addCleanup(store.close)
        store.create_item(Item(id="ts-1", project="core", type=ItemType.TASK, title="Task"))
        with tempfile.TemporaryDirectory() as tmp:
            dispatcher = ActionDispatcher(store, TemplateLibrary([]), ConfigFile(Path(tmp)))
            dispatcher.submit(LoadItems())
            dispatcher.submit(LoadDetail("ts-1"))
            self.assertTrue(dispatcher.wait_idle(timeout=5))
            results = dispatcher.drain()
        self.assertEqual(sorted(type(result).__name__ for result in results), ["DetailLoaded", "ItemsLoaded"])
        self.assertEqual(dispatcher.drain(), [])

    def test_unexpected_worker_crash_becomes_failure_message(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            dispatcher = ActionDispatcher(_ExplodingStore(), TemplateLibrary([]), ConfigFile(Path(tmp)))
            with self.assertLogs("tpgtui.runtime.commands", level="ERROR"):
                dispatcher.submit(LoadItems())
                self.assertTrue(dispatcher.wait_idle(timeout=5))
        self.assertEqual(dispatcher.drain(), [ItemsLoaded(error="disk on fire")])


if __name__ == "__main__":
    unittest.main()
