"""Tests for layered key tables."""

from __future__ import annotations

import unittest
from dataclasses import replace

from tpgtui.input.detail_keys import DETAIL_KEYS, GRAPH_KEYS
from tpgtui.input.key_registry import KeyComboBinding, KeyComboRegistry
from tpgtui.input.list_keys import LIST_KEYS
from tpgtui.input.shared_keys import GLOBAL_KEYS, ITEM_ACTION_KEYS
from tpgtui.runtime.state import AppState


def _mark(text: str):
    return lambda state: (replace(state, message=text), ())


class KeyTableTests(unittest.TestCase):
    def test_unbound_key_keeps_state_object(self) -> None:
        state = AppState()
        table = KeyComboRegistry(KeyComboBinding(("x",), _mark("x")))
        self.assertIsNone(table.dispatch("y", state))
        next_state, commands = table.handle(state, "y")
        self.assertIs(next_state, state)
        self.assertEqual(commands, ())

    def test_derive_overrides_without_touching_base(self) -> None:
        base = KeyComboRegistry(KeyComboBinding(("a", "b"), _mark("base")))
        child = base.derive(KeyComboBinding(("b",), _mark("child")))
        state = AppState()
        self.assertEqual(child.handle(state, "a")[0].message, "base")
        self.assertEqual(child.handle(state, "b")[0].message, "child")
        self.assertEqual(base.handle(state, "b")[0].message, "base")

    def test_views_share_item_actions(self) -> None:
        for table in (LIST_KEYS, DETAIL_KEYS):
            with self.subTest(table=table):
                self.assertTrue(ITEM_ACTION_KEYS.bound_keys() <= table.bound_keys())
        self.assertTrue(GLOBAL_KEYS.bound_keys() <= GRAPH_KEYS.bound_keys())
        self.assertNotIn("s", GRAPH_KEYS)

    def test_help_toggles_and_quit(self) -> None:
        state = AppState()
        shown, _ = GLOBAL_KEYS.handle(state, "?")
        self.assertTrue(shown.show_help)
        self.assertFalse(GLOBAL_KEYS.handle(shown, "?")[0].show_help)
        self.assertTrue(GLOBAL_KEYS.handle(state, "CTRL_C")[0].should_quit)


if __name__ == "__main__":
    unittest.main()
