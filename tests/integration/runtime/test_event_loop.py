"""Tests for ``run_main_loop`` wiring with scripted terminal input.

A fake terminal, a synchronous dispatcher and a fake editor stand in for the
real collaborators so every iteration is deterministic.
"""

from __future__ import annotations

import tempfile
import unittest
from contextlib import contextmanager
from pathlib import Path

from tpgtui.model import Item, ItemType
from tpgtui.project_config import ConfigFile
from tpgtui.render import RenderContext, render_frame
from tpgtui.runtime.commands import ActionDispatcher, LoadItems
from tpgtui.runtime.loop import run_main_loop
from tpgtui.runtime.messages import EditorFinished
from tpgtui.runtime.state import AppState, InputMode, ViewMode
from tpgtui.store.sqlite import SqliteStore
from tpgtui.templates_source import TemplateLibrary
from tpgtui.ui_theme import PLAIN_THEME


class _FakeTerminal:
    def __init__(self, sizes: list[tuple[int, int]]) -> None:
        self.sizes = sizes
        self.frames: list[list[str]] = []
        self.events: list[str] = []

    @contextmanager
    def raw_mode(self):
        self.events.append("raw")
        try:
            yield
        finally:
            self.events.append("restored")

    def size(self) -> tuple[int, int]:
        if len(self.sizes) > 1:
            return self.sizes.pop(0)
        return self.sizes[0]

    def write_frame(self, lines: list[str]) -> None:
        self.frames.append(lines)


class _SyncDispatcher:
    """Runs each command immediately and hands results back on the next drain."""

    def __init__(self, inner: ActionDispatcher) -> None:
        self.inner = inner
        self.submitted: list[object] = []
        self._results: list[object] = []

    def submit(self, command) -> None:
        self.submitted.append(command)
        self._results.append(self.inner.execute(command))

    def drain(self) -> list[object]:
        results, self._results = self._results, []
        return results


class _FakeEditor:
    def __init__(self, content: str) -> None:
        self.content = content
        self.calls: list[object] = []

    def edit(self, command) -> EditorFinished:
        self.calls.append(command)
        return EditorFinished(command.item_id, command.target, True, self.content)


def _script(*keys: str):
    """Key reader that replays ``keys`` and then quits."""
    queue = list(keys)

    def read(_fd: int, _timeout_ms: int) -> str:
        return queue.pop(0) if queue else "q"

    return read


class EventLoopTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.store = SqliteStore(":memory:")
        self.addCleanup(self.store.close)
        self.store.create_item(Item(id="ts-1", project="core", type=ItemType.TASK, title="First"))
        self.store.create_item(Item(id="ts-2", project="core", type=ItemType.TASK, title="Second"))
        self.dispatcher = _SyncDispatcher(
            ActionDispatcher(self.store, TemplateLibrary([]), ConfigFile(Path(tmp.name)))
        )
        self.ctx = RenderContext(theme=PLAIN_THEME, no_color=True)

    def _run(self, *keys: str, sizes=((80, 24),), editor=None, state=None) -> tuple[AppState, _FakeTerminal]:
        terminal = _FakeTerminal(list(sizes))
        final = run_main_loop(
            state or AppState(project="core"),
            terminal,
            0,
            self.dispatcher,
            editor or _FakeEditor(""),
            lambda snapshot: render_frame(snapshot, self.ctx),
            read=_script(*keys),
        )
        return final, terminal

    def test_quit_restores_terminal_and_loads_items_first(self) -> None:
        final, terminal = self._run("", "")
        self.assertTrue(final.should_quit)
        self.assertEqual(terminal.events, ["raw", "restored"])
        self.assertIsInstance(self.dispatcher.submitted[0], LoadItems)
        self.assertEqual([item.id for item in final.items], ["ts-1", "ts-2"])
        self.assertTrue(any("ts-2" in line for line in terminal.frames[-1]))

    def test_frames_match_terminal_height_and_follow_resizes(self) -> None:
        final, terminal = self._run("", "j", sizes=((80, 24), (80, 24), (60, 12)))
        self.assertEqual((final.width, final.height), (60, 12))
        self.assertEqual(len(terminal.frames[0]), 24)
        self.assertEqual(len(terminal.frames[-1]), 12)

    def test_unchanged_state_is_not_redrawn(self) -> None:
        _final, terminal = self._run("", "", "", "z")
        # One frame for the loaded list, one for the stale marks; keys changed nothing.
        self.assertEqual(len(terminal.frames), 2)

    def test_cr_lf_pair_is_one_enter(self) -> None:
        final, _terminal = self._run("/", "F", "ENTER_CR", "ENTER_LF", "ESC")
        # ENTER closed the search prompt; a second ENTER would have opened detail.
        self.assertEqual(final.view, ViewMode.LIST)
        self.assertEqual(final.input_mode, InputMode.NONE)

    def test_lone_lf_is_enter(self) -> None:
        final, _terminal = self._run("ENTER_LF", "")
        self.assertEqual(final.view, ViewMode.DETAIL)
        self.assertEqual(final.detail_id, "ts-1")
        self.assertIn("ts-1", final.details)

    def test_editor_result_is_saved_and_frame_forced(self) -> None:
        editor = _FakeEditor("Rewritten body")
        final, terminal = self._run("ENTER", "", "e", "", editor=editor)
        self.assertEqual(len(editor.calls), 1)
        self.assertEqual(self.store.get_item("ts-1").description, "Rewritten body")
        self.assertEqual(final.detail_id, "ts-1")
        self.assertTrue(any("Rewritten body" in line for line in terminal.frames[-1]))

    def test_detail_start_state_requests_detail(self) -> None:
        final, _terminal = self._run("", state=AppState(project="core", view=ViewMode.DETAIL, detail_id="ts-2"))
        self.assertIn("ts-2", final.details)


if __name__ == "__main__":
    unittest.main()
