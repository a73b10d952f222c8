"""Tests for full-frame rendering with the plain theme.

Frames always have exactly ``height`` rows; the last three rows are the
divider, the status line and the footer hint.
"""

from __future__ import annotations

import unittest
from dataclasses import replace

from tpgtui.ansi import display_width
from tpgtui.model import DepStatus, Item, ItemType, Status, Template, TemplateStep
from tpgtui.project_config import ConfigField
from tpgtui.render import FrameRenderer, RenderContext, render_frame
from tpgtui.runtime.state import AppState, DetailData, InputMode, ViewMode
from tpgtui.ui_theme import DEFAULT_THEME, PLAIN_THEME
from tpgtui.wizard import WizardState

PLAIN = RenderContext(theme=PLAIN_THEME, no_color=True)

ITEMS = (
    Item(id="ep-1", project="core", type=ItemType.EPIC, title="Epic", priority=1, labels=("ui",)),
    Item(id="ts-1", project="core", type=ItemType.TASK, title="Child", parent_id="ep-1",
         description="First line\nsecond line"),
    Item(id="ts-2", project="core", type=ItemType.TASK, title="Other", status=Status.BLOCKED),
)


def _state(**kwargs) -> AppState:
    fields = {"items": ITEMS, "loaded": True, "project": "core"}
    fields.update(kwargs)
    return AppState(**fields)


class FrameShapeTests(unittest.TestCase):
    def test_every_view_fills_the_screen_exactly(self) -> None:
        states = (
            _state(),
            _state(view=ViewMode.DETAIL, detail_id="ts-1", details={"ts-1": DetailData("ts-1")}),
            _state(view=ViewMode.GRAPH, detail_id="ts-1"),
            _state(view=ViewMode.TEMPLATE_LIST, templates_loaded=True,
                   templates=(Template(id="bugfix", steps=(TemplateStep(id="a", title="A"),)),)),
            _state(view=ViewMode.TEMPLATE_DETAIL, template_id="bugfix"),
            _state(view=ViewMode.CONFIG, config_fields=(ConfigField("id_length", "id_length", 6, "int"),)),
            _state(view=ViewMode.CREATE_WIZARD, wizard=WizardState()),
        )
        for state in states:
            for width, height in ((80, 24), (30, 12), (200, 50)):
                with self.subTest(view=state.view, width=width, height=height):
                    sized = replace(state, width=width, height=height)
                    frame = render_frame(sized, PLAIN)
                    self.assertEqual(len(frame), height)
                    self.assertTrue(all(display_width(line) <= width for line in frame))

    def test_tiny_terminal_is_truncated_not_overflowed(self) -> None:
        self.assertEqual(len(render_frame(_state(height=3), PLAIN)), 3)

    def test_colored_rows_end_with_reset(self) -> None:
        frame = render_frame(_state(), RenderContext(theme=DEFAULT_THEME))
        self.assertTrue(all(line.endswith(DEFAULT_THEME.reset) for line in frame))

    def test_renderer_is_bound_to_context(self) -> None:
        state = _state()
        self.assertEqual(FrameRenderer(PLAIN)(state), render_frame(state, PLAIN))


class ListFrameTests(unittest.TestCase):
    def test_header_rows_and_cursor_marker(self) -> None:
        frame = render_frame(_state(), PLAIN)
        self.assertIn("tpg · Items", frame[0])
        self.assertIn("@core", frame[0])
        self.assertIn("3 items", frame[0])
        self.assertTrue(frame[2].startswith(">"))
        self.assertIn("ep-1", frame[2])
        self.assertIn("#ui", frame[2])
        self.assertIn("ts-2", frame[3])
        self.assertFalse(frame[3].startswith(">"))

    def test_empty_list_messages(self) -> None:
        self.assertIn("Loading items…", render_frame(AppState(), PLAIN)[2])
        self.assertIn("No items match", render_frame(_state(items=()), PLAIN)[2])

    def test_stale_and_selection_marks(self) -> None:
        frame = render_frame(_state(stale_ids=frozenset({"ts-2"}), selected=frozenset({"ts-2"})), PLAIN)
        self.assertIn("⚠ stale", frame[3])
        self.assertTrue(frame[3].startswith("*"))
        self.assertIn("1 selected", frame[0])


class StatusLineTests(unittest.TestCase):
    def test_error_banner_wins_over_message(self) -> None:
        frame = render_frame(_state(error="database is locked", message="ignored"), PLAIN)
        self.assertEqual(frame[-2], "Error: database is locked")
        self.assertEqual(render_frame(_state(message="Started ts-1"), PLAIN)[-2], "Started ts-1")

    def test_prompt_replaces_banner(self) -> None:
        state = _state(input_mode=InputMode.SEARCH, input_label="Search: ", input_text="fix", input_error="bad")
        frame = render_frame(state, PLAIN)
        self.assertEqual(frame[-2], "Search: fix█  bad")
        self.assertIn("esc restore", frame[-1])

    def test_status_menu_overlays_body_bottom(self) -> None:
        state = _state(input_mode=InputMode.STATUS_MENU, input_targets=("ts-1",), menu_cursor=1)
        frame = render_frame(state, PLAIN)
        body = frame[2:-3]
        self.assertEqual(body[-6], "┌ Set status: ts-1")
        self.assertTrue(body[-4].startswith("> │ [d]"))
        self.assertTrue(body[-1].startswith("└"))

    def test_help_page(self) -> None:
        frame = render_frame(_state(show_help=True, height=60), PLAIN)
        self.assertEqual(frame[2], "MOVE")
        self.assertTrue(any("esc or ? closes help" in line for line in frame))


class DetailFrameTests(unittest.TestCase):
    def test_detail_sections(self) -> None:
        data = DetailData("ts-1", depends_on=(DepStatus("ts-2", "Other", "blocked"),))
        frame = render_frame(_state(view=ViewMode.DETAIL, detail_id="ts-1", details={"ts-1": data}), PLAIN)
        text = "\n".join(frame)
        self.assertIn("ts-1  Child", frame[2])
        self.assertIn("Parent", text)
        self.assertIn("ts-2", text)
        self.assertIn("First line", text)

    def test_short_description_is_flagged_when_enabled(self) -> None:
        state = _state(view=ViewMode.DETAIL, detail_id="ts-1", details={"ts-1": DetailData("ts-1")}, height=60)
        warned = "\n".join(render_frame(replace(state, min_description_words=15), PLAIN))
        self.assertIn("short description (4 of 15 words)", warned)
        self.assertNotIn("short description", "\n".join(render_frame(state, PLAIN)))

    def test_plain_description_wraps_on_words(self) -> None:
        item = replace(ITEMS[1], description="one two three four five six seven eight nine ten")
        state = _state(items=(ITEMS[0], item), view=ViewMode.DETAIL, detail_id="ts-1",
                       details={"ts-1": DetailData("ts-1")}, width=24, height=60)
        rows = [line.rstrip() for line in render_frame(state, PLAIN)]
        self.assertIn("one two three four", rows)
        self.assertIn("five six seven eight", rows)
        self.assertIn("nine ten", rows)

    def test_graph_columns(self) -> None:
        data = DetailData("ts-1", depends_on=(DepStatus("ts-2", "Other", "blocked"),))
        frame = render_frame(_state(view=ViewMode.GRAPH, detail_id="ts-1", details={"ts-1": data}), PLAIN)
        self.assertIn("Blocked by", frame[2])
        self.assertIn("ts-2", frame[3])
        self.assertIn(">", frame[3])

    def test_missing_detail_item(self) -> None:
        frame = render_frame(_state(view=ViewMode.DETAIL, detail_id="ts-404"), PLAIN)
        self.assertIn("Item not loaded", frame[2])


if __name__ == "__main__":
    unittest.main()
