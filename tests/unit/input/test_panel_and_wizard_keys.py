"""Tests for the template browser, the config table and the wizard glue."""

from __future__ import annotations

import unittest

from tpgtui.input.panel_keys import handle_config_key, handle_template_detail_key, handle_template_list_key
from tpgtui.input.wizard_keys import handle_textarea_key, handle_wizard_view_key
from tpgtui.model import Item, ItemType, Template, TemplateStep
from tpgtui.project_config import ConfigField
from tpgtui.runtime.commands import CreateFromWizard, LoadConfig, LoadTemplate, LoadTemplates
from tpgtui.runtime.state import AppState, InputMode, ViewMode
from tpgtui.wizard import WizardDraft, WizardState, WizardStep

TEMPLATES = (
    Template(id="bugfix", title="Fix", steps=(TemplateStep(id="a", title="A"),)),
    Template(id="chore", title="Chore", steps=(TemplateStep(id="b", title="B"),)),
)

FIELDS = (
    ConfigField("default_project", "default_project", "core", "string"),
    ConfigField("id_length", "id_length", 6, "int"),
    ConfigField("custom_prefixes", "custom_prefixes", {"bug": "bg"}, "map"),
    ConfigField("worktree.branch_prefix", "branch_prefix", "", "string"),
)


class TemplatePanelTests(unittest.TestCase):
    def test_cursor_is_bounded_and_enter_loads_template(self) -> None:
        state = AppState(view=ViewMode.TEMPLATE_LIST, templates=TEMPLATES, templates_loaded=True)
        state, _ = handle_template_list_key(state, "j")
        state, _ = handle_template_list_key(state, "j")
        self.assertEqual(state.template_cursor, 1)
        state, commands = handle_template_list_key(state, "ENTER")
        self.assertEqual(state.view, ViewMode.TEMPLATE_DETAIL)
        self.assertEqual(state.template_id, "chore")
        self.assertEqual(commands, (LoadTemplate("chore"),))

    def test_empty_list_and_reload(self) -> None:
        state = AppState(view=ViewMode.TEMPLATE_LIST, templates_loaded=True)
        self.assertEqual(handle_template_list_key(state, "ENTER"), (state, ()))
        state, commands = handle_template_list_key(state, "r")
        self.assertFalse(state.templates_loaded)
        self.assertEqual(commands, (LoadTemplates(),))
        state, _ = handle_template_list_key(state, "ESC")
        self.assertEqual(state.view, ViewMode.LIST)

    def test_detail_scrolls_and_returns(self) -> None:
        state = AppState(view=ViewMode.TEMPLATE_DETAIL, template_id="bugfix")
        state, _ = handle_template_detail_key(state, "k")
        self.assertEqual(state.template_scroll, 0)
        state, _ = handle_template_detail_key(state, "j")
        self.assertEqual(state.template_scroll, 1)
        state, _ = handle_template_detail_key(state, "ESC")
        self.assertEqual(state.view, ViewMode.TEMPLATE_LIST)


class ConfigPanelTests(unittest.TestCase):
    def _state(self, cursor: int) -> AppState:
        return AppState(view=ViewMode.CONFIG, config_fields=FIELDS, config_cursor=cursor)

    def test_edit_prefills_current_value(self) -> None:
        state, commands = handle_config_key(self._state(1), "e")
        self.assertEqual(commands, ())
        self.assertEqual(state.input_mode, InputMode.CONFIG_VALUE)
        self.assertEqual(state.input_label, "id_length = ")
        self.assertEqual(state.input_text, "6")
        self.assertEqual(state.input_targets, ("id_length",))

    def test_empty_string_prefills_blank(self) -> None:
        state, _ = handle_config_key(self._state(3), "ENTER")
        self.assertEqual(state.input_text, "")

    def test_map_fields_are_not_editable_inline(self) -> None:
        state, _ = handle_config_key(self._state(2), "ENTER")
        self.assertEqual(state.input_mode, InputMode.NONE)
        self.assertEqual(state.message, "custom_prefixes is a map; edit config.json directly")

    def test_reload_and_leave(self) -> None:
        state, commands = handle_config_key(self._state(0), "r")
        self.assertEqual(commands, (LoadConfig(),))
        state, _ = handle_config_key(state, "ESC")
        self.assertEqual(state.view, ViewMode.LIST)


def _wizard_state(**kwargs) -> AppState:
    fields = {
        "items": (Item(id="ep-1", project="core", type=ItemType.EPIC, title="Epic"),),
        "loaded": True,
        "project": "core",
        "view": ViewMode.CREATE_WIZARD,
        "wizard": WizardState(),
        "templates_loaded": True,
    }
    fields.update(kwargs)
    return AppState(**fields)


def _keys(state: AppState, *keys: str, handler=handle_wizard_view_key):
    commands: tuple = ()
    for key in keys:
        state, commands = handler(state, key)
    return state, commands


class WizardGlueTests(unittest.TestCase):
    def test_escape_on_first_step_leaves_wizard(self) -> None:
        state, commands = _keys(_wizard_state(), "ESC")
        self.assertEqual((state.view, state.wizard, commands), (ViewMode.LIST, None, ()))

    def test_entering_method_requests_templates_once(self) -> None:
        state, commands = _keys(_wizard_state(templates_loaded=False), "ENTER", "ENTER", "ENTER")
        self.assertEqual(state.wizard.step, WizardStep.METHOD)
        self.assertEqual(commands, (LoadTemplates(),))

    def test_full_ad_hoc_walk_submits_draft(self) -> None:
        state, _ = _keys(_wizard_state(), "ENTER", "ENTER", "ENTER", "ENTER")
        self.assertEqual(state.wizard.step, WizardStep.DETAILS)
        state, _ = _keys(state, *"Ship it")
        state, _ = _keys(state, "ENTER")
        self.assertEqual(state.wizard.step, WizardStep.DESCRIPTION)
        self.assertEqual(state.input_mode, InputMode.TEXTAREA_EDIT)

        state, commands = _keys(state, *"too short", "CTRL_S", handler=handle_textarea_key)
        self.assertEqual(commands, ())
        self.assertEqual(state.input_mode, InputMode.TEXTAREA_EDIT)
        self.assertEqual(state.input_error, "Description needs at least 3 words or 20 characters")

        state, _ = _keys(state, "CTRL_U", *"three whole words", "CTRL_S", handler=handle_textarea_key)
        self.assertEqual(state.input_mode, InputMode.NONE)
        self.assertEqual(state.wizard.step, WizardStep.CONFIRM)

        state, commands = _keys(state, "ENTER")
        self.assertEqual((state.view, state.wizard), (ViewMode.LIST, None))
        self.assertEqual(
            commands,
            (
                CreateFromWizard(
                    WizardDraft(
                        item_type=ItemType.TASK,
                        priority=2,
                        project="core",
                        title="Ship it",
                        description="three whole words",
                    )
                ),
            ),
        )

    def test_textarea_editing_keys(self) -> None:
        state, _ = _keys(_wizard_state(), "ENTER", "ENTER", "ENTER", "ENTER", *"Title", "ENTER")
        state, _ = _keys(state, *"one", "ENTER", *"two", handler=handle_textarea_key)
        self.assertEqual(state.input_text, "one\ntwo")
        state, _ = _keys(state, "CTRL_U", handler=handle_textarea_key)
        self.assertEqual(state.input_text, "one\n")
        state, _ = _keys(state, "BACKSPACE", "ESC", handler=handle_textarea_key)
        self.assertEqual(state.input_mode, InputMode.NONE)
        self.assertEqual(state.wizard.description, "one")
        self.assertEqual(state.wizard.step, WizardStep.DESCRIPTION)


if __name__ == "__main__":
    unittest.main()
