"""Tests for persisted UI preferences.

Ensures malformed files fall back to defaults and blank values are ignored.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from tpgtui.runtime import config


class PreferenceTests(unittest.TestCase):
    def test_theme_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("tpgtui.runtime.config.CONFIG_PATH", config_path):
                self.assertIsNone(config.load_theme_name())
                config.save_theme_name(" ocean ")
                self.assertEqual(config.load_theme_name(), "ocean")
                config.save_theme_name("   ")
                self.assertEqual(config.load_theme_name(), "ocean")

    def test_editor_and_style_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("tpgtui.runtime.config.CONFIG_PATH", config_path):
                self.assertIsNone(config.load_editor())
                self.assertEqual(config.load_style(), config.DEFAULT_STYLE)
                config.save_config({"editor": "code --wait", "style": "native"})
                self.assertEqual(config.load_editor(), "code --wait")
                self.assertEqual(config.load_style(), "native")

    def test_malformed_file_loads_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("[1, 2", encoding="utf-8")
            with mock.patch("tpgtui.runtime.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                config_path.write_text("[1, 2]", encoding="utf-8")
                self.assertEqual(config.load_config(), {})

    def test_non_string_values_are_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("tpgtui.runtime.config.CONFIG_PATH", config_path):
                config.save_config({"theme": 3, "editor": ["vim"]})
                self.assertIsNone(config.load_theme_name())
                self.assertIsNone(config.load_editor())


if __name__ == "__main__":
    unittest.main()
