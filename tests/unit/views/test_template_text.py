"""Tests for template text rendering and stored-variable inspection.

Rendering must never raise: malformed bodies come back unchanged.
"""

from __future__ import annotations

import unittest

from tpgtui.views.templates import (
    find_unused_variables,
    format_variable_value,
    referenced_variables,
    render_text,
    slugify,
)


GREETING = "Hello {{.name}}, {{if hasValue .extra}}{{.extra}}{{end}}"


class RenderTextTests(unittest.TestCase):
    def test_greeting_skips_empty_conditional(self) -> None:
        stored = {"name": "Bob", "extra": "", "unused": "z"}
        self.assertEqual(render_text(GREETING, stored), "Hello Bob, ")
        self.assertEqual(render_text(GREETING, {"name": "Bob", "extra": "hi"}), "Hello Bob, hi")

    def test_plain_text_passes_through(self) -> None:
        self.assertEqual(render_text("no actions here", {"a": "b"}), "no actions here")

    def test_missing_variable_renders_empty(self) -> None:
        self.assertEqual(render_text("[{{.absent}}]", {}), "[]")

    def test_default_helper_picks_first_non_empty(self) -> None:
        body = '{{default "main" .base}}'
        self.assertEqual(render_text(body, {"base": ""}), "main")
        self.assertEqual(render_text(body, {"base": "develop"}), "develop")

    def test_slugify_in_pipeline(self) -> None:
        self.assertEqual(render_text("feature/{{.title | slugify}}", {"title": "Fix The_Login  Bug!"}), "feature/fix-the-login-bug")

    def test_else_if_chain(self) -> None:
        body = "{{if .a}}A{{else if .b}}B{{else}}C{{end}}"
        self.assertEqual(render_text(body, {"a": "1"}), "A")
        self.assertEqual(render_text(body, {"b": "1"}), "B")
        self.assertEqual(render_text(body, {}), "C")

    def test_eq_and_not(self) -> None:
        body = '{{if eq .kind "bug"}}B{{end}}{{if not .kind}}none{{end}}'
        self.assertEqual(render_text(body, {"kind": "bug"}), "B")
        self.assertEqual(render_text(body, {}), "none")

    def test_trim_markers_and_comments(self) -> None:
        self.assertEqual(render_text("a  {{- .x -}}  b", {"x": "1"}), "a1b")
        self.assertEqual(render_text("x{{/* note */}}y", {}), "xy")

    def test_errors_return_original_body(self) -> None:
        for body in (
            "{{if .x}}unterminated",
            "{{.x",
            "{{nosuchfunc .x}}",
            "{{range .items}}x{{end}}",
            "{{end}}",
            '{{default "only-one"}}',
        ):
            with self.subTest(body=body):
                self.assertEqual(render_text(body, {"x": "1"}), body)


class UnusedVariableTests(unittest.TestCase):
    def test_flags_only_unreferenced_undeclared_names(self) -> None:
        stored = {"name": "Bob", "extra": "", "unused": "z"}
        self.assertEqual(find_unused_variables(GREETING, {}, stored), {"unused"})

    def test_declared_names_count_as_used(self) -> None:
        stored = {"a": "1", "b": "2"}
        self.assertEqual(find_unused_variables(["plain text"], ["b"], stored), {"a"})

    def test_scans_every_body(self) -> None:
        bodies = ["{{.title}}", "Step for {{ default \"x\" .owner }}"]
        self.assertEqual(referenced_variables(bodies), {"title", "owner"})

    def test_text_outside_actions_is_ignored(self) -> None:
        self.assertEqual(referenced_variables(["see .name in docs"]), set())


class VariableDisplayTests(unittest.TestCase):
    def test_short_values_are_untouched(self) -> None:
        self.assertEqual(format_variable_value("short", expanded=False), ("short", False))

    def test_multiline_values_collapse_to_first_line(self) -> None:
        self.assertEqual(format_variable_value("line1\nline2", expanded=False), ("line1…", True))

    def test_long_values_clip_to_width(self) -> None:
        text, truncated = format_variable_value("x" * 100, expanded=False, max_cols=10)
        self.assertTrue(truncated)
        self.assertEqual(text, "x" * 9 + "…")

    def test_expanded_values_show_everything(self) -> None:
        self.assertEqual(format_variable_value("a\nb", expanded=True), ("a\nb", False))

    def test_slugify(self) -> None:
        self.assertEqual(slugify("  Hello, World -- 2 "), "hello-world-2")


if __name__ == "__main__":
    unittest.main()
