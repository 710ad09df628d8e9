"""Tests for Rich Console factory and theme."""

from io import StringIO

from realmctl.output.console import REALM_THEME, create_console, get_output, style_for_rule_type


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        assert isinstance(create_console().file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[realm.path]/team/web[/realm.path]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "/team/web" in output

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80

    def test_default_width(self) -> None:
        assert create_console().width == 120


class TestTheme:
    def test_rule_type_styles_exist(self) -> None:
        for rule_type in ("bool", "boolean", "int", "number", "string"):
            assert style_for_rule_type(rule_type) in REALM_THEME.styles

    def test_unknown_type_has_no_style(self) -> None:
        assert style_for_rule_type("json") == ""
