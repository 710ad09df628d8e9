"""Rich Console factory and theme for realmctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

REALM_THEME = Theme(
    {
        "realm.ok": "bold green",
        "realm.error": "bold red",
        "realm.warning": "bold yellow",
        "realm.op": "bold cyan",
        "realm.key": "dim",
        "realm.path": "bold blue",
        "realm.crumb": "cyan",
        "realm.chamber": "bold",
        "realm.rule": "bold",
        "realm.type.boolean": "green",
        "realm.type.number": "magenta",
        "realm.type.string": "yellow",
    }
)

_TYPE_STYLES: dict[str, str] = {
    "boolean": "realm.type.boolean",
    "bool": "realm.type.boolean",
    "int": "realm.type.number",
    "number": "realm.type.number",
    "float64": "realm.type.number",
    "string": "realm.type.string",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=REALM_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_rule_type(rule_type: str) -> str:
    """Return the Rich style name for a rule type."""
    return _TYPE_STYLES.get(rule_type, "")
