"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from realmctl.output.console import create_console, get_output, style_for_rule_type

if TYPE_CHECKING:
    from rich.console import Console

    from realmctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op in ("list_chambers", "view_chamber"):
        return "\n".join(result.data.get("children", []))
    if result.op == "get_chamber":
        return "\n".join(result.data.get("rules", {}))
    if result.op in ("create_chamber", "delete_chamber"):
        return str(result.data.get("path", ""))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK status line."""
    label = Text("OK", style="realm.ok")
    op = Text(f"  {result.op}", style="realm.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="realm.key")
    style = "realm.path" if key in ("path", "parent") else ""
    console.print(k, Text(str(value), style=style), end="")
    console.print()


def _format_value(value: Any) -> str:
    """Rule values as the chamber service writes them (``true``, not ``True``)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _render_breadcrumbs(console: Console, crumbs: list[dict[str, Any]]) -> None:
    trail = Text()
    for index, crumb in enumerate(crumbs):
        if index:
            trail.append(" / ", style="dim")
        style = "realm.path" if index == len(crumbs) - 1 else "realm.crumb"
        trail.append(str(crumb.get("label", "")), style=style)
    console.print(trail)


def _render_children(console: Console, children: list[str], *, up: str | None) -> None:
    if up is not None:
        console.print(Text("  ..", style="realm.crumb"))
    if not children:
        console.print(Text("  (no child chambers)", style="dim"))
        return
    for name in children:
        console.print(Text(f"  {name}/", style="realm.chamber"))


def _rules_table(rules: dict[str, dict[str, Any]], *, verbose: bool = False) -> Table:
    """Build a Rich Table for a chamber's rules."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Rule", style="realm.rule", no_wrap=True)
    table.add_column("Type")
    table.add_column("Value")
    table.add_column("Overrides", justify="right")
    if verbose:
        table.add_column("Ranges", style="dim")

    for name, rule in rules.items():
        rule_type = str(rule.get("type", ""))
        overrides = rule.get("overrides") or []
        row: list[Any] = [
            name,
            Text(rule_type, style=style_for_rule_type(rule_type)),
            _format_value(rule.get("value")),
            str(len(overrides)),
        ]
        if verbose:
            row.append(
                ", ".join(
                    f"{o.get('minimumVersion')}..{o.get('maximumVersion')}="
                    f"{_format_value(o.get('value'))}"
                    for o in overrides
                )
            )
        table.add_row(*row)
    return table


def _render_rules(console: Console, rules: dict[str, Any], *, verbose: bool = False) -> None:
    if not rules:
        console.print(Text("  no rules yet", style="dim"))
        return
    console.print(_rules_table(rules, verbose=verbose))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="realm.error")
    op = Text(f"  {result.op}", style="realm.op")
    sep = Text(" — ")
    console.print(label, op, sep, msg)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}")


# ── Chamber renderers ─────────────────────────────────────────────────


def _render_listing(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list_chambers: the path followed by its children."""
    d = result.data
    console.print(Text(str(d.get("path", "/")), style="realm.path"))
    _render_children(console, d.get("children", []), up=None)


def _render_detail(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render get_chamber: the path followed by its rules table."""
    d = result.data
    console.print(Text(str(d.get("path", "/")), style="realm.path"))
    _render_rules(console, d.get("rules", {}), verbose=verbose)
    console.print(f"\n{d.get('count', 0)} rules")


def _render_view(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render view_chamber: breadcrumbs, children, then rules."""
    d = result.data
    _render_breadcrumbs(console, d.get("breadcrumbs", []))
    console.print()
    console.print(Text("Chambers", style="bold"))
    _render_children(console, d.get("children", []), up=d.get("parent"))
    console.print()
    console.print(Text("Rules", style="bold"))
    _render_rules(console, d.get("rules", {}), verbose=verbose)
    if d.get("loading"):
        console.print(Text("\n  loading…", style="dim"))
    if verbose:
        _render_meta(console, result)


def _render_created(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create_chamber and delete_chamber results."""
    _status_line(console, result)
    for key in ("name", "path", "parent", "status_code"):
        if key in result.data:
            _field(console, key, result.data[key])
    siblings = result.data.get("siblings")
    if verbose and siblings is not None:
        _field(console, "siblings", ", ".join(siblings))


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "list_chambers": _render_listing,
    "get_chamber": _render_detail,
    "view_chamber": _render_view,
    "create_chamber": _render_created,
    "delete_chamber": _render_created,
}
