"""Output mode dispatch for ServiceResults.

The CLI renders results for humans (Rich), for scripts (``--quiet``), or
for machines (``--json``). This module picks the mode; the per-operation
layouts live in :mod:`realmctl.output.renderers`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from realmctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from realmctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output flags copied from the CLI settings."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(
    result: ServiceResult,
    *,
    settings: OutputSettings | None = None,
    json_output: bool = False,
) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        settings: Output flags. When given, *json_output* is ignored.
        json_output: Shorthand for ``OutputSettings(json_output=True)``.
    """
    if settings is None:
        settings = OutputSettings(json_output=json_output)
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
