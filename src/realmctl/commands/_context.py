"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. Owns logging setup, runs service coroutines inside a
short-lived :class:`RealmSession`, and centralizes result emission
(stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

import click

from realmctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    import httpx

    from realmctl.config.settings import RealmSettings
    from realmctl.services.browse import BrowseService
    from realmctl.services.result import ServiceResult

T = TypeVar("T")


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    No session is opened until a command calls :meth:`run`, so ``--help``
    and ``--examples`` never touch the network.
    """

    def __init__(
        self,
        settings: RealmSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self._transport = transport

        from realmctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            quiet=settings.quiet,
            log_json=settings.log_json,
        )

    @property
    def interactive(self) -> bool:
        """Prompts fire unless ``--no-interact`` or ``--json`` is set."""
        return not self.settings.no_interact and not self.settings.json_output

    def run(self, operation: Callable[[BrowseService], Awaitable[T]]) -> T:
        """Run *operation* against a fresh session and event loop."""
        from realmctl.infrastructure.client import parse_address
        from realmctl.infrastructure.session import RealmSession
        from realmctl.services.browse import BrowseService

        try:
            parse_address(self.settings.client.address)
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc

        async def _main() -> T:
            session = RealmSession.from_settings(self.settings, transport=self._transport)
            async with session:
                service = BrowseService(
                    session,
                    root_label=self.settings.browse.root_label,
                    show_self_marker=self.settings.browse.show_self_marker,
                )
                return await operation(service)

        return asyncio.run(_main())

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def render(self, result: ServiceResult) -> str:
        return format_result(result, settings=self.output_settings)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        output = self.render(result)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not self.settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
