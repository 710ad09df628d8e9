"""Root CLI group for realmctl with global flags and command registration."""

from __future__ import annotations

import click

from realmctl import __version__
from realmctl.commands import register_commands
from realmctl.commands._base import RealmGroup
from realmctl.commands._context import AppContext
from realmctl.config.settings import RealmSettings


@click.group(cls=RealmGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="realmctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("--no-interact", is_flag=True, help="Non-interactive mode (no prompts).")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--address", default=None, help="Realm server address (overrides [client] address).")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    no_interact: bool,
    config_path: str | None,
    address: str | None,
) -> None:
    """realmctl — browse, create and delete realm chambers."""
    # Callers (tests, embedding hosts) may pre-seed ``obj`` with a transport.
    seed = ctx.obj if isinstance(ctx.obj, dict) else {}
    settings = RealmSettings.from_cli(
        config_path=config_path,
        address=address,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
        no_interact=no_interact,
    )
    ctx.obj = AppContext(settings, transport=seed.get("transport"))
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
