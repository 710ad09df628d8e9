"""Subcommand modules for realmctl.

Provides register_commands() which uses deferred imports to keep
``realmctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from realmctl.commands.browse import browse
    from realmctl.commands.chambers import (
        create_cmd,
        delete_cmd,
        get_cmd,
        list_cmd,
        view_cmd,
    )

    cli.add_command(list_cmd)
    cli.add_command(get_cmd)
    cli.add_command(view_cmd)
    cli.add_command(create_cmd)
    cli.add_command(delete_cmd)
    cli.add_command(browse)
