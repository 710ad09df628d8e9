"""Click base classes with an eager ``--examples`` flag.

``--help`` stays short; ``--examples`` prints ready-to-paste invocations
and exits without running the command (and without touching the network).
"""

from __future__ import annotations

from typing import Any

import click


def _examples_option(examples: str) -> click.Option:
    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show_examples,
        help="Show usage examples.",
    )


class _ExamplesMixin:
    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))


class RealmCommand(_ExamplesMixin, click.Command):
    """Command accepting ``examples=``."""


class RealmGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands are :class:`RealmCommand` by default."""

    command_class = RealmCommand
