"""Standalone commands: list, get, view, create, and delete chambers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from realmctl.commands._base import RealmCommand

if TYPE_CHECKING:
    from realmctl.commands._context import AppContext


@click.command(
    "list",
    cls=RealmCommand,
    examples="""\
  realmctl list /
  realmctl list /team/web/
  realmctl --quiet list /team   # names only, one per line""",
)
@click.argument("path", default="/")
@click.pass_obj
def list_cmd(app: AppContext, path: str) -> None:
    """List the child chambers of PATH."""
    app.emit(app.run(lambda svc: svc.list_chambers(path)))


@click.command(
    "get",
    cls=RealmCommand,
    examples="""\
  realmctl get /team/web/
  realmctl -v get /team/web/    # include override ranges
  realmctl --json get /team/web/""",
)
@click.argument("path")
@click.pass_obj
def get_cmd(app: AppContext, path: str) -> None:
    """Show the rules of the chamber at PATH."""
    app.emit(app.run(lambda svc: svc.get_chamber(path)))


@click.command(
    "view",
    cls=RealmCommand,
    examples="""\
  realmctl view /
  realmctl view /team/web/
  realmctl --json view /team/web/""",
)
@click.argument("path", default="/")
@click.pass_obj
def view_cmd(app: AppContext, path: str) -> None:
    """Show breadcrumbs, child chambers, and rules of PATH."""
    app.emit(app.run(lambda svc: svc.view(path)))


@click.command(
    "create",
    cls=RealmCommand,
    examples="""\
  realmctl create / team
  realmctl create /team/ web
  realmctl create /team/ "a/b"   # one chamber named a/b""",
)
@click.argument("parent")
@click.argument("name")
@click.pass_obj
def create_cmd(app: AppContext, parent: str, name: str) -> None:
    """Create chamber NAME under PARENT with an empty rule set."""
    app.emit(app.run(lambda svc: svc.create_chamber(parent, name)))


@click.command(
    "delete",
    cls=RealmCommand,
    examples="""\
  realmctl delete /team/web/beta
  realmctl delete /team/a%2Fb    # the chamber named a/b
  realmctl --json delete /team/old""",
)
@click.argument("path")
@click.pass_obj
def delete_cmd(app: AppContext, path: str) -> None:
    """Delete the chamber at PATH."""
    app.emit(app.run(lambda svc: svc.delete_chamber(path)))
