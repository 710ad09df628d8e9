"""Interactive chamber browser.

Each step re-renders the current chamber. At the prompt:

    NAME     open a child chamber
    ..       go up one level
    /PATH    jump to an absolute path
    +NAME    create a child chamber here
    -NAME    delete a child chamber here
    r        refresh (invalidate and refetch)
    q        quit
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import click

from realmctl.commands._base import RealmCommand
from realmctl.domain.paths import encode
from realmctl.services.browse import ChamberBrowser

if TYPE_CHECKING:
    from realmctl.commands._context import AppContext
    from realmctl.services.browse import BrowseService
    from realmctl.services.result import ServiceResult

QUIT = "q"
REFRESH = "r"
UP = ".."
CREATE_PREFIX = "+"
DELETE_PREFIX = "-"


async def _step(browser: ChamberBrowser, command: str) -> ServiceResult:
    if command == UP:
        return await browser.up()
    if command == REFRESH:
        return await browser.refresh()
    if command.startswith(CREATE_PREFIX):
        created = await browser.create(command[len(CREATE_PREFIX) :])
        if not created.ok:
            return created
        return browser.snapshot()
    if command.startswith(DELETE_PREFIX):
        deleted = await browser.delete(command[len(DELETE_PREFIX) :])
        if not deleted.ok:
            return deleted
        return browser.snapshot()
    if command.startswith("/"):
        return await browser.navigate(command)
    return await browser.open(command)


def _show(app: AppContext, result: ServiceResult) -> None:
    click.echo(app.render(result), err=not result.ok)
    for warning in result.warnings:
        click.echo(f"WARNING: {warning}", err=True)


async def _read_command(browser: ChamberBrowser) -> str:
    """Prompt on a worker thread so pending loads keep running."""
    line = await asyncio.to_thread(
        click.prompt, encode(browser.path), prompt_suffix="> ", default="", show_default=False
    )
    return str(line).strip()


async def _browse_loop(app: AppContext, service: BrowseService, path: str) -> None:
    browser = ChamberBrowser(service)
    _show(app, await browser.navigate(path))
    while True:
        try:
            command = await _read_command(browser)
        except click.Abort:
            break
        if command == QUIT:
            break
        if not command:
            continue
        _show(app, await _step(browser, command))


@click.command(
    cls=RealmCommand,
    examples="""\
  realmctl browse
  realmctl browse /team/web/
  realmctl --address https://realm.internal:8443 browse""",
)
@click.argument("path", default="/")
@click.pass_obj
def browse(app: AppContext, path: str) -> None:
    """Browse chambers interactively, starting at PATH.

    With --no-interact or --json, shows PATH once and exits.
    """
    if not app.interactive:
        app.emit(app.run(lambda svc: svc.view(path)))
        return
    app.run(lambda svc: _browse_loop(app, svc, path))
