"""Command: list a page's top-level blocks with their priority."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from priosort.commands._base import PrioCommand

if TYPE_CHECKING:
    from priosort.commands._context import AppContext


@click.command(
    cls=PrioCommand,
    examples="""\
  priosort show Groceries
  priosort -v show Groceries
  priosort --json show Groceries""",
)
@click.argument("page")
@click.pass_obj
def show(app: AppContext, page: str) -> None:
    """Show the top-level blocks of PAGE with their priority."""
    app.store.focus(page=page)
    app.emit(app.run(app.priority_service().show_page()))
