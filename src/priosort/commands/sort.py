"""Command group: sort blocks by priority."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from priosort.commands._base import PrioGroup

if TYPE_CHECKING:
    from priosort.commands._context import AppContext


@click.group(
    cls=PrioGroup,
    examples="""\
  priosort sort page Groceries
  priosort sort children Groceries 2
  priosort --json sort page "work/q3" """,
)
def sort() -> None:
    """Sort sibling blocks by priority ([#A] first, unset last)."""


@sort.command(
    examples="""\
  priosort sort page Groceries
  priosort -q sort page Groceries""",
)
@click.argument("page")
@click.pass_obj
def page(app: AppContext, page: str) -> None:
    """Sort the top-level blocks of PAGE. Journal pages are refused."""
    app.store.focus(page=page)
    app.emit(app.run(app.priority_service().sort_top_level()))


@sort.command(
    examples="""\
  priosort sort children Groceries 2
  priosort sort children Groceries 6571c9a4-0000-4000-8000-000000000001""",
)
@click.argument("page")
@click.argument("block")
@click.pass_obj
def children(app: AppContext, page: str, block: str) -> None:
    """Sort the direct children of BLOCK on PAGE.

    BLOCK is a block id or a 1-based position path such as 2 or 2.1.
    Grandchildren keep their order.
    """
    app.store.focus(page=page, item_id=block)
    app.emit(app.run(app.priority_service().sort_children()))
