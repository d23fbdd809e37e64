"""Command: cycle a block's priority one step."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from priosort.commands._base import PrioCommand

if TYPE_CHECKING:
    from priosort.commands._context import AppContext


@click.command(
    cls=PrioCommand,
    examples="""\
  priosort cycle Groceries 2
  priosort cycle Groceries 2.1 --back
  priosort cycle "work/q3" 6571c9a4-0000-4000-8000-000000000001
  priosort --json cycle Groceries 1""",
)
@click.argument("page")
@click.argument("block")
@click.option("--back", is_flag=True, help="Step backward (C -> B -> A) instead of forward.")
@click.pass_obj
def cycle(app: AppContext, page: str, block: str, back: bool) -> None:
    """Cycle the priority of BLOCK on PAGE (A -> B -> C -> A).

    BLOCK is a block id or a 1-based position path such as 2 or 2.1.
    A block without a priority becomes [#A] (or [#B] with --back).
    """
    from priosort.domain.priority import Direction

    direction = Direction.BACKWARD if back else Direction.FORWARD
    app.store.focus(page=page, item_id=block)
    app.emit(app.run(app.priority_service().cycle_priority(direction)))
