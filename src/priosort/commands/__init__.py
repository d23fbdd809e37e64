"""Subcommand modules for priosort.

Provides register_commands() which uses deferred imports to keep
``priosort --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``sort`` group and the standalone commands."""
    # --- Groups ---
    from priosort.commands.sort import sort

    cli.add_command(sort)

    # --- Standalone commands ---
    from priosort.commands.cycle import cycle
    from priosort.commands.show import show

    cli.add_command(cycle)
    cli.add_command(show)
