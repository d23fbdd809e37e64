"""``priosort`` entry point: global flags, settings and subcommands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from priosort import __version__
from priosort.commands import register_commands
from priosort.commands._context import AppContext
from priosort.config.models import PluginsConfig
from priosort.config.settings import PrioSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="priosort")
@click.option(
    "-g",
    "--graph",
    "graph_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Graph directory holding pages/ and journals/ (default: discovered).",
)
@click.option("-c", "--config", "config_path", default=None, help="Use this priosort.toml.")
@click.option("--json", "json_output", is_flag=True, help="Print the result as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print ids or text only.")
@click.option("-v", "--verbose", is_flag=True, help="Show ids, moves and debug logs.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("--no-plugins", is_flag=True, help="Skip plugin discovery for this run.")
@click.pass_context
def cli(
    ctx: click.Context,
    graph_root: Path | None,
    config_path: str | None,
    no_plugins: bool,
    **flags: Any,
) -> None:
    """Cycle and sort outline blocks by [#A]/[#B]/[#C] priority.

    Blocks are addressed by page name plus a block id or a 1-based
    position path such as 2 or 2.1.
    """
    if no_plugins:
        flags["plugins"] = PluginsConfig(enabled=False)
    settings = PrioSettings.from_cli(config_path=config_path, graph_root=graph_root, **flags)
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
