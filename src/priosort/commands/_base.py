"""Click classes that take an ``examples=`` keyword.

``--help`` shows the docstring only; ``--examples`` prints sample
invocations for the command and exits.  Groups hand the same class
down to their subcommands.
"""

from __future__ import annotations

from typing import Any

import click


class _ExamplesMixin:
    examples: str | None = None
    params: list[click.Parameter]

    def _attach_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return
        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=self._print_examples,
                help="Show usage examples and exit.",
            )
        )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n\n{self.examples}")
        ctx.exit(0)


class PrioCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._attach_examples(examples)


class PrioGroup(_ExamplesMixin, click.Group):
    """Group whose ``@group.command()`` subcommands are :class:`PrioCommand`."""

    command_class = PrioCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._attach_examples(examples)
