"""Rich Console factory and theme for priosort output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

PRIO_THEME = Theme(
    {
        "prio.ok": "bold green",
        "prio.error": "bold red",
        "prio.warning": "bold yellow",
        "prio.op": "bold cyan",
        "prio.key": "dim",
        "prio.id": "bold blue",
        "prio.A": "bold red",
        "prio.B": "yellow",
        "prio.C": "cyan",
        "prio.unset": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=PRIO_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_priority(priority: str | None) -> str:
    """Return the Rich style name for a priority letter (or unset)."""
    return f"prio.{priority}" if priority in ("A", "B", "C") else "prio.unset"
