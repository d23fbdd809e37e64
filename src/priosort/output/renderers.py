"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from priosort.output.console import create_console, get_output, style_for_priority

if TYPE_CHECKING:
    from rich.console import Console

    from priosort.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    # Sorted and listed blocks: one id per line, in order
    order = result.data.get("order")
    if order is None:
        order = [item["id"] for item in result.data.get("items", [])]
    if order:
        return "\n".join(str(item_id) for item_id in order)

    if result.op == "cycle_priority" and "text" in result.data:
        return str(result.data["text"])

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="prio.ok")
    op = Text(f"  {result.op}", style="prio.op")
    console.print(label, op)


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="prio.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="prio.id")
    elif isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v)


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _priority_text(priority: str | None) -> Text:
    return Text(priority or "-", style=style_for_priority(priority))


def _items_table(items: list[dict[str, Any]], *, verbose: bool) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Priority", justify="center")
    table.add_column("Text")
    if verbose:
        table.add_column("ID", style="prio.id", no_wrap=True)

    for index, item in enumerate(items, start=1):
        first_line = str(item.get("text", "")).split("\n", 1)[0]
        row: list[Text | str] = [str(index), _priority_text(item.get("priority")), Text(first_line)]
        if verbose:
            row.append(str(item.get("id", "")))
        table.add_row(*row)
    return table


# ── Operation renderers ───────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_cycle(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    if d.get("queued"):
        console.print(Text(f"  queued {d.get('direction')} step for {d.get('id')}"))
        return
    console.print(Text("  "), _priority_text(d.get("priority")), Text(f"  {d.get('text', '')}"))
    if verbose:
        _field(console, "id", d.get("id"))
        _render_meta(console, result)


def _render_sort(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    moves = d.get("moves", [])
    console.print(Text(f"  scope: {d.get('scope')}  moves: {len(moves)}"))
    items = d.get("items", [])
    if items:
        console.print(_items_table(items, verbose=verbose))
    if verbose:
        for move in moves:
            console.print(
                f"    {move['subject']} {move['placement']} {move['anchor']}",
                style="dim",
            )


def _render_show(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    title = d.get("page", "")
    if d.get("journal"):
        title = f"{title} (journal)"
    console.print(Text(title, style="bold"))
    items = d.get("items", [])
    if not items:
        console.print("  (no blocks)", style="dim")
        return
    console.print(_items_table(items, verbose=verbose))


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="prio.error")
    op = Text(f"  {result.op}", style="prio.op")
    console.print(label, op, Text(" — "), Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "cycle_priority": _render_cycle,
    "sort_top_level": _render_sort,
    "sort_children": _render_sort,
    "show_page": _render_show,
}
