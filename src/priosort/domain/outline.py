"""Markdown outline parsing and rendering.

Pages in a graph are bullet outlines in the Logseq file format::

    title:: Groceries
    - [#B] milk
      id:: 6571c9a4-0000-4000-8000-000000000001
    - bread
    	- [#A] sourdough

Lines before the first bullet are page preamble and kept verbatim.  A
block starts with ``- `` after its indentation (tabs, or spaces counted
in units of ``indent_width``).  Non-bullet lines that follow belong to
the block: ``key:: value`` lines directly under the bullet are block
properties, anything else is a continuation line of the block text.
Continuation lines sit two spaces past the bullet indent; only that
indent is removed, so deeper indentation (code fences, nested prose)
survives a rewrite.  Blank lines inside a block are kept, blank lines
between blocks are not.

Pure parsing/rendering only; file I/O lives in
:mod:`priosort.infrastructure.graph`.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

_BULLET_RE = re.compile(r"^(?P<indent>[ \t]*)-(?: (?P<text>.*))?$")
_PROPERTY_RE = re.compile(r"^(?P<key>[A-Za-z0-9_-]+)::[ \t]*(?P<value>.*)$")
CONTINUATION_INDENT = "  "


@dataclass
class OutlineBlock:
    """One bullet with its text, properties and child bullets."""

    text: str = ""
    properties: dict[str, str] = field(default_factory=dict)
    children: list[OutlineBlock] = field(default_factory=list)


@dataclass
class OutlineDocument:
    """A parsed page file."""

    blocks: list[OutlineBlock] = field(default_factory=list)
    preamble: list[str] = field(default_factory=list)
    indent: str = "\t"


def _indent_level(indent: str, indent_width: int) -> int:
    tabs = indent.count("\t")
    spaces = len(indent) - tabs
    return tabs + spaces // max(indent_width, 1)


def _continuation(line: str, bullet_indent: str) -> str:
    """Strip the block's own continuation indent from *line*."""
    own = bullet_indent + CONTINUATION_INDENT
    if line.startswith(own):
        return line[len(own) :]
    return line.lstrip()


def parse_outline(content: str, *, indent_width: int = 2) -> OutlineDocument:
    """Parse page *content* into an :class:`OutlineDocument`.

    Indentation that skips levels attaches the block to the nearest
    shallower block.
    """
    doc = OutlineDocument()
    # (level, block) pairs from the root down to the last parsed block.
    stack: list[tuple[int, OutlineBlock]] = []
    text_lines: dict[int, list[str]] = {}
    bullet_indents: dict[int, str] = {}
    uses_spaces = False

    for line in content.splitlines():
        bullet = _BULLET_RE.match(line)
        if bullet:
            indent = bullet.group("indent")
            if " " in indent:
                uses_spaces = True
            level = _indent_level(indent, indent_width)
            block = OutlineBlock()
            text_lines[id(block)] = [bullet.group("text") or ""]
            bullet_indents[id(block)] = indent

            while stack and stack[-1][0] >= level:
                stack.pop()
            if stack:
                stack[-1][1].children.append(block)
            else:
                doc.blocks.append(block)
            stack.append((level, block))
            continue

        if not stack:
            doc.preamble.append(line)
            continue

        current = stack[-1][1]
        lines = text_lines[id(current)]
        if not line.strip():
            lines.append("")
            continue

        prop = _PROPERTY_RE.match(line.strip()) if len(lines) == 1 else None
        if prop:
            current.properties[prop.group("key")] = prop.group("value")
        else:
            lines.append(_continuation(line, bullet_indents[id(current)]))

    for block, _path in _walk(doc.blocks, ()):
        lines = text_lines[id(block)]
        while len(lines) > 1 and not lines[-1]:
            lines.pop()
        block.text = "\n".join(lines)

    if uses_spaces:
        doc.indent = " " * indent_width
    return doc


def _render_block(block: OutlineBlock, depth: int, indent: str, out: list[str]) -> None:
    prefix = indent * depth
    first, *rest = block.text.split("\n")
    out.append(f"{prefix}- {first}" if first else f"{prefix}-")
    for key, value in block.properties.items():
        out.append(f"{prefix}{CONTINUATION_INDENT}{key}:: {value}")
    for line in rest:
        out.append(f"{prefix}{CONTINUATION_INDENT}{line}" if line else "")
    for child in block.children:
        _render_block(child, depth + 1, indent, out)


def render_outline(doc: OutlineDocument) -> str:
    """Render *doc* back to page file content."""
    out: list[str] = list(doc.preamble)
    for block in doc.blocks:
        _render_block(block, 0, doc.indent, out)
    if not out:
        return ""
    return "\n".join(out) + "\n"


def _walk(
    blocks: list[OutlineBlock], path: tuple[int, ...]
) -> Iterator[tuple[OutlineBlock, tuple[int, ...]]]:
    for index, block in enumerate(blocks, start=1):
        block_path = (*path, index)
        yield block, block_path
        yield from _walk(block.children, block_path)


def iter_blocks(doc: OutlineDocument) -> Iterator[tuple[OutlineBlock, tuple[int, ...]]]:
    """Yield every block depth-first with its 1-based position path.

    Examples:
        >>> doc = parse_outline("- a\\n\\t- b\\n- c\\n")
        >>> [(b.text, p) for b, p in iter_blocks(doc)]
        [('a', (1,)), ('b', (1, 1)), ('c', (2,))]
    """
    yield from _walk(doc.blocks, ())


def format_path(path: tuple[int, ...]) -> str:
    """Format a position path as ``"2.1"``."""
    return ".".join(str(part) for part in path)


def parse_path(value: str) -> tuple[int, ...] | None:
    """Parse ``"2.1"`` into ``(2, 1)``; None if *value* is not a position path."""
    parts = value.split(".")
    if not parts or not all(part.isdigit() and int(part) > 0 for part in parts):
        return None
    return tuple(int(part) for part in parts)
