"""Document store contract and the in-memory implementation.

The priority operations never own blocks.  They read text and children
through a :class:`DocumentStore` and hand back "replace text" and
"move block" requests.  Every method is a coroutine so that hosts with
remote or threaded I/O can suspend while the operation is in flight.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from priosort.domain.ordering import Placement


class StoreError(Exception):
    """A read or write against the document store failed."""


class ItemNotFoundError(StoreError):
    """The requested block id is unknown to the store."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Block not found: {item_id}")
        self.item_id = item_id


@dataclass
class Item:
    """A block as seen by the priority operations."""

    id: str
    text: str = ""
    children: list[Item] = field(default_factory=list)


@dataclass(frozen=True)
class Page:
    """A page in the host document store."""

    name: str
    journal: bool = False


@runtime_checkable
class DocumentStore(Protocol):
    """Capabilities the priority operations need from the host."""

    async def get_current_item(self) -> Item | None: ...

    async def get_current_page(self) -> Page | None: ...

    async def get_item(self, item_id: str, *, include_children: bool = False) -> Item | None: ...

    async def get_top_level_items(self, page_name: str) -> list[Item]: ...

    async def replace_item_text(self, item_id: str, text: str) -> None: ...

    async def move_item(self, subject_id: str, anchor_id: str, placement: Placement) -> None: ...


@dataclass
class _Node:
    id: str
    text: str
    page: str
    parent: str | None
    children: list[str] = field(default_factory=list)


class MemoryStore:
    """Dict-backed :class:`DocumentStore`.

    Blocks are added with :meth:`add_page` from nested ``(text, children)``
    tuples or plain strings.  Ids are ``"<page>/<n>"`` in insertion order
    unless given explicitly via ``(id, text, children)`` triples.

    Usage::

        store = MemoryStore()
        ids = store.add_page("Groceries", ["[#B] milk", ("bread", ["rye"])])
        store.focus(page="Groceries", item_id=ids[0])
    """

    def __init__(self) -> None:
        self._nodes: dict[str, _Node] = {}
        self._pages: dict[str, Page] = {}
        self._roots: dict[str, list[str]] = {}
        self._counter = 0
        self._current_page: str | None = None
        self._current_item: str | None = None

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def add_page(self, name: str, blocks: list[object], *, journal: bool = False) -> list[str]:
        """Create page *name* and return the ids of its top-level blocks."""
        self._pages[name] = Page(name=name, journal=journal)
        self._roots[name] = [self._add_block(entry, name, None) for entry in blocks]
        return list(self._roots[name])

    def _add_block(self, entry: object, page: str, parent: str | None) -> str:
        item_id: str | None = None
        children: list[object] = []
        if isinstance(entry, str):
            text = entry
        elif isinstance(entry, tuple) and len(entry) == 3:
            item_id, text, children = entry
        elif isinstance(entry, tuple) and len(entry) == 2:
            text, children = entry
        else:
            msg = f"Unsupported block entry: {entry!r}"
            raise TypeError(msg)

        if item_id is None:
            self._counter += 1
            item_id = f"{page}/{self._counter}"
        node = _Node(id=item_id, text=text, page=page, parent=parent)
        self._nodes[item_id] = node
        node.children = [self._add_block(child, page, item_id) for child in children]
        return item_id

    def focus(self, *, page: str | None = None, item_id: str | None = None) -> None:
        """Set the current page and block (the host's editing cursor)."""
        self._current_page = page
        self._current_item = item_id

    # ------------------------------------------------------------------
    # DocumentStore
    # ------------------------------------------------------------------

    async def get_current_item(self) -> Item | None:
        if self._current_item is None:
            return None
        return await self.get_item(self._current_item)

    async def get_current_page(self) -> Page | None:
        if self._current_page is None:
            return None
        return self._pages.get(self._current_page)

    async def get_item(self, item_id: str, *, include_children: bool = False) -> Item | None:
        node = self._nodes.get(item_id)
        if node is None:
            return None
        return self._to_item(node, include_children=include_children)

    async def get_top_level_items(self, page_name: str) -> list[Item]:
        return [self._to_item(self._nodes[i], include_children=False) for i in self._roots.get(page_name, [])]

    async def replace_item_text(self, item_id: str, text: str) -> None:
        self._require(item_id).text = text

    async def move_item(self, subject_id: str, anchor_id: str, placement: Placement) -> None:
        subject = self._require(subject_id)
        anchor = self._require(anchor_id)
        if subject_id == anchor_id:
            return

        self._siblings(subject).remove(subject_id)
        subject.parent = anchor.parent
        subject.page = anchor.page
        siblings = self._siblings(anchor)
        position = siblings.index(anchor_id)
        if placement is Placement.AFTER:
            position += 1
        siblings.insert(position, subject_id)

    # ------------------------------------------------------------------
    # Inspection helpers
    # ------------------------------------------------------------------

    def texts(self, page_name: str) -> list[str]:
        """Top-level block texts of *page_name*, in order."""
        return [self._nodes[i].text for i in self._roots.get(page_name, [])]

    def child_texts(self, item_id: str) -> list[str]:
        """Child block texts of *item_id*, in order."""
        return [self._nodes[i].text for i in self._require(item_id).children]

    def text_of(self, item_id: str) -> str:
        return self._require(item_id).text

    def _require(self, item_id: str) -> _Node:
        node = self._nodes.get(item_id)
        if node is None:
            raise ItemNotFoundError(item_id)
        return node

    def _siblings(self, node: _Node) -> list[str]:
        if node.parent is None:
            return self._roots[node.page]
        return self._nodes[node.parent].children

    def _to_item(self, node: _Node, *, include_children: bool) -> Item:
        children: list[Item] = []
        if include_children:
            children = [self._to_item(self._nodes[c], include_children=True) for c in node.children]
        return Item(id=node.id, text=node.text, children=children)
