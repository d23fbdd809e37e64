"""File-backed document store over a Logseq-style graph directory.

Layout::

    <graph>/pages/Groceries.md
    <graph>/pages/work___q3.md       (page "work/q3")
    <graph>/journals/2026_10_19.md

INVARIANT: Files are truth.  Every replace or move rewrites the page
file before the coroutine returns; nothing is cached across store
instances.

Block ids are the ``id::`` property when present.  Other blocks get a
deterministic uuid5 of their page and position at load time, stable for
the lifetime of the store.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from priosort.config.models import GraphConfig
from priosort.domain.ordering import Placement
from priosort.domain.outline import (
    OutlineBlock,
    OutlineDocument,
    format_path,
    iter_blocks,
    parse_outline,
    parse_path,
    render_outline,
)
from priosort.infrastructure.store import Item, ItemNotFoundError, Page, StoreError

logger = logging.getLogger(__name__)

_ID_NAMESPACE = uuid.UUID("2f0a5c1e-8d4b-4f7a-9c3e-5b6d7e8f9a0b")


def page_name_for(path: Path) -> str:
    """Map a page file to its page name (``a___b.md`` -> ``a/b``)."""
    return path.stem.replace("___", "/")


def page_filename(name: str) -> str:
    """Map a page name to its file name (``a/b`` -> ``a___b.md``)."""
    return f"{name.replace('/', '___')}.md"


@dataclass
class _LoadedPage:
    page: Page
    path: Path
    doc: OutlineDocument
    # id -> (block, parent block or None for top level)
    blocks: dict[str, tuple[OutlineBlock, OutlineBlock | None]] = field(default_factory=dict)
    ids: dict[int, str] = field(default_factory=dict)

    def id_of(self, block: OutlineBlock) -> str:
        return self.ids[id(block)]

    def siblings(self, parent: OutlineBlock | None) -> list[OutlineBlock]:
        return self.doc.blocks if parent is None else parent.children


class GraphStore:
    """:class:`~priosort.infrastructure.store.DocumentStore` over markdown page files.

    Usage::

        store = GraphStore(Path("~/notes"), GraphConfig())
        store.focus(page="Groceries", item_id="2.1")
        item = await store.get_current_item()
    """

    def __init__(self, root: Path, config: GraphConfig | None = None) -> None:
        self.root = root
        self._config = config or GraphConfig()
        self._pages: dict[str, _LoadedPage] = {}
        self._owner: dict[str, str] = {}
        self._load_lock = asyncio.Lock()
        self._current_page: str | None = None
        self._current_ref: str | None = None

    @property
    def pages_dir(self) -> Path:
        return self.root / self._config.pages_dir

    @property
    def journals_dir(self) -> Path:
        return self.root / self._config.journals_dir

    def focus(self, *, page: str | None = None, item_id: str | None = None) -> None:
        """Set the current page and block.

        *item_id* may be a block id or a 1-based position path such as
        ``"2.1"`` resolved against *page*.
        """
        self._current_page = page
        self._current_ref = item_id

    # ------------------------------------------------------------------
    # Page discovery and loading
    # ------------------------------------------------------------------

    def find_page_file(self, name: str) -> tuple[Path, bool] | None:
        """Locate the file for page *name* (case-insensitive).

        Returns ``(path, is_journal_dir)`` or None.
        """
        wanted = name.lower()
        for directory, journal in ((self.pages_dir, False), (self.journals_dir, True)):
            if not directory.is_dir():
                continue
            for path in sorted(directory.glob("*.md")):
                if page_name_for(path).lower() == wanted:
                    return path, journal
        return None

    def list_pages(self) -> list[Page]:
        """All pages in the graph, regular pages first."""
        pages: list[Page] = []
        for directory, journal in ((self.pages_dir, False), (self.journals_dir, True)):
            if directory.is_dir():
                for path in sorted(directory.glob("*.md")):
                    pages.append(self._make_page(page_name_for(path), journal))
        return pages

    def _make_page(self, name: str, in_journals: bool) -> Page:
        journal_names = {n.lower() for n in self._config.journal_page_names}
        return Page(name=name, journal=in_journals or name.lower() in journal_names)

    async def _load(self, name: str) -> _LoadedPage | None:
        key = name.lower()
        if key in self._pages:
            return self._pages[key]

        async with self._load_lock:
            if key in self._pages:
                return self._pages[key]
            found = self.find_page_file(name)
            if found is None:
                return None
            path, in_journals = found
            try:
                content = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise StoreError(f"Cannot read page {name!r}: {exc}") from exc

            doc = parse_outline(content, indent_width=self._config.indent_width)
            loaded = _LoadedPage(page=self._make_page(page_name_for(path), in_journals), path=path, doc=doc)
            self._index(loaded)
            self._pages[key] = loaded
            logger.debug("Loaded page %s (%d blocks)", loaded.page.name, len(loaded.blocks))
            return loaded

    async def _load_all(self) -> None:
        for page in self.list_pages():
            await self._load(page.name)

    def _index(self, loaded: _LoadedPage) -> None:
        parents: dict[int, OutlineBlock | None] = {id(b): None for b in loaded.doc.blocks}
        for block, path in iter_blocks(loaded.doc):
            for child in block.children:
                parents[id(child)] = block
            block_id = block.properties.get("id") or str(
                uuid.uuid5(_ID_NAMESPACE, f"{loaded.page.name}:{format_path(path)}")
            )
            loaded.ids[id(block)] = block_id
            loaded.blocks[block_id] = (block, parents[id(block)])
            self._owner[block_id] = loaded.page.name.lower()

    async def _locate(self, item_id: str) -> tuple[_LoadedPage, OutlineBlock, OutlineBlock | None]:
        if item_id not in self._owner:
            await self._load_all()
        owner = self._owner.get(item_id)
        if owner is None:
            raise ItemNotFoundError(item_id)
        loaded = self._pages[owner]
        block, parent = loaded.blocks[item_id]
        return loaded, block, parent

    async def _save(self, loaded: _LoadedPage) -> None:
        content = render_outline(loaded.doc)
        try:
            await asyncio.to_thread(loaded.path.write_text, content, encoding="utf-8")
        except OSError as exc:
            raise StoreError(f"Cannot write page {loaded.page.name!r}: {exc}") from exc
        logger.debug("Saved page %s", loaded.page.name)

    def _to_item(self, loaded: _LoadedPage, block: OutlineBlock, *, include_children: bool) -> Item:
        children: list[Item] = []
        if include_children:
            children = [self._to_item(loaded, c, include_children=True) for c in block.children]
        return Item(id=loaded.id_of(block), text=block.text, children=children)

    async def resolve(self, page_name: str, ref: str) -> str | None:
        """Resolve a block id or position path on *page_name* to a block id."""
        loaded = await self._load(page_name)
        if loaded is None:
            return None
        path = parse_path(ref)
        if path is None:
            return ref if ref in loaded.blocks else None

        blocks = loaded.doc.blocks
        block: OutlineBlock | None = None
        for index in path:
            if index > len(blocks):
                return None
            block = blocks[index - 1]
            blocks = block.children
        return None if block is None else loaded.id_of(block)

    # ------------------------------------------------------------------
    # DocumentStore
    # ------------------------------------------------------------------

    async def get_current_page(self) -> Page | None:
        if self._current_page is None:
            return None
        loaded = await self._load(self._current_page)
        return None if loaded is None else loaded.page

    async def get_current_item(self) -> Item | None:
        if self._current_ref is None:
            return None
        item_id: str | None = self._current_ref
        if self._current_page is not None:
            item_id = await self.resolve(self._current_page, self._current_ref)
        if item_id is None:
            return None
        return await self.get_item(item_id)

    async def get_item(self, item_id: str, *, include_children: bool = False) -> Item | None:
        try:
            loaded, block, _parent = await self._locate(item_id)
        except ItemNotFoundError:
            return None
        return self._to_item(loaded, block, include_children=include_children)

    async def get_top_level_items(self, page_name: str) -> list[Item]:
        loaded = await self._load(page_name)
        if loaded is None:
            return []
        return [self._to_item(loaded, b, include_children=False) for b in loaded.doc.blocks]

    async def replace_item_text(self, item_id: str, text: str) -> None:
        loaded, block, _parent = await self._locate(item_id)
        block.text = text
        await self._save(loaded)

    async def move_item(self, subject_id: str, anchor_id: str, placement: Placement) -> None:
        source, subject, subject_parent = await self._locate(subject_id)
        target, _anchor, anchor_parent = await self._locate(anchor_id)
        if subject_id == anchor_id:
            return

        source.siblings(subject_parent).remove(subject)
        siblings = target.siblings(anchor_parent)
        position = next(i for i, b in enumerate(siblings) if target.id_of(b) == anchor_id)
        if placement is Placement.AFTER:
            position += 1
        siblings.insert(position, subject)

        if source is not target:
            self._reindex_moved(source, target, subject)
        target.blocks[subject_id] = (subject, anchor_parent)

        await self._save(target)
        if source is not target:
            await self._save(source)

    def _reindex_moved(self, source: _LoadedPage, target: _LoadedPage, subject: OutlineBlock) -> None:
        stack = [subject]
        while stack:
            block = stack.pop()
            block_id = source.ids.pop(id(block))
            entry = source.blocks.pop(block_id)
            target.ids[id(block)] = block_id
            target.blocks[block_id] = entry
            self._owner[block_id] = target.page.name.lower()
            stack.extend(block.children)
