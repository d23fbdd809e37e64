"""Tests for GraphStore — markdown page files as a document store."""

from __future__ import annotations

from pathlib import Path

import pytest

from priosort.config.models import GraphConfig
from priosort.domain.ordering import Placement
from priosort.infrastructure.graph import GraphStore, page_filename, page_name_for
from priosort.infrastructure.store import DocumentStore, ItemNotFoundError, StoreError
from tests.conftest import read_page, write_page

KNOWN_ID = "00000000-0000-4000-8000-000000000003"


class TestPageNames:
    def test_namespace_mapping(self) -> None:
        assert page_name_for(Path("work___q3.md")) == "work/q3"
        assert page_filename("work/q3") == "work___q3.md"


class TestDiscovery:
    def test_find_page_case_insensitive(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        found = store.find_page_file("groceries")
        assert found is not None
        assert found[0].name == "Groceries.md"
        assert found[1] is False

    def test_list_pages(self, graph_root: Path) -> None:
        pages = GraphStore(graph_root).list_pages()
        assert [(p.name, p.journal) for p in pages] == [
            ("Groceries", False),
            ("2026_10_19", True),
        ]

    def test_journal_page_names(self, graph_root: Path) -> None:
        write_page(graph_root, "Journal", "- x\n")
        pages = {p.name: p for p in GraphStore(graph_root).list_pages()}
        assert pages["Journal"].journal is True

    def test_missing_dirs(self, tmp_path: Path) -> None:
        store = GraphStore(tmp_path)
        assert store.list_pages() == []
        assert store.find_page_file("x") is None


@pytest.mark.asyncio
class TestGraphStore:
    async def test_satisfies_protocol(self, graph_root: Path) -> None:
        assert isinstance(GraphStore(graph_root), DocumentStore)

    async def test_top_level_items(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        items = await store.get_top_level_items("Groceries")
        assert [i.text for i in items] == ["[#A] one", "two", "[#C] three"]
        assert items[2].id == KNOWN_ID

    async def test_generated_ids_are_stable(self, graph_root: Path) -> None:
        first = await GraphStore(graph_root).get_top_level_items("Groceries")
        second = await GraphStore(graph_root).get_top_level_items("Groceries")
        assert [i.id for i in first] == [i.id for i in second]
        assert len({i.id for i in first}) == 3

    async def test_focus_by_path(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        store.focus(page="Groceries", item_id="2.3")
        item = await store.get_current_item()
        assert item is not None
        assert item.text == "[#A] sourdough"

    async def test_focus_by_id(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        store.focus(page="Groceries", item_id=KNOWN_ID)
        item = await store.get_current_item()
        assert item is not None and item.text == "[#C] three"

    async def test_focus_missing(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        store.focus(page="Groceries", item_id="9")
        assert await store.get_current_item() is None
        store.focus(page="Nope", item_id="1")
        assert await store.get_current_item() is None
        assert await store.get_current_page() is None

    async def test_current_page_journal(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        store.focus(page="2026_10_19")
        page = await store.get_current_page()
        assert page is not None and page.journal

    async def test_children(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        item_id = await store.resolve("Groceries", "2")
        assert item_id is not None
        full = await store.get_item(item_id, include_children=True)
        assert full is not None
        assert [c.text for c in full.children] == ["[#C] rye", "bagels", "[#A] sourdough"]

    async def test_get_item_unknown(self, graph_root: Path) -> None:
        assert await GraphStore(graph_root).get_item("nope") is None

    async def test_replace_writes_file(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        await store.replace_item_text(KNOWN_ID, "[#A] three")
        content = read_page(graph_root, "Groceries")
        assert "- [#A] three\n  id:: " + KNOWN_ID in content
        assert content.startswith("title:: Groceries\n")

    async def test_replace_unknown(self, graph_root: Path) -> None:
        with pytest.raises(ItemNotFoundError):
            await GraphStore(graph_root).replace_item_text("nope", "x")

    async def test_move_writes_file(self, graph_root: Path) -> None:
        store = GraphStore(graph_root)
        items = await store.get_top_level_items("Groceries")
        await store.move_item(items[1].id, items[2].id, Placement.AFTER)
        reloaded = await GraphStore(graph_root).get_top_level_items("Groceries")
        assert [i.text for i in reloaded] == ["[#A] one", "[#C] three", "two"]
        # children travel with their parent
        assert "- two\n\t- [#C] rye\n\t- bagels\n\t- [#A] sourdough\n" in read_page(
            graph_root, "Groceries"
        )

    async def test_move_across_pages(self, graph_root: Path) -> None:
        write_page(graph_root, "Other", "- elsewhere\n")
        store = GraphStore(graph_root)
        (other,) = await store.get_top_level_items("Other")
        await store.move_item(KNOWN_ID, other.id, Placement.BEFORE)
        assert [i.text for i in await store.get_top_level_items("Other")] == [
            "[#C] three",
            "elsewhere",
        ]
        assert "three" not in read_page(graph_root, "Groceries")
        await store.replace_item_text(KNOWN_ID, "[#A] three")
        assert "[#A] three" in read_page(graph_root, "Other")

    async def test_space_indented_graph(self, tmp_path: Path) -> None:
        write_page(tmp_path, "Spaces", "- p\n    - b\n    - [#A] a\n")
        store = GraphStore(tmp_path, GraphConfig(indent_width=4))
        parent = await store.resolve("Spaces", "1")
        assert parent is not None
        full = await store.get_item(parent, include_children=True)
        assert full is not None
        kids = full.children
        await store.move_item(kids[1].id, kids[0].id, Placement.BEFORE)
        assert read_page(tmp_path, "Spaces") == "- p\n    - [#A] a\n    - b\n"

    async def test_write_failure_is_store_error(
        self, graph_root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        store = GraphStore(graph_root)
        await store.get_top_level_items("Groceries")

        def _boom(self: Path, *args: object, **kwargs: object) -> int:
            raise PermissionError("read-only graph")

        monkeypatch.setattr(Path, "write_text", _boom)
        with pytest.raises(StoreError, match="read-only graph"):
            await store.replace_item_text(KNOWN_ID, "x")

    async def test_undecodable_page_is_store_error(self, graph_root: Path) -> None:
        (graph_root / "pages" / "Bad.md").write_bytes(b"- [#B] x\n- caf\xe9 [#A]\n")
        with pytest.raises(StoreError, match="Cannot read page 'Bad'"):
            await GraphStore(graph_root).get_top_level_items("Bad")

    async def test_unknown_id_with_undecodable_page(self, graph_root: Path) -> None:
        (graph_root / "pages" / "Bad.md").write_bytes(b"- caf\xe9\n")
        with pytest.raises(StoreError, match="Cannot read page 'Bad'"):
            await GraphStore(graph_root).replace_item_text("nope", "x")

    async def test_rewrite_keeps_other_blocks_verbatim(self, tmp_path: Path) -> None:
        snippet = "- [#B] snippet\n  ```python\n  def f():\n\n      return 1\n  ```\n"
        write_page(tmp_path, "Code", snippet + "- [#A] other\n")
        store = GraphStore(tmp_path)
        other = await store.resolve("Code", "2")
        assert other is not None

        await store.replace_item_text(other, "[#B] other")

        assert read_page(tmp_path, "Code") == snippet + "- [#B] other\n"
