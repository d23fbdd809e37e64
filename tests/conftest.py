"""Shared pytest fixtures and test helpers for priosort tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from priosort.infrastructure.store import MemoryStore
from priosort.services.notify import CollectingNotifier


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture
def store() -> MemoryStore:
    """Empty in-memory document store."""
    return MemoryStore()


@pytest.fixture
def graph_root(tmp_path: Path) -> Path:
    """Temporary graph directory with pages/ and journals/.

    Pages:
    - ``Groceries``: three top-level blocks, the second has children
    - ``2026_10_19`` (journal): two blocks
    """
    (tmp_path / "pages").mkdir()
    (tmp_path / "journals").mkdir()
    write_page(
        tmp_path,
        "Groceries",
        "title:: Groceries\n"
        "- [#A] one\n"
        "- two\n"
        "\t- [#C] rye\n"
        "\t- bagels\n"
        "\t- [#A] sourdough\n"
        "- [#C] three\n"
        "  id:: 00000000-0000-4000-8000-000000000003\n",
    )
    (tmp_path / "journals" / "2026_10_19.md").write_text(
        "- [#C] later\n- [#A] sooner\n", encoding="utf-8"
    )
    return tmp_path


@pytest.fixture
def _isolated_graph(graph_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp graph so the CLI picks it up without --graph.

    Use via ``@pytest.mark.usefixtures("_isolated_graph")`` on command
    test classes.
    """
    monkeypatch.delenv("PRIOSORT_CONFIG", raising=False)
    monkeypatch.chdir(graph_root)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_page(root: Path, name: str, content: str) -> Path:
    """Write a page file under ``root/pages`` and return its path."""
    path = root / "pages" / f"{name.replace('/', '___')}.md"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def read_page(root: Path, name: str) -> str:
    return (root / "pages" / f"{name.replace('/', '___')}.md").read_text(encoding="utf-8")
