"""Section models for ``priosort.toml``.

Every field has a default, so the file only needs the keys a graph
overrides.  A missing file is the same as an empty one.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GraphConfig(BaseModel):
    """``[graph]``: where pages live and how their outlines are indented."""

    model_config = {"frozen": True}

    pages_dir: str = "pages"
    journals_dir: str = "journals"
    # Spaces per level for space-indented files; tab files ignore it.
    indent_width: int = Field(default=2, ge=1)
    # Pages treated as journals even when stored under pages_dir.
    journal_page_names: list[str] = Field(default_factory=lambda: ["Journal", "Journals"])


class PluginsConfig(BaseModel):
    """``[plugins]``: load entry-point and ``.priosort/plugins`` hooks."""

    model_config = {"frozen": True}

    enabled: bool = True
