"""Locate the graph directory and its ``priosort.toml``.

A graph directory is recognised by a ``pages/``, ``journals/`` or
``logseq/`` folder.  The config file lives either in the graph root or
inside its ``logseq/`` folder next to Logseq's own ``config.edn``.
``PRIOSORT_CONFIG`` points at a file anywhere and disables the search.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "priosort.toml"
CONFIG_ENV_VAR = "PRIOSORT_CONFIG"
GRAPH_MARKERS = ("pages", "journals", "logseq")

_CONFIG_LOCATIONS = (Path(CONFIG_FILENAME), Path("logseq") / CONFIG_FILENAME)


def _upwards(start: Path | None) -> Iterator[Path]:
    here = (start or Path.cwd()).resolve()
    yield here
    yield from here.parents


def config_in(directory: Path) -> Path | None:
    """Return the config file stored in *directory*, if any."""
    for relative in _CONFIG_LOCATIONS:
        candidate = directory / relative
        if candidate.is_file():
            return candidate
    return None


def is_graph_root(directory: Path) -> bool:
    return any((directory / marker).is_dir() for marker in GRAPH_MARKERS)


def find_config(start: Path | None = None) -> Path | None:
    """Find the nearest ``priosort.toml`` from *start* (default: CWD) upwards.

    An env override that names a missing file yields None rather than
    falling back to the search.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    for directory in _upwards(start):
        found = config_in(directory)
        if found is not None:
            return found
    return None


def find_graph_root(start: Path | None = None) -> Path | None:
    """Nearest directory at or above *start* that looks like a graph."""
    return next((d for d in _upwards(start) if is_graph_root(d)), None)


def graph_root_for(config_path: Path) -> Path:
    """The graph a config file belongs to.

    ``<graph>/priosort.toml`` and ``<graph>/logseq/priosort.toml`` both
    map to ``<graph>``.
    """
    parent = config_path.parent
    if parent.name == "logseq" and config_path.name == CONFIG_FILENAME:
        return parent.parent
    return parent
