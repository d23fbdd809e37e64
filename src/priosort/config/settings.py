"""PrioSettings — CLI flags, ``PRIOSORT_*`` env vars and ``priosort.toml``.

Sources, strongest first:

1. keyword arguments (the CLI flags)
2. environment, e.g. ``PRIOSORT_GRAPH__INDENT_WIDTH=4``
3. the TOML file picked by :meth:`PrioSettings.from_cli`
4. defaults on the section models
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, TomlConfigSettingsSource

from priosort.config.discovery import find_config, find_graph_root, graph_root_for
from priosort.config.models import GraphConfig, PluginsConfig

# The TOML file for the settings object currently being built.
_active_toml: ContextVar[Path | None] = ContextVar("_active_toml", default=None)


class PrioSettings(BaseSettings):
    """Everything a command needs to know before touching the graph.

    Attributes:
        graph_root: Directory holding ``pages/`` and ``journals/``.
        config_path: The TOML file that was merged, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "PRIOSORT_",
        "env_nested_delimiter": "__",
    }

    graph_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    graph: GraphConfig = Field(default_factory=GraphConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml = TomlConfigSettingsSource(settings_cls, toml_file=_active_toml.get())
        return (init_settings, env_settings, toml)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        graph_root: Path | None = None,
        **cli_flags: Any,
    ) -> PrioSettings:
        """Build settings for one CLI invocation.

        Without ``--graph`` the root is the graph that owns the config
        file, else the nearest directory with ``pages/`` or ``journals/``,
        else the CWD.  An explicit *config_path* that does not exist is
        ignored.

        Raises:
            click.ClickException: The TOML file does not parse.
        """
        toml_path: Path | None
        if config_path:
            toml_path = Path(config_path) if Path(config_path).is_file() else None
        else:
            toml_path = find_config(graph_root)

        if graph_root is None:
            if toml_path is not None:
                graph_root = graph_root_for(toml_path)
            else:
                graph_root = find_graph_root() or Path.cwd()

        token = _active_toml.set(toml_path)
        try:
            return cls(graph_root=graph_root, config_path=toml_path, **cli_flags)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {toml_path}: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _active_toml.reset(token)
