"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy store and plugin initialization,
runs service coroutines, and centralizes result emission
(stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any

import click

from priosort.output.formatters import OutputSettings, format_result
from priosort.services.notify import CollectingNotifier, Severity

if TYPE_CHECKING:
    from priosort.config.settings import PrioSettings
    from priosort.infrastructure.graph import GraphStore
    from priosort.plugins.manager import PluginManager
    from priosort.services.priority import PriorityService
    from priosort.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The graph store and plugins are created on first use so ``--help``
    and ``--version`` never touch the graph directory.
    """

    def __init__(self, settings: PrioSettings) -> None:
        self.settings = settings
        self.notices = CollectingNotifier()
        self._store: GraphStore | None = None
        self._plugins: PluginManager | None = None

        from priosort.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def store(self) -> GraphStore:
        """The graph store (created lazily on first access)."""
        if self._store is None:
            from priosort.infrastructure.graph import GraphStore

            self._store = GraphStore(self.settings.graph_root, self.settings.graph)
        return self._store

    @property
    def plugins(self) -> PluginManager:
        """The plugin manager, with plugins discovered if enabled."""
        if self._plugins is None:
            from priosort.plugins.manager import PluginManager

            self._plugins = PluginManager()
            if self.settings.plugins.enabled:
                local_dir = self.settings.graph_root / ".priosort" / "plugins"
                self._plugins.discover_and_load(local_dir=local_dir)
        return self._plugins

    def priority_service(self) -> PriorityService:
        """Build a PriorityService wired to the store, notices and plugins."""
        from priosort.services.notify import FanoutNotifier, HookNotifier, LogNotifier
        from priosort.services.priority import PriorityService

        notifier = FanoutNotifier(self.notices, HookNotifier(self.plugins))
        if self.settings.verbose:
            notifier.notifiers.append(LogNotifier())
        return PriorityService(self.store, notifier=notifier, plugins=self.plugins)

    def run(self, coro: Coroutine[Any, Any, ServiceResult]) -> ServiceResult:
        """Run a service coroutine to completion on a fresh event loop."""
        return asyncio.run(coro)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings and info notifications go to stderr so they don't
          pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
                for message in self._extra_notices(result):
                    click.echo(message, err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)

    def _extra_notices(self, result: ServiceResult) -> list[str]:
        """Warning/info notifications not already reported as result warnings."""
        extra: list[str] = []
        for message, severity in self.notices.messages:
            if severity in (Severity.SUCCESS, Severity.ERROR):
                continue
            if message in result.warnings:
                continue
            extra.append(f"{severity.value.upper()}: {message}")
        return extra
