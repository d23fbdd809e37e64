"""Load priosort plugins and relay hook calls to them.

Plugins come from two places:

- installed distributions exposing the ``priosort.plugins`` entry point group
- single-file plugins in ``<graph>/.priosort/plugins/*.py``

A plugin that fails to import or construct is logged and skipped; the
remaining plugins still load.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType

import pluggy

from priosort.plugins.hookspecs import PriosortHookSpec

PROJECT_NAME = "priosort"
ENTRY_POINT_GROUP = "priosort.plugins"
LOCAL_MODULE_PREFIX = "priosort_local_plugin_"

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)

logger = logging.getLogger(__name__)


def has_hookimpls(cls: type) -> bool:
    """Whether *cls* defines at least one ``@hookimpl`` method."""
    marker = f"{PROJECT_NAME}_impl"
    return any(
        callable(member) and hasattr(member, marker)
        for name, member in inspect.getmembers(cls)
        if not name.startswith("_")
    )


def _import_file(path: Path) -> ModuleType | None:
    module_name = f"{LOCAL_MODULE_PREFIX}{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        logger.warning("Cannot import plugin file %s", path)
        return None

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        logger.warning("Plugin file %s failed to import", path, exc_info=True)
        return None
    return module


def _hook_classes(module: ModuleType) -> list[type]:
    """Classes defined (not imported) in *module* that implement hooks."""
    return [
        cls
        for _name, cls in inspect.getmembers(module, inspect.isclass)
        if cls.__module__ == module.__name__ and has_hookimpls(cls)
    ]


class PluginManager:
    """Thin wrapper over :class:`pluggy.PluginManager` with priosort's hookspecs."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(PriosortHookSpec)
        self._loaded = False

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    @property
    def is_loaded(self) -> bool:
        """Whether :meth:`discover_and_load` has run."""
        return self._loaded

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins, then the files in *local_dir*.

        Returns the names of all registered plugins.
        """
        self._load_entry_points()
        if local_dir is not None:
            self._load_directory(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        resolved = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved)
        logger.debug("Registered plugin %s", resolved)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    def _load_entry_points(self) -> None:
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        # An entry point may name a class; hooks must be bound to an instance.
        for plugin in self.get_plugins():
            if inspect.isclass(plugin) and has_hookimpls(plugin):
                name = self._pm.get_name(plugin) or plugin.__name__
                self._pm.unregister(plugin)
                self._instantiate(plugin, name)

    def _load_directory(self, directory: Path) -> None:
        if not directory.is_dir():
            return
        for path in sorted(directory.glob("*.py")):
            if path.name.startswith("_"):
                continue
            module = _import_file(path)
            if module is None:
                continue
            for cls in _hook_classes(module):
                self._instantiate(cls, f"{module.__name__}.{cls.__name__}")

    def _instantiate(self, cls: type, name: str) -> None:
        try:
            instance = cls()
        except Exception:
            logger.warning("Plugin %s failed to initialise", name, exc_info=True)
            return
        self.register_plugin(instance, name=name)
