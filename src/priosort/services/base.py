"""BaseService — shared wiring for priority services.

Every service receives a :class:`DocumentStore` at construction time,
plus an optional notifier (user-visible messages) and plugin manager
(lifecycle hooks).  Services never own blocks; they read and write
through the store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from priosort.services.notify import Severity, send

if TYPE_CHECKING:
    from priosort.infrastructure.store import DocumentStore
    from priosort.plugins.manager import PluginManager
    from priosort.services.notify import Notifier

logger = logging.getLogger(__name__)


class BaseService:
    """Base for service-layer classes.

    Usage::

        class PriorityService(BaseService):
            async def sort_top_level(self) -> ServiceResult:
                items = await self._store.get_top_level_items(...)
                ...
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        notifier: Notifier | None = None,
        plugins: PluginManager | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._plugins = plugins

    def _notify(self, message: str, severity: Severity) -> None:
        send(self._notifier, message, severity)

    def _dispatch_event(
        self,
        hook_name: str,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Call a lifecycle hook. No-op without a plugin manager.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        if self._plugins is None:
            return
        try:
            getattr(self._plugins.hook, hook_name)(**payload)
        except Exception:
            logger.debug("Hook %s failed", hook_name, exc_info=True)
            warnings.append(f"Plugin hook failed: {hook_name}")
