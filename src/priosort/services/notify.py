"""User notifications.

Notifications are fire-and-forget: a notifier that raises is logged and
ignored, never changing the outcome of the operation that sent it.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

import structlog

if TYPE_CHECKING:
    from priosort.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class Severity(StrEnum):
    """Notification severity levels understood by hosts."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


class Notifier(Protocol):
    def notify(self, message: str, severity: Severity) -> None: ...


class LogNotifier:
    """Send notifications to the ``priosort.notify`` structlog logger."""

    _LEVELS = {
        Severity.SUCCESS: logging.INFO,
        Severity.INFO: logging.INFO,
        Severity.WARNING: logging.WARNING,
        Severity.ERROR: logging.ERROR,
    }

    def __init__(self) -> None:
        self._log = structlog.get_logger("priosort.notify")

    def notify(self, message: str, severity: Severity) -> None:
        self._log.log(self._LEVELS[severity], message, severity=severity.value)


class CollectingNotifier:
    """Keep notifications in memory, in arrival order."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, Severity]] = []

    def notify(self, message: str, severity: Severity) -> None:
        self.messages.append((message, severity))

    def of(self, severity: Severity) -> list[str]:
        return [message for message, sev in self.messages if sev is severity]


class HookNotifier:
    """Forward notifications to the ``notify_user`` plugin hook."""

    def __init__(self, plugins: PluginManager) -> None:
        self._plugins = plugins

    def notify(self, message: str, severity: Severity) -> None:
        self._plugins.hook.notify_user(message=message, severity=severity.value)


class FanoutNotifier:
    """Deliver each notification to several notifiers."""

    def __init__(self, *notifiers: Notifier) -> None:
        self.notifiers = list(notifiers)

    def notify(self, message: str, severity: Severity) -> None:
        for notifier in self.notifiers:
            send(notifier, message, severity)


def send(notifier: Notifier | None, message: str, severity: Severity) -> None:
    """Deliver *message* without letting notifier failures escape."""
    if notifier is None:
        return
    try:
        notifier.notify(message, severity)
    except Exception:
        logger.warning("Notifier %r failed", notifier, exc_info=True)
