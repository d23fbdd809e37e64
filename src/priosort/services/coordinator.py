"""CycleCoordinator — at most one priority rewrite in flight per block.

A user can fire "cycle" faster than the store's read-modify-write round
trip.  Overlapping rewrites of one block would race and drop a step, so
requests for a busy block are folded into a single deferred run that
uses the most recent direction.  That run starts as soon as the current
one finishes, without waiting for another trigger.

The per-block state is held across both store awaits (read and write)
and released in a ``finally`` block, so a failed rewrite never leaves
the block locked.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from priosort.domain.cycle import CycleState, CycleStateRegistry, on_complete, on_request
from priosort.domain.priority import Direction
from priosort.infrastructure.store import StoreError
from priosort.services.notify import Notifier, Severity, send

logger = logging.getLogger(__name__)

# Reads the block, rewrites its text and returns the new text.
Runner = Callable[[str, Direction], Awaitable[str]]


@dataclass
class CycleReport:
    """What a single :meth:`CycleCoordinator.request` call did.

    Attributes:
        item_id: The block the request targeted.
        coalesced: True when the block was busy and the request was
            queued for the run in flight instead of executed.
        directions: Direction of every run executed, in order.
        texts: New text written by every successful run.
        errors: Store failures of runs that failed.
    """

    item_id: str
    coalesced: bool = False
    directions: list[Direction] = field(default_factory=list)
    texts: list[str] = field(default_factory=list)
    errors: list[StoreError] = field(default_factory=list)

    @property
    def runs(self) -> int:
        return len(self.directions)


@dataclass
class _Release:
    pending: Direction | None = None


class CycleCoordinator:
    """Serialize and coalesce priority rewrites per block id.

    Usage::

        coordinator = CycleCoordinator(rewrite, registry=CycleStateRegistry())
        report = await coordinator.request(block_id, Direction.FORWARD)
    """

    def __init__(
        self,
        runner: Runner,
        *,
        registry: CycleStateRegistry | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self._runner = runner
        self._registry = registry if registry is not None else CycleStateRegistry()
        self._notifier = notifier

    @property
    def registry(self) -> CycleStateRegistry:
        return self._registry

    def state_of(self, item_id: str) -> CycleState:
        return self._registry.get(item_id)

    async def request(self, item_id: str, direction: Direction) -> CycleReport:
        """Cycle *item_id* one step, or queue the step if a run is in flight.

        Returns once this call's runs (including any deferred run queued
        by later requests) have finished.  A queued request returns
        immediately with ``coalesced=True``.
        """
        state, start = on_request(self._registry.get(item_id), direction)
        self._registry.set(item_id, state)
        if not start:
            logger.debug("Cycle for %s queued (%s)", item_id, direction.name)
            return CycleReport(item_id=item_id, coalesced=True)

        report = CycleReport(item_id=item_id)
        next_direction: Direction | None = direction
        while next_direction is not None:
            async with self._running(item_id) as release:
                await self._run_once(item_id, next_direction, report)
            next_direction = release.pending
            if next_direction is not None:
                # No await between release and re-acquire: nothing can interleave.
                state, _ = on_request(self._registry.get(item_id), next_direction)
                self._registry.set(item_id, state)
        return report

    @asynccontextmanager
    async def _running(self, item_id: str) -> AsyncIterator[_Release]:
        release = _Release()
        try:
            yield release
        finally:
            state, release.pending = on_complete(self._registry.get(item_id))
            self._registry.set(item_id, state)

    async def _run_once(self, item_id: str, direction: Direction, report: CycleReport) -> None:
        report.directions.append(direction)
        try:
            text = await self._runner(item_id, direction)
        except StoreError as exc:
            logger.warning("Cycle for %s failed: %s", item_id, exc)
            send(self._notifier, f"Cycle error: {exc}", Severity.ERROR)
            report.errors.append(exc)
            return
        logger.debug("Cycled %s %s -> %r", item_id, direction.name, text)
        report.texts.append(text)
