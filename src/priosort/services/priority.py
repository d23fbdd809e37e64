"""PriorityService: cycle a block's priority and sort siblings by it.

Entry points a host binds to commands:

- :meth:`PriorityService.cycle_priority`: focused block, one step.
- :meth:`PriorityService.sort_top_level`: focused page's top-level blocks.
- :meth:`PriorityService.sort_children`: focused block's direct children.
- :meth:`PriorityService.show_page`: read-only listing with ranks.

INVARIANT: Store failures are caught here, reported to the user, and
returned as a ``STORE_FAILURE`` result.  Nothing propagates to the host.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from priosort.domain.ordering import compute_order, plan_moves
from priosort.domain.priority import (
    Direction,
    apply_priority_step,
    find_priority,
    leading_priority,
    priority_rank,
)
from priosort.infrastructure.store import ItemNotFoundError, StoreError
from priosort.services.base import BaseService
from priosort.services.coordinator import CycleCoordinator
from priosort.services.notify import Severity
from priosort.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from priosort.domain.cycle import CycleStateRegistry
    from priosort.infrastructure.store import DocumentStore, Item
    from priosort.plugins.manager import PluginManager
    from priosort.services.notify import Notifier

logger = logging.getLogger(__name__)

MIN_SORT_ITEMS = 2


def _error_code(exc: StoreError) -> ErrorCode:
    if isinstance(exc, ItemNotFoundError):
        return ErrorCode.NOT_FOUND
    return ErrorCode.STORE_FAILURE


def _describe(item: Item) -> dict[str, Any]:
    token = find_priority(item.text)
    return {
        "id": item.id,
        "text": item.text,
        "priority": token.value if token else None,
        "rank": priority_rank(item.text),
    }


class PriorityService(BaseService):
    """Priority cycling and sorting against a document store."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        notifier: Notifier | None = None,
        plugins: PluginManager | None = None,
        registry: CycleStateRegistry | None = None,
    ) -> None:
        super().__init__(store, notifier=notifier, plugins=plugins)
        self._coordinator = CycleCoordinator(self._rewrite, registry=registry, notifier=notifier)
        # post_cycle hook warnings per block; one run per block is in flight at a time.
        self._hook_warnings: dict[str, list[str]] = {}

    @property
    def coordinator(self) -> CycleCoordinator:
        return self._coordinator

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def cycle_priority(self, direction: Direction = Direction.FORWARD) -> ServiceResult:
        """Move the focused block's priority one step in *direction*."""
        op = "cycle_priority"
        try:
            item = await self._store.get_current_item()
        except StoreError as exc:
            return self._store_failure(op, "Cycle error", exc)
        if item is None:
            self._notify("No block is focused", Severity.WARNING)
            return ServiceResult.failure(op, ErrorCode.NOT_FOUND, "No block is focused")

        return await self.cycle_item(item.id, direction)

    async def cycle_item(self, item_id: str, direction: Direction = Direction.FORWARD) -> ServiceResult:
        """Cycle the priority of *item_id* through the coordinator."""
        op = "cycle_priority"
        report = await self._coordinator.request(item_id, direction)
        if report.coalesced:
            return ServiceResult(
                ok=True,
                op=op,
                data={"id": item_id, "queued": True, "direction": direction.name.lower()},
            )

        warnings = self._hook_warnings.pop(item_id, [])
        if not report.texts:
            exc = report.errors[-1]
            return ServiceResult.failure(op, _error_code(exc), str(exc), id=item_id)

        text = report.texts[-1]
        token = leading_priority(text)
        priority = token.value if token else None
        warnings.extend(f"Cycle error: {error}" for error in report.errors)
        self._notify(f"Priority set to [#{priority}]", Severity.SUCCESS)
        return ServiceResult(
            ok=True,
            op=op,
            data={"id": item_id, "text": text, "priority": priority},
            warnings=warnings,
            meta={"runs": report.runs},
        )

    async def _rewrite(self, item_id: str, direction: Direction) -> str:
        item = await self._store.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        new_text = apply_priority_step(item.text, direction)
        await self._store.replace_item_text(item_id, new_text)
        self._dispatch_event(
            "post_cycle",
            {"item_id": item_id, "old_text": item.text, "new_text": new_text},
            self._hook_warnings.setdefault(item_id, []),
        )
        return new_text

    # ------------------------------------------------------------------
    # Sort
    # ------------------------------------------------------------------

    async def sort_top_level(self) -> ServiceResult:
        """Sort the focused page's top-level blocks by priority."""
        op = "sort_top_level"
        try:
            page = await self._store.get_current_page()
            if page is None or page.journal:
                message = "Priority sorting is only available on regular pages"
                self._notify(message, Severity.WARNING)
                if page is None:
                    return ServiceResult.failure(op, ErrorCode.NOT_FOUND, message)
                return ServiceResult.failure(op, ErrorCode.JOURNAL_PAGE, message, page=page.name)

            items = await self._store.get_top_level_items(page.name)
            return await self._sort(
                op,
                items,
                scope=page.name,
                too_few="Not enough items to sort (need at least 2)",
                done="Page sorted by priority",
            )
        except StoreError as exc:
            return self._store_failure(op, "Sort error", exc)

    async def sort_children(self) -> ServiceResult:
        """Sort the focused block's direct children by priority."""
        op = "sort_children"
        try:
            parent = await self._store.get_current_item()
            if parent is None:
                message = "Failed to retrieve parent block"
                self._notify(message, Severity.WARNING)
                return ServiceResult.failure(op, ErrorCode.NOT_FOUND, message)

            full = await self._store.get_item(parent.id, include_children=True)
            if full is None:
                message = "Failed to retrieve parent block"
                self._notify(message, Severity.WARNING)
                return ServiceResult.failure(op, ErrorCode.NOT_FOUND, message, id=parent.id)

            children = full.children
            return await self._sort(
                op,
                children,
                scope=parent.id,
                too_few="Not enough child blocks to sort (need at least 2)",
                done="Child blocks sorted by priority",
            )
        except StoreError as exc:
            return self._store_failure(op, "Children sort error", exc)

    async def _sort(
        self,
        op: str,
        items: list[Item],
        *,
        scope: str,
        too_few: str,
        done: str,
    ) -> ServiceResult:
        if len(items) < MIN_SORT_ITEMS:
            self._notify(too_few, Severity.WARNING)
            return ServiceResult(
                ok=True,
                op=op,
                data={"scope": scope, "order": [i.id for i in items], "moves": []},
                warnings=[too_few],
            )

        order = compute_order((i.id, i.text) for i in items)
        moves = plan_moves(order)
        for move in moves:
            await self._store.move_item(move.subject, move.anchor, move.placement)
        logger.debug("Sorted %d blocks under %s", len(order), scope)

        warnings: list[str] = []
        self._dispatch_event(
            "post_sort",
            {"scope": scope, "item_ids": order, "moves": [m.to_dict() for m in moves]},
            warnings,
        )
        self._notify(done, Severity.SUCCESS)

        by_id = {i.id: i for i in items}
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "scope": scope,
                "order": order,
                "moves": [m.to_dict() for m in moves],
                "items": [_describe(by_id[i]) for i in order],
            },
            warnings=warnings,
            meta={"moved": len(moves)},
        )

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    async def show_page(self) -> ServiceResult:
        """List the focused page's top-level blocks with their priority."""
        op = "show_page"
        try:
            page = await self._store.get_current_page()
            if page is None:
                return ServiceResult.failure(op, ErrorCode.NOT_FOUND, "Page not found")
            items = await self._store.get_top_level_items(page.name)
        except StoreError as exc:
            return self._store_failure(op, "Read error", exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "page": page.name,
                "journal": page.journal,
                "items": [_describe(i) for i in items],
            },
        )

    def _store_failure(self, op: str, label: str, exc: StoreError) -> ServiceResult:
        logger.warning("%s failed: %s", op, exc)
        self._notify(f"{label}: {exc}", Severity.ERROR)
        return ServiceResult.failure(op, _error_code(exc), str(exc))
