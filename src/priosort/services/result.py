"""What every PriorityService operation returns.

INVARIANT: Store failures never escape an operation.  The host gets a
ServiceResult back and decides only how to render it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    """No focused page or block, or the block id is unknown."""
    JOURNAL_PAGE = "JOURNAL_PAGE"
    """Top-level sorting was asked for on a journal page."""
    STORE_FAILURE = "STORE_FAILURE"
    """A read, write or move against the document store raised."""


class ServiceError(BaseModel):
    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one operation.

    Attributes:
        ok: False only for the error codes in :class:`ErrorCode`.  Sorting
            fewer than two blocks is ``ok`` with a warning.
        op: ``cycle_priority``, ``sort_top_level``, ``sort_children`` or
            ``show_page``.
        data: Payload for renderers and ``--json``.
        warnings: Non-fatal problems, including failed plugin hooks.
        error: Set when ``ok`` is False.
        meta: Counters such as ``runs`` (cycle) or ``moved`` (sort).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(cls, op: str, code: str, message: str, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError(code=code, message=message, detail=detail))
