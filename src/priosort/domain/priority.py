"""Priority annotation parsing and rewriting.

Block text carries an optional priority marker ``[#A]``, ``[#B]`` or
``[#C]``.  Recognition is a two-stage lexical scan with fixed precedence:

1. A leading task status keyword (``TODO``, ``DOING``, ``LATER`` ...)
   followed by whitespace.  It always stays the first token.
2. A leading priority token directly after the keyword (or at the start
   of the text when no keyword is present).

Any other priority token in the body is treated as a stray duplicate
and removed on rewrite.  All functions here are pure.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum, StrEnum


class PriorityToken(StrEnum):
    """Priority levels, highest first."""

    A = "A"
    B = "B"
    C = "C"

    @property
    def rank(self) -> int:
        return PRIORITY_CYCLE.index(self)

    @property
    def marker(self) -> str:
        return f"[#{self.value}]"

    @classmethod
    def from_rank(cls, rank: int) -> PriorityToken:
        return PRIORITY_CYCLE[rank]


class Direction(IntEnum):
    """Step applied to the current rank when cycling."""

    FORWARD = 1
    BACKWARD = -1


PRIORITY_CYCLE: tuple[PriorityToken, ...] = (PriorityToken.A, PriorityToken.B, PriorityToken.C)

# Rank used for sorting when a block carries no marker at all.
UNSET_RANK = len(PRIORITY_CYCLE)

# Rank used for cycle arithmetic when the head of the text has no marker.
_UNSET_CYCLE_RANK = -1

STATUS_KEYWORDS: tuple[str, ...] = (
    "TODO",
    "DOING",
    "DONE",
    "CANCELLED",
    "CANCELED",
    "WAITING",
    "WAIT",
    "IN-PROGRESS",
    "IN_PROGRESS",
    "INPROGRESS",
    "HOLD",
    "NEXT",
    "NOW",
    "LATER",
)

# WAITING must be tried before WAIT so the longer keyword wins.
_STATUS_PREFIX_RE = re.compile(
    r"^(TODO|DOING|DONE|CANCELLED|CANCELED|WAITING|WAIT|IN[-_]?PROGRESS|HOLD|NEXT|NOW|LATER)\s+",
    re.IGNORECASE,
)
_LEADING_PRIORITY_RE = re.compile(r"^\s*\[#([ABC])\]\s*", re.IGNORECASE)
_STRAY_PRIORITY_RE = re.compile(r"\s*\[#([ABC])\]\s*", re.IGNORECASE)
_ANY_PRIORITY_RE = re.compile(r"\[#([ABC])\]", re.IGNORECASE)
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class Annotation:
    """Decomposed block text.

    Attributes:
        prefix: Status keyword with its trailing whitespace, verbatim, or ``""``.
        token: Leading priority marker, or None when unset.
        body: Remaining text with the leading marker removed (untouched otherwise).
    """

    prefix: str
    token: PriorityToken | None
    body: str


def split_annotation(text: str) -> Annotation:
    """Split *text* into status prefix, leading priority and body.

    Examples:
        >>> split_annotation("TODO [#B] write report")
        Annotation(prefix='TODO ', token=<PriorityToken.B: 'B'>, body='write report')
        >>> split_annotation("plain text")
        Annotation(prefix='', token=None, body='plain text')
    """
    prefix = ""
    body = text
    status = _STATUS_PREFIX_RE.match(body)
    if status:
        prefix = status.group(0)
        body = body[status.end() :]

    token: PriorityToken | None = None
    head = _LEADING_PRIORITY_RE.match(body)
    if head:
        token = PriorityToken(head.group(1).upper())
        body = body[head.end() :]

    return Annotation(prefix=prefix, token=token, body=body)


def leading_priority(text: str) -> PriorityToken | None:
    """Return the priority marker at the head of *text* (after any status keyword)."""
    return split_annotation(text).token


def find_priority(text: str | None) -> PriorityToken | None:
    """Return the first priority marker found anywhere in *text*."""
    if not text:
        return None
    match = _ANY_PRIORITY_RE.search(text)
    if match is None:
        return None
    return PriorityToken(match.group(1).upper())


def priority_rank(text: str | None) -> int:
    """Sort rank of *text*: 0 for A through 2 for C, ``UNSET_RANK`` otherwise."""
    token = find_priority(text)
    return UNSET_RANK if token is None else token.rank


def strip_priority(text: str) -> str:
    """Remove every priority marker from *text* and normalise whitespace."""
    cleaned = _STRAY_PRIORITY_RE.sub(" ", text)
    return _WHITESPACE_RUN_RE.sub(" ", cleaned).strip()


def next_rank(current: int, direction: Direction) -> int:
    """Advance *current* one step around the cycle.

    ``current`` is -1 for an unset block, so a forward step from unset
    lands on A and a backward step lands on B.
    """
    size = len(PRIORITY_CYCLE)
    return (current + int(direction) + size) % size


def apply_priority_step(text: str, direction: Direction) -> str:
    """Rewrite *text* with its priority moved one step in *direction*.

    Total for any input: text without recognisable markers is treated
    as unset.

    Examples:
        >>> apply_priority_step("TODO call mum", Direction.FORWARD)
        'TODO [#A] call mum'
        >>> apply_priority_step("[#C] ship it [#A]", Direction.FORWARD)
        '[#A] ship it '
    """
    annotation = split_annotation(text)
    current = _UNSET_CYCLE_RANK if annotation.token is None else annotation.token.rank

    body = _STRAY_PRIORITY_RE.sub(" ", annotation.body)
    body = _WHITESPACE_RUN_RE.sub(" ", body).lstrip()

    token = PriorityToken.from_rank(next_rank(current, direction))
    separator = " " if body else ""
    return f"{annotation.prefix}{token.marker}{separator}{body}"
