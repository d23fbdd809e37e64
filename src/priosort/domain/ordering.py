"""Priority ordering of sibling blocks and the move plan that realises it.

The host only offers a relative "move block before/after sibling"
primitive, so a target order is expressed as a chain of moves: the first
block is placed before the second, then every following block is placed
after its predecessor in the target order.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum

from priosort.domain.priority import priority_rank


class Placement(StrEnum):
    """Where the subject lands relative to the anchor."""

    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class MoveInstruction:
    """Move *subject* directly before or after *anchor*."""

    subject: str
    anchor: str
    placement: Placement

    def to_dict(self) -> dict[str, str]:
        return {
            "subject": self.subject,
            "anchor": self.anchor,
            "placement": self.placement.value,
        }


def compute_order(items: Iterable[tuple[str, str]]) -> list[str]:
    """Return item ids sorted by ascending priority rank.

    Rank comes from the first marker found anywhere in the text; blocks
    without a marker sort last.  ``sorted`` is stable, so blocks of equal
    rank keep their original relative order.

    Examples:
        >>> compute_order([("1", "[#B] x"), ("2", "no tag"), ("3", "[#A] y"), ("4", "[#B] z")])
        ['3', '1', '4', '2']
    """
    ranked = [(priority_rank(text), item_id) for item_id, text in items]
    return [item_id for _, item_id in sorted(ranked, key=lambda pair: pair[0])]


def plan_moves(sorted_ids: Sequence[str]) -> list[MoveInstruction]:
    """Build the chained move plan for *sorted_ids*.

    Instructions must be applied in order: each one anchors on a block
    that the previous instruction already put in place.  Fewer than two
    ids yields an empty plan.
    """
    if len(sorted_ids) < 2:
        return []

    moves = [MoveInstruction(sorted_ids[0], sorted_ids[1], Placement.BEFORE)]
    for index in range(1, len(sorted_ids)):
        moves.append(MoveInstruction(sorted_ids[index], sorted_ids[index - 1], Placement.AFTER))
    return moves


def apply_moves(order: Sequence[str], moves: Iterable[MoveInstruction]) -> list[str]:
    """Replay *moves* against a sibling list the way the host mover does.

    Raises:
        KeyError: A subject or anchor is not part of *order*.
    """
    result = list(order)
    for move in moves:
        if move.subject not in result:
            raise KeyError(move.subject)
        if move.anchor not in result:
            raise KeyError(move.anchor)
        if move.subject == move.anchor:
            continue
        result.remove(move.subject)
        position = result.index(move.anchor)
        if move.placement is Placement.AFTER:
            position += 1
        result.insert(position, move.subject)
    return result
