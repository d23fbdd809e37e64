"""Per-block cycle state machine.

Three states per block id:

- ``Idle``: nothing in flight.
- ``Running``: one read-modify-write of the block text is in flight.
- ``RunningWithPending(direction)``: in flight, and one more step was
  requested meanwhile.  Later requests overwrite the direction, so a
  burst collapses into a single deferred run (last request wins).

Transitions are pure functions; :class:`CycleStateRegistry` holds the
current state per block id.  A block missing from the registry is Idle.
"""

from __future__ import annotations

from dataclasses import dataclass

from priosort.domain.priority import Direction


@dataclass(frozen=True)
class Idle:
    """No rewrite in flight."""


@dataclass(frozen=True)
class Running:
    """A rewrite is in flight and nothing is queued."""


@dataclass(frozen=True)
class RunningWithPending:
    """A rewrite is in flight and one more step is queued."""

    direction: Direction


CycleState = Idle | Running | RunningWithPending

IDLE = Idle()
RUNNING = Running()


def on_request(state: CycleState, direction: Direction) -> tuple[CycleState, bool]:
    """Apply a cycle request.

    Returns the new state and whether the caller must start a run now.
    """
    if isinstance(state, Idle):
        return RUNNING, True
    return RunningWithPending(direction), False


def on_complete(state: CycleState) -> tuple[CycleState, Direction | None]:
    """Apply run completion (success or failure alike).

    Returns ``Idle`` and the queued direction, if any, which the caller
    must re-issue as a fresh request immediately.
    """
    if isinstance(state, RunningWithPending):
        return IDLE, state.direction
    return IDLE, None


class CycleStateRegistry:
    """Mapping of block id to :data:`CycleState`.

    Idle entries are evicted, so the registry only ever holds blocks
    with a rewrite in flight.
    """

    def __init__(self) -> None:
        self._states: dict[str, CycleState] = {}

    def get(self, item_id: str) -> CycleState:
        return self._states.get(item_id, IDLE)

    def set(self, item_id: str, state: CycleState) -> None:
        if isinstance(state, Idle):
            self._states.pop(item_id, None)
        else:
            self._states[item_id] = state

    def active_ids(self) -> list[str]:
        """Ids of blocks that currently have a rewrite in flight."""
        return list(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._states
