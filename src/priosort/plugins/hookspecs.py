"""Pluggy hook specifications for priosort lifecycle events.

Hooks are called synchronously after the store write they describe has
completed.  Return values are ignored.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("priosort")


class PriosortHookSpec:
    """Hook specifications for the priosort plugin system."""

    @hookspec
    def post_cycle(self, item_id: str, old_text: str, new_text: str) -> None:
        """Called after a block's priority was rewritten."""

    @hookspec
    def post_sort(
        self,
        scope: str,
        item_ids: list[str],
        moves: list[dict[str, Any]],
    ) -> None:
        """Called after siblings were reordered.

        *scope* is the page name for top-level sorts or the parent block
        id for child sorts.  *item_ids* is the resulting order.
        """

    @hookspec
    def notify_user(self, message: str, severity: str) -> None:
        """Called for every user-visible notification."""
