"""HistoryManager: bounded undo/redo stacks of graph snapshots.

Snapshots are immutable, so pushing the live snapshot is a reference push.
Both stacks are capped; the oldest entry is evicted first.

INVARIANT: Only structural user intents call :meth:`begin_mutation`, exactly
once each. Derived recomputes (warning flags, persistence) never touch the
stacks.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from funnelctl.domain.graph import GraphSnapshot

logger = logging.getLogger(__name__)

MAX_HISTORY = 50


class HistoryManager:
    """Two bounded stacks, ``past`` and ``future``."""

    def __init__(self, limit: int = MAX_HISTORY) -> None:
        if limit < 1:
            msg = f"History limit must be positive, got {limit}"
            raise ValueError(msg)
        self._past: deque[GraphSnapshot] = deque(maxlen=limit)
        self._future: deque[GraphSnapshot] = deque(maxlen=limit)
        self._txn_id = 0

    @property
    def past(self) -> tuple[GraphSnapshot, ...]:
        return tuple(self._past)

    @property
    def future(self) -> tuple[GraphSnapshot, ...]:
        return tuple(self._future)

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def transaction_id(self) -> int:
        """ID of the most recent mutation boundary (0 before the first)."""
        return self._txn_id

    def depth(self) -> tuple[int, int]:
        """Return ``(len(past), len(future))``."""
        return len(self._past), len(self._future)

    def begin_mutation(self, live: GraphSnapshot) -> int:
        """Record *live* as the state before a user mutation.

        Clears ``future`` and returns the new transaction id.
        """
        self._past.append(live)
        self._future.clear()
        self._txn_id += 1
        logger.debug("history.begin txn=%d past=%d", self._txn_id, len(self._past))
        return self._txn_id

    def undo(self, live: GraphSnapshot) -> GraphSnapshot | None:
        """Step back. Returns the snapshot to make live, or None if ``past`` is empty."""
        if not self._past:
            return None
        previous = self._past.pop()
        self._future.append(live)
        return previous

    def redo(self, live: GraphSnapshot) -> GraphSnapshot | None:
        """Step forward. Returns the snapshot to make live, or None if ``future`` is empty."""
        if not self._future:
            return None
        following = self._future.pop()
        self._past.append(live)
        return following

    def clear(self) -> None:
        self._past.clear()
        self._future.clear()
