"""ReentrancyGuard: rejects overlapping drop/import intents.

An explicit in-flight flag covers the time an import loader is running; a
cooldown deadline after release rejects duplicate events that arrive within
a short window (e.g. a double drop). The clock is injectable for tests.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

DEFAULT_COOLDOWN_MS = 250


class ReentrancyGuard:
    """In-flight flag plus bounded cooldown window."""

    def __init__(
        self,
        cooldown_ms: int = DEFAULT_COOLDOWN_MS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._cooldown = max(cooldown_ms, 0) / 1000
        self._clock = clock
        self._in_flight = False
        self._blocked_until = 0.0

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def busy(self) -> bool:
        """Whether an attempt made now would be rejected."""
        return self._in_flight or self._clock() < self._blocked_until

    def try_acquire(self) -> bool:
        """Mark an intent as in flight. Returns False if one is already pending."""
        if self.busy:
            return False
        self._in_flight = True
        return True

    def release(self) -> None:
        """Clear the in-flight flag and start the cooldown window."""
        self._in_flight = False
        self._blocked_until = self._clock() + self._cooldown

    @contextmanager
    def hold(self) -> Iterator[bool]:
        """Yield whether the guard was acquired; release on exit if it was."""
        acquired = self.try_acquire()
        try:
            yield acquired
        finally:
            if acquired:
                self.release()
