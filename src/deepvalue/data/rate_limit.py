"""Global request pacing shared by every worker of a data source."""

from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deepvalue.engine.cancel import CancelScope


class RateLimiter:
    """Minimum interval between outbound requests, across all threads.

    Callers are serialized through one lock, so the rate is global rather than
    per worker. Waiting honours the caller's cancel scope.
    """

    def __init__(self, interval: float = 0.1):
        self.interval = interval
        self._lock = threading.Lock()
        self._next_slot = 0.0

    def acquire(self, scope: CancelScope | None = None) -> None:
        with self._lock:
            now = time.monotonic()
            wait = self._next_slot - now
            if wait > 0:
                if scope is not None:
                    scope.sleep(wait)
                else:
                    time.sleep(wait)
            elif scope is not None:
                scope.check()
            self._next_slot = max(now, self._next_slot) + self.interval
