"""Cooperative cancellation shared by the fetch pool and data sources.

A :class:`CancelScope` wraps one ``threading.Event`` per scan generation.
``with_timeout`` derives a scope that shares the same event but also carries a
deadline, so a single fetch can time out without cancelling the whole scan.
"""

from __future__ import annotations

import threading
import time

from deepvalue.data.errors import FetchTimeout


class ScanCancelled(Exception):
    """Raised inside a worker when its scan generation has been cancelled."""


class CancelScope:
    def __init__(self, event: threading.Event | None = None, deadline: float | None = None):
        self._event = event or threading.Event()
        self._deadline = deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def cancel(self) -> None:
        self._event.set()

    def with_timeout(self, seconds: float | None) -> CancelScope:
        """Child scope sharing this cancellation, with its own deadline."""
        if seconds is None:
            return CancelScope(self._event, self._deadline)
        deadline = time.monotonic() + seconds
        if self._deadline is not None:
            deadline = min(deadline, self._deadline)
        return CancelScope(self._event, deadline)

    def remaining(self, default: float | None = None) -> float | None:
        """Seconds left before the deadline, or ``default`` when there is none."""
        if self._deadline is None:
            return default
        left = max(0.0, self._deadline - time.monotonic())
        return left if default is None else min(left, default)

    def check(self) -> None:
        """Raise if cancelled or past the deadline."""
        if self._event.is_set():
            raise ScanCancelled()
        if self.expired:
            raise FetchTimeout("fetch timed out")

    def sleep(self, seconds: float) -> None:
        """Sleep up to ``seconds``, waking early (and raising) on cancellation."""
        if seconds > 0:
            left = self.remaining()
            if left is not None and left < seconds:
                self._event.wait(left)
            else:
                self._event.wait(seconds)
        self.check()
