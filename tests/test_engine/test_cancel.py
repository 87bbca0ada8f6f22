"""Tests for cancel scopes and the shared rate limiter."""

from __future__ import annotations

import threading
import time

import pytest

from deepvalue.data.errors import FetchTimeout
from deepvalue.data.rate_limit import RateLimiter
from deepvalue.engine.cancel import CancelScope, ScanCancelled


class TestCancelScope:
    def test_cancel_raises_on_check(self):
        scope = CancelScope()
        scope.check()
        scope.cancel()
        assert scope.cancelled
        with pytest.raises(ScanCancelled):
            scope.check()

    def test_child_shares_cancellation(self):
        parent = CancelScope()
        child = parent.with_timeout(10)
        parent.cancel()
        assert child.cancelled

    def test_child_timeout_does_not_cancel_parent(self):
        parent = CancelScope()
        child = parent.with_timeout(0)
        assert child.expired
        with pytest.raises(FetchTimeout):
            child.check()
        assert not parent.cancelled
        parent.check()

    def test_remaining(self):
        assert CancelScope().remaining(5.0) == 5.0
        assert CancelScope().remaining() is None
        left = CancelScope().with_timeout(1.0).remaining(10.0)
        assert 0 < left <= 1.0

    def test_nested_timeout_keeps_earlier_deadline(self):
        outer = CancelScope().with_timeout(0.5)
        inner = outer.with_timeout(60)
        assert inner.remaining() <= 0.5

    def test_sleep_wakes_on_cancel(self):
        scope = CancelScope()
        threading.Timer(0.05, scope.cancel).start()
        start = time.monotonic()
        with pytest.raises(ScanCancelled):
            scope.sleep(5.0)
        assert time.monotonic() - start < 2.0

    def test_sleep_stops_at_deadline(self):
        scope = CancelScope().with_timeout(0.05)
        start = time.monotonic()
        with pytest.raises(FetchTimeout):
            scope.sleep(5.0)
        assert time.monotonic() - start < 2.0


class TestRateLimiter:
    def test_spacing(self):
        limiter = RateLimiter(0.05)
        start = time.monotonic()
        for _ in range(4):
            limiter.acquire()
        # First call is free, the next three wait one interval each
        assert time.monotonic() - start >= 0.14

    def test_spacing_across_threads(self):
        limiter = RateLimiter(0.05)
        stamps: list[float] = []
        lock = threading.Lock()

        def hit():
            limiter.acquire()
            with lock:
                stamps.append(time.monotonic())

        threads = [threading.Thread(target=hit) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        stamps.sort()
        assert stamps[-1] - stamps[0] >= 0.1

    def test_wait_is_cancellable(self):
        limiter = RateLimiter(10.0)
        limiter.acquire()
        scope = CancelScope()
        scope.cancel()
        with pytest.raises(ScanCancelled):
            limiter.acquire(scope)

    def test_cancelled_scope_is_checked_without_wait(self):
        scope = CancelScope()
        scope.cancel()
        with pytest.raises(ScanCancelled):
            RateLimiter(0.0).acquire(scope)
