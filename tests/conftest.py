"""Shared test fixtures."""

from __future__ import annotations

import threading

import pytest

from deepvalue.data.errors import FetchError
from deepvalue.data.models import RawMarketData
from deepvalue.engine.cancel import CancelScope


def make_prices(n: int = 60, start: float = 100.0, step: float = -0.5) -> list[float]:
    """Linear price path with a small zig-zag so gains and losses both occur."""
    return [start + step * i + (0.3 if i % 2 else -0.3) for i in range(n)]


def make_raw(symbol: str = "AAPL", price: float = 100.0, n: int = 60, **overrides) -> RawMarketData:
    closes = make_prices(n, start=price * 1.2, step=-price * 0.2 / max(n - 1, 1))
    fields = dict(
        symbol=symbol,
        name=f"{symbol} Inc.",
        price=price,
        change=-1.0,
        change_percent=-1.0,
        volume=1_000_000,
        exchange="NasdaqGS",
        eps=8.0,
        book_value=80.0,
        closes=closes,
        highs=[c + 1.0 for c in closes],
        lows=[c - 1.0 for c in closes],
    )
    fields.update(overrides)
    return RawMarketData(**fields)


class FakeSource:
    """In-memory ``DataSource``.

    Symbols in ``fail`` raise a ``FetchError``; symbols in ``block`` wait on
    the scope until it is cancelled or expires.
    """

    def __init__(
        self,
        data: dict[str, RawMarketData] | None = None,
        fail: set[str] | None = None,
        block: set[str] | None = None,
        delay: float = 0.0,
    ):
        self.data = data or {}
        self.fail = fail or set()
        self.block = block or set()
        self.delay = delay
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def fetch_complete(self, scope: CancelScope, symbol: str) -> RawMarketData:
        with self._lock:
            self.calls.append(symbol)
        if self.delay:
            scope.sleep(self.delay)
        if symbol in self.block:
            while True:
                scope.sleep(0.01)
        if symbol in self.fail:
            raise FetchError(f"HTTP 500 for {symbol}")
        return self.data.get(symbol) or make_raw(symbol)


@pytest.fixture
def fake_source():
    return FakeSource()
