"""Data source protocol for the fetch pool."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from deepvalue.data.models import RawMarketData

if TYPE_CHECKING:
    from deepvalue.engine.cancel import CancelScope


class DataSource(Protocol):
    """Anything that can produce a quote plus daily bars for a symbol.

    Implementations must be safe to call from many threads at once, pace their
    own outbound requests, and abort promptly when ``scope`` is cancelled
    (raising ``ScanCancelled``). A quote failure is returned as
    ``RawMarketData.failed``; a history failure degrades to quote-only data.
    """

    def fetch_complete(self, scope: CancelScope, symbol: str) -> RawMarketData:
        ...
