"""Bounded worker pool that fetches market data for many symbols in parallel.

Workers pull symbols from a pre-filled work queue and push one
``RawMarketData`` per symbol onto a result queue. A closer thread waits for
every worker to exit and then marks the end of the stream. Only one fetch
generation runs per pool: starting a new one cancels the previous one.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Callable, Iterator

from deepvalue.data.models import RawMarketData
from deepvalue.data.provider import DataSource
from deepvalue.engine.cancel import CancelScope, ScanCancelled

logger = logging.getLogger(__name__)

_END = object()


class ResultStream:
    """Iterator over one generation's results, in completion order."""

    def __init__(self, results: queue.Queue, total: int, scope: CancelScope):
        self._results = results
        self._done = False
        self.total = total
        self.scope = scope

    def __iter__(self) -> Iterator[RawMarketData]:
        return self

    def __next__(self) -> RawMarketData:
        if self._done:
            raise StopIteration
        item = self._results.get()
        if item is _END:
            self._done = True
            raise StopIteration
        return item

    @property
    def closed(self) -> bool:
        return self._done


class FetchPool:
    """Fetch ``RawMarketData`` for a batch of symbols with ``workers`` threads."""

    def __init__(self, source: DataSource, workers: int = 10, fetch_timeout: float | None = 15.0):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self.source = source
        self.workers = workers
        self.fetch_timeout = fetch_timeout
        self._lock = threading.Lock()
        self._scope: CancelScope | None = None
        self._closer: threading.Thread | None = None

    @property
    def active(self) -> bool:
        with self._lock:
            return self._closer is not None and self._closer.is_alive()

    def start(self, symbols: list[str]) -> ResultStream:
        """Begin fetching ``symbols`` and return the stream of results."""
        work: queue.Queue[str] = queue.Queue(maxsize=len(symbols))
        for sym in symbols:
            work.put_nowait(sym)
        # Sized to the batch so workers never block on a slow consumer
        results: queue.Queue = queue.Queue(maxsize=len(symbols) + 1)

        with self._lock:
            if self._scope is not None:
                self._scope.cancel()
            scope = CancelScope()
            self._scope = scope

            n_workers = min(self.workers, len(symbols))
            threads = [
                threading.Thread(
                    target=self._worker,
                    args=(scope, work, results),
                    name=f"fetch-worker-{i}",
                    daemon=True,
                )
                for i in range(n_workers)
            ]
            for t in threads:
                t.start()

            closer = threading.Thread(
                target=self._close_when_done,
                args=(threads, results, len(symbols)),
                name="fetch-closer",
                daemon=True,
            )
            closer.start()
            self._closer = closer

        logger.info("Fetching %d symbols with %d workers", len(symbols), n_workers)
        return ResultStream(results, len(symbols), scope)

    def _worker(self, scope: CancelScope, work: queue.Queue, results: queue.Queue) -> None:
        while not scope.cancelled:
            try:
                symbol = work.get_nowait()
            except queue.Empty:
                return

            try:
                data = self.source.fetch_complete(scope.with_timeout(self.fetch_timeout), symbol)
            except ScanCancelled:
                return
            except Exception as e:
                logger.debug("Fetch failed for %s: %s", symbol, e)
                data = RawMarketData.failed(symbol, str(e) or type(e).__name__)

            if scope.cancelled:
                return
            results.put(data)

    @staticmethod
    def _close_when_done(threads: list[threading.Thread], results: queue.Queue, total: int) -> None:
        start = time.monotonic()
        for t in threads:
            t.join()
        results.put(_END)
        logger.info("Fetch finished: %d symbols in %.1fs", total, time.monotonic() - start)

    def stop(self) -> None:
        """Cancel the running generation; workers drop the symbol in hand."""
        with self._lock:
            if self._scope is not None:
                self._scope.cancel()

    def fetch_all(
        self,
        symbols: list[str],
        on_progress: Callable[[int, int], None] | None = None,
    ) -> list[RawMarketData]:
        """Fetch everything and block until the stream closes."""
        out: list[RawMarketData] = []
        total = len(symbols)
        for data in self.start(symbols):
            out.append(data)
            if on_progress:
                on_progress(len(out), total)
        return out
