"""Screening engine: fetch pool → scoring → filter → pin overlay → ranking."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterator

from deepvalue.core.enums import ResultKind
from deepvalue.engine.pool import FetchPool
from deepvalue.screener.models import (
    FilterCriteria,
    PinSet,
    ScanProgress,
    ScreenResult,
    normalize_symbol,
)
from deepvalue.screener.scoring import calculate_metrics

logger = logging.getLogger(__name__)


class ScreeningEngine:
    """Runs scans and owns the current result set.

    All mutable state (results, counters, progress) is guarded by one plain
    ``threading.Lock`` rather than a reader-writer lock, so concurrent readers
    serialize with each other. Critical sections are short and readers always
    receive deep copies. Each scan takes a new generation number; a scan that
    has been superseded stops writing.
    """

    def __init__(self, pool: FetchPool, pins: PinSet, criteria: FilterCriteria | None = None):
        self.pool = pool
        self.pins = pins
        self._criteria = criteria or FilterCriteria()
        self._lock = threading.Lock()
        self._results: list[ScreenResult] = []
        self._progress = ScanProgress()
        self._scanning = False
        self._generation = 0

    # ── Criteria ──────────────────────────────────────────────────────────

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    def set_criteria(self, criteria: FilterCriteria) -> None:
        """Replace the filter; applies from the next scan on."""
        self._criteria = criteria

    def passes_filter(self, result: ScreenResult) -> bool:
        c = self._criteria
        if result.has_error or result.kind != ResultKind.SCORED:
            return False
        # RSI and P/B of 0 mean "not computed" and never reject
        if (result.rsi < c.min_rsi or result.rsi > c.max_rsi) and result.rsi > 0:
            return False
        if result.pbv > c.max_pbv and result.pbv > 0:
            return False
        if result.graham_upside < c.min_graham_upside:
            return False
        if result.confluence_score < c.min_confluence:
            return False
        if c.only_oversold and not result.is_oversold:
            return False
        if c.only_undervalued and not result.is_undervalued:
            return False
        return True

    # ── Scanning ──────────────────────────────────────────────────────────

    def iter_scan(self, symbols: list[str]) -> Iterator[ScanProgress]:
        """Scan ``symbols``, yielding a progress snapshot per completed symbol.

        Starting another scan supersedes this one: its remaining results are
        dropped and the generator ends without touching the new result set.
        """
        symbols = [normalize_symbol(s) for s in symbols if s.strip()]
        total = len(symbols)
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._results = []
            self._progress = ScanProgress(total=total)
            self._scanning = True

        start = time.monotonic()
        completed = 0
        current = True
        try:
            stream = self.pool.start(symbols) if symbols else iter(())
            for data in stream:
                result = calculate_metrics(data)
                result.is_pinned = self.pins.is_pinned(result.symbol)
                keep = result.is_pinned or self.passes_filter(result)
                completed += 1

                with self._lock:
                    current = generation == self._generation
                    if not current:
                        break
                    progress = self._progress.model_copy()
                    progress.completed = completed
                    progress.current = data.symbol
                    if data.error is not None:
                        progress.error_count += 1
                        progress.last_error = data.error
                        progress.error_symbol = data.symbol
                    else:
                        progress.success_count += 1
                    self._progress = progress
                    if keep:
                        self._results.append(result)

                if data.error is not None:
                    logger.debug("%s: %s", data.symbol, data.error)
                yield progress.model_copy()
        finally:
            current = self._finalize(generation)

        if not current:
            logger.info("Scan of %d symbols superseded by a newer scan", total)
            return

        snapshot = self.progress()
        logger.info(
            "Scan finished in %.1fs: %d ok, %d errors, %d kept",
            time.monotonic() - start,
            snapshot.success_count,
            snapshot.error_count,
            len(self.results()),
        )

    def scan(
        self,
        symbols: list[str],
        on_progress: Callable[[ScanProgress], None] | None = None,
    ) -> list[ScreenResult]:
        """Run a full scan and return the ranked results."""
        for progress in self.iter_scan(symbols):
            if on_progress:
                on_progress(progress)
        return self.results()

    def stop(self) -> None:
        """Cancel the running scan; results collected so far stay readable."""
        self.pool.stop()

    def finalize(self) -> None:
        """Add pinned placeholders and rank the current results.

        Scans do this on completion; call it after abandoning ``iter_scan``
        part way through.
        """
        with self._lock:
            generation = self._generation
        self._finalize(generation)

    def _finalize(self, generation: int) -> bool:
        pinned = [normalize_symbol(s) for s in self.pins.get_all()]
        with self._lock:
            if generation != self._generation:
                return False
            present = {r.symbol for r in self._results}
            for symbol in pinned:
                if symbol not in present:
                    self._results.append(ScreenResult.placeholder(symbol))
                    present.add(symbol)
            self._sort_unlocked()
            self._scanning = False
        return True

    @property
    def is_scanning(self) -> bool:
        with self._lock:
            return self._scanning

    def results(self) -> list[ScreenResult]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._results]

    def progress(self) -> ScanProgress:
        with self._lock:
            return self._progress.model_copy()

    # ── Watchlist overlay ─────────────────────────────────────────────────

    def _sort_unlocked(self) -> None:
        # Two stable passes: by score, then pinned rows to the front
        self._results.sort(key=lambda r: r.confluence_score, reverse=True)
        self._results.sort(key=lambda r: not r.is_pinned)

    def _sort(self) -> None:
        with self._lock:
            self._sort_unlocked()

    def add_to_watchlist(self, symbol: str) -> None:
        """Pin ``symbol``; show a placeholder row when it has no result yet."""
        symbol = normalize_symbol(symbol)
        self.pins.add(symbol)
        with self._lock:
            for r in self._results:
                if r.symbol == symbol:
                    r.is_pinned = True
                    break
            else:
                self._results.append(ScreenResult.placeholder(symbol))
        self._sort()

    def remove_from_watchlist(self, symbol: str) -> None:
        """Unpin ``symbol``; placeholder and errored rows are dropped entirely."""
        symbol = normalize_symbol(symbol)
        self.pins.remove(symbol)
        with self._lock:
            kept: list[ScreenResult] = []
            for r in self._results:
                if r.symbol == symbol:
                    if r.is_placeholder:
                        continue
                    r.is_pinned = False
                kept.append(r)
            self._results = kept
        self._sort()

    def refresh_watchlist(self) -> None:
        """Re-read pin flags from the pin set."""
        with self._lock:
            for r in self._results:
                r.is_pinned = self.pins.is_pinned(r.symbol)
        self._sort()
