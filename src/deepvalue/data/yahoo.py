"""Yahoo Finance chart API client over httpx.

The v7 quote endpoint needs a crumb/cookie handshake, so both the current
quote and the daily bars come from the public v8 chart endpoint: the quote
from the ``meta`` block of a 1-day intraday chart, the bars from a daily chart
over the requested window.
"""

from __future__ import annotations

import json
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass, field

import httpx
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from deepvalue.config import ScreenerConfig
from deepvalue.data.errors import FetchError, FetchTimeout, RateLimitedError
from deepvalue.data.models import RawMarketData
from deepvalue.data.rate_limit import RateLimiter
from deepvalue.engine.cancel import CancelScope, ScanCancelled

logger = logging.getLogger(__name__)

_CHART_PATH = "/v8/finance/chart/{symbol}"
_SECONDS_PER_DAY = 86_400
_POLL_INTERVAL = 0.1  # how often a waiting worker re-checks its scope


@dataclass
class ConnectionReport:
    """Outcome of :meth:`YahooChartSource.check_connection`."""

    connected: bool = False
    latency: float = 0.0
    http_status: int = 0
    quote_works: bool = False
    chart_works: bool = False
    error: str = ""
    details: list[str] = field(default_factory=list)


class YahooChartSource:
    """Rate-limited, cancellable Yahoo chart client implementing ``DataSource``."""

    def __init__(
        self,
        config: ScreenerConfig | None = None,
        client: httpx.Client | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self._config = config or ScreenerConfig()
        self._client = client or httpx.Client(
            base_url=self._config.base_url,
            headers=self._default_headers(),
            follow_redirects=True,
        )
        self._limiter = rate_limiter or RateLimiter(self._config.rate_limit_interval)

    def _default_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self._config.user_agent,
            "Accept": "application/json,text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Accept-Encoding": "gzip, deflate",
            "Cache-Control": "no-cache",
        }

    def close(self) -> None:
        self._client.close()

    # ── Transport ────────────────────────────────────────────────────────

    def _request(self, scope: CancelScope, path: str, params: dict) -> dict:
        """One paced GET, reading the body in chunks so cancellation is prompt."""
        self._limiter.acquire(scope)
        timeout = scope.remaining(self._config.request_timeout)

        try:
            with self._client.stream("GET", path, params=params, timeout=timeout) as resp:
                if resp.status_code == 429:
                    raise RateLimitedError("rate limited (429)")
                if resp.status_code != 200:
                    raise FetchError(f"HTTP {resp.status_code}")
                chunks: list[bytes] = []
                for chunk in resp.iter_bytes():
                    scope.check()
                    chunks.append(chunk)
        except httpx.TimeoutException:
            if scope.cancelled:
                raise ScanCancelled()
            if scope.expired:
                raise FetchTimeout("fetch timed out")
            raise

        try:
            return json.loads(b"".join(chunks))
        except ValueError as e:
            raise FetchError(f"JSON parse error: {e}") from e

    def _get_json(self, scope: CancelScope, path: str, params: dict) -> dict:
        """GET with retries on transient transport errors."""
        retrying = Retrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(max(1, self._config.max_retries)),
            wait=wait_exponential(multiplier=0.5, max=4),
            sleep=scope.sleep,
            reraise=True,
        )
        try:
            return retrying(self._request, scope, path, params)
        except httpx.TransportError as e:
            raise FetchError(f"{type(e).__name__}: {e}") from e

    @staticmethod
    def _chart_result(data: dict, symbol: str) -> dict:
        chart = data.get("chart") or {}
        error = chart.get("error")
        if error:
            raise FetchError(f"{error.get('code', 'error')}: {error.get('description', '')}")
        results = chart.get("result") or []
        if not results:
            raise FetchError(f"no data for symbol {symbol}")
        return results[0]

    # ── Fetches ──────────────────────────────────────────────────────────

    def fetch_quote(self, scope: CancelScope, symbol: str) -> RawMarketData:
        """Current price, change and 52-week range from the chart meta block."""
        data = self._get_json(
            scope,
            _CHART_PATH.format(symbol=symbol),
            {"range": "1d", "interval": "1m", "includePrePost": "false"},
        )
        meta = self._chart_result(data, symbol).get("meta") or {}

        price = float(meta.get("regularMarketPrice") or 0.0)
        previous_close = float(meta.get("previousClose") or meta.get("chartPreviousClose") or 0.0)
        change = price - previous_close if previous_close else 0.0
        change_percent = change / previous_close * 100 if previous_close > 0 else 0.0

        return RawMarketData(
            symbol=symbol,
            name=meta.get("shortName") or meta.get("longName") or symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            volume=int(meta.get("regularMarketVolume") or 0),
            fifty_two_week_high=float(meta.get("fiftyTwoWeekHigh") or 0.0),
            fifty_two_week_low=float(meta.get("fiftyTwoWeekLow") or 0.0),
            market_state=meta.get("marketState") or "",
            exchange=meta.get("fullExchangeName") or meta.get("exchangeName") or "",
        )

    def fetch_historical(
        self, scope: CancelScope, symbol: str, days: int
    ) -> tuple[list[float], list[float], list[float]]:
        """Daily (closes, highs, lows), skipping bars with missing values."""
        end = int(time.time())
        start = end - days * _SECONDS_PER_DAY
        data = self._get_json(
            scope,
            _CHART_PATH.format(symbol=symbol),
            {"period1": start, "period2": end, "interval": "1d"},
        )
        quotes = (self._chart_result(data, symbol).get("indicators") or {}).get("quote") or []
        if not quotes:
            raise FetchError(f"no quote data in chart for {symbol}")

        bars = quotes[0]
        closes: list[float] = []
        highs: list[float] = []
        lows: list[float] = []
        for close, high, low in zip(
            bars.get("close") or [], bars.get("high") or [], bars.get("low") or []
        ):
            if close is None or high is None or low is None:
                continue
            closes.append(float(close))
            highs.append(float(high))
            lows.append(float(low))
        return closes, highs, lows

    def _wait(self, scope: CancelScope, future: Future):
        """Result of ``future``, giving up as soon as ``scope`` is cancelled or expires.

        A blocked socket read never sees the scope, so the caller polls it here
        and walks away from the request instead.
        """
        while True:
            try:
                return future.result(timeout=_POLL_INTERVAL)
            except FutureTimeout:
                scope.check()

    def fetch_complete(self, scope: CancelScope, symbol: str) -> RawMarketData:
        """Quote and history fetched in parallel, then merged.

        A failed quote fails the symbol; a failed history leaves the bars empty.
        """
        start = time.monotonic()
        symbol = symbol.strip().upper()

        pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix=f"yahoo-{symbol}")
        try:
            quote_future = pool.submit(self.fetch_quote, scope, symbol)
            history_future = pool.submit(
                self.fetch_historical, scope, symbol, self._config.history_days
            )

            try:
                quote = self._wait(scope, quote_future)
            except ScanCancelled:
                raise
            except Exception as e:
                return RawMarketData.failed(symbol, str(e), time.monotonic() - start)

            closes: list[float] = []
            highs: list[float] = []
            lows: list[float] = []
            try:
                closes, highs, lows = self._wait(scope, history_future)
            except ScanCancelled:
                raise
            except Exception as e:
                logger.debug("History unavailable for %s: %s", symbol, e)
        finally:
            # Requests still in flight finish against their own timeout
            pool.shutdown(wait=False, cancel_futures=True)

        return quote.model_copy(
            update={
                "closes": closes,
                "highs": highs,
                "lows": lows,
                "fetch_duration": time.monotonic() - start,
            }
        )

    # ── Diagnostics ──────────────────────────────────────────────────────

    def market_status(self, symbol: str = "SPY") -> str:
        """Market state of a liquid proxy symbol, or ``UNKNOWN``."""
        try:
            quote = self.fetch_quote(CancelScope().with_timeout(5.0), symbol)
        except (FetchError, ScanCancelled):
            return "UNKNOWN"
        return quote.market_state or "UNKNOWN"

    def check_connection(self, symbol: str = "AAPL") -> ConnectionReport:
        """Step through HTTP, quote and chart checks, recording each outcome."""
        report = ConnectionReport()
        start = time.monotonic()
        scope = CancelScope().with_timeout(self._config.request_timeout * 3)

        report.details.append("Testing HTTP connectivity...")
        try:
            resp = self._client.get(
                _CHART_PATH.format(symbol=symbol),
                params={"range": "1d", "interval": "1m"},
                timeout=self._config.request_timeout,
            )
        except httpx.HTTPError as e:
            report.error = f"HTTP connection failed: {e}"
            report.details.append(f"FAIL: {e}")
            return report

        report.http_status = resp.status_code
        report.details.append(f"HTTP Status: {resp.status_code}")
        if resp.status_code == 429:
            report.error = "Rate limited by Yahoo (429). Try again in a few minutes."
            report.details.append("FAIL: Rate limited (429)")
            report.latency = time.monotonic() - start
            return report

        report.details.append(f"Testing Quote API ({symbol})...")
        try:
            quote = self.fetch_quote(scope, symbol)
            if quote.price > 0:
                report.quote_works = True
                report.details.append(f"OK Quote: {symbol} = ${quote.price:,.2f}")
            else:
                report.details.append("FAIL Quote: no price data")
        except FetchError as e:
            report.details.append(f"FAIL Quote: {e}")

        report.details.append(f"Testing Chart API ({symbol})...")
        try:
            closes, _, _ = self.fetch_historical(scope, symbol, 7)
            if closes:
                report.chart_works = True
                report.details.append(f"OK Chart: {len(closes)} bars")
            else:
                report.details.append("FAIL Chart: no data")
        except FetchError as e:
            report.details.append(f"FAIL Chart: {e}")

        report.latency = time.monotonic() - start
        report.connected = report.quote_works and report.chart_works
        if report.connected:
            report.details.append(f"Total time: {report.latency:.2f}s")
            report.details.append("Connection OK!")
        else:
            report.error = "Yahoo Finance API not responding correctly"
            report.details.append("Connection FAILED!")
        return report
