"""Yahoo Finance data source via yfinance.

Slower than the direct chart client (``Ticker.info`` is a heavy call) but it
also returns fundamentals: trailing EPS, book value per share, P/E and
dividend yield, which feed the valuation score.
"""

from __future__ import annotations

import logging
import time
from datetime import date, timedelta

import pandas as pd
import yfinance as yf

from deepvalue.config import ScreenerConfig
from deepvalue.data.errors import FetchError
from deepvalue.data.models import RawMarketData
from deepvalue.data.rate_limit import RateLimiter
from deepvalue.engine.cancel import CancelScope, ScanCancelled

logger = logging.getLogger(__name__)


def _num(info: dict, *keys: str) -> float:
    """First non-empty numeric value among ``keys``."""
    for key in keys:
        value = info.get(key)
        if isinstance(value, (int, float)) and not pd.isna(value):
            return float(value)
    return 0.0


class YFinanceSource:
    """``DataSource`` backed by ``yf.Ticker``."""

    def __init__(
        self,
        config: ScreenerConfig | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self._config = config or ScreenerConfig()
        self._limiter = rate_limiter or RateLimiter(self._config.rate_limit_interval)

    def _quote_from_info(self, symbol: str, info: dict) -> RawMarketData:
        price = _num(info, "currentPrice", "regularMarketPrice")
        if price <= 0:
            raise FetchError(f"no data for symbol {symbol}")

        previous_close = _num(info, "previousClose", "regularMarketPreviousClose")
        change = price - previous_close if previous_close else 0.0
        change_percent = change / previous_close * 100 if previous_close > 0 else 0.0

        return RawMarketData(
            symbol=symbol,
            name=str(info.get("shortName") or info.get("longName") or symbol),
            price=price,
            change=change,
            change_percent=change_percent,
            volume=int(_num(info, "regularMarketVolume", "volume")),
            market_cap=int(_num(info, "marketCap")),
            fifty_two_week_high=_num(info, "fiftyTwoWeekHigh"),
            fifty_two_week_low=_num(info, "fiftyTwoWeekLow"),
            market_state=str(info.get("marketState") or ""),
            exchange=str(info.get("fullExchangeName") or info.get("exchange") or ""),
            pe_ratio=_num(info, "trailingPE"),
            eps=_num(info, "trailingEps", "epsTrailingTwelveMonths"),
            book_value=_num(info, "bookValue"),
            dividend_yield=_num(info, "dividendYield"),
        )

    def _history(
        self, scope: CancelScope, ticker: yf.Ticker
    ) -> tuple[list[float], list[float], list[float]]:
        end = date.today() + timedelta(days=1)
        start = end - timedelta(days=self._config.history_days)
        df = ticker.history(
            start=str(start),
            end=str(end),
            interval="1d",
            timeout=scope.remaining(self._config.request_timeout),
        )
        if df is None or df.empty:
            raise FetchError("no history returned")

        df.columns = [c.title() for c in df.columns]
        df = df.dropna(subset=["High", "Low", "Close"])
        return (
            df["Close"].astype(float).tolist(),
            df["High"].astype(float).tolist(),
            df["Low"].astype(float).tolist(),
        )

    def fetch_complete(self, scope: CancelScope, symbol: str) -> RawMarketData:
        start = time.monotonic()
        symbol = symbol.strip().upper()
        ticker = yf.Ticker(symbol)

        try:
            self._limiter.acquire(scope)
            quote = self._quote_from_info(symbol, dict(ticker.info or {}))
            scope.check()
        except ScanCancelled:
            raise
        except Exception as e:
            return RawMarketData.failed(symbol, str(e), time.monotonic() - start)

        closes: list[float] = []
        highs: list[float] = []
        lows: list[float] = []
        try:
            self._limiter.acquire(scope)
            closes, highs, lows = self._history(scope, ticker)
            scope.check()
        except ScanCancelled:
            raise
        except Exception as e:
            logger.debug("History unavailable for %s: %s", symbol, e)

        return quote.model_copy(
            update={
                "closes": closes,
                "highs": highs,
                "lows": lows,
                "fetch_duration": time.monotonic() - start,
            }
        )
