"""Tests for the yfinance-backed data source (yfinance mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from deepvalue.config import ScreenerConfig
from deepvalue.core.enums import SourceKind
from deepvalue.data.factory import build_source
from deepvalue.data.yahoo import YahooChartSource
from deepvalue.data.yfinance_source import YFinanceSource
from deepvalue.engine.cancel import CancelScope, ScanCancelled

_INFO = {
    "currentPrice": 50.0,
    "previousClose": 52.0,
    "shortName": "Intel Corp",
    "marketCap": 210_000_000_000,
    "trailingPE": 18.5,
    "trailingEps": 2.7,
    "bookValue": 24.0,
    "dividendYield": 1.2,
    "fiftyTwoWeekHigh": 68.0,
    "fiftyTwoWeekLow": 29.0,
    "exchange": "NMS",
    "volume": 40_000_000,
}


def _make_config(**overrides) -> ScreenerConfig:
    defaults = dict(_env_file=None, rate_limit_interval=0.0)
    defaults.update(overrides)
    return ScreenerConfig(**defaults)


def _history_df(n: int = 30) -> pd.DataFrame:
    closes = [50.0 + i * 0.1 for i in range(n)]
    df = pd.DataFrame(
        {
            "Open": closes,
            "High": [c + 1 for c in closes],
            "Low": [c - 1 for c in closes],
            "Close": closes,
            "Volume": [1_000] * n,
        },
        index=pd.bdate_range(end="2025-06-13", periods=n),
    )
    df.iloc[3, df.columns.get_loc("Close")] = float("nan")
    return df


def _mock_ticker(info=None, history=None, history_error=None) -> MagicMock:
    ticker = MagicMock()
    ticker.info = _INFO if info is None else info
    if history_error:
        ticker.history.side_effect = history_error
    else:
        ticker.history.return_value = _history_df() if history is None else history
    return ticker


class TestYFinanceSource:
    @patch("deepvalue.data.yfinance_source.yf.Ticker")
    def test_quote_fundamentals_and_history(self, mock_ticker_cls):
        mock_ticker_cls.return_value = _mock_ticker()

        data = YFinanceSource(_make_config()).fetch_complete(CancelScope(), "intc")

        mock_ticker_cls.assert_called_once_with("INTC")
        assert data.ok
        assert data.symbol == "INTC"
        assert data.name == "Intel Corp"
        assert data.price == 50.0
        assert data.change == pytest.approx(-2.0)
        assert data.pe_ratio == 18.5
        assert data.eps == 2.7
        assert data.book_value == 24.0
        assert data.market_cap == 210_000_000_000
        # Row with a NaN close is dropped
        assert len(data.closes) == 29
        assert len(data.highs) == len(data.lows) == 29

    @patch("deepvalue.data.yfinance_source.yf.Ticker")
    def test_missing_price_fails_symbol(self, mock_ticker_cls):
        mock_ticker_cls.return_value = _mock_ticker(info={"shortName": "Delisted"})

        data = YFinanceSource(_make_config()).fetch_complete(CancelScope(), "GONE")

        assert not data.ok
        assert "no data" in data.error
        mock_ticker_cls.return_value.history.assert_not_called()

    @patch("deepvalue.data.yfinance_source.yf.Ticker")
    def test_history_failure_degrades(self, mock_ticker_cls):
        mock_ticker_cls.return_value = _mock_ticker(history_error=RuntimeError("timeout"))

        data = YFinanceSource(_make_config()).fetch_complete(CancelScope(), "INTC")

        assert data.ok
        assert data.price == 50.0
        assert data.closes == []

    @patch("deepvalue.data.yfinance_source.yf.Ticker")
    def test_empty_history_degrades(self, mock_ticker_cls):
        mock_ticker_cls.return_value = _mock_ticker(history=pd.DataFrame())

        data = YFinanceSource(_make_config()).fetch_complete(CancelScope(), "INTC")

        assert data.ok
        assert data.closes == []

    @patch("deepvalue.data.yfinance_source.yf.Ticker")
    def test_cancelled_scope_propagates(self, mock_ticker_cls):
        mock_ticker_cls.return_value = _mock_ticker()
        scope = CancelScope()
        scope.cancel()

        with pytest.raises(ScanCancelled):
            YFinanceSource(_make_config()).fetch_complete(scope, "INTC")


def test_build_source_by_config():
    assert isinstance(build_source(_make_config(source=SourceKind.YFINANCE)), YFinanceSource)
    direct = build_source(_make_config())
    assert isinstance(direct, YahooChartSource)
    direct.close()
