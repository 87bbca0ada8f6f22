"""Tests for metric calculation and confluence scoring."""

from __future__ import annotations

import pytest
from conftest import make_raw

from deepvalue.core.enums import ResultKind
from deepvalue.data.models import RawMarketData
from deepvalue.screener.models import ScreenResult
from deepvalue.screener.scoring import (
    calculate_metrics,
    confluence_score,
    risk_adjusted_score,
    score_to_grade,
    technical_score,
)


class TestCalculateMetrics:
    def test_error_short_circuits(self):
        data = RawMarketData(
            symbol="BAD",
            name="Bad Co",
            price=50.0,
            eps=5.0,
            book_value=10.0,
            closes=[1.0] * 60,
            error="HTTP 404",
        )
        result = calculate_metrics(data)

        assert result.kind == ResultKind.ERRORED
        assert result.has_error is True
        assert result.error_message == "HTTP 404"
        assert result.name == "Bad Co"
        assert result.price == 0.0
        assert result.rsi == 0.0
        assert result.technical_score == 0.0
        assert result.valuation_score == 0.0
        assert result.risk_score == 0.0
        assert result.confluence_score == 0.0

    def test_full_history(self):
        result = calculate_metrics(make_raw("AAPL", price=100.0, n=60))

        assert result.kind == ResultKind.SCORED
        assert not result.has_error
        assert 0 < result.rsi < 50
        assert result.atr > 0
        assert result.sma_20 > 0
        assert result.sma_50 > 0
        assert result.bb_lower < result.bb_middle < result.bb_upper
        assert result.pbv == pytest.approx(100.0 / 80.0)
        assert result.graham_number > 0
        assert result.volatility > 0
        assert result.historical_prices == make_raw("AAPL", price=100.0, n=60).closes
        assert 0 <= result.confluence_score <= 100

    def test_short_history_leaves_indicators_unset(self):
        result = calculate_metrics(make_raw(n=10))

        assert result.rsi == 0.0
        assert result.atr == 0.0
        assert result.sma_20 == 0.0
        assert result.volatility == 0.0
        assert result.is_oversold is False
        # No ATR: stops come from the 2% fallback
        assert result.stop_loss == 96.0
        assert result.take_profit == 106.0

    def test_no_history_at_all(self):
        result = calculate_metrics(make_raw(n=0, closes=[], highs=[], lows=[]))
        assert result.kind == ResultKind.SCORED
        assert result.rsi == 0.0
        assert result.macd == 0.0

    def test_missing_book_value_leaves_pbv_unset(self):
        result = calculate_metrics(make_raw(book_value=0.0))
        assert result.pbv == 0.0
        assert result.graham_number == 0.0
        assert result.is_undervalued is False

    def test_missing_fundamentals_score_cheapest_buckets(self):
        # Quote-only data: P/B 0 scores 35, P/E 0 scores 30, no Graham upside
        result = calculate_metrics(make_raw(eps=0.0, book_value=0.0, pe_ratio=0.0))
        assert result.valuation_score == 65.0

    def test_pe_not_derived_from_eps(self):
        result = calculate_metrics(make_raw(price=100.0, eps=10.0, pe_ratio=0.0))
        assert result.pe_ratio == 0.0

    def test_fetched_pe_preferred(self):
        result = calculate_metrics(make_raw(price=100.0, eps=10.0, pe_ratio=12.5))
        assert result.pe_ratio == 12.5

    def test_fetched_pe_bucket(self):
        # P/B 1.25 scores 25, Graham upside ~34% scores 30, P/E 22 scores 10
        result = calculate_metrics(make_raw(price=100.0, eps=10.0, book_value=80.0, pe_ratio=22.0))
        assert result.valuation_score == 65.0

    def test_negative_earnings(self):
        result = calculate_metrics(make_raw(eps=-2.0, pe_ratio=0.0))
        assert result.pe_ratio == 0.0
        assert result.graham_number == 0.0
        assert result.is_undervalued is False

    def test_deep_value_scores_high(self):
        # Falling price, P/B 0.5, Graham upside > 50%
        result = calculate_metrics(make_raw(price=40.0, eps=6.0, book_value=80.0))
        assert result.is_undervalued
        assert result.valuation_score >= 70
        assert result.confluence_score >= 50


class TestSubScores:
    def test_technical_score_buckets(self):
        r = ScreenResult(symbol="X", rsi=24, price=85, sma_20=100, risk_ratio=3.0)
        assert technical_score(r) == 50 + 30 + 20

    def test_technical_score_ignores_unknown_rsi(self):
        r = ScreenResult(symbol="X", rsi=0, price=100, sma_20=0, risk_ratio=0.5)
        assert technical_score(r) == 0

    @pytest.mark.parametrize(
        "rsi,expected",
        [(24, 50), (29, 45), (34, 40), (39, 30), (49, 20), (59, 10), (60, 0)],
    )
    def test_rsi_buckets(self, rsi, expected):
        assert technical_score(ScreenResult(symbol="X", rsi=rsi)) == expected

    @pytest.mark.parametrize("price,expected", [(89, 30), (94, 20), (99, 10), (101, 0)])
    def test_sma_discount_buckets(self, price, expected):
        assert technical_score(ScreenResult(symbol="X", price=price, sma_20=100)) == expected

    @pytest.mark.parametrize(
        "vol,expected",
        [(0, 100), (19.9, 100), (25, 80), (35, 60), (45, 40), (55, 20), (60, 10), (90, 10)],
    )
    def test_risk_adjusted_score(self, vol, expected):
        assert risk_adjusted_score(vol) == expected


class TestConfluence:
    def test_weighted_sum(self):
        r = ScreenResult(symbol="X", technical_score=50, valuation_score=50, risk_score=50)
        assert confluence_score(r) == 50.0

    def test_bonuses(self):
        r = ScreenResult(
            symbol="X",
            technical_score=0,
            valuation_score=0,
            risk_score=0,
            is_oversold=True,
            is_undervalued=True,
            pbv=0.8,
            graham_upside=60,
            risk_ratio=2.5,
        )
        assert confluence_score(r) == 25.0

    def test_clamped_at_100(self):
        r = ScreenResult(
            symbol="X",
            technical_score=100,
            valuation_score=100,
            risk_score=100,
            is_oversold=True,
            is_undervalued=True,
            pbv=0.5,
            graham_upside=80,
            risk_ratio=3,
        )
        assert confluence_score(r) == 100.0

    def test_rounded(self):
        r = ScreenResult(symbol="X", technical_score=33.333, valuation_score=0, risk_score=0)
        assert confluence_score(r) == 10.0


@pytest.mark.parametrize(
    "score,grade",
    [
        (95, "A+"),
        (90, "A+"),
        (86, "A"),
        (80, "A-"),
        (77, "B+"),
        (70, "B"),
        (66, "B-"),
        (60, "C+"),
        (55, "C"),
        (50, "C-"),
        (45, "D"),
        (44.9, "F"),
        (0, "F"),
    ],
)
def test_score_to_grade(score, grade):
    assert score_to_grade(score) == grade


def test_grade_property():
    assert ScreenResult(symbol="X", confluence_score=72).grade == "B"
