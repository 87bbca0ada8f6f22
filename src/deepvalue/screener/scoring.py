"""Turn one symbol's raw market data into a scored ``ScreenResult``.

Confluence = 30% technical + 40% valuation + 30% risk-adjusted, plus bonus
points when independent signals agree, capped at 100.
"""

from __future__ import annotations

from deepvalue.analysis import indicators, risk, valuation
from deepvalue.core.enums import ResultKind
from deepvalue.data.models import RawMarketData
from deepvalue.screener.models import ScreenResult

# ── Weights ───────────────────────────────────────────────────────────────────
TECHNICAL_WEIGHT = 0.30
VALUATION_WEIGHT = 0.40
RISK_WEIGHT = 0.30

OVERSOLD_RSI = 35.0
RSI_PERIOD = 14
ATR_PERIOD = 14
MIN_VOLATILITY_BARS = 10
SL_MULTIPLIER = 2.0
TP_MULTIPLIER = 3.0

_GRADES = [
    (90, "A+"),
    (85, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (45, "D"),
]


def calculate_metrics(data: RawMarketData) -> ScreenResult:
    """Compute every indicator and score for ``data``.

    A fetch that carried an error yields an ERRORED result holding only the
    identity fields; no indicator is computed on it.
    """
    if data.error is not None:
        return ScreenResult(
            symbol=data.symbol,
            name=data.name,
            exchange=data.exchange,
            kind=ResultKind.ERRORED,
            has_error=True,
            error_message=data.error,
        )

    closes = list(data.closes)
    result = ScreenResult(
        symbol=data.symbol,
        name=data.name or data.symbol,
        exchange=data.exchange,
        price=data.price,
        change=data.change,
        change_percent=data.change_percent,
        volume=data.volume,
        market_cap=data.market_cap,
        eps=data.eps,
        book_value=data.book_value,
        dividend_yield=data.dividend_yield,
        historical_prices=closes,
    )

    # Technical
    if len(closes) > RSI_PERIOD:
        result.rsi = indicators.rsi(closes, RSI_PERIOD)
        result.is_oversold = indicators.is_oversold(result.rsi, OVERSOLD_RSI)
    if len(data.highs) > ATR_PERIOD:
        result.atr = indicators.atr(data.highs, data.lows, closes, ATR_PERIOD)
    if len(closes) >= 20:
        result.sma_20 = indicators.sma(closes, 20)
    if len(closes) >= 50:
        result.sma_50 = indicators.sma(closes, 50)

    macd = indicators.macd(closes)
    result.macd = macd.macd
    result.macd_signal = macd.signal
    result.macd_histogram = macd.histogram

    bands = indicators.bollinger_bands(closes)
    result.bb_upper = bands.upper
    result.bb_middle = bands.middle
    result.bb_lower = bands.lower

    # Valuation
    if data.book_value > 0:
        result.pbv = valuation.pbv(data.price, data.book_value)
    if data.eps > 0 and data.book_value > 0:
        result.graham_number = valuation.graham_number(data.eps, data.book_value)
        result.graham_upside = valuation.graham_upside(data.price, result.graham_number)
    result.pe_ratio = data.pe_ratio
    result.is_undervalued = result.pbv > 0 and valuation.is_undervalued(
        result.pbv, result.graham_upside
    )

    # Risk
    levels = risk.calculate_sltp(data.price, result.atr, SL_MULTIPLIER, TP_MULTIPLIER)
    result.stop_loss = levels.stop_loss
    result.take_profit = levels.take_profit
    result.risk_ratio = levels.risk_ratio
    if len(closes) > MIN_VOLATILITY_BARS:
        result.volatility = risk.volatility(closes)
        result.max_drawdown = risk.max_drawdown(closes)

    # Scores; unset P/B and P/E stay 0 and land in the cheapest buckets
    result.technical_score = technical_score(result)
    result.valuation_score = valuation.valuation_score(
        result.pbv, result.graham_upside, result.pe_ratio
    )
    result.risk_score = risk_adjusted_score(result.volatility)
    result.confluence_score = confluence_score(result)
    return result


def technical_score(result: ScreenResult) -> float:
    """RSI (max 50) + discount to SMA20 (max 30) + risk:reward (max 20)."""
    score = 0.0

    if result.rsi > 0:
        if result.rsi < 25:
            score += 50
        elif result.rsi < 30:
            score += 45
        elif result.rsi < 35:
            score += 40
        elif result.rsi < 40:
            score += 30
        elif result.rsi < 50:
            score += 20
        elif result.rsi < 60:
            score += 10

    if result.sma_20 > 0 and result.price < result.sma_20:
        discount = (result.sma_20 - result.price) / result.sma_20 * 100
        if discount > 10:
            score += 30
        elif discount > 5:
            score += 20
        else:
            score += 10

    if result.risk_ratio >= 3.0:
        score += 20
    elif result.risk_ratio >= 2.0:
        score += 15
    elif result.risk_ratio >= 1.5:
        score += 10
    elif result.risk_ratio >= 1.0:
        score += 5

    return score


def risk_adjusted_score(volatility_pct: float) -> float:
    """Lower annualized volatility scores higher."""
    if volatility_pct < 20:
        return 100.0
    if volatility_pct < 30:
        return 80.0
    if volatility_pct < 40:
        return 60.0
    if volatility_pct < 50:
        return 40.0
    if volatility_pct < 60:
        return 20.0
    return 10.0


def confluence_score(result: ScreenResult) -> float:
    score = (
        result.technical_score * TECHNICAL_WEIGHT
        + result.valuation_score * VALUATION_WEIGHT
        + result.risk_score * RISK_WEIGHT
    )

    bonus = 0.0
    if result.is_oversold and result.is_undervalued:
        bonus += 10
    if 0 < result.pbv < 1.0:
        bonus += 5
    if result.graham_upside > 50:
        bonus += 5
    if result.risk_ratio >= 2.5:
        bonus += 5

    return round(min(score + bonus, 100.0), 2)


def score_to_grade(score: float) -> str:
    for threshold, grade in _GRADES:
        if score >= threshold:
            return grade
    return "F"
