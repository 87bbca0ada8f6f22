"""Valuation metrics: P/B, P/E, Graham Number and the valuation score."""

from __future__ import annotations

import math

# ── Thresholds ────────────────────────────────────────────────────────────────
UNDERVALUED_MAX_PBV = 1.5
UNDERVALUED_MIN_UPSIDE = 20.0
GRAHAM_MULTIPLIER = 22.5


def pbv(price: float, book_value_per_share: float) -> float:
    """Price-to-book ratio; ``math.inf`` when book value is not positive."""
    if book_value_per_share <= 0:
        return math.inf
    return price / book_value_per_share


def pe_ratio(price: float, eps: float) -> float:
    """Price-to-earnings ratio; ``math.inf`` when earnings are not positive."""
    if eps <= 0:
        return math.inf
    return price / eps


def graham_number(eps: float, book_value_per_share: float) -> float:
    """Benjamin Graham's intrinsic value: sqrt(22.5 * EPS * BVPS)."""
    if eps <= 0 or book_value_per_share <= 0:
        return 0.0
    return math.sqrt(GRAHAM_MULTIPLIER * eps * book_value_per_share)


def graham_upside(price: float, graham: float) -> float:
    """Percentage upside from price to the Graham Number."""
    if graham <= 0 or price <= 0:
        return 0.0
    return (graham - price) / price * 100.0


def dividend_yield(annual_dividend: float, price: float) -> float:
    if price <= 0:
        return 0.0
    return annual_dividend / price * 100.0


def is_undervalued(pbv_value: float, upside: float) -> bool:
    return pbv_value < UNDERVALUED_MAX_PBV and upside > UNDERVALUED_MIN_UPSIDE


def valuation_score(pbv_value: float, upside: float, pe: float) -> float:
    """Score valuation 0-100: P/B (35) + Graham upside (35) + P/E (30).

    An infinite P/E (no earnings) earns nothing in the P/E bucket.
    """
    score = 0.0

    if pbv_value < 0.5:
        score += 35
    elif pbv_value < 1.0:
        score += 30
    elif pbv_value < 1.5:
        score += 25
    elif pbv_value < 2.0:
        score += 15
    elif pbv_value < 3.0:
        score += 5

    if upside > 50:
        score += 35
    elif upside > 30:
        score += 30
    elif upside > 20:
        score += 25
    elif upside > 10:
        score += 15
    elif upside > 0:
        score += 5

    if not math.isinf(pe):
        if pe < 10:
            score += 30
        elif pe < 15:
            score += 25
        elif pe < 20:
            score += 20
        elif pe < 25:
            score += 10

    return score
