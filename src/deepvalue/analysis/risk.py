"""Risk metrics: ATR-based stop-loss/take-profit, volatility and drawdown."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

TRADING_DAYS = 252
DEFAULT_ATR_PCT = 0.02  # synthetic ATR when none is available
DEFAULT_SUPPORT_STOP = 0.95


@dataclass
class RiskReward:
    stop_loss: float
    take_profit: float
    risk_percent: float
    reward_percent: float
    risk_ratio: float  # reward : risk


def calculate_sltp(
    price: float,
    atr_value: float,
    sl_multiplier: float = 2.0,
    tp_multiplier: float = 3.0,
) -> RiskReward:
    """Volatility-adjusted stop-loss and take-profit levels.

    Falls back to 2% of price as the ATR when none is available. All values
    are rounded to 2 decimals.
    """
    if atr_value <= 0:
        atr_value = price * DEFAULT_ATR_PCT

    stop_loss = price - atr_value * sl_multiplier
    take_profit = price + atr_value * tp_multiplier

    if price > 0:
        risk_percent = (price - stop_loss) / price * 100
        reward_percent = (take_profit - price) / price * 100
    else:
        risk_percent = reward_percent = 0.0

    risk_ratio = reward_percent / risk_percent if risk_percent > 0 else 0.0

    return RiskReward(
        stop_loss=round(stop_loss, 2),
        take_profit=round(take_profit, 2),
        risk_percent=round(risk_percent, 2),
        reward_percent=round(reward_percent, 2),
        risk_ratio=round(risk_ratio, 2),
    )


def calculate_support_sl(price: float, supports: Sequence[float], buffer: float) -> float:
    """Stop-loss just under the nearest support below price (5% below if none)."""
    nearest = max((s for s in supports if s < price), default=0.0)
    if nearest > 0:
        return nearest * (1 - buffer)
    return price * DEFAULT_SUPPORT_STOP


def position_size(account_size: float, risk_pct: float, entry: float, stop_loss: float) -> int:
    """Shares to buy so that hitting the stop loses ``risk_pct`` of the account."""
    risk_per_share = abs(entry - stop_loss)
    if risk_per_share <= 0:
        return 0
    risk_amount = account_size * (risk_pct / 100)
    return int(math.floor(risk_amount / risk_per_share))


def max_drawdown(prices: Sequence[float]) -> float:
    """Largest peak-to-trough decline, as a percentage."""
    if len(prices) < 2:
        return 0.0

    values = np.asarray(prices, dtype=float)
    peaks = np.maximum.accumulate(values)
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(peaks > 0, (peaks - values) / peaks, 0.0)
    return float(drawdowns.max()) * 100


def volatility(prices: Sequence[float]) -> float:
    """Annualized volatility of simple daily returns, as a percentage."""
    if len(prices) < 2:
        return 0.0

    values = np.asarray(prices, dtype=float)
    previous = values[:-1]
    with np.errstate(divide="ignore", invalid="ignore"):
        returns = np.where(previous != 0, np.diff(values) / previous, 0.0)
    return float(returns.std() * math.sqrt(TRADING_DAYS) * 100)


def risk_score(volatility_pct: float, drawdown_pct: float, beta: float) -> float:
    """Risk score 0-100, higher is riskier."""
    score = 0.0

    if volatility_pct > 60:
        score += 40
    elif volatility_pct > 40:
        score += 30
    elif volatility_pct > 25:
        score += 20
    elif volatility_pct > 15:
        score += 10

    if drawdown_pct > 50:
        score += 40
    elif drawdown_pct > 30:
        score += 30
    elif drawdown_pct > 20:
        score += 20
    elif drawdown_pct > 10:
        score += 10

    if beta > 2.0:
        score += 20
    elif beta > 1.5:
        score += 15
    elif beta > 1.0:
        score += 10
    elif beta > 0.5:
        score += 5

    return score
