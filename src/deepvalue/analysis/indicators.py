"""Technical indicators over daily price series.

Every function takes prices ordered oldest → newest and guards against short
history by returning a neutral or zero value instead of raising, so partial
data (a quote without enough bars) never breaks scoring.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from deepvalue.core.enums import Crossover

# ── Defaults ──────────────────────────────────────────────────────────────────
NEUTRAL_RSI = 50.0
SQUEEZE_LOOKBACK = 50  # prior band windows averaged for the squeeze test
SQUEEZE_RATIO = 0.8
BREAKOUT_PROXIMITY = 0.02
MIN_SR_BARS = 10


@dataclass
class MACDResult:
    macd: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0
    crossover: Crossover = Crossover.NONE


@dataclass
class BollingerResult:
    upper: float = 0.0
    middle: float = 0.0
    lower: float = 0.0
    percent_b: float = 0.0
    width: float = 0.0
    squeeze: bool = False
    breakout: bool = False


@dataclass
class SupportResistance:
    support: list[float] = field(default_factory=list)
    resistance: list[float] = field(default_factory=list)


def rsi(prices: Sequence[float], period: int = 14) -> float:
    """Relative Strength Index with Wilder's smoothing.

    Returns 50.0 when there are fewer than ``period + 1`` prices and 100.0
    when the average loss is exactly zero.
    """
    if len(prices) < period + 1:
        return NEUTRAL_RSI

    deltas = np.diff(np.asarray(prices, dtype=float))
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas > 0, 0.0, -deltas)

    avg_gain = float(gains[:period].mean())
    avg_loss = float(losses[:period].mean())

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return float(100.0 - 100.0 / (1.0 + rs))


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes: Sequence[float],
    period: int = 14,
) -> float:
    """Average True Range, seeded with a simple mean then Wilder-smoothed."""
    if min(len(highs), len(lows), len(closes)) < period + 1:
        return 0.0

    n = min(len(highs), len(lows), len(closes))
    high = np.asarray(highs[:n], dtype=float)
    low = np.asarray(lows[:n], dtype=float)
    close = np.asarray(closes[:n], dtype=float)

    true_ranges = np.empty(n)
    # No previous close for the first bar
    true_ranges[0] = high[0] - low[0]
    prev_close = close[:-1]
    true_ranges[1:] = np.maximum.reduce(
        [
            high[1:] - low[1:],
            np.abs(high[1:] - prev_close),
            np.abs(low[1:] - prev_close),
        ]
    )

    value = float(true_ranges[:period].mean())
    for tr in true_ranges[period:]:
        value = (value * (period - 1) + tr) / period
    return value


def sma(prices: Sequence[float], period: int) -> float:
    """Simple moving average of the last ``period`` prices."""
    if period <= 0 or len(prices) < period:
        return 0.0
    return float(np.mean(np.asarray(prices[-period:], dtype=float)))


def ema(prices: Sequence[float], period: int) -> float:
    """Exponential moving average, seeded with the SMA of the first ``period`` prices."""
    if period <= 0 or len(prices) < period:
        return 0.0

    multiplier = 2.0 / (period + 1)
    value = sma(prices[:period], period)
    for price in prices[period:]:
        value = (price - value) * multiplier + value
    return float(value)


def ema_full(prices: Sequence[float], period: int) -> list[float]:
    """Full EMA history, one value per bar from index ``period - 1`` onward.

    The first value is the SMA of the earliest ``period`` prices. MACD needs
    the whole series; :func:`ema` only returns the last point.
    """
    if period <= 0 or len(prices) < period:
        return []

    multiplier = 2.0 / (period + 1)
    value = sma(prices[:period], period)
    series = [value]
    for price in prices[period:]:
        value = (price - value) * multiplier + value
        series.append(value)
    return series


def macd(
    prices: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MACDResult:
    """MACD line, signal line, histogram and the latest crossover."""
    if len(prices) < slow + signal:
        return MACDResult()

    fast_ema = ema_full(prices, fast)
    slow_ema = ema_full(prices, slow)
    offset = len(fast_ema) - len(slow_ema)
    macd_line = [fast_ema[i + offset] - slow_ema[i] for i in range(len(slow_ema))]

    signal_line = ema_full(macd_line, signal)
    if not signal_line:
        return MACDResult()

    current_macd = macd_line[-1]
    current_signal = signal_line[-1]

    crossover = Crossover.NONE
    if len(signal_line) >= 2:
        prev_macd = macd_line[-2]
        prev_signal = signal_line[-2]
        if prev_macd <= prev_signal and current_macd > current_signal:
            crossover = Crossover.BULLISH
        elif prev_macd >= prev_signal and current_macd < current_signal:
            crossover = Crossover.BEARISH

    return MACDResult(
        macd=current_macd,
        signal=current_signal,
        histogram=current_macd - current_signal,
        crossover=crossover,
    )


def _band_width(window: np.ndarray, mult: float) -> float:
    middle = float(window.mean())
    if middle == 0:
        return 0.0
    spread = mult * float(window.std())
    return (2 * spread) / middle * 100


def bollinger_bands(
    prices: Sequence[float],
    period: int = 20,
    mult: float = 2.0,
) -> BollingerResult:
    """Bollinger Bands with %B, band width, squeeze and breakout flags.

    The squeeze test needs ``period + 50`` prices; with less history it is
    reported as False.
    """
    if period <= 0 or len(prices) < period:
        return BollingerResult()

    values = np.asarray(prices, dtype=float)
    window = values[-period:]
    middle = float(window.mean())
    stddev = float(window.std())
    upper = middle + mult * stddev
    lower = middle - mult * stddev
    price = float(values[-1])

    band_range = upper - lower
    percent_b = (price - lower) / band_range if band_range != 0 else 0.0
    width = band_range / middle * 100 if middle != 0 else 0.0

    squeeze = False
    n = len(values)
    if n >= period + SQUEEZE_LOOKBACK:
        prior_widths = [
            _band_width(values[end - period : end], mult)
            for end in range(n - SQUEEZE_LOOKBACK, n)
        ]
        avg_width = float(np.mean(prior_widths))
        squeeze = avg_width > 0 and width < SQUEEZE_RATIO * avg_width

    breakout = False
    if upper > 0 and abs(price - upper) / upper <= BREAKOUT_PROXIMITY:
        breakout = True
    elif lower > 0 and abs(price - lower) / lower <= BREAKOUT_PROXIMITY:
        breakout = True

    return BollingerResult(
        upper=upper,
        middle=middle,
        lower=lower,
        percent_b=percent_b,
        width=width,
        squeeze=squeeze,
        breakout=breakout,
    )


def support_resistance(
    prices: Sequence[float],
    window: int = 2,
    levels: int = 3,
) -> SupportResistance:
    """Nearest local-minimum supports and local-maximum resistances.

    Supports are below the current price, nearest first; resistances are
    above it, nearest first.
    """
    if len(prices) < MIN_SR_BARS:
        return SupportResistance()

    current = prices[-1]
    minima: set[float] = set()
    maxima: set[float] = set()

    for i in range(window, len(prices) - window):
        neighbourhood = prices[i - window : i + window + 1]
        if prices[i] == min(neighbourhood):
            minima.add(float(prices[i]))
        if prices[i] == max(neighbourhood):
            maxima.add(float(prices[i]))

    support = sorted((p for p in minima if p < current), reverse=True)[:levels]
    resistance = sorted(p for p in maxima if p > current)[:levels]
    return SupportResistance(support=support, resistance=resistance)


def is_oversold(rsi_value: float, threshold: float = 30.0) -> bool:
    return rsi_value < threshold


def is_overbought(rsi_value: float, threshold: float = 70.0) -> bool:
    return rsi_value > threshold
