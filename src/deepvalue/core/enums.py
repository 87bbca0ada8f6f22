"""Domain enumerations for the deep value screener."""

from enum import StrEnum


class Crossover(StrEnum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NONE = "none"


class ResultKind(StrEnum):
    """What a screen result row actually carries."""

    SCORED = "scored"
    PLACEHOLDER = "placeholder"
    ERRORED = "errored"


class SourceKind(StrEnum):
    DIRECT = "direct"
    YFINANCE = "yfinance"
