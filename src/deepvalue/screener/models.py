"""Data models for the screening pipeline."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from deepvalue.core.enums import ResultKind


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


class ScreenResult(BaseModel):
    """One screened symbol with every computed metric and score."""

    # Identity
    symbol: str
    name: str = ""
    exchange: str = ""
    kind: ResultKind = ResultKind.SCORED

    # Raw quote
    price: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    volume: int = 0
    market_cap: int = 0

    # Technical
    rsi: float = 0.0
    atr: float = 0.0
    sma_20: float = 0.0
    sma_50: float = 0.0
    macd: float = 0.0
    macd_signal: float = 0.0
    macd_histogram: float = 0.0
    bb_upper: float = 0.0
    bb_middle: float = 0.0
    bb_lower: float = 0.0

    # Valuation (0 means unknown)
    pbv: float = 0.0
    pe_ratio: float = 0.0
    eps: float = 0.0
    book_value: float = 0.0
    graham_number: float = 0.0
    graham_upside: float = 0.0
    dividend_yield: float = 0.0

    # Risk
    stop_loss: float = 0.0
    take_profit: float = 0.0
    risk_ratio: float = 0.0
    volatility: float = 0.0
    max_drawdown: float = 0.0

    historical_prices: list[float] = Field(default_factory=list)

    # Scores
    technical_score: float = Field(default=0.0, ge=0, le=100)
    valuation_score: float = Field(default=0.0, ge=0, le=100)
    risk_score: float = Field(default=0.0, ge=0, le=100)
    confluence_score: float = Field(default=0.0, ge=0, le=100)

    # Flags
    is_oversold: bool = False
    is_undervalued: bool = False
    is_pinned: bool = False
    has_error: bool = False
    error_message: str = ""

    @classmethod
    def placeholder(cls, symbol: str) -> ScreenResult:
        """Pinned row for a watchlist symbol that produced no result."""
        return cls(symbol=normalize_symbol(symbol), kind=ResultKind.PLACEHOLDER, is_pinned=True)

    @property
    def is_placeholder(self) -> bool:
        return self.kind != ResultKind.SCORED

    @property
    def grade(self) -> str:
        from deepvalue.screener.scoring import score_to_grade

        return score_to_grade(self.confluence_score)


class FilterCriteria(BaseModel):
    """Thresholds a scored result must meet to be kept.

    The defaults describe a "deep value" screen: oversold, cheap on book
    value, trading under its Graham Number, with a decent confluence score.
    """

    min_rsi: float = 0.0
    max_rsi: float = 40.0
    max_pbv: float = 2.0
    min_graham_upside: float = 0.0
    min_confluence: float = 50.0
    only_oversold: bool = False
    only_undervalued: bool = False

    @classmethod
    def relaxed(cls) -> FilterCriteria:
        """Criteria that let every successfully scored symbol through."""
        return cls(
            min_rsi=0.0,
            max_rsi=100.0,
            max_pbv=100.0,
            min_graham_upside=-1000.0,
            min_confluence=0.0,
        )


class ScanProgress(BaseModel):
    completed: int = 0
    total: int = 0
    current: str = ""
    success_count: int = 0
    error_count: int = 0
    last_error: str = ""
    error_symbol: str = ""

    @property
    def pct(self) -> float:
        if self.total <= 0:
            return 0.0
        return self.completed / self.total * 100


@runtime_checkable
class PinSet(Protocol):
    """Set of pinned symbols consulted by the screening engine."""

    def is_pinned(self, symbol: str) -> bool: ...

    def get_all(self) -> list[str]: ...

    def add(self, symbol: str) -> None: ...

    def remove(self, symbol: str) -> None: ...
