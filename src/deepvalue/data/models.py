"""Raw per-symbol market data as delivered by a data source."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RawMarketData(BaseModel):
    """One fetch attempt for one symbol.

    When ``error`` is set the numeric fields are meaningless and must not be
    scored.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str = ""
    price: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    volume: int = 0
    market_cap: int = 0
    fifty_two_week_high: float = 0.0
    fifty_two_week_low: float = 0.0
    market_state: str = ""
    exchange: str = ""

    # Fundamentals (best effort, 0 when unavailable)
    pe_ratio: float = 0.0
    eps: float = 0.0
    book_value: float = 0.0
    dividend_yield: float = 0.0

    # Daily bars, oldest → newest
    closes: list[float] = Field(default_factory=list)
    highs: list[float] = Field(default_factory=list)
    lows: list[float] = Field(default_factory=list)

    error: str | None = None
    fetch_duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, symbol: str, error: str, fetch_duration: float = 0.0) -> RawMarketData:
        return cls(symbol=symbol, error=error or "unknown error", fetch_duration=fetch_duration)
