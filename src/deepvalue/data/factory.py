"""Build the configured data source."""

from __future__ import annotations

from deepvalue.config import ScreenerConfig
from deepvalue.core.enums import SourceKind
from deepvalue.data.provider import DataSource


def build_source(config: ScreenerConfig) -> DataSource:
    if config.source == SourceKind.YFINANCE:
        from deepvalue.data.yfinance_source import YFinanceSource

        return YFinanceSource(config)

    from deepvalue.data.yahoo import YahooChartSource

    return YahooChartSource(config)
