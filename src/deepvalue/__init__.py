"""Deep value stock screener: concurrent fetch, indicator scoring and ranking."""

__version__ = "1.0.1"
