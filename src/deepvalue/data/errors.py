"""Per-symbol fetch failures.

These never escape the fetch pool: workers turn them into
``RawMarketData.error`` strings.
"""


class FetchError(Exception):
    """A symbol could not be fetched (HTTP, parse or empty payload)."""


class RateLimitedError(FetchError):
    """Upstream answered 429."""


class FetchTimeout(FetchError):
    """The per-fetch deadline passed before the data arrived."""
