"""Configuration via environment variables using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from deepvalue.core.enums import SourceKind


class ScreenerConfig(BaseSettings):
    """All screener settings, loaded from env vars with DEEPVALUE_ prefix."""

    model_config = {"env_prefix": "DEEPVALUE_", "extra": "ignore", "env_file": ".env"}

    # --- Fetch pool ---
    workers: int = 10
    fetch_timeout: float = 15.0  # per symbol, independent of scan duration

    # --- Data source ---
    source: SourceKind = SourceKind.DIRECT
    base_url: str = "https://query1.finance.yahoo.com"
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    request_timeout: float = 15.0
    rate_limit_interval: float = 0.1  # 10 requests/second across all workers
    max_retries: int = 2
    history_days: int = 60

    # --- Paths ---
    watchlist_path: Path = Field(default=Path("config/watchlist.json"))
    history_dir: Path = Field(default=Path("config/history"))
