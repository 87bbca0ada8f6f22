"""JSON file storage for pinned (watchlist) symbols."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from deepvalue.screener.models import normalize_symbol

logger = logging.getLogger(__name__)

DEFAULT_WATCHLIST_PATH = Path("config/watchlist.json")
DEFAULT_SYMBOLS = ("SLV", "WDC", "GDX")


class WatchlistStore:
    """Set of pinned symbols persisted as ``{"symbols": [...]}``.

    A missing file is seeded with :data:`DEFAULT_SYMBOLS`. Every mutation is
    written through to disk immediately.
    """

    def __init__(self, path: Path | str = DEFAULT_WATCHLIST_PATH):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._symbols: set[str] = set()
        self.load()

    def load(self) -> None:
        with self._lock:
            if not self.path.exists():
                self._symbols = set(DEFAULT_SYMBOLS)
                self._save_unlocked()
                return
            data = json.loads(self.path.read_text())
            self._symbols = {normalize_symbol(s) for s in data.get("symbols", []) if s.strip()}

    def save(self) -> None:
        with self._lock:
            self._save_unlocked()

    def _save_unlocked(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"symbols": sorted(self._symbols)}, indent=2))
        logger.debug(f"Saved watchlist: {self.path}")

    def add(self, symbol: str) -> None:
        with self._lock:
            self._symbols.add(normalize_symbol(symbol))
            self._save_unlocked()

    def remove(self, symbol: str) -> None:
        with self._lock:
            self._symbols.discard(normalize_symbol(symbol))
            self._save_unlocked()

    def toggle(self, symbol: str) -> bool:
        """Pin or unpin ``symbol``. Returns True when it ends up pinned."""
        if self.is_pinned(symbol):
            self.remove(symbol)
            return False
        self.add(symbol)
        return True

    def clear(self) -> None:
        with self._lock:
            self._symbols.clear()
            self._save_unlocked()

    def is_pinned(self, symbol: str) -> bool:
        with self._lock:
            return normalize_symbol(symbol) in self._symbols

    def get_all(self) -> list[str]:
        with self._lock:
            return sorted(self._symbols)

    def count(self) -> int:
        with self._lock:
            return len(self._symbols)
