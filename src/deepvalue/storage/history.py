"""JSON file storage for past scans."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from deepvalue.screener.models import ScreenResult

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DIR = Path("config/history")
ID_FORMAT = "%Y%m%d_%H%M%S"


class ScanRecord(BaseModel):
    """One saved scan. ``results`` is empty in :meth:`HistoryStore.list_records`."""

    id: str
    timestamp: datetime
    total_scanned: int = 0
    total_found: int = 0
    results: list[ScreenResult] = Field(default_factory=list)


class HistoryStore:
    """Persists and retrieves scan records as ``scan_<id>.json`` files."""

    def __init__(self, history_dir: Path | str = DEFAULT_HISTORY_DIR):
        self.history_dir = Path(history_dir)
        self.history_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, record_id: str) -> Path:
        return self.history_dir / f"scan_{record_id}.json"

    def _write(self, record: ScanRecord) -> ScanRecord:
        path = self._path(record.id)
        path.write_text(record.model_dump_json(indent=2))
        logger.info(f"Saved scan: {path}")
        return record

    def _new_id(self, now: datetime) -> str:
        # Saves within the same second get a numeric suffix
        base = now.strftime(ID_FORMAT)
        record_id, n = base, 2
        while self._path(record_id).exists():
            record_id = f"{base}_{n}"
            n += 1
        return record_id

    def save(self, results: list[ScreenResult], total_scanned: int) -> ScanRecord:
        """Save a new record stamped with the current time."""
        now = datetime.now()
        return self._write(
            ScanRecord(
                id=self._new_id(now),
                timestamp=now,
                total_scanned=total_scanned,
                total_found=len(results),
                results=results,
            )
        )

    def update(self, record_id: str, results: list[ScreenResult], total_scanned: int) -> ScanRecord:
        """Overwrite an existing record's results, keeping its id."""
        return self._write(
            ScanRecord(
                id=record_id,
                timestamp=datetime.now(),
                total_scanned=total_scanned,
                total_found=len(results),
                results=results,
            )
        )

    def load(self, record_id: str) -> ScanRecord:
        path = self._path(record_id)
        if not path.exists():
            raise FileNotFoundError(f"Scan not found: {record_id}")
        return ScanRecord(**json.loads(path.read_text()))

    def list_records(self, limit: int | None = None) -> list[ScanRecord]:
        """Stored records, newest first, without their results."""
        records = []
        for path in self.history_dir.glob("scan_*.json"):
            try:
                data = json.loads(path.read_text())
                data["results"] = []
                records.append(ScanRecord(**data))
            except Exception as e:
                logger.warning(f"Failed to load {path}: {e}")

        records.sort(key=lambda r: r.timestamp, reverse=True)
        if limit:
            records = records[:limit]
        return records

    def latest(self) -> ScanRecord:
        records = self.list_records(limit=1)
        if not records:
            raise FileNotFoundError("No scan history found")
        return self.load(records[0].id)

    def delete(self, record_id: str) -> bool:
        path = self._path(record_id)
        if path.exists():
            path.unlink()
            return True
        return False

    def delete_all(self) -> int:
        removed = 0
        for path in self.history_dir.glob("scan_*.json"):
            path.unlink()
            removed += 1
        return removed

    def count(self) -> int:
        return len(self.list_records())


def format_timestamp(ts: datetime, now: datetime | None = None) -> str:
    """Human relative time: "just now", "5 minutes ago", "yesterday", ..."""
    now = now or datetime.now()
    seconds = (now - ts).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        mins = int(seconds // 60)
        return "1 minute ago" if mins == 1 else f"{mins} minutes ago"
    if seconds < 86400:
        hours = int(seconds // 3600)
        return "1 hour ago" if hours == 1 else f"{hours} hours ago"
    if seconds < 7 * 86400:
        days = int(seconds // 86400)
        return "yesterday" if days == 1 else f"{days} days ago"
    return ts.strftime("%b %d, %Y %H:%M")
