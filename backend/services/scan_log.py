from __future__ import annotations
import logging
import threading
from typing import List, Optional

from backend.core.config import settings
from backend.models.scans import ScanEntry, ScanReport
from backend.services.storage import JsonStateStore

logger = logging.getLogger(__name__)


class ScanLog:
    """
    Decoded-text sink: every non-empty scan result, oldest first.
    Bounded by max_entries; persisted through the store when one is given.
    """

    def __init__(self, store: Optional[JsonStateStore] = None, max_entries: Optional[int] = None):
        self.store = store
        self.max_entries = int(max_entries or settings.max_scan_history)
        self.entries: List[ScanEntry] = []
        self._next_id = 1
        self._lock = threading.Lock()
        self._load()

    def _load(self) -> None:
        if self.store is None:
            return
        state = self.store.load()
        for e in state.get("scans", []):
            self.entries.append(ScanEntry(**e))
        self.entries = self.entries[-self.max_entries:]
        self._next_id = int(state.get("next_id") or (max((e.scan_id for e in self.entries), default=0) + 1))
        if self.entries:
            logger.info("Loaded %d scans from %s", len(self.entries), self.store.path)

    def _save(self) -> None:
        if self.store is None:
            return
        self.store.save({
            "next_id": self._next_id,
            "scans": [e.model_dump(mode="json") for e in self.entries],
        })

    def append(self, report: ScanReport) -> ScanEntry:
        with self._lock:
            entry = ScanEntry(
                scan_id=self._next_id,
                strings=list(report.strings),
                camera_position=report.camera_position,
                timestamp=report.timestamp,
            )
            self._next_id += 1
            self.entries.append(entry)
            if len(self.entries) > self.max_entries:
                del self.entries[: len(self.entries) - self.max_entries]
            self._save()
        logger.info("Scan #%d: %d string(s) from %s camera", entry.scan_id, len(entry.strings),
                    entry.camera_position or "unknown")
        return entry

    def list(self) -> List[ScanEntry]:
        with self._lock:
            return list(self.entries)

    def clear(self) -> int:
        with self._lock:
            n = len(self.entries)
            self.entries = []
            self._save()
        return n

    def text(self) -> str:
        # one block per decoded string, blank line between
        return "".join(s + "\n\n" for e in self.list() for s in e.strings)
