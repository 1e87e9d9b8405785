from __future__ import annotations
import json
import os
from typing import Dict, Any
from backend.core.config import settings

class JsonStateStore:
    """
    One JSON document holding the scan log ({"next_id": int, "scans": [...]}).
    save() writes a temp file and renames it over the old one, so a crash
    mid-write never leaves a truncated log; ids keep counting across restarts
    because next_id is stored alongside the entries.
    """
    def __init__(self, path: str | None = None):
        self.path = path or settings.storage_path

    def load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, state: Dict[str, Any]) -> None:
        tmp = self.path + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(state, f, indent=2, ensure_ascii=False, default=str)
        os.replace(tmp, self.path)
