"""Capped per-user log of completed photoshoots."""
from __future__ import annotations

import json
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List
from uuid import uuid4

from memory.usage_store import validate_user_id


@dataclass
class HistoryEntry:
    """Summary of one finished photoshoot. Image bytes are not stored."""

    user_id: str
    garment_type: str
    scene_id: str
    poses: List[str]
    frame_ids: List[str]
    entry_id: str = field(default_factory=lambda: str(uuid4()))
    created_at: float = field(default_factory=lambda: time.time())


class PhotoshootHistory:
    """JSON-file-backed history, newest first, trimmed to ``max_entries``."""

    def __init__(self, base_dir: str | Path = "data/history", max_entries: int = 20) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.max_entries = max_entries

    def _path(self, user_id: str) -> Path:
        return self.base_dir / f"{validate_user_id(user_id)}.json"

    def _load(self, user_id: str) -> List[Dict[str, Any]]:
        path = self._path(user_id)
        if not path.exists():
            return []
        return json.loads(path.read_text())

    def append(self, entry: HistoryEntry) -> HistoryEntry:
        entries = [asdict(entry)] + self._load(entry.user_id)
        self._path(entry.user_id).write_text(json.dumps(entries[: self.max_entries], indent=2))
        return entry

    def list_entries(self, user_id: str, limit: int | None = None) -> List[HistoryEntry]:
        entries = [HistoryEntry(**record) for record in self._load(user_id)]
        return entries[:limit] if limit is not None else entries

    def clear(self, user_id: str) -> None:
        self._path(user_id).unlink(missing_ok=True)


__all__ = ["HistoryEntry", "PhotoshootHistory"]
