"""
In-memory frame store.

FrameStore is a singleton dict-like container of query results keyed by the
frame's ref_id (falling back to its name). Frames are persisted as their DTO
JSON, so anything that round-trips through ``to_json()`` survives a save/load.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from core.logging import tagged
from frames.dataframe import DataFrame
from frames.types import FieldType

logger = logging.getLogger("dashframe")


def frame_key(frame) -> str:
    """Store key for a frame: ref_id, else name."""
    key = frame.ref_id or frame.name
    if not key:
        raise ValueError("Frame needs a ref_id or a name to be stored")
    return key


def summarize_frame(frame) -> dict:
    """Compact summary dict for listings."""
    time_field = next((f for f in frame.fields if f.type == FieldType.time), None)
    summary = {
        "key": frame_key(frame),
        "name": frame.name,
        "ref_id": frame.ref_id,
        "num_rows": frame.length,
        "fields": [{"name": f.name, "type": f.type.value} for f in frame.fields],
    }
    if time_field is not None and frame.length > 0:
        summary["time_min"] = time_field.values.get(0)
        summary["time_max"] = time_field.values.get(frame.length - 1)
    if frame.labels:
        summary["labels"] = frame.labels
    return summary


class FrameStore:
    """Singleton in-memory store mapping keys to frames."""

    def __init__(self):
        self._frames: dict = {}
        self._lock = threading.RLock()

    def put(self, frame) -> str:
        """Store a frame, overwriting any existing frame with the same key.

        Returns:
            The key the frame was stored under.
        """
        key = frame_key(frame)
        with self._lock:
            self._frames[key] = frame
        logger.debug(f"[Store] Stored '{key}' ({frame.length} rows)", extra=tagged("ingest"))
        return key

    def get(self, key: str):
        """Retrieve a frame by key, or None if not found."""
        with self._lock:
            return self._frames.get(key)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._frames

    def remove(self, key: str) -> bool:
        """Remove a frame by key. Returns True if it existed."""
        with self._lock:
            if key in self._frames:
                del self._frames[key]
                return True
            return False

    def frames(self) -> list:
        """All stored frames in insertion order."""
        with self._lock:
            return list(self._frames.values())

    def list_entries(self) -> list[dict]:
        """Return summary dicts for all stored frames."""
        with self._lock:
            return [summarize_frame(f) for f in self._frames.values()]

    def clear(self) -> None:
        with self._lock:
            self._frames.clear()

    def save_to_file(self, path: Path) -> None:
        """Write every frame's DTO to a JSON file (a list, insertion order)."""
        with self._lock:
            data = [f.to_json() for f in self._frames.values()]
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)

    def load_from_file(self, path: Path) -> int:
        """Restore frames written by ``save_to_file``.

        Returns:
            Number of frames loaded (0 if the file does not exist).
        """
        path = Path(path)
        if not path.exists():
            return 0
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = [data]
        count = 0
        for dto in data:
            self.put(DataFrame(dto))
            count += 1
        logger.debug(f"[Store] Loaded {count} frames from {path}", extra=tagged("ingest"))
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._frames)


# Module-level singleton
_store: Optional[FrameStore] = None


def get_store() -> FrameStore:
    """Return the global FrameStore singleton."""
    global _store
    if _store is None:
        _store = FrameStore()
    return _store


def reset_store() -> None:
    """Reset the global FrameStore (mainly for testing)."""
    global _store
    _store = None
