"""Size-bounded reading cache persisted across sessions.

Entries are kept in insertion order. When :meth:`ReadingCache.save` finds the
cache at or above ``max_entries`` it keeps only the most recently *inserted*
``floor(max_entries * retain_ratio)`` entries and drops the rest. How often an
entry was read plays no part: an old entry that is looked up on every pass is
evicted exactly like a stale one. Updating an existing key keeps its original
position.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol


LOGGER = logging.getLogger(__name__)

CACHE_STORE_KEY = "kanji-terminator-caches"
CACHE_DIR = Path(os.getenv("KANJI_CACHE_DIR", Path.home() / ".cache" / "kanji-terminator"))

DEFAULT_MAX_ENTRIES = 500
DEFAULT_RETAIN_RATIO = 0.75


class KeyValueStore(Protocol):
    def get(self, name: str) -> Optional[str]:
        ...

    def set(self, name: str, value: str) -> None:
        ...


class MemoryStore:
    """In-process store, mostly useful for tests and one-off runs."""

    def __init__(self) -> None:
        self._values: Dict[str, str] = {}

    def get(self, name: str) -> Optional[str]:
        return self._values.get(name)

    def set(self, name: str, value: str) -> None:
        self._values[name] = value


class JsonFileStore:
    """Store each value as ``<directory>/<name>.json``."""

    def __init__(self, directory: Path | str = CACHE_DIR) -> None:
        self.directory = Path(directory)

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def get(self, name: str) -> Optional[str]:
        path = self._path(name)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, name: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(name)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=self.directory, prefix=f"{name}.", suffix=".tmp", delete=False
        ) as handle:
            handle.write(value)
        os.replace(handle.name, path)


class ReadingCache:
    def __init__(
        self,
        store: KeyValueStore,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        retain_ratio: float = DEFAULT_RETAIN_RATIO,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        if not 0 <= retain_ratio <= 1:
            raise ValueError("retain_ratio must be between 0 and 1")
        self.store = store
        self.max_entries = max_entries
        self.retain_ratio = retain_ratio
        self._lock = lock or threading.RLock()
        self._entries: Dict[str, str] = {}

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, reading: str) -> None:
        with self._lock:
            self._entries[key] = reading

    def load(self) -> int:
        """Replace the in-memory entries with the persisted mapping."""

        raw = self.store.get(CACHE_STORE_KEY)
        entries: Dict[str, str] = {}
        if raw:
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError:
                LOGGER.warning("Ignoring unreadable reading cache")
                payload = {}
            if isinstance(payload, dict):
                entries = {k: v for k, v in payload.items() if isinstance(k, str) and isinstance(v, str)}
            else:
                LOGGER.warning("Ignoring reading cache of type %s", type(payload).__name__)

        with self._lock:
            self._entries = entries
        LOGGER.debug("Loaded %d cached readings", len(entries))
        return len(entries)

    def evict(self) -> int:
        """Drop the oldest entries once the cache is full; return how many went."""

        with self._lock:
            if len(self._entries) < self.max_entries:
                return 0
            keep = math.floor(self.max_entries * self.retain_ratio)
            items = list(self._entries.items())
            retained = items[len(items) - keep:] if keep else []
            self._entries = dict(retained)
            dropped = len(items) - len(retained)
        LOGGER.debug("Evicted %d cached readings, %d kept", dropped, keep)
        return dropped

    def save(self) -> None:
        with self._lock:
            self.evict()
            serialized = json.dumps(self._entries, ensure_ascii=False)
            self.store.set(CACHE_STORE_KEY, serialized)
