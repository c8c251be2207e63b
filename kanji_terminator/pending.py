"""Kanji runs waiting for a reading, with the sinks that want it."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Optional


LOGGER = logging.getLogger(__name__)

Sink = Any
ApplyReading = Callable[[Sink, str], None]


def call_sink(sink: Sink, reading: str) -> None:
    """Default apply callback: sinks are callables taking the reading."""

    sink(reading)


class PendingQueue:
    """Mapping of kanji run -> sinks, in discovery order.

    The discovery collaborator owns the sinks; the queue only hands each
    resolved reading back through ``apply``.
    """

    def __init__(self, apply: ApplyReading = call_sink, lock: Optional[threading.RLock] = None) -> None:
        self._apply = apply
        self._lock = lock or threading.RLock()
        self._sinks: Dict[str, List[Sink]] = {}

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._sinks

    def __len__(self) -> int:
        with self._lock:
            return len(self._sinks)

    def enqueue(self, key: str, sink: Sink) -> None:
        if not key:
            raise ValueError("Cannot queue an empty kanji run")
        with self._lock:
            self._sinks.setdefault(key, []).append(sink)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._sinks)

    def sinks(self, key: str) -> List[Sink]:
        with self._lock:
            return list(self._sinks.get(key, ()))

    def resolve(self, key: str, reading: Optional[str]) -> int:
        """Write ``reading`` to every sink queued for ``key`` and drop the entry."""

        if not reading:
            return 0
        with self._lock:
            sinks = self._sinks.pop(key, None)
            if not sinks:
                return 0
            for sink in sinks:
                try:
                    self._apply(sink, reading)
                except Exception:  # noqa: BLE001 - a broken sink must not block the rest
                    LOGGER.exception("Failed to apply reading for %r", key)
        return len(sinks)
