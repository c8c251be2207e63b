"""Turn the pending queue into bounded reading requests.

A pass resolves what the cache already knows and sends the remaining keys in
chunks of ``chunk_size``. Every chunk is an independent executor task; its
completion handler is the only place that writes that chunk's readings. A
failed chunk leaves its keys queued so the next pass sends them again.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, Future
from typing import Callable, List, Optional, Sequence

from kanji_terminator.cache import ReadingCache
from kanji_terminator.client import TransportError
from kanji_terminator.pending import PendingQueue


LOGGER = logging.getLogger(__name__)

DEFAULT_REQUEST_CHUNK_SIZE = 200
DEFAULT_DEBOUNCE_DELAY = 0.5

FetchReadings = Callable[[Sequence[str]], List[str]]


class Debouncer:
    """Run ``callback`` once triggers have stopped for ``delay`` seconds.

    Each trigger replaces the pending timer, so only the latest schedule
    survives.
    """

    def __init__(self, delay: float, callback: Callable[[], object]) -> None:
        self.delay = delay
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.delay, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def _fire(self) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                return
            self._timer = None
        try:
            self._callback()
        except Exception:  # noqa: BLE001 - timer threads have nobody to report to
            LOGGER.exception("Debounced callback failed")


class Batcher:
    def __init__(
        self,
        queue: PendingQueue,
        cache: ReadingCache,
        fetch: FetchReadings,
        executor: Executor,
        chunk_size: int = DEFAULT_REQUEST_CHUNK_SIZE,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be positive")
        self.queue = queue
        self.cache = cache
        self.fetch = fetch
        self.executor = executor
        self.chunk_size = chunk_size

    def run_pass(self) -> List[Future]:
        """Resolve cached keys and dispatch the rest; return the chunk futures."""

        started = time.monotonic()
        futures: List[Future] = []
        chunk: List[str] = []
        keys = self.queue.keys()

        for key in keys:
            reading = self.cache.get(key)
            if reading:
                self.queue.resolve(key, reading)
                continue
            chunk.append(key)
            if len(chunk) >= self.chunk_size:
                futures.append(self._dispatch(chunk))
                chunk = []

        if chunk:
            futures.append(self._dispatch(chunk))

        if keys:
            LOGGER.debug(
                "%.0f ms: %d kanji runs handled in %d requests",
                (time.monotonic() - started) * 1000,
                len(keys),
                len(futures),
            )
        return futures

    def _dispatch(self, keys: List[str]) -> Future:
        return self.executor.submit(self._request_chunk, list(keys))

    def _request_chunk(self, keys: List[str]) -> int:
        try:
            readings = self.fetch(keys)
        except TransportError as exc:
            LOGGER.error("Reading request failed for %d kanji runs: %s", len(keys), exc)
            return 0
        except Exception:  # noqa: BLE001 - keep the keys queued for the next pass
            LOGGER.exception("Unexpected error requesting %d kanji runs", len(keys))
            return 0
        return self.apply_readings(keys, readings)

    def apply_readings(self, keys: Sequence[str], readings: Sequence[str]) -> int:
        """Cache readings aligned with ``keys`` and resolve their sinks."""

        if len(readings) != len(keys):
            LOGGER.warning("Expected %d readings, got %d; leaving them queued", len(keys), len(readings))
            return 0

        resolved = 0
        for key, reading in zip(keys, readings):
            if not reading:
                LOGGER.debug("No reading for %r", key)
                continue
            self.cache.set(key, reading)
            resolved += self.queue.resolve(key, reading)
        return resolved
