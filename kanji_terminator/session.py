"""Session-scoped wiring of cache, pending queue and batcher.

One :class:`FuriganaSession` exists per document/context. The cache and the
queue share a single lock because discovery, debounced passes and chunk
completions all run on different threads.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from typing import List, Optional

from kanji_terminator.batcher import (
    DEFAULT_DEBOUNCE_DELAY,
    DEFAULT_REQUEST_CHUNK_SIZE,
    Batcher,
    Debouncer,
    FetchReadings,
)
from kanji_terminator.cache import DEFAULT_MAX_ENTRIES, JsonFileStore, KeyValueStore, ReadingCache
from kanji_terminator.client import ReadingClient
from kanji_terminator.pending import ApplyReading, PendingQueue, Sink, call_sink


LOGGER = logging.getLogger(__name__)


class FuriganaSession:
    def __init__(
        self,
        fetch: Optional[FetchReadings] = None,
        store: Optional[KeyValueStore] = None,
        *,
        apply: ApplyReading = call_sink,
        executor: Optional[Executor] = None,
        max_cache_entries: int = DEFAULT_MAX_ENTRIES,
        chunk_size: int = DEFAULT_REQUEST_CHUNK_SIZE,
        debounce_delay: float = DEFAULT_DEBOUNCE_DELAY,
    ) -> None:
        self._lock = threading.RLock()
        self._owns_executor = executor is None
        self._client: Optional[ReadingClient] = None if fetch is not None else ReadingClient()
        self._inflight: List[Future] = []

        self.cache = ReadingCache(store or JsonFileStore(), max_entries=max_cache_entries, lock=self._lock)
        self.queue = PendingQueue(apply=apply, lock=self._lock)
        self.executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="kanji-request")
        self.batcher = Batcher(
            self.queue,
            self.cache,
            fetch or self._client,
            self.executor,
            chunk_size=chunk_size,
        )
        self.debouncer = Debouncer(debounce_delay, self.run_pass)

    def __enter__(self) -> "FuriganaSession":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def start(self) -> None:
        count = self.cache.load()
        LOGGER.info("Session started with %d cached readings", count)

    def discover(self, key: str, sink: Sink) -> None:
        self.queue.enqueue(key, sink)

    def trigger(self) -> None:
        self.debouncer.trigger()

    def run_pass(self) -> List[Future]:
        futures = self.batcher.run_pass()
        with self._lock:
            self._inflight = [future for future in self._inflight if not future.done()] + futures
        self.cache.save()
        return futures

    def flush(self, timeout: Optional[float] = None) -> int:
        """Run a pass now and wait for its requests; return keys still queued."""

        self.debouncer.cancel()
        futures = self.run_pass()
        if futures:
            wait(futures, timeout=timeout)
        return len(self.queue)

    def close(self, timeout: Optional[float] = None) -> None:
        self.debouncer.cancel()
        with self._lock:
            inflight = list(self._inflight)
            self._inflight = []
        if inflight:
            wait(inflight, timeout=timeout)
        self.cache.save()
        if self._owns_executor:
            self.executor.shutdown(wait=False)
        if self._client is not None:
            self._client.close()
