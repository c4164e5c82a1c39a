"""Chunk publishing with overload backoff."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Protocol

from fsindexer.errors import BackendError, BackendOverloadedError
from fsindexer.models import ChunkDocument

LOGGER = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def exists(self, document_id: str) -> bool: ...

    def upsert(self, document_id: str, body: Dict[str, Any]) -> None: ...


class BackoffPolicy:
    """Shared wait time applied when the backend reports overload.

    The delay starts at ``initial`` seconds and only ever doubles; it is never
    reset during a run, so sustained overload slows down every later write.
    """

    def __init__(self, initial: float = 1.0, sleep: Callable[[float], None] = time.sleep) -> None:
        self._delay = initial
        self._sleep = sleep
        self._lock = threading.Lock()

    @property
    def delay(self) -> float:
        with self._lock:
            return self._delay

    def wait(self) -> float:
        delay = self.delay
        LOGGER.warning("sleep %ss, backend overloaded", delay)
        self._sleep(delay)
        return delay

    def grow(self) -> float:
        with self._lock:
            self._delay *= 2
            delay = self._delay
        LOGGER.warning("increase sleep duration to %ss", delay)
        return delay


class PendingWork:
    """Counter of in-flight publishes that callers can wait on."""

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    @contextmanager
    def track(self) -> Iterator[None]:
        with self._cond:
            self._count += 1
        try:
            yield
        finally:
            with self._cond:
                self._count -= 1
                if self._count == 0:
                    self._cond.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until no publish is outstanding."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)


class IndexPublisher:
    """Serializes chunk documents and upserts them into the backend."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        backoff: BackoffPolicy | None = None,
        pending: PendingWork | None = None,
    ) -> None:
        self.store = store
        self.backoff = backoff or BackoffPolicy()
        self.pending = pending or PendingWork()

    def publish(self, document: ChunkDocument) -> None:
        """Write one chunk, retrying for as long as the backend is overloaded.

        Any other backend error is logged and re-raised without retrying.
        """
        LOGGER.info(
            "%s, %s chunk, size %s", document.file_name, document.ordinal, len(document.content)
        )
        with self.pending.track():
            try:
                self._send_with_backoff(document.chunk_id, document.to_dict())
            except BackendError as exc:
                LOGGER.warning("[%s] error indexing document ID=%s: %s", exc.status, document.chunk_id, exc)
                raise

    def _send_with_backoff(self, chunk_id: str, body: Dict[str, Any]) -> None:
        try:
            self.store.upsert(chunk_id, body)
            return
        except BackendOverloadedError as exc:
            LOGGER.warning("backend overloaded writing %s: %s", chunk_id, exc)

        # Every retry waits first; no immediate re-attempt after the delay grows.
        while True:
            self.backoff.wait()
            try:
                self.store.upsert(chunk_id, body)
                return
            except BackendOverloadedError:
                self.backoff.grow()

    def wait(self, timeout: float | None = None) -> bool:
        return self.pending.wait(timeout)
