"""Best-effort background writer for fire-and-forget persistence.

The engine never waits on disk. Callers materialise whatever they want to
write on their own thread, hand a callable to submit(), and move on. One
worker thread runs jobs in submission order; a failed job is logged and
dropped, and the in-memory state stays authoritative.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundWriter:
    def __init__(self, name: str = "ring-director-writer") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, label: str, fn: Callable[..., Any], *args: Any) -> Future | None:
        """Queue ``fn(*args)``. Never raises into the caller."""
        if self._closed:
            logger.warning("writer closed, dropping %s", label)
            return None
        future = self._executor.submit(fn, *args)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(lambda f: self._finished(label, f))
        return future

    def _finished(self, label: str, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        exc = future.exception()
        if exc is not None:
            logger.warning("background %s failed: %s", label, exc)

    def flush(self, timeout: float | None = 5.0) -> None:
        """Block until everything queued so far has been written (or failed)."""
        with self._lock:
            pending = list(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def close(self) -> None:
        if self._closed:
            return
        self.flush()
        self._closed = True
        self._executor.shutdown(wait=True)
