"""Per-key locks serializing read-modify-write sequences on stock records.

Each key (a stock id, or a (product, variant, warehouse) tuple during creation)
gets its own re-entrant lock, created on first use and discarded when the last
holder releases it. Holders of different keys never wait on each other; the
registry guard is only held long enough to look up or drop an entry.
"""

import os
import threading
from contextlib import ExitStack, contextmanager

import structlog

from stockledger.exceptions import StoreUnavailableError

logger = structlog.get_logger(__name__)


class _Entry:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.RLock()
        self.holders = 0


class KeyedLocks:
    def __init__(self, name: str):
        self.name = name
        self._guard = threading.Lock()
        self._entries: dict = {}

    def _checkout(self, key) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.holders += 1
            return entry

    def _checkin(self, key, entry: _Entry) -> None:
        with self._guard:
            entry.holders -= 1
            if entry.holders == 0:
                self._entries.pop(key, None)

    @contextmanager
    def hold(self, key, timeout: float | None = None):
        """Hold the lock for ``key`` for the duration of the block."""
        entry = self._checkout(key)
        acquired = entry.lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            self._checkin(key, entry)
            logger.error("Timed out waiting for stock lock", lock=self.name, key=str(key), timeout=timeout)
            raise StoreUnavailableError(f"Stock record {key} is busy, try again")
        try:
            yield
        finally:
            entry.lock.release()
            self._checkin(key, entry)

    @contextmanager
    def hold_many(self, keys, timeout: float | None = None):
        """Hold several keys at once, acquired in a stable order to avoid deadlocks."""
        with ExitStack() as stack:
            for key in sorted(set(keys), key=repr):
                stack.enter_context(self.hold(key, timeout))
            yield

    def active_keys(self) -> int:
        with self._guard:
            return len(self._entries)

    def clear(self):
        """Drop idle entries (useful for testing)."""
        with self._guard:
            self._entries = {key: entry for key, entry in self._entries.items() if entry.holders}


record_locks = KeyedLocks("stock-record")
key_locks = KeyedLocks("stock-key")


def warn_if_multi_process(environ=None) -> bool:
    """Log a warning when more than one worker process is requested.

    Locks live in process memory, so per-record serialization only holds
    within a single worker. Returns True when the warning was emitted.
    """
    environ = os.environ if environ is None else environ
    try:
        workers = int(environ.get("WEB_CONCURRENCY", "1"))
    except ValueError:
        workers = 1
    if workers > 1:
        logger.warning(
            "Stock locks are per-process; run a single worker per database",
            workers=workers,
        )
        return True
    return False
