"""In-process keyed locks for serializing billing critical sections."""

from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from threading import Lock


class KeyedLock:
    """Hands out one mutex per key and drops it once nobody holds or waits on it.

    Used together with row-level ``SELECT ... FOR UPDATE`` so that work scoped
    to one key (an invoice, a client's billing month) runs one request at a
    time, while unrelated keys never contend.
    """

    def __init__(self) -> None:
        self._locks: dict[Hashable, Lock] = {}
        self._refcounts: dict[Hashable, int] = {}
        self._guard = Lock()

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = Lock()
                self._locks[key] = lock
            self._refcounts[key] = self._refcounts.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._refcounts[key] -= 1
                if self._refcounts[key] == 0:
                    del self._refcounts[key]
                    del self._locks[key]

    def active_keys(self) -> int:
        """Number of keys currently held or awaited (useful for testing)."""
        with self._guard:
            return len(self._locks)


invoice_locks = KeyedLock()
volume_locks = KeyedLock()
