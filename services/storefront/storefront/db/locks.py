"""Process-local per-key locks.

The stock ledger serializes its read-modify-write-notify sequence per
product. Row locks (SELECT ... FOR UPDATE) cover PostgreSQL across
processes; this registry covers backends without row locking (SQLite) and
keeps concurrent requests in one worker from racing on the same product.
"""
import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator

from storefront.exceptions import ConflictError


class KeyedLock:
    """A lazily created threading.Lock per key"""

    def __init__(self):
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: Hashable, timeout: float) -> Iterator[None]:
        """Hold the lock for `key`, raising ConflictError if it can't be taken in time"""
        lock = self._lock_for(key)
        if not lock.acquire(timeout=timeout):
            raise ConflictError(
                "Another update for this resource is in progress, retry later",
                code="CONCURRENT_MODIFICATION",
                key=str(key),
            )
        try:
            yield
        finally:
            lock.release()


product_locks = KeyedLock()
