"""
Per-product mutual exclusion for read-modify-write stock operations.

SQLite has no row locks, so two requests touching the same product could
otherwise read the same quantity/average cost and overwrite each other.
"""
from contextlib import contextmanager
from threading import Lock
from typing import Iterator

from shopledger.core.config import settings


class ProductLockRegistry:
    """Hands out one lock per product id, created on first use."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._locks: dict[int, Lock] = {}
        self._guard = Lock()

    def _lock_for(self, product_id: int) -> Lock:
        with self._guard:
            lock = self._locks.get(product_id)
            if lock is None:
                lock = self._locks[product_id] = Lock()
            return lock

    @contextmanager
    def hold(self, product_id: int) -> Iterator[None]:
        if not self.enabled:
            yield
            return
        lock = self._lock_for(product_id)
        with lock:
            yield

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


product_locks = ProductLockRegistry(enabled=settings.product_locks_enabled)
