"""Per-table lock registry.

Engine read-modify-write cycles on the same table name are serialized
through one lock per casefolded table name. Locks only coordinate
threads inside one process; separate processes sharing a durable base
path are not coordinated. A lock is dropped from the registry once no
thread holds or waits on it, so deleted or idle table names do not
accumulate.
"""

from __future__ import annotations

from contextlib import contextmanager
import threading
from typing import Iterator
import weakref

from core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from core.errors import ReferenceTableLockTimeoutError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class TableLockRegistry:
    """Lazily created locks keyed by table name."""

    def __init__(self, timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS) -> None:
        self._timeout_seconds = timeout_seconds
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._meta_lock = threading.Lock()

    @contextmanager
    def hold(self, table_name: str, operation: str) -> Iterator[None]:
        """Hold the lock for ``table_name`` for the duration of the block.

        Raises:
            ReferenceTableLockTimeoutError: If the lock is not acquired in time.
        """
        lock = self._get_or_create_lock(table_name)
        if not lock.acquire(timeout=self._timeout_seconds):
            _LOGGER.warning(
                "table_lock_timeout",
                table_name=table_name,
                operation=operation,
                timeout_seconds=self._timeout_seconds,
            )
            raise ReferenceTableLockTimeoutError(
                f"{operation}: timed out after {self._timeout_seconds}s waiting for the "
                f"lock on table '{table_name}'. Retry once the concurrent write completes."
            )
        try:
            yield
        finally:
            lock.release()

    def tracked_lock_count(self) -> int:
        """Return how many table locks are currently referenced."""
        with self._meta_lock:
            return len(self._locks)

    def _get_or_create_lock(self, table_name: str) -> threading.Lock:
        with self._meta_lock:
            folded_name = table_name.casefold()
            lock = self._locks.get(folded_name)
            if lock is None:
                lock = threading.Lock()
                self._locks[folded_name] = lock
            return lock
