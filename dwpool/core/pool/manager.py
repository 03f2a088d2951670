"""
Registry of named connection pools.

One sqlalchemy QueuePool per datasource name. First-time creation of a name is
serialised with a per-name lock so concurrent callers share a single pool;
different names never wait on each other.
"""

import logging
import threading
import weakref
from collections.abc import Callable
from typing import Any

from sqlalchemy.pool import QueuePool

from dwpool.core.config import settings

_log = logging.getLogger(__name__)


def build_pool(
    creator: Callable[[], Any],
    *,
    size: int,
    timeout: float | None = None,
    recycle: int | None = None,
) -> QueuePool:
    """
    QueuePool capped at *size* connections; connections are opened on demand.

    Connections are not reset on checkin: every backend runs in autocommit, so
    a ROLLBACK would only cost a round trip.
    """
    return QueuePool(
        creator,
        pool_size=size,
        max_overflow=0,
        timeout=settings.EXTERNAL_DB_POOL_TIMEOUT if timeout is None else timeout,
        recycle=settings.EXTERNAL_DB_POOL_RECYCLE_SEC if recycle is None else recycle,
        reset_on_return=None,
    )


def warm_pool(pool: QueuePool, count: int) -> None:
    """
    Open *count* connections up front and check them back in.

    One-off: QueuePool keeps no minimum, so connections that are later recycled
    or invalidated are not replaced until a caller needs them.
    """
    conns = []
    try:
        for _ in range(count):
            conns.append(pool.connect())
    finally:
        for conn in conns:
            conn.close()


class PoolRegistry:
    """Datasource name -> pool. The registry owns every pool it holds."""

    def __init__(self) -> None:
        self._pools: dict[str, QueuePool] = {}
        self._lock = threading.Lock()
        # entries live only while some caller holds the lock object
        self._creation_locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )

    def get(self, name: str) -> QueuePool | None:
        with self._lock:
            return self._pools.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._pools)

    def creation_lock(self, name: str) -> threading.Lock:
        """Lock held while the pool for *name* is being created."""
        with self._lock:
            return self._creation_locks.setdefault(name, threading.Lock())

    def register(self, name: str, pool: QueuePool) -> QueuePool:
        """
        Store *pool* under *name* unless one is already there.

        Returns the pool that ends up registered; a losing *pool* is disposed.
        """
        with self._lock:
            existing = self._pools.get(name)
            if existing is None:
                self._pools[name] = pool
                return pool
        pool.dispose()
        return existing

    def pop(self, name: str) -> QueuePool | None:
        with self._lock:
            return self._pools.pop(name, None)

    def stats(self) -> dict[str, dict[str, int]]:
        """Checked-in / checked-out counts per pool, for monitoring."""
        with self._lock:
            items = list(self._pools.items())
        return {
            name: {
                "size": pool.size(),
                "checked_in": pool.checkedin(),
                "checked_out": pool.checkedout(),
            }
            for name, pool in items
        }

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._pools

    def __len__(self) -> int:
        with self._lock:
            return len(self._pools)
