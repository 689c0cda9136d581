from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class KeyedLocks:
    """Hands out one re-entrant lock per entity key.

    Locks are created on first use and kept for the lifetime of the store,
    since entities are never deleted. Callers look the entity up first so
    unknown keys never get a lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.RLock] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    def get(self, key: Hashable) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self.get(key):
            yield
