"""Per-entity mutual exclusion for in-process request handling"""

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List

from autosave_ledger.domain.exceptions import ConflictError


class LockRegistry:
    """
    Hands out one lock per entity key, e.g. ("goal", 3) or ("account", 1).

    hold() takes several keys at once in a canonical order so two callers
    locking the same pair can never deadlock, and gives up with a
    ConflictError instead of waiting forever.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, threading.Lock] = {}

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    @contextmanager
    def hold(self, *keys: Hashable) -> Iterator[None]:
        acquired: List[threading.Lock] = []
        try:
            for key in sorted(set(keys), key=repr):
                lock = self._lock_for(key)
                if not lock.acquire(timeout=self.timeout):
                    raise ConflictError(f"Timed out waiting for {key!r}")
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
