"""Per-key mutual exclusion for read-modify-write sequences.

A cart belongs to one user and a payment is verified under its own id; two
requests touching the same key must not interleave their load → mutate →
save steps. Locks are created on demand and dropped once no holder or
waiter remains, so the registry does not grow with the number of users.
"""

import threading
from contextlib import contextmanager


class KeyedLocks:
    """A registry of re-entrant locks addressed by string key."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str):
        key = str(key)
        with self._guard:
            lock = self._locks.setdefault(key, threading.RLock())
            self._holders[key] = self._holders.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._holders[key] -= 1
                if self._holders[key] == 0:
                    del self._holders[key]
                    del self._locks[key]
