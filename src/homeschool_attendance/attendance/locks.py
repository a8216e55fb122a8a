from __future__ import annotations

import threading
from contextlib import ExitStack, contextmanager
from typing import Hashable, Iterable, Iterator


class KeyedLocks:
    """Registry of one lock per record key, e.g. ``(student_id, school_year)``.

    Locks are created on first use and kept for the process lifetime; a
    household has few enough records for that to be negligible.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def hold(self, keys: Iterable[Hashable]) -> Iterator[None]:
        """Hold the locks of all ``keys`` at once.

        Keys are acquired in sorted order so overlapping batches cannot deadlock.
        """

        with ExitStack() as stack:
            for key in sorted(set(keys)):
                lock = self._lock_for(key)
                lock.acquire()
                stack.callback(lock.release)
            yield

    def __len__(self) -> int:
        return len(self._locks)
