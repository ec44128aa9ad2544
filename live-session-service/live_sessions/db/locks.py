# live_sessions/db/locks.py
"""
Per-session mutual exclusion for the record store.

Row-level ``SELECT ... FOR UPDATE`` serializes writers across processes on
PostgreSQL, but it is a no-op on SQLite and does nothing for threads that
share a process-local identity map. This registry adds an in-process lock
keyed by session id so that the read-check-write sequence of every mutation
runs alone for that session, while different sessions never wait on each
other.
"""

import logging
from contextlib import contextmanager
from threading import Lock
from typing import Dict, Iterator, List

logger = logging.getLogger(__name__)


class SessionLockRegistry:
    """Hands out one lock per session id, dropping it once nobody holds it."""

    def __init__(self) -> None:
        # session_id -> [lock, number of threads holding or waiting]
        self._locks: Dict[str, List] = {}
        self._guard = Lock()

    @contextmanager
    def hold(self, session_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(session_id)
            if entry is None:
                entry = [Lock(), 0]
                self._locks[session_id] = entry
            entry[1] += 1
        lock = entry[0]

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(session_id, None)

    def active_count(self) -> int:
        """Number of session ids that currently have a lock allocated."""
        with self._guard:
            return len(self._locks)


# Singleton instance
session_locks = SessionLockRegistry()
