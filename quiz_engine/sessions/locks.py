"""
Per-session write locks.

A session has a single writer at a time: each mutating service call holds the
lock for its (kind, id) for the whole read-modify-write. Locks for different
sessions are independent.

A lock only lives while some caller holds or waits on it, so the registry
stays as small as the number of in-flight calls.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from quiz_engine.sessions.state import SessionKind


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class SessionLockRegistry:
    """Hands out one ``threading.Lock`` per (kind, session id)."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple[SessionKind, str], _Entry] = {}

    @contextmanager
    def hold(self, kind: SessionKind, session_id: str) -> Iterator[None]:
        key = (SessionKind(kind), session_id)
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _Entry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    def is_held(self, kind: SessionKind, session_id: str) -> bool:
        with self._guard:
            entry = self._locks.get((SessionKind(kind), session_id))
            return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
