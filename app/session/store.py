from __future__ import annotations

"""In-memory TTL session store for the /password flow.

Sessions live only in process memory and are lost on restart. A map lock
guards the dictionary itself; each entry carries its own re-entrant lock so
that operations on the same user are serialized while different users never
wait on each other beyond the short map critical section.

Lock order is always entry lock -> map lock.
"""

from typing import Callable, Dict, Optional, TypeVar
import time
import threading

from app.types import Phase, Session


R = TypeVar("R")


class _Entry:
    __slots__ = ("session", "lock")

    def __init__(self, session: Session) -> None:
        self.session = session
        self.lock = threading.RLock()


class SessionStore:
    """Per-user session mapping with absolute TTL semantics."""

    def __init__(self, ttl_seconds: int = 300, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._lock = threading.Lock()
        self._data: Dict[int, _Entry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    @property
    def active_count(self) -> int:
        return len(self)

    def _current(self, user_id: int) -> Optional[_Entry]:
        with self._lock:
            return self._data.get(user_id)

    def create(self, user_id: int) -> None:
        """Start a fresh session for user_id, discarding any previous one."""
        fresh = _Entry(Session(phase=Phase.AWAITING_LENGTH, expires_at=self.clock() + self.ttl_seconds))
        while True:
            old = self._current(user_id)
            if old is None:
                with self._lock:
                    if user_id not in self._data:
                        self._data[user_id] = fresh
                        return
                continue
            # Wait for any in-flight mutation of the old session to finish
            with old.lock:
                with self._lock:
                    if self._data.get(user_id) is old:
                        self._data[user_id] = fresh
                        return

    def with_session_mut(self, user_id: int, fn: Callable[[Session], R]) -> Optional[R]:
        """Run fn with exclusive access to the user's session.

        Returns fn's result, or None when the user has no session. fn may call
        remove() for the same user to end the session atomically.
        """
        while True:
            entry = self._current(user_id)
            if entry is None:
                return None
            with entry.lock:
                # The entry may have been replaced or removed while we waited
                if self._current(user_id) is not entry:
                    continue
                return fn(entry.session)

    def get(self, user_id: int) -> Optional[Session]:
        """Return a copy of the user's session, for inspection only."""
        return self.with_session_mut(user_id, lambda s: s.model_copy())

    def remove(self, user_id: int) -> None:
        """Delete the user's session. Removing a missing session is a no-op."""
        entry = self._current(user_id)
        if entry is None:
            return
        with entry.lock:
            with self._lock:
                if self._data.get(user_id) is entry:
                    del self._data[user_id]

    def sweep(self, now: float) -> int:
        """Remove every session whose expires_at <= now; return how many went."""
        with self._lock:
            candidates = [
                (user_id, entry)
                for user_id, entry in self._data.items()
                if entry.session.expires_at <= now
            ]

        removed = 0
        for user_id, entry in candidates:
            with entry.lock:
                with self._lock:
                    if self._data.get(user_id) is entry:
                        del self._data[user_id]
                        removed += 1
        return removed
