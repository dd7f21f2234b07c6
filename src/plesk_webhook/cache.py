"""Lock-guarded slot for the record id of the in-flight challenge."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class ChallengeCache:
    """Holds at most one provider record id.

    Every operation takes the same re-entrant lock, so callers can wrap a
    check-then-act sequence in :meth:`locked` and still use ``get``/``set``/``take``
    inside it.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._record_id: str | None = None

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the cache lock for the duration of the block."""
        with self._lock:
            yield

    def get(self) -> str | None:
        with self._lock:
            return self._record_id

    def set(self, record_id: str) -> None:
        with self._lock:
            self._record_id = record_id

    def take(self) -> str | None:
        """Return the cached record id and clear the slot."""
        with self._lock:
            record_id, self._record_id = self._record_id, None
            return record_id
