"""
In-memory retry queue for scrobbles that failed immediate submission.

- Shared between the poll loop and the submission worker; every access holds the lock.
- Entries leave the queue only after a confirmed delivery (all-or-nothing per drain).
- Nothing is persisted: queued scrobbles are lost if the process exits.
"""

from __future__ import annotations
import logging
import threading
from typing import Callable, List

from dobble.state import TrackIdentity

log = logging.getLogger("queue")


class RetryQueue:
    def __init__(self):
        self._lock = threading.Lock()
        self._items: List[TrackIdentity] = []

    def append(self, track: TrackIdentity) -> None:
        with self._lock:
            self._items.append(track)
            log.info("Queued scrobble %s; queue size=%s", track, len(self._items))

    def is_empty(self) -> bool:
        with self._lock:
            return not self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def snapshot(self) -> List[TrackIdentity]:
        with self._lock:
            return list(self._items)

    def drain(self, deliver: Callable[[List[TrackIdentity]], None],
              limit: int | None = None) -> int:
        """
        Hands the pending entries, oldest first and at most `limit` of them,
        to `deliver` and removes them once it returns. The lock is held for
        the whole call, so appends wait until the delivery attempt is over. If `deliver` raises, the
        queue is left exactly as it was and the exception propagates.
        """
        with self._lock:
            if not self._items:
                return 0
            pending = list(self._items[:limit])
            deliver(pending)
            del self._items[:len(pending)]
            return len(pending)
