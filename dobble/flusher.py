import logging
import time
from typing import Callable, List

from dobble.gateway import SubmissionGateway
from dobble.lastfm_client import BATCH_LIMIT, LastFMError
from dobble.scrobble_queue import RetryQueue
from dobble.state import TrackIdentity

log = logging.getLogger("queue")

# Interval to push backed up scrobbles.
PUSH_QUEUE_INTERVAL = 60.0


class QueueFlusher:
    """Pushes queued scrobbles to Last.fm.

    One queued track goes out as a plain scrobble, several go out as a single
    batch in queue order. Backlogs longer than the Last.fm batch limit are
    sent in consecutive chunks; each chunk leaves the queue only when its
    call succeeds, and the first failure leaves the rest untouched.
    """

    def __init__(self, gateway: SubmissionGateway, retry_queue: RetryQueue,
                 interval: float = PUSH_QUEUE_INTERVAL,
                 clock: Callable[[], float] = time.monotonic):
        self.gateway = gateway
        self.retry_queue = retry_queue
        self.interval = interval
        self.clock = clock
        self.last_pushed = clock()

    def due(self) -> bool:
        """True once per interval; restarts the interval when it fires."""
        now = self.clock()
        if now - self.last_pushed < self.interval:
            return False
        self.last_pushed = now
        return True

    def _deliver(self, pending: List[TrackIdentity]) -> None:
        if len(pending) == 1:
            self.gateway.resubmit(pending[0])
        else:
            self.gateway.submit_batch(pending)

    def flush(self) -> int:
        pushed = 0
        while True:
            try:
                sent = self.retry_queue.drain(self._deliver, limit=BATCH_LIMIT)
            except LastFMError as e:
                size = len(self.retry_queue)
                if size == 1:
                    log.warning("Failed to push queued track: %s", e)
                else:
                    log.warning("Failed to push queued batch (%s left): %s", size, e)
                break
            if not sent:
                break
            pushed += sent
        if pushed:
            log.info("Pushed %s queued scrobbles", pushed)
        return pushed
