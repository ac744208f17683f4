"""
Background worker that performs every Last.fm call off the poll loop.

The poll loop only enqueues jobs; a single daemon thread runs them in order,
so network latency never stalls polling and queue flushes never overlap.
"""

from __future__ import annotations
import logging
import queue
import threading
from dataclasses import dataclass

from dobble.flusher import QueueFlusher
from dobble.gateway import SubmissionGateway
from dobble.state import TrackIdentity

log = logging.getLogger("worker")

ANNOUNCE = "announce"
SUBMIT = "submit"
FLUSH = "flush"


@dataclass(frozen=True)
class Job:
    kind: str
    track: TrackIdentity | None = None


class SubmissionWorker:
    def __init__(self, gateway: SubmissionGateway, flusher: QueueFlusher):
        self.gateway = gateway
        self.flusher = flusher
        self._jobs: queue.Queue[Job] = queue.Queue()
        self._flush_lock = threading.Lock()
        self._flush_pending = False
        self._thread: threading.Thread | None = None

    # -------- producer side (poll loop) --------
    def announce(self, track: TrackIdentity) -> None:
        self._jobs.put(Job(ANNOUNCE, track.copy()))

    def submit(self, track: TrackIdentity) -> None:
        self._jobs.put(Job(SUBMIT, track.copy()))

    def request_flush(self) -> bool:
        """Schedule a queue flush unless one is already pending or running.

        Returns False when the request was dropped.
        """
        with self._flush_lock:
            # a running flush holds the queue lock; never wait on it here
            if self._flush_pending:
                log.debug("Flush already in progress; request dropped")
                return False
            if self.flusher.retry_queue.is_empty():
                return False
            self._flush_pending = True
        self._jobs.put(Job(FLUSH))
        return True

    # -------- consumer side --------
    def start(self) -> "SubmissionWorker":
        if self._thread is None:
            self._thread = threading.Thread(target=self._run, name="dobble-submit", daemon=True)
            self._thread.start()
        return self

    def wait_idle(self) -> None:
        """Block until every job enqueued so far has been handled."""
        self._jobs.join()

    def _run(self) -> None:
        while True:
            job = self._jobs.get()
            try:
                self._handle(job)
            except Exception:
                log.exception("Unexpected error while handling %s job", job.kind)
            finally:
                self._jobs.task_done()

    def _handle(self, job: Job) -> None:
        if job.kind == ANNOUNCE:
            self.gateway.announce(job.track)
        elif job.kind == SUBMIT:
            self.gateway.submit(job.track)
        elif job.kind == FLUSH:
            try:
                self.flusher.flush()
            finally:
                with self._flush_lock:
                    self._flush_pending = False
