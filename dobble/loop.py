import logging
import time
from typing import Callable

from dobble.flusher import QueueFlusher
from dobble.playback import PlaybackStatus, PlayerError, wait_for_player
from dobble.state import MissingMetadata, PlaybackTracker, track_from_metadata
from dobble.worker import SubmissionWorker

log = logging.getLogger("dobble")

# Amount of time to sleep whilst watching for events from an active player.
LOOP_TIME = 1.0

# Consecutive status read failures before the player is looked up again.
STATUS_FAILURE_LIMIT = 3


class PollLoop:
    """Drives the tracker from the active player once per tick."""

    def __init__(self, finder, tracker: PlaybackTracker, worker: SubmissionWorker,
                 flusher: QueueFlusher, interval: float = LOOP_TIME,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.finder = finder
        self.tracker = tracker
        self.worker = worker
        self.flusher = flusher
        self.interval = interval
        self.clock = clock
        self.sleep = sleep
        self.player = None
        self.status_failures = 0
        self.last_check = clock()

    def connect(self) -> None:
        self.player = wait_for_player(self.finder, sleep=self.sleep)
        self.status_failures = 0
        self.tracker.reset()

    def run(self) -> None:
        if self.player is None:
            self.connect()
        self.last_check = self.clock()
        while True:
            self.sleep(self.interval)
            self.tick()

    def tick(self) -> None:
        # push any scrobbles that have been queued every flush interval
        if self.flusher.due():
            self.worker.request_flush()

        now = self.clock()
        elapsed = now - self.last_check
        self.last_check = now

        # replace the player if the current one disconnected
        if self.player is None or not self.player.is_running():
            log.info("Player went away; resetting")
            self.tracker.reset()
            self.connect()
            self.last_check = self.clock()
            return

        try:
            status = self.player.playback_status()
        except PlayerError as e:
            self.status_failures += 1
            log.warning("Failed to read playback status: %s", e)
            if self.status_failures >= STATUS_FAILURE_LIMIT:
                log.info("Player stopped answering; looking for it again")
                self.tracker.reset()
                self.connect()
                self.last_check = self.clock()
            return
        self.status_failures = 0

        if status is PlaybackStatus.STOPPED:
            self.tracker.reset()
            return
        if status is not PlaybackStatus.PLAYING:
            return

        try:
            meta = self.player.metadata()
        except PlayerError as e:
            log.warning("Failed to collect track metadata: %s", e)
            return

        try:
            observed = track_from_metadata(meta.title, meta.artists, meta.album)
        except MissingMetadata as e:
            log.debug("Skipping tick: %s", e)
            return

        self.tracker.observe(observed, elapsed)
