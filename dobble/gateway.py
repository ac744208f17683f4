import logging
from typing import Sequence

from dobble.lastfm_client import LastFMClient, LastFMAuthError, LastFMError
from dobble.scrobble_queue import RetryQueue
from dobble.state import TrackIdentity

log = logging.getLogger("lastfm")


class SubmissionGateway:
    """Failure policy around the Last.fm client.

    Now playing updates are best-effort and never retried. Scrobbles that
    fail go to the retry queue instead of being dropped.
    """

    def __init__(self, client: LastFMClient, retry_queue: RetryQueue):
        self.client = client
        self.retry_queue = retry_queue

    def announce(self, track: TrackIdentity) -> bool:
        try:
            self.client.update_now_playing(track)
        except LastFMError as e:
            log.warning("Setting now playing failed for %s: %s", track, e)
            return False
        log.debug("Now playing sent: %s", track)
        return True

    def submit(self, track: TrackIdentity) -> bool:
        try:
            self.client.scrobble(track)
        except LastFMAuthError as e:
            log.error("Scrobble failed (auth), adding to queue: %s", e)
            self.retry_queue.append(track)
            return False
        except LastFMError as e:
            log.warning("Failed to scrobble track, adding to queue: %s", e)
            self.retry_queue.append(track)
            return False
        log.info("Scrobbled: %s%s", track, f" [{track.album}]" if track.album else "")
        return True

    def resubmit(self, track: TrackIdentity) -> None:
        """Scrobble a previously queued track. Errors propagate."""
        self.client.scrobble(track)
        log.info("Scrobbled queued track: %s", track)

    def submit_batch(self, tracks: Sequence[TrackIdentity]) -> None:
        """Scrobble several tracks in one call. Errors propagate."""
        self.client.scrobble_many(tracks)
        log.info("Scrobbled batch of %s tracks", len(tracks))
