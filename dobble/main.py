import os
import logging

from dobble.auth import AuthenticationError, authenticate, storage_dir
from dobble.flusher import QueueFlusher
from dobble.gateway import SubmissionGateway
from dobble.lastfm_client import LastFMClient
from dobble.loop import PollLoop
from dobble.playback import PlayerError
from dobble.scrobble_queue import RetryQueue
from dobble.state import PlaybackTracker
from dobble.worker import SubmissionWorker

# -------------------------
# Configuration via ENV VARS
# -------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LASTFM_API_KEY = os.getenv("LASTFM_API_KEY")
LASTFM_API_SECRET = os.getenv("LASTFM_API_SECRET")
LASTFM_SESSION_KEY = os.getenv("LASTFM_SESSION_KEY")

log = logging.getLogger("dobble")


def setup_logging():
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        force=True,  # ensure our config is used even if libs pre-configure logging
    )


def run():
    # Validate Last.fm configuration up-front for clear errors
    if not LASTFM_API_KEY or not LASTFM_API_SECRET:
        raise SystemExit("LASTFM_API_KEY and LASTFM_API_SECRET are required")

    storage = storage_dir()
    try:
        storage.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SystemExit(f"Failed to create storage directory {storage}: {e}")

    session_key = LASTFM_SESSION_KEY
    if not session_key:
        try:
            session_key = authenticate(LASTFM_API_KEY, LASTFM_API_SECRET, storage)
        except AuthenticationError as e:
            raise SystemExit(f"Failed to authenticate to Last.fm: {e}")

    # D-Bus is only needed once we are about to poll a player
    try:
        from dobble.player import PlayerFinder
    except ImportError as e:
        raise SystemExit(f"MPRIS support needs dbus-python (pip install dobble[mpris]): {e}")

    try:
        finder = PlayerFinder()
    except PlayerError as e:
        raise SystemExit(str(e))

    client = LastFMClient(LASTFM_API_KEY, LASTFM_API_SECRET, session_key=session_key)
    retry_queue = RetryQueue()
    gateway = SubmissionGateway(client, retry_queue)
    flusher = QueueFlusher(gateway, retry_queue)
    worker = SubmissionWorker(gateway, flusher).start()
    tracker = PlaybackTracker(worker)

    log.info("Starting MPRIS → Last.fm scrobbler. Storage: %s", storage)
    PollLoop(finder, tracker, worker, flusher).run()


def main():
    setup_logging()
    try:
        run()
    except KeyboardInterrupt:
        log.info("Shutting down…")


if __name__ == "__main__":
    main()
