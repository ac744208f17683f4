import pylast
import logging
from typing import Sequence

from dobble.state import TrackIdentity

log = logging.getLogger("lastfm")

# Custom error classes so callers can branch
class LastFMError(Exception): ...
class LastFMAuthError(LastFMError): ...
class LastFMRateLimitError(LastFMError): ...
class LastFMNetworkError(LastFMError): ...
class LastFMUnknownError(LastFMError): ...

# 4=Auth failed, 9=Invalid session, 14=Unauthorized token
_AUTH_CODES = ("4", "9", "14")
_RATE_LIMIT_CODES = ("29",)

# Last.fm accepts at most this many scrobbles per request.
BATCH_LIMIT = 50


def _translate(e: Exception) -> LastFMError:
    if isinstance(e, pylast.WSError):
        code = str(e.get_id())
        msg = str(e)
        if code in _AUTH_CODES:
            return LastFMAuthError(msg)
        if code in _RATE_LIMIT_CODES:
            return LastFMRateLimitError(msg)
        return LastFMUnknownError(f"Last.fm API error {code}: {msg}")
    return LastFMNetworkError(str(e))


def _scrobble_params(track: TrackIdentity) -> dict:
    return dict(
        artist=track.artist,
        title=track.title,
        album=track.album or None,
        timestamp=int(track.started_at),
    )


class LastFMClient:
    """Thin wrapper over pylast for update-now-playing + scrobbling."""

    def __init__(self, api_key: str, api_secret: str, session_key: str | None = None,
                 network: pylast.LastFMNetwork | None = None):
        if network is not None:
            self.network = network
        elif session_key:
            self.network = pylast.LastFMNetwork(
                api_key=api_key,
                api_secret=api_secret,
                session_key=session_key,
            )
        else:
            raise ValueError("Missing Last.fm session key")

    def update_now_playing(self, track: TrackIdentity):
        """Push a Now Playing update."""
        try:
            self.network.update_now_playing(
                artist=track.artist, title=track.title, album=track.album or None
            )
        except Exception as e:
            raise _translate(e) from e

    def scrobble(self, track: TrackIdentity):
        """Submit one scrobble, timestamped with when the track started."""
        try:
            self.network.scrobble(**_scrobble_params(track))
        except Exception as e:
            raise _translate(e) from e

    def scrobble_many(self, tracks: Sequence[TrackIdentity]):
        """Submit several scrobbles in one request."""
        if not tracks:
            return
        try:
            self.network.scrobble_many([_scrobble_params(t) for t in tracks])
        except Exception as e:
            raise _translate(e) from e
