import logging
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Protocol, Sequence

log = logging.getLogger("tracker")

# Amount of playback before a track counts as listened.
SCROBBLE_THRESHOLD = 10.0

# Some players (Plex) prefix the "Artist - Title" string with a play glyph.
PLAY_GLYPH_PREFIX = "▶ "

TITLE_SEPARATOR = " - "


class MissingMetadata(Exception):
    """Raised when a required field cannot be resolved from player metadata."""

    def __init__(self, field_name: str):
        super().__init__(f"missing metadata field {field_name}")
        self.field = field_name


# -------------------------
# Identity of a track
# -------------------------
@dataclass(frozen=True)
class IdentityKey:
    artist: str
    title: str


@dataclass(eq=False)
class TrackIdentity:
    """One observed unit of player metadata.

    Two observations are the same track when their `key` matches; album and
    timing fields never take part in that comparison.
    """
    artist: str
    title: str
    album: str = ""
    scrobbled: bool = False
    playing_for: float = 0.0
    started_at: float = field(default_factory=time.time)

    @property
    def key(self) -> IdentityKey:
        return IdentityKey(self.artist, self.title)

    def same_track(self, other: "TrackIdentity | None") -> bool:
        return other is not None and self.key == other.key

    def copy(self) -> "TrackIdentity":
        return replace(self)

    def __str__(self) -> str:
        return f"{self.artist} — {self.title}"


def track_from_metadata(title: str | None, artists: Sequence[str] | str | None,
                        album: str | None, now: float | None = None) -> TrackIdentity:
    """Derive a TrackIdentity from raw player fields.

    When no artist is reported, "Artist - Title" is split on the first
    separator. Raises MissingMetadata naming the field that could not be
    resolved.
    """
    if not title:
        raise MissingMetadata("title")

    if isinstance(artists, str):
        artist = artists
    else:
        artist = ", ".join(a for a in (artists or ()) if a)

    if not artist:
        head, sep, tail = title.partition(TITLE_SEPARATOR)
        if not sep:
            raise MissingMetadata("artist split from title")
        if head.startswith(PLAY_GLYPH_PREFIX):
            head = head[len(PLAY_GLYPH_PREFIX):]
        artist, title = head, tail

    return TrackIdentity(
        artist=artist,
        title=title,
        album=album or "",
        started_at=time.time() if now is None else now,
    )


# -------------------------
# Session tracking
# -------------------------
class Dispatcher(Protocol):
    def announce(self, track: TrackIdentity) -> None: ...
    def submit(self, track: TrackIdentity) -> None: ...


class TrackerState(Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    SCROBBLED = "scrobbled"


class PlaybackTracker:
    """Follows the currently playing track and decides when to scrobble it.

    A track is announced as now playing as soon as it is first observed and
    scrobbled once, when its accumulated playing time reaches the threshold.
    Playing time only advances on ticks where the same track is observed.
    """

    def __init__(self, dispatcher: Dispatcher, threshold: float = SCROBBLE_THRESHOLD):
        self.dispatcher = dispatcher
        self.threshold = threshold
        self.current: TrackIdentity | None = None

    @property
    def state(self) -> TrackerState:
        if self.current is None:
            return TrackerState.IDLE
        if self.current.scrobbled:
            return TrackerState.SCROBBLED
        return TrackerState.TRACKING

    def observe(self, observed: TrackIdentity | None, elapsed: float) -> TrackerState:
        """Advance one poll tick with the newly observed track (or None)."""
        current = self.current

        if observed is not None and observed.same_track(current):
            current.playing_for += elapsed
            if not current.scrobbled and current.playing_for >= self.threshold:
                log.info("Scrobbling %s after %.1fs", current, current.playing_for)
                self.dispatcher.submit(current)
                current.scrobbled = True
            return self.state

        if observed is None:
            self.reset()
            return self.state

        log.info("Now playing: %s%s", observed, f" [{observed.album}]" if observed.album else "")
        observed.playing_for = 0.0
        observed.scrobbled = False
        self.current = observed
        self.dispatcher.announce(observed)
        return self.state

    def reset(self) -> None:
        if self.current is not None:
            log.debug("No longer tracking %s (played %.1fs)", self.current, self.current.playing_for)
        self.current = None
