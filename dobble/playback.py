import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

log = logging.getLogger("player")


class PlaybackStatus(Enum):
    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value) -> "PlaybackStatus":
        text = str(value).strip().lower() if value is not None else ""
        for status in cls:
            if status.value.lower() == text:
                return status
        return cls.UNKNOWN


@dataclass
class PlayerMetadata:
    title: str | None = None
    artists: list[str] = field(default_factory=list)
    album: str | None = None


def _text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_metadata(raw: Mapping) -> PlayerMetadata:
    """Read the xesam fields of an MPRIS metadata map.

    Players disagree on whether xesam:artist is a list or a single string,
    both are accepted.
    """
    artists = raw.get("xesam:artist")
    if artists is None:
        names = []
    elif isinstance(artists, str):
        names = [artists]
    else:
        names = [str(a) for a in artists]

    return PlayerMetadata(
        title=_text(raw.get("xesam:title")),
        artists=[n.strip() for n in names if n and n.strip()],
        album=_text(raw.get("xesam:album")),
    )


# Amount of time to sleep in between checking for an active player.
WAIT_FOR_PLAYER_TIME = 5.0


class PlayerError(Exception): ...
class PlayerNotFound(PlayerError): ...


def wait_for_player(finder, backoff: float = WAIT_FOR_PLAYER_TIME,
                    sleep: Callable[[float], None] = time.sleep):
    """Block until the finder reports an active player."""
    waiting = False
    while True:
        try:
            player = finder.find_active()
        except PlayerNotFound:
            if not waiting:
                log.info("Waiting for a media player…")
                waiting = True
            sleep(backoff)
            continue
        log.info("Using player %s", player)
        return player
