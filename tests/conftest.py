"""Shared fakes for the scrobbler tests."""

from __future__ import annotations

import pytest

from dobble.lastfm_client import LastFMNetworkError
from dobble.playback import PlaybackStatus, PlayerMetadata, PlayerNotFound
from dobble.state import TrackIdentity


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeClient:
    """Stands in for LastFMClient and records every call by track key."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.failing = False

    def _maybe_fail(self) -> None:
        if self.failing:
            raise LastFMNetworkError("service unreachable")

    def update_now_playing(self, track: TrackIdentity) -> None:
        self.calls.append(("now_playing", (track.artist, track.title)))
        self._maybe_fail()

    def scrobble(self, track: TrackIdentity) -> None:
        self.calls.append(("scrobble", (track.artist, track.title)))
        self._maybe_fail()

    def scrobble_many(self, tracks) -> None:
        self.calls.append(("scrobble_many", [(t.artist, t.title) for t in tracks]))
        self._maybe_fail()

    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.calls]


class RecordingDispatcher:
    def __init__(self) -> None:
        self.announced: list[TrackIdentity] = []
        self.submitted: list[TrackIdentity] = []

    def announce(self, track: TrackIdentity) -> None:
        self.announced.append(track)

    def submit(self, track: TrackIdentity) -> None:
        self.submitted.append(track)


class FakePlayer:
    def __init__(self, name: str = "fake") -> None:
        self.name = name
        self.running = True
        self.status = PlaybackStatus.PLAYING
        self.meta = PlayerMetadata()
        self.status_error: Exception | None = None

    def play(self, artist: str | None, title: str | None, album: str | None = None) -> None:
        self.status = PlaybackStatus.PLAYING
        self.meta = PlayerMetadata(title=title, artists=[artist] if artist else [], album=album)

    def is_running(self) -> bool:
        return self.running

    def playback_status(self) -> PlaybackStatus:
        if self.status_error is not None:
            raise self.status_error
        return self.status

    def metadata(self) -> PlayerMetadata:
        return self.meta


class FakeFinder:
    """Hands out queued players, raising PlayerNotFound for None entries."""

    def __init__(self, *players: FakePlayer | None) -> None:
        self.players = list(players)
        self.calls = 0

    def find_active(self) -> FakePlayer:
        self.calls += 1
        player = self.players.pop(0) if len(self.players) > 1 else self.players[0]
        if player is None:
            raise PlayerNotFound("nothing on the bus")
        return player


def make_track(artist: str = "Radiohead", title: str = "Idioteque", album: str = "") -> TrackIdentity:
    return TrackIdentity(artist=artist, title=title, album=album, started_at=1_700_000_000.0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()
