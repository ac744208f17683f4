"""Tests for MPRIS metadata parsing and player discovery."""

from __future__ import annotations

import pytest

from conftest import FakeFinder, FakePlayer
from dobble.playback import PlaybackStatus, parse_metadata, wait_for_player


class TestPlaybackStatus:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Playing", PlaybackStatus.PLAYING),
            ("paused", PlaybackStatus.PAUSED),
            (" Stopped ", PlaybackStatus.STOPPED),
            ("Buffering", PlaybackStatus.UNKNOWN),
            (None, PlaybackStatus.UNKNOWN),
        ],
    )
    def test_parse(self, raw, expected: PlaybackStatus) -> None:
        assert PlaybackStatus.parse(raw) is expected


class TestParseMetadata:
    def test_list_of_artists(self) -> None:
        meta = parse_metadata({
            "xesam:title": "Idioteque",
            "xesam:artist": ["Radiohead", " "],
            "xesam:album": "Kid A",
        })

        assert meta.title == "Idioteque"
        assert meta.artists == ["Radiohead"]
        assert meta.album == "Kid A"

    def test_single_artist_string(self) -> None:
        assert parse_metadata({"xesam:artist": "Radiohead"}).artists == ["Radiohead"]

    def test_missing_fields(self) -> None:
        meta = parse_metadata({"xesam:title": "  "})

        assert meta.title is None
        assert meta.artists == []
        assert meta.album is None


class TestWaitForPlayer:
    def test_retries_with_fixed_backoff(self) -> None:
        player = FakePlayer()
        finder = FakeFinder(None, None, player)
        sleeps: list[float] = []

        assert wait_for_player(finder, sleep=sleeps.append) is player
        assert sleeps == [5.0, 5.0]
