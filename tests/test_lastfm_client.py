"""Tests for the pylast wrapper and its error mapping."""

from __future__ import annotations

import pylast
import pytest

from conftest import make_track
from dobble.lastfm_client import (
    LastFMAuthError,
    LastFMClient,
    LastFMNetworkError,
    LastFMRateLimitError,
    LastFMUnknownError,
)


@pytest.fixture
def network(mocker):
    return mocker.Mock(spec=pylast.LastFMNetwork)


@pytest.fixture
def lfm(network) -> LastFMClient:
    return LastFMClient("key", "secret", network=network)


class TestLastFMClient:
    def test_requires_session_key(self) -> None:
        with pytest.raises(ValueError):
            LastFMClient("key", "secret")

    def test_now_playing_passes_track_fields(self, lfm: LastFMClient, network) -> None:
        lfm.update_now_playing(make_track(album="Kid A"))

        network.update_now_playing.assert_called_once_with(
            artist="Radiohead", title="Idioteque", album="Kid A"
        )

    def test_scrobble_uses_start_time_and_drops_empty_album(self, lfm: LastFMClient, network) -> None:
        lfm.scrobble(make_track())

        network.scrobble.assert_called_once_with(
            artist="Radiohead", title="Idioteque", album=None, timestamp=1_700_000_000
        )

    def test_scrobble_many_sends_one_batch(self, lfm: LastFMClient, network) -> None:
        lfm.scrobble_many([make_track(title="one"), make_track(title="two")])

        network.scrobble_many.assert_called_once()
        (batch,), _ = network.scrobble_many.call_args
        assert [item["title"] for item in batch] == ["one", "two"]

    def test_scrobble_many_with_nothing_is_a_no_op(self, lfm: LastFMClient, network) -> None:
        lfm.scrobble_many([])

        network.scrobble_many.assert_not_called()

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            ("9", LastFMAuthError),
            ("4", LastFMAuthError),
            ("14", LastFMAuthError),
            ("29", LastFMRateLimitError),
            ("11", LastFMUnknownError),
        ],
    )
    def test_ws_errors_are_mapped(self, lfm: LastFMClient, network, status: str, expected) -> None:
        network.scrobble.side_effect = pylast.WSError(network, status, "details")

        with pytest.raises(expected):
            lfm.scrobble(make_track())

    def test_transport_errors_are_network_errors(self, lfm: LastFMClient, network) -> None:
        network.update_now_playing.side_effect = pylast.NetworkError(network, OSError("down"))

        with pytest.raises(LastFMNetworkError):
            lfm.update_now_playing(make_track())
