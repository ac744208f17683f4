"""
MPRIS media player access over the D-Bus session bus.

Only the three queries the scrobbler needs are exposed: liveness, playback
status and the current metadata.
"""

from __future__ import annotations
import logging

import dbus

from dobble.playback import PlaybackStatus, PlayerError, PlayerMetadata, PlayerNotFound, parse_metadata

log = logging.getLogger("player")

MPRIS_PREFIX = "org.mpris.MediaPlayer2."
MPRIS_PATH = "/org/mpris/MediaPlayer2"
PLAYER_IFACE = "org.mpris.MediaPlayer2.Player"
PROPERTIES_IFACE = "org.freedesktop.DBus.Properties"


class MprisPlayer:
    def __init__(self, bus: dbus.SessionBus, bus_name: str):
        self.bus = bus
        self.bus_name = bus_name
        # the proxy binds to the unique name that owns bus_name right now
        self.owner = str(bus.get_name_owner(bus_name))
        obj = bus.get_object(self.owner, MPRIS_PATH)
        self._props = dbus.Interface(obj, PROPERTIES_IFACE)

    def __repr__(self) -> str:
        return f"MprisPlayer({self.bus_name})"

    def _get(self, name: str):
        try:
            return self._props.Get(PLAYER_IFACE, name)
        except dbus.exceptions.DBusException as e:
            raise PlayerError(f"{self.bus_name}: cannot read {name}: {e}") from e

    def is_running(self) -> bool:
        try:
            return str(self.bus.get_name_owner(self.bus_name)) == self.owner
        except dbus.exceptions.DBusException:
            return False

    def playback_status(self) -> PlaybackStatus:
        return PlaybackStatus.parse(self._get("PlaybackStatus"))

    def metadata(self) -> PlayerMetadata:
        return parse_metadata(self._get("Metadata"))


class PlayerFinder:
    """Discovers MPRIS players on the session bus."""

    def __init__(self, bus: dbus.SessionBus | None = None):
        try:
            self.bus = bus if bus is not None else dbus.SessionBus()
        except dbus.exceptions.DBusException as e:
            raise PlayerError(f"Could not connect to D-Bus: {e}") from e

    def player_names(self) -> list[str]:
        try:
            names = self.bus.list_names()
        except dbus.exceptions.DBusException as e:
            raise PlayerNotFound(f"Cannot list session bus names: {e}") from e
        return sorted(str(n) for n in names if str(n).startswith(MPRIS_PREFIX))

    def find_active(self) -> MprisPlayer:
        """Pick a playing player, else a paused one, else any player."""
        ranked: dict[PlaybackStatus, MprisPlayer] = {}
        first: MprisPlayer | None = None
        for name in self.player_names():
            try:
                player = MprisPlayer(self.bus, name)
                status = player.playback_status()
            except (PlayerError, dbus.exceptions.DBusException) as e:
                log.debug("Skipping %s: %s", name, e)
                continue
            first = first or player
            ranked.setdefault(status, player)

        for status in (PlaybackStatus.PLAYING, PlaybackStatus.PAUSED):
            if status in ranked:
                return ranked[status]
        if first is None:
            raise PlayerNotFound("No MPRIS player on the session bus")
        return first

