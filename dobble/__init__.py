"""Scrobble the track playing on a local MPRIS media player to Last.fm."""

__version__ = "0.1.0"
