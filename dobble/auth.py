"""
Last.fm session credentials.

A session key is stored in <data dir>/dobble/session-key. When it is absent
the user authorizes the application in a browser once and the resulting key
is saved for the next start.
"""

from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Callable

import pylast
import requests

log = logging.getLogger("auth")

API_ROOT = "https://ws.audioscrobbler.com/2.0/"
AUTH_URL = "http://www.last.fm/api/auth/?api_key={api_key}&token={token}"
SESSION_KEY_FILE = "session-key"


class AuthenticationError(Exception): ...


def storage_dir() -> Path:
    override = os.getenv("DOBBLE_DATA_DIR")
    if override:
        return Path(override).expanduser()
    data_home = os.getenv("XDG_DATA_HOME") or os.path.join(Path.home(), ".local", "share")
    return Path(data_home) / "dobble"


def load_session_key(path: Path) -> str | None:
    try:
        key = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    return key or None


def request_token(api_key: str, timeout: int = 10) -> str:
    try:
        resp = requests.get(
            API_ROOT,
            params={"method": "auth.gettoken", "format": "json", "api_key": api_key},
            timeout=timeout,
        )
        resp.raise_for_status()
        token = resp.json()["token"]
    except (requests.RequestException, ValueError, KeyError) as e:
        raise AuthenticationError(f"Could not get an auth token: {e}") from e
    return token


def authenticate(api_key: str, api_secret: str, storage: Path,
                 prompt: Callable[[str], str] = input) -> str:
    """Return a Last.fm session key, running the browser flow if none is stored."""
    key_file = storage / SESSION_KEY_FILE

    # if the key file exists authenticate with that
    key = load_session_key(key_file)
    if key:
        log.info("Using stored Last.fm session key from %s", key_file)
        return key

    # get a token from last.fm and ask the user to authenticate with it
    token = request_token(api_key)
    url = AUTH_URL.format(api_key=api_key, token=token)
    print(f"Please visit the following link and hit enter once allowed: {url}")
    prompt("")

    network = pylast.LastFMNetwork(api_key=api_key, api_secret=api_secret)
    try:
        key = pylast.SessionKeyGenerator(network).get_web_auth_session_key(url, token)
    except pylast.PyLastError as e:
        raise AuthenticationError(f"Could not exchange token for a session key: {e}") from e

    try:
        key_file.write_text(key, encoding="utf-8")
    except OSError as e:
        raise AuthenticationError(f"Could not save session key to {key_file}: {e}") from e

    print(f"Successfully authenticated with the Last.fm API and saved credentials to {key_file}")
    return key
