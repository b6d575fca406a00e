# musicglobe/spotify/auth.py
"""
Token storage and refresh for the Spotify client.

Getting the first token (the PKCE login in a browser) is left to an external
tool; this module only picks the result up:
- loads tokens from a local JSON file, or a raw access token from the environment
- refreshes expired tokens with the refresh_token grant and writes them back

Notes:
- For production, don't persist refresh tokens to plaintext files.
"""

from __future__ import annotations
import json
import logging
import os
import time
from dataclasses import asdict, dataclass
from typing import Optional

import requests

from musicglobe.core.settings import Settings, settings as default_settings
from musicglobe.spotify.errors import Unauthorized

logger = logging.getLogger(__name__)

SPOTIFY_ACCOUNTS = "https://accounts.spotify.com"
TOKEN_URL = SPOTIFY_ACCOUNTS + "/api/token"

# refresh a minute early so a token doesn't expire mid-request
EXPIRY_MARGIN_SECS = 60


@dataclass
class TokenSet:
    access_token: str
    refresh_token: Optional[str]
    expires_at: float  # epoch seconds

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d) -> "TokenSet":
        """Read a persisted token file payload; only access_token is required."""
        return cls(
            access_token=d["access_token"],
            refresh_token=d.get("refresh_token"),
            expires_at=float(d.get("expires_at") or 0.0),
        )

    @classmethod
    def from_token_response(cls, data, previous_refresh: Optional[str] = None) -> "TokenSet":
        # refresh responses sometimes omit refresh_token (Spotify docs): keep the old one
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", previous_refresh),
            expires_at=time.time() + int(data.get("expires_in", 3600)) - EXPIRY_MARGIN_SECS,
        )

    def expired(self) -> bool:
        return time.time() > self.expires_at


class TokenManager:
    """
    Usage pattern:
      mgr = TokenManager()
      token = mgr.get_access_token()   # loads from disk, refreshes if needed
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self._tokens: Optional[TokenSet] = None

    # Token storage -------------------------------------
    def load_token(self) -> TokenSet:
        if self.settings.access_token:
            # env override: no refresh token, trust it for an hour
            self._tokens = TokenSet(self.settings.access_token, None, time.time() + 3600)
            return self._tokens

        path = self.settings.token_file
        if not os.path.exists(path):
            raise Unauthorized(f"No Spotify token found at {path}. Log in with your OAuth tool first.")
        try:
            with open(path, "r", encoding="utf8") as fh:
                self._tokens = TokenSet.from_dict(json.load(fh))
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise Unauthorized(f"Could not read Spotify token file {path}: {e}") from e
        return self._tokens

    def save_token(self) -> None:
        if not self._tokens or self.settings.access_token:
            return
        try:
            with open(self.settings.token_file, "w", encoding="utf8") as fh:
                json.dump(self._tokens.to_dict(), fh)
        except OSError as e:
            # not fatal: the fresh token still works for this run
            logger.warning("could not persist tokens to %s: %s", self.settings.token_file, e)

    # Token refresh/access ---------------------------------------------------
    def refresh_token(self) -> TokenSet:
        if self._tokens is None:
            self.load_token()
        if not self._tokens.refresh_token:
            raise Unauthorized("No refresh token available: log in again.")

        logger.info("refreshing Spotify access token")
        payload = {
            "grant_type": "refresh_token",
            "refresh_token": self._tokens.refresh_token,
            "client_id": self.settings.client_id,
        }
        r = requests.post(TOKEN_URL, data=payload, timeout=self.settings.http_timeout)
        if r.status_code in (400, 401):
            raise Unauthorized("Refresh token rejected: log in again.")
        r.raise_for_status()
        self._tokens = TokenSet.from_token_response(r.json(), previous_refresh=self._tokens.refresh_token)
        self.save_token()
        return self._tokens

    def get_access_token(self) -> str:
        """Returns a valid access token, refreshing it if expired."""
        if self._tokens is None:
            self.load_token()
        if self._tokens.expired():
            self.refresh_token()
        return self._tokens.access_token
