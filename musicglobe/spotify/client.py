# musicglobe/spotify/client.py
import logging
from typing import Any, Dict, List, Optional

import requests

from musicglobe.core.settings import Settings, settings as default_settings
from musicglobe.globe.models import PlayRecord, normalize_records
from musicglobe.spotify.auth import TokenManager
from musicglobe.spotify.errors import DecodingFailed, PlaybackFailed, RequestFailed, Unauthorized

logger = logging.getLogger(__name__)


class SpotifyClient:
    """
    Wrapper around the Spotify Web API.
    Only the pieces the globe needs: who the user is, what they played,
    their playlists, and enough playback control to start a tapped track.
    """

    BASE_URL = "https://api.spotify.com/v1"

    def __init__(
        self,
        settings: Optional[Settings] = None,
        token_mgr: Optional[TokenManager] = None,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings or default_settings
        self.token_mgr = token_mgr or TokenManager(self.settings)
        self.session = session or requests.Session()

    def _headers(self):
        return {"Authorization": f"Bearer {self.token_mgr.get_access_token()}"}

    def _request(self, method: str, path: str, params=None, payload=None) -> requests.Response:
        url = f"{self.BASE_URL}/{path.lstrip('/')}"

        def send():
            return self.session.request(
                method, url, headers=self._headers(), params=params, json=payload,
                timeout=self.settings.http_timeout,
            )

        r = send()
        # If expired refresh and retry once
        if r.status_code == 401:
            logger.debug("401 from %s, refreshing token and retrying", url)
            self.token_mgr.refresh_token()
            r = send()
            if r.status_code == 401:
                raise Unauthorized()
        return r

    def _get(self, path, params=None) -> Dict[str, Any]:
        r = self._request("GET", path, params=params)
        if not 200 <= r.status_code < 300:
            raise RequestFailed(r.status_code, path)
        try:
            return r.json()
        except ValueError as e:
            logger.error("bad JSON from %s: %s", path, e)
            raise DecodingFailed() from e

    def _put(self, path, payload=None) -> requests.Response:
        return self._request("PUT", path, payload=payload)

    # Public API -----------------------------------------------------

    def current_user(self) -> Dict[str, Any]:
        return self._get("me")

    def recently_played(self, limit: int = 50) -> List[PlayRecord]:
        # duplicates are kept on purpose: the whole history becomes nodes
        data = self._get("me/player/recently-played", params={"limit": limit})
        return normalize_records(data.get("items", []), kind="history")

    def playlists(self, limit: int = 50) -> List[Dict[str, Any]]:
        # first page only
        data = self._get("me/playlists", params={"limit": limit})
        return [p for p in data.get("items", []) if p]

    def playlist_tracks(self, playlist_id: str, limit: int = 50) -> List[PlayRecord]:
        data = self._get(f"playlists/{playlist_id}/tracks", params={"limit": limit})
        return normalize_records(data.get("items", []), kind="playlist")

    def album_tracks(self, album_id: str) -> List[Dict[str, Any]]:
        data = self._get(f"albums/{album_id}")
        return (data.get("tracks") or {}).get("items", [])

    def play_track(self, uri: str) -> bool:
        """
        Start playback of one track on the user's active device.
        Returns False when there is no active device (404) so the caller can
        fall back to opening the URI elsewhere.
        """
        r = self._put("me/player/play", {"uris": [uri]})
        if r.status_code == 404:
            logger.info("no active Spotify device for %s", uri)
            return False
        if r.status_code >= 400:
            raise PlaybackFailed()
        return True

    def pause(self) -> None:
        r = self._put("me/player/pause")
        if r.status_code >= 400:
            raise PlaybackFailed(f"Failed to pause playback (status {r.status_code})")

    def resume(self) -> None:
        r = self._put("me/player/play")
        if r.status_code >= 400:
            raise PlaybackFailed(f"Failed to resume playback (status {r.status_code})")
