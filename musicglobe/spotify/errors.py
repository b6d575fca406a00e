# musicglobe/spotify/errors.py
"""Errors raised by the Spotify client and token manager."""

from typing import Optional


class SpotifyAPIError(RuntimeError):
    """Base for everything the Spotify layer raises on purpose."""


class Unauthorized(SpotifyAPIError):
    def __init__(self, message: str = "Not authorized. Please connect to Spotify."):
        super().__init__(message)


class RequestFailed(SpotifyAPIError):
    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        msg = f"Request failed with status code {status_code}"
        if url:
            msg += f" ({url})"
        super().__init__(msg)


class DecodingFailed(SpotifyAPIError):
    def __init__(self, message: str = "Failed to decode response"):
        super().__init__(message)


class PlaybackFailed(SpotifyAPIError):
    def __init__(self, message: str = "Failed to start playback. Make sure Spotify is open on a device."):
        super().__init__(message)
