# musicglobe/core/settings.py
"""
Runtime settings, read from the environment once at import.

Everything has a usable default so the offline `place` command works with no
configuration at all; only the live `fetch` path needs Spotify credentials.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_TOKEN_FILE = os.path.expanduser("~/.musicglobe_tokens.json")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    client_id: str = field(default_factory=lambda: os.getenv("SPOTIFY_CLIENT_ID", ""))
    token_file: str = field(default_factory=lambda: os.getenv("MUSICGLOBE_TOKEN_FILE", DEFAULT_TOKEN_FILE))
    # set this to skip the token file entirely (short-lived token from another tool)
    access_token: Optional[str] = field(default_factory=lambda: os.getenv("MUSICGLOBE_ACCESS_TOKEN") or None)
    http_timeout: float = field(default_factory=lambda: _env_float("MUSICGLOBE_HTTP_TIMEOUT", 10.0))
    node_radius: float = field(default_factory=lambda: _env_float("MUSICGLOBE_NODE_RADIUS", 5.2))
    log_level: str = field(default_factory=lambda: os.getenv("MUSICGLOBE_LOG_LEVEL", "INFO").upper())


settings = Settings()
