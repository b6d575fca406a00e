# musicglobe/spotify/collect.py
"""
Gather the records that end up on the globe.

Strategy:
- Walk the user's playlists (first N) and pull tracks until there are enough.
- Tracks with an audio preview go first within each playlist, since those can be
  played in place; the rest follow.
- Top up with recently-played history when playlists yield too little, or use
  history alone when the user has no playlists.
- Cap the total so the globe stays readable.
"""

import logging
import random
from typing import List, Optional

from musicglobe.globe.models import PlayRecord
from musicglobe.spotify.client import SpotifyClient
from musicglobe.spotify.errors import SpotifyAPIError

logger = logging.getLogger(__name__)


class RecordCollector:
    def __init__(
        self,
        client: SpotifyClient,
        *,
        max_playlists: int = 20,
        target: int = 80,
        min_records: int = 20,
        cap: int = 100,
        per_playlist: int = 50,
        history_limit: int = 50,
        shuffle: bool = False,
        rng: Optional[random.Random] = None,
    ):
        """
        target: stop walking playlists once this many records are collected
        min_records: below this, recent history is appended
        cap: hard upper bound on returned records
        shuffle: mix the final order (otherwise playlist order is kept)
        rng: random source for shuffle (pass a seeded one for tests)
        """
        self.client = client
        self.max_playlists = max_playlists
        self.target = target
        self.min_records = min_records
        self.cap = cap
        self.per_playlist = per_playlist
        self.history_limit = history_limit
        self.shuffle = shuffle
        self.rng = rng or random.Random()

    def collect(self) -> List[PlayRecord]:
        playlists = self.client.playlists()

        if not playlists:
            logger.info("no playlists found, using recent history")
            records = self.client.recently_played(limit=self.history_limit)
        else:
            records = self._from_playlists(playlists)
            if len(records) < self.min_records:
                logger.info("playlists yielded %d tracks, adding recent history", len(records))
                records.extend(self.client.recently_played(limit=self.history_limit))

        records = records[: self.cap]

        if self.shuffle:
            self.rng.shuffle(records)

        logger.info("collected %d records", len(records))
        return records

    def history_only(self) -> List[PlayRecord]:
        records = self.client.recently_played(limit=self.history_limit)[: self.cap]
        if self.shuffle:
            self.rng.shuffle(records)
        return records

    def _from_playlists(self, playlists) -> List[PlayRecord]:
        records: List[PlayRecord] = []
        for pl in playlists[: self.max_playlists]:
            if len(records) >= self.target:
                break

            name = pl.get("name") or pl.get("id")
            try:
                tracks = self.client.playlist_tracks(pl["id"], limit=self.per_playlist)
            except SpotifyAPIError as e:
                # one broken playlist shouldn't sink the whole globe
                logger.warning("failed to fetch playlist %s: %s", name, e)
                continue

            valid = [t for t in tracks if t.track_name]
            with_preview = [t for t in valid if t.preview_url]
            others = [t for t in valid if not t.preview_url]
            logger.debug("playlist %r: %d previews, %d others", name, len(with_preview), len(others))

            records.extend(with_preview)
            records.extend(others)
        return records
