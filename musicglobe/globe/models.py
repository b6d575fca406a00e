# musicglobe/globe/models.py
"""
Value types for the globe: what was played, and where it sits on the sphere.

Spotify returns a couple of slightly different shapes for "a track the user
listened to":
- recently-played items look like {"track": {...}, "played_at": "..."}
- playlist items look like {"track": {...}, "added_at": "..."}

PlayRecord normalizes both into one flat, immutable record. PlacedNode wraps a
record with its spherical coordinates and the derived cartesian position.
Both are frozen: nodes are built once by the placement engine and not mutated.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

logger = logging.getLogger(__name__)

# distance of every node from the globe centre, in scene units
DEFAULT_RADIUS = 5.2

# (r, g, b) in 0..1, keyed by substring of the primary genre tag; first match wins
_GENRE_COLORS: Tuple[Tuple[Tuple[str, ...], Tuple[float, float, float]], ...] = (
    (("rock",), (1.0, 0.3, 0.3)),
    (("pop",), (1.0, 0.4, 0.8)),
    (("hip hop", "rap"), (0.6, 0.3, 1.0)),
    (("electronic", "edm"), (0.3, 0.8, 1.0)),
    (("jazz",), (1.0, 0.8, 0.3)),
    (("indie", "alternative"), (0.5, 1.0, 0.5)),
)
DEFAULT_GLOW = (0.3, 0.6, 1.0)


class Vec3(NamedTuple):
    x: float
    y: float
    z: float


def spherical_to_cartesian(latitude: float, longitude: float, radius: float) -> Vec3:
    """Degrees in, scene coordinates out. +y is the north pole."""
    lat = math.radians(latitude)
    lon = math.radians(longitude)
    return Vec3(
        radius * math.cos(lat) * math.cos(lon),
        radius * math.sin(lat),
        radius * math.cos(lat) * math.sin(lon),
    )


def parse_timestamp(value: Optional[str]) -> datetime:
    """
    Parse a Spotify ISO-8601 timestamp ("2024-05-01T12:00:00.123Z").
    Missing or garbled values fall back to now (UTC) so one bad item
    doesn't drop a whole page.
    """
    if isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt
        except ValueError:
            logger.debug("unparseable timestamp %r, using now", value)
    elif value:
        logger.debug("non-string timestamp %r, using now", value)
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PlayRecord:
    """One listened-to track, as handed to the placement engine."""
    track_id: str
    track_name: str
    artist_name: str
    album_id: str
    album_name: str
    played_at: datetime
    duration_ms: int
    popularity: int
    spotify_uri: str
    cover_art_url: Optional[str] = None
    genre_tags: Tuple[str, ...] = field(default_factory=tuple)
    preview_url: Optional[str] = None

    # factory methods -----------------------------------------------------
    @classmethod
    def from_track(cls, track: Dict[str, Any], timestamp: Optional[str]) -> "PlayRecord":
        """Build from a Spotify track object plus the timestamp of its envelope."""
        if not track or not isinstance(track, dict):
            raise ValueError("item has no track object (local file or removed track?)")

        artists = track.get("artists") or []
        album = track.get("album") or {}
        images = album.get("images") or []

        return cls(
            track_id=track.get("id") or "",
            track_name=track.get("name") or "",
            artist_name=(artists[0].get("name") if artists else None) or "Unknown",
            album_id=album.get("id") or "",
            album_name=album.get("name") or "",
            played_at=parse_timestamp(timestamp),
            duration_ms=int(track.get("duration_ms") or 0),
            popularity=int(track.get("popularity") or 0),
            spotify_uri=track.get("uri") or "",
            cover_art_url=images[0].get("url") if images else None,
            # genres live on the artist object, which would be one more request per artist
            genre_tags=(),
            preview_url=track.get("preview_url"),
        )

    @classmethod
    def from_play_history_item(cls, item: Dict[str, Any]) -> "PlayRecord":
        return cls.from_track(item.get("track"), item.get("played_at"))

    @classmethod
    def from_playlist_item(cls, item: Dict[str, Any]) -> "PlayRecord":
        # playlists have no play time; when the track was added is the closest thing
        return cls.from_track(item.get("track"), item.get("added_at"))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PlayRecord":
        """Inverse of to_dict(), for locally cached records. Bad entries raise ValueError."""
        if not isinstance(d, dict):
            raise ValueError(f"cached record must be an object, got {type(d).__name__}")
        missing = [k for k in ("track_id", "track_name") if k not in d]
        if missing:
            raise ValueError(f"cached record {d.get('track_id')!r} is missing {', '.join(missing)}")
        try:
            return cls(
                track_id=str(d["track_id"]),
                track_name=str(d["track_name"]),
                artist_name=d.get("artist_name") or "Unknown",
                album_id=d.get("album_id") or "",
                album_name=d.get("album_name") or "",
                played_at=parse_timestamp(d.get("played_at")),
                duration_ms=int(d.get("duration_ms") or 0),
                popularity=int(d.get("popularity") or 0),
                spotify_uri=d.get("spotify_uri") or "",
                cover_art_url=d.get("cover_art_url"),
                genre_tags=tuple(d.get("genre_tags") or ()),
                preview_url=d.get("preview_url"),
            )
        except TypeError as e:
            raise ValueError(f"cached record {d['track_id']!r}: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return {
            "track_id": self.track_id,
            "track_name": self.track_name,
            "artist_name": self.artist_name,
            "album_id": self.album_id,
            "album_name": self.album_name,
            "played_at": self.played_at.isoformat(),
            "duration_ms": self.duration_ms,
            "popularity": self.popularity,
            "spotify_uri": self.spotify_uri,
            "cover_art_url": self.cover_art_url,
            "genre_tags": list(self.genre_tags),
            "preview_url": self.preview_url,
        }


_RECORD_FIELDS = frozenset(f.name for f in fields(PlayRecord))


@dataclass(frozen=True)
class PlacedNode:
    """
    A PlayRecord pinned to the globe.

    position is derived from (latitude, longitude, radius) in __post_init__,
    so the three can never disagree. Use with_coordinates() to move a node.
    """
    record: PlayRecord
    latitude: float
    longitude: float
    radius: float = DEFAULT_RADIUS
    position: Vec3 = field(init=False)

    def __post_init__(self):
        # frozen dataclass: bypass __setattr__ for the derived field
        object.__setattr__(
            self, "position", spherical_to_cartesian(self.latitude, self.longitude, self.radius)
        )

    def with_coordinates(
        self,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        radius: Optional[float] = None,
    ) -> "PlacedNode":
        """Return a copy moved to new coordinates, position recomputed."""
        return replace(
            self,
            latitude=self.latitude if latitude is None else latitude,
            longitude=self.longitude if longitude is None else longitude,
            radius=self.radius if radius is None else radius,
        )

    # ----------------------
    # record passthroughs
    # ----------------------
    def __getattr__(self, name):
        # only reached when normal lookup fails; read through the record's fields
        if name in _RECORD_FIELDS:
            return getattr(self.__dict__["record"], name)
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    # ----------------------
    # visual properties
    # ----------------------
    @property
    def node_size(self) -> float:
        # 0.5x .. 1.0x of the base size, scaled by popularity (0-100)
        return 0.7 * (0.5 + self.record.popularity / 200.0)

    @property
    def glow_color(self) -> Tuple[float, float, float]:
        if not self.record.genre_tags:
            return DEFAULT_GLOW
        primary = self.record.genre_tags[0].lower()
        for needles, color in _GENRE_COLORS:
            if any(n in primary for n in needles):
                return color
        return DEFAULT_GLOW

    @property
    def duration(self) -> str:
        ms = self.record.duration_ms
        return f"{ms // 60000}:{(ms % 60000) // 1000:02d}"

    def to_dict(self) -> Dict[str, Any]:
        d = self.record.to_dict()
        d.update(
            {
                "latitude": self.latitude,
                "longitude": self.longitude,
                "radius": self.radius,
                "position": list(self.position),
                "node_size": self.node_size,
                "glow_color": list(self.glow_color),
            }
        )
        return d


# -------------------------
# small helpers
# -------------------------
def normalize_records(items: Iterable[Dict[str, Any]], kind: str = "history") -> List[PlayRecord]:
    """
    Turn raw Spotify items into PlayRecords.
    kind: "history" (recently-played items) or "playlist" (playlist track items).
    Items without a track object are skipped.
    """
    if kind == "history":
        factory = PlayRecord.from_play_history_item
    elif kind == "playlist":
        factory = PlayRecord.from_playlist_item
    else:
        raise ValueError(f"unknown item kind: {kind!r}")

    out = []
    for it in items:
        try:
            out.append(factory(it))
        except ValueError as e:
            logger.debug("skipping item: %s", e)
    return out
