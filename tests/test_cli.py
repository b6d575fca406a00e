# tests/test_cli.py
import json
import random
from datetime import datetime, timezone

from musicglobe.globe.models import PlayRecord
from musicglobe.spotify.errors import Unauthorized
from musicglobe.ui import cli

PLAYED = datetime(2024, 5, 1, tzinfo=timezone.utc)

HISTORY = [
    PlayRecord(
        track_id=f"h{i}", track_name=f"History {i}", artist_name="A", album_id="al", album_name="Al",
        played_at=PLAYED, duration_ms=1000, popularity=10, spotify_uri=f"spotify:track:h{i}",
    )
    for i in range(30)
]


class FakeClient:
    def __init__(self, history=HISTORY, playlists=(), tracks=None, fail=None):
        self._history = list(history)
        self._playlists = list(playlists)
        self._tracks = tracks or {}
        self.fail = fail

    def current_user(self):
        if self.fail:
            raise self.fail
        return {"id": "me", "display_name": "Me"}

    def playlists(self):
        return self._playlists

    def playlist_tracks(self, playlist_id, limit=50):
        return self._tracks[playlist_id]

    def recently_played(self, limit=50):
        return self._history[:limit]


def use_client(monkeypatch, client):
    monkeypatch.setattr(cli, "SpotifyClient", lambda settings: client)


def test_fetch_places_collected_records(monkeypatch, capsys):
    tracks = {"p1": HISTORY[:25]}
    use_client(monkeypatch, FakeClient(history=[], playlists=[{"id": "p1", "name": "Mix"}], tracks=tracks))
    assert cli.main(["fetch"]) == 0
    out = capsys.readouterr()
    doc = json.loads(out.out)
    assert doc["count"] == 25
    assert [n["track_id"] for n in doc["nodes"]] == [r.track_id for r in HISTORY[:25]]
    assert "Connected as Me" in out.err


def test_fetch_history_only_with_limit(monkeypatch, capsys):
    use_client(monkeypatch, FakeClient(playlists=[{"id": "p1"}]))
    assert cli.main(["fetch", "--history-only", "--limit", "3"]) == 0
    doc = json.loads(capsys.readouterr().out)
    assert [n["track_id"] for n in doc["nodes"]] == ["h0", "h1", "h2"]


def test_fetch_shuffle_uses_seed(monkeypatch, capsys):
    use_client(monkeypatch, FakeClient())
    assert cli.main(["fetch", "--history-only", "--limit", "10", "--shuffle", "--seed", "7"]) == 0
    doc = json.loads(capsys.readouterr().out)

    expected = HISTORY[:10]
    random.Random(7).shuffle(expected)
    assert [n["track_id"] for n in doc["nodes"]] == [r.track_id for r in expected]


def test_fetch_writes_output_file(monkeypatch, tmp_path, capsys):
    use_client(monkeypatch, FakeClient())
    out = tmp_path / "globe.json"
    assert cli.main(["fetch", "-o", str(out), "--radius", "3.0"]) == 0
    doc = json.loads(out.read_text())
    assert doc["radius"] == 3.0
    assert doc["count"] == 30
    assert capsys.readouterr().out == ""


def test_fetch_empty_history_exits_1(monkeypatch, capsys):
    use_client(monkeypatch, FakeClient(history=[]))
    assert cli.main(["fetch"]) == 1
    assert "No listening history found" in capsys.readouterr().err


def test_fetch_spotify_error_exits_1(monkeypatch, capsys):
    use_client(monkeypatch, FakeClient(fail=Unauthorized("token expired")))
    assert cli.main(["fetch"]) == 1
    err = capsys.readouterr().err
    assert "Spotify error: token expired" in err
