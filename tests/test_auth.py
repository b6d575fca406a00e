# tests/test_auth.py
import json
import time

import pytest

from musicglobe.core.settings import Settings
from musicglobe.spotify import auth as auth_mod
from musicglobe.spotify.auth import TokenManager, TokenSet
from musicglobe.spotify.errors import Unauthorized


class FakeResponse:
    def __init__(self, status_code, data):
        self.status_code = status_code
        self._data = data

    def json(self):
        return self._data

    def raise_for_status(self):
        pass


def test_env_token_wins(tmp_path):
    mgr = TokenManager(Settings(access_token="from-env", token_file=str(tmp_path / "none.json")))
    assert mgr.get_access_token() == "from-env"


def test_missing_token_file_is_unauthorized(tmp_path):
    mgr = TokenManager(Settings(access_token=None, token_file=str(tmp_path / "none.json")))
    with pytest.raises(Unauthorized):
        mgr.get_access_token()


def test_expired_token_is_refreshed_and_saved(tmp_path, monkeypatch):
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps(TokenSet("old", "refresh-1", time.time() - 10).to_dict()))

    posted = {}

    def fake_post(url, data=None, timeout=None):
        posted.update(url=url, data=data)
        return FakeResponse(200, {"access_token": "new", "expires_in": 3600})

    monkeypatch.setattr(auth_mod.requests, "post", fake_post)

    mgr = TokenManager(Settings(client_id="cid", access_token=None, token_file=str(path)))
    assert mgr.get_access_token() == "new"
    assert posted["url"] == auth_mod.TOKEN_URL
    assert posted["data"]["refresh_token"] == "refresh-1"
    assert posted["data"]["client_id"] == "cid"

    saved = json.loads(path.read_text())
    assert saved["access_token"] == "new"
    # refresh response had no refresh_token: keep the old one
    assert saved["refresh_token"] == "refresh-1"


def test_no_refresh_token_is_unauthorized(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps({"access_token": "old", "expires_at": 0}))
    mgr = TokenManager(Settings(access_token=None, token_file=str(path)))
    with pytest.raises(Unauthorized):
        mgr.get_access_token()


def test_token_file_without_access_token_is_unauthorized(tmp_path):
    path = tmp_path / "tokens.json"
    path.write_text(json.dumps({"refresh_token": "r", "expires_at": 0}))
    mgr = TokenManager(Settings(access_token=None, token_file=str(path)))
    with pytest.raises(Unauthorized):
        mgr.load_token()
