"""Tests for the per-profile token store and the app config."""

from __future__ import annotations

import os
import platform

import pytest

from config.app_config import AppConfig, ConfigStore, choose_profile
from oauth.errors import ConfigurationError, TokenNotFoundError, TokenStoreError
from oauth.models import OAuthClient
from utils.storage import TokenStorage, safe_name

from conftest import make_stored


def test_save_and_load_round_trip(storage):
    record = make_stored(access_token="a1", refresh_token="r1")
    storage.save("work", record)

    loaded = storage.load("work")
    assert loaded == record
    assert loaded.token.expiry == record.token.expiry
    assert loaded.token.expiry.tzinfo is not None


def test_load_missing_profile_raises_not_found(storage):
    with pytest.raises(TokenNotFoundError) as excinfo:
        storage.load("nobody")
    assert excinfo.value.profile == "nobody"


def test_load_corrupt_file_raises_store_error(storage):
    path = storage.token_path("broken")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(TokenStoreError) as excinfo:
        storage.load("broken")
    assert not isinstance(excinfo.value, TokenNotFoundError)


def test_delete_is_idempotent(storage):
    storage.save("work", make_stored())
    storage.delete("work")
    storage.delete("work")
    with pytest.raises(TokenNotFoundError):
        storage.load("work")


def test_save_overwrites_and_leaves_no_temp_files(storage, tmp_path):
    storage.save("work", make_stored(access_token="first"))
    storage.save("work", make_stored(access_token="second"))

    assert storage.load("work").token.access_token == "second"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["token_work.json"]


@pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
def test_token_file_permissions(tmp_path):
    store = TokenStorage(tmp_path / "nested")
    store.save("work", make_stored())

    assert os.stat(store.token_path("work")).st_mode & 0o777 == 0o600
    assert os.stat(tmp_path / "nested").st_mode & 0o777 == 0o700


@pytest.mark.parametrize(
    "profile,expected",
    [
        ("work", "work"),
        ("", "default"),
        ("   ", "default"),
        (" a/b\\c:d e ", "a_b_c_d_e"),
    ],
)
def test_safe_name(profile, expected):
    assert safe_name(profile) == expected


def test_token_path_uses_safe_name(storage, tmp_path):
    assert storage.token_path("my team") == tmp_path / "token_my_team.json"


def test_config_missing_file_returns_defaults(config_store):
    cfg = config_store.load()
    assert cfg == AppConfig()
    assert cfg.default_profile == "default"


def test_config_round_trip(config_store):
    cfg = AppConfig(
        default_profile="work",
        oauth_client=OAuthClient(client_id="cid", client_secret="sec"),
        scopes=["a", "b"],
    )
    config_store.save(cfg)
    assert config_store.load() == cfg


def test_config_blank_default_profile_is_normalized(config_store):
    config_store.config_path.write_text('{"default_profile": ""}', encoding="utf-8")
    assert config_store.load().default_profile == "default"


def test_config_corrupt_file_raises(config_store):
    config_store.config_path.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        config_store.load()


def test_choose_profile_priority(monkeypatch):
    assert choose_profile("flag", "cfg", env_value="env") == "flag"
    assert choose_profile("", "cfg", env_value="env") == "env"
    assert choose_profile("", "cfg", env_value="") == "cfg"
    assert choose_profile(" ", " ", env_value="") == "default"

    monkeypatch.setenv("GCHATCTL_PROFILE", " from-env ")
    assert choose_profile("", "cfg") == "from-env"


def test_config_store_path(tmp_path):
    assert ConfigStore(tmp_path).config_path == tmp_path / "config.json"
