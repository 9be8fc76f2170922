"""Shared fixtures for gchatctl tests."""

from __future__ import annotations

import io
from datetime import datetime, timedelta, timezone

import pytest
from rich.console import Console

from config.app_config import ConfigStore
from oauth.models import OAuthClient, OAuthToken, StoredToken
from utils.storage import TokenStorage

GCHATCTL_ENV = (
    "GCHATCTL_CLIENT_ID",
    "GCHATCTL_CLIENT_SECRET",
    "GCHATCTL_PROFILE",
    "GCHATCTL_SCOPES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in GCHATCTL_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=500, force_terminal=False, color_system=None)


def output_of(console: Console) -> str:
    return console.file.getvalue()


@pytest.fixture
def storage(tmp_path):
    return TokenStorage(tmp_path)


@pytest.fixture
def config_store(tmp_path):
    return ConfigStore(tmp_path)


@pytest.fixture
def oauth_client():
    return OAuthClient(client_id="client-123", client_secret="")


def make_stored(
    access_token: str = "access-1",
    refresh_token: str = "refresh-1",
    expires_in: float = 3600,
    mode: str = "browser",
) -> StoredToken:
    now = datetime.now(timezone.utc)
    return StoredToken(
        token=OAuthToken(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type="Bearer",
            expiry=now + timedelta(seconds=expires_in),
        ),
        scopes=["https://www.googleapis.com/auth/chat.messages"],
        mode=mode,
        saved_at=now,
    )


class RecordingStorage(TokenStorage):
    """TokenStorage that counts writes"""

    def __init__(self, config_dir):
        super().__init__(config_dir)
        self.saves = []

    def save(self, profile, record):
        self.saves.append((profile, record))
        super().save(profile, record)
