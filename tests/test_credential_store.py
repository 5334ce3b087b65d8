from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from smartinvoice.clients.google_auth import InvalidGrantError
from smartinvoice.clients.token_file import TokenFile
from smartinvoice.models import GoogleClientConfig, StoredOAuthToken
from smartinvoice.services.credential_store import (
    AuthError,
    GoogleCredentialStore,
    NoRefreshTokenError,
    RequiresReauthenticationError,
)


class DummyOAuthClient:
    def __init__(
        self,
        *,
        refreshed_token: str = "refreshed-access",
        refresh_error: Exception | None = None,
        exchange_payload: dict[str, Any] | None = None,
    ) -> None:
        self.client_config = GoogleClientConfig(
            client_id="client",
            client_secret="secret",
            redirect_uri="urn:ietf:wg:oauth:2.0:oob",
        )
        self.scopes = ("https://www.googleapis.com/auth/drive.file",)
        self.token_uri = "https://oauth.example/token"
        self.refreshed_token = refreshed_token
        self.refresh_error = refresh_error
        self.exchange_payload = exchange_payload or {
            "access_token": "new-access",
            "refresh_token": "new-refresh",
            "expires_in": 3599,
            "token_type": "Bearer",
        }
        self.refresh_calls: list[str] = []
        self.codes: list[str] = []

    def build_authorization_url(self) -> str:
        return "https://oauth.example/auth?access_type=offline"

    async def exchange_authorization_code(self, code: str) -> dict[str, Any]:
        self.codes.append(code)
        return dict(self.exchange_payload)

    async def refresh_token(self, refresh_token: str) -> dict[str, Any]:
        self.refresh_calls.append(refresh_token)
        if self.refresh_error is not None:
            raise self.refresh_error
        return {"access_token": self.refreshed_token, "expires_in": 3600, "token_type": "Bearer"}


def _write_token(path: Path, **values: Any) -> None:
    path.write_text(json.dumps(values), encoding="utf-8")


def _build_store(tmp_path: Path, oauth_client: DummyOAuthClient) -> tuple[GoogleCredentialStore, TokenFile]:
    token_file = TokenFile(tmp_path / "token.json")
    store = GoogleCredentialStore(oauth_client, token_file)
    store.subscribe(token_file.merge)
    return store, token_file


@pytest.mark.asyncio
async def test_acquire_refreshes_and_merges_into_token_file(tmp_path: Path) -> None:
    oauth_client = DummyOAuthClient()
    store, token_file = _build_store(tmp_path, oauth_client)
    _write_token(
        token_file.path,
        access_token="stale-access",
        refresh_token="refresh-token",
        scope="https://www.googleapis.com/auth/drive.file",
        installed_by="ops",
    )

    credentials = await store.acquire()

    assert credentials.token == "refreshed-access"
    assert credentials.refresh_token is None
    assert oauth_client.refresh_calls == ["refresh-token"]

    stored = token_file.load()
    assert stored["access_token"] == "refreshed-access"
    assert stored["refresh_token"] == "refresh-token"
    assert stored["installed_by"] == "ops"
    assert datetime.fromisoformat(stored["expires_at"]) > datetime.now(timezone.utc)


@pytest.mark.asyncio
async def test_acquire_rejects_token_without_refresh_token(tmp_path: Path) -> None:
    oauth_client = DummyOAuthClient()
    store, token_file = _build_store(tmp_path, oauth_client)
    _write_token(token_file.path, access_token="only-access")

    with pytest.raises(RequiresReauthenticationError):
        await store.acquire()
    assert oauth_client.refresh_calls == []


@pytest.mark.asyncio
async def test_invalid_grant_requires_reauthentication(tmp_path: Path) -> None:
    oauth_client = DummyOAuthClient(refresh_error=InvalidGrantError('{"error": "invalid_grant"}'))
    store, token_file = _build_store(tmp_path, oauth_client)
    _write_token(token_file.path, access_token="a", refresh_token="revoked")

    with pytest.raises(RequiresReauthenticationError):
        await store.acquire()
    assert token_file.load() == {"access_token": "a", "refresh_token": "revoked"}


@pytest.mark.asyncio
async def test_missing_token_file_without_operator_requires_reauthentication(tmp_path: Path) -> None:
    store, _ = _build_store(tmp_path, DummyOAuthClient())

    with pytest.raises(RequiresReauthenticationError):
        await store.acquire()


@pytest.mark.asyncio
async def test_missing_token_file_runs_interactive_flow(tmp_path: Path) -> None:
    oauth_client = DummyOAuthClient()
    store, token_file = _build_store(tmp_path, oauth_client)
    prompts: list[str] = []

    def prompt(url: str) -> str:
        prompts.append(url)
        return "  4/auth-code \n"

    credentials = await store.acquire(prompt)

    assert prompts == ["https://oauth.example/auth?access_type=offline"]
    assert oauth_client.codes == ["4/auth-code"]
    assert credentials.token == "new-access"
    stored = token_file.load()
    assert stored["refresh_token"] == "new-refresh"
    assert stored["access_token"] == "new-access"
    assert "expires_at" in stored


@pytest.mark.asyncio
async def test_exchange_without_refresh_token_fails(tmp_path: Path) -> None:
    oauth_client = DummyOAuthClient(exchange_payload={"access_token": "a", "expires_in": 3599})
    store, token_file = _build_store(tmp_path, oauth_client)

    with pytest.raises(NoRefreshTokenError):
        await store.authorize_interactively(lambda url: "code")
    assert not token_file.exists()


@pytest.mark.asyncio
async def test_get_credentials_refreshes_only_near_expiry(tmp_path: Path) -> None:
    oauth_client = DummyOAuthClient()
    store, token_file = _build_store(tmp_path, oauth_client)
    _write_token(token_file.path, access_token="a", refresh_token="r")
    updates: list[dict] = []
    store.subscribe(updates.append)

    await store.acquire()
    await store.get_credentials()
    assert len(oauth_client.refresh_calls) == 1

    store._token = store._token.model_copy(
        update={"expires_at": datetime.now(timezone.utc) + timedelta(minutes=1)}
    )
    oauth_client.refreshed_token = "second-access"
    credentials = await store.get_credentials()

    assert credentials.token == "second-access"
    assert len(oauth_client.refresh_calls) == 2
    assert [update["access_token"] for update in updates] == ["refreshed-access", "second-access"]
    assert token_file.load()["access_token"] == "second-access"


@pytest.mark.asyncio
async def test_get_credentials_before_acquire_fails(tmp_path: Path) -> None:
    store, _ = _build_store(tmp_path, DummyOAuthClient())

    with pytest.raises(AuthError):
        await store.get_credentials()


@pytest.mark.asyncio
async def test_listener_failure_does_not_break_refresh(tmp_path: Path) -> None:
    oauth_client = DummyOAuthClient()
    store, token_file = _build_store(tmp_path, oauth_client)
    _write_token(token_file.path, access_token="a", refresh_token="r")

    def broken_listener(update: dict) -> None:
        raise OSError("disk full")

    store.subscribe(broken_listener)

    credentials = await store.acquire()
    assert credentials.token == "refreshed-access"


def test_node_style_expiry_is_understood() -> None:
    token = StoredOAuthToken.model_validate(
        {"access_token": "a", "refresh_token": "r", "expiry_date": 1_700_000_000_000}
    )

    assert token.expiry_utc == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
    assert token.model_dump()["expiry_date"] == 1_700_000_000_000


@pytest.mark.asyncio
async def test_corrupt_token_file_requires_reauthentication(tmp_path: Path) -> None:
    store, token_file = _build_store(tmp_path, DummyOAuthClient())
    token_file.path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RequiresReauthenticationError):
        await store.acquire()
