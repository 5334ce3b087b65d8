"""
Helpers for acquiring, refreshing and persisting the Google Drive credential.

The process holds one offline-access credential. It is obtained once at
startup, refreshed shortly before it expires, and every refresh is announced
to subscribers so the host can persist it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx
from google.oauth2.credentials import Credentials

from smartinvoice.clients.google_auth import (
    GoogleOAuthClient,
    InvalidGrantError,
    OAuthTokenExchangeError,
)
from smartinvoice.clients.token_file import TokenFile
from smartinvoice.models import StoredOAuthToken

logger = logging.getLogger(__name__)

TokenListener = Callable[[Dict[str, Any]], Any]
Prompt = Callable[[str], str]


class AuthError(Exception):
    """The storage credential could not be obtained or refreshed."""


class RequiresReauthenticationError(AuthError):
    """A human has to run the authorization-code flow again."""


class NoRefreshTokenError(AuthError):
    """The code exchange did not yield a refresh token."""


class GoogleCredentialStore:
    """Manages access to the persisted Google OAuth credential."""

    _REFRESH_WINDOW = timedelta(minutes=5)

    def __init__(self, oauth_client: GoogleOAuthClient, token_file: TokenFile) -> None:
        self._oauth = oauth_client
        self._token_file = token_file
        self._token: Optional[StoredOAuthToken] = None
        self._listeners: List[TokenListener] = []

    def subscribe(self, listener: TokenListener) -> None:
        """Call ``listener`` with the changed fields after every refresh."""
        self._listeners.append(listener)

    async def acquire(self, prompt: Prompt | None = None) -> Credentials:
        """Load the persisted credential and prove it still works.

        Without a token file the interactive flow runs when ``prompt`` is
        given; otherwise re-authentication is required.
        """
        try:
            record = self._token_file.load()
        except ValueError as exc:
            raise RequiresReauthenticationError(
                f"{self._token_file.path} is not valid JSON. "
                "Delete it and run the 'authorize' command."
            ) from exc
        if record is None:
            if prompt is None:
                raise RequiresReauthenticationError(
                    f"No token found at {self._token_file.path}. Run the 'authorize' command."
                )
            logger.warning("No stored token found; starting manual authorization")
            return await self.authorize_interactively(prompt)

        token = StoredOAuthToken.model_validate(record)
        if not token.refresh_token:
            raise RequiresReauthenticationError(
                f"{self._token_file.path} has no refresh_token. "
                "Delete it and run the 'authorize' command."
            )
        self._token = token
        logger.info("Loaded stored token from %s", self._token_file.path)

        await self._refresh()
        logger.info("Stored token refreshed successfully")
        return self._build_credentials()

    async def authorize_interactively(self, prompt: Prompt) -> Credentials:
        """Run the one-time authorization-code exchange and persist the result."""
        auth_url = self._oauth.build_authorization_url()
        code = prompt(auth_url).strip()
        if not code:
            raise AuthError("No authorization code entered.")

        try:
            payload = await self._oauth.exchange_authorization_code(code)
        except OAuthTokenExchangeError as exc:
            raise AuthError(f"Authorization code exchange failed: {exc}") from exc
        except httpx.HTTPError as exc:
            raise AuthError(f"Could not reach the token endpoint: {exc}") from exc

        if not payload.get("refresh_token"):
            raise NoRefreshTokenError(
                "No refresh_token received. Revoke the app's access and authorize again."
            )

        record = self._record_from_payload(payload, issued_at=datetime.now(timezone.utc))
        self._token_file.save(record)
        self._token = StoredOAuthToken.model_validate(record)
        logger.info("New token saved to %s", self._token_file.path)
        return self._build_credentials()

    async def get_credentials(self) -> Credentials:
        """Return live credentials, refreshing when close to expiry."""
        if self._token is None:
            raise AuthError("Credential store used before acquire().")

        expiry = self._token.expiry_utc
        if expiry is None or expiry <= datetime.now(timezone.utc) + self._REFRESH_WINDOW:
            await self._refresh()
        return self._build_credentials()

    async def _refresh(self) -> None:
        assert self._token is not None and self._token.refresh_token
        refreshed_at = datetime.now(timezone.utc)
        try:
            payload = await self._oauth.refresh_token(self._token.refresh_token)
        except InvalidGrantError as exc:
            raise RequiresReauthenticationError(
                "Refresh token rejected (invalid_grant). "
                f"Delete {self._token_file.path} and run the 'authorize' command."
            ) from exc
        except OAuthTokenExchangeError as exc:
            raise AuthError(f"Token refresh failed: {exc}") from exc
        except httpx.HTTPError as exc:
            raise AuthError(f"Could not reach the token endpoint: {exc}") from exc

        update = self._record_from_payload(payload, issued_at=refreshed_at)
        merged = self._token.model_dump(mode="json", exclude_none=True)
        merged.update(update)
        self._token = StoredOAuthToken.model_validate(merged)
        self._publish(update)

    def _publish(self, update: Dict[str, Any]) -> None:
        for listener in self._listeners:
            try:
                listener(update)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Failed to persist refreshed token")

    @staticmethod
    def _record_from_payload(payload: Dict[str, Any], *, issued_at: datetime) -> Dict[str, Any]:
        record: Dict[str, Any] = {"access_token": payload["access_token"]}
        if payload.get("expires_in"):
            expires_at = issued_at + timedelta(seconds=int(payload["expires_in"]))
            record["expires_at"] = expires_at.isoformat()
        for key in ("refresh_token", "token_type", "scope"):
            if payload.get(key):
                record[key] = payload[key]
        return record

    def _build_credentials(self) -> Credentials:
        assert self._token is not None
        expiry = self._token.expiry_utc
        client = self._oauth.client_config
        return Credentials(
            token=self._token.access_token,
            # Refreshing is left to this store so every new token is published.
            refresh_token=None,
            token_uri=self._oauth.token_uri,
            client_id=client.client_id,
            client_secret=client.client_secret,
            scopes=list(self._oauth.scopes),
            # google-auth compares expiry against a naive UTC clock.
            expiry=expiry.replace(tzinfo=None) if expiry else None,
        )


__all__ = [
    "AuthError",
    "GoogleCredentialStore",
    "NoRefreshTokenError",
    "RequiresReauthenticationError",
]
