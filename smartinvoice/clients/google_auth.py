"""
Google OAuth utilities.

These helpers build the offline-access consent URL and talk to the token
endpoint for the authorization-code and refresh-token grants.
"""

from __future__ import annotations

from typing import Any, Dict, Sequence
from urllib.parse import urlencode

import httpx

from smartinvoice.models import GoogleClientConfig


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""


class InvalidGrantError(OAuthTokenExchangeError):
    """The refresh token or authorization code was revoked, expired or reused."""


class GoogleOAuthClient:
    """Build Google authorization URLs and exchange authorization codes."""

    def __init__(
        self,
        client_config: GoogleClientConfig,
        scopes: Sequence[str],
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = client_config
        self._scopes = tuple(scopes)
        self._transport = transport

    @property
    def client_config(self) -> GoogleClientConfig:
        return self._client

    @property
    def scopes(self) -> tuple[str, ...]:
        return self._scopes

    @property
    def token_uri(self) -> str:
        return self._client.token_uri

    def build_authorization_url(self, access_type: str = "offline") -> str:
        """Construct the Google OAuth consent URL.

        ``prompt=consent`` forces Google to issue a refresh token even when the
        account granted access before.
        """
        params = {
            "client_id": self._client.client_id,
            "redirect_uri": self._client.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self._scopes),
            "access_type": access_type,
            "prompt": "consent",
        }
        return f"{self._client.auth_uri}?{urlencode(params)}"

    async def exchange_authorization_code(self, code: str) -> Dict[str, Any]:
        """Exchange an authorization code for a token payload.

        The payload is returned as issued; callers decide whether a missing
        refresh token is acceptable.
        """
        payload = {
            "code": code,
            "client_id": self._client.client_id,
            "client_secret": self._client.client_secret,
            "redirect_uri": self._client.redirect_uri,
            "grant_type": "authorization_code",
        }
        token_payload = await self._post_token(payload)
        if not token_payload.get("access_token"):
            raise OAuthTokenExchangeError("Incomplete token payload returned from Google.")
        return token_payload

    async def refresh_token(self, refresh_token: str) -> Dict[str, Any]:
        """Refresh the access token using a stored refresh token."""
        payload = {
            "client_id": self._client.client_id,
            "client_secret": self._client.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }
        token_payload = await self._post_token(payload)
        if not token_payload.get("access_token") or not token_payload.get("expires_in"):
            raise OAuthTokenExchangeError("Incomplete refresh payload returned from Google.")
        return token_payload

    async def _post_token(self, payload: Dict[str, str]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
            response = await client.post(self._client.token_uri, data=payload)

        if response.status_code != httpx.codes.OK:
            raise self._error_from_response(response)
        return response.json()

    @staticmethod
    def _error_from_response(response: httpx.Response) -> OAuthTokenExchangeError:
        try:
            error_code = response.json().get("error")
        except ValueError:
            error_code = None
        if error_code == "invalid_grant":
            return InvalidGrantError(response.text)
        return OAuthTokenExchangeError(response.text)


__all__ = [
    "GoogleOAuthClient",
    "InvalidGrantError",
    "OAuthTokenExchangeError",
]
