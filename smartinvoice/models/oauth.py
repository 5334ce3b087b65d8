"""
Domain models for OAuth client configuration and token persistence.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class GoogleClientConfig(BaseModel):
    """The ``installed`` (or ``web``) section of a Google client secrets file."""

    client_id: str
    client_secret: str = Field(..., repr=False)
    redirect_uri: str
    auth_uri: str = "https://accounts.google.com/o/oauth2/auth"
    token_uri: str = "https://oauth2.googleapis.com/token"

    @classmethod
    def from_secrets(cls, payload: Dict[str, Any]) -> "GoogleClientConfig":
        section = payload.get("installed") or payload.get("web")
        if not section:
            raise ValueError("Client secrets must contain an 'installed' or 'web' section.")
        redirect_uris = section.get("redirect_uris") or []
        if not redirect_uris:
            raise ValueError("Client secrets do not list any redirect_uris.")
        data = {
            "client_id": section.get("client_id"),
            "client_secret": section.get("client_secret"),
            "redirect_uri": redirect_uris[0],
        }
        for key in ("auth_uri", "token_uri"):
            if section.get(key):
                data[key] = section[key]
        return cls(**data)


class StoredOAuthToken(BaseModel):
    """Represents the token record persisted in the token file.

    Unknown keys are kept so a merge never drops fields written by other tools.
    """

    model_config = ConfigDict(extra="allow")

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _accept_millisecond_expiry(cls, data: Any) -> Any:
        # Tokens written by the googleapis Node client carry expiry_date in ms.
        if isinstance(data, dict) and not data.get("expires_at") and data.get("expiry_date"):
            data = dict(data)
            data["expires_at"] = datetime.fromtimestamp(
                int(data["expiry_date"]) / 1000, tz=timezone.utc
            )
        return data

    @property
    def expiry_utc(self) -> Optional[datetime]:
        if self.expires_at is None:
            return None
        if self.expires_at.tzinfo is None:
            return self.expires_at.replace(tzinfo=timezone.utc)
        return self.expires_at.astimezone(timezone.utc)


__all__ = ["GoogleClientConfig", "StoredOAuthToken"]
