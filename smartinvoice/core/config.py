"""
Application configuration models and helpers.

Centralizes settings management so the long-running poller and the one-off
setup commands share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AnyHttpUrl, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


class DatabaseSettings(BaseSettings):
    """Connection parameters for the point-of-sale database."""

    url: Optional[str] = Field(
        None,
        alias="DATABASE_URL",
        description="Full SQLAlchemy URL. Takes precedence over the individual parts.",
    )
    server: Optional[str] = Field(None, alias="DB_SERVER")
    port: int = Field(1433, alias="DB_PORT", ge=1, le=65535)
    user: Optional[str] = Field(None, alias="DB_USER")
    password: Optional[str] = Field(None, alias="DB_PASSWORD")
    name: Optional[str] = Field(None, alias="DB_NAME")

    @model_validator(mode="after")
    def _require_location(self) -> "DatabaseSettings":
        if self.url:
            return self
        if not self.server or not self.name:
            raise ValueError("Set DATABASE_URL, or DB_SERVER and DB_NAME.")
        return self


class GoogleSettings(BaseSettings):
    """Configuration required for interacting with Google Drive."""

    client_secrets_file: Path = Field(
        Path("credentials.json"),
        alias="GOOGLE_CLIENT_SECRETS_FILE",
        description="Client secrets JSON downloaded from the Google Cloud console.",
    )
    token_file: Path = Field(
        Path("token.json"),
        alias="GOOGLE_TOKEN_FILE",
        description="Where the offline-access credential is persisted.",
    )
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        ("https://www.googleapis.com/auth/drive.file",),
        alias="GOOGLE_OAUTH_SCOPES",
    )
    drive_folder_path: str = Field("SmartInvoices", alias="GOOGLE_DRIVE_FOLDER_PATH")

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())

    @field_validator("drive_folder_path")
    @classmethod
    def _require_folder(cls, value: str) -> str:
        if not any(part.strip() for part in value.split("/")):
            raise ValueError("GOOGLE_DRIVE_FOLDER_PATH must name at least one folder.")
        return value

    @property
    def folder_segments(self) -> list[str]:
        return [part.strip() for part in self.drive_folder_path.split("/") if part.strip()]


class SmsSettings(BaseSettings):
    """SMS gateway configuration. Per-customer credentials live in the database."""

    gateway_url: AnyHttpUrl = Field("https://textit.biz/sendmsg/", alias="SMS_GATEWAY_URL")
    message_template: str = Field(
        "Dear customer, your bill is available at: {link}",
        alias="SMS_MESSAGE_TEMPLATE",
    )
    timeout_seconds: float = Field(10.0, alias="SMS_TIMEOUT_SECONDS", gt=0)

    @field_validator("message_template")
    @classmethod
    def _require_link_placeholder(cls, value: str) -> str:
        if "{link}" not in value:
            raise ValueError("SMS_MESSAGE_TEMPLATE must contain a {link} placeholder.")
        return value


class SchedulerSettings(BaseSettings):
    """Cadence of the poll loop and the retention sweep."""

    poll_interval_seconds: float = Field(10.0, alias="POLL_INTERVAL_SECONDS", gt=0)
    retention_interval_seconds: float = Field(
        24 * 60 * 60, alias="RETENTION_INTERVAL_SECONDS", gt=0
    )
    retention_days: int = Field(7, alias="RETENTION_DAYS", ge=1)


class AppSettings(BaseSettings):
    """Root settings object for the invoice poller."""

    environment: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    sms: SmsSettings = Field(default_factory=SmsSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "DatabaseSettings",
    "GoogleSettings",
    "SchedulerSettings",
    "SmsSettings",
    "get_settings",
]
