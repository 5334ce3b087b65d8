"""
Factory functions that build each shared client once per process.
"""

import json
from functools import lru_cache
from pathlib import Path

from sqlalchemy.engine import Engine

from smartinvoice.clients import (
    GoogleDriveClient,
    GoogleOAuthClient,
    InvoiceStore,
    SmsGatewayClient,
    TokenFile,
    create_database_engine,
)
from smartinvoice.core.config import get_settings
from smartinvoice.models import GoogleClientConfig
from smartinvoice.services import GoogleCredentialStore, NotificationService


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


def load_client_config(path: Path) -> GoogleClientConfig:
    """Read the client secrets JSON downloaded from the Google Cloud console."""
    if not path.exists():
        raise FileNotFoundError(
            f"Client secrets file not found at {path}. Download it from the Google Cloud console."
        )
    return GoogleClientConfig.from_secrets(json.loads(path.read_text(encoding="utf-8")))


@lru_cache()
def get_engine() -> Engine:
    """Provide the pooled database engine, created on first use."""
    return create_database_engine(_settings().database)


@lru_cache()
def get_invoice_store() -> InvoiceStore:
    return InvoiceStore(get_engine())


@lru_cache()
def get_google_oauth_client() -> GoogleOAuthClient:
    """Create a singleton Google OAuth client."""
    settings = _settings()
    client_config = load_client_config(settings.google.client_secrets_file)
    return GoogleOAuthClient(client_config, settings.google.scopes)


@lru_cache()
def get_token_file() -> TokenFile:
    return TokenFile(_settings().google.token_file)


@lru_cache()
def get_credential_store() -> GoogleCredentialStore:
    """Provide the credential store with refreshes persisted to the token file."""
    token_file = get_token_file()
    store = GoogleCredentialStore(get_google_oauth_client(), token_file)
    store.subscribe(token_file.merge)
    return store


@lru_cache()
def get_drive_client() -> GoogleDriveClient:
    """Provide Google Drive client instance."""
    return GoogleDriveClient(get_credential_store())


@lru_cache()
def get_sms_client() -> SmsGatewayClient:
    settings = _settings()
    return SmsGatewayClient(
        str(settings.sms.gateway_url),
        timeout_seconds=settings.sms.timeout_seconds,
    )


@lru_cache()
def get_notification_service() -> NotificationService:
    settings = _settings()
    return NotificationService(
        store=get_invoice_store(),
        sms_client=get_sms_client(),
        message_template=settings.sms.message_template,
    )


__all__ = [
    "get_credential_store",
    "get_drive_client",
    "get_engine",
    "get_google_oauth_client",
    "get_invoice_store",
    "get_notification_service",
    "get_sms_client",
    "get_token_file",
    "load_client_config",
]
