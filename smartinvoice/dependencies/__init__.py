"""Expose process-scoped dependency factories."""

from .clients import (
    get_credential_store,
    get_drive_client,
    get_engine,
    get_google_oauth_client,
    get_invoice_store,
    get_notification_service,
    get_sms_client,
    get_token_file,
    load_client_config,
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
