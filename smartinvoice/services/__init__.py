"""Service layer exports."""

from .credential_store import (
    AuthError,
    GoogleCredentialStore,
    NoRefreshTokenError,
    RequiresReauthenticationError,
)
from .invoice_poller import InvoicePoller, TickSummary
from .notifications import NotificationOutcome, NotificationService, NotifyError
from .phone import InvalidPhoneNumberError, normalize_phone
from .retention import RetentionSweeper

__all__ = [
    "AuthError",
    "GoogleCredentialStore",
    "InvalidPhoneNumberError",
    "InvoicePoller",
    "NoRefreshTokenError",
    "NotificationOutcome",
    "NotificationService",
    "NotifyError",
    "RequiresReauthenticationError",
    "RetentionSweeper",
    "TickSummary",
    "normalize_phone",
]
