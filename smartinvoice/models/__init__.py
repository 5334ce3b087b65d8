"""Domain models shared across clients and services."""

from .drive import DriveDocument, UploadedDocument
from .invoice import InvoiceRecord, SmsLogEntry, SmsProfile
from .oauth import GoogleClientConfig, StoredOAuthToken

__all__ = [
    "DriveDocument",
    "GoogleClientConfig",
    "InvoiceRecord",
    "SmsLogEntry",
    "SmsProfile",
    "StoredOAuthToken",
    "UploadedDocument",
]
