"""Expose constructed client wrappers."""

from .database import create_database_engine
from .google_auth import GoogleOAuthClient
from .google_drive import GoogleDriveClient
from .invoice_store import InvoiceStore
from .sms_gateway import SmsGatewayClient
from .token_file import TokenFile

__all__ = [
    "GoogleDriveClient",
    "GoogleOAuthClient",
    "InvoiceStore",
    "SmsGatewayClient",
    "TokenFile",
    "create_database_engine",
]
