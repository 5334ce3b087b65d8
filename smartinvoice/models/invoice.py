"""
Rows read from and written to the point-of-sale database.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class InvoiceRecord(BaseModel):
    """A generated invoice waiting in ``tb_SMART_INVOICE``."""

    idx: int = Field(..., description="Row identifier (IDX).")
    customer_id: str
    mobile_no: str = Field("", description="Phone number exactly as captured at the till.")
    file_name: str
    pdf_data: bytes = Field(..., repr=False)
    downloaded: bool = False


class SmsProfile(BaseModel):
    """Per-customer SMS settings from ``tb_SMS_MAIN``."""

    customer_id: str
    smart_invoice_active: bool
    username: str = ""
    password: str = Field("", repr=False)


class SmsLogEntry(BaseModel):
    """Audit record appended to ``tb_SMS_LOG`` after a successful send."""

    customer_id: str
    sms_user: str
    sms_password: str = Field(..., repr=False)
    phone_number: str
    url: str


__all__ = ["InvoiceRecord", "SmsLogEntry", "SmsProfile"]
