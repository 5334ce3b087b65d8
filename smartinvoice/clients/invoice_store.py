"""
Parameterized access to the invoice, SMS profile and SMS log tables.

The schema belongs to the point-of-sale system; nothing here creates or
migrates tables.
"""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from smartinvoice.models import InvoiceRecord, SmsLogEntry, SmsProfile

PENDING_FLAG = "F"
UPLOADED_FLAG = "T"
ACTIVE_FLAG = "T"

_SELECT_PENDING = text(
    "SELECT IDX, CUSTOMERID, MOBILENO, FILENAME, PDFDATA, DOWNLOAD "
    "FROM tb_SMART_INVOICE WHERE DOWNLOAD = :pending"
)
_MARK_UPLOADED = text(
    "UPDATE tb_SMART_INVOICE SET DOWNLOAD = :uploaded "
    "WHERE IDX = :idx AND DOWNLOAD = :pending"
)
_SELECT_PROFILE = text(
    "SELECT CUSTOMER_ID, SMARTINVOICE_ACTIVE, SMS_USERNAME, SMS_PASSWORD "
    "FROM tb_SMS_MAIN WHERE CUSTOMER_ID = :customer_id"
)
_INSERT_LOG = text(
    "INSERT INTO tb_SMS_LOG (CUSTOMER_ID, SMS_USER, SMS_PASSWORD, PHONE_NUMBER, URL) "
    "VALUES (:customer_id, :sms_user, :sms_password, :phone_number, :url)"
)


class DatabaseError(Exception):
    """Raised when a query against the point-of-sale database fails."""


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


class InvoiceStore:
    """Read pending invoices and record their progress."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def fetch_pending(self) -> List[InvoiceRecord]:
        """Return every invoice row whose download flag is still pending."""
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(_SELECT_PENDING, {"pending": PENDING_FLAG}).mappings().all()
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Failed to fetch pending invoices: {exc}") from exc

        return [
            InvoiceRecord(
                idx=row["IDX"],
                customer_id=_as_text(row["CUSTOMERID"]),
                mobile_no=_as_text(row["MOBILENO"]),
                file_name=_as_text(row["FILENAME"]),
                pdf_data=bytes(row["PDFDATA"] or b""),
                downloaded=_as_text(row["DOWNLOAD"]) == UPLOADED_FLAG,
            )
            for row in rows
        ]

    def mark_uploaded(self, idx: int) -> bool:
        """Flip a row from pending to uploaded.

        Returns False when the row was no longer pending.
        """
        try:
            with self._engine.begin() as conn:
                result = conn.execute(
                    _MARK_UPLOADED,
                    {"uploaded": UPLOADED_FLAG, "pending": PENDING_FLAG, "idx": idx},
                )
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Failed to mark invoice {idx} as uploaded: {exc}") from exc
        return result.rowcount == 1

    def get_sms_profile(self, customer_id: str) -> Optional[SmsProfile]:
        try:
            with self._engine.connect() as conn:
                row = conn.execute(_SELECT_PROFILE, {"customer_id": customer_id}).mappings().first()
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Failed to load SMS profile for {customer_id}: {exc}") from exc

        if row is None:
            return None
        return SmsProfile(
            customer_id=_as_text(row["CUSTOMER_ID"]),
            smart_invoice_active=_as_text(row["SMARTINVOICE_ACTIVE"]) == ACTIVE_FLAG,
            username=_as_text(row["SMS_USERNAME"]),
            password=_as_text(row["SMS_PASSWORD"]),
        )

    def record_sms_log(self, entry: SmsLogEntry) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(_INSERT_LOG, entry.model_dump())
        except SQLAlchemyError as exc:
            raise DatabaseError(f"Failed to write SMS log for {entry.customer_id}: {exc}") from exc


__all__ = ["DatabaseError", "InvoiceStore"]
