from __future__ import annotations

import pytest
from sqlalchemy import text

from smartinvoice.clients.invoice_store import DatabaseError, InvoiceStore
from smartinvoice.models import SmsLogEntry

from _pos_db import download_flag, insert_invoice, insert_profile, sms_log_rows


def test_fetch_pending_returns_only_pending_rows(engine, invoice_store: InvoiceStore) -> None:
    insert_invoice(engine, idx=1, pdf=b"one")
    insert_invoice(engine, idx=2, download="T")
    insert_invoice(engine, idx=3, phone="94771234567", customer_id="C002")

    rows = invoice_store.fetch_pending()

    assert sorted(row.idx for row in rows) == [1, 3]
    first = next(row for row in rows if row.idx == 1)
    assert first.pdf_data == b"one"
    assert first.file_name == "invoice-1.pdf"
    assert first.downloaded is False


def test_mark_uploaded_transitions_once(engine, invoice_store: InvoiceStore) -> None:
    insert_invoice(engine, idx=7)

    assert invoice_store.mark_uploaded(7) is True
    assert download_flag(engine, 7) == "T"
    assert invoice_store.mark_uploaded(7) is False
    assert download_flag(engine, 7) == "T"
    assert invoice_store.fetch_pending() == []


def test_get_sms_profile_trims_credentials(engine, invoice_store: InvoiceStore) -> None:
    insert_profile(engine, customer_id="C001", username="  user  ", password=" secret ")
    insert_profile(engine, customer_id="C002", active="F")

    active = invoice_store.get_sms_profile("C001")
    inactive = invoice_store.get_sms_profile("C002")

    assert active is not None
    assert active.smart_invoice_active is True
    assert active.username == "user"
    assert active.password == "secret"
    assert inactive is not None and inactive.smart_invoice_active is False
    assert invoice_store.get_sms_profile("missing") is None


def test_record_sms_log_appends_row(engine, invoice_store: InvoiceStore) -> None:
    invoice_store.record_sms_log(
        SmsLogEntry(
            customer_id="C001",
            sms_user="user",
            sms_password="secret",
            phone_number="0771234567",
            url="https://drive.example.com/file",
        )
    )

    assert sms_log_rows(engine) == [
        {
            "CUSTOMER_ID": "C001",
            "SMS_USER": "user",
            "SMS_PASSWORD": "secret",
            "PHONE_NUMBER": "0771234567",
            "URL": "https://drive.example.com/file",
        }
    ]


def test_query_failures_raise_database_error(engine, invoice_store: InvoiceStore) -> None:
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE tb_SMART_INVOICE"))

    with pytest.raises(DatabaseError):
        invoice_store.fetch_pending()
    with pytest.raises(DatabaseError):
        invoice_store.mark_uploaded(1)
