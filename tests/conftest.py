"""Pytest configuration shared across the suite."""

import _bootstrap  # noqa: F401

import pytest
from sqlalchemy import create_engine, text

from smartinvoice.clients.invoice_store import InvoiceStore

_SCHEMA = (
    """
    CREATE TABLE tb_SMART_INVOICE (
        IDX INTEGER PRIMARY KEY,
        CUSTOMERID TEXT,
        MOBILENO TEXT,
        FILENAME TEXT,
        PDFDATA BLOB,
        DOWNLOAD TEXT NOT NULL DEFAULT 'F'
    )
    """,
    """
    CREATE TABLE tb_SMS_MAIN (
        CUSTOMER_ID TEXT PRIMARY KEY,
        SMARTINVOICE_ACTIVE TEXT,
        SMS_USERNAME TEXT,
        SMS_PASSWORD TEXT
    )
    """,
    """
    CREATE TABLE tb_SMS_LOG (
        ID INTEGER PRIMARY KEY AUTOINCREMENT,
        CUSTOMER_ID TEXT,
        SMS_USER TEXT,
        SMS_PASSWORD TEXT,
        PHONE_NUMBER TEXT,
        URL TEXT
    )
    """,
)


@pytest.fixture
def engine(tmp_path):
    """SQLite database with the point-of-sale tables."""
    db_engine = create_engine(f"sqlite:///{tmp_path / 'pos.db'}")
    with db_engine.begin() as conn:
        for statement in _SCHEMA:
            conn.execute(text(statement))
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def invoice_store(engine) -> InvoiceStore:
    return InvoiceStore(engine)
