"""Helpers for seeding and inspecting the test point-of-sale database."""

from __future__ import annotations

from sqlalchemy import text


def insert_invoice(engine, *, idx, customer_id="C001", phone="0771234567",
                   file_name=None, pdf=b"%PDF-1.4", download="F") -> None:
    with engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO tb_SMART_INVOICE (IDX, CUSTOMERID, MOBILENO, FILENAME, PDFDATA, DOWNLOAD) "
                "VALUES (:idx, :customer, :phone, :file_name, :pdf, :download)"
            ),
            {
                "idx": idx,
                "customer": customer_id,
                "phone": phone,
                "file_name": file_name or f"invoice-{idx}.pdf",
                "pdf": pdf,
                "download": download,
            },
        )


def insert_profile(engine, *, customer_id="C001", active="T",
                   username="shop-user", password="shop-pass") -> None:
    with engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO tb_SMS_MAIN (CUSTOMER_ID, SMARTINVOICE_ACTIVE, SMS_USERNAME, SMS_PASSWORD) "
                "VALUES (:customer, :active, :username, :password)"
            ),
            {"customer": customer_id, "active": active, "username": username, "password": password},
        )


def download_flag(engine, idx) -> str:
    with engine.connect() as conn:
        return conn.execute(
            text("SELECT DOWNLOAD FROM tb_SMART_INVOICE WHERE IDX = :idx"), {"idx": idx}
        ).scalar_one()


def sms_log_rows(engine) -> list[dict]:
    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT CUSTOMER_ID, SMS_USER, SMS_PASSWORD, PHONE_NUMBER, URL FROM tb_SMS_LOG")
        ).mappings().all()
    return [dict(row) for row in rows]
