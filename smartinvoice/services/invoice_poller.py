"""
Poll the invoice table, upload new PDFs and text the customer a link.

Row lifecycle: a pending row is validated, uploaded, flagged as uploaded and
only then notified. A failed upload or an invalid phone leaves the row pending
for the next tick; a failed notification never un-flags it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Set

from smartinvoice.clients.google_drive import GoogleDriveClient, UploadError
from smartinvoice.clients.invoice_store import InvoiceStore
from smartinvoice.models import InvoiceRecord
from smartinvoice.services.notifications import (
    NotificationOutcome,
    NotificationService,
    NotifyError,
)
from smartinvoice.services.phone import InvalidPhoneNumberError, normalize_phone

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TickSummary:
    """Counters for a single pass over the pending rows."""

    pending: int = 0
    skipped: int = 0
    upload_failed: int = 0
    uploaded: int = 0
    notified: int = 0
    suppressed: int = 0
    notify_failed: int = 0
    errors: int = 0


class InvoicePoller:
    """Process pending invoice rows strictly one after another."""

    def __init__(
        self,
        store: InvoiceStore,
        drive_client: GoogleDriveClient,
        notifier: NotificationService,
        folder_id: str,
        poll_interval_seconds: float = 10.0,
    ) -> None:
        self._store = store
        self._drive = drive_client
        self._notifier = notifier
        self._folder_id = folder_id
        self._poll_interval = poll_interval_seconds
        self._reported_invalid: Set[int] = set()

    async def run_forever(self) -> None:
        while True:
            try:
                summary = await self.run_tick()
            except Exception:  # pylint: disable=broad-except
                logger.exception("Polling error")
            else:
                if summary.pending:
                    logger.info("Poll tick finished: %s", summary)
            await asyncio.sleep(self._poll_interval)

    async def run_tick(self) -> TickSummary:
        """Fetch pending rows and process each one, isolating failures."""
        rows = self._store.fetch_pending()
        summary = TickSummary(pending=len(rows))
        for row in rows:
            try:
                await self._process_row(row, summary)
            except Exception:  # pylint: disable=broad-except
                summary.errors += 1
                logger.exception("Error processing invoice row %s", row.idx)
        return summary

    async def _process_row(self, row: InvoiceRecord, summary: TickSummary) -> None:
        try:
            phone = normalize_phone(row.mobile_no)
        except InvalidPhoneNumberError:
            summary.skipped += 1
            if row.idx not in self._reported_invalid:
                self._reported_invalid.add(row.idx)
                logger.warning("Invalid phone number %r for invoice row %s", row.mobile_no, row.idx)
            return
        self._reported_invalid.discard(row.idx)

        logger.info("New invoice detected: %s (row %s)", row.file_name, row.idx)
        try:
            uploaded = await self._drive.upload_document(
                file_bytes=row.pdf_data,
                file_name=row.file_name,
                folder_id=self._folder_id,
            )
        except UploadError as exc:
            summary.upload_failed += 1
            logger.error("Upload failed for invoice row %s: %s", row.idx, exc)
            return

        if not self._store.mark_uploaded(row.idx):
            logger.warning("Invoice row %s was no longer pending; not notifying", row.idx)
            return
        summary.uploaded += 1
        logger.info("Marked invoice row %s as uploaded", row.idx)

        try:
            outcome = await self._notifier.notify(
                phone=phone,
                customer_id=row.customer_id,
                link=uploaded.shareable_link,
            )
        except NotifyError as exc:
            summary.notify_failed += 1
            logger.warning("SMS not sent for invoice row %s: %s", row.idx, exc)
            return

        if outcome is NotificationOutcome.SENT:
            summary.notified += 1
        else:
            summary.suppressed += 1


__all__ = ["InvoicePoller", "TickSummary"]
