"""Long-running poller: authenticate once, then run both timers forever."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from smartinvoice.core.config import get_settings
from smartinvoice.dependencies import (
    get_credential_store,
    get_drive_client,
    get_invoice_store,
    get_notification_service,
)
from smartinvoice.services import InvoicePoller, RetentionSweeper
from smartinvoice.services.credential_store import Prompt

logger = logging.getLogger(__name__)


async def main(prompt: Prompt | None = None) -> None:
    """Acquire the Drive credential, resolve the folder and start polling.

    Authentication and folder errors propagate so the caller can exit non-zero.
    """
    settings = get_settings()

    await get_credential_store().acquire(prompt)
    drive_client = get_drive_client()
    folder_id = await drive_client.ensure_folder(settings.google.folder_segments)

    poller = InvoicePoller(
        store=get_invoice_store(),
        drive_client=drive_client,
        notifier=get_notification_service(),
        folder_id=folder_id,
        poll_interval_seconds=settings.scheduler.poll_interval_seconds,
    )
    sweeper = RetentionSweeper(
        drive_client,
        folder_id,
        retention=timedelta(days=settings.scheduler.retention_days),
        interval_seconds=settings.scheduler.retention_interval_seconds,
    )

    logger.info(
        "Polling tb_SMART_INVOICE every %ss; uploading to %s (id=%s)",
        settings.scheduler.poll_interval_seconds,
        settings.google.drive_folder_path,
        folder_id,
    )
    await asyncio.gather(poller.run_forever(), sweeper.run_forever())


__all__ = ["main"]
