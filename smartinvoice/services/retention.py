"""Daily removal of invoice PDFs older than the retention window."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from smartinvoice.clients.google_drive import GoogleDriveClient

logger = logging.getLogger(__name__)


class RetentionSweeper:
    def __init__(
        self,
        drive_client: GoogleDriveClient,
        folder_id: str,
        *,
        retention: timedelta = timedelta(days=7),
        interval_seconds: float = 24 * 60 * 60,
    ) -> None:
        self._drive = drive_client
        self._folder_id = folder_id
        self._retention = retention
        self._interval = interval_seconds

    async def sweep(self) -> int:
        deleted = await self._drive.prune_older_than(
            folder_id=self._folder_id, max_age=self._retention
        )
        logger.info("Retention sweep deleted %d file(s) older than %s", deleted, self._retention)
        return deleted

    async def run_forever(self) -> None:
        # First sweep happens one interval after startup.
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.sweep()
            except Exception:  # pylint: disable=broad-except
                logger.exception("Retention sweep failed")


__all__ = ["RetentionSweeper"]
