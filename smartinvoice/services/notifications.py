"""
Business logic for texting customers the link to their invoice.
"""

from __future__ import annotations

import enum
import logging

from smartinvoice.clients.invoice_store import InvoiceStore
from smartinvoice.clients.sms_gateway import SmsGatewayClient, SmsGatewayError
from smartinvoice.models import SmsLogEntry

logger = logging.getLogger(__name__)


class NotificationOutcome(str, enum.Enum):
    SENT = "sent"
    SUPPRESSED = "suppressed"


class NotifyError(Exception):
    """The text message was not delivered to the gateway."""


class GatewayRejectedError(NotifyError):
    """The gateway answered with a non-OK status."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"SMS gateway rejected message: {detail}")
        self.detail = detail


class NotificationService:
    """Look up the customer's SMS profile, send one message and audit it."""

    def __init__(
        self,
        store: InvoiceStore,
        sms_client: SmsGatewayClient,
        message_template: str = "Dear customer, your bill is available at: {link}",
    ) -> None:
        self._store = store
        self._sms = sms_client
        self._template = message_template

    def build_message(self, link: str) -> str:
        return self._template.format(link=link)

    async def notify(self, *, phone: str, customer_id: str, link: str) -> NotificationOutcome:
        """Send the invoice link to ``phone`` when the customer opted in."""
        profile = self._store.get_sms_profile(customer_id)
        if profile is None:
            logger.warning("No SMS profile found for customer %s", customer_id)
            return NotificationOutcome.SUPPRESSED
        if not profile.smart_invoice_active:
            logger.info("Smart invoice not active for customer %s", customer_id)
            return NotificationOutcome.SUPPRESSED

        try:
            reply = await self._sms.send(
                username=profile.username,
                password=profile.password,
                to=phone,
                text=self.build_message(link),
            )
        except SmsGatewayError as exc:
            raise NotifyError(str(exc)) from exc

        if not reply.ok:
            raise GatewayRejectedError(reply.detail)

        logger.info("SMS sent to customer %s (message id %s)", customer_id, reply.detail)
        self._store.record_sms_log(
            SmsLogEntry(
                customer_id=customer_id,
                sms_user=profile.username,
                sms_password=profile.password,
                phone_number=phone,
                url=link,
            )
        )
        return NotificationOutcome.SENT


__all__ = [
    "GatewayRejectedError",
    "NotificationOutcome",
    "NotificationService",
    "NotifyError",
]
