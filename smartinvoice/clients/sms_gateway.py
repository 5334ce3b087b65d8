"""Client for the textit.biz style HTTP GET SMS gateway."""

from __future__ import annotations

from dataclasses import dataclass

import httpx


class SmsGatewayError(Exception):
    """The gateway could not be reached or answered with an HTTP error."""


@dataclass(slots=True)
class SmsGatewayResponse:
    """Parsed ``STATUS:DETAIL`` reply."""

    status: str
    detail: str

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    @classmethod
    def parse(cls, body: str) -> "SmsGatewayResponse":
        status, _, detail = body.strip().partition(":")
        return cls(status=status.strip(), detail=detail.strip())


class SmsGatewayClient:
    """Send a single text message per call; no retries."""

    def __init__(
        self,
        gateway_url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._gateway_url = gateway_url
        self._timeout = timeout_seconds
        self._transport = transport

    async def send(self, *, username: str, password: str, to: str, text: str) -> SmsGatewayResponse:
        params = {"id": username, "pw": password, "to": to, "text": text}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self._gateway_url, params=params)
                response.raise_for_status()
        # The request URL carries the gateway password, so it stays out of messages.
        except httpx.HTTPStatusError as exc:
            raise SmsGatewayError(
                f"SMS gateway returned HTTP {exc.response.status_code}"
            ) from None
        except httpx.HTTPError as exc:
            raise SmsGatewayError(f"SMS gateway request failed: {type(exc).__name__}") from None
        return SmsGatewayResponse.parse(response.text)


__all__ = ["SmsGatewayClient", "SmsGatewayError", "SmsGatewayResponse"]
