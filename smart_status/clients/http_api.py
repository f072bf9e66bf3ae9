"""
HTTP client for the dashboard's authenticated endpoints.

Approval goes through ``PATCH /api/bookings`` rather than a direct store
write so that notification dispatch and invoice generation run with the
status change on the server. Feedback messages go through
``POST /api/messages``. Neither call is retried here.
"""

import logging
from typing import Any, Callable, Optional

import httpx

from smart_status.clients.base import EndpointError, NotAuthenticatedError
from smart_status.config import settings

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Optional[str]]


def _env_token() -> Optional[str]:
    return settings.api.access_token or None


class DashboardApiClient:
    """ApprovalEndpoint and Messenger backed by the dashboard HTTP API."""

    BOOKINGS_PATH = "/api/bookings"
    MESSAGES_PATH = "/api/messages"

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_provider: TokenProvider = _env_token,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.api.base_url).rstrip("/")
        self._token_provider = token_provider
        self._timeout = timeout if timeout is not None else settings.api.timeout_sec
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        token = self._token_provider()
        if not token:
            raise NotAuthenticatedError("No access token available")
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        }

    async def _send(self, method: str, path: str, payload: dict[str, Any]) -> Any:
        headers = self._headers()
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("%s %s request error: %s", method, path, exc)
            raise EndpointError(path, None, str(exc)) from exc

        if response.is_error:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            logger.warning("%s %s failed: %s %s", method, path, response.status_code, detail)
            raise EndpointError(path, response.status_code, detail)

        try:
            return response.json()
        except ValueError:
            return None

    async def approve_booking(self, booking_id: str) -> None:
        await self._send("PATCH", self.BOOKINGS_PATH, {"booking_id": booking_id, "action": "approve"})
        logger.info("Booking %s approved via dashboard API", booking_id)

    async def send_message(
        self, receiver_id: str, subject: str, content: str, booking_id: str
    ) -> None:
        await self._send(
            "POST",
            self.MESSAGES_PATH,
            {
                "receiver_id": receiver_id,
                "subject": subject,
                "content": content,
                "booking_id": booking_id,
            },
        )
        logger.info("Message sent to %s for booking %s", receiver_id, booking_id)
