"""
Collaborator interfaces consumed by the engine, and their error types.

The engine never talks to a database or HTTP API directly. It depends on
these narrow protocols so every computation can be exercised against the
in-memory store in tests.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from smart_status.schemas.booking_schema import BookingSnapshot


class SmartStatusError(Exception):
    """Base class for collaborator failures."""


class BookingNotFoundError(SmartStatusError):
    """Raised by a fetcher when the booking does not exist."""

    def __init__(self, booking_id: str) -> None:
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class RecordStoreError(SmartStatusError):
    """Raised when the record store rejects or cannot serve a request."""


class NotAuthenticatedError(SmartStatusError):
    """Raised when no access token is available for an authenticated call."""


class EndpointError(SmartStatusError):
    """Raised when a dashboard endpoint is unreachable or answers non-2xx.

    ``status_code`` is None for transport-level failures.
    """

    def __init__(self, endpoint: str, status_code: Optional[int], detail: Any = None) -> None:
        reason = f"HTTP {status_code}" if status_code is not None else "transport error"
        super().__init__(f"{endpoint} failed: {reason}")
        self.endpoint = endpoint
        self.status_code = status_code
        self.detail = detail


@runtime_checkable
class RecordStore(Protocol):
    """Generic table-oriented record store."""

    async def get(self, table: str, record_id: str) -> Optional[dict[str, Any]]: ...

    async def select(self, table: str, **filters: Any) -> list[dict[str, Any]]: ...

    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]: ...

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]: ...


class RecordFetcher(Protocol):
    async def fetch_booking_snapshot(self, booking_id: str) -> BookingSnapshot: ...


class ApprovalEndpoint(Protocol):
    """Authenticated endpoint that approves a booking and runs its side effects."""

    async def approve_booking(self, booking_id: str) -> None: ...


class Messenger(Protocol):
    async def send_message(
        self, receiver_id: str, subject: str, content: str, booking_id: str
    ) -> None: ...
