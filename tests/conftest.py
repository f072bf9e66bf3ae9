"""Shared test fixtures and helpers."""

from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from smart_status.clients.fetcher import StoreSnapshotFetcher
from smart_status.clients.memory_store import InMemoryRecordStore
from smart_status.engine.executor import ActionExecutor
from smart_status.engine.facade import SmartStatusService
from smart_status.schemas.booking_schema import BookingSnapshot

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_task(status: str = "pending", **overrides: Any) -> dict[str, Any]:
    """Helper to create a raw task row."""
    task = {"title": "Task", "status": status}
    task.update(overrides)
    return task


def make_milestone(
    order_index: int = 0,
    status: str = "pending",
    tasks: Optional[list[dict[str, Any]]] = None,
    **overrides: Any,
) -> dict[str, Any]:
    """Helper to create a raw milestone row with nested tasks."""
    milestone = {
        "id": f"ms-{order_index}",
        "title": f"Milestone {order_index}",
        "status": status,
        "order_index": order_index,
        "tasks": tasks or [],
    }
    milestone.update(overrides)
    return milestone


def make_booking(status: str = "pending", **overrides: Any) -> dict[str, Any]:
    """Helper to create a raw booking row with sensible defaults."""
    booking = {
        "id": "bk-1",
        "status": status,
        "client_id": "client-1",
        "provider_id": "provider-1",
    }
    booking.update(overrides)
    return booking


def make_snapshot(
    status: str = "pending",
    milestones: Optional[list[dict[str, Any]]] = None,
    phases: Optional[list[dict[str, Any]]] = None,
    **booking_overrides: Any,
) -> BookingSnapshot:
    """Helper to validate a snapshot from raw rows."""
    return BookingSnapshot.model_validate({
        "booking": make_booking(status, **booking_overrides),
        "milestones": milestones or [],
        "phases": phases or [],
    })


class FakeApprover:
    """ApprovalEndpoint double that records calls or fails on demand."""

    def __init__(
        self,
        error: Optional[Exception] = None,
        store: Optional[InMemoryRecordStore] = None,
    ) -> None:
        self.error = error
        self.store = store
        self.calls: list[str] = []

    async def approve_booking(self, booking_id: str) -> None:
        self.calls.append(booking_id)
        if self.error is not None:
            raise self.error
        if self.store is not None:
            await self.store.update("bookings", booking_id, {"status": "approved"})


class FakeMessenger:
    """Messenger double that records messages or fails on demand."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.sent: list[dict[str, str]] = []

    async def send_message(
        self, receiver_id: str, subject: str, content: str, booking_id: str
    ) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append({
            "receiver_id": receiver_id,
            "subject": subject,
            "content": content,
            "booking_id": booking_id,
        })


def seed_store(
    booking: Optional[dict[str, Any]] = None,
    milestones: Optional[list[dict[str, Any]]] = None,
) -> InMemoryRecordStore:
    """Store with one booking; nested milestone tasks are split into the tasks table."""
    booking = booking or make_booking()
    milestone_rows, task_rows = [], []
    for milestone in milestones or []:
        milestone = dict(milestone)
        for index, task in enumerate(milestone.pop("tasks", []) or []):
            task_rows.append({"id": f"{milestone['id']}-t{index}", "milestone_id": milestone["id"], **task})
        milestone_rows.append({"booking_id": booking["id"], **milestone})
    return InMemoryRecordStore({
        "bookings": [booking],
        "milestones": milestone_rows,
        "tasks": task_rows,
    })


@pytest.fixture
def store():
    return seed_store()


@pytest.fixture
def approver():
    return FakeApprover()


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def executor(store, approver, messenger):
    return ActionExecutor(store, approver=approver, messenger=messenger)


@pytest.fixture
def service(store, executor):
    return SmartStatusService(StoreSnapshotFetcher(store), executor)
