"""
Snapshot fetcher: reads one booking and its phases, milestones, and tasks
from a RecordStore and validates them into a BookingSnapshot.

If the store offers an enriched join (``fetch_enriched``), that is tried
first. When the join fails the fetcher falls back to one query per table
plus one task lookup per milestone. Either way a missing booking raises
BookingNotFoundError; there is no retry.
"""

import logging
from typing import Any

from pydantic import ValidationError

from smart_status.clients.base import BookingNotFoundError, RecordStore, RecordStoreError
from smart_status.schemas.booking_schema import BookingSnapshot

logger = logging.getLogger(__name__)


class StoreSnapshotFetcher:
    """RecordFetcher implementation on top of a RecordStore."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def fetch_booking_snapshot(self, booking_id: str) -> BookingSnapshot:
        enriched = getattr(self._store, "fetch_enriched", None)
        if enriched is not None:
            try:
                raw = await enriched(booking_id)
            except RecordStoreError as exc:
                logger.warning(
                    "Enriched fetch failed for booking %s, falling back to per-table queries: %s",
                    booking_id, exc,
                )
            else:
                if raw is None or not raw.get("booking"):
                    raise BookingNotFoundError(booking_id)
                return self._validate(booking_id, raw)

        return self._validate(booking_id, await self._fetch_per_table(booking_id))

    async def _fetch_per_table(self, booking_id: str) -> dict[str, Any]:
        booking = await self._store.get("bookings", booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)

        milestones = await self._store.select("milestones", booking_id=booking_id)
        for milestone in milestones:
            if milestone.get("id") is None:
                continue
            milestone["tasks"] = await self._store.select("tasks", milestone_id=milestone["id"])

        try:
            phases = await self._store.select("project_phases", booking_id=booking_id)
        except RecordStoreError as exc:
            # Phases are optional grouping; a booking without them is still valid.
            logger.warning("Could not load phases for booking %s: %s", booking_id, exc)
            phases = []

        return {"booking": booking, "phases": phases, "milestones": milestones}

    @staticmethod
    def _validate(booking_id: str, raw: dict[str, Any]) -> BookingSnapshot:
        try:
            return BookingSnapshot.model_validate(raw)
        except ValidationError as exc:
            raise RecordStoreError(f"Malformed snapshot for booking {booking_id}: {exc}") from exc
