"""
Status facade: one call from booking id + role to a SmartBookingStatus.

``compute_smart_status`` is the pure core and works on an already-fetched
snapshot. ``SmartStatusService`` wires it to a RecordFetcher for reads and
an ActionExecutor for writes. Nothing is cached: every call fetches and
recomputes, so repeated calls always reflect the latest snapshot.

Usage:
    service = SmartStatusService(fetcher, executor)
    status = await service.get_smart_status("bk-123", "provider")
    result = await service.execute_action("bk-123", "approve", {}, "provider")
    status = await service.get_smart_status("bk-123", "provider")
"""

from datetime import datetime
from typing import Any, Optional, Union

from smart_status.clients.base import RecordFetcher
from smart_status.engine.catalog import CatalogContext, build_contextual_actions
from smart_status.engine.classifier import classify_status, describe_status
from smart_status.engine.executor import ActionExecutor
from smart_status.engine.next_action import (
    estimate_completion,
    find_current_milestone,
    find_current_phase,
    last_activity,
    resolve_next_action,
)
from smart_status.engine.progress import summarize_progress
from smart_status.engine.risks import detect_risks
from smart_status.logging_context import booking_context, get_booking_logger
from smart_status.schemas.booking_schema import BookingSnapshot
from smart_status.schemas.status_schema import (
    ActionResult,
    Role,
    SmartBookingStatus,
    parse_role,
)
from smart_status.utils import utc_now

logger = get_booking_logger(__name__)


def compute_smart_status(
    snapshot: BookingSnapshot,
    role: Union[str, Role],
    now: Optional[datetime] = None,
) -> SmartBookingStatus:
    """Derive the full smart status for ``role`` from one snapshot."""
    role = parse_role(role)
    now = now or utc_now()
    booking = snapshot.booking
    milestones = snapshot.milestones

    progress = summarize_progress(milestones)
    overall = classify_status(booking, milestones)
    current_milestone = find_current_milestone(milestones)
    current_phase = find_current_phase(snapshot.phases)
    next_action = resolve_next_action(booking, milestones, current_milestone)

    catalog_ctx = CatalogContext(
        booking=booking,
        milestones=milestones,
        current_milestone=current_milestone,
        progress=progress.percentage,
    )

    return SmartBookingStatus(
        id=booking.id,
        overall_status=overall,
        current_phase=current_phase.name if current_phase else None,
        current_milestone=current_milestone.title if current_milestone else None,
        progress_percentage=progress.percentage,
        next_action=next_action.action,
        next_action_by=next_action.by,
        estimated_completion=estimate_completion(milestones, now),
        milestones_completed=progress.milestones_completed,
        milestones_total=progress.milestones_total,
        tasks_completed=progress.tasks_completed,
        tasks_total=progress.tasks_total,
        last_activity=last_activity(milestones),
        last_activity_by=None,
        status_description=describe_status(
            overall, current_milestone, current_phase, progress.percentage
        ),
        contextual_actions=build_contextual_actions(catalog_ctx, role),
        risks=detect_risks(milestones, now),
    )


class SmartStatusService:
    """Read and command entry points over the status engine."""

    def __init__(self, fetcher: RecordFetcher, executor: ActionExecutor) -> None:
        self._fetcher = fetcher
        self._executor = executor

    async def get_smart_status(
        self, booking_id: str, role: Union[str, Role]
    ) -> SmartBookingStatus:
        """
        Fetch the booking snapshot and compute its smart status.

        Raises:
            InvalidRoleError: If ``role`` is not client, provider or admin.
            BookingNotFoundError: If the booking does not exist.
            RecordStoreError: If the store cannot serve the snapshot.
        """
        caller = parse_role(role)
        with booking_context(booking_id):
            snapshot = await self._fetcher.fetch_booking_snapshot(booking_id)
            status = compute_smart_status(snapshot, caller)
            logger.debug(
                "Smart status for %s: %s (%d%%), %d action(s), %d risk(s)",
                caller.value, status.overall_status.value, status.progress_percentage,
                len(status.contextual_actions), len(status.risks),
            )
            return status

    async def execute_action(
        self,
        booking_id: str,
        action_id: str,
        params: Optional[dict[str, Any]] = None,
        role: Union[str, Role, None] = None,
    ) -> ActionResult:
        return await self._executor.execute_action(booking_id, action_id, params, role)
