"""
Next-action resolution and timeline helpers.

The resolver answers "what happens next, and who does it" with a single
highest-priority-first pass over the booking and its current milestone.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

from smart_status.config import settings
from smart_status.schemas.booking_schema import (
    Booking,
    BookingStatus,
    Milestone,
    MilestoneStatus,
    Phase,
)
from smart_status.schemas.status_schema import Role
from smart_status.utils import utc_now


@dataclass(frozen=True)
class NextAction:
    """A single "what happens next" statement and the role responsible."""

    action: Optional[str] = None
    by: Optional[Role] = None


NO_ACTION = NextAction()


def find_current_milestone(milestones: Sequence[Milestone]) -> Optional[Milestone]:
    """First milestone in order-index sequence that is not completed."""
    return next((m for m in milestones if not m.is_completed), None)


def find_current_phase(phases: Sequence[Phase]) -> Optional[Phase]:
    """First in-progress phase, else the first pending one."""
    for wanted in (MilestoneStatus.IN_PROGRESS, MilestoneStatus.PENDING):
        phase = next((p for p in phases if p.status == wanted), None)
        if phase is not None:
            return phase
    return None


def _milestone_action(milestone: Milestone) -> Optional[NextAction]:
    if milestone.status == MilestoneStatus.PENDING:
        return NextAction(f"Start working on {milestone.title}", Role.PROVIDER)
    if milestone.status == MilestoneStatus.IN_PROGRESS:
        remaining = len(milestone.incomplete_tasks)
        if remaining:
            return NextAction(f"Complete {remaining} remaining task(s)", Role.PROVIDER)
        return NextAction(f"Mark {milestone.title} as complete", Role.PROVIDER)
    if milestone.status == MilestoneStatus.COMPLETED:
        return NextAction(f"Review and approve {milestone.title}", Role.CLIENT)
    return None


def resolve_next_action(
    booking: Booking,
    milestones: Sequence[Milestone],
    current_milestone: Optional[Milestone] = None,
) -> NextAction:
    """Return the highest-priority next action for the booking.

    ``current_milestone`` defaults to :func:`find_current_milestone`.
    """
    if booking.status == BookingStatus.PENDING:
        return NextAction("Provider needs to approve booking", Role.PROVIDER)

    if booking.status == BookingStatus.APPROVED and not milestones:
        return NextAction("Provider needs to create project milestones", Role.PROVIDER)

    if current_milestone is None:
        current_milestone = find_current_milestone(milestones)
    if current_milestone is not None:
        action = _milestone_action(current_milestone)
        if action is not None:
            return action

    pending = next((m for m in milestones if m.status == MilestoneStatus.PENDING), None)
    if pending is not None:
        return NextAction(f"Begin {pending.title} milestone", Role.PROVIDER)

    if milestones and all(m.is_completed for m in milestones):
        return NextAction("Provide final project approval", Role.CLIENT)

    return NO_ACTION


def estimate_completion(
    milestones: Sequence[Milestone], now: Optional[datetime] = None
) -> Optional[str]:
    """Project a completion date from the number of unfinished milestones."""
    remaining = sum(1 for m in milestones if not m.is_completed)
    if not milestones or remaining == 0:
        return None
    now = now or utc_now()
    days = remaining * settings.engine.days_per_milestone
    return (now + timedelta(days=days)).isoformat()


def last_activity(milestones: Sequence[Milestone]) -> Optional[str]:
    """Most recent ``updated_at`` across milestones and their tasks."""
    stamps = [m.updated_at for m in milestones if m.updated_at is not None]
    stamps += [t.updated_at for m in milestones for t in m.tasks if t.updated_at is not None]
    return max(stamps).isoformat() if stamps else None
