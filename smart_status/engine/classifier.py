"""
Status classification: booking fields + milestone aggregates -> one
coarse lifecycle status.

The rules form a first-match-wins table. Order matters: an approved
booking with an in-progress milestone is in production, not approved,
so the production rule is checked before the approval rule.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from smart_status.schemas.booking_schema import (
    Booking,
    BookingStatus,
    Milestone,
    MilestoneStatus,
    Phase,
)
from smart_status.schemas.status_schema import OverallStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationRule:
    """One row of the classification table."""

    name: str
    matches: Callable[[Booking, Sequence[Milestone]], bool]
    result: Callable[[Booking, Sequence[Milestone]], OverallStatus]


def _all_milestones_completed(booking: Booking, milestones: Sequence[Milestone]) -> bool:
    return bool(milestones) and all(m.is_completed for m in milestones)


def _passthrough(booking: Booking, milestones: Sequence[Milestone]) -> OverallStatus:
    try:
        return OverallStatus(booking.status)
    except ValueError:
        return OverallStatus.PENDING_REVIEW


CLASSIFICATION_RULES: list[ClassificationRule] = [
    ClassificationRule(
        "delivered",
        lambda b, ms: _all_milestones_completed(b, ms) or b.status == BookingStatus.COMPLETED,
        lambda b, ms: OverallStatus.DELIVERED,
    ),
    ClassificationRule(
        "in_production",
        lambda b, ms: (
            b.status == BookingStatus.IN_PROGRESS
            or any(m.status == MilestoneStatus.IN_PROGRESS for m in ms)
        ),
        lambda b, ms: OverallStatus.IN_PRODUCTION,
    ),
    ClassificationRule(
        "approved",
        lambda b, ms: b.is_approved,
        lambda b, ms: OverallStatus.APPROVED if ms else OverallStatus.READY_TO_LAUNCH,
    ),
    ClassificationRule(
        "pending_review",
        lambda b, ms: b.status == BookingStatus.PENDING,
        lambda b, ms: OverallStatus.PENDING_REVIEW,
    ),
    ClassificationRule(
        "halted",
        lambda b, ms: b.status in (BookingStatus.CANCELLED, BookingStatus.ON_HOLD),
        _passthrough,
    ),
]


def classify_status(booking: Booking, milestones: Sequence[Milestone]) -> OverallStatus:
    """Map booking status and milestone statuses onto one overall status."""
    for rule in CLASSIFICATION_RULES:
        if rule.matches(booking, milestones):
            return rule.result(booking, milestones)

    status = _passthrough(booking, milestones)
    logger.debug("No classification rule matched status %r, using %s", booking.status, status.value)
    return status


def describe_status(
    status: OverallStatus,
    current_milestone: Optional[Milestone],
    current_phase: Optional[Phase],
    progress: int,
) -> str:
    """Human-readable one-line description of an overall status."""
    if status in (OverallStatus.PENDING, OverallStatus.PENDING_REVIEW):
        return "Waiting for provider approval to begin project"
    if status == OverallStatus.APPROVED:
        if current_milestone is None:
            return "Approved - Project planning in progress"
        return "Approved - Ready to begin project execution"
    if status == OverallStatus.READY_TO_LAUNCH:
        return "All prerequisites met - Ready to begin development"
    if status in (OverallStatus.IN_PROGRESS, OverallStatus.IN_PRODUCTION):
        if current_milestone is not None:
            return f'Active - Working on "{current_milestone.title}" ({progress}% complete)'
        if current_phase is not None:
            return f'Active - In "{current_phase.name}" phase ({progress}% complete)'
        return f"In Progress - {progress}% complete"
    if status in (OverallStatus.COMPLETED, OverallStatus.DELIVERED):
        return "Completed successfully - All milestones achieved"
    if status == OverallStatus.CANCELLED:
        return "Project cancelled"
    if status == OverallStatus.ON_HOLD:
        return "Project temporarily on hold"
    return "Status unknown"
