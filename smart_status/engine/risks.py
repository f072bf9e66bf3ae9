"""
Risk detection over a booking's milestones.

Three independent checks run in display-priority order: deadline,
quality, dependency. Each emits at most one aggregated Risk; the number
of offending milestones goes into the description.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

from smart_status.schemas.booking_schema import Milestone, MilestoneStatus, RiskLevel
from smart_status.schemas.status_schema import Risk, RiskType, Severity
from smart_status.utils import parse_timestamp, utc_now

logger = logging.getLogger(__name__)

HIGH_RISK_LEVELS = frozenset({RiskLevel.HIGH.value, RiskLevel.CRITICAL.value})


def overdue_milestones(milestones: Sequence[Milestone], now: datetime) -> list[Milestone]:
    return [
        m for m in milestones
        if m.due_date is not None and m.due_date < now and not m.is_completed
    ]


def high_risk_milestones(milestones: Sequence[Milestone]) -> list[Milestone]:
    return [m for m in milestones if m.risk_level in HIGH_RISK_LEVELS]


def blocked_milestones(milestones: Sequence[Milestone]) -> list[Milestone]:
    """Pending milestones with an unfinished milestone ordered before them."""
    return [
        m for m in milestones
        if m.status == MilestoneStatus.PENDING
        and any(dep.order_index < m.order_index and not dep.is_completed for dep in milestones)
    ]


def detect_risks(milestones: Sequence[Milestone], now: Optional[datetime] = None) -> list[Risk]:
    now = parse_timestamp(now) or utc_now()
    risks: list[Risk] = []

    overdue = overdue_milestones(milestones, now)
    if overdue:
        risks.append(Risk(
            id="overdue_milestones",
            type=RiskType.DEADLINE,
            severity=Severity.HIGH,
            description=f"{len(overdue)} milestone(s) overdue",
            impact="Project timeline at risk",
            mitigation="Review and adjust milestone deadlines",
        ))

    high_risk = high_risk_milestones(milestones)
    if high_risk:
        risks.append(Risk(
            id="high_risk_milestones",
            type=RiskType.QUALITY,
            severity=Severity.MEDIUM,
            description=f"{len(high_risk)} high-risk milestone(s)",
            impact="Quality and delivery may be affected",
            mitigation="Monitor progress closely and provide additional support",
        ))

    blocked = blocked_milestones(milestones)
    if blocked:
        risks.append(Risk(
            id="blocked_dependencies",
            type=RiskType.DEPENDENCY,
            severity=Severity.MEDIUM,
            description=f"{len(blocked)} milestone(s) waiting on dependencies",
            impact="Progress may be delayed",
            mitigation="Complete prerequisite milestones first",
        ))

    if risks:
        logger.debug("Detected risks: %s", [r.id for r in risks])
    return risks
