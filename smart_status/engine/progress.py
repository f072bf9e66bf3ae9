"""
Progress calculation over a booking's milestones and tasks.

Overall progress is the mean of two ratios: completed milestones over all
milestones, and completed tasks over all tasks. A booking with milestones
but no tasks therefore tops out at 50% until tasks exist.

Task progress uses raw task statuses. The one exception is a booking
whose every milestone is completed, which reports 100.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from smart_status.schemas.booking_schema import Milestone


@dataclass(frozen=True)
class ProgressSummary:
    """Raw completion counts plus the blended percentage."""

    milestones_completed: int
    milestones_total: int
    tasks_completed: int
    tasks_total: int
    percentage: int


def _ratio(done: int, total: int) -> float:
    return done / total * 100 if total > 0 else 0.0


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_progress(milestones: Sequence[Milestone]) -> int:
    """Return overall progress in the range 0-100."""
    if not milestones:
        return 0
    if all(m.is_completed for m in milestones):
        return 100

    completed_milestones = sum(1 for m in milestones if m.is_completed)
    tasks = [t for m in milestones for t in m.tasks]
    tasks_done = sum(1 for t in tasks if t.is_completed)

    milestone_progress = _ratio(completed_milestones, len(milestones))
    task_progress = _ratio(tasks_done, len(tasks))
    return _round_half_up((milestone_progress + task_progress) / 2)


def summarize_progress(milestones: Sequence[Milestone]) -> ProgressSummary:
    tasks = [t for m in milestones for t in m.tasks]
    return ProgressSummary(
        milestones_completed=sum(1 for m in milestones if m.is_completed),
        milestones_total=len(milestones),
        tasks_completed=sum(1 for t in tasks if t.is_completed),
        tasks_total=len(tasks),
        percentage=calculate_progress(milestones),
    )
