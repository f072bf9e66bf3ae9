"""Tests for risk detection."""

from datetime import datetime, timedelta

from smart_status.engine.risks import detect_risks
from smart_status.schemas.status_schema import RiskType, Severity
from tests.conftest import NOW, make_milestone, make_snapshot


def _risks(milestones, now=NOW):
    return detect_risks(make_snapshot("in_progress", milestones).milestones, now)


PAST = (NOW - timedelta(days=3)).isoformat()
FUTURE = (NOW + timedelta(days=3)).isoformat()


class TestDeadlineRisk:
    def test_overdue_unfinished_milestones_aggregate(self):
        risks = _risks([
            make_milestone(0, "in_progress", due_date=PAST),
            make_milestone(1, "in_progress", due_date=PAST),
        ])
        deadline = [r for r in risks if r.type == RiskType.DEADLINE]
        assert len(deadline) == 1
        assert deadline[0].severity == Severity.HIGH
        assert deadline[0].description == "2 milestone(s) overdue"

    def test_completed_or_future_milestones_are_not_overdue(self):
        risks = _risks([
            make_milestone(0, "completed", due_date=PAST),
            make_milestone(1, "in_progress", due_date=FUTURE),
        ])
        assert not any(r.type == RiskType.DEADLINE for r in risks)

    def test_malformed_due_date_is_ignored(self):
        assert _risks([make_milestone(0, "in_progress", due_date="soon")]) == []

    def test_naive_now_is_treated_as_utc(self):
        naive = datetime(2025, 6, 1, 12, 0)
        risks = _risks([make_milestone(0, "in_progress", due_date=PAST)], now=naive)
        assert risks[0].id == "overdue_milestones"


class TestQualityRisk:
    def test_high_and_critical_are_counted(self):
        risks = _risks([
            make_milestone(0, "in_progress", risk_level="high"),
            make_milestone(1, "completed", risk_level="critical"),
            make_milestone(2, "completed", risk_level="medium"),
        ])
        assert len(risks) == 1
        assert risks[0].type == RiskType.QUALITY
        assert risks[0].severity == Severity.MEDIUM
        assert risks[0].description == "2 high-risk milestone(s)"


class TestDependencyRisk:
    def test_pending_after_unfinished_is_blocked(self):
        risks = _risks([
            make_milestone(0, "in_progress"),
            make_milestone(1, "pending"),
            make_milestone(2, "pending"),
        ])
        assert [r.id for r in risks] == ["blocked_dependencies"]
        assert risks[0].description == "2 milestone(s) waiting on dependencies"

    def test_first_pending_after_completed_is_not_blocked(self):
        assert _risks([make_milestone(0, "completed"), make_milestone(1, "pending")]) == []


class TestCombinedRisks:
    def test_order_is_deadline_quality_dependency(self):
        risks = _risks([
            make_milestone(0, "in_progress", due_date=PAST, risk_level="critical"),
            make_milestone(1, "pending"),
        ])
        assert [r.type for r in risks] == [RiskType.DEADLINE, RiskType.QUALITY, RiskType.DEPENDENCY]

    def test_no_milestones_no_risks(self):
        assert _risks([]) == []
