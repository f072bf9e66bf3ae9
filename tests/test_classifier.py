"""Tests for status classification and descriptions."""

import pytest

from smart_status.engine.classifier import classify_status, describe_status
from smart_status.schemas.booking_schema import Milestone, Phase
from smart_status.schemas.status_schema import OverallStatus
from tests.conftest import make_milestone, make_snapshot


def _classify(status, milestones=None, **booking):
    snapshot = make_snapshot(status, milestones, **booking)
    return classify_status(snapshot.booking, snapshot.milestones)


class TestDelivered:
    def test_all_milestones_completed(self):
        ms = [make_milestone(0, "completed"), make_milestone(1, "completed")]
        assert _classify("in_progress", ms) == OverallStatus.DELIVERED

    @pytest.mark.parametrize("raw", ["pending", "approved", "cancelled", "on_hold", "weird"])
    def test_all_completed_wins_over_any_booking_status(self, raw):
        assert _classify(raw, [make_milestone(0, "completed")]) == OverallStatus.DELIVERED

    def test_completed_booking_without_milestones(self):
        assert _classify("completed") == OverallStatus.DELIVERED


class TestInProduction:
    def test_booking_in_progress(self):
        assert _classify("in_progress") == OverallStatus.IN_PRODUCTION

    def test_approved_booking_with_running_milestone(self):
        ms = [make_milestone(0, "completed"), make_milestone(1, "in_progress")]
        assert _classify("approved", ms) == OverallStatus.IN_PRODUCTION


class TestApproved:
    def test_zero_milestones_is_ready_to_launch(self):
        assert _classify("approved") == OverallStatus.READY_TO_LAUNCH

    def test_with_milestones_is_approved(self):
        assert _classify("approved", [make_milestone(0)]) == OverallStatus.APPROVED

    def test_approval_flag_counts_as_approved(self):
        assert _classify("pending", approval_status="approved") == OverallStatus.READY_TO_LAUNCH

    def test_ui_approval_flag_counts_as_approved(self):
        status = _classify("pending", [make_milestone(0)], ui_approval_status="Approved")
        assert status == OverallStatus.APPROVED


class TestFallbacks:
    def test_pending_is_pending_review(self):
        assert _classify("pending") == OverallStatus.PENDING_REVIEW

    @pytest.mark.parametrize("raw", ["cancelled", "on_hold"])
    def test_halted_statuses_pass_through(self, raw):
        assert _classify(raw, [make_milestone(0)]) == OverallStatus(raw)

    @pytest.mark.parametrize("raw", ["", "archived", None])
    def test_unknown_status_defaults_to_pending_review(self, raw):
        assert _classify(raw) == OverallStatus.PENDING_REVIEW

    def test_classification_is_deterministic(self):
        ms = [make_milestone(0, "completed"), make_milestone(1, "pending")]
        assert _classify("approved", ms) == _classify("approved", ms)


class TestDescribeStatus:
    def test_pending_review(self):
        text = describe_status(OverallStatus.PENDING_REVIEW, None, None, 0)
        assert text == "Waiting for provider approval to begin project"

    def test_approved_without_milestone(self):
        assert "planning" in describe_status(OverallStatus.APPROVED, None, None, 0)

    def test_in_production_names_milestone_and_progress(self):
        milestone = Milestone(title="Design", status="in_progress")
        text = describe_status(OverallStatus.IN_PRODUCTION, milestone, None, 40)
        assert text == 'Active - Working on "Design" (40% complete)'

    def test_in_production_falls_back_to_phase(self):
        phase = Phase(name="Build", status="in_progress")
        assert "Build" in describe_status(OverallStatus.IN_PRODUCTION, None, phase, 10)

    def test_in_production_plain(self):
        assert describe_status(OverallStatus.IN_PRODUCTION, None, None, 5) == "In Progress - 5% complete"

    def test_delivered(self):
        assert describe_status(OverallStatus.DELIVERED, None, None, 100).startswith("Completed")

    def test_on_hold(self):
        assert describe_status(OverallStatus.ON_HOLD, None, None, 0) == "Project temporarily on hold"
