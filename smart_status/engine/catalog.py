"""
Contextual action catalog: which operations a role may take right now.

Rules are (role, condition, action) rows evaluated additively in table
order, so several rows can fire for the same booking. Every action's
permitted roles come from ACTION_PERMISSIONS, which the executor also
uses to re-check permission before doing anything.

Usage:
    ctx = CatalogContext(booking, milestones, current_milestone, progress)
    actions = build_contextual_actions(ctx, Role.PROVIDER)
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from smart_status.schemas.booking_schema import (
    Booking,
    BookingStatus,
    Milestone,
    MilestoneStatus,
)
from smart_status.schemas.status_schema import ActionType, ContextualAction, Role

logger = logging.getLogger(__name__)

ACTION_PERMISSIONS: dict[str, frozenset[Role]] = {
    "approve": frozenset({Role.PROVIDER}),
    "decline": frozenset({Role.PROVIDER}),
    "create_milestones": frozenset({Role.PROVIDER}),
    "start_milestone": frozenset({Role.PROVIDER}),
    "complete_milestone": frozenset({Role.PROVIDER}),
    "complete_project": frozenset({Role.PROVIDER}),
    "create_invoice": frozenset({Role.PROVIDER}),
    "approve_milestone": frozenset({Role.CLIENT}),
    "add_feedback": frozenset({Role.CLIENT}),
    "final_approval": frozenset({Role.CLIENT}),
    "manage_project": frozenset({Role.ADMIN}),
    "force_approve": frozenset({Role.ADMIN}),
}


def is_permitted(action_key: str, role: Role) -> bool:
    """True if ``role`` may invoke ``action_key``. Unknown keys are never permitted."""
    return role in ACTION_PERMISSIONS.get(action_key, frozenset())


@dataclass(frozen=True)
class CatalogContext:
    """Everything the catalog rules look at."""

    booking: Booking
    milestones: Sequence[Milestone]
    current_milestone: Optional[Milestone]
    progress: int


@dataclass(frozen=True)
class ActionDefinition:
    """Static description of a contextual action."""

    id: str
    label: str
    description: str
    type: ActionType
    icon: str
    action: str
    urgent: bool = False

    def build(self, ctx: CatalogContext, with_milestone: bool = False) -> ContextualAction:
        label = self.label
        params = None
        if with_milestone and ctx.current_milestone is not None:
            label = f"{self.label} {ctx.current_milestone.title}"
            params = {"milestoneId": ctx.current_milestone.id}
        return ContextualAction(
            id=self.id,
            label=label,
            description=self.description,
            type=self.type,
            icon=self.icon,
            action=self.action,
            params=params,
            permissions=sorted(ACTION_PERMISSIONS[self.action], key=lambda r: r.value),
            urgent=self.urgent,
        )


@dataclass(frozen=True)
class CatalogRule:
    """Offer ``definition`` to ``role`` whenever ``applies`` holds."""

    role: Role
    applies: Callable[[CatalogContext], bool]
    definition: ActionDefinition
    with_milestone: bool = False


def _booking_is(status: BookingStatus) -> Callable[[CatalogContext], bool]:
    return lambda ctx: ctx.booking.status == status


def _current_milestone_is(status: MilestoneStatus) -> Callable[[CatalogContext], bool]:
    return lambda ctx: (
        ctx.current_milestone is not None and ctx.current_milestone.status == status
    )


def _finished(ctx: CatalogContext) -> bool:
    return ctx.progress >= 100


CATALOG_RULES: list[CatalogRule] = [
    # --- Provider ---
    CatalogRule(Role.PROVIDER, _booking_is(BookingStatus.PENDING), ActionDefinition(
        "approve_booking", "Approve Booking", "Approve this booking to start the project",
        ActionType.PRIMARY, "CheckCircle", "approve", urgent=True)),
    CatalogRule(Role.PROVIDER, _booking_is(BookingStatus.PENDING), ActionDefinition(
        "decline_booking", "Decline Booking", "Decline this booking request",
        ActionType.DANGER, "XCircle", "decline")),
    CatalogRule(
        Role.PROVIDER,
        lambda ctx: ctx.booking.status == BookingStatus.APPROVED and not ctx.milestones,
        ActionDefinition(
            "create_milestones", "Create Project Plan",
            "Set up milestones and tasks for this project",
            ActionType.PRIMARY, "Target", "create_milestones", urgent=True),
    ),
    CatalogRule(Role.PROVIDER, _current_milestone_is(MilestoneStatus.PENDING), ActionDefinition(
        "start_milestone", "Start", "Begin work on the current milestone",
        ActionType.PRIMARY, "Play", "start_milestone"), with_milestone=True),
    CatalogRule(Role.PROVIDER, _finished, ActionDefinition(
        "complete_project", "Mark Project Complete", "Mark the entire project as completed",
        ActionType.SUCCESS, "Award", "complete_project")),
    CatalogRule(Role.PROVIDER, _booking_is(BookingStatus.APPROVED), ActionDefinition(
        "create_invoice", "Generate Invoice", "Create an invoice for this booking",
        ActionType.SECONDARY, "Receipt", "create_invoice")),

    # --- Client ---
    CatalogRule(Role.CLIENT, _current_milestone_is(MilestoneStatus.COMPLETED), ActionDefinition(
        "approve_milestone", "Approve", "Approve the completed milestone",
        ActionType.PRIMARY, "ThumbsUp", "approve_milestone"), with_milestone=True),
    CatalogRule(Role.CLIENT, _booking_is(BookingStatus.IN_PROGRESS), ActionDefinition(
        "add_feedback", "Provide Feedback", "Share feedback on the current progress",
        ActionType.SECONDARY, "MessageSquare", "add_feedback")),
    CatalogRule(Role.CLIENT, _finished, ActionDefinition(
        "final_approval", "Final Project Approval", "Give final approval for project completion",
        ActionType.SUCCESS, "Award", "final_approval", urgent=True)),

    # --- Admin ---
    CatalogRule(Role.ADMIN, lambda ctx: True, ActionDefinition(
        "manage_project", "Manage Project", "Access full project management tools",
        ActionType.PRIMARY, "Settings", "manage_project")),
    CatalogRule(Role.ADMIN, _booking_is(BookingStatus.PENDING), ActionDefinition(
        "force_approve", "Force Approve", "Override and approve this booking",
        ActionType.SECONDARY, "Shield", "force_approve")),
]


def build_contextual_actions(ctx: CatalogContext, role: Role) -> list[ContextualAction]:
    """Return the ordered actions ``role`` may take in this context."""
    actions: list[ContextualAction] = []
    for rule in CATALOG_RULES:
        if rule.role != role or not rule.applies(ctx):
            continue
        if not is_permitted(rule.definition.action, role):
            logger.warning(
                "Catalog rule %s offered to %s without permission; skipped",
                rule.definition.id, role.value,
            )
            continue
        actions.append(rule.definition.build(ctx, rule.with_milestone))
    return actions
