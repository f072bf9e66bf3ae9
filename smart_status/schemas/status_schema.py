"""Derived status models returned by the engine."""

from enum import Enum
from typing import Any, Optional, TypedDict, Union

from pydantic import BaseModel, Field


class Role(str, Enum):
    """Closed set of caller roles."""

    CLIENT = "client"
    PROVIDER = "provider"
    ADMIN = "admin"


class InvalidRoleError(ValueError):
    """Raised when a role string is not one of client, provider, admin."""


def parse_role(value: Union[str, Role]) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        valid = [r.value for r in Role]
        raise InvalidRoleError(f"Unknown role {value!r}. Valid roles: {valid}") from None


class OverallStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"
    PENDING_REVIEW = "pending_review"
    READY_TO_LAUNCH = "ready_to_launch"
    IN_PRODUCTION = "in_production"
    DELIVERED = "delivered"


class ActionType(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    DANGER = "danger"
    SUCCESS = "success"


class RiskType(str, Enum):
    DEADLINE = "deadline"
    DEPENDENCY = "dependency"
    RESOURCE = "resource"
    QUALITY = "quality"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ContextualAction(BaseModel):
    """A role-specific, status-conditioned operation offered to the caller."""

    id: str
    label: str
    description: str
    type: ActionType
    icon: str = ""
    action: str
    params: Optional[dict[str, Any]] = None
    permissions: list[Role]
    urgent: bool = False


class Risk(BaseModel):
    """A detected condition surfaced for visibility."""

    id: str
    type: RiskType
    severity: Severity
    description: str
    impact: str
    mitigation: Optional[str] = None


class SmartBookingStatus(BaseModel):
    """Derived view of one booking, computed fresh on every call."""

    id: str
    overall_status: OverallStatus
    current_phase: Optional[str] = None
    current_milestone: Optional[str] = None
    progress_percentage: int = 0
    next_action: Optional[str] = None
    next_action_by: Optional[Role] = None
    estimated_completion: Optional[str] = None
    milestones_completed: int = 0
    milestones_total: int = 0
    tasks_completed: int = 0
    tasks_total: int = 0
    last_activity: Optional[str] = None
    last_activity_by: Optional[str] = None
    status_description: str = ""
    contextual_actions: list[ContextualAction] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)


class ActionResult(TypedDict):
    """Result from execute_action. Never raised, always returned."""

    success: bool
    message: str
