"""Booking snapshot data models.

A snapshot is the read-only, point-in-time aggregate of one booking and
its phases, milestones, and tasks. Everything optional or malformed is
resolved here, once, so the engine never has to null-check.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from smart_status.config import settings
from smart_status.utils import parse_timestamp


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on_hold"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


def _normalize_status(value: Any, default: str) -> str:
    if not isinstance(value, str) or not value.strip():
        return default
    return value.strip().lower()


def _clamp_percentage(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number:  # NaN
        return 0
    return int(max(0.0, min(100.0, number)))


def _safe_order(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class _SnapshotModel(BaseModel):
    """Base for snapshot records: extra store columns are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ServiceRef(_SnapshotModel):
    """The service a booking was made for."""

    id: Optional[str] = None
    title: Optional[str] = None
    estimated_duration: Optional[str] = None

    @field_validator("id", "title", "estimated_duration", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> Optional[str]:
        return _optional_str(value)


class Booking(_SnapshotModel):
    """Top-level contract between a client and a provider."""

    id: str
    status: str = ""
    approval_status: Optional[str] = None
    ui_approval_status: Optional[str] = None
    title: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    amount: Optional[float] = None
    currency: Optional[str] = None
    client_id: Optional[str] = None
    provider_id: Optional[str] = None
    service: Optional[ServiceRef] = Field(default=None, alias="services")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, (int, float)) else value

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> str:
        return _normalize_status(value, "")

    @field_validator("approval_status", "ui_approval_status", mode="before")
    @classmethod
    def _flags(cls, value: Any) -> Optional[str]:
        return _normalize_status(value, "") or None

    @field_validator("client_id", "provider_id", "title", "currency", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("scheduled_date", "created_at", "updated_at", mode="before")
    @classmethod
    def _timestamps(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, value: Any) -> Optional[float]:
        try:
            return float(value) if value is not None else None
        except (TypeError, ValueError):
            return None

    @field_validator("service", mode="before")
    @classmethod
    def _service(cls, value: Any) -> Any:
        # Joined relations sometimes come back as a one-element list.
        if isinstance(value, list):
            return value[0] if value else None
        return value if isinstance(value, (dict, ServiceRef)) else None

    @property
    def is_approved(self) -> bool:
        return (
            self.status == BookingStatus.APPROVED
            or self.approval_status == BookingStatus.APPROVED
            or self.ui_approval_status == BookingStatus.APPROVED
        )


class Phase(_SnapshotModel):
    """Optional grouping of milestones."""

    id: Optional[str] = None
    name: str = "Unnamed phase"
    order_index: int = 0
    status: str = MilestoneStatus.PENDING.value

    @field_validator("id", mode="before")
    @classmethod
    def _id(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return _optional_str(value) or "Unnamed phase"

    @field_validator("order_index", mode="before")
    @classmethod
    def _order(cls, value: Any) -> int:
        return _safe_order(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> str:
        return _normalize_status(value, MilestoneStatus.PENDING.value)


class Task(_SnapshotModel):
    """Smallest tracked unit of work, owned by one milestone."""

    id: Optional[str] = None
    milestone_id: Optional[str] = None
    title: str = ""
    status: str = MilestoneStatus.PENDING.value
    progress_percentage: int = 0
    assigned_to: Optional[str] = None
    priority: Optional[str] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", "milestone_id", "assigned_to", "priority", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return _optional_str(value) or ""

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> str:
        return _normalize_status(value, MilestoneStatus.PENDING.value)

    @field_validator("progress_percentage", mode="before")
    @classmethod
    def _progress(cls, value: Any) -> int:
        return _clamp_percentage(value)

    @field_validator("updated_at", mode="before")
    @classmethod
    def _timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @property
    def is_completed(self) -> bool:
        return self.status == MilestoneStatus.COMPLETED


class Milestone(_SnapshotModel):
    """Ordered, gatable unit of work within a booking."""

    id: Optional[str] = None
    title: str = Field(default="", validate_default=True)
    status: str = MilestoneStatus.PENDING.value
    progress_percentage: int = 0
    order_index: int = 0
    due_date: Optional[datetime] = None
    risk_level: str = RiskLevel.LOW.value
    phase_id: Optional[str] = None
    critical_path: bool = False
    updated_at: Optional[datetime] = None
    tasks: list[Task] = Field(default_factory=list)

    @field_validator("id", "phase_id", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> Optional[str]:
        return _optional_str(value)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return _optional_str(value) or settings.engine.milestone_title_placeholder

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> str:
        return _normalize_status(value, MilestoneStatus.PENDING.value)

    @field_validator("progress_percentage", mode="before")
    @classmethod
    def _progress(cls, value: Any) -> int:
        return _clamp_percentage(value)

    @field_validator("order_index", mode="before")
    @classmethod
    def _order(cls, value: Any) -> int:
        return _safe_order(value)

    @field_validator("due_date", "updated_at", mode="before")
    @classmethod
    def _timestamps(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("risk_level", mode="before")
    @classmethod
    def _risk(cls, value: Any) -> str:
        level = _normalize_status(value, RiskLevel.LOW.value)
        return level if level in {r.value for r in RiskLevel} else RiskLevel.LOW.value

    @field_validator("critical_path", mode="before")
    @classmethod
    def _critical(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("tasks", mode="before")
    @classmethod
    def _tasks(cls, value: Any) -> list:
        if not isinstance(value, (list, tuple)):
            return []
        return [t for t in value if isinstance(t, (dict, Task))]

    @property
    def is_completed(self) -> bool:
        return self.status == MilestoneStatus.COMPLETED

    @property
    def incomplete_tasks(self) -> list[Task]:
        return [t for t in self.tasks if not t.is_completed]


class BookingSnapshot(_SnapshotModel):
    """One booking plus its ordered phases and milestones (tasks nested)."""

    booking: Booking
    phases: list[Phase] = Field(default_factory=list)
    milestones: list[Milestone] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _nest_and_index(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["phases"] = _with_positions(data.get("phases"))
        milestones = _with_positions(data.get("milestones"))

        # Flat task lists are attached to their milestone by milestone_id.
        loose_tasks = data.pop("tasks", None) or []
        if loose_tasks:
            by_milestone: dict[str, list] = {}
            for task in loose_tasks:
                if isinstance(task, dict):
                    key = task.get("milestone_id")
                elif isinstance(task, Task):
                    key = task.milestone_id
                else:
                    continue
                by_milestone.setdefault(str(key), []).append(task)
            for m in milestones:
                if isinstance(m, dict) and m.get("id") is not None:
                    nested = list(m.get("tasks") or [])
                    m["tasks"] = nested + by_milestone.get(str(m["id"]), [])
        data["milestones"] = milestones
        return data

    @model_validator(mode="after")
    def _sort(self) -> "BookingSnapshot":
        self.milestones.sort(key=lambda m: m.order_index)
        self.phases.sort(key=lambda p: p.order_index)
        return self

    @property
    def tasks(self) -> list[Task]:
        return [t for m in self.milestones for t in m.tasks]


def _with_positions(items: Any) -> list:
    """Copy raw rows, defaulting a missing order_index to the row position."""
    if not isinstance(items, (list, tuple)):
        return []
    rows = []
    for position, item in enumerate(items):
        if isinstance(item, dict):
            item = dict(item)
            if item.get("order_index") is None:
                item["order_index"] = position
        rows.append(item)
    return rows
