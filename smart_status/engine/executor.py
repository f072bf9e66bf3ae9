"""
Action executor: performs one state-changing action chosen from the
contextual catalog.

Each action key maps to exactly one handler, and each handler does one
of three things: mutate the booking, mutate a milestone, or call an
external collaborator. Permission is re-checked here against the same
table the catalog uses, so a forged or stale action id is rejected.

Every path returns an ActionResult. Collaborator exceptions are converted
into ``{"success": False, "message": ...}`` and never escape. The executor
does not read back the new status; callers re-run the status facade.
"""

import asyncio
import weakref
from typing import Any, Awaitable, Callable, Optional

from smart_status.clients.base import (
    ApprovalEndpoint,
    Messenger,
    NotAuthenticatedError,
    RecordStore,
)
from smart_status.config import settings
from smart_status.engine.catalog import is_permitted
from smart_status.logging_context import booking_context, get_booking_logger
from smart_status.schemas.booking_schema import Booking, BookingStatus, MilestoneStatus
from smart_status.schemas.status_schema import ActionResult, InvalidRoleError, Role, parse_role
from smart_status.utils import utc_now_iso

logger = get_booking_logger(__name__)

Handler = Callable[[str, dict[str, Any], Role], Awaitable[ActionResult]]

_PAST_APPROVAL = {BookingStatus.IN_PROGRESS.value, BookingStatus.COMPLETED.value}


def _ok(message: str) -> ActionResult:
    return {"success": True, "message": message}


def _fail(message: str) -> ActionResult:
    return {"success": False, "message": message}


class ActionExecutor:
    """Executes contextual actions against the record store and endpoints."""

    def __init__(
        self,
        store: RecordStore,
        approver: ApprovalEndpoint,
        messenger: Messenger,
    ) -> None:
        self._store = store
        self._approver = approver
        self._messenger = messenger
        self._approval_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )
        self._handlers: dict[str, Handler] = {
            "approve": self._approve,
            "force_approve": self._approve,
            "decline": self._decline,
            "start_milestone": self._start_milestone,
            "complete_milestone": self._complete_milestone,
            "approve_milestone": self._approve_milestone,
            "complete_project": self._complete_project,
            "final_approval": self._final_approval,
            "add_feedback": self._add_feedback,
        }

    async def execute_action(
        self,
        booking_id: str,
        action_id: str,
        params: Optional[dict[str, Any]] = None,
        role: Any = None,
    ) -> ActionResult:
        """
        Execute one action on behalf of ``role``.

        Args:
            booking_id: Booking the action applies to.
            action_id: Action key, e.g. ``approve`` or ``start_milestone``.
            params: Action parameters such as ``milestoneId`` or ``comment``.
            role: Caller role (``client``, ``provider`` or ``admin``).

        Returns:
            ``{"success": bool, "message": str}``; never raises.
        """
        with booking_context(booking_id):
            try:
                caller = parse_role(role)
            except InvalidRoleError:
                logger.warning("Rejected action %s: unknown role %r", action_id, role)
                return _fail(f"Unknown role: {role}")

            handler = self._handlers.get(action_id)
            if handler is None:
                logger.warning("Rejected unknown action %r", action_id)
                return _fail("Unknown action.")

            if not is_permitted(action_id, caller):
                logger.warning("Rejected action %s for role %s", action_id, caller.value)
                return _fail(f"Action '{action_id}' is not permitted for role {caller.value}.")

            try:
                result = await handler(booking_id, dict(params or {}), caller)
            except NotAuthenticatedError:
                return _fail("Not authenticated")
            except Exception as exc:
                logger.exception("Action %s failed", action_id)
                return _fail(str(exc) or "Action failed")

            logger.info(
                "Action %s by %s: %s", action_id, caller.value,
                "ok" if result["success"] else result["message"],
            )
            return result

    # ------------------------------------------------------------------ #
    # Booking mutations
    # ------------------------------------------------------------------ #

    async def _approve(self, booking_id: str, params: dict[str, Any], role: Role) -> ActionResult:
        # Endpoint side effects (notification, invoice) fire at most once per booking.
        lock = self._approval_locks.get(booking_id)
        if lock is None:
            lock = self._approval_locks[booking_id] = asyncio.Lock()
        async with lock:
            if await self._already_approved(booking_id):
                logger.info("Booking already approved, skipping endpoint call")
                return _ok("Booking approved successfully")
            try:
                await self._approver.approve_booking(booking_id)
            except NotAuthenticatedError:
                return _fail("Not authenticated")
            except Exception as exc:
                logger.warning("Approve booking request failed: %s", exc)
                return _fail("Failed to update booking")
        return _ok("Booking approved successfully")

    async def _already_approved(self, booking_id: str) -> bool:
        try:
            row = await self._store.get("bookings", booking_id)
            booking = Booking.model_validate(row) if row else None
        except Exception as exc:
            logger.warning("Could not read booking before approval: %s", exc)
            return False
        if booking is None:
            return False
        return booking.is_approved or booking.status in _PAST_APPROVAL

    async def _decline(self, booking_id: str, params: dict[str, Any], role: Role) -> ActionResult:
        await self._update_booking_status(booking_id, BookingStatus.CANCELLED.value, role)
        return _ok("Booking declined")

    async def _complete_project(
        self, booking_id: str, params: dict[str, Any], role: Role
    ) -> ActionResult:
        await self._update_booking_status(booking_id, BookingStatus.COMPLETED.value, role)
        return _ok("Project marked as complete")

    async def _final_approval(
        self, booking_id: str, params: dict[str, Any], role: Role
    ) -> ActionResult:
        await self._update_booking_status(
            booking_id, BookingStatus.COMPLETED.value, role,
            extra={"client_approved_at": utc_now_iso()},
        )
        return _ok("Final approval recorded")

    async def _update_booking_status(
        self,
        booking_id: str,
        new_status: str,
        role: Role,
        extra: Optional[dict[str, Any]] = None,
    ) -> None:
        fields = {"status": new_status, "updated_at": utc_now_iso(), **(extra or {})}
        await self._store.update("bookings", booking_id, fields)

        # Audit trail is best-effort and never fails the action.
        try:
            await self._store.insert("booking_activity_log", {
                "booking_id": booking_id,
                "action": f"status_changed_to_{new_status}",
                "performed_by": role.value,
                "timestamp": fields["updated_at"],
                "details": {"new_status": new_status},
            })
        except Exception as exc:
            logger.warning("Failed to log activity: %s", exc)

    # ------------------------------------------------------------------ #
    # Milestone mutations
    # ------------------------------------------------------------------ #

    async def _start_milestone(
        self, booking_id: str, params: dict[str, Any], role: Role
    ) -> ActionResult:
        milestone_id = params.get("milestoneId")
        if not milestone_id:
            return _fail("Missing milestoneId")
        if await self._owned_milestone(booking_id, milestone_id) is None:
            return _fail("Milestone not found")
        await self._store.update("milestones", milestone_id, {
            "status": MilestoneStatus.IN_PROGRESS.value,
            "updated_at": utc_now_iso(),
        })
        return _ok("Milestone started")

    async def _complete_milestone(
        self, booking_id: str, params: dict[str, Any], role: Role
    ) -> ActionResult:
        milestone_id = params.get("milestoneId")
        if not milestone_id:
            return _fail("Missing milestoneId")
        if await self._owned_milestone(booking_id, milestone_id) is None:
            return _fail("Milestone not found")
        # Completion is authoritative over task-derived progress.
        await self._store.update("milestones", milestone_id, {
            "status": MilestoneStatus.COMPLETED.value,
            "progress_percentage": 100,
            "updated_at": utc_now_iso(),
        })
        return _ok("Milestone completed")

    async def _approve_milestone(
        self, booking_id: str, params: dict[str, Any], role: Role
    ) -> ActionResult:
        milestone_id = params.get("milestoneId")
        if not milestone_id:
            return _fail("Missing milestoneId")
        milestone = await self._owned_milestone(booking_id, milestone_id)
        if milestone is None:
            return _fail("Milestone not found")

        now = utc_now_iso()
        fields: dict[str, Any] = {"approval_status": "approved", "approved_at": now, "updated_at": now}
        if milestone.get("status") != MilestoneStatus.COMPLETED.value:
            fields.update(
                status=MilestoneStatus.COMPLETED.value,
                progress_percentage=100,
                completed_at=now,
            )
        await self._store.update("milestones", milestone_id, fields)
        return _ok("Milestone approved")

    async def _owned_milestone(self, booking_id: str, milestone_id: str) -> Optional[dict[str, Any]]:
        """The milestone row, or None when it does not belong to ``booking_id``."""
        milestone = await self._store.get("milestones", milestone_id)
        if milestone is None or str(milestone.get("booking_id")) != str(booking_id):
            return None
        return milestone

    # ------------------------------------------------------------------ #
    # Side channels
    # ------------------------------------------------------------------ #

    async def _add_feedback(
        self, booking_id: str, params: dict[str, Any], role: Role
    ) -> ActionResult:
        booking = await self._store.get("bookings", booking_id)
        if booking is None:
            return _fail("Could not find booking")

        receiver_id = _counter_party(booking, role, params.get("actorId"))
        if not receiver_id:
            return _fail("Receiver not found")

        parts: list[str] = []
        if params.get("rating"):
            parts.append(f"Rating: {params['rating']}/5")
        if params.get("comment"):
            parts.append(str(params["comment"]))
        content = "\n\n".join(parts) or "Feedback submitted."

        try:
            await self._messenger.send_message(
                receiver_id=receiver_id,
                subject=settings.engine.feedback_subject,
                content=content,
                booking_id=booking_id,
            )
        except NotAuthenticatedError:
            raise
        except Exception as exc:
            # Feedback is optional; delivery problems do not fail the action.
            logger.warning("Feedback message failed: %s", exc)
        return _ok("Feedback submitted")


def _counter_party(booking: dict[str, Any], role: Role, actor_id: Any = None) -> Optional[str]:
    """The booking participant who is not the caller."""
    client_id = booking.get("client_id")
    provider_id = booking.get("provider_id")
    if actor_id:
        if str(actor_id) == str(client_id):
            return provider_id
        if str(actor_id) == str(provider_id):
            return client_id
    if role == Role.CLIENT:
        return provider_id
    if role == Role.PROVIDER:
        return client_id
    return None
