"""
Offline console demo: walks a booking through its lifecycle without a
database or network.

Uses the real engine, fetcher, and executor against the in-memory record
store. Approval and messaging are served by a local stand-in for the
dashboard API that writes straight into the same store.

Usage:
    python console_demo.py
    python console_demo.py --scenario lifecycle
"""

import argparse
import asyncio
from datetime import timedelta
from typing import Any, Optional

from smart_status.clients.fetcher import StoreSnapshotFetcher
from smart_status.clients.memory_store import InMemoryRecordStore
from smart_status.engine.executor import ActionExecutor
from smart_status.engine.facade import SmartStatusService
from smart_status.schemas.status_schema import Role, SmartBookingStatus
from smart_status.utils import utc_now, utc_now_iso

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

DEMO_BOOKING_ID = "bk-demo"


class LocalDashboard:
    """Approval endpoint and messenger that write into the demo store."""

    def __init__(self, store: InMemoryRecordStore) -> None:
        self._store = store

    async def approve_booking(self, booking_id: str) -> None:
        await self._store.update("bookings", booking_id, {
            "status": "approved",
            "approval_status": "approved",
            "updated_at": utc_now_iso(),
        })

    async def send_message(
        self, receiver_id: str, subject: str, content: str, booking_id: str
    ) -> None:
        await self._store.insert("messages", {
            "receiver_id": receiver_id,
            "subject": subject,
            "content": content,
            "booking_id": booking_id,
        })


def seed_store() -> InMemoryRecordStore:
    """A pending website-redesign booking with a three-milestone plan."""
    due = utc_now() + timedelta(days=10)
    return InMemoryRecordStore({
        "bookings": [{
            "id": DEMO_BOOKING_ID,
            "status": "pending",
            "title": "Website redesign",
            "amount": 2500,
            "currency": "OMR",
            "client_id": "client-1",
            "provider_id": "provider-1",
            "services": {"id": "svc-1", "title": "Web Design"},
        }],
        "milestones": [
            {"id": "ms-1", "booking_id": DEMO_BOOKING_ID, "title": "Discovery",
             "status": "pending", "order_index": 0, "due_date": due.isoformat()},
            {"id": "ms-2", "booking_id": DEMO_BOOKING_ID, "title": "Design",
             "status": "pending", "order_index": 1, "risk_level": "high"},
            {"id": "ms-3", "booking_id": DEMO_BOOKING_ID, "title": "Launch",
             "status": "pending", "order_index": 2},
        ],
        "tasks": [
            {"id": "t-1", "milestone_id": "ms-1", "title": "Kickoff call", "status": "pending"},
            {"id": "t-2", "milestone_id": "ms-1", "title": "Requirements", "status": "pending"},
            {"id": "t-3", "milestone_id": "ms-2", "title": "Mockups", "status": "pending"},
        ],
    })


class ConsoleSession:
    """Interactive view of one booking as seen by each role."""

    # Pre-scripted (role, action) steps for --scenario flag
    SCENARIOS: dict[str, list[tuple[Role, str, dict[str, Any]]]] = {
        "lifecycle": [
            (Role.PROVIDER, "approve", {}),
            (Role.PROVIDER, "start_milestone", {"milestoneId": "ms-1"}),
            (Role.CLIENT, "add_feedback", {"rating": 5, "comment": "Great kickoff"}),
            (Role.PROVIDER, "complete_milestone", {"milestoneId": "ms-1"}),
            (Role.PROVIDER, "start_milestone", {"milestoneId": "ms-2"}),
            (Role.PROVIDER, "complete_milestone", {"milestoneId": "ms-2"}),
            (Role.PROVIDER, "start_milestone", {"milestoneId": "ms-3"}),
            (Role.PROVIDER, "complete_milestone", {"milestoneId": "ms-3"}),
            (Role.CLIENT, "final_approval", {}),
        ],
    }

    def __init__(self) -> None:
        self.store = seed_store()
        dashboard = LocalDashboard(self.store)
        self.service = SmartStatusService(
            StoreSnapshotFetcher(self.store),
            ActionExecutor(self.store, approver=dashboard, messenger=dashboard),
        )
        self.role = Role.PROVIDER

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def show_status(self, status: SmartBookingStatus) -> None:
        print(f"\n{BOLD}[{self.role.value}] {status.overall_status.value}{RESET} "
              f"- {status.progress_percentage}% - {status.status_description}")
        if status.next_action:
            print(f"{GREEN}  Next: {status.next_action} (by {status.next_action_by.value}){RESET}")
        for risk in status.risks:
            print(f"{YELLOW}  Risk [{risk.severity.value}]: {risk.description}{RESET}")
        for index, action in enumerate(status.contextual_actions, 1):
            flag = f" {RED}(urgent){RESET}" if action.urgent else ""
            print(f"{BLUE}  {index}. {action.label}{RESET}{flag}")

    async def _run_action(self, role: Role, action_id: str, params: dict[str, Any]) -> None:
        result = await self.service.execute_action(DEMO_BOOKING_ID, action_id, params, role)
        colour = GREEN if result["success"] else RED
        self.system_log(f"{role.value} -> {action_id}: {colour}{result['message']}{RESET}")

    async def run_scenario(self, scenario: str) -> None:
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  SMART BOOKING STATUS - Scenario: {scenario}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")
        for role, action_id, params in steps:
            self.role = role
            self.show_status(await self.service.get_smart_status(DEMO_BOOKING_ID, role))
            await self._run_action(role, action_id, params)

        self.role = Role.CLIENT
        self.show_status(await self.service.get_smart_status(DEMO_BOOKING_ID, Role.CLIENT))
        print(f"\n{DIM}  Activity log: "
              f"{[row['action'] for row in self.store.rows('booking_activity_log')]}{RESET}")

    async def run(self) -> None:
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  SMART BOOKING STATUS - Console Demo{RESET}")
        print(f"{BOLD}  Commands: number = run action, role <name>, quit{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        while True:
            status = await self.service.get_smart_status(DEMO_BOOKING_ID, self.role)
            self.show_status(status)
            command = input(f"\n{BLUE}> {RESET}").strip().lower()
            if command in ("quit", "exit", "q"):
                print(f"\n{DIM}Session ended.{RESET}")
                return
            if command.startswith("role "):
                self._switch_role(command[5:])
                continue
            choice = self._pick(command, len(status.contextual_actions))
            if choice is None:
                self.system_log("Enter an action number, 'role <name>' or 'quit'.")
                continue
            action = status.contextual_actions[choice]
            await self._run_action(self.role, action.action, dict(action.params or {}))

    def _switch_role(self, name: str) -> None:
        try:
            self.role = Role(name.strip())
        except ValueError:
            self.system_log(f"Unknown role: {name}")

    @staticmethod
    def _pick(command: str, count: int) -> Optional[int]:
        if not command.isdigit():
            return None
        index = int(command) - 1
        return index if 0 <= index < count else None


def main() -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    args = parser.parse_args()

    session = ConsoleSession()
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
