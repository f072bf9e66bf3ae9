"""
In-memory record store.

Used by tests and the console demo. In production this would be backed
by the hosted relational database; the engine only relies on the
RecordStore protocol.
"""

import copy
import logging
import uuid
from typing import Any, Optional

from smart_status.clients.base import RecordStoreError

logger = logging.getLogger(__name__)

TABLES = ("bookings", "project_phases", "milestones", "tasks", "booking_activity_log", "messages")


class InMemoryRecordStore:
    """Table -> id -> row mapping with copy-on-read semantics."""

    def __init__(self, seed: Optional[dict[str, list[dict[str, Any]]]] = None) -> None:
        self._tables: dict[str, dict[str, dict[str, Any]]] = {t: {} for t in TABLES}
        for table, rows in (seed or {}).items():
            for row in rows:
                self._put(table, row)

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        if table not in self._tables:
            raise RecordStoreError(f"Unknown table: {table}")
        return self._tables[table]

    def _put(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        row = copy.deepcopy(row)
        row.setdefault("id", uuid.uuid4().hex)
        self._tables.setdefault(table, {})[str(row["id"])] = row
        return row

    async def get(self, table: str, record_id: str) -> Optional[dict[str, Any]]:
        row = self._table(table).get(str(record_id))
        return copy.deepcopy(row) if row is not None else None

    async def select(self, table: str, **filters: Any) -> list[dict[str, Any]]:
        rows = [
            row for row in self._table(table).values()
            if all(row.get(key) == value for key, value in filters.items())
        ]
        return copy.deepcopy(rows)

    async def update(self, table: str, record_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        rows = self._table(table)
        if str(record_id) not in rows:
            raise RecordStoreError(f"No {table} record with id {record_id}")
        rows[str(record_id)].update(copy.deepcopy(fields))
        logger.debug("Updated %s/%s: %s", table, record_id, sorted(fields))
        return copy.deepcopy(rows[str(record_id)])

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        self._table(table)
        return copy.deepcopy(self._put(table, row))

    def rows(self, table: str) -> list[dict[str, Any]]:
        """Synchronous view of a table, for assertions and demo output."""
        return copy.deepcopy(list(self._table(table).values()))

    def reset(self) -> None:
        """Clear all tables. Used by test fixtures for isolation."""
        for rows in self._tables.values():
            rows.clear()
