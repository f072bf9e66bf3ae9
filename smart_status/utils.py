"""Shared utilities used across the smart status engine."""

from datetime import datetime, timezone
from typing import Any, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Timestamp used to stamp ``updated_at`` on every mutation."""
    return utc_now().isoformat()


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 string or datetime into an aware UTC datetime.

    Returns None for empty or malformed values instead of raising.
    Naive values are assumed to be UTC.

    Examples:
        >>> parse_timestamp("2025-03-15T10:00:00Z").isoformat()
        '2025-03-15T10:00:00+00:00'
        >>> parse_timestamp("not a date") is None
        True
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
