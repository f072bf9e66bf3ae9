"""
Smart booking status entry point.

Computes the smart status of a booking snapshot stored as JSON, or starts
the offline console demo.

Usage:
    Snapshot file: python main.py status snapshot.json provider
    Console mode:  python main.py console
"""

import json
import logging
import sys
from pathlib import Path

from smart_status.config import settings

logger = logging.getLogger(__name__)

USAGE = "usage: python main.py status <snapshot.json> <client|provider|admin> | console"


def _run_status_mode(path: str, role: str) -> int:
    """Print the derived status of a snapshot file as JSON."""
    from pydantic import ValidationError

    from smart_status.engine.facade import compute_smart_status
    from smart_status.schemas.booking_schema import BookingSnapshot
    from smart_status.schemas.status_schema import InvalidRoleError

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        snapshot = BookingSnapshot.model_validate(raw)
        status = compute_smart_status(snapshot, role)
    except (OSError, ValueError, ValidationError, InvalidRoleError) as exc:
        logger.error("Could not compute status for %s: %s", path, exc)
        return 1

    print(status.model_dump_json(indent=2))
    return 0


def _run_console_mode() -> None:
    """Start the offline console demo (no database or API required)."""
    from console_demo import main as console_main

    logger.debug("Starting console demo against %s", settings.api.base_url)
    console_main()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        sys.argv = sys.argv[:1] + sys.argv[2:]
        _run_console_mode()
    elif len(sys.argv) == 4 and sys.argv[1] == "status":
        sys.exit(_run_status_mode(sys.argv[2], sys.argv[3]))
    else:
        print(USAGE, file=sys.stderr)
        sys.exit(2)
