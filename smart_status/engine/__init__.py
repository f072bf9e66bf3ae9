from smart_status.engine.catalog import ACTION_PERMISSIONS, build_contextual_actions, is_permitted
from smart_status.engine.classifier import classify_status, describe_status
from smart_status.engine.executor import ActionExecutor
from smart_status.engine.facade import SmartStatusService, compute_smart_status
from smart_status.engine.next_action import NextAction, find_current_milestone, resolve_next_action
from smart_status.engine.progress import calculate_progress, summarize_progress
from smart_status.engine.risks import detect_risks

__all__ = [
    "SmartStatusService", "compute_smart_status", "ActionExecutor",
    "calculate_progress", "summarize_progress",
    "classify_status", "describe_status",
    "NextAction", "find_current_milestone", "resolve_next_action",
    "detect_risks",
    "ACTION_PERMISSIONS", "build_contextual_actions", "is_permitted",
]
