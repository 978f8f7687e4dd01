"""Sync decisions: repository filtering and the action decision table."""

from project_sync.sync.decision import decide_sync_action, is_tracked
from project_sync.sync.models import SyncAction, SyncDecision, SyncOutcome

__all__ = [
    "SyncAction",
    "SyncDecision",
    "SyncOutcome",
    "decide_sync_action",
    "is_tracked",
]
