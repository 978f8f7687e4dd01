"""Repository filtering and the event -> board action decision table.

Both functions are pure: no I/O, no logging, no state.

Decision table:

    event_kind    action   pr_merged  decision
    issue         opened   -          add_as_todo
    issue         closed   -          move_to_done
    pull_request  opened   -          add_as_todo
    pull_request  closed   true       move_to_done
    pull_request  closed   false      ignore
    any           other    -          ignore

Events from repositories outside the allow-list are always ignored.
"""

from typing import AbstractSet

from project_sync.sync.models import SyncAction, SyncDecision
from project_sync.webhook.models import EventKind, WebhookEnvelope


def is_tracked(repository_short_name: str, allow_list: AbstractSet[str]) -> bool:
    """Return True if the repository is in the allow-list (case-sensitive)."""
    return repository_short_name in allow_list


def decide_sync_action(
    envelope: WebhookEnvelope,
    allow_list: AbstractSet[str],
) -> SyncDecision:
    """Decide what to do with the board item for a webhook event.

    Args:
        envelope: The classified webhook event.
        allow_list: Short names of tracked repositories.

    Returns:
        SyncDecision with the action and a reason suitable for logs.
    """
    if envelope.event_kind is EventKind.OTHER:
        return SyncDecision(action=SyncAction.IGNORE, reason="event type not synced")

    if not is_tracked(envelope.repository_short_name, allow_list):
        return SyncDecision(
            action=SyncAction.IGNORE,
            reason=f"repo not tracked: {envelope.repository_short_name}",
        )

    if envelope.action == "opened":
        return SyncDecision(
            action=SyncAction.ADD_AS_TODO,
            reason=f"{envelope.event_kind.value} opened",
        )

    if envelope.action == "closed":
        if envelope.event_kind is EventKind.ISSUE:
            return SyncDecision(action=SyncAction.MOVE_TO_DONE, reason="issue closed")
        if envelope.pr_merged:
            return SyncDecision(
                action=SyncAction.MOVE_TO_DONE, reason="pull request merged"
            )
        return SyncDecision(
            action=SyncAction.IGNORE, reason="pull request closed without merge"
        )

    return SyncDecision(
        action=SyncAction.IGNORE,
        reason=f"action not synced: {envelope.action}",
    )
