"""GitHub webhook handling for board sync.

This module verifies and classifies GitHub webhook deliveries:
- issues.opened / issues.closed
- pull_request.opened / pull_request.closed (merged or not)

Every other event type is classified as EventKind.OTHER and ignored.
"""

from project_sync.webhook.handler import (
    EVENT_HEADER,
    classify_event,
    event_kind_for_header,
)
from project_sync.webhook.models import EventKind, WebhookEnvelope
from project_sync.webhook.signature import (
    SIGNATURE_HEADER,
    compute_signature,
    constant_time_equals,
    verify_signature,
)

__all__ = [
    "EVENT_HEADER",
    "EventKind",
    "SIGNATURE_HEADER",
    "WebhookEnvelope",
    "classify_event",
    "compute_signature",
    "constant_time_equals",
    "event_kind_for_header",
    "verify_signature",
]
