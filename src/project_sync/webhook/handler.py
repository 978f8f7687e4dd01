"""GitHub webhook event classification.

Turns a verified webhook delivery into a WebhookEnvelope. Only ``issues``
and ``pull_request`` deliveries are parsed; every other event type is
classified as EventKind.OTHER without touching the body.

GitHub Webhook Payload Structure (issues event, trimmed):
{
  "action": "opened",
  "issue": {
    "number": 123,
    "title": "Issue title",
    "html_url": "https://github.com/owner/repo/issues/123"
  },
  "repository": {
    "name": "repo",
    "full_name": "owner/repo"
  }
}

A pull_request delivery has the same shape with ``pull_request`` in place
of ``issue`` and an extra ``pull_request.merged`` boolean.
"""

import json
import logging
from typing import Any, Dict, Optional

from project_sync.errors import PayloadParseError
from project_sync.webhook.models import EventKind, WebhookEnvelope

logger = logging.getLogger(__name__)

EVENT_HEADER = "X-GitHub-Event"

_ITEM_KEYS = {
    "issues": (EventKind.ISSUE, "issue"),
    "pull_request": (EventKind.PULL_REQUEST, "pull_request"),
}


def event_kind_for_header(event_type_header: Optional[str]) -> EventKind:
    """Map an X-GitHub-Event header value onto the closed set of EventKinds."""
    event_type = (event_type_header or "").strip()
    if event_type not in _ITEM_KEYS:
        return EventKind.OTHER
    return _ITEM_KEYS[event_type][0]


def classify_event(raw_body: bytes, event_type_header: Optional[str]) -> WebhookEnvelope:
    """Classify a webhook delivery and extract the fields needed for sync.

    Args:
        raw_body: The (already verified) request body.
        event_type_header: Value of the X-GitHub-Event header, if any.

    Returns:
        WebhookEnvelope describing the event.

    Raises:
        PayloadParseError: If an issues/pull_request body is not valid JSON
            or lacks a required field.
    """
    event_type = (event_type_header or "").strip()
    if event_type not in _ITEM_KEYS:
        logger.debug("Not parsing body of event type %r", event_type)
        return WebhookEnvelope(event_kind=EventKind.OTHER)

    event_kind, item_key = _ITEM_KEYS[event_type]
    payload = _load_json(raw_body)

    action = _require_str(payload, "action", "payload")
    item = _require_object(payload, item_key)
    repository = _require_object(payload, "repository")

    merged = False
    if event_kind is EventKind.PULL_REQUEST:
        # merged is null on some deliveries for unmerged pull requests
        merged_value = item.get("merged")
        if merged_value is not None and not isinstance(merged_value, bool):
            raise PayloadParseError(
                f"Invalid '{item_key}.merged' field: expected boolean, "
                f"got {type(merged_value).__name__}"
            )
        merged = bool(merged_value)

    envelope = WebhookEnvelope(
        event_kind=event_kind,
        action=action,
        repository_full_name=_require_str(repository, "full_name", "repository"),
        repository_short_name=_require_str(repository, "name", "repository"),
        item_html_url=_require_str(item, "html_url", item_key),
        item_number=_require_int(item, "number", item_key),
        item_title=_require_str(item, "title", item_key),
        pr_merged=merged,
    )

    logger.info(
        "Classified webhook event: kind=%s, action=%s, item=%s",
        envelope.event_kind.value,
        envelope.action,
        envelope.item_id,
    )
    return envelope


def _load_json(raw_body: bytes) -> Dict[str, Any]:
    try:
        payload = json.loads(raw_body)
    except (UnicodeDecodeError, ValueError) as exc:
        raise PayloadParseError(f"Invalid JSON payload: {exc}") from exc

    if not isinstance(payload, dict):
        raise PayloadParseError(
            f"Invalid payload: expected object, got {type(payload).__name__}"
        )
    return payload


def _require_object(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise PayloadParseError(f"Missing or invalid '{key}' object in payload")
    return value


def _require_str(data: Dict[str, Any], key: str, context: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise PayloadParseError(f"Missing or invalid '{context}.{key}' string")
    return value


def _require_int(data: Dict[str, Any], key: str, context: str) -> int:
    """Extract an integer field; booleans are rejected even though bool is an int."""
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise PayloadParseError(f"Missing or invalid '{context}.{key}' integer")
    return value
