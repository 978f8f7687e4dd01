"""Unit tests for webhook event classification."""

import json
from typing import Any, Dict, Optional

import pytest

from project_sync.errors import PayloadParseError
from project_sync.webhook.handler import classify_event, event_kind_for_header
from project_sync.webhook.models import EventKind

# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def _make_payload(
    item_key: str = "issue",
    action: str = "opened",
    number: Any = 7,
    title: str = "Login button misaligned",
    owner: str = "acme",
    repo: str = "pikarama",
    merged: Optional[Any] = None,
) -> Dict[str, Any]:
    path = "pull" if item_key == "pull_request" else "issues"
    item: Dict[str, Any] = {
        "number": number,
        "title": title,
        "html_url": f"https://github.com/{owner}/{repo}/{path}/{number}",
        "state": "open",
    }
    if item_key == "pull_request":
        item["merged"] = merged
    return {
        "action": action,
        item_key: item,
        "repository": {"name": repo, "full_name": f"{owner}/{repo}"},
        "sender": {"login": "octocat"},
    }


def _body(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


# ---------------------------------------------------------------------------
# issues
# ---------------------------------------------------------------------------


def test_issue_event_is_classified():
    envelope = classify_event(_body(_make_payload()), "issues")

    assert envelope.event_kind is EventKind.ISSUE
    assert envelope.action == "opened"
    assert envelope.repository_full_name == "acme/pikarama"
    assert envelope.repository_short_name == "pikarama"
    assert envelope.item_html_url == "https://github.com/acme/pikarama/issues/7"
    assert envelope.item_number == 7
    assert envelope.item_title == "Login button misaligned"
    assert envelope.pr_merged is False
    assert envelope.item_id == "acme/pikarama#7"


def test_issue_payload_under_wrong_key_fails():
    payload = _make_payload(item_key="pull_request")

    with pytest.raises(PayloadParseError):
        classify_event(_body(payload), "issues")


# ---------------------------------------------------------------------------
# pull_request
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "merged, expected",
    [(True, True), (False, False), (None, False)],
)
def test_pull_request_merged_flag(merged, expected):
    payload = _make_payload(item_key="pull_request", action="closed", merged=merged)

    envelope = classify_event(_body(payload), "pull_request")

    assert envelope.event_kind is EventKind.PULL_REQUEST
    assert envelope.action == "closed"
    assert envelope.pr_merged is expected
    assert envelope.item_html_url.endswith("/pull/7")


def test_pull_request_without_merged_key():
    payload = _make_payload(item_key="pull_request")
    del payload["pull_request"]["merged"]

    envelope = classify_event(_body(payload), "pull_request")

    assert envelope.pr_merged is False


def test_pull_request_merged_wrong_type_fails():
    payload = _make_payload(item_key="pull_request", merged="yes")

    with pytest.raises(PayloadParseError):
        classify_event(_body(payload), "pull_request")


# ---------------------------------------------------------------------------
# Other events
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("event", ["ping", "push", "", None, "Issues"])
def test_other_events_are_not_parsed(event):
    envelope = classify_event(b"definitely not json", event)

    assert envelope.event_kind is EventKind.OTHER
    assert envelope.item_number is None


@pytest.mark.parametrize(
    "event, expected",
    [
        ("issues", EventKind.ISSUE),
        ("pull_request", EventKind.PULL_REQUEST),
        ("ping", EventKind.OTHER),
        ("junk-42", EventKind.OTHER),
        ("", EventKind.OTHER),
        (None, EventKind.OTHER),
    ],
)
def test_event_kind_for_header(event, expected):
    assert event_kind_for_header(event) is expected


# ---------------------------------------------------------------------------
# Parse failures
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw",
    [b"", b"{", b"[1, 2]", b'"text"', b"\xff\xfe\x00garbage"],
)
def test_invalid_json_fails(raw):
    with pytest.raises(PayloadParseError):
        classify_event(raw, "issues")


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p.pop("action"),
        lambda p: p.pop("repository"),
        lambda p: p.pop("issue"),
        lambda p: p["issue"].pop("html_url"),
        lambda p: p["issue"].pop("title"),
        lambda p: p["issue"].pop("number"),
        lambda p: p["repository"].pop("name"),
        lambda p: p["repository"].pop("full_name"),
        lambda p: p.__setitem__("action", 3),
        lambda p: p["issue"].__setitem__("number", "7"),
        lambda p: p["issue"].__setitem__("number", True),
        lambda p: p.__setitem__("repository", "acme/pikarama"),
    ],
)
def test_missing_or_wrongly_typed_fields_fail(mutate):
    payload = _make_payload()
    mutate(payload)

    with pytest.raises(PayloadParseError):
        classify_event(_body(payload), "issues")
