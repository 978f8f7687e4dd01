"""Property-based tests for repository filtering and the sync decision table.

Covers:
- Events from untracked repositories are always ignored
- The decision table holds for every (kind, action, merged) combination
- Repository matching is exact and case-sensitive
"""

import pytest
from hypothesis import given, strategies as st

from project_sync.sync.decision import decide_sync_action, is_tracked
from project_sync.sync.models import SyncAction
from project_sync.webhook.models import EventKind, WebhookEnvelope

TRACKED = frozenset({"pikarama", "brick-directory"})


def _make_envelope(
    kind: EventKind = EventKind.ISSUE,
    action: str = "opened",
    repo: str = "pikarama",
    merged: bool = False,
) -> WebhookEnvelope:
    return WebhookEnvelope(
        event_kind=kind,
        action=action,
        repository_full_name=f"acme/{repo}",
        repository_short_name=repo,
        item_html_url=f"https://github.com/acme/{repo}/issues/1",
        item_number=1,
        item_title="Title",
        pr_merged=merged,
    )


repo_names = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_."),
    min_size=1,
    max_size=100,
)
actions = st.one_of(
    st.sampled_from(["opened", "closed", "reopened", "edited", "labeled", "merged"]),
    st.text(max_size=20),
)


# =============================================================================
# Property: untracked repositories are always ignored
# =============================================================================


@given(
    repo=repo_names.filter(lambda name: name not in TRACKED),
    kind=st.sampled_from(list(EventKind)),
    action=actions,
    merged=st.booleans(),
)
def test_untracked_repository_always_ignored(repo, kind, action, merged):
    decision = decide_sync_action(_make_envelope(kind, action, repo, merged), TRACKED)

    assert decision.action is SyncAction.IGNORE


@given(action=actions, merged=st.booleans(), repo=st.sampled_from(sorted(TRACKED)))
def test_other_events_always_ignored(action, merged, repo):
    decision = decide_sync_action(
        _make_envelope(EventKind.OTHER, action, repo, merged), TRACKED
    )

    assert decision.action is SyncAction.IGNORE


@given(
    action=actions.filter(lambda a: a not in ("opened", "closed")),
    kind=st.sampled_from([EventKind.ISSUE, EventKind.PULL_REQUEST]),
    merged=st.booleans(),
)
def test_unrecognized_actions_ignored(action, kind, merged):
    decision = decide_sync_action(_make_envelope(kind, action, merged=merged), TRACKED)

    assert decision.action is SyncAction.IGNORE


# =============================================================================
# Decision table
# =============================================================================


@pytest.mark.parametrize(
    "kind, action, merged, expected",
    [
        (EventKind.ISSUE, "opened", False, SyncAction.ADD_AS_TODO),
        (EventKind.ISSUE, "closed", False, SyncAction.MOVE_TO_DONE),
        (EventKind.ISSUE, "reopened", False, SyncAction.IGNORE),
        (EventKind.PULL_REQUEST, "opened", False, SyncAction.ADD_AS_TODO),
        (EventKind.PULL_REQUEST, "opened", True, SyncAction.ADD_AS_TODO),
        (EventKind.PULL_REQUEST, "closed", True, SyncAction.MOVE_TO_DONE),
        (EventKind.PULL_REQUEST, "closed", False, SyncAction.IGNORE),
        (EventKind.PULL_REQUEST, "synchronize", True, SyncAction.IGNORE),
        (EventKind.PULL_REQUEST, "synchronize", False, SyncAction.IGNORE),
    ],
)
def test_decision_table(kind, action, merged, expected):
    decision = decide_sync_action(_make_envelope(kind, action, merged=merged), TRACKED)

    assert decision.action is expected
    assert decision.reason


def test_issue_closed_ignores_merged_flag():
    decision = decide_sync_action(
        _make_envelope(EventKind.ISSUE, "closed", merged=False), TRACKED
    )

    assert decision.action is SyncAction.MOVE_TO_DONE


def test_untracked_reason_names_repository():
    decision = decide_sync_action(_make_envelope(repo="some-other-repo"), TRACKED)

    assert "some-other-repo" in decision.reason


# =============================================================================
# Repository filter
# =============================================================================


@given(repo=st.sampled_from(sorted(TRACKED)))
def test_tracked_repositories_match(repo):
    assert is_tracked(repo, TRACKED) is True


@pytest.mark.parametrize("repo", ["Pikarama", "PIKARAMA", " pikarama", "pikarama ", "acme/pikarama", ""])
def test_repository_match_is_exact(repo):
    assert is_tracked(repo, TRACKED) is False
