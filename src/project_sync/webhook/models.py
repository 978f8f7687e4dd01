"""GitHub webhook event models for board sync.

This module defines the data extracted from an inbound GitHub webhook:
only the fields needed to decide whether and how to move a board item.
The models are frozen so an envelope cannot change after classification.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Kind of GitHub event, derived from the X-GitHub-Event header.

    Attributes:
        ISSUE: An ``issues`` event.
        PULL_REQUEST: A ``pull_request`` event.
        OTHER: Any other event (``ping``, ``push``, ...). Never synced.
    """

    ISSUE = "issue"
    PULL_REQUEST = "pull_request"
    OTHER = "other"


class WebhookEnvelope(BaseModel):
    """Parsed GitHub issue or pull request webhook event.

    For ``EventKind.OTHER`` the body is not inspected, so every field other
    than ``event_kind`` keeps its empty default.

    Attributes:
        event_kind: Which family of event this is.
        action: The webhook action (opened, closed, reopened, ...).
        repository_full_name: Repository as ``owner/name``.
        repository_short_name: Repository name without owner.
        item_html_url: Browser URL of the issue or pull request.
        item_number: Issue or pull request number.
        item_title: Issue or pull request title.
        pr_merged: Whether the pull request was merged. Always False for
            issues.
    """

    model_config = ConfigDict(frozen=True)

    event_kind: EventKind = Field(
        ...,
        description="Family of the webhook event",
    )

    action: str = Field(
        default="",
        description="The webhook action, e.g. opened or closed",
    )

    repository_full_name: str = Field(
        default="",
        description="Repository path in format owner/name",
    )

    repository_short_name: str = Field(
        default="",
        description="Repository name without owner prefix",
    )

    item_html_url: str = Field(
        default="",
        description="Browser URL of the issue or pull request",
    )

    item_number: Optional[int] = Field(
        default=None,
        description="Issue or pull request number",
    )

    item_title: str = Field(
        default="",
        description="Issue or pull request title",
    )

    pr_merged: bool = Field(
        default=False,
        description="True when a pull request was merged",
    )

    @property
    def item_id(self) -> str:
        """Canonical identifier used in log lines.

        Returns:
            str: Identifier in format "{owner}/{repository}#{number}"
        """
        return f"{self.repository_full_name}#{self.item_number}"
