"""Sync decision and outcome models.

A SyncDecision is what the orchestrator intends to do with an event; a
SyncOutcome is what actually happened. Both are plain pydantic models so
they log and serialize cleanly.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SyncAction(str, Enum):
    """What to do with the board item for an event.

    Attributes:
        ADD_AS_TODO: Add the item to the board; it lands in the Todo column.
        MOVE_TO_DONE: Add the item if needed and set its Status to Done.
        IGNORE: Leave the board untouched.
    """

    ADD_AS_TODO = "add_as_todo"
    MOVE_TO_DONE = "move_to_done"
    IGNORE = "ignore"


class SyncDecision(BaseModel):
    """Decision derived from an envelope and the repository allow-list."""

    model_config = ConfigDict(frozen=True)

    action: SyncAction
    reason: str = Field(default="", description="Why this action was chosen")


class SyncOutcome(BaseModel):
    """Result of running the orchestrator for one event.

    Attributes:
        handled: True when the board was changed (or confirmed) remotely.
        action: The decision that was executed.
        detail: Short human-readable summary for logs and responses.
        item_id: Board item id returned by GitHub, when handled.
    """

    handled: bool
    action: SyncAction
    detail: str
    item_id: Optional[str] = None
