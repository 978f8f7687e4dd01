"""GitHub API client for ProjectV2 board synchronization.

This module provides a wrapper around the GitHub API for:
- Resolving issue and pull request node ids
- Adding items to a project board
- Reading the board's Status field
- Setting an item's Status
"""

from project_sync.github.client import (
    STEP_ADD_TO_BOARD,
    STEP_FETCH_STATUS_SCHEMA,
    STEP_RESOLVE_ITEM,
    STEP_SET_STATUS,
    GitHubProjectsClient,
    rest_path_for_html_url,
)
from project_sync.github.models import (
    DONE_OPTION,
    STATUS_FIELD_NAME,
    TODO_OPTION,
    BoardItemRef,
    StatusFieldSchema,
)

__all__ = [
    "BoardItemRef",
    "DONE_OPTION",
    "GitHubProjectsClient",
    "STATUS_FIELD_NAME",
    "STEP_ADD_TO_BOARD",
    "STEP_FETCH_STATUS_SCHEMA",
    "STEP_RESOLVE_ITEM",
    "STEP_SET_STATUS",
    "StatusFieldSchema",
    "TODO_OPTION",
    "rest_path_for_html_url",
]
