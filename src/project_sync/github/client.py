"""GitHub API client for project board synchronization.

This module provides an async wrapper around the GitHub REST and GraphQL
APIs for the four calls a board sync needs:
- Resolving an issue or pull request URL to its GraphQL node id (REST)
- Adding content to a ProjectV2 board (GraphQL)
- Reading the board's Status field and its options (GraphQL)
- Setting an item's Status (GraphQL)

Every call is a single request; there is no retry loop. GitHub redelivers
failed webhooks, which makes the whole sync the unit of retry. Failures
are raised as one of three kinds so callers can tell them apart:

- RemoteTransportError: network error, timeout, or unreadable response
- RemoteAuthError: HTTP 401/403 or a GraphQL permission error
- RemoteApplicationError: any other error status, GraphQL errors, or a
  response missing the expected data
"""

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from project_sync.errors import (
    BoardConfigurationError,
    RemoteApplicationError,
    RemoteAuthError,
    RemoteTransportError,
)
from project_sync.github.models import (
    STATUS_FIELD_NAME,
    BoardItemRef,
    StatusFieldSchema,
)

logger = logging.getLogger(__name__)

STEP_RESOLVE_ITEM = "resolve_item"
STEP_ADD_TO_BOARD = "add_to_board"
STEP_FETCH_STATUS_SCHEMA = "fetch_status_schema"
STEP_SET_STATUS = "set_status"

# Browser URLs look like https://github.com/{owner}/{repo}/issues/{n} or
# .../pull/{n}; the REST resources are /repos/{owner}/{repo}/issues/{n}
# and /repos/{owner}/{repo}/pulls/{n}.
_HTML_URL_RE = re.compile(
    r"^https?://[^/]+/(?P<owner>[A-Za-z0-9_.-]+)/(?P<repo>[A-Za-z0-9_.-]+)/"
    r"(?P<kind>issues|pull)/(?P<number>\d+)/?$"
)

# GraphQL error types that mean the token is not allowed to do this
_AUTH_ERROR_TYPES = {"FORBIDDEN", "INSUFFICIENT_SCOPES", "UNAUTHORIZED"}

ADD_ITEM_MUTATION = """
mutation($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: {projectId: $projectId, contentId: $contentId}) {
    item { id }
  }
}
"""

STATUS_FIELD_QUERY = """
query($projectId: ID!) {
  node(id: $projectId) {
    ... on ProjectV2 {
      fields(first: 20) {
        nodes {
          ... on ProjectV2SingleSelectField {
            id
            name
            options { id name }
          }
        }
      }
    }
  }
}
"""

SET_STATUS_MUTATION = """
mutation($projectId: ID!, $itemId: ID!, $fieldId: ID!, $optionId: String!) {
  updateProjectV2ItemFieldValue(input: {
    projectId: $projectId
    itemId: $itemId
    fieldId: $fieldId
    value: { singleSelectOptionId: $optionId }
  }) {
    projectV2Item { id }
  }
}
"""


def rest_path_for_html_url(html_url: str) -> str:
    """Convert an issue or pull request browser URL to its REST API path.

    Args:
        html_url: e.g. https://github.com/owner/repo/pull/7

    Returns:
        str: e.g. /repos/owner/repo/pulls/7

    Raises:
        RemoteApplicationError: If the URL is not an issue or PR URL.
    """
    match = _HTML_URL_RE.fullmatch(html_url)
    if match is None:
        raise RemoteApplicationError(
            f"Cannot derive API path from item URL: {html_url}",
            step=STEP_RESOLVE_ITEM,
        )
    kind = "pulls" if match.group("kind") == "pull" else "issues"
    return (
        f"/repos/{match.group('owner')}/{match.group('repo')}"
        f"/{kind}/{match.group('number')}"
    )


class GitHubProjectsClient:
    """Async GitHub API client for ProjectV2 board synchronization.

    The underlying httpx.AsyncClient is created lazily and shared by all
    requests; it holds only a connection pool, no per-request state.

    Attributes:
        token: GitHub API token (PAT or GitHub App token).
        base_url: Base URL for GitHub API (default: https://api.github.com).
        timeout: Per-request timeout in seconds.

    Example:
        >>> client = GitHubProjectsClient(token="ghp_xxx")
        >>> async with client:
        ...     ref = await client.resolve_item(
        ...         "https://github.com/owner/repo/issues/1"
        ...     )
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitHub client.

        Args:
            token: GitHub API token for authentication.
            base_url: Base URL for GitHub API. The GraphQL endpoint is
                      ``{base_url}/graphql``.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "github-project-sync",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitHubProjectsClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Transport helpers
    # -------------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        step: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            RemoteTransportError: On network errors, timeouts, or a body
                that is not JSON.
            RemoteAuthError: On HTTP 401 or 403.
            RemoteApplicationError: On any other HTTP error status.
        """
        try:
            response = await self.client.request(method=method, url=path, json=json_data)
        except httpx.TimeoutException as exc:
            logger.error(
                "GitHub API request timed out",
                extra={"step": step, "path": path, "method": method},
            )
            raise RemoteTransportError(
                f"Request to {path} timed out: {exc}",
                request_url=f"{self.base_url}{path}",
                step=step,
            ) from exc
        except httpx.RequestError as exc:
            logger.error(
                "GitHub API request failed",
                extra={"step": step, "path": path, "method": method, "error": str(exc)},
            )
            raise RemoteTransportError(
                f"Request to {path} failed: {exc}",
                request_url=f"{self.base_url}{path}",
                step=step,
            ) from exc

        if response.status_code in (401, 403):
            logger.error(
                "GitHub API rejected credentials",
                extra={"step": step, "path": path, "status_code": response.status_code},
            )
            raise RemoteAuthError(
                f"GitHub API authentication failed: {response.status_code}",
                response_status=response.status_code,
                response_body=response.text,
                request_url=str(response.url),
                step=step,
            )

        if response.status_code >= 400:
            error_body = response.text
            logger.error(
                "GitHub API error",
                extra={
                    "step": step,
                    "status_code": response.status_code,
                    "path": path,
                    "method": method,
                    "response_body": error_body[:500],
                },
            )
            raise RemoteApplicationError(
                f"GitHub API error: {response.status_code}",
                response_status=response.status_code,
                response_body=error_body,
                request_url=str(response.url),
                step=step,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise RemoteTransportError(
                f"Unreadable response from {path}: {exc}",
                response_status=response.status_code,
                response_body=response.text[:500],
                request_url=str(response.url),
                step=step,
            ) from exc

    async def _graphql(
        self,
        query: str,
        variables: Dict[str, Any],
        step: str,
    ) -> Dict[str, Any]:
        """Run a GraphQL operation and return its ``data`` object.

        GitHub answers GraphQL errors with HTTP 200 and an ``errors`` list,
        so that list is checked explicitly.
        """
        payload = await self._request(
            "POST",
            "/graphql",
            step,
            json_data={"query": query, "variables": variables},
        )
        if not isinstance(payload, dict):
            raise RemoteApplicationError(
                "GraphQL response is not an object", step=step
            )

        errors = payload.get("errors")
        if errors:
            messages = _graphql_error_messages(errors)
            logger.error(
                "GraphQL errors",
                extra={"step": step, "errors": messages},
            )
            error_cls = (
                RemoteAuthError if _is_auth_error(errors) else RemoteApplicationError
            )
            raise error_cls(
                f"GraphQL errors: {'; '.join(messages)}",
                response_status=200,
                response_body=str(errors)[:500],
                step=step,
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise RemoteApplicationError("GraphQL response has no data", step=step)
        return data

    # -------------------------------------------------------------------------
    # Board operations
    # -------------------------------------------------------------------------

    async def resolve_item(self, html_url: str) -> BoardItemRef:
        """Look up the GraphQL node id of an issue or pull request.

        Args:
            html_url: Browser URL of the issue or pull request.

        Returns:
            BoardItemRef carrying the content node id.

        Raises:
            RemoteAPIError: If the lookup fails or returns no node_id.
        """
        path = rest_path_for_html_url(html_url)
        logger.debug("Resolving node id", extra={"path": path})

        result = await self._request("GET", path, STEP_RESOLVE_ITEM)
        node_id = result.get("node_id") if isinstance(result, dict) else None
        if not isinstance(node_id, str) or not node_id:
            raise RemoteApplicationError(
                f"No node_id in response for {path}",
                step=STEP_RESOLVE_ITEM,
            )
        return BoardItemRef(content_node_id=node_id)

    async def add_to_board(self, board_id: str, content_node_id: str) -> str:
        """Add content to the board, returning the board item id.

        GitHub returns the existing item when the content is already on the
        board, so this is safe to repeat.

        Args:
            board_id: ProjectV2 node id.
            content_node_id: Issue or pull request node id.

        Returns:
            str: The ProjectV2Item id.
        """
        data = await self._graphql(
            ADD_ITEM_MUTATION,
            {"projectId": board_id, "contentId": content_node_id},
            STEP_ADD_TO_BOARD,
        )
        item_id = _dig(data, "addProjectV2ItemById", "item", "id")
        if not isinstance(item_id, str) or not item_id:
            raise RemoteApplicationError(
                "No item id in addProjectV2ItemById response",
                step=STEP_ADD_TO_BOARD,
            )
        logger.info(
            "Item added to project",
            extra={"item_id": item_id, "content_node_id": content_node_id},
        )
        return item_id

    async def fetch_status_schema(self, board_id: str) -> StatusFieldSchema:
        """Read the board's Status field and its options.

        Args:
            board_id: ProjectV2 node id.

        Returns:
            StatusFieldSchema for the field named "Status".

        Raises:
            BoardConfigurationError: If the board has no Status field.
            RemoteAPIError: If the query fails.
        """
        data = await self._graphql(
            STATUS_FIELD_QUERY,
            {"projectId": board_id},
            STEP_FETCH_STATUS_SCHEMA,
        )
        fields = _dig(data, "node", "fields", "nodes")
        if not isinstance(fields, list):
            raise RemoteApplicationError(
                f"No fields found for project {board_id}",
                step=STEP_FETCH_STATUS_SCHEMA,
            )

        for field in fields:
            if not isinstance(field, dict) or field.get("name") != STATUS_FIELD_NAME:
                continue
            field_id = field.get("id")
            if not isinstance(field_id, str) or not field_id:
                break
            options: Dict[str, str] = {}
            for option in field.get("options") or []:
                if not isinstance(option, dict):
                    continue
                name, option_id = option.get("name"), option.get("id")
                if isinstance(name, str) and isinstance(option_id, str):
                    options[name] = option_id
            return StatusFieldSchema(field_id=field_id, option_id_by_name=options)

        raise BoardConfigurationError(
            f"Project {board_id} has no single-select '{STATUS_FIELD_NAME}' field",
            step=STEP_FETCH_STATUS_SCHEMA,
        )

    async def set_status(
        self,
        board_id: str,
        item_id: str,
        field_id: str,
        option_id: str,
    ) -> None:
        """Set a single-select field value on a board item."""
        await self._graphql(
            SET_STATUS_MUTATION,
            {
                "projectId": board_id,
                "itemId": item_id,
                "fieldId": field_id,
                "optionId": option_id,
            },
            STEP_SET_STATUS,
        )
        logger.info(
            "Status updated",
            extra={"item_id": item_id, "field_id": field_id, "option_id": option_id},
        )


def _dig(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a key is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _graphql_error_messages(errors: Any) -> List[str]:
    if not isinstance(errors, list):
        return [str(errors)]
    return [
        str(error.get("message", error)) if isinstance(error, dict) else str(error)
        for error in errors
    ]


def _is_auth_error(errors: Any) -> bool:
    if not isinstance(errors, list):
        return False
    return any(
        isinstance(error, dict) and error.get("type") in _AUTH_ERROR_TYPES
        for error in errors
    )
