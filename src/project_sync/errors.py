"""Error taxonomy for the project sync service.

Every failure a webhook request can hit is a subclass of ProjectSyncError.
Each class carries the HTTP status the boundary answers with and a short
``kind`` string used as the log marker and the metrics label:

- SignatureVerificationError: bad or missing signature (401)
- PayloadParseError: malformed JSON or missing fields (400)
- BoardConfigurationError: board lacks the expected Status field/option (502)
- RemoteAPIError and subclasses: GitHub API call failed (502)
- SyncTimeoutError: orchestration exceeded its deadline (504)
"""

from typing import Optional


class ProjectSyncError(Exception):
    """Base class for all request-level failures.

    Attributes:
        message: Human-readable error description.
        step: The orchestration step that failed, when known.
    """

    status_code: int = 500
    kind: str = "internal_error"

    def __init__(self, message: str, step: Optional[str] = None):
        self.message = message
        self.step = step
        super().__init__(message)


class SignatureVerificationError(ProjectSyncError):
    """Raised when the X-Hub-Signature-256 header does not match the body."""

    status_code = 401
    kind = "authentication_failure"


class PayloadParseError(ProjectSyncError):
    """Raised when a webhook payload is not valid JSON or lacks a field."""

    status_code = 400
    kind = "parse_failure"


class BoardConfigurationError(ProjectSyncError):
    """Raised when the board schema does not have the expected Status option.

    This is a deployment problem (column renamed or removed), not a problem
    with the inbound request.
    """

    status_code = 502
    kind = "board_configuration_error"


class SyncTimeoutError(ProjectSyncError):
    """Raised when the orchestration sequence exceeds its deadline."""

    status_code = 504
    kind = "timeout"


class RemoteAPIError(ProjectSyncError):
    """Raised when a GitHub API request fails.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code returned to the webhook sender.
        response_status: HTTP status code from the GitHub response, if any.
        response_body: Response body from GitHub API, if any.
        request_url: The URL that was requested.
    """

    status_code = 502
    kind = "remote_failure"

    def __init__(
        self,
        message: str,
        response_status: Optional[int] = None,
        response_body: Optional[str] = None,
        request_url: Optional[str] = None,
        step: Optional[str] = None,
    ):
        super().__init__(message, step=step)
        self.response_status = response_status
        self.response_body = response_body
        self.request_url = request_url


class RemoteTransportError(RemoteAPIError):
    """Network failure, timeout, or unreadable response from GitHub."""

    kind = "remote_transport_failure"


class RemoteAuthError(RemoteAPIError):
    """GitHub rejected the token (expired, revoked, or missing scopes)."""

    kind = "remote_auth_failure"


class RemoteApplicationError(RemoteAPIError):
    """GitHub answered, but with an error status or GraphQL errors."""

    kind = "remote_application_failure"
