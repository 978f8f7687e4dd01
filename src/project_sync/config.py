"""Service configuration using pydantic-settings.

This module defines the SyncSettings class that reads configuration from
environment variables. Variable names carry no prefix so existing
deployments (WEBHOOK_SECRET, GITHUB_TOKEN, PROJECT_ID, PORT) keep working.

Settings are read once at startup and frozen; request handlers receive
them through the application state rather than a module global.
"""

import json
from typing import Annotated, Any, FrozenSet

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_PROJECT_ID = "PVT_kwHOAAoTtc4BO2oX"
DEFAULT_TRACKED_REPOSITORIES = frozenset({"pikarama", "brick-directory"})


class SyncSettings(BaseSettings):
    """Project sync configuration from environment variables.

    Required fields (must be set via environment variables):
    - webhook_secret: Shared secret for validating GitHub webhook signatures
    - github_token: GitHub token with access to the repositories and project
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        frozen=True,
    )

    # -------------------------------------------------------------------------
    # GitHub Configuration
    # -------------------------------------------------------------------------
    # Shared secret configured on the webhook
    webhook_secret: str

    # Token used for REST lookups and GraphQL mutations
    github_token: str

    # Node id of the ProjectV2 board
    project_id: str = DEFAULT_PROJECT_ID

    # Short repository names (without owner) whose events are synced
    tracked_repositories: Annotated[FrozenSet[str], NoDecode] = DEFAULT_TRACKED_REPOSITORIES

    # Base URL for GitHub API (supports GitHub Enterprise)
    github_api_url: str = "https://api.github.com"

    # -------------------------------------------------------------------------
    # Sync Behaviour
    # -------------------------------------------------------------------------
    # Upper bound on the whole resolve/add/status sequence
    sync_timeout_seconds: float = 10.0

    # Timeout for a single GitHub request
    http_timeout_seconds: float = 5.0

    # Explicitly set Status=Todo after adding instead of relying on the
    # board's default column
    set_todo_on_add: bool = False

    # -------------------------------------------------------------------------
    # Server Configuration
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"

    port: int = 3000

    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------
    @field_validator("webhook_secret")
    @classmethod
    def validate_webhook_secret(cls, v: str) -> str:
        """Validate that webhook secret is not empty."""
        if not v or not v.strip():
            raise ValueError("webhook_secret cannot be empty")
        return v

    @field_validator("github_token")
    @classmethod
    def validate_github_token(cls, v: str) -> str:
        """Validate that GitHub token is not empty."""
        if not v or not v.strip():
            raise ValueError("github_token cannot be empty")
        return v

    @field_validator("project_id")
    @classmethod
    def validate_project_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("project_id cannot be empty")
        return v.strip()

    @field_validator("tracked_repositories", mode="before")
    @classmethod
    def split_tracked_repositories(cls, v: Any) -> Any:
        """Accept a comma separated string or a JSON list.

        Names are matched case-sensitively, so only surrounding whitespace
        is removed.
        """
        if isinstance(v, str):
            stripped = v.strip()
            if stripped.startswith("["):
                try:
                    v = json.loads(stripped)
                except ValueError as exc:
                    raise ValueError(
                        f"tracked_repositories is not a valid JSON list: {exc}"
                    ) from exc
            else:
                v = stripped.split(",")
        if isinstance(v, (list, tuple, set, frozenset)):
            names = [str(name).strip() for name in v]
            return frozenset(name for name in names if name)
        return v

    @field_validator("github_api_url")
    @classmethod
    def validate_github_api_url(cls, v: str) -> str:
        """Validate that the API URL is a valid URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("github_api_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("sync_timeout_seconds", "http_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate that timeouts are positive."""
        if v <= 0:
            raise ValueError("timeouts must be greater than 0")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate that port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("port must be between 1 and 65535")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unknown log_level: {v}")
        return level


def get_settings() -> SyncSettings:
    """Create and return a SyncSettings instance.

    Returns:
        SyncSettings: Configured settings instance.

    Raises:
        pydantic.ValidationError: If required fields are missing or invalid.
    """
    return SyncSettings()
