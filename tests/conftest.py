"""Pytest configuration for all tests."""

import pytest

SYNC_ENV_VARS = (
    "WEBHOOK_SECRET",
    "GITHUB_TOKEN",
    "PROJECT_ID",
    "TRACKED_REPOSITORIES",
    "GITHUB_API_URL",
    "HOST",
    "PORT",
    "SYNC_TIMEOUT_SECONDS",
    "HTTP_TIMEOUT_SECONDS",
    "SET_TODO_ON_ADD",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable SyncSettings reads from the environment."""
    for name in SYNC_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def sample_config_env(clean_env):
    """Set the required configuration variables to test values."""
    clean_env.setenv("WEBHOOK_SECRET", "test-secret")
    clean_env.setenv("GITHUB_TOKEN", "test-token")
    return clean_env
