"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from project_sync.config import (
    DEFAULT_PROJECT_ID,
    DEFAULT_TRACKED_REPOSITORIES,
    SyncSettings,
    get_settings,
)


class TestGetSettings:
    """Tests for get_settings and SyncSettings."""

    def test_defaults(self, sample_config_env):
        settings = get_settings()

        assert settings.webhook_secret == "test-secret"
        assert settings.github_token == "test-token"
        assert settings.project_id == DEFAULT_PROJECT_ID
        assert settings.tracked_repositories == DEFAULT_TRACKED_REPOSITORIES
        assert settings.github_api_url == "https://api.github.com"
        assert settings.port == 3000
        assert settings.sync_timeout_seconds == 10.0
        assert settings.set_todo_on_add is False
        assert settings.log_level == "INFO"

    def test_missing_secret_fails(self, clean_env):
        clean_env.setenv("GITHUB_TOKEN", "test-token")

        with pytest.raises(ValidationError):
            get_settings()

    def test_empty_token_fails(self, clean_env):
        clean_env.setenv("WEBHOOK_SECRET", "test-secret")
        clean_env.setenv("GITHUB_TOKEN", "   ")

        with pytest.raises(ValidationError):
            get_settings()

    def test_tracked_repositories_comma_separated(self, sample_config_env):
        sample_config_env.setenv("TRACKED_REPOSITORIES", "alpha, beta ,,gamma")

        settings = get_settings()

        assert settings.tracked_repositories == frozenset({"alpha", "beta", "gamma"})

    def test_tracked_repositories_json_list(self, sample_config_env):
        sample_config_env.setenv("TRACKED_REPOSITORIES", '["alpha", "Beta"]')

        settings = get_settings()

        assert settings.tracked_repositories == frozenset({"alpha", "Beta"})

    def test_tracked_repositories_invalid_json(self, sample_config_env):
        sample_config_env.setenv("TRACKED_REPOSITORIES", '["alpha",')

        with pytest.raises(ValidationError):
            get_settings()

    def test_env_overrides(self, sample_config_env):
        sample_config_env.setenv("PROJECT_ID", "PVT_other")
        sample_config_env.setenv("PORT", "8080")
        sample_config_env.setenv("SET_TODO_ON_ADD", "true")
        sample_config_env.setenv("LOG_LEVEL", "debug")
        sample_config_env.setenv("GITHUB_API_URL", "https://ghe.example.com/api/v3/")

        settings = get_settings()

        assert settings.project_id == "PVT_other"
        assert settings.port == 8080
        assert settings.set_todo_on_add is True
        assert settings.log_level == "DEBUG"
        assert settings.github_api_url == "https://ghe.example.com/api/v3"

    @pytest.mark.parametrize("port", ["0", "70000"])
    def test_invalid_port(self, sample_config_env, port):
        sample_config_env.setenv("PORT", port)

        with pytest.raises(ValidationError):
            get_settings()

    def test_invalid_timeout(self, sample_config_env):
        sample_config_env.setenv("SYNC_TIMEOUT_SECONDS", "0")

        with pytest.raises(ValidationError):
            get_settings()

    def test_invalid_api_url(self, sample_config_env):
        sample_config_env.setenv("GITHUB_API_URL", "api.github.com")

        with pytest.raises(ValidationError):
            get_settings()

    def test_settings_are_frozen(self, clean_env):
        settings = SyncSettings(webhook_secret="s", github_token="t")

        with pytest.raises(ValidationError):
            settings.project_id = "PVT_changed"
