"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values for every settings group
- Range validation and custom validators (database URL, log level)
- Provider credentials and secret handling
- Loading nested settings from environment variables
- Settings caching and clearing
"""

import pytest
from pydantic import SecretStr, ValidationError

from classroom_jukebox.config.settings import (
    DatabaseSettings,
    ProviderSettings,
    QueueSettings,
    Settings,
    SyncSettings,
    VotingSettings,
    clear_settings_cache,
    get_settings,
)

# =============================================================================
# DatabaseSettings Tests
# =============================================================================


class TestDatabaseSettings:
    """Unit tests for DatabaseSettings configuration."""

    def test_create_with_defaults(self):
        """Should create DatabaseSettings with default values."""
        db = DatabaseSettings()

        assert db.url == "sqlite:///data/jukebox.db"
        assert db.busy_timeout_ms == 5000
        assert db.connection_timeout_s == 10

    def test_invalid_url_scheme_raises_error(self):
        """Should only accept sqlite URLs."""
        with pytest.raises(ValidationError, match="Database URL must start with"):
            DatabaseSettings(url="postgresql://localhost/db")

    def test_busy_timeout_validation_minimum(self):
        with pytest.raises(ValidationError, match="greater than or equal to 1000"):
            DatabaseSettings(busy_timeout_ms=999)

    def test_connection_timeout_validation_maximum(self):
        with pytest.raises(ValidationError, match="less than or equal to 60"):
            DatabaseSettings(connection_timeout_s=61)

    def test_url_alias_database_url(self):
        """Should accept 'database_url' alias for url field."""
        db = DatabaseSettings(database_url="sqlite:///aliased.db")

        assert db.url == "sqlite:///aliased.db"

    def test_immutability(self):
        """Should be immutable (frozen)."""
        db = DatabaseSettings()

        with pytest.raises(ValidationError):
            db.url = "sqlite:///new.db"


# =============================================================================
# ProviderSettings Tests
# =============================================================================


class TestProviderSettings:
    """Unit tests for ProviderSettings configuration."""

    def test_create_with_defaults(self):
        provider = ProviderSettings()

        assert provider.client_id == ""
        assert provider.api_base_url == "https://api.spotify.com/v1"
        assert provider.accounts_url == "https://accounts.spotify.com"
        assert provider.token_refresh_margin_s == 60
        assert provider.has_credentials is False

    def test_has_credentials_requires_all_three(self):
        partial = ProviderSettings(client_id="id", client_secret=SecretStr("secret"))
        full = ProviderSettings(
            client_id="id", client_secret=SecretStr("secret"), refresh_token=SecretStr("rt")
        )

        assert partial.has_credentials is False
        assert full.has_credentials is True

    def test_secrets_are_masked(self):
        """Should not leak secrets through repr."""
        provider = ProviderSettings(client_secret="top-secret", refresh_token="also-secret")

        assert "top-secret" not in repr(provider)
        assert provider.client_secret.get_secret_value() == "top-secret"

    def test_spotify_prefixed_aliases(self):
        provider = ProviderSettings(spotify_client_id="id", spotify_refresh_token="rt")

        assert provider.client_id == "id"
        assert provider.refresh_token.get_secret_value() == "rt"

    def test_base_url_must_be_http(self):
        with pytest.raises(ValidationError):
            ProviderSettings(api_base_url="ftp://example.com")


# =============================================================================
# Sync, Voting and Queue Settings Tests
# =============================================================================


class TestBehaviourSettings:
    """Unit tests for the sync, voting and queue settings groups."""

    def test_sync_defaults(self):
        sync = SyncSettings()

        assert sync.interval_seconds == 5.0
        assert sync.tick_timeout_seconds == 15.0
        assert sync.network_error_log_interval_seconds == 60.0
        assert sync.provider_attribution == "provider"

    def test_sync_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            SyncSettings(interval_seconds=0)

    def test_voting_defaults(self):
        voting = VotingSettings()

        assert voting.expiry_seconds == 45.0
        assert voting.min_online_users == 2

    def test_voting_min_online_users_minimum(self):
        with pytest.raises(ValidationError, match="greater than or equal to 1"):
            VotingSettings(min_online_users=0)

    def test_queue_defaults(self):
        queue = QueueSettings()

        assert queue.max_track_duration_ms == 420_000
        assert queue.allow_explicit is False


# =============================================================================
# Settings (Main Container) Tests
# =============================================================================


class TestSettings:
    """Unit tests for the main Settings container."""

    def test_create_with_all_defaults(self, monkeypatch):
        """Should create Settings with all default values."""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.delenv("DEBUG", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.environment == "development"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert isinstance(settings.database, DatabaseSettings)
        assert isinstance(settings.provider, ProviderSettings)
        assert isinstance(settings.voting, VotingSettings)

    def test_load_nested_settings_from_env(self, monkeypatch):
        """Should load nested settings using the double-underscore delimiter."""
        monkeypatch.setenv("DATABASE__URL", "sqlite:///from-env.db")
        monkeypatch.setenv("PROVIDER__CLIENT_ID", "env-client")
        monkeypatch.setenv("PROVIDER__REFRESH_TOKEN", "env-refresh")
        monkeypatch.setenv("SYNC__INTERVAL_SECONDS", "2.5")
        monkeypatch.setenv("VOTING__MIN_ONLINE_USERS", "3")
        monkeypatch.setenv("QUEUE__ALLOW_EXPLICIT", "true")

        settings = Settings(_env_file=None)

        assert settings.database.url == "sqlite:///from-env.db"
        assert settings.provider.client_id == "env-client"
        assert settings.provider.refresh_token.get_secret_value() == "env-refresh"
        assert settings.sync.interval_seconds == 2.5
        assert settings.voting.min_online_users == 3
        assert settings.queue.allow_explicit is True

    def test_environment_validation(self, monkeypatch):
        """Should validate environment is one of allowed literal values."""
        monkeypatch.setenv("ENVIRONMENT", "invalid")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_log_level_validation_case_insensitive(self, monkeypatch):
        """Should uppercase the log level."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"

    def test_log_level_validation_invalid(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INVALID")

        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(_env_file=None)

    def test_nested_validation_propagates(self, monkeypatch):
        """Should raise when a nested group is invalid."""
        monkeypatch.setenv("DATABASE__URL", "invalid://url")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


# =============================================================================
# Settings Caching Tests
# =============================================================================


class TestSettingsCaching:
    """Unit tests for get_settings and clear_settings_cache."""

    def test_get_settings_is_cached(self):
        clear_settings_cache()
        try:
            assert get_settings() is get_settings()
        finally:
            clear_settings_cache()

    def test_clear_settings_cache(self, monkeypatch):
        """Should pick up new environment values after clearing."""
        clear_settings_cache()
        try:
            monkeypatch.setenv("LOG_LEVEL", "WARNING")
            first = get_settings()
            monkeypatch.setenv("LOG_LEVEL", "ERROR")
            clear_settings_cache()

            second = get_settings()

            assert first is not second
            assert second.log_level == "ERROR"
        finally:
            clear_settings_cache()
