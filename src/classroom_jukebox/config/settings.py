"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import BusyTimeoutMs, ConnectionTimeoutS


class DatabaseSettings(BaseModel):
    """Database configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/jukebox.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: BusyTimeoutMs = Field(
        default=5000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: ConnectionTimeoutS = Field(
        default=10,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://"):
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class ProviderSettings(BaseModel):
    """Streaming provider (Spotify Web API) configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    client_id: str = Field(
        default="", validation_alias=AliasChoices("client_id", "spotify_client_id")
    )
    client_secret: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("client_secret", "spotify_client_secret"),
    )
    refresh_token: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("refresh_token", "spotify_refresh_token"),
    )
    api_base_url: str = Field(default="https://api.spotify.com/v1", pattern=r"^https?://")
    accounts_url: str = Field(default="https://accounts.spotify.com", pattern=r"^https?://")
    request_timeout_s: float = Field(default=10.0, gt=0.0, le=120.0)
    token_refresh_margin_s: int = Field(default=60, ge=0, le=600)

    @property
    def has_credentials(self) -> bool:
        return bool(
            self.client_id
            and self.client_secret.get_secret_value()
            and self.refresh_token.get_secret_value()
        )


class SyncSettings(BaseModel):
    """Queue synchronization configuration."""

    model_config = SettingsConfigDict(frozen=True)

    interval_seconds: float = Field(default=5.0, gt=0.0)
    tick_timeout_seconds: float = Field(default=15.0, gt=0.0)
    network_error_log_interval_seconds: float = Field(default=60.0, ge=0.0)
    provider_attribution: str = Field(default="provider", min_length=1, max_length=100)


class VotingSettings(BaseModel):
    """Ban vote configuration."""

    model_config = SettingsConfigDict(frozen=True)

    expiry_seconds: float = Field(default=45.0, gt=0.0, le=600.0)
    min_online_users: int = Field(default=2, ge=1)


class QueueSettings(BaseModel):
    """Queue admission rules."""

    model_config = SettingsConfigDict(frozen=True)

    max_track_duration_ms: int = Field(default=420_000, gt=0)
    allow_explicit: bool = False


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - PROVIDER__CLIENT_ID, PROVIDER__REFRESH_TOKEN, etc. (nested with prefix)
    - DATABASE__URL (sqlite:/// URL)
    - SYNC__INTERVAL_SECONDS, VOTING__EXPIRY_SECONDS, QUEUE__ALLOW_EXPLICIT
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    voting: VotingSettings = Field(default_factory=VotingSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
