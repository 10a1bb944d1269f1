"""Centralized constants for database schema, provider endpoints, and other shared values.

This module provides reusable constants that reduce magic strings and improve maintainability.
"""

from __future__ import annotations


class DatabaseTables:
    """Database table names.

    Centralizing table names prevents typos in SQL queries and makes
    schema changes easier to track.
    """

    TRACK_METADATA = "track_metadata"
    BANNED_TRACKS = "banned_tracks"


class SQLPragmas:
    """SQLite PRAGMA statements for database configuration.

    These pragmas are applied to each connection to ensure consistent behavior.
    """

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"
    PAGE_COUNT = "PRAGMA page_count"
    PAGE_SIZE = "PRAGMA page_size"


class DatabaseURLSchemes:
    """Valid database URL schemes for validation."""

    SQLITE = "sqlite:///"

    # For in-memory testing
    MEMORY = ":memory:"
    MEMORY_SHARED_URI = "file:classroom-jukebox-{name}?mode=memory&cache=shared"


class HTTPHeaders:
    """HTTP header names and common values."""

    AUTHORIZATION = "Authorization"
    RETRY_AFTER = "Retry-After"


class ProviderEndpoints:
    """Spotify Web API paths, relative to the configured API base URL."""

    CURRENTLY_PLAYING = "/me/player/currently-playing"
    QUEUE = "/me/player/queue"
    SKIP_NEXT = "/me/player/next"
    TOKEN = "/api/token"


class Attribution:
    """Requester labels used when a queue entry has no human requester."""

    ANONYMOUS = "Anonymous"
