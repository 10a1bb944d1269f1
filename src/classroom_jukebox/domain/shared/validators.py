"""Shared validators for domain models.

This module provides reusable validators for common validation patterns,
particularly for provider-specific identifiers like Spotify track URIs.
"""

import re

from classroom_jukebox.domain.shared.messages import ErrorMessages

SPOTIFY_TRACK_URI = re.compile(r"^spotify:track:([a-zA-Z0-9]{22})$")


def validate_track_uri(value: str) -> str:
    """Validate a Spotify track URI.

    Only ``spotify:track:<22 base62 chars>`` can be queued by users; the
    provider may still report other item kinds in its own snapshots.

    Args:
        value: The URI to validate.

    Returns:
        The validated URI.

    Raises:
        ValueError: If the URI is empty or malformed.
    """
    if not value or not value.strip():
        raise ValueError(ErrorMessages.EMPTY_TRACK_URI)
    if SPOTIFY_TRACK_URI.match(value) is None:
        raise ValueError(ErrorMessages.INVALID_TRACK_URI.format(uri=value))
    return value
