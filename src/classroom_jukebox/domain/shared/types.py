"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across bounded contexts is defined here once,
so models can simply annotate their fields::

    from classroom_jukebox.domain.shared.types import NonEmptyStr, TrackUriStr

    class MyModel(BaseModel):
        uri: TrackUriStr
        name: NonEmptyStr
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator, Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

NonNegativeFloat = Annotated[float, Field(ge=0.0)]
"""Float >= 0.0."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackUriStr = Annotated[str, Field(min_length=1, max_length=200)]
"""Provider URI of a playable item (``spotify:track:...``, ``spotify:episode:...``)."""

TrackNameStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track name: 1-500 characters."""

UserIdStr = Annotated[str, Field(min_length=1, max_length=100)]
"""Identifier of a classroom user as supplied by the session collaborator."""

HttpUrlStr = Annotated[str, Field(pattern=r"^https?://")]
"""String that starts with http:// or https://."""


# ── Domain-specific numeric constraints ─────────────────────────────

DurationMs = Annotated[int, Field(ge=0, le=86_400_000)]
"""Track duration in milliseconds: 0 … 24 hours."""

ShieldCount = Annotated[int, Field(ge=0)]
"""Number of purchased skip shields left on a queue entry."""


# ── Settings-specific constraints ──────────────────────────────────

BusyTimeoutMs = Annotated[int, Field(ge=1000, le=30000)]
"""Database busy timeout in milliseconds: 1 000 … 30 000."""

ConnectionTimeoutS = Annotated[int, Field(ge=1, le=60)]
"""Database connection timeout in seconds: 1 … 60."""


# ── Datetime constraints ────────────────────────────────────────────

def _ensure_utc(v: datetime) -> datetime:
    """Validate that a datetime is timezone-aware and normalise to UTC."""
    if v.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return v.astimezone(UTC)


UtcDatetimeField = Annotated[datetime, BeforeValidator(_ensure_utc)]
"""Timezone-aware datetime, normalised to UTC on input."""
