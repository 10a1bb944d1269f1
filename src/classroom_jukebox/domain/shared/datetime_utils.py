"""Date/time helpers.

Goal: centralize all date/time serialization + parsing.

- Always store and operate on timezone-aware UTC datetimes.
- Provide the string formats used across the app (DB, logs, client payloads).

This module is intentionally dependency-free and safe to use in any layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from ...domain.shared.messages import ErrorMessages


@dataclass(frozen=True, slots=True)
class UtcDateTime:
    """A tiny value-object wrapper around a timezone-aware UTC `datetime`."""

    dt: datetime

    def __post_init__(self) -> None:
        if self.dt.tzinfo is None:
            raise ValueError(ErrorMessages.TIMEZONE_REQUIRED_UTC_DATETIME)
        # Normalize to UTC
        object.__setattr__(self, "dt", self.dt.astimezone(UTC))

    # ---- Constructors ----

    @classmethod
    def now(cls) -> UtcDateTime:
        return cls(datetime.now(UTC))

    @classmethod
    def from_iso(cls, value: str) -> UtcDateTime:
        # Accepts: '...+00:00' or '...Z'
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return cls(datetime.fromisoformat(value))

    @classmethod
    def from_unix_millis(cls, millis: int) -> UtcDateTime:
        return cls(datetime.fromtimestamp(millis / 1000, tz=UTC))

    # ---- Computed fields / formats ----

    @property
    def iso(self) -> str:
        """RFC3339/ISO8601 with microseconds and explicit offset (+00:00).

        The fixed width keeps lexical order equal to chronological order,
        which the metadata table relies on for FIFO lookups.
        """
        return self.dt.isoformat(timespec="microseconds")

    @property
    def iso_z(self) -> str:
        """RFC3339 with trailing 'Z'."""
        return self.iso.replace("+00:00", "Z")

    @property
    def unix_seconds(self) -> int:
        return int(self.dt.timestamp())

    @property
    def unix_millis(self) -> int:
        return int(self.dt.timestamp() * 1000)

    @property
    def human_utc(self) -> str:
        return self.dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def utcnow() -> datetime:
    """Preferred replacement for `datetime.now(UTC)()`.

    Returns a timezone-aware datetime in UTC.
    """
    return datetime.now(UTC)


class MonotonicUtcClock:
    """UTC clock that never hands out the same instant twice.

    ``added_at`` doubles as part of a metadata row's identity, so two rows
    written for the same URI within one clock tick must still differ.
    """

    _STEP = timedelta(microseconds=1)

    def __init__(self) -> None:
        self._last: datetime | None = None

    def now(self) -> datetime:
        current = utcnow()
        if self._last is not None and current <= self._last:
            current = self._last + self._STEP
        self._last = current
        return current
