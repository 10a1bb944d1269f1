"""Core domain entities for the queue bounded context."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from classroom_jukebox.domain.shared.constants import Attribution
from classroom_jukebox.domain.shared.datetime_utils import UtcDateTime, utcnow
from classroom_jukebox.domain.shared.types import (
    DurationMs,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeInt,
    ShieldCount,
    TrackNameStr,
    TrackUriStr,
    UtcDatetimeField,
)


class Track(BaseModel):
    """Immutable value object for a track as reported by the provider.

    The same URI may show up several times in one queue snapshot; the provider
    treats those as separate positions, not separate identities.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    uri: TrackUriStr
    name: TrackNameStr
    artists: tuple[NonEmptyStr, ...] = ()
    duration_ms: DurationMs = 0
    image_url: HttpUrlStr | None = None
    explicit: bool = False

    @property
    def artist(self) -> str:
        return ", ".join(self.artists)

    def to_payload(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "artist": self.artist,
            "duration": self.duration_ms,
            "image": self.image_url,
            "explicit": self.explicit,
        }


class MetadataEntry(BaseModel):
    """Locally owned attributes of one enqueue event.

    ``(track_uri, added_at)`` is the identity of the row: the provider exposes
    no per-enqueue handle, so rows sharing a URI are told apart only by the
    FIFO order of ``added_at``.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    track_uri: TrackUriStr
    added_at: UtcDatetimeField = Field(default_factory=utcnow)
    added_by: NonEmptyStr
    is_anonymous: bool = False
    shield_count: ShieldCount = 0

    @property
    def key(self) -> tuple[str, datetime]:
        return (self.track_uri, self.added_at)

    @property
    def display_requester(self) -> str:
        return Attribution.ANONYMOUS if self.is_anonymous else self.added_by

    @property
    def is_shielded(self) -> bool:
        return self.shield_count > 0

    def with_shield_count(self, shield_count: int) -> MetadataEntry:
        return self.model_copy(update={"shield_count": shield_count})

    def to_payload(self) -> dict[str, Any]:
        return {
            "addedBy": self.display_requester,
            "addedAt": UtcDateTime(self.added_at).unix_millis,
            "isAnonymous": self.is_anonymous,
            "shieldCount": self.shield_count,
        }


class QueueItem(BaseModel):
    """One position of the merged queue view."""

    model_config = ConfigDict(frozen=True)

    track: Track
    metadata: MetadataEntry

    def to_payload(self) -> dict[str, Any]:
        return {**self.track.to_payload(), **self.metadata.to_payload()}


class NowPlaying(BaseModel):
    """Provider snapshot of the playing item plus live playback position."""

    model_config = ConfigDict(frozen=True)

    track: Track
    is_playing: bool = False
    progress_ms: NonNegativeInt = 0


class CurrentTrackView(BaseModel):
    """The now-playing track merged with the oldest unconsumed entry for its URI."""

    model_config = ConfigDict(frozen=True)

    track: Track
    metadata: MetadataEntry
    is_playing: bool = False
    progress_ms: NonNegativeInt = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            **self.track.to_payload(),
            **self.metadata.to_payload(),
            "isPlaying": self.is_playing,
            "progress": self.progress_ms,
        }


class QueueState(BaseModel):
    """Result of one reconciliation tick.

    Queue and current track always come from the same tick; the pair is
    broadcast and cached as a unit.
    """

    model_config = ConfigDict(frozen=True)

    current: CurrentTrackView | None = None
    queue: tuple[QueueItem, ...] = ()
    last_update: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def current_uri(self) -> str | None:
        return self.current.track.uri if self.current else None

    @property
    def queue_uris(self) -> list[str]:
        return [item.track.uri for item in self.queue]

    @property
    def last_update_ms(self) -> int:
        return UtcDateTime(self.last_update).unix_millis

    @property
    def is_playing(self) -> bool:
        return self.current.is_playing if self.current else False

    @property
    def progress_ms(self) -> int:
        return self.current.progress_ms if self.current else 0

    def current_payload(self) -> dict[str, Any] | None:
        return self.current.to_payload() if self.current else None

    def queue_payload(self) -> list[dict[str, Any]]:
        return [item.to_payload() for item in self.queue]
