"""
Queue Domain Services

Matching of locally owned metadata onto the provider's duplicate-blind
queue snapshot, plus the queue admission rules.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterable

from classroom_jukebox.domain.queue.entities import MetadataEntry, Track
from classroom_jukebox.domain.shared.exceptions import BusinessRuleViolationError
from classroom_jukebox.domain.shared.messages import ErrorMessages


class MetadataMatcher:
    """Per-URI FIFO of unclaimed metadata rows for a single tick.

    Rows are appended oldest first and popped from the front, so when a URI
    appears N times the N oldest rows land on the N positions in the order
    the provider lists them. A popped row cannot be handed out again.
    """

    def __init__(self, entries: Iterable[MetadataEntry] = ()) -> None:
        self._pending: dict[str, deque[MetadataEntry]] = defaultdict(deque)
        for entry in sorted(entries, key=lambda e: e.added_at):
            self._pending[entry.track_uri].append(entry)

    def claim(self, track_uri: str) -> MetadataEntry | None:
        """Take the oldest unused row for ``track_uri``, if any."""
        pending = self._pending.get(track_uri)
        if not pending:
            return None
        return pending.popleft()


class QueueDomainService:
    """Domain service for queue-related business rules."""

    @classmethod
    def should_retire(
        cls,
        played_uri: str | None,
        current_uri: str | None,
        queue_uris: Iterable[str],
    ) -> bool:
        """Decide whether the rows of already played instances of a URI can go.

        Only once no instance of the URI is left playing or queued: pending
        duplicates keep the played rows around (held back from matching).

        Args:
            played_uri: URI of a track that finished playing.
            current_uri: Current URI seen by this tick.
            queue_uris: URIs of this tick's queue snapshot.

        Returns:
            True if the played rows of ``played_uri`` should be retired.
        """
        if played_uri is None or played_uri == current_uri:
            return False
        return played_uri not in set(queue_uris)

    @classmethod
    def validate_for_enqueue(
        cls, track: Track, *, max_duration_ms: int, allow_explicit: bool
    ) -> None:
        """Check the classroom admission rules for a requested track.

        Raises:
            BusinessRuleViolationError: If the track is explicit or too long.
        """
        if track.explicit and not allow_explicit:
            raise BusinessRuleViolationError("explicit_track", ErrorMessages.EXPLICIT_TRACK)
        if track.duration_ms > max_duration_ms:
            raise BusinessRuleViolationError(
                "track_too_long",
                ErrorMessages.TRACK_TOO_LONG.format(minutes=max_duration_ms // 60_000),
            )
