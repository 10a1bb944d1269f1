"""Queue Application Service - the mutation façade over provider and metadata."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from ...domain.queue.entities import MetadataEntry, QueueItem, QueueState, Track
from ...domain.queue.services import QueueDomainService
from ...domain.shared.datetime_utils import MonotonicUtcClock
from ...domain.shared.events import QueueAdd, Skip, SkipBlocked
from ...domain.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    InvalidOperationError,
    ValidationError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.validators import validate_track_uri
from .queue_models import SkipResult

if TYPE_CHECKING:
    from ...config.settings import QueueSettings
    from ...domain.queue.repository import MetadataRepository
    from ...domain.voting.repository import BannedTrackRepository
    from ..interfaces.provider_client import ProviderClient
    from .broadcast_hub import BroadcastHub
    from .queue_reconciler import QueueReconciler

logger = logging.getLogger(__name__)


class QueueService:
    """Adds tracks, skips, and shields on behalf of classroom users.

    Payment and identity are checked by the caller; this service only trusts
    the requester name and anonymity flag it is handed.
    """

    def __init__(
        self,
        *,
        provider: ProviderClient,
        metadata_repository: MetadataRepository,
        ban_repository: BannedTrackRepository,
        reconciler: QueueReconciler,
        hub: BroadcastHub,
        settings: QueueSettings,
        clock: MonotonicUtcClock | None = None,
    ) -> None:
        self._provider = provider
        self._metadata_repo = metadata_repository
        self._ban_repo = ban_repository
        self._reconciler = reconciler
        self._hub = hub
        self._settings = settings
        self._clock = clock or MonotonicUtcClock()

    async def add_to_queue(
        self, track: Track, requester: str, anonymous: bool = False
    ) -> QueueItem:
        """Queue a track at the provider and record who asked for it.

        Args:
            track: The track to queue.
            requester: Display name of the paying user.
            anonymous: Hide the requester from other clients.

        Returns:
            The new queue item.

        Raises:
            ValidationError: If the URI is not a Spotify track URI.
            BusinessRuleViolationError: If the track is banned, explicit or too long.
            ProviderError: If the provider rejected the enqueue. The metadata
                row written for it has been removed again.
        """
        try:
            validate_track_uri(track.uri)
        except ValueError as e:
            raise ValidationError(str(e), field="uri") from e

        if await self._ban_repo.is_banned(track.uri):
            raise BusinessRuleViolationError(
                "track_banned", ErrorMessages.TRACK_BANNED.format(name=track.name)
            )
        QueueDomainService.validate_for_enqueue(
            track,
            max_duration_ms=self._settings.max_track_duration_ms,
            allow_explicit=self._settings.allow_explicit,
        )

        entry = MetadataEntry(
            track_uri=track.uri,
            added_at=self._clock.now(),
            added_by=requester,
            is_anonymous=anonymous,
        )
        await self._metadata_repo.insert(entry)

        try:
            await self._provider.enqueue(track.uri)
        except Exception as e:
            logger.warning(LogTemplates.QUEUE_ENQUEUE_FAILED, track.uri, e)
            await self._remove_orphan(entry)
            raise

        logger.info(LogTemplates.QUEUE_ENQUEUED, track.name, entry.display_requester)

        item = QueueItem(track=track, metadata=entry)
        state = await self._reconciler.reconcile()
        await self._hub.publish(QueueAdd.from_item(item, state or self._hub.last_state))
        return item

    async def _remove_orphan(self, entry: MetadataEntry) -> None:
        try:
            await self._metadata_repo.delete(entry.track_uri, entry.added_at)
        except Exception as cleanup_error:
            logger.error(
                LogTemplates.QUEUE_COMPENSATION_FAILED,
                entry.track_uri,
                entry.added_at.isoformat(),
                cleanup_error,
            )

    async def skip_current_track(self, track_uri: str) -> SkipResult:
        """Skip the playing track unless its entry still has shields.

        Each blocked attempt consumes one shield.

        Args:
            track_uri: The track the user saw playing when they paid to skip.

        Raises:
            InvalidOperationError: If nothing is playing.
            BusinessRuleViolationError: If ``track_uri`` is no longer playing.
        """
        state = await self._reconciler.reconcile() or self._hub.last_state
        current = state.current if state is not None else None
        if current is None:
            raise InvalidOperationError("skip", "idle", ErrorMessages.NOTHING_PLAYING)
        if current.track.uri != track_uri:
            raise BusinessRuleViolationError("track_not_current", ErrorMessages.TRACK_NOT_CURRENT)

        entry = current.metadata
        if entry.is_shielded:
            updated = await self._metadata_repo.decrement_shield(entry.track_uri, entry.added_at)
            remaining = updated.shield_count if updated is not None else 0
            logger.info(LogTemplates.QUEUE_SKIP_BLOCKED, current.track.name, remaining)
            blocked_item = QueueItem(
                track=current.track, metadata=entry.with_shield_count(remaining)
            )
            await self._hub.publish(
                SkipBlocked(track=blocked_item.to_payload(), shields_remaining=remaining)
            )
            return SkipResult(
                skipped=False, track=current.track, shields_remaining=remaining, state=state
            )

        await self._provider.skip_to_next()
        logger.info(LogTemplates.QUEUE_SKIPPED, current.track.name)

        new_state = await self._reconciler.reconcile()
        await self._hub.publish(Skip.from_state(new_state or self._hub.last_state))
        return SkipResult(skipped=True, track=current.track, state=new_state)

    async def add_shield(self, track_uri: str, added_at: datetime | None = None) -> MetadataEntry:
        """Protect one queued instance of a track against one skip.

        Args:
            track_uri: URI of the queued track.
            added_at: Which instance; the oldest playing or queued one when omitted.

        Raises:
            EntityNotFoundError: If no matching entry exists.
        """
        if added_at is None:
            added_at = self._oldest_live_instance(track_uri)
        updated = await self._metadata_repo.increment_shield(track_uri, added_at)
        if updated is None:
            raise EntityNotFoundError(
                "MetadataEntry", track_uri, ErrorMessages.METADATA_NOT_FOUND.format(uri=track_uri)
            )
        logger.info(LogTemplates.QUEUE_SHIELD_ADDED, track_uri, updated.shield_count)
        await self._reconciler.reconcile()
        return updated

    def _oldest_live_instance(self, track_uri: str) -> datetime | None:
        state = self._hub.last_state
        if state is None:
            return None
        items = [state.current, *state.queue] if state.current else list(state.queue)
        return min(
            (item.metadata.added_at for item in items if item.track.uri == track_uri),
            default=None,
        )

    def get_current_state(self) -> QueueState | None:
        """Return the last broadcast state without touching the provider."""
        return self._hub.last_state
