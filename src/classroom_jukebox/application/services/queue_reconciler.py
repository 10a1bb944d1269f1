"""Reconciliation of the provider's queue snapshot with locally stored metadata.

The provider owns the real queue but only exposes a polled, duplicate-blind
snapshot. Each tick re-reads both sources, pairs every position with one
metadata row (oldest first per URI), bootstraps rows for positions nobody
enqueued through us, and broadcasts the merged view as a single unit. The row
of an instance that finished playing is held back from matching and deleted
once its URI is neither playing nor queued. A tick writes all of its bootstrap
and retirement changes in one transaction, after every read has succeeded.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ...domain.queue.entities import CurrentTrackView, MetadataEntry, QueueItem, QueueState
from ...domain.queue.services import MetadataMatcher, QueueDomainService
from ...domain.shared.datetime_utils import MonotonicUtcClock, utcnow
from ...domain.shared.events import CurrentTrackChanged
from ...domain.shared.messages import LogTemplates
from ..interfaces.provider_client import ProviderError, ProviderUnavailableError

if TYPE_CHECKING:
    from ...config.settings import SyncSettings
    from ...domain.queue.repository import MetadataRepository
    from ..interfaces.provider_client import ProviderClient
    from .broadcast_hub import BroadcastHub

logger = logging.getLogger(__name__)


class QueueReconciler:
    """Single-flight reconciliation of provider state and metadata rows.

    Ticks never overlap. A caller that arrives while a tick is running waits
    for one follow-up tick; everyone who arrived during the same running tick
    shares that follow-up and its result.
    """

    def __init__(
        self,
        *,
        provider: ProviderClient,
        metadata_repository: MetadataRepository,
        hub: BroadcastHub,
        settings: SyncSettings,
        clock: MonotonicUtcClock | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._metadata_repo = metadata_repository
        self._hub = hub
        self._settings = settings
        self._clock = clock or MonotonicUtcClock()
        self._monotonic = monotonic

        self._has_ticked = False
        self._previous_uri: str | None = None
        self._previous_entry: MetadataEntry | None = None
        self._played: dict[str, list[MetadataEntry]] = {}
        self._lock = asyncio.Lock()
        self._requested = 0
        self._completed = 0
        self._last_result: QueueState | None = None
        self._last_network_error_at: float | None = None

    @property
    def previous_uri(self) -> str | None:
        """Current-track URI seen by the last successful tick."""
        return self._previous_uri

    async def reconcile(self) -> QueueState | None:
        """Run (or join) a reconciliation tick.

        Returns:
            The merged state of the tick that covered this call, or None if
            that tick failed. Failures are logged, never raised.
        """
        self._requested += 1
        ticket = self._requested

        async with self._lock:
            if self._completed >= ticket:
                logger.debug(LogTemplates.RECONCILE_COALESCED)
                return self._last_result

            covers = self._requested
            result = await self._run_tick()
            self._completed = covers
            self._last_result = result
            return result

    async def _run_tick(self) -> QueueState | None:
        timeout = self._settings.tick_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                return await self._tick()
        except TimeoutError:
            logger.warning(LogTemplates.RECONCILE_TIMEOUT, timeout)
        except ProviderUnavailableError as e:
            self._log_network_error(e)
        except ProviderError as e:
            logger.warning(LogTemplates.RECONCILE_PROVIDER_ERROR, e)
        except Exception as e:
            logger.exception(LogTemplates.RECONCILE_FAILED, e)
        return None

    def _log_network_error(self, error: ProviderUnavailableError) -> None:
        now = self._monotonic()
        last = self._last_network_error_at
        if last is None or now - last >= self._settings.network_error_log_interval_seconds:
            self._last_network_error_at = now
            logger.warning(LogTemplates.RECONCILE_NETWORK_ERROR, error)
        else:
            logger.debug(LogTemplates.RECONCILE_NETWORK_ERROR, error)

    async def _tick(self) -> QueueState:
        now_playing, snapshot = await asyncio.gather(
            self._provider.get_current_track(),
            self._provider.get_queue_snapshot(),
        )

        uris = [track.uri for track in snapshot]
        current_uri = None
        if now_playing is not None:
            current_uri = now_playing.track.uri
            uris.insert(0, current_uri)

        # Rows of instances that already played stay out of matching until retired.
        played = {uri: list(entries) for uri, entries in self._played.items()}
        advanced = self._has_ticked and self._previous_uri != current_uri
        if advanced:
            logger.info(LogTemplates.RECONCILE_TRACK_ADVANCED, self._previous_uri, current_uri)
            if self._previous_entry is not None:
                played.setdefault(self._previous_entry.track_uri, []).append(
                    self._previous_entry
                )
        played_keys = {entry.key for entries in played.values() for entry in entries}
        rows = await self._metadata_repo.find_by_uris(uris)
        matcher = MetadataMatcher(row for row in rows if row.key not in played_keys)

        bootstrapped: list[MetadataEntry] = []
        current: CurrentTrackView | None = None
        if now_playing is not None:
            current = CurrentTrackView(
                track=now_playing.track,
                metadata=self._claim_or_bootstrap(matcher, now_playing.track.uri, bootstrapped),
                is_playing=now_playing.is_playing,
                progress_ms=now_playing.progress_ms,
            )

        queue = tuple(
            QueueItem(
                track=track, metadata=self._claim_or_bootstrap(matcher, track.uri, bootstrapped)
            )
            for track in snapshot
        )
        state = QueueState(current=current, queue=queue, last_update=utcnow())

        retired = self._collect_retired(played, state)

        if bootstrapped or retired:
            await self._metadata_repo.apply_changes(insert=bootstrapped, delete=retired)
        for entry in bootstrapped:
            logger.info(LogTemplates.RECONCILE_BOOTSTRAPPED, entry.track_uri)
        for entry in retired:
            logger.info(LogTemplates.RECONCILE_RETIRED, entry.track_uri, entry.added_by)

        self._played = played
        self._previous_entry = current.metadata if current is not None else None
        self._previous_uri = state.current_uri
        self._has_ticked = True

        logger.debug(LogTemplates.RECONCILE_TICK, state.current_uri, len(state.queue))
        await self._hub.publish_state(state)
        if advanced:
            await self._hub.publish(CurrentTrackChanged(track=state.current_payload()))
        return state

    def _claim_or_bootstrap(
        self, matcher: MetadataMatcher, track_uri: str, bootstrapped: list[MetadataEntry]
    ) -> MetadataEntry:
        entry = matcher.claim(track_uri)
        if entry is not None:
            return entry

        entry = MetadataEntry(
            track_uri=track_uri,
            added_at=self._clock.now(),
            added_by=self._settings.provider_attribution,
        )
        bootstrapped.append(entry)
        return entry

    @staticmethod
    def _collect_retired(
        played: dict[str, list[MetadataEntry]], state: QueueState
    ) -> list[MetadataEntry]:
        """Pop the played rows of every URI that is neither playing nor queued."""
        queue_uris = state.queue_uris
        retired: list[MetadataEntry] = []
        for uri in list(played):
            if QueueDomainService.should_retire(uri, state.current_uri, queue_uris):
                retired.extend(played.pop(uri))
        return retired
