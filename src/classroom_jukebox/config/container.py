"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the database, provider client, and the queue
and voting services. Components are created on demand and cached, so every
piece of mutable state (the previous-track URI, the active vote slot, the
connected clients) lives on exactly one instance per container.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.provider_client import ProviderClient
    from ..application.services.ban_vote_service import BanVoteService
    from ..application.services.broadcast_hub import BroadcastHub
    from ..application.services.queue_reconciler import QueueReconciler
    from ..application.services.queue_service import QueueService
    from ..application.services.sync_job import SyncJob
    from ..application.services.vote_manager import VoteManager
    from ..domain.queue.repository import MetadataRepository
    from ..domain.shared.datetime_utils import MonotonicUtcClock
    from ..domain.voting.repository import BannedTrackRepository
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings

    # Persistence layer
    _database: Database | None = None
    _metadata_repository: MetadataRepository | None = None
    _ban_repository: BannedTrackRepository | None = None

    # Infrastructure adapters
    _provider_client: ProviderClient | None = None

    # Application services
    _clock: MonotonicUtcClock | None = None
    _broadcast_hub: BroadcastHub | None = None
    _queue_reconciler: QueueReconciler | None = None
    _queue_service: QueueService | None = None
    _vote_manager: VoteManager | None = None
    _ban_vote_service: BanVoteService | None = None

    # Background jobs
    _sync_job: SyncJob | None = None

    def set_provider_client(self, provider_client: ProviderClient) -> None:
        """Use a specific provider client instead of the Spotify one."""
        self._provider_client = provider_client

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def metadata_repository(self) -> MetadataRepository:
        """Get the queue metadata repository."""
        if self._metadata_repository is None:
            from ..infrastructure.persistence.repositories.metadata_repository import (
                SQLiteMetadataRepository,
            )

            self._metadata_repository = SQLiteMetadataRepository(self.database)
        return self._metadata_repository

    @property
    def ban_repository(self) -> BannedTrackRepository:
        """Get the banned track repository."""
        if self._ban_repository is None:
            from ..infrastructure.persistence.repositories.ban_repository import (
                SQLiteBannedTrackRepository,
            )

            self._ban_repository = SQLiteBannedTrackRepository(self.database)
        return self._ban_repository

    # === Infrastructure Adapters ===

    @property
    def provider_client(self) -> ProviderClient:
        """Get the streaming provider client."""
        if self._provider_client is None:
            from ..infrastructure.spotify.client import SpotifyProviderClient

            self._provider_client = SpotifyProviderClient(self.settings.provider)
        return self._provider_client

    # === Application Services ===

    @property
    def clock(self) -> MonotonicUtcClock:
        """Get the clock shared by every writer of metadata rows."""
        if self._clock is None:
            from ..domain.shared.datetime_utils import MonotonicUtcClock

            self._clock = MonotonicUtcClock()
        return self._clock

    @property
    def broadcast_hub(self) -> BroadcastHub:
        """Get the client broadcast hub."""
        if self._broadcast_hub is None:
            from ..application.services.broadcast_hub import BroadcastHub

            self._broadcast_hub = BroadcastHub()
        return self._broadcast_hub

    @property
    def queue_reconciler(self) -> QueueReconciler:
        """Get the queue reconciler."""
        if self._queue_reconciler is None:
            from ..application.services.queue_reconciler import QueueReconciler

            self._queue_reconciler = QueueReconciler(
                provider=self.provider_client,
                metadata_repository=self.metadata_repository,
                hub=self.broadcast_hub,
                settings=self.settings.sync,
                clock=self.clock,
            )
        return self._queue_reconciler

    @property
    def queue_service(self) -> QueueService:
        """Get the queue façade."""
        if self._queue_service is None:
            from ..application.services.queue_service import QueueService

            self._queue_service = QueueService(
                provider=self.provider_client,
                metadata_repository=self.metadata_repository,
                ban_repository=self.ban_repository,
                reconciler=self.queue_reconciler,
                hub=self.broadcast_hub,
                settings=self.settings.queue,
                clock=self.clock,
            )
        return self._queue_service

    @property
    def vote_manager(self) -> VoteManager:
        """Get the ban vote state machine."""
        if self._vote_manager is None:
            from ..application.services.vote_manager import VoteManager

            self._vote_manager = VoteManager(
                ban_repository=self.ban_repository,
                settings=self.settings.voting,
            )
        return self._vote_manager

    @property
    def ban_vote_service(self) -> BanVoteService:
        """Get the ban vote service."""
        if self._ban_vote_service is None:
            from ..application.services.ban_vote_service import BanVoteService

            self._ban_vote_service = BanVoteService(
                vote_manager=self.vote_manager,
                ban_repository=self.ban_repository,
                hub=self.broadcast_hub,
            )
        return self._ban_vote_service

    # === Background Jobs ===

    @property
    def sync_job(self) -> SyncJob:
        """Get the periodic sync job."""
        if self._sync_job is None:
            from ..application.services.sync_job import SyncJob

            self._sync_job = SyncJob(reconciler=self.queue_reconciler, settings=self.settings.sync)
        return self._sync_job

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        await self.database.initialize()

        # Registers the vote completion handler on the vote manager.
        _ = self.ban_vote_service

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._sync_job is not None:
            try:
                await self._sync_job.stop()
            except Exception as exc:
                logger.warning(LogTemplates.SHUTDOWN_STEP_FAILED, "sync job", exc)

        if self._vote_manager is not None:
            try:
                await self._vote_manager.shutdown()
            except Exception as exc:
                logger.warning(LogTemplates.SHUTDOWN_STEP_FAILED, "vote manager", exc)

        if self._provider_client is not None:
            try:
                await self._provider_client.aclose()
            except Exception as exc:
                logger.warning(LogTemplates.SHUTDOWN_STEP_FAILED, "provider client", exc)

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
