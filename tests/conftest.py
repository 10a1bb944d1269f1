from __future__ import annotations

import asyncio
from typing import Any

import pytest
import pytest_asyncio

from classroom_jukebox.application.interfaces.provider_client import ProviderClient
from classroom_jukebox.domain.queue.entities import NowPlaying, Track

# ============================================================================
# Test Doubles
# ============================================================================


class FakeProviderClient(ProviderClient):
    """In-memory stand-in for the provider's player.

    ``enqueue`` appends to the queue and ``skip_to_next`` pops its head into
    the now-playing slot, the way the real player behaves.
    """

    def __init__(self) -> None:
        self.now_playing: NowPlaying | None = None
        self.queue: list[Track] = []
        self.catalog: dict[str, Track] = {}
        self.enqueued: list[str] = []
        self.skips = 0
        self.reads = 0
        self.read_delay = 0.0
        self.read_error: Exception | None = None
        self.enqueue_error: Exception | None = None
        self.skip_error: Exception | None = None
        self.closed = False

    def play(self, track: Track | None, *, is_playing: bool = True, progress_ms: int = 0) -> None:
        self.now_playing = (
            NowPlaying(track=track, is_playing=is_playing, progress_ms=progress_ms)
            if track is not None
            else None
        )

    async def get_current_track(self) -> NowPlaying | None:
        self.reads += 1
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.read_error is not None:
            raise self.read_error
        return self.now_playing

    async def get_queue_snapshot(self) -> list[Track]:
        if self.read_error is not None:
            raise self.read_error
        return list(self.queue)

    async def enqueue(self, track_uri: str) -> None:
        if self.enqueue_error is not None:
            raise self.enqueue_error
        self.enqueued.append(track_uri)
        self.queue.append(self.catalog.get(track_uri) or Track(uri=track_uri, name=track_uri))

    async def skip_to_next(self) -> None:
        if self.skip_error is not None:
            raise self.skip_error
        self.skips += 1
        self.play(self.queue.pop(0) if self.queue else None)

    async def aclose(self) -> None:
        self.closed = True


class RecordingConnection:
    """Client connection that records every event it is sent."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[str, Any]] = []
        self.fail = fail

    async def send(self, event: str, payload: Any) -> None:
        if self.fail:
            raise ConnectionError("client went away")
        self.sent.append((event, payload))

    @property
    def event_names(self) -> list[str]:
        return [event for event, _ in self.sent]

    def payloads(self, event: str) -> list[Any]:
        return [payload for name, payload in self.sent if name == event]

    def last(self, event: str) -> Any:
        matching = self.payloads(event)
        return matching[-1] if matching else None


def spotify_uri(suffix: str) -> str:
    """Build a well-formed track URI (22 base62 characters) from a short suffix."""
    return f"spotify:track:{suffix:0>22}"


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from classroom_jukebox.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def metadata_repository(in_memory_database):
    """Create a metadata repository with in-memory database."""
    from classroom_jukebox.infrastructure.persistence.repositories.metadata_repository import (
        SQLiteMetadataRepository,
    )

    return SQLiteMetadataRepository(in_memory_database)


@pytest_asyncio.fixture
async def ban_repository(in_memory_database):
    """Create a banned track repository with in-memory database."""
    from classroom_jukebox.infrastructure.persistence.repositories.ban_repository import (
        SQLiteBannedTrackRepository,
    )

    return SQLiteBannedTrackRepository(in_memory_database)


# ============================================================================
# Domain Fixtures
# ============================================================================


@pytest.fixture
def make_track():
    """Factory for tracks with valid URIs: ``make_track("a", "Song A")``."""

    def _make(suffix: str, name: str | None = None, **kwargs: Any) -> Track:
        return Track(uri=spotify_uri(suffix), name=name or f"Song {suffix}", **kwargs)

    return _make


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def provider():
    return FakeProviderClient()


@pytest.fixture
def hub():
    from classroom_jukebox.application.services.broadcast_hub import BroadcastHub

    return BroadcastHub()


@pytest.fixture
def sync_settings():
    from classroom_jukebox.config.settings import SyncSettings

    return SyncSettings(interval_seconds=0.01, tick_timeout_seconds=2.0)


@pytest.fixture
def voting_settings():
    from classroom_jukebox.config.settings import VotingSettings

    return VotingSettings(expiry_seconds=30.0, min_online_users=2)


@pytest.fixture
def queue_settings():
    from classroom_jukebox.config.settings import QueueSettings

    return QueueSettings()


@pytest.fixture
def reconciler(provider, metadata_repository, hub, sync_settings):
    from classroom_jukebox.application.services.queue_reconciler import QueueReconciler

    return QueueReconciler(
        provider=provider,
        metadata_repository=metadata_repository,
        hub=hub,
        settings=sync_settings,
    )


@pytest.fixture
def queue_service(provider, metadata_repository, ban_repository, reconciler, hub, queue_settings):
    from classroom_jukebox.application.services.queue_service import QueueService

    return QueueService(
        provider=provider,
        metadata_repository=metadata_repository,
        ban_repository=ban_repository,
        reconciler=reconciler,
        hub=hub,
        settings=queue_settings,
    )


@pytest_asyncio.fixture
async def vote_manager(ban_repository, voting_settings):
    from classroom_jukebox.application.services.vote_manager import VoteManager

    manager = VoteManager(
        ban_repository=ban_repository,
        settings=voting_settings,
        id_factory=lambda: "vote-1",
    )
    yield manager
    await manager.shutdown()
