"""
Tests for QueueService

Tests for:
- add_to_queue: validation, bans, admission rules, compensating delete
- skip_current_track: shields, stale URIs, provider skip
- add_shield and get_current_state
"""

from datetime import UTC, datetime, timedelta

import pytest
from conftest import RecordingConnection

from classroom_jukebox.application.interfaces.provider_client import (
    NoActiveDeviceError,
    ProviderError,
)
from classroom_jukebox.domain.queue.entities import MetadataEntry, Track
from classroom_jukebox.domain.shared.exceptions import (
    BusinessRuleViolationError,
    EntityNotFoundError,
    InvalidOperationError,
    ValidationError,
)
from classroom_jukebox.domain.voting.entities import BannedTrack

BASE_TIME = datetime(2024, 3, 1, 9, 0, 0, tzinfo=UTC)

# =============================================================================
# add_to_queue
# =============================================================================


class TestAddToQueue:
    """Tests for queueing a track."""

    @pytest.mark.asyncio
    async def test_enqueues_and_records_requester(
        self, queue_service, provider, metadata_repository, make_track
    ):
        track = make_track("a", "Song A", artists=("Band",))
        provider.catalog[track.uri] = track

        item = await queue_service.add_to_queue(track, "alice")

        assert provider.enqueued == [track.uri]
        assert item.track == track
        assert item.metadata.added_by == "alice"
        [row] = await metadata_repository.find_by_uris([track.uri])
        assert row == item.metadata

    @pytest.mark.asyncio
    async def test_reconciles_and_broadcasts_queue_add(
        self, queue_service, provider, hub, make_track
    ):
        conn = RecordingConnection()
        await hub.connect("c1", "bob", conn)
        track = make_track("a", "Song A")
        provider.catalog[track.uri] = track

        await queue_service.add_to_queue(track, "alice", anonymous=True)

        added = conn.last("queueAdd")
        assert added["track"]["uri"] == track.uri
        assert added["track"]["addedBy"] == "Anonymous"
        assert [entry["uri"] for entry in added["queue"]] == [track.uri]
        assert hub.last_state.queue[0].metadata.is_anonymous is True

    @pytest.mark.asyncio
    async def test_duplicate_adds_keep_their_own_requesters(
        self, queue_service, provider, make_track
    ):
        """The same song queued by two people should show both requesters in order."""
        track = make_track("a", "Song A")
        provider.catalog[track.uri] = track

        await queue_service.add_to_queue(track, "alice")
        await queue_service.add_to_queue(track, "bob")

        state = queue_service.get_current_state()
        assert [item.metadata.added_by for item in state.queue] == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_rejects_malformed_uri(self, queue_service, provider, metadata_repository):
        track = Track(uri="spotify:album:4uLU6hMCjMI75M1A2tKUQC", name="Album")

        with pytest.raises(ValidationError) as exc_info:
            await queue_service.add_to_queue(track, "alice")

        assert exc_info.value.field == "uri"
        assert provider.enqueued == []
        assert await metadata_repository.count() == 0

    @pytest.mark.asyncio
    async def test_rejects_banned_track(
        self, queue_service, provider, ban_repository, make_track
    ):
        track = make_track("a", "Loud Song")
        await ban_repository.ban(BannedTrack(track_uri=track.uri, track_name=track.name))

        with pytest.raises(BusinessRuleViolationError) as exc_info:
            await queue_service.add_to_queue(track, "alice")

        assert exc_info.value.rule == "track_banned"
        assert "Loud Song" in exc_info.value.message
        assert provider.enqueued == []

    @pytest.mark.asyncio
    async def test_rejects_explicit_track(self, queue_service, provider, make_track):
        with pytest.raises(BusinessRuleViolationError) as exc_info:
            await queue_service.add_to_queue(make_track("a", explicit=True), "alice")

        assert exc_info.value.rule == "explicit_track"
        assert provider.enqueued == []

    @pytest.mark.asyncio
    async def test_provider_failure_removes_metadata(
        self, queue_service, provider, metadata_repository, make_track
    ):
        """A rejected enqueue must not leave an orphaned metadata row."""
        provider.enqueue_error = NoActiveDeviceError()

        with pytest.raises(ProviderError):
            await queue_service.add_to_queue(make_track("a"), "alice")

        assert await metadata_repository.count() == 0


# =============================================================================
# skip_current_track
# =============================================================================


class TestSkipCurrentTrack:
    """Tests for paid skips and shields."""

    @pytest.mark.asyncio
    async def test_nothing_playing(self, queue_service, make_track):
        with pytest.raises(InvalidOperationError):
            await queue_service.skip_current_track(make_track("a").uri)

    @pytest.mark.asyncio
    async def test_stale_uri_rejected(self, queue_service, provider, make_track):
        """Should refuse to skip a track that already finished."""
        provider.play(make_track("b"))

        with pytest.raises(BusinessRuleViolationError) as exc_info:
            await queue_service.skip_current_track(make_track("a").uri)

        assert exc_info.value.rule == "track_not_current"
        assert provider.skips == 0

    @pytest.mark.asyncio
    async def test_unshielded_track_is_skipped(self, queue_service, provider, hub, make_track):
        conn = RecordingConnection()
        await hub.connect("c1", "alice", conn)
        track_a, track_b = make_track("a"), make_track("b")
        provider.play(track_a)
        provider.queue = [track_b]

        result = await queue_service.skip_current_track(track_a.uri)

        assert result.skipped is True
        assert result.blocked is False
        assert result.track == track_a
        assert provider.skips == 1
        assert result.state.current_uri == track_b.uri
        assert conn.last("skip")["currentTrack"]["uri"] == track_b.uri
        assert conn.last("skip")["queue"] == []

    @pytest.mark.asyncio
    async def test_shields_block_until_used_up(
        self, queue_service, reconciler, provider, hub, make_track
    ):
        """Shields 2 -> 1 (blocked) -> 0 (blocked) -> skip goes through."""
        conn = RecordingConnection()
        await hub.connect("c1", "alice", conn)
        track_a, track_b = make_track("a"), make_track("b")
        provider.play(track_a)
        provider.queue = [track_b]
        await reconciler.reconcile()
        await queue_service.add_shield(track_a.uri)
        await queue_service.add_shield(track_a.uri)

        first = await queue_service.skip_current_track(track_a.uri)
        second = await queue_service.skip_current_track(track_a.uri)
        third = await queue_service.skip_current_track(track_a.uri)

        assert (first.blocked, first.shields_remaining) == (True, 1)
        assert (second.blocked, second.shields_remaining) == (True, 0)
        assert third.skipped is True
        assert provider.skips == 1
        assert [p["shieldsRemaining"] for p in conn.payloads("skipBlocked")] == [1, 0]
        assert conn.payloads("skipBlocked")[0]["track"]["uri"] == track_a.uri

    @pytest.mark.asyncio
    async def test_failed_skip_leaves_shields_alone(
        self, queue_service, provider, metadata_repository, make_track
    ):
        track_a = make_track("a")
        provider.play(track_a)
        provider.skip_error = NoActiveDeviceError()

        with pytest.raises(NoActiveDeviceError):
            await queue_service.skip_current_track(track_a.uri)

        [row] = await metadata_repository.find_by_uris([track_a.uri])
        assert row.shield_count == 0


# =============================================================================
# Shields and State
# =============================================================================


class TestShieldsAndState:
    """Tests for add_shield and the cached state."""

    @pytest.mark.asyncio
    async def test_add_shield_to_queued_instance(
        self, queue_service, provider, make_track
    ):
        track = make_track("a")
        provider.catalog[track.uri] = track
        item = await queue_service.add_to_queue(track, "alice")

        updated = await queue_service.add_shield(track.uri, item.metadata.added_at)

        assert updated.shield_count == 1
        assert queue_service.get_current_state().queue[0].metadata.shield_count == 1

    @pytest.mark.asyncio
    async def test_add_shield_skips_already_played_instance(
        self, queue_service, reconciler, provider, metadata_repository, make_track
    ):
        """Without an explicit instance the shield should go to the queued copy."""
        track_x, track_y = make_track("x"), make_track("y")
        for uri, added_by, offset_s in (
            (track_x.uri, "alice", 0),
            (track_y.uri, "bob", 1),
            (track_x.uri, "carol", 2),
        ):
            await metadata_repository.insert(
                MetadataEntry(
                    track_uri=uri,
                    added_at=BASE_TIME + timedelta(seconds=offset_s),
                    added_by=added_by,
                )
            )
        provider.play(track_x)
        provider.queue = [track_y, track_x]
        await reconciler.reconcile()
        provider.play(track_y)
        provider.queue = [track_x]
        await reconciler.reconcile()

        updated = await queue_service.add_shield(track_x.uri)

        assert updated.added_by == "carol"
        assert updated.shield_count == 1
        assert queue_service.get_current_state().queue[0].metadata.shield_count == 1

    @pytest.mark.asyncio
    async def test_add_shield_unknown_track(self, queue_service, make_track):
        with pytest.raises(EntityNotFoundError):
            await queue_service.add_shield(make_track("a").uri)

    @pytest.mark.asyncio
    async def test_current_state_is_cache_only(self, queue_service, provider, make_track):
        """Should not touch the provider."""
        assert queue_service.get_current_state() is None

        provider.play(make_track("a"))
        reads_before = provider.reads
        assert queue_service.get_current_state() is None
        assert provider.reads == reads_before
