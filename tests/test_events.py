"""Tests for client event payloads."""

from datetime import UTC, datetime

from classroom_jukebox.domain.queue.entities import (
    CurrentTrackView,
    MetadataEntry,
    QueueItem,
    QueueState,
    Track,
)
from classroom_jukebox.domain.shared.events import (
    BanVoteError,
    BanVoteFailed,
    BanVotePassed,
    BanVoteStarted,
    BanVoteUpdate,
    CurrentTrackChanged,
    QueueAdd,
    QueueUpdate,
    Skip,
    SkipBlocked,
    UserCount,
)
from classroom_jukebox.domain.voting.entities import ActiveVoteSummary, VoteCompletion, VoteTally
from classroom_jukebox.domain.voting.value_objects import VoteOutcome

URI_A = "spotify:track:4uLU6hMCjMI75M1A2tKUQC"
URI_B = "spotify:track:7GhIk7Il098yCjg4BQjzvb"
NOW = datetime(2024, 3, 1, 9, 0, 0, tzinfo=UTC)


def _state() -> QueueState:
    return QueueState(
        current=CurrentTrackView(
            track=Track(uri=URI_A, name="Song A"),
            metadata=MetadataEntry(track_uri=URI_A, added_at=NOW, added_by="alice"),
            is_playing=True,
            progress_ms=42_000,
        ),
        queue=(
            QueueItem(
                track=Track(uri=URI_B, name="Song B"),
                metadata=MetadataEntry(
                    track_uri=URI_B, added_at=NOW, added_by="bob", is_anonymous=True
                ),
            ),
        ),
        last_update=NOW,
    )


class TestQueueEvents:
    """Tests for queue event payloads."""

    def test_queue_update_from_state(self):
        """Should emit the merged view with camelCase keys."""
        event = QueueUpdate.from_state(_state())
        payload = event.payload()

        assert event.event_name == "queueUpdate"
        assert set(payload) == {"queue", "currentTrack", "isPlaying", "progress", "lastUpdate"}
        assert payload["currentTrack"]["uri"] == URI_A
        assert payload["queue"][0]["addedBy"] == "Anonymous"
        assert payload["isPlaying"] is True
        assert payload["progress"] == 42_000
        assert payload["lastUpdate"] == int(NOW.timestamp() * 1000)

    def test_empty_queue_update(self):
        """Should describe an idle player."""
        payload = QueueUpdate(queue=[]).payload()

        assert payload == {
            "queue": [],
            "currentTrack": None,
            "isPlaying": False,
            "progress": 0,
            "lastUpdate": 0,
        }

    def test_current_track_payload_is_the_track(self):
        """Should send the track itself as the payload."""
        state = _state()

        event = CurrentTrackChanged(track=state.current_payload())

        assert event.event_name == "currentTrack"
        assert event.payload() == state.current_payload()
        assert CurrentTrackChanged(track=None).payload() == {}

    def test_queue_add(self):
        state = _state()

        payload = QueueAdd.from_item(state.queue[0], state).payload()

        assert payload["track"]["uri"] == URI_B
        assert [item["uri"] for item in payload["queue"]] == [URI_B]
        assert QueueAdd.from_item(state.queue[0], None).payload()["queue"] == []

    def test_skip(self):
        payload = Skip.from_state(_state()).payload()

        assert payload["currentTrack"]["uri"] == URI_A
        assert len(payload["queue"]) == 1
        assert Skip.from_state(None).payload() == {"currentTrack": None, "queue": []}

    def test_skip_blocked(self):
        payload = SkipBlocked(track={"uri": URI_A}, shields_remaining=1).payload()

        assert payload == {"track": {"uri": URI_A}, "shieldsRemaining": 1}


class TestBanVoteEvents:
    """Tests for ban vote event payloads."""

    def test_started_from_summary(self):
        """Should carry the full vote summary with expiresIn in seconds."""
        summary = ActiveVoteSummary(
            vote_id="vote-1",
            track_uri=URI_A,
            track_name="Song A",
            track_artist="Band",
            initiator="u1",
            online_count=5,
            required_votes=3,
            yes_votes=1,
            no_votes=0,
            expires_in_seconds=45.0,
        )

        payload = BanVoteStarted.from_summary(summary).payload()

        assert payload == {
            "voteId": "vote-1",
            "trackUri": URI_A,
            "trackName": "Song A",
            "trackArtist": "Band",
            "initiator": "u1",
            "onlineCount": 5,
            "requiredVotes": 3,
            "yesVotes": 1,
            "noVotes": 0,
            "expiresIn": 45.0,
        }

    def test_update_from_tally(self):
        tally = VoteTally(
            vote_id="vote-1", yes_votes=2, no_votes=1, online_count=5, required_votes=3
        )

        payload = BanVoteUpdate.from_tally(tally).payload()

        assert payload == {"voteId": "vote-1", "yesVotes": 2, "noVotes": 1, "onlineCount": 5}

    def test_passed_and_failed_from_completion(self):
        passed = VoteCompletion(
            vote_id="vote-1",
            outcome=VoteOutcome.PASSED,
            track_uri=URI_A,
            track_name="Song A",
            yes_votes=3,
            no_votes=1,
        )
        failed = passed.model_copy(update={"outcome": VoteOutcome.FAILED_TIMEOUT})

        assert BanVotePassed.from_completion(passed).payload() == {
            "trackUri": URI_A,
            "trackName": "Song A",
            "yesVotes": 3,
            "noVotes": 1,
        }
        assert BanVoteFailed.from_completion(failed).payload() == {
            "trackName": "Song A",
            "yesVotes": 3,
            "noVotes": 1,
            "reason": "time expired",
        }

    def test_error_and_user_count(self):
        assert BanVoteError(error="nope").payload() == {"error": "nope"}
        assert BanVoteError.event_name == "banVoteError"
        assert UserCount(count=3).payload() == {"count": 3}
        assert UserCount.event_name == "userCount"
