"""Client-facing events published through the broadcast hub.

Every event has a wire name (``event_name``) and a camelCase JSON payload
produced by :meth:`ClientEvent.payload`.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from classroom_jukebox.domain.queue.entities import QueueItem, QueueState
from classroom_jukebox.domain.shared.types import NonNegativeFloat, NonNegativeInt
from classroom_jukebox.domain.voting.entities import ActiveVoteSummary, VoteCompletion, VoteTally

Payload = dict[str, Any]


class ClientEvent(BaseModel):
    """Base class for all events sent to connected clients."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    event_name: ClassVar[str]

    def payload(self) -> Payload:
        return self.model_dump(mode="json", by_alias=True)


# === Queue Events ===


class QueueUpdate(ClientEvent):
    event_name: ClassVar[str] = "queueUpdate"

    queue: list[Payload]
    current_track: Payload | None = None
    is_playing: bool = False
    progress: NonNegativeInt = 0
    last_update: NonNegativeInt = 0

    @classmethod
    def from_state(cls, state: QueueState) -> QueueUpdate:
        return cls(
            queue=state.queue_payload(),
            current_track=state.current_payload(),
            is_playing=state.is_playing,
            progress=state.progress_ms,
            last_update=state.last_update_ms,
        )


class CurrentTrackChanged(ClientEvent):
    """The now-playing track changed. The payload is the track itself."""

    event_name: ClassVar[str] = "currentTrack"

    track: Payload | None = None

    def payload(self) -> Payload:
        return dict(self.track or {})


class QueueAdd(ClientEvent):
    event_name: ClassVar[str] = "queueAdd"

    track: Payload
    queue: list[Payload]

    @classmethod
    def from_item(cls, item: QueueItem, state: QueueState | None) -> QueueAdd:
        return cls(
            track=item.to_payload(),
            queue=state.queue_payload() if state is not None else [],
        )


class Skip(ClientEvent):
    event_name: ClassVar[str] = "skip"

    current_track: Payload | None = None
    queue: list[Payload]

    @classmethod
    def from_state(cls, state: QueueState | None) -> Skip:
        if state is None:
            return cls(current_track=None, queue=[])
        return cls(current_track=state.current_payload(), queue=state.queue_payload())


class SkipBlocked(ClientEvent):
    event_name: ClassVar[str] = "skipBlocked"

    track: Payload
    shields_remaining: NonNegativeInt


# === Ban Vote Events ===


class BanVoteStarted(ClientEvent):
    event_name: ClassVar[str] = "banVoteStarted"

    vote_id: str
    track_uri: str
    track_name: str
    track_artist: str
    initiator: str
    online_count: NonNegativeInt
    required_votes: NonNegativeInt
    yes_votes: NonNegativeInt
    no_votes: NonNegativeInt
    expires_in: NonNegativeFloat

    @classmethod
    def from_summary(cls, summary: ActiveVoteSummary) -> BanVoteStarted:
        return cls(
            vote_id=summary.vote_id,
            track_uri=summary.track_uri,
            track_name=summary.track_name,
            track_artist=summary.track_artist,
            initiator=summary.initiator,
            online_count=summary.online_count,
            required_votes=summary.required_votes,
            yes_votes=summary.yes_votes,
            no_votes=summary.no_votes,
            expires_in=summary.expires_in_seconds,
        )


class BanVoteUpdate(ClientEvent):
    event_name: ClassVar[str] = "banVoteUpdate"

    vote_id: str
    yes_votes: NonNegativeInt
    no_votes: NonNegativeInt
    online_count: NonNegativeInt

    @classmethod
    def from_tally(cls, tally: VoteTally) -> BanVoteUpdate:
        return cls(
            vote_id=tally.vote_id,
            yes_votes=tally.yes_votes,
            no_votes=tally.no_votes,
            online_count=tally.online_count,
        )


class BanVotePassed(ClientEvent):
    event_name: ClassVar[str] = "banVotePassed"

    track_uri: str
    track_name: str
    yes_votes: NonNegativeInt
    no_votes: NonNegativeInt

    @classmethod
    def from_completion(cls, completion: VoteCompletion) -> BanVotePassed:
        return cls(
            track_uri=completion.track_uri,
            track_name=completion.track_name,
            yes_votes=completion.yes_votes,
            no_votes=completion.no_votes,
        )


class BanVoteFailed(ClientEvent):
    event_name: ClassVar[str] = "banVoteFailed"

    track_name: str
    yes_votes: NonNegativeInt
    no_votes: NonNegativeInt
    reason: str

    @classmethod
    def from_completion(cls, completion: VoteCompletion) -> BanVoteFailed:
        return cls(
            track_name=completion.track_name,
            yes_votes=completion.yes_votes,
            no_votes=completion.no_votes,
            reason=completion.reason,
        )


class BanVoteError(ClientEvent):
    event_name: ClassVar[str] = "banVoteError"

    error: str


# === Presence Events ===


class UserCount(ClientEvent):
    event_name: ClassVar[str] = "userCount"

    count: NonNegativeInt
