"""Core domain entities for the voting bounded context."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from classroom_jukebox.domain.shared.datetime_utils import utcnow
from classroom_jukebox.domain.shared.exceptions import BusinessRuleViolationError
from classroom_jukebox.domain.shared.messages import ErrorMessages
from classroom_jukebox.domain.shared.types import (
    NonEmptyStr,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
    TrackUriStr,
    UserIdStr,
    UtcDatetimeField,
)
from classroom_jukebox.domain.voting.value_objects import VoteChoice, VoteOutcome


class VoteTally(BaseModel):
    """Live counts of an active vote, safe to broadcast."""

    model_config = ConfigDict(frozen=True)

    vote_id: NonEmptyStr
    yes_votes: NonNegativeInt
    no_votes: NonNegativeInt
    online_count: NonNegativeInt
    required_votes: PositiveInt


class VoteCompletion(BaseModel):
    """Final result of a ban vote, produced exactly once per vote."""

    model_config = ConfigDict(frozen=True)

    vote_id: NonEmptyStr
    outcome: VoteOutcome
    track_uri: TrackUriStr
    track_name: str
    track_artist: str = ""
    yes_votes: NonNegativeInt
    no_votes: NonNegativeInt

    @property
    def passed(self) -> bool:
        return self.outcome.passed

    @property
    def reason(self) -> str:
        return self.outcome.reason


class ActiveVoteSummary(BaseModel):
    """Snapshot of the running vote for clients that connect mid-vote."""

    model_config = ConfigDict(frozen=True)

    vote_id: NonEmptyStr
    track_uri: TrackUriStr
    track_name: str
    track_artist: str
    initiator: UserIdStr
    online_count: NonNegativeInt
    required_votes: PositiveInt
    yes_votes: NonNegativeInt
    no_votes: NonNegativeInt
    expires_in_seconds: NonNegativeFloat


class BanVote(BaseModel):
    """Aggregate for a time-boxed majority ballot on banning one track."""

    vote_id: NonEmptyStr
    track_uri: TrackUriStr
    track_name: str
    track_artist: str = ""
    initiator: UserIdStr
    online_count: NonNegativeInt
    required_votes: PositiveInt
    yes_voters: set[str] = Field(default_factory=set)
    no_voters: set[str] = Field(default_factory=set)
    started_at: UtcDatetimeField = Field(default_factory=utcnow)
    duration_seconds: NonNegativeFloat = 45.0

    _expiry_handle: asyncio.TimerHandle | None = PrivateAttr(default=None)

    @property
    def yes_votes(self) -> int:
        return len(self.yes_voters)

    @property
    def no_votes(self) -> int:
        return len(self.no_voters)

    @property
    def remaining_voters(self) -> int:
        """Online users who have not voted yet. Negative if people left."""
        return self.online_count - self.yes_votes - self.no_votes

    @property
    def expires_at(self) -> datetime:
        return self.started_at + timedelta(seconds=self.duration_seconds)

    def expires_in_seconds(self, now: datetime | None = None) -> float:
        remaining = (self.expires_at - (now or utcnow())).total_seconds()
        return max(0.0, remaining)

    def record(self, user_id: str, choice: VoteChoice) -> None:
        """Record a ballot, moving the user across sides if they change their mind.

        Raises:
            BusinessRuleViolationError: If the user already cast this exact choice.
        """
        chosen, other = (
            (self.yes_voters, self.no_voters)
            if choice is VoteChoice.YES
            else (self.no_voters, self.yes_voters)
        )
        if user_id in chosen:
            raise BusinessRuleViolationError("already_voted", ErrorMessages.ALREADY_VOTED)
        other.discard(user_id)
        chosen.add(user_id)

    def attach_timer(self, handle: asyncio.TimerHandle) -> None:
        self._expiry_handle = handle

    def cancel_timer(self) -> None:
        """Cancel the expiry timer. Safe to call any number of times."""
        if self._expiry_handle is not None:
            self._expiry_handle.cancel()
            self._expiry_handle = None

    def tally(self) -> VoteTally:
        return VoteTally(
            vote_id=self.vote_id,
            yes_votes=self.yes_votes,
            no_votes=self.no_votes,
            online_count=self.online_count,
            required_votes=self.required_votes,
        )

    def complete(self, outcome: VoteOutcome) -> VoteCompletion:
        return VoteCompletion(
            vote_id=self.vote_id,
            outcome=outcome,
            track_uri=self.track_uri,
            track_name=self.track_name,
            track_artist=self.track_artist,
            yes_votes=self.yes_votes,
            no_votes=self.no_votes,
        )

    def summary(self, now: datetime | None = None) -> ActiveVoteSummary:
        return ActiveVoteSummary(
            vote_id=self.vote_id,
            track_uri=self.track_uri,
            track_name=self.track_name,
            track_artist=self.track_artist,
            initiator=self.initiator,
            online_count=self.online_count,
            required_votes=self.required_votes,
            yes_votes=self.yes_votes,
            no_votes=self.no_votes,
            expires_in_seconds=self.expires_in_seconds(now),
        )


class BannedTrack(BaseModel):
    """A track permanently banned by a passed vote."""

    model_config = ConfigDict(frozen=True)

    track_uri: TrackUriStr
    track_name: str
    track_artist: str = ""
    banned_at: UtcDatetimeField = Field(default_factory=utcnow)
    yes_votes: NonNegativeInt = 0
    no_votes: NonNegativeInt = 0

    @classmethod
    def from_completion(cls, completion: VoteCompletion) -> BannedTrack:
        return cls(
            track_uri=completion.track_uri,
            track_name=completion.track_name,
            track_artist=completion.track_artist,
            yes_votes=completion.yes_votes,
            no_votes=completion.no_votes,
        )
