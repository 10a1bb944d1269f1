"""
Voting Bounded Context

Domain logic for the class-wide ban vote.
"""

from classroom_jukebox.domain.voting.entities import (
    ActiveVoteSummary,
    BannedTrack,
    BanVote,
    VoteCompletion,
    VoteTally,
)
from classroom_jukebox.domain.voting.repository import BannedTrackRepository
from classroom_jukebox.domain.voting.services import VotingDomainService
from classroom_jukebox.domain.voting.value_objects import VoteChoice, VoteOutcome, VoteState

__all__ = [
    # Entities
    "BanVote",
    "BannedTrack",
    "VoteTally",
    "VoteCompletion",
    "ActiveVoteSummary",
    # Value Objects
    "VoteChoice",
    "VoteOutcome",
    "VoteState",
    # Repository
    "BannedTrackRepository",
    # Services
    "VotingDomainService",
]
