"""
Voting Domain Services

Domain services containing ban-vote business logic.
"""

import math

from classroom_jukebox.domain.voting.entities import BanVote
from classroom_jukebox.domain.voting.value_objects import VoteOutcome


class VotingDomainService:
    """Domain service for ban-vote thresholds and outcome evaluation."""

    MINIMUM_REQUIRED = 1

    @classmethod
    def calculate_required_votes(cls, online_count: int) -> int:
        """Calculate the number of yes votes needed to ban a track.

        Half of the online users, rounded up, so five users need three votes
        and four users need two.

        Args:
            online_count: Distinct users connected when the vote started.

        Returns:
            The number of votes required to pass.
        """
        return max(cls.MINIMUM_REQUIRED, math.ceil(online_count / 2))

    @classmethod
    def evaluate(cls, vote: BanVote) -> VoteOutcome | None:
        """Decide whether a vote has reached a terminal state.

        Checked in order: enough yes votes, enough no votes, then whether the
        users who have not voted yet could still carry it.

        Args:
            vote: The active vote after the latest ballot.

        Returns:
            The outcome, or None if the vote stays open.
        """
        if vote.yes_votes >= vote.required_votes:
            return VoteOutcome.PASSED
        if vote.no_votes >= vote.required_votes:
            return VoteOutcome.FAILED_MAJORITY_NO
        if vote.yes_votes + max(0, vote.remaining_voters) < vote.required_votes:
            return VoteOutcome.FAILED_IMPOSSIBLE
        return None
