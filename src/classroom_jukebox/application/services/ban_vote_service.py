"""Ban Vote Application Service - connects the vote state machine to clients and storage."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...domain.shared.events import (
    BanVoteError,
    BanVoteFailed,
    BanVotePassed,
    BanVoteStarted,
    BanVoteUpdate,
)
from ...domain.shared.exceptions import DomainError
from ...domain.voting.entities import BannedTrack, VoteCompletion, VoteTally

if TYPE_CHECKING:
    from ...domain.voting.entities import BanVote
    from ...domain.voting.repository import BannedTrackRepository
    from ...domain.voting.value_objects import VoteChoice
    from .broadcast_hub import BroadcastHub
    from .vote_manager import VoteManager


class BanVoteService:
    """Runs class ban votes on behalf of connected clients.

    Rule violations are reported back to the requesting client as
    ``banVoteError`` and re-raised to the caller.
    """

    def __init__(
        self,
        *,
        vote_manager: VoteManager,
        ban_repository: BannedTrackRepository,
        hub: BroadcastHub,
    ) -> None:
        self._votes = vote_manager
        self._ban_repo = ban_repository
        self._hub = hub
        self._votes.set_on_complete(self._on_vote_complete)

    async def start_vote(
        self,
        client_id: str,
        *,
        track_uri: str,
        track_name: str,
        track_artist: str,
        initiator: str,
    ) -> BanVote:
        try:
            vote = await self._votes.start_ban_vote(
                track_uri=track_uri,
                track_name=track_name,
                track_artist=track_artist,
                initiator=initiator,
                online_count=self._hub.online_count,
            )
        except DomainError as e:
            await self._hub.send_to(client_id, BanVoteError(error=e.message))
            raise

        await self._hub.publish(BanVoteStarted.from_summary(vote.summary()))
        return vote

    async def cast_vote(
        self, client_id: str, *, vote_id: str, user_id: str, choice: VoteChoice
    ) -> VoteTally | VoteCompletion:
        try:
            result = self._votes.cast_vote(vote_id, user_id, choice)
        except DomainError as e:
            await self._hub.send_to(client_id, BanVoteError(error=e.message))
            raise

        if isinstance(result, VoteTally):
            await self._hub.publish(BanVoteUpdate.from_tally(result))
        return result

    async def send_active_vote(self, client_id: str) -> bool:
        """Show the running vote, if any, to a client that just connected."""
        summary = self._votes.get_active_vote()
        if summary is None:
            return False
        return await self._hub.send_to(client_id, BanVoteStarted.from_summary(summary))

    async def list_banned(self) -> list[BannedTrack]:
        return await self._ban_repo.list_all()

    async def unban(self, track_uri: str) -> bool:
        return await self._ban_repo.unban(track_uri)

    async def _on_vote_complete(self, completion: VoteCompletion) -> None:
        if completion.passed:
            await self._ban_repo.ban(BannedTrack.from_completion(completion))
            await self._hub.publish(BanVotePassed.from_completion(completion))
        else:
            await self._hub.publish(BanVoteFailed.from_completion(completion))
