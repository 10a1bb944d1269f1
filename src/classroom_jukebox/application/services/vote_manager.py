"""Single-slot ban vote state machine with an expiry timer.

At most one ban vote exists at a time. Every way a vote can end (pass,
majority no, impossible majority, timeout) goes through ``_complete``, which
clears the slot before anything else happens, so a vote ends exactly once and
a late ballot or timer finds nothing to act on.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING
from uuid import uuid4

from ...domain.shared.exceptions import BusinessRuleViolationError, EntityNotFoundError
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.voting.entities import ActiveVoteSummary, BanVote, VoteCompletion, VoteTally
from ...domain.voting.services import VotingDomainService
from ...domain.voting.value_objects import VoteChoice, VoteOutcome, VoteState

if TYPE_CHECKING:
    from ...config.settings import VotingSettings
    from ...domain.voting.repository import BannedTrackRepository

logger = logging.getLogger(__name__)

CompletionCallback = Callable[[VoteCompletion], Awaitable[None]]


class VoteManager:
    def __init__(
        self,
        *,
        ban_repository: BannedTrackRepository,
        settings: VotingSettings,
        on_complete: CompletionCallback | None = None,
        id_factory: Callable[[], str] = lambda: uuid4().hex,
    ) -> None:
        self._ban_repo = ban_repository
        self._settings = settings
        self._on_complete = on_complete
        self._id_factory = id_factory
        self._active: BanVote | None = None
        self._callback_tasks: set[asyncio.Task[None]] = set()

    def set_on_complete(self, callback: CompletionCallback) -> None:
        self._on_complete = callback

    @property
    def state(self) -> VoteState:
        return VoteState.ACTIVE if self._active is not None else VoteState.IDLE

    @property
    def active_vote(self) -> BanVote | None:
        return self._active

    def get_active_vote(self) -> ActiveVoteSummary | None:
        """Summary of the running vote for clients that connect mid-vote."""
        return self._active.summary() if self._active is not None else None

    async def start_ban_vote(
        self,
        track_uri: str,
        track_name: str,
        track_artist: str,
        initiator: str,
        online_count: int,
    ) -> BanVote:
        """Open a ban vote. The initiator's yes is counted immediately.

        Raises:
            BusinessRuleViolationError: If a vote is already running, too few
                users are online, or the track is already banned.
        """
        self._ensure_idle()
        minimum = self._settings.min_online_users
        if online_count < minimum:
            raise BusinessRuleViolationError(
                "insufficient_online_users",
                ErrorMessages.INSUFFICIENT_ONLINE_USERS.format(minimum=minimum),
            )
        if await self._ban_repo.is_banned(track_uri):
            raise BusinessRuleViolationError("track_banned", ErrorMessages.TRACK_ALREADY_BANNED)
        # The ban lookup yielded; another start may have won the slot meanwhile.
        self._ensure_idle()

        vote = BanVote(
            vote_id=self._id_factory(),
            track_uri=track_uri,
            track_name=track_name,
            track_artist=track_artist,
            initiator=initiator,
            online_count=online_count,
            required_votes=VotingDomainService.calculate_required_votes(online_count),
            yes_voters={initiator},
            duration_seconds=self._settings.expiry_seconds,
        )
        self._active = vote
        loop = asyncio.get_running_loop()
        vote.attach_timer(
            loop.call_later(self._settings.expiry_seconds, self._on_expired, vote.vote_id)
        )

        logger.info(
            LogTemplates.VOTE_STARTED,
            vote.vote_id,
            track_name,
            initiator,
            online_count,
            vote.required_votes,
        )
        return vote

    def _ensure_idle(self) -> None:
        if self._active is not None:
            raise BusinessRuleViolationError(
                "vote_already_active", ErrorMessages.VOTE_ALREADY_ACTIVE
            )

    def cast_vote(
        self, vote_id: str, user_id: str, choice: VoteChoice
    ) -> VoteTally | VoteCompletion:
        """Record a ballot and settle the vote if it is decided.

        Returns:
            Live tallies while the vote stays open, or the completion if this
            ballot decided it.

        Raises:
            EntityNotFoundError: If ``vote_id`` is not the running vote.
            BusinessRuleViolationError: If the user already cast this choice.
        """
        vote = self._active
        if vote is None or vote.vote_id != vote_id:
            raise EntityNotFoundError("BanVote", vote_id, ErrorMessages.VOTE_NOT_FOUND)

        vote.record(user_id, choice)
        logger.info(
            LogTemplates.VOTE_CAST,
            vote_id,
            user_id,
            choice.value,
            vote.yes_votes,
            vote.no_votes,
            vote.required_votes,
        )

        outcome = VotingDomainService.evaluate(vote)
        if outcome is None:
            return vote.tally()
        return self._complete(vote, outcome) or vote.tally()

    def _on_expired(self, vote_id: str) -> None:
        vote = self._active
        if vote is None or vote.vote_id != vote_id:
            logger.debug(LogTemplates.VOTE_TIMER_STALE, vote_id)
            return
        self._complete(vote, VoteOutcome.FAILED_TIMEOUT)

    def _complete(self, vote: BanVote, outcome: VoteOutcome) -> VoteCompletion | None:
        if self._active is not vote:
            return None
        self._active = None
        vote.cancel_timer()

        completion = vote.complete(outcome)
        if completion.passed:
            logger.info(
                LogTemplates.VOTE_PASSED, vote.vote_id, completion.yes_votes, completion.no_votes
            )
        else:
            logger.info(
                LogTemplates.VOTE_FAILED,
                vote.vote_id,
                completion.reason,
                completion.yes_votes,
                completion.no_votes,
            )

        if self._on_complete is not None:
            task = asyncio.get_running_loop().create_task(
                self._notify(self._on_complete, completion)
            )
            self._callback_tasks.add(task)
            task.add_done_callback(self._callback_tasks.discard)
        return completion

    async def _notify(self, callback: CompletionCallback, completion: VoteCompletion) -> None:
        try:
            await callback(completion)
        except Exception:
            logger.exception(LogTemplates.VOTE_CALLBACK_ERROR, completion.vote_id)

    async def drain(self) -> None:
        """Wait for completion callbacks that are still running."""
        if self._callback_tasks:
            await asyncio.gather(*self._callback_tasks, return_exceptions=True)

    async def shutdown(self) -> None:
        """Drop the running vote without a result and cancel its timer."""
        vote = self._active
        if vote is not None:
            self._active = None
            vote.cancel_timer()
            logger.info(LogTemplates.VOTE_SHUTDOWN, vote.vote_id)
        await self.drain()
