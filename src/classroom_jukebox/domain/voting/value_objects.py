"""
Voting Domain Value Objects

Immutable value objects for the voting bounded context.
"""

from enum import Enum


class VoteChoice(Enum):
    """A ballot in a ban vote."""

    YES = "yes"
    NO = "no"


class VoteState(Enum):
    """State of the single ban-vote slot."""

    IDLE = "idle"
    ACTIVE = "active"


class VoteOutcome(Enum):
    """Terminal states of a ban vote."""

    PASSED = "passed"
    FAILED_MAJORITY_NO = "failed_majority_no"
    FAILED_IMPOSSIBLE = "failed_impossible"
    FAILED_TIMEOUT = "failed_timeout"

    @property
    def passed(self) -> bool:
        return self is VoteOutcome.PASSED

    @property
    def reason(self) -> str:
        """Get the user-facing reason for display."""
        return {
            VoteOutcome.PASSED: "majority voted yes",
            VoteOutcome.FAILED_MAJORITY_NO: "majority voted no",
            VoteOutcome.FAILED_IMPOSSIBLE: "not enough votes to pass",
            VoteOutcome.FAILED_TIMEOUT: "time expired",
        }[self]
