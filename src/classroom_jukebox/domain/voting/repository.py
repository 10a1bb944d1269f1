"""
Voting Domain Repository Interfaces

Abstract base classes defining the contracts for ban persistence.
"""

from abc import ABC, abstractmethod

from classroom_jukebox.domain.voting.entities import BannedTrack


class BannedTrackRepository(ABC):
    """Abstract repository for tracks banned by a passed vote."""

    @abstractmethod
    async def is_banned(self, track_uri: str) -> bool:
        """Check whether a track is banned.

        Args:
            track_uri: The provider URI of the track.

        Returns:
            True if the track is banned.
        """
        ...

    @abstractmethod
    async def ban(self, banned: BannedTrack) -> None:
        """Record a ban. Banning an already banned track refreshes its row.

        Args:
            banned: The ban to store.
        """
        ...

    @abstractmethod
    async def unban(self, track_uri: str) -> bool:
        """Lift a ban.

        Args:
            track_uri: The provider URI of the track.

        Returns:
            True if a ban was removed.
        """
        ...

    @abstractmethod
    async def list_all(self) -> list[BannedTrack]:
        """Return every ban, most recent first."""
        ...
