"""
Queue Domain Repository Interfaces

Abstract base classes defining the contracts for queue metadata persistence.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from datetime import datetime

from classroom_jukebox.domain.queue.entities import MetadataEntry


class MetadataRepository(ABC):
    """Abstract repository for per-enqueue track metadata.

    Rows are keyed by ``(track_uri, added_at)``. Several rows may share a
    URI; lookups always return them oldest first.
    """

    @abstractmethod
    async def find_by_uris(self, uris: Iterable[str]) -> list[MetadataEntry]:
        """Fetch every row whose URI is in ``uris``.

        Args:
            uris: Track URIs to look up. Duplicates are ignored.

        Returns:
            Matching rows ordered by ``added_at`` ascending.
        """
        ...

    @abstractmethod
    async def insert(self, entry: MetadataEntry) -> None:
        """Persist a new row.

        Args:
            entry: The metadata entry to store.
        """
        ...

    @abstractmethod
    async def delete(self, track_uri: str, added_at: datetime) -> bool:
        """Delete one specific row.

        Args:
            track_uri: URI of the row.
            added_at: Insertion time of the row.

        Returns:
            True if a row was deleted.
        """
        ...

    @abstractmethod
    async def apply_changes(
        self,
        *,
        insert: Sequence[MetadataEntry] = (),
        delete: Sequence[MetadataEntry] = (),
    ) -> None:
        """Insert and delete rows together: either every change is stored or none.

        Args:
            insert: New rows to persist.
            delete: Rows to remove, matched by ``(track_uri, added_at)``.
        """
        ...

    @abstractmethod
    async def delete_oldest(self, track_uri: str) -> bool:
        """Delete the oldest row for a URI.

        Args:
            track_uri: URI whose oldest row should be retired.

        Returns:
            True if a row was deleted.
        """
        ...

    @abstractmethod
    async def increment_shield(
        self, track_uri: str, added_at: datetime | None = None
    ) -> MetadataEntry | None:
        """Add one skip shield to a row.

        Args:
            track_uri: URI of the row.
            added_at: Insertion time of the row; the oldest row when omitted.

        Returns:
            The updated entry, or None if no row matched.
        """
        ...

    @abstractmethod
    async def decrement_shield(self, track_uri: str, added_at: datetime) -> MetadataEntry | None:
        """Consume one skip shield from a row. Never drops below zero.

        Args:
            track_uri: URI of the row.
            added_at: Insertion time of the row.

        Returns:
            The updated entry, or None if no row matched.
        """
        ...

    @abstractmethod
    async def count(self) -> int:
        """Return the total number of stored rows."""
        ...
