"""SQLite repository implementations."""

from classroom_jukebox.infrastructure.persistence.repositories.ban_repository import (
    SQLiteBannedTrackRepository,
)
from classroom_jukebox.infrastructure.persistence.repositories.metadata_repository import (
    SQLiteMetadataRepository,
)

__all__ = [
    "SQLiteMetadataRepository",
    "SQLiteBannedTrackRepository",
]
