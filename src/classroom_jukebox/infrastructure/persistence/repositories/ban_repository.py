"""SQLite implementation of the banned track repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from classroom_jukebox.domain.shared.datetime_utils import UtcDateTime
from classroom_jukebox.domain.shared.messages import LogTemplates
from classroom_jukebox.domain.voting.entities import BannedTrack
from classroom_jukebox.domain.voting.repository import BannedTrackRepository

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLiteBannedTrackRepository(BannedTrackRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def is_banned(self, track_uri: str) -> bool:
        row = await self._db.fetch_one(
            "SELECT 1 AS banned FROM banned_tracks WHERE track_uri = ?",
            (track_uri,),
        )
        return row is not None

    async def ban(self, banned: BannedTrack) -> None:
        await self._db.execute(
            """
            INSERT INTO banned_tracks (
                track_uri, track_name, track_artist, banned_at, yes_votes, no_votes
            ) VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(track_uri) DO UPDATE SET
                track_name = excluded.track_name,
                track_artist = excluded.track_artist,
                banned_at = excluded.banned_at,
                yes_votes = excluded.yes_votes,
                no_votes = excluded.no_votes
            """,
            (
                banned.track_uri,
                banned.track_name,
                banned.track_artist,
                UtcDateTime(banned.banned_at).iso,
                banned.yes_votes,
                banned.no_votes,
            ),
        )
        logger.info(LogTemplates.TRACK_BANNED, banned.track_uri, banned.track_name)

    async def unban(self, track_uri: str) -> bool:
        cursor = await self._db.execute(
            "DELETE FROM banned_tracks WHERE track_uri = ?",
            (track_uri,),
        )
        removed = cursor.rowcount > 0
        if removed:
            logger.info(LogTemplates.TRACK_UNBANNED, track_uri)
        return removed

    async def list_all(self) -> list[BannedTrack]:
        rows = await self._db.fetch_all("SELECT * FROM banned_tracks ORDER BY banned_at DESC")
        return [self._row_to_banned(row) for row in rows]

    def _row_to_banned(self, row: dict[str, Any]) -> BannedTrack:
        return BannedTrack(
            track_uri=row["track_uri"],
            track_name=row["track_name"],
            track_artist=row["track_artist"],
            banned_at=UtcDateTime.from_iso(row["banned_at"]).dt,
            yes_votes=row["yes_votes"],
            no_votes=row["no_votes"],
        )
