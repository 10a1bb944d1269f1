"""SQLite implementation of the queue metadata repository."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any

from classroom_jukebox.domain.queue.entities import MetadataEntry
from classroom_jukebox.domain.queue.repository import MetadataRepository
from classroom_jukebox.domain.shared.datetime_utils import UtcDateTime
from classroom_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    import aiosqlite

    from ..database import Database

logger = logging.getLogger(__name__)


class SQLiteMetadataRepository(MetadataRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def find_by_uris(self, uris: Iterable[str]) -> list[MetadataEntry]:
        unique = list(dict.fromkeys(uris))
        if not unique:
            return []

        placeholders = ", ".join("?" for _ in unique)
        rows = await self._db.fetch_all(
            f"""
            SELECT * FROM track_metadata
            WHERE track_uri IN ({placeholders})
            ORDER BY added_at ASC, id ASC
            """,  # noqa: S608
            tuple(unique),
        )
        return [self._row_to_entry(row) for row in rows]

    async def insert(self, entry: MetadataEntry) -> None:
        async with self._db.transaction() as conn:
            await self._insert_row(conn, entry)

    async def delete(self, track_uri: str, added_at: datetime) -> bool:
        async with self._db.transaction() as conn:
            return await self._delete_row(conn, track_uri, added_at)

    async def apply_changes(
        self,
        *,
        insert: Sequence[MetadataEntry] = (),
        delete: Sequence[MetadataEntry] = (),
    ) -> None:
        async with self._db.transaction() as conn:
            for entry in insert:
                await self._insert_row(conn, entry)
            for entry in delete:
                await self._delete_row(conn, entry.track_uri, entry.added_at)

    async def delete_oldest(self, track_uri: str) -> bool:
        cursor = await self._db.execute(
            """
            DELETE FROM track_metadata
            WHERE id = (
                SELECT id FROM track_metadata
                WHERE track_uri = ?
                ORDER BY added_at ASC, id ASC
                LIMIT 1
            )
            """,
            (track_uri,),
        )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.debug(LogTemplates.METADATA_RETIRED, track_uri)
        return deleted

    async def increment_shield(
        self, track_uri: str, added_at: datetime | None = None
    ) -> MetadataEntry | None:
        async with self._db.transaction() as conn:
            row = await self._select_target(conn, track_uri, added_at)
            if row is None:
                return None
            await conn.execute(
                "UPDATE track_metadata SET shield_count = shield_count + 1 WHERE id = ?",
                (row["id"],),
            )
            entry = self._row_to_entry(row)
            updated = entry.with_shield_count(entry.shield_count + 1)

        logger.debug(
            LogTemplates.METADATA_SHIELD_CHANGED,
            track_uri,
            UtcDateTime(updated.added_at).iso,
            updated.shield_count,
        )
        return updated

    async def decrement_shield(self, track_uri: str, added_at: datetime) -> MetadataEntry | None:
        async with self._db.transaction() as conn:
            row = await self._select_target(conn, track_uri, added_at)
            if row is None:
                return None
            await conn.execute(
                "UPDATE track_metadata SET shield_count = MAX(shield_count - 1, 0) WHERE id = ?",
                (row["id"],),
            )
            entry = self._row_to_entry(row)
            updated = entry.with_shield_count(max(entry.shield_count - 1, 0))

        logger.debug(
            LogTemplates.METADATA_SHIELD_CHANGED,
            track_uri,
            UtcDateTime(updated.added_at).iso,
            updated.shield_count,
        )
        return updated

    async def count(self) -> int:
        row = await self._db.fetch_one("SELECT COUNT(*) as count FROM track_metadata")
        return row["count"] if row else 0

    async def _insert_row(self, conn: aiosqlite.Connection, entry: MetadataEntry) -> None:
        await conn.execute(
            """
            INSERT INTO track_metadata (track_uri, added_at, added_by, is_anonymous, shield_count)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                entry.track_uri,
                UtcDateTime(entry.added_at).iso,
                entry.added_by,
                int(entry.is_anonymous),
                entry.shield_count,
            ),
        )
        logger.debug(
            LogTemplates.METADATA_INSERTED,
            entry.track_uri,
            entry.added_by,
            UtcDateTime(entry.added_at).iso,
        )

    async def _delete_row(
        self, conn: aiosqlite.Connection, track_uri: str, added_at: datetime
    ) -> bool:
        cursor = await conn.execute(
            "DELETE FROM track_metadata WHERE track_uri = ? AND added_at = ?",
            (track_uri, UtcDateTime(added_at).iso),
        )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.debug(LogTemplates.METADATA_DELETED, track_uri, UtcDateTime(added_at).iso)
        return deleted

    async def _select_target(
        self, conn: aiosqlite.Connection, track_uri: str, added_at: datetime | None
    ) -> Any:
        if added_at is None:
            cursor = await conn.execute(
                """
                SELECT * FROM track_metadata
                WHERE track_uri = ?
                ORDER BY added_at ASC, id ASC
                LIMIT 1
                """,
                (track_uri,),
            )
        else:
            cursor = await conn.execute(
                "SELECT * FROM track_metadata WHERE track_uri = ? AND added_at = ?",
                (track_uri, UtcDateTime(added_at).iso),
            )
        return await cursor.fetchone()

    def _row_to_entry(self, row: Any) -> MetadataEntry:
        return MetadataEntry(
            track_uri=row["track_uri"],
            added_at=UtcDateTime.from_iso(row["added_at"]).dt,
            added_by=row["added_by"],
            is_anonymous=bool(row["is_anonymous"]),
            shield_count=row["shield_count"],
        )
