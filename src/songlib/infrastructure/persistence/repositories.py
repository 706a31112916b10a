"""Repository implementation for the song catalog."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, delete, select, text
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from songlib.domain.entities import Song, SongDetail
from songlib.domain.exceptions import (
    EntityNotFoundException,
    InternalError,
    TransactionFailedError,
    ValidationException,
)
from songlib.domain.ports import ISongRepository, RequestLogger, SongAssignments
from songlib.domain.value_objects import SongField

from .database import Database
from .models import GroupSongModel, MusicGroupModel, SongModel

# Hey future me, this is the filter ALLOWLIST. Callers name a logical field ("group",
# "releaseDate", ...); we map it to a real column object here. A name that isn't a key is
# rejected with ValidationException before any SQL exists - the caller's string is never
# pasted into a query.
FILTER_COLUMNS: dict[str, ColumnElement[Any]] = {
    SongField.GROUP.value: MusicGroupModel.name,
    SongField.TITLE.value: SongModel.song_name,
    SongField.RELEASE_DATE.value: SongModel.release_date,
    SongField.LINK.value: SongModel.link,
}

# Physical columns a sparse UPDATE may name.
UPDATABLE_COLUMNS: frozenset[str] = frozenset(
    {"song_name", "release_date", "lyrics", "link"}
)


def _song_select() -> Select[Any]:
    """SELECT of full song rows with their group name."""
    return (
        select(
            SongModel.id,
            MusicGroupModel.name.label("group_name"),
            SongModel.song_name,
            SongModel.release_date,
            SongModel.lyrics,
            SongModel.link,
        )
        .select_from(SongModel)
        .join(GroupSongModel, GroupSongModel.song_id == SongModel.id)
        .join(MusicGroupModel, MusicGroupModel.id == GroupSongModel.group_id)
    )


# Backends whose dialect offers INSERT ... ON CONFLICT DO NOTHING.
_CONFLICT_INSERTS = {"postgresql": postgresql_insert, "sqlite": sqlite_insert}


def _group_insert(backend: str) -> Any:
    try:
        dialect_insert = _CONFLICT_INSERTS[backend]
    except KeyError:
        raise InternalError(f"Unsupported database backend '{backend}'") from None
    return dialect_insert(MusicGroupModel)


async def _group_id(session: AsyncSession, name: str) -> int | None:
    result = await session.execute(
        select(MusicGroupModel.id).where(MusicGroupModel.name == name)
    )
    group_id = result.scalar_one_or_none()
    return int(group_id) if group_id is not None else None


def _row_to_entity(row: Any) -> Song:
    return Song(
        id=row.id,
        group=row.group_name,
        title=row.song_name,
        release_date=row.release_date,
        lyrics=row.lyrics,
        link=row.link,
    )


class SongRepository(ISongRepository):
    """SQLAlchemy implementation of the song catalog store."""

    # Unlike a per-request-session repository, this one borrows a session from the pool
    # for each call (Database.session_scope) so every method is its own unit of work and
    # the create transaction owns its connection from the group lookup to the commit.
    def __init__(self, database: Database) -> None:
        """Initialize repository with the database session manager."""
        self._database = database

    def check_filter_field(self, filter_field: str) -> None:
        """Reject filter fields outside the allowlist."""
        if filter_field not in FILTER_COLUMNS:
            allowed = ", ".join(sorted(FILTER_COLUMNS))
            raise ValidationException(
                f"Invalid filter field '{filter_field}'. Allowed: {allowed}"
            )

    async def create_song(
        self, group: str, title: str, detail: SongDetail, logger: RequestLogger
    ) -> int:
        """Ensure the group exists, insert the song and link them in one transaction.

        Raises:
            TransactionFailedError: Any step failed; nothing was written
        """
        logger.debug("store: create song '%s' for group '%s'", title, group)
        try:
            async with self._database.session_scope() as session:
                group_id = await self._ensure_group(session, group)

                song = SongModel(
                    song_name=title,
                    release_date=detail.release_date or None,
                    lyrics=detail.lyrics or None,
                    link=detail.link or None,
                )
                session.add(song)
                await session.flush()

                await self._link_group(session, group_id, song.id)
                song_id = song.id
        except SQLAlchemyError as e:
            logger.error(
                "store: create song transaction rolled back: %s",
                e,
                extra={"group": group, "title": title},
            )
            raise TransactionFailedError("Failed to create song") from e

        logger.debug("store: created song %d", song_id)
        return song_id

    # Listen future me, two requests can create songs for the same NEW group at once. Both
    # miss on the first lookup; a plain INSERT would then fail the second one on the unique
    # name. ON CONFLICT DO NOTHING lets the loser skip the insert and pick up the winner's id.
    async def _ensure_group(self, session: AsyncSession, name: str) -> int:
        """Return the id of the group, inserting it when missing."""
        group_id = await _group_id(session, name)
        if group_id is not None:
            return group_id

        await session.execute(
            _group_insert(self._database.backend)
            .values(name=name)
            .on_conflict_do_nothing(index_elements=[MusicGroupModel.name])
        )
        group_id = await _group_id(session, name)
        if group_id is None:
            raise InternalError(f"Group '{name}' missing right after insert")
        return group_id

    async def _link_group(self, session: AsyncSession, group_id: int, song_id: int) -> None:
        """Insert the group↔song junction row."""
        session.add(GroupSongModel(group_id=group_id, song_id=song_id))
        await session.flush()

    async def get_song(self, song_id: int, logger: RequestLogger) -> Song | None:
        """Get a song by id."""
        logger.debug("store: get song %d", song_id)
        stmt = _song_select().where(SongModel.id == song_id)
        rows = await self._fetch(stmt, logger, "get song")
        return _row_to_entity(rows[0]) if rows else None

    async def list_songs(
        self, cursor: int, limit: int, logger: RequestLogger
    ) -> list[Song]:
        """List songs with id > cursor in ascending id order."""
        logger.debug("store: list songs after id %d, limit %d", cursor, limit)
        stmt = (
            _song_select()
            .where(SongModel.id > cursor)
            .order_by(SongModel.id)
            .limit(limit)
        )
        rows = await self._fetch(stmt, logger, "list songs")
        return [_row_to_entity(row) for row in rows]

    async def list_songs_filtered(
        self,
        cursor: int,
        limit: int,
        filter_field: str,
        filter_value: str,
        logger: RequestLogger,
    ) -> list[Song]:
        """List songs with id > cursor whose filter column equals filter_value."""
        self.check_filter_field(filter_field)
        column = FILTER_COLUMNS[filter_field]

        logger.debug(
            "store: list songs after id %d, limit %d, where %s = %r",
            cursor,
            limit,
            filter_field,
            filter_value,
        )
        stmt = (
            _song_select()
            .where(column == filter_value, SongModel.id > cursor)
            .order_by(SongModel.id)
            .limit(limit)
        )
        rows = await self._fetch(stmt, logger, "list filtered songs")
        return [_row_to_entity(row) for row in rows]

    async def get_lyrics(self, song_id: int, logger: RequestLogger) -> str | None:
        """Get the lyrics text of a song."""
        logger.debug("store: get lyrics of song %d", song_id)
        stmt = select(SongModel.id, SongModel.lyrics).where(SongModel.id == song_id)
        rows = await self._fetch(stmt, logger, "get lyrics")
        if not rows:
            raise EntityNotFoundException("Song", song_id)
        return rows[0].lyrics

    # Hey future me, the column NAMES come from the service's static field→column table and
    # are re-checked against UPDATABLE_COLUMNS here; every VALUE is a :pN bind parameter.
    # p1 is the id. The rowcount check is the whole "exactly one row" contract: 0 means the
    # id doesn't exist, >1 can't happen with a primary key so it's treated as corruption
    # (InternalError raised inside the scope, so the update is rolled back).
    async def update_song(
        self, assignments: SongAssignments, logger: RequestLogger
    ) -> None:
        """Execute one sparse UPDATE by id."""
        unknown = [c for c in assignments.columns if c not in UPDATABLE_COLUMNS]
        if unknown or not assignments.columns:
            raise ValidationException(f"Invalid update columns: {unknown or 'none'}")

        set_clause = ", ".join(
            f"{column} = :{placeholder}"
            for column, placeholder in zip(
                assignments.columns, assignments.placeholders(), strict=True
            )
        )
        stmt = text(
            f"UPDATE songs SET {set_clause} WHERE id = :{assignments.id_placeholder()}"
        )
        logger.debug(
            "store: update song %d set %s", assignments.song_id, set_clause
        )

        try:
            async with self._database.session_scope() as session:
                result = await session.execute(stmt, dict(assignments.params))
                affected = result.rowcount  # type: ignore[attr-defined]
                if affected == 0:
                    raise EntityNotFoundException("Song", assignments.song_id)
                if affected != 1:
                    raise InternalError(
                        f"Update of song {assignments.song_id} affected {affected} rows"
                    )
        except SQLAlchemyError as e:
            logger.error("store: update song %d failed: %s", assignments.song_id, e)
            raise InternalError(f"Failed to update song {assignments.song_id}") from e

    async def delete_song(self, song_id: int, logger: RequestLogger) -> None:
        """Delete a song and its group link."""
        logger.debug("store: delete song %d", song_id)
        try:
            async with self._database.session_scope() as session:
                await session.execute(
                    delete(GroupSongModel).where(GroupSongModel.song_id == song_id)
                )
                result = await session.execute(
                    delete(SongModel).where(SongModel.id == song_id)
                )
                affected = result.rowcount  # type: ignore[attr-defined]
                if affected == 0:
                    raise EntityNotFoundException("Song", song_id)
                if affected != 1:
                    raise InternalError(f"Delete of song {song_id} affected {affected} rows")
        except SQLAlchemyError as e:
            logger.error("store: delete song %d failed: %s", song_id, e)
            raise InternalError(f"Failed to delete song {song_id}") from e

    async def _fetch(
        self, stmt: Any, logger: RequestLogger, operation: str
    ) -> list[Any]:
        """Run a read-only statement and return all rows."""
        try:
            async with self._database.session_scope() as session:
                result = await session.execute(stmt)
                return list(result.all())
        except SQLAlchemyError as e:
            logger.error("store: %s failed: %s", operation, e)
            raise InternalError(f"Failed to {operation}") from e
