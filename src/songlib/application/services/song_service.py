"""Song catalog service - create, list, read, update and delete songs.

Hey future me - this is THE entry point for every catalog operation. The HTTP layer
turns requests into value objects (CreateSong, ListSongsQuery, SongUpdate) and calls
in here; everything below is ports (ISongRepository, IMusicInfoClient), so the service
never sees SQLAlchemy or httpx directly.

Every public method takes a ``logger`` argument. Pass the request adapter from
``get_request_logger()`` so the correlation id follows the call into the store.
"""

from songlib.domain.entities import (
    EnrichmentFailurePolicy,
    Song,
    SongDetail,
    split_verses,
)
from songlib.domain.exceptions import (
    EntityNotFoundException,
    ExternalServiceError,
    ValidationException,
)
from songlib.domain.ports import (
    IMusicInfoClient,
    ISongRepository,
    RequestLogger,
    SongAssignments,
)
from songlib.domain.value_objects import (
    UNSET,
    CreateSong,
    ListSongsQuery,
    SongField,
    SongUpdate,
)

# Logical field → physical column of the songs table. Hand-written and static: update
# SQL is built only from these values, never from the names of whatever object came in.
FIELD_COLUMNS: dict[SongField, str] = {
    SongField.TITLE: "song_name",
    SongField.RELEASE_DATE: "release_date",
}


def column_for(song_field: SongField) -> str:
    """Physical column of an updatable field (lowercased logical name when unmapped)."""
    return FIELD_COLUMNS.get(song_field, song_field.value.lower())


def build_assignments(update: SongUpdate) -> SongAssignments:
    """Turn a sparse update into ordered ``column = :pN`` assignments.

    Placeholder ``p1`` holds the id, the i-th present field is bound to
    ``p{i + 2}``.

    Args:
        update: The sparse update

    Returns:
        Column names plus bound parameters for one UPDATE statement
    """
    columns: list[str] = []
    params: dict[str, object] = {SongAssignments.id_placeholder(): update.id}

    for position, song_field in enumerate(update.present_fields(), start=2):
        value = update.value_of(song_field)
        # present_fields() only yields supplied slots
        assert value is not UNSET
        columns.append(column_for(song_field))
        params[f"p{position}"] = value

    return SongAssignments(song_id=update.id, columns=tuple(columns), params=params)


class SongService:
    """Catalog operations over a song repository and a metadata provider."""

    def __init__(
        self,
        repository: ISongRepository,
        music_info_client: IMusicInfoClient,
        enrichment_policy: EnrichmentFailurePolicy = EnrichmentFailurePolicy.NON_BLOCKING,
    ) -> None:
        """Initialize service.

        Args:
            repository: Song store
            music_info_client: External metadata provider
            enrichment_policy: What add_song does when the provider fails
        """
        self._repository = repository
        self._music_info = music_info_client
        self._enrichment_policy = enrichment_policy

    # =========================================================================
    # CREATE
    # =========================================================================

    async def add_song(self, command: CreateSong, logger: RequestLogger) -> int:
        """Enrich and store a new song.

        Args:
            command: Validated group and title
            logger: Request-scoped logger

        Returns:
            Id of the new song

        Raises:
            ExternalServiceError: Provider failed and the policy is STRICT
            TransactionFailedError: The store could not commit the song
        """
        logger.info("adding song '%s' by '%s'", command.title, command.group)

        detail = await self._enrich(command, logger)
        song_id = await self._repository.create_song(
            command.group, command.title, detail, logger
        )

        logger.info("song %d added", song_id)
        return song_id

    # Yo, this is where NON_BLOCKING lives. A dead provider must never cost us the song:
    # log it, go on with SongDetail.empty(). Only ExternalServiceError is absorbed -
    # CancelledError and friends still propagate so a dropped request stops here.
    async def _enrich(self, command: CreateSong, logger: RequestLogger) -> SongDetail:
        try:
            return await self._music_info.fetch(command.group, command.title, logger)
        except ExternalServiceError as e:
            if self._enrichment_policy is EnrichmentFailurePolicy.STRICT:
                logger.error(
                    "enrichment failed for '%s' by '%s': %s",
                    command.title,
                    command.group,
                    e.message,
                )
                raise
            logger.warning(
                "enrichment failed for '%s' by '%s', storing without details: %s",
                command.title,
                command.group,
                e.message,
                extra={"error_type": type(e).__name__},
            )
            return SongDetail.empty()

    # =========================================================================
    # READ
    # =========================================================================

    async def list_songs(self, query: ListSongsQuery, logger: RequestLogger) -> list[Song]:
        """List songs after the cursor, optionally filtered by one field.

        Args:
            query: Cursor, limit and optional filter
            logger: Request-scoped logger

        Returns:
            Songs in ascending id order (possibly empty)

        Raises:
            ValidationException: Filter field is not allowed
        """
        if query.filter_field is not None:
            self._repository.check_filter_field(query.filter_field)

        if query.has_filter():
            assert query.filter_field is not None and query.filter_value is not None
            songs = await self._repository.list_songs_filtered(
                query.cursor,
                query.limit,
                query.filter_field,
                query.filter_value,
                logger,
            )
        else:
            songs = await self._repository.list_songs(query.cursor, query.limit, logger)

        logger.debug("listed %d songs after id %d", len(songs), query.cursor)
        return songs

    async def get_song(self, song_id: int, logger: RequestLogger) -> Song:
        """Get one song by id."""
        self._check_id(song_id)
        song = await self._repository.get_song(song_id, logger)
        if song is None:
            raise EntityNotFoundException("Song", song_id)
        return song

    async def get_verse(self, song_id: int, verse: int, logger: RequestLogger) -> str:
        """Get one verse of a song's lyrics.

        Args:
            song_id: Song id
            verse: 0-based verse index
            logger: Request-scoped logger

        Returns:
            The verse text

        Raises:
            ValidationException: Index outside the song's verses
            EntityNotFoundException: No such song
        """
        self._check_id(song_id)
        if verse < 0:
            raise ValidationException(f"Verse index must not be negative, got {verse}")

        lyrics = await self._repository.get_lyrics(song_id, logger)
        verses = split_verses(lyrics)

        if verse >= len(verses):
            raise ValidationException(
                f"Verse {verse} out of range: song {song_id} has {len(verses)} verses"
            )
        return verses[verse]

    # =========================================================================
    # UPDATE / DELETE
    # =========================================================================

    async def update_song(self, update: SongUpdate, logger: RequestLogger) -> None:
        """Apply a sparse update to one song.

        Raises:
            ValidationException: The update names no field
            EntityNotFoundException: No such song
            InternalError: More than one row was affected
        """
        if update.is_empty():
            raise ValidationException("Nothing to update: no fields supplied")

        assignments = build_assignments(update)
        logger.info(
            "updating song %d (%s)",
            update.id,
            ", ".join(f.value for f in update.present_fields()),
        )
        await self._repository.update_song(assignments, logger)

    async def delete_song(self, song_id: int, logger: RequestLogger) -> None:
        """Delete one song.

        Raises:
            EntityNotFoundException: No such song
        """
        self._check_id(song_id)
        logger.info("deleting song %d", song_id)
        await self._repository.delete_song(song_id, logger)

    @staticmethod
    def _check_id(song_id: int) -> None:
        if song_id < 1:
            raise ValidationException(f"Song id must be positive, got {song_id}")
