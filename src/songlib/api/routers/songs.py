"""Song catalog endpoints."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from songlib.api.dependencies import get_app_settings, get_logger, get_song_service
from songlib.api.schemas import (
    CreateSongRequest,
    CreateSongResponse,
    MessageResponse,
    SongResponse,
    UpdateSongRequest,
    VerseResponse,
)
from songlib.application.services import SongService
from songlib.config import Settings
from songlib.domain.exceptions import ValidationException
from songlib.domain.value_objects import CreateSong, ListSongsQuery, SongUpdate

router = APIRouter()


# Value objects raise ValueError on bad input. Only those are turned into a 400 here;
# a ValueError from anywhere else is a server bug and stays a 500.
@contextmanager
def _invalid_input() -> Iterator[None]:
    try:
        yield
    except ValueError as e:
        raise ValidationException(str(e)) from e


@router.post("/create", response_model=CreateSongResponse)
async def create_song(
    body: CreateSongRequest,
    service: SongService = Depends(get_song_service),
    logger: logging.LoggerAdapter = Depends(get_logger),
) -> CreateSongResponse:
    """Add a song to the catalog.

    The song is enriched with release date, lyrics and link from the metadata
    provider. If the provider is down the song is still added, just without
    those details (unless the strict enrichment policy is configured).

    Args:
        body: Group and song title
        service: Song service
        logger: Request-scoped logger

    Returns:
        Id of the new song
    """
    with _invalid_input():
        command = CreateSong(group=body.group, title=body.song)
    song_id = await service.add_song(command, logger)
    return CreateSongResponse(id=song_id, message="Song added successfully")


# Hey future me, pagination is KEYSET: "cursor" is the last id the client has seen, the
# next page is everything with a bigger id. Old clients send it as "id", so both names are
# accepted. An empty page is a 404 ("no songs found"), that's what clients already expect.
@router.get("/all", response_model=list[SongResponse])
async def list_songs(
    cursor: int | None = Query(
        None, ge=0, description="Last song id already seen (exclusive)"
    ),
    legacy_cursor: int | None = Query(
        None, ge=0, alias="id", description="Deprecated name of cursor"
    ),
    limit: int | None = Query(None, ge=1, description="Maximum number of songs"),
    filter_field: str | None = Query(
        None, alias="filter", description="Field to filter on: group, title, releaseDate, link"
    ),
    filter_value: str | None = Query(
        None, alias="value", description="Exact value of the filter field"
    ),
    service: SongService = Depends(get_song_service),
    settings: Settings = Depends(get_app_settings),
    logger: logging.LoggerAdapter = Depends(get_logger),
) -> list[SongResponse]:
    """List songs page by page, optionally filtered by one field.

    Args:
        cursor: Last song id already seen
        legacy_cursor: Same as cursor (query name "id")
        limit: Page size (defaults to api.default_page_limit)
        filter_field: Field to filter on
        filter_value: Value the field must equal
        service: Song service
        settings: Application settings
        logger: Request-scoped logger

    Returns:
        Songs in ascending id order
    """
    page_limit = limit if limit is not None else settings.api.default_page_limit
    if page_limit > settings.api.max_page_limit:
        raise ValidationException(
            f"Limit must not exceed {settings.api.max_page_limit}, got {page_limit}"
        )

    if cursor is not None:
        start = cursor
    elif legacy_cursor is not None:
        start = legacy_cursor
    else:
        start = 0

    with _invalid_input():
        query = ListSongsQuery(
            cursor=start,
            limit=page_limit,
            filter_field=filter_field,
            filter_value=filter_value,
        )
    songs = await service.list_songs(query, logger)
    if not songs:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No songs found")

    return [SongResponse.from_entity(song) for song in songs]


@router.get("/get/{song_id}", response_model=VerseResponse)
async def get_verse(
    song_id: int = Path(..., description="Song id"),
    verse: int = Query(0, description="0-based verse index"),
    service: SongService = Depends(get_song_service),
    logger: logging.LoggerAdapter = Depends(get_logger),
) -> VerseResponse:
    """Get one verse of a song's lyrics."""
    text = await service.get_verse(song_id, verse, logger)
    return VerseResponse(id=song_id, verse=verse, text=text)


@router.patch("/update/{song_id}", response_model=MessageResponse)
async def update_song(
    body: UpdateSongRequest,
    song_id: int = Path(..., description="Song id"),
    service: SongService = Depends(get_song_service),
    logger: logging.LoggerAdapter = Depends(get_logger),
) -> MessageResponse:
    """Update only the fields present in the request body.

    Args:
        body: Any subset of song, release_date, text, link
        song_id: Song id
        service: Song service
        logger: Request-scoped logger

    Returns:
        Confirmation message
    """
    with _invalid_input():
        update = _to_song_update(song_id, body)
    await service.update_song(update, logger)
    return MessageResponse(message="Song updated successfully")


@router.delete("/delete/{song_id}", response_model=MessageResponse)
async def delete_song(
    song_id: int = Path(..., description="Song id"),
    service: SongService = Depends(get_song_service),
    logger: logging.LoggerAdapter = Depends(get_logger),
) -> MessageResponse:
    """Delete a song."""
    await service.delete_song(song_id, logger)
    return MessageResponse(message="Song deleted successfully")


# Must stay below the literal /all and /get/... routes.
@router.get("/{song_id}", response_model=SongResponse)
async def get_song(
    song_id: int = Path(..., description="Song id"),
    service: SongService = Depends(get_song_service),
    logger: logging.LoggerAdapter = Depends(get_logger),
) -> SongResponse:
    """Get one song."""
    song = await service.get_song(song_id, logger)
    return SongResponse.from_entity(song)


def _to_song_update(song_id: int, body: UpdateSongRequest) -> SongUpdate:
    """Map the fields the client actually sent onto a SongUpdate."""
    supplied = body.model_fields_set
    changes: dict[str, Any] = {}
    if "song" in supplied:
        changes["title"] = body.song
    if "release_date" in supplied:
        changes["release_date"] = body.release_date
    if "text" in supplied:
        changes["lyrics"] = body.text
    if "link" in supplied:
        changes["link"] = body.link
    return SongUpdate(id=song_id, **changes)
