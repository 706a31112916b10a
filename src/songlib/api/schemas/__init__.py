"""API request/response schemas."""

from songlib.api.schemas.songs import (
    CreateSongRequest,
    CreateSongResponse,
    MessageResponse,
    SongResponse,
    UpdateSongRequest,
    VerseResponse,
)

__all__ = [
    "CreateSongRequest",
    "CreateSongResponse",
    "MessageResponse",
    "SongResponse",
    "UpdateSongRequest",
    "VerseResponse",
]
