"""Persistence layer: engine/session management, ORM models and the song repository."""

from songlib.infrastructure.persistence.database import Database
from songlib.infrastructure.persistence.models import (
    Base,
    GroupSongModel,
    MusicGroupModel,
    SongModel,
)
from songlib.infrastructure.persistence.repositories import SongRepository

__all__ = [
    "Base",
    "Database",
    "GroupSongModel",
    "MusicGroupModel",
    "SongModel",
    "SongRepository",
]
