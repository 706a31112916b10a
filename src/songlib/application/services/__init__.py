"""Application services."""

from songlib.application.services.song_service import (
    FIELD_COLUMNS,
    SongService,
    build_assignments,
)

__all__ = ["FIELD_COLUMNS", "SongService", "build_assignments"]
