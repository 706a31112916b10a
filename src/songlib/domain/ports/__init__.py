"""Domain ports (interfaces) for the catalog.

The service depends on these contracts only; the SQLAlchemy repository and the
httpx metadata client are the production implementations.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from songlib.domain.entities import Song, SongDetail

# Core operations take their logger as an argument instead of reading a module global.
RequestLogger = logging.Logger | logging.LoggerAdapter


@dataclass(frozen=True)
class SongAssignments:
    """Column assignments for one sparse UPDATE statement.

    ``columns[i]`` is bound to placeholder ``p{i + 2}``; ``p1`` is always the
    song id. ``params`` holds every bound value keyed by placeholder name.
    """

    song_id: int
    columns: tuple[str, ...]
    params: Mapping[str, Any] = field(default_factory=dict)

    @staticmethod
    def id_placeholder() -> str:
        """Name of the placeholder holding the song id."""
        return "p1"

    def placeholders(self) -> list[str]:
        """Placeholder names in column order."""
        return [f"p{i}" for i in range(2, len(self.columns) + 2)]


class ISongRepository(ABC):
    """Repository interface for the song catalog."""

    @abstractmethod
    async def create_song(
        self, group: str, title: str, detail: SongDetail, logger: RequestLogger
    ) -> int:
        """Atomically ensure the group, insert the song and link them.

        Returns:
            The new song id
        """
        pass

    @abstractmethod
    async def get_song(self, song_id: int, logger: RequestLogger) -> Song | None:
        """Get a song by id."""
        pass

    @abstractmethod
    async def list_songs(
        self, cursor: int, limit: int, logger: RequestLogger
    ) -> list[Song]:
        """List songs with id > cursor, ascending, at most limit."""
        pass

    @abstractmethod
    async def list_songs_filtered(
        self,
        cursor: int,
        limit: int,
        filter_field: str,
        filter_value: str,
        logger: RequestLogger,
    ) -> list[Song]:
        """Same as list_songs, restricted to rows where filter_field == filter_value."""
        pass

    @abstractmethod
    def check_filter_field(self, filter_field: str) -> None:
        """Reject filter fields outside the allowlist (raises ValidationException)."""
        pass

    @abstractmethod
    async def get_lyrics(self, song_id: int, logger: RequestLogger) -> str | None:
        """Get the stored lyrics text (raises EntityNotFoundException)."""
        pass

    @abstractmethod
    async def update_song(
        self, assignments: SongAssignments, logger: RequestLogger
    ) -> None:
        """Execute one sparse UPDATE (raises EntityNotFoundException on 0 rows)."""
        pass

    @abstractmethod
    async def delete_song(self, song_id: int, logger: RequestLogger) -> None:
        """Delete one song (raises EntityNotFoundException on 0 rows)."""
        pass


class IMusicInfoClient(ABC):
    """Port for the external song metadata provider."""

    @abstractmethod
    async def fetch(self, group: str, title: str, logger: RequestLogger) -> SongDetail:
        """
        Fetch enrichment data for a song.

        Args:
            group: Band/artist name
            title: Song title
            logger: Request-scoped logger

        Returns:
            Release date, lyrics and link (possibly empty strings)

        Raises:
            ProviderUnavailableError: Transport failure or timeout
            ProviderBadResponseError: Non-2xx status or unparsable body
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        pass


__all__ = [
    "IMusicInfoClient",
    "ISongRepository",
    "RequestLogger",
    "SongAssignments",
]
