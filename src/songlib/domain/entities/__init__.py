"""Domain entities."""

from dataclasses import dataclass
from enum import Enum

# Blank line between verses. Stored lyrics carry no other structure.
VERSE_DELIMITER = "\n\n"


# Hey future me, this is the availability trade-off made explicit: with NON_BLOCKING a
# broken/slow metadata provider never stops a song from being created, it just arrives
# without release date/lyrics/link. STRICT exists for deployments that would rather
# fail the request. NON_BLOCKING is the default - don't flip it without a reason!
class EnrichmentFailurePolicy(str, Enum):
    """What song creation does when the metadata provider fails."""

    NON_BLOCKING = "non_blocking"
    STRICT = "strict"


@dataclass(frozen=True)
class SongDetail:
    """Enrichment data returned by the metadata provider."""

    release_date: str = ""
    lyrics: str = ""
    link: str = ""

    @classmethod
    def empty(cls) -> "SongDetail":
        """Detail used when enrichment failed."""
        return cls()


@dataclass
class Song:
    """Song entity as stored in the catalog."""

    id: int
    group: str
    title: str
    release_date: str | None = None
    lyrics: str | None = None
    link: str | None = None

    def verses(self) -> list[str]:
        """Split lyrics into verses."""
        return split_verses(self.lyrics)


def split_verses(lyrics: str | None) -> list[str]:
    """Split lyrics text into an ordered, 0-indexed list of verses.

    Empty or missing lyrics have no verses at all (rather than one empty verse).
    """
    if not lyrics:
        return []
    return lyrics.split(VERSE_DELIMITER)


__all__ = [
    "VERSE_DELIMITER",
    "EnrichmentFailurePolicy",
    "Song",
    "SongDetail",
    "split_verses",
]
