"""Domain value objects: commands and queries handed to the catalog service."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

GROUP_MIN_LENGTH = 2
GROUP_MAX_LENGTH = 20
TITLE_MIN_LENGTH = 2


class SongField(str, Enum):
    """Logical song field names as used by callers."""

    GROUP = "group"
    TITLE = "title"
    RELEASE_DATE = "releaseDate"
    LYRICS = "lyrics"
    LINK = "link"


# Fields a listing may filter on. Anything else is rejected before a query exists.
FILTERABLE_FIELDS: Final[frozenset[SongField]] = frozenset(
    {SongField.GROUP, SongField.TITLE, SongField.RELEASE_DATE, SongField.LINK}
)

# Fields a partial update may touch, in the order assignments are emitted.
UPDATABLE_FIELDS: Final[tuple[SongField, ...]] = (
    SongField.TITLE,
    SongField.RELEASE_DATE,
    SongField.LYRICS,
    SongField.LINK,
)


class _Unset:
    """Marker type for an update slot that was not supplied."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


def _check_title(title: str) -> None:
    if len(title.strip()) < TITLE_MIN_LENGTH:
        raise ValueError(
            f"The minimum length of the song name is {TITLE_MIN_LENGTH} characters"
        )


@dataclass(frozen=True)
class CreateSong:
    """Command to add a song to the catalog."""

    group: str
    title: str

    def __post_init__(self) -> None:
        """Validate group and title lengths."""
        group_len = len(self.group.strip())
        if group_len < GROUP_MIN_LENGTH:
            raise ValueError(
                f"The minimum length of the group name is {GROUP_MIN_LENGTH} characters"
            )
        if group_len > GROUP_MAX_LENGTH:
            raise ValueError(
                f"The maximum length of the group name is {GROUP_MAX_LENGTH} characters"
            )
        _check_title(self.title)


# Hey future me, SongUpdate is the fix for the old "empty string means don't touch it" bug.
# Every slot defaults to UNSET; a slot holding "" or None was SUPPLIED and will be written.
# Read slots through value_of()/present_fields() - never loop over dataclass fields, the
# service builds the SQL from the static UPDATABLE_FIELDS table, not from introspection.
@dataclass(frozen=True)
class SongUpdate:
    """Sparse update of one song; only supplied slots are written."""

    id: int
    title: str | _Unset = UNSET
    release_date: str | None | _Unset = UNSET
    lyrics: str | None | _Unset = UNSET
    link: str | None | _Unset = UNSET

    def __post_init__(self) -> None:
        """Validate the slots that were supplied."""
        if self.id < 1:
            raise ValueError("Song id must be positive")
        if not isinstance(self.title, _Unset):
            if self.title is None:
                raise ValueError("Song title cannot be null")
            _check_title(self.title)

    def value_of(self, song_field: SongField) -> str | None | _Unset:
        """Return the slot for a logical field (UNSET when not supplied)."""
        if song_field is SongField.TITLE:
            return self.title
        if song_field is SongField.RELEASE_DATE:
            return self.release_date
        if song_field is SongField.LYRICS:
            return self.lyrics
        if song_field is SongField.LINK:
            return self.link
        return UNSET

    def is_set(self, song_field: SongField) -> bool:
        """Check whether a field was supplied."""
        return not isinstance(self.value_of(song_field), _Unset)

    def present_fields(self) -> list[SongField]:
        """Supplied fields in canonical update order."""
        return [f for f in UPDATABLE_FIELDS if self.is_set(f)]

    def is_empty(self) -> bool:
        """True when the update names no field at all."""
        return not self.present_fields()


@dataclass(frozen=True)
class ListSongsQuery:
    """Keyset-paginated listing request.

    Attributes:
        cursor: Id of the last song the caller has seen (exclusive lower bound)
        limit: Maximum number of songs to return
        filter_field: Optional logical field name to filter on (allowlisted by the store)
        filter_value: Exact value the filter field must equal
    """

    cursor: int = 0
    limit: int = 10
    filter_field: str | None = None
    filter_value: str | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate pagination bounds."""
        if self.cursor < 0:
            raise ValueError("Cursor cannot be negative")
        if self.limit < 1:
            raise ValueError("Limit must be positive")
        if self.filter_field is not None and not self.filter_field.strip():
            raise ValueError("Filter field must not be empty")

    def has_filter(self) -> bool:
        """Both a filter field and a filter value were given."""
        return bool(self.filter_field) and bool(self.filter_value)


__all__ = [
    "FILTERABLE_FIELDS",
    "GROUP_MAX_LENGTH",
    "GROUP_MIN_LENGTH",
    "TITLE_MIN_LENGTH",
    "UNSET",
    "UPDATABLE_FIELDS",
    "CreateSong",
    "ListSongsQuery",
    "SongField",
    "SongUpdate",
]
