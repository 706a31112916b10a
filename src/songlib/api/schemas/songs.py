"""API schemas for the song catalog."""

from pydantic import BaseModel, Field

from songlib.domain.entities import Song
from songlib.domain.value_objects import (
    GROUP_MAX_LENGTH,
    GROUP_MIN_LENGTH,
    TITLE_MIN_LENGTH,
)


class CreateSongRequest(BaseModel):
    """Request schema for adding a song."""

    group: str = Field(
        ...,
        min_length=GROUP_MIN_LENGTH,
        max_length=GROUP_MAX_LENGTH,
        description="Band or artist name",
    )
    song: str = Field(..., min_length=TITLE_MIN_LENGTH, description="Song title")


class CreateSongResponse(BaseModel):
    """Response schema for an added song."""

    id: int = Field(..., description="Id of the new song")
    message: str


# Hey future me, every field here is optional and the ROUTER looks at model_fields_set to
# see which ones the client actually sent. {"link": ""} clears the link, {"link": null}
# nulls it, and leaving "link" out doesn't touch it. Don't add defaults that aren't None!
class UpdateSongRequest(BaseModel):
    """Request schema for a partial song update."""

    song: str | None = Field(
        default=None, min_length=TITLE_MIN_LENGTH, description="New song title"
    )
    release_date: str | None = Field(default=None, description="Release date")
    text: str | None = Field(
        default=None, description="Lyrics, verses separated by a blank line"
    )
    link: str | None = Field(default=None, description="Link to the song")


class SongResponse(BaseModel):
    """A catalog song."""

    id: int
    group: str
    song: str
    release_date: str | None = None
    text: str | None = None
    link: str | None = None

    @classmethod
    def from_entity(cls, song: Song) -> "SongResponse":
        """Build the response from a Song entity."""
        return cls(
            id=song.id,
            group=song.group,
            song=song.title,
            release_date=song.release_date,
            text=song.lyrics,
            link=song.link,
        )


class VerseResponse(BaseModel):
    """One verse of a song's lyrics."""

    id: int
    verse: int = Field(..., description="0-based verse index")
    text: str


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str
