"""SQLAlchemy ORM models for songlib."""

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models.

    All models inherit from this to use the same metadata registry.
    """

    pass


# Hey future me, the group name is NOT a column on songs - groups are normalized into
# music_group and linked through group_song. That's why creating a song is a 3-statement
# transaction (ensure group, insert song, insert link) and why every song read joins.
class SongModel(Base):
    """A song row. Lyrics verses are separated by a blank line inside ``lyrics``."""

    __tablename__ = "songs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    song_name: Mapped[str] = mapped_column(String(255), nullable=False)
    release_date: Mapped[str | None] = mapped_column(String(32), nullable=True)
    lyrics: Mapped[str | None] = mapped_column(Text, nullable=True)
    link: Mapped[str | None] = mapped_column(String(512), nullable=True)


class MusicGroupModel(Base):
    """A band/artist; names are unique."""

    __tablename__ = "music_group"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)


class GroupSongModel(Base):
    """Junction row linking a group to one of its songs."""

    __tablename__ = "group_song"

    group_id: Mapped[int] = mapped_column(
        ForeignKey("music_group.id", ondelete="CASCADE"), primary_key=True
    )
    song_id: Mapped[int] = mapped_column(
        ForeignKey("songs.id", ondelete="CASCADE"), primary_key=True, index=True
    )
