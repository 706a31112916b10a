"""Create song catalog tables.

Hey future me - the group name lives in music_group, NOT on songs. group_song links
the two; both foreign keys cascade so deleting a song or a group drops its links.

Tables:
- songs: id, song_name, release_date, lyrics, link
- music_group: id, name (unique)
- group_song: (group_id, song_id) junction

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from typing import Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, tuple[str, ...], None] = None
depends_on: Union[str, tuple[str, ...], None] = None


def upgrade() -> None:
    """Create songs, music_group and group_song."""
    op.create_table(
        "songs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("song_name", sa.String(length=255), nullable=False),
        sa.Column("release_date", sa.String(length=32), nullable=True),
        sa.Column("lyrics", sa.Text(), nullable=True),
        sa.Column("link", sa.String(length=512), nullable=True),
    )

    op.create_table(
        "music_group",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=20), nullable=False),
    )
    op.create_index("ix_music_group_name", "music_group", ["name"], unique=True)

    op.create_table(
        "group_song",
        sa.Column(
            "group_id",
            sa.Integer(),
            sa.ForeignKey("music_group.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "song_id",
            sa.Integer(),
            sa.ForeignKey("songs.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_index("ix_group_song_song_id", "group_song", ["song_id"])


def downgrade() -> None:
    """Drop the song catalog tables."""
    op.drop_index("ix_group_song_song_id", table_name="group_song")
    op.drop_table("group_song")
    op.drop_index("ix_music_group_name", table_name="music_group")
    op.drop_table("music_group")
    op.drop_table("songs")
