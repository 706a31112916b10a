"""Tests for catalog value objects."""

import pytest

from songlib.domain.value_objects import (
    FILTERABLE_FIELDS,
    UNSET,
    CreateSong,
    ListSongsQuery,
    SongField,
    SongUpdate,
)


class TestCreateSong:
    """Test CreateSong validation."""

    def test_valid_command(self) -> None:
        """Test a group and title within bounds are accepted."""
        command = CreateSong(group="Muse", title="Supermassive Black Hole")
        assert command.group == "Muse"
        assert command.title == "Supermassive Black Hole"

    def test_group_too_short(self) -> None:
        """Test a one-character group is rejected."""
        with pytest.raises(ValueError, match="minimum length of the group"):
            CreateSong(group="M", title="Uprising")

    def test_group_too_long(self) -> None:
        """Test a group over 20 characters is rejected."""
        with pytest.raises(ValueError, match="maximum length of the group"):
            CreateSong(group="x" * 21, title="Uprising")

    def test_group_boundaries(self) -> None:
        """Test 2 and 20 character groups are both fine."""
        CreateSong(group="AB", title="Song")
        CreateSong(group="x" * 20, title="Song")

    def test_title_too_short(self) -> None:
        """Test a one-character title is rejected."""
        with pytest.raises(ValueError, match="song name"):
            CreateSong(group="Muse", title="U")


class TestSongUpdate:
    """Test presence tracking in SongUpdate."""

    def test_absent_fields_are_unset(self) -> None:
        """Test fields not passed stay UNSET and aren't reported as present."""
        update = SongUpdate(id=1, link="https://example.com")

        assert update.title is UNSET
        assert update.present_fields() == [SongField.LINK]
        assert not update.is_set(SongField.LYRICS)

    def test_empty_string_is_present(self) -> None:
        """Test an explicit empty string counts as supplied."""
        update = SongUpdate(id=1, release_date="")

        assert update.is_set(SongField.RELEASE_DATE)
        assert update.value_of(SongField.RELEASE_DATE) == ""

    def test_explicit_none_is_present(self) -> None:
        """Test an explicit None (clear the column) counts as supplied."""
        update = SongUpdate(id=1, lyrics=None)

        assert update.present_fields() == [SongField.LYRICS]
        assert update.value_of(SongField.LYRICS) is None

    def test_present_fields_keep_canonical_order(self) -> None:
        """Test present fields come out in title, releaseDate, lyrics, link order."""
        update = SongUpdate(id=3, link="l", title="New title", lyrics="a\n\nb")

        assert update.present_fields() == [
            SongField.TITLE,
            SongField.LYRICS,
            SongField.LINK,
        ]

    def test_is_empty(self) -> None:
        """Test an update without any field is empty."""
        assert SongUpdate(id=1).is_empty()
        assert not SongUpdate(id=1, title="Hysteria").is_empty()

    def test_short_title_rejected(self) -> None:
        """Test a present title still needs two characters."""
        with pytest.raises(ValueError):
            SongUpdate(id=1, title="x")

    def test_null_title_rejected(self) -> None:
        """Test title cannot be cleared."""
        with pytest.raises(ValueError, match="cannot be null"):
            SongUpdate(id=1, title=None)  # type: ignore[arg-type]

    def test_non_positive_id_rejected(self) -> None:
        """Test ids start at 1."""
        with pytest.raises(ValueError):
            SongUpdate(id=0, link="x")

    def test_unset_is_falsy_singleton(self) -> None:
        """Test UNSET repr and truthiness."""
        assert repr(UNSET) == "UNSET"
        assert not UNSET
        assert type(UNSET)() is UNSET


class TestListSongsQuery:
    """Test ListSongsQuery validation."""

    def test_defaults(self) -> None:
        """Test default cursor and limit."""
        query = ListSongsQuery()
        assert query.cursor == 0
        assert query.limit == 10
        assert not query.has_filter()

    def test_negative_cursor_rejected(self) -> None:
        """Test cursor can't be negative."""
        with pytest.raises(ValueError):
            ListSongsQuery(cursor=-1)

    def test_zero_limit_rejected(self) -> None:
        """Test limit must be positive."""
        with pytest.raises(ValueError):
            ListSongsQuery(limit=0)

    @pytest.mark.parametrize("filter_field", ["", "   "])
    def test_blank_filter_field_rejected(self, filter_field: str) -> None:
        """Test a blank field can't slip past the allowlist as "no filter"."""
        with pytest.raises(ValueError, match="Filter field must not be empty"):
            ListSongsQuery(filter_field=filter_field, filter_value="Muse")

    def test_filter_needs_field_and_value(self) -> None:
        """Test has_filter only when both parts are given."""
        assert ListSongsQuery(filter_field="group", filter_value="Muse").has_filter()
        assert not ListSongsQuery(filter_field="group").has_filter()
        assert not ListSongsQuery(filter_value="Muse").has_filter()


def test_filterable_fields_exclude_lyrics() -> None:
    """Test lyrics can't be used as a listing filter."""
    assert SongField.LYRICS not in FILTERABLE_FIELDS
    assert {f.value for f in FILTERABLE_FIELDS} == {"group", "title", "releaseDate", "link"}
