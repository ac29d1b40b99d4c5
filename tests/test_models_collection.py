"""Tests for the collection and verse models."""

import pytest

from lyricast.models import collection
from lyricast.models.collection import CollectionKind, ContentCollection, Testament
from lyricast.models.verse import NormalizedVerse, VerseMatch


class TestTestament:
    """Test testament classification by canonical position."""

    @pytest.mark.parametrize("position", [1, 19, 39])
    def test_old_testament(self, position: int) -> None:
        """Test that books up to position 39 are Old Testament."""
        assert collection.testament_for_position(position) is Testament.OLD

    @pytest.mark.parametrize("position", [40, 43, 66, 80])
    def test_new_testament(self, position: int) -> None:
        """Test that books from position 40 on are New Testament."""
        assert collection.testament_for_position(position) is Testament.NEW

    def test_values(self) -> None:
        """Test the short testament codes."""
        assert Testament.OLD.value == "OT"
        assert Testament.NEW.value == "NT"


class TestContentCollection:
    """Test ContentCollection."""

    def test_song_defaults(self) -> None:
        """Test that a collection defaults to a song."""
        song = ContentCollection(id=1, primary_name="Amazing Grace")
        assert song.kind is CollectionKind.SONG
        assert not song.is_scripture
        assert song.testament is None

    def test_scripture_testament(self) -> None:
        """Test that a book's testament follows its position."""
        john = ContentCollection(
            id=43,
            primary_name="Juan",
            secondary_name="John",
            kind=CollectionKind.SCRIPTURE_BOOK,
            ordinal_position=43,
        )
        assert john.is_scripture
        assert john.testament is Testament.NEW

    def test_display_name_falls_back(self) -> None:
        """Test that an empty primary name falls back to the secondary name."""
        book = ContentCollection(id=1, primary_name="", secondary_name="Genesis")
        assert book.display_name == "Genesis"

    def test_reference(self) -> None:
        """Test reference formatting with and without a verse."""
        john = ContentCollection(id=43, primary_name="John", kind=CollectionKind.SCRIPTURE_BOOK)
        assert john.reference(3, 16) == "John 3:16"
        assert john.reference(3) == "John 3"

    def test_frozen(self) -> None:
        """Test that collections are immutable."""
        song = ContentCollection(id=1, primary_name="Song")
        with pytest.raises(AttributeError):
            song.primary_name = "Other"  # type: ignore[misc]


class TestVerses:
    """Test NormalizedVerse and VerseMatch."""

    def test_key(self) -> None:
        """Test the verse identity tuple."""
        verse = NormalizedVerse(43, 3, 16, "For God so loved the world")
        assert verse.key == (43, 3, 16)

    def test_preview_is_first_line(self) -> None:
        """Test that the preview shows only the first line."""
        verse = NormalizedVerse(1, 1, 1, "Amazing grace\nhow sweet the sound")
        assert verse.preview == "Amazing grace"

    def test_equality_by_value(self) -> None:
        """Test that equal fields make equal verses."""
        assert NormalizedVerse(1, 2, 3, "x") == NormalizedVerse(1, 2, 3, "x")

    def test_match_to_verse(self) -> None:
        """Test converting a search hit into a verse."""
        match = VerseMatch(43, 3, 16, "For God so loved the world")
        verse = match.to_verse()
        assert verse == NormalizedVerse(43, 3, 16, "For God so loved the world")
        assert verse.label == ""
