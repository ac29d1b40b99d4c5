"""Tests for the song and scripture resolvers."""

import sqlite3
from collections.abc import Callable, Generator
from pathlib import Path
from unittest.mock import patch

import pytest

from lyricast.core.resolver import (
    ENGLISH_BOOK_NAMES,
    SONG_SEGMENT_VERSE,
    ScriptureResolver,
    SongResolver,
    english_book_name,
    open_scripture_database,
)
from lyricast.core.schema import detect_schema
from lyricast.models.collection import CollectionKind, Testament
from lyricast.models.verse import NormalizedVerse
from lyricast.storage.library import SongLibrary, StorageError


@pytest.fixture
def songs(library: SongLibrary) -> SongResolver:
    """Return a resolver over the seeded library."""
    return SongResolver(library)


@pytest.fixture
def scripture(scripture_path: Path) -> Generator[ScriptureResolver, None, None]:
    """Return a resolver over the plain-scheme scripture database."""
    resolver = ScriptureResolver.from_path(scripture_path)
    yield resolver
    resolver.close()


class TestEnglishBookNames:
    """Test the built-in book name list."""

    def test_sixty_six_books(self) -> None:
        """Test the list holds the 66 canonical books."""
        assert len(ENGLISH_BOOK_NAMES) == 66
        assert english_book_name(1) == "Genesis"
        assert english_book_name(43) == "John"
        assert english_book_name(66) == "Revelation"

    def test_past_the_list(self) -> None:
        """Test positions beyond the list get a generic name."""
        assert english_book_name(67) == "Book 67"
        assert english_book_name(0) == "Book 0"


class TestSongResolver:
    """Test SongResolver over the seeded library."""

    def test_kind(self, songs: SongResolver) -> None:
        """Test the resolver serves songs."""
        assert songs.kind is CollectionKind.SONG

    def test_collections_ordered_by_title(self, songs: SongResolver) -> None:
        """Test songs come back in title order with positions."""
        collections = songs.list_collections()
        assert [c.primary_name for c in collections] == [
            "10,000 Reasons",
            "Amazing Grace",
            "How Great Is Our God",
        ]
        assert [c.ordinal_position for c in collections] == [1, 2, 3]
        assert collections[1].secondary_name == "John Newton"
        assert collections[1].template_id is not None

    def test_scripture_filter_yields_nothing(self, songs: SongResolver) -> None:
        """Test asking the song resolver for books returns nothing."""
        assert songs.list_collections(CollectionKind.SCRIPTURE_BOOK) == []
        assert songs.list_collections(Testament.NEW) == []

    def test_sections_are_segments(self, songs: SongResolver) -> None:
        """Test each lyric segment is a section."""
        grace = songs.list_collections()[1]
        assert songs.list_sections(grace.id) == [1, 2, 3]

    def test_segment_has_single_verse(self, songs: SongResolver) -> None:
        """Test a segment holds exactly one verse numbered 1."""
        grace = songs.list_collections()[1]
        verses = songs.list_verses(grace.id, 2)
        assert len(verses) == 1
        assert verses[0].verse_number == SONG_SEGMENT_VERSE
        assert verses[0].text.startswith("Twas grace")
        assert verses[0].label == "verse"

    def test_sequence_walks_all_segments(self, songs: SongResolver) -> None:
        """Test the sequence is every segment in order."""
        grace = songs.list_collections()[1]
        sequence = songs.sequence(grace.id, None)
        assert [v.section_number for v in sequence] == [1, 2, 3]
        assert sequence[0].text.startswith("Amazing grace")

    def test_find_verse(self, songs: SongResolver) -> None:
        """Test finding a segment's verse and a missing one."""
        grace = songs.list_collections()[1]
        assert songs.find_verse(grace.id, 3, 1) is not None
        assert songs.find_verse(grace.id, 3, 2) is None
        assert songs.find_verse(grace.id, 9, 1) is None

    def test_missing_song(self, songs: SongResolver) -> None:
        """Test unknown IDs answer empty, never raise."""
        assert songs.get_collection(9999) is None
        assert songs.list_sections(9999) == []
        assert songs.sequence(9999, None) == []

    def test_duplicate_segment_numbers(self, empty_library: SongLibrary) -> None:
        """Test repeated segment numbers keep the first row."""
        song_id = empty_library.create_song("Dup")
        empty_library.add_verse(song_id, 1, "first")
        empty_library.add_verse(song_id, 1, "second")
        resolver = SongResolver(empty_library)
        assert [v.text for v in resolver.sequence(song_id, None)] == ["first"]

    def test_search_lyrics(self, songs: SongResolver) -> None:
        """Test lyric text search."""
        matches = songs.search("wretch")
        assert len(matches) == 1
        assert matches[0].section_number == 1
        assert "wretch" in matches[0].text

    def test_search_title_maps_to_first_segment(self, songs: SongResolver) -> None:
        """Test a title hit is returned as the song's first segment."""
        matches = songs.search("Reasons")
        assert len(matches) == 1
        assert matches[0].section_number == 1
        assert matches[0].text.startswith("Bless the Lord")

    def test_search_does_not_repeat_segment(self, songs: SongResolver) -> None:
        """Test a song matched by lyrics and title is listed once per segment."""
        matches = songs.search("Amazing")
        keys = [(m.collection_id, m.section_number) for m in matches]
        assert len(keys) == len(set(keys))

    def test_search_limit_and_blank(self, songs: SongResolver) -> None:
        """Test the limit truncates and blank queries return nothing."""
        assert len(songs.search("the", limit=2)) == 2
        assert songs.search("   ") == []
        assert songs.search("grace", limit=0) == []


class TestOpenScriptureDatabase:
    """Test opening scripture databases."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing file gives no connection."""
        assert open_scripture_database(tmp_path / "nope.db") is None

    def test_read_only(self, scripture_path: Path) -> None:
        """Test the connection refuses writes."""
        conn = open_scripture_database(scripture_path)
        assert conn is not None
        with pytest.raises(sqlite3.OperationalError):
            conn.execute("DELETE FROM verses")
        conn.close()

    def test_not_a_database(self, tmp_path: Path) -> None:
        """Test a non-SQLite file gives no connection."""
        path = tmp_path / "bible.db"
        path.write_text("this is not sqlite, just some text long enough" * 20)
        assert open_scripture_database(path) is None


class TestScriptureResolver:
    """Test ScriptureResolver over the plain scheme."""

    def test_available(self, scripture: ScriptureResolver) -> None:
        """Test the schema is resolved."""
        assert scripture.is_available
        assert scripture.kind is CollectionKind.SCRIPTURE_BOOK
        assert scripture.verse_count() == 6

    def test_books_from_books_table(self, scripture: ScriptureResolver) -> None:
        """Test books use stored names with English secondary names."""
        books = scripture.list_collections()
        assert [b.id for b in books] == [1, 43]
        john = books[1]
        assert john.primary_name == "Juan"
        assert john.secondary_name == "John"
        assert john.ordinal_position == 43
        assert john.testament is Testament.NEW

    def test_testament_filter(self, scripture: ScriptureResolver) -> None:
        """Test filtering books by testament."""
        assert [b.id for b in scripture.list_collections(Testament.OLD)] == [1]
        assert [b.id for b in scripture.list_collections(Testament.NEW)] == [43]
        assert scripture.list_collections(CollectionKind.SONG) == []

    def test_chapters(self, scripture: ScriptureResolver) -> None:
        """Test chapters are distinct and ascending."""
        assert scripture.list_sections(1) == [1, 2]
        assert scripture.list_sections(99) == []

    def test_verses_ascending(self, scripture: ScriptureResolver) -> None:
        """Test a chapter's verses are in verse order."""
        verses = scripture.list_verses(1, 1)
        assert [v.verse_number for v in verses] == [1, 2, 3]
        assert verses[0] == NormalizedVerse(
            1, 1, 1, "In the beginning God created the heaven and the earth."
        )

    def test_find_verse(self, scripture: ScriptureResolver) -> None:
        """Test John 3:16 and a missing verse."""
        verse = scripture.find_verse(43, 3, 16)
        assert verse is not None
        assert verse.text.startswith("For God so loved")
        assert scripture.find_verse(43, 3, 99) is None

    def test_sequence_needs_chapter(self, scripture: ScriptureResolver) -> None:
        """Test the navigable sequence is one chapter."""
        assert scripture.sequence(1, None) == []
        assert len(scripture.sequence(1, 1)) == 3

    def test_search(self, scripture: ScriptureResolver) -> None:
        """Test substring search and its limit."""
        matches = scripture.search("light")
        assert [(m.collection_id, m.section_number, m.verse_number) for m in matches] == [
            (1, 1, 3)
        ]
        assert len(scripture.search("the", limit=2)) == 2
        assert scripture.search("") == []

    def test_search_wildcards_are_literal(self, scripture: ScriptureResolver) -> None:
        """Test % and _ in a query match only themselves."""
        assert scripture.search("%") == []
        assert scripture.search("_") == []
        assert scripture.search("l_ght") == []

    def test_schema_detected_once(self, scripture_path: Path) -> None:
        """Test repeated queries reuse the schema detected at construction."""
        with patch("lyricast.core.resolver.detect_schema", wraps=detect_schema) as detect:
            resolver = ScriptureResolver.from_path(scripture_path)

            def run_queries() -> list[object]:
                return [
                    resolver.list_collections(),
                    resolver.list_collections(Testament.NEW),
                    resolver.get_collection(43),
                    resolver.list_sections(1),
                    resolver.list_verses(1, 1),
                    resolver.find_verse(43, 3, 16),
                    resolver.sequence(1, 1),
                    resolver.search("light"),
                    resolver.verse_count(),
                ]

            first = run_queries()
            second = run_queries()
            resolver.close()

        assert detect.call_count == 1
        assert first == second
        assert first[0] != []

    def test_get_collection(self, scripture: ScriptureResolver) -> None:
        """Test looking up a book by position."""
        assert scripture.get_collection(43) is not None
        assert scripture.get_collection(2) is None

    def test_duplicate_verse_rows(self, tmp_path: Path) -> None:
        """Test repeated verse numbers are returned once."""
        path = tmp_path / "dup.db"
        conn = sqlite3.connect(path)
        conn.execute("CREATE TABLE verses (book, chapter, verse, text)")
        conn.executemany(
            "INSERT INTO verses VALUES (?, ?, ?, ?)",
            [(1, 1, 1, "a"), (1, 1, 1, "a again"), (1, 1, 2, "b")],
        )
        conn.commit()
        conn.close()

        resolver = ScriptureResolver.from_path(path)
        assert [v.verse_number for v in resolver.list_verses(1, 1)] == [1, 2]
        resolver.close()


class TestScriptureSchemes:
    """Test the resolver across naming schemes."""

    def test_compact_scheme(self, make_scripture_db: Callable[[str], Path]) -> None:
        """Test t_verses/t_book_key databases."""
        resolver = ScriptureResolver.from_path(make_scripture_db("compact"))
        assert [b.primary_name for b in resolver.list_collections()] == ["Genesis", "John"]
        assert resolver.find_verse(1, 1, 2) is not None
        resolver.close()

    def test_numbered_scheme_uses_english_names(
        self, make_scripture_db: Callable[[str], Path]
    ) -> None:
        """Test books come from distinct book numbers when there is no books table."""
        resolver = ScriptureResolver.from_path(make_scripture_db("numbered"))
        books = resolver.list_collections()
        assert [(b.id, b.primary_name) for b in books] == [(1, "Genesis"), (43, "John")]
        assert resolver.list_sections(43) == [3]
        resolver.close()


class TestTextNumbers:
    """Test databases storing book, chapter and verse numbers as text."""

    @pytest.fixture
    def resolver(
        self, make_scripture_db: Callable[[str], Path]
    ) -> Generator[ScriptureResolver, None, None]:
        """Return a resolver over the text-scheme database."""
        resolver = ScriptureResolver.from_path(make_scripture_db("text"))
        yield resolver
        resolver.close()

    def test_books(self, resolver: ScriptureResolver) -> None:
        """Test text book numbers resolve to canonical positions."""
        assert [(b.id, b.primary_name) for b in resolver.list_collections()] == [(1, "Genesis")]

    def test_chapters_in_numeric_order(self, resolver: ScriptureResolver) -> None:
        """Test chapters sort as numbers, not strings."""
        assert resolver.list_sections(1) == [1, 2, 10]

    def test_verses_in_numeric_order(self, resolver: ScriptureResolver) -> None:
        """Test verses sort as numbers and the malformed row is skipped."""
        verses = resolver.list_verses(1, 1)
        assert [v.verse_number for v in verses] == [1, 2, 10]
        assert verses[2].text == "And God called the dry land Earth."
        assert [v.verse_number for v in resolver.sequence(1, 1)] == [1, 2, 10]

    def test_find_verse(self, resolver: ScriptureResolver) -> None:
        """Test integer lookups match text columns."""
        verse = resolver.find_verse(1, 10, 1)
        assert verse is not None
        assert verse.text.startswith("Now these are the generations")

    def test_search_skips_malformed_reference(self, resolver: ScriptureResolver) -> None:
        """Test hits with a non-numeric reference are dropped."""
        assert resolver.search("marginal") == []
        matches = resolver.search("dry land")
        assert [(m.collection_id, m.section_number, m.verse_number) for m in matches] == [
            (1, 1, 10)
        ]


class TestUnavailableScripture:
    """Test the resolver without a usable database."""

    @pytest.mark.parametrize("scheme", ["unusable", None])
    def test_empty_answers(
        self, make_scripture_db: Callable[[str], Path], scheme: str | None
    ) -> None:
        """Test every query answers empty when unresolved or missing."""
        path = make_scripture_db(scheme) if scheme else None
        resolver = ScriptureResolver.from_path(path)
        assert not resolver.is_available
        assert resolver.schema is None
        assert resolver.list_collections() == []
        assert resolver.list_sections(1) == []
        assert resolver.list_verses(1, 1) == []
        assert resolver.find_verse(1, 1, 1) is None
        assert resolver.search("light") == []
        assert resolver.verse_count() == 0
        resolver.close()

    def test_query_failure_raises_storage_error(self, tmp_path: Path) -> None:
        """Test SQLite failures after detection surface as StorageError."""
        path = tmp_path / "gone.db"
        conn = sqlite3.connect(path)
        conn.execute("CREATE TABLE verses (book, chapter, verse, text)")
        conn.commit()
        resolver = ScriptureResolver(conn)
        conn.execute("DROP TABLE verses")
        with pytest.raises(StorageError):
            resolver.list_sections(1)
        resolver.close()
