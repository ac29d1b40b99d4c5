"""Content resolvers: normalized, navigable views over songs and scripture.

Both resolvers expose the same query surface so the controller can treat a
song and a scripture book alike:

- ``list_collections`` - songs or books, ordered
- ``list_sections`` - chapters, or song segment numbers
- ``list_verses`` / ``find_verse`` - normalized verses of one section
- ``sequence`` - the verses relative navigation walks through
- ``search`` - substring search, truncated at a limit

Missing data is never an error: queries answer with an empty list or None.
Database failures propagate as ``StorageError``.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from lyricast.core.schema import ResolvedSchema, detect_schema, quote_identifier
from lyricast.models.collection import (
    CollectionKind,
    ContentCollection,
    Testament,
    testament_for_position,
)
from lyricast.models.verse import NormalizedVerse, VerseMatch
from lyricast.storage.library import SongLibrary, StorageError, like_pattern

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50

# Song segments are single-slide sections; their only verse is number 1
SONG_SEGMENT_VERSE = 1

ENGLISH_BOOK_NAMES = (
    "Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy",
    "Joshua", "Judges", "Ruth", "1 Samuel", "2 Samuel",
    "1 Kings", "2 Kings", "1 Chronicles", "2 Chronicles", "Ezra",
    "Nehemiah", "Esther", "Job", "Psalms", "Proverbs",
    "Ecclesiastes", "Song of Solomon", "Isaiah", "Jeremiah", "Lamentations",
    "Ezekiel", "Daniel", "Hosea", "Joel", "Amos",
    "Obadiah", "Jonah", "Micah", "Nahum", "Habakkuk",
    "Zephaniah", "Haggai", "Zechariah", "Malachi",
    "Matthew", "Mark", "Luke", "John", "Acts",
    "Romans", "1 Corinthians", "2 Corinthians", "Galatians", "Ephesians",
    "Philippians", "Colossians", "1 Thessalonians", "2 Thessalonians", "1 Timothy",
    "2 Timothy", "Titus", "Philemon", "Hebrews", "James",
    "1 Peter", "2 Peter", "1 John", "2 John", "3 John",
    "Jude", "Revelation",
)  # fmt: skip


def english_book_name(position: int) -> str:
    """Return the English name of the book at a canonical position."""
    if 1 <= position <= len(ENGLISH_BOOK_NAMES):
        return ENGLISH_BOOK_NAMES[position - 1]
    return f"Book {position}"


def _as_int(value: Any) -> int | None:
    """Return a scripture number column value as an int, or None if it is not one."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _unique_by_verse(verses: list[NormalizedVerse]) -> list[NormalizedVerse]:
    """Drop repeated verse numbers, keeping the first row of each."""
    seen: set[int] = set()
    result: list[NormalizedVerse] = []
    for verse in verses:
        if verse.verse_number in seen:
            logger.debug("Dropping duplicate verse %s", verse.key)
            continue
        seen.add(verse.verse_number)
        result.append(verse)
    return result


class ContentResolver(ABC):
    """Query surface shared by the song and scripture resolvers."""

    @property
    @abstractmethod
    def kind(self) -> CollectionKind:
        """Return the kind of collection this resolver serves."""

    @abstractmethod
    def list_collections(
        self, kind_filter: CollectionKind | Testament | None = None
    ) -> list[ContentCollection]:
        """Return the ordered collections matching the filter."""

    @abstractmethod
    def get_collection(self, collection_id: int) -> ContentCollection | None:
        """Return one collection, or None if it does not exist."""

    @abstractmethod
    def list_sections(self, collection_id: int) -> list[int]:
        """Return section numbers of a collection in ascending order."""

    @abstractmethod
    def list_verses(self, collection_id: int, section_id: int) -> list[NormalizedVerse]:
        """Return the verses of a section, strictly ascending by verse number."""

    @abstractmethod
    def sequence(self, collection_id: int, section_id: int | None) -> list[NormalizedVerse]:
        """Return the verses relative navigation steps through."""

    @abstractmethod
    def search(self, text: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[VerseMatch]:
        """Return at most ``limit`` verses whose text contains ``text``."""

    def find_verse(
        self, collection_id: int, section_id: int, verse_number: int
    ) -> NormalizedVerse | None:
        """Return one verse, or None if it does not exist."""
        for verse in self.list_verses(collection_id, section_id):
            if verse.verse_number == verse_number:
                return verse
        return None


class SongResolver(ContentResolver):
    """Resolver over the song library.

    Each lyric segment is its own section holding exactly one verse, so
    ``list_sections`` yields segment numbers and ``sequence`` walks every
    segment of the song in order.

    Example:
        songs = SongResolver(library)
        grace = songs.list_collections()[0]
        slides = songs.sequence(grace.id, None)
    """

    def __init__(self, library: SongLibrary) -> None:
        """Initialize the resolver.

        Args:
            library: The song library to read from.
        """
        self._library = library

    @property
    def kind(self) -> CollectionKind:
        """Return CollectionKind.SONG."""
        return CollectionKind.SONG

    @staticmethod
    def _to_collection(row: dict[str, Any], position: int) -> ContentCollection:
        return ContentCollection(
            id=int(row["id"]),
            primary_name=row["title"] or "",
            secondary_name=row.get("author") or "",
            kind=CollectionKind.SONG,
            ordinal_position=position,
            author=row.get("author") or "",
            category=row.get("category") or "",
            template_id=row.get("template_id"),
        )

    def list_collections(
        self, kind_filter: CollectionKind | Testament | None = None
    ) -> list[ContentCollection]:
        """Return all songs ordered by title."""
        if kind_filter not in (None, CollectionKind.SONG):
            return []
        rows = self._library.list_songs()
        return [self._to_collection(row, pos) for pos, row in enumerate(rows, start=1)]

    def get_collection(self, collection_id: int) -> ContentCollection | None:
        """Return a song by ID, or None."""
        for collection in self.list_collections():
            if collection.id == collection_id:
                return collection
        return None

    def _segments(self, song_id: int) -> list[NormalizedVerse]:
        segments: list[NormalizedVerse] = []
        seen: set[int] = set()
        for row in self._library.list_verses(song_id):
            number = int(row["verse_number"])
            if number in seen:
                logger.debug("Song %d has duplicate segment %d, keeping the first", song_id, number)
                continue
            seen.add(number)
            segments.append(
                NormalizedVerse(
                    collection_id=song_id,
                    section_number=number,
                    verse_number=SONG_SEGMENT_VERSE,
                    text=row["content"],
                    label=row.get("verse_type") or "",
                )
            )
        return segments

    def list_sections(self, collection_id: int) -> list[int]:
        """Return the song's segment numbers."""
        return [segment.section_number for segment in self._segments(collection_id)]

    def list_verses(self, collection_id: int, section_id: int) -> list[NormalizedVerse]:
        """Return the single verse of one song segment, or an empty list."""
        return [s for s in self._segments(collection_id) if s.section_number == section_id]

    def sequence(self, collection_id: int, section_id: int | None = None) -> list[NormalizedVerse]:
        """Return every segment of the song; the section is not needed."""
        return self._segments(collection_id)

    def search(self, text: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[VerseMatch]:
        """Search lyrics, then titles and authors (matching the song's first segment)."""
        query = text.strip()
        if not query or limit <= 0:
            return []

        matches: list[VerseMatch] = [
            VerseMatch(
                collection_id=int(row["song_id"]),
                section_number=int(row["verse_number"]),
                verse_number=SONG_SEGMENT_VERSE,
                text=row["content"],
            )
            for row in self._library.search_verses(query, limit)
        ]
        seen = {(m.collection_id, m.section_number) for m in matches}
        for song in self._library.search_songs(query):
            if len(matches) >= limit:
                break
            segments = self._segments(int(song["id"]))
            if not segments:
                continue
            first = segments[0]
            if (first.collection_id, first.section_number) in seen:
                continue
            matches.append(
                VerseMatch(first.collection_id, first.section_number, first.verse_number, first.text)
            )
        return matches[:limit]


def open_scripture_database(path: Path) -> sqlite3.Connection | None:
    """Open a scripture database read-only.

    Args:
        path: Path to the SQLite file.

    Returns:
        The connection, or None if the file is missing or unreadable.
    """
    if not path.is_file():
        logger.warning("Scripture database not found: %s", path)
        return None
    try:
        connection = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
        connection.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()
    except sqlite3.Error as e:
        logger.warning("Cannot open scripture database %s: %s", path, e)
        return None
    logger.info("Scripture database loaded from %s", path)
    return connection


class ScriptureResolver(ContentResolver):
    """Resolver over a scripture database of unknown schema.

    The schema is detected once, when the resolver is built, and reused for
    every query. When nothing usable is found every query returns an empty
    result.

    Example:
        resolver = ScriptureResolver(open_scripture_database(path))
        john = resolver.get_collection(43)
        verse = resolver.find_verse(43, 3, 16)
    """

    def __init__(self, connection: sqlite3.Connection | None) -> None:
        """Initialize the resolver and detect the schema.

        Args:
            connection: Open scripture database, or None when unavailable.
        """
        self._connection = connection
        self._schema: ResolvedSchema | None = None
        if connection is None:
            logger.warning("No scripture database; scripture queries will be empty")
        else:
            self._schema = detect_schema(connection)
            if self._schema is None:
                logger.warning("Scripture schema unresolved; scripture queries will be empty")

    @classmethod
    def from_path(cls, path: Path | None) -> ScriptureResolver:
        """Build a resolver from a database path (None for no scripture)."""
        return cls(open_scripture_database(path) if path is not None else None)

    @property
    def kind(self) -> CollectionKind:
        """Return CollectionKind.SCRIPTURE_BOOK."""
        return CollectionKind.SCRIPTURE_BOOK

    @property
    def schema(self) -> ResolvedSchema | None:
        """Return the detected schema, or None if unresolved."""
        return self._schema

    @property
    def is_available(self) -> bool:
        """Return True if the schema was resolved."""
        return self._schema is not None

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._schema = None

    def _rows(self, sql: str, params: tuple[Any, ...] = ()) -> list[tuple[Any, ...]]:
        assert self._connection is not None
        try:
            return self._connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Scripture query failed: {e}") from e

    def _book(self, position: int, stored_name: str | None) -> ContentCollection:
        english = english_book_name(position)
        return ContentCollection(
            id=position,
            primary_name=stored_name or english,
            secondary_name=english,
            kind=CollectionKind.SCRIPTURE_BOOK,
            ordinal_position=position,
        )

    def list_collections(
        self, kind_filter: CollectionKind | Testament | None = None
    ) -> list[ContentCollection]:
        """Return the books in canonical order, optionally filtered by testament."""
        schema = self._schema
        if schema is None or kind_filter is CollectionKind.SONG:
            return []

        if schema.has_books_table:
            rows = self._rows(
                f"SELECT {quote_identifier(schema.books_id_column or '')},"
                f" {quote_identifier(schema.books_name_column or '')}"
                f" FROM {quote_identifier(schema.books_table or '')}"
                f" ORDER BY CAST({quote_identifier(schema.books_id_column or '')} AS INTEGER)"
            )
        else:
            book = quote_identifier(schema.book_column)
            rows = self._rows(
                f"SELECT DISTINCT {book}, NULL FROM {quote_identifier(schema.verses_table)}"
                f" ORDER BY CAST({book} AS INTEGER)"
            )

        books: dict[int, ContentCollection] = {}
        for position, name in rows:
            number = _as_int(position)
            if number is None:
                logger.debug("Skipping book row with non-numeric id %r", position)
                continue
            if number in books:
                continue
            if isinstance(kind_filter, Testament) and testament_for_position(number) != kind_filter:
                continue
            books[number] = self._book(number, str(name) if name else None)
        return [books[number] for number in sorted(books)]

    def get_collection(self, collection_id: int) -> ContentCollection | None:
        """Return a book by canonical position, or None."""
        for book in self.list_collections():
            if book.id == collection_id:
                return book
        return None

    def list_sections(self, collection_id: int) -> list[int]:
        """Return the chapter numbers of a book."""
        schema = self._schema
        if schema is None:
            return []
        chapter = quote_identifier(schema.chapter_column)
        rows = self._rows(
            f"SELECT DISTINCT {chapter} FROM {quote_identifier(schema.verses_table)}"
            f" WHERE {quote_identifier(schema.book_column)} = ?"
            f" ORDER BY CAST({chapter} AS INTEGER)",
            (collection_id,),
        )
        chapters: set[int] = set()
        for (value,) in rows:
            number = _as_int(value)
            if number is None:
                logger.debug("Skipping chapter row with non-numeric number %r", value)
                continue
            chapters.add(number)
        return sorted(chapters)

    def list_verses(self, collection_id: int, section_id: int) -> list[NormalizedVerse]:
        """Return the verses of a chapter in verse order."""
        schema = self._schema
        if schema is None:
            return []
        verse = quote_identifier(schema.verse_column)
        rows = self._rows(
            f"SELECT {verse}, {quote_identifier(schema.text_column)}"
            f" FROM {quote_identifier(schema.verses_table)}"
            f" WHERE {quote_identifier(schema.book_column)} = ?"
            f" AND {quote_identifier(schema.chapter_column)} = ?"
            f" ORDER BY CAST({verse} AS INTEGER)",
            (collection_id, section_id),
        )
        verses: list[NormalizedVerse] = []
        for value, text in rows:
            number = _as_int(value)
            if number is None:
                logger.debug("Skipping verse row with non-numeric number %r", value)
                continue
            verses.append(
                NormalizedVerse(
                    collection_id=collection_id,
                    section_number=section_id,
                    verse_number=number,
                    text=text or "",
                )
            )
        # Stable, so the first row of a repeated number still wins
        verses.sort(key=lambda v: v.verse_number)
        return _unique_by_verse(verses)

    def find_verse(
        self, collection_id: int, section_id: int, verse_number: int
    ) -> NormalizedVerse | None:
        """Return one verse, or None."""
        schema = self._schema
        if schema is None:
            return None
        rows = self._rows(
            f"SELECT {quote_identifier(schema.text_column)}"
            f" FROM {quote_identifier(schema.verses_table)}"
            f" WHERE {quote_identifier(schema.book_column)} = ?"
            f" AND {quote_identifier(schema.chapter_column)} = ?"
            f" AND {quote_identifier(schema.verse_column)} = ? LIMIT 1",
            (collection_id, section_id, verse_number),
        )
        if not rows:
            return None
        return NormalizedVerse(collection_id, section_id, verse_number, rows[0][0] or "")

    def sequence(self, collection_id: int, section_id: int | None) -> list[NormalizedVerse]:
        """Return the verses of the chapter being navigated."""
        if section_id is None:
            return []
        return self.list_verses(collection_id, section_id)

    def search(self, text: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[VerseMatch]:
        """Return verses whose text contains ``text`` (SQL LIKE semantics)."""
        schema = self._schema
        query = text.strip()
        if schema is None or not query or limit <= 0:
            return []
        rows = self._rows(
            f"SELECT {quote_identifier(schema.book_column)},"
            f" {quote_identifier(schema.chapter_column)},"
            f" {quote_identifier(schema.verse_column)},"
            f" {quote_identifier(schema.text_column)}"
            f" FROM {quote_identifier(schema.verses_table)}"
            f" WHERE {quote_identifier(schema.text_column)} LIKE ? ESCAPE '\\' LIMIT ?",
            (like_pattern(query), limit),
        )
        matches: list[VerseMatch] = []
        for book, chapter, verse, verse_text in rows:
            numbers = (_as_int(book), _as_int(chapter), _as_int(verse))
            if None in numbers:
                logger.debug(
                    "Skipping search hit with non-numeric reference %r", (book, chapter, verse)
                )
                continue
            matches.append(VerseMatch(*numbers, verse_text or ""))
        return matches

    def verse_count(self) -> int:
        """Return the number of verse rows, 0 when unresolved."""
        schema = self._schema
        if schema is None:
            return 0
        rows = self._rows(f"SELECT COUNT(*) FROM {quote_identifier(schema.verses_table)}")
        return int(rows[0][0])
