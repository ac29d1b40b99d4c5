"""Heuristic schema detection for scripture databases.

Scripture databases come from many sources and name their tables and
columns differently (``verses(book, chapter, verse, text)``,
``t_verses(b, c, v, t)``, ``bible_verses(book_number, ch, verse_no,
content)``...). ``detect_schema`` inspects the database once and returns an
immutable ``ResolvedSchema`` that the resolver uses for every query.

Usage:
    schema = detect_schema(connection)
    if schema is None:
        ...  # nothing to show
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

VERSES_TABLE_NAMES = ("verses", "t_verses", "bible_verses", "verse", "scripture")
VERSES_TABLE_KEYWORD = "verse"

BOOKS_TABLE_NAMES = ("books", "t_book_key", "bible_books", "book", "bookinfo")
BOOKS_TABLE_KEYWORD = "book"


def quote_identifier(name: str) -> str:
    """Quote a table or column name for interpolation into SQL."""
    return '"' + name.replace('"', '""') + '"'


@dataclass(frozen=True, slots=True)
class ResolvedSchema:
    """Where the scripture data lives in a particular database.

    Attributes:
        verses_table: Table holding one row per verse.
        book_column: Book number column in the verses table.
        chapter_column: Chapter number column in the verses table.
        verse_column: Verse number column in the verses table.
        text_column: Verse text column in the verses table.
        books_table: Optional table of book names.
        books_id_column: Book number column in the books table.
        books_name_column: Book name column in the books table.
    """

    verses_table: str
    book_column: str
    chapter_column: str
    verse_column: str
    text_column: str
    books_table: str | None = None
    books_id_column: str | None = None
    books_name_column: str | None = None

    @property
    def has_books_table(self) -> bool:
        """Return True if book names can be read from a books table."""
        return bool(self.books_table and self.books_id_column and self.books_name_column)


def _pick_table(tables: Sequence[str], known: Sequence[str], keyword: str,
                exclude: str | None = None) -> str | None:
    """Pick a table by exact known name first, then by keyword substring."""
    candidates = [t for t in tables if t != exclude]
    for table in candidates:
        if table.lower() in known:
            return table
    for table in candidates:
        if keyword in table.lower():
            return table
    return None


def _first_column(columns: Sequence[str], matches: Callable[[str], bool],
                  taken: set[str]) -> str | None:
    for column in columns:
        if column not in taken and matches(column.lower()):
            return column
    return None


def _is_book(name: str) -> bool:
    return "book" in name or name == "b"


def _is_chapter(name: str) -> bool:
    return "chapter" in name or name in ("ch", "c")


def _is_verse(name: str) -> bool:
    if name == "v":
        return True
    return "verse" in name and "id" not in name and not _is_text(name)


def _is_text(name: str) -> bool:
    return "text" in name or "content" in name or name == "t"


def _is_book_number(name: str) -> bool:
    return "number" in name or name == "book_num"


def _is_book_key(name: str) -> bool:
    return name in ("id", "b")


def _is_book_name(name: str) -> bool:
    return "name" in name or "title" in name or name == "n"


def _table_names(connection: sqlite3.Connection) -> list[str]:
    rows = connection.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table'"
        " AND name NOT LIKE 'sqlite_%' ORDER BY name"
    ).fetchall()
    return [row[0] for row in rows]


def _column_names(connection: sqlite3.Connection, table: str) -> list[str]:
    rows = connection.execute(f"PRAGMA table_info({quote_identifier(table)})").fetchall()
    return [row[1] for row in rows]


def detect_schema(connection: sqlite3.Connection) -> ResolvedSchema | None:
    """Detect the verses (and optional books) table of a scripture database.

    Args:
        connection: Open connection to the scripture database.

    Returns:
        The resolved schema, or None when no usable verses table exists.
    """
    try:
        tables = _table_names(connection)
        logger.debug("Scripture tables: %s", tables)

        verses_table = _pick_table(tables, VERSES_TABLE_NAMES, VERSES_TABLE_KEYWORD)
        if verses_table is None:
            logger.warning("No verses table found among %s", tables)
            return None

        columns = _column_names(connection, verses_table)
        taken: set[str] = set()
        resolved: dict[str, str] = {}
        # text is claimed before verse so "verse_text" never becomes the verse number
        for role, matcher in (
            ("book", _is_book),
            ("chapter", _is_chapter),
            ("text", _is_text),
            ("verse", _is_verse),
        ):
            column = _first_column(columns, matcher, taken)
            if column is None:
                logger.warning(
                    "Table %s has no %s column (columns: %s)", verses_table, role, columns
                )
                return None
            resolved[role] = column
            taken.add(column)

        books_table = _pick_table(
            tables, BOOKS_TABLE_NAMES, BOOKS_TABLE_KEYWORD, exclude=verses_table
        )
        books_id = books_name = None
        if books_table is not None:
            book_columns = _column_names(connection, books_table)
            books_id = _first_column(book_columns, _is_book_number, set()) or _first_column(
                book_columns, _is_book_key, set()
            )
            books_name = _first_column(
                book_columns, _is_book_name, {books_id} if books_id else set()
            )
            if books_id is None or books_name is None:
                logger.info(
                    "Ignoring books table %s without id/name columns (%s)",
                    books_table,
                    book_columns,
                )
                books_table = books_id = books_name = None
    except sqlite3.Error as e:
        logger.warning("Scripture schema detection failed: %s", e)
        return None

    schema = ResolvedSchema(
        verses_table=verses_table,
        book_column=resolved["book"],
        chapter_column=resolved["chapter"],
        verse_column=resolved["verse"],
        text_column=resolved["text"],
        books_table=books_table,
        books_id_column=books_id,
        books_name_column=books_name,
    )
    logger.info("Detected scripture schema: %s", schema)
    return schema
