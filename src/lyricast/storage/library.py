"""SQLite song library: songs, lyric segments, templates and media records.

The library owns its schema. Everything that only reads songs for
presentation goes through ``SongResolver`` instead of using this class
directly.

Usage:
    from lyricast.storage.library import SongLibrary

    with SongLibrary(Path("lyricast.db")) as library:
        library.initialize()
        songs = library.list_songs()
"""

from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_TEMPLATE_COLUMNS = (
    "name",
    "background_type",
    "background_value",
    "background_overlay",
    "font_family",
    "font_size",
    "font_color",
    "text_align",
    "text_shadow",
)

_DEFAULT_OVERLAY = "rgba(0,0,0,0.3)"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS templates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    background_type TEXT DEFAULT 'gradient',
    background_value TEXT DEFAULT 'linear-gradient(135deg, #1a1a2e 0%, #16213e 50%, #0f3460 100%)',
    background_overlay TEXT DEFAULT 'rgba(0,0,0,0.3)',
    font_family TEXT DEFAULT 'Inter',
    font_size INTEGER DEFAULT 72,
    font_color TEXT DEFAULT '#ffffff',
    text_align TEXT DEFAULT 'center',
    text_shadow TEXT DEFAULT '2px 2px 8px rgba(0,0,0,0.8)',
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS songs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    author TEXT,
    category TEXT DEFAULT 'Worship',
    template_id INTEGER,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (template_id) REFERENCES templates(id)
);

CREATE TABLE IF NOT EXISTS verses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    song_id INTEGER NOT NULL,
    verse_number INTEGER NOT NULL,
    verse_type TEXT DEFAULT 'verse',
    content TEXT NOT NULL,
    FOREIGN KEY (song_id) REFERENCES songs(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS media (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    type TEXT NOT NULL,
    file_path TEXT NOT NULL,
    thumbnail_path TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""

DEFAULT_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("Heavenly Purple", "linear-gradient(135deg, #667eea 0%, #764ba2 100%)"),
    ("Ocean Blue", "linear-gradient(135deg, #1e3c72 0%, #2a5298 100%)"),
    ("Sunset Gold", "linear-gradient(135deg, #f093fb 0%, #f5576c 100%)"),
    ("Forest Green", "linear-gradient(135deg, #134e5e 0%, #71b280 100%)"),
    ("Royal Purple", "linear-gradient(135deg, #4a0e4e 0%, #81689d 100%)"),
    ("Night Sky", "linear-gradient(135deg, #0c0c0c 0%, #1a1a2e 50%, #16213e 100%)"),
)

# (title, author, category, template position, [(segment type, content), ...])
SAMPLE_SONGS: tuple[tuple[str, str, str, int, tuple[tuple[str, str], ...]], ...] = (
    (
        "How Great Is Our God",
        "Chris Tomlin",
        "Worship",
        1,
        (
            ("verse", "The splendor of the King\nClothed in majesty\n"
             "Let all the earth rejoice\nAll the earth rejoice"),
            ("verse", "He wraps Himself in light\nAnd darkness tries to hide\n"
             "And trembles at His voice\nAnd trembles at His voice"),
            ("chorus", "How great is our God\nSing with me\nHow great is our God\n"
             "And all will see\nHow great, how great is our God"),
            ("verse", "Age to age He stands\nAnd time is in His hands\n"
             "Beginning and the End\nBeginning and the End"),
        ),
    ),
    (
        "Amazing Grace",
        "John Newton",
        "Hymn",
        2,
        (
            ("verse", "Amazing grace how sweet the sound\nThat saved a wretch like me\n"
             "I once was lost but now am found\nWas blind but now I see"),
            ("verse", "Twas grace that taught my heart to fear\nAnd grace my fears relieved\n"
             "How precious did that grace appear\nThe hour I first believed"),
            ("verse", "Through many dangers toils and snares\nI have already come\n"
             "Tis grace hath brought me safe thus far\nAnd grace will lead me home"),
        ),
    ),
    (
        "10,000 Reasons",
        "Matt Redman",
        "Worship",
        3,
        (
            ("chorus", "Bless the Lord O my soul\nO my soul\nWorship His holy name\n"
             "Sing like never before\nO my soul\nI worship Your holy name"),
            ("verse", "The sun comes up\nIts a new day dawning\nIts time to sing\n"
             "Your song again"),
            ("verse", "Whatever may pass\nAnd whatever lies before me\n"
             "Let me be singing\nWhen the evening comes"),
        ),
    ),
)

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")


class StorageError(Exception):
    """Raised when the underlying SQLite database fails."""


def split_lyrics(lyrics: str) -> list[str]:
    """Split pasted lyrics into segments on blank lines.

    Args:
        lyrics: Raw lyrics text.

    Returns:
        Non-empty, stripped segments in order.
    """
    return [part.strip() for part in _PARAGRAPH_BREAK.split(lyrics) if part.strip()]


def like_pattern(query: str) -> str:
    """Return a substring LIKE pattern matching ``query`` literally.

    Use with ``LIKE ? ESCAPE '\\'``.
    """
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _row_to_dict(row: sqlite3.Row | None) -> dict[str, Any] | None:
    return dict(row) if row is not None else None


class SongLibrary:
    """Read/write access to the song library database.

    Attributes:
        db_path: Path to the SQLite database file (":memory:" for tests).
    """

    def __init__(self, db_path: Path | str) -> None:
        """Initialize the library without opening the database.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._connection: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        """Return the open connection, opening it on first use."""
        if self._connection is None:
            try:
                if isinstance(self.db_path, Path):
                    self.db_path.parent.mkdir(parents=True, exist_ok=True)
                connection = sqlite3.connect(str(self.db_path))
                connection.row_factory = sqlite3.Row
                connection.execute("PRAGMA foreign_keys = ON")
            except (OSError, sqlite3.Error) as e:
                raise StorageError(f"Cannot open song library {self.db_path}: {e}") from e
            self._connection = connection
        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> SongLibrary:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Run statements in a transaction, mapping SQLite errors to StorageError."""
        conn = self.connection
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        try:
            return self.connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    def _query_one(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Row | None:
        try:
            return self.connection.execute(sql, params).fetchone()
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e

    # -- Schema ----------------------------------------------------------------

    def initialize(self, *, seed: bool = True) -> None:
        """Create tables and, if empty, seed default templates and sample songs.

        Args:
            seed: Insert default templates and sample songs into an empty library.
        """
        with self._transaction() as conn:
            conn.executescript(_SCHEMA)
            columns = {row["name"] for row in conn.execute("PRAGMA table_info(templates)")}
            if "background_overlay" not in columns:
                logger.info("Adding background_overlay column to templates")
                conn.execute(
                    "ALTER TABLE templates ADD COLUMN background_overlay TEXT"
                    " DEFAULT 'rgba(0,0,0,0.3)'"
                )
        if seed:
            self._seed()

    def _seed(self) -> None:
        with self._transaction() as conn:
            template_count = conn.execute("SELECT COUNT(*) FROM templates").fetchone()[0]
            template_ids: list[int] = []
            if template_count == 0:
                for name, gradient in DEFAULT_TEMPLATES:
                    cursor = conn.execute(
                        "INSERT INTO templates (name, background_type, background_value,"
                        " background_overlay, font_family, font_size, font_color)"
                        " VALUES (?, 'gradient', ?, 'rgba(0,0,0,0)', 'Inter', 72, '#ffffff')",
                        (name, gradient),
                    )
                    template_ids.append(int(cursor.lastrowid or 0))
                logger.info("Seeded %d default templates", len(template_ids))

            song_count = conn.execute("SELECT COUNT(*) FROM songs").fetchone()[0]
            if song_count == 0:
                for title, author, category, template_pos, segments in SAMPLE_SONGS:
                    template_id = (
                        template_ids[template_pos - 1]
                        if len(template_ids) >= template_pos
                        else None
                    )
                    cursor = conn.execute(
                        "INSERT INTO songs (title, author, category, template_id)"
                        " VALUES (?, ?, ?, ?)",
                        (title, author, category, template_id),
                    )
                    song_id = cursor.lastrowid
                    for number, (verse_type, content) in enumerate(segments, start=1):
                        conn.execute(
                            "INSERT INTO verses (song_id, verse_number, verse_type, content)"
                            " VALUES (?, ?, ?, ?)",
                            (song_id, number, verse_type, content),
                        )
                logger.info("Seeded %d sample songs", len(SAMPLE_SONGS))

    # -- Templates ---------------------------------------------------------------

    def list_templates(self) -> list[dict[str, Any]]:
        """Return all templates ordered by name."""
        return [dict(r) for r in self._query("SELECT * FROM templates ORDER BY name")]

    def get_template(self, template_id: int) -> dict[str, Any] | None:
        """Return a template by ID, or None."""
        return _row_to_dict(self._query_one("SELECT * FROM templates WHERE id = ?", (template_id,)))

    def create_template(self, template: dict[str, Any]) -> int:
        """Insert a template and return its ID.

        Args:
            template: Mapping with the template columns; a missing overlay
                defaults to a translucent black.
        """
        values = self._template_values(template)
        placeholders = ", ".join("?" for _ in _TEMPLATE_COLUMNS)
        with self._transaction() as conn:
            cursor = conn.execute(
                f"INSERT INTO templates ({', '.join(_TEMPLATE_COLUMNS)}) VALUES ({placeholders})",
                values,
            )
            return int(cursor.lastrowid or 0)

    def update_template(self, template_id: int, template: dict[str, Any]) -> None:
        """Replace all columns of an existing template."""
        assignments = ", ".join(f"{col} = ?" for col in _TEMPLATE_COLUMNS)
        with self._transaction() as conn:
            conn.execute(
                f"UPDATE templates SET {assignments} WHERE id = ?",
                (*self._template_values(template), template_id),
            )

    def delete_template(self, template_id: int) -> None:
        """Delete a template; songs using it keep a dangling template_id."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM templates WHERE id = ?", (template_id,))

    @staticmethod
    def _template_values(template: dict[str, Any]) -> tuple[Any, ...]:
        merged = dict(template)
        merged["background_overlay"] = merged.get("background_overlay") or _DEFAULT_OVERLAY
        merged.setdefault("background_type", "gradient")
        merged.setdefault("font_family", "Inter")
        merged.setdefault("font_size", 72)
        merged.setdefault("font_color", "#ffffff")
        merged.setdefault("text_align", "center")
        merged.setdefault("text_shadow", "2px 2px 8px rgba(0,0,0,0.8)")
        return tuple(merged.get(col) for col in _TEMPLATE_COLUMNS)

    # -- Songs -------------------------------------------------------------------

    def list_songs(self) -> list[dict[str, Any]]:
        """Return all songs ordered by title, with their template name."""
        rows = self._query(
            "SELECT s.*, t.name AS template_name FROM songs s"
            " LEFT JOIN templates t ON s.template_id = t.id ORDER BY s.title"
        )
        return [dict(r) for r in rows]

    def get_song(self, song_id: int) -> dict[str, Any] | None:
        """Return a song by ID, or None."""
        return _row_to_dict(self._query_one("SELECT * FROM songs WHERE id = ?", (song_id,)))

    def search_songs(self, query: str) -> list[dict[str, Any]]:
        """Return songs whose title or author contains the query."""
        pattern = like_pattern(query)
        rows = self._query(
            "SELECT * FROM songs WHERE title LIKE ? ESCAPE '\\'"
            " OR author LIKE ? ESCAPE '\\' ORDER BY title",
            (pattern, pattern),
        )
        return [dict(r) for r in rows]

    def create_song(
        self,
        title: str,
        author: str = "",
        category: str = "Worship",
        template_id: int | None = None,
    ) -> int:
        """Insert a song without lyrics and return its ID."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO songs (title, author, category, template_id) VALUES (?, ?, ?, ?)",
                (title, author, category, template_id),
            )
            return int(cursor.lastrowid or 0)

    def create_song_with_lyrics(
        self,
        title: str,
        lyrics: str,
        author: str = "",
        category: str = "Worship",
        template_id: int | None = None,
    ) -> int:
        """Insert a song and its lyrics split on blank lines into segments.

        Returns:
            The new song ID.

        Raises:
            ValueError: If the title or lyrics are blank.
        """
        segments = split_lyrics(lyrics)
        if not title.strip() or not segments:
            raise ValueError("A song needs a title and at least one lyric segment")
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO songs (title, author, category, template_id) VALUES (?, ?, ?, ?)",
                (title.strip(), author, category, template_id),
            )
            song_id = int(cursor.lastrowid or 0)
            conn.executemany(
                "INSERT INTO verses (song_id, verse_number, verse_type, content)"
                " VALUES (?, ?, 'verse', ?)",
                [(song_id, number, text) for number, text in enumerate(segments, start=1)],
            )
        logger.info("Created song %r with %d segments", title, len(segments))
        return song_id

    def update_song(
        self,
        song_id: int,
        title: str,
        author: str = "",
        category: str = "Worship",
        template_id: int | None = None,
    ) -> None:
        """Update a song's metadata."""
        with self._transaction() as conn:
            conn.execute(
                "UPDATE songs SET title = ?, author = ?, category = ?, template_id = ?"
                " WHERE id = ?",
                (title, author, category, template_id, song_id),
            )

    def delete_song(self, song_id: int) -> None:
        """Delete a song and its lyric segments."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM verses WHERE song_id = ?", (song_id,))
            conn.execute("DELETE FROM songs WHERE id = ?", (song_id,))

    # -- Verses (lyric segments) -------------------------------------------------

    def list_verses(self, song_id: int) -> list[dict[str, Any]]:
        """Return a song's lyric segments ordered by segment number."""
        rows = self._query(
            "SELECT * FROM verses WHERE song_id = ? ORDER BY verse_number, id", (song_id,)
        )
        return [dict(r) for r in rows]

    def search_verses(self, query: str, limit: int) -> list[dict[str, Any]]:
        """Return lyric segments containing the query, at most ``limit`` rows."""
        rows = self._query(
            "SELECT * FROM verses WHERE content LIKE ? ESCAPE '\\'"
            " ORDER BY song_id, verse_number LIMIT ?",
            (like_pattern(query), limit),
        )
        return [dict(r) for r in rows]

    def add_verse(
        self, song_id: int, verse_number: int, content: str, verse_type: str = "verse"
    ) -> int:
        """Insert a lyric segment and return its ID."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO verses (song_id, verse_number, verse_type, content)"
                " VALUES (?, ?, ?, ?)",
                (song_id, verse_number, verse_type, content),
            )
            return int(cursor.lastrowid or 0)

    def update_verse(
        self, verse_id: int, verse_number: int, content: str, verse_type: str = "verse"
    ) -> None:
        """Update a lyric segment."""
        with self._transaction() as conn:
            conn.execute(
                "UPDATE verses SET verse_number = ?, verse_type = ?, content = ? WHERE id = ?",
                (verse_number, verse_type, content, verse_id),
            )

    def delete_verse(self, verse_id: int) -> None:
        """Delete a lyric segment."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM verses WHERE id = ?", (verse_id,))

    # -- Media -------------------------------------------------------------------

    def list_media(self, media_type: str | None = None) -> list[dict[str, Any]]:
        """Return media records, newest first, optionally filtered by type."""
        if media_type is None:
            rows = self._query("SELECT * FROM media ORDER BY created_at DESC, id DESC")
        else:
            rows = self._query(
                "SELECT * FROM media WHERE type = ? ORDER BY created_at DESC, id DESC",
                (media_type,),
            )
        return [dict(r) for r in rows]

    def get_media(self, media_id: int) -> dict[str, Any] | None:
        """Return a media record by ID, or None."""
        return _row_to_dict(self._query_one("SELECT * FROM media WHERE id = ?", (media_id,)))

    def add_media(
        self, name: str, media_type: str, file_path: str, thumbnail_path: str | None = None
    ) -> int:
        """Record an imported media file and return its ID."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "INSERT INTO media (name, type, file_path, thumbnail_path) VALUES (?, ?, ?, ?)",
                (name, media_type, file_path, thumbnail_path),
            )
            return int(cursor.lastrowid or 0)

    def delete_media(self, media_id: int) -> None:
        """Delete a media record (the file itself is removed by the caller)."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM media WHERE id = ?", (media_id,))
