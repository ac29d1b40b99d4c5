"""Collection model: a song or a scripture book."""

from dataclasses import dataclass
from enum import Enum

# Books 1-39 are the Old Testament, 40 onwards the New Testament
_LAST_OLD_TESTAMENT_POSITION = 39


class CollectionKind(str, Enum):
    """Kind of content a collection holds."""

    SONG = "song"
    SCRIPTURE_BOOK = "scripture_book"


class Testament(str, Enum):
    """Scripture testament, derived from a book's canonical position."""

    OLD = "OT"
    NEW = "NT"


def testament_for_position(position: int) -> Testament:
    """Classify a book by its canonical ordinal position.

    Args:
        position: 1-based canonical book position.

    Returns:
        Testament.OLD for positions up to 39, Testament.NEW afterwards.
    """
    if position <= _LAST_OLD_TESTAMENT_POSITION:
        return Testament.OLD
    return Testament.NEW


@dataclass(frozen=True, slots=True)
class ContentCollection:
    """A song or a scripture book.

    Attributes:
        id: Song ID or book number.
        primary_name: Main display name (song title, or the book name stored
            in the scripture database).
        secondary_name: Alternate name (author for songs, English book name
            for scripture).
        kind: Whether this is a song or a scripture book.
        ordinal_position: Sort position; canonical book order for scripture.
        author: Song author (songs only).
        category: Song category such as "Worship" or "Hymn" (songs only).
        template_id: Default template for the song, if any.
    """

    id: int
    primary_name: str
    secondary_name: str = ""
    kind: CollectionKind = CollectionKind.SONG
    ordinal_position: int = 0
    author: str = ""
    category: str = ""
    template_id: int | None = None

    @property
    def is_scripture(self) -> bool:
        """Return True if this collection is a scripture book."""
        return self.kind is CollectionKind.SCRIPTURE_BOOK

    @property
    def testament(self) -> Testament | None:
        """Return the testament of a scripture book, None for songs."""
        if not self.is_scripture:
            return None
        return testament_for_position(self.ordinal_position)

    @property
    def display_name(self) -> str:
        """Return the primary name, falling back to the secondary name."""
        return self.primary_name or self.secondary_name

    def reference(self, section: int, verse: int | None = None) -> str:
        """Format a human-readable reference such as "John 3:16".

        Args:
            section: Chapter or segment number.
            verse: Verse number, omitted for whole sections.

        Returns:
            The formatted reference.
        """
        if verse is None:
            return f"{self.display_name} {section}"
        return f"{self.display_name} {section}:{verse}"
