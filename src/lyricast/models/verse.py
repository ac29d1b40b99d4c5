"""Verse models shared by songs and scripture."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class NormalizedVerse:
    """One presentable unit of text.

    For scripture this is a single verse of a chapter. For songs it is one
    lyric segment (a slide), stored as the only verse of its section.

    Attributes:
        collection_id: Song ID or scripture book number.
        section_number: Chapter number (scripture) or segment number (song).
        verse_number: Verse number within the section.
        text: The text shown on the output window.
        label: Segment type for songs ("verse", "chorus", ...), empty for scripture.
    """

    collection_id: int
    section_number: int
    verse_number: int
    text: str
    label: str = ""

    @property
    def key(self) -> tuple[int, int, int]:
        """Return the (collection, section, verse) identity of this verse."""
        return (self.collection_id, self.section_number, self.verse_number)

    @property
    def preview(self) -> str:
        """Return the first line of the text for list display."""
        return self.text.split("\n", 1)[0]


@dataclass(frozen=True, slots=True)
class VerseMatch:
    """A search hit returned by a resolver."""

    collection_id: int
    section_number: int
    verse_number: int
    text: str

    def to_verse(self) -> NormalizedVerse:
        """Return the hit as a NormalizedVerse."""
        return NormalizedVerse(
            collection_id=self.collection_id,
            section_number=self.section_number,
            verse_number=self.verse_number,
            text=self.text,
        )
