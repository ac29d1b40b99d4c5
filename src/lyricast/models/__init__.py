"""Data models for collections, verses, templates and presentation payloads."""

from lyricast.models.collection import (
    CollectionKind,
    ContentCollection,
    Testament,
    testament_for_position,
)
from lyricast.models.payload import PayloadKind, PresentationPayload
from lyricast.models.selection import NO_INDEX, SelectionState
from lyricast.models.template import (
    Background,
    BackgroundMode,
    TemplateError,
    TemplateSnapshot,
)
from lyricast.models.verse import NormalizedVerse, VerseMatch

__all__ = [
    "Background",
    "BackgroundMode",
    "CollectionKind",
    "ContentCollection",
    "NO_INDEX",
    "NormalizedVerse",
    "PayloadKind",
    "PresentationPayload",
    "SelectionState",
    "TemplateError",
    "TemplateSnapshot",
    "Testament",
    "VerseMatch",
    "testament_for_position",
]
