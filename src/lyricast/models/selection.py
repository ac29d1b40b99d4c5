"""SelectionState: what the operator has selected in the control window."""

from dataclasses import dataclass

from lyricast.models.collection import ContentCollection
from lyricast.models.template import TemplateSnapshot
from lyricast.models.verse import NormalizedVerse

NO_INDEX = -1


@dataclass(frozen=True, slots=True)
class SelectionState:
    """Control-window selection, replaced wholesale on every change.

    Attributes:
        active_collection: Selected song or book.
        active_section: Selected chapter or song segment.
        active_verse: The verse that "go live" would present.
        active_verse_index: Index of active_verse in the navigable sequence,
            or -1 when it did not come from one (e.g. a search hit).
        active_template: Template sent along with presented text.
        is_live: Whether the operator has gone live and not closed the output.
    """

    active_collection: ContentCollection | None = None
    active_section: int | None = None
    active_verse: NormalizedVerse | None = None
    active_verse_index: int = NO_INDEX
    active_template: TemplateSnapshot | None = None
    is_live: bool = False

    @property
    def can_navigate(self) -> bool:
        """Return True if relative navigation is possible."""
        return self.active_verse_index != NO_INDEX

    @property
    def has_verse(self) -> bool:
        """Return True if a verse is selected."""
        return self.active_verse is not None
