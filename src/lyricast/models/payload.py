"""Presentation payload: the unit sent from the control to the output window."""

from dataclasses import dataclass
from enum import Enum

from lyricast.models.template import TemplateSnapshot


class PayloadKind(str, Enum):
    """What the output window should do with a payload."""

    PRESENT = "present"
    CLEAR = "clear"
    BLACKOUT = "blackout"


@dataclass(frozen=True, slots=True)
class PresentationPayload:
    """Immutable message describing what the output window should show.

    Use the ``present``, ``clear`` and ``blackout`` constructors rather than
    building instances directly.

    Attributes:
        kind: The payload kind.
        text: Text to show (PRESENT only).
        template: Template to apply; None keeps the last known template.
    """

    kind: PayloadKind
    text: str | None = None
    template: TemplateSnapshot | None = None

    def __post_init__(self) -> None:
        """Strip text and template from non-present payloads."""
        if self.kind is not PayloadKind.PRESENT:
            object.__setattr__(self, "text", None)
            object.__setattr__(self, "template", None)
        elif self.text is None:
            object.__setattr__(self, "text", "")

    @classmethod
    def present(
        cls, text: str, template: TemplateSnapshot | None = None
    ) -> "PresentationPayload":
        """Build a payload that shows text, optionally replacing the template."""
        return cls(PayloadKind.PRESENT, text, template)

    @classmethod
    def clear(cls) -> "PresentationPayload":
        """Build a payload that clears the text."""
        return cls(PayloadKind.CLEAR)

    @classmethod
    def blackout(cls) -> "PresentationPayload":
        """Build a payload that forces the output to black."""
        return cls(PayloadKind.BLACKOUT)
