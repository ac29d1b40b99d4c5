"""Presentation state of one output surface.

The output window owns exactly one ``PresentationState``. Text and template
are tracked separately: the template is sticky and survives clear and
blackout, so the next ``present`` without a template reuses it.

States:
    IDLE: Nothing shown (template background only).
    SHOWING: Text shown over the template.
    BLACKOUT: Solid black, nothing else rendered.
"""

from __future__ import annotations

import logging
from enum import Enum

from lyricast.models.payload import PayloadKind, PresentationPayload
from lyricast.models.template import TemplateSnapshot

logger = logging.getLogger(__name__)


class OutputState(str, Enum):
    """State of the output surface."""

    IDLE = "idle"
    SHOWING = "showing"
    BLACKOUT = "blackout"


class PresentationState:
    """State machine applied to incoming payloads.

    Example:
        state = PresentationState()
        state.present("Amazing grace", template)
        state.blackout()
        state.template  # still the template
    """

    def __init__(self) -> None:
        """Initialize in IDLE with no text and no template."""
        self._state = OutputState.IDLE
        self._text: str | None = None
        self._template: TemplateSnapshot | None = None
        self._current: PresentationPayload | None = None

    @property
    def state(self) -> OutputState:
        """Return the current state."""
        return self._state

    @property
    def text(self) -> str | None:
        """Return the shown text, or None outside SHOWING."""
        return self._text

    @property
    def template(self) -> TemplateSnapshot | None:
        """Return the last known template."""
        return self._template

    @property
    def current_payload(self) -> PresentationPayload | None:
        """Return the last payload applied through ``apply``."""
        return self._current

    @property
    def visible_template(self) -> TemplateSnapshot | None:
        """Return the template to render, None while blacked out."""
        if self._state is OutputState.BLACKOUT:
            return None
        return self._template

    def present(self, text: str, template: TemplateSnapshot | None = None) -> None:
        """Show text, replacing the template only when one is given."""
        if template is not None:
            self._template = template
        self._text = text
        self._state = OutputState.SHOWING

    def clear(self) -> None:
        """Drop the text and keep the template."""
        self._text = None
        self._state = OutputState.IDLE

    def blackout(self) -> None:
        """Go black, keeping the template for a later present."""
        self._text = None
        self._state = OutputState.BLACKOUT

    def apply(self, payload: PresentationPayload) -> None:
        """Apply a payload and make it the current one."""
        if payload.kind is PayloadKind.PRESENT:
            self.present(payload.text or "", payload.template)
        elif payload.kind is PayloadKind.CLEAR:
            self.clear()
        else:
            self.blackout()
        self._current = payload
        logger.debug("Output state -> %s", self._state.value)
