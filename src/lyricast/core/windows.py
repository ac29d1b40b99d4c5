"""Output window lifecycle: at most one output window, opened on demand.

The manager creates the output window on the presentation screen, attaches
it to the channel as the sole receiver and watches for it being closed from
outside the application (window manager, Alt+F4). After any close a later
``open_output`` builds a fresh window.

Usage:
    from lyricast.core.windows import WindowLifecycleManager

    windows = WindowLifecycleManager(channel)
    windows.output_opened.connect(on_opened)
    windows.open_output()
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from PySide6.QtCore import QObject, SignalInstance, Signal
from PySide6.QtGui import QGuiApplication, QScreen

from lyricast.core.channel import PresentationChannel
from lyricast.models.payload import PresentationPayload

logger = logging.getLogger(__name__)

AUTO_SCREEN = -1


class OutputSurface(Protocol):
    """What the manager needs from an output window."""

    closed: SignalInstance

    def apply_payload(self, payload: PresentationPayload) -> None:
        """Apply a presentation payload."""

    def show_on(self, screen: QScreen | None) -> None:
        """Show frameless and full screen on the given screen."""

    def close(self) -> bool:
        """Close the window."""


ScreensProvider = Callable[[], Sequence[QScreen]]
WindowFactory = Callable[[], OutputSurface]


def _default_window_factory() -> OutputSurface:
    from lyricast.ui.output_window import OutputWindow

    return OutputWindow()


def pick_screen(screens: Sequence[QScreen], preferred: int = AUTO_SCREEN) -> QScreen | None:
    """Choose the screen for the output window.

    Args:
        screens: Available screens, primary first.
        preferred: Configured screen index, or AUTO_SCREEN.

    Returns:
        The preferred screen when valid, else the second screen when there
        is more than one, else the only screen (None without screens).
    """
    if not screens:
        return None
    if 0 <= preferred < len(screens):
        return screens[preferred]
    if preferred != AUTO_SCREEN:
        logger.warning("Configured screen %d not available, using default", preferred)
    return screens[1] if len(screens) > 1 else screens[0]


class WindowLifecycleManager(QObject):
    """Creates, tracks and destroys the single output window.

    Signals:
        output_opened: Emitted when a new output window was created.
        output_closed(bool): Emitted when the output window went away;
            True when it was closed from outside the application.
    """

    output_opened = Signal()
    output_closed = Signal(bool)

    def __init__(
        self,
        channel: PresentationChannel,
        screens: ScreensProvider | None = None,
        window_factory: WindowFactory | None = None,
        preferred_screen: int = AUTO_SCREEN,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the manager without opening a window.

        Args:
            channel: Channel the output window receives payloads from.
            screens: Returns the available screens (default: Qt's screens).
            window_factory: Builds an output window (default: OutputWindow).
            preferred_screen: Configured screen index, or AUTO_SCREEN.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._channel = channel
        self._screens = screens or QGuiApplication.screens
        self._window_factory = window_factory or _default_window_factory
        self._preferred_screen = preferred_screen
        self._window: OutputSurface | None = None

    @property
    def has_output(self) -> bool:
        """Return True if the output window exists."""
        return self._window is not None

    @property
    def output_window(self) -> OutputSurface | None:
        """Return the output window, or None."""
        return self._window

    @property
    def preferred_screen(self) -> int:
        """Return the configured screen index."""
        return self._preferred_screen

    @preferred_screen.setter
    def preferred_screen(self, index: int) -> None:
        """Set the screen index used by the next ``open_output``."""
        self._preferred_screen = index

    def open_output(self) -> OutputSurface:
        """Open the output window if absent and return it.

        Calling this while the window exists has no effect.
        """
        if self._window is not None:
            return self._window

        screens = list(self._screens())
        screen = pick_screen(screens, self._preferred_screen)
        window = self._window_factory()
        window.closed.connect(lambda w=window: self._on_window_closed(w))
        self._window = window
        self._channel.attach(window.apply_payload)
        window.show_on(screen)
        logger.info(
            "Output window opened on %s (%d screens)",
            screen.name() if screen is not None else "default screen",
            len(screens),
        )
        self.output_opened.emit()
        return window

    def close_output(self) -> None:
        """Close the output window; no-op if there is none."""
        window = self._window
        if window is None:
            return
        self._window = None
        self._channel.detach()
        window.close()
        logger.info("Output window closed")
        self.output_closed.emit(False)

    def _on_window_closed(self, window: OutputSurface) -> None:
        if window is not self._window:
            return
        self._window = None
        self._channel.detach()
        logger.info("Output window closed externally")
        self.output_closed.emit(True)
