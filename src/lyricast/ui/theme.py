"""Control window theme with dark/light mode detection.

Provides a ThemeManager singleton that resolves the configured theme
("system", "dark" or "light") to a palette and emits a signal when it
changes. The output window does not use the theme; it is styled by the
presentation template alone.

Usage:
    from lyricast.ui.theme import theme_manager

    theme_manager.apply_named("system")
    widget.setStyleSheet(f"color: {theme_manager.palette.text};")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import cast

from PySide6.QtCore import QObject, Qt, Signal
from PySide6.QtGui import QGuiApplication
from PySide6.QtWidgets import QApplication

from lyricast.ui.tokens import sizing, spacing

logger = logging.getLogger(__name__)

THEME_SYSTEM = "system"
THEME_DARK = "dark"
THEME_LIGHT = "light"
THEME_NAMES = (THEME_SYSTEM, THEME_DARK, THEME_LIGHT)


@dataclass(frozen=True)
class ThemePalette:
    """Named color palette for the control window.

    All values are CSS color strings.
    """

    name: str

    background: str  # Window background
    surface: str  # Panel background
    surface_hover: str  # List item hover
    surface_selected: str  # Selected list item

    border: str
    border_selected: str

    text: str
    text_secondary: str
    text_disabled: str

    live: str  # "Live" indicator and go-live button
    blackout: str  # Blackout button
    accent: str  # Brand accent
    warning: str  # Status bar notices

    scrollbar: str
    scrollbar_hover: str


DARK_PALETTE = ThemePalette(
    name=THEME_DARK,
    background="#1a1a2e",
    surface="#232342",
    surface_hover="#2f2f55",
    surface_selected="#3d3a6e",
    border="#33335a",
    border_selected="#764ba2",
    text="#e8e8f0",
    text_secondary="#a0a0b8",
    text_disabled="#60607a",
    live="#e53935",
    blackout="#000000",
    accent="#667eea",
    warning="#ffcc66",
    scrollbar="#4a4a70",
    scrollbar_hover="#6a6a90",
)

LIGHT_PALETTE = ThemePalette(
    name=THEME_LIGHT,
    background="#f4f4f8",
    surface="#ffffff",
    surface_hover="#ececf4",
    surface_selected="#dcd6f0",
    border="#d0d0dc",
    border_selected="#764ba2",
    text="#1a1a2e",
    text_secondary="#55556a",
    text_disabled="#9a9aae",
    live="#d32f2f",
    blackout="#000000",
    accent="#5a67d8",
    warning="#b26a00",
    scrollbar="#bbbbcc",
    scrollbar_hover="#9999aa",
)


class ThemeManager(QObject):
    """Holds the current palette and applies the global stylesheet.

    Example:
        theme_manager.apply_named(config.get_theme())
        theme_manager.theme_changed.connect(window.refresh_style)
    """

    theme_changed = Signal()

    def __init__(self) -> None:
        super().__init__()
        self._palette = DARK_PALETTE

    @property
    def palette(self) -> ThemePalette:
        """Return the current color palette."""
        return self._palette

    @property
    def is_dark(self) -> bool:
        """Return True if the current theme is dark."""
        return self._palette.name == THEME_DARK

    def detect_system_theme(self) -> ThemePalette:
        """Return the palette matching the system color scheme (dark if unknown)."""
        raw_app = QGuiApplication.instance()
        if raw_app is None:
            return DARK_PALETTE
        app = cast(QGuiApplication, raw_app)
        try:
            scheme = app.styleHints().colorScheme()
        except AttributeError:
            logger.debug("System theme detection not available, using dark theme")
            return DARK_PALETTE
        return LIGHT_PALETTE if scheme == Qt.ColorScheme.Light else DARK_PALETTE

    def palette_for(self, name: str) -> ThemePalette:
        """Resolve a theme name to a palette."""
        if name == THEME_DARK:
            return DARK_PALETTE
        if name == THEME_LIGHT:
            return LIGHT_PALETTE
        return self.detect_system_theme()

    def apply_named(self, name: str) -> None:
        """Apply the theme with the given name ("system", "dark" or "light")."""
        self.apply_theme(self.palette_for(name))

    def apply_theme(self, palette: ThemePalette | None = None) -> None:
        """Apply a palette to the application.

        Args:
            palette: Palette to apply. If None, auto-detects from system.
        """
        if palette is None:
            palette = self.detect_system_theme()

        old_name = self._palette.name
        self._palette = palette
        logger.info("Theme applied: %s", palette.name)

        raw_app = QApplication.instance()
        if raw_app is not None:
            cast(QApplication, raw_app).setStyleSheet(self._global_stylesheet())

        if palette.name != old_name:
            self.theme_changed.emit()

    def _global_stylesheet(self) -> str:
        p = self._palette
        return f"""
            QToolTip {{
                background-color: {p.surface};
                color: {p.text};
                border: 1px solid {p.border};
                padding: {spacing.xs}px;
            }}
            QScrollBar:vertical {{
                background: {p.background};
                width: {sizing.scrollbar_width}px;
            }}
            QScrollBar::handle:vertical {{
                background: {p.scrollbar};
                min-height: {sizing.scrollbar_min_handle}px;
                border-radius: {sizing.border_radius_md}px;
            }}
            QScrollBar::handle:vertical:hover {{
                background: {p.scrollbar_hover};
            }}
            QScrollBar::add-line:vertical, QScrollBar::sub-line:vertical {{
                height: 0px;
            }}
        """


def list_stylesheet(p: ThemePalette) -> str:
    """Return the stylesheet shared by the control window's item lists."""
    return f"""
        QListWidget {{
            background-color: {p.surface};
            border: 1px solid {p.border};
            border-radius: {sizing.border_radius_md}px;
            padding: {spacing.xs}px;
            color: {p.text};
        }}
        QListWidget::item {{
            padding: {spacing.sm}px;
            border-radius: {sizing.border_radius_sm}px;
        }}
        QListWidget::item:selected {{
            background-color: {p.surface_selected};
            color: {p.text};
        }}
        QListWidget::item:hover {{
            background-color: {p.surface_hover};
        }}
    """


def input_stylesheet(p: ThemePalette) -> str:
    """Return the stylesheet for line edits and text areas."""
    return f"""
        QLineEdit, QPlainTextEdit, QSpinBox, QComboBox {{
            background: {p.surface};
            border: 1px solid {p.border};
            border-radius: {sizing.border_radius_md}px;
            padding: {spacing.sm}px;
            color: {p.text};
            selection-background-color: {p.accent};
        }}
        QLineEdit:focus, QPlainTextEdit:focus {{
            border: 1px solid {p.accent};
        }}
    """


def button_stylesheet(background: str, foreground: str = "#ffffff") -> str:
    """Return the stylesheet of a filled action button."""
    p = theme_manager.palette
    return f"""
        QPushButton {{
            background: {background};
            border: 1px solid {p.border};
            border-radius: {sizing.border_radius_md}px;
            padding: {spacing.sm}px {spacing.lg}px;
            min-height: {sizing.button_height - 2 * spacing.sm}px;
            color: {foreground};
            font-weight: bold;
        }}
        QPushButton:hover {{
            border: 1px solid {p.border_selected};
        }}
        QPushButton:disabled {{
            background: {p.surface_hover};
            color: {p.text_disabled};
        }}
    """


# Module-level singleton; import this in widgets
theme_manager = ThemeManager()
