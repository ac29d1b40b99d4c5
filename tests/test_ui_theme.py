"""Tests for the control window theme."""

from unittest.mock import MagicMock, patch

import pytest
from PySide6.QtCore import Qt
from pytestqt.qtbot import QtBot

from lyricast.ui.theme import (
    DARK_PALETTE,
    LIGHT_PALETTE,
    THEME_NAMES,
    ThemeManager,
    button_stylesheet,
    input_stylesheet,
    list_stylesheet,
)


class TestThemePalette:
    """Test ThemePalette values."""

    def test_names(self) -> None:
        """Test palettes report their theme names."""
        assert DARK_PALETTE.name == "dark"
        assert LIGHT_PALETTE.name == "light"
        assert THEME_NAMES == ("system", "dark", "light")

    def test_palette_is_frozen(self) -> None:
        """Test that palettes are immutable."""
        with pytest.raises(AttributeError):
            DARK_PALETTE.background = "#000000"  # type: ignore[misc]

    def test_blackout_is_black(self) -> None:
        """Test the blackout button is black in both themes."""
        assert DARK_PALETTE.blackout == LIGHT_PALETTE.blackout == "#000000"


class TestThemeManager:
    """Test ThemeManager."""

    def test_default_is_dark(self) -> None:
        """Test a new manager starts dark."""
        manager = ThemeManager()
        assert manager.palette is DARK_PALETTE
        assert manager.is_dark

    def test_palette_for_names(self) -> None:
        """Test explicit names resolve without detection."""
        manager = ThemeManager()
        assert manager.palette_for("dark") is DARK_PALETTE
        assert manager.palette_for("light") is LIGHT_PALETTE

    def test_system_uses_detection(self) -> None:
        """Test "system" and unknown names detect the system scheme."""
        manager = ThemeManager()
        with patch.object(manager, "detect_system_theme", return_value=LIGHT_PALETTE) as detect:
            assert manager.palette_for("system") is LIGHT_PALETTE
            assert manager.palette_for("neon") is LIGHT_PALETTE
        assert detect.call_count == 2

    def test_detect_light_scheme(self) -> None:
        """Test a light system scheme selects the light palette."""
        manager = ThemeManager()
        app = MagicMock()
        app.styleHints.return_value.colorScheme.return_value = Qt.ColorScheme.Light
        with patch("lyricast.ui.theme.QGuiApplication.instance", return_value=app):
            assert manager.detect_system_theme() is LIGHT_PALETTE

    def test_detect_without_app(self) -> None:
        """Test detection falls back to dark without an application."""
        manager = ThemeManager()
        with patch("lyricast.ui.theme.QGuiApplication.instance", return_value=None):
            assert manager.detect_system_theme() is DARK_PALETTE

    def test_apply_named_emits_change(self, qtbot: QtBot) -> None:
        """Test switching palettes emits theme_changed."""
        manager = ThemeManager()
        with qtbot.waitSignal(manager.theme_changed, timeout=1000):
            manager.apply_named("light")
        assert manager.palette is LIGHT_PALETTE
        assert not manager.is_dark

    def test_same_palette_does_not_emit(self, qtbot: QtBot) -> None:
        """Test re-applying the current palette emits nothing."""
        manager = ThemeManager()
        with qtbot.assertNotEmitted(manager.theme_changed):
            manager.apply_named("dark")


class TestStylesheets:
    """Test shared stylesheet helpers."""

    def test_list_stylesheet_uses_palette(self) -> None:
        """Test list styles use the palette colors."""
        css = list_stylesheet(LIGHT_PALETTE)
        assert LIGHT_PALETTE.surface_selected in css
        assert "QListWidget::item:selected" in css

    def test_input_stylesheet_uses_accent(self) -> None:
        """Test inputs highlight focus with the accent color."""
        assert DARK_PALETTE.accent in input_stylesheet(DARK_PALETTE)

    def test_button_stylesheet_colors(self) -> None:
        """Test buttons use the given colors."""
        css = button_stylesheet("#e53935", "#000000")
        assert "background: #e53935" in css
        assert "color: #000000" in css
