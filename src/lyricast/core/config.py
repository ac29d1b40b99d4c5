"""Configuration manager using QSettings for persistent storage."""

import logging
from pathlib import Path

from PySide6.QtCore import QSettings, QStandardPaths

logger = logging.getLogger(__name__)

# Library
_KEY_LIBRARY_DB_PATH = "library/db_path"
_KEY_MEDIA_DIR = "library/media_dir"

# Scripture
_KEY_SCRIPTURE_DB_PATH = "scripture/db_path"
_KEY_SEARCH_LIMIT = "scripture/search_limit"

# Output window
_KEY_SCREEN_INDEX = "output/screen_index"

# Presentation
_KEY_AUTO_RESEND = "presentation/auto_resend"

# Appearance
_KEY_THEME = "appearance/theme"

LIBRARY_FILE_NAME = "lyricast.db"
MEDIA_DIR_NAME = "media"
SCRIPTURE_FILE_NAMES = ("bible.db", "bible.sqlite", "kjv.db", "scripture.db")

DEFAULT_SEARCH_LIMIT = 50
MIN_SEARCH_LIMIT = 1
MAX_SEARCH_LIMIT = 500
AUTO_SCREEN_INDEX = -1
THEMES = ("system", "dark", "light")


class ConfigManager:
    """Wrapper around QSettings for type-safe config access.

    QSettings stores config in platform-specific locations:
    - Windows: HKEY_CURRENT_USER\\Software\\Lyricast\\Lyricast
    - macOS: ~/Library/Preferences/com.Lyricast.Lyricast.plist
    - Linux: ~/.config/Lyricast/Lyricast.conf

    Example:
        config = ConfigManager()
        library = SongLibrary(config.get_library_path())
    """

    def __init__(self, organization: str = "Lyricast", application: str = "Lyricast") -> None:
        """Initialize the config manager.

        Args:
            organization: Organization name for QSettings.
            application: Application name for QSettings.
        """
        self._settings = QSettings(organization, application)

    @property
    def settings(self) -> QSettings:
        """Return the underlying QSettings instance."""
        return self._settings

    @staticmethod
    def data_dir() -> Path:
        """Return the per-user application data directory."""
        location = QStandardPaths.writableLocation(
            QStandardPaths.StandardLocation.AppDataLocation
        )
        return Path(location) if location else Path.home() / ".lyricast"

    def _path_value(self, key: str) -> str:
        value = self._settings.value(key, "", str)
        return str(value) if value else ""

    # -- Library settings ------------------------------------------------------

    def get_library_path(self) -> Path:
        """Return the song library database path.

        Returns:
            Configured path, or ``lyricast.db`` in the app data directory.
        """
        value = self._path_value(_KEY_LIBRARY_DB_PATH)
        return Path(value) if value else self.data_dir() / LIBRARY_FILE_NAME

    def set_library_path(self, path: Path | str) -> None:
        """Set the song library database path (empty for the default)."""
        self._settings.setValue(_KEY_LIBRARY_DB_PATH, str(path) if path else "")

    def get_media_dir(self) -> Path:
        """Return the directory imported media files are copied into."""
        value = self._path_value(_KEY_MEDIA_DIR)
        return Path(value) if value else self.data_dir() / MEDIA_DIR_NAME

    def set_media_dir(self, path: Path | str) -> None:
        """Set the media directory (empty for the default)."""
        self._settings.setValue(_KEY_MEDIA_DIR, str(path) if path else "")

    # -- Scripture settings ----------------------------------------------------

    def get_scripture_path(self) -> Path | None:
        """Return the configured scripture database path, or None."""
        value = self._path_value(_KEY_SCRIPTURE_DB_PATH)
        return Path(value) if value else None

    def set_scripture_path(self, path: Path | str) -> None:
        """Set the scripture database path (empty to search candidates)."""
        self._settings.setValue(_KEY_SCRIPTURE_DB_PATH, str(path) if path else "")

    def scripture_candidates(self) -> list[Path]:
        """Return the paths tried for the scripture database, in order.

        The configured path comes first, followed by well-known file names
        in the app data directory and the current directory.
        """
        candidates: list[Path] = []
        configured = self.get_scripture_path()
        if configured is not None:
            candidates.append(configured)
        for base in (self.data_dir(), Path.cwd()):
            candidates.extend(base / name for name in SCRIPTURE_FILE_NAMES)
        return candidates

    def find_scripture_path(self) -> Path | None:
        """Return the first existing scripture candidate, or None."""
        for candidate in self.scripture_candidates():
            if candidate.is_file():
                return candidate
        logger.info("No scripture database found in %d candidates", len(self.scripture_candidates()))
        return None

    def get_search_limit(self) -> int:
        """Return the maximum number of search results.

        Returns:
            Limit (default 50, clamped to 1-500).
        """
        value = self._settings.value(_KEY_SEARCH_LIMIT, DEFAULT_SEARCH_LIMIT, int)
        return max(MIN_SEARCH_LIMIT, min(MAX_SEARCH_LIMIT, int(value)))  # type: ignore[arg-type]

    def set_search_limit(self, limit: int) -> None:
        """Set the maximum number of search results.

        Args:
            limit: Result limit (1-500).
        """
        self._settings.setValue(_KEY_SEARCH_LIMIT, max(MIN_SEARCH_LIMIT, min(MAX_SEARCH_LIMIT, limit)))

    # -- Output settings -------------------------------------------------------

    def get_screen_index(self) -> int:
        """Return the preferred output screen index (-1 for automatic)."""
        value = self._settings.value(_KEY_SCREEN_INDEX, AUTO_SCREEN_INDEX, int)
        index = int(value)  # type: ignore[arg-type]
        return index if index >= 0 else AUTO_SCREEN_INDEX

    def set_screen_index(self, index: int) -> None:
        """Set the preferred output screen index (-1 for automatic)."""
        self._settings.setValue(_KEY_SCREEN_INDEX, index if index >= 0 else AUTO_SCREEN_INDEX)

    # -- Presentation settings -------------------------------------------------

    def get_auto_resend(self) -> bool:
        """Return whether the live payload is resent to a reopened output window.

        Returns:
            True if enabled (default False).
        """
        return bool(self._settings.value(_KEY_AUTO_RESEND, False, bool))

    def set_auto_resend(self, enabled: bool) -> None:
        """Enable or disable resending the live payload on reopen."""
        self._settings.setValue(_KEY_AUTO_RESEND, enabled)

    # -- Appearance settings ---------------------------------------------------

    def get_theme(self) -> str:
        """Return the theme preference.

        Returns:
            One of "system", "dark", "light". Default "system".
        """
        value = self._settings.value(_KEY_THEME, "system", str)
        return str(value) if value in THEMES else "system"

    def set_theme(self, theme: str) -> None:
        """Set the theme preference.

        Args:
            theme: One of "system", "dark", "light".
        """
        self._settings.setValue(_KEY_THEME, theme)

    # -- General settings ------------------------------------------------------

    def clear(self) -> None:
        """Clear all settings (useful for testing or reset)."""
        self._settings.clear()

    def sync(self) -> None:
        """Force settings to be written to disk."""
        self._settings.sync()
