"""Main entry point for the Lyricast application."""

import argparse
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication, QMessageBox

from lyricast.core.channel import PresentationChannel
from lyricast.core.config import ConfigManager
from lyricast.core.controller import PresentationController
from lyricast.core.resolver import ScriptureResolver, SongResolver
from lyricast.core.windows import WindowLifecycleManager
from lyricast.storage.library import SongLibrary, StorageError
from lyricast.ui.main_window import ControlWindow
from lyricast.ui.theme import theme_manager

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the command line parser."""
    parser = argparse.ArgumentParser(
        prog="lyricast",
        description="Lyricast: song lyrics and scripture on a second screen",
    )
    parser.add_argument(
        "--library", type=Path, default=None, help="song library database (SQLite)",
    )
    parser.add_argument(
        "--bible", type=Path, default=None, help="scripture database (SQLite, read-only)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="enable debug logging",
    )
    return parser


def log_scripture_status(scripture: ScriptureResolver) -> int:
    """Log how many scripture verses are available.

    Returns:
        The verse count, 0 if the database cannot be counted.
    """
    try:
        count = scripture.verse_count()
    except StorageError:
        logger.exception("Cannot count scripture verses")
        return 0
    logger.info("Scripture verses available: %d", count)
    return count


def main() -> int:
    """Run the Lyricast application.

    Returns:
        Exit code (0 for success).
    """
    # Set app metadata before creating QApplication (required for macOS)
    QApplication.setApplicationName("Lyricast")
    QApplication.setApplicationDisplayName("Lyricast")
    QApplication.setOrganizationName("Lyricast")
    QApplication.setOrganizationDomain("lyricast.local")

    app = QApplication(sys.argv)
    parsed = build_parser().parse_args(app.arguments()[1:])

    logging.basicConfig(
        level=logging.DEBUG if parsed.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = ConfigManager()
    theme_manager.apply_named(config.get_theme())

    library = SongLibrary(parsed.library or config.get_library_path())
    try:
        library.initialize()
    except StorageError as e:
        logger.exception("Cannot open the song library")
        QMessageBox.critical(None, "Lyricast", f"Cannot open the song library:\n{e}")
        return 1

    bible_path = parsed.bible or config.find_scripture_path()
    scripture = ScriptureResolver.from_path(bible_path)
    log_scripture_status(scripture)

    channel = PresentationChannel()
    windows = WindowLifecycleManager(channel, preferred_screen=config.get_screen_index())
    controller = PresentationController(
        SongResolver(library),
        scripture,
        library,
        channel,
        windows,
        auto_resend=config.get_auto_resend(),
        search_limit=config.get_search_limit(),
        media_dir=config.get_media_dir(),
    )

    window = ControlWindow(controller, config)
    window.load(scripture_available=scripture.is_available)
    window.show()

    exit_code = app.exec()

    # Cleanup
    windows.close_output()
    scripture.close()
    library.close()
    config.sync()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
