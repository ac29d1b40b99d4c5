"""Control window: library browser on the left, live controls on the right.

Layout:
+-------------------------------------+
| [Songs | Scripture] | Live panel    |
|  list / search      | verses        |
|                     | preview       |
|                     | buttons       |
+-------------------------------------+
"""

from __future__ import annotations

import logging

from PySide6.QtCore import QEvent, QObject, Qt
from PySide6.QtGui import QAction, QCloseEvent, QKeyEvent
from PySide6.QtWidgets import (
    QAbstractSpinBox,
    QApplication,
    QDialog,
    QHBoxLayout,
    QInputDialog,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QSplitter,
    QTabWidget,
    QTextEdit,
    QToolBar,
    QWidget,
)

from lyricast.core.config import ConfigManager
from lyricast.core.controller import PresentationController
from lyricast.models.collection import CollectionKind, ContentCollection, Testament
from lyricast.models.selection import SelectionState
from lyricast.models.template import TemplateSnapshot
from lyricast.models.verse import VerseMatch
from lyricast.ui.panels.live import LivePanel
from lyricast.ui.panels.scripture import ScripturePanel
from lyricast.ui.panels.songs import SongsPanel
from lyricast.ui.theme import theme_manager
from lyricast.ui.tokens import sizing, spacing, typography
from lyricast.ui.widgets.dialogs import SongDialog, TemplateDialog

logger = logging.getLogger(__name__)

NOTICE_TIMEOUT_MS = 5000

_NAVIGATION_KEYS = {int(Qt.Key.Key_Left): -1, int(Qt.Key.Key_Right): 1}
_TEXT_ENTRY_TYPES = (QLineEdit, QTextEdit, QPlainTextEdit, QAbstractSpinBox)

_SONGS_TAB = 0
_SCRIPTURE_TAB = 1


def is_text_entry(widget: QObject | None) -> bool:
    """Return True if arrow keys belong to ``widget`` (text entry fields)."""
    return isinstance(widget, _TEXT_ENTRY_TYPES)


class ControlWindow(QMainWindow):
    """Operator window driving the presentation.

    Left/Right arrow keys navigate verses unless a text field has focus or
    a modal dialog is open. Closing this window closes the output window.

    Example:
        window = ControlWindow(controller, config)
        window.load()
        window.show()
    """

    def __init__(
        self,
        controller: PresentationController,
        config: ConfigManager | None = None,
    ) -> None:
        """Initialize the control window.

        Args:
            controller: The presentation controller.
            config: Optional ConfigManager for preferences.
        """
        super().__init__()
        self._controller = controller
        self._config = config
        self._books: dict[int, ContentCollection] = {}

        self._setup_ui()
        self._setup_style()
        self._connect_signals()

        theme_manager.theme_changed.connect(self._setup_style)
        app = QApplication.instance()
        if app is not None:
            app.installEventFilter(self)

    def _setup_ui(self) -> None:
        self.setWindowTitle("Lyricast")
        self.setMinimumSize(960, 620)

        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self._open_action = QAction("Open Output", self)
        self._open_action.triggered.connect(self._controller.open_output)
        toolbar.addAction(self._open_action)

        self._add_song_action = QAction("Add Song", self)
        self._add_song_action.triggered.connect(self.open_add_song_dialog)
        toolbar.addAction(self._add_song_action)

        self._add_template_action = QAction("New Template", self)
        self._add_template_action.triggered.connect(self.open_template_dialog)
        toolbar.addAction(self._add_template_action)

        self._rename_template_action = QAction("Rename Template", self)
        self._rename_template_action.triggered.connect(self.rename_active_template)
        toolbar.addAction(self._rename_template_action)

        self._delete_template_action = QAction("Delete Template", self)
        self._delete_template_action.triggered.connect(self.delete_active_template)
        toolbar.addAction(self._delete_template_action)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QHBoxLayout(central)
        layout.setContentsMargins(spacing.md, spacing.md, spacing.md, spacing.md)
        layout.setSpacing(spacing.lg)

        splitter = QSplitter()

        self._tabs = QTabWidget()
        self._tabs.setMinimumWidth(sizing.panel_min_side)
        self._songs_panel = SongsPanel()
        self._scripture_panel = ScripturePanel()
        self._tabs.insertTab(_SONGS_TAB, self._songs_panel, "Songs")
        self._tabs.insertTab(_SCRIPTURE_TAB, self._scripture_panel, "Scripture")

        self._live_panel = LivePanel()

        splitter.addWidget(self._tabs)
        splitter.addWidget(self._live_panel)
        splitter.setSizes([360, 600])
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        layout.addWidget(splitter)

    def _setup_style(self) -> None:
        p = theme_manager.palette
        self.setStyleSheet(f"""
            QMainWindow {{
                background-color: {p.background};
            }}
            QWidget {{
                color: {p.text};
                font-family: {typography.font_family};
                font-size: {typography.body}pt;
            }}
            QTabWidget::pane {{
                border: none;
            }}
            QToolBar {{
                background: {p.surface};
                border: none;
                spacing: {spacing.sm}px;
            }}
        """)
        self.statusBar().setStyleSheet(
            f"background-color: {p.background}; color: {p.warning};"
            f" font-size: {typography.small}pt;"
        )

    def _connect_signals(self) -> None:
        c = self._controller
        songs = self._songs_panel
        scripture = self._scripture_panel
        live = self._live_panel

        songs.song_selected.connect(c.select_collection)
        songs.match_selected.connect(lambda m: c.select_match(m, CollectionKind.SONG))
        songs.search_requested.connect(self._on_song_search)
        songs.add_song_requested.connect(self.open_add_song_dialog)
        songs.delete_song_requested.connect(self._on_delete_song)

        scripture.testament_changed.connect(self._on_testament_changed)
        scripture.book_selected.connect(self._on_book_selected)
        scripture.chapter_selected.connect(c.select_section)
        scripture.search_requested.connect(self._on_scripture_search)
        scripture.match_selected.connect(
            lambda m: c.select_match(m, CollectionKind.SCRIPTURE_BOOK)
        )

        live.verse_activated.connect(c.select_verse_at)
        live.template_chosen.connect(self._on_template_chosen)
        live.go_live_requested.connect(c.go_live)
        live.previous_requested.connect(lambda: c.navigate_verse(-1))
        live.next_requested.connect(lambda: c.navigate_verse(1))
        live.clear_requested.connect(c.clear)
        live.blackout_requested.connect(c.blackout)
        live.close_output_requested.connect(c.close_output)

        c.sequence_changed.connect(live.set_sequence)
        c.selection_changed.connect(self._on_selection_changed)
        c.notice.connect(self.show_notice)

    # -- Properties ----------------------------------------------------------------

    @property
    def controller(self) -> PresentationController:
        """Return the presentation controller."""
        return self._controller

    @property
    def songs_panel(self) -> SongsPanel:
        """Return the songs panel."""
        return self._songs_panel

    @property
    def scripture_panel(self) -> ScripturePanel:
        """Return the scripture panel."""
        return self._scripture_panel

    @property
    def live_panel(self) -> LivePanel:
        """Return the live panel."""
        return self._live_panel

    @property
    def config(self) -> ConfigManager | None:
        """Return the config manager."""
        return self._config

    # -- Loading -------------------------------------------------------------------

    def load(self, scripture_available: bool = True) -> None:
        """Fill the panels from the library and select a default template."""
        self.reload_songs()
        self.reload_templates()
        if scripture_available:
            self._load_books(self._scripture_panel.testament)
        else:
            self._scripture_panel.set_unavailable("No scripture database found.")

    def reload_songs(self) -> None:
        """Reload the song list."""
        self._songs_panel.set_songs(self._controller.list_collections(CollectionKind.SONG))

    def reload_templates(self) -> None:
        """Reload the template picker, selecting the first template if none is active."""
        templates = self._controller.list_templates()
        self._live_panel.set_templates(templates)
        if self._controller.selection.active_template is None and templates:
            self._controller.select_template(templates[0])
        else:
            self._live_panel.set_selection(self._controller.selection)

    def _load_books(self, testament: Testament | None) -> None:
        books = self._controller.list_collections(CollectionKind.SCRIPTURE_BOOK, testament)
        if testament is None:
            self._books = {book.id: book for book in books}
        self._scripture_panel.set_books(books)

    def show_notice(self, message: str) -> None:
        """Show a transient message in the status bar."""
        self.statusBar().showMessage(message, NOTICE_TIMEOUT_MS)

    # -- Panel handlers ------------------------------------------------------------

    def _on_selection_changed(self, selection: SelectionState) -> None:
        self._live_panel.set_selection(selection)

    def _on_template_chosen(self, template: TemplateSnapshot) -> None:
        self._controller.select_template(template)
        self._controller.update_live()

    def _on_song_search(self, text: str) -> None:
        self._songs_panel.set_matches(self._controller.search(text, CollectionKind.SONG))

    def _on_scripture_search(self, text: str) -> None:
        matches = self._controller.search(text, CollectionKind.SCRIPTURE_BOOK)
        self._scripture_panel.set_matches([(self._reference(m), m) for m in matches])

    def _reference(self, match: VerseMatch) -> str:
        book = self._books.get(match.collection_id)
        if book is None:
            return f"{match.collection_id} {match.section_number}:{match.verse_number}"
        return book.reference(match.section_number, match.verse_number)

    def _on_testament_changed(self, testament: object) -> None:
        self._load_books(testament if isinstance(testament, Testament) else None)

    def _on_book_selected(self, book: ContentCollection) -> None:
        self._controller.select_collection(book)
        self._scripture_panel.set_chapters(self._controller.list_sections(book))

    def _on_delete_song(self, song: ContentCollection) -> None:
        answer = QMessageBox.question(
            self,
            "Delete Song",
            f"Delete “{song.display_name}” and its lyrics?",
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        if self._controller.delete_song(song):
            self.reload_songs()

    # -- Dialogs -------------------------------------------------------------------

    def open_add_song_dialog(self) -> None:
        """Ask for a new song and add it to the library."""
        dialog = SongDialog(self, self._controller.list_templates())
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        song_id = self._controller.add_song(**dialog.values())
        if song_id is not None:
            self.reload_songs()
            self.show_notice(f"Added “{dialog.values()['title']}”")

    def open_template_dialog(self) -> None:
        """Ask for a new template and add it to the library."""
        dialog = TemplateDialog(self)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return
        template_id = self._controller.add_template(
            dialog.values(), dialog.media_path, dialog.media_kind
        )
        if template_id is not None:
            self.reload_templates()

    def rename_active_template(self) -> None:
        """Ask for a new name for the active template."""
        template = self._controller.selection.active_template
        if template is None or template.template_id is None:
            return
        name, ok = QInputDialog.getText(self, "Rename Template", "Name:", text=template.name)
        if ok and self._controller.rename_template(template, name):
            self.reload_templates()

    def delete_active_template(self) -> None:
        """Delete the active template after confirmation."""
        template = self._controller.selection.active_template
        if template is None or template.template_id is None:
            return
        answer = QMessageBox.question(
            self,
            "Delete Template",
            f"Delete the template “{template.name}”?",
        )
        if answer != QMessageBox.StandardButton.Yes:
            return
        if self._controller.delete_template(template):
            self.reload_templates()

    # -- Keyboard navigation -------------------------------------------------------

    def navigation_blocked(self, target: QObject | None = None) -> bool:
        """Return True if arrow keys must not navigate verses."""
        if QApplication.activeModalWidget() is not None:
            return True
        return is_text_entry(target) or is_text_entry(QApplication.focusWidget())

    def handle_navigation_key(self, key: int, target: QObject | None = None) -> bool:
        """Navigate for Left/Right unless blocked.

        Returns:
            True if the key was consumed.
        """
        direction = _NAVIGATION_KEYS.get(int(key))
        if direction is None or self.navigation_blocked(target):
            return False
        self._controller.navigate_verse(direction)
        return True

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802
        """Route Left/Right key presses inside this window to verse navigation."""
        if event.type() == QEvent.Type.KeyPress and isinstance(watched, QWidget):
            if watched.window() is self and isinstance(event, QKeyEvent):
                if self.handle_navigation_key(event.key(), watched):
                    return True
        return super().eventFilter(watched, event)

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        """Close the output window together with the control window."""
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self)
        self._controller.close_output()
        super().closeEvent(event)
