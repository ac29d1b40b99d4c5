"""Scripture panel - books, chapters and verse search."""

from __future__ import annotations

import logging

from PySide6.QtCore import QSize, Qt, QTimer, Signal
from PySide6.QtWidgets import (
    QComboBox,
    QLabel,
    QLineEdit,
    QListView,
    QListWidget,
    QListWidgetItem,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from lyricast.models.collection import ContentCollection, Testament
from lyricast.models.verse import VerseMatch
from lyricast.ui.panels.songs import SEARCH_DEBOUNCE_MS
from lyricast.ui.theme import input_stylesheet, list_stylesheet, theme_manager
from lyricast.ui.tokens import spacing, typography

logger = logging.getLogger(__name__)

_TESTAMENT_CHOICES: tuple[tuple[str, Testament | None], ...] = (
    ("All books", None),
    ("Old Testament", Testament.OLD),
    ("New Testament", Testament.NEW),
)

_CHAPTER_CELL = QSize(44, 32)

_BROWSE_PAGE = 0
_SEARCH_PAGE = 1


class ScripturePanel(QWidget):
    """Scripture browser: testament filter, books, chapters and search.

    Example:
        panel = ScripturePanel()
        panel.book_selected.connect(on_book)
        panel.set_books(controller.list_collections(CollectionKind.SCRIPTURE_BOOK))
    """

    book_selected = Signal(object)  # ContentCollection
    chapter_selected = Signal(int)
    testament_changed = Signal(object)  # Testament | None
    search_requested = Signal(str)
    match_selected = Signal(object)  # VerseMatch

    def __init__(self) -> None:
        """Initialize the scripture panel."""
        super().__init__()
        self._search_timer = QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(SEARCH_DEBOUNCE_MS)
        self._search_timer.timeout.connect(self.search_now)

        p = theme_manager.palette
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(spacing.sm)

        header = QLabel("Scripture")
        header.setStyleSheet(f"font-weight: bold; font-size: {typography.title}pt;")
        layout.addWidget(header)

        self._status = QLabel()
        self._status.setStyleSheet(f"color: {p.text_secondary}; font-size: {typography.small}pt;")
        self._status.setWordWrap(True)
        self._status.setVisible(False)
        layout.addWidget(self._status)

        self._search = QLineEdit()
        self._search.setPlaceholderText("Search verses")
        self._search.setClearButtonEnabled(True)
        self._search.setStyleSheet(input_stylesheet(p))
        self._search.textChanged.connect(lambda _text: self._search_timer.start())
        layout.addWidget(self._search)

        self._pages = QStackedWidget()
        layout.addWidget(self._pages)

        browse = QWidget()
        browse_layout = QVBoxLayout(browse)
        browse_layout.setContentsMargins(0, 0, 0, 0)
        browse_layout.setSpacing(spacing.sm)

        self._testament = QComboBox()
        self._testament.setStyleSheet(input_stylesheet(p))
        for label, _ in _TESTAMENT_CHOICES:
            self._testament.addItem(label)
        self._testament.currentIndexChanged.connect(self._on_testament_changed)
        browse_layout.addWidget(self._testament)

        self._books = QListWidget()
        self._books.setStyleSheet(list_stylesheet(p))
        self._books.itemClicked.connect(self._on_book_clicked)
        browse_layout.addWidget(self._books, 2)

        self._chapters = QListWidget()
        self._chapters.setViewMode(QListView.ViewMode.IconMode)
        self._chapters.setFlow(QListView.Flow.LeftToRight)
        self._chapters.setWrapping(True)
        self._chapters.setResizeMode(QListView.ResizeMode.Adjust)
        self._chapters.setMovement(QListView.Movement.Static)
        self._chapters.setGridSize(_CHAPTER_CELL)
        self._chapters.setStyleSheet(list_stylesheet(p))
        self._chapters.itemClicked.connect(self._on_chapter_clicked)
        browse_layout.addWidget(self._chapters, 1)
        self._pages.insertWidget(_BROWSE_PAGE, browse)

        self._results = QListWidget()
        self._results.setStyleSheet(list_stylesheet(p))
        self._results.setWordWrap(True)
        self._results.itemClicked.connect(self._on_result_clicked)
        self._pages.insertWidget(_SEARCH_PAGE, self._results)

    @property
    def search_text(self) -> str:
        """Return the current search text."""
        return self._search.text().strip()

    @property
    def testament(self) -> Testament | None:
        """Return the selected testament filter (None for all books)."""
        return _TESTAMENT_CHOICES[max(0, self._testament.currentIndex())][1]

    @property
    def book_count(self) -> int:
        """Return the number of listed books."""
        return self._books.count()

    @property
    def chapter_count(self) -> int:
        """Return the number of listed chapters."""
        return self._chapters.count()

    @property
    def result_count(self) -> int:
        """Return the number of listed search results."""
        return self._results.count()

    def set_unavailable(self, message: str) -> None:
        """Show a message instead of the browser (no usable database)."""
        self._status.setText(message)
        self._status.setVisible(bool(message))
        self._search.setEnabled(not message)
        self._testament.setEnabled(not message)

    def set_books(self, books: list[ContentCollection]) -> None:
        """Replace the book list; chapters are cleared."""
        self._books.clear()
        self._chapters.clear()
        for book in books:
            label = book.display_name
            if book.secondary_name and book.secondary_name != label:
                label = f"{label} ({book.secondary_name})"
            item = QListWidgetItem(label)
            item.setData(Qt.ItemDataRole.UserRole, book)
            self._books.addItem(item)

    def set_chapters(self, chapters: list[int]) -> None:
        """Replace the chapter grid."""
        self._chapters.clear()
        for chapter in chapters:
            item = QListWidgetItem(str(chapter))
            item.setTextAlignment(Qt.AlignmentFlag.AlignCenter)
            item.setData(Qt.ItemDataRole.UserRole, chapter)
            self._chapters.addItem(item)

    def set_matches(self, matches: list[tuple[str, VerseMatch]]) -> None:
        """Show search results as (reference, match) pairs."""
        self._results.clear()
        for reference, match in matches:
            item = QListWidgetItem(f"{reference}  {match.text}")
            item.setData(Qt.ItemDataRole.UserRole, match)
            self._results.addItem(item)

    def search_now(self) -> None:
        """Run the pending search immediately."""
        self._search_timer.stop()
        if self.search_text:
            self._pages.setCurrentIndex(_SEARCH_PAGE)
            self.search_requested.emit(self.search_text)
        else:
            self._results.clear()
            self._pages.setCurrentIndex(_BROWSE_PAGE)

    def select_book_row(self, row: int) -> None:
        """Select a book as if it had been clicked."""
        item = self._books.item(row)
        if item is not None:
            self._books.setCurrentItem(item)
            self._on_book_clicked(item)

    def select_chapter_row(self, row: int) -> None:
        """Select a chapter as if it had been clicked."""
        item = self._chapters.item(row)
        if item is not None:
            self._chapters.setCurrentItem(item)
            self._on_chapter_clicked(item)

    def select_result_row(self, row: int) -> None:
        """Select a search result as if it had been clicked."""
        item = self._results.item(row)
        if item is not None:
            self._results.setCurrentItem(item)
            self._on_result_clicked(item)

    def _on_testament_changed(self, _index: int) -> None:
        self.testament_changed.emit(self.testament)

    def _on_book_clicked(self, item: QListWidgetItem) -> None:
        book = item.data(Qt.ItemDataRole.UserRole)
        if isinstance(book, ContentCollection):
            self.book_selected.emit(book)

    def _on_chapter_clicked(self, item: QListWidgetItem) -> None:
        chapter = item.data(Qt.ItemDataRole.UserRole)
        if chapter is not None:
            self.chapter_selected.emit(int(chapter))

    def _on_result_clicked(self, item: QListWidgetItem) -> None:
        match = item.data(Qt.ItemDataRole.UserRole)
        if isinstance(match, VerseMatch):
            self.match_selected.emit(match)
