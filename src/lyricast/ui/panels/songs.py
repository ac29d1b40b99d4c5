"""Songs panel - song list with title/lyrics search."""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt, QTimer, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from lyricast.models.collection import ContentCollection
from lyricast.models.verse import VerseMatch
from lyricast.ui.theme import input_stylesheet, list_stylesheet, theme_manager
from lyricast.ui.tokens import spacing, typography

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_MS = 250


class SongsPanel(QWidget):
    """Song library list.

    With an empty search box the panel lists every song. While searching it
    lists matching lyric segments instead.

    Example:
        panel = SongsPanel()
        panel.song_selected.connect(controller.select_collection)
        panel.set_songs(controller.list_collections(CollectionKind.SONG))
    """

    song_selected = Signal(object)  # ContentCollection
    match_selected = Signal(object)  # VerseMatch
    search_requested = Signal(str)
    add_song_requested = Signal()
    delete_song_requested = Signal(object)  # ContentCollection

    def __init__(self) -> None:
        """Initialize the songs panel."""
        super().__init__()
        self._songs: list[ContentCollection] = []
        self._titles: dict[int, str] = {}

        self._search_timer = QTimer(self)
        self._search_timer.setSingleShot(True)
        self._search_timer.setInterval(SEARCH_DEBOUNCE_MS)
        self._search_timer.timeout.connect(self.search_now)

        p = theme_manager.palette
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(spacing.sm)

        header_row = QHBoxLayout()
        header = QLabel("Songs")
        header.setStyleSheet(f"font-weight: bold; font-size: {typography.title}pt;")
        header_row.addWidget(header)
        header_row.addStretch()

        self._add_btn = QPushButton("+")
        self._add_btn.setToolTip("Add song")
        self._add_btn.setFlat(True)
        self._add_btn.clicked.connect(self.add_song_requested.emit)
        header_row.addWidget(self._add_btn)

        self._delete_btn = QPushButton("−")
        self._delete_btn.setToolTip("Delete selected song")
        self._delete_btn.setFlat(True)
        self._delete_btn.setEnabled(False)
        self._delete_btn.clicked.connect(self._on_delete_clicked)
        header_row.addWidget(self._delete_btn)
        layout.addLayout(header_row)

        self._search = QLineEdit()
        self._search.setPlaceholderText("Search titles, authors or lyrics")
        self._search.setClearButtonEnabled(True)
        self._search.setStyleSheet(input_stylesheet(p))
        self._search.textChanged.connect(self._on_search_text_changed)
        layout.addWidget(self._search)

        self._list = QListWidget()
        self._list.setStyleSheet(list_stylesheet(p))
        self._list.itemClicked.connect(self._on_item_clicked)
        self._list.currentItemChanged.connect(self._on_current_changed)
        layout.addWidget(self._list)

    @property
    def search_text(self) -> str:
        """Return the current search text."""
        return self._search.text().strip()

    @property
    def is_searching(self) -> bool:
        """Return True if the list shows search results."""
        return bool(self.search_text)

    @property
    def item_count(self) -> int:
        """Return the number of rows in the list."""
        return self._list.count()

    def set_songs(self, songs: list[ContentCollection]) -> None:
        """Replace the song list (shown while not searching)."""
        self._songs = list(songs)
        self._titles = {song.id: song.display_name for song in songs}
        if not self.is_searching:
            self._show_songs()

    def set_matches(self, matches: list[VerseMatch]) -> None:
        """Show lyric search results."""
        self._list.clear()
        for match in matches:
            title = self._titles.get(match.collection_id, f"Song {match.collection_id}")
            first_line = match.text.split("\n", 1)[0]
            item = QListWidgetItem(f"{title} · {first_line}")
            item.setToolTip(match.text)
            item.setData(Qt.ItemDataRole.UserRole, match)
            self._list.addItem(item)
        logger.debug("Showing %d song matches", len(matches))

    def search_now(self) -> None:
        """Run the pending search immediately."""
        self._search_timer.stop()
        if self.is_searching:
            self.search_requested.emit(self.search_text)
        else:
            self._show_songs()

    def select_row(self, row: int) -> None:
        """Select a row as if it had been clicked."""
        item = self._list.item(row)
        if item is not None:
            self._list.setCurrentItem(item)
            self._on_item_clicked(item)

    def _show_songs(self) -> None:
        self._list.clear()
        for song in self._songs:
            label = song.display_name
            if song.author:
                label = f"{label} · {song.author}"
            item = QListWidgetItem(label)
            item.setData(Qt.ItemDataRole.UserRole, song)
            self._list.addItem(item)

    def _on_search_text_changed(self, _text: str) -> None:
        self._search_timer.start()

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        data = item.data(Qt.ItemDataRole.UserRole)
        if isinstance(data, ContentCollection):
            self.song_selected.emit(data)
        elif isinstance(data, VerseMatch):
            self.match_selected.emit(data)

    def _on_current_changed(
        self, current: QListWidgetItem | None, _previous: QListWidgetItem | None
    ) -> None:
        data = current.data(Qt.ItemDataRole.UserRole) if current is not None else None
        self._delete_btn.setEnabled(isinstance(data, ContentCollection))

    def _on_delete_clicked(self) -> None:
        item = self._list.currentItem()
        data = item.data(Qt.ItemDataRole.UserRole) if item is not None else None
        if isinstance(data, ContentCollection):
            self.delete_song_requested.emit(data)
