"""Themed dialogs for adding songs and templates.

Usage:
    from lyricast.ui.widgets.dialogs import SongDialog

    dialog = SongDialog(parent, templates)
    if dialog.exec() == QDialog.DialogCode.Accepted:
        controller.add_song(**dialog.values())
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QFileDialog,
    QFormLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from lyricast.core.media import MediaKind
from lyricast.models.template import DEFAULT_FONT_COLOR, DEFAULT_FONT_SIZE, TemplateSnapshot
from lyricast.storage.library import DEFAULT_TEMPLATES, split_lyrics
from lyricast.ui.theme import button_stylesheet, input_stylesheet, theme_manager
from lyricast.ui.tokens import sizing, spacing, typography

SONG_CATEGORIES = ("Worship", "Hymn", "Praise", "Christmas", "Easter", "Other")
MIN_FONT_SIZE = 12
MAX_FONT_SIZE = 200


class _StyledDialog(QDialog):
    """Dialog frame with a title, a content area and Cancel/OK buttons."""

    def __init__(self, parent: QWidget | None, title: str, ok_text: str) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setWindowFlags(
            Qt.WindowType.Dialog
            | Qt.WindowType.WindowTitleHint
            | Qt.WindowType.CustomizeWindowHint
            | Qt.WindowType.WindowCloseButtonHint
        )
        self.setModal(True)
        self.setMinimumWidth(420)

        p = theme_manager.palette
        self.setStyleSheet(
            f"QDialog {{ background-color: {p.surface};"
            f" border: 1px solid {p.border_selected};"
            f" border-radius: {sizing.border_radius_lg}px; }}" + input_stylesheet(p)
        )

        self._layout = QVBoxLayout(self)
        self._layout.setSpacing(spacing.md)
        self._layout.setContentsMargins(spacing.xl, spacing.lg, spacing.xl, spacing.lg)

        title_label = QLabel(title)
        title_label.setStyleSheet(
            f"font-size: {typography.heading}pt; font-weight: bold;"
            f" color: {p.text}; background: transparent;"
        )
        self._layout.addWidget(title_label)

        self._form = QFormLayout()
        self._form.setSpacing(spacing.sm)
        self._layout.addLayout(self._form)

        self._error = QLabel()
        self._error.setStyleSheet(f"color: {p.warning}; background: transparent;")
        self._error.setVisible(False)
        self._layout.addWidget(self._error)

        btn_row = QHBoxLayout()
        btn_row.setSpacing(spacing.sm)
        btn_row.addStretch()

        cancel_btn = QPushButton("Cancel")
        cancel_btn.setStyleSheet(button_stylesheet(p.surface_hover, p.text))
        cancel_btn.clicked.connect(self.reject)
        btn_row.addWidget(cancel_btn)

        self._ok_btn = QPushButton(ok_text)
        self._ok_btn.setDefault(True)
        self._ok_btn.setStyleSheet(button_stylesheet(p.accent))
        self._ok_btn.clicked.connect(self._on_ok)
        btn_row.addWidget(self._ok_btn)
        self._layout.addLayout(btn_row)

    @property
    def error_text(self) -> str:
        """Return the validation message shown, if any."""
        return self._error.text()

    def _validate(self) -> str:
        """Return a validation message, or an empty string if valid."""
        return ""

    def _on_ok(self) -> None:
        message = self._validate()
        self._error.setText(message)
        self._error.setVisible(bool(message))
        if not message:
            self.accept()


class SongDialog(_StyledDialog):
    """Collects a new song: title, author, category, template and lyrics.

    Lyrics are pasted as plain text; blank lines separate the segments.
    """

    def __init__(self, parent: QWidget | None, templates: list[TemplateSnapshot]) -> None:
        """Initialize the dialog.

        Args:
            parent: Parent widget.
            templates: Templates offered as the song's default.
        """
        super().__init__(parent, "Add Song", "Add Song")
        self._templates = list(templates)

        self._title = QLineEdit()
        self._title.setPlaceholderText("Song title")
        self._form.addRow("Title", self._title)

        self._author = QLineEdit()
        self._form.addRow("Author", self._author)

        self._category = QComboBox()
        self._category.addItems(SONG_CATEGORIES)
        self._form.addRow("Category", self._category)

        self._template = QComboBox()
        self._template.addItem("No default template")
        for template in self._templates:
            self._template.addItem(template.name or "Untitled")
        self._form.addRow("Template", self._template)

        self._lyrics = QPlainTextEdit()
        self._lyrics.setPlaceholderText("Paste lyrics; separate verses with a blank line")
        self._lyrics.setMinimumHeight(220)
        self._layout.insertWidget(self._layout.count() - 2, self._lyrics)

    def set_values(self, title: str, lyrics: str, author: str = "") -> None:
        """Fill the form fields."""
        self._title.setText(title)
        self._lyrics.setPlainText(lyrics)
        self._author.setText(author)

    def values(self) -> dict[str, Any]:
        """Return keyword arguments for ``PresentationController.add_song``."""
        index = self._template.currentIndex() - 1
        template_id = self._templates[index].template_id if 0 <= index < len(self._templates) else None
        return {
            "title": self._title.text().strip(),
            "lyrics": self._lyrics.toPlainText(),
            "author": self._author.text().strip(),
            "category": self._category.currentText(),
            "template_id": template_id,
        }

    def _validate(self) -> str:
        if not self._title.text().strip():
            return "Enter a title."
        if not split_lyrics(self._lyrics.toPlainText()):
            return "Enter the lyrics."
        return ""


class TemplateDialog(_StyledDialog):
    """Collects a new template: gradient preset or image/video background."""

    _BACKGROUNDS = ("gradient", MediaKind.IMAGE.value, MediaKind.VIDEO.value)

    def __init__(self, parent: QWidget | None) -> None:
        """Initialize the dialog."""
        super().__init__(parent, "New Template", "Create")
        self._media_path: Path | None = None

        self._name = QLineEdit()
        self._form.addRow("Name", self._name)

        self._background = QComboBox()
        self._background.addItems(["Gradient", "Image", "Video"])
        self._background.currentIndexChanged.connect(self._on_background_changed)
        self._form.addRow("Background", self._background)

        self._gradient = QComboBox()
        for name, _ in DEFAULT_TEMPLATES:
            self._gradient.addItem(name)
        self._form.addRow("Gradient", self._gradient)

        file_row = QHBoxLayout()
        self._file_label = QLabel("No file chosen")
        file_row.addWidget(self._file_label, 1)
        self._browse_btn = QPushButton("Browse…")
        self._browse_btn.clicked.connect(self._on_browse)
        file_row.addWidget(self._browse_btn)
        self._file_row = QWidget()
        self._file_row.setLayout(file_row)
        self._form.addRow("File", self._file_row)

        self._overlay = QLineEdit("rgba(0,0,0,0.3)")
        self._form.addRow("Overlay", self._overlay)

        self._font_size = QSpinBox()
        self._font_size.setRange(MIN_FONT_SIZE, MAX_FONT_SIZE)
        self._font_size.setValue(DEFAULT_FONT_SIZE)
        self._form.addRow("Font size", self._font_size)

        self._font_color = QLineEdit(DEFAULT_FONT_COLOR)
        self._form.addRow("Font color", self._font_color)

        self._on_background_changed(0)

    @property
    def background_type(self) -> str:
        """Return "gradient", "image" or "video"."""
        return self._BACKGROUNDS[max(0, self._background.currentIndex())]

    @property
    def media_kind(self) -> MediaKind | None:
        """Return the media kind to import, None for gradients."""
        kind = self.background_type
        return None if kind == "gradient" else MediaKind(kind)

    @property
    def media_path(self) -> Path | None:
        """Return the chosen image/video file."""
        return self._media_path

    def set_media_path(self, path: Path | None) -> None:
        """Set the image/video file (as if chosen with Browse)."""
        self._media_path = path
        self._file_label.setText(path.name if path else "No file chosen")

    def set_values(self, name: str, background_index: int = 0) -> None:
        """Fill the name and background type."""
        self._name.setText(name)
        self._background.setCurrentIndex(background_index)

    def values(self) -> dict[str, Any]:
        """Return the template columns; asset paths are filled in on import."""
        gradient = DEFAULT_TEMPLATES[max(0, self._gradient.currentIndex())][1]
        return {
            "name": self._name.text().strip(),
            "background_type": self.background_type,
            "background_value": gradient if self.media_kind is None else "",
            "background_overlay": self._overlay.text().strip(),
            "font_size": self._font_size.value(),
            "font_color": self._font_color.text().strip() or DEFAULT_FONT_COLOR,
        }

    def _validate(self) -> str:
        if not self._name.text().strip():
            return "Enter a name."
        if self.media_kind is not None and self._media_path is None:
            return f"Choose the {self.media_kind.value} file."
        return ""

    def _on_background_changed(self, _index: int) -> None:
        uses_file = self.media_kind is not None
        self._gradient.setEnabled(not uses_file)
        self._file_row.setEnabled(uses_file)
        self._overlay.setEnabled(uses_file)
        if not uses_file:
            self.set_media_path(None)

    def _on_browse(self) -> None:
        kind = self.media_kind
        if kind is None:
            return
        patterns = " ".join(f"*{ext}" for ext in sorted(kind.extensions))
        title = f"Select Background {kind.value.capitalize()}"
        path, _ = QFileDialog.getOpenFileName(
            self, title, "", f"{kind.value.capitalize()}s ({patterns})"
        )
        if path:
            self.set_media_path(Path(path))
