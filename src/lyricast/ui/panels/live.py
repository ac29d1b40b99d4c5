"""Live panel - verse sequence, preview, template and presentation controls."""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from lyricast.models.selection import SelectionState
from lyricast.models.template import TemplateSnapshot
from lyricast.models.verse import NormalizedVerse
from lyricast.ui.theme import button_stylesheet, input_stylesheet, list_stylesheet, theme_manager
from lyricast.ui.tokens import sizing, spacing, typography

logger = logging.getLogger(__name__)


class LivePanel(QWidget):
    """Right-hand panel driving the output window.

    Shows the navigable verses of the active selection, a preview of the
    selected verse, the template picker and the presentation buttons.

    Example:
        panel = LivePanel()
        panel.go_live_requested.connect(controller.go_live)
        controller.selection_changed.connect(panel.set_selection)
    """

    verse_activated = Signal(int)
    template_chosen = Signal(object)  # TemplateSnapshot | None
    go_live_requested = Signal()
    previous_requested = Signal()
    next_requested = Signal()
    clear_requested = Signal()
    blackout_requested = Signal()
    close_output_requested = Signal()

    def __init__(self) -> None:
        """Initialize the live panel."""
        super().__init__()
        self._templates: list[TemplateSnapshot] = []
        self._updating = False

        p = theme_manager.palette
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(spacing.md)

        header_row = QHBoxLayout()
        self._title = QLabel("Nothing selected")
        self._title.setStyleSheet(f"font-weight: bold; font-size: {typography.title}pt;")
        header_row.addWidget(self._title, 1)

        self._badge = QLabel()
        header_row.addWidget(self._badge)
        layout.addLayout(header_row)

        self._verses = QListWidget()
        self._verses.setStyleSheet(list_stylesheet(p))
        self._verses.setWordWrap(True)
        self._verses.itemClicked.connect(self._on_verse_clicked)
        self._verses.itemDoubleClicked.connect(lambda _item: self.go_live_requested.emit())
        layout.addWidget(self._verses, 2)

        self._preview = QLabel()
        self._preview.setWordWrap(True)
        self._preview.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._preview.setMinimumHeight(sizing.preview_min_height)
        self._preview.setStyleSheet(f"""
            QLabel {{
                background-color: {p.background};
                border: 1px solid {p.border};
                border-radius: {sizing.border_radius_md}px;
                padding: {spacing.md}px;
                font-size: {typography.preview}pt;
                color: {p.text};
            }}
        """)
        layout.addWidget(self._preview, 1)

        template_row = QHBoxLayout()
        template_label = QLabel("Template")
        template_label.setStyleSheet(f"color: {p.text_secondary};")
        template_row.addWidget(template_label)
        self._template_combo = QComboBox()
        self._template_combo.setStyleSheet(input_stylesheet(p))
        self._template_combo.currentIndexChanged.connect(self._on_template_index_changed)
        template_row.addWidget(self._template_combo, 1)
        layout.addLayout(template_row)

        nav_row = QHBoxLayout()
        self._prev_btn = QPushButton("◀ Previous")
        self._prev_btn.setStyleSheet(button_stylesheet(p.surface_hover, p.text))
        self._prev_btn.clicked.connect(self.previous_requested.emit)
        nav_row.addWidget(self._prev_btn)
        self._next_btn = QPushButton("Next ▶")
        self._next_btn.setStyleSheet(button_stylesheet(p.surface_hover, p.text))
        self._next_btn.clicked.connect(self.next_requested.emit)
        nav_row.addWidget(self._next_btn)
        layout.addLayout(nav_row)

        action_row = QHBoxLayout()
        self._live_btn = QPushButton("Go Live")
        self._live_btn.setStyleSheet(button_stylesheet(p.live))
        self._live_btn.clicked.connect(self.go_live_requested.emit)
        action_row.addWidget(self._live_btn, 2)
        self._clear_btn = QPushButton("Clear")
        self._clear_btn.setStyleSheet(button_stylesheet(p.surface_hover, p.text))
        self._clear_btn.clicked.connect(self.clear_requested.emit)
        action_row.addWidget(self._clear_btn, 1)
        self._blackout_btn = QPushButton("Blackout")
        self._blackout_btn.setStyleSheet(button_stylesheet(p.blackout))
        self._blackout_btn.clicked.connect(self.blackout_requested.emit)
        action_row.addWidget(self._blackout_btn, 1)
        self._close_btn = QPushButton("Close Output")
        self._close_btn.setStyleSheet(button_stylesheet(p.surface_hover, p.text))
        self._close_btn.clicked.connect(self.close_output_requested.emit)
        action_row.addWidget(self._close_btn, 1)
        layout.addLayout(action_row)

        self.set_selection(SelectionState())

    # -- Accessors used by the control window and tests -------------------------

    @property
    def preview_text(self) -> str:
        """Return the previewed verse text."""
        return self._preview.text()

    @property
    def live_button_text(self) -> str:
        """Return the label of the go-live button."""
        return self._live_btn.text()

    @property
    def badge_text(self) -> str:
        """Return the live badge label."""
        return self._badge.text()

    @property
    def verse_count(self) -> int:
        """Return the number of listed verses."""
        return self._verses.count()

    @property
    def current_row(self) -> int:
        """Return the highlighted verse row (-1 for none)."""
        return self._verses.currentRow()

    @property
    def template_names(self) -> list[str]:
        """Return the names offered in the template picker."""
        return [template.name for template in self._templates]

    # -- Updates -----------------------------------------------------------------

    def set_sequence(self, verses: list[NormalizedVerse]) -> None:
        """Replace the verse list."""
        self._updating = True
        try:
            self._verses.clear()
            for verse in verses:
                prefix = verse.label.capitalize() if verse.label else str(verse.verse_number)
                item = QListWidgetItem(f"{prefix}  {verse.text}")
                item.setData(Qt.ItemDataRole.UserRole, verse.key)
                self._verses.addItem(item)
        finally:
            self._updating = False

    def set_templates(self, templates: list[TemplateSnapshot]) -> None:
        """Replace the template picker entries."""
        self._updating = True
        try:
            self._templates = list(templates)
            self._template_combo.clear()
            for template in self._templates:
                self._template_combo.addItem(template.name or "Untitled")
        finally:
            self._updating = False

    def set_selection(self, selection: SelectionState) -> None:
        """Reflect a selection: highlight, preview, template and live state."""
        self._updating = True
        try:
            collection = selection.active_collection
            if collection is None:
                self._title.setText("Nothing selected")
            elif collection.is_scripture and selection.active_section is not None:
                verse_number = selection.active_verse.verse_number if selection.active_verse else None
                self._title.setText(collection.reference(selection.active_section, verse_number))
            else:
                self._title.setText(collection.display_name)

            if 0 <= selection.active_verse_index < self._verses.count():
                self._verses.setCurrentRow(selection.active_verse_index)
            else:
                self._verses.clearSelection()
                self._verses.setCurrentRow(-1)

            self._preview.setText(selection.active_verse.text if selection.active_verse else "")
            self._select_template(selection.active_template)
            self._set_live(selection.is_live)

            self._live_btn.setEnabled(selection.has_verse)
            self._prev_btn.setEnabled(selection.can_navigate and selection.active_verse_index > 0)
            self._next_btn.setEnabled(
                selection.can_navigate and selection.active_verse_index < self._verses.count() - 1
            )
        finally:
            self._updating = False

    def _select_template(self, template: TemplateSnapshot | None) -> None:
        if template is None:
            self._template_combo.setCurrentIndex(-1)
            return
        for index, candidate in enumerate(self._templates):
            same_id = template.template_id is not None and candidate.template_id == template.template_id
            if same_id or candidate == template:
                self._template_combo.setCurrentIndex(index)
                return

    def _set_live(self, live: bool) -> None:
        p = theme_manager.palette
        self._live_btn.setText("Update Live" if live else "Go Live")
        self._badge.setText("● LIVE" if live else "OFFLINE")
        color = p.live if live else p.text_disabled
        self._badge.setStyleSheet(
            f"color: {color}; font-weight: bold; font-size: {typography.small}pt;"
            f" padding: {spacing.xs}px {spacing.sm}px;"
            f" border: 1px solid {color}; border-radius: {sizing.border_radius_sm}px;"
        )

    def _on_verse_clicked(self, item: QListWidgetItem) -> None:
        self.verse_activated.emit(self._verses.row(item))

    def _on_template_index_changed(self, index: int) -> None:
        if self._updating or not 0 <= index < len(self._templates):
            return
        self.template_chosen.emit(self._templates[index])
