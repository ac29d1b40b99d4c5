"""Presentation controller: operator actions on the control side.

The controller owns the operator's ``SelectionState`` and is the only sender
on the presentation channel. Selecting content never touches the output
window; only go-live, live navigation, clear and blackout send payloads.

Storage failures are caught here, at the action boundary: the action is
abandoned, the error is logged and a short ``notice`` is emitted for the
status bar.

Usage:
    controller = PresentationController(songs, scripture, library, channel, windows)
    controller.select_collection(song)
    controller.select_verse_at(0)
    controller.go_live()
    controller.navigate_verse(+1)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

from PySide6.QtCore import QObject, Signal

from lyricast.core.channel import PresentationChannel
from lyricast.core.media import (
    MediaKind,
    build_template_snapshot,
    delete_media,
    import_media,
    load_template,
)
from lyricast.core.resolver import (
    DEFAULT_SEARCH_LIMIT,
    ContentResolver,
    ScriptureResolver,
    SongResolver,
)
from lyricast.core.windows import WindowLifecycleManager
from lyricast.models.collection import CollectionKind, ContentCollection, Testament
from lyricast.models.payload import PresentationPayload
from lyricast.models.selection import NO_INDEX, SelectionState
from lyricast.models.template import TemplateError, TemplateSnapshot
from lyricast.models.verse import NormalizedVerse, VerseMatch
from lyricast.storage.library import SongLibrary, StorageError

logger = logging.getLogger(__name__)


class PresentationController(QObject):
    """Selection state and presentation actions of the control window.

    Signals:
        selection_changed(SelectionState): Emitted after every selection change.
        sequence_changed(list): Emitted when the navigable verse list changes.
        notice(str): Short operator-facing message (storage failures).
    """

    selection_changed = Signal(object)
    sequence_changed = Signal(object)
    notice = Signal(str)

    def __init__(
        self,
        songs: SongResolver,
        scripture: ScriptureResolver,
        library: SongLibrary,
        channel: PresentationChannel,
        windows: WindowLifecycleManager,
        auto_resend: bool = False,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
        media_dir: Path | None = None,
        parent: QObject | None = None,
    ) -> None:
        """Initialize the controller with an empty selection.

        Args:
            songs: Resolver over the song library.
            scripture: Resolver over the scripture database.
            library: Song library, for templates and song edits.
            channel: Channel to the output window.
            windows: Output window lifecycle manager.
            auto_resend: Resend the last live payload when the output window
                is reopened after being closed from outside.
            search_limit: Maximum number of search results.
            media_dir: Directory imported background files are copied into.
            parent: Parent QObject.
        """
        super().__init__(parent)
        self._songs = songs
        self._scripture = scripture
        self._library = library
        self._channel = channel
        self._windows = windows
        self._auto_resend = auto_resend
        self._search_limit = search_limit
        self._media_dir = media_dir
        self._selection = SelectionState()
        self._sequence: list[NormalizedVerse] = []
        self._resend_pending = False

        self._windows.output_opened.connect(self._on_output_opened)
        self._windows.output_closed.connect(self._on_output_closed)

    # -- Properties --------------------------------------------------------------

    @property
    def selection(self) -> SelectionState:
        """Return the current selection."""
        return self._selection

    @property
    def sequence(self) -> list[NormalizedVerse]:
        """Return the verses relative navigation walks through."""
        return list(self._sequence)

    @property
    def is_live(self) -> bool:
        """Return True if the operator has gone live."""
        return self._selection.is_live

    @property
    def auto_resend(self) -> bool:
        """Return whether the last live payload is resent on reopen."""
        return self._auto_resend

    @auto_resend.setter
    def auto_resend(self, enabled: bool) -> None:
        """Enable or disable resending the last live payload on reopen."""
        self._auto_resend = enabled

    @property
    def search_limit(self) -> int:
        """Return the maximum number of search results."""
        return self._search_limit

    @search_limit.setter
    def search_limit(self, limit: int) -> None:
        """Set the maximum number of search results."""
        self._search_limit = max(1, limit)

    # -- Internal helpers --------------------------------------------------------

    def resolver_for(self, kind: CollectionKind) -> ContentResolver:
        """Return the resolver serving a collection kind."""
        return self._songs if kind is CollectionKind.SONG else self._scripture

    def _set_selection(self, selection: SelectionState) -> None:
        self._selection = selection
        self.selection_changed.emit(selection)

    def _set_sequence(self, sequence: list[NormalizedVerse]) -> None:
        self._sequence = sequence
        self.sequence_changed.emit(list(sequence))

    def _report(self, action: str, error: Exception) -> None:
        logger.exception("Failed to %s", action)
        self.notice.emit(f"Could not {action}: {error}")

    def _send_active(self) -> bool:
        verse = self._selection.active_verse
        if verse is None:
            return False
        payload = PresentationPayload.present(verse.text, self._selection.active_template)
        return self._channel.send(payload)

    # -- Queries -----------------------------------------------------------------

    def list_collections(
        self, kind: CollectionKind, testament: Testament | None = None
    ) -> list[ContentCollection]:
        """Return songs or scripture books (optionally one testament)."""
        try:
            if kind is CollectionKind.SCRIPTURE_BOOK and testament is not None:
                return self._scripture.list_collections(testament)
            return self.resolver_for(kind).list_collections(kind)
        except StorageError as e:
            self._report("load the library", e)
            return []

    def list_sections(self, collection: ContentCollection) -> list[int]:
        """Return the chapters or segment numbers of a collection."""
        try:
            return self.resolver_for(collection.kind).list_sections(collection.id)
        except StorageError as e:
            self._report(f"load {collection.display_name}", e)
            return []

    def search(self, text: str, kind: CollectionKind) -> list[VerseMatch]:
        """Search songs or scripture for ``text``."""
        try:
            return self.resolver_for(kind).search(text, self._search_limit)
        except StorageError as e:
            self._report("search", e)
            return []

    def list_templates(self) -> list[TemplateSnapshot]:
        """Return all library templates as snapshots."""
        try:
            rows = self._library.list_templates()
        except StorageError as e:
            self._report("load templates", e)
            return []
        snapshots: list[TemplateSnapshot] = []
        for row in rows:
            try:
                snapshot = build_template_snapshot(row)
            except TemplateError as e:
                logger.warning("Skipping invalid template %r: %s", row.get("name"), e)
                continue
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    # -- Selection ---------------------------------------------------------------

    def select_collection(self, collection: ContentCollection) -> None:
        """Select a song or book; the verse selection is reset.

        Songs load their segment sequence and, when they have one, their
        default template.
        """
        template = self._selection.active_template
        sequence: list[NormalizedVerse] = []
        try:
            if collection.kind is CollectionKind.SONG:
                sequence = self._songs.sequence(collection.id, None)
                song_template = load_template(self._library, collection.template_id)
                if song_template is not None:
                    template = song_template
        except (StorageError, TemplateError) as e:
            self._report(f"load {collection.display_name}", e)
            return

        self._set_sequence(sequence)
        self._set_selection(
            replace(
                self._selection,
                active_collection=collection,
                active_section=None,
                active_verse=None,
                active_verse_index=NO_INDEX,
                active_template=template,
            )
        )

    def select_section(self, section_id: int) -> None:
        """Select a chapter (scripture) or segment (song) of the active collection.

        For scripture the chapter's verses become the navigable sequence and
        no verse is selected. For a song the segment's verse is selected.
        """
        collection = self._selection.active_collection
        if collection is None:
            return
        if collection.kind is CollectionKind.SONG:
            for index, verse in enumerate(self._sequence):
                if verse.section_number == section_id:
                    self.select_verse_at(index)
                    return
            return

        try:
            sequence = self._scripture.sequence(collection.id, section_id)
        except StorageError as e:
            self._report(f"load {collection.reference(section_id)}", e)
            return
        self._set_sequence(sequence)
        self._set_selection(
            replace(
                self._selection,
                active_section=section_id,
                active_verse=None,
                active_verse_index=NO_INDEX,
            )
        )

    def select_verse_at(self, index: int) -> bool:
        """Select a verse of the navigable sequence by position.

        Returns:
            False if the index is out of range.
        """
        if not 0 <= index < len(self._sequence):
            return False
        verse = self._sequence[index]
        self._set_selection(
            replace(
                self._selection,
                active_section=verse.section_number,
                active_verse=verse,
                active_verse_index=index,
            )
        )
        return True

    def select_match(self, match: VerseMatch, kind: CollectionKind) -> bool:
        """Select a search hit.

        A song hit selects the segment within the song, so navigation
        works. A scripture hit is not part of a navigable sequence.

        Returns:
            False if the hit's collection no longer exists.
        """
        resolver = self.resolver_for(kind)
        try:
            collection = resolver.get_collection(match.collection_id)
        except StorageError as e:
            self._report("open search result", e)
            return False
        if collection is None:
            logger.debug("Search hit for missing collection %d", match.collection_id)
            return False

        if kind is CollectionKind.SONG:
            self.select_collection(collection)
            if self._selection.active_collection != collection:
                return False
            for index, verse in enumerate(self._sequence):
                if verse.section_number == match.section_number:
                    return self.select_verse_at(index)
            return False

        self._set_sequence([])
        self._set_selection(
            replace(
                self._selection,
                active_collection=collection,
                active_section=match.section_number,
                active_verse=match.to_verse(),
                active_verse_index=NO_INDEX,
            )
        )
        return True

    def select_template(self, template: TemplateSnapshot | None) -> None:
        """Use ``template`` for the next presented text."""
        self._set_selection(replace(self._selection, active_template=template))

    # -- Presentation ------------------------------------------------------------

    def go_live(self) -> bool:
        """Open the output window if needed and present the active verse.

        Returns:
            False if no verse is selected.
        """
        if self._selection.active_verse is None:
            logger.debug("Go live without a selected verse")
            return False
        self._resend_pending = False
        self._windows.open_output()
        if not self._selection.is_live:
            self._set_selection(replace(self._selection, is_live=True))
        return self._send_active()

    def update_live(self) -> bool:
        """Present the active verse again if live (e.g. after a template change)."""
        if not self._selection.is_live:
            return False
        return self._send_active()

    def navigate_verse(self, direction: int) -> bool:
        """Move through the sequence by ``direction`` steps, clamped at both ends.

        While live, the new verse is presented.

        Returns:
            True if the selection moved.
        """
        if not self._selection.can_navigate or not self._sequence:
            return False
        last = len(self._sequence) - 1
        index = max(0, min(self._selection.active_verse_index + direction, last))
        if index == self._selection.active_verse_index:
            return False
        self.select_verse_at(index)
        if self._selection.is_live:
            self._send_active()
        return True

    def clear(self) -> bool:
        """Clear the text on the output window."""
        return self._channel.send(PresentationPayload.clear())

    def blackout(self) -> bool:
        """Turn the output window black."""
        return self._channel.send(PresentationPayload.blackout())

    def open_output(self) -> None:
        """Open the output window without presenting anything."""
        self._windows.open_output()

    def close_output(self) -> None:
        """Close the output window and leave live mode."""
        self._windows.close_output()
        self._resend_pending = False
        if self._selection.is_live:
            self._set_selection(replace(self._selection, is_live=False))

    # -- Library edits -----------------------------------------------------------

    def add_song(
        self,
        title: str,
        lyrics: str,
        author: str = "",
        category: str = "Worship",
        template_id: int | None = None,
    ) -> int | None:
        """Create a song from pasted lyrics.

        Returns:
            The new song ID, or None if it could not be created.
        """
        try:
            return self._library.create_song_with_lyrics(
                title, lyrics, author=author, category=category, template_id=template_id
            )
        except (StorageError, ValueError) as e:
            self._report("add the song", e)
            return None

    def add_template(
        self,
        values: dict[str, Any],
        media_path: Path | None = None,
        kind: MediaKind | None = None,
    ) -> int | None:
        """Create a template, importing its background file first if given.

        Args:
            values: Template columns.
            media_path: Image or video chosen by the operator.
            kind: Kind of ``media_path``.

        Returns:
            The new template ID, or None if it could not be created.
        """
        try:
            if media_path is not None and kind is not None:
                if self._media_dir is None:
                    raise OSError("no media directory configured")
                _, dest = import_media(self._library, media_path, self._media_dir, kind)
                values = {**values, "background_type": kind.value, "background_value": str(dest)}
            return self._library.create_template(values)
        except (StorageError, OSError) as e:
            self._report("create the template", e)
            return None

    def rename_template(self, template: TemplateSnapshot, name: str) -> bool:
        """Rename a library template, keeping the active selection in step."""
        name = name.strip()
        if template.template_id is None or not name:
            return False
        try:
            row = self._library.get_template(template.template_id)
            if row is None:
                return False
            self._library.update_template(template.template_id, {**row, "name": name})
        except StorageError as e:
            self._report(f"rename {template.name}", e)
            return False
        active = self._selection.active_template
        if active is not None and active.template_id == template.template_id:
            self.select_template(replace(active, name=name))
        return True

    def delete_template(self, template: TemplateSnapshot) -> bool:
        """Delete a library template and the imported file only it used.

        If the template was active, no template is active afterwards.

        Returns:
            True if the template was deleted.
        """
        if template.template_id is None:
            return False
        try:
            row = self._library.get_template(template.template_id)
            if row is None:
                return False
            self._library.delete_template(template.template_id)
            self._delete_unused_media(row)
        except StorageError as e:
            self._report(f"delete {template.name}", e)
            return False
        active = self._selection.active_template
        if active is not None and active.template_id == template.template_id:
            self.select_template(None)
        return True

    def _delete_unused_media(self, row: dict[str, Any]) -> None:
        kind = row.get("background_type")
        path = row.get("background_value") or ""
        if kind not in (MediaKind.IMAGE.value, MediaKind.VIDEO.value) or not path:
            return
        if any(other.get("background_value") == path for other in self._library.list_templates()):
            return
        for media in self._library.list_media(kind):
            if media["file_path"] == path:
                delete_media(self._library, int(media["id"]))
                logger.info("Deleted media %s of template %r", path, row.get("name"))

    def delete_song(self, collection: ContentCollection) -> bool:
        """Delete a song; the selection is reset if it was active."""
        try:
            self._library.delete_song(collection.id)
        except StorageError as e:
            self._report(f"delete {collection.display_name}", e)
            return False
        active = self._selection.active_collection
        if active is not None and active.kind is CollectionKind.SONG and active.id == collection.id:
            self._set_sequence([])
            self._set_selection(
                SelectionState(
                    active_template=self._selection.active_template,
                    is_live=self._selection.is_live,
                )
            )
        return True

    # -- Window lifecycle --------------------------------------------------------

    def _on_output_opened(self) -> None:
        pending, self._resend_pending = self._resend_pending, False
        last = self._channel.last_sent
        if pending and self._auto_resend and self._selection.is_live and last is not None:
            logger.info("Resending last %s payload to reopened output", last.kind.value)
            self._channel.send(last)

    def _on_output_closed(self, external: bool) -> None:
        if external:
            # is_live stays set until the operator closes the output
            self._resend_pending = True
            logger.info("Output window closed outside the application")
