"""Media helpers: data URLs, media import and template snapshots.

Image and video files are read on the control side only. They travel to the
output window embedded in the template as ``data:`` URLs.

Usage:
    from lyricast.core.media import build_template_snapshot, import_media

    media_id, path = import_media(library, Path("~/bg.jpg"), media_dir, MediaKind.IMAGE)
    snapshot = build_template_snapshot(library.get_template(template_id))
"""

from __future__ import annotations

import base64
import logging
import shutil
import time
from enum import Enum
from pathlib import Path
from typing import Any

from lyricast.models.template import (
    DEFAULT_FONT_COLOR,
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    DEFAULT_GRADIENT,
    DEFAULT_OVERLAY,
    DEFAULT_TEXT_ALIGN,
    DEFAULT_TEXT_SHADOW,
    TEXT_ALIGNMENTS,
    Background,
    BackgroundMode,
    TemplateSnapshot,
)
from lyricast.storage.library import SongLibrary

logger = logging.getLogger(__name__)

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".bmp": "image/bmp",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


class MediaKind(str, Enum):
    """Kind of imported media file."""

    IMAGE = "image"
    VIDEO = "video"

    @property
    def file_prefix(self) -> str:
        """Return the prefix of imported file names."""
        return "img" if self is MediaKind.IMAGE else "vid"

    @property
    def extensions(self) -> frozenset[str]:
        """Return the accepted file extensions (with leading dot)."""
        prefix = self.value + "/"
        return frozenset(ext for ext, mime in MIME_TYPES.items() if mime.startswith(prefix))


def mime_type_for(path: Path) -> str:
    """Return the MIME type for a file name, by extension."""
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def file_to_data_url(path: Path | str | None) -> str | None:
    """Read a file and return it as a base64 ``data:`` URL.

    Args:
        path: File to read.

    Returns:
        The data URL, or None if the path is empty, missing or unreadable.
    """
    if not path:
        return None
    file_path = Path(path)
    try:
        raw = file_path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Cannot read media file %s: %s", file_path, e)
        return None
    encoded = base64.b64encode(raw).decode("ascii")
    return f"data:{mime_type_for(file_path)};base64,{encoded}"


def import_media(
    library: SongLibrary, source_path: Path, media_dir: Path, kind: MediaKind
) -> tuple[int, Path]:
    """Copy a media file into the media directory and record it.

    Args:
        library: Library the media record is added to.
        source_path: File chosen by the operator.
        media_dir: Directory imported files live in.
        kind: Image or video.

    Returns:
        The new media ID and the path of the copied file.

    Raises:
        OSError: If the file cannot be copied.
        StorageError: If the record cannot be stored.
    """
    media_dir.mkdir(parents=True, exist_ok=True)
    stamp = int(time.time() * 1000)
    dest = media_dir / f"{kind.file_prefix}_{stamp}_{source_path.name}"
    shutil.copyfile(source_path, dest)
    thumbnail = str(dest) if kind is MediaKind.IMAGE else None
    media_id = library.add_media(source_path.stem, kind.value, str(dest), thumbnail)
    logger.info("Imported %s %s as %s", kind.value, source_path, dest)
    return media_id, dest


def delete_media(library: SongLibrary, media_id: int) -> bool:
    """Delete a media record and its file.

    Returns:
        True if the record existed.
    """
    media = library.get_media(media_id)
    if media is None:
        return False
    file_path = Path(media["file_path"])
    try:
        file_path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Cannot remove media file %s: %s", file_path, e)
    library.delete_media(media_id)
    return True


def build_template_snapshot(row: dict[str, Any] | None) -> TemplateSnapshot | None:
    """Turn a template row into a snapshot, embedding image/video assets.

    A missing or unreadable asset falls back to the default gradient.

    Args:
        row: Template row from the library, or None.

    Returns:
        The snapshot, or None if no row was given.
    """
    if row is None:
        return None

    background_type = (row.get("background_type") or "gradient").lower()
    value = row.get("background_value") or ""
    overlay = row.get("background_overlay") or DEFAULT_OVERLAY

    try:
        mode = BackgroundMode(background_type)
    except ValueError:
        logger.warning("Unknown background type %r in template %s", background_type, row.get("id"))
        mode = BackgroundMode.GRADIENT

    if mode.uses_asset:
        data_url = file_to_data_url(value)
        if data_url is None:
            logger.warning(
                "Template %r: %s asset %s missing, using default gradient",
                row.get("name"),
                mode.value,
                value,
            )
            background = Background.from_gradient(DEFAULT_GRADIENT)
        else:
            background = Background.from_asset(mode, data_url, overlay)
    else:
        background = Background.from_gradient(value or DEFAULT_GRADIENT)

    text_align = row.get("text_align") or DEFAULT_TEXT_ALIGN
    font_size = row.get("font_size") or DEFAULT_FONT_SIZE
    return TemplateSnapshot(
        name=row.get("name") or "",
        background=background,
        font_family=row.get("font_family") or DEFAULT_FONT_FAMILY,
        font_size=int(font_size) if int(font_size) > 0 else DEFAULT_FONT_SIZE,
        font_color=row.get("font_color") or DEFAULT_FONT_COLOR,
        text_align=text_align if text_align in TEXT_ALIGNMENTS else DEFAULT_TEXT_ALIGN,
        text_shadow=row.get("text_shadow") or DEFAULT_TEXT_SHADOW,
        template_id=row.get("id"),
    )


def load_template(library: SongLibrary, template_id: int | None) -> TemplateSnapshot | None:
    """Load a template from the library as a snapshot.

    Returns:
        The snapshot, or None if the ID is None or unknown.

    Raises:
        StorageError: If the library cannot be read.
    """
    if template_id is None:
        return None
    return build_template_snapshot(library.get_template(template_id))
