"""Reusable UI widgets."""

from lyricast.ui.widgets.dialogs import SongDialog, TemplateDialog

__all__ = ["SongDialog", "TemplateDialog"]
