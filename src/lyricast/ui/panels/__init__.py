"""UI panels for the control window."""

from lyricast.ui.panels.live import LivePanel
from lyricast.ui.panels.scripture import ScripturePanel
from lyricast.ui.panels.songs import SongsPanel

__all__ = ["LivePanel", "ScripturePanel", "SongsPanel"]
