"""Core presentation logic.

Classes:
    SongResolver / ScriptureResolver: Normalized views over songs and scripture.
    PresentationState: State machine of one output window.
    PresentationChannel: Queued control -> output payload channel.
    WindowLifecycleManager: Opens and tracks the single output window.
    PresentationController: Operator actions and selection state.
    ConfigManager: QSettings wrapper for configuration.
"""

from lyricast.core.channel import PresentationChannel
from lyricast.core.config import ConfigManager
from lyricast.core.controller import PresentationController
from lyricast.core.presentation import OutputState, PresentationState
from lyricast.core.resolver import ContentResolver, ScriptureResolver, SongResolver
from lyricast.core.schema import ResolvedSchema, detect_schema
from lyricast.core.windows import WindowLifecycleManager

__all__ = [
    "ConfigManager",
    "ContentResolver",
    "OutputState",
    "PresentationChannel",
    "PresentationController",
    "PresentationState",
    "ResolvedSchema",
    "ScriptureResolver",
    "SongResolver",
    "WindowLifecycleManager",
    "detect_schema",
]
