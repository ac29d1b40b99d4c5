"""Design tokens for spacing, sizing and typography of the control window.

Color tokens live in theme.py (ThemePalette). Layout tokens live here.

Usage:
    from lyricast.ui.tokens import spacing, typography, sizing

    layout.setContentsMargins(spacing.md, spacing.md, spacing.md, spacing.md)
    header.setStyleSheet(f"font-size: {typography.title}pt;")
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SpacingTokens:
    """Spacing scale based on a 4px base unit."""

    xs: int = 2  # Tight gaps
    sm: int = 4  # Between related elements
    md: int = 8  # Panel padding
    lg: int = 12  # Between panels
    xl: int = 16  # Dialog margins


@dataclass(frozen=True)
class TypographyTokens:
    """Font size scale in points."""

    font_family: str = "'Inter', 'Segoe UI', 'Helvetica Neue', sans-serif"
    caption: int = 9  # References, fine print
    small: int = 10  # Status text
    body: int = 11  # Lists
    title: int = 13  # Panel headers
    preview: int = 16  # Live preview text
    heading: int = 15  # Dialog titles


@dataclass(frozen=True)
class SizingTokens:
    """Widget sizing constants in pixels."""

    border_radius_sm: int = 3  # Badges
    border_radius_md: int = 6  # Buttons, lists
    border_radius_lg: int = 10  # Dialogs
    button_height: int = 32  # Action buttons
    scrollbar_width: int = 8  # Scrollbar track width/height
    scrollbar_min_handle: int = 20  # Min scrollbar handle dimension
    panel_min_side: int = 220  # Min library panel width
    preview_min_height: int = 160  # Live preview box
    output_margin: int = 48  # Text margin on the output window


# Module-level singletons; import these in widgets
spacing = SpacingTokens()
typography = TypographyTokens()
sizing = SizingTokens()
