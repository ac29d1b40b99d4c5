"""Template snapshot: the visual styling bundle sent with presented text."""

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_GRADIENT = "linear-gradient(135deg, #667eea 0%, #764ba2 100%)"
DEFAULT_OVERLAY = "rgba(0,0,0,0.3)"
DEFAULT_FONT_FAMILY = "Inter"
DEFAULT_FONT_SIZE = 72
DEFAULT_FONT_COLOR = "#ffffff"
DEFAULT_TEXT_ALIGN = "center"
DEFAULT_TEXT_SHADOW = "2px 2px 8px rgba(0,0,0,0.8)"

TEXT_ALIGNMENTS = frozenset({"left", "center", "right", "justify"})

_DATA_URL_PREFIX = "data:"


class TemplateError(ValueError):
    """Raised when a template snapshot would violate its invariants."""


class BackgroundMode(str, Enum):
    """How the output window paints its background."""

    GRADIENT = "gradient"
    IMAGE = "image"
    VIDEO = "video"

    @property
    def uses_asset(self) -> bool:
        """Return True if the mode needs a materialized media asset."""
        return self is not BackgroundMode.GRADIENT


@dataclass(frozen=True, slots=True)
class Background:
    """Background descriptor with exactly one active mode.

    Attributes:
        mode: Active background mode.
        gradient: CSS gradient value (GRADIENT mode only).
        asset_data_url: Embedded ``data:`` URL of the image/video
            (IMAGE and VIDEO modes only).
        overlay: Color laid over an image/video asset.
    """

    mode: BackgroundMode = BackgroundMode.GRADIENT
    gradient: str = DEFAULT_GRADIENT
    asset_data_url: str = ""
    overlay: str = DEFAULT_OVERLAY

    def __post_init__(self) -> None:
        """Reject backgrounds with zero or two active modes."""
        if self.mode.uses_asset:
            if not self.asset_data_url.startswith(_DATA_URL_PREFIX):
                msg = f"{self.mode.value} background needs a materialized data URL"
                raise TemplateError(msg)
            if self.gradient:
                object.__setattr__(self, "gradient", "")
        else:
            if self.asset_data_url:
                raise TemplateError("gradient background cannot carry a media asset")
            if not self.gradient:
                object.__setattr__(self, "gradient", DEFAULT_GRADIENT)

    @classmethod
    def from_gradient(cls, gradient: str) -> "Background":
        """Create a gradient background."""
        return cls(mode=BackgroundMode.GRADIENT, gradient=gradient)

    @classmethod
    def from_asset(
        cls, mode: BackgroundMode, data_url: str, overlay: str = DEFAULT_OVERLAY
    ) -> "Background":
        """Create an image or video background from an embedded asset."""
        return cls(mode=mode, gradient="", asset_data_url=data_url, overlay=overlay)


@dataclass(frozen=True, slots=True)
class TemplateSnapshot:
    """Immutable styling bundle applied to presented text.

    Attributes:
        name: Template name, for display in the control window.
        background: The background descriptor.
        font_family: Font family name.
        font_size: Font size in pixels.
        font_color: CSS color of the text.
        text_align: One of left, center, right, justify.
        text_shadow: CSS text-shadow descriptor.
        template_id: Library ID this snapshot was built from, if any.
    """

    name: str = ""
    background: Background = field(default_factory=Background)
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: int = DEFAULT_FONT_SIZE
    font_color: str = DEFAULT_FONT_COLOR
    text_align: str = DEFAULT_TEXT_ALIGN
    text_shadow: str = DEFAULT_TEXT_SHADOW
    template_id: int | None = None

    def __post_init__(self) -> None:
        """Validate font size and alignment."""
        if self.font_size <= 0:
            raise TemplateError(f"font size must be positive, got {self.font_size}")
        if self.text_align not in TEXT_ALIGNMENTS:
            raise TemplateError(f"unknown text alignment: {self.text_align!r}")
