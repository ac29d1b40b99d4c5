"""Full-screen output window shown on the presentation screen.

The window owns one ``PresentationState`` and repaints whenever a payload is
applied. It renders a plain, readable version of the template: the CSS
gradient or embedded image as background, the overlay color, and the text
in the template's font and color. Video backgrounds are shown as their
overlay on black. The window never touches the file system; assets arrive
as ``data:`` URLs.
"""

from __future__ import annotations

import base64
import logging
import math
import re

from PySide6.QtCore import QPointF, QRect, Qt, Signal
from PySide6.QtGui import (
    QCloseEvent,
    QColor,
    QFont,
    QLinearGradient,
    QPainter,
    QPaintEvent,
    QPixmap,
    QScreen,
)
from PySide6.QtWidgets import QGraphicsDropShadowEffect, QLabel, QVBoxLayout, QWidget

from lyricast.core.presentation import OutputState, PresentationState
from lyricast.models.payload import PresentationPayload
from lyricast.models.template import DEFAULT_GRADIENT, BackgroundMode, TemplateSnapshot
from lyricast.ui.tokens import sizing

logger = logging.getLogger(__name__)

_RGB_RE = re.compile(r"rgba?\(\s*([^)]*)\)", re.IGNORECASE)
_GRADIENT_RE = re.compile(r"linear-gradient\((.*)\)\s*$", re.IGNORECASE | re.DOTALL)
_ANGLE_RE = re.compile(r"^(-?\d+(?:\.\d+)?)deg$", re.IGNORECASE)
_STOP_RE = re.compile(r"^(.*?)\s+(-?\d+(?:\.\d+)?)%$")

_DIRECTIONS = {
    "to top": 0.0,
    "to top right": 45.0,
    "to right": 90.0,
    "to bottom right": 135.0,
    "to bottom": 180.0,
    "to bottom left": 225.0,
    "to left": 270.0,
    "to top left": 315.0,
}

_ALIGNMENTS = {
    "left": Qt.AlignmentFlag.AlignLeft,
    "center": Qt.AlignmentFlag.AlignHCenter,
    "right": Qt.AlignmentFlag.AlignRight,
    "justify": Qt.AlignmentFlag.AlignJustify,
}


def parse_css_color(value: str) -> QColor | None:
    """Parse a CSS color (hex, named, rgb() or rgba()).

    Returns:
        The color, or None if it cannot be parsed.
    """
    value = value.strip()
    match = _RGB_RE.fullmatch(value)
    if match:
        parts = [p.strip() for p in match.group(1).split(",")]
        if len(parts) not in (3, 4):
            return None
        try:
            r, g, b = (int(float(p)) for p in parts[:3])
            alpha = float(parts[3]) if len(parts) == 4 else 1.0
        except ValueError:
            return None
        return QColor(r, g, b, round(max(0.0, min(alpha, 1.0)) * 255))
    color = QColor(value)
    return color if color.isValid() else None


def _split_top_level(value: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in value:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return [p for p in parts if p]


def parse_linear_gradient(value: str, rect: QRect) -> QLinearGradient | None:
    """Build a QLinearGradient from a CSS ``linear-gradient(...)`` value.

    Args:
        value: The CSS value, e.g. ``linear-gradient(135deg, #667eea 0%, #764ba2 100%)``.
        rect: Area the gradient will fill.

    Returns:
        The gradient, or None if the value is not a usable linear gradient.
    """
    match = _GRADIENT_RE.match(value.strip())
    if not match:
        return None
    parts = _split_top_level(match.group(1))
    if not parts:
        return None

    angle = 180.0
    head = parts[0].lower()
    angle_match = _ANGLE_RE.match(head)
    if angle_match:
        angle = float(angle_match.group(1))
        parts = parts[1:]
    elif head in _DIRECTIONS:
        angle = _DIRECTIONS[head]
        parts = parts[1:]

    stops: list[tuple[float | None, QColor]] = []
    for part in parts:
        stop_match = _STOP_RE.match(part)
        color_text, position = (
            (stop_match.group(1), float(stop_match.group(2)) / 100)
            if stop_match
            else (part, None)
        )
        color = parse_css_color(color_text)
        if color is None:
            return None
        stops.append((position, color))
    if len(stops) < 2:
        return None

    # CSS angles: 0deg points up, clockwise
    radians = math.radians(angle)
    dx, dy = math.sin(radians), -math.cos(radians)
    half = (abs(rect.width() * dx) + abs(rect.height() * dy)) / 2
    center = QPointF(rect.center())
    gradient = QLinearGradient(
        QPointF(center.x() - dx * half, center.y() - dy * half),
        QPointF(center.x() + dx * half, center.y() + dy * half),
    )
    last = len(stops) - 1
    for index, (position, color) in enumerate(stops):
        at = position if position is not None else index / last
        gradient.setColorAt(max(0.0, min(at, 1.0)), color)
    return gradient


def pixmap_from_data_url(data_url: str) -> QPixmap | None:
    """Decode a base64 ``data:`` URL into a pixmap, or None."""
    _, _, payload = data_url.partition(";base64,")
    if not payload:
        return None
    try:
        raw = base64.b64decode(payload, validate=False)
    except ValueError:
        return None
    pixmap = QPixmap()
    if not pixmap.loadFromData(raw):
        return None
    return pixmap


class OutputWindow(QWidget):
    """Frameless output window applying presentation payloads.

    Signals:
        closed: Emitted when the window is closed, by the application or
            from outside it.
    """

    closed = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        """Initialize the window in IDLE state."""
        super().__init__(parent)
        self.setWindowTitle("Lyricast Output")
        self.setWindowFlags(Qt.WindowType.Window | Qt.WindowType.FramelessWindowHint)
        self.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        self.setCursor(Qt.CursorShape.BlankCursor)

        self._state = PresentationState()
        self._pixmap: QPixmap | None = None
        self._pixmap_source = ""

        self._label = QLabel(self)
        self._label.setWordWrap(True)
        self._label.setTextFormat(Qt.TextFormat.PlainText)
        self._label.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground)
        self._shadow = QGraphicsDropShadowEffect(self._label)
        self._shadow.setOffset(2, 2)
        self._shadow.setBlurRadius(8)
        self._shadow.setColor(QColor(0, 0, 0, 204))
        self._label.setGraphicsEffect(self._shadow)

        layout = QVBoxLayout(self)
        margin = sizing.output_margin
        layout.setContentsMargins(margin, margin, margin, margin)
        layout.addWidget(self._label, 0, Qt.AlignmentFlag.AlignCenter)

        self._render()

    @property
    def state(self) -> PresentationState:
        """Return the presentation state."""
        return self._state

    @property
    def displayed_text(self) -> str:
        """Return the text currently shown."""
        return self._label.text()

    def apply_payload(self, payload: PresentationPayload) -> None:
        """Apply a payload and repaint."""
        self._state.apply(payload)
        self._render()

    def show_on(self, screen: QScreen | None) -> None:
        """Show frameless and full screen on ``screen`` (default screen if None)."""
        if screen is not None:
            self.setGeometry(screen.geometry())
        self.showFullScreen()

    def _render(self) -> None:
        template = self._state.visible_template
        self._apply_text_style(template)
        text = self._state.text if self._state.state is OutputState.SHOWING else None
        self._label.setText(text or "")
        self._label.setVisible(bool(text))
        self.update()

    def _apply_text_style(self, template: TemplateSnapshot | None) -> None:
        if template is None:
            return
        font = QFont(template.font_family)
        font.setPixelSize(template.font_size)
        self._label.setFont(font)
        self._label.setAlignment(
            _ALIGNMENTS.get(template.text_align, Qt.AlignmentFlag.AlignHCenter)
            | Qt.AlignmentFlag.AlignVCenter
        )
        self._label.setStyleSheet(f"color: {template.font_color}; background: transparent;")
        self._shadow.setEnabled(template.text_shadow.strip().lower() != "none")

    def paintEvent(self, event: QPaintEvent) -> None:
        """Paint the template background (black while blacked out)."""
        painter = QPainter(self)
        rect = self.rect()
        painter.fillRect(rect, QColor("black"))
        if self._state.state is OutputState.BLACKOUT:
            return

        template = self._state.template
        background = template.background if template is not None else None
        if background is None or background.mode is BackgroundMode.GRADIENT:
            value = background.gradient if background is not None else DEFAULT_GRADIENT
            gradient = parse_linear_gradient(value, rect) or parse_linear_gradient(
                DEFAULT_GRADIENT, rect
            )
            if gradient is not None:
                painter.fillRect(rect, gradient)
            return

        if background.mode is BackgroundMode.IMAGE:
            pixmap = self._background_pixmap(background.asset_data_url)
            if pixmap is not None:
                scaled = pixmap.scaled(
                    rect.size(),
                    Qt.AspectRatioMode.KeepAspectRatioByExpanding,
                    Qt.TransformationMode.SmoothTransformation,
                )
                x = (rect.width() - scaled.width()) // 2
                y = (rect.height() - scaled.height()) // 2
                painter.drawPixmap(x, y, scaled)
        overlay = parse_css_color(background.overlay)
        if overlay is not None:
            painter.fillRect(rect, overlay)

    def _background_pixmap(self, data_url: str) -> QPixmap | None:
        if data_url != self._pixmap_source:
            self._pixmap_source = data_url
            self._pixmap = pixmap_from_data_url(data_url)
            if self._pixmap is None:
                logger.warning("Cannot decode background image")
        return self._pixmap

    def closeEvent(self, event: QCloseEvent) -> None:
        """Notify listeners that the window is going away."""
        self.closed.emit()
        super().closeEvent(event)
