"""Tests for the output window and its CSS helpers."""

from PySide6.QtCore import QRect
from PySide6.QtGui import QColor
from pytestqt.qtbot import QtBot

from lyricast.core.presentation import OutputState
from lyricast.models.payload import PresentationPayload
from lyricast.models.template import Background, BackgroundMode, TemplateSnapshot
from lyricast.ui.output_window import (
    OutputWindow,
    parse_css_color,
    parse_linear_gradient,
    pixmap_from_data_url,
)

RED_TEMPLATE = TemplateSnapshot(
    name="Red",
    background=Background.from_gradient("linear-gradient(90deg, #ff0000 0%, #ff0000 100%)"),
    font_size=40,
    font_color="#00ff00",
    text_align="left",
)


class TestParseCssColor:
    """Test CSS color parsing."""

    def test_hex_and_named(self) -> None:
        """Test hex and named colors."""
        assert parse_css_color("#ff0000") == QColor(255, 0, 0)
        assert parse_css_color("white") == QColor(255, 255, 255)

    def test_rgba(self) -> None:
        """Test rgba() with fractional alpha."""
        color = parse_css_color("rgba(0, 0, 0, 0.5)")
        assert color is not None
        assert (color.red(), color.green(), color.blue()) == (0, 0, 0)
        assert color.alpha() == 128

    def test_rgb(self) -> None:
        """Test rgb() is opaque."""
        color = parse_css_color("rgb(10,20,30)")
        assert color == QColor(10, 20, 30, 255)

    def test_invalid(self) -> None:
        """Test unparseable values give None."""
        assert parse_css_color("rgba(1,2)") is None
        assert parse_css_color("not-a-color") is None


class TestParseLinearGradient:
    """Test CSS linear-gradient parsing."""

    def test_angle_and_stops(self) -> None:
        """Test an angled gradient keeps its stops."""
        gradient = parse_linear_gradient(
            "linear-gradient(135deg, #667eea 0%, #764ba2 100%)", QRect(0, 0, 200, 100)
        )
        assert gradient is not None
        stops = gradient.stops()
        assert [round(at, 2) for at, _ in stops] == [0.0, 1.0]
        assert stops[0][1] == QColor("#667eea")

    def test_direction_keyword(self) -> None:
        """Test 'to right' runs left to right."""
        gradient = parse_linear_gradient(
            "linear-gradient(to right, red, blue)", QRect(0, 0, 100, 100)
        )
        assert gradient is not None
        assert gradient.start().x() < gradient.finalStop().x()
        assert abs(gradient.start().y() - gradient.finalStop().y()) < 1e-6

    def test_three_stops_without_positions(self) -> None:
        """Test stops without positions are spread evenly."""
        gradient = parse_linear_gradient(
            "linear-gradient(#000, rgba(0,0,0,0.5), #fff)", QRect(0, 0, 10, 10)
        )
        assert gradient is not None
        assert [round(at, 2) for at, _ in gradient.stops()] == [0.0, 0.5, 1.0]

    def test_invalid(self) -> None:
        """Test non-gradients and single-stop gradients give None."""
        rect = QRect(0, 0, 10, 10)
        assert parse_linear_gradient("#000", rect) is None
        assert parse_linear_gradient("linear-gradient(90deg, red)", rect) is None
        assert parse_linear_gradient("linear-gradient(90deg, nope 0%, red 100%)", rect) is None


class TestPixmapFromDataUrl:
    """Test data URL decoding."""

    def test_not_an_image(self, qtbot: QtBot) -> None:
        """Test bytes that are not an image give None."""
        assert pixmap_from_data_url("data:image/png;base64,aGVsbG8=") is None
        assert pixmap_from_data_url("no-data") is None


class TestOutputWindow:
    """Test OutputWindow applying payloads."""

    def test_initially_idle(self, qtbot: QtBot) -> None:
        """Test a new window shows no text."""
        window = OutputWindow()
        qtbot.addWidget(window)
        assert window.state.state is OutputState.IDLE
        assert window.displayed_text == ""

    def test_present(self, qtbot: QtBot) -> None:
        """Test presented text is displayed."""
        window = OutputWindow()
        qtbot.addWidget(window)
        window.apply_payload(PresentationPayload.present("Amazing grace", RED_TEMPLATE))
        assert window.displayed_text == "Amazing grace"
        assert window.state.template == RED_TEMPLATE

    def test_clear_and_blackout(self, qtbot: QtBot) -> None:
        """Test clear and blackout remove the text."""
        window = OutputWindow()
        qtbot.addWidget(window)
        window.apply_payload(PresentationPayload.present("x", RED_TEMPLATE))
        window.apply_payload(PresentationPayload.blackout())
        assert window.displayed_text == ""
        assert window.state.state is OutputState.BLACKOUT

        window.apply_payload(PresentationPayload.present("again"))
        assert window.displayed_text == "again"
        assert window.state.template == RED_TEMPLATE

        window.apply_payload(PresentationPayload.clear())
        assert window.displayed_text == ""

    def test_paints_template_background(self, qtbot: QtBot) -> None:
        """Test the gradient is painted, and black during blackout."""
        window = OutputWindow()
        qtbot.addWidget(window)
        window.resize(200, 120)
        window.apply_payload(PresentationPayload.present("", RED_TEMPLATE))
        assert window.grab().toImage().pixelColor(2, 2) == QColor(255, 0, 0)

        window.apply_payload(PresentationPayload.blackout())
        assert window.grab().toImage().pixelColor(2, 2) == QColor(0, 0, 0)

    def test_video_background_paints_overlay(self, qtbot: QtBot) -> None:
        """Test a video template paints its overlay color."""
        video = TemplateSnapshot(
            name="Video",
            background=Background.from_asset(
                BackgroundMode.VIDEO, "data:video/mp4;base64,AAAA", "rgb(0,0,255)"
            ),
        )
        window = OutputWindow()
        qtbot.addWidget(window)
        window.resize(100, 100)
        window.apply_payload(PresentationPayload.present("", video))
        assert window.grab().toImage().pixelColor(2, 2) == QColor(0, 0, 255)

    def test_show_on_default_screen(self, qtbot: QtBot) -> None:
        """Test the window can be shown without a specific screen."""
        window = OutputWindow()
        qtbot.addWidget(window)
        window.show_on(None)
        assert window.isVisible()

    def test_close_emits_closed(self, qtbot: QtBot) -> None:
        """Test closing the window emits closed."""
        window = OutputWindow()
        window.show()
        with qtbot.waitSignal(window.closed, timeout=1000):
            window.close()
