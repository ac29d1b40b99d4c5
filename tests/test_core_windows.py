"""Tests for the output window lifecycle manager."""

from typing import Any
from unittest.mock import MagicMock

from pytestqt.qtbot import QtBot

from lyricast.core.channel import PresentationChannel
from lyricast.core.windows import AUTO_SCREEN, WindowLifecycleManager, pick_screen
from lyricast.models.payload import PresentationPayload


def _screens(count: int) -> list[MagicMock]:
    screens = []
    for index in range(count):
        screen = MagicMock()
        screen.name.return_value = f"screen-{index}"
        screens.append(screen)
    return screens


class TestPickScreen:
    """Test presentation screen selection."""

    def test_no_screens(self) -> None:
        """Test None without screens."""
        assert pick_screen([]) is None

    def test_single_screen(self) -> None:
        """Test the only screen is used."""
        screens = _screens(1)
        assert pick_screen(screens) is screens[0]

    def test_second_screen_by_default(self) -> None:
        """Test the second screen is preferred when there are several."""
        screens = _screens(3)
        assert pick_screen(screens, AUTO_SCREEN) is screens[1]

    def test_configured_screen(self) -> None:
        """Test a valid configured index wins."""
        screens = _screens(3)
        assert pick_screen(screens, 2) is screens[2]
        assert pick_screen(screens, 0) is screens[0]

    def test_invalid_configured_screen_falls_back(self) -> None:
        """Test an out-of-range index falls back to the default choice."""
        screens = _screens(2)
        assert pick_screen(screens, 5) is screens[1]


class TestWindowLifecycleManager:
    """Test opening and closing the output window."""

    def _manager(
        self, factory: Any, screen_count: int = 2, preferred: int = AUTO_SCREEN
    ) -> tuple[WindowLifecycleManager, PresentationChannel, list[Any]]:
        channel = PresentationChannel()
        screens = _screens(screen_count)
        manager = WindowLifecycleManager(
            channel,
            screens=lambda: screens,
            window_factory=factory,
            preferred_screen=preferred,
        )
        return manager, channel, factory.created

    def test_open_attaches_receiver(self, qtbot: QtBot, output_factory: Any) -> None:
        """Test opening shows the window and makes it the channel receiver."""
        manager, channel, created = self._manager(output_factory)
        with qtbot.waitSignal(manager.output_opened, timeout=1000):
            window = manager.open_output()

        assert manager.has_output
        assert manager.output_window is window
        assert window.shown
        assert window.screen.name() == "screen-1"
        assert channel.has_receiver

        channel.send(PresentationPayload.clear())
        qtbot.waitUntil(lambda: len(window.payloads) == 1)

    def test_open_is_idempotent(self, qtbot: QtBot, output_factory: Any) -> None:
        """Test a second open reuses the window."""
        manager, _channel, created = self._manager(output_factory)
        first = manager.open_output()
        with qtbot.assertNotEmitted(manager.output_opened):
            second = manager.open_output()
        assert first is second
        assert len(created) == 1

    def test_preferred_screen(self, qtbot: QtBot, output_factory: Any) -> None:
        """Test the configured screen is used and can be changed."""
        manager, _channel, _created = self._manager(output_factory, screen_count=3, preferred=2)
        assert manager.open_output().screen.name() == "screen-2"
        manager.close_output()

        manager.preferred_screen = 0
        assert manager.preferred_screen == 0
        assert manager.open_output().screen.name() == "screen-0"

    def test_close_output(self, qtbot: QtBot, output_factory: Any) -> None:
        """Test closing from the application is not reported as external."""
        manager, channel, created = self._manager(output_factory)
        manager.open_output()

        with qtbot.waitSignal(manager.output_closed, timeout=1000) as blocker:
            manager.close_output()
        assert blocker.args == [False]
        assert not manager.has_output
        assert not channel.has_receiver
        assert created[0].close_calls == 1

    def test_close_without_window_is_noop(self, qtbot: QtBot, output_factory: Any) -> None:
        """Test closing when nothing is open does nothing."""
        manager, _channel, _created = self._manager(output_factory)
        with qtbot.assertNotEmitted(manager.output_closed):
            manager.close_output()

    def test_external_close(self, qtbot: QtBot, output_factory: Any) -> None:
        """Test a window closed from outside is detected and detached."""
        manager, channel, created = self._manager(output_factory)
        manager.open_output()

        with qtbot.waitSignal(manager.output_closed, timeout=1000) as blocker:
            created[0].close_externally()
        assert blocker.args == [True]
        assert not manager.has_output
        assert not channel.has_receiver
        assert channel.send(PresentationPayload.clear()) is False

    def test_reopen_after_external_close_builds_new_window(self, qtbot: QtBot, output_factory: Any) -> None:
        """Test a fresh window is created after an external close."""
        manager, _channel, created = self._manager(output_factory)
        manager.open_output()
        created[0].close_externally()

        window = manager.open_output()
        assert len(created) == 2
        assert window is created[1]

    def test_stale_window_close_is_ignored(self, qtbot: QtBot, output_factory: Any) -> None:
        """Test a late close signal from an old window does not close the new one."""
        manager, _channel, created = self._manager(output_factory)
        manager.open_output()
        manager.close_output()
        manager.open_output()

        with qtbot.assertNotEmitted(manager.output_closed):
            created[0].close_externally()
        assert manager.output_window is created[1]
