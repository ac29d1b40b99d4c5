"""One-way control -> output presentation channel.

Payloads are delivered through a queued Qt signal: ``send`` returns
immediately and the receiver runs on a later event-loop iteration, in send
order. There is no acknowledgment and no redelivery; a payload that finds no
receiver when it is delivered is dropped.

Usage:
    channel = PresentationChannel()
    channel.attach(output_window.apply_payload)
    channel.send(PresentationPayload.present("Amazing grace"))
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from PySide6.QtCore import QObject, Qt, Signal, Slot

from lyricast.models.payload import PresentationPayload

logger = logging.getLogger(__name__)

PayloadReceiver = Callable[[PresentationPayload], None]


class PresentationChannel(QObject):
    """FIFO, at-most-once payload channel with a single receiver.

    Signals:
        delivered: Emitted after a payload was handed to the receiver.
    """

    delivered = Signal(object)

    # Internal: queued hop onto the event loop
    _queued = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        """Initialize a channel with no receiver."""
        super().__init__(parent)
        self._receiver: PayloadReceiver | None = None
        self._last_sent: PresentationPayload | None = None
        self._queued.connect(self._deliver, Qt.ConnectionType.QueuedConnection)

    @property
    def has_receiver(self) -> bool:
        """Return True if a receiver is attached."""
        return self._receiver is not None

    @property
    def last_sent(self) -> PresentationPayload | None:
        """Return the last payload handed to a receiver."""
        return self._last_sent

    def attach(self, receiver: PayloadReceiver) -> None:
        """Make ``receiver`` the sole receiver, replacing any previous one."""
        if self._receiver is not None and self._receiver is not receiver:
            logger.debug("Replacing presentation receiver")
        self._receiver = receiver

    def detach(self) -> None:
        """Remove the receiver; later payloads are dropped."""
        self._receiver = None

    def send(self, payload: PresentationPayload) -> bool:
        """Queue a payload for delivery.

        Args:
            payload: The payload to deliver.

        Returns:
            False if no receiver is attached (the payload is dropped),
            True if it was queued.
        """
        if self._receiver is None:
            logger.debug("No output window, dropping %s payload", payload.kind.value)
            return False
        self._queued.emit(payload)
        return True

    @Slot(object)
    def _deliver(self, payload: PresentationPayload) -> None:
        receiver = self._receiver
        if receiver is None:
            logger.debug("Output closed before delivery, dropping %s payload", payload.kind.value)
            return
        receiver(payload)
        self._last_sent = payload
        self.delivered.emit(payload)
