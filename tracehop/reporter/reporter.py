"""Best-effort reporter serializing events onto a transport."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Optional

from tracehop.reporter.message import MAX_MESSAGE_SIZE, encode_message
from tracehop.reporter.transport import Transport, UdpTransport
from tracehop.tracer.event import Event

logger = logging.getLogger(__name__)


class Reporter:
    """
    Ships events to the collector.

    ``send`` never blocks and never raises: any failure drops the event and
    bumps the ``dropped`` counter. There is no retry, buffering or ordering.
    """

    def __init__(self, transport: Optional[Transport] = None) -> None:
        self.transport = transport or UdpTransport()
        self._lock = threading.Lock()
        self._sent = 0
        self._dropped = 0

    def send(self, event: Event) -> bool:
        """
        Serialize and send one event.

        Returns:
            True if the transport accepted the message, False if it was dropped
        """
        try:
            payload = encode_message(event)
            if len(payload) > MAX_MESSAGE_SIZE:
                logger.debug(
                    "Dropping event %s: message of %d bytes exceeds %d",
                    event, len(payload), MAX_MESSAGE_SIZE,
                )
                ok = False
            else:
                ok = self.transport.send(payload)
        except Exception:
            logger.debug("Failed to report event", exc_info=True)
            ok = False

        with self._lock:
            if ok:
                self._sent += 1
            else:
                self._dropped += 1
        return ok

    def get_stats(self) -> Dict[str, int]:
        with self._lock:
            return {"sent": self._sent, "dropped": self._dropped}

    def close(self) -> None:
        try:
            self.transport.close()
        except Exception:
            logger.debug("Failed to close transport", exc_info=True)
