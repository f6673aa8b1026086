"""Wire encoding of events for the collector."""

from __future__ import annotations

import json
import os
import socket
from typing import Any, Dict

from tracehop import runtime_config
from tracehop.tracer.event import EDGE_KEY, TIMESTAMP_KEY, XTRACE_KEY, Event

MAX_MESSAGE_SIZE = 65000


def _hostname() -> str:
    return runtime_config.get_hostname() or socket.gethostname()


def build_message(event: Event) -> Dict[str, Any]:
    """
    Build the key/value message for an event.

    Reserved keys come first; event info follows in insertion order.
    """
    message: Dict[str, Any] = {
        XTRACE_KEY: str(event),
        EDGE_KEY: list(event.edges),
        TIMESTAMP_KEY: event.timestamp_us,
        "Hostname": _hostname(),
        "PID": os.getpid(),
    }
    for key, value in event.info.items():
        message.setdefault(key, value)
    return message


def encode_message(event: Event) -> bytes:
    return json.dumps(build_message(event), default=str, separators=(",", ":")).encode("utf-8")


def decode_message(payload: bytes) -> Dict[str, Any]:
    """Decode a message as received by the collector."""
    return json.loads(payload.decode("utf-8"))
