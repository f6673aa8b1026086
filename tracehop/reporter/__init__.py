"""Reporters for delivering events to the collector."""

from tracehop.reporter.console_transport import ConsoleTransport
from tracehop.reporter.message import MAX_MESSAGE_SIZE, build_message, decode_message, encode_message
from tracehop.reporter.reporter import Reporter
from tracehop.reporter.transport import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    Transport,
    UdpTransport,
    parse_address,
)

__all__ = [
    "Reporter",
    "Transport",
    "UdpTransport",
    "ConsoleTransport",
    "parse_address",
    "build_message",
    "encode_message",
    "decode_message",
    "MAX_MESSAGE_SIZE",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
]
