"""Fire-and-forget transports carrying encoded messages to the collector."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Optional, Tuple, Union

from tracehop.errors import ConfigError, TransportFailure

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 7831


def parse_address(address: str) -> Tuple[str, int]:
    """
    Split a ``host:port`` string.

    A bare host keeps the default port.

    Raises:
        ConfigError: If the address is not a string or the port is invalid
    """
    if not isinstance(address, str) or not address.strip():
        raise ConfigError("Address must be a non-empty string", {"address": address})
    host, sep, port = address.strip().rpartition(":")
    if not sep:
        return port, DEFAULT_PORT
    return host or DEFAULT_HOST, _parse_port(port)


def _parse_port(port: Union[str, int]) -> int:
    try:
        value = int(port)
    except (TypeError, ValueError):
        raise ConfigError("Invalid port", {"port": port}) from None
    if not 0 < value < 65536:
        raise ConfigError("Port out of range", {"port": port})
    return value


class Transport:
    """Base transport interface."""

    def send(self, payload: bytes) -> bool:
        """
        Hand one message to the collector.

        Returns True if the message was written, False if it was dropped.
        Implementations must not block and must not raise.
        """
        raise NotImplementedError

    def close(self) -> None:
        return None


class UdpTransport(Transport):
    """
    Datagram transport to a local collector.

    The address is resolved and the socket opened when the transport is
    created or re-addressed, so ``send`` never resolves names or blocks.
    A transport that failed to connect, or was closed, drops every message.
    """

    def __init__(self, host: str = DEFAULT_HOST, port: Union[str, int] = DEFAULT_PORT) -> None:
        self._host = host
        self._port = _parse_port(port)
        self._sock: Optional[socket.socket] = None
        self._sockaddr = None
        self._lock = threading.Lock()
        self._reconnect()

    @property
    def host(self) -> str:
        return self._host

    @host.setter
    def host(self, value: str) -> None:
        if not isinstance(value, str) or not value:
            raise ConfigError("host must be a non-empty string", {"host": value})
        self._host = value
        self._reconnect()

    @property
    def port(self) -> int:
        return self._port

    @port.setter
    def port(self, value: Union[str, int]) -> None:
        self._port = _parse_port(value)
        self._reconnect()

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    @address.setter
    def address(self, value: str) -> None:
        self._host, self._port = parse_address(value)
        self._reconnect()

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        """
        Resolve the collector address and open the socket.

        Raises:
            TransportFailure: If the address cannot be resolved or the socket
                cannot be created
        """
        try:
            family, socktype, proto, _, sockaddr = socket.getaddrinfo(
                self._host, self._port, type=socket.SOCK_DGRAM
            )[0]
            sock = socket.socket(family, socktype, proto)
            sock.setblocking(False)
        except OSError as exc:
            raise TransportFailure(
                "UdpTransport failed to connect", {"address": self.address, "error": exc}
            ) from exc
        with self._lock:
            if self._sock is not None:
                self._sock.close()
            self._sock = sock
            self._sockaddr = sockaddr

    def _reconnect(self) -> None:
        self.close()
        try:
            self.connect()
        except TransportFailure as exc:
            logger.warning("%s; events will be dropped", exc)

    def send(self, payload: bytes) -> bool:
        sock, sockaddr = self._sock, self._sockaddr
        if sock is None:
            return False
        try:
            sock.sendto(payload, sockaddr)
        except OSError as exc:
            # Unreachable collector, full buffer, oversized datagram or closed socket.
            logger.debug("Dropping message to %s: %s", self.address, exc)
            return False
        return True

    def close(self) -> None:
        with self._lock:
            if self._sock is not None:
                self._sock.close()
            self._sock = None
            self._sockaddr = None
