"""Shared fixtures: a loopback UDP collector and isolated agent state."""

import socket

import pytest

from tracehop import auto, runtime_config
from tracehop.context import reset
from tracehop.processors.sampler import Sampler
from tracehop.reporter import Reporter, UdpTransport, decode_message
from tracehop.tracer.provider import TracerProvider


class Collector:
    """Receives messages the way the local collector process would."""

    def __init__(self) -> None:
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(2.0)
        self.host, self.port = self.sock.getsockname()

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    def receive(self) -> dict:
        payload, _ = self.sock.recvfrom(65535)
        return decode_message(payload)

    def receive_nowait(self):
        self.sock.settimeout(0.2)
        try:
            return self.receive()
        except socket.timeout:
            return None
        finally:
            self.sock.settimeout(2.0)

    def close(self) -> None:
        self.sock.close()


@pytest.fixture(autouse=True)
def isolated_state():
    saved = dict(runtime_config._config)
    reset()
    yield
    reset()
    auto.stop_tracing()
    runtime_config._config.clear()
    runtime_config._config.update(saved)


@pytest.fixture
def collector():
    c = Collector()
    yield c
    c.close()


@pytest.fixture
def reporter(collector):
    r = Reporter(UdpTransport(collector.host, collector.port))
    yield r
    r.close()


@pytest.fixture
def provider(reporter):
    return TracerProvider(reporter=reporter, sampler=Sampler(trace_mode="always"))


@pytest.fixture
def tracer(provider):
    return provider.get_tracer("test")
