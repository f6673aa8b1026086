"""Tests for the reporter, its message format and transports."""

import io
import socket

import pytest

from tracehop import runtime_config
from tracehop.errors import ConfigError
from tracehop.reporter import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    MAX_MESSAGE_SIZE,
    ConsoleTransport,
    Reporter,
    Transport,
    UdpTransport,
    build_message,
    parse_address,
)
from tracehop.tracer.event import Event
from tracehop.tracer.metadata import decode, new_root


class RecordingTransport(Transport):
    def __init__(self, ok=True):
        self.ok = ok
        self.payloads = []

    def send(self, payload):
        self.payloads.append(payload)
        return self.ok


class ExplodingTransport(Transport):
    def send(self, payload):
        raise RuntimeError("boom")


def make_event():
    event = Event(new_root(True))
    event.add_info("Layer", "test")
    event.add_info("Label", "entry")
    return event


def test_udp_transport_defaults():
    transport = UdpTransport()
    assert transport.host == DEFAULT_HOST == "localhost"
    assert transport.port == DEFAULT_PORT == 7831
    assert transport.address == "localhost:7831"


def test_should_report_event(collector, reporter):
    event = make_event()

    assert reporter.send(event) is True
    message = collector.receive()

    assert message["X-Trace"] == str(event)
    assert decode(message["X-Trace"]).task_id == event.metadata.task_id
    assert message["Layer"] == "test"
    assert message["Label"] == "entry"
    assert message["Timestamp_u"] == event.timestamp_us
    assert reporter.get_stats() == {"sent": 1, "dropped": 0}


def test_message_layout():
    runtime_config.set_hostname("web-1")
    parent = make_event()
    event = parent.child()
    event.add_info("Layer", "db")
    event.add_info("Query", {"sql": "select 1"})

    message = build_message(event)

    assert list(message)[:3] == ["X-Trace", "Edge", "Timestamp_u"]
    assert message["Edge"] == [parent.op_id]
    assert message["Hostname"] == "web-1"
    assert message["Layer"] == "db"


def test_address_setter(collector):
    transport = UdpTransport()
    transport.address = collector.address
    reporter = Reporter(transport)

    assert transport.host == "127.0.0.1"
    assert transport.port == collector.port
    assert reporter.send(make_event()) is True
    assert collector.receive()["Label"] == "entry"
    reporter.close()


@pytest.mark.parametrize(
    "address, expected",
    [
        ("127.0.0.1:9000", ("127.0.0.1", 9000)),
        ("collector", ("collector", DEFAULT_PORT)),
        (":9000", (DEFAULT_HOST, 9000)),
    ],
)
def test_parse_address(address, expected):
    assert parse_address(address) == expected


@pytest.mark.parametrize("address", ["", "host:notaport", "host:0", "host:70000", 1234])
def test_parse_address_invalid(address):
    with pytest.raises(ConfigError):
        parse_address(address)


def test_port_setter_accepts_strings():
    transport = UdpTransport()
    transport.port = "9999"
    assert transport.port == 9999
    with pytest.raises(ConfigError):
        transport.port = "nope"


def test_unresolvable_host_is_swallowed(caplog):
    transport = UdpTransport("host.invalid", 7831)
    reporter = Reporter(transport)

    assert transport.connected is False
    assert "failed to connect" in caplog.text
    assert reporter.send(make_event()) is False
    assert reporter.get_stats() == {"sent": 0, "dropped": 1}


def test_readdressing_reconnects(collector):
    transport = UdpTransport("host.invalid", 7831)
    assert transport.connected is False

    transport.host = collector.host
    transport.port = collector.port

    assert transport.connected is True
    assert transport.send(b"{}") is True
    assert collector.receive() == {}
    transport.close()


def test_oversized_message_is_dropped():
    transport = RecordingTransport()
    reporter = Reporter(transport)
    event = make_event()
    event.add_info("Payload", "x" * (MAX_MESSAGE_SIZE + 1))

    assert reporter.send(event) is False
    assert transport.payloads == []
    assert reporter.get_stats()["dropped"] == 1


def test_transport_errors_never_propagate():
    reporter = Reporter(ExplodingTransport())
    assert reporter.send(make_event()) is False


def test_refused_transport_counts_drop():
    reporter = Reporter(RecordingTransport(ok=False))
    reporter.send(make_event())
    assert reporter.get_stats() == {"sent": 0, "dropped": 1}


def test_send_after_close_drops(collector, reporter):
    reporter.send(make_event())
    collector.receive()
    reporter.close()

    assert reporter.send(make_event()) is False
    assert collector.receive_nowait() is None


def test_send_on_closed_socket_is_swallowed(collector):
    transport = UdpTransport(collector.host, collector.port)
    transport.connect()
    transport._sock.close()

    assert transport.send(b"{}") is False


def test_send_does_not_block_without_listener():
    # Nothing listens on this port; datagrams are simply lost.
    probe = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    probe.bind(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()

    reporter = Reporter(UdpTransport("127.0.0.1", port))
    for _ in range(10):
        reporter.send(make_event())
    stats = reporter.get_stats()
    assert stats["sent"] + stats["dropped"] == 10
    reporter.close()


def test_console_transport():
    stream = io.StringIO()
    reporter = Reporter(ConsoleTransport(stream))
    event = make_event()

    assert reporter.send(event) is True
    line = stream.getvalue()
    assert line.startswith("[event] ")
    assert str(event) in line
