"""Basic smoke tests for Tracehop.

Quick sanity checks that the public API works end to end against a
loopback collector.
"""

import pytest

import tracehop
from tracehop import observe
from tracehop.tracer.metadata import decode


def test_version_exposed():
    """Smoke test: version is accessible."""
    assert hasattr(tracehop, '__version__')
    assert isinstance(tracehop.__version__, str)
    assert len(tracehop.__version__) > 0


def test_module_level_hooks(collector):
    """With traceMode=always, createEvent + reportEntry sends exactly one message."""
    tracehop.init(
        config_file="/nonexistent.toml",
        trace_mode="always",
        sample_rate=tracehop.MAX_SAMPLE_RATE,
        reporter_host=collector.host,
        reporter_port=collector.port,
    )

    event = tracehop.create_event()
    tracehop.report_entry(event, Layer="smoke")

    message = collector.receive()
    assert decode(message["X-Trace"]).task_id == event.metadata.task_id
    assert collector.receive_nowait() is None
    assert tracehop.current() is event

    exit_event = tracehop.report_exit(event)
    assert collector.receive()["X-Trace"] == str(exit_event)
    assert tracehop.current() is None


def test_observe_reports_entry_and_exit(collector):
    tracehop.init(
        config_file="/nonexistent.toml",
        trace_mode="always",
        reporter_host=collector.host,
        reporter_port=collector.port,
    )

    @observe(layer="add_numbers")
    def add(x: int, y: int) -> int:
        return x + y

    assert add(2, 3) == 5
    entry, exit_ = collector.receive(), collector.receive()
    assert entry["Layer"] == exit_["Layer"] == "add_numbers"
    assert entry["Label"] == "entry"
    assert exit_["Label"] == "exit"


def test_runtime_settings():
    tracehop.set_sample_rate(42)
    tracehop.set_trace_mode("never")

    assert tracehop.get_sample_rate() == 42
    assert tracehop.get_trace_mode() is tracehop.TraceMode.NEVER
    with pytest.raises(ValueError):
        tracehop.set_sample_rate(tracehop.MAX_SAMPLE_RATE + 1)
    with pytest.raises(ValueError):
        tracehop.set_trace_mode("sometimes")


def test_untraced_process_is_silent():
    """Without init() events are tracked but never sent."""
    tracehop.set_trace_mode("always")
    event = tracehop.create_event()

    assert tracehop.report_entry(event) is False
    assert tracehop.current() is event
    tracehop.report_exit(event)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
