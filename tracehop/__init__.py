"""Tracehop: tracing core of an application performance monitoring agent.

Probes create events, report span entry/exit and the agent keeps track of
the active event per continuation, samples traces and ships sampled events
to a local collector.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from tracehop import runtime_config
from tracehop.auto import get_tracer, get_tracer_provider, init, start_tracing, stop_tracing
from tracehop.context import bind, capture, current, run_with_context
from tracehop.errors import ConfigError, ContextMismatch, MalformedHeader, TracehopError, TransportFailure
from tracehop.instrumentation.decorator import observe
from tracehop.processors.sampler import MAX_SAMPLE_RATE, TraceMode, validate_sample_rate
from tracehop.tracer.event import Event
from tracehop.tracer.metadata import TraceIdentifier

__version__ = "0.4.0"


def create_event(parent: Optional[Event] = None, *, xtrace: Optional[str] = None) -> Event:
    return get_tracer().create_event(parent, xtrace=xtrace)


def report_entry(event: Event, info: Optional[Dict[str, Any]] = None, **kwargs: Any) -> bool:
    return get_tracer().report_entry(event, info, **kwargs)


def report_exit(event: Event, info: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Optional[Event]:
    return get_tracer().report_exit(event, info, **kwargs)


def report(event: Optional[Event]) -> bool:
    return get_tracer().report(event)


def set_sample_rate(rate: int) -> None:
    """Set the sample rate, out of ``MAX_SAMPLE_RATE``."""
    runtime_config.set_sample_rate(validate_sample_rate(rate))


def get_sample_rate() -> int:
    return runtime_config.get_sample_rate()


def set_trace_mode(mode: str) -> None:
    """Set the trace mode: ``never``, ``always`` or ``through``."""
    runtime_config.set_trace_mode(TraceMode(mode).value)


def get_trace_mode() -> TraceMode:
    return TraceMode(runtime_config.get_trace_mode())


__all__ = [
    "__version__",
    "init",
    "start_tracing",
    "stop_tracing",
    "get_tracer",
    "get_tracer_provider",
    "create_event",
    "report_entry",
    "report_exit",
    "report",
    "current",
    "capture",
    "bind",
    "run_with_context",
    "observe",
    "set_sample_rate",
    "get_sample_rate",
    "set_trace_mode",
    "get_trace_mode",
    "MAX_SAMPLE_RATE",
    "TraceMode",
    "Event",
    "TraceIdentifier",
    "TracehopError",
    "ConfigError",
    "MalformedHeader",
    "ContextMismatch",
    "TransportFailure",
]
