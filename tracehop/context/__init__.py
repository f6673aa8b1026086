"""Context utilities for the tracing agent."""

from tracehop.context.context import (
    bind,
    capture,
    current,
    enter,
    exit,
    reset,
    run_with_context,
)
from tracehop.context.propagators import (
    XTRACE_HEADER,
    XTracePropagator,
    extract_xtrace,
    get_inbound_xtrace,
    inject_xtrace,
)

__all__ = [
    "current",
    "enter",
    "exit",
    "reset",
    "capture",
    "run_with_context",
    "bind",
    "XTRACE_HEADER",
    "XTracePropagator",
    "extract_xtrace",
    "inject_xtrace",
    "get_inbound_xtrace",
]
