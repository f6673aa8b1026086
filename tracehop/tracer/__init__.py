"""Tracer components for the tracing agent."""

from tracehop.tracer.event import Event, SpanScope
from tracehop.tracer.metadata import TraceIdentifier
from tracehop.tracer.provider import TracerProvider
from tracehop.tracer.tracer import Tracer

__all__ = [
    "Event",
    "SpanScope",
    "TraceIdentifier",
    "Tracer",
    "TracerProvider",
]
