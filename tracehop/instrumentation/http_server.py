"""HTTP server helpers for continuing inbound traces."""

from __future__ import annotations

from typing import Any, Dict, Optional

from tracehop.context import extract_xtrace
from tracehop.tracer.event import SpanScope
from tracehop.tracer.tracer import Tracer


def start_server_span(
    tracer: Tracer,
    layer: str,
    headers: Dict[str, str],
    info: Optional[Dict[str, Any]] = None,
) -> SpanScope:
    """
    Convenience helper to start a server span continuing the inbound X-Trace header.

    Returns the span context manager (caller should use 'with' or 'async with').
    """
    return tracer.span(layer, info, xtrace=extract_xtrace(headers))
