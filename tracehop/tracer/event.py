"""Trace events and the span scope that reports entry/exit pairs."""

from __future__ import annotations

import logging
import traceback
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from tracehop.processors.sampler import SampleSource
from tracehop.tracer.metadata import TraceIdentifier, derive_child
from tracehop.utils.helpers import now_us

if TYPE_CHECKING:
    from tracehop.tracer.tracer import Tracer

logger = logging.getLogger(__name__)

XTRACE_KEY = "X-Trace"
EDGE_KEY = "Edge"
TIMESTAMP_KEY = "Timestamp_u"
RESERVED_KEYS = frozenset({XTRACE_KEY, EDGE_KEY, TIMESTAMP_KEY})

BACKTRACE_LIMIT = 2000


class Event:
    """
    A single point in a trace.

    The event owns its identifier, the op ids it continues from and a
    mapping of span metadata. Keys keep insertion order so debug dumps read
    naturally; the encoding does not depend on it.
    """

    def __init__(
        self,
        metadata: TraceIdentifier,
        edges: Optional[List[str]] = None,
        sample_source: SampleSource = SampleSource.MODE,
        timestamp_us: Optional[int] = None,
    ) -> None:
        self.metadata = metadata
        self.edges: List[str] = list(edges or [])
        self.sample_source = sample_source
        self.timestamp_us = timestamp_us if timestamp_us is not None else now_us()
        self.info: Dict[str, Any] = {}
        self._ended = False

    @property
    def sampled(self) -> bool:
        return self.metadata.sampled

    @property
    def task_id(self) -> str:
        return self.metadata.task_id_hex

    @property
    def op_id(self) -> str:
        return self.metadata.op_id_hex

    @property
    def ended(self) -> bool:
        return self._ended

    def end(self) -> None:
        """Mark the span entered with this event as exited; there is no way back."""
        self._ended = True

    def add_info(self, key: str, value: Any) -> None:
        """Set a metadata key; reserved wire keys are ignored."""
        if key in RESERVED_KEYS:
            logger.debug("Ignoring reserved key %r on event %s", key, self)
            return
        self.info[key] = value

    def update_info(self, info: Optional[Dict[str, Any]] = None, **kwargs: Any) -> None:
        for key, value in dict(info or {}, **kwargs).items():
            self.add_info(key, value)

    def child(self) -> "Event":
        """Derive the next event of this trace, linked back to this one."""
        return Event(
            derive_child(self.metadata),
            edges=[self.op_id],
            sample_source=self.sample_source,
        )

    def __str__(self) -> str:
        return str(self.metadata)

    def __repr__(self) -> str:
        return f"<Event {self} edges={self.edges} info={self.info}>"


class SpanScope:
    """
    Context manager reporting an entry event on enter and an exit event on exit.

    Returned by ``Tracer.span()``. The entry event continues the current
    event of the active context, or starts a new trace when there is none.
    """

    def __init__(
        self,
        tracer: "Tracer",
        layer: str,
        info: Optional[Dict[str, Any]] = None,
        xtrace: Optional[str] = None,
    ) -> None:
        self.tracer = tracer
        self.layer = layer
        self.info = dict(info or {})
        self.xtrace = xtrace
        self.event: Optional[Event] = None
        self.exit_event: Optional[Event] = None
        self._exit_info: Dict[str, Any] = {}

    def add_exit_info(self, key: str, value: Any) -> None:
        """Queue a key to be reported on the exit event."""
        self._exit_info[key] = value

    def record_exception(self, error: BaseException) -> None:
        self._exit_info["ErrorClass"] = type(error).__name__
        self._exit_info["ErrorMsg"] = str(error)
        tb = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self._exit_info["Backtrace"] = tb[:BACKTRACE_LIMIT]

    def _start(self) -> Event:
        parent = self.tracer.current()
        self.event = self.tracer.create_event(parent, xtrace=self.xtrace if parent is None else None)
        self.event.add_info("Layer", self.layer)
        self.tracer.report_entry(self.event, self.info)
        return self.event

    def _finish(self, exc: Optional[BaseException]) -> None:
        if exc is not None:
            self.record_exception(exc)
        self.exit_event = self.tracer.report_exit(self.event, self._exit_info)

    # Context manager support
    def __enter__(self) -> "SpanScope":
        self._start()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._finish(exc)
        return False

    async def __aenter__(self) -> "SpanScope":
        self._start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        self._finish(exc)
        return False
