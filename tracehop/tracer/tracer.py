"""Tracer: the hook API instrumentation probes call into."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, TYPE_CHECKING

from tracehop.context import context as context_store
from tracehop.errors import ContextMismatch, MalformedHeader
from tracehop.tracer.event import Event, SpanScope
from tracehop.tracer.metadata import decode, derive_child, new_root

if TYPE_CHECKING:
    from tracehop.tracer.provider import TracerProvider

logger = logging.getLogger(__name__)


class Tracer:
    """
    Creates events, tracks them in the context store and reports them.

    Every method absorbs internal failures: the worst outcome for the host
    application is a missing or truncated trace.
    """

    def __init__(self, provider: "TracerProvider", instrumentation_scope: str):
        """
        Initialize tracer.

        Args:
            provider: TracerProvider owning the sampler and reporter
            instrumentation_scope: Name used as the default span layer
        """
        self._provider = provider
        self.instrumentation_scope = instrumentation_scope

    def create_event(
        self,
        parent: Optional[Event] = None,
        *,
        xtrace: Optional[str] = None,
    ) -> Event:
        """
        Create a new event.

        With a parent the event continues the parent's trace and inherits its
        sample decision. Without one it starts a trace: the sampler runs once
        here, continuing the remote trace from ``xtrace`` when it decodes.

        Args:
            parent: Event to continue from
            xtrace: Inbound X-Trace header value, used only for root events

        Returns:
            The new Event
        """
        if parent is not None:
            return parent.child()

        inbound = None
        malformed = False
        if xtrace:
            try:
                inbound = decode(xtrace)
            except MalformedHeader as exc:
                logger.warning("Treating malformed X-Trace header as no continuation: %s", exc)
                malformed = True

        result = self._provider.sampler.should_sample(
            inbound_sampled=inbound.sampled if inbound is not None else None,
            malformed_inbound=malformed,
        )

        if inbound is not None:
            metadata = derive_child(inbound).with_sampled(result.sampled)
            return Event(metadata, edges=[inbound.op_id_hex], sample_source=result.source)
        return Event(new_root(result.sampled), sample_source=result.source)

    def report_entry(
        self,
        event: Event,
        info: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> bool:
        """
        Report the entry of a span and make ``event`` current.

        Returns:
            True if the event was handed to the reporter
        """
        if event is None:
            return False
        if event.ended:
            logger.debug("Ignoring entry for ended event %s", event)
            return False
        event.update_info(info, **kwargs)
        event.add_info("Label", "entry")
        context_store.enter(event)
        return self.report(event)

    def report_exit(
        self,
        event: Event,
        info: Optional[Dict[str, Any]] = None,
        **kwargs: Any,
    ) -> Optional[Event]:
        """
        Report the exit of the span entered with ``event``.

        Restores the context that was current before the entry and reports
        an exit event linked to the entry event. A nesting violation is
        logged and the context is left unset.

        Returns:
            The exit event, or None if ``event`` was missing or already ended
        """
        if event is None:
            return None
        if event.ended:
            logger.debug("Ignoring exit for ended event %s", event)
            return None

        exit_event = event.child()
        if "Layer" in event.info:
            exit_event.add_info("Layer", event.info["Layer"])
        exit_event.update_info(info, **kwargs)
        exit_event.add_info("Label", "exit")

        try:
            context_store.exit(event)
        except ContextMismatch as exc:
            logger.warning("Context reset after mismatched exit: %s", exc)

        event.end()
        self.report(exit_event)
        return exit_event

    def report(self, event: Optional[Event]) -> bool:
        """Send ``event`` if its trace is sampled."""
        if event is None or not event.sampled:
            return False
        reporter = self._provider.reporter
        if reporter is None:
            return False
        return reporter.send(event)

    def current(self) -> Optional[Event]:
        """Get the current event."""
        return context_store.current()

    def span(
        self,
        layer: Optional[str] = None,
        info: Optional[Dict[str, Any]] = None,
        *,
        xtrace: Optional[str] = None,
    ) -> SpanScope:
        """
        Start a span as a (sync or async) context manager.

        Args:
            layer: Layer name, defaults to the instrumentation scope
            info: Keys reported on the entry event
            xtrace: Inbound X-Trace header, used when no event is current
        """
        return SpanScope(self, layer or self.instrumentation_scope, info, xtrace=xtrace)
