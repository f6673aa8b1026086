"""X-Trace header propagation using OpenTelemetry's TextMapPropagator interface."""

from __future__ import annotations

from typing import Dict, Optional, Set

from opentelemetry import context as context_api
from opentelemetry.context import Context
from opentelemetry.propagators.textmap import (
    CarrierT,
    Getter,
    Setter,
    TextMapPropagator,
    default_getter,
    default_setter,
)

from tracehop.context.context import current

XTRACE_HEADER = "X-Trace"

_INBOUND_XTRACE_KEY = context_api.create_key("tracehop-inbound-xtrace")


def _lookup(carrier: CarrierT, getter: Getter) -> Optional[str]:
    """Case-insensitive header lookup."""
    for key in getter.keys(carrier):
        if key.lower() == XTRACE_HEADER.lower():
            values = getter.get(carrier, key)
            if values:
                return values[0]
    return None


class XTracePropagator(TextMapPropagator):
    """
    Propagates the current event as an ``X-Trace`` header.

    ``inject`` writes the current event of the context; ``extract`` stores
    the raw inbound value in the returned context without decoding it, so
    the tracer can decide how to treat a malformed header.
    """

    def extract(
        self,
        carrier: CarrierT,
        context: Optional[Context] = None,
        getter: Getter = default_getter,
    ) -> Context:
        if context is None:
            context = context_api.get_current()
        value = _lookup(carrier, getter)
        if not value:
            return context
        return context_api.set_value(_INBOUND_XTRACE_KEY, value, context)

    def inject(
        self,
        carrier: CarrierT,
        context: Optional[Context] = None,
        setter: Setter = default_setter,
    ) -> None:
        event = current(context)
        if event is None:
            return
        setter.set(carrier, XTRACE_HEADER, str(event))

    @property
    def fields(self) -> Set[str]:
        return {XTRACE_HEADER}


_propagator = XTracePropagator()


def get_inbound_xtrace(context: Optional[Context] = None) -> Optional[str]:
    """Return the raw X-Trace value stored by ``extract``."""
    return context_api.get_value(_INBOUND_XTRACE_KEY, context)


def extract_xtrace(headers: Dict[str, str]) -> Optional[str]:
    """Extract the raw X-Trace header value from headers (case-insensitive)."""
    return get_inbound_xtrace(_propagator.extract(headers))


def inject_xtrace(headers: Dict[str, str], context: Optional[Context] = None) -> None:
    """Inject the X-Trace header of the current event, if any."""
    _propagator.inject(headers, context=context)
