"""Context store tracking the active event per continuation - using OpenTelemetry context."""

from __future__ import annotations

import functools
from typing import Any, Callable, NamedTuple, Optional, TypeVar, TYPE_CHECKING

from opentelemetry import context as context_api
from opentelemetry.context import Context

from tracehop.errors import ContextMismatch

if TYPE_CHECKING:
    from tracehop.tracer.event import Event

F = TypeVar("F", bound=Callable[..., Any])

_FRAME_KEY = context_api.create_key("tracehop-frame")


class _Frame(NamedTuple):
    """One entered event; frames form an immutable stack shared between forks."""

    event: "Event"
    previous: Optional["_Frame"]


def _get_frame(context: Optional[Context] = None) -> Optional[_Frame]:
    return context_api.get_value(_FRAME_KEY, context)


def _set_frame(frame: Optional[_Frame]) -> None:
    context_api.attach(context_api.set_value(_FRAME_KEY, frame))


def current(context: Optional[Context] = None) -> Optional["Event"]:
    """
    Return the currently active event, if any.

    Absence is reported as None; callers treat it as "do not report".
    """
    frame = _get_frame(context)
    return frame.event if frame is not None else None


def enter(event: "Event") -> None:
    """Make ``event`` current, remembering the previous one for ``exit``."""
    _set_frame(_Frame(event, _get_frame()))


def exit(event: "Event") -> None:
    """
    Restore the event that was current before ``event`` was entered.

    Raises:
        ContextMismatch: If ``event`` is not the most recently entered event.
            The store is reset to unset before raising.
    """
    frame = _get_frame()
    if frame is None or frame.event is not event:
        expected = str(frame.event) if frame is not None else "unset"
        reset()
        raise ContextMismatch(
            "exit does not match the most recent enter",
            {"expected": expected, "actual": str(event)},
        )
    _set_frame(frame.previous)


def reset() -> None:
    """Drop every entered event for the active continuation."""
    _set_frame(None)


def capture() -> Context:
    """
    Snapshot the active context.

    Call this where a continuation is scheduled and hand the snapshot to
    ``run_with_context`` (or use ``bind``) where it runs.
    """
    return context_api.get_current()


def run_with_context(context: Context, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run ``fn`` with ``context`` attached, then release it."""
    token = context_api.attach(context)
    try:
        return fn(*args, **kwargs)
    finally:
        context_api.detach(token)


def bind(fn: F, context: Optional[Context] = None) -> F:
    """
    Bind ``fn`` to the context active now (or to ``context``).

    The returned callable restores that context for the duration of every
    call, no matter which continuation is current when it runs.
    """
    captured = context if context is not None else capture()

    if getattr(fn, "_tracehop_bound", None) is captured:
        return fn

    @functools.wraps(fn)
    def bound(*args: Any, **kwargs: Any) -> Any:
        return run_with_context(captured, fn, *args, **kwargs)

    bound._tracehop_bound = captured
    return bound  # type: ignore[return-value]
