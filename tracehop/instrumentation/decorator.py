"""@observe decorator for instrumenting functions."""

from __future__ import annotations

import functools
import inspect
import json
from typing import Any, Callable, Dict, Iterable, Optional

VALUE_LIMIT = 1000
SEQUENCE_LIMIT = 100


def _capture_args(bound_args: inspect.BoundArguments, skip: Iterable[str]) -> Dict[str, Any]:
    """Capture function arguments as reportable values."""
    captured = {}
    for name, value in bound_args.arguments.items():
        if name in skip:
            continue
        if name in ("self", "cls"):
            continue
        captured[name] = _to_reportable(value)
    return captured


def _to_reportable(value: Any) -> Any:
    """
    Convert a value to something the collector message can carry.

    Scalars pass through, sequences are truncated, everything else becomes
    a truncated string.
    """
    if isinstance(value, (bool, int, float)) or value is None:
        return value
    if isinstance(value, str):
        return value[:VALUE_LIMIT]

    if isinstance(value, (list, tuple)):
        converted = []
        for item in value[:SEQUENCE_LIMIT]:
            if isinstance(item, (bool, str, int, float)) or item is None:
                converted.append(item)
            else:
                converted.append(str(item)[:VALUE_LIMIT])
        return converted

    if isinstance(value, dict):
        try:
            return json.dumps(value, default=str)[:VALUE_LIMIT]
        except (TypeError, ValueError):
            return str(value)[:VALUE_LIMIT]

    return str(value)[:VALUE_LIMIT]


def observe(
    layer: Optional[str] = None,
    *,
    info: Optional[Dict[str, Any]] = None,
    capture_args: bool = False,
    skip_args: Optional[Iterable[str]] = None,
    skip_result: bool = True,
    tracer_name: Optional[str] = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorate a function to report an entry/exit pair around each call.

    - Supports sync and async functions.
    - Records exceptions on the exit event and re-raises them.
    - Optionally reports arguments (``capture_args``) and the result.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        span_layer = layer or func.__name__
        skip_args_set = set(skip_args or [])
        signature = inspect.signature(func)

        def entry_info(args, kwargs) -> Dict[str, Any]:
            span_info = dict(info or {})
            span_info["Function"] = func.__qualname__
            span_info["Module"] = func.__module__
            if capture_args:
                try:
                    bound = signature.bind_partial(*args, **kwargs)
                    bound.apply_defaults()
                    span_info.update(_capture_args(bound, skip_args_set))
                except TypeError:
                    # The call itself will fail with the same error.
                    pass
            return span_info

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            tracer = _get_tracer(tracer_name or func.__module__ or "default")
            with tracer.span(span_layer, entry_info(args, kwargs)) as scope:
                result = func(*args, **kwargs)
                if not skip_result:
                    scope.add_exit_info("Result", _to_reportable(result))
                return result

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            tracer = _get_tracer(tracer_name or func.__module__ or "default")
            async with tracer.span(span_layer, entry_info(args, kwargs)) as scope:
                result = await func(*args, **kwargs)
                if not skip_result:
                    scope.add_exit_info("Result", _to_reportable(result))
                return result

        return async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper

    return decorator


def _get_tracer(name: str):
    import tracehop

    return tracehop.get_tracer(name)
