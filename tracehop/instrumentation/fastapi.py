"""
FastAPI middleware helpers for tracing HTTP requests.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from tracehop.context import XTRACE_HEADER
from tracehop.instrumentation.http_server import start_server_span


def install_http_middleware(app: Any, *, tracer_name: str = "fastapi", layer: str = "fastapi") -> None:
    """
    Attach an HTTP middleware that wraps each request in an entry/exit pair.

    - Continues the inbound X-Trace header
    - Records method/URL on entry and the response status on exit
    - Returns the exit event's X-Trace on the response
    """

    @app.middleware("http")
    async def tracing_middleware(request, call_next: Callable[[Any], Awaitable[Any]]):  # type: ignore
        # Lazy import to avoid circular import when tracehop initializes.
        from tracehop import get_tracer
        tracer = get_tracer(tracer_name)
        headers = dict(request.headers)
        info = {
            "HTTP-Method": request.method,
            "URL": request.url.path,
        }
        async with start_server_span(tracer, layer, headers, info) as scope:
            response = await call_next(request)
            scope.add_exit_info("Status", response.status_code)

        if scope.exit_event is not None:
            try:
                response.headers[XTRACE_HEADER] = str(scope.exit_event)
            except (AttributeError, TypeError):
                pass
        return response

    return None
