"""Instrumentation helpers for probes and frameworks."""

from tracehop.instrumentation.decorator import observe
from tracehop.instrumentation.http_client import inject_headers as inject_http_headers
from tracehop.instrumentation.http_server import start_server_span
from tracehop.instrumentation.fastapi import install_http_middleware

__all__ = [
    "observe",
    "inject_http_headers",
    "start_server_span",
    "install_http_middleware",
]
