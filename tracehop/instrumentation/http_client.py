"""HTTP client helpers for context propagation."""

from __future__ import annotations

from typing import Dict

from tracehop.context import inject_xtrace


def inject_headers(headers: Dict[str, str]) -> Dict[str, str]:
    """
    Inject the X-Trace header into the provided headers dict if a current event exists.

    Returns the same headers mapping for convenience.
    """
    inject_xtrace(headers)
    return headers
