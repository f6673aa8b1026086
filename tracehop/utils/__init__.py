"""Utility functions for Tracehop."""

from tracehop.utils.helpers import (
    format_hex,
    parse_hex,
    is_zero,
    now_us,
)

__all__ = [
    "format_hex",
    "parse_hex",
    "is_zero",
    "now_us",
]
