"""Helper functions for fixed-width hex fields."""

from __future__ import annotations

import string
import time


def format_hex(data: bytes) -> str:
    """
    Format raw bytes as an upper-case hex string.

    Args:
        data: Raw bytes

    Returns:
        Hex string, two characters per byte
    """
    return data.hex().upper()


def parse_hex(hex_string: str, size: int) -> bytes:
    """
    Parse a hex string of exactly ``size`` bytes.

    Args:
        hex_string: Hex string (case-insensitive)
        size: Expected number of bytes

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the string is not valid hex or has the wrong width
    """
    if len(hex_string) != size * 2:
        raise ValueError(f"expected {size * 2} hex characters, got {len(hex_string)}")
    # bytes.fromhex skips whitespace, so check every character first
    if not all(c in string.hexdigits for c in hex_string):
        raise ValueError(f"not a hex string: {hex_string!r}")
    return bytes.fromhex(hex_string)


def is_zero(data: bytes) -> bool:
    return not any(data)


def now_us() -> int:
    """Current wall-clock time in microseconds since the epoch."""
    return time.time_ns() // 1000
