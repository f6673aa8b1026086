"""Console transport for developer visibility."""

from __future__ import annotations

import sys

from tracehop.reporter.transport import Transport


class ConsoleTransport(Transport):
    """Simple transport that prints messages to stdout (or provided stream)."""

    def __init__(self, stream=None) -> None:
        self.stream = stream or sys.stdout

    def send(self, payload: bytes) -> bool:
        try:
            print(f"[event] {payload.decode('utf-8', errors='replace')}", file=self.stream)
        except (OSError, ValueError):
            return False
        return True
