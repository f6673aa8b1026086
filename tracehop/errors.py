"""Tracehop error hierarchy and exceptions."""

from __future__ import annotations


class TracehopError(Exception):
    """Base exception for all Tracehop errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigError(TracehopError):
    """Raised when configuration is invalid or conflicting."""
    pass


class MalformedHeader(TracehopError, ValueError):
    """Raised when an X-Trace header cannot be decoded."""
    pass


class ContextMismatch(TracehopError):
    """Raised when enter/exit calls on the context store are not nested."""
    pass


class TransportFailure(TracehopError):
    """Raised by transports when a message could not be handed to the collector."""
    pass
