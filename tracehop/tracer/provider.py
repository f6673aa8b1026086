"""TracerProvider owning the sampler and reporter shared by all tracers."""

from __future__ import annotations

import threading
from typing import Dict, Optional, TYPE_CHECKING

from tracehop.processors.sampler import Sampler

if TYPE_CHECKING:
    from tracehop.reporter.reporter import Reporter
    from tracehop.tracer.tracer import Tracer


class TracerProvider:
    """
    Process-wide holder of the sampler, the reporter and the tracer cache.
    """

    def __init__(
        self,
        reporter: Optional["Reporter"] = None,
        sampler: Optional[Sampler] = None,
    ) -> None:
        """
        Initialize TracerProvider.

        Args:
            reporter: Reporter used for sampled events (None disables sending)
            sampler: Sampler consulted at trace roots (defaults to runtime config)
        """
        self.reporter = reporter
        self.sampler = sampler or Sampler()

        self._tracers: Dict[str, "Tracer"] = {}
        self._lock = threading.Lock()

    def get_tracer(self, name: str) -> "Tracer":
        """
        Get a tracer by name.

        Args:
            name: Instrumentation scope name

        Returns:
            Cached Tracer instance
        """
        with self._lock:
            tracer = self._tracers.get(name)
            if tracer is None:
                from tracehop.tracer.tracer import Tracer
                tracer = Tracer(self, name)
                self._tracers[name] = tracer
            return tracer

    def shutdown(self) -> None:
        """Close the reporter's transport."""
        if self.reporter is not None:
            self.reporter.close()
