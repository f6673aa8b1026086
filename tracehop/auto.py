"""Agent initialization and the global tracer provider."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from tracehop import runtime_config
from tracehop.config import TracehopConfig, load_config
from tracehop.processors.sampler import Sampler
from tracehop.reporter.console_transport import ConsoleTransport
from tracehop.reporter.reporter import Reporter
from tracehop.reporter.transport import UdpTransport
from tracehop.tracer.provider import TracerProvider
from tracehop.tracer.tracer import Tracer

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_provider: Optional[TracerProvider] = None
_started_by: Optional[str] = None


def _configure_logging(debug: bool) -> None:
    package_logger = logging.getLogger("tracehop")
    if not debug:
        return
    package_logger.setLevel(logging.DEBUG)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        package_logger.addHandler(handler)


def _build_reporter(config: TracehopConfig) -> Optional[Reporter]:
    reporter_config = config.reporter
    if reporter_config.type == "none":
        return None
    if reporter_config.type == "console":
        return Reporter(ConsoleTransport())
    return Reporter(UdpTransport(reporter_config.host, reporter_config.port))


def _apply_runtime_config(config: TracehopConfig) -> None:
    runtime_config.set_sample_rate(config.tracing.sample_rate)
    runtime_config.set_trace_mode(config.tracing.trace_mode.value)
    runtime_config.set_debug(config.tracing.debug)
    runtime_config.set_hostname(config.tracing.hostname)


def _start(caller: str, config_file: Optional[str], **overrides: Any) -> TracerProvider:
    global _provider, _started_by

    with _lock:
        if _provider is not None and _started_by is not None:
            if _started_by != caller:
                logger.warning(
                    "Tracing already started by %s(); %s() returns the existing provider.",
                    _started_by, caller,
                )
            return _provider

        config = load_config(config_file, **overrides)
        _apply_runtime_config(config)
        _configure_logging(config.tracing.debug)

        _provider = TracerProvider(reporter=_build_reporter(config), sampler=Sampler())
        _started_by = caller
        logger.debug(
            "Tracing started: mode=%s rate=%d reporter=%s (%s)",
            config.tracing.trace_mode.value, config.tracing.sample_rate, config.reporter.type, config.reporter.address,
        )
        return _provider


def init(config_file: Optional[str] = None, **overrides: Any) -> TracerProvider:
    """
    Initialize tracing from config file, environment and keyword overrides.

    Calling it again returns the provider already in place.

    Raises:
        ConfigError: If the configuration is invalid
    """
    return _start("init", config_file, **overrides)


def start_tracing(config_file: Optional[str] = None, **overrides: Any) -> TracerProvider:
    """Start tracing; same behaviour as ``init`` under its historical name."""
    return _start("start_tracing", config_file, **overrides)


def stop_tracing() -> None:
    """Shut down the global provider so tracing can be initialized again."""
    global _provider, _started_by

    with _lock:
        provider, _provider, _started_by = _provider, None, None
    if provider is not None:
        provider.shutdown()


def get_tracer_provider() -> TracerProvider:
    """
    Return the global provider, creating an unconfigured one on first use.

    The fallback provider has no reporter, so events are tracked but not sent.
    """
    global _provider

    with _lock:
        if _provider is None:
            _provider = TracerProvider()
        return _provider


def get_tracer(name: str = "tracehop") -> Tracer:
    return get_tracer_provider().get_tracer(name)
