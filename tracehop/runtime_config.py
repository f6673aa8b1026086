"""Runtime configuration state management."""

from typing import Optional

# Global runtime configuration state
_config = {
    "sample_rate": 300000,
    "trace_mode": "through",
    "debug": False,
    "hostname": None,
}


def set_sample_rate(value: int) -> None:
    _config["sample_rate"] = value


def get_sample_rate() -> int:
    return _config["sample_rate"]


def set_trace_mode(value: str) -> None:
    _config["trace_mode"] = value


def get_trace_mode() -> str:
    return _config["trace_mode"]


def set_debug(value: bool) -> None:
    _config["debug"] = value


def get_debug() -> bool:
    return _config["debug"]


def set_hostname(value: Optional[str]) -> None:
    _config["hostname"] = value


def get_hostname() -> Optional[str]:
    return _config["hostname"]
