"""Configuration loading: TOML file, environment and explicit overrides.

Priority (highest first): keyword overrides, environment variables, config
file, defaults. Example ``tracehop.toml``::

    [tracing]
    sample_rate = 300000
    trace_mode = "through"

    [reporter]
    type = "udp"
    host = "localhost"
    port = 7831
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tracehop.errors import ConfigError
from tracehop.processors.sampler import MAX_SAMPLE_RATE, TraceMode
from tracehop.reporter.transport import DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "tracehop.toml"

# env var -> (section, key)
ENV_VARS = {
    "TRACEHOP_SAMPLE_RATE": ("tracing", "sample_rate"),
    "TRACEHOP_TRACE_MODE": ("tracing", "trace_mode"),
    "TRACEHOP_DEBUG": ("tracing", "debug"),
    "TRACEHOP_REPORTER_TYPE": ("reporter", "type"),
    "TRACEHOP_REPORTER_HOST": ("reporter", "host"),
    "TRACEHOP_REPORTER_PORT": ("reporter", "port"),
}

# flat keyword override -> (section, key)
OVERRIDE_KEYS = {
    "sample_rate": ("tracing", "sample_rate"),
    "trace_mode": ("tracing", "trace_mode"),
    "debug": ("tracing", "debug"),
    "hostname": ("tracing", "hostname"),
    "reporter_type": ("reporter", "type"),
    "reporter_host": ("reporter", "host"),
    "reporter_port": ("reporter", "port"),
}


class TracingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    sample_rate: int = Field(default=300000, ge=0, le=MAX_SAMPLE_RATE)
    trace_mode: TraceMode = TraceMode.THROUGH
    debug: bool = False
    hostname: Optional[str] = None


class ReporterConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    type: Literal["udp", "console", "none"] = "udp"
    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, gt=0, lt=65536)

    @field_validator("host")
    @classmethod
    def _host_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("host must not be empty")
        return value.strip()

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"


class TracehopConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tracing: TracingConfig = Field(default_factory=TracingConfig)
    reporter: ReporterConfig = Field(default_factory=ReporterConfig)


def find_config_file() -> Optional[str]:
    """
    Look for a config file in the current directory, then in the home directory.

    Returns:
        Path of the first file found, or None
    """
    candidates = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / ".tracehop" / "config.toml",
    ]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None


def load_toml_config(path: str) -> Dict[str, Any]:
    """
    Load a TOML config file.

    Returns an empty dict when the file does not exist.

    Raises:
        ConfigError: If the file is not valid TOML
    """
    file_path = Path(path)
    if not file_path.is_file():
        return {}
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError("Invalid TOML config file", {"path": path, "error": exc}) from exc


def load_config_from_env() -> Dict[str, Dict[str, Any]]:
    """Read the TRACEHOP_* environment variables into a nested config dict."""
    result: Dict[str, Dict[str, Any]] = {}
    for env_var, (section, key) in ENV_VARS.items():
        value = os.getenv(env_var)
        if value is None or value == "":
            continue
        result.setdefault(section, {})[key] = value
    return result


def _merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validate_config(data: Dict[str, Any]) -> TracehopConfig:
    """
    Validate a nested config dict.

    Raises:
        ConfigError: If pydantic validation fails
    """
    try:
        return TracehopConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError("Invalid configuration", {"errors": exc.error_count(), "detail": exc}) from exc


def load_config(config_file: Optional[str] = None, **overrides: Any) -> TracehopConfig:
    """
    Build the effective configuration.

    Args:
        config_file: Explicit TOML file; when omitted ``find_config_file`` is used
        **overrides: Flat keyword overrides (see ``OVERRIDE_KEYS``); None values are skipped

    Raises:
        ConfigError: On unknown override keys, invalid TOML or invalid values
    """
    path = config_file or find_config_file()
    data: Dict[str, Any] = load_toml_config(path) if path else {}
    if path and data:
        logger.debug("Loaded tracehop config from %s", path)

    data = _merge(data, load_config_from_env())

    explicit: Dict[str, Dict[str, Any]] = {}
    for name, value in overrides.items():
        if value is None:
            continue
        if name not in OVERRIDE_KEYS:
            raise ConfigError("Unknown configuration option", {"option": name})
        section, key = OVERRIDE_KEYS[name]
        explicit.setdefault(section, {})[key] = value
    data = _merge(data, explicit)

    return validate_config(data)
