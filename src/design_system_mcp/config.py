"""Configuration for the design system server.

Settings come from three layers, later layers winning:
defaults, an optional TOML file, then DESIGN_SYSTEM_* environment
variables. The result is validated once and frozen.

Example config.toml:

    [server]
    port = 8080
    log_level = "debug"

    [data]
    data_path = "./data"
    cache_timeout = 600

    [performance]
    request_timeout = 2.5
"""

from __future__ import annotations

import dataclasses
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

from .circuit_breaker_config import CircuitBreakerConfig
from .errors import configuration_error

logger = logging.getLogger(__name__)

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")

ENV_PREFIX = "DESIGN_SYSTEM_"


@dataclass(frozen=True)
class ServerSettings:
    """Process identity and listening address."""

    name: str = "design-system-mcp"
    version: str = "1.0.0"
    host: str = "127.0.0.1"
    port: int = 3000
    log_level: str = "info"


@dataclass(frozen=True)
class DataSettings:
    """Data directory and cache behaviour. Durations in seconds."""

    data_path: Path = field(default_factory=lambda: Path("data"))
    enable_file_watching: bool = True
    cache_timeout: float = 300.0
    reload_debounce: float = 0.1
    auto_refresh: bool = False


@dataclass(frozen=True)
class PerformanceSettings:
    """Circuit breaker defaults shared by every query service."""

    request_timeout: float = 5.0
    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    monitoring_period: float = 60.0
    half_open_max_calls: int = 3


@dataclass(frozen=True)
class AppConfig:
    """Complete, validated configuration."""

    server: ServerSettings = field(default_factory=ServerSettings)
    data: DataSettings = field(default_factory=DataSettings)
    performance: PerformanceSettings = field(default_factory=PerformanceSettings)

    def breaker_config(self, name: str) -> CircuitBreakerConfig:
        """Derive the breaker configuration for a named service."""
        perf = self.performance
        return CircuitBreakerConfig(
            name=name,
            failure_threshold=perf.failure_threshold,
            recovery_timeout=perf.recovery_timeout,
            request_timeout=perf.request_timeout,
            monitoring_period=perf.monitoring_period,
            half_open_max_calls=perf.half_open_max_calls,
        )


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    msg = f"expected a boolean, got {raw!r}"
    raise ValueError(msg)


# env var suffix -> (section, key, parser)
_ENV_MAPPINGS: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "SERVER_NAME": ("server", "name", str),
    "SERVER_VERSION": ("server", "version", str),
    "HOST": ("server", "host", str),
    "PORT": ("server", "port", int),
    "LOG_LEVEL": ("server", "log_level", str),
    "DATA_PATH": ("data", "data_path", Path),
    "ENABLE_FILE_WATCHING": ("data", "enable_file_watching", _parse_bool),
    "CACHE_TIMEOUT": ("data", "cache_timeout", float),
    "RELOAD_DEBOUNCE": ("data", "reload_debounce", float),
    "AUTO_REFRESH": ("data", "auto_refresh", _parse_bool),
    "REQUEST_TIMEOUT": ("performance", "request_timeout", float),
    "FAILURE_THRESHOLD": ("performance", "failure_threshold", int),
    "RECOVERY_TIMEOUT": ("performance", "recovery_timeout", float),
    "MONITORING_PERIOD": ("performance", "monitoring_period", float),
    "HALF_OPEN_MAX_CALLS": ("performance", "half_open_max_calls", int),
}

_SECTIONS: dict[str, type[Any]] = {
    "server": ServerSettings,
    "data": DataSettings,
    "performance": PerformanceSettings,
}


def load_config(
    path: Path | str | None = None,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Build the application configuration.

    Args:
        path: Optional TOML file. A path that is given but missing is an error.
        env: Environment mapping. Defaults to os.environ.

    Returns:
        Validated AppConfig.

    Raises:
        DesignSystemError: CONFIGURATION on any unreadable or invalid value.
    """
    raw: dict[str, dict[str, Any]] = {section: {} for section in _SECTIONS}

    if path is not None:
        for section, values in _read_toml(Path(path)).items():
            raw[section].update(values)

    _apply_env(raw, os.environ if env is None else env)

    config = AppConfig(
        server=_build_section("server", raw["server"]),
        data=_build_section("data", raw["data"]),
        performance=_build_section("performance", raw["performance"]),
    )
    validate_config(config)
    logger.debug("Loaded configuration: %s", config)
    return config


def _read_toml(config_file: Path) -> dict[str, dict[str, Any]]:
    if not config_file.is_file():
        raise configuration_error("config_file", f"config file not found: {config_file}")

    try:
        data = tomllib.loads(config_file.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise configuration_error(
            "config_file", f"invalid TOML in {config_file}: {exc}", cause=exc
        ) from exc
    except OSError as exc:
        raise configuration_error(
            "config_file", f"cannot read {config_file}: {exc}", cause=exc
        ) from exc

    sections: dict[str, dict[str, Any]] = {}
    for section in _SECTIONS:
        values = data.get(section, {})
        if not isinstance(values, dict):
            raise configuration_error(section, f"[{section}] section must be a table")
        sections[section] = values
    return sections


def _apply_env(raw: dict[str, dict[str, Any]], env: Mapping[str, str]) -> None:
    for suffix, (section, key, parser) in _ENV_MAPPINGS.items():
        var = ENV_PREFIX + suffix
        if var not in env:
            continue
        try:
            raw[section][key] = parser(env[var])
        except ValueError as exc:
            raise configuration_error(var, str(exc), cause=exc) from exc


def _build_section(section: str, values: dict[str, Any]) -> Any:
    """Coerce known keys to the field types; unknown keys are ignored."""
    cls = _SECTIONS[section]
    defaults = cls()
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if f.name not in values:
            continue
        value = values[f.name]
        default = getattr(defaults, f.name)
        setting = f"{section}.{f.name}"
        try:
            kwargs[f.name] = _coerce(value, default)
        except (TypeError, ValueError) as exc:
            raise configuration_error(setting, f"invalid value {value!r}: {exc}") from exc
    return cls(**kwargs)


def _coerce(value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return _parse_bool(value)
        msg = "expected a boolean"
        raise TypeError(msg)
    if isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            msg = "expected an integer"
            raise TypeError(msg)
        return int(value)
    if isinstance(default, float):
        if isinstance(value, bool):
            msg = "expected a number"
            raise TypeError(msg)
        return float(value)
    if isinstance(default, Path):
        return Path(value)
    return str(value)


def validate_config(config: AppConfig) -> None:
    """Validate cross-field constraints.

    Raises:
        DesignSystemError: CONFIGURATION naming the first invalid setting.
    """
    server = config.server
    if not server.name.strip():
        raise configuration_error("server.name", "must be a non-empty string")
    if not server.version.strip():
        raise configuration_error("server.version", "must be a non-empty string")
    if not 1 <= server.port <= 65535:
        raise configuration_error("server.port", f"must be between 1 and 65535, got {server.port}")
    if server.log_level.lower() not in LOG_LEVELS:
        raise configuration_error(
            "server.log_level",
            f"must be one of {', '.join(LOG_LEVELS)}, got {server.log_level!r}",
        )

    data = config.data
    if not str(data.data_path).strip():
        raise configuration_error("data.data_path", "must be a non-empty path")
    if data.cache_timeout < 0:
        raise configuration_error("data.cache_timeout", "must not be negative")
    if data.reload_debounce < 0:
        raise configuration_error("data.reload_debounce", "must not be negative")

    perf = config.performance
    for name in ("failure_threshold", "half_open_max_calls"):
        if getattr(perf, name) < 1:
            raise configuration_error(f"performance.{name}", "must be a positive integer")
    for name in ("request_timeout", "recovery_timeout", "monitoring_period"):
        if getattr(perf, name) <= 0:
            raise configuration_error(f"performance.{name}", "must be a positive duration")
