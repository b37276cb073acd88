"""Design System MCP server.

This package serves design tokens, components and guidelines from a
hot-reloaded in-memory snapshot, protected per service by circuit
breakers, over an HTTP API and in-process MCP tools.
"""

from __future__ import annotations

from .circuit_breaker import CircuitBreaker, CircuitBreakerRegistry, CircuitBreakerStats
from .circuit_breaker_config import CircuitBreakerConfig, CircuitState
from .config import AppConfig, DataSettings, PerformanceSettings, ServerSettings, load_config
from .context import ServerContext, open_context
from .data_loader import DataLoader, LoadOutcome, validate_snapshot
from .data_manager import DataManager
from .errors import DesignSystemError, ErrorKind, normalize_error, run_guarded
from .events import EventChannel
from .models import CacheSnapshot, Component, DataLoadResult, DesignToken, Guideline
from .services import ComponentService, DesignTokenService, GuidelinesService

__all__ = [
    # Circuit breaker
    "CircuitBreaker",
    "CircuitBreakerConfig",
    "CircuitBreakerRegistry",
    "CircuitBreakerStats",
    "CircuitState",
    # Configuration
    "AppConfig",
    "DataSettings",
    "PerformanceSettings",
    "ServerSettings",
    "load_config",
    # Data
    "CacheSnapshot",
    "Component",
    "DataLoadResult",
    "DataLoader",
    "DataManager",
    "DesignToken",
    "Guideline",
    "LoadOutcome",
    "validate_snapshot",
    # Errors and events
    "DesignSystemError",
    "ErrorKind",
    "EventChannel",
    "normalize_error",
    "run_guarded",
    # Services
    "ComponentService",
    "DesignTokenService",
    "GuidelinesService",
    "ServerContext",
    "open_context",
]

__version__ = "1.0.0"
