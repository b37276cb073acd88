"""Circuit breaker configuration for the design system server.

Defines the breaker states and the immutable per-resource configuration
that the CircuitBreakerRegistry uses to create breakers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import configuration_error


class CircuitState(Enum):
    """Possible states for a circuit breaker."""

    CLOSED = "CLOSED"  # Normal operation - calls admitted
    OPEN = "OPEN"  # Circuit tripped - calls rejected
    HALF_OPEN = "HALF_OPEN"  # Testing recovery - limited trial calls


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuration for one named circuit breaker.

    All durations are in seconds.

    Attributes:
        name: Resource name; the registry key.
        failure_threshold: Recent failures before opening the circuit.
        recovery_timeout: Time spent OPEN before a trial call is admitted.
        request_timeout: Upper bound on each admitted call.
        monitoring_period: Failures older than this do not count.
        half_open_max_calls: Trial calls admitted per HALF_OPEN episode.
    """

    name: str
    failure_threshold: int = 5
    recovery_timeout: float = 30.0
    request_timeout: float = 5.0
    monitoring_period: float = 60.0
    half_open_max_calls: int = 3

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise configuration_error("circuit_breaker.name", "must not be empty")
        for field_name in ("failure_threshold", "half_open_max_calls"):
            value = getattr(self, field_name)
            if not isinstance(value, int) or value < 1:
                raise configuration_error(
                    f"circuit_breaker.{field_name}",
                    f"must be a positive integer, got {value!r}",
                )
        for field_name in ("recovery_timeout", "request_timeout", "monitoring_period"):
            value = getattr(self, field_name)
            if value <= 0:
                raise configuration_error(
                    f"circuit_breaker.{field_name}",
                    f"must be a positive duration, got {value!r}",
                )
