"""Circuit breaker registry for managing all circuit breaker instances.

One registry is constructed at process start and passed to every
collaborator that needs a breaker. It guarantees exactly one breaker
per resource name.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..circuit_breaker_config import CircuitBreakerConfig, CircuitState
from .breaker import CircuitBreaker, CircuitBreakerStats, Clock

logger = logging.getLogger(__name__)


class CircuitBreakerRegistry:
    """Central registry for all circuit breakers.

    Usage:
        registry = CircuitBreakerRegistry()
        breaker = registry.get_circuit_breaker(CircuitBreakerConfig(name="guidelines"))

        # Same instance on every later lookup, whatever config is passed
        assert registry.get_circuit_breaker(CircuitBreakerConfig(name="guidelines")) is breaker

    Lookups never await, so registration is atomic on a single event loop.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        """Initialize an empty registry.

        Args:
            clock: Monotonic time source handed to every breaker created here.
        """
        self._clock = clock
        self._breakers: dict[str, CircuitBreaker] = {}

    def get_circuit_breaker(self, config: CircuitBreakerConfig) -> CircuitBreaker:
        """Get or create the breaker for ``config.name``.

        The rest of ``config`` is ignored once a name has been registered.

        Args:
            config: Configuration used only on first registration.

        Returns:
            The breaker registered under config.name.
        """
        breaker = self._breakers.get(config.name)
        if breaker is not None:
            if breaker.config != config:
                logger.debug(
                    "Circuit breaker '%s' already registered; ignoring new config",
                    config.name,
                )
            return breaker

        breaker = CircuitBreaker(config, clock=self._clock)
        breaker.events.subscribe("state_change", self._make_state_logger(config.name))
        self._breakers[config.name] = breaker
        return breaker

    def get(self, name: str) -> CircuitBreaker | None:
        """Return the breaker registered under name, if any."""
        return self._breakers.get(name)

    def names(self) -> list[str]:
        """Return registered names in registration order."""
        return list(self._breakers)

    def get_all_stats(self) -> dict[str, CircuitBreakerStats]:
        """Return stats for every registered breaker."""
        return {name: breaker.get_stats() for name, breaker in self._breakers.items()}

    def get_open_circuits(self) -> list[CircuitBreaker]:
        """Return breakers currently OPEN or HALF_OPEN."""
        return [b for b in self._breakers.values() if b.state is not CircuitState.CLOSED]

    def reset_all(self) -> int:
        """Reset every breaker.

        Returns:
            Number of breakers that were not CLOSED before the reset.
        """
        reset_count = 0
        for breaker in self._breakers.values():
            if breaker.state is not CircuitState.CLOSED:
                reset_count += 1
            breaker.reset()
        logger.info(
            "Reset %d circuit breakers (%d were tripped)", len(self._breakers), reset_count
        )
        return reset_count

    def __contains__(self, name: object) -> bool:
        return name in self._breakers

    def __len__(self) -> int:
        return len(self._breakers)

    @staticmethod
    def _make_state_logger(
        name: str,
    ) -> Callable[[CircuitState, CircuitState, CircuitBreakerStats], None]:
        def on_state_change(
            from_state: CircuitState, to_state: CircuitState, stats: CircuitBreakerStats
        ) -> None:
            logger.info(
                "Circuit breaker state change: %s %s -> %s (failures=%d)",
                name,
                from_state.value,
                to_state.value,
                stats.failure_count,
            )

        return on_state_change
