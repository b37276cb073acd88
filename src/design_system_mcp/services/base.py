"""Shared plumbing for the query services.

Each service reads the current snapshot through its own circuit breaker
and runs every public method through run_guarded, so failures are logged
and normalized the same way everywhere.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, ClassVar, Sequence, TypeVar

from ..circuit_breaker import CircuitBreaker, CircuitBreakerRegistry
from ..config import AppConfig
from ..data_manager import DataManager
from ..errors import DesignSystemError, data_error, invalid_query, not_found, run_guarded
from ..models import CacheSnapshot

T = TypeVar("T")

MAX_NAME_SUGGESTIONS = 10


class QueryService:
    """Base class for services answering queries from the cached snapshot.

    Subclasses set ``service_name`` (used in logs and error context) and
    ``breaker_name`` (the registry key of the breaker guarding data access).

    Only the snapshot fetch runs inside the breaker. Argument checks and
    lookup misses happen outside it, so bad queries never trip the circuit.
    """

    service_name: ClassVar[str] = "QueryService"
    breaker_name: ClassVar[str] = "query"

    def __init__(
        self,
        data_manager: DataManager,
        registry: CircuitBreakerRegistry,
        config: AppConfig,
    ) -> None:
        self._data_manager = data_manager
        self._breaker = registry.get_circuit_breaker(config.breaker_config(self.breaker_name))

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    async def _guarded(self, method: str, body: Callable[[], Awaitable[T]]) -> T:
        return await run_guarded(self.service_name, method, body)

    async def _snapshot(self, method: str, **context: Any) -> CacheSnapshot:
        """Return the current snapshot, read under breaker protection."""

        async def fetch() -> CacheSnapshot:
            snapshot = self._data_manager.get_cached_data()
            if snapshot is None:
                raise data_error(
                    "No design system data available",
                    suggestions=[
                        "Check that the data directory contains valid files",
                        "Reload the data and try again",
                    ],
                    context={"service": self.service_name},
                )
            return snapshot

        ctx = {"service": self.service_name, "method": method, **context}
        return await self._breaker.execute(fetch, ctx)


def require_text(value: str | None, what: str) -> str:
    """Return value stripped, or raise INVALID_QUERY when it is empty."""
    if not isinstance(value, str) or not value.strip():
        raise invalid_query(f"{what} must be a non-empty string")
    return value.strip()


def contains(haystack: str | None, needle: str) -> bool:
    """Case-insensitive substring test; needle must already be lowercase."""
    return haystack is not None and needle in haystack.lower()


def missing(
    resource: str, identifier: str, available: Sequence[str], search_tool: str
) -> DesignSystemError:
    """Build the NOT_FOUND error listing up to ten available names."""
    noun = resource.lower()
    shown = ", ".join(available[:MAX_NAME_SUGGESTIONS])
    if len(available) > MAX_NAME_SUGGESTIONS:
        shown += "..."
    suggestions = [
        f"Available {noun}s: {shown}" if shown else f"No {noun}s are loaded",
        f"Check {noun} spelling",
        f"Use {search_tool} to find similar {noun}s",
    ]
    return not_found(resource, identifier, suggestions)
