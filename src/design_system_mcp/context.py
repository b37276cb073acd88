"""Process-wide wiring of the server's collaborators.

Builds config -> breaker registry -> DataManager -> query services once,
and hands the same objects to every adapter (HTTP, MCP, CLI).
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from .circuit_breaker import CircuitBreakerRegistry
from .config import AppConfig
from .data_manager import DataManager
from .models import DataLoadResult
from .services import ComponentService, DesignTokenService, GuidelinesService

logger = logging.getLogger(__name__)


@dataclass
class ServerContext:
    """Everything an adapter needs to answer requests."""

    config: AppConfig
    registry: CircuitBreakerRegistry
    data_manager: DataManager
    tokens: DesignTokenService
    components: ComponentService
    guidelines: GuidelinesService

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        registry: CircuitBreakerRegistry | None = None,
        data_manager: DataManager | None = None,
    ) -> ServerContext:
        """Construct collaborators without touching the filesystem."""
        registry = registry or CircuitBreakerRegistry()
        data_manager = data_manager or DataManager(config.data)
        return cls(
            config=config,
            registry=registry,
            data_manager=data_manager,
            tokens=DesignTokenService(data_manager, registry, config),
            components=ComponentService(data_manager, registry, config),
            guidelines=GuidelinesService(data_manager, registry, config),
        )

    async def start(self) -> DataLoadResult:
        """Load data and start watching.

        Raises:
            DesignSystemError: CONFIGURATION if the data directory is missing.
        """
        return await self.data_manager.initialize()

    def close(self) -> None:
        self.data_manager.destroy()

    async def aclose(self) -> None:
        """Like close(), but stops the file watcher off the event loop."""
        await self.data_manager.aclose()

    def health(self) -> dict[str, Any]:
        """Summarize data and breaker health.

        Status is "unhealthy" with no data, "degraded" when the cache is
        stale or any circuit is not CLOSED, otherwise "healthy".
        """
        data = self.data_manager.stats()
        open_circuits = [b.name for b in self.registry.get_open_circuits()]
        if not data["has_data"]:
            status = "unhealthy"
        elif open_circuits or not data["cache_valid"]:
            status = "degraded"
        else:
            status = "healthy"
        return {
            "status": status,
            "name": self.config.server.name,
            "version": self.config.server.version,
            "data": data,
            "circuits": {
                name: stats.state.value for name, stats in self.registry.get_all_stats().items()
            },
            "open_circuits": open_circuits,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


@asynccontextmanager
async def open_context(config: AppConfig) -> AsyncIterator[ServerContext]:
    """Build and start a ServerContext, always closing it on exit."""
    context = ServerContext.build(config)
    try:
        result = await context.start()
        if not result.success:
            logger.warning("Starting without data: %s", "; ".join(result.errors))
        yield context
    finally:
        await context.aclose()
