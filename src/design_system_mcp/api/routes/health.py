"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Response

from ...context import ServerContext
from ..dependencies import get_context

router = APIRouter()


@router.get("")
def get_health(response: Response, context: ServerContext = Depends(get_context)) -> dict[str, Any]:
    """Return data and circuit breaker health.

    Status code is 200 for healthy/degraded, 503 when no data is loaded.
    """
    health = context.health()
    response.status_code = 503 if health["status"] == "unhealthy" else 200
    return health


@router.get("/live")
def get_liveness() -> dict[str, str]:
    """Liveness check; succeeds whenever the process is serving."""
    return {"status": "alive"}
