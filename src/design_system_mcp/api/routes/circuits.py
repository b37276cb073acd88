"""Circuit breaker endpoints.

Endpoints:
- GET /circuits - Stats for every registered breaker
- GET /circuits/{name} - Stats for one breaker
- POST /circuits/{name}/reset - Reset one breaker to CLOSED
"""

from typing import Any

from fastapi import APIRouter, Depends

from ...circuit_breaker import CircuitBreaker
from ...context import ServerContext
from ...errors import not_found
from ..dependencies import get_context

router = APIRouter()


def _lookup(context: ServerContext, name: str) -> CircuitBreaker:
    breaker = context.registry.get(name)
    if breaker is None:
        names = context.registry.names()
        raise not_found(
            "Circuit", name, [f"Registered circuits: {', '.join(names)}"] if names else None
        )
    return breaker


@router.get("")
async def get_circuits(context: ServerContext = Depends(get_context)) -> dict[str, Any]:
    """List every circuit with its stats."""
    circuits = [stats.to_dict() for stats in context.registry.get_all_stats().values()]
    return {"circuits": circuits, "total": len(circuits)}


@router.get("/{name}")
async def get_circuit(name: str, context: ServerContext = Depends(get_context)) -> dict[str, Any]:
    return _lookup(context, name).get_stats().to_dict()


@router.post("/{name}/reset")
async def reset_circuit(
    name: str, context: ServerContext = Depends(get_context)
) -> dict[str, Any]:
    """Reset a circuit to CLOSED and return its fresh stats."""
    breaker = _lookup(context, name)
    breaker.reset()
    return breaker.get_stats().to_dict()
