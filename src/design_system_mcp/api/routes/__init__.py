"""Route registration for FastAPI app.

Wires all route modules (health, circuits, data, tokens, components,
guidelines) to the FastAPI app with their URL prefixes.
"""

from __future__ import annotations

from fastapi import FastAPI

from . import circuits, components, data, guidelines, health, tokens


def register_routes(app: FastAPI) -> None:
    """Register all route modules to the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(circuits.router, prefix="/circuits", tags=["circuits"])
    app.include_router(data.router, prefix="/data", tags=["data"])
    app.include_router(tokens.router, prefix="/tokens", tags=["tokens"])
    app.include_router(components.router, prefix="/components", tags=["components"])
    app.include_router(guidelines.router, prefix="/guidelines", tags=["guidelines"])
