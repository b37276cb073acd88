"""Request-scoped access to the server context."""

from __future__ import annotations

from fastapi import Request

from ..context import ServerContext


def get_context(request: Request) -> ServerContext:
    """Return the ServerContext installed by the app lifespan.

    Raises:
        RuntimeError: If the lifespan has not run.
    """
    context: ServerContext | None = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Server context not initialized")
    return context
