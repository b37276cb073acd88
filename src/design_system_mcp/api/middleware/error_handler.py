"""Error handlers mapping the error taxonomy onto HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ...errors import DesignSystemError, internal_error

logger = logging.getLogger(__name__)


async def _design_system_error_handler(
    request: Request, exc: DesignSystemError
) -> JSONResponse:
    """Return the error's own status code and serialized body."""
    headers = {}
    retry_after = exc.context.get("retry_after")
    if isinstance(retry_after, (int, float)) and retry_after > 0:
        headers["Retry-After"] = str(max(1, round(retry_after)))
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions.

    Returns:
        JSONResponse with 500 status and a sanitized INTERNAL_ERROR body.
    """
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    # Sanitized response - never leak internal error details
    error = internal_error("Internal server error")
    return JSONResponse(status_code=500, content=error.to_dict())


def register_error_handlers(app: FastAPI) -> None:
    """Register exception handlers for the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(DesignSystemError, _design_system_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
