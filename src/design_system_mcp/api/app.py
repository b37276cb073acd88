"""FastAPI application factory with lifespan dependency management."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from ..config import AppConfig, load_config
from ..context import open_context
from .middleware.error_handler import register_error_handlers
from .routes import register_routes

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "DESIGN_SYSTEM_CONFIG"


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Application configuration. When omitted (uvicorn factory
            mode) it is loaded from DESIGN_SYSTEM_CONFIG and the environment.

    Returns:
        A configured FastAPI application whose lifespan loads the data
        and always tears it down.
    """
    if config is None:
        config = load_config(os.environ.get(CONFIG_PATH_ENV_VAR))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        async with open_context(config) as context:
            app.state.context = context
            try:
                yield
            finally:
                app.state.context = None

    app = FastAPI(
        title=config.server.name,
        version=config.server.version,
        docs_url="/docs",
        lifespan=lifespan,
    )
    register_error_handlers(app)
    register_routes(app)
    return app
