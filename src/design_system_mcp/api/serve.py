"""Server runner for the design system HTTP API.

Provides a run_server utility that configures and starts uvicorn
with appropriate defaults.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Any, Iterator

import uvicorn

from .app import CONFIG_PATH_ENV_VAR


@contextmanager
def _temporary_env_var(name: str, value: str | None) -> Iterator[None]:
    """Temporarily set an environment variable, restoring original state on exit."""
    if value is None:
        yield
        return
    old_value = os.environ.get(name)
    os.environ[name] = value
    try:
        yield
    finally:
        if old_value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = old_value


def run_server(
    host: str = "127.0.0.1",
    port: int = 3000,
    log_level: str = "info",
    config_path: str | None = None,
    **kwargs: Any,
) -> None:
    """Run the design system API server.

    Args:
        host: The host to bind to.
        port: The port to bind to.
        log_level: The log level for uvicorn.
        config_path: Optional TOML config, passed to the app factory via
            DESIGN_SYSTEM_CONFIG.
        **kwargs: Additional keyword arguments to forward to uvicorn.run.
    """
    with _temporary_env_var(CONFIG_PATH_ENV_VAR, config_path):
        uvicorn.run(
            "design_system_mcp.api.app:create_app",
            factory=True,
            host=host,
            port=port,
            log_level=log_level,
            **kwargs,
        )
