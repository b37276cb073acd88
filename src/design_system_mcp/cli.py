"""CLI for the design system server.

Provides commands to validate a data directory, watch it for changes,
and serve the HTTP query API.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import sys
from pathlib import Path

import click

from .config import AppConfig, load_config
from .data_loader import DataLoader
from .data_manager import DataManager
from .errors import DesignSystemError
from .models import CacheSnapshot

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Design System MCP - query server over design tokens, components and guidelines."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _resolve_config(
    ctx: click.Context, config_path: str | None, data_path: str | None = None
) -> AppConfig:
    """Load configuration, apply CLI overrides, and set the log level.

    Exits with status 1 on a configuration error.
    """
    try:
        config = load_config(config_path)
    except DesignSystemError as exc:
        click.echo(f"Error: {exc.user_message()}", err=True)
        sys.exit(1)

    if data_path is not None:
        config = dataclasses.replace(
            config, data=dataclasses.replace(config.data, data_path=Path(data_path))
        )
    if not (ctx.obj or {}).get("verbose"):
        logging.getLogger().setLevel(config.server.log_level.upper())
    return config


@cli.command()
@click.option("--data-path", "-d", type=click.Path(), default=None, help="Data directory")
@click.option("--config", "config_path", type=click.Path(), default=None, help="TOML config file")
@click.pass_context
def validate(ctx: click.Context, data_path: str | None, config_path: str | None) -> None:
    """Validate the data files without starting a server."""
    config = _resolve_config(ctx, config_path, data_path)
    try:
        outcome = asyncio.run(DataLoader(config.data.data_path).load())
    except DesignSystemError as exc:
        click.echo(f"Error: {exc.user_message()}", err=True)
        sys.exit(1)

    click.echo(f"Data directory: {config.data.data_path}")
    click.echo(f"  Design tokens: {len(outcome.design_tokens)}")
    click.echo(f"  Components:    {len(outcome.components)}")
    click.echo(f"  Guidelines:    {len(outcome.guidelines)}")

    if not outcome.ok:
        click.echo(f"\n{len(outcome.errors)} error(s):", err=True)
        for message in outcome.errors:
            click.echo(f"  - {message}", err=True)
        sys.exit(1)

    click.echo("\nAll data files are valid.")


@cli.command()
@click.option("--data-path", "-d", type=click.Path(), default=None, help="Data directory")
@click.option("--config", "config_path", type=click.Path(), default=None, help="TOML config file")
@click.pass_context
def watch(ctx: click.Context, data_path: str | None, config_path: str | None) -> None:
    """Load the data and reload it on every change until interrupted."""
    config = _resolve_config(ctx, config_path, data_path)
    settings = dataclasses.replace(config.data, enable_file_watching=True)
    try:
        asyncio.run(_watch_async(DataManager(settings)))
    except KeyboardInterrupt:
        click.echo("\nStopped watching.")
    except DesignSystemError as exc:
        click.echo(f"Error: {exc.user_message()}", err=True)
        sys.exit(1)


async def _watch_async(manager: DataManager) -> None:
    """Async implementation of watch command."""

    def on_loaded(snapshot: CacheSnapshot) -> None:
        counts = snapshot.counts()
        click.echo(
            f"[{snapshot.last_updated:%H:%M:%S}] Loaded {counts['design_tokens']} tokens, "
            f"{counts['components']} components, {counts['guidelines']} guidelines"
        )

    def on_failed(errors: list[str]) -> None:
        click.echo(f"Load failed with {len(errors)} error(s); keeping previous data", err=True)
        for message in errors:
            click.echo(f"  - {message}", err=True)

    manager.events.subscribe("data_loaded", on_loaded)
    manager.events.subscribe("data_load_failed", on_failed)
    try:
        await manager.initialize()
        click.echo(f"Watching {manager.settings.data_path} (Ctrl+C to stop)")
        await asyncio.Event().wait()
    finally:
        await manager.aclose()


@cli.command()
@click.option("--host", default=None, help="Host to bind to (default: from config)")
@click.option("--port", default=None, type=int, help="Port to bind to (default: from config)")
@click.option("--config", "config_path", type=click.Path(), default=None, help="TOML config file")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, config_path: str | None) -> None:
    """Start the HTTP query API server."""
    config = _resolve_config(ctx, config_path)
    run_server(
        host=host or config.server.host,
        port=port or config.server.port,
        log_level=config.server.log_level.lower(),
        config_path=config_path,
    )


def run_server(host: str, port: int, log_level: str, config_path: str | None) -> None:
    """Run the API server.

    Delegates to the real API server implementation in api.serve.
    """
    from .api.serve import run_server as _run_api_server

    _run_api_server(host=host, port=port, log_level=log_level, config_path=config_path)


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
