"""HTTP query API for the design system server."""

from .app import create_app

__all__ = ["create_app"]
