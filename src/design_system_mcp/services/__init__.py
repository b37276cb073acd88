"""Query services answering from the cached design system snapshot."""

from .base import QueryService
from .components import ComponentService
from .design_tokens import DesignTokenService
from .guidelines import GuidelinesService

__all__ = [
    "QueryService",
    "ComponentService",
    "DesignTokenService",
    "GuidelinesService",
]
