"""Query service for UI components."""

from __future__ import annotations

from ..models import CacheSnapshot, Component, ComponentExample, ComponentProp
from .base import QueryService, contains, missing, require_text


class ComponentService(QueryService):
    """List, look up and search components."""

    service_name = "ComponentService"
    breaker_name = "components"

    async def get_components(
        self, category: str | None = None, name: str | None = None
    ) -> list[Component]:
        """Return components matching every given filter (all case-insensitive).

        Args:
            category: Exact component category.
            name: Substring of the component name.
        """

        async def body() -> list[Component]:
            wanted = category.lower() if category else None
            fragment = name.lower() if name else None
            snapshot = await self._snapshot("get_components", category=category, name=name)
            return [
                c
                for c in snapshot.components
                if (wanted is None or c.category.lower() == wanted)
                and (fragment is None or fragment in c.name.lower())
            ]

        return await self._guarded("get_components", body)

    async def get_component(self, name: str) -> Component:
        """Return the component named ``name`` (case-insensitive).

        Raises:
            DesignSystemError: INVALID_QUERY for an empty name, NOT_FOUND
                with the available names when no component matches.
        """

        async def body() -> Component:
            wanted = require_text(name, "Component name")
            snapshot = await self._snapshot("get_component", name=wanted)
            return _find_component(snapshot, wanted)

        return await self._guarded("get_component", body)

    async def get_props(self, name: str, required: bool | None = None) -> list[ComponentProp]:
        """Return a component's props, optionally only required or optional ones."""

        async def body() -> list[ComponentProp]:
            wanted = require_text(name, "Component name")
            snapshot = await self._snapshot("get_props", name=wanted)
            props = _find_component(snapshot, wanted).props
            return [p for p in props if required is None or p.required == required]

        return await self._guarded("get_props", body)

    async def get_examples(self, name: str) -> list[ComponentExample]:
        """Return a component's code examples."""

        async def body() -> list[ComponentExample]:
            wanted = require_text(name, "Component name")
            snapshot = await self._snapshot("get_examples", name=wanted)
            return list(_find_component(snapshot, wanted).examples)

        return await self._guarded("get_examples", body)

    async def search_components(self, query: str) -> list[Component]:
        """Substring search over name, description, category and prop names."""

        async def body() -> list[Component]:
            term = require_text(query, "Search query").lower()
            snapshot = await self._snapshot("search_components", query=term)
            return [
                c
                for c in snapshot.components
                if contains(c.name, term)
                or contains(c.description, term)
                or contains(c.category, term)
                or any(contains(p.name, term) for p in c.props)
            ]

        return await self._guarded("search_components", body)

    async def get_categories(self) -> list[str]:
        async def body() -> list[str]:
            snapshot = await self._snapshot("get_categories")
            return sorted({c.category for c in snapshot.components})

        return await self._guarded("get_categories", body)


def _find_component(snapshot: CacheSnapshot, name: str) -> Component:
    for component in snapshot.components:
        if component.name.lower() == name.lower():
            return component
    raise missing(
        "Component", name, [c.name for c in snapshot.components], "search_components"
    )
