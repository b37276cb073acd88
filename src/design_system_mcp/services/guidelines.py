"""Query service for design guidelines."""

from __future__ import annotations

from ..models import Guideline
from .base import QueryService, contains, missing, require_text


class GuidelinesService(QueryService):
    """List, look up and search guidelines."""

    service_name = "GuidelinesService"
    breaker_name = "guidelines"

    async def get_guidelines(
        self,
        category: str | None = None,
        tag: str | None = None,
        component: str | None = None,
    ) -> list[Guideline]:
        """Return guidelines matching every given filter (all case-insensitive).

        Args:
            category: Guideline category.
            tag: A tag the guideline must carry.
            component: A component the guideline must reference.
        """

        async def body() -> list[Guideline]:
            snapshot = await self._snapshot(
                "get_guidelines", category=category, tag=tag, component=component
            )
            result = []
            for guideline in snapshot.guidelines:
                if category and guideline.category.lower() != category.lower():
                    continue
                if tag and tag.lower() not in (t.lower() for t in guideline.tags):
                    continue
                if component and component.lower() not in (
                    c.lower() for c in guideline.related_components
                ):
                    continue
                result.append(guideline)
            return result

        return await self._guarded("get_guidelines", body)

    async def get_guideline(self, guideline_id: str) -> Guideline:
        """Return the guideline with ``guideline_id`` (case-insensitive).

        Raises:
            DesignSystemError: INVALID_QUERY for an empty id, NOT_FOUND
                with the available ids when no guideline matches.
        """

        async def body() -> Guideline:
            wanted = require_text(guideline_id, "Guideline id")
            snapshot = await self._snapshot("get_guideline", id=wanted)
            for guideline in snapshot.guidelines:
                if guideline.id.lower() == wanted.lower():
                    return guideline
            raise missing(
                "Guideline", wanted, [g.id for g in snapshot.guidelines], "search_guidelines"
            )

        return await self._guarded("get_guideline", body)

    async def search_guidelines(self, query: str) -> list[Guideline]:
        """Substring search over title, content, category and tags."""

        async def body() -> list[Guideline]:
            term = require_text(query, "Search query").lower()
            snapshot = await self._snapshot("search_guidelines", query=term)
            return [
                g
                for g in snapshot.guidelines
                if contains(g.title, term)
                or contains(g.content, term)
                or contains(g.category, term)
                or any(contains(t, term) for t in g.tags)
            ]

        return await self._guarded("search_guidelines", body)

    async def get_categories(self) -> list[str]:
        async def body() -> list[str]:
            snapshot = await self._snapshot("get_categories")
            return sorted({g.category for g in snapshot.guidelines})

        return await self._guarded("get_categories", body)

    async def get_tags(self) -> list[str]:
        async def body() -> list[str]:
            snapshot = await self._snapshot("get_tags")
            return sorted({tag for g in snapshot.guidelines for tag in g.tags})

        return await self._guarded("get_tags", body)
