"""Query service for design tokens."""

from __future__ import annotations

from ..errors import invalid_query
from ..models import TOKEN_CATEGORIES, DesignToken
from .base import QueryService, contains, missing, require_text


class DesignTokenService(QueryService):
    """List, look up and search design tokens."""

    service_name = "DesignTokenService"
    breaker_name = "design-tokens"

    async def get_tokens(
        self,
        category: str | None = None,
        deprecated: bool | None = None,
        usage: list[str] | None = None,
    ) -> list[DesignToken]:
        """Return tokens matching every given filter.

        Args:
            category: Exact token category.
            deprecated: Only deprecated (True) or only active (False) tokens.
            usage: Each entry must be a substring of one of the token's usages.
        """

        async def body() -> list[DesignToken]:
            if category is not None and category not in TOKEN_CATEGORIES:
                raise invalid_query(
                    f'Unknown token category "{category}"',
                    suggestions=[f"Valid categories: {', '.join(TOKEN_CATEGORIES)}"],
                )
            wanted_usage = [u.lower() for u in usage or []]
            snapshot = await self._snapshot("get_tokens", category=category)

            result = []
            for token in snapshot.design_tokens:
                if category is not None and token.category != category:
                    continue
                if deprecated is not None and token.deprecated != deprecated:
                    continue
                if not all(any(contains(u, w) for u in token.usage) for w in wanted_usage):
                    continue
                result.append(token)
            return result

        return await self._guarded("get_tokens", body)

    async def get_token(self, name: str) -> DesignToken:
        """Return the token named ``name`` (case-insensitive).

        Raises:
            DesignSystemError: INVALID_QUERY for an empty name, NOT_FOUND
                with the available names when no token matches.
        """

        async def body() -> DesignToken:
            wanted = require_text(name, "Token name").lower()
            snapshot = await self._snapshot("get_token", name=wanted)
            for token in snapshot.design_tokens:
                if token.name.lower() == wanted:
                    return token
            raise missing(
                "Design token",
                name.strip(),
                [t.name for t in snapshot.design_tokens],
                "search_design_tokens",
            )

        return await self._guarded("get_token", body)

    async def search_tokens(self, query: str) -> list[DesignToken]:
        """Substring search over name, value, description, usage and aliases."""

        async def body() -> list[DesignToken]:
            term = require_text(query, "Search query").lower()
            snapshot = await self._snapshot("search_tokens", query=term)
            return [
                token
                for token in snapshot.design_tokens
                if contains(token.name, term)
                or contains(str(token.value), term)
                or contains(token.description, term)
                or any(contains(u, term) for u in token.usage)
                or any(contains(a, term) for a in token.aliases)
            ]

        return await self._guarded("search_tokens", body)

    async def get_categories(self) -> list[str]:
        """Return the sorted categories present in the data."""

        async def body() -> list[str]:
            snapshot = await self._snapshot("get_categories")
            return sorted({token.category for token in snapshot.design_tokens})

        return await self._guarded("get_categories", body)
