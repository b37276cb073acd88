"""Design token endpoints."""

from typing import Any, Literal

from fastapi import APIRouter, Depends, Query

from ...context import ServerContext
from ..dependencies import get_context

router = APIRouter()


@router.get("")
async def list_tokens(
    category: Literal["color", "typography", "spacing", "elevation", "motion"] | None = None,
    deprecated: bool | None = None,
    q: str | None = Query(default=None, description="Substring search"),
    context: ServerContext = Depends(get_context),
) -> dict[str, Any]:
    """List tokens, or search them when ``q`` is given."""
    if q is not None:
        tokens = await context.tokens.search_tokens(q)
    else:
        tokens = await context.tokens.get_tokens(category=category, deprecated=deprecated)
    return {"tokens": [t.to_json_dict() for t in tokens], "total": len(tokens)}


@router.get("/categories")
async def list_token_categories(context: ServerContext = Depends(get_context)) -> dict[str, Any]:
    return {"categories": await context.tokens.get_categories()}


@router.get("/{name}")
async def get_token(name: str, context: ServerContext = Depends(get_context)) -> dict[str, Any]:
    token = await context.tokens.get_token(name)
    return token.to_json_dict()
