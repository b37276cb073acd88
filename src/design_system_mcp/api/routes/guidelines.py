"""Guideline endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from ...context import ServerContext
from ..dependencies import get_context

router = APIRouter()


@router.get("")
async def list_guidelines(
    category: str | None = None,
    tag: str | None = None,
    component: str | None = None,
    q: str | None = Query(default=None, description="Substring search"),
    context: ServerContext = Depends(get_context),
) -> dict[str, Any]:
    """List guidelines, or search them when ``q`` is given."""
    if q is not None:
        guidelines = await context.guidelines.search_guidelines(q)
    else:
        guidelines = await context.guidelines.get_guidelines(
            category=category, tag=tag, component=component
        )
    return {"guidelines": [g.to_json_dict() for g in guidelines], "total": len(guidelines)}


@router.get("/categories")
async def list_guideline_categories(
    context: ServerContext = Depends(get_context),
) -> dict[str, Any]:
    return {"categories": await context.guidelines.get_categories()}


@router.get("/tags")
async def list_guideline_tags(context: ServerContext = Depends(get_context)) -> dict[str, Any]:
    return {"tags": await context.guidelines.get_tags()}


@router.get("/{guideline_id}")
async def get_guideline(
    guideline_id: str, context: ServerContext = Depends(get_context)
) -> dict[str, Any]:
    guideline = await context.guidelines.get_guideline(guideline_id)
    return guideline.to_json_dict()
