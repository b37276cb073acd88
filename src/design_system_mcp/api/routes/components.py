"""Component endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from ...context import ServerContext
from ..dependencies import get_context

router = APIRouter()


@router.get("")
async def list_components(
    category: str | None = None,
    name: str | None = Query(default=None, description="Name fragment"),
    q: str | None = Query(default=None, description="Substring search"),
    context: ServerContext = Depends(get_context),
) -> dict[str, Any]:
    """List components, or search them when ``q`` is given."""
    if q is not None:
        components = await context.components.search_components(q)
    else:
        components = await context.components.get_components(category=category, name=name)
    return {"components": [c.to_json_dict() for c in components], "total": len(components)}


@router.get("/categories")
async def list_component_categories(
    context: ServerContext = Depends(get_context),
) -> dict[str, Any]:
    return {"categories": await context.components.get_categories()}


@router.get("/{name}")
async def get_component(
    name: str, context: ServerContext = Depends(get_context)
) -> dict[str, Any]:
    component = await context.components.get_component(name)
    return component.to_json_dict()


@router.get("/{name}/props")
async def get_component_props(
    name: str,
    required: bool | None = None,
    context: ServerContext = Depends(get_context),
) -> dict[str, Any]:
    """List a component's props, optionally only required or optional ones."""
    props = await context.components.get_props(name, required=required)
    return {"props": [p.to_json_dict() for p in props], "total": len(props)}


@router.get("/{name}/examples")
async def get_component_examples(
    name: str, context: ServerContext = Depends(get_context)
) -> dict[str, Any]:
    examples = await context.components.get_examples(name)
    return {"examples": [e.to_json_dict() for e in examples], "total": len(examples)}
