"""Data reload endpoint."""

from typing import Any

from fastapi import APIRouter, Depends, Response

from ...context import ServerContext
from ..dependencies import get_context

router = APIRouter()


@router.post("/reload")
async def reload_data(
    response: Response, context: ServerContext = Depends(get_context)
) -> dict[str, Any]:
    """Reload the data directory now.

    Returns 200 with record counts on success, 422 with the collected
    errors when the files are invalid (the previous data stays active).
    """
    result = await context.data_manager.load_data()
    if not result.success or result.data is None:
        response.status_code = 422
        return {"success": False, "errors": result.errors}
    return {
        "success": True,
        "counts": result.data.counts(),
        "last_updated": result.data.last_updated.isoformat(),
    }
