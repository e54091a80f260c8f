"""Admin endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core.container import get_remote_model_lister
from app.core.exceptions import ConfigError
from app.services.catalog.model_grouping import RemoteModelLister, group_models

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/image-channels/models", response_model=None)
async def list_image_channel_models(
    channel_id: str = Query(..., min_length=1),
    group: bool = Query(False),
    lister: RemoteModelLister = Depends(get_remote_model_lister),
) -> dict[str, Any] | JSONResponse:
    """List an image channel's remote models, optionally grouped for import."""
    try:
        models = await lister.list_models(channel_id)
    except ConfigError as e:
        return JSONResponse(status_code=400, content={"success": False, "error": str(e)})

    if not group:
        return {"success": True, "data": [m.model_dump() for m in models]}

    grouped, ungrouped = group_models(models)
    return {
        "success": True,
        "data": {
            "grouped": [g.model_dump(by_alias=True) for g in grouped],
            "ungrouped": [m.model_dump() for m in ungrouped],
        },
    }
