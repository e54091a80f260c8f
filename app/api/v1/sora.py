"""Sora utility endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.core.container import get_sora_backend_client
from app.core.exceptions import ExternalAPIError
from app.services.video.unwatermark import SoraBackendClient

router = APIRouter(prefix="/sora", tags=["sora"])


class UnwatermarkRequest(BaseModel):
    """Share link of a finished Sora video."""

    permalink: str = ""


@router.post("/unwatermark", response_model=None)
async def unwatermark(
    body: UnwatermarkRequest,
    client: SoraBackendClient = Depends(get_sora_backend_client),
) -> dict[str, Any] | JSONResponse:
    """Get an unwatermarked download link for a Sora share link."""
    permalink = body.permalink.strip()
    if not permalink:
        return JSONResponse(
            status_code=400, content={"success": False, "error": "permalink is required"}
        )

    try:
        link = await client.get_download_link(permalink)
    except ExternalAPIError as e:
        # Backend rejections keep the backend's own status
        status_code = e.status_code if e.status_code and e.status_code >= 400 else 502
        return JSONResponse(status_code=status_code, content={"success": False, "error": str(e)})

    return {"success": True, "data": {"download_link": link}}
