"""Generation endpoints.

- POST /api/generate/video: prompt policy + channel routed video generation
- POST /api/generate/character-card: streamed character card extraction (SSE)
"""

import json
import uuid
from collections.abc import AsyncIterator
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from app.core.container import get_character_card_streamer, get_video_pipeline
from app.core.exceptions import SoraStudioError
from app.core.logging import get_logger
from app.services.pipeline.video_generation import VideoGenerationPipeline
from app.services.video.base import SoraGenerateRequest
from app.services.video.character_card import CharacterCardStreamer

logger = get_logger(__name__)

router = APIRouter(prefix="/generate", tags=["generate"])

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


class CharacterCardRequest(BaseModel):
    """Character card upload.

    Attributes:
        video_base64: Base64 encoded source video (MP4)
        first_frame_base64: First frame image, echoed back as avatar
    """

    model_config = ConfigDict(populate_by_name=True)

    video_base64: str = Field(alias="videoBase64", min_length=1)
    first_frame_base64: str = Field(default="", alias="firstFrameBase64")


def sse_frame(event: str, data: dict[str, Any]) -> str:
    """Format one SSE frame carrying an ``{event, data}`` object."""
    return f"data: {json.dumps({'event': event, 'data': data}, ensure_ascii=False)}\n\n"


SSE_DONE = "data: [DONE]\n\n"


@router.post("/video")
async def generate_video(
    request: SoraGenerateRequest,
    pipeline: VideoGenerationPipeline = Depends(get_video_pipeline),
) -> dict[str, Any]:
    """Generate a video.

    Returns:
        Result envelope ``{type, url, cost, channelId, ...}`` and prompt details
    """
    outcome = await pipeline.run(request)
    return {
        "success": True,
        "data": outcome.result.model_dump(by_alias=True, exclude_none=True),
        "prompt": outcome.prompt.to_dict(),
    }


async def character_card_events(
    streamer: CharacterCardStreamer, body: CharacterCardRequest
) -> AsyncIterator[str]:
    """Re-emit streamer events as SSE frames, ending with [DONE]."""
    card_id = uuid.uuid4().hex
    yield sse_frame("started", {"id": card_id})

    try:
        async for event in streamer.stream(body.video_base64):
            if event.event == "completed":
                yield sse_frame(
                    "completed",
                    {
                        "id": card_id,
                        "characterName": event.data["characterName"],
                        "avatarUrl": body.first_frame_base64,
                    },
                )
            else:
                yield sse_frame(event.event, event.data)
    except SoraStudioError as e:
        logger.error("Character card failed", card_id=card_id, **e.to_dict())
        yield sse_frame("error", {"message": str(e)})
    except Exception as e:
        logger.error("Character card failed", card_id=card_id, error=str(e), exc_info=True)
        yield sse_frame("error", {"message": str(e) or "Generation failed"})

    yield SSE_DONE


@router.post("/character-card")
async def generate_character_card(
    body: CharacterCardRequest,
    streamer: CharacterCardStreamer = Depends(get_character_card_streamer),
) -> StreamingResponse:
    """Extract a character card from a video, streaming progress as SSE."""
    return StreamingResponse(
        character_card_events(streamer, body),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
