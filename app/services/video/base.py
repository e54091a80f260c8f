"""Video generation request and result types."""

import inspect
from collections.abc import Awaitable, Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Receives generation progress in percent (0-100)
ProgressCallback = Callable[[int], Awaitable[None] | None]

GENERATION_TYPE_VIDEO = "sora-video"


async def report_progress(callback: ProgressCallback | None, progress: int) -> None:
    """Invoke a sync or async progress callback."""
    if callback is None:
        return
    result = callback(progress)
    if inspect.isawaitable(result):
        await result


class MediaFile(BaseModel):
    """Attached file, base64 encoded.

    Attributes:
        mime_type: MIME type (e.g., "image/png")
        data: Base64 payload without data URL prefix
    """

    model_config = ConfigDict(populate_by_name=True)

    mime_type: str = Field(alias="mimeType")
    data: str

    @property
    def is_image(self) -> bool:
        """Whether the file is an image."""
        return self.mime_type.startswith("image/")

    def to_data_url(self) -> str:
        """Encode the file as an inline data URL."""
        return f"data:{self.mime_type};base64,{self.data}"


class SoraGenerateRequest(BaseModel):
    """User-facing video generation request.

    Attributes:
        prompt: Generation prompt
        model: Legacy model name (e.g., "sora2-portrait-15s")
        model_id: Configured video model id; selects the channel route
        aspect_ratio: Aspect ratio token (e.g., "landscape")
        duration: Duration token (e.g., "10s")
        files: Attached reference files
        style_id: Optional style id (native Sora only)
        remix_target_id: Optional remix source id (native Sora only)
    """

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    prompt: str = ""
    model: str = "sora2-landscape-10s"
    model_id: str | None = Field(default=None, alias="modelId")
    aspect_ratio: str | None = Field(default=None, alias="aspectRatio")
    duration: str | None = None
    files: list[MediaFile] = Field(default_factory=list)
    style_id: str | None = None
    remix_target_id: str | None = None

    @property
    def first_image(self) -> MediaFile | None:
        """First attached image, if any."""
        return next((f for f in self.files if f.is_image), None)


class GenerateResult(BaseModel):
    """Generation result envelope.

    Serialized with ``by_alias=True`` it becomes the API response shape
    ``{type, url, cost, channelId, ...}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["sora-video"] = GENERATION_TYPE_VIDEO
    url: str
    cost: int
    channel_id: str | None = Field(default=None, alias="channelId")
    video_id: str | None = Field(default=None, alias="videoId")
    permalink: str | None = None
    revised_prompt: str | None = None


class SoraVideoRequest(BaseModel):
    """Native Sora job request.

    Attributes:
        prompt: Generation prompt
        model: API model ("sora-2" or "sora-2-pro")
        orientation: "landscape" or "portrait"
        seconds: Duration bucket ("10", "15" or "25")
        size: Pixel size ("1280x720" or "720x1280")
        input_image: Base64 reference image
        style_id: Optional style id
        remix_target_id: Optional remix source id
    """

    prompt: str
    model: Literal["sora-2", "sora-2-pro"] = "sora-2"
    orientation: Literal["landscape", "portrait"] = "landscape"
    seconds: Literal["10", "15", "25"] = "10"
    size: str = "1280x720"
    input_image: str | None = None
    style_id: str | None = None
    remix_target_id: str | None = None


class SoraVideoOutput(BaseModel):
    """One output of a finished native Sora job."""

    url: str
    permalink: str | None = None
    revised_prompt: str | None = None


class SoraVideoResult(BaseModel):
    """Finished native Sora job.

    Attributes:
        id: Job id
        status: Final job status
        data: Outputs (the first is used)
        channel_id: Channel that served the job, when known
    """

    id: str
    status: str = "completed"
    data: list[SoraVideoOutput] = Field(default_factory=list)
    channel_id: str | None = None


__all__ = [
    "GENERATION_TYPE_VIDEO",
    "ProgressCallback",
    "report_progress",
    "MediaFile",
    "SoraGenerateRequest",
    "GenerateResult",
    "SoraVideoRequest",
    "SoraVideoOutput",
    "SoraVideoResult",
]
