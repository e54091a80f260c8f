"""Multi-channel video adapter.

Routes a generation request to the upstream API of its model's channel:

- ``flow2api``, ``grok2api``, ``openai-compatible``: one non-streaming
  ``/v1/chat/completions`` call; the video URL is parsed out of the reply
- ``sora``: the native job API, driven by a legacy model name built from
  the effective aspect ratio and duration

Requests without a model id go straight to the native job API using the
request's legacy model name.
"""

import json
from typing import Any, assert_never

from app.config import ChannelType, SiteConfig, VideoChannel, VideoModel
from app.core.config import Config
from app.core.config_loader import SiteConfigService
from app.core.exceptions import (
    ConfigError,
    ContentExtractionError,
    ExternalAPIError,
    ResourceDisabledError,
    ResourceNotFoundError,
)
from app.core.logging import get_logger
from app.infrastructure.http_client import HTTPClient
from app.services.video.base import (
    GenerateResult,
    ProgressCallback,
    SoraGenerateRequest,
    SoraVideoRequest,
    report_progress,
)
from app.services.video.model_mapping import (
    effective_aspect_ratio,
    effective_duration,
    get_type_and_cost,
    map_channel_model,
    normalize_aspect_ratio_label,
    normalize_duration_seconds,
    parse_legacy_sora_model,
)
from app.services.video.sora_client import SoraVideoClient
from app.services.video.url_extractor import extract_video_url

DEFAULT_VIDEO_PROMPT = "Generate a video"

GROK_RESOLUTION = "720p"
GROK_PRESET = "normal"


def build_video_messages(prompt: str, files: list[Any]) -> list[dict[str, Any]]:
    """Build the chat messages for a video request.

    Args:
        prompt: Generation prompt
        files: Attached MediaFile objects; only images are embedded

    Returns:
        Single user message with text and inline image parts
    """
    content: list[dict[str, Any]] = [{"type": "text", "text": prompt or DEFAULT_VIDEO_PROMPT}]
    for file in files:
        if not file.is_image:
            continue
        content.append({"type": "image_url", "image_url": {"url": file.to_data_url()}})
    return [{"role": "user", "content": content}]


def build_grok_video_config(model: VideoModel, request: SoraGenerateRequest) -> dict[str, Any]:
    """Build the ``video_config`` object sent to Grok gateways.

    Options stored on the model's config object override the values
    derived from the request.
    """
    video_config: dict[str, Any] = {
        "aspect_ratio": normalize_aspect_ratio_label(effective_aspect_ratio(model, request)),
        "video_length": normalize_duration_seconds(effective_duration(model, request)),
        "resolution_name": GROK_RESOLUTION,
        "preset": GROK_PRESET,
    }

    overrides = model.video_config_object
    if overrides is not None:
        if overrides.aspect_ratio:
            video_config["aspect_ratio"] = overrides.aspect_ratio
        if overrides.video_length:
            video_config["video_length"] = overrides.video_length
        if overrides.preset:
            video_config["preset"] = overrides.preset
    return video_config


def resolve_sora_endpoint(
    channel: VideoChannel, model: VideoModel
) -> tuple[str | None, str | None]:
    """Pick the base URL and API key for a native Sora channel as a pair.

    A model base URL only travels with the model key. A channel base URL
    takes the model key, else the channel key. Without either base URL both
    values are None and the client uses its configured URL and key.
    """
    if model.base_url:
        return model.base_url, model.api_key or None
    if channel.base_url:
        return channel.base_url, model.api_key or channel.api_key or None
    return None, None


class VideoChannelAdapter:
    """Maps generation requests onto the configured video channels.

    Example:
        >>> adapter = VideoChannelAdapter(http_client, sora_client, site_config_service, config)
        >>> result = await adapter.generate(SoraGenerateRequest(prompt="...", model_id="veo"))
        >>> print(result.url, result.cost)
    """

    def __init__(
        self,
        http_client: HTTPClient,
        sora_client: SoraVideoClient,
        site_config_service: SiteConfigService,
        config: Config,
        logger: Any | None = None,
    ) -> None:
        """Initialize VideoChannelAdapter.

        Args:
            http_client: Shared HTTP client for chat-completion channels
            sora_client: Native Sora job client
            site_config_service: Source of channels, models and pricing
            config: Application configuration (retry settings)
            logger: Logger instance (defaults to the module logger)
        """
        self.http_client = http_client
        self.sora_client = sora_client
        self.site_config_service = site_config_service
        self.config = config
        self._logger = logger or get_logger(__name__)

    async def generate(
        self,
        request: SoraGenerateRequest,
        on_progress: ProgressCallback | None = None,
    ) -> GenerateResult:
        """Generate a video.

        Args:
            request: Generation request
            on_progress: Progress callback (percent)

        Returns:
            GenerateResult with URL and cost

        Raises:
            ResourceNotFoundError: If the model id is unknown
            ResourceDisabledError: If the model or its channel is disabled
            ConfigError: If the channel has no base URL or API key
            ExternalAPIError: If the upstream call fails
            ContentExtractionError: If no video URL can be found in the reply
        """
        self._logger.debug(
            "Video request",
            model=request.model,
            model_id=request.model_id,
            files=len(request.files),
        )
        site = self.site_config_service.get()

        try:
            if request.model_id:
                result = await self._generate_by_video_model(site, request, on_progress)
                route = "channel"
            else:
                result = await self.generate_via_sora_api(site, request, on_progress)
                route = "legacy"
        except Exception as e:
            self._logger.error(
                "Video generation failed",
                model=request.model,
                model_id=request.model_id,
                error=str(e),
            )
            raise

        self._logger.info(
            "Video generation completed",
            route=route,
            model_id=request.model_id,
            channel_id=result.channel_id,
            cost=result.cost,
        )
        return result

    async def _generate_by_video_model(
        self,
        site: SiteConfig,
        request: SoraGenerateRequest,
        on_progress: ProgressCallback | None,
    ) -> GenerateResult:
        assert request.model_id is not None
        resolved = site.get_video_model_with_channel(request.model_id)
        if resolved is None:
            raise ResourceNotFoundError("video_model", request.model_id)

        model, channel = resolved
        if not model.enabled:
            raise ResourceDisabledError("video_model", model.id)
        if not channel.enabled:
            raise ResourceDisabledError("video_channel", channel.id)

        channel_type = channel.type
        if channel_type is ChannelType.SORA:
            return await self._generate_via_sora_channel(site, channel, model, request, on_progress)
        elif channel_type is ChannelType.FLOW2API:
            return await self.generate_via_external_chat(site, channel, model, request, on_progress)
        elif channel_type is ChannelType.GROK2API:
            return await self.generate_via_external_chat(site, channel, model, request, on_progress)
        elif channel_type is ChannelType.OPENAI_COMPATIBLE:
            return await self.generate_via_external_chat(site, channel, model, request, on_progress)
        else:
            assert_never(channel_type)

    async def _generate_via_sora_channel(
        self,
        site: SiteConfig,
        channel: VideoChannel,
        model: VideoModel,
        request: SoraGenerateRequest,
        on_progress: ProgressCallback | None,
    ) -> GenerateResult:
        ratio = effective_aspect_ratio(model, request)
        duration = effective_duration(model, request)
        legacy_request = request.model_copy(update={"model": f"sora2-{ratio}-{duration}"})
        base_url, api_key = resolve_sora_endpoint(channel, model)
        return await self.generate_via_sora_api(
            site,
            legacy_request,
            on_progress,
            base_url=base_url,
            api_key=api_key,
            channel_id=channel.id,
        )

    async def generate_via_external_chat(
        self,
        site: SiteConfig,
        channel: VideoChannel,
        model: VideoModel,
        request: SoraGenerateRequest,
        on_progress: ProgressCallback | None = None,
    ) -> GenerateResult:
        """Generate through a chat-completion gateway.

        Args:
            site: Site configuration (pricing)
            channel: Resolved channel
            model: Resolved model
            request: Generation request
            on_progress: Progress callback, called with 5 and 100

        Returns:
            GenerateResult for the extracted URL
        """
        base_url = model.base_url or channel.base_url
        api_key = model.api_key or channel.api_key
        if not base_url or not api_key:
            raise ConfigError(
                f"Video channel {channel.id} has no base URL or API key configured",
                context={"channel_id": channel.id, "model_id": model.id},
            )

        resolved_model = map_channel_model(channel.type, model, request)
        payload: dict[str, Any] = {
            "model": resolved_model,
            "messages": build_video_messages(request.prompt, request.files),
            "stream": False,
        }
        if channel.type is ChannelType.GROK2API:
            payload["video_config"] = build_grok_video_config(model, request)

        endpoint = f"{base_url.rstrip('/')}/v1/chat/completions"
        await report_progress(on_progress, 5)

        self._logger.info(
            "External chat video request",
            channel_type=channel.type.value,
            channel=channel.name,
            endpoint=endpoint,
            model=resolved_model,
            has_images=request.first_image is not None,
        )

        response = await self.http_client.post_with_retry(
            endpoint,
            json=payload,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
            max_retries=self.config.http_max_retries,
            backoff=self.config.http_retry_backoff,
        )

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.is_success:
            detail = json.dumps(data, ensure_ascii=False) if data is not None else None
            raise ExternalAPIError(
                channel.name or channel.type.value,
                f"upstream returned {response.status_code}",
                status_code=response.status_code,
                endpoint=endpoint,
                response_body=detail,
            )

        content = self._message_content(data)
        if not isinstance(content, str) or not content:
            raise ContentExtractionError(
                "Upstream response has no message content", content_type="video"
            )

        url = extract_video_url(content)
        if url is None:
            self._logger.debug("Unrecognized upstream content", content=content[:500])
            raise ContentExtractionError(
                "Could not find a video URL in the upstream response",
                content_type="video",
                snippet=content,
            )

        await report_progress(on_progress, 100)

        pricing = get_type_and_cost(effective_duration(model, request), site.pricing)
        return GenerateResult(
            type=pricing.type,
            url=url,
            cost=pricing.cost,
            channel_id=channel.id,
        )

    async def generate_via_sora_api(
        self,
        site: SiteConfig,
        request: SoraGenerateRequest,
        on_progress: ProgressCallback | None = None,
        *,
        base_url: str | None = None,
        api_key: str | None = None,
        channel_id: str | None = None,
    ) -> GenerateResult:
        """Generate through the native Sora job API.

        Args:
            site: Site configuration (pricing)
            request: Generation request; ``model`` is a legacy model name
            on_progress: Progress callback
            base_url: Channel base URL override
            api_key: Channel API key override
            channel_id: Channel reported in the result

        Returns:
            GenerateResult for the first job output
        """
        legacy = parse_legacy_sora_model(request.model)
        image = request.first_image

        video_request = SoraVideoRequest(
            prompt=request.prompt,
            model=legacy.api_model,
            orientation=legacy.orientation,
            seconds=legacy.seconds,
            size=legacy.size,
            input_image=image.data if image is not None else None,
            style_id=request.style_id or None,
            remix_target_id=request.remix_target_id or None,
        )

        result = await self.sora_client.generate(
            video_request,
            on_progress,
            base_url=base_url,
            api_key=api_key,
            channel_id=channel_id,
        )

        if not result.data or not result.data[0].url:
            raise ContentExtractionError(
                "Video generation returned no video URL", content_type="video"
            )

        first = result.data[0]
        pricing = get_type_and_cost(request.model, site.pricing)
        return GenerateResult(
            type=pricing.type,
            url=first.url,
            cost=pricing.cost,
            channel_id=result.channel_id,
            video_id=result.id,
            permalink=first.permalink,
            revised_prompt=first.revised_prompt,
        )

    @staticmethod
    def _message_content(data: Any) -> Any:
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            return None
        message = choices[0].get("message")
        if not isinstance(message, dict):
            return None
        return message.get("content")


__all__ = [
    "DEFAULT_VIDEO_PROMPT",
    "VideoChannelAdapter",
    "build_video_messages",
    "build_grok_video_config",
    "resolve_sora_endpoint",
]
