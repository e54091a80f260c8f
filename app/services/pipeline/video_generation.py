"""Video generation pipeline.

Orchestrates a generation request end to end:
1. Blocklist check of the user prompt
2. Prompt processing (filter / translate / re-filter)
3. Blocklist check of the processed prompt
4. Upstream generation through the channel adapter

Persisting the generation record and charging credits are the caller's
concern.
"""

from dataclasses import dataclass
from typing import Any

from app.core.config_loader import SiteConfigService
from app.core.logging import get_logger
from app.services.prompt.blocklist import assert_prompt_allowed
from app.services.prompt.processor import ProcessedPrompt, PromptProcessor
from app.services.video.adapter import VideoChannelAdapter
from app.services.video.base import GenerateResult, ProgressCallback, SoraGenerateRequest


@dataclass
class VideoGenerationOutcome:
    """Result of a pipeline run.

    Attributes:
        result: Upstream generation result
        prompt: Prompt processing details
    """

    result: GenerateResult
    prompt: ProcessedPrompt


class VideoGenerationPipeline:
    """Runs prompt policy and video generation for one request.

    Attributes:
        prompt_processor: LLM prompt processing service
        adapter: Multi-channel video adapter
        site_config_service: Source of the blocklist settings
    """

    def __init__(
        self,
        prompt_processor: PromptProcessor,
        adapter: VideoChannelAdapter,
        site_config_service: SiteConfigService,
        logger: Any | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            prompt_processor: LLM prompt processing service
            adapter: Multi-channel video adapter
            site_config_service: Source of the blocklist settings
            logger: Logger instance (defaults to the module logger)
        """
        self.prompt_processor = prompt_processor
        self.adapter = adapter
        self.site_config_service = site_config_service
        self._logger = logger or get_logger(__name__)

    async def run(
        self,
        request: SoraGenerateRequest,
        on_progress: ProgressCallback | None = None,
    ) -> VideoGenerationOutcome:
        """Generate a video for a request.

        Args:
            request: Generation request with the user's prompt
            on_progress: Progress callback (percent)

        Returns:
            VideoGenerationOutcome

        Raises:
            PromptBlockedError: If the original or processed prompt is blocked
            SoraStudioError: Any configuration, upstream or extraction error
        """
        blocklist = self.site_config_service.get().prompt_processing

        assert_prompt_allowed(request.prompt, blocklist, logger=self._logger)

        processed = await self.prompt_processor.process(request.prompt)
        if processed.processed_prompt != processed.original_prompt:
            assert_prompt_allowed(processed.processed_prompt, blocklist, logger=self._logger)

        upstream_request = request.model_copy(update={"prompt": processed.processed_prompt})
        result = await self.adapter.generate(upstream_request, on_progress)

        self._logger.info(
            "Video generation pipeline completed",
            model_id=request.model_id,
            prompt_processed=processed.processed_prompt != processed.original_prompt,
            cost=result.cost,
        )
        return VideoGenerationOutcome(result=result, prompt=processed)


__all__ = ["VideoGenerationOutcome", "VideoGenerationPipeline"]
