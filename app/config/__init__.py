"""Site configuration models."""

from pydantic import BaseModel, Field, model_validator

from app.config.chat import ChatModel, ImageChannel
from app.config.prompt_processing import (
    DEFAULT_FILTER_PROMPT,
    DEFAULT_TRANSLATE_PROMPT,
    PricingConfig,
    PromptBlocklistConfig,
    PromptProcessingConfig,
)
from app.config.video import (
    AspectRatioOption,
    ChannelType,
    DurationOption,
    VideoChannel,
    VideoConfigObject,
    VideoModel,
    VideoModelFeatures,
    normalize_video_config_object,
)


class SiteConfig(BaseModel):
    """Complete site configuration.

    Attributes:
        prompt_processing: Blocklist and LLM prompt processing settings
        pricing: Credit prices per duration tier
        video_channels: Configured video channels
        video_models: Configured video models
        chat_models: Chat models available for prompt processing
        image_channels: Image channels (remote model import)
    """

    prompt_processing: PromptProcessingConfig = Field(default_factory=PromptProcessingConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    video_channels: list[VideoChannel] = Field(default_factory=list)
    video_models: list[VideoModel] = Field(default_factory=list)
    chat_models: list[ChatModel] = Field(default_factory=list)
    image_channels: list[ImageChannel] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_references(self) -> "SiteConfig":
        """Ensure ids are unique and every model belongs to a known channel."""
        for label, items in (
            ("video channel", self.video_channels),
            ("video model", self.video_models),
            ("chat model", self.chat_models),
            ("image channel", self.image_channels),
        ):
            ids = [item.id for item in items]
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValueError(f"Duplicate {label} ids: {duplicates}")

        channel_ids = {channel.id for channel in self.video_channels}
        for model in self.video_models:
            if model.channel_id not in channel_ids:
                raise ValueError(
                    f"Video model '{model.id}' references unknown channel '{model.channel_id}'"
                )
        return self

    def get_video_model_with_channel(
        self, model_id: str
    ) -> tuple[VideoModel, VideoChannel] | None:
        """Look up a video model together with its channel.

        Args:
            model_id: Video model identifier

        Returns:
            (model, channel) pair, or None if the model is unknown
        """
        model = next((m for m in self.video_models if m.id == model_id), None)
        if model is None:
            return None
        channel = next(c for c in self.video_channels if c.id == model.channel_id)
        return model, channel

    def get_chat_model(self, model_id: str) -> ChatModel | None:
        """Look up a chat model by id."""
        return next((m for m in self.chat_models if m.id == model_id), None)

    def get_image_channel(self, channel_id: str) -> ImageChannel | None:
        """Look up an image channel by id."""
        return next((c for c in self.image_channels if c.id == channel_id), None)


__all__ = [
    # Prompt processing
    "DEFAULT_FILTER_PROMPT",
    "DEFAULT_TRANSLATE_PROMPT",
    "PromptBlocklistConfig",
    "PromptProcessingConfig",
    "PricingConfig",
    # Chat / image
    "ChatModel",
    "ImageChannel",
    # Video
    "ChannelType",
    "VideoChannel",
    "VideoModel",
    "VideoModelFeatures",
    "AspectRatioOption",
    "DurationOption",
    "VideoConfigObject",
    "normalize_video_config_object",
    # Main
    "SiteConfig",
]
