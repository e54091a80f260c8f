"""Video channel and model configuration models.

A channel is an upstream provider/credential configuration; a model is a
named offering within exactly one channel, with its own option tables and
cost. Both are edited by administrators and read-only to the generation
path.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.config.validators import clamp_int, normalize_choice, strip_or_empty

VIDEO_CONFIG_ASPECT_RATIOS = ("16:9", "9:16", "1:1", "2:3", "3:2")
VIDEO_CONFIG_RESOLUTIONS = ("SD", "HD")
VIDEO_CONFIG_PRESETS = ("fun", "normal", "spicy")
VIDEO_LENGTH_MIN = 5
VIDEO_LENGTH_MAX = 15


class ChannelType(str, Enum):
    """Upstream API family of a video channel.

    Attributes:
        SORA: Native Sora job API
        OPENAI_COMPATIBLE: Generic OpenAI-style chat completion gateway
        FLOW2API: Flow (Veo) chat completion gateway
        GROK2API: Grok Imagine chat completion gateway
    """

    SORA = "sora"
    OPENAI_COMPATIBLE = "openai-compatible"
    FLOW2API = "flow2api"
    GROK2API = "grok2api"


class VideoChannel(BaseModel):
    """Video channel configuration.

    Attributes:
        id: Channel identifier
        name: Display name
        type: Upstream API family
        base_url: Upstream base URL
        api_key: Upstream API key
        enabled: Whether the channel accepts requests
    """

    id: str
    name: str
    type: ChannelType = ChannelType.SORA
    base_url: str = ""
    api_key: str = ""
    enabled: bool = True

    @field_validator("base_url", "api_key", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> str:
        """Trim connection settings."""
        return strip_or_empty(v)


class VideoModelFeatures(BaseModel):
    """Feature flags of a video model."""

    text_to_video: bool = True
    image_to_video: bool = False
    video_to_video: bool = False
    support_styles: bool = False


class AspectRatioOption(BaseModel):
    """Aspect ratio row offered to users (value is the request token)."""

    value: str
    label: str


class DurationOption(BaseModel):
    """Duration row offered to users, with its credit cost."""

    value: str
    label: str
    cost: int = Field(default=0, ge=0)


class VideoConfigObject(BaseModel):
    """Channel-specific generation options stored on a model.

    Invalid values are dropped on load instead of failing validation:
    aspect ratios outside the supported set, resolutions other than SD/HD,
    unknown presets. The video length is floored and clamped to 5..15.
    """

    aspect_ratio: Literal["16:9", "9:16", "1:1", "2:3", "3:2"] | None = None
    video_length: int | None = None
    resolution: Literal["SD", "HD"] | None = None
    preset: Literal["fun", "normal", "spicy"] | None = None

    @model_validator(mode="before")
    @classmethod
    def drop_invalid_values(cls, data: Any) -> Any:
        """Normalize raw values and discard the ones that are not supported."""
        if not isinstance(data, dict):
            return {}
        return {
            "aspect_ratio": normalize_choice(data.get("aspect_ratio"), VIDEO_CONFIG_ASPECT_RATIOS),
            "video_length": clamp_int(data.get("video_length"), VIDEO_LENGTH_MIN, VIDEO_LENGTH_MAX),
            "resolution": normalize_choice(
                data.get("resolution"), VIDEO_CONFIG_RESOLUTIONS, str.upper
            ),
            "preset": normalize_choice(data.get("preset"), VIDEO_CONFIG_PRESETS, str.lower),
        }

    @property
    def is_empty(self) -> bool:
        """Whether no option survived normalization."""
        return not self.model_dump(exclude_none=True)


def normalize_video_config_object(raw: Any) -> VideoConfigObject | None:
    """Normalize a raw config object, returning None when nothing valid remains.

    Args:
        raw: Raw mapping from an admin request or YAML file

    Returns:
        VideoConfigObject with at least one value, or None
    """
    if not isinstance(raw, dict):
        return None
    config = VideoConfigObject.model_validate(raw)
    return None if config.is_empty else config


def _default_aspect_ratios() -> list[AspectRatioOption]:
    return [
        AspectRatioOption(value="landscape", label="16:9"),
        AspectRatioOption(value="portrait", label="9:16"),
    ]


def _default_durations() -> list[DurationOption]:
    return [DurationOption(value="10s", label="10s", cost=100)]


class VideoModel(BaseModel):
    """Video model configuration.

    Attributes:
        id: Model identifier referenced by generation requests
        channel_id: Owning channel
        name: Display name
        description: Display description
        api_model: Upstream model identifier (or base name for mapped channels)
        base_url: Optional per-model base URL override
        api_key: Optional per-model API key override
        features: Feature flags
        aspect_ratios: Aspect ratio option table
        durations: Duration option table with costs
        default_aspect_ratio: Aspect ratio used when the request has none
        default_duration: Duration used when the request has none
        video_config_object: Channel-specific options
        highlight: Whether the UI highlights the model
        enabled: Whether the model accepts requests
        sort_order: Display order
    """

    id: str
    channel_id: str
    name: str
    description: str = ""
    api_model: str
    base_url: str = ""
    api_key: str = ""
    features: VideoModelFeatures = Field(default_factory=VideoModelFeatures)
    aspect_ratios: list[AspectRatioOption] = Field(default_factory=_default_aspect_ratios)
    durations: list[DurationOption] = Field(default_factory=_default_durations)
    default_aspect_ratio: str = "landscape"
    default_duration: str = "10s"
    video_config_object: VideoConfigObject | None = None
    highlight: bool = False
    enabled: bool = True
    sort_order: int = 0

    @field_validator("base_url", "api_key", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> str:
        """Trim connection overrides."""
        return strip_or_empty(v)

    @field_validator("video_config_object", mode="before")
    @classmethod
    def normalize_config_object(cls, v: Any) -> VideoConfigObject | None:
        """Drop config objects with no valid option."""
        if isinstance(v, VideoConfigObject):
            return None if v.is_empty else v
        return normalize_video_config_object(v)


__all__ = [
    "ChannelType",
    "VideoChannel",
    "VideoModelFeatures",
    "AspectRatioOption",
    "DurationOption",
    "VideoConfigObject",
    "VideoModel",
    "normalize_video_config_object",
]
