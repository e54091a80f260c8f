"""Model name mapping for video channels.

Maps a logical model, aspect ratio and duration onto the concrete model
identifier each upstream family expects, and resolves the credit cost
tier for a request.
"""

import re
from dataclasses import dataclass
from typing import Literal

from app.config import ChannelType, PricingConfig, VideoModel
from app.services.video.base import GENERATION_TYPE_VIDEO, SoraGenerateRequest

DEFAULT_DURATION_SECONDS = 10
DEFAULT_ASPECT_RATIO = "landscape"
DEFAULT_DURATION = "10s"

GROK_VIDEO_BASE = "grok-imagine-1.0-video"

ASPECT_RATIO_LABELS = {
    "landscape": "16:9",
    "portrait": "9:16",
    "square": "1:1",
}

_DIGITS = re.compile(r"(\d+)")


@dataclass(frozen=True)
class LegacySoraModel:
    """Native Sora parameters parsed from a legacy model name."""

    api_model: Literal["sora-2", "sora-2-pro"]
    orientation: Literal["landscape", "portrait"]
    seconds: Literal["10", "15", "25"]
    size: str


@dataclass(frozen=True)
class TypeAndCost:
    """Result type tag and credit cost."""

    type: str
    cost: int


def normalize_duration_seconds(duration: str | None) -> int:
    """Read the first number from a duration token.

    Args:
        duration: Duration token (e.g., "15s")

    Returns:
        Seconds, or 10 when the token is missing or not positive
    """
    if not duration:
        return DEFAULT_DURATION_SECONDS
    matched = _DIGITS.search(duration)
    if not matched:
        return DEFAULT_DURATION_SECONDS
    seconds = int(matched.group(1))
    return seconds if seconds > 0 else DEFAULT_DURATION_SECONDS


def normalize_aspect_ratio_label(aspect_ratio: str | None) -> str:
    """Convert an orientation token into a ratio label (e.g., "portrait" -> "9:16")."""
    return ASPECT_RATIO_LABELS.get((aspect_ratio or "").lower(), aspect_ratio or "16:9")


def _orientation(aspect_ratio: str | None) -> str:
    return "portrait" if (aspect_ratio or "").lower() == "portrait" else "landscape"


def map_flow_model(model_name: str, aspect_ratio: str, duration: str) -> str:
    """Map a Flow (Veo) model to its upstream identifier.

    Reference models (name contains "r2v" or "reference") ignore the
    duration; image models ("i2v" or "image") and text models switch to
    the 15 second variant at 15 seconds or more.

    Args:
        model_name: Configured model name
        aspect_ratio: Aspect ratio token; only "portrait" selects portrait
        duration: Duration token

    Returns:
        Flow model identifier
    """
    orientation = _orientation(aspect_ratio)
    seconds = normalize_duration_seconds(duration)
    name = model_name.lower()

    if "r2v" in name or "reference" in name:
        return f"veo_3_0_r2v_fast_{orientation}"

    if "i2v" in name or "image" in name:
        if seconds >= 15:
            return f"veo_2_1_fast_d_15_i2v_{orientation}"
        return f"veo_3_1_i2v_s_fast_fl_{orientation}"

    if seconds >= 15:
        return f"veo_2_1_fast_d_15_t2v_{orientation}"
    return f"veo_3_1_t2v_fast_{orientation}"


def map_grok_model(model_name: str, aspect_ratio: str, duration: str) -> str:
    """Map a Grok Imagine model to its upstream identifier.

    Names that are already fully qualified pass through unchanged.

    Args:
        model_name: Configured model name
        aspect_ratio: Aspect ratio token
        duration: Duration token

    Returns:
        Grok model identifier
    """
    if f"{GROK_VIDEO_BASE}-" in model_name.lower():
        return model_name

    seconds = normalize_duration_seconds(duration)
    length = "15s" if seconds >= 15 else "10s"
    return f"{GROK_VIDEO_BASE}-{_orientation(aspect_ratio)}-{length}"


def effective_aspect_ratio(model: VideoModel, request: SoraGenerateRequest) -> str:
    """Request aspect ratio, else model default, else landscape."""
    return request.aspect_ratio or model.default_aspect_ratio or DEFAULT_ASPECT_RATIO


def effective_duration(model: VideoModel, request: SoraGenerateRequest) -> str:
    """Request duration, else model default, else 10s."""
    return request.duration or model.default_duration or DEFAULT_DURATION


def map_channel_model(
    channel_type: ChannelType, model: VideoModel, request: SoraGenerateRequest
) -> str:
    """Resolve the upstream model identifier for a chat-completion channel.

    Args:
        channel_type: Channel family
        model: Video model configuration
        request: Generation request

    Returns:
        Upstream model identifier
    """
    ratio = effective_aspect_ratio(model, request)
    duration = effective_duration(model, request)

    if channel_type is ChannelType.FLOW2API:
        return map_flow_model(model.api_model, ratio, duration)
    if channel_type is ChannelType.GROK2API:
        return map_grok_model(model.api_model, ratio, duration)
    return model.api_model or request.model


def parse_legacy_sora_model(model: str) -> LegacySoraModel:
    """Parse a legacy model name such as "sora2-portrait-15s".

    Args:
        model: Legacy model name

    Returns:
        Native Sora parameters
    """
    api_model: Literal["sora-2", "sora-2-pro"] = "sora-2-pro" if "pro" in model else "sora-2"
    orientation: Literal["landscape", "portrait"] = (
        "portrait" if "portrait" in model else "landscape"
    )

    seconds: Literal["10", "15", "25"] = "10"
    if "25" in model:
        seconds = "25"
    elif "15" in model:
        seconds = "15"

    size = "720x1280" if orientation == "portrait" else "1280x720"
    return LegacySoraModel(api_model=api_model, orientation=orientation, seconds=seconds, size=size)


def get_type_and_cost(label: str, pricing: PricingConfig) -> TypeAndCost:
    """Pick the credit tier for a model name or duration label.

    Labels mentioning 25 use the 25s tier, then 15 the 15s tier; anything
    else is billed at the 10s tier.

    Args:
        label: Model name or duration token
        pricing: Configured prices

    Returns:
        Type tag and cost
    """
    if "25" in label:
        return TypeAndCost(type=GENERATION_TYPE_VIDEO, cost=pricing.sora_video_25s)
    if "15" in label:
        return TypeAndCost(type=GENERATION_TYPE_VIDEO, cost=pricing.sora_video_15s)
    return TypeAndCost(type=GENERATION_TYPE_VIDEO, cost=pricing.sora_video_10s)


__all__ = [
    "ASPECT_RATIO_LABELS",
    "LegacySoraModel",
    "TypeAndCost",
    "normalize_duration_seconds",
    "normalize_aspect_ratio_label",
    "map_flow_model",
    "map_grok_model",
    "effective_aspect_ratio",
    "effective_duration",
    "map_channel_model",
    "parse_legacy_sora_model",
    "get_type_and_cost",
]
