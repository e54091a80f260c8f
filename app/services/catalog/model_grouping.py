"""Remote image model import.

Fetches the ``/v1/models`` listing of an image channel and groups model
ids that only differ by aspect ratio or size suffix, e.g.::

    gemini-3.0-pro-image-landscape
    gemini-3.0-pro-image-portrait-2k   ->  "Gemini 3.0 Pro Image"
    gemini-3.0-pro-image-square-4k

Ids that match no pattern are returned ungrouped.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.config import ImageChannel
from app.core.config_loader import SiteConfigService
from app.core.exceptions import ConfigError, ExternalAPIError, ResourceNotFoundError
from app.core.logging import get_logger
from app.infrastructure.http_client import HTTPClient

RATIO_ORDER = ("1:1", "16:9", "9:16", "4:3", "3:4")
SIZE_ORDER = ("1K", "2K", "4K")
DEFAULT_RATIO = "1:1"
DEFAULT_SIZE = "1K"


@dataclass(frozen=True)
class ModelPattern:
    """Naming pattern for a family of remote models.

    Attributes:
        base_pattern: Regex capturing (base name, ratio suffix, optional size suffix)
        ratio_suffixes: Ratio suffix -> aspect ratio
        size_suffixes: Size suffix -> image size ("" is the suffix-less size)
    """

    base_pattern: re.Pattern[str]
    ratio_suffixes: dict[str, str]
    size_suffixes: dict[str, str] = field(default_factory=dict)

    @property
    def has_sizes(self) -> bool:
        """Whether the family is offered in more than one size."""
        return len(self.size_suffixes) > 1


MODEL_PATTERNS: tuple[ModelPattern, ...] = (
    ModelPattern(
        base_pattern=re.compile(
            r"^(.+?-image)-(landscape|portrait|square|four-three|three-four)(-2k|-4k)?$",
            re.IGNORECASE,
        ),
        ratio_suffixes={
            "landscape": "16:9",
            "portrait": "9:16",
            "square": "1:1",
            "four-three": "4:3",
            "three-four": "3:4",
        },
        size_suffixes={"": "1K", "-2k": "2K", "-4k": "4K"},
    ),
    ModelPattern(
        base_pattern=re.compile(r"^(.+?-preview)-(landscape|portrait)$", re.IGNORECASE),
        ratio_suffixes={"landscape": "16:9", "portrait": "9:16"},
    ),
)


class RemoteModel(BaseModel):
    """Entry of an OpenAI-style model listing."""

    model_config = ConfigDict(extra="ignore")

    id: str
    owned_by: str = "unknown"

    @field_validator("owned_by", mode="before")
    @classmethod
    def default_owner(cls, v: Any) -> str:
        """Report missing owners as "unknown"."""
        return v if isinstance(v, str) and v else "unknown"


class GroupedModelFeatures(BaseModel):
    """Feature flags proposed for an imported model group."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text_to_image: bool = True
    image_to_image: bool = True
    image_size: bool = False


class GroupedModel(BaseModel):
    """Models of one family merged into a single importable entry.

    Attributes:
        base_name: Shared id prefix
        display_name: Human readable name derived from the base name
        api_model: Default model id (1:1 else first ratio, 1K else first size)
        aspect_ratios: Offered ratios in display order
        image_sizes: Offered sizes in display order
        resolutions: ratio -> model id, or ratio -> size -> model id
        features: Proposed feature flags
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    base_name: str
    display_name: str
    api_model: str
    aspect_ratios: list[str] = Field(default_factory=list)
    image_sizes: list[str] = Field(default_factory=list)
    resolutions: dict[str, str | dict[str, str]] = Field(default_factory=dict)
    features: GroupedModelFeatures = Field(default_factory=GroupedModelFeatures)


def to_display_name(base_name: str) -> str:
    """Turn "gemini-3.0-pro-image" into "Gemini 3.0 Pro Image"."""
    spaced = base_name.replace("-", " ")
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced)


def _ordered(values: list[str], order: tuple[str, ...]) -> list[str]:
    return sorted(values, key=lambda v: order.index(v) if v in order else -1)


def _default_api_model(group: GroupedModel) -> str:
    if not group.aspect_ratios:
        return group.api_model
    ratio = DEFAULT_RATIO if DEFAULT_RATIO in group.aspect_ratios else group.aspect_ratios[0]
    ratio_config = group.resolutions.get(ratio)
    if isinstance(ratio_config, str):
        return ratio_config
    if isinstance(ratio_config, dict) and group.image_sizes:
        size = DEFAULT_SIZE if DEFAULT_SIZE in group.image_sizes else group.image_sizes[0]
        if ratio_config.get(size):
            return ratio_config[size]
    return group.api_model


def group_models(models: list[RemoteModel]) -> tuple[list[GroupedModel], list[RemoteModel]]:
    """Group remote models by naming pattern.

    Args:
        models: Remote model listing

    Returns:
        (grouped, ungrouped) in first-seen order
    """
    grouped: dict[str, GroupedModel] = {}
    ungrouped: list[RemoteModel] = []

    for model in models:
        for pattern in MODEL_PATTERNS:
            matched = pattern.base_pattern.match(model.id)
            if not matched:
                continue

            base_name = matched.group(1)
            aspect_ratio = pattern.ratio_suffixes.get(matched.group(2).lower())
            if aspect_ratio is None:
                continue
            size_suffix = (matched.group(3) or "").lower()
            image_size = pattern.size_suffixes.get(size_suffix) or DEFAULT_SIZE

            group = grouped.get(base_name)
            if group is None:
                group = GroupedModel(
                    base_name=base_name,
                    display_name=to_display_name(base_name),
                    api_model=model.id,
                    features=GroupedModelFeatures(image_size=pattern.has_sizes),
                )
                grouped[base_name] = group

            if aspect_ratio not in group.aspect_ratios:
                group.aspect_ratios.append(aspect_ratio)
            if image_size not in group.image_sizes:
                group.image_sizes.append(image_size)

            if group.features.image_size:
                sizes = group.resolutions.setdefault(aspect_ratio, {})
                if isinstance(sizes, dict):
                    sizes[image_size] = model.id
            else:
                group.resolutions[aspect_ratio] = model.id
            break
        else:
            ungrouped.append(model)

    for group in grouped.values():
        group.aspect_ratios = _ordered(group.aspect_ratios, RATIO_ORDER)
        group.image_sizes = _ordered(group.image_sizes, SIZE_ORDER)
        group.api_model = _default_api_model(group)

    return list(grouped.values()), ungrouped


class RemoteModelLister:
    """Lists the remote models of an image channel.

    Example:
        >>> lister = RemoteModelLister(http_client, site_config_service)
        >>> models = await lister.list_models("gemini")
        >>> grouped, ungrouped = group_models(models)
    """

    def __init__(
        self,
        http_client: HTTPClient,
        site_config_service: SiteConfigService,
        logger: Any | None = None,
    ) -> None:
        """Initialize RemoteModelLister.

        Args:
            http_client: Shared HTTP client
            site_config_service: Source of image channels
            logger: Logger instance (defaults to the module logger)
        """
        self.http_client = http_client
        self.site_config_service = site_config_service
        self._logger = logger or get_logger(__name__)

    def get_channel(self, channel_id: str) -> ImageChannel:
        """Resolve an image channel that supports remote model listing.

        Raises:
            ResourceNotFoundError: If the channel does not exist
            ConfigError: If the channel has no base URL or cannot list models
        """
        channel = self.site_config_service.get().get_image_channel(channel_id)
        if channel is None:
            raise ResourceNotFoundError("image_channel", channel_id)
        if not channel.base_url:
            raise ConfigError(
                "Channel has no base URL configured", context={"channel_id": channel_id}
            )
        if not channel.supports_remote_models:
            raise ConfigError(
                "This channel type does not support fetching remote models",
                context={"channel_id": channel_id, "channel_type": channel.type},
            )
        return channel

    async def list_models(self, channel_id: str) -> list[RemoteModel]:
        """Fetch the model listing of an image channel.

        Args:
            channel_id: Image channel id

        Returns:
            Remote models in upstream order

        Raises:
            ResourceNotFoundError: If the channel does not exist
            ConfigError: If the channel cannot list models
            ExternalAPIError: If the upstream request fails
        """
        channel = self.get_channel(channel_id)
        endpoint = f"{channel.base_url.rstrip('/')}/v1/models"

        headers = {"Content-Type": "application/json"}
        if channel.primary_api_key:
            headers["Authorization"] = f"Bearer {channel.primary_api_key}"

        response = await self.http_client.get(endpoint, headers=headers)
        if not response.is_success:
            raise ExternalAPIError(
                channel.name or channel.id,
                f"failed to fetch models ({response.status_code})",
                status_code=response.status_code,
                endpoint=endpoint,
                response_body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalAPIError(
                channel.name or channel.id,
                "model listing is not valid JSON",
                status_code=response.status_code,
                endpoint=endpoint,
                response_body=response.text,
            ) from e

        items = []
        if isinstance(data, dict):
            items = data.get("data") or data.get("models") or []

        models = [
            RemoteModel.model_validate(item)
            for item in items
            if isinstance(item, dict) and isinstance(item.get("id"), str)
        ]
        self._logger.info("Fetched remote models", channel_id=channel_id, count=len(models))
        return models


__all__ = [
    "MODEL_PATTERNS",
    "ModelPattern",
    "RemoteModel",
    "GroupedModel",
    "GroupedModelFeatures",
    "RemoteModelLister",
    "group_models",
    "to_display_name",
]
