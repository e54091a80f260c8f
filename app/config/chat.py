"""Chat model and image channel configuration models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.config.validators import strip_or_empty


class ChatModel(BaseModel):
    """OpenAI-compatible chat model used for prompt processing.

    Attributes:
        id: Model identifier referenced from prompt processing settings
        name: Display name
        api_url: Chat completion endpoint (with or without /chat/completions)
        api_key: Bearer token
        model_id: Upstream model identifier
        max_tokens: Upper bound for completion tokens
        enabled: Whether the model may be used
    """

    model_config = ConfigDict(protected_namespaces=())

    id: str
    name: str = ""
    api_url: str
    api_key: str = ""
    model_id: str
    max_tokens: int = Field(default=2048, ge=1)
    enabled: bool = True

    @field_validator("api_url", "api_key", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> str:
        """Trim connection settings."""
        return strip_or_empty(v)


class ImageChannel(BaseModel):
    """Image channel configuration.

    Only the fields needed to query a channel's remote model list are kept.

    Attributes:
        id: Channel identifier
        name: Display name
        type: Upstream API family
        base_url: Upstream base URL
        api_key: Comma-separated API keys; the first one is used
        enabled: Whether the channel is active
    """

    id: str
    name: str = ""
    type: Literal["openai-chat", "openai-compatible", "gemini", "sora", "custom"] = (
        "openai-compatible"
    )
    base_url: str = ""
    api_key: str = ""
    enabled: bool = True

    @field_validator("base_url", "api_key", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> str:
        """Trim connection settings."""
        return strip_or_empty(v)

    @property
    def supports_remote_models(self) -> bool:
        """Whether the channel exposes an OpenAI-style /v1/models listing."""
        return self.type in ("openai-chat", "openai-compatible")

    @property
    def primary_api_key(self) -> str:
        """First configured API key."""
        return self.api_key.split(",")[0].strip()


__all__ = ["ChatModel", "ImageChannel"]
