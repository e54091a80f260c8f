"""Prompt policy configuration models.

Covers the blocklist and the LLM filter/translate steps applied to
generation prompts before they reach an upstream channel.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from app.config.validators import strip_or_empty

DEFAULT_FILTER_PROMPT = (
    "You are a safety prompt filter for video generation. Rewrite the user prompt "
    "into a safe version while preserving creative intent as much as possible. "
    "Return only the rewritten prompt text."
)
DEFAULT_TRANSLATE_PROMPT = (
    "Translate the user prompt into clear, natural English for video generation. "
    "Preserve details, style, and constraints. Return only the translated prompt text."
)


class PromptBlocklistConfig(BaseModel):
    """Blocklist settings.

    Attributes:
        blocklist_enabled: Whether matching prompts are rejected
        blocklist_words: Newline-delimited rule text
    """

    blocklist_enabled: bool = False
    blocklist_words: str = ""

    @field_validator("blocklist_words", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        """Treat a missing rule text as empty."""
        return "" if v is None else str(v)


class PromptProcessingConfig(PromptBlocklistConfig):
    """Prompt processing settings.

    Attributes:
        filter_enabled: Rewrite prompts through the filter model
        filter_model_id: Chat model id for the filter step
        filter_prompt: System instruction for the filter step
        translate_enabled: Translate prompts before re-filtering
        translate_model_id: Chat model id for the translate step
        translate_prompt: System instruction for the translate step
        empty_output_policy: What to do when a model returns no usable text
    """

    filter_enabled: bool = False
    filter_model_id: str = ""
    filter_prompt: str = DEFAULT_FILTER_PROMPT
    translate_enabled: bool = False
    translate_model_id: str = ""
    translate_prompt: str = DEFAULT_TRANSLATE_PROMPT
    empty_output_policy: Literal["fail", "passthrough"] = Field(
        default="fail",
        description="'fail' raises on empty model output, 'passthrough' keeps the step input",
    )

    @field_validator("filter_model_id", "translate_model_id", mode="before")
    @classmethod
    def strip_model_ids(cls, v: Any) -> str:
        """Trim model ids."""
        return strip_or_empty(v)

    @field_validator("filter_prompt", mode="before")
    @classmethod
    def default_filter_prompt(cls, v: Any) -> str:
        """Fall back to the built-in filter instruction."""
        return strip_or_empty(v) or DEFAULT_FILTER_PROMPT

    @field_validator("translate_prompt", mode="before")
    @classmethod
    def default_translate_prompt(cls, v: Any) -> str:
        """Fall back to the built-in translate instruction."""
        return strip_or_empty(v) or DEFAULT_TRANSLATE_PROMPT

    @property
    def is_active(self) -> bool:
        """Whether any LLM step is enabled."""
        return self.filter_enabled or self.translate_enabled


class PricingConfig(BaseModel):
    """Credit prices per video duration tier."""

    sora_video_10s: int = Field(default=100, ge=0)
    sora_video_15s: int = Field(default=150, ge=0)
    sora_video_25s: int = Field(default=250, ge=0)


__all__ = [
    "DEFAULT_FILTER_PROMPT",
    "DEFAULT_TRANSLATE_PROMPT",
    "PromptBlocklistConfig",
    "PromptProcessingConfig",
    "PricingConfig",
]
