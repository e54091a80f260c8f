"""Prompt processing through chat-completion models.

Applies the configured LLM steps to a generation prompt:

1. Filter: rewrite the prompt into a safe version
2. Translate: translate the (filtered) prompt into English
3. Re-filter: sanitize the translated text again

Each step sends a system instruction and the current prompt to a chat
model from the site configuration and extracts the final prompt text from
the reply.
"""

import json
import re
from dataclasses import dataclass
from typing import Any

from app.config import ChatModel, PromptProcessingConfig, SiteConfig
from app.core.config_loader import SiteConfigService
from app.core.exceptions import ConfigError, ConfigValidationError, ContentExtractionError
from app.core.logging import get_logger
from app.infrastructure.llm import LLMClient, LLMConfig

# Keys checked, in order, when the model answers with a JSON object
PROMPT_RESULT_KEYS = ("prompt", "rewritten_prompt", "translated_prompt", "content", "result")

PROCESSING_TEMPERATURE = 0.2
PROCESSING_MAX_TOKENS = 2048

_CODE_FENCE = re.compile(r"^```(?:\w+)?\s*([\s\S]*?)\s*```$")
_CHAT_COMPLETIONS_SUFFIX = "/chat/completions"


@dataclass
class ProcessedPrompt:
    """Result of prompt processing.

    Attributes:
        original_prompt: Trimmed input prompt
        processed_prompt: Prompt to send upstream
        filtered_prompt: Output of the last filter step, if any ran
        translated_prompt: Output of the translate step, if it ran
    """

    original_prompt: str
    processed_prompt: str
    filtered_prompt: str | None = None
    translated_prompt: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict, omitting steps that did not run."""
        result: dict[str, Any] = {
            "original_prompt": self.original_prompt,
            "processed_prompt": self.processed_prompt,
        }
        if self.filtered_prompt is not None:
            result["filtered_prompt"] = self.filtered_prompt
        if self.translated_prompt is not None:
            result["translated_prompt"] = self.translated_prompt
        return result


def normalize_model_text(raw: Any) -> str:
    """Extract text from a chat message content value.

    Args:
        raw: A string, or a list of strings / parts carrying a ``text`` field

    Returns:
        Trimmed text ("" for any other shape)
    """
    if isinstance(raw, str):
        return raw.strip()

    if isinstance(raw, list):
        parts: list[str] = []
        for item in raw:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
        return "\n".join(part for part in parts if part).strip()

    return ""


def strip_code_fence(text: str) -> str:
    """Unwrap a reply that is entirely one fenced code block."""
    fenced = _CODE_FENCE.match(text)
    if fenced and fenced.group(1):
        return fenced.group(1).strip()
    return text


def extract_final_prompt(raw: str) -> str:
    """Extract the prompt text from a model reply.

    Tries a JSON object with a known prompt key first, then falls back to
    the raw text with one pair of surrounding quotes removed.

    Args:
        raw: Normalized reply text

    Returns:
        Prompt text, possibly empty
    """
    cleaned = strip_code_fence(raw.strip())
    if not cleaned:
        return ""

    try:
        parsed = json.loads(cleaned)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        for key in PROMPT_RESULT_KEYS:
            value = parsed.get(key)
            if isinstance(value, str) and value:
                return value.strip()

    return re.sub(r"""^['"]|['"]$""", "", cleaned).strip()


def validate_options(options: PromptProcessingConfig) -> None:
    """Fail fast on an incomplete processing configuration.

    Args:
        options: Prompt processing settings

    Raises:
        ConfigValidationError: If an enabled step lacks its model or instruction
    """
    has_filter = bool(options.filter_model_id and options.filter_prompt)

    if options.filter_enabled and not has_filter:
        raise ConfigValidationError(
            "Prompt filter is enabled but filter model or prompt is not configured",
            field="prompt_processing.filter_model_id",
        )

    if options.translate_enabled:
        if not (options.translate_model_id and options.translate_prompt):
            raise ConfigValidationError(
                "Prompt translation is enabled but translation model or prompt "
                "is not configured",
                field="prompt_processing.translate_model_id",
            )
        if not has_filter:
            raise ConfigValidationError(
                "Prompt translation requires filter model and filter prompt "
                "to sanitize translated content",
                field="prompt_processing.filter_model_id",
            )


def chat_model_api_base(api_url: str) -> str:
    """Turn a configured chat endpoint into an OpenAI-style API base."""
    base = api_url.rstrip("/")
    if base.endswith(_CHAT_COMPLETIONS_SUFFIX):
        base = base[: -len(_CHAT_COMPLETIONS_SUFFIX)]
    return base


class PromptProcessor:
    """Runs the filter/translate steps configured for generation prompts.

    Example:
        >>> processor = PromptProcessor(llm_client, site_config_service)
        >>> result = await processor.process("a cat on the moon")
        >>> print(result.processed_prompt)
    """

    def __init__(
        self,
        llm_client: LLMClient,
        site_config_service: SiteConfigService,
        logger: Any | None = None,
    ) -> None:
        """Initialize PromptProcessor.

        Args:
            llm_client: LLM client for chat completions
            site_config_service: Source of prompt settings and chat models
            logger: Logger instance (defaults to the module logger)
        """
        self.llm_client = llm_client
        self.site_config_service = site_config_service
        self._logger = logger or get_logger(__name__)

    async def process(self, prompt: str | None) -> ProcessedPrompt:
        """Process a prompt with the currently configured steps.

        Args:
            prompt: Original user prompt

        Returns:
            ProcessedPrompt; unchanged when the prompt is blank or no step is enabled

        Raises:
            ConfigValidationError: If the enabled steps are misconfigured
            ConfigError: If a chat model is missing or disabled
            LLMError: If a completion call fails
            ContentExtractionError: If a model returns no usable text under the
                "fail" policy
        """
        base_prompt = (prompt or "").strip()
        if not base_prompt:
            return ProcessedPrompt(original_prompt=base_prompt, processed_prompt=base_prompt)

        site = self.site_config_service.get()
        options = site.prompt_processing
        if not options.is_active:
            return ProcessedPrompt(original_prompt=base_prompt, processed_prompt=base_prompt)

        validate_options(options)

        current = base_prompt
        filtered: str | None = None
        translated: str | None = None

        if options.filter_enabled:
            current = await self._run_step(
                site, options, "filter", options.filter_model_id, options.filter_prompt, current
            )
            filtered = current

        if options.translate_enabled:
            translated = await self._run_step(
                site,
                options,
                "translate",
                options.translate_model_id,
                options.translate_prompt,
                current,
            )
            # Translated text is filtered again before generation
            current = await self._run_step(
                site, options, "refilter", options.filter_model_id, options.filter_prompt, translated
            )
            filtered = current

        self._logger.info(
            "Prompt processed",
            filtered=filtered is not None,
            translated=translated is not None,
            original_length=len(base_prompt),
            processed_length=len(current),
        )
        return ProcessedPrompt(
            original_prompt=base_prompt,
            processed_prompt=current,
            filtered_prompt=filtered,
            translated_prompt=translated,
        )

    async def _run_step(
        self,
        site: SiteConfig,
        options: PromptProcessingConfig,
        step: str,
        model_id: str,
        instruction: str,
        input_prompt: str,
    ) -> str:
        """Run one completion step and apply the empty-output policy."""
        model = self._get_chat_model(site, model_id)
        result = await self._complete(model, instruction, input_prompt)
        if result:
            return result

        if options.empty_output_policy == "passthrough":
            self._logger.warning(
                "Prompt processor returned empty content, keeping step input",
                step=step,
                model_id=model_id,
            )
            return input_prompt

        raise ContentExtractionError(
            "Prompt processor returned empty content",
            content_type="prompt",
            context={"step": step, "model_id": model_id},
        )

    def _get_chat_model(self, site: SiteConfig, model_id: str) -> ChatModel:
        model = site.get_chat_model(model_id)
        if model is None or not model.enabled:
            raise ConfigError(
                f"Prompt processing model is unavailable: {model_id}",
                context={"model_id": model_id},
            )
        return model

    async def _complete(self, model: ChatModel, instruction: str, input_prompt: str) -> str:
        config = LLMConfig(
            model=f"openai/{model.model_id}",
            max_tokens=min(PROCESSING_MAX_TOKENS, model.max_tokens),
            temperature=PROCESSING_TEMPERATURE,
            api_base=chat_model_api_base(model.api_url),
            api_key=model.api_key or None,
        )
        self._logger.debug("Running prompt completion", chat_model=model.id)
        response = await self.llm_client.complete(
            config=config,
            messages=[
                {"role": "system", "content": instruction},
                {"role": "user", "content": input_prompt},
            ],
        )
        return extract_final_prompt(normalize_model_text(response.raw_content))


__all__ = [
    "PROMPT_RESULT_KEYS",
    "ProcessedPrompt",
    "PromptProcessor",
    "normalize_model_text",
    "strip_code_fence",
    "extract_final_prompt",
    "validate_options",
    "chat_model_api_base",
]
