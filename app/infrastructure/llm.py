"""LLM client abstraction using LiteLLM.

This module provides a unified interface for chat completion calls using
LiteLLM as the backend. Prompt processing models are admin-configured
OpenAI-compatible endpoints, so every call may carry its own api_base
and api_key.
"""

from dataclasses import dataclass
from typing import Any

import litellm
from litellm import acompletion

from app.core.exceptions import LLMError
from app.core.logging import get_logger

# Drop unsupported params for each provider
litellm.drop_params = True


@dataclass
class LLMConfig:
    """LLM configuration for a specific call.

    Attributes:
        model: Model identifier in LiteLLM format (e.g., "openai/gpt-4o-mini")
        max_tokens: Maximum tokens in response
        temperature: Sampling temperature (0-1)
        timeout: Request timeout in seconds
        api_base: Optional endpoint base URL
        api_key: Optional bearer token
    """

    model: str
    max_tokens: int = 1000
    temperature: float = 0.7
    timeout: int = 60
    api_base: str | None = None
    api_key: str | None = None


@dataclass
class LLMResponse:
    """Standardized LLM response.

    Attributes:
        content: Generated text content ("" when the provider returned non-text content)
        model: Model used for generation
        usage: Token usage statistics
        raw_content: Message content exactly as returned (string, list of parts, or None)
        raw_response: Raw response from provider
    """

    content: str
    model: str
    usage: dict[str, int]
    raw_content: Any = None
    raw_response: Any = None


class LLMClient:
    """Unified LLM client using LiteLLM.

    Model naming convention:
        - OpenAI-compatible gateways: "openai/<upstream-model-id>" plus api_base
        - Anthropic: "anthropic/claude-3-5-haiku-20241022"

    Example:
        >>> client = LLMClient()
        >>> response = await client.complete(
        ...     config=LLMConfig(model="openai/gpt-4o-mini", api_base="https://gw/v1"),
        ...     messages=[{"role": "user", "content": "Hello!"}]
        ... )
        >>> print(response.content)
    """

    def __init__(self, logger: Any | None = None) -> None:
        """Initialize LLM client.

        Args:
            logger: Logger instance (defaults to the module logger)
        """
        self._logger = logger or get_logger(__name__)
        self._logger.info("LLMClient initialized")

    async def complete(
        self,
        config: LLMConfig,
        messages: list[dict[str, Any]],
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate completion from LLM.

        Args:
            config: LLM configuration
            messages: List of message dicts with 'role' and 'content'
            **kwargs: Additional parameters passed to the model

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If generation fails
        """
        request_kwargs: dict[str, Any] = dict(kwargs)
        if config.api_base:
            request_kwargs["api_base"] = config.api_base
        if config.api_key:
            request_kwargs["api_key"] = config.api_key

        try:
            self._logger.debug(
                "LLM request",
                model=config.model,
                max_tokens=config.max_tokens,
                message_count=len(messages),
            )

            response = await acompletion(
                model=config.model,
                messages=messages,
                max_tokens=config.max_tokens,
                temperature=config.temperature,
                timeout=config.timeout,
                **request_kwargs,
            )
        except Exception as e:
            self._logger.error(
                "LLM request failed",
                model=config.model,
                error=str(e),
                exc_info=True,
            )
            raise LLMError(f"LLM request failed: {e}", model=config.model) from e

        raw_content = response.choices[0].message.content if response.choices else None
        content = raw_content if isinstance(raw_content, str) else ""

        usage = {}
        if getattr(response, "usage", None):
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        self._logger.debug(
            "LLM response",
            model=response.model,
            content_length=len(content),
            usage=usage,
        )

        return LLMResponse(
            content=content,
            model=response.model or config.model,
            usage=usage,
            raw_content=raw_content,
            raw_response=response,
        )


__all__ = [
    "LLMClient",
    "LLMConfig",
    "LLMResponse",
    "LLMError",
]
