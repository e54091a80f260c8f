"""Infrastructure layer components.

This module provides infrastructure components: the shared HTTP client
and the LiteLLM-backed chat completion client.
"""

from app.infrastructure.http_client import HTTPClient, create_streaming_client
from app.infrastructure.llm import LLMClient, LLMConfig, LLMResponse

__all__ = ["HTTPClient", "LLMClient", "LLMConfig", "LLMResponse", "create_streaming_client"]
