"""Prompt policy services: blocklist matching and LLM prompt processing."""

from app.services.prompt.blocklist import (
    PROMPT_BLOCKED_ERROR_PREFIX,
    assert_prompt_allowed,
    assert_prompts_allowed,
    build_prompt_blocked_message,
    find_blocked_words,
    is_prompt_blocked_error,
    parse_blocklist_words,
)
from app.services.prompt.processor import ProcessedPrompt, PromptProcessor

__all__ = [
    "PROMPT_BLOCKED_ERROR_PREFIX",
    "assert_prompt_allowed",
    "assert_prompts_allowed",
    "build_prompt_blocked_message",
    "find_blocked_words",
    "is_prompt_blocked_error",
    "parse_blocklist_words",
    "ProcessedPrompt",
    "PromptProcessor",
]
