"""Prompt blocklist matching.

Rules are configured as newline-delimited text. Each non-blank line
becomes one rule:

- ``word:<text>``        whole-word match, Unicode-aware, case-insensitive
- ``substr:<text>``      case-insensitive substring containment
- ``re:<pattern>`` / ``regex:<pattern>``  regular expression
- ``/<pattern>/<flags>`` regular expression literal
- anything else          whole-word match on the full line

Prefixes are case-insensitive. Lines whose regex does not compile are
dropped. A match is reported once per distinct line (compared after
trimming and lower-casing), in rule order.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any

from app.config.prompt_processing import PromptBlocklistConfig
from app.core.exceptions import PROMPT_BLOCKED_ERROR_PREFIX, PromptBlockedError
from app.core.logging import get_logger

WORD_PREFIX = "word:"
SUBSTRING_PREFIX = "substr:"
REGEX_PREFIXES = ("re:", "regex:")

_REGEX_LITERAL = re.compile(r"^/(.*)/([a-z]*)$", re.IGNORECASE)

# Literal flags that are understood; only i/m/s change matching
_SUPPORTED_FLAGS = "gimsuyd"
_FLAG_MAP = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}
_DEFAULT_FLAGS = "iu"


class RuleKind(str, Enum):
    """How a blocklist rule matches."""

    WORD = "word"
    SUBSTRING = "substring"
    REGEX = "regex"


@dataclass(frozen=True)
class BlocklistRule:
    """One compiled blocklist line.

    Attributes:
        kind: Matching mode
        raw: Trimmed source line, reported back on match
        value: Rule text without its prefix
        pattern: Compiled regex for word and regex rules, None for substrings
    """

    kind: RuleKind
    raw: str
    value: str
    pattern: re.Pattern[str] | None = None

    @property
    def identity(self) -> str:
        """Normalized source line used for de-duplication."""
        return _normalize(self.raw)

    def matches(self, prompt: str, normalized_prompt: str) -> bool:
        """Test the rule against a prompt.

        Args:
            prompt: Original prompt (word and regex rules)
            normalized_prompt: Trimmed, lower-cased prompt (substring rules)

        Returns:
            True if the rule matches
        """
        if self.pattern is None:
            return _normalize(self.value) in normalized_prompt
        return self.pattern.search(prompt) is not None


def _normalize(value: str) -> str:
    return value.strip().lower()


def _word_rule(raw: str, value: str) -> BlocklistRule:
    escaped = re.escape(value.strip())
    pattern = re.compile(rf"(?:^|\W){escaped}(?=$|\W)", re.IGNORECASE)
    return BlocklistRule(kind=RuleKind.WORD, raw=raw, value=value, pattern=pattern)


def _regex_rule(raw: str, pattern: str, flags: str | None = None) -> BlocklistRule | None:
    cleaned = pattern.strip()
    if not cleaned:
        return None

    requested = flags or _DEFAULT_FLAGS
    unique_flags = "".join(dict.fromkeys(f for f in requested if f in _SUPPORTED_FLAGS))

    re_flags = 0
    for flag in unique_flags:
        re_flags |= _FLAG_MAP.get(flag, 0)

    try:
        compiled = re.compile(cleaned, re_flags)
    except re.error:
        return None
    return BlocklistRule(kind=RuleKind.REGEX, raw=raw, value=cleaned, pattern=compiled)


def _regex_from_text(raw: str, text: str) -> BlocklistRule | None:
    literal = _REGEX_LITERAL.match(text)
    if literal:
        return _regex_rule(raw, literal.group(1), literal.group(2))
    return _regex_rule(raw, text)


def parse_rule(line: str) -> BlocklistRule | None:
    """Parse a single rule line.

    Args:
        line: Source line

    Returns:
        Compiled rule, or None for blank lines, empty prefixed rules and
        regexes that fail to compile
    """
    raw = line.strip()
    if not raw:
        return None

    lower = raw.lower()

    if lower.startswith(SUBSTRING_PREFIX):
        value = raw[len(SUBSTRING_PREFIX) :].strip()
        if not value:
            return None
        return BlocklistRule(kind=RuleKind.SUBSTRING, raw=raw, value=value)

    if lower.startswith(WORD_PREFIX):
        value = raw[len(WORD_PREFIX) :].strip()
        if not value:
            return None
        return _word_rule(raw, value)

    for prefix in REGEX_PREFIXES:
        if lower.startswith(prefix):
            rest = raw[len(prefix) :].strip()
            if not rest:
                return None
            return _regex_from_text(raw, rest)

    if _REGEX_LITERAL.match(raw):
        return _regex_from_text(raw, raw)

    return _word_rule(raw, raw)


def parse_blocklist_words(raw: str | None) -> list[str]:
    """Split rule text into trimmed, non-blank lines.

    Args:
        raw: Newline-delimited rule text

    Returns:
        List of rule lines in source order
    """
    return [line.strip() for line in (raw or "").splitlines() if line.strip()]


@lru_cache(maxsize=32)
def compile_rules(raw_words: str) -> tuple[BlocklistRule, ...]:
    """Compile rule text into rules.

    Results are cached per rule text, so repeated checks against an
    unchanged configuration do not recompile.

    Args:
        raw_words: Newline-delimited rule text

    Returns:
        Rules in source order; lines that fail to parse are skipped
    """
    rules = (parse_rule(line) for line in parse_blocklist_words(raw_words))
    return tuple(rule for rule in rules if rule is not None)


def find_blocked_words(prompt: str | None, raw_words: str | None) -> list[str]:
    """Find the rule lines that match a prompt.

    Args:
        prompt: Prompt text
        raw_words: Newline-delimited rule text

    Returns:
        Distinct matched raw rule lines in rule order
    """
    prompt = prompt or ""
    normalized_prompt = _normalize(prompt)
    if not normalized_prompt:
        return []

    matched: list[str] = []
    seen: set[str] = set()
    for rule in compile_rules(raw_words or ""):
        # Duplicate lines may still differ in case-sensitive regexes
        if rule.identity in seen or not rule.matches(prompt, normalized_prompt):
            continue
        seen.add(rule.identity)
        matched.append(rule.raw)
    return matched


def build_prompt_blocked_message(matched_words: list[str]) -> str:
    """Format the user-facing message for a blocked prompt."""
    return f"{PROMPT_BLOCKED_ERROR_PREFIX}: {', '.join(matched_words)}"


def assert_prompt_allowed(
    prompt: str | None,
    config: PromptBlocklistConfig,
    logger: Any | None = None,
) -> None:
    """Reject a prompt that matches the blocklist.

    Args:
        prompt: Prompt text
        config: Blocklist settings
        logger: Logger instance (defaults to the module logger)

    Raises:
        PromptBlockedError: If blocking is enabled and any rule matches
    """
    if not config.blocklist_enabled:
        return

    matched = find_blocked_words(prompt, config.blocklist_words)
    if matched:
        log = logger or get_logger(__name__)
        log.warning("Prompt blocked", matched_rules=matched)
        raise PromptBlockedError(matched)


def assert_prompts_allowed(
    prompts: Iterable[str | None],
    config: PromptBlocklistConfig,
    logger: Any | None = None,
) -> None:
    """Check several prompts as one newline-joined text.

    Args:
        prompts: Prompt texts; None and blank entries are skipped
        config: Blocklist settings
        logger: Logger instance (defaults to the module logger)

    Raises:
        PromptBlockedError: If blocking is enabled and any rule matches
    """
    combined = "\n".join(
        text for text in (str(item).strip() for item in prompts if item is not None) if text
    )
    if not combined:
        return
    assert_prompt_allowed(combined, config, logger=logger)


def is_prompt_blocked_error(error: BaseException | None) -> bool:
    """Whether an exception reports a blocked prompt."""
    if isinstance(error, PromptBlockedError):
        return True
    return isinstance(error, Exception) and str(error).startswith(PROMPT_BLOCKED_ERROR_PREFIX)


__all__ = [
    "PROMPT_BLOCKED_ERROR_PREFIX",
    "RuleKind",
    "BlocklistRule",
    "parse_rule",
    "parse_blocklist_words",
    "compile_rules",
    "find_blocked_words",
    "build_prompt_blocked_message",
    "assert_prompt_allowed",
    "assert_prompts_allowed",
    "is_prompt_blocked_error",
]
