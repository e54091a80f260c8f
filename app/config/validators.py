"""Shared validators for Pydantic config models.

This module provides common normalization utilities used by the
site configuration models:
- Choice normalization against an allowed set
- Integer clamping
- Trimmed string normalization
"""

from collections.abc import Callable, Iterable
from typing import Any


def normalize_choice(
    value: Any,
    allowed: Iterable[str],
    transform: Callable[[str], str] | None = None,
) -> str | None:
    """Normalize a string and keep it only if it is an allowed choice.

    Args:
        value: Raw input value
        allowed: Accepted values (compared after transform)
        transform: Optional transform applied after stripping (e.g., str.upper)

    Returns:
        Normalized value, or None if the input is not a string or not allowed
    """
    if not isinstance(value, str):
        return None
    normalized = value.strip()
    if transform is not None:
        normalized = transform(normalized)
    return normalized if normalized in set(allowed) else None


def clamp_int(value: Any, min_val: int, max_val: int) -> int | None:
    """Floor a finite number and clamp it into a range.

    Args:
        value: Raw input value
        min_val: Minimum allowed value (inclusive)
        max_val: Maximum allowed value (inclusive)

    Returns:
        Clamped integer, or None for non-numeric or non-finite input
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return max(min_val, min(max_val, int(value // 1)))


def strip_or_empty(value: Any) -> str:
    """Return a stripped string, treating None as empty.

    Args:
        value: Raw input value

    Returns:
        Stripped string
    """
    if value is None:
        return ""
    return str(value).strip()


__all__ = [
    "normalize_choice",
    "clamp_int",
    "strip_or_empty",
]
