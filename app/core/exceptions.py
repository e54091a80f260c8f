"""Custom exceptions for SoraStudio.

This module defines all custom exceptions used throughout the application.
All exceptions inherit from SoraStudioError for easy catching.

Exception classes include context dictionaries for structured logging
and debugging. Use the `context` property to access additional details.
"""

from typing import Any

PROMPT_BLOCKED_ERROR_PREFIX = "Prompt blocked by safety policy"

# Upstream response bodies are cut to this length before they reach messages or logs
RESPONSE_BODY_LIMIT = 400


class SoraStudioError(Exception):
    """Base exception for all SoraStudio errors.

    All custom exceptions in the application should inherit from this class.
    Provides a context dictionary for structured error information.

    Attributes:
        context: Dictionary with additional error context

    Example:
        >>> try:
        ...     raise SoraStudioError("Something went wrong", context={"model_id": "123"})
        ... except SoraStudioError as e:
        ...     print(f"Error: {e}, Context: {e.context}")
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        """Initialize SoraStudioError.

        Args:
            message: Error message
            context: Optional dictionary with additional context
        """
        self.context = context or {}
        super().__init__(message)

    def with_context(self, **kwargs: Any) -> "SoraStudioError":
        """Add additional context to the exception.

        Args:
            **kwargs: Key-value pairs to add to context

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/serialization.

        Returns:
            Dictionary with error type, message, and context
        """
        return {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "context": self.context,
        }


# ============================================
# Configuration Errors
# ============================================


class ConfigError(SoraStudioError):
    """Base exception for configuration-related errors.

    Raised for missing base URLs, API keys or model ids as well as
    invalid site configuration files.
    """

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Error message
            config_path: Path to the config file/key
            context: Additional context
        """
        ctx = context or {}
        if config_path:
            ctx["config_path"] = config_path
        super().__init__(message, context=ctx)


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails.

    Supports two usage patterns:
    1. Simple: ConfigValidationError("error message")
    2. Structured: ConfigValidationError(field="name", value="x", reason="invalid")

    Attributes:
        field: Field that failed validation (optional)
        value: Invalid value (optional)
        reason: Validation failure reason (optional)
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        field: str | None = None,
        value: Any = None,
        reason: str | None = None,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error message (for simple usage)
            field: Field that failed validation
            value: Invalid value
            reason: Validation failure reason
            config_path: Path to config file
            context: Additional context
        """
        ctx = context or {}

        self.field = field
        self.value = value
        self.reason = reason

        if field and reason:
            ctx.update({"field": field, "reason": reason})
            if value is not None:
                ctx["value"] = str(value)
            final_message = f"Config validation failed for '{field}': {reason}"
        elif message:
            final_message = message
        else:
            final_message = "Configuration validation failed"

        super().__init__(final_message, config_path=config_path, context=ctx)


class ConfigNotFoundError(ConfigError):
    """Raised when a required configuration is not found.

    Attributes:
        config_key: The configuration key that was not found
    """

    def __init__(
        self,
        config_key: str,
        config_path: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigNotFoundError.

        Args:
            config_key: Configuration key that was not found
            config_path: Path to config file
            context: Additional context
        """
        ctx = context or {}
        ctx["config_key"] = config_key
        super().__init__(
            f"Configuration '{config_key}' not found",
            config_path=config_path,
            context=ctx,
        )
        self.config_key = config_key


# ============================================
# Resource Errors
# ============================================


class ResourceError(SoraStudioError):
    """Base exception for configured resources (channels, models)."""

    def __init__(
        self,
        message: str,
        resource: str,
        resource_id: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ResourceError.

        Args:
            message: Error message
            resource: Resource kind (e.g., "video_model", "video_channel")
            resource_id: Resource identifier
            context: Additional context
        """
        ctx = context or {}
        ctx.update({"resource": resource, "resource_id": resource_id})
        super().__init__(message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class ResourceNotFoundError(ResourceError):
    """Raised when a referenced channel or model does not exist."""

    def __init__(
        self,
        resource: str,
        resource_id: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ResourceNotFoundError.

        Args:
            resource: Resource kind
            resource_id: Identifier that was not found
            context: Additional context
        """
        super().__init__(
            f"{resource} with id={resource_id} not found",
            resource=resource,
            resource_id=resource_id,
            context=context,
        )


class ResourceDisabledError(ResourceError):
    """Raised when a referenced channel or model is disabled."""

    def __init__(
        self,
        resource: str,
        resource_id: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ResourceDisabledError.

        Args:
            resource: Resource kind
            resource_id: Identifier of the disabled resource
            context: Additional context
        """
        super().__init__(
            f"{resource} {resource_id} is disabled",
            resource=resource,
            resource_id=resource_id,
            context=context,
        )


# ============================================
# Service Errors
# ============================================


class ServiceError(SoraStudioError):
    """Base exception for service-related errors."""

    def __init__(
        self,
        message: str,
        service_name: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ServiceError.

        Args:
            message: Error message
            service_name: Name of the service
            context: Additional context
        """
        ctx = context or {}
        if service_name:
            ctx["service_name"] = service_name
        super().__init__(message, context=ctx)


class ExternalAPIError(ServiceError):
    """Raised when an upstream API call fails.

    Attributes:
        service: Name of the external service
        status_code: HTTP status code (if applicable)
        endpoint: API endpoint that was called
        response_body: Truncated response body
    """

    def __init__(
        self,
        service: str,
        message: str,
        status_code: int | None = None,
        endpoint: str | None = None,
        response_body: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ExternalAPIError.

        Args:
            service: Name of the external service
            message: Error message
            status_code: HTTP status code (optional)
            endpoint: API endpoint (optional)
            response_body: Response body for debugging (optional)
            context: Additional context
        """
        ctx = context or {}
        ctx["service"] = service
        if status_code is not None:
            ctx["status_code"] = status_code
        if endpoint:
            ctx["endpoint"] = endpoint

        truncated = response_body[:RESPONSE_BODY_LIMIT] if response_body else None
        if truncated:
            ctx["response_body"] = truncated

        self.service = service
        self.status_code = status_code
        self.endpoint = endpoint
        self.response_body = truncated

        super().__init__(f"{service} API error: {message}", service_name=service, context=ctx)


class LLMError(ServiceError):
    """LLM operation failed."""

    def __init__(
        self,
        message: str,
        model: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize LLMError.

        Args:
            message: Error message
            model: Model that failed
            context: Additional context
        """
        ctx = context or {}
        if model:
            ctx["model"] = model
        self.model = model
        super().__init__(message, service_name="llm", context=ctx)


# ============================================
# Content Errors
# ============================================


class ContentError(SoraStudioError):
    """Base exception for content-related errors."""

    def __init__(
        self,
        message: str,
        content_type: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ContentError.

        Args:
            message: Error message
            content_type: Type of content (e.g., "prompt", "video")
            context: Additional context
        """
        ctx = context or {}
        if content_type:
            ctx["content_type"] = content_type
        super().__init__(message, context=ctx)


class ContentExtractionError(ContentError):
    """Raised when no usable text or URL can be parsed from an upstream response.

    Attributes:
        snippet: Leading part of the unparseable content
    """

    def __init__(
        self,
        message: str,
        content_type: str | None = None,
        snippet: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ContentExtractionError.

        Args:
            message: Error message
            content_type: Expected content type (e.g., "video_url", "prompt")
            snippet: Start of the raw content for debugging
            context: Additional context
        """
        ctx = context or {}
        if snippet:
            ctx["snippet"] = snippet[:RESPONSE_BODY_LIMIT]
        self.snippet = snippet
        super().__init__(message, content_type=content_type, context=ctx)


class PromptBlockedError(ContentError):
    """Raised when a prompt matches the configured blocklist.

    The message always starts with PROMPT_BLOCKED_ERROR_PREFIX followed by
    the matched rule lines.

    Attributes:
        matched_rules: Raw rule lines that matched, in first-match order
    """

    def __init__(
        self,
        matched_rules: list[str],
        context: dict[str, Any] | None = None,
    ) -> None:
        """Initialize PromptBlockedError.

        Args:
            matched_rules: Raw rule lines that matched
            context: Additional context
        """
        ctx = context or {}
        ctx["matched_rules"] = list(matched_rules)
        self.matched_rules = list(matched_rules)
        super().__init__(
            f"{PROMPT_BLOCKED_ERROR_PREFIX}: {', '.join(matched_rules)}",
            content_type="prompt",
            context=ctx,
        )


__all__ = [
    "PROMPT_BLOCKED_ERROR_PREFIX",
    "RESPONSE_BODY_LIMIT",
    "SoraStudioError",
    "ConfigError",
    "ConfigValidationError",
    "ConfigNotFoundError",
    "ResourceError",
    "ResourceNotFoundError",
    "ResourceDisabledError",
    "ServiceError",
    "ExternalAPIError",
    "LLMError",
    "ContentError",
    "ContentExtractionError",
    "PromptBlockedError",
]
