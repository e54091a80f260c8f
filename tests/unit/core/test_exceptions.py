"""Tests for app.core.exceptions module."""

import pytest

from app.core.exceptions import (
    PROMPT_BLOCKED_ERROR_PREFIX,
    RESPONSE_BODY_LIMIT,
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    ContentError,
    ContentExtractionError,
    ExternalAPIError,
    LLMError,
    PromptBlockedError,
    ResourceDisabledError,
    ResourceError,
    ResourceNotFoundError,
    ServiceError,
    SoraStudioError,
)


@pytest.mark.unit
def test_base_error():
    """Test base SoraStudioError exception."""
    error = SoraStudioError("Test error")
    assert str(error) == "Test error"
    assert error.context == {}
    assert isinstance(error, Exception)


@pytest.mark.unit
def test_with_context_and_to_dict():
    """Test context chaining and serialization."""
    error = SoraStudioError("Boom").with_context(model_id="m1")

    assert error.to_dict() == {
        "error_type": "SoraStudioError",
        "message": "Boom",
        "context": {"model_id": "m1"},
    }


@pytest.mark.unit
def test_config_errors():
    """Test configuration-related errors."""
    error = ConfigError("Config error", config_path="config/site.yaml")
    assert isinstance(error, SoraStudioError)
    assert error.context["config_path"] == "config/site.yaml"

    error = ConfigValidationError("Validation failed")
    assert isinstance(error, ConfigError)
    assert str(error) == "Validation failed"

    error = ConfigNotFoundError("site_config")
    assert isinstance(error, ConfigError)
    assert error.config_key == "site_config"
    assert "site_config" in str(error)


@pytest.mark.unit
def test_config_validation_error_structured():
    """Test the structured form of ConfigValidationError."""
    error = ConfigValidationError(field="filter_model_id", value="", reason="is required")

    assert str(error) == "Config validation failed for 'filter_model_id': is required"
    assert error.field == "filter_model_id"
    assert error.context["reason"] == "is required"


@pytest.mark.unit
def test_config_validation_error_default_message():
    """Test ConfigValidationError without message or field."""
    assert str(ConfigValidationError()) == "Configuration validation failed"


@pytest.mark.unit
def test_resource_errors():
    """Test not-found and disabled resource errors."""
    missing = ResourceNotFoundError("video_model", "veo")
    assert isinstance(missing, ResourceError)
    assert missing.resource == "video_model"
    assert missing.resource_id == "veo"
    assert "veo" in str(missing)

    disabled = ResourceDisabledError("video_channel", "flow")
    assert isinstance(disabled, ResourceError)
    assert str(disabled) == "video_channel flow is disabled"
    assert disabled.context == {"resource": "video_channel", "resource_id": "flow"}


@pytest.mark.unit
def test_external_api_error():
    """Test ExternalAPIError with service and status code."""
    error = ExternalAPIError(
        service="Flow",
        message="request failed",
        status_code=429,
        endpoint="https://flow.example.com/v1/chat/completions",
    )

    assert str(error) == "Flow API error: request failed"
    assert error.status_code == 429
    assert error.context["endpoint"].endswith("/chat/completions")
    assert isinstance(error, ServiceError)


@pytest.mark.unit
def test_external_api_error_truncates_body():
    """Test response bodies are cut to the body limit."""
    error = ExternalAPIError(service="Sora", message="bad", response_body="x" * 1000)

    assert len(error.response_body) == RESPONSE_BODY_LIMIT
    assert error.context["response_body"] == "x" * RESPONSE_BODY_LIMIT


@pytest.mark.unit
def test_llm_error():
    """Test LLMError carries the model."""
    error = LLMError("timeout", model="openai/gpt-4o-mini")

    assert str(error) == "timeout"
    assert error.context["service_name"] == "llm"
    assert error.context["model"] == "openai/gpt-4o-mini"


@pytest.mark.unit
def test_content_extraction_error():
    """Test ContentExtractionError keeps a bounded snippet."""
    error = ContentExtractionError(
        "No video URL found", content_type="video_url", snippet="y" * 900
    )

    assert isinstance(error, ContentError)
    assert error.context["content_type"] == "video_url"
    assert len(error.context["snippet"]) == RESPONSE_BODY_LIMIT


@pytest.mark.unit
def test_prompt_blocked_error():
    """Test PromptBlockedError message format."""
    error = PromptBlockedError(["forbidden", "sub:bad"])

    assert str(error) == f"{PROMPT_BLOCKED_ERROR_PREFIX}: forbidden, sub:bad"
    assert error.matched_rules == ["forbidden", "sub:bad"]
    assert error.context["content_type"] == "prompt"
    assert isinstance(error, ContentError)
