"""Tests for exception to HTTP status mapping."""

import json

import pytest

from app.api.v1.errors import error_response, status_code_for
from app.core.exceptions import (
    ConfigValidationError,
    ExternalAPIError,
    LLMError,
    PromptBlockedError,
    ResourceDisabledError,
    ResourceNotFoundError,
    SoraStudioError,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (PromptBlockedError(["forbidden"]), 400),
        (ResourceNotFoundError("video_model", "x"), 404),
        (ResourceDisabledError("video_model", "x"), 400),
        (ConfigValidationError("bad value", field="pricing"), 500),
        (ExternalAPIError("Sora", "boom", status_code=429), 502),
        (LLMError("timeout"), 502),
        (SoraStudioError("unknown"), 500),
    ],
)
def test_status_code_for(exc, expected):
    assert status_code_for(exc) == expected


@pytest.mark.unit
def test_error_response_envelope():
    response = error_response(PromptBlockedError(["forbidden", "/x/i"]))

    assert response.status_code == 400
    body = json.loads(response.body)
    assert body["success"] is False
    assert body["error_type"] == "PromptBlockedError"
    assert "forbidden, /x/i" in body["error"]


@pytest.mark.unit
def test_error_response_status_override():
    response = error_response(ExternalAPIError("Sora backend", "gone"), status_code=410)
    assert response.status_code == 410
